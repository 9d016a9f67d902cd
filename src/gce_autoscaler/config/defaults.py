# Operation wait
DEFAULT_OPERATION_TIMEOUT_SECONDS = 300
DEFAULT_OPERATION_POLL_INTERVAL_SECONDS = 5

# Lookup
# providers cap the number of OR-ed predicates in a single list filter
DEFAULT_MAX_FILTER_VALUES = 100

# Web
DEFAULT_ADAPTER_WEB_HOST = "127.0.0.1"
DEFAULT_ADAPTER_WEB_PORT = 8080

# Logging
DEFAULT_LOGGING_PATHS = ("/dev/stdout",)
DEFAULT_LOGGING_LEVEL = "INFO"
