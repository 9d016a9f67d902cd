import dataclasses

from gce_autoscaler.config import defaults
from gce_autoscaler.config.common.logging import LoggingConfig
from gce_autoscaler.config.common.web import WebConfig
from gce_autoscaler.config.config_class import ConfigClass
from gce_autoscaler.config.types.gce_environment import GCEEnvironmentConfig


@dataclasses.dataclass
class GCEAutoScalerConfig(ConfigClass):
    """Configuration for the GCE managed instance group autoscaler."""

    env_config: GCEEnvironmentConfig
    web_config: WebConfig = dataclasses.field(default_factory=WebConfig)
    logging_config: LoggingConfig = dataclasses.field(default_factory=LoggingConfig)

    operation_timeout_seconds: int = dataclasses.field(
        default=defaults.DEFAULT_OPERATION_TIMEOUT_SECONDS,
        metadata=dict(short="-ots", help="seconds to wait for a resize or delete operation to finish"),
    )
    operation_poll_interval_seconds: float = dataclasses.field(
        default=defaults.DEFAULT_OPERATION_POLL_INTERVAL_SECONDS,
        metadata=dict(short="-opi", help="seconds between two polls of a pending operation"),
    )
    max_filter_values: int = dataclasses.field(
        default=defaults.DEFAULT_MAX_FILTER_VALUES,
        metadata=dict(short="-mfv", help="maximum number of values OR-ed into one instance list filter"),
    )

    def __post_init__(self) -> None:
        if self.operation_timeout_seconds <= 0:
            raise ValueError("operation_timeout_seconds must be a positive integer.")
        if self.operation_poll_interval_seconds <= 0:
            raise ValueError("operation_poll_interval_seconds must be positive.")
        if self.max_filter_values <= 0:
            raise ValueError("max_filter_values must be a positive integer.")
