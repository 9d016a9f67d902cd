import logging
import logging.config
import sys
from typing import Optional, Tuple

from gce_autoscaler.config.defaults import DEFAULT_LOGGING_LEVEL, DEFAULT_LOGGING_PATHS

LOG_FORMAT = "[%(levelname)s]%(asctime)s: %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S%z"


def setup_logger(
    log_paths: Tuple[str, ...] = DEFAULT_LOGGING_PATHS,
    logging_config_file: Optional[str] = None,
    logging_level: str = DEFAULT_LOGGING_LEVEL,
):
    if logging_config_file is not None:
        logging.config.fileConfig(logging_config_file, disable_existing_loggers=False)
        return

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for path in log_paths:
        root.addHandler(_create_handler(path, formatter))

    root.setLevel(logging_level)

    # the google client libraries are chatty at debug level
    logging.getLogger("google").setLevel(max(logging.getLevelName(logging_level), logging.INFO))


def _create_handler(path: str, formatter: logging.Formatter) -> logging.Handler:
    handler: logging.Handler
    if path == "/dev/stdout":
        handler = logging.StreamHandler(sys.stdout)
    elif path == "/dev/stderr":
        handler = logging.StreamHandler(sys.stderr)
    else:
        handler = logging.FileHandler(path, mode="a")

    handler.setFormatter(formatter)
    return handler
