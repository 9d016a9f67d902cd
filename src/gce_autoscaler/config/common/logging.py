import dataclasses
from typing import Optional, Tuple

from gce_autoscaler.config import defaults
from gce_autoscaler.config.config_class import ConfigClass


@dataclasses.dataclass
class LoggingConfig(ConfigClass):
    paths: Tuple[str, ...] = dataclasses.field(
        default=defaults.DEFAULT_LOGGING_PATHS,
        metadata=dict(
            long="--logging-paths",
            short="-lp",
            help="specify where autoscaler logs should be logged to, it can accept multiple files",
        ),
    )
    level: str = dataclasses.field(
        default=defaults.DEFAULT_LOGGING_LEVEL,
        metadata=dict(
            long="--logging-level",
            short="-ll",
            choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
            help="specify the logging level",
        ),
    )
    config_file: Optional[str] = dataclasses.field(
        default=None,
        metadata=dict(
            long="--logging-config-file",
            short="-lc",
            help="use standard python .conf file to specify python logging file configuration format",
        ),
    )

    def __post_init__(self) -> None:
        if not self.paths and self.config_file is None:
            raise ValueError("logging paths cannot be empty when no logging config file is given.")
