import dataclasses

from gce_autoscaler.config import defaults
from gce_autoscaler.config.config_class import ConfigClass


@dataclasses.dataclass
class WebConfig(ConfigClass):
    adapter_web_host: str = dataclasses.field(
        default=defaults.DEFAULT_ADAPTER_WEB_HOST, metadata=dict(help="host for the autoscaler webhook HTTP server")
    )
    adapter_web_port: int = dataclasses.field(
        default=defaults.DEFAULT_ADAPTER_WEB_PORT,
        metadata=dict(short="-p", help="port for the autoscaler webhook HTTP server"),
    )

    def __post_init__(self) -> None:
        if not 0 < self.adapter_web_port < 65536:
            raise ValueError("adapter_web_port must be between 1 and 65535.")
