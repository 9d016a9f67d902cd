import dataclasses

from gce_autoscaler.config.config_class import ConfigClass


@dataclasses.dataclass(frozen=True)
class GCEEnvironmentConfig(ConfigClass):
    """
    Where the worker pool lives and how far it may grow.

    target_workers is how many workers a single provision call tries to add. min_workers and max_workers bound the
    pool; the overlord uses them to decide whether calling provision or terminate can do anything at all, the
    autoscaler itself caps every resize at max_workers.
    """

    project_id: str = dataclasses.field(metadata=dict(help="GCE project that owns the instance group"))
    zone_name: str = dataclasses.field(metadata=dict(short="-z", help="GCE zone of the instance group"))
    managed_instance_group_name: str = dataclasses.field(
        metadata=dict(short="-mig", help="name of the managed instance group holding the workers")
    )
    target_workers: int = dataclasses.field(
        metadata=dict(short="-tw", help="number of workers to add on each provision call")
    )
    min_workers: int = dataclasses.field(metadata=dict(short="-minw", help="minimum number of workers in the pool"))
    max_workers: int = dataclasses.field(metadata=dict(short="-maxw", help="maximum number of workers in the pool"))

    def __post_init__(self) -> None:
        if not self.project_id:
            raise ValueError("project_id cannot be an empty string.")
        if not self.zone_name:
            raise ValueError("zone_name cannot be an empty string.")
        if not self.managed_instance_group_name:
            raise ValueError("managed_instance_group_name cannot be an empty string.")
        if self.target_workers < 0:
            raise ValueError("target_workers must be a non-negative integer.")
        if self.min_workers < 0:
            raise ValueError("min_workers must be a non-negative integer.")
        if self.min_workers > self.max_workers:
            raise ValueError("min_workers must not be greater than max_workers.")
