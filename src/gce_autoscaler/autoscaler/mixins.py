import abc
import threading
from typing import List, Optional, Sequence

from gce_autoscaler.autoscaler.types import InstanceID, ReconciliationResult
from gce_autoscaler.config.types.gce_environment import GCEEnvironmentConfig


class AutoScaler(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def get_min_num_workers(self) -> int:
        raise NotImplementedError()

    @abc.abstractmethod
    def get_max_num_workers(self) -> int:
        raise NotImplementedError()

    @abc.abstractmethod
    def get_env_config(self) -> GCEEnvironmentConfig:
        raise NotImplementedError()

    @abc.abstractmethod
    def provision(self, cancel_event: Optional[threading.Event] = None) -> ReconciliationResult:
        """grow the pool by up to target workers, return the instances that were actually added"""
        raise NotImplementedError()

    @abc.abstractmethod
    def terminate(self, ips: Sequence[str], cancel_event: Optional[threading.Event] = None) -> ReconciliationResult:
        """terminate the instances with the given private ips, return the instances that were actually removed"""
        raise NotImplementedError()

    @abc.abstractmethod
    def terminate_with_ids(
        self, ids: Sequence[InstanceID], cancel_event: Optional[threading.Event] = None
    ) -> ReconciliationResult:
        raise NotImplementedError()

    @abc.abstractmethod
    def ip_to_id_lookup(self, ips: Sequence[str]) -> List[InstanceID]:
        raise NotImplementedError()

    @abc.abstractmethod
    def id_to_ip_lookup(self, ids: Sequence[InstanceID]) -> List[str]:
        raise NotImplementedError()
