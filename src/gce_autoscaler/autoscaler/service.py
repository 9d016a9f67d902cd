import abc
from typing import List, Optional, Sequence, Tuple

from gce_autoscaler.autoscaler.types import InstanceID, InstanceRef, OperationResult


class OperationHandle(metaclass=abc.ABCMeta):
    """provider side token for an asynchronous administrative action"""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        raise NotImplementedError()

    @abc.abstractmethod
    def poll(self) -> Optional[OperationResult]:
        """refresh the operation, return its result once it reached a terminal state, None while still pending"""
        raise NotImplementedError()


class InstanceGroupService(metaclass=abc.ABCMeta):
    """
    Calls into the compute instance group API. Every method raises TransportFailure when the call itself fails, an
    error of the asynchronous operation behind a handle is only reported by OperationHandle.poll.
    """

    @abc.abstractmethod
    def resize(self, project: str, zone: str, group_name: str, size: int) -> OperationHandle:
        raise NotImplementedError()

    @abc.abstractmethod
    def delete_instances(
        self, project: str, zone: str, group_name: str, instance_ids: Sequence[InstanceID]
    ) -> OperationHandle:
        raise NotImplementedError()

    @abc.abstractmethod
    def list_managed_instances(self, project: str, zone: str, group_name: str) -> List[InstanceID]:
        raise NotImplementedError()

    @abc.abstractmethod
    def list_instances(
        self, project: str, zone: str, filter_expression: str, page_token: Optional[str] = None
    ) -> Tuple[List[InstanceRef], Optional[str]]:
        """list one page of instances matching filter_expression, return the instances and the next page token"""
        raise NotImplementedError()
