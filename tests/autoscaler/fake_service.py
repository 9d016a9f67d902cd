from typing import List, Optional, Sequence, Tuple, Union

from gce_autoscaler.autoscaler.service import InstanceGroupService, OperationHandle
from gce_autoscaler.autoscaler.types import InstanceID, InstanceRef, OperationResult, OperationState

SUCCEEDED = OperationResult(OperationState.Succeeded)
PENDING = None

Snapshot = Union[Sequence[InstanceID], Exception]
PollResult = Union[Optional[OperationResult], Exception]


def failed(detail: str) -> OperationResult:
    return OperationResult(OperationState.Failed, detail)


class FakeOperationHandle(OperationHandle):
    """returns the scripted poll results in order, then keeps returning the last one"""

    def __init__(self, name: str, poll_results: Sequence[PollResult]):
        self._name = name
        self._poll_results = list(poll_results)
        self.polls = 0

    @property
    def name(self) -> str:
        return self._name

    def poll(self) -> Optional[OperationResult]:
        self.polls += 1
        result = self._poll_results.pop(0) if len(self._poll_results) > 1 else self._poll_results[0]
        if isinstance(result, Exception):
            raise result
        return result


class FakeInstanceGroupService(InstanceGroupService):
    """
    In memory instance group service.

    list_managed_instances returns the scripted snapshots in order and then keeps returning the last one, an exception
    in place of a snapshot is raised. list_instances matches the inventory against the equality predicates of the
    filter and pages through the matches page_size at a time. Every call is recorded in calls.
    """

    def __init__(
        self,
        snapshots: Sequence[Snapshot] = ((),),
        inventory: Sequence[InstanceRef] = (),
        page_size: int = 100,
        poll_results: Sequence[PollResult] = (SUCCEEDED,),
        submit_error: Optional[Exception] = None,
        list_error: Optional[Exception] = None,
    ):
        self.snapshots = list(snapshots)
        self.inventory = list(inventory)
        self.page_size = page_size
        self.poll_results = list(poll_results)
        self.submit_error = submit_error
        self.list_error = list_error

        self.calls: List[Tuple] = []
        self.handles: List[FakeOperationHandle] = []

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def resize(self, project: str, zone: str, group_name: str, size: int) -> OperationHandle:
        self.calls.append(("resize", project, zone, group_name, size))
        return self._submit("resize")

    def delete_instances(
        self, project: str, zone: str, group_name: str, instance_ids: Sequence[InstanceID]
    ) -> OperationHandle:
        self.calls.append(("delete_instances", project, zone, group_name, tuple(instance_ids)))
        return self._submit("delete")

    def list_managed_instances(self, project: str, zone: str, group_name: str) -> List[InstanceID]:
        self.calls.append(("list_managed_instances", project, zone, group_name))
        snapshot = self.snapshots.pop(0) if len(self.snapshots) > 1 else self.snapshots[0]
        if isinstance(snapshot, Exception):
            raise snapshot
        return list(snapshot)

    def list_instances(
        self, project: str, zone: str, filter_expression: str, page_token: Optional[str] = None
    ) -> Tuple[List[InstanceRef], Optional[str]]:
        self.calls.append(("list_instances", project, zone, filter_expression, page_token))
        if self.list_error is not None:
            raise self.list_error

        matches = [instance for instance in self.inventory if _matches(instance, filter_expression)]
        start = int(page_token) if page_token else 0
        end = start + self.page_size
        return matches[start:end], str(end) if end < len(matches) else None

    def _submit(self, name: str) -> OperationHandle:
        if self.submit_error is not None:
            raise self.submit_error

        handle = FakeOperationHandle(f"operation-{name}-{len(self.handles)}", self.poll_results)
        self.handles.append(handle)
        return handle


def _matches(instance: InstanceRef, filter_expression: str) -> bool:
    if f'(name = "{instance.id}")' in filter_expression:
        return True

    ip_predicate = f'(networkInterfaces.networkIP = "{instance.private_ip}")'
    return instance.private_ip is not None and ip_predicate in filter_expression
