import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from google.api_core.exceptions import GoogleAPIError
from google.api_core.extended_operation import ExtendedOperation
from google.cloud import compute_v1

from gce_autoscaler.autoscaler.exception import TransportFailure
from gce_autoscaler.autoscaler.service import InstanceGroupService, OperationHandle
from gce_autoscaler.autoscaler.types import InstanceID, InstanceRef, OperationResult, OperationState

DEFAULT_LIST_PAGE_SIZE = 500

# managed instances on their way out of the group are no longer counted as members
LEAVING_ACTIONS = ("DELETING", "ABANDONING")

logger = logging.getLogger(__name__)


def instance_url(zone: str, instance_id: InstanceID) -> str:
    return f"zones/{zone}/instances/{instance_id}"


def instance_name(url: str) -> InstanceID:
    """managed instances are reported by url, the instance name is the last path segment"""
    return url.rstrip("/").rsplit("/", 1)[-1]


class GCEOperationHandle(OperationHandle):
    def __init__(self, operation: ExtendedOperation, call: str):
        self._operation = operation
        self._call = call

    @property
    def name(self) -> str:
        return getattr(self._operation, "name", None) or self._call

    def poll(self) -> Optional[OperationResult]:
        try:
            done = self._operation.done()
        except GoogleAPIError as e:
            raise TransportFailure(f"{self._call} status", str(e)) from e

        if not done:
            return None

        if self._operation.error_code or self._operation.error_message:
            return OperationResult(
                OperationState.Failed, f"{self._operation.error_code}: {self._operation.error_message}"
            )

        return OperationResult(OperationState.Succeeded)


class GCEInstanceGroupService(InstanceGroupService):
    """Instance group calls against the Compute Engine API, authenticated with application default credentials."""

    def __init__(
        self,
        instance_group_managers_client: Optional[compute_v1.InstanceGroupManagersClient] = None,
        instances_client: Optional[compute_v1.InstancesClient] = None,
        list_page_size: int = DEFAULT_LIST_PAGE_SIZE,
    ):
        self._instance_group_managers = instance_group_managers_client or compute_v1.InstanceGroupManagersClient()
        self._instances = instances_client or compute_v1.InstancesClient()
        self._list_page_size = list_page_size

    def resize(self, project: str, zone: str, group_name: str, size: int) -> OperationHandle:
        try:
            operation = self._instance_group_managers.resize(
                project=project, zone=zone, instance_group_manager=group_name, size=size
            )
        except GoogleAPIError as e:
            raise TransportFailure("resize", str(e)) from e

        logger.debug(f"resize of {project}/{zone}/{group_name} to {size} submitted")
        return GCEOperationHandle(operation, "resize")

    def delete_instances(
        self, project: str, zone: str, group_name: str, instance_ids: Sequence[InstanceID]
    ) -> OperationHandle:
        request_resource = compute_v1.InstanceGroupManagersDeleteInstancesRequest(
            instances=[instance_url(zone, instance_id) for instance_id in instance_ids]
        )

        try:
            operation = self._instance_group_managers.delete_instances(
                project=project,
                zone=zone,
                instance_group_manager=group_name,
                instance_group_managers_delete_instances_request_resource=request_resource,
            )
        except GoogleAPIError as e:
            raise TransportFailure("delete_instances", str(e)) from e

        logger.debug(f"delete of {len(instance_ids)} instances from {project}/{zone}/{group_name} submitted")
        return GCEOperationHandle(operation, "delete_instances")

    def list_managed_instances(self, project: str, zone: str, group_name: str) -> List[InstanceID]:
        try:
            # the pager fetches further pages while being iterated, so errors can surface mid iteration
            return [
                instance_name(managed.instance)
                for managed in self._instance_group_managers.list_managed_instances(
                    project=project, zone=zone, instance_group_manager=group_name
                )
                if managed.current_action not in LEAVING_ACTIONS
            ]
        except GoogleAPIError as e:
            raise TransportFailure("list_managed_instances", str(e)) from e

    def list_instances(
        self, project: str, zone: str, filter_expression: str, page_token: Optional[str] = None
    ) -> Tuple[List[InstanceRef], Optional[str]]:
        request_fields: Dict[str, Any] = dict(
            project=project, zone=zone, filter=filter_expression, max_results=self._list_page_size
        )
        if page_token:
            request_fields["page_token"] = page_token

        try:
            pager = self._instances.list(request=compute_v1.ListInstancesRequest(**request_fields))
            response = next(iter(pager.pages))
        except GoogleAPIError as e:
            raise TransportFailure("list_instances", str(e)) from e

        instances = [InstanceRef(id=instance.name, private_ip=_private_ip(instance)) for instance in response.items]
        return instances, response.next_page_token or None


def _private_ip(instance: compute_v1.Instance) -> Optional[str]:
    if not instance.network_interfaces:
        return None

    return instance.network_interfaces[0].network_i_p or None
