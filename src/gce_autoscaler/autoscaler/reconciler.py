import logging
import threading
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence, Set

from gce_autoscaler.autoscaler.exception import (
    OperationCancelled,
    OperationFailure,
    OperationTimeout,
    TransportFailure,
)
from gce_autoscaler.autoscaler.lookup import InstanceLookup
from gce_autoscaler.autoscaler.mixins import AutoScaler
from gce_autoscaler.autoscaler.operation import await_terminal
from gce_autoscaler.autoscaler.service import InstanceGroupService, OperationHandle
from gce_autoscaler.autoscaler.types import (
    ChangeExtent,
    FailureKind,
    InstanceID,
    OperationState,
    ReconciliationResult,
)
from gce_autoscaler.config import defaults
from gce_autoscaler.config.section.gce_autoscaler import GCEAutoScalerConfig
from gce_autoscaler.config.types.gce_environment import GCEEnvironmentConfig
from gce_autoscaler.utility.formatter import format_id_list

AUTOSCALER_TYPE = "gce"

logger = logging.getLogger(__name__)


class InstancePoolReconciler(AutoScaler):
    """
    Grows and shrinks a managed instance group and reports which instances actually changed.

    The instances reported by provision, and by a terminate whose delete did not fully succeed, come from diffing the
    group membership snapshotted before and after the operation, never from the request alone.

    Calls against the same group are not coordinated. A provision or terminate running concurrently on another thread
    or another process changes the membership between the two snapshots, and the difference then includes its
    instances too.
    """

    def __init__(
        self,
        env_config: GCEEnvironmentConfig,
        service: InstanceGroupService,
        operation_timeout_seconds: float = defaults.DEFAULT_OPERATION_TIMEOUT_SECONDS,
        operation_poll_interval_seconds: float = defaults.DEFAULT_OPERATION_POLL_INTERVAL_SECONDS,
        max_filter_values: int = defaults.DEFAULT_MAX_FILTER_VALUES,
    ):
        self._env_config = env_config
        self._service = service
        self._operation_timeout_seconds = operation_timeout_seconds
        self._operation_poll_interval_seconds = operation_poll_interval_seconds
        self._lookup = InstanceLookup(service, env_config.project_id, env_config.zone_name, max_filter_values)

    @staticmethod
    def from_config(config: GCEAutoScalerConfig, service: InstanceGroupService) -> "InstancePoolReconciler":
        return InstancePoolReconciler(
            env_config=config.env_config,
            service=service,
            operation_timeout_seconds=config.operation_timeout_seconds,
            operation_poll_interval_seconds=config.operation_poll_interval_seconds,
            max_filter_values=config.max_filter_values,
        )

    @staticmethod
    def from_dict(data: Dict[str, Any], service: InstanceGroupService, **kwargs) -> "InstancePoolReconciler":
        """build from the overlord's autoscaler descriptor, e.g. {"type": "gce", "envConfig": {...}}"""
        autoscaler_type = data.get("type", AUTOSCALER_TYPE)
        if autoscaler_type != AUTOSCALER_TYPE:
            raise ValueError(f"unsupported autoscaler type: {autoscaler_type}")
        if "envConfig" not in data:
            raise ValueError("autoscaler descriptor has no envConfig")

        return InstancePoolReconciler(GCEEnvironmentConfig.from_dict(data["envConfig"]), service, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": AUTOSCALER_TYPE, "envConfig": self._env_config.to_dict()}

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(env_config={self._env_config!r}, "
            f"min_num_workers={self.get_min_num_workers()}, max_num_workers={self.get_max_num_workers()})"
        )

    def get_min_num_workers(self) -> int:
        return self._env_config.min_workers

    def get_max_num_workers(self) -> int:
        return self._env_config.max_workers

    def get_env_config(self) -> GCEEnvironmentConfig:
        return self._env_config

    def provision(self, cancel_event: Optional[threading.Event] = None) -> ReconciliationResult:
        group = self._env_config.managed_instance_group_name

        try:
            before = self._list_managed_instances()
        except TransportFailure as e:
            logger.error(f"unable to provision instances in {group}: {e}")
            return ReconciliationResult.failed(FailureKind.TransportFailure, str(e), ChangeExtent.NoChange)

        desired_size = min(len(before) + self._env_config.target_workers, self._env_config.max_workers)
        if len(before) >= desired_size:
            logger.info(
                f"instance group {group} has {len(before)} instances, max_workers={self._env_config.max_workers}, "
                f"nothing to provision"
            )
            return ReconciliationResult.success()

        logger.info(f"resizing instance group {group} from {len(before)} to {desired_size} instances")
        try:
            self._run_operation(
                lambda: self._service.resize(
                    self._env_config.project_id, self._env_config.zone_name, group, desired_size
                ),
                cancel_event,
            )
        except TransportFailure as e:
            logger.error(f"unable to provision instances in {group}: {e}")
            return ReconciliationResult.failed(FailureKind.TransportFailure, str(e), ChangeExtent.Unknown)
        except OperationFailure as e:
            # the resize may have created some instances, they are not guessed from a later snapshot
            logger.error(f"resize of instance group {group} failed: {e.error_detail}")
            return ReconciliationResult.failed(FailureKind.OperationFailure, str(e), ChangeExtent.Unknown)
        except OperationTimeout as e:
            logger.error(f"unable to provision instances in {group}: {e}")
            return ReconciliationResult.failed(FailureKind.Timeout, str(e), ChangeExtent.Unknown)
        except OperationCancelled as e:
            logger.warning(f"provisioning instances in {group} cancelled: {e}")
            return ReconciliationResult.failed(FailureKind.Cancelled, str(e), ChangeExtent.Unknown)

        try:
            after = self._list_managed_instances()
        except TransportFailure as e:
            logger.error(f"instance group {group} was resized to {desired_size} but listing it failed: {e}")
            return ReconciliationResult.failed(
                FailureKind.TransportFailure, f"resize succeeded, listing instances failed: {e}", ChangeExtent.Unknown
            )

        added = after - before
        logger.info(f"provisioned {len(added)} instances in {group}: {format_id_list(added)}")
        return ReconciliationResult.success(added)

    def terminate(self, ips: Sequence[str], cancel_event: Optional[threading.Event] = None) -> ReconciliationResult:
        if not ips:
            return ReconciliationResult.success()

        try:
            ids = self.ip_to_id_lookup(ips)
        except TransportFailure as e:
            logger.error(f"unable to resolve ips {format_id_list(ips)} to instances: {e}")
            return ReconciliationResult.failed(FailureKind.TransportFailure, str(e), ChangeExtent.NoChange)

        if len(set(ids)) < len(set(ips)):
            logger.warning(f"only {len(set(ids))} of {len(set(ips))} ips resolved to instances")

        return self.terminate_with_ids(ids, cancel_event)

    def terminate_with_ids(
        self, ids: Sequence[InstanceID], cancel_event: Optional[threading.Event] = None
    ) -> ReconciliationResult:
        if not ids:
            return ReconciliationResult.success()

        group = self._env_config.managed_instance_group_name

        try:
            before = self._list_managed_instances()
        except TransportFailure as e:
            logger.error(f"unable to terminate instances in {group}: {e}")
            return ReconciliationResult.failed(FailureKind.TransportFailure, str(e), ChangeExtent.NoChange)

        requested = set(ids)
        missing = frozenset(requested - before)
        present = sorted(requested & before)

        if missing:
            logger.warning(f"instances {format_id_list(missing)} are not members of {group}, not deleting them")

        if not present:
            return ReconciliationResult.success(missing_ids=missing)

        logger.info(f"terminating instances {format_id_list(present)} in {group}")
        try:
            self._run_operation(
                lambda: self._service.delete_instances(
                    self._env_config.project_id, self._env_config.zone_name, group, present
                ),
                cancel_event,
            )
        except TransportFailure as e:
            return self._reconcile_removed(before, FailureKind.TransportFailure, str(e), missing)
        except OperationFailure as e:
            return self._reconcile_removed(before, FailureKind.OperationFailure, str(e), missing)
        except OperationTimeout as e:
            return self._reconcile_removed(before, FailureKind.Timeout, str(e), missing)
        except OperationCancelled as e:
            return self._reconcile_removed(before, FailureKind.Cancelled, str(e), missing)

        logger.info(f"terminated {len(present)} instances in {group}")
        return ReconciliationResult.success(present, missing)

    def ip_to_id_lookup(self, ips: Sequence[str]) -> List[InstanceID]:
        ids = self._lookup.ip_to_id(ips)
        logger.debug(f"performing lookup: {list(ips)} --> {ids}")
        return ids

    def id_to_ip_lookup(self, ids: Sequence[InstanceID]) -> List[str]:
        ips = self._lookup.id_to_ip(ids)
        logger.debug(f"performing lookup: {list(ids)} --> {ips}")
        return ips

    def _reconcile_removed(
        self, before: Set[InstanceID], kind: FailureKind, detail: str, missing: FrozenSet[InstanceID]
    ) -> ReconciliationResult:
        """a failed delete can still have removed some instances, only a fresh snapshot tells which"""
        group = self._env_config.managed_instance_group_name
        logger.error(f"deleting instances from {group} did not succeed: {detail}")

        try:
            after = self._list_managed_instances()
        except TransportFailure as e:
            logger.error(f"unable to list {group} after failed delete: {e}")
            return ReconciliationResult.failed(
                kind, f"{detail}; listing instances afterwards failed: {e}", ChangeExtent.Unknown, missing_ids=missing
            )

        removed = before - after
        if kind in (FailureKind.Timeout, FailureKind.Cancelled):
            # the operation may still be running
            changes = ChangeExtent.Unknown
        elif removed:
            changes = ChangeExtent.Partial
        else:
            changes = ChangeExtent.NoChange

        logger.warning(f"{len(removed)} instances removed from {group} despite the failure: {format_id_list(removed)}")
        return ReconciliationResult.failed(kind, detail, changes, affected_ids=removed, missing_ids=missing)

    def _list_managed_instances(self) -> Set[InstanceID]:
        return set(
            self._service.list_managed_instances(
                self._env_config.project_id,
                self._env_config.zone_name,
                self._env_config.managed_instance_group_name,
            )
        )

    def _run_operation(self, start: Callable[[], OperationHandle], cancel_event: Optional[threading.Event]) -> None:
        logger.debug(f"operation {OperationState.Initiated.value}")
        handle = start()
        result = await_terminal(
            handle, self._operation_timeout_seconds, self._operation_poll_interval_seconds, cancel_event
        )
        if not result.succeeded:
            raise OperationFailure(handle.name, result.error_detail)
