"""
Managed instance group autoscaling for the overlord.

    overlord -> GCEAutoScalerAdapter (webhook) -> InstancePoolReconciler -> InstanceGroupService -> Compute Engine API

Components:
    - InstancePoolReconciler: provision / terminate by diffing group membership, id <-> ip lookups
    - InstanceLookup: chunked, paginated filter based instance lookup
    - await_terminal: bounded, cancellable wait on an asynchronous cloud operation
    - GCEInstanceGroupService: InstanceGroupService on top of google-cloud-compute
"""

from gce_autoscaler.autoscaler.lookup import InstanceLookup
from gce_autoscaler.autoscaler.mixins import AutoScaler
from gce_autoscaler.autoscaler.operation import await_terminal
from gce_autoscaler.autoscaler.reconciler import InstancePoolReconciler
from gce_autoscaler.autoscaler.service import InstanceGroupService, OperationHandle

__all__ = [
    "AutoScaler",
    "InstanceGroupService",
    "InstanceLookup",
    "InstancePoolReconciler",
    "OperationHandle",
    "await_terminal",
]
