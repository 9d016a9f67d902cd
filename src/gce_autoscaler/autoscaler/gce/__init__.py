from gce_autoscaler.autoscaler.gce.service import GCEInstanceGroupService, GCEOperationHandle

__all__ = ["GCEInstanceGroupService", "GCEOperationHandle"]
