import dataclasses
import enum
from typing import Any, Dict, FrozenSet, Iterable, Optional

InstanceID = str


class OperationState(enum.Enum):
    Initiated = "initiated"
    Pending = "pending"
    Succeeded = "succeeded"
    Failed = "failed"

    def is_terminal(self) -> bool:
        return self in (OperationState.Succeeded, OperationState.Failed)


class FailureKind(enum.Enum):
    TransportFailure = "transport_failure"
    OperationFailure = "operation_failure"
    Timeout = "timeout"
    Cancelled = "cancelled"


class ChangeExtent(enum.Enum):
    """how much of the instance group is known to have changed when a reconciliation fails"""

    NoChange = "no_change"
    Partial = "partial"
    Unknown = "unknown"


@dataclasses.dataclass(frozen=True)
class InstanceRef:
    id: InstanceID
    private_ip: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class OperationResult:
    state: OperationState
    error_detail: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == OperationState.Succeeded


@dataclasses.dataclass(frozen=True)
class ReconciliationFailure:
    kind: FailureKind
    detail: str
    changes: ChangeExtent

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "detail": self.detail, "changes": self.changes.value}


@dataclasses.dataclass(frozen=True)
class ReconciliationResult:
    """
    Outcome of a provision or terminate call.

    affected_ids holds the instances observed to have been added or removed. A result without failure is a success,
    even when affected_ids is empty. With a failure, affected_ids still lists whatever is known to have changed and
    failure.changes says whether that list is complete. missing_ids holds requested instances that were not members
    of the group, so deleting them again is reported rather than treated as an error.
    """

    affected_ids: FrozenSet[InstanceID] = frozenset()
    missing_ids: FrozenSet[InstanceID] = frozenset()
    failure: Optional[ReconciliationFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @staticmethod
    def success(affected_ids: Iterable[InstanceID] = (), missing_ids: Iterable[InstanceID] = ()):
        return ReconciliationResult(affected_ids=frozenset(affected_ids), missing_ids=frozenset(missing_ids))

    @staticmethod
    def failed(
        kind: FailureKind,
        detail: str,
        changes: ChangeExtent,
        affected_ids: Iterable[InstanceID] = (),
        missing_ids: Iterable[InstanceID] = (),
    ):
        return ReconciliationResult(
            affected_ids=frozenset(affected_ids),
            missing_ids=frozenset(missing_ids),
            failure=ReconciliationFailure(kind=kind, detail=detail, changes=changes),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "affected_ids": sorted(self.affected_ids),
            "missing_ids": sorted(self.missing_ids),
            "failure": self.failure.to_dict() if self.failure is not None else None,
        }
