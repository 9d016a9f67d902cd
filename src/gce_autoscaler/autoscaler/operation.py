import logging
import threading
import time
from typing import Optional

from gce_autoscaler.autoscaler.exception import OperationCancelled, OperationTimeout
from gce_autoscaler.autoscaler.service import OperationHandle
from gce_autoscaler.autoscaler.types import OperationResult, OperationState

logger = logging.getLogger(__name__)


def await_terminal(
    handle: OperationHandle,
    timeout_seconds: float,
    poll_interval_seconds: float,
    cancel_event: Optional[threading.Event] = None,
) -> OperationResult:
    """
    Block until the operation behind handle reaches a terminal state.

    Raises OperationTimeout when timeout_seconds elapse first and OperationCancelled as soon as cancel_event is set.
    A TransportFailure raised while polling propagates unchanged.
    """

    if cancel_event is None:
        cancel_event = threading.Event()

    deadline = time.monotonic() + timeout_seconds
    logger.debug(f"operation {handle.name} {OperationState.Pending.value}, waiting up to {timeout_seconds}s")

    while True:
        if cancel_event.is_set():
            raise OperationCancelled(handle.name)

        result = handle.poll()
        if result is not None:
            logger.debug(f"operation {handle.name} {result.state.value}")
            return result

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise OperationTimeout(handle.name, timeout_seconds)

        if cancel_event.wait(min(poll_interval_seconds, remaining)):
            raise OperationCancelled(handle.name)
