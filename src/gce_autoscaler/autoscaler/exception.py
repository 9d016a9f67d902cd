from typing import Optional


class AutoScalerException(Exception):
    """Base exception for errors raised while talking to the instance group service."""


class TransportFailure(AutoScalerException):
    """The cloud API call itself failed: network, authentication, quota or an API error response."""

    def __init__(self, call: str, detail: str):
        self.call = call
        self.detail = detail
        super().__init__(f"{call} failed: {detail}")


class OperationFailure(AutoScalerException):
    """The cloud accepted the request but the asynchronous operation finished with an error."""

    def __init__(self, operation_name: str, error_detail: Optional[str]):
        self.operation_name = operation_name
        self.error_detail = error_detail or "unknown error"
        super().__init__(f"operation {operation_name} failed: {self.error_detail}")


class OperationTimeout(AutoScalerException):
    def __init__(self, operation_name: str, timeout_seconds: float):
        self.operation_name = operation_name
        self.timeout_seconds = timeout_seconds
        super().__init__(f"operation {operation_name} did not finish within {timeout_seconds}s")


class OperationCancelled(AutoScalerException):
    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        super().__init__(f"wait for operation {operation_name} was cancelled")
