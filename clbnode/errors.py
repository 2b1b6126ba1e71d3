from __future__ import annotations


# 422: load balancer is mid-transition (immutable). 413/429: rate limited.
RETRYABLE_STATUS_CODES = frozenset({413, 422, 429})


class ReconcileError(Exception):
    pass


class ConfigurationError(ReconcileError):
    pass


class AddressResolutionError(ReconcileError):
    pass


class RemoteError(ReconcileError):
    """A call to the load balancer API failed.

    ``status_code`` is None when no HTTP response was received at all.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"


class TransientRemoteError(RemoteError):
    pass


class TerminalRemoteError(RemoteError):
    pass


def remote_error(message: str, status_code: int | None) -> RemoteError:
    if status_code in RETRYABLE_STATUS_CODES:
        return TransientRemoteError(message, status_code)
    return TerminalRemoteError(message, status_code)


class InvariantViolation(ReconcileError):
    pass


class UnexpectedCreateResult(InvariantViolation):
    pass


class NodeListingError(InvariantViolation):
    pass
