"""
Engagement scoring errors.

Recoverable errors affect a single client and are absorbed by the batch
engine; non-recoverable errors abort the pass and reach the caller.
"""

from .models import SignalKind


class EngagementError(Exception):
    """Base exception for engagement scoring operations."""

    def __init__(self, message: str, operation: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


class ClientNotFoundError(EngagementError):
    """A listed client no longer resolves when fetched individually."""

    def __init__(self, client_id: str):
        super().__init__(f"Client {client_id} not found", operation="get_client")
        self.client_id = client_id


class SignalFetchError(EngagementError):
    """One of the five signal record fetches failed for a client."""

    def __init__(self, client_id: str, signal: SignalKind, cause: BaseException):
        super().__init__(
            f"Failed to fetch {signal.value} records for client {client_id}: {cause}",
            operation=f"fetch_{signal.value}",
        )
        self.client_id = client_id
        self.signal = signal


class ClientListFetchError(EngagementError):
    """The client list could not be fetched; nothing can be scored."""

    def __init__(self, message: str):
        super().__init__(message, operation="list_clients", recoverable=False)


class BatchTimeoutError(EngagementError):
    """The batch pass exceeded its deadline."""

    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"Engagement batch exceeded {timeout_seconds}s deadline",
            operation="run_batch",
            recoverable=False,
        )
        self.timeout_seconds = timeout_seconds
