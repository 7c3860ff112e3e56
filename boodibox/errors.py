"""Exception hierarchy for the BoodiBox client."""
from __future__ import annotations

from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import UploadStatusResult


class BoodiBoxError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(BoodiBoxError):
    """Raised when the client cannot be configured (e.g. missing credential)."""


class ValidationError(BoodiBoxError, ValueError):
    """Raised for bad arguments, always before any network I/O."""


class TransportError(BoodiBoxError):
    """Raised when a request fails below the HTTP layer."""


class TransportTimeoutError(TransportError):
    """Raised when a request exceeded its timeout and was cancelled."""

    def __init__(self, message: str, timeout: Optional[float] = None):
        super().__init__(message)
        self.timeout = timeout


class RemoteError(BoodiBoxError):
    """Non-success answer from the service, with the parsed body when available."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UploadFailedError(RemoteError):
    """Upload endpoint answered with an error status or ``success: false``."""


class UploadRetriesExhaustedError(UploadFailedError):
    """Every upload attempt failed; ``__cause__`` holds the last error."""

    def __init__(
        self,
        message: str,
        attempts: int,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message, status_code=status_code, body=body)
        self.attempts = attempts


class StatusFetchError(RemoteError):
    """Upload status endpoint answered with an error status."""


class SubmitFailedError(RemoteError):
    """Posts endpoint answered with an error status."""


class PollTimeoutError(BoodiBoxError):
    """No terminal state was observed within the polling budget."""

    def __init__(
        self,
        message: str,
        upload_id: Optional[str] = None,
        last_status: Optional["UploadStatusResult"] = None,
    ):
        super().__init__(message)
        self.upload_id = upload_id
        self.last_status = last_status


class DeadlineExceededError(PollTimeoutError):
    """The overall submit deadline ran out while uploading or before an upload could be queried."""


class UploadTerminalStateError(BoodiBoxError):
    """Upload settled in a state that cannot be attached to a post."""

    def __init__(self, message: str, upload_id: str, status: "UploadStatusResult"):
        super().__init__(message)
        self.upload_id = upload_id
        self.status = status
