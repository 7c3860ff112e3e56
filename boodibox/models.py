"""
Models for the BoodiBox client.

Immutable dataclasses: configuration, file inputs, upload status and post payload.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union

from .errors import ConfigurationError


DEFAULT_BASE_URL = "https://boodibox.com"
DEFAULT_UPLOAD_PATH = "/api/v1/uploads"
DEFAULT_POSTS_PATH = "/api/v1/posts"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client configuration. ``api_key`` is required."""
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    upload_path: str = DEFAULT_UPLOAD_PATH
    posts_path: str = DEFAULT_POSTS_PATH
    poll_interval: float = 1.0
    poll_timeout: float = 30.0
    max_retries: int = 3
    retry_backoff: float = 0.3
    # Per-request timeouts (seconds)
    upload_timeout: float = 60.0
    status_timeout: float = 15.0
    post_timeout: float = 20.0
    # Overall budget of submit_post_with_files
    submit_timeout: float = 120.0

    def __post_init__(self):
        if not self.api_key or not str(self.api_key).strip():
            raise ConfigurationError("api_key is required to create BoodiBox client")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be >= 0")
        if self.poll_interval < 0 or self.poll_timeout < 0:
            raise ConfigurationError("poll interval/timeout must be >= 0")

    @property
    def authorization(self) -> str:
        """Authorization header value, bearer scheme added when missing."""
        key = str(self.api_key).strip()
        if key.startswith("Bearer "):
            return key
        return f"Bearer {key}"


@dataclass(frozen=True)
class PathFile:
    """File read from the local file system."""
    path: Path
    filename: Optional[str] = None
    content_type: Optional[str] = None


@dataclass(frozen=True)
class BufferFile:
    """In-memory file contents."""
    data: bytes = field(repr=False)
    filename: str = "file"
    content_type: Optional[str] = None


@dataclass(frozen=True)
class HandleFile:
    """Already opened binary file handle."""
    handle: BinaryIO = field(repr=False)
    filename: Optional[str] = None
    content_type: Optional[str] = None


FileInput = Union[PathFile, BufferFile, HandleFile]


@dataclass(frozen=True)
class ResolvedFile:
    """File contents ready to be sent as one multipart part."""
    filename: str
    content: bytes = field(repr=False)
    content_type: str

    def as_multipart(self):
        return ("files", (self.filename, self.content, self.content_type))


class UploadStatus(Enum):
    """Processing state of an upload."""
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"
    DELETED = "DELETED"
    ATTACHED = "ATTACHED"
    MISSING = "MISSING"  # status lookup answered 404
    UNKNOWN = "UNKNOWN"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @classmethod
    def parse(cls, value: Any) -> "UploadStatus":
        if value is None or value == "":
            return cls.PENDING
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


TERMINAL_STATUSES = frozenset({
    UploadStatus.PROCESSED,
    UploadStatus.DELETED,
    UploadStatus.ATTACHED,
    UploadStatus.MISSING,
})


@dataclass(frozen=True)
class UploadStatusResult:
    """Immutable answer of the upload status endpoint."""
    status: UploadStatus
    src: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_processed(self) -> bool:
        return self.status is UploadStatus.PROCESSED

    @classmethod
    def missing(cls) -> "UploadStatusResult":
        return cls(status=UploadStatus.MISSING, raw={"missing": True})

    @classmethod
    def from_payload(cls, payload: Any) -> "UploadStatusResult":
        if not isinstance(payload, dict):
            return cls(status=UploadStatus.UNKNOWN, raw={"payload": payload})
        return cls(
            status=UploadStatus.parse(payload.get("status")),
            src=payload.get("src") or None,
            raw=payload,
        )


class ReplyPermission(Enum):
    """Who may reply to a post."""
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


@dataclass(frozen=True)
class PollOptions:
    """Per-call overrides for polling; ``None`` falls back to the client config."""
    interval: Optional[float] = None
    timeout: Optional[float] = None


@dataclass(frozen=True)
class PostPayload:
    """Body of the posts endpoint."""
    body: str = ""
    medias: List[str] = field(default_factory=list)
    reply_permission: ReplyPermission = ReplyPermission.PUBLIC
    quote_post_id: Optional[str] = None
    user_ip: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        payload = {
            "body": self.body,
            "medias": list(self.medias),
            "replyPermission": self.reply_permission.value,
            "quotePostID": self.quote_post_id,
        }
        if self.user_ip:
            payload["userIP"] = self.user_ip
        return payload
