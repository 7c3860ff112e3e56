"""
BoodiBox - client for uploading media and publishing posts.

Usage:
    from boodibox import BoodiBoxClient, ClientConfig, PathFile

    async with BoodiBoxClient(ClientConfig(api_key=token)) as client:
        # Upload, wait for processing, then post
        post = await client.submit_post_with_files(
            body="hello",
            files=[PathFile(Path("photo.jpg"))],
            reply_permission="PRIVATE",
        )

        # Step by step
        upload_ids = await client.upload_files([{"path": "photo.jpg"}])
        statuses = await client.poll_many_until_processed(upload_ids)
        post = await client.submit_post(body="hi", medias=[s.src for s in statuses.values()])

    # Configuration from BOODIBOX_* environment variables
    client = create_client()
"""
from .client import BoodiBoxClient, create_client
from .config import config_from_env, load_env_file
from .errors import (
    BoodiBoxError,
    ConfigurationError,
    DeadlineExceededError,
    PollTimeoutError,
    RemoteError,
    StatusFetchError,
    SubmitFailedError,
    TransportError,
    TransportTimeoutError,
    UploadFailedError,
    UploadRetriesExhaustedError,
    UploadTerminalStateError,
    ValidationError,
)
from .models import (
    BufferFile,
    ClientConfig,
    FileInput,
    HandleFile,
    PathFile,
    PollOptions,
    PostPayload,
    ReplyPermission,
    UploadStatus,
    UploadStatusResult,
)
from .validation import OMITTED

__version__ = "0.1.0"
__all__ = [
    # Main
    "BoodiBoxClient",
    "create_client",
    "config_from_env",
    "load_env_file",
    "OMITTED",
    # Models
    "ClientConfig",
    "FileInput",
    "PathFile",
    "BufferFile",
    "HandleFile",
    "PollOptions",
    "PostPayload",
    "ReplyPermission",
    "UploadStatus",
    "UploadStatusResult",
    # Errors
    "BoodiBoxError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "TransportTimeoutError",
    "RemoteError",
    "UploadFailedError",
    "UploadRetriesExhaustedError",
    "StatusFetchError",
    "SubmitFailedError",
    "PollTimeoutError",
    "DeadlineExceededError",
    "UploadTerminalStateError",
]
