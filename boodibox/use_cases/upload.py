"""Use case for uploading files to the uploads endpoint, with bounded retry."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from ..errors import (
    DeadlineExceededError,
    TransportError,
    UploadFailedError,
    UploadRetriesExhaustedError,
    ValidationError,
)
from ..models import ClientConfig, ResolvedFile
from ..protocols import IFileReader, ITransport
from ..services.api_client import safe_json
from ..services.files import LocalFileReader, coerce_file_input, resolve_file
from ..utils.deadline import Deadline
from ..utils.events import UPLOAD_RETRY, UPLOADED, EventEmitter

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]

RETRYABLE_ERRORS = (UploadFailedError, TransportError)


def _describe_exception(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return f"{type(exc).__name__}: {repr(exc)}"


class UploadFilesUseCase:
    """
    Upload an ordered list of files in one multipart request.

    The whole request is retried up to ``config.max_retries`` times; attempt N
    waits N x ``config.retry_backoff`` seconds before the next one.
    """

    def __init__(
        self,
        transport: ITransport,
        config: ClientConfig,
        reader: Optional[IFileReader] = None,
        sleep: Sleep = asyncio.sleep,
        events: Optional[EventEmitter] = None,
    ):
        self._transport = transport
        self._config = config
        self._reader = reader or LocalFileReader()
        self._sleep = sleep
        self._events = events or EventEmitter()

    async def resolve(self, files: Sequence[Any]) -> List[ResolvedFile]:
        """Validate every item and load its bytes."""
        if isinstance(files, (str, bytes)) or not files:
            raise ValidationError("files must be a non-empty list")
        items = [coerce_file_input(item) for item in files]
        return [await resolve_file(item, self._reader) for item in items]

    async def send(self, resolved: Sequence[ResolvedFile], timeout: Optional[float] = None) -> List[str]:
        """Single upload attempt."""
        response = await self._transport.request(
            "POST",
            self._config.upload_path,
            files=[f.as_multipart() for f in resolved],
            timeout=self._config.upload_timeout if timeout is None else timeout,
        )

        if not response.is_success:
            body = safe_json(response)
            reason = body.get("reason") if isinstance(body, dict) else None
            raise UploadFailedError(
                f"Upload failed: {reason or response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        body = safe_json(response)
        if not isinstance(body, dict) or not body.get("success"):
            raise UploadFailedError(
                "upload endpoint returned success=false",
                status_code=response.status_code,
                body=body,
            )

        uploads = [str(upload_id) for upload_id in body.get("uploads") or []]
        if len(uploads) < len(resolved):
            raise UploadFailedError(
                f"upload endpoint returned {len(uploads)} ids for {len(resolved)} files",
                status_code=response.status_code,
                body=body,
            )
        return uploads

    async def execute(self, files: Sequence[Any], deadline: Optional[Deadline] = None) -> List[str]:
        """
        Upload ``files`` and return their ids in order.

        With a ``deadline``, every request timeout and backoff sleep is capped
        by the remaining budget, and no attempt starts once it has run out.
        """
        resolved = await self.resolve(files)

        attempt = 0
        last_error: Optional[Exception] = None
        while True:
            if deadline is not None and deadline.expired:
                raise DeadlineExceededError(
                    f"Timeout while uploading files after {attempt} attempt(s)"
                ) from last_error

            timeout = self._config.upload_timeout
            if deadline is not None:
                timeout = deadline.cap(timeout)
            try:
                uploads = await self.send(resolved, timeout=timeout)
                break
            except RETRYABLE_ERRORS as exc:
                attempt += 1
                last_error = exc
                if deadline is not None and deadline.expired:
                    raise DeadlineExceededError(
                        f"Timeout while uploading files: {_describe_exception(exc)}"
                    ) from exc
                if attempt > self._config.max_retries:
                    raise UploadRetriesExhaustedError(
                        f"Uploading files failed: {_describe_exception(exc)}",
                        attempts=attempt,
                        status_code=getattr(exc, "status_code", None),
                        body=getattr(exc, "body", None),
                    ) from exc

                delay = self._config.retry_backoff * attempt
                if deadline is not None:
                    delay = deadline.cap(delay)
                logger.warning(
                    f"Upload attempt {attempt} failed ({_describe_exception(exc)}), "
                    f"retrying in {delay:.2f}s"
                )
                await self._events.emit(UPLOAD_RETRY, attempt, exc, delay)
                await self._sleep(delay)

        logger.info(f"Uploaded {len(resolved)} file(s): {uploads}")
        await self._events.emit(UPLOADED, uploads)
        return uploads
