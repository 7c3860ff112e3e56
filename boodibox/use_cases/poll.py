"""Use cases for upload status lookup and polling."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence
from urllib.parse import quote

from ..errors import PollTimeoutError, StatusFetchError, TransportTimeoutError
from ..models import ClientConfig, PollOptions, UploadStatusResult
from ..protocols import ITransport
from ..services.api_client import safe_json
from ..utils.deadline import Clock, Deadline
from ..utils.events import STATUS, EventEmitter

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class FetchUploadStatusUseCase:
    """GET the processing status of one upload. 404 maps to MISSING."""

    def __init__(self, transport: ITransport, config: ClientConfig):
        self._transport = transport
        self._config = config

    async def execute(self, upload_id: str, timeout: Optional[float] = None) -> UploadStatusResult:
        path = f"{self._config.upload_path.rstrip('/')}/{quote(str(upload_id), safe='')}"
        response = await self._transport.request(
            "GET",
            path,
            timeout=self._config.status_timeout if timeout is None else timeout,
        )

        if response.status_code == 404:
            return UploadStatusResult.missing()
        if not response.is_success:
            raise StatusFetchError(
                f"Failed to fetch upload status for {upload_id}: {response.status_code}",
                status_code=response.status_code,
                body=safe_json(response),
            )
        return UploadStatusResult.from_payload(safe_json(response))


class PollUploadUseCase:
    """
    Query an upload until it reaches a terminal state.

    Terminal states are PROCESSED, DELETED, ATTACHED and MISSING. Between
    queries the coroutine sleeps for the interval, never past the timeout, and
    no query starts once the timeout has run out. Status requests are capped
    by the remaining budget.
    """

    def __init__(
        self,
        fetch_status: FetchUploadStatusUseCase,
        config: ClientConfig,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
        events: Optional[EventEmitter] = None,
    ):
        self._fetch_status = fetch_status
        self._config = config
        self._sleep = sleep
        self._clock = clock
        self._events = events or EventEmitter()

    @staticmethod
    def _timeout_error(upload_id: str, status: UploadStatusResult) -> PollTimeoutError:
        return PollTimeoutError(
            f"polling timeout waiting for upload {upload_id} to be processed "
            f"(last status {status.status.value})",
            upload_id=upload_id,
            last_status=status,
        )

    async def execute(
        self,
        upload_id: str,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> UploadStatusResult:
        interval = self._config.poll_interval if interval is None else interval
        timeout = self._config.poll_timeout if timeout is None else timeout
        deadline = Deadline.after(timeout, self._clock)

        queries = 0
        status: Optional[UploadStatusResult] = None
        while True:
            if status is not None and deadline.expired:
                raise self._timeout_error(upload_id, status)

            # A zero budget still gets one full-length query
            request_timeout = deadline.cap(self._config.status_timeout) or self._config.status_timeout
            try:
                status = await self._fetch_status.execute(upload_id, timeout=request_timeout)
            except TransportTimeoutError as exc:
                if status is not None and deadline.expired:
                    raise self._timeout_error(upload_id, status) from exc
                raise
            queries += 1
            logger.debug(f"Upload {upload_id} status #{queries}: {status.status.value}")
            await self._events.emit(STATUS, upload_id, status)

            if status.is_terminal:
                return status
            await self._sleep(deadline.cap(interval))


class PollManyUseCase:
    """Poll several uploads concurrently and join on all of them."""

    def __init__(self, poll: PollUploadUseCase):
        self._poll = poll

    async def execute(
        self,
        upload_ids: Sequence[str],
        options: Optional[PollOptions] = None,
    ) -> Dict[str, UploadStatusResult]:
        if not upload_ids:
            return {}
        options = options or PollOptions()

        tasks = [
            asyncio.create_task(
                self._poll.execute(upload_id, interval=options.interval, timeout=options.timeout)
            )
            for upload_id in upload_ids
        ]
        try:
            results = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return dict(zip(upload_ids, results))
