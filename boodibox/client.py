"""BoodiBox client - coordinates the upload -> poll -> submit workflow."""
from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from .config import config_from_env
from .models import ClientConfig, PollOptions, UploadStatusResult
from .protocols import IFileReader, ITransport
from .services.api_client import HTTPAPIClient
from .use_cases import (
    FetchUploadStatusUseCase,
    PollManyUseCase,
    PollUploadUseCase,
    SubmitPostUseCase,
    SubmitPostWithFilesUseCase,
    UploadFilesUseCase,
)
from .utils.deadline import Clock
from .utils.events import EventEmitter
from .validation import OMITTED


class BoodiBoxClient:
    """
    Client for the BoodiBox API.

    Configuration is immutable and no state is shared between calls, so one
    client may serve concurrent callers.

    Usage:
        async with BoodiBoxClient(ClientConfig(api_key="...")) as client:
            post = await client.submit_post_with_files(
                body="hello",
                files=[PathFile(Path("photo.jpg"))],
            )
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[ITransport] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        reader: Optional[IFileReader] = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
        clock: Clock = time.monotonic,
    ):
        """
        Initialize client with dependencies.

        Args:
            config: Client configuration
            transport: Pre-built transport; when given, ``async with`` is optional
            http_transport: httpx transport for the default HTTP adapter (tests, proxies)
            reader: File reader for path inputs
            sleep: Awaitable sleep used between polls and upload retries
            clock: Monotonic clock used for timeouts and deadlines
        """
        self._config = config
        self._http_transport = http_transport
        self._reader = reader
        self._sleep = sleep
        self._clock = clock
        self._events = EventEmitter()
        self._api_client: Optional[HTTPAPIClient] = None

        # Use cases (initialized once a transport exists)
        self._upload: Optional[UploadFilesUseCase] = None
        self._fetch_status: Optional[FetchUploadStatusUseCase] = None
        self._poll: Optional[PollUploadUseCase] = None
        self._poll_many: Optional[PollManyUseCase] = None
        self._submit: Optional[SubmitPostUseCase] = None
        self._submit_with_files: Optional[SubmitPostWithFilesUseCase] = None

        if transport is not None:
            self._build_use_cases(transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def events(self) -> EventEmitter:
        return self._events

    def _build_use_cases(self, transport: ITransport) -> None:
        self._upload = UploadFilesUseCase(
            transport, self._config, self._reader, self._sleep, self._events
        )
        self._fetch_status = FetchUploadStatusUseCase(transport, self._config)
        self._poll = PollUploadUseCase(
            self._fetch_status, self._config, self._sleep, self._clock, self._events
        )
        self._poll_many = PollManyUseCase(self._poll)
        self._submit = SubmitPostUseCase(transport, self._config, self._events)
        self._submit_with_files = SubmitPostWithFilesUseCase(
            self._upload, self._poll, self._submit, self._config, self._clock
        )

    async def __aenter__(self):
        """Open the HTTP adapter unless a transport was injected."""
        if self._upload is None:
            self._api_client = HTTPAPIClient(self._config, transport=self._http_transport)
            await self._api_client.__aenter__()
            self._build_use_cases(self._api_client)
        return self

    async def __aexit__(self, *args):
        """Cleanup resources."""
        if self._api_client:
            await self._api_client.__aexit__(*args)
            self._api_client = None
            self._upload = self._fetch_status = self._poll = None
            self._poll_many = self._submit = self._submit_with_files = None

    def _require(self, use_case):
        if use_case is None:
            raise RuntimeError("BoodiBoxClient not initialized. Use 'async with' context.")
        return use_case

    def on(self, event_name: str, callback: Callable) -> None:
        """Subscribe to a progress event (see ``boodibox.utils.events``)."""
        self._events.on(event_name, callback)

    async def upload_files(self, files: Sequence[Any]) -> List[str]:
        """Upload files in one request (retried) and return their upload ids."""
        return await self._require(self._upload).execute(files)

    async def get_upload_status(self, upload_id: str) -> UploadStatusResult:
        """Fetch the current processing status of one upload."""
        return await self._require(self._fetch_status).execute(upload_id)

    async def poll_until_processed(
        self,
        upload_id: str,
        options: Optional[PollOptions] = None,
    ) -> UploadStatusResult:
        """Poll one upload until it reaches a terminal state."""
        options = options or PollOptions()
        return await self._require(self._poll).execute(
            upload_id, interval=options.interval, timeout=options.timeout
        )

    async def poll_many_until_processed(
        self,
        upload_ids: Sequence[str],
        options: Optional[PollOptions] = None,
    ) -> Dict[str, UploadStatusResult]:
        """Poll several uploads concurrently."""
        return await self._require(self._poll_many).execute(upload_ids, options)

    async def submit_post(
        self,
        body: str = "",
        medias: Optional[Sequence[str]] = None,
        reply_permission: Any = OMITTED,
        quote_post_id: Optional[str] = None,
        user_ip: Optional[str] = None,
    ) -> Any:
        """Submit a post; ``reply_permission`` defaults to PUBLIC only when omitted."""
        return await self._require(self._submit).execute(
            body, medias, reply_permission, quote_post_id, user_ip
        )

    async def submit_post_with_files(
        self,
        body: str = "",
        files: Optional[Sequence[Any]] = None,
        reply_permission: Any = OMITTED,
        quote_post_id: Optional[str] = None,
        poll_options: Optional[PollOptions] = None,
        timeout: Optional[float] = None,
        user_ip: Optional[str] = None,
    ) -> Any:
        """Upload files, wait for processing and submit a post referencing them."""
        return await self._require(self._submit_with_files).execute(
            body,
            files,
            reply_permission,
            quote_post_id,
            poll_options,
            timeout,
            user_ip,
        )


def create_client(config: Optional[ClientConfig] = None, **options: Any) -> BoodiBoxClient:
    """
    Build a client from a config, or from the environment plus keyword overrides.

    Client-only keyword arguments (transport, http_transport, reader, sleep, clock)
    are passed to BoodiBoxClient; the rest override configuration fields.
    """
    client_kwargs = {
        key: options.pop(key)
        for key in ("transport", "http_transport", "reader", "sleep", "clock")
        if key in options
    }
    if config is None:
        config = config_from_env(**options)
    return BoodiBoxClient(config, **client_kwargs)
