"""Use cases for submitting posts, optionally with uploaded media."""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any, List, Optional, Sequence

from ..errors import DeadlineExceededError, SubmitFailedError, UploadTerminalStateError
from ..models import ClientConfig, PollOptions, PostPayload
from ..protocols import ITransport
from ..services.api_client import safe_json
from ..utils.deadline import Clock, Deadline
from ..utils.events import SUBMITTED, EventEmitter
from ..validation import OMITTED, resolve_reply_permission, validate_quote_post_id
from .poll import PollUploadUseCase
from .upload import UploadFilesUseCase

logger = logging.getLogger(__name__)


class SubmitPostUseCase:
    """Validate and POST a post payload."""

    def __init__(
        self,
        transport: ITransport,
        config: ClientConfig,
        events: Optional[EventEmitter] = None,
    ):
        self._transport = transport
        self._config = config
        self._events = events or EventEmitter()

    @staticmethod
    def build_payload(
        body: str = "",
        medias: Optional[Sequence[str]] = None,
        reply_permission: Any = OMITTED,
        quote_post_id: Optional[str] = None,
        user_ip: Optional[str] = None,
    ) -> PostPayload:
        return PostPayload(
            body=body or "",
            medias=list(medias or []),
            reply_permission=resolve_reply_permission(reply_permission),
            quote_post_id=validate_quote_post_id(quote_post_id),
            user_ip=user_ip or None,
        )

    async def send(self, payload: PostPayload) -> Any:
        response = await self._transport.request(
            "POST",
            self._config.posts_path,
            json=payload.to_json(),
            timeout=self._config.post_timeout,
        )
        if not response.is_success:
            raise SubmitFailedError(
                f"submit post failed: {response.status_code}",
                status_code=response.status_code,
                body=safe_json(response),
            )

        # 204 and other empty answers yield None
        post = safe_json(response)
        logger.info(f"Submitted post with {len(payload.medias)} media")
        await self._events.emit(SUBMITTED, post)
        return post

    async def execute(
        self,
        body: str = "",
        medias: Optional[Sequence[str]] = None,
        reply_permission: Any = OMITTED,
        quote_post_id: Optional[str] = None,
        user_ip: Optional[str] = None,
    ) -> Any:
        payload = self.build_payload(body, medias, reply_permission, quote_post_id, user_ip)
        return await self.send(payload)


class SubmitPostWithFilesUseCase:
    """
    Upload files, wait until each one is processed, then submit the post.

    Arguments are validated before any network I/O. One deadline covers the
    upload and the polls: upload attempts and backoff are capped by it, and
    every poll gets the smaller of its own timeout and what is left.
    """

    def __init__(
        self,
        upload: UploadFilesUseCase,
        poll: PollUploadUseCase,
        submit: SubmitPostUseCase,
        config: ClientConfig,
        clock: Clock = time.monotonic,
    ):
        self._upload = upload
        self._poll = poll
        self._submit = submit
        self._config = config
        self._clock = clock

    async def _wait_for_sources(
        self,
        upload_ids: Sequence[str],
        options: PollOptions,
        deadline: Deadline,
    ) -> List[str]:
        poll_timeout = self._config.poll_timeout if options.timeout is None else options.timeout
        sources: List[str] = []

        for upload_id in upload_ids:
            if deadline.expired:
                raise DeadlineExceededError(
                    "Timeout while waiting for files to be processed",
                    upload_id=upload_id,
                )

            status = await self._poll.execute(
                upload_id,
                interval=options.interval,
                timeout=deadline.cap(poll_timeout),
            )
            if not status.is_processed:
                raise UploadTerminalStateError(
                    f"Upload {upload_id} terminal state: {status.status.value}",
                    upload_id=upload_id,
                    status=status,
                )
            if not status.src:
                raise UploadTerminalStateError(
                    f"Upload {upload_id} processed but no src returned",
                    upload_id=upload_id,
                    status=status,
                )
            sources.append(status.src)

        return sources

    async def execute(
        self,
        body: str = "",
        files: Optional[Sequence[Any]] = None,
        reply_permission: Any = OMITTED,
        quote_post_id: Optional[str] = None,
        poll_options: Optional[PollOptions] = None,
        timeout: Optional[float] = None,
        user_ip: Optional[str] = None,
    ) -> Any:
        # Fail fast before any upload
        payload = self._submit.build_payload(
            body, [], reply_permission, quote_post_id, user_ip
        )
        if not files:
            return await self._submit.send(payload)

        budget = self._config.submit_timeout if timeout is None else timeout
        deadline = Deadline.after(budget, self._clock)

        upload_ids = await self._upload.execute(files, deadline=deadline)
        sources = await self._wait_for_sources(upload_ids, poll_options or PollOptions(), deadline)

        return await self._submit.send(replace(payload, medias=sources))
