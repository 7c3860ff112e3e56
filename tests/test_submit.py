"""Tests for submit and submit-with-files use cases."""
import httpx
import pytest
from conftest import json_response

from boodibox.errors import (
    DeadlineExceededError,
    PollTimeoutError,
    SubmitFailedError,
    TransportTimeoutError,
    UploadTerminalStateError,
    ValidationError,
)
from boodibox.models import BufferFile, PollOptions, UploadStatus
from boodibox.use_cases.poll import FetchUploadStatusUseCase, PollUploadUseCase
from boodibox.use_cases.submit import SubmitPostUseCase, SubmitPostWithFilesUseCase
from boodibox.use_cases.upload import UploadFilesUseCase

UPLOAD_PATH = "/api/v1/uploads"
POSTS_PATH = "/api/v1/posts"
QUOTE_ID = "a1b2c3d4e5f6g7h8i9j0k1l2"


def _build(transport, config, clock):
    upload = UploadFilesUseCase(transport, config, sleep=clock.sleep)
    poll = PollUploadUseCase(
        FetchUploadStatusUseCase(transport, config), config, sleep=clock.sleep, clock=clock
    )
    submit = SubmitPostUseCase(transport, config)
    return SubmitPostWithFilesUseCase(upload, poll, submit, config, clock=clock)


class TestSubmitPost:
    @pytest.mark.asyncio
    async def test_defaults_to_public(self, transport, config):
        transport.add("POST", POSTS_PATH, json_response(201, {"id": "p1"}))

        post = await SubmitPostUseCase(transport, config).execute(body="hello")

        assert post == {"id": "p1"}
        assert transport.calls[0]["json"] == {
            "body": "hello",
            "medias": [],
            "replyPermission": "PUBLIC",
            "quotePostID": None,
        }
        assert transport.calls[0]["timeout"] == config.post_timeout

    @pytest.mark.asyncio
    async def test_normalizes_arguments(self, transport, config):
        transport.add("POST", POSTS_PATH, json_response(200, {"id": "p2"}))

        await SubmitPostUseCase(transport, config).execute(
            body="hi",
            medias=["S1"],
            reply_permission="private",
            quote_post_id=QUOTE_ID.upper(),
            user_ip="203.0.113.7",
        )

        assert transport.calls[0]["json"] == {
            "body": "hi",
            "medias": ["S1"],
            "replyPermission": "PRIVATE",
            "quotePostID": QUOTE_ID,
            "userIP": "203.0.113.7",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply_permission", ["", None, False, "other"])
    async def test_invalid_reply_permission_makes_no_request(self, transport, config, reply_permission):
        with pytest.raises(ValidationError):
            await SubmitPostUseCase(transport, config).execute(
                body="hi", reply_permission=reply_permission
            )
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_failure_carries_body(self, transport, config):
        transport.add("POST", POSTS_PATH, json_response(422, {"reason": "body too long"}))

        with pytest.raises(SubmitFailedError) as exc_info:
            await SubmitPostUseCase(transport, config).execute(body="x" * 10)

        assert exc_info.value.status_code == 422
        assert exc_info.value.body == {"reason": "body too long"}


class TestSubmitPostWithFiles:
    @pytest.mark.asyncio
    async def test_end_to_end(self, transport, config, clock):
        created = {"id": "post-1", "medias": ["S1"], "extra": {"nested": True}}
        transport.add("POST", UPLOAD_PATH, json_response(200, {"success": True, "uploads": ["U1"]}))
        transport.add("GET", f"{UPLOAD_PATH}/U1", json_response(200, {"status": "PROCESSED", "src": "S1"}))
        transport.add("POST", POSTS_PATH, json_response(201, created))

        post = await _build(transport, config, clock).execute(
            body="with media", files=[BufferFile(b"img", filename="a.jpg")]
        )

        assert post == created
        assert len(transport.calls_to("GET", f"{UPLOAD_PATH}/U1")) == 1
        assert transport.calls_to("POST", POSTS_PATH)[0]["json"]["medias"] == ["S1"]

    @pytest.mark.asyncio
    async def test_sources_keep_upload_order(self, transport, config, clock):
        transport.add("POST", UPLOAD_PATH, json_response(200, {"success": True, "uploads": ["U1", "U2"]}))
        transport.add(
            "GET",
            f"{UPLOAD_PATH}/U1",
            json_response(200, {"status": "PENDING"}),
            json_response(200, {"status": "PROCESSED", "src": "S1"}),
        )
        transport.add("GET", f"{UPLOAD_PATH}/U2", json_response(200, {"status": "PROCESSED", "src": "S2"}))
        transport.add("POST", POSTS_PATH, json_response(201, {"id": "p"}))

        await _build(transport, config, clock).execute(
            files=[BufferFile(b"1"), BufferFile(b"2")],
            reply_permission="PRIVATE",
        )

        payload = transport.calls_to("POST", POSTS_PATH)[0]["json"]
        assert payload["medias"] == ["S1", "S2"]
        assert payload["replyPermission"] == "PRIVATE"

    @pytest.mark.asyncio
    async def test_no_files_submits_directly(self, transport, config, clock):
        transport.add("POST", POSTS_PATH, json_response(201, {"id": "p"}))

        await _build(transport, config, clock).execute(body="text only", files=[])

        assert [c["path"] for c in transport.calls] == [POSTS_PATH]
        assert transport.calls[0]["json"]["medias"] == []
        assert transport.calls[0]["json"]["replyPermission"] == "PUBLIC"

    @pytest.mark.asyncio
    async def test_no_files_still_rejects_empty_reply_permission(self, transport, config, clock):
        with pytest.raises(ValidationError):
            await _build(transport, config, clock).execute(body="x", reply_permission="")
        assert transport.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [{"reply_permission": None}, {"reply_permission": "nobody"}, {"quote_post_id": "1abc"}],
    )
    async def test_validates_before_upload(self, transport, config, clock, kwargs):
        with pytest.raises(ValidationError):
            await _build(transport, config, clock).execute(
                body="x", files=[BufferFile(b"img")], **kwargs
            )
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_terminal_non_processed_state(self, transport, config, clock):
        transport.add("POST", UPLOAD_PATH, json_response(200, {"success": True, "uploads": ["U1"]}))
        transport.add("GET", f"{UPLOAD_PATH}/U1", json_response(200, {"status": "DELETED"}))

        with pytest.raises(UploadTerminalStateError) as exc_info:
            await _build(transport, config, clock).execute(files=[BufferFile(b"img")])

        assert exc_info.value.upload_id == "U1"
        assert exc_info.value.status.status is UploadStatus.DELETED
        assert transport.calls_to("POST", POSTS_PATH) == []

    @pytest.mark.asyncio
    async def test_missing_upload_is_terminal(self, transport, config, clock):
        transport.add("POST", UPLOAD_PATH, json_response(200, {"success": True, "uploads": ["U1"]}))
        transport.add("GET", f"{UPLOAD_PATH}/U1", json_response(404, None))

        with pytest.raises(UploadTerminalStateError) as exc_info:
            await _build(transport, config, clock).execute(files=[BufferFile(b"img")])

        assert exc_info.value.status.status is UploadStatus.MISSING

    @pytest.mark.asyncio
    async def test_processed_without_src(self, transport, config, clock):
        transport.add("POST", UPLOAD_PATH, json_response(200, {"success": True, "uploads": ["U1"]}))
        transport.add("GET", f"{UPLOAD_PATH}/U1", json_response(200, {"status": "PROCESSED"}))

        with pytest.raises(UploadTerminalStateError, match="no src"):
            await _build(transport, config, clock).execute(files=[BufferFile(b"img")])

        assert transport.calls_to("POST", POSTS_PATH) == []

    @pytest.mark.asyncio
    async def test_poll_timeout_is_capped_by_deadline(self, transport, config, clock):
        transport.add("POST", UPLOAD_PATH, json_response(200, {"success": True, "uploads": ["U1"]}))
        transport.add("GET", f"{UPLOAD_PATH}/U1", json_response(200, {"status": "PENDING"}))

        with pytest.raises(PollTimeoutError):
            await _build(transport, config, clock).execute(
                files=[BufferFile(b"img")],
                poll_options=PollOptions(interval=1.0, timeout=60.0),
                timeout=2.5,
            )

        assert sum(clock.sleeps) == pytest.approx(2.5)

    @pytest.mark.asyncio
    async def test_deadline_exhausted_before_query(self, transport, config, clock):
        def slow_upload():
            clock.advance(10.0)
            return json_response(200, {"success": True, "uploads": ["U1"]})

        transport.add("POST", UPLOAD_PATH, slow_upload)

        with pytest.raises(DeadlineExceededError):
            await _build(transport, config, clock).execute(files=[BufferFile(b"img")], timeout=5.0)

        assert transport.calls_to("GET", f"{UPLOAD_PATH}/U1") == []

    @pytest.mark.asyncio
    async def test_upload_retries_stop_at_deadline(self, transport, config, clock):
        def timed_out_upload():
            clock.advance(60.0)
            return TransportTimeoutError("upload timed out", timeout=5.0)

        transport.add("POST", UPLOAD_PATH, timed_out_upload)
        started = clock()

        with pytest.raises(DeadlineExceededError) as exc_info:
            await _build(transport, config, clock).execute(files=[BufferFile(b"x")], timeout=5.0)

        upload_calls = transport.calls_to("POST", UPLOAD_PATH)
        assert len(upload_calls) == 1
        assert upload_calls[0]["timeout"] == 5.0
        assert clock.sleeps == []
        assert clock() - started == 60.0
        assert isinstance(exc_info.value.__cause__, TransportTimeoutError)
        assert transport.calls_to("POST", POSTS_PATH) == []


class TestSubmitPostResponses:
    @pytest.mark.asyncio
    async def test_empty_success_body_is_none(self, transport, config):
        transport.add("POST", POSTS_PATH, httpx.Response(204))

        assert await SubmitPostUseCase(transport, config).execute(body="hi") is None

    @pytest.mark.asyncio
    async def test_non_json_success_body_is_none(self, transport, config):
        transport.add("POST", POSTS_PATH, httpx.Response(200, text="created"))

        assert await SubmitPostUseCase(transport, config).execute(body="hi") is None
