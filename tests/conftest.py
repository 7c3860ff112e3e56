"""Shared fakes for BoodiBox client tests."""
import asyncio
from collections import defaultdict, deque
from typing import Any, Dict, List

import httpx
import pytest

from boodibox.models import ClientConfig


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # Let concurrent pollers run
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """ITransport returning queued responses per (method, path)."""

    def __init__(self):
        self._routes: Dict[tuple, deque] = defaultdict(deque)
        self.calls: List[Dict[str, Any]] = []

    def add(self, method: str, path: str, *responses: Any) -> "FakeTransport":
        self._routes[(method, path)].extend(responses)
        return self

    def calls_to(self, method: str, path: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

    async def request(self, method, path, *, json=None, files=None, timeout=None):
        self.calls.append(
            {"method": method, "path": path, "json": json, "files": files, "timeout": timeout}
        )
        queue = self._routes[(method, path)]
        if not queue:
            raise AssertionError(f"unexpected request {method} {path}")
        item = queue[0] if len(queue) == 1 else queue.popleft()
        if callable(item) and not isinstance(item, httpx.Response):
            item = item()
        if isinstance(item, Exception):
            raise item
        return item


def json_response(status_code: int, payload: Any) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


@pytest.fixture
def config():
    return ClientConfig(
        api_key="test-key",
        base_url="https://boodibox.test",
        poll_interval=1.0,
        poll_timeout=30.0,
        max_retries=3,
        retry_backoff=0.3,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return FakeTransport()


ENV_KEYS = (
    "BOODIBOX_API_KEY",
    "API_KEY",
    "BOODIBOX_BASE_URL",
    "BASE_URL",
    "BOODIBOX_UPLOAD_PATH",
    "BOODIBOX_POSTS_PATH",
    "BOODIBOX_POLL_INTERVAL",
    "BOODIBOX_POLL_TIMEOUT",
    "BOODIBOX_MAX_RETRIES",
)


@pytest.fixture
def isolated_env(monkeypatch):
    """Unset client variables and restore them (even ones set by load_env_file) afterwards."""
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch
