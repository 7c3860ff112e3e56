"""HTTP adapter for BoodiBox API operations."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..errors import TransportError, TransportTimeoutError
from ..models import ClientConfig

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 15.0


def safe_json(response: Any) -> Any:
    """Parse a response body as JSON, returning None when it is not JSON."""
    try:
        return response.json()
    except Exception:
        return None


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements ITransport protocol. Adds the Authorization and Accept headers
    to every request and maps httpx failures onto the package errors.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._base_url = httpx.URL(config.base_url)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": self._config.authorization,
                "Accept": "application/json",
            },
            timeout=DEFAULT_REQUEST_TIMEOUT,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    def url_for(self, path: str) -> str:
        """Resolve ``path`` against the base URL (absolute paths replace the base path)."""
        return str(self._base_url.join(path))

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[List[Tuple[str, Tuple[str, bytes, str]]]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")

        url = self.url_for(path)
        effective_timeout = timeout if timeout is not None else DEFAULT_REQUEST_TIMEOUT
        logger.debug(f"{method} {url} (timeout={effective_timeout}s)")

        try:
            response = await self._client.request(
                method,
                url,
                json=json,
                files=files,
                timeout=effective_timeout,
            )
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(
                f"Request timed out after {effective_timeout}s: {method} {url}",
                timeout=effective_timeout,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        logger.debug(f"{method} {url} -> {response.status_code}")
        return response
