"""
Protocols (Interfaces) for Dependency Inversion.

The orchestration only talks to these small interfaces, so the HTTP transport
and the file system can be swapped in tests.
"""
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class IResponse(Protocol):
    """Minimal response surface used by the client (httpx.Response fits)."""

    status_code: int

    @property
    def is_success(self) -> bool:
        ...

    def json(self) -> Any:
        ...


@runtime_checkable
class ITransport(Protocol):
    """Interface for HTTP requests bounded by a timeout."""

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[List[Tuple[str, Tuple[str, bytes, str]]]] = None,
        timeout: Optional[float] = None,
    ) -> IResponse:
        """Send a request; raise TransportTimeoutError when ``timeout`` expires."""
        ...


@runtime_checkable
class IFileReader(Protocol):
    """Interface for reading local files."""

    async def read_bytes(self, path: Path) -> bytes:
        """Read the full contents of ``path``."""
        ...
