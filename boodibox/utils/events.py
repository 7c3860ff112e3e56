import inspect
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

# Events emitted by BoodiBoxClient
UPLOAD_RETRY = "upload_retry"      # (attempt, error, delay)
UPLOADED = "uploaded"              # (upload_ids)
STATUS = "status"                  # (upload_id, UploadStatusResult)
SUBMITTED = "submitted"            # (post)


class EventEmitter:
    """Fan-out of client progress events to sync or async listeners."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, callback: Callable):
        listeners = self._listeners.setdefault(event_name, [])
        if callback not in listeners:
            listeners.append(callback)

    def off(self, event_name: str, callback: Callable):
        listeners = self._listeners.get(event_name, [])
        if callback in listeners:
            listeners.remove(callback)

    async def emit(self, event_name: str, *args, **kwargs):
        """
        Call every listener of ``event_name`` in subscription order.

        A failing listener is logged and skipped so progress reporting never
        breaks an upload or a post.
        """
        # Snapshot: listeners may unsubscribe while being called
        for callback in tuple(self._listeners.get(event_name, ())):
            try:
                result = callback(*args, **kwargs)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.exception(f"Listener for {event_name!r} failed: {exc}")
