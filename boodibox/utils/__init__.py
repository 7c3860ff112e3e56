"""Small helpers shared across the client."""
from .deadline import Deadline
from .events import EventEmitter

__all__ = ["Deadline", "EventEmitter"]
