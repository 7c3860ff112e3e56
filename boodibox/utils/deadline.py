"""Explicit deadline value shared by the steps of a composite call."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

Clock = Callable[[], float]


@dataclass(frozen=True)
class Deadline:
    """Point in monotonic time after which a composite operation gives up."""
    expires_at: float
    clock: Clock = field(default=time.monotonic, compare=False, repr=False)

    @classmethod
    def after(cls, seconds: float, clock: Optional[Clock] = None) -> "Deadline":
        clock = clock or time.monotonic
        return cls(expires_at=clock() + max(seconds, 0.0), clock=clock)

    def remaining(self) -> float:
        return max(self.expires_at - self.clock(), 0.0)

    @property
    def expired(self) -> bool:
        return self.clock() >= self.expires_at

    def cap(self, seconds: Optional[float]) -> float:
        """Smaller of ``seconds`` and the remaining budget."""
        remaining = self.remaining()
        if seconds is None:
            return remaining
        return min(seconds, remaining)
