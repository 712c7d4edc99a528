from __future__ import annotations

import time
from typing import Callable, Optional

Clock = Callable[[], float]


class Deadline:
    """Wall-clock budget polled cooperatively by the search.

    ``clock`` returns seconds; it defaults to ``time.monotonic`` and is
    injected by tests to make expiry deterministic.
    """

    def __init__(self, budget_ms: int, clock: Optional[Clock] = None):
        if budget_ms < 0:
            raise ValueError("time budget must be non-negative")
        self._clock = clock or time.monotonic
        self._expires_at = self._clock() + budget_ms / 1000.0

    def expired(self) -> bool:
        return self._clock() >= self._expires_at
