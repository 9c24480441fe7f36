"""Pacing policy for outbound calls to rate-limited third parties."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Pacer:
    """Enforce a minimum interval between consecutive calls.

    ``wait()`` is called before a call and ``mark()`` after it completes.
    The first ``wait()`` never sleeps. In a sequential pipeline this gives a
    fixed delay between the end of one call and the start of the next.
    """

    def __init__(
        self,
        interval: float,
        name: str = "pacer",
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self.name = name
        self._sleep = sleep
        self._clock = clock
        self._last: Optional[float] = None

    def wait(self) -> float:
        """Sleep until the interval since the last mark has elapsed.

        Returns the number of seconds slept.
        """
        if self._last is None or self.interval <= 0:
            return 0.0
        remaining = self.interval - (self._clock() - self._last)
        if remaining <= 0:
            return 0.0
        logger.debug("%s: waiting %.2fs", self.name, remaining)
        self._sleep(remaining)
        return remaining

    def mark(self) -> None:
        """Record that a paced call just finished."""
        self._last = self._clock()
