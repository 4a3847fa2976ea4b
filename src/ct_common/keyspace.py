"""Bounded-keyspace unique identifier allocation.

Draw random candidates first so identifiers stay non-sequential, then fall
back to a clock-derived candidate, then to an ascending scan of the whole
range. The scan guarantees termination and correctness as the space fills.

The allocator never stores anything: the caller supplies ``is_taken``, which
must query through the caller's open transaction.
"""

import logging
import random
import time
from collections.abc import Awaitable, Callable

from src.ct_common.errors import ExhaustedKeyspaceError

logger = logging.getLogger(__name__)

TakenProbe = Callable[[int], Awaitable[bool]]


class KeyspaceAllocator:
    """Randomized-retry → clock fallback → linear scan allocator over [low, high]."""

    def __init__(
        self,
        low: int,
        high: int,
        max_random_attempts: int = 100,
        rng: random.Random | None = None,
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        if low > high:
            raise ValueError(f"Empty keyspace: low={low} > high={high}")
        if max_random_attempts < 0:
            raise ValueError("max_random_attempts must be >= 0")
        self.low = low
        self.high = high
        self.max_random_attempts = max_random_attempts
        self._rng = rng or random.SystemRandom()
        self._clock_ms = clock_ms or (lambda: int(time.time() * 1000))

    @property
    def size(self) -> int:
        return self.high - self.low + 1

    async def allocate(self, is_taken: TakenProbe) -> int:
        for _ in range(self.max_random_attempts):
            candidate = self._rng.randint(self.low, self.high)
            if not await is_taken(candidate):
                return candidate

        fallback = self.low + self._clock_ms() % self.size
        if not await is_taken(fallback):
            logger.warning(
                "Random draws exhausted after %d attempts; clock fallback %d used",
                self.max_random_attempts,
                fallback,
            )
            return fallback

        # TODO: keep a free-list/bitmap if near-saturation becomes the steady state;
        # this scan restarts at the low end on every call.
        logger.warning("Keyspace [%d, %d] near saturation; scanning", self.low, self.high)
        for candidate in range(self.low, self.high + 1):
            if not await is_taken(candidate):
                return candidate

        logger.critical(
            "Keyspace [%d, %d] exhausted (%d values in use); operator action required",
            self.low,
            self.high,
            self.size,
        )
        raise ExhaustedKeyspaceError(self.low, self.high)
