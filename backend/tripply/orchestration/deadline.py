"""Per-turn deadline shared by every await of a chat turn."""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")


class TurnDeadlineExceeded(Exception):
    """The turn ran past its deadline."""

    pass


class TurnDeadline:
    """Wall-clock budget for one turn, measured on a monotonic clock."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.seconds = seconds
        self._clock = clock
        self._started_at = clock()
        self._expires_at = self._started_at + seconds

    def remaining(self) -> float:
        """Seconds left (never negative)."""
        return max(0.0, self._expires_at - self._clock())

    def elapsed(self) -> float:
        return self._clock() - self._started_at

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await within the remaining budget.

        Raises:
            TurnDeadlineExceeded: If the budget is spent before or while awaiting
        """
        remaining = self.remaining()
        if remaining <= 0:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise TurnDeadlineExceeded(f"turn exceeded {self.seconds:g}s")
        try:
            async with asyncio.timeout(remaining):
                return await awaitable
        except TimeoutError as e:
            raise TurnDeadlineExceeded(f"turn exceeded {self.seconds:g}s") from e
