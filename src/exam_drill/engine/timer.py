"""Proportional countdown for timed practice sessions."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from ..core.logging import component_logger
from .session import PracticeSession

__all__ = ["SessionTimer", "format_remaining"]

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


def format_remaining(seconds: Optional[int]) -> str:
    """Render ``seconds`` as ``M:SS``."""

    seconds = max(0, seconds or 0)
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


class SessionTimer:
    """Counts a session's time budget down one unit per tick.

    The timer never keeps its own copy of the remaining time; it decrements
    ``session.remaining_seconds`` so snapshots always show the live value.
    Reaching zero calls :meth:`PracticeSession.expire`. The session cancels
    the timer when it leaves ``testing`` for any reason.

    Two drivers are supported. Synchronous front ends call :meth:`poll`,
    which converts elapsed clock time into whole ticks. Async hosts await
    :meth:`run`, which sleeps one unit between ticks.
    """

    def __init__(
        self,
        session: PracticeSession,
        budget_seconds: int,
        *,
        unit: float = 1.0,
        clock: Clock = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.session = session
        self.budget_seconds = budget_seconds
        self.unit = unit
        self._clock = clock
        self._logger = component_logger("timer", logger)
        self._last_poll = clock()
        self.cancelled = False
        session.remaining_seconds = budget_seconds
        session.add_settle_listener(lambda _session: self.cancel())

    @property
    def remaining(self) -> int:
        return self.session.remaining_seconds or 0

    @property
    def active(self) -> bool:
        return not self.cancelled and self.session.is_testing

    def cancel(self) -> None:
        if not self.cancelled:
            self.cancelled = True
            self._logger.debug(
                "Timer cancelled", extra={"remaining": self.remaining}
            )

    def tick(self) -> bool:
        """Consume one unit. Returns ``False`` once the timer is inactive."""

        if not self.active:
            return False
        self.session.remaining_seconds = max(0, self.remaining - 1)
        if self.remaining == 0:
            self._logger.info(
                "Time budget exhausted",
                extra={"budget_seconds": self.budget_seconds},
            )
            self.session.expire()
            return False
        return True

    def poll(self) -> int:
        """Apply whole units elapsed since the last poll; return how many."""

        if self.active and self.remaining <= 0:
            # An empty budget expires without waiting for a whole unit.
            self.tick()
            return 0
        now = self._clock()
        units = int((now - self._last_poll) // self.unit)
        if units <= 0:
            return 0
        self._last_poll += units * self.unit
        before = self.remaining
        for _ in range(units):
            if not self.tick():
                break
        return before - self.remaining

    async def run(self, sleep: Sleep = asyncio.sleep) -> None:
        """Tick once per unit until the session settles or time runs out."""

        while self.active:
            if self.remaining > 0:
                await sleep(self.unit)
            self.tick()
