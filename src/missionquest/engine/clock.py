"""Per-question countdown clocks.

A clock counts down whole seconds, calling ``on_tick(remaining)`` once per
second and ``on_expire()`` when it reaches zero. At most one countdown is
live per clock:

- ``arm()`` on an armed clock raises ClockStateError
- ``disarm()`` stops all future ticks and is idempotent
- ``rearm()`` is disarm followed by arm

Every arm starts a new generation. A tick scheduled by an earlier
generation is dropped when it fires, so a countdown that was disarmed can
never tick again.

Two implementations:
- ManualClock: the host calls ``tick()`` once per second (UI loops, tests)
- AsyncioClock: schedules ticks on an asyncio event loop
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from missionquest.errors import ClockStateError

logger = logging.getLogger(__name__)

TickCallback = Callable[[int], None]
ExpireCallback = Callable[[], None]


class Clock(ABC):
    """Abstract countdown clock.

    Subclasses decide how seconds elapse by implementing ``_schedule`` and
    ``_cancel``; the countdown bookkeeping lives here.
    """

    def __init__(self) -> None:
        self._armed = False
        self._remaining = 0
        self._generation = 0
        self._on_tick: Optional[TickCallback] = None
        self._on_expire: Optional[ExpireCallback] = None

    @property
    def armed(self) -> bool:
        """True while a countdown is running."""
        return self._armed

    @property
    def remaining(self) -> int:
        """Seconds left on the current (or last) countdown."""
        return self._remaining

    def arm(
        self,
        seconds: int,
        on_tick: Optional[TickCallback] = None,
        on_expire: Optional[ExpireCallback] = None,
    ) -> None:
        """Start a countdown of ``seconds``.

        Raises:
            ClockStateError: If the clock is already armed
            ValueError: If seconds is not positive
            RuntimeError: If the clock cannot schedule ticks (e.g. an
                AsyncioClock with no running loop). The clock stays disarmed.
        """
        if self._armed:
            raise ClockStateError(
                f"Clock already armed with {self._remaining}s remaining; disarm before arming"
            )
        if seconds <= 0:
            raise ValueError(f"Clock duration must be positive, got {seconds}")

        self._generation += 1
        self._remaining = seconds
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._armed = True
        try:
            self._schedule(self._generation)
        except Exception:
            self._armed = False
            raise
        logger.debug(f"Clock armed for {seconds}s (generation {self._generation})")

    def disarm(self) -> None:
        """Stop the countdown. Safe to call when not armed."""
        if not self._armed:
            return
        self._armed = False
        self._cancel()
        logger.debug(f"Clock disarmed with {self._remaining}s remaining")

    def rearm(
        self,
        seconds: int,
        on_tick: Optional[TickCallback] = None,
        on_expire: Optional[ExpireCallback] = None,
    ) -> None:
        """Disarm, then arm a fresh countdown."""
        self.disarm()
        self.arm(seconds, on_tick, on_expire)

    def _elapse(self, generation: int) -> None:
        """Account for one elapsed second of the given generation."""
        if not self._armed or generation != self._generation:
            return

        self._remaining -= 1
        if self._on_tick is not None:
            self._on_tick(self._remaining)

        # on_tick may have disarmed or rearmed the clock
        if not self._armed or generation != self._generation:
            return

        if self._remaining <= 0:
            self._armed = False
            self._cancel()
            logger.debug("Clock expired")
            if self._on_expire is not None:
                self._on_expire()
        else:
            self._schedule(generation)

    @abstractmethod
    def _schedule(self, generation: int) -> None:
        """Arrange for ``_elapse(generation)`` to run one second from now."""

    @abstractmethod
    def _cancel(self) -> None:
        """Cancel any pending ``_elapse`` call."""


class ManualClock(Clock):
    """Clock driven by explicit ``tick()`` calls.

    The host owns the timer (a UI frame loop, a test) and calls ``tick()``
    once per elapsed second.
    """

    def tick(self, seconds: int = 1) -> None:
        """Advance the countdown by ``seconds`` whole seconds.

        Stops early if the clock expires or is disarmed along the way.
        """
        for _ in range(seconds):
            if not self._armed:
                return
            self._elapse(self._generation)

    def _schedule(self, generation: int) -> None:
        pass

    def _cancel(self) -> None:
        pass


class AsyncioClock(Clock):
    """Clock that ticks on an asyncio event loop.

    Args:
        loop: Event loop to schedule on (default: the running loop at arm time)
        interval: Real seconds per tick; lowered in tests
    """

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        interval: float = 1.0,
    ) -> None:
        super().__init__()
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")
        self._loop = loop
        self._interval = interval
        self._handle: Optional[asyncio.TimerHandle] = None

    def _schedule(self, generation: int) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self._interval, self._elapse, generation)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
