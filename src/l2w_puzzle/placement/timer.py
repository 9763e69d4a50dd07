from __future__ import annotations

import logging
from typing import Callable, Optional

from ..scheduler import Scheduler, TimerHandle


logger = logging.getLogger(__name__)


def format_time(seconds: int) -> str:
    """``m:ss``"""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


class PartBTimer:
    """Phase B countdown ticked once per second on the scheduler."""

    TIMER_GROUP = "partB.timer"

    def __init__(
        self,
        scheduler: Scheduler,
        initial_seconds: int = 120,
        bonus_seconds: int = 0,
        on_time_up: Optional[Callable[[], None]] = None,
    ) -> None:
        self.scheduler = scheduler
        self.initial_seconds = initial_seconds
        self.bonus_seconds = bonus_seconds
        self.on_time_up = on_time_up
        self.remaining = initial_seconds + bonus_seconds
        self.paused = False
        self.timed_out = False
        self._handle: Optional[TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def formatted(self) -> str:
        return format_time(self.remaining)

    def start(self) -> None:
        """Reset to the full time and start counting down."""
        self.stop()
        self.remaining = self.initial_seconds + self.bonus_seconds
        self.paused = False
        self.timed_out = False
        self._handle = self.scheduler.call_every(1000, self._tick, self.TIMER_GROUP)

    def stop(self) -> None:
        self.scheduler.cancel_group(self.TIMER_GROUP)
        self._handle = None

    def pause(self) -> None:
        if self.running and not self.paused:
            self.paused = True
            self.stop()

    def resume(self) -> None:
        if self.paused and not self.timed_out:
            self.paused = False
            self._handle = self.scheduler.call_every(1000, self._tick, self.TIMER_GROUP)

    def add_bonus(self, seconds: int) -> None:
        self.remaining += seconds

    def _tick(self) -> None:
        if self.remaining <= 1:
            self.remaining = 0
            self.timed_out = True
            self.stop()
            logger.debug("part B timer expired")
            if self.on_time_up is not None:
                self.on_time_up()
            return
        self.remaining -= 1
