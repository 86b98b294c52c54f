"""
Quiz Simulator - Session Clock
Cooperative tick scheduler for the elapsed, per-question and feedback timers,
plus a wall-clock driver that turns real elapsed time into ticks.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class TimerKind(str, Enum):
    TOTAL = 'total'
    QUESTION = 'question'
    FEEDBACK = 'feedback'


@dataclass(eq=False)
class TimerHandle:
    kind: TimerKind
    duration: Optional[int]
    remaining: Optional[int]
    on_tick: Optional[Callable[[Optional[int]], None]]
    on_expire: Optional[Callable[[], None]]
    active: bool = True
    ticks: int = 0


class TickScheduler:
    """
    Delivers ticks to running timers, one timer per kind.
    All callbacks run synchronously on the caller's thread.
    """

    def __init__(self):
        self._timers: Dict[TimerKind, TimerHandle] = {}
        self._order: List[TimerHandle] = []
        self.tick_count = 0

    def start_timer(self, kind: TimerKind, duration_ticks: Optional[int],
                    on_tick: Optional[Callable[[Optional[int]], None]] = None,
                    on_expire: Optional[Callable[[], None]] = None) -> TimerHandle:
        """Start a timer; duration None runs until cancelled"""
        if duration_ticks is not None and duration_ticks <= 0:
            raise ValueError(f"Timer duration must be positive, got {duration_ticks}")

        previous = self._timers.get(kind)
        if previous is not None:
            self.cancel_timer(previous)

        handle = TimerHandle(
            kind=kind,
            duration=duration_ticks,
            remaining=duration_ticks,
            on_tick=on_tick,
            on_expire=on_expire
        )
        self._timers[kind] = handle
        self._order.append(handle)
        logger.debug(f"Started {kind.value} timer ({duration_ticks or 'unbounded'} ticks)")
        return handle

    def cancel_timer(self, handle: Optional[TimerHandle]) -> None:
        if handle is None or not handle.active:
            return
        handle.active = False
        self._release(handle)
        logger.debug(f"Cancelled {handle.kind.value} timer after {handle.ticks} ticks")

    def cancel_all(self) -> None:
        for handle in list(self._order):
            self.cancel_timer(handle)

    def is_running(self, kind: TimerKind) -> bool:
        return kind in self._timers

    def remaining(self, kind: TimerKind) -> Optional[int]:
        handle = self._timers.get(kind)
        return handle.remaining if handle else None

    def tick(self) -> None:
        """Deliver one tick to every running timer in start order"""
        self.tick_count += 1
        for handle in list(self._order):
            # an earlier callback in this tick may have cancelled it
            if not handle.active:
                continue
            handle.ticks += 1
            if handle.remaining is not None:
                handle.remaining -= 1
            if handle.on_tick:
                handle.on_tick(handle.remaining)
            if handle.active and handle.remaining is not None and handle.remaining <= 0:
                handle.active = False
                self._release(handle)
                logger.debug(f"{handle.kind.value} timer expired")
                if handle.on_expire:
                    handle.on_expire()

    def advance(self, ticks: int) -> None:
        for _ in range(ticks):
            self.tick()

    def _release(self, handle: TimerHandle) -> None:
        if self._timers.get(handle.kind) is handle:
            del self._timers[handle.kind]
        if handle in self._order:
            self._order.remove(handle)


class WallClockTicker:
    """Converts real elapsed time into scheduler ticks, carrying the fractional remainder"""

    def __init__(self, scheduler: TickScheduler, interval: float = 1.0,
                 time_source: Callable[[], float] = time.monotonic):
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")
        self.scheduler = scheduler
        self.interval = interval
        self._time_source = time_source
        self._last = time_source()

    def sync(self) -> int:
        """Fire every whole tick elapsed since the last sync; returns the tick count"""
        now = self._time_source()
        elapsed = now - self._last
        if elapsed < self.interval:
            return 0
        ticks = int(elapsed // self.interval)
        self._last += ticks * self.interval
        if ticks > 1:
            logger.debug(f"Catching up {ticks} ticks")
        self.scheduler.advance(ticks)
        return ticks

    def reset(self) -> None:
        self._last = self._time_source()
