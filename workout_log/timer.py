"""Elapsed-time counter driving action and rest intervals."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from core import TICK_INTERVAL


class TimerMode(str, Enum):
    ACTION = "action"
    REST = "rest"


@dataclass(frozen=True)
class TimerState:
    elapsed_seconds: int
    running: bool
    mode: TimerMode


def default_clock():
    """Return the Kivy clock used to schedule ticks in the running app."""

    from kivy.clock import Clock

    return Clock


class IntervalTimer:
    """Counts whole seconds while running.

    ``clock`` must provide ``schedule_interval(callback, interval)`` returning
    an event with a ``cancel()`` method, which is the interface of
    :data:`kivy.clock.Clock`. Every tick adds exactly one second; there is no
    drift correction. ``on_tick`` is called with the new elapsed value after
    each tick.
    """

    def __init__(
        self,
        clock: Any = None,
        interval: float = TICK_INTERVAL,
        on_tick: Callable[[int], None] | None = None,
    ):
        self._clock = clock
        self.interval = interval
        self.on_tick = on_tick
        self.elapsed_seconds = 0
        self.running = False
        self.mode = TimerMode.ACTION
        self._event = None

    @property
    def clock(self):
        if self._clock is None:
            self._clock = default_clock()
        return self._clock

    def start(self) -> None:
        """Begin ticking. Does nothing when already running."""
        if self.running:
            return
        self.running = True
        self._event = self.clock.schedule_interval(self._tick, self.interval)

    def stop(self) -> None:
        """Freeze ``elapsed_seconds``. Does nothing when idle."""
        if not self.running:
            return
        # flip the flag before cancelling so a queued tick is ignored
        self.running = False
        if self._event is not None:
            self._event.cancel()
            self._event = None

    def reset(self) -> None:
        """Stop if running and clear the elapsed time."""
        self.stop()
        self.elapsed_seconds = 0

    def close(self) -> None:
        """Release the scheduled tick when the owner is torn down."""
        self.reset()

    def state(self) -> TimerState:
        return TimerState(self.elapsed_seconds, self.running, self.mode)

    def _tick(self, dt) -> None:
        if not self.running:
            return
        self.elapsed_seconds += 1
        if self.on_tick:
            self.on_tick(self.elapsed_seconds)
