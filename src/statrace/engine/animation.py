"""
Animation controller: the per-view time-index state machine.

Overview
- AnimationClock: frozen state {current_time_step, is_playing, interval_ms, bounds}.
- advance / pause / resume / toggle / with_interval / seek: pure clock transitions.
- Scheduler protocol with two implementations:
  - ManualScheduler: virtual milliseconds, advanced explicitly (tests, Streamlit reruns).
  - AsyncioScheduler: event-loop timers.
- AnimationController: binds a clock to a scheduler and notifies listeners whenever the
  current time step changes (tick or manual scrub).

Notes
- tick wraps past bounds_max back to bounds_min (the player loops, it never stops).
- pause, deactivate, and dispose cancel the pending tick immediately.
- set_speed restarts the pending tick with the full new interval (no carry-over).
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Protocol

from statrace.core.constants import DEFAULT_INTERVAL_MS

logger = logging.getLogger(__name__)

__all__ = [
    "AnimationClock",
    "advance",
    "pause",
    "resume",
    "toggle",
    "with_interval",
    "seek",
    "Handle",
    "Scheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "AnimationController",
]


@dataclass(frozen=True)
class AnimationClock:
    """
    Player state owned by exactly one AnimationController.

    Attributes:
        current_time_step (int): Time step currently displayed.
        is_playing (bool): Playing vs Paused.
        interval_ms (int): Milliseconds between ticks.
        bounds_min (int): First time step (wrap target).
        bounds_max (int): Last time step.
    """

    current_time_step: int
    is_playing: bool
    interval_ms: int
    bounds_min: int
    bounds_max: int

    @classmethod
    def initial(
        cls, bounds_min: int, bounds_max: int, interval_ms: int = DEFAULT_INTERVAL_MS
    ) -> AnimationClock:
        """Playing, positioned at bounds_min."""
        if bounds_min > bounds_max:
            raise ValueError(f"invalid bounds: {bounds_min} > {bounds_max}")
        if interval_ms < 1:
            raise ValueError("interval_ms must be >= 1")
        return cls(bounds_min, True, int(interval_ms), bounds_min, bounds_max)

    @property
    def state(self) -> str:
        return "playing" if self.is_playing else "paused"

    @property
    def position(self) -> int:
        """1-based index of the current time step within the bounds."""
        return self.current_time_step - self.bounds_min + 1

    @property
    def length(self) -> int:
        return self.bounds_max - self.bounds_min + 1


def advance(clock: AnimationClock) -> AnimationClock:
    """Tick: step forward by one, wrapping past bounds_max to bounds_min."""
    nxt = clock.current_time_step + 1
    if nxt > clock.bounds_max:
        nxt = clock.bounds_min
    return replace(clock, current_time_step=nxt)


def pause(clock: AnimationClock) -> AnimationClock:
    return replace(clock, is_playing=False)


def resume(clock: AnimationClock) -> AnimationClock:
    return replace(clock, is_playing=True)


def toggle(clock: AnimationClock) -> AnimationClock:
    return replace(clock, is_playing=not clock.is_playing)


def with_interval(clock: AnimationClock, interval_ms: int) -> AnimationClock:
    if interval_ms < 1:
        raise ValueError("interval_ms must be >= 1")
    return replace(clock, interval_ms=int(interval_ms))


def seek(clock: AnimationClock, time_step: int) -> AnimationClock:
    """Manual scrub; clamped to the bounds, play state untouched."""
    t = max(clock.bounds_min, min(clock.bounds_max, int(time_step)))
    return replace(clock, current_time_step=t)


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Timer source; `call_later` fires `callback` once after `delay_ms`."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Handle: ...


class _ManualHandle:
    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler over a virtual millisecond clock.

    Examples:
        >>> s = ManualScheduler()
        >>> fired = []
        >>> _ = s.call_later(100, lambda: fired.append(s.now_ms))
        >>> s.advance(99); fired
        []
        >>> s.advance(1); fired
        [100.0]
    """

    def __init__(self, now_ms: float = 0.0) -> None:
        self.now_ms = float(now_ms)
        self._queue: list[tuple[float, int, Callable[[], None], _ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Handle:
        handle = _ManualHandle()
        due = self.now_ms + max(float(delay_ms), 0.0)
        heapq.heappush(self._queue, (due, next(self._seq), callback, handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for *_, h in self._queue if not h.cancelled)

    def advance(self, ms: float) -> None:
        """Move time forward by `ms`, firing due callbacks in order (including ones they schedule)."""
        target = self.now_ms + max(float(ms), 0.0)
        while self._queue and self._queue[0][0] <= target:
            due, _, callback, handle = heapq.heappop(self._queue)
            self.now_ms = due
            if not handle.cancelled:
                callback()
        self.now_ms = target

    def advance_to(self, now_ms: float) -> None:
        self.advance(now_ms - self.now_ms)


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop (the running loop unless one is given)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Handle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(float(delay_ms), 0.0) / 1000.0, callback)


Listener = Callable[[AnimationClock], None]


class AnimationController:
    """
    Drives an AnimationClock from a Scheduler.

    Notes:
        - The controller is the only writer of its clock; read it via `clock`.
        - Listeners run on tick and on set_time_step; they should re-project and render.
        - An inactive controller (deactivate()) keeps its clock but holds no timer.
    """

    def __init__(
        self,
        clock: AnimationClock,
        scheduler: Scheduler,
        *,
        autostart: bool = True,
    ) -> None:
        self._clock = clock
        self._scheduler = scheduler
        self._handle: Handle | None = None
        self._listeners: list[Listener] = []
        self._active = True
        if autostart:
            self._schedule()

    @property
    def clock(self) -> AnimationClock:
        return self._clock

    @property
    def active(self) -> bool:
        return self._active

    @property
    def has_pending_tick(self) -> bool:
        return self._handle is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._clock)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._cancel()
        if self._active and self._clock.is_playing:
            self._handle = self._scheduler.call_later(self._clock.interval_ms, self._fire)

    def _fire(self) -> None:
        self._handle = None
        if not (self._active and self._clock.is_playing):
            return
        self.tick()
        self._schedule()

    def tick(self) -> None:
        """Advance one time step (wrapping) and notify listeners."""
        self._clock = advance(self._clock)
        logger.debug("tick -> %d", self._clock.current_time_step)
        self._notify()

    def pause(self) -> None:
        self._clock = pause(self._clock)
        self._cancel()
        logger.debug("paused at %d", self._clock.current_time_step)

    def resume(self) -> None:
        self._clock = resume(self._clock)
        self._schedule()
        logger.debug("resumed at %d", self._clock.current_time_step)

    def toggle(self) -> None:
        if self._clock.is_playing:
            self.pause()
        else:
            self.resume()

    def set_speed(self, interval_ms: int) -> None:
        """Change the interval; a pending tick restarts with the full new interval."""
        self._clock = with_interval(self._clock, interval_ms)
        if self._clock.is_playing:
            self._schedule()
        logger.debug("speed -> %dms", self._clock.interval_ms)

    def set_time_step(self, time_step: int) -> None:
        """Manual scrub; independent of play state and of the pending tick."""
        self._clock = seek(self._clock, time_step)
        self._notify()

    def activate(self) -> None:
        """Start ticking again if playing; a no-op for an already active, pending view."""
        if self._active and self._handle is not None:
            return
        self._active = True
        self._schedule()

    def deactivate(self) -> None:
        self._active = False
        self._cancel()

    def dispose(self) -> None:
        self.deactivate()
        self._listeners.clear()
