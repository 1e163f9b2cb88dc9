"""Drives a TypingEngine from one-shot timers.

The driver holds at most one pending timer. Each timer performs one engine
tick, publishes the new frame and schedules the next tick. Starting,
reconfiguring and stopping always cancel the pending timer first.

Timers come from a schedule function with the signature of Textual's
Widget.set_timer: schedule(delay_seconds, callback) returning an object
with a stop() method. ManualScheduler provides the same thing in virtual
time for tests and for dumping timelines.
"""

import heapq
import itertools
import logging
from typing import Callable, Optional, Protocol

from .config import TextTypeConfig, get_speed_multiplier
from .engine import TypingEngine, TypingFrame

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def stop(self) -> None: ...


Schedule = Callable[[float, Callable[[], None]], TimerHandle]


class TypingDriver:
    """Runs an engine's tick chain on a scheduler.

    Usage:
        driver = TypingDriver(engine, widget.set_timer)
        driver.add_listener(lambda frame: widget.refresh())
        driver.start()
        ...
        driver.stop()
    """

    def __init__(
        self,
        engine: TypingEngine,
        schedule: Schedule,
        speed_multiplier: Optional[float] = None,
    ):
        """Initialize the driver.

        Args:
            engine: The state machine to drive
            schedule: Creates one-shot timers (delay in seconds)
            speed_multiplier: Speed up (>1) or slow down (<1) every delay.
                Defaults to the TEXT_TYPE_SPEED environment variable.
        """
        self._engine = engine
        self._schedule = schedule
        self._speed = speed_multiplier if speed_multiplier is not None else get_speed_multiplier()
        self._pending: Optional[TimerHandle] = None
        # Bumped on every start/stop so a late callback from an old
        # session can never touch the engine
        self._generation = 0
        self._listeners: list[Callable[[TypingFrame], None]] = []

    @property
    def engine(self) -> TypingEngine:
        return self._engine

    @property
    def is_running(self) -> bool:
        """True while a tick is pending."""
        return self._pending is not None

    def add_listener(self, listener: Callable[[TypingFrame], None]) -> None:
        """Call listener with a fresh frame after every tick and reset."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[TypingFrame], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self) -> None:
        frame = self._engine.snapshot()
        for listener in list(self._listeners):
            listener(frame)

    def start(self) -> None:
        """Start a fresh session with the engine's current config."""
        self._cancel()
        self._engine.reset()
        self._publish()
        self._schedule_tick(self._engine.start_delay())
        logger.debug("Typing started")

    def reconfigure(self, config: TextTypeConfig) -> None:
        """Switch to a new config; the old session is discarded."""
        self._cancel()
        self._engine.configure(config)
        self._publish()
        self._schedule_tick(self._engine.start_delay())
        logger.debug("Typing reconfigured")

    def stop(self) -> None:
        """Cancel the pending tick. The engine state is left as is."""
        self._cancel()
        logger.debug("Typing stopped")

    def _cancel(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.stop()
            self._pending = None

    def _schedule_tick(self, delay_ms: float) -> None:
        generation = self._generation

        def fire() -> None:
            if generation != self._generation:
                return
            self._pending = None
            self._tick()

        self._pending = self._schedule(max(0.0, delay_ms) / 1000.0 / self._speed, fire)

    def _tick(self) -> None:
        # Callbacks and listeners may stop or restart the driver mid-tick;
        # whatever they scheduled wins over this tick's follow-up
        generation = self._generation
        delay = self._engine.step()
        if generation != self._generation:
            return
        self._publish()
        if generation != self._generation:
            return
        if delay is not None:
            self._schedule_tick(delay)
        else:
            logger.info("Typing finished")


class _ManualTimer:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.active = True

    def stop(self) -> None:
        self.active = False


class ManualScheduler:
    """Virtual-time scheduler: nothing fires until you advance the clock.

    Usage:
        scheduler = ManualScheduler()
        driver = TypingDriver(engine, scheduler.set_timer)
        driver.start()
        scheduler.advance(0.5)      # fire everything due in the next 0.5s
        scheduler.run_next()        # or fire just the next timer
    """

    def __init__(self):
        self._now = 0.0
        self._queue: list[tuple[float, int, _ManualTimer]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    def set_timer(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self._now + delay, callback)
        heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not stopped."""
        return sum(1 for _, _, timer in self._queue if timer.active)

    def _pop_active(self) -> Optional[_ManualTimer]:
        while self._queue:
            _, _, timer = heapq.heappop(self._queue)
            if timer.active:
                return timer
        return None

    def run_next(self) -> bool:
        """Jump to the next pending timer and fire it.

        Returns:
            False if nothing was pending
        """
        timer = self._pop_active()
        if timer is None:
            return False
        self._now = max(self._now, timer.when)
        timer.active = False
        timer.callback()
        return True

    def advance(self, seconds: float, limit: int = 100_000) -> None:
        """Move the clock forward, firing every timer that comes due.

        Args:
            seconds: How far to move the clock
            limit: Most timers fired in one call. A chain of zero-delay
                timers never lets the clock move, so it would otherwise
                spin forever.

        Raises:
            RuntimeError: If more than limit timers come due
        """
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            timer = self._pop_active()
            if timer is None:
                break
            if timer.when > target:
                # Popped past the target; put it back
                heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
                break
            if fired >= limit:
                heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
                raise RuntimeError(
                    f"Fired {limit} timers without reaching t={target:.3f}s; "
                    "is something rescheduling itself with zero delay?"
                )
            self._now = max(self._now, timer.when)
            timer.active = False
            timer.callback()
            fired += 1
        self._now = target
