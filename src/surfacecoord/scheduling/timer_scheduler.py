"""
Timer Scheduling - Coordination Substrate
Schedulable, cancelable timers behind one interface so that debounce,
auto-clear, completion and typeahead continuations run on either a virtual
clock (tests, replay) or the asyncio event loop (runtime).
"""

import asyncio
import heapq
import itertools
import logging
from typing import Any, Callable, Dict, Hashable, List, Optional, Protocol, Tuple

from surfacecoord.clock import DeterministicClock

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], None]


class TimerHandle:
    """Cancelable handle for one scheduled callback"""

    def __init__(self, due_ms: float, callback: TimerCallback, label: str = ""):
        self.due_ms = due_ms
        self.label = label
        self._callback = callback
        self._cancelled = False
        self._fired = False
        self._native: Optional[asyncio.TimerHandle] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def active(self) -> bool:
        """True while the callback is still due to run"""
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        """Cancel the timer; no-op once fired or already cancelled"""
        if not self.active:
            return
        self._cancelled = True
        if self._native is not None:
            self._native.cancel()

    def _run(self) -> None:
        if not self.active:
            return
        self._fired = True
        try:
            self._callback()
        except Exception as e:
            logger.error(f"Timer callback failed ({self.label or 'unlabelled'}): {e}")


class TimerScheduler(Protocol):
    """Scheduler interface consumed by every coordinator"""

    def now_ms(self) -> float:
        """Current scheduler time in milliseconds"""
        ...

    def call_later(self, delay_ms: float, callback: TimerCallback, label: str = "") -> TimerHandle:
        """Schedule callback after delay_ms and return its handle"""
        ...


class VirtualTimerScheduler:
    """
    Deterministic scheduler driven by an explicit virtual clock

    Timers fire in due order, ties broken by scheduling order. Timers scheduled
    while advancing fire within the same advance when they fall due.
    """

    def __init__(self, clock: Optional[DeterministicClock] = None):
        self.clock = clock or DeterministicClock()
        self._heap: List[Tuple[float, int, TimerHandle]] = []
        self._sequence = itertools.count()

    def now_ms(self) -> float:
        return self.clock.now_ms()

    def call_later(self, delay_ms: float, callback: TimerCallback, label: str = "") -> TimerHandle:
        delay = max(0.0, float(delay_ms))
        handle = TimerHandle(self.clock.now_ms() + delay, callback, label)
        heapq.heappush(self._heap, (handle.due_ms, next(self._sequence), handle))
        return handle

    def advance(self, ms: float) -> int:
        """
        Move virtual time forward, firing every timer that falls due

        Args:
            ms: Milliseconds to advance

        Returns:
            Number of callbacks fired
        """
        if ms < 0:
            raise ValueError(f"Cannot advance scheduler by negative duration ({ms}ms)")

        target = self.clock.now_ms() + ms
        fired = 0
        while self._heap and self._heap[0][0] <= target:
            due_ms, _, handle = heapq.heappop(self._heap)
            if not handle.active:
                continue
            self.clock.set_time(max(due_ms, self.clock.now_ms()))
            handle._run()
            fired += 1
        self.clock.set_time(target)
        return fired

    def run_pending(self) -> int:
        """Fire every timer already due without moving time"""
        return self.advance(0)

    def pending_count(self) -> int:
        """Number of timers still waiting to fire"""
        return sum(1 for _, _, handle in self._heap if handle.active)

    def next_due_ms(self) -> Optional[float]:
        """Due time of the earliest live timer"""
        live = [due for due, _, handle in self._heap if handle.active]
        return min(live) if live else None


class AsyncioTimerScheduler:
    """
    Scheduler backed by the asyncio event loop

    Without an explicit loop each call uses the loop running at that moment,
    so one scheduler outlives successive asyncio.run() loops.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def now_ms(self) -> float:
        return self._get_loop().time() * 1000.0

    def call_later(self, delay_ms: float, callback: TimerCallback, label: str = "") -> TimerHandle:
        loop = self._get_loop()
        delay = max(0.0, float(delay_ms))
        handle = TimerHandle(loop.time() * 1000.0 + delay, callback, label)
        handle._native = loop.call_later(delay / 1000.0, handle._run)
        return handle


class KeyedTimers:
    """
    Cancelable timer handles keyed by id

    Scheduling under an existing key cancels the previous timer, which is the
    primitive behind debounce and per-entity completion timers.
    """

    def __init__(self, scheduler: TimerScheduler, name: str = "timers"):
        self.scheduler = scheduler
        self.name = name
        self._handles: Dict[Hashable, TimerHandle] = {}

    def schedule(self, key: Hashable, delay_ms: float, callback: TimerCallback) -> TimerHandle:
        """Schedule (or reschedule) the timer for key"""
        self.cancel(key)

        def fire() -> None:
            if self._handles.get(key) is handle:
                del self._handles[key]
            callback()

        handle = self.scheduler.call_later(delay_ms, fire, label=f"{self.name}:{key}")
        self._handles[key] = handle
        return handle

    def cancel(self, key: Hashable) -> bool:
        """Cancel the timer for key; returns True if one was pending"""
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every pending timer"""
        count = 0
        for handle in self._handles.values():
            if handle.active:
                handle.cancel()
                count += 1
        self._handles.clear()
        return count

    def keys(self) -> List[Any]:
        return list(self._handles.keys())

    def __contains__(self, key: Hashable) -> bool:
        return key in self._handles

    def __len__(self) -> int:
        return len(self._handles)
