from __future__ import annotations

import heapq
import itertools
import time
from typing import Any, Callable, Dict, List, Protocol, Tuple


Callback = Callable[[], None]


class Scheduler(Protocol):
    """
    The UI-thread dispatch seam. The core never owns a timer of its own:
    Tk (``after``/``after_cancel``) or a test clock plugs in here.
    """

    def now_ms(self) -> float: ...

    def call_later(self, delay_ms: int, fn: Callback) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class ManualScheduler:
    """
    Virtual clock. Nothing fires until ``advance()`` moves time forward.
    Used by tests and headless callers.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, Callback]] = []
        self._cancelled: set = set()

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: int, fn: Callback) -> int:
        handle = next(self._seq)
        heapq.heappush(self._queue, (self._now + max(0, delay_ms), handle, fn))
        return handle

    def cancel(self, handle: Any) -> None:
        self._cancelled.add(handle)

    @property
    def pending_count(self) -> int:
        return sum(1 for _, h, _ in self._queue if h not in self._cancelled)

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing due callbacks in order. Returns how many fired."""
        target = self._now + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, handle, fn = heapq.heappop(self._queue)
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            self._now = due
            fn()
            fired += 1
        self._now = target
        return fired


class GenerationTimers:
    """
    Named, cancellable callbacks tied to a session generation.

    ``bump()`` starts a new generation and cancels everything outstanding;
    a callback that still fires for an older generation does nothing.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self.scheduler = scheduler
        self.generation = 0
        self._handles: Dict[str, Any] = {}

    def schedule(self, key: str, delay_ms: int, fn: Callback) -> None:
        self.cancel(key)
        gen = self.generation

        def fire() -> None:
            if gen != self.generation:
                return
            self._handles.pop(key, None)
            fn()

        self._handles[key] = self.scheduler.call_later(delay_ms, fire)

    def cancel(self, key: str) -> None:
        handle = self._handles.pop(key, None)
        if handle is not None:
            self.scheduler.cancel(handle)

    def cancel_all(self) -> None:
        for key in list(self._handles):
            self.cancel(key)

    def bump(self) -> int:
        self.cancel_all()
        self.generation += 1
        return self.generation

    def is_scheduled(self, key: str) -> bool:
        return key in self._handles

    def active_keys(self) -> Tuple[str, ...]:
        return tuple(self._handles)



class AfterScheduler:
    """
    Scheduler on top of a Tk widget's ``after``/``after_cancel``.
    Time comes from ``time.monotonic`` in milliseconds.
    """

    def __init__(self, widget: Any, clock: Callable[[], float] = time.monotonic) -> None:
        self.widget = widget
        self.clock = clock

    def now_ms(self) -> float:
        return self.clock() * 1000.0

    def call_later(self, delay_ms: int, fn: Callback) -> Any:
        return self.widget.after(max(0, int(delay_ms)), fn)

    def cancel(self, handle: Any) -> None:
        self.widget.after_cancel(handle)
