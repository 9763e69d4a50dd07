from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional


Callback = Callable[[], None]


@dataclass(order=True)
class TimerHandle:
    due_ms: int
    seq: int
    callback: Callback = field(compare=False)
    group: str = field(default="", compare=False)
    interval_ms: Optional[int] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    @property
    def repeating(self) -> bool:
        return self.interval_ms is not None


class Scheduler:
    """Single-threaded virtual clock driving fall ticks and cosmetic delays.

    Nothing runs on its own: the host advances time (a pygame loop, an env
    step, a test). Timers fire in due order, ties in scheduling order, and a
    callback may schedule further timers which fire within the same advance
    if they fall due before its end.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._heap: List[TimerHandle] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback: Callback, group: str = "") -> TimerHandle:
        handle = TimerHandle(self.now_ms + max(0, int(delay_ms)), next(self._seq), callback, group)
        heapq.heappush(self._heap, handle)
        return handle

    def call_every(self, interval_ms: int, callback: Callback, group: str = "") -> TimerHandle:
        interval = max(1, int(interval_ms))
        handle = TimerHandle(self.now_ms + interval, next(self._seq), callback, group, interval)
        heapq.heappush(self._heap, handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancelled = True

    def cancel_group(self, group: str) -> int:
        count = 0
        for handle in self._heap:
            if handle.group == group and not handle.cancelled:
                handle.cancelled = True
                count += 1
        return count

    def pending(self, group: Optional[str] = None) -> int:
        return sum(
            1 for h in self._heap if not h.cancelled and (group is None or h.group == group)
        )

    def advance(self, delta_ms: int) -> int:
        """Move the clock forward, firing every timer that falls due. Returns fired count."""
        target = self.now_ms + max(0, int(delta_ms))
        fired = 0
        while self._heap and self._heap[0].due_ms <= target:
            handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self.now_ms = handle.due_ms
            if handle.repeating:
                handle.due_ms += handle.interval_ms  # type: ignore[operator]
                handle.seq = next(self._seq)
                heapq.heappush(self._heap, handle)
            handle.callback()
            fired += 1
        self.now_ms = target
        return fired

    def flush(self, group: Optional[str] = None) -> int:
        """Fire pending one-shot timers (optionally of one group) without waiting.

        Repeating timers are left alone. The clock jumps to the last fired
        deadline, so one-shots scheduled by fired callbacks are flushed too.
        """
        fired = 0
        while True:
            due = [
                h for h in self._heap
                if not h.cancelled and not h.repeating and (group is None or h.group == group)
            ]
            if not due:
                return fired
            handle = min(due)
            handle.cancelled = True
            self._heap.remove(handle)
            heapq.heapify(self._heap)
            self.now_ms = max(self.now_ms, handle.due_ms)
            handle.callback()
            fired += 1
