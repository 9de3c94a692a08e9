# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Game-clock timers for deferred work (staggered spawns, announce pause).

Timers only advance inside ``tick(dt)``, so anything scheduled here is
frozen while the game is paused and dropped on ``cancel_all``.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable


class TimerQueue:
    """Min-heap of ``(due_time, seq, callback)`` on the game clock."""

    def __init__(self) -> None:
        self._now = 0.0
        self._seq = itertools.count()
        self._heap: list[tuple[float, int, str, Callable[[], None]]] = []

    @property
    def now(self) -> float:
        return self._now

    def __len__(self) -> int:
        return len(self._heap)

    def pending(self, tag: str | None = None) -> int:
        if tag is None:
            return len(self._heap)
        return sum(1 for _, _, t, _ in self._heap if t == tag)

    def schedule(self, delay: float, callback: Callable[[], None], tag: str = "") -> None:
        """Run ``callback`` once ``delay`` game seconds have elapsed."""
        heapq.heappush(self._heap, (self._now + max(0.0, delay), next(self._seq), tag, callback))

    def cancel(self, tag: str) -> int:
        kept = [item for item in self._heap if item[2] != tag]
        dropped = len(self._heap) - len(kept)
        heapq.heapify(kept)
        self._heap = kept
        return dropped

    def cancel_all(self) -> None:
        self._heap.clear()

    def tick(self, dt: float) -> int:
        """Advance the clock and fire every due callback in due order."""
        self._now += dt
        fired = 0
        while self._heap and self._heap[0][0] <= self._now + 1e-9:
            _, _, _, callback = heapq.heappop(self._heap)
            callback()
            fired += 1
        return fired
