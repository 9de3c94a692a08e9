# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""EventBus — thread-safe pub/sub between the combat core and its listeners.

The simulation publishes abstract gameplay events (``enemy_defeated``,
``player_hit``, ``wave_cleared`` ...) that audio, particle and UI layers
consume.  Publishing never blocks: each subscriber owns a bounded queue and
a full queue simply drops the message, so a slow listener can never stall
the tick loop.

Two subscription styles:

  - ``subscribe("player_hit")`` -- queue receives the payload dict only
  - ``subscribe()`` -- wildcard queue receives ``{"type": ..., "data": ...}``
"""

from __future__ import annotations

import queue
import threading

_DEFAULT_MAXSIZE = 256


class EventBus:
    """Simple thread-safe pub/sub for pushing events to subscribers."""

    def __init__(self, maxsize: int = _DEFAULT_MAXSIZE) -> None:
        self._lock = threading.Lock()
        self._maxsize = maxsize
        self._topics: dict[str, list[queue.Queue]] = {}
        self._wildcard: list[queue.Queue] = []
        self._dropped = 0

    @property
    def dropped(self) -> int:
        """Number of messages discarded because a subscriber queue was full."""
        return self._dropped

    def subscribe(self, topic: str | None = None) -> queue.Queue:
        q: queue.Queue = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            if topic is None:
                self._wildcard.append(q)
            else:
                self._topics.setdefault(topic, []).append(q)
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            if q in self._wildcard:
                self._wildcard.remove(q)
                return
            for subscribers in self._topics.values():
                if q in subscribers:
                    subscribers.remove(q)
                    return

    def publish(self, event_type: str, data: dict | None = None) -> None:
        payload = data if data is not None else {}
        with self._lock:
            targets = [(q, payload) for q in self._topics.get(event_type, [])]
            envelope = {"type": event_type, "data": payload}
            targets.extend((q, envelope) for q in self._wildcard)
            for q, msg in targets:
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    self._dropped += 1
