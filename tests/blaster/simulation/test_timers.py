# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for TimerQueue."""

from __future__ import annotations

import pytest

from blaster.simulation.timers import TimerQueue

pytestmark = pytest.mark.unit


class TestTimerQueue:
    def test_fires_when_due(self):
        q = TimerQueue()
        fired = []
        q.schedule(0.5, lambda: fired.append("x"))
        assert q.tick(0.4) == 0
        assert q.tick(0.1) == 1
        assert fired == ["x"]
        assert len(q) == 0

    def test_due_order_then_schedule_order(self):
        q = TimerQueue()
        fired = []
        q.schedule(0.3, lambda: fired.append("late"))
        q.schedule(0.1, lambda: fired.append("first"))
        q.schedule(0.1, lambda: fired.append("second"))
        q.tick(1.0)
        assert fired == ["first", "second", "late"]

    def test_accumulated_small_steps(self):
        q = TimerQueue()
        fired = []
        q.schedule(0.15 * 3, lambda: fired.append(1))
        for _ in range(27):
            q.tick(1 / 60)
        assert fired == [1]

    def test_cancel_by_tag(self):
        q = TimerQueue()
        q.schedule(1.0, lambda: None, tag="spawn")
        q.schedule(1.0, lambda: None, tag="spawn")
        q.schedule(1.0, lambda: None, tag="announce")
        assert q.cancel("spawn") == 2
        assert q.pending("spawn") == 0
        assert q.pending() == 1

    def test_cancel_all(self):
        q = TimerQueue()
        q.schedule(1.0, lambda: None)
        q.cancel_all()
        assert q.tick(2.0) == 0

    def test_callback_may_schedule(self):
        q = TimerQueue()
        fired = []
        q.schedule(0.1, lambda: q.schedule(0.0, lambda: fired.append("chained")))
        q.tick(0.1)
        assert fired == ["chained"]

    def test_negative_delay_is_immediate(self):
        q = TimerQueue()
        fired = []
        q.schedule(-1.0, lambda: fired.append(1))
        q.tick(0.0)
        assert fired == [1]
        assert q.now == 0.0
