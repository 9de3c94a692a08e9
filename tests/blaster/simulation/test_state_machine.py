# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for the run progression StateMachine."""

from __future__ import annotations

import pytest

from blaster.simulation.state_machine import State, StateMachine

pytestmark = pytest.mark.unit


def _machine(log: list | None = None) -> StateMachine:
    log = log if log is not None else []
    sm = StateMachine("spawning")
    for name in ("spawning", "active", "wave_clear"):
        sm.add_state(State(
            name,
            on_enter=lambda ctx, n=name: log.append(f"enter:{n}"),
            on_exit=lambda ctx, n=name: log.append(f"exit:{n}"),
        ))
    return sm


class TestBuilder:
    def test_unregistered_state_rejected(self):
        sm = _machine()
        with pytest.raises(ValueError, match="victory"):
            sm.add_transition("spawning", "victory")

    def test_state_without_hooks(self):
        sm = StateMachine("a")
        sm.add_state(State("a"))
        sm.add_state(State("b"))
        sm.add_transition("a", "b")
        assert sm.transition_to("b")


class TestAutomaticEdges:
    def test_condition_fires_with_hooks(self):
        log: list = []
        sm = _machine(log)
        sm.add_transition("spawning", "active", lambda ctx: ctx.get("pending_spawns") == 0)
        assert not sm.tick(0.1, {"pending_spawns": 2})
        assert sm.tick(0.1, {"pending_spawns": 0})
        assert sm.current_state == "active"
        assert log == ["exit:spawning", "enter:active"]

    def test_first_declared_edge_wins(self):
        sm = _machine()
        sm.add_transition("spawning", "active", lambda ctx: True)
        sm.add_transition("spawning", "wave_clear", lambda ctx: True)
        sm.tick(0.1)
        assert sm.current_state == "active"

    def test_only_edges_from_current_state_are_evaluated(self):
        sm = _machine()
        sm.add_transition("active", "wave_clear", lambda ctx: True)
        assert not sm.tick(0.1)
        assert sm.current_state == "spawning"


class TestCommandedEdges:
    def test_only_declared_edges(self):
        sm = _machine()
        sm.add_transition("spawning", "active")
        assert not sm.transition_to("wave_clear")
        assert sm.transition_to("active")
        assert sm.current_state == "active"

    def test_commanded_edge_not_taken_by_tick(self):
        sm = _machine()
        sm.add_transition("spawning", "active")
        assert not sm.tick(1.0)
        assert sm.can_transition("active")


class TestHistoryAndReset:
    def test_history_uses_machine_clock(self):
        sm = _machine()
        sm.add_transition("spawning", "active", lambda ctx: True)
        sm.tick(0.25)
        assert sm.history == [(0.25, "spawning", "active")]

    def test_history_limit(self):
        sm = StateMachine("a", history_limit=3)
        sm.add_state(State("a"))
        sm.add_state(State("b"))
        sm.add_transition("a", "b")
        sm.add_transition("b", "a")
        for _ in range(5):
            sm.transition_to("b")
            sm.transition_to("a")
        assert len(sm.history) == 3
        assert sm.history[-1][1:] == ("b", "a")

    def test_reset_skips_hooks_and_clears(self):
        log: list = []
        sm = _machine(log)
        sm.add_transition("spawning", "active")
        sm.transition_to("active")
        log.clear()
        sm.reset("spawning")
        assert sm.current_state == "spawning"
        assert sm.history == []
        assert log == []

    def test_reset_unknown(self):
        with pytest.raises(ValueError):
            _machine().reset("nowhere")
