# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Run progression state machine.

The director registers every run state up front and then declares the
legal edges between them.  Two kinds of edge:

  - automatic: carries a ``condition(ctx)`` that ``tick`` evaluates while
    the machine sits in the edge's source state
  - commanded: no condition; only taken through ``transition_to``

Edges out of a state are tried in the order they were added.  Taking an
edge runs the old state's ``on_exit``, switches, then runs the new
state's ``on_enter``, so terminal states can do their end-of-run work in
``on_enter``.

Usage::

    sm = StateMachine("spawning")
    sm.add_state(State("spawning"))
    sm.add_state(State("active"))
    sm.add_transition("spawning", "active", lambda ctx: ctx["pending_spawns"] == 0)
    sm.tick(1 / 60, {"pending_spawns": 0})

History entries are ``(clock, from_state, to_state)`` where the clock is
the sum of every ticked ``dt``, so two replays of one seed log the same
timestamps.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable

from loguru import logger

Callback = Callable[[dict], None]
Condition = Callable[[dict], bool]


@dataclass
class State:
    """A named run state with optional enter/exit hooks."""

    name: str
    on_enter: Callback | None = None
    on_exit: Callback | None = None

    def enter(self, ctx: dict) -> None:
        if self.on_enter is not None:
            self.on_enter(ctx)

    def exit(self, ctx: dict) -> None:
        if self.on_exit is not None:
            self.on_exit(ctx)


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    condition: Condition | None = None

    @property
    def automatic(self) -> bool:
        return self.condition is not None


class StateMachine:
    """Finite state machine assembled with ``add_state``/``add_transition``."""

    def __init__(self, initial_state: str, history_limit: int = 50) -> None:
        self._states: dict[str, State] = {}
        self._edges: dict[str, list[Edge]] = {}
        self._current = initial_state
        self._history: deque[tuple[float, str, str]] = deque(maxlen=history_limit)
        self._clock = 0.0

    def add_state(self, state: State) -> None:
        self._states[state.name] = state
        self._edges.setdefault(state.name, [])

    def add_transition(self, from_state: str, to_state: str,
                       condition: Condition | None = None) -> None:
        """Declare an edge; both ends must already be registered."""
        missing = [n for n in (from_state, to_state) if n not in self._states]
        if missing:
            raise ValueError(f"Unknown state(s): {', '.join(missing)}")
        self._edges[from_state].append(Edge(from_state, to_state, condition))

    @property
    def current_state(self) -> str:
        return self._current

    @property
    def history(self) -> list[tuple[float, str, str]]:
        return list(self._history)

    def can_transition(self, to_state: str) -> bool:
        return any(e.target == to_state for e in self._edges.get(self._current, ()))

    def tick(self, dt: float, ctx: dict | None = None) -> bool:
        """Advance the clock and take the first automatic edge whose condition holds."""
        ctx = {} if ctx is None else ctx
        self._clock += dt
        for edge in self._edges.get(self._current, ()):
            if edge.automatic and edge.condition(ctx):
                self._switch(edge.target, ctx)
                return True
        return False

    def transition_to(self, to_state: str, ctx: dict | None = None) -> bool:
        """Take a declared edge out of the current state, or do nothing."""
        if not self.can_transition(to_state):
            logger.debug(f"No edge {self._current} -> {to_state}")
            return False
        self._switch(to_state, {} if ctx is None else ctx)
        return True

    def reset(self, state_name: str) -> None:
        """Jump to ``state_name`` without hooks and forget history and clock."""
        if state_name not in self._states:
            raise ValueError(f"Unknown state: {state_name}")
        self._current = state_name
        self._history.clear()
        self._clock = 0.0

    def _switch(self, target: str, ctx: dict) -> None:
        previous = self._current
        self._states[previous].exit(ctx)
        self._current = target
        self._history.append((round(self._clock, 6), previous, target))
        self._states[target].enter(ctx)
