# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""WaveDirector — run progression through rounds and waves.

State flow::

    character_select -> spawning -> active -> wave_clear -> spawning ...
                                                   |
                                                   +-> round_clear -> spawning (next round)
                                                   +-> victory      (round 3, last wave)

    spawning | active | wave_clear | round_clear -> paused -> (same state)
    spawning | active | wave_clear | round_clear -> game_over

Deferred work (staggered spawns, the announce pause between waves) runs on
a ``TimerQueue`` that only advances inside ``tick``, so a paused run is
frozen in place and a reset or quit drops everything still pending.

Completion rules, checked once per tick after collisions while ``active``:
  - boss waves end when no boss-tagged enemy is left
  - other waves end when no wave enemy is left (flybys and fleeing enemies
    do not count) or when the wave clock reaches ``wave_timeout``

Timeout survivors are removed when the next wave spawns.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Callable

from loguru import logger

from .formations import FormationEntry, FormationGenerator
from .movement import Vec, formation_offset
from .state_machine import State, StateMachine
from .timers import TimerQueue
from .waves_defs import FINAL_ROUND, FLYBY_TYPES, get_wave_layout, is_boss_wave, waves_in_round

if TYPE_CHECKING:
    from blaster.comms.event_bus import EventBus
    from .enemies import EnemyRegistry
    from .rewards import RewardDistributor
    from .stats import RunStats

CHARACTER_SELECT = "character_select"
SPAWNING = "spawning"
ACTIVE = "active"
WAVE_CLEAR = "wave_clear"
ROUND_CLEAR = "round_clear"
PAUSED = "paused"
VICTORY = "victory"
GAME_OVER = "game_over"

ALL_STATES = (
    CHARACTER_SELECT, SPAWNING, ACTIVE, WAVE_CLEAR, ROUND_CLEAR, PAUSED, VICTORY, GAME_OVER,
)
# States in which the world advances each tick.
WORLD_STATES = frozenset({SPAWNING, ACTIVE, WAVE_CLEAR, ROUND_CLEAR})
TERMINAL_STATES = frozenset({VICTORY, GAME_OVER})

WAVE_BONUS = 100
VICTORY_MULTIPLIER = 6

_SPAWN_TAG = "spawn"
_ANNOUNCE_TAG = "announce"


@dataclass
class WaveState:
    """Counters and shared formation drift for the wave in progress."""

    round: int = 1
    wave: int = 1
    elapsed: float = 0.0
    is_spawning_wave: bool = False
    boss_wave: bool = False
    total_spawns: int = 0
    pending_spawns: int = 0
    drift_pattern: str = "default"
    formation_offset: Vec = (0.0, 0.0)
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "round": self.round,
            "wave": self.wave,
            "elapsed": round(self.elapsed, 3),
            "is_spawning_wave": self.is_spawning_wave,
            "boss_wave": self.boss_wave,
            "total_spawns": self.total_spawns,
            "pending_spawns": self.pending_spawns,
            "drift_pattern": self.drift_pattern,
            "formation_offset": [round(v, 2) for v in self.formation_offset],
            "completed": self.completed,
        }


class WaveDirector:
    """Top-level run state machine.

    Args:
        event_bus: Receives wave, round and run lifecycle events.
        enemies: Spawn target for formation entries.
        rewards: Rolled once when the run reaches a terminal state.
        rng: Injected random source for formation placement.
        stats: Optional per-run statistics.
        on_run_complete: Called with the reward id list at victory or game over.
    """

    def __init__(
        self,
        event_bus: EventBus,
        enemies: EnemyRegistry,
        rewards: RewardDistributor,
        rng: random.Random,
        *,
        formations: FormationGenerator | None = None,
        timers: TimerQueue | None = None,
        stats: RunStats | None = None,
        wave_timeout: float = 30.0,
        announce_delay: float = 2.0,
        stagger_interval: float = 0.15,
        on_run_complete: Callable[[list[str]], None] | None = None,
    ) -> None:
        self._event_bus = event_bus
        self._enemies = enemies
        self._rewards = rewards
        self._formations = formations or FormationGenerator(rng)
        self.timers = timers or TimerQueue()
        self.stats = stats
        self.wave_timeout = wave_timeout
        self.announce_delay = announce_delay
        self.stagger_interval = stagger_interval
        self.on_run_complete = on_run_complete

        self.score = 0
        self.wave_state = WaveState()
        self.rewards_delivered: list[str] | None = None
        self._resume_to: str | None = None
        self._sm = self._build_fsm()

    def _build_fsm(self) -> StateMachine:
        sm = StateMachine(CHARACTER_SELECT)
        for name in ALL_STATES:
            if name == VICTORY:
                sm.add_state(State(name, on_enter=lambda ctx: self._finish(victory=True)))
            elif name == GAME_OVER:
                sm.add_state(State(name, on_enter=lambda ctx: self._finish(victory=False)))
            else:
                sm.add_state(State(name))

        sm.add_transition(CHARACTER_SELECT, SPAWNING)
        sm.add_transition(SPAWNING, ACTIVE,
                          condition=lambda ctx: ctx.get("pending_spawns", 0) == 0)
        sm.add_transition(ACTIVE, WAVE_CLEAR)
        sm.add_transition(WAVE_CLEAR, SPAWNING)
        sm.add_transition(WAVE_CLEAR, ROUND_CLEAR)
        sm.add_transition(WAVE_CLEAR, VICTORY)
        sm.add_transition(ROUND_CLEAR, SPAWNING)
        for name in WORLD_STATES:
            sm.add_transition(name, PAUSED)
            sm.add_transition(PAUSED, name)
            sm.add_transition(name, GAME_OVER)
        return sm

    # -- Queries ------------------------------------------------------------

    @property
    def state(self) -> str:
        return self._sm.current_state

    @property
    def history(self) -> list[tuple[float, str, str]]:
        return self._sm.history

    @property
    def world_running(self) -> bool:
        return self.state in WORLD_STATES

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def add_points(self, points: int) -> None:
        if points > 0:
            self.score += points

    # -- Commands -----------------------------------------------------------

    def start(self) -> bool:
        """Leave character select and spawn round 1, wave 1."""
        if self.state != CHARACTER_SELECT:
            logger.debug(f"start ignored in state {self.state}")
            return False
        self.wave_state = WaveState()
        self.spawn_wave()
        return True

    def pause(self) -> bool:
        state = self.state
        if state not in WORLD_STATES:
            logger.debug(f"pause ignored in state {state}")
            return False
        self._resume_to = state
        self._sm.transition_to(PAUSED)
        self._event_bus.publish("paused", {"state": state})
        return True

    def resume(self) -> bool:
        if self.state != PAUSED or self._resume_to is None:
            logger.debug(f"resume ignored in state {self.state}")
            return False
        target, self._resume_to = self._resume_to, None
        self._sm.transition_to(target)
        self._event_bus.publish("resumed", {"state": target})
        return True

    def player_defeated(self) -> bool:
        if self.state not in WORLD_STATES:
            return False
        logger.info(f"Player defeated in round {self.wave_state.round} wave {self.wave_state.wave}")
        return self._sm.transition_to(GAME_OVER)

    def reset(self) -> None:
        """Drop all pending work and return to character select."""
        self.timers.cancel_all()
        self._enemies.clear()
        self._sm.reset(CHARACTER_SELECT)
        self.score = 0
        self.wave_state = WaveState()
        self.rewards_delivered = None
        self._resume_to = None

    # -- Spawning -----------------------------------------------------------

    def spawn_wave(self) -> list[FormationEntry]:
        """Expand the current (round, wave) layout and schedule its spawns.

        Survivors of the previous wave are removed first.  An unknown
        (round, wave) pair degrades to the default line formation.
        """
        ws = self.wave_state
        round_number, wave = ws.round, ws.wave
        self._enemies.clear()
        self.timers.cancel(_SPAWN_TAG)

        layout = get_wave_layout(round_number, wave)
        if layout is None:
            logger.warning(f"No layout for round {round_number} wave {wave}, using fallback line")
            entries = self._formations.fallback()
            drift = "default"
        else:
            entries = self._formations.build(layout)
            drift = str(layout.get("movement", "default"))

        boss_wave = is_boss_wave(round_number, wave)
        self.wave_state = WaveState(
            round=round_number,
            wave=wave,
            is_spawning_wave=bool(entries),
            boss_wave=boss_wave,
            total_spawns=len(entries),
            pending_spawns=len(entries),
            drift_pattern=drift,
        )
        for i, entry in enumerate(entries):
            self.timers.schedule(entry.spawn_delay + i * self.stagger_interval,
                                 partial(self._release, entry), tag=_SPAWN_TAG)
        self._enemies.set_flyby_types(FLYBY_TYPES.get(round_number, ()))

        if self.state != SPAWNING:
            self._sm.transition_to(SPAWNING)
        if self.stats is not None:
            self.stats.on_wave_start(round_number, wave, len(entries), boss_wave)
        self._event_bus.publish("wave_started", {
            "round": round_number,
            "wave": wave,
            "enemies": len(entries),
            "boss_wave": boss_wave,
        })
        logger.info(f"Round {round_number} wave {wave}: {len(entries)} enemies"
                    f"{' (boss wave)' if boss_wave else ''}")
        return entries

    def _release(self, entry: FormationEntry) -> None:
        self._enemies.spawn(entry)
        ws = self.wave_state
        ws.pending_spawns = max(0, ws.pending_spawns - 1)
        ws.is_spawning_wave = ws.pending_spawns > 0

    # -- Tick ---------------------------------------------------------------

    def tick(self, dt: float) -> None:
        """Advance game-clock timers, the wave clock and the shared drift."""
        if not self.world_running:
            return
        self.timers.tick(dt)
        ws = self.wave_state
        ws.elapsed += dt
        ws.formation_offset = formation_offset(ws.drift_pattern, ws.elapsed)
        self._sm.tick(dt, {"pending_spawns": ws.pending_spawns})

    def check_completion(self) -> bool:
        """Clear the wave if its completion rule holds.  Returns True on clear."""
        ws = self.wave_state
        if self.state != ACTIVE or ws.completed or ws.pending_spawns > 0:
            return False
        timed_out = False
        if ws.boss_wave:
            done = self._enemies.boss_count() == 0
        else:
            done = self._enemies.remaining() == 0
            if not done and ws.elapsed >= self.wave_timeout:
                done = timed_out = True
        if done:
            self._clear_wave(timed_out)
        return done

    def _clear_wave(self, timed_out: bool) -> None:
        ws = self.wave_state
        ws.completed = True
        bonus = WAVE_BONUS * ws.wave * ws.round
        self.score += bonus
        self._sm.transition_to(WAVE_CLEAR)
        if self.stats is not None:
            self.stats.on_wave_complete(ws.elapsed, bonus, timed_out)
        self._event_bus.publish("wave_cleared", {
            "round": ws.round,
            "wave": ws.wave,
            "bonus": bonus,
            "score": self.score,
            "timed_out": timed_out,
        })
        logger.info(f"Round {ws.round} wave {ws.wave} cleared "
                    f"({'timeout' if timed_out else 'field clear'}), bonus {bonus}")

        if ws.wave < waves_in_round(ws.round):
            self.timers.schedule(self.announce_delay, self._next_wave, tag=_ANNOUNCE_TAG)
        elif ws.round < FINAL_ROUND:
            self._sm.transition_to(ROUND_CLEAR)
            self._event_bus.publish("round_cleared", {"round": ws.round, "score": self.score})
            self.timers.schedule(self.announce_delay, self._next_round, tag=_ANNOUNCE_TAG)
        else:
            self._sm.transition_to(VICTORY)

    def _next_wave(self) -> None:
        self.wave_state.wave += 1
        self.spawn_wave()

    def _next_round(self) -> None:
        self.wave_state.round += 1
        self.wave_state.wave = 1
        self.spawn_wave()

    # -- Run completion -----------------------------------------------------

    def _finish(self, victory: bool) -> None:
        if self.rewards_delivered is not None:
            return
        self.timers.cancel_all()
        if victory:
            self.score *= VICTORY_MULTIPLIER
        rewards = self._rewards.roll(self.score, victory)
        self.rewards_delivered = rewards
        ws = self.wave_state
        self._event_bus.publish("victory" if victory else "game_over", {
            "score": self.score,
            "round": ws.round,
            "wave": ws.wave,
        })
        self._event_bus.publish("run_complete", {
            "victory": victory,
            "score": self.score,
            "rewards": list(rewards),
        })
        logger.info(f"Run complete ({'victory' if victory else 'game over'}), "
                    f"score {self.score}, {len(rewards)} rewards")
        if self.on_run_complete is not None:
            self.on_run_complete(list(rewards))

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "round": self.wave_state.round,
            "wave": self.wave_state.wave,
            "score": self.score,
            "wave_state": self.wave_state.to_dict(),
        }
