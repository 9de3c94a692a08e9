# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for WaveDirector — progression, completion rules, pause, rewards."""

from __future__ import annotations

import pytest

from blaster.simulation.director import (
    ACTIVE,
    CHARACTER_SELECT,
    GAME_OVER,
    PAUSED,
    ROUND_CLEAR,
    SPAWNING,
    VICTORY,
    WAVE_CLEAR,
    WaveDirector,
)
from blaster.simulation.enemies import EnemyRegistry
from blaster.simulation.rewards import RewardDistributor
from blaster.simulation.stats import RunStats

pytestmark = pytest.mark.unit


@pytest.fixture
def registry(bus, projectiles, rng) -> EnemyRegistry:
    return EnemyRegistry(bus, projectiles, rng)


@pytest.fixture
def completed() -> list:
    return []


@pytest.fixture
def director(bus, registry, rng, completed) -> WaveDirector:
    return WaveDirector(
        bus, registry, RewardDistributor(rng), rng,
        stats=RunStats("dere"),
        on_run_complete=completed.append,
    )


def _go_active(director: WaveDirector) -> None:
    director.tick(15.0)
    assert director.state == ACTIVE


def _jump_to(director: WaveDirector, round_number: int, wave: int) -> None:
    """Start a run and respawn directly at (round, wave)."""
    director.start()
    director.wave_state.round = round_number
    director.wave_state.wave = wave
    director.spawn_wave()
    _go_active(director)


def _defeat_all(registry: EnemyRegistry, bosses_only: bool = False) -> None:
    for enemy in registry.live():
        if bosses_only and not enemy.is_boss:
            continue
        registry.damage(enemy, 10_000)


# ---------------------------------------------------------------------------
# Start and staggered spawning
# ---------------------------------------------------------------------------

class TestStart:
    def test_start_spawns_first_wave(self, bus, director, drain_queue):
        q = bus.subscribe("wave_started")
        assert director.start()
        assert director.state == SPAWNING
        assert drain_queue(q) == [{"round": 1, "wave": 1, "enemies": 7, "boss_wave": False}]
        assert director.wave_state.pending_spawns == 7

    def test_start_only_from_character_select(self, director):
        director.start()
        assert not director.start()

    def test_spawns_are_staggered(self, director, registry):
        director.start()
        director.tick(0.2)
        assert len(registry) == 2
        assert director.state == SPAWNING

    def test_active_once_all_released(self, director, registry):
        director.start()
        _go_active(director)
        assert len(registry) == 7
        assert not director.wave_state.is_spawning_wave

    def test_nothing_ticks_before_start(self, director):
        director.tick(5.0)
        assert director.state == CHARACTER_SELECT
        assert director.wave_state.elapsed == 0.0

    def test_unknown_wave_uses_fallback(self, director, registry):
        director.start()
        director.wave_state.round = 9
        entries = director.spawn_wave()
        assert [e.type_id for e in entries] == ["darkling1"] * 5


# ---------------------------------------------------------------------------
# Completion rules
# ---------------------------------------------------------------------------

class TestCompletion:
    def test_field_clear_awards_bonus(self, bus, director, registry, drain_queue):
        q = bus.subscribe("wave_cleared")
        director.start()
        _go_active(director)
        registry.clear()
        assert director.check_completion()
        assert director.state == WAVE_CLEAR
        (event,) = drain_queue(q)
        assert event["bonus"] == 100
        assert not event["timed_out"]
        assert director.score == 100

    def test_not_done_while_enemies_remain(self, director):
        director.start()
        _go_active(director)
        assert not director.check_completion()

    def test_timeout_clears_with_survivors(self, bus, director, registry, drain_queue):
        q = bus.subscribe("wave_cleared")
        director.start()
        _go_active(director)
        director.tick(27.5)
        assert director.check_completion()
        assert drain_queue(q)[0]["timed_out"]
        assert len(registry) == 7

    def test_survivors_removed_when_next_wave_spawns(self, director, registry):
        director.start()
        _go_active(director)
        director.tick(27.5)
        director.check_completion()
        survivors = {e.enemy_id for e in registry.live()}
        director.tick(2.0)
        assert director.wave_state.wave == 2
        assert survivors.isdisjoint(e.enemy_id for e in registry.live())

    def test_flybys_do_not_hold_the_wave(self, director, registry):
        director.start()
        _go_active(director)
        registry.clear()
        registry.spawn_flyby("darkling1")
        assert director.check_completion()

    def test_boss_wave_clears_when_field_empty(self, director, registry):
        _jump_to(director, 1, 5)
        assert director.wave_state.boss_wave
        _defeat_all(registry)
        assert director.check_completion()

    def test_boss_wave_ignores_minions(self, director, registry):
        _jump_to(director, 1, 5)
        assert not director.check_completion()
        _defeat_all(registry, bosses_only=True)
        assert len(registry) == 6
        assert director.check_completion()

    def test_boss_wave_never_times_out(self, director):
        _jump_to(director, 1, 5)
        director.tick(60.0)
        assert not director.check_completion()

    def test_only_once(self, director, registry):
        director.start()
        _go_active(director)
        registry.clear()
        assert director.check_completion()
        assert not director.check_completion()


# ---------------------------------------------------------------------------
# Progression
# ---------------------------------------------------------------------------

class TestProgression:
    def test_next_wave_after_announce_delay(self, director, registry):
        director.start()
        _go_active(director)
        registry.clear()
        director.check_completion()
        director.tick(1.9)
        assert director.state == WAVE_CLEAR
        director.tick(0.1)
        assert director.state == SPAWNING
        assert director.wave_state.wave == 2

    def test_round_clear_then_next_round(self, bus, director, registry, drain_queue):
        q = bus.subscribe("round_cleared")
        _jump_to(director, 1, 5)
        _defeat_all(registry, bosses_only=True)
        director.check_completion()
        assert director.state == ROUND_CLEAR
        assert drain_queue(q)[0]["round"] == 1
        director.tick(2.0)
        assert (director.wave_state.round, director.wave_state.wave) == (2, 1)
        assert director.state == SPAWNING

    def test_victory_multiplies_score_and_rolls_rewards(self, bus, director, registry,
                                                        completed, drain_queue):
        q = bus.subscribe("run_complete")
        _jump_to(director, 3, 8)
        director.score = 500
        _defeat_all(registry, bosses_only=True)
        director.check_completion()
        assert director.state == VICTORY
        assert director.score == (500 + 100 * 8 * 3) * 6
        (event,) = drain_queue(q)
        assert event["victory"]
        assert completed == [event["rewards"]]
        assert director.rewards_delivered == event["rewards"]

    def test_victory_is_immediate(self, director, registry):
        _jump_to(director, 3, 8)
        _defeat_all(registry, bosses_only=True)
        director.check_completion()
        assert director.finished
        assert len(director.timers) == 0

    def test_victory_from_500_points(self, director, completed):
        director.score = 500
        director._finish(victory=True)
        assert director.score == 3000
        assert len(completed) == 1


# ---------------------------------------------------------------------------
# Pause / resume
# ---------------------------------------------------------------------------

class TestPause:
    def test_pause_freezes_clock_and_spawns(self, director, registry):
        director.start()
        assert director.pause()
        assert director.state == PAUSED
        director.tick(10.0)
        assert len(registry) == 0
        assert director.wave_state.elapsed == 0.0
        assert director.resume()
        assert director.state == SPAWNING
        _go_active(director)

    def test_resume_returns_to_prior_state(self, director, registry):
        director.start()
        _go_active(director)
        registry.clear()
        director.check_completion()
        director.pause()
        director.tick(5.0)
        director.resume()
        assert director.state == WAVE_CLEAR
        assert director.wave_state.wave == 1

    def test_pause_outside_run(self, director):
        assert not director.pause()
        assert not director.resume()

    def test_events(self, bus, director, drain_queue):
        q = bus.subscribe()
        director.start()
        drain_queue(q)
        director.pause()
        director.resume()
        types = [m["type"] for m in drain_queue(q)]
        assert types == ["paused", "resumed"]


# ---------------------------------------------------------------------------
# Defeat and reset
# ---------------------------------------------------------------------------

class TestDefeatAndReset:
    def test_player_defeated_ends_run_once(self, bus, director, completed, drain_queue):
        q = bus.subscribe("game_over")
        director.start()
        _go_active(director)
        assert director.player_defeated()
        assert director.state == GAME_OVER
        assert not director.player_defeated()
        assert len(drain_queue(q)) == 1
        assert len(completed) == 1

    def test_defeat_keeps_score(self, director):
        director.start()
        director.score = 700
        director.player_defeated()
        assert director.score == 700

    def test_reset(self, director, registry):
        director.start()
        _go_active(director)
        director.score = 900
        director.reset()
        assert director.state == CHARACTER_SELECT
        assert director.score == 0
        assert len(registry) == 0
        assert len(director.timers) == 0
        assert director.rewards_delivered is None
        assert director.history == []

    def test_history_records_transitions(self, director):
        director.start()
        _go_active(director)
        assert [(a, b) for _, a, b in director.history] == [
            (CHARACTER_SELECT, SPAWNING), (SPAWNING, ACTIVE),
        ]
