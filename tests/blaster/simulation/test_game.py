# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Tests for BlasterGame — the command/snapshot surface over one run."""

from __future__ import annotations

import pytest

from blaster.simulation.director import ACTIVE, CHARACTER_SELECT, GAME_OVER, PAUSED, SPAWNING
from blaster.simulation.game import BlasterGame

pytestmark = pytest.mark.unit

FRAME = 1 / 60


@pytest.fixture
def rewards() -> list:
    return []


@pytest.fixture
def game(bus, rewards) -> BlasterGame:
    return BlasterGame(bus, seed=7, on_run_complete=rewards.append)


def _run(game: BlasterGame, seconds: float) -> None:
    for _ in range(round(seconds / FRAME)):
        game.tick(FRAME)


def _active(game: BlasterGame, char_id: str = "dere") -> None:
    game.select_character(char_id)
    _run(game, 1.5)
    assert game.state == ACTIVE


class TestSelection:
    def test_unknown_character_raises(self, game):
        with pytest.raises(ValueError):
            game.select_character("zed")
        assert game.state == CHARACTER_SELECT

    def test_select_starts_run(self, bus, game, drain_queue):
        q = bus.subscribe("character_selected")
        assert game.select_character("aliza")
        assert game.state == SPAWNING
        assert game.player.char_id == "aliza"
        assert drain_queue(q) == [{"character": "aliza"}]

    def test_select_twice_rejected(self, game):
        game.select_character("dere")
        assert not game.select_character("shinshi")
        assert game.player.char_id == "dere"

    def test_commands_before_select(self, game):
        assert not game.move_left()
        assert not game.set_firing(True)
        assert not game.trigger_special()
        assert not game.pause()
        assert not game.quit()

    def test_tick_before_select_is_noop(self, game):
        game.tick(1.0)
        assert game.tick_count == 0


class TestControls:
    def test_collision_line(self, game):
        assert game.collision_y == 525.0

    def test_held_movement_and_stop(self, game):
        _active(game)
        game.move_right()
        _run(game, 0.5)
        x = game.player.x
        assert x > 0
        game.stop()
        _run(game, 0.5)
        assert game.player.x == x

    def test_tap_moves_half_step(self, game):
        _active(game)
        game.move_right()
        game.tap_left()
        assert game.player.x == -2.5
        assert game.player.moving_right

    def test_releasing_one_key_keeps_the_other(self, game):
        _active(game)
        game.move_left()
        game.move_right()
        game.move_left(held=False)
        assert game.player.moving_right
        assert not game.player.moving_left
        assert game.player.x == 0.0
        _run(game, 1 / 60)
        assert game.player.x > 0

    def test_both_keys_held_cancel_out(self, game):
        _active(game)
        game.move_left()
        game.move_right()
        _run(game, 0.5)
        assert game.player.x == 0.0

    def test_firing_counts_shots(self, game):
        _active(game)
        game.set_firing(True)
        _run(game, 1.0)
        assert game.stats.shots_fired > 0
        assert game.projectiles.player or game.stats.shots_hit

    def test_aim_point(self, game):
        _active(game)
        assert game.set_aim_point(100, 100)
        assert game.player.aim == (100.0, 100.0)

    def test_special_publishes(self, bus, game, drain_queue):
        q = bus.subscribe("special_used")
        _active(game, "aliza")
        assert game.trigger_special()
        assert not game.trigger_special()
        assert drain_queue(q) == [{"character": "aliza"}]
        assert game.stats.specials_used == 1

    def test_homing_burst_counts_as_shots_fired(self, game):
        _active(game, "aliza")
        before = game.stats.shots_fired
        game.trigger_special()
        assert game.stats.shots_fired - before == 12
        _run(game, 3.0)
        assert game.stats.shots_hit <= game.stats.shots_fired
        assert game.stats.accuracy <= 1.0

    def test_flash_special_fires_no_shots(self, game):
        _active(game, "dere")
        before = game.stats.shots_fired
        game.trigger_special()
        assert game.stats.shots_fired == before


class TestProgress:
    def test_clearing_field_clears_wave(self, game):
        _active(game)
        for enemy in game.enemies.live():
            game.enemies.damage(enemy, 10_000)
        game.tick(FRAME)
        assert game.state == "wave_clear"
        # 7 enemies: one midboss (100) + three darkling1 (100) + three darkling2 (100), + wave bonus
        assert game.score == 700 + 100
        assert game.stats.enemies_defeated == 7

    def test_pause_freezes_everything(self, game):
        _active(game)
        before = game.snapshot()
        assert game.pause()
        assert game.state == PAUSED
        _run(game, 2.0)
        after = game.snapshot()
        assert after["tick"] == before["tick"]
        assert after["enemies"] == before["enemies"]
        assert game.resume()
        assert game.state == ACTIVE

    def test_death_ends_run_with_rewards(self, bus, game, rewards, drain_queue):
        q = bus.subscribe("game_over")
        _active(game)
        game.player.health = 1
        game.set_firing(True)
        game.projectiles.create_enemy_projectile(game.player.x, game.collision_y, 0, 0)
        game.tick(FRAME)
        assert game.state == GAME_OVER
        assert len(drain_queue(q)) == 1
        assert len(rewards) == 1
        assert not game.player.firing
        assert not game.move_left()


class TestQuitAndReset:
    def test_quit_abandons_without_rewards(self, bus, game, rewards, drain_queue):
        q = bus.subscribe()
        _active(game)
        game.director.score = 1234
        drain_queue(q)
        assert game.quit()
        events = drain_queue(q)
        assert [m["type"] for m in events] == ["run_abandoned"]
        assert events[0]["data"] == {"state": ACTIVE, "score": 1234}
        assert game.state == CHARACTER_SELECT
        assert game.player is None
        assert rewards == []

    def test_quit_while_paused(self, game):
        _active(game)
        game.pause()
        assert game.quit()
        assert game.state == CHARACTER_SELECT

    def test_reset_gives_fresh_stats(self, game):
        _active(game)
        old_stats = game.stats
        game.reset()
        assert game.stats is not old_stats
        assert game.director.stats is game.stats
        assert game.tick_count == 0
        assert game.snapshot()["enemies"] == []

    def test_reset_replays_identically(self, game):
        def layout():
            game.select_character("dere")
            _run(game, 2.0)
            return [(e["type"], e["x"], e["y"]) for e in game.snapshot()["enemies"]]

        first = layout()
        game.reset()
        assert layout() == first


class TestSnapshot:
    def test_shape(self, game):
        snap = game.snapshot()
        assert set(snap) == {
            "state", "round", "wave", "score", "tick", "wave_state",
            "player", "enemies", "projectiles", "powerups",
        }
        assert snap["player"] is None
        assert set(snap["projectiles"]) == {"player", "enemy", "beams"}

    def test_player_snapshot_reports_collision_line(self, game):
        _active(game)
        p = game.snapshot()["player"]
        assert p["collision_y"] == 525.0
