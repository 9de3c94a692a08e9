# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for CollisionResolver — pierce rules, beams, player hits, pickups."""

from __future__ import annotations

import pytest

from blaster.simulation.collision import CollisionResolver
from blaster.simulation.enemies import EnemyRegistry
from blaster.simulation.formations import FormationEntry
from blaster.simulation.player import Player, get_character

pytestmark = pytest.mark.unit

COLLISION_Y = 525.0


@pytest.fixture
def registry(bus, projectiles, rng) -> EnemyRegistry:
    return EnemyRegistry(bus, projectiles, rng)


@pytest.fixture
def resolver(bus, registry, projectiles, powerups) -> CollisionResolver:
    return CollisionResolver(bus, registry, projectiles, powerups)


def _enemy(registry, type_id="darkling7", pos=(0.0, 100.0), **kw):
    return registry.spawn(FormationEntry(type_id, pos, **kw))


def _player(char_id="dere") -> Player:
    return Player(get_character(char_id), COLLISION_Y)


# ---------------------------------------------------------------------------
# Player shots
# ---------------------------------------------------------------------------

class TestPlayerShots:
    def test_non_piercing_hits_nearest_only(self, resolver, registry, projectiles):
        far = _enemy(registry, pos=(0.0, 100.0))
        near = _enemy(registry, pos=(10.0, 100.0))
        shot = projectiles.create_player_projectile(8.0, 100.0, 0, -10)
        report = resolver.resolve(1 / 60, None)
        assert near.health == 2
        assert far.health == 3
        assert shot.projectile_id not in projectiles.player
        assert report.enemy_hits == 1
        assert report.shot_hits == 1

    def test_piercing_hits_all_and_survives(self, resolver, registry, projectiles):
        a = _enemy(registry, pos=(0.0, 100.0))
        b = _enemy(registry, pos=(10.0, 100.0))
        shot = projectiles.create_player_projectile(5.0, 100.0, 0, -10, piercing=True)
        report = resolver.resolve(1 / 60, None)
        assert (a.health, b.health) == (2, 2)
        assert shot.projectile_id in projectiles.player
        assert report.enemy_hits == 2
        assert report.shot_hits == 1

    def test_piercing_never_hits_same_enemy_twice(self, resolver, registry, projectiles):
        enemy = _enemy(registry)
        projectiles.create_player_projectile(0.0, 100.0, 0, -10, piercing=True)
        resolver.resolve(1 / 60, None)
        resolver.resolve(1 / 60, None)
        assert enemy.health == 2

    def test_miss(self, resolver, registry, projectiles):
        enemy = _enemy(registry)
        projectiles.create_player_projectile(100.0, 100.0, 0, -10)
        assert resolver.resolve(1 / 60, None).enemy_hits == 0
        assert enemy.health == 3

    def test_boss_has_larger_hit_radius(self, resolver, registry, projectiles):
        boss = _enemy(registry, "darklingboss1", (0.0, 100.0), is_boss=True)
        projectiles.create_player_projectile(35.0, 100.0, 0, -10)
        resolver.resolve(1 / 60, None)
        assert boss.health == 499

    def test_regular_radius_excludes_same_distance(self, resolver, registry, projectiles):
        enemy = _enemy(registry)
        projectiles.create_player_projectile(35.0, 100.0, 0, -10)
        resolver.resolve(1 / 60, None)
        assert enemy.health == 3
    def test_defeat_reported_and_published(self, bus, resolver, registry, projectiles,
                                           drain_queue):
        hits = bus.subscribe("enemy_hit")
        enemy = _enemy(registry, "darkling2")
        projectiles.create_player_projectile(0.0, 100.0, 0, -10)
        report = resolver.resolve(1 / 60, None)
        assert report.enemies_defeated == [enemy.enemy_id]
        assert drain_queue(hits)[0]["enemy_id"] == enemy.enemy_id


# ---------------------------------------------------------------------------
# Beams
# ---------------------------------------------------------------------------

class TestBeams:
    def test_beam_damages_every_frame(self, resolver, registry, projectiles):
        enemy = _enemy(registry, "darkmidboss1", (0.0, 100.0))
        projectiles.create_beam(0.0, COLLISION_Y, 40.0, 600.0, 2)
        resolver.resolve(3 / 60, None)
        assert enemy.health == 50 - 6

    def test_fractional_frames_carry_over(self, resolver, registry, projectiles):
        enemy = _enemy(registry, "darkmidboss1", (0.0, 100.0))
        projectiles.create_beam(0.0, COLLISION_Y, 40.0, 600.0, 1)
        resolver.resolve(1 / 120, None)
        assert enemy.health == 50
        resolver.resolve(1 / 120, None)
        assert enemy.health == 49

    def test_outside_width_untouched(self, resolver, registry, projectiles):
        enemy = _enemy(registry, pos=(50.0, 100.0))
        projectiles.create_beam(0.0, COLLISION_Y, 40.0, 600.0, 5)
        resolver.resolve(1 / 60, None)
        assert enemy.health == 3

    def test_edge_of_width_is_inside(self, resolver, registry, projectiles):
        inside = _enemy(registry, pos=(20.0, 100.0))
        outside = _enemy(registry, pos=(20.5, 100.0))
        projectiles.create_beam(0.0, COLLISION_Y, 40.0, 600.0, 1)
        resolver.resolve(1 / 60, None)
        assert inside.health == 2
        assert outside.health == 3

    def test_enemy_below_anchor_untouched(self, resolver, registry, projectiles):
        enemy = _enemy(registry, pos=(0.0, COLLISION_Y + 10))
        projectiles.create_beam(0.0, COLLISION_Y, 40.0, 600.0, 1)
        resolver.resolve(1 / 60, None)
        assert enemy.health == 3


# ---------------------------------------------------------------------------
# Enemy shots against the player
# ---------------------------------------------------------------------------

class TestPlayerHits:
    def test_hit_at_fixed_collision_line(self, resolver, projectiles):
        player = _player()
        player.bob_time = 0.5  # visual_y is off the collision line
        projectiles.create_enemy_projectile(0.0, COLLISION_Y + 5.0, 0, 3)
        report = resolver.resolve(1 / 60, player)
        assert report.player_hits == 1
        assert player.health == 2
        assert not projectiles.enemy

    def test_miss_outside_radius(self, resolver, projectiles):
        player = _player()
        projectiles.create_enemy_projectile(0.0, COLLISION_Y + 30.0, 0, 3)
        assert resolver.resolve(1 / 60, player).player_hits == 0
        assert len(projectiles.enemy) == 1

    def test_invulnerable_hit_consumed_but_ignored(self, resolver, projectiles):
        player = _player("shinshi")
        projectiles.create_enemy_projectile(0.0, COLLISION_Y, 0, 3)
        projectiles.create_enemy_projectile(5.0, COLLISION_Y, 0, 3)
        report = resolver.resolve(1 / 60, player)
        assert report.player_hits == 1
        assert report.ignored_hits == 1
        assert player.health == 3
        assert not projectiles.enemy

    def test_shield_absorbs_before_health(self, bus, resolver, projectiles, drain_queue):
        q = bus.subscribe("player_hit")
        player = _player("aliza")
        projectiles.create_enemy_projectile(0.0, COLLISION_Y, 0, 3)
        report = resolver.resolve(1 / 60, player)
        assert report.shield_damage == 25.0
        assert report.health_damage == 0
        (event,) = drain_queue(q)
        assert event == {"character": "aliza", "damage": 1, "shield": 75.0, "health": 1}

    def test_shield_broken_event(self, bus, resolver, projectiles, drain_queue):
        q = bus.subscribe("shield_broken")
        player = _player("dere")
        player.shield = 10.0
        projectiles.create_enemy_projectile(0.0, COLLISION_Y, 0, 3)
        resolver.resolve(1 / 60, player)
        assert drain_queue(q) == [{"character": "dere"}]

    def test_killing_blow_reported(self, resolver, projectiles):
        player = _player("aliza")
        player.shield = 0.0
        projectiles.create_enemy_projectile(0.0, COLLISION_Y, 0, 3)
        assert resolver.resolve(1 / 60, player).player_killed

    def test_no_player_leaves_enemy_shots(self, resolver, projectiles):
        projectiles.create_enemy_projectile(0.0, COLLISION_Y, 0, 3)
        resolver.resolve(1 / 60, None)
        assert len(projectiles.enemy) == 1


# ---------------------------------------------------------------------------
# Pickups
# ---------------------------------------------------------------------------

class TestPickups:
    def test_collect_in_radius(self, bus, resolver, powerups, drain_queue):
        q = bus.subscribe("powerup_collected")
        player = _player()
        powerups.drop(10.0, COLLISION_Y + 20.0, kind="power")
        report = resolver.resolve(1 / 60, player)
        assert report.pickups == ["power"]
        assert player.power_level == 2
        assert not powerups.powerups
        assert drain_queue(q) == [{"kind": "power", "character": "dere"}]

    def test_out_of_reach(self, resolver, powerups):
        powerups.drop(100.0, COLLISION_Y, kind="power")
        assert resolver.resolve(1 / 60, _player()).pickups == []
