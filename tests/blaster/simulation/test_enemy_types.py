# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Unit tests for the enemy descriptor table."""

from __future__ import annotations

import random

import pytest

from blaster.simulation.enemy_types import (
    BOSS_HIT_RADIUS,
    DEFAULT_ENEMY_TYPE,
    all_enemy_types,
    get_enemy_type,
)

pytestmark = pytest.mark.unit


class TestLookup:
    def test_known_type(self):
        t = get_enemy_type("darkling7")
        assert t.health == 3
        assert t.points == 300

    def test_unknown_type_falls_back(self):
        assert get_enemy_type("nonsense").type_id == DEFAULT_ENEMY_TYPE

    def test_table_size(self):
        assert len(all_enemy_types()) == 24


class TestTiers:
    def test_bosses(self):
        boss = get_enemy_type("darklingboss3")
        assert boss.is_boss
        assert boss.health == 2222
        assert boss.hit_radius == BOSS_HIT_RADIUS

    def test_midbosses_fire_their_own_pattern(self):
        mid = get_enemy_type("darkmidboss4")
        assert mid.is_midboss
        assert mid.firing_pattern == "darkmidboss4"

    def test_non_firing_types(self):
        assert not get_enemy_type("darkling1").fires
        assert not get_enemy_type("darkling9").fires
        assert get_enemy_type("darkling2").fires

    def test_fleeing_types(self):
        assert get_enemy_type("darkling1").flee_after == 15.0
        assert get_enemy_type("darkling2").flee_after is None


class TestSpeed:
    def test_roll_within_spread(self):
        t = get_enemy_type("darkling2")
        rng = random.Random(3)
        for _ in range(20):
            assert t.speed <= t.roll_speed(rng) < t.speed + t.speed_spread

    def test_no_spread_is_fixed(self):
        t = get_enemy_type("darklingboss1")
        assert t.roll_speed(random.Random(1)) == t.speed
