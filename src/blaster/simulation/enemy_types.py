# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Enemy type descriptor table.

Each enemy type id maps to one ``EnemyType`` describing everything the
registry needs: health, firing cadence and pattern, movement speed, point
value, potion drop chance and hit radius.  Descriptors are resolved once
when an enemy is built and the reference is stored on the entity, so no
per-tick code ever branches on the type string.

Tiers:
  - regular  -- darkling1..darkling10
  - midboss  -- darkmidboss1..darkmidboss11, phase-aware firing table
  - boss     -- darklingboss1..darklingboss3, end-of-round bosses
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from loguru import logger

DEFAULT_ENEMY_TYPE = "darkling1"

BOSS_HIT_RADIUS = 40.0
ENEMY_HIT_RADIUS = 25.0


@dataclass(frozen=True)
class EnemyType:
    """Static descriptor for one enemy type."""

    type_id: str
    health: int
    shot_cooldown: float  # seconds; 0 means the type never fires
    speed: float  # base pixels per frame
    speed_spread: float  # extra random speed in [0, spread)
    points: int
    potion_chance: float
    firing_pattern: str | None
    standalone_pattern: str = "sine"
    tier: str = "regular"  # regular, midboss, boss
    flee_after: float | None = None  # seconds in play before breaking off
    hit_radius: float = ENEMY_HIT_RADIUS

    @property
    def is_boss(self) -> bool:
        return self.tier == "boss"

    @property
    def is_midboss(self) -> bool:
        return self.tier == "midboss"

    @property
    def fires(self) -> bool:
        return self.shot_cooldown > 0 and self.firing_pattern is not None

    def roll_speed(self, rng: random.Random) -> float:
        if self.speed_spread <= 0:
            return self.speed
        return self.speed + rng.random() * self.speed_spread


def _regular(type_id: str, health: int, cooldown: float, points: int,
             pattern: str | None, potion: float = 0.05,
             standalone: str = "sine", flee_after: float | None = None) -> EnemyType:
    return EnemyType(
        type_id=type_id, health=health, shot_cooldown=cooldown,
        speed=2.0, speed_spread=1.0, points=points, potion_chance=potion,
        firing_pattern=pattern, standalone_pattern=standalone,
        flee_after=flee_after,
    )


def _midboss(type_id: str, health: int, cooldown: float, points: int,
             standalone: str) -> EnemyType:
    return EnemyType(
        type_id=type_id, health=health, shot_cooldown=cooldown,
        speed=1.0, speed_spread=0.5, points=points, potion_chance=0.25,
        firing_pattern=type_id, standalone_pattern=standalone, tier="midboss",
    )


def _boss(type_id: str, health: int, pattern: str) -> EnemyType:
    return EnemyType(
        type_id=type_id, health=health, shot_cooldown=1.5,
        speed=1.5, speed_spread=0.0, points=1000, potion_chance=0.5,
        firing_pattern=pattern, standalone_pattern="boss_zigzag", tier="boss",
        hit_radius=BOSS_HIT_RADIUS,
    )


_ENEMY_TYPES: dict[str, EnemyType] = {
    t.type_id: t for t in (
        _regular("darkling1", 1, 0.0, 100, None, flee_after=15.0),
        _regular("darkling2", 1, 2.5, 100, "targeted"),
        _regular("darkling3", 1, 2.5, 100, "targeted"),
        _regular("darkling4", 2, 2.5, 200, "angled_pair", standalone="sidestep"),
        _regular("darkling5", 2, 2.0, 200, "wide_pair"),
        _regular("darkling6", 2, 2.0, 200, "wide_pair", potion=0.15),
        _regular("darkling7", 3, 2.0, 300, "fan", standalone="fast_sidestep"),
        _regular("darkling8", 3, 1.5, 300, "narrow_spread", potion=0.15,
                 standalone="fast_sidestep"),
        _regular("darkling9", 3, 0.0, 300, None, flee_after=10.0),
        _regular("darkling10", 4, 1.5, 500, "random"),
        _midboss("darkmidboss1", 50, 1.8, 100, "figure8"),
        _midboss("darkmidboss2", 50, 2.2, 100, "erratic"),
        _midboss("darkmidboss3", 75, 1.9, 150, "oval"),
        _midboss("darkmidboss4", 75, 1.9, 150, "zigzag_approach"),
        _midboss("darkmidboss5", 100, 1.7, 200, "pendulum"),
        _midboss("darkmidboss6", 100, 1.7, 200, "stalk"),
        _midboss("darkmidboss7", 100, 1.7, 200, "spiral"),
        _midboss("darkmidboss8", 100, 1.7, 200, "square"),
        _midboss("darkmidboss9", 150, 1.6, 300, "hunt"),
        _midboss("darkmidboss10", 150, 1.6, 300, "chaos"),
        _midboss("darkmidboss11", 150, 1.3, 350, "desperate"),
        _boss("darklingboss1", 500, "v_burst"),
        _boss("darklingboss2", 1000, "circle"),
        _boss("darklingboss3", 2222, "boss3"),
    )
}


def get_enemy_type(type_id: str) -> EnemyType:
    """Resolve a type id, falling back to the default type with a warning."""
    descriptor = _ENEMY_TYPES.get(type_id)
    if descriptor is None:
        logger.warning(f"Unknown enemy type '{type_id}', using {DEFAULT_ENEMY_TYPE}")
        return _ENEMY_TYPES[DEFAULT_ENEMY_TYPE]
    return descriptor


def is_known_type(type_id: str) -> bool:
    return type_id in _ENEMY_TYPES


def all_enemy_types() -> list[EnemyType]:
    return list(_ENEMY_TYPES.values())
