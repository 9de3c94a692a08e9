# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""ProjectileManager — lifecycle of every shot and beam in play.

Three pools, each a dict keyed by id (insertion order == age):
  - player  -- shots fired by the player character
  - enemy   -- shots fired by enemies
  - beams   -- rectangular damage volumes anchored at the player line

Creation APIs:
  - create_player_projectile(x, y, vx, vy, ...)  -- raw velocity
  - create_enemy_projectile(x, y, vx, vy, ...)   -- raw velocity
  - create_angled_projectile(origin, angle_deg, speed, ...)
  - create_targeted_projectile(origin, target, speed, ...)
  - create_beam(x, y, width, height, damage, duration | continuous)

Angles are screen angles: 0 points right, 90 points straight down.

Each tick moves every shot by its velocity (pixels per 60 Hz frame, scaled
by dt), re-aims homing shots at the nearest live enemy, and drops anything
that left the generous off-screen bounds.  The non-beam pools share a soft
cap; at the cap the oldest shot of the same pool is recycled rather than
growing the pools without limit.
"""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger

from .movement import frames

DEFAULT_SOFT_CAP = 500

# Expiry bounds (world coordinates, deliberately far off-screen)
PLAYER_MIN_Y = -3000.0
PLAYER_MAX_Y = 2000.0
ENEMY_MAX_Y = 1500.0
MAX_ABS_X = 1000.0

HOMING_MAX_SPEED = 8.0
HOMING_SPECIAL_MAX_SPEED = 12.0
ENEMY_ROTATION_SPEED = 0.1


@dataclass
class Projectile:
    """A single non-beam shot."""

    projectile_id: str
    owner: str  # "player" or "enemy"
    x: float
    y: float
    vx: float
    vy: float
    damage: int = 1
    width: float = 8.0
    height: float = 16.0
    piercing: bool = False
    homing: bool = False
    homing_strength: float = 0.3
    homing_delay: float = 0.0
    max_speed: float = HOMING_MAX_SPEED
    rotation: float = 0.0
    rotation_speed: float = 0.0
    special: bool = False
    age: float = 0.0
    alive: bool = True
    hit_ids: set[str] = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "id": self.projectile_id,
            "owner": self.owner,
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "vx": round(self.vx, 3),
            "vy": round(self.vy, 3),
            "damage": self.damage,
            "width": self.width,
            "height": self.height,
            "piercing": self.piercing,
            "homing": self.homing,
            "rotation": round(self.rotation, 3),
            "special": self.special,
        }


@dataclass
class Beam:
    """Vertical damage volume extending upward from ``y`` by ``height``.

    A continuous beam lives until released; otherwise it expires after
    ``remaining`` seconds.
    """

    beam_id: str
    x: float
    y: float
    width: float
    height: float
    damage: int
    remaining: float = 0.0
    continuous: bool = False
    special: bool = False
    alive: bool = True
    frame_carry: float = 0.0  # fractional frames not yet turned into damage

    @property
    def top(self) -> float:
        return self.y - self.height

    def to_dict(self) -> dict:
        return {
            "id": self.beam_id,
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "width": self.width,
            "height": self.height,
            "damage": self.damage,
            "continuous": self.continuous,
            "special": self.special,
        }


class ProjectileManager:
    """Owns the player, enemy and beam pools."""

    def __init__(self, soft_cap: int = DEFAULT_SOFT_CAP) -> None:
        if soft_cap < 1:
            raise ValueError(f"soft_cap must be at least 1, got {soft_cap}")
        self._soft_cap = soft_cap
        self._ids = itertools.count(1)
        self.player: dict[str, Projectile] = {}
        self.enemy: dict[str, Projectile] = {}
        self.beams: dict[str, Beam] = {}
        self.recycled = 0

    # -- Counts -------------------------------------------------------------

    @property
    def soft_cap(self) -> int:
        return self._soft_cap

    def count(self) -> int:
        """Number of live non-beam projectiles across both pools."""
        return len(self.player) + len(self.enemy)

    # -- Creation -----------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _admit(self, pool: dict[str, Projectile], projectile: Projectile) -> Projectile:
        if self.count() >= self._soft_cap:
            victim_pool = pool if pool else (self.enemy if pool is self.player else self.player)
            oldest = next(iter(victim_pool))
            del victim_pool[oldest]
            self.recycled += 1
            logger.debug(f"Projectile cap {self._soft_cap} reached, recycled {oldest}")
        pool[projectile.projectile_id] = projectile
        return projectile

    def create_player_projectile(self, x: float, y: float, vx: float, vy: float,
                                 **opts) -> Projectile:
        p = Projectile(self._next_id("pp"), "player", x, y, vx, vy, **opts)
        return self._admit(self.player, p)

    def create_enemy_projectile(self, x: float, y: float, vx: float, vy: float,
                                **opts) -> Projectile:
        opts.setdefault("rotation_speed", ENEMY_ROTATION_SPEED)
        p = Projectile(self._next_id("ep"), "enemy", x, y, vx, vy, **opts)
        return self._admit(self.enemy, p)

    def create_angled_projectile(self, origin: tuple[float, float], angle_deg: float,
                                 speed: float, owner: str = "enemy", **opts) -> Projectile:
        rad = math.radians(angle_deg)
        vx = math.cos(rad) * speed
        vy = math.sin(rad) * speed
        return self._create(owner, origin, vx, vy, **opts)

    def create_targeted_projectile(self, origin: tuple[float, float],
                                   target: tuple[float, float], speed: float,
                                   owner: str = "enemy", **opts) -> Projectile:
        """Fire from ``origin`` toward ``target``.

        A zero-length direction (target on top of the origin) fires
        straight down instead of producing a NaN velocity.
        """
        dx = target[0] - origin[0]
        dy = target[1] - origin[1]
        dist = math.hypot(dx, dy)
        if dist < 1e-6:
            return self._create(owner, origin, 0.0, speed, **opts)
        return self._create(owner, origin, dx / dist * speed, dy / dist * speed, **opts)

    def _create(self, owner: str, origin: tuple[float, float], vx: float, vy: float,
                **opts) -> Projectile:
        if owner == "player":
            return self.create_player_projectile(origin[0], origin[1], vx, vy, **opts)
        return self.create_enemy_projectile(origin[0], origin[1], vx, vy, **opts)

    def create_beam(self, x: float, y: float, width: float, height: float, damage: int,
                    duration: float | None = None, continuous: bool = False,
                    special: bool = False) -> Beam:
        if duration is None and not continuous:
            continuous = True
        beam = Beam(
            beam_id=self._next_id("beam"), x=x, y=y, width=width, height=height,
            damage=damage, remaining=duration or 0.0, continuous=continuous,
            special=special,
        )
        self.beams[beam.beam_id] = beam
        return beam

    def release_continuous_beams(self) -> None:
        """End every held beam (the fire button was released)."""
        for beam_id in [b.beam_id for b in self.beams.values() if b.continuous]:
            del self.beams[beam_id]

    # -- Removal ------------------------------------------------------------

    def remove(self, projectile: Projectile) -> None:
        projectile.alive = False
        pool = self.player if projectile.owner == "player" else self.enemy
        pool.pop(projectile.projectile_id, None)

    def clear(self) -> None:
        self.player.clear()
        self.enemy.clear()
        self.beams.clear()

    # -- Update -------------------------------------------------------------

    def tick(self, dt: float, enemy_positions: Iterable[tuple[float, float]] = ()) -> None:
        """Advance every pool by ``dt`` seconds.

        Args:
            dt: Seconds since the previous tick.
            enemy_positions: Positions of live enemies, used to steer
                homing shots.
        """
        f = frames(dt)
        targets = list(enemy_positions)

        for p in list(self.player.values()):
            p.age += dt
            if p.homing and p.age >= p.homing_delay and targets:
                self._steer(p, targets, f)
            p.x += p.vx * f
            p.y += p.vy * f
            if p.y < PLAYER_MIN_Y or p.y > PLAYER_MAX_Y or abs(p.x) > MAX_ABS_X:
                self.remove(p)

        for p in list(self.enemy.values()):
            p.age += dt
            p.x += p.vx * f
            p.y += p.vy * f
            p.rotation += p.rotation_speed * f
            if p.y > ENEMY_MAX_Y or abs(p.x) > MAX_ABS_X:
                self.remove(p)

        for beam in list(self.beams.values()):
            if beam.continuous:
                continue
            beam.remaining -= dt
            if beam.remaining <= 0:
                beam.alive = False
                del self.beams[beam.beam_id]

    @staticmethod
    def _steer(p: Projectile, targets: list[tuple[float, float]], f: float) -> None:
        tx, ty = min(targets, key=lambda t: (t[0] - p.x) ** 2 + (t[1] - p.y) ** 2)
        dx = tx - p.x
        dy = ty - p.y
        if dx == 0 and dy == 0:
            return
        angle = math.atan2(dy, dx)
        p.vx += math.cos(angle) * p.homing_strength * f
        p.vy += math.sin(angle) * p.homing_strength * f
        speed = math.hypot(p.vx, p.vy)
        if speed > p.max_speed:
            p.vx = p.vx / speed * p.max_speed
            p.vy = p.vy / speed * p.max_speed

    # -- Telemetry ----------------------------------------------------------

    def to_telemetry(self) -> dict:
        return {
            "player": [p.to_dict() for p in self.player.values()],
            "enemy": [p.to_dict() for p in self.enemy.values()],
            "beams": [b.to_dict() for b in self.beams.values()],
        }
