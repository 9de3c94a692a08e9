# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""EnemyRegistry — owns every live enemy, keyed by id.

Each tick, for every enemy:
  1. Advance its clocks (time alive, crucible phase timer, shot timer)
  2. Move it:
       - in formation: motion descriptor + shared formation offset + jitter
       - out of formation: the type's standalone velocity pattern
       - flyby: fixed slow horizontal crossing
       - fleeing: drift away while fading out
  3. Clamp mid-bosses on screen (the clamp also shifts their base)
  4. Fire its pattern when the shot timer runs out

Defeat (health reaches 0) awards points through ``on_defeat``, publishes
``enemy_defeated`` and rolls the type's potion drop.

Flyby enemies come from a sub-spawner on its own timer.  They never count
toward wave completion and remove themselves once off-screen.
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from loguru import logger

from .enemy_types import EnemyType, get_enemy_type
from .firing import fire_pattern
from .formations import FormationEntry, phase_positions
from .movement import (
    Motion,
    Vec,
    clamp_to_screen,
    formation_position,
    frames,
    jitter,
    standalone_velocity,
)

if TYPE_CHECKING:
    from blaster.comms.event_bus import EventBus
    from .powerups import PowerupManager
    from .projectiles import ProjectileManager

FADE_PER_FRAME = 0.05
FLYBY_SPEED = 1.0
FLYBY_MARGIN = 40.0
INITIAL_SHOT_JITTER = 2.0  # seconds of random extra delay before a first shot


@dataclass
class Enemy:
    """A live enemy.  ``kind`` is the resolved type descriptor."""

    enemy_id: str
    kind: EnemyType
    x: float
    y: float
    base: Vec
    health: int
    max_health: int
    speed: float
    shot_timer: float
    motion: Motion | None = None
    in_formation: bool = True
    is_flyby: bool = False
    fleeing: bool = False
    alpha: float = 1.0
    alive_time: float = 0.0
    standalone_time: float = 0.0
    direction: int = 1
    jitter_seed: float = 0.0
    role: str | None = None
    group: int | None = None
    phases: list[dict] | None = None
    phase_slot: int = 0
    phase_index: int = 0
    phase_elapsed: float = 0.0
    flagged_boss: bool = False

    @property
    def type_id(self) -> str:
        return self.kind.type_id

    @property
    def is_boss(self) -> bool:
        return self.flagged_boss or self.kind.is_boss

    @property
    def is_midboss(self) -> bool:
        return self.kind.is_midboss

    @property
    def points(self) -> int:
        return self.kind.points

    @property
    def hit_radius(self) -> float:
        return self.kind.hit_radius

    @property
    def health_frac(self) -> float:
        if self.max_health <= 0:
            return 0.0
        return self.health / self.max_health

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        return {
            "id": self.enemy_id,
            "type": self.type_id,
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "health": self.health,
            "max_health": self.max_health,
            "boss": self.is_boss,
            "midboss": self.is_midboss,
            "flyby": self.is_flyby,
            "fleeing": self.fleeing,
            "alpha": round(self.alpha, 3),
            "role": self.role,
        }


class EnemyRegistry:
    """Owns live enemies and the flyby sub-spawner.

    Args:
        event_bus: Receives ``enemy_defeated``.
        projectiles: Enemy shots are created here.
        rng: Injected random source (speeds, shot timing, potion rolls,
            pattern choice).
        powerups: Potion drops are handed to this manager.
        on_defeat: Called with each defeated enemy (scoring, stats).
    """

    def __init__(
        self,
        event_bus: EventBus,
        projectiles: ProjectileManager,
        rng: random.Random,
        powerups: PowerupManager | None = None,
        playfield_width: float = 600.0,
        playfield_height: float = 800.0,
        flyby_interval: float = 12.0,
        on_defeat: Callable[[Enemy], None] | None = None,
    ) -> None:
        self._event_bus = event_bus
        self._projectiles = projectiles
        self._rng = rng
        self._powerups = powerups
        self._half_width = playfield_width / 2
        self._height = playfield_height
        self._flyby_interval = flyby_interval
        self._flyby_timer = flyby_interval
        self._flyby_types: tuple[str, ...] = ()
        self._ids = itertools.count(1)
        self.on_defeat = on_defeat
        self.enemies: dict[str, Enemy] = {}

    # -- Spawning -----------------------------------------------------------

    def _new_enemy(self, kind: EnemyType, pos: Vec) -> Enemy:
        return Enemy(
            enemy_id=f"{kind.type_id}-{next(self._ids)}",
            kind=kind,
            x=pos[0],
            y=pos[1],
            base=pos,
            health=kind.health,
            max_health=kind.health,
            speed=kind.roll_speed(self._rng),
            shot_timer=kind.shot_cooldown + self._rng.random() * INITIAL_SHOT_JITTER,
            direction=self._rng.choice((-1, 1)),
            jitter_seed=self._rng.random() * 100.0,
        )

    def spawn(self, entry: FormationEntry) -> Enemy:
        """Create an enemy from a formation entry."""
        enemy = self._new_enemy(get_enemy_type(entry.type_id), entry.position)
        enemy.motion = entry.motion
        enemy.role = entry.role
        enemy.group = entry.group
        enemy.phases = entry.phases
        enemy.phase_slot = entry.phase_slot
        enemy.flagged_boss = entry.is_boss
        # Mid-bosses roam on their own pattern unless the layout pins them
        if enemy.is_midboss and entry.motion is None and entry.phases is None:
            enemy.in_formation = False
        self.enemies[enemy.enemy_id] = enemy
        return enemy

    def spawn_flyby(self, type_id: str, from_left: bool | None = None,
                    y: float | None = None) -> Enemy:
        """Spawn a background enemy crossing the screen horizontally."""
        if from_left is None:
            from_left = self._rng.random() < 0.5
        if y is None:
            y = 40.0 + self._rng.random() * 160.0
        x = -(self._half_width + FLYBY_MARGIN) if from_left else self._half_width + FLYBY_MARGIN
        enemy = self._new_enemy(get_enemy_type(type_id), (x, y))
        enemy.is_flyby = True
        enemy.in_formation = False
        enemy.direction = 1 if from_left else -1
        self.enemies[enemy.enemy_id] = enemy
        logger.debug(f"Flyby {enemy.enemy_id} entering from {'left' if from_left else 'right'}")
        return enemy

    def set_flyby_types(self, types: tuple[str, ...]) -> None:
        self._flyby_types = tuple(types)

    # -- Queries ------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.enemies)

    def get(self, enemy_id: str) -> Enemy | None:
        return self.enemies.get(enemy_id)

    def live(self) -> list[Enemy]:
        return list(self.enemies.values())

    def remaining(self) -> int:
        """Enemies that still hold the wave open (no flybys, no fleeing)."""
        return sum(1 for e in self.enemies.values() if not e.is_flyby and not e.fleeing)

    def boss_count(self) -> int:
        return sum(1 for e in self.enemies.values() if e.is_boss and e.health > 0)

    def targetable_positions(self) -> list[Vec]:
        return [e.position for e in self.enemies.values() if not e.fleeing]

    # -- Damage -------------------------------------------------------------

    def damage(self, enemy: Enemy, amount: int) -> bool:
        """Apply ``amount`` damage.  Returns True if this defeated the enemy."""
        if enemy.enemy_id not in self.enemies or enemy.health <= 0:
            return False
        enemy.health = max(0, enemy.health - amount)
        if enemy.health > 0:
            return False
        self._defeat(enemy)
        return True

    def _defeat(self, enemy: Enemy) -> None:
        self.enemies.pop(enemy.enemy_id, None)
        self._event_bus.publish("enemy_defeated", {
            "enemy_id": enemy.enemy_id,
            "type": enemy.type_id,
            "points": enemy.points,
            "boss": enemy.is_boss,
            "x": enemy.x,
            "y": enemy.y,
        })
        if self.on_defeat is not None:
            self.on_defeat(enemy)
        if self._powerups is not None and self._rng.random() < enemy.kind.potion_chance:
            self._powerups.drop(enemy.x, enemy.y)

    def clear(self) -> None:
        self.enemies.clear()
        self._flyby_timer = self._flyby_interval

    # -- Update -------------------------------------------------------------

    def tick(self, dt: float, wave_time: float, formation_offset: Vec,
             player_target: Vec) -> None:
        """Advance every enemy by ``dt`` seconds.

        Args:
            dt: Seconds since the previous tick.
            wave_time: Seconds since the wave started (drives motion).
            formation_offset: Shared drift for in-formation enemies.
            player_target: Point targeted shots aim at.
        """
        f = frames(dt)
        self._tick_flyby_spawner(dt)

        for enemy in list(self.enemies.values()):
            enemy.alive_time += dt

            if enemy.fleeing:
                vx, vy = standalone_velocity("flee", enemy.alive_time, 1.0, enemy.direction)
                enemy.x += vx * f
                enemy.y += vy * f
                enemy.alpha -= FADE_PER_FRAME * f
                if enemy.alpha <= 0:
                    del self.enemies[enemy.enemy_id]
                continue

            if enemy.is_flyby:
                enemy.x += FLYBY_SPEED * enemy.direction * f
                if abs(enemy.x) > self._half_width + FLYBY_MARGIN + 1.0:
                    del self.enemies[enemy.enemy_id]
                continue

            flee_after = enemy.kind.flee_after
            if flee_after is not None and enemy.alive_time >= flee_after:
                enemy.fleeing = True
                enemy.in_formation = False
                logger.debug(f"{enemy.enemy_id} broke off after {flee_after:.0f}s")
                continue

            if enemy.phases:
                self._advance_phase(enemy, dt)

            if enemy.in_formation:
                if enemy.motion is not None:
                    enemy.motion.advance(dt)
                fx, fy = formation_position(enemy.motion, enemy.base, wave_time)
                jx, jy = jitter(enemy.jitter_seed, wave_time)
                enemy.x = fx + formation_offset[0] + jx
                enemy.y = fy + formation_offset[1] + jy
            else:
                enemy.standalone_time += dt
                vx, vy = standalone_velocity(enemy.kind.standalone_pattern, enemy.standalone_time,
                                             enemy.health_frac, enemy.direction)
                enemy.x += vx * enemy.speed * f
                enemy.y += vy * enemy.speed * f

            if enemy.is_midboss:
                (enemy.x, enemy.y), shift = clamp_to_screen(
                    (enemy.x, enemy.y), self._half_width, self._height)
                if shift != (0.0, 0.0):
                    enemy.base = (enemy.base[0] + shift[0], enemy.base[1] + shift[1])

            if enemy.kind.fires:
                enemy.shot_timer -= dt
                if enemy.shot_timer <= 0:
                    fire_pattern(enemy.kind.firing_pattern, enemy.position, player_target,
                                 self._projectiles, self._rng, enemy.health_frac)
                    enemy.shot_timer += enemy.kind.shot_cooldown
                    if enemy.shot_timer <= 0:
                        enemy.shot_timer = enemy.kind.shot_cooldown

    def break_formation(self, enemy: Enemy) -> None:
        """Detach ``enemy`` from the shared formation; it moves on its own."""
        enemy.in_formation = False
        enemy.standalone_time = 0.0

    def _advance_phase(self, enemy: Enemy, dt: float) -> None:
        phases = enemy.phases
        enemy.phase_elapsed += dt
        duration = float(phases[enemy.phase_index].get("duration", 10.0))
        if enemy.phase_elapsed < duration:
            return
        enemy.phase_elapsed -= duration
        enemy.phase_index = (enemy.phase_index + 1) % len(phases)
        count = len(phases[0]["enemies"])
        slots = phase_positions(phases[enemy.phase_index], count)
        if enemy.phase_slot < len(slots):
            enemy.base = slots[enemy.phase_slot]

    def _tick_flyby_spawner(self, dt: float) -> None:
        if self._flyby_interval <= 0 or not self._flyby_types:
            return
        self._flyby_timer -= dt
        if self._flyby_timer > 0:
            return
        self._flyby_timer += self._flyby_interval
        self.spawn_flyby(self._rng.choice(self._flyby_types))

    # -- Telemetry ----------------------------------------------------------

    def to_telemetry(self) -> list[dict]:
        return [e.to_dict() for e in self.enemies.values()]
