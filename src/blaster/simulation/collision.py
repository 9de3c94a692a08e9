# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""CollisionResolver — per-tick hit tests between the live populations.

Resolution order within one pass:
  1. player shots  x enemies     (radius test, pierce rules)
  2. player beams  x enemies     (rectangle test, damage every frame)
  3. enemy shots   x player      (radius test at the fixed collision line)
  4. potions       x player      (pickup radius at the fixed collision line)

The player is always tested at ``(player.x, player.collision_y)``.  The
collision line is a constant offset from the bottom of the playfield; the
player's animated ``visual_y`` never participates in a hit test.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enemy_types import BOSS_HIT_RADIUS
from .movement import frames
from .spatial import SpatialGrid

if TYPE_CHECKING:
    from blaster.comms.event_bus import EventBus
    from .enemies import Enemy, EnemyRegistry
    from .player import Player
    from .powerups import PowerupManager
    from .projectiles import ProjectileManager

PLAYER_HIT_RADIUS = 30.0
PICKUP_RADIUS = 40.0


@dataclass
class CollisionReport:
    """What happened during one resolution pass."""

    enemy_hits: int = 0
    shot_hits: int = 0
    enemies_defeated: list[str] = field(default_factory=list)
    player_hits: int = 0
    ignored_hits: int = 0
    shield_damage: float = 0.0
    health_damage: int = 0
    pickups: list[str] = field(default_factory=list)
    player_killed: bool = False


class CollisionResolver:
    """Applies damage and pickup policy for one tick."""

    def __init__(
        self,
        event_bus: EventBus,
        enemies: EnemyRegistry,
        projectiles: ProjectileManager,
        powerups: PowerupManager,
        cell_size: float = 64.0,
    ) -> None:
        self._event_bus = event_bus
        self._enemies = enemies
        self._projectiles = projectiles
        self._powerups = powerups
        self._grid: SpatialGrid[Enemy] = SpatialGrid(cell_size)

    def resolve(self, dt: float, player: Player | None) -> CollisionReport:
        report = CollisionReport()
        self._grid.rebuild(self._enemies.live())
        self._player_shots(report)
        self._beams(dt, report)
        if player is not None and player.alive:
            self._enemy_shots(player, report)
            self._pickups(player, report)
        return report

    # -- Player offence -----------------------------------------------------

    def _hit_enemy(self, enemy: Enemy, damage: int, report: CollisionReport) -> None:
        report.enemy_hits += 1
        self._event_bus.publish("enemy_hit", {
            "enemy_id": enemy.enemy_id, "damage": damage, "x": enemy.x, "y": enemy.y,
        })
        if self._enemies.damage(enemy, damage):
            report.enemies_defeated.append(enemy.enemy_id)

    def _player_shots(self, report: CollisionReport) -> None:
        for shot in list(self._projectiles.player.values()):
            candidates = []
            for enemy in self._grid.query_radius((shot.x, shot.y), BOSS_HIT_RADIUS):
                if enemy.health <= 0 or enemy.enemy_id in shot.hit_ids:
                    continue
                dist = math.hypot(enemy.x - shot.x, enemy.y - shot.y)
                if dist < enemy.hit_radius:
                    candidates.append((dist, enemy))
            if not candidates:
                continue
            candidates.sort(key=lambda c: c[0])
            report.shot_hits += 1
            if not shot.piercing:
                self._hit_enemy(candidates[0][1], shot.damage, report)
                self._projectiles.remove(shot)
                continue
            for _, enemy in candidates:
                shot.hit_ids.add(enemy.enemy_id)
                self._hit_enemy(enemy, shot.damage, report)

    def _beams(self, dt: float, report: CollisionReport) -> None:
        f = frames(dt)
        for beam in list(self._projectiles.beams.values()):
            beam.frame_carry += f
            ticks = int(beam.frame_carry + 1e-6)
            if ticks <= 0:
                continue
            beam.frame_carry = max(0.0, beam.frame_carry - ticks)
            half = beam.width / 2
            for enemy in self._grid.query_rect((beam.x - half, beam.top), (beam.x + half, beam.y)):
                if enemy.health > 0:
                    self._hit_enemy(enemy, beam.damage * ticks, report)

    # -- Player defence -----------------------------------------------------

    def _enemy_shots(self, player: Player, report: CollisionReport) -> None:
        px, py = player.collision_point
        for shot in list(self._projectiles.enemy.values()):
            if math.hypot(shot.x - px, shot.y - py) >= PLAYER_HIT_RADIUS:
                continue
            self._projectiles.remove(shot)
            result = player.take_hit(shot.damage)
            if not result.accepted:
                report.ignored_hits += 1
                continue
            report.player_hits += 1
            report.shield_damage += result.shield_damage
            report.health_damage += result.health_damage
            self._event_bus.publish("player_hit", {
                "character": player.char_id,
                "damage": shot.damage,
                "shield": player.shield,
                "health": player.health,
            })
            if result.shield_broken:
                self._event_bus.publish("shield_broken", {"character": player.char_id})
            if result.killed:
                report.player_killed = True
                return

    def _pickups(self, player: Player, report: CollisionReport) -> None:
        px, py = player.collision_point
        for potion in list(self._powerups.powerups.values()):
            if math.hypot(potion.x - px, potion.y - py) >= PICKUP_RADIUS:
                continue
            self._powerups.remove(potion)
            player.apply_powerup(potion.kind)
            report.pickups.append(potion.kind)
            self._event_bus.publish("powerup_collected", {
                "kind": potion.kind, "character": player.char_id,
            })
