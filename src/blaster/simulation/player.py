# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Player character — movement, firing, specials and the damage policy.

Three selectable characters, each with its own resource model:

  - dere     -- 3 hit points behind a 100-point shield that starts empty;
                shield soaks ``damage * 10`` per hit
  - aliza    -- a single hit point behind a full, regenerating shield;
                each hit costs a quarter of max shield
  - shinshi  -- 4 hit points, no shield, continuous beam weapon

Collision always uses the fixed ``collision_y`` line; ``visual_y`` carries
a small idle bob for the renderer and never feeds a hit test.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .movement import frames
from .projectiles import HOMING_SPECIAL_MAX_SPEED, Beam

if TYPE_CHECKING:
    from .enemies import EnemyRegistry
    from .projectiles import ProjectileManager

MAX_POWER_LEVEL = 3
PLAYER_X_LIMIT = 300.0
BOB_AMPLITUDE = 4.0
BOB_RATE = 3.0


@dataclass(frozen=True)
class Character:
    """Static stats for a selectable character."""

    char_id: str
    max_health: int
    max_shield: float
    start_shield: float
    speed: float  # pixels per frame
    fire_interval: float  # seconds between shots
    special_cooldown: float  # seconds
    shield_regen: float = 0.0  # shield per frame
    shield_regen_delay: float = 0.0  # seconds after a shield hit
    absorption: str = "health_only"  # scaled_shield, fractional_shield, health_only

    @property
    def has_shield(self) -> bool:
        return self.max_shield > 0


_CHARACTERS: dict[str, Character] = {
    "dere": Character(
        char_id="dere", max_health=3, max_shield=100.0, start_shield=0.0,
        speed=5.0, fire_interval=0.3, special_cooldown=5.0,
        absorption="scaled_shield",
    ),
    "aliza": Character(
        char_id="aliza", max_health=1, max_shield=100.0, start_shield=100.0,
        speed=5.0, fire_interval=0.2, special_cooldown=3.0,
        shield_regen=0.5, shield_regen_delay=3.0,
        absorption="fractional_shield",
    ),
    "shinshi": Character(
        char_id="shinshi", max_health=4, max_shield=0.0, start_shield=0.0,
        speed=4.0, fire_interval=0.05, special_cooldown=8.0,
    ),
}

CHARACTER_IDS = tuple(_CHARACTERS)

# dere: horizontal offsets per power level
_DERE_SPREADS: dict[int, tuple[float, ...]] = {
    1: (0.0,),
    2: (-15.0, 15.0),
    3: (-20.0, 0.0, 20.0),
}
_DERE_SHOT_SPEED = 20.0

_SHINSHI_BEAM_WIDTHS = {1: 15.0, 2: 30.0, 3: 45.0}

# Specials
DERE_FLASH_DAMAGE = 30
ALIZA_BURST_COUNT = 12
ALIZA_BURST_DAMAGE = 5
ALIZA_BURST_STRENGTH = 0.3
SHINSHI_SPECIAL_BEAMS = 5
SHINSHI_SPECIAL_WIDTH = 60.0
SHINSHI_SPECIAL_DAMAGE = 15
SHINSHI_SPECIAL_DURATION = 0.2


def get_character(char_id: str) -> Character:
    """Look up a character; unknown ids raise ``ValueError``."""
    try:
        return _CHARACTERS[char_id]
    except KeyError:
        raise ValueError(f"Unknown character '{char_id}' (expected one of {CHARACTER_IDS})") from None


@dataclass
class HitResult:
    """Outcome of one incoming hit."""

    accepted: bool
    shield_damage: float = 0.0
    health_damage: int = 0
    shield_broken: bool = False
    killed: bool = False


class Player:
    """Mutable player state driven by commands and ``tick``."""

    def __init__(self, character: Character, collision_y: float,
                 invulnerability_window: float = 0.6) -> None:
        self.character = character
        self.collision_y = collision_y
        self.invulnerability_window = invulnerability_window
        self.x = 0.0
        self.health = character.max_health
        self.shield = character.start_shield
        self.power_level = 1
        self.special_timer = 0.0  # seconds until the special is ready
        self.fire_timer = 0.0
        self.since_damage = math.inf
        self.since_shield_hit = math.inf
        self.moving_left = False
        self.moving_right = False
        self.firing = False
        self.aim: tuple[float, float] | None = None
        self.bob_time = 0.0
        self._beam: Beam | None = None
        self.last_special_shots = 0  # discrete shots created by the latest special

    # -- Derived state ------------------------------------------------------

    @property
    def char_id(self) -> str:
        return self.character.char_id

    @property
    def alive(self) -> bool:
        return self.health > 0

    @property
    def invulnerable(self) -> bool:
        return self.since_damage < self.invulnerability_window

    @property
    def special_ready(self) -> bool:
        return self.special_timer <= 0

    @property
    def visual_y(self) -> float:
        return self.collision_y + math.sin(self.bob_time * BOB_RATE) * BOB_AMPLITUDE

    @property
    def collision_point(self) -> tuple[float, float]:
        return (self.x, self.collision_y)

    # -- Movement -----------------------------------------------------------

    def nudge(self, direction: int, held: bool) -> None:
        """Move one step; a tap (not held) moves at half speed."""
        step = self.character.speed * (1.0 if held else 0.5)
        self.x = min(max(self.x + direction * step, -PLAYER_X_LIMIT), PLAYER_X_LIMIT)

    # -- Tick ---------------------------------------------------------------

    def tick(self, dt: float, projectiles: ProjectileManager) -> int:
        """Advance timers, movement and shield regen; fire if due.

        Returns the number of discrete shots fired this tick.
        """
        f = frames(dt)
        self.bob_time += dt
        self.since_damage += dt
        self.since_shield_hit += dt
        if self.special_timer > 0:
            self.special_timer = max(0.0, self.special_timer - dt)

        direction = int(self.moving_right) - int(self.moving_left)
        if direction:
            self.x += direction * self.character.speed * f
            self.x = min(max(self.x, -PLAYER_X_LIMIT), PLAYER_X_LIMIT)

        c = self.character
        if c.shield_regen > 0 and self.since_shield_hit >= c.shield_regen_delay:
            self.shield = min(c.max_shield, self.shield + c.shield_regen * f)

        self.fire_timer = max(0.0, self.fire_timer - dt)
        if c.char_id == "shinshi":
            self._tick_beam(projectiles)
            return 0
        if self.firing and self.fire_timer <= 0:
            self.fire_timer = c.fire_interval
            return self.fire(projectiles)
        return 0

    def _tick_beam(self, projectiles: ProjectileManager) -> None:
        if not self.firing:
            if self._beam is not None:
                projectiles.beams.pop(self._beam.beam_id, None)
                self._beam = None
            return
        width = _SHINSHI_BEAM_WIDTHS[self.power_level]
        damage = 2 if self.power_level >= 3 else 1
        if self._beam is None or self._beam.beam_id not in projectiles.beams:
            self._beam = projectiles.create_beam(
                self.x, self.collision_y, width, self.collision_y + 200.0, damage,
                continuous=True)
        self._beam.x = self.x
        self._beam.width = width
        self._beam.damage = damage

    def shot_direction(self) -> tuple[float, float]:
        """Unit vector toward the aim point; straight up when unset or behind."""
        if self.aim is None:
            return (0.0, -1.0)
        dx = self.aim[0] - self.x
        dy = self.aim[1] - self.collision_y
        dist = math.hypot(dx, dy)
        if dy >= 0 or dist < 1e-6:
            return (0.0, -1.0)
        return (dx / dist, dy / dist)

    def fire(self, projectiles: ProjectileManager) -> int:
        """Fire one volley for the current character and power level."""
        x, y = self.x, self.collision_y
        ux, uy = self.shot_direction()
        if self.char_id == "dere":
            offsets = _DERE_SPREADS[self.power_level]
            for ox in offsets:
                projectiles.create_player_projectile(
                    x + ox, y, ux * _DERE_SHOT_SPEED, uy * _DERE_SHOT_SPEED)
            return len(offsets)
        if self.char_id == "aliza":
            speed = 8.0 + self.power_level
            damage = min(self.power_level, 3)
            vx, vy = ux * speed, uy * speed
            if self.power_level == 1:
                projectiles.create_player_projectile(x, y, vx, vy, damage=damage)
                return 1
            if self.power_level == 2:
                for ox in (-8.0, 8.0):
                    projectiles.create_player_projectile(x + ox, y, vx, vy, damage=damage)
                return 2
            projectiles.create_player_projectile(x, y, vx, vy, damage=damage)
            for side in (-2.0, 2.0):
                projectiles.create_player_projectile(
                    x, y, vx + side, vy, damage=max(1, damage - 1))
            return 3
        return 0

    # -- Special ------------------------------------------------------------

    def trigger_special(self, projectiles: ProjectileManager, enemies: EnemyRegistry,
                        rng: random.Random) -> bool:
        """Use the character's special if it is ready.  Returns True if used."""
        if not self.special_ready:
            return False
        self.special_timer = self.character.special_cooldown
        self.last_special_shots = 0
        if self.char_id == "dere":
            for enemy in enemies.live():
                if not enemy.fleeing:
                    enemies.damage(enemy, DERE_FLASH_DAMAGE)
        elif self.char_id == "aliza":
            for i in range(ALIZA_BURST_COUNT):
                angle = -90.0 + (i - (ALIZA_BURST_COUNT - 1) / 2) * 15.0
                projectiles.create_angled_projectile(
                    (self.x, self.collision_y), angle, 5.0 + rng.random() * 3.0,
                    owner="player", damage=ALIZA_BURST_DAMAGE, homing=True,
                    homing_strength=ALIZA_BURST_STRENGTH, homing_delay=i * 0.05,
                    max_speed=HOMING_SPECIAL_MAX_SPEED, special=True,
                )
            self.last_special_shots = ALIZA_BURST_COUNT
        else:
            half = (SHINSHI_SPECIAL_BEAMS - 1) / 2
            for i in range(SHINSHI_SPECIAL_BEAMS):
                projectiles.create_beam(
                    (i - half) * 120.0, self.collision_y, SHINSHI_SPECIAL_WIDTH,
                    self.collision_y + 200.0, SHINSHI_SPECIAL_DAMAGE,
                    duration=SHINSHI_SPECIAL_DURATION, special=True,
                )
        return True

    # -- Damage -------------------------------------------------------------

    def take_hit(self, damage: int = 1) -> HitResult:
        """Route one hit through the character's absorption policy.

        Hits that land inside the invulnerability window change nothing.
        """
        if self.invulnerable or not self.alive:
            return HitResult(accepted=False)
        self.since_damage = 0.0
        result = HitResult(accepted=True)
        c = self.character
        if c.absorption == "scaled_shield" and self.shield > 0:
            before = self.shield
            self.shield = max(0.0, self.shield - damage * 10)
            result.shield_damage = before - self.shield
            result.shield_broken = self.shield == 0
        elif c.absorption == "fractional_shield" and self.shield > 0:
            before = self.shield
            self.shield = max(0.0, self.shield - c.max_shield * 0.25)
            self.since_shield_hit = 0.0
            result.shield_damage = before - self.shield
            result.shield_broken = self.shield == 0
        else:
            loss = 1 if c.absorption == "fractional_shield" else damage
            loss = min(loss, self.health)
            self.health -= loss
            result.health_damage = loss
        result.killed = self.health <= 0
        return result

    # -- Powerups -----------------------------------------------------------

    def apply_powerup(self, kind: str) -> None:
        c = self.character
        if kind == "health":
            if c.char_id == "dere" or not c.has_shield:
                self.health = min(c.max_health, self.health + 1)
            else:
                self.shield = min(c.max_shield, self.shield + 50.0)
        elif kind == "shield":
            bonus = 75.0 if c.char_id == "aliza" else 50.0
            self.shield = min(c.max_shield, self.shield + bonus)
        elif kind == "power":
            if self.power_level < MAX_POWER_LEVEL:
                self.power_level += 1
            else:
                self.special_timer = 0.0

    # -- Telemetry ----------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "character": self.char_id,
            "x": round(self.x, 2),
            "y": round(self.visual_y, 2),
            "collision_y": self.collision_y,
            "health": self.health,
            "max_health": self.character.max_health,
            "shield": round(self.shield, 2),
            "max_shield": self.character.max_shield,
            "power_level": self.power_level,
            "special_ready": self.special_ready,
            "special_cooldown": round(self.special_timer, 3),
            "invulnerable": self.invulnerable,
            "firing": self.firing,
        }
