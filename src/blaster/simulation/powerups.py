# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Potion drops — falling pickups spawned when enemies are defeated.

Kinds and roll weights:
  - health  (50%) -- dere regains a hit point, everyone else gains shield
  - power   (25%) -- next power level, or a refreshed special at max level
  - shield  (25%) -- shield boost

Potions fall under a light gravity and disappear once they drop below the
playfield.  The effect itself is applied by the player (see ``player.py``).
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass

from .movement import frames

POTION_KINDS: tuple[tuple[str, float], ...] = (
    ("health", 0.5),
    ("power", 0.25),
    ("shield", 0.25),
)
GRAVITY = 0.05  # pixels per frame^2
INITIAL_FALL_SPEED = 0.5
OFFSCREEN_MARGIN = 50.0


@dataclass
class Powerup:
    powerup_id: str
    kind: str
    x: float
    y: float
    vy: float = INITIAL_FALL_SPEED

    def to_dict(self) -> dict:
        return {"id": self.powerup_id, "kind": self.kind,
                "x": round(self.x, 2), "y": round(self.y, 2)}


class PowerupManager:
    """Owns falling potions."""

    def __init__(self, rng: random.Random, playfield_height: float = 800.0) -> None:
        self._rng = rng
        self._max_y = playfield_height + OFFSCREEN_MARGIN
        self._ids = itertools.count(1)
        self.powerups: dict[str, Powerup] = {}

    def roll_kind(self) -> str:
        roll = self._rng.random()
        for kind, weight in POTION_KINDS:
            roll -= weight
            if roll < 0:
                return kind
        return POTION_KINDS[-1][0]

    def drop(self, x: float, y: float, kind: str | None = None) -> Powerup:
        p = Powerup(f"potion-{next(self._ids)}", kind or self.roll_kind(), x, y)
        self.powerups[p.powerup_id] = p
        return p

    def remove(self, powerup: Powerup) -> None:
        self.powerups.pop(powerup.powerup_id, None)

    def clear(self) -> None:
        self.powerups.clear()

    def tick(self, dt: float) -> None:
        f = frames(dt)
        for p in list(self.powerups.values()):
            p.vy += GRAVITY * f
            p.y += p.vy * f
            if p.y > self._max_y:
                del self.powerups[p.powerup_id]

    def to_telemetry(self) -> list[dict]:
        return [p.to_dict() for p in self.powerups.values()]
