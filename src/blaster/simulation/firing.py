# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Enemy firing patterns.

A pattern is a list of alternatives; each alternative is a list of volleys
fired together.  When a pattern has several alternatives one is chosen per
shot with the injected random source (``random`` for darkling10, the coin
flip of darklingboss3).

Mid-bosses use a phase-aware table instead: each phase applies while the
enemy's health fraction is at or above ``min_health``, and picks one of its
weighted options per shot.

Volley kinds:
  - angles    -- one shot per listed angle (90 = straight down)
  - radial    -- full circle, one shot every ``step`` degrees
  - targeted  -- one shot aimed at the player's collision point
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from .projectiles import ProjectileManager

Vec = tuple[float, float]

MIDBOSS_BASE_SPEED = 3.5
DEFAULT_SHOT_SIZE = 14.0
BOSS_SHOT_SIZE = 40.0


@dataclass(frozen=True)
class Volley:
    kind: str  # angles, radial, targeted
    speed: float
    angles: tuple[float, ...] = ()
    step: float = 0.0
    size: float = DEFAULT_SHOT_SIZE
    damage: int = 1


def _spread(start: float, stop: float, step: float) -> tuple[float, ...]:
    """Inclusive angle range."""
    out = []
    a = start
    while a <= stop + 1e-9:
        out.append(round(a, 4))
        a += step
    return tuple(out)


def _angles(speed: float, *angles: float, size: float = DEFAULT_SHOT_SIZE) -> Volley:
    return Volley("angles", speed, angles=tuple(angles), size=size)


def _targeted(speed: float, size: float = DEFAULT_SHOT_SIZE) -> Volley:
    return Volley("targeted", speed, size=size)


def _radial(speed: float, step: float, size: float = DEFAULT_SHOT_SIZE) -> Volley:
    return Volley("radial", speed, step=step, size=size)


# ---------------------------------------------------------------------------
# Regular and boss patterns
# ---------------------------------------------------------------------------

PATTERNS: dict[str, list[list[Volley]]] = {
    "straight": [[_angles(3.0, 90.0)]],
    "targeted": [[_targeted(3.0)]],
    "angled_pair": [[_angles(3.5, 75.0, 105.0)]],
    "wide_pair": [[_angles(4.0, 80.0, 100.0)]],
    "fan": [[_angles(4.0, *_spread(75.0, 105.0, 15.0))]],
    "narrow_spread": [[_angles(4.5, 85.0, 95.0)]],
    "random": [
        [_targeted(3.0)],
        [_angles(4.0, *_spread(75.0, 105.0, 15.0))],
        [_angles(4.5, 85.0, 95.0)],
    ],
    "v_burst": [[_angles(4.0, *_spread(75.0, 105.0, 7.5), size=BOSS_SHOT_SIZE)]],
    "circle": [[_radial(4.0, 45.0, size=BOSS_SHOT_SIZE)]],
    "boss3": [
        [_targeted(4.0, size=BOSS_SHOT_SIZE), _angles(4.0, 70.0, 110.0, size=BOSS_SHOT_SIZE)],
        [_radial(4.0, 30.0, size=BOSS_SHOT_SIZE)],
    ],
}


# ---------------------------------------------------------------------------
# Mid-boss phase table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MidBossPhase:
    min_health: float  # phase applies while health fraction >= this
    options: tuple[tuple[float, tuple[Volley, ...]], ...] = field(default_factory=tuple)


def _phase(min_health: float, *options: tuple[float, list[Volley]]) -> MidBossPhase:
    return MidBossPhase(min_health, tuple((w, tuple(v)) for w, v in options))


_S = MIDBOSS_BASE_SPEED

MIDBOSS_PATTERNS: dict[str, list[MidBossPhase]] = {
    "darkmidboss1": [_phase(0.0, (1.0, [_angles(_S * 1.1, 85.0, 95.0)]))],
    "darkmidboss2": [_phase(0.0, (1.0, [_angles(_S, *_spread(75.0, 105.0, 15.0))]))],
    "darkmidboss3": [_phase(
        0.0,
        (0.6, [_targeted(_S * 1.2), _angles(_S, 70.0, 110.0)]),
        (0.4, [_angles(_S, *_spread(75.0, 105.0, 15.0))]),
    )],
    "darkmidboss4": [_phase(
        0.0,
        (0.6, [_targeted(_S * 1.2), _angles(_S, 70.0, 110.0)]),
        (0.4, [_angles(_S * 1.1, 85.0, 95.0)]),
    )],
    "darkmidboss5": [_phase(0.0, (1.0, [_angles(_S * 1.3, 80.0, 90.0, 100.0)]))],
    "darkmidboss6": [_phase(0.0, (1.0, [_angles(_S * 1.3, 80.0, 90.0, 100.0)]))],
    "darkmidboss7": [_phase(
        0.0,
        (0.7, [_angles(_S * 1.3, 80.0, 90.0, 100.0)]),
        (0.3, [_targeted(_S * 1.3)]),
    )],
    "darkmidboss8": [_phase(
        0.0,
        (0.7, [_angles(_S * 1.3, 80.0, 90.0, 100.0)]),
        (0.3, [_radial(_S, 45.0)]),
    )],
    "darkmidboss9": [_phase(
        0.0,
        (1.0, [_angles(_S * 1.2, *_spread(70.0, 110.0, 10.0)), _targeted(_S * 1.4)]),
    )],
    "darkmidboss10": [_phase(
        0.0,
        (0.5, [_angles(_S * 1.2, *_spread(70.0, 110.0, 10.0)), _targeted(_S * 1.4)]),
        (0.5, [_targeted(_S * 1.4), _angles(_S * 1.2, 80.0, 100.0)]),
    )],
    "darkmidboss11": [
        _phase(0.5, (1.0, [_radial(_S, 22.5)])),
        _phase(0.0, (0.7, [_radial(_S, 15.0)]), (0.3, [_radial(_S * 1.2, 22.5), _targeted(_S * 1.4)])),
    ],
}


def midboss_phase(type_id: str, health_frac: float) -> MidBossPhase | None:
    phases = MIDBOSS_PATTERNS.get(type_id)
    if not phases:
        return None
    for phase in phases:
        if health_frac >= phase.min_health:
            return phase
    return phases[-1]


# ---------------------------------------------------------------------------
# Firing
# ---------------------------------------------------------------------------

def choose_volleys(pattern: str, rng: random.Random,
                   health_frac: float = 1.0) -> tuple[Volley, ...]:
    """Pick the volleys to fire for one shot of ``pattern``."""
    phase = midboss_phase(pattern, health_frac)
    if phase is not None:
        roll = rng.random() * sum(w for w, _ in phase.options)
        for weight, volleys in phase.options:
            roll -= weight
            if roll < 0:
                return volleys
        return phase.options[-1][1]

    alternatives = PATTERNS.get(pattern)
    if alternatives is None:
        logger.warning(f"Unknown firing pattern '{pattern}', firing straight")
        alternatives = PATTERNS["straight"]
    if len(alternatives) == 1:
        return tuple(alternatives[0])
    return tuple(rng.choice(alternatives))


def fire_volleys(volleys: tuple[Volley, ...], origin: Vec, target: Vec,
                 projectiles: ProjectileManager) -> int:
    """Spawn enemy projectiles for ``volleys``.  Returns the shot count."""
    fired = 0
    for v in volleys:
        opts = {"width": v.size, "height": v.size, "damage": v.damage}
        if v.kind == "targeted":
            projectiles.create_targeted_projectile(origin, target, v.speed, **opts)
            fired += 1
        elif v.kind == "radial":
            step = v.step if v.step > 0 else 45.0
            angle = 0.0
            while angle < 360.0 - 1e-9:
                projectiles.create_angled_projectile(origin, angle, v.speed, **opts)
                angle += step
                fired += 1
        else:
            for angle in v.angles:
                projectiles.create_angled_projectile(origin, angle, v.speed, **opts)
                fired += 1
    return fired


def fire_pattern(pattern: str, origin: Vec, target: Vec, projectiles: ProjectileManager,
                 rng: random.Random, health_frac: float = 1.0) -> int:
    return fire_volleys(choose_volleys(pattern, rng, health_frac), origin, target, projectiles)
