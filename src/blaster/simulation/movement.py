# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""MovementLibrary — pure time-parameterised enemy motion.

Every function here is side-effect free except the ``advance`` methods on
the stateful descriptors (orbit angle, patrol progress), which mutate only
the descriptor they are called on.  Time ``t`` is seconds since the wave
started; ``dt`` is the tick length in seconds.  Per-frame tunings inherited
from the 60 Hz browser build are scaled by ``frames(dt)``.

An in-formation enemy ends up at::

    formation_position(base, t) + formation_offset(pattern, t) + jitter(seed, t)

where ``formation_position`` is the enemy's own motion descriptor (or its
static base position when it has none).  Enemies out of formation use the
velocity returned by ``standalone_velocity`` instead.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Union

Vec = tuple[float, float]

FRAME_RATE = 60.0
MIDBOSS_SCREEN_MARGIN = 50.0
JITTER_AMPLITUDE = 1.5


def frames(dt: float) -> float:
    """Convert seconds into 60 Hz frame units."""
    return dt * FRAME_RATE


# ---------------------------------------------------------------------------
# Motion descriptors
# ---------------------------------------------------------------------------

@dataclass
class OrbitMotion:
    """Circular orbit around a fixed centre.  ``speed`` is radians per frame."""

    center: Vec
    radius: float
    speed: float = 0.02
    angle: float = 0.0

    def advance(self, dt: float) -> None:
        self.angle += self.speed * frames(dt)

    def position(self, base: Vec, t: float) -> Vec:
        return (
            self.center[0] + math.cos(self.angle) * self.radius,
            self.center[1] + math.sin(self.angle) * self.radius,
        )


@dataclass
class PatrolMotion:
    """Linear travel between waypoints, reversing at either end.

    ``speed`` is the fraction of a segment covered per frame.
    """

    path: list[Vec]
    speed: float = 0.01
    index: int = 0
    direction: int = 1
    progress: float = 0.0

    def advance(self, dt: float) -> None:
        if len(self.path) < 2:
            return
        self.progress += self.speed * frames(dt)
        while self.progress >= 1.0:
            self.progress -= 1.0
            nxt = self.index + self.direction
            if nxt + self.direction < 0 or nxt + self.direction >= len(self.path):
                # Arrived at an endpoint: turn around
                self.index = nxt
                self.direction = -self.direction
            else:
                self.index = nxt

    def position(self, base: Vec, t: float) -> Vec:
        if not self.path:
            return base
        if len(self.path) == 1:
            return self.path[0]
        a = self.path[self.index]
        b = self.path[self.index + self.direction]
        p = self.progress
        return (a[0] + (b[0] - a[0]) * p, a[1] + (b[1] - a[1]) * p)


@dataclass
class SpiralMotion:
    """Breathing spiral: radius swells with ``grow_factor``, angle creeps forward."""

    center: Vec
    radius: float
    angle: float = 0.0
    grow_factor: float = 0.2

    def advance(self, dt: float) -> None:
        pass

    def position(self, base: Vec, t: float) -> Vec:
        growth = self.grow_factor * math.sin(t)
        r = self.radius * (1.0 + growth)
        a = self.angle + t * 0.5
        return (self.center[0] + math.cos(a) * r, self.center[1] + math.sin(a) * r)


@dataclass
class WaveMotion:
    """Vertical sinusoid keyed by the enemy's column phase."""

    amplitude: float = 20.0
    phase: float = 0.0
    frequency: float = 1.0

    def advance(self, dt: float) -> None:
        pass

    def position(self, base: Vec, t: float) -> Vec:
        return (base[0], base[1] + math.sin(self.phase + t * self.frequency) * self.amplitude)


@dataclass
class NebulaMotion:
    """Cloud member whose distance from the cluster centre pulses."""

    center: Vec
    angle: float
    distance: float
    pulse_rate: float = 1.0
    pulse_min: float = 0.8
    pulse_max: float = 1.2

    def advance(self, dt: float) -> None:
        pass

    def position(self, base: Vec, t: float) -> Vec:
        wave = math.sin(t * self.pulse_rate) * 0.5 + 0.5
        pulse = self.pulse_min + wave * (self.pulse_max - self.pulse_min)
        a = self.angle + t * 0.2
        d = self.distance * pulse
        return (self.center[0] + math.cos(a) * d, self.center[1] + math.sin(a) * d)


@dataclass
class VortexMotion:
    """Rotating arm of a vortex whose radius breathes between 60% and 100%."""

    center: Vec
    radius: float
    angle: float = 0.0
    direction: int = 1

    def advance(self, dt: float) -> None:
        pass

    def position(self, base: Vec, t: float) -> Vec:
        a = self.angle + t * 0.8 * self.direction
        r = self.radius * (math.sin(t * 0.5) * 0.2 + 0.8)
        return (self.center[0] + math.cos(a) * r, self.center[1] + math.sin(a) * r)


Motion = Union[OrbitMotion, PatrolMotion, SpiralMotion, WaveMotion, NebulaMotion, VortexMotion]


def formation_position(motion: Motion | None, base: Vec, t: float) -> Vec:
    """Position within formation space before the shared drift is added."""
    if motion is None:
        return base
    return motion.position(base, t)


# ---------------------------------------------------------------------------
# Shared formation drift
# ---------------------------------------------------------------------------

def _triangle(t: float, period: float) -> float:
    """Triangle wave in [-1, 1]."""
    phase = (t / period) % 1.0
    return 4.0 * abs(phase - 0.5) - 1.0


_DRIFT_PATTERNS = {
    "static": lambda t: (0.0, 0.0),
    "default": lambda t: (math.sin(t * 0.5) * 30.0, math.sin(t * 0.25) * 10.0),
    "sway": lambda t: (math.sin(t * 0.8) * 60.0, 0.0),
    "zigzag": lambda t: (_triangle(t, 4.0) * 50.0, math.sin(t * 2.0) * 5.0),
    "circle": lambda t: (math.cos(t * 0.6) * 40.0, math.sin(t * 0.6) * 20.0),
    "descend": lambda t: (math.sin(t * 0.5) * 20.0, min(t * 4.0, 60.0)),
    "pulse": lambda t: (0.0, math.sin(t * 1.5) * 15.0),
}

DRIFT_PATTERNS = tuple(_DRIFT_PATTERNS)


def formation_offset(pattern: str, t: float) -> Vec:
    """Shared offset applied to every in-formation enemy of the wave.

    Unknown pattern ids drift like ``default``.
    """
    fn = _DRIFT_PATTERNS.get(pattern, _DRIFT_PATTERNS["default"])
    return fn(t)


def jitter(seed: float, t: float, amplitude: float = JITTER_AMPLITUDE) -> Vec:
    """Small per-enemy wobble so formations do not look rigid."""
    return (
        math.sin(t * 1.7 + seed) * amplitude,
        math.cos(t * 1.3 + seed * 0.7) * amplitude,
    )


# ---------------------------------------------------------------------------
# Standalone patterns (velocity per frame)
# ---------------------------------------------------------------------------

def _midboss11(t: float, health_frac: float) -> Vec:
    if health_frac > 0.5:
        return (math.sin(t * 0.5) * 1.3, math.sin(t * 0.2) * 0.4)
    speed = (1.0 - health_frac) * 2.0
    return (math.sin(t * speed) * math.cos(t) * 2.0, math.sin(t * 1.5) * 0.7)


def _midboss8(t: float) -> Vec:
    a = (t * 0.5) % (math.pi * 2)
    c, s = math.cos(a), math.sin(a)
    return (
        math.copysign(abs(c) ** 0.5, c) * 1.2,
        math.copysign(abs(s) ** 0.5, s) * 0.4,
    )


def _midboss2(t: float) -> Vec:
    pause = 0.2 if math.sin(t * 0.2) > 0.7 else 1.0
    return (math.sin(t) * 1.5 * pause, math.cos(t * 0.5) * 0.3 * pause)


_STANDALONE = {
    "boss_zigzag": lambda t, h, d: (math.sin(t) * 1.5, math.sin(t * 0.5) * 0.5),
    "figure8": lambda t, h, d: (math.sin(t) * 1.2, math.sin(t * 2) * 0.4),
    "erratic": lambda t, h, d: _midboss2(t),
    "oval": lambda t, h, d: (math.cos(t * 0.8), math.sin(t * 0.8) * 0.4),
    "zigzag_approach": lambda t, h, d: (
        math.sin(t * 2) * (math.sin(t * 5) + 1) * 0.6, math.cos(t) * 0.3),
    "pendulum": lambda t, h, d: (math.sin(t * 0.8) * 1.8, abs(math.sin(t * 0.8)) * 0.4),
    "stalk": lambda t, h, d: (
        math.sin(t * 0.6) * 1.2, math.sin(t * 1.8) * 0.3 + math.sin(t * 4.2) * 0.1),
    "spiral": lambda t, h, d: (
        math.cos(t) * (1.0 + math.sin(t * 0.5) * 0.5), math.sin(t * 1.2) * 0.5),
    "square": lambda t, h, d: _midboss8(t),
    "hunt": lambda t, h, d: (
        math.sin(t * 2) * math.cos(t * 8) * 1.5, math.sin(t * 6) * 0.5),
    "chaos": lambda t, h, d: (
        math.sin(t) + math.sin(t * 2.7) * 0.4,
        (math.sin(t * 1.3) + math.sin(t * 3.1) * 0.3) * 0.4),
    "desperate": lambda t, h, d: _midboss11(t, h),
    "sidestep": lambda t, h, d: (math.sin(t), 0.0),
    "fast_sidestep": lambda t, h, d: (math.sin(t * 2) * 2 * d, 0.0),
    "sine": lambda t, h, d: (math.sin(t) * 0.5 * d, 0.0),
    "flee": lambda t, h, d: (0.6 * d, -2.5),
    "flyby": lambda t, h, d: (1.0 * d, 0.0),
}

STANDALONE_PATTERNS = tuple(_STANDALONE)


def standalone_velocity(pattern: str, t: float, health_frac: float = 1.0,
                        direction: int = 1) -> Vec:
    """Velocity (pixels per frame) for an enemy moving on its own.

    Args:
        pattern: Pattern id from the enemy type table.
        t: Seconds since the enemy left formation (or spawned).
        health_frac: Current health over max health; drives phase-aware
            patterns such as ``desperate``.
        direction: +1 or -1, mirrors horizontal patterns.
    """
    fn = _STANDALONE.get(pattern, _STANDALONE["sine"])
    return fn(t, health_frac, direction)


def clamp_to_screen(pos: Vec, half_width: float, height: float,
                    margin: float = MIDBOSS_SCREEN_MARGIN) -> tuple[Vec, Vec]:
    """Clamp ``pos`` inside the playfield and return ``(clamped, shift)``.

    ``shift`` is the correction that was applied, so callers can move the
    enemy's base position by the same amount and keep it from drifting
    off-screen again next tick.
    """
    x = min(max(pos[0], -half_width + margin), half_width - margin)
    y = min(max(pos[1], margin), height - margin)
    return (x, y), (x - pos[0], y - pos[1])
