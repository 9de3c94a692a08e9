# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""FormationGenerator — expands declarative wave layouts into spawn entries.

A layout is a plain dict (see ``waves_defs``) with a ``formation`` pattern
id, the enemy type list and pattern-specific parameters.  ``build`` turns
it into a list of ``FormationEntry`` items: enemy type, initial position,
optional motion descriptor and spawn delay.  Composite layouts
(``multi-formation``, ``staggered-assault``) recurse into their
sub-layouts and merge the results.

Randomised placement (nebula clouds, fractal variance) draws from the
injected ``random.Random`` so a seeded generator reproduces a wave exactly.

Positions use world coordinates: x centred on 0, y growing downward.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from .enemy_types import DEFAULT_ENEMY_TYPE
from .movement import (
    Motion,
    NebulaMotion,
    OrbitMotion,
    PatrolMotion,
    SpiralMotion,
    Vec,
    VortexMotion,
    WaveMotion,
)

Layout = dict[str, Any]

SPACING_SCALE = 1.2
FALLBACK_SPACING = 50.0
FALLBACK_START: Vec = (-120.0, 80.0)
FALLBACK_COUNT = 5


@dataclass
class FormationEntry:
    """One enemy to spawn for the current wave."""

    type_id: str
    position: Vec
    motion: Motion | None = None
    spawn_delay: float = 0.0
    is_boss: bool = False
    role: str | None = None  # barrier, turret, defender, connector, guardian
    group: int | None = None  # fractal seed this entry belongs to
    phases: list[dict] | None = None  # crucible phase list shared by the group
    phase_slot: int = 0  # index of this enemy within a phased group


def _vec(value: Any, default: Vec = (0.0, 0.0)) -> Vec:
    """Accept ``(x, y)`` tuples or ``{"x": .., "y": ..}`` dicts."""
    if value is None:
        return default
    if isinstance(value, dict):
        return (float(value.get("x", default[0])), float(value.get("y", default[1])))
    return (float(value[0]), float(value[1]))


def _ring(center: Vec, radius: float, count: int, offset: float = 0.0) -> list[tuple[Vec, float]]:
    out = []
    for i in range(count):
        angle = offset + (i / count) * math.tau
        out.append(((center[0] + math.cos(angle) * radius,
                     center[1] + math.sin(angle) * radius), angle))
    return out


def phase_positions(phase: dict, count: int) -> list[Vec]:
    """Positions for ``count`` enemies arranged by a crucible phase.

    Phase shapes: ``pentagon`` (enemies bunched on five vertices), ``star``
    (alternating outer/inner radius) and ``circle``.
    """
    center = _vec(phase.get("position"))
    shape = phase.get("formation", "circle")
    out: list[Vec] = []
    if count <= 0:
        return out
    if shape == "pentagon":
        radius = float(phase.get("radius", 100.0))
        per_point = math.ceil(count / 5)
        for i in range(count):
            angle = ((i // per_point) / 5) * math.tau
            out.append((center[0] + math.cos(angle) * radius,
                        center[1] + math.sin(angle) * radius))
    elif shape == "star":
        radius = phase.get("radius", {})
        outer = float(radius.get("outer", 120.0)) if isinstance(radius, dict) else float(radius)
        inner = float(radius.get("inner", 60.0)) if isinstance(radius, dict) else float(radius) / 2
        for i in range(count):
            r = outer if i % 2 == 0 else inner
            angle = ((i % 5) / 5) * math.tau
            out.append((center[0] + math.cos(angle) * r, center[1] + math.sin(angle) * r))
    else:
        radius = float(phase.get("radius", 100.0))
        out = [pos for pos, _ in _ring(center, radius, count)]
    return out


def layout_enemy_count(layout: Layout) -> int:
    """Number of non-boss enemies a layout declares, including nested parts."""
    pattern = layout.get("formation")
    if pattern == "multi-formation":
        return sum(layout_enemy_count(sub) for sub in layout.get("sub_formations", []))
    if pattern == "staggered-assault":
        return sum(layout_enemy_count(sub) for sub in layout.get("waves", []))
    if pattern in ("nested-circles", "interlocking-rings"):
        return sum(len(r["enemies"]) for r in layout.get("rings", []))
    if pattern == "nebula":
        return sum(len(c["enemies"]) for c in layout.get("clusters", []))
    if pattern == "fractal":
        seeds = len(layout["seed"]["enemies"])
        children = layout.get("children")
        per_seed = 0
        if children:
            per_seed = min(len(children["enemies"]), len(children["offsets"]))
        return seeds * (1 + per_seed)
    if pattern == "dual-vortex":
        total = sum(len(v["enemies"]) for v in layout.get("vortices", []))
        if layout.get("connectors") and len(layout.get("vortices", [])) >= 2:
            total += len(layout["connectors"]["enemies"])
        return total
    if pattern == "fortress":
        total = len(layout.get("core", {}).get("enemies", []))
        total += len(layout.get("turrets", []))
        total += len(layout.get("defenders", {}).get("enemies", []))
        return total
    if pattern == "boss-with-satellites":
        return sum(m["count"] for m in layout.get("minions", []))
    if pattern == "boss-complex":
        total = len(layout.get("barrier", {}).get("enemies", []))
        total += sum(len(a["enemies"]) for a in layout.get("attackers", []))
        return total
    if pattern == "crucible":
        return len(layout["phases"][0]["enemies"])
    if pattern == "final-bastion":
        total = len(layout.get("guardians", []))
        for phase in layout.get("phases", []):
            total += min(len(phase["enemies"]), len(phase["positions"]))
        return total
    return len(layout.get("enemies", []))


def layout_has_boss(layout: Layout) -> bool:
    return "boss" in layout and layout["boss"] is not None


class FormationGenerator:
    """Builds ``FormationEntry`` lists from layout dicts.

    Args:
        rng: Random source for randomised placement.  Pass a seeded
            ``random.Random`` for reproducible waves.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._patterns: dict[str, Callable[[Layout], list[FormationEntry]]] = {
            "line": self._line,
            "grid": self._grid,
            "v": self._v,
            "diamond": self._diamond,
            "wall": self._wall,
            "dual-columns": self._dual_columns,
            "pincer": self._pincer,
            "arc": self._arc,
            "spiral": self._spiral,
            "helix": self._helix,
            "orbital": self._orbital,
            "pentagram": self._pentagram,
            "nested-circles": self._nested_circles,
            "serpentine": self._serpentine,
            "growing-spiral": self._growing_spiral,
            "fractal": self._fractal,
            "nebula": self._nebula,
            "dual-vortex": self._dual_vortex,
            "fortress": self._fortress,
            "interlocking-rings": self._interlocking_rings,
            "boss-with-satellites": self._boss_with_satellites,
            "boss-complex": self._boss_complex,
            "crucible": self._crucible,
            "final-bastion": self._final_bastion,
            "custom": self._custom,
            "multi-formation": self._multi_formation,
            "staggered-assault": self._staggered_assault,
        }

    @property
    def patterns(self) -> list[str]:
        return sorted(self._patterns)

    # -- Entry point --------------------------------------------------------

    def build(self, layout: Layout | None) -> list[FormationEntry]:
        """Expand ``layout`` into spawn entries.

        Unknown patterns and malformed layouts degrade to a single-row line
        and log a warning; this never raises.
        """
        if not layout:
            logger.warning("Empty formation layout, using fallback line")
            return self.fallback()
        pattern = layout.get("formation")
        fn = self._patterns.get(pattern)
        if fn is None:
            logger.warning(f"Unknown formation pattern '{pattern}', using fallback line")
            return self.fallback(layout.get("enemies"))
        try:
            entries = fn(layout)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning(f"Malformed '{pattern}' layout ({exc!r}), using fallback line")
            return self.fallback(layout.get("enemies"))
        delay = float(layout.get("delay", 0.0))
        if delay:
            for e in entries:
                e.spawn_delay += delay
        return entries

    def fallback(self, enemies: Any = None) -> list[FormationEntry]:
        """Single-row line: the layout's own enemy list or the default type."""
        if not isinstance(enemies, list) or not enemies or not all(isinstance(e, str) for e in enemies):
            enemies = [DEFAULT_ENEMY_TYPE] * FALLBACK_COUNT
        return self._line({"enemies": enemies, "spacing": FALLBACK_SPACING,
                           "start": FALLBACK_START})

    # -- Basic shapes -------------------------------------------------------

    @staticmethod
    def _line(f: Layout) -> list[FormationEntry]:
        start = _vec(f.get("start"))
        spacing = float(f.get("spacing", FALLBACK_SPACING)) * SPACING_SCALE
        return [FormationEntry(t, (start[0] + i * spacing, start[1]))
                for i, t in enumerate(f["enemies"])]

    @staticmethod
    def _grid(f: Layout) -> list[FormationEntry]:
        enemies = f["enemies"]
        start = _vec(f.get("start"))
        sx, sy = _vec(f.get("spacing"), (50.0, 50.0))
        sx *= SPACING_SCALE
        sy *= SPACING_SCALE
        cols = int(f.get("cols", len(enemies)))
        rows = int(f.get("rows", math.ceil(len(enemies) / max(cols, 1))))
        out = []
        for row in range(rows):
            for col in range(cols):
                index = row * cols + col
                if index < len(enemies):
                    out.append(FormationEntry(enemies[index],
                                              (start[0] + col * sx, start[1] + row * sy)))
        return out

    @staticmethod
    def _v(f: Layout) -> list[FormationEntry]:
        enemies = f["enemies"]
        start = _vec(f.get("start"))
        spacing = float(f.get("spacing", 40.0))
        mid = len(enemies) // 2
        out = []
        for i, t in enumerate(enemies):
            side = -1 if i < mid else 1
            out.append(FormationEntry(t, (start[0] + i * spacing * side,
                                          start[1] + i * spacing)))
        return out

    @staticmethod
    def _diamond(f: Layout) -> list[FormationEntry]:
        enemies = f["enemies"]
        start = _vec(f.get("start"))
        spacing = float(f.get("spacing", 40.0))
        mid = len(enemies) // 2
        out = []
        for i, t in enumerate(enemies):
            side = -1 if i < mid else 1
            out.append(FormationEntry(t, (start[0] + i * spacing * side,
                                          start[1] + mid * spacing - i * spacing)))
        return out

    @staticmethod
    def _wall(f: Layout) -> list[FormationEntry]:
        start = _vec(f.get("start"))
        spacing = float(f.get("spacing", 40.0))
        return [FormationEntry(t, (start[0], start[1] + i * spacing))
                for i, t in enumerate(f["enemies"])]

    @staticmethod
    def _dual_columns(f: Layout) -> list[FormationEntry]:
        enemies = f["enemies"]
        start = _vec(f.get("start"))
        spacing = float(f.get("spacing", 60.0))
        mid = len(enemies) // 2
        out = []
        for i, t in enumerate(enemies):
            side = -1 if i < mid else 1
            out.append(FormationEntry(t, (start[0] + side * spacing, start[1] + i * spacing)))
        return out

    @staticmethod
    def _pincer(f: Layout) -> list[FormationEntry]:
        """Two flanking columns that mirror each other across the centre line."""
        enemies = f["enemies"]
        start = _vec(f.get("start"))
        spacing = float(f.get("spacing", 60.0))
        mid = len(enemies) // 2
        out = []
        for i, t in enumerate(enemies):
            side = -1 if i < mid else 1
            row = i if i < mid else i - mid
            out.append(FormationEntry(t, (start[0] + side * (spacing * 2 - row * spacing * 0.25),
                                          start[1] + row * spacing)))
        return out

    @staticmethod
    def _arc(f: Layout) -> list[FormationEntry]:
        enemies = f["enemies"]
        start = _vec(f.get("start"))
        arc = math.radians(float(f.get("arc", 180.0)))
        radius = float(f.get("radius", 100.0))
        facing = math.radians(float(f.get("facing", 0.0)))
        n = len(enemies)
        out = []
        for i, t in enumerate(enemies):
            frac = i / (n - 1) if n > 1 else 0.5
            angle = facing - arc / 2 + frac * arc
            out.append(FormationEntry(t, (start[0] + math.cos(angle) * radius,
                                          start[1] + math.sin(angle) * radius)))
        return out

    @staticmethod
    def _spiral(f: Layout) -> list[FormationEntry]:
        start = _vec(f.get("start"))
        out = []
        for i, t in enumerate(f["enemies"]):
            angle = i * (math.tau / 8)
            radius = 20.0 + i * 10.0
            out.append(FormationEntry(t, (start[0] + math.cos(angle) * radius,
                                          start[1] + math.sin(angle) * radius)))
        return out

    @staticmethod
    def _helix(f: Layout) -> list[FormationEntry]:
        enemies = f["enemies"]
        start = _vec(f.get("start"))
        radius = float(f.get("radius", 150.0))
        n = len(enemies)
        out = []
        for i, t in enumerate(enemies):
            progress = i / (n - 1) if n > 1 else 0.0
            angle = progress * math.pi * 4 + (0.0 if i % 2 == 0 else math.pi)
            out.append(FormationEntry(t, (start[0] + math.cos(angle) * radius,
                                          start[1] + math.sin(angle) * radius)))
        return out

    @staticmethod
    def _orbital(f: Layout) -> list[FormationEntry]:
        enemies = f["enemies"]
        start = _vec(f.get("start"))
        rings = max(int(f.get("rings", 2)), 1)
        radii = list(f.get("radii", []))
        total = len(enemies)
        out = []
        index = 0
        for ring in range(rings):
            radius = float(radii[ring]) if ring < len(radii) else 50.0 + ring * 50.0
            in_ring = min(math.ceil(total / rings) + ring, total - index)
            for i in range(in_ring):
                angle = (i / in_ring) * math.tau
                out.append(FormationEntry(enemies[index],
                                          (start[0] + math.cos(angle) * radius,
                                           start[1] + math.sin(angle) * radius)))
                index += 1
        # Outer rings may not absorb every enemy when rings is small
        while index < total:
            angle = (index / total) * math.tau
            radius = 50.0 + rings * 50.0
            out.append(FormationEntry(enemies[index],
                                      (start[0] + math.cos(angle) * radius,
                                       start[1] + math.sin(angle) * radius)))
            index += 1
        return out

    @staticmethod
    def _pentagram(f: Layout) -> list[FormationEntry]:
        start = _vec(f.get("start"))
        outer = float(f.get("outer", 100.0)) * 1.3
        inner = float(f.get("inner", 50.0)) * 1.3
        out = []
        for i, t in enumerate(f["enemies"]):
            radius = outer if i % 2 == 0 else inner
            angle = ((i % 5) / 5) * math.tau + math.pi / 2
            out.append(FormationEntry(t, (start[0] + math.cos(angle) * radius,
                                          start[1] + math.sin(angle) * radius)))
        return out

    @staticmethod
    def _serpentine(f: Layout) -> list[FormationEntry]:
        enemies = f["enemies"]
        start = _vec(f.get("start"))
        sx, sy = _vec(f.get("spacing"), (50.0, 60.0))
        wave = f.get("wave", {})
        frequency = float(wave.get("frequency", 0.5))
        amplitude = float(wave.get("amplitude", 20.0))
        rows = max(int(f.get("rows", 1)), 1)
        per_row = math.ceil(len(enemies) / rows)
        out = []
        for row in range(rows):
            for col in range(per_row):
                index = row * per_row + col
                if index >= len(enemies):
                    continue
                out.append(FormationEntry(
                    enemies[index],
                    (start[0] + col * sx, start[1] + row * sy),
                    motion=WaveMotion(amplitude=amplitude, phase=col * frequency),
                ))
        return out

    # -- Orbiting and rotating groups ---------------------------------------

    @staticmethod
    def _nested_circles(f: Layout) -> list[FormationEntry]:
        center = _vec(f.get("start"))
        out = []
        for ring in f["rings"]:
            radius = float(ring["radius"])
            speed = float(ring.get("rotation_speed", 0.01))
            for (pos, angle), t in zip(_ring(center, radius, len(ring["enemies"])), ring["enemies"]):
                out.append(FormationEntry(t, pos, motion=OrbitMotion(center, radius, speed, angle)))
        return out

    @staticmethod
    def _interlocking_rings(f: Layout) -> list[FormationEntry]:
        out = []
        for ring in f["rings"]:
            center = _vec(ring["center"])
            radius = float(ring["radius"])
            speed = float(ring.get("rotation_speed", 0.01))
            for (pos, angle), t in zip(_ring(center, radius, len(ring["enemies"])), ring["enemies"]):
                out.append(FormationEntry(t, pos, motion=OrbitMotion(center, radius, speed, angle)))
        return out

    @staticmethod
    def _growing_spiral(f: Layout) -> list[FormationEntry]:
        start = _vec(f.get("start"))
        step = math.radians(float(f.get("angle_step", 30.0)))
        radius_step = float(f.get("radius_step", 12.0))
        grow = float(f.get("grow_factor", 0.2))
        out = []
        for i, t in enumerate(f["enemies"]):
            angle = i * step
            radius = radius_step * i
            out.append(FormationEntry(
                t,
                (start[0] + math.cos(angle) * radius, start[1] + math.sin(angle) * radius),
                motion=SpiralMotion(start, radius, angle, grow),
            ))
        return out

    def _fractal(self, f: Layout) -> list[FormationEntry]:
        seed = f["seed"]
        children = f.get("children")
        variance = float(f.get("variance", 0.0))
        out = []
        for i, t in enumerate(seed["enemies"]):
            base = _vec(seed["positions"][i])
            out.append(FormationEntry(t, base, group=i))
            if not children:
                continue
            count = min(len(children["enemies"]), len(children["offsets"]))
            for j in range(count):
                ox, oy = _vec(children["offsets"][j])
                if variance:
                    ox += self._rng.uniform(-variance, variance)
                    oy += self._rng.uniform(-variance, variance)
                out.append(FormationEntry(children["enemies"][j],
                                          (base[0] + ox * 1.25, base[1] + oy * 1.25),
                                          group=i))
        return out

    def _nebula(self, f: Layout) -> list[FormationEntry]:
        pulse_rate = float(f.get("pulse_rate", 1.0))
        out = []
        for cluster in f["clusters"]:
            center = _vec(cluster["center"])
            radius = float(cluster.get("radius", 80.0))
            density = float(cluster.get("density", 1.0))
            for t in cluster["enemies"]:
                angle = self._rng.random() * math.tau
                distance = self._rng.random() * radius * density
                out.append(FormationEntry(
                    t,
                    (center[0] + math.cos(angle) * distance, center[1] + math.sin(angle) * distance),
                    motion=NebulaMotion(center, angle, distance, pulse_rate),
                ))
        return out

    @staticmethod
    def _dual_vortex(f: Layout) -> list[FormationEntry]:
        out = []
        vortices = f.get("vortices", [])
        for vortex in vortices:
            center = _vec(vortex["center"])
            r_start, r_end = vortex.get("radius", (20.0, 100.0))
            turns = float(vortex.get("turns", 1.0))
            direction = int(vortex.get("direction", 1))
            n = len(vortex["enemies"])
            for i, t in enumerate(vortex["enemies"]):
                progress = i / (n - 1) if n > 1 else 0.0
                radius = r_start + progress * (r_end - r_start)
                angle = progress * turns * math.tau * direction
                out.append(FormationEntry(
                    t,
                    (center[0] + math.cos(angle) * radius, center[1] + math.sin(angle) * radius),
                    motion=VortexMotion(center, radius, angle, direction),
                ))
        connectors = f.get("connectors")
        if connectors and len(vortices) >= 2:
            a = _vec(vortices[0]["center"])
            b = _vec(vortices[1]["center"])
            sx, sy = _vec(connectors.get("spacing"), (0.0, 15.0))
            n = len(connectors["enemies"])
            for i, t in enumerate(connectors["enemies"]):
                frac = (i + 1) / (n + 1)
                sign = 1 if i % 2 == 0 else -1
                out.append(FormationEntry(
                    t,
                    (a[0] + (b[0] - a[0]) * frac + sx * sign,
                     a[1] + (b[1] - a[1]) * frac + sy * sign),
                    role="connector",
                ))
        return out

    @staticmethod
    def _fortress(f: Layout) -> list[FormationEntry]:
        out = []
        core = f.get("core", {})
        for i, t in enumerate(core.get("enemies", [])):
            out.append(FormationEntry(t, _vec(core["positions"][i])))
        for turret in f.get("turrets", []):
            out.append(FormationEntry(turret["type"], _vec(turret["position"]), role="turret"))
        defenders = f.get("defenders")
        if defenders:
            paths = defenders["paths"]
            for i, t in enumerate(defenders["enemies"]):
                path = paths[i % len(paths)]
                points = [_vec(p) for p in path["points"]]
                out.append(FormationEntry(
                    t, points[0],
                    motion=PatrolMotion(points, speed=float(path.get("speed", 0.01))),
                    role="defender",
                ))
        return out

    # -- Boss layouts -------------------------------------------------------

    @staticmethod
    def _boss_entry(f: Layout) -> tuple[FormationEntry, Vec]:
        boss = f["boss"]
        pos = _vec(boss["position"])
        return FormationEntry(boss["type"], pos, is_boss=True), pos

    def _boss_with_satellites(self, f: Layout) -> list[FormationEntry]:
        boss, center = self._boss_entry(f)
        out = [boss]
        for group in f.get("minions", []):
            radius = float(group["radius"])
            speed = float(group.get("speed", 0.02))
            for pos, angle in _ring(center, radius, int(group["count"])):
                out.append(FormationEntry(group["type"], pos,
                                          motion=OrbitMotion(center, radius, speed, angle)))
        return out

    def _boss_complex(self, f: Layout) -> list[FormationEntry]:
        boss, center = self._boss_entry(f)
        out = [boss]
        barrier = f.get("barrier")
        if barrier:
            for e in self._arc({
                "enemies": barrier["enemies"],
                "start": barrier.get("position", center),
                "arc": barrier.get("arc", 180.0),
                "radius": barrier.get("radius", 100.0),
                "facing": barrier.get("facing", 90.0),
            }):
                e.role = "barrier"
                out.append(e)
        for attacker in f.get("attackers", []):
            radius = float(attacker["radius"])
            speed = float(attacker.get("speed", 0.02))
            offset = float(attacker.get("offset", 0.0))
            for (pos, angle), t in zip(_ring(center, radius, len(attacker["enemies"]), offset),
                                       attacker["enemies"]):
                out.append(FormationEntry(t, pos, motion=OrbitMotion(center, radius, speed, angle)))
        return out

    @staticmethod
    def _crucible(f: Layout) -> list[FormationEntry]:
        phases = f["phases"]
        first = phases[0]
        enemies = first["enemies"]
        return [
            FormationEntry(t, pos, phases=phases, phase_slot=i)
            for i, (t, pos) in enumerate(zip(enemies, phase_positions(first, len(enemies))))
        ]

    def _final_bastion(self, f: Layout) -> list[FormationEntry]:
        out: list[FormationEntry] = []
        if f.get("boss"):
            boss, _ = self._boss_entry(f)
            out.append(boss)
        for guardian in f.get("guardians", []):
            out.append(FormationEntry(guardian["type"], _vec(guardian["position"]), role="guardian"))
        # Each later phase arrives once the previous phases' durations elapse
        delay = 0.0
        for phase in f.get("phases", []):
            for t, pos in zip(phase["enemies"], phase["positions"]):
                out.append(FormationEntry(t, _vec(pos), spawn_delay=delay, role="phase"))
            delay += float(phase.get("duration", 10.0))
        return out

    # -- Composite layouts --------------------------------------------------

    @staticmethod
    def _custom(f: Layout) -> list[FormationEntry]:
        positions = f["positions"]
        return [FormationEntry(t, _vec(positions[i])) for i, t in enumerate(f["enemies"])]

    def _multi_formation(self, f: Layout) -> list[FormationEntry]:
        out: list[FormationEntry] = []
        for sub in f["sub_formations"]:
            out.extend(self.build(sub))
        return out

    def _staggered_assault(self, f: Layout) -> list[FormationEntry]:
        out: list[FormationEntry] = []
        for sub in f["waves"]:
            out.extend(self.build(sub))
        return out
