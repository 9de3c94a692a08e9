# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Wave definitions for the three rounds of a run.

Edit layouts here without touching director code.  Each layout is a dict
consumed by ``FormationGenerator.build``:

    {"formation": "line", "enemies": [...], "spacing": 50, "start": (-120, 80),
     "movement": "sway"}

``movement`` selects the shared formation drift for the wave (see
``movement.formation_offset``).  The last wave of every round is the boss
wave.
"""

from __future__ import annotations

import copy

ROUND_WAVE_COUNTS: dict[int, int] = {1: 5, 2: 7, 3: 8}
BOSS_WAVES: dict[int, int] = {1: 5, 2: 7, 3: 8}
FINAL_ROUND = 3


def _n(type_id: str, count: int) -> list[str]:
    return [type_id] * count


_ROUND_1 = [
    {
        "formation": "line",
        "enemies": ["darkmidboss1"] + _n("darkling1", 3) + _n("darkling2", 3),
        "spacing": 45,
        "start": (-165, 90),
        "movement": "sway",
    },
    {
        "formation": "v",
        "enemies": _n("darkling2", 3) + ["darkmidboss2"] + _n("darkling3", 3),
        "spacing": 30,
        "start": (0, 60),
        "movement": "default",
    },
    {
        "formation": "grid",
        "enemies": _n("darkling3", 4) + ["darkmidboss3"] + _n("darkling4", 3),
        "rows": 2,
        "cols": 4,
        "spacing": (60, 50),
        "start": (-110, 70),
        "movement": "zigzag",
    },
    {
        "formation": "multi-formation",
        "movement": "default",
        "sub_formations": [
            {"formation": "arc", "enemies": _n("darkling4", 5), "arc": 120,
             "radius": 90, "facing": 90, "start": (0, 60)},
            {"formation": "wall", "enemies": ["darkmidboss4", "darkling2"],
             "spacing": 60, "start": (-220, 80)},
            {"formation": "wall", "enemies": _n("darkling2", 2),
             "spacing": 60, "start": (220, 80)},
        ],
    },
    {
        "formation": "boss-with-satellites",
        "boss": {"type": "darklingboss1", "position": (0, 150)},
        "minions": [
            {"type": "darkling2", "count": 6, "radius": 90, "speed": 0.02},
        ],
        "movement": "sway",
    },
]

_ROUND_2 = [
    {
        "formation": "diamond",
        "enemies": _n("darkling4", 3) + ["darkmidboss5"] + _n("darkling5", 3),
        "spacing": 35,
        "start": (0, 80),
        "movement": "default",
    },
    {
        "formation": "spiral",
        "enemies": ["darkmidboss6"] + _n("darkling5", 5) + _n("darkling6", 4),
        "start": (0, 170),
        "movement": "circle",
    },
    {
        "formation": "helix",
        "enemies": _n("darkling6", 5) + ["darkmidboss7"] + _n("darkling5", 4),
        "radius": 120,
        "start": (0, 180),
        "movement": "pulse",
    },
    {
        "formation": "orbital",
        "enemies": ["darkmidboss8"] + _n("darkling5", 5) + _n("darkling7", 6),
        "rings": 2,
        "radii": (60, 120),
        "start": (0, 170),
        "movement": "static",
    },
    {
        "formation": "pentagram",
        "enemies": _n("darkling7", 5) + _n("darkling6", 5),
        "outer": 110,
        "inner": 55,
        "start": (0, 170),
        "movement": "sway",
    },
    {
        "formation": "serpentine",
        "enemies": _n("darkling6", 6) + _n("darkling7", 6),
        "rows": 2,
        "spacing": (55, 70),
        "start": (-140, 80),
        "wave": {"frequency": 0.8, "amplitude": 25},
        "movement": "default",
    },
    {
        "formation": "boss-complex",
        "boss": {"type": "darklingboss2", "position": (0, 140)},
        "barrier": {"enemies": _n("darkling4", 5), "position": (0, 140),
                    "arc": 140, "radius": 130, "facing": 90},
        "attackers": [
            {"enemies": _n("darkling7", 3), "radius": 80, "speed": 0.025, "offset": 0.0},
            {"enemies": _n("darkling8", 3), "radius": 80, "speed": 0.025, "offset": 1.047},
        ],
        "movement": "sway",
    },
]

_ROUND_3 = [
    {
        "formation": "nested-circles",
        "start": (0, 180),
        "rings": [
            {"enemies": _n("darkling7", 4), "radius": 50, "rotation_speed": 0.02},
            {"enemies": _n("darkling8", 6), "radius": 100, "rotation_speed": -0.015},
        ],
        "movement": "static",
    },
    {
        "formation": "staggered-assault",
        "movement": "default",
        "waves": [
            {"formation": "line", "enemies": _n("darkling8", 5), "spacing": 55,
             "start": (-130, 70), "delay": 0.0},
            {"formation": "arc", "enemies": ["darkmidboss9"] + _n("darkling7", 4),
             "arc": 160, "radius": 110, "facing": 90, "start": (0, 80), "delay": 4.0},
            {"formation": "line", "enemies": _n("darkling9", 4), "spacing": 60,
             "start": (-100, 260), "delay": 8.0},
        ],
    },
    {
        "formation": "growing-spiral",
        "enemies": ["darkmidboss10"] + _n("darkling8", 6) + _n("darkling10", 3),
        "angle_step": 40,
        "radius_step": 14,
        "grow_factor": 0.25,
        "start": (0, 170),
        "movement": "sway",
    },
    {
        "formation": "fractal",
        "seed": {"enemies": _n("darkling10", 3),
                 "positions": [(-170, 120), (0, 90), (170, 120)]},
        "children": {"enemies": _n("darkling8", 3),
                     "offsets": [(-30, 30), (0, 40), (30, 30)]},
        "variance": 6.0,
        "movement": "default",
    },
    {
        "formation": "nebula",
        "pulse_rate": 1.2,
        "clusters": [
            {"center": (-140, 150), "radius": 70, "density": 0.9, "enemies": _n("darkling9", 5)},
            {"center": (140, 150), "radius": 70, "density": 0.9, "enemies": _n("darkling8", 5)},
        ],
        "movement": "pulse",
    },
    {
        "formation": "fortress",
        "core": {"enemies": ["darkmidboss10", "darkling10"],
                 "positions": [(0, 110), (0, 170)]},
        "turrets": [
            {"type": "darkling8", "position": (-180, 90)},
            {"type": "darkling8", "position": (180, 90)},
        ],
        "defenders": {
            "enemies": _n("darkling7", 4),
            "paths": [
                {"points": [(-200, 220), (0, 250), (200, 220)], "speed": 0.012},
                {"points": [(200, 60), (0, 40), (-200, 60)], "speed": 0.01},
            ],
        },
        "movement": "static",
    },
    {
        "formation": "crucible",
        "phases": [
            {"formation": "pentagon", "enemies": ["darkmidboss11"] + _n("darkling10", 9),
             "position": (0, 170), "radius": 110, "duration": 8.0},
            {"formation": "star", "position": (0, 170),
             "radius": {"outer": 140, "inner": 70}, "duration": 8.0},
            {"formation": "circle", "position": (0, 170), "radius": 120, "duration": 8.0},
        ],
        "movement": "static",
    },
    {
        "formation": "final-bastion",
        "boss": {"type": "darklingboss3", "position": (0, 130)},
        "guardians": [
            {"type": "darkling10", "position": (-120, 150)},
            {"type": "darkling10", "position": (120, 150)},
        ],
        "phases": [
            {"enemies": _n("darkling8", 4),
             "positions": [(-220, 80), (-180, 200), (180, 200), (220, 80)],
             "duration": 12.0},
            {"enemies": _n("darkling9", 4) + _n("darkling7", 2),
             "positions": [(-200, 60), (-100, 40), (100, 40), (200, 60), (-60, 240), (60, 240)],
             "duration": 12.0},
        ],
        "movement": "sway",
    },
]

_ROUNDS: dict[int, list[dict]] = {1: _ROUND_1, 2: _ROUND_2, 3: _ROUND_3}

# Background flyby types, spawned independently of waves
FLYBY_TYPES: dict[int, tuple[str, ...]] = {
    1: ("darkling1",),
    2: ("darkling1", "darkling9"),
    3: ("darkling9",),
}


def waves_in_round(round_number: int) -> int:
    return ROUND_WAVE_COUNTS.get(round_number, 0)


def is_boss_wave(round_number: int, wave: int) -> bool:
    return BOSS_WAVES.get(round_number) == wave


def get_wave_layout(round_number: int, wave: int) -> dict | None:
    """Return a private copy of the layout for (round, wave), or None."""
    waves = _ROUNDS.get(round_number)
    if waves is None or not 1 <= wave <= len(waves):
        return None
    return copy.deepcopy(waves[wave - 1])
