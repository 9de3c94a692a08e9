# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Blaster — combat simulation core for the Alchemy Blaster rail shooter.

This package contains the wave director, formation generator, enemy and
projectile registries, collision resolution, and the end-of-run reward
roll.  Rendering, audio, input devices and the crafting inventory are
external collaborators that talk to the core through commands, per-tick
snapshots, EventBus events and the reward callback.
"""

__version__ = "0.1.0"
