# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Root conftest — shared fixtures for the combat core tests."""

import random

import pytest

from blaster.comms.event_bus import EventBus
from blaster.simulation.powerups import PowerupManager
from blaster.simulation.projectiles import ProjectileManager


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def projectiles() -> ProjectileManager:
    return ProjectileManager()


@pytest.fixture
def powerups(rng) -> PowerupManager:
    return PowerupManager(rng, 800.0)


def drain(q) -> list:
    """Pop everything currently queued on an EventBus subscription."""
    out = []
    while not q.empty():
        out.append(q.get_nowait())
    return out


@pytest.fixture
def drain_queue():
    return drain
