# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Tests for the application factory, settings and the background tick loop."""

from __future__ import annotations

import asyncio
import time

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from app.config import Settings
from app.main import MAX_TICK_DT, build_game, create_app, tick_loop


class TestSettings:
    pytestmark = pytest.mark.unit

    def test_defaults(self) -> None:
        cfg = Settings()
        assert cfg.player_collision_y == 525.0
        assert cfg.zone == "lissome_plains"

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("BLASTER_WAVE_TIMEOUT", "10")
        monkeypatch.setenv("BLASTER_SEED", "42")
        cfg = Settings()
        assert cfg.wave_timeout == 10.0
        assert cfg.seed == 42

    def test_soft_cap_must_be_positive(self, monkeypatch) -> None:
        monkeypatch.setenv("BLASTER_PROJECTILE_SOFT_CAP", "0")
        with pytest.raises(ValidationError):
            Settings()

    def test_build_game_maps_settings(self) -> None:
        game = build_game(Settings(playfield_height=900, player_collision_offset=300,
                                   wave_timeout=12, seed=1))
        assert game.collision_y == 600.0
        assert game.director.wave_timeout == 12.0
        assert game.seed == 1


class TestCreateApp:
    pytestmark = pytest.mark.unit

    def test_router_mounted(self) -> None:
        app = create_app(Settings(autostart_loop=False))
        resp = TestClient(app).get("/api/blaster/state")
        assert resp.status_code == 200

    def test_router_disabled(self) -> None:
        app = create_app(Settings(autostart_loop=False, api_enabled=False))
        assert TestClient(app).get("/api/blaster/state").status_code == 404

    def test_injected_game(self) -> None:
        game = build_game(Settings(seed=5))
        app = create_app(Settings(autostart_loop=False), game=game)
        assert app.state.blaster_game is game


class _ExplodingGame:
    """Stand-in whose tick always fails."""

    def __init__(self) -> None:
        self.calls = 0
        self.dts: list[float] = []

    def tick(self, dt: float) -> None:
        self.calls += 1
        self.dts.append(dt)
        raise RuntimeError("boom")


class TestTickLoop:
    pytestmark = pytest.mark.integration

    def test_loop_survives_tick_errors(self) -> None:
        game = _ExplodingGame()

        async def drive():
            task = asyncio.create_task(tick_loop(game, 200.0))
            await asyncio.sleep(0.1)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(drive())
        assert game.calls >= 2
        assert all(0 < dt <= MAX_TICK_DT for dt in game.dts)

    def test_lifespan_drives_game(self) -> None:
        app = create_app(Settings(seed=2, tick_rate_hz=120))
        with TestClient(app) as client:
            client.post("/api/blaster/command",
                        json={"action": "select_character", "character": "dere"})
            time.sleep(0.3)
            snap = client.get("/api/blaster/state").json()
        assert snap["tick"] > 0
