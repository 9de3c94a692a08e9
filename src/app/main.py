# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""FastAPI application hosting one BlasterGame.

The lifespan starts a background asyncio task that ticks the game at
``settings.tick_rate_hz`` using measured elapsed time.  Command handlers
run on the same event loop, so they never interleave with a tick.

Run with::

    uvicorn app.main:app --port 8000
"""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from loguru import logger

from app.config import Settings, settings
from blaster import __version__
from blaster.comms.event_bus import EventBus
from blaster.simulation.game import BlasterGame

# Longest step fed to the simulation after a stall.
MAX_TICK_DT = 0.1


def build_game(cfg: Settings, event_bus: EventBus | None = None) -> BlasterGame:
    """Construct a BlasterGame from settings."""
    return BlasterGame(
        event_bus,
        seed=cfg.seed,
        playfield_width=cfg.playfield_width,
        playfield_height=cfg.playfield_height,
        player_collision_offset=cfg.player_collision_offset,
        wave_timeout=cfg.wave_timeout,
        announce_delay=cfg.wave_announce_delay,
        stagger_interval=cfg.stagger_interval,
        invulnerability_window=cfg.invulnerability_window,
        projectile_soft_cap=cfg.projectile_soft_cap,
        flyby_interval=cfg.flyby_interval,
        zone=cfg.zone,
    )


async def tick_loop(game: BlasterGame, rate_hz: float) -> None:
    interval = 1.0 / rate_hz
    loop = asyncio.get_running_loop()
    last = loop.time()
    while True:
        await asyncio.sleep(interval)
        now = loop.time()
        dt = min(now - last, MAX_TICK_DT)
        last = now
        try:
            game.tick(dt)
        except Exception:
            logger.exception("Blaster tick failed")


def create_app(cfg: Settings | None = None, game: BlasterGame | None = None) -> FastAPI:
    cfg = cfg or settings
    game = game or build_game(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if cfg.autostart_loop:
            task = asyncio.create_task(tick_loop(game, cfg.tick_rate_hz))
            logger.info(f"Blaster tick loop started at {cfg.tick_rate_hz:.0f} Hz")
        yield
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            logger.info("Blaster tick loop stopped")

    app = FastAPI(title="Alchemy Blaster", version=__version__, lifespan=lifespan)
    app.state.blaster_game = game
    app.state.settings = cfg
    if cfg.api_enabled:
        from app.routers.blaster import router as blaster_router
        app.include_router(blaster_router)
    return app


app = create_app()


def run(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the module-level app; used by the ``alchemy-blaster`` script."""
    uvicorn.run(app, host=host, port=port)
