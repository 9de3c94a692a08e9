# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Application settings loaded from environment variables.

Every field can be overridden with a ``BLASTER_`` prefixed environment
variable (or a ``.env`` file), e.g. ``BLASTER_SEED=42`` for deterministic
runs or ``BLASTER_WAVE_TIMEOUT=10`` for quick playtests.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tunables for the combat core and the HTTP surface."""

    model_config = SettingsConfigDict(
        env_prefix="BLASTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Playfield
    playfield_width: float = Field(
        default=600.0,
        description="Playfield width; x runs from -width/2 to +width/2",
    )
    playfield_height: float = Field(
        default=800.0,
        description="Playfield height; y grows downward from the top edge",
    )
    player_collision_offset: float = Field(
        default=275.0,
        description="Distance from the bottom edge to the fixed player collision line",
    )

    # Simulation
    tick_rate_hz: float = Field(default=60.0, description="Background tick rate")
    seed: int | None = Field(
        default=None,
        description="Seed for the injected random source; unset means nondeterministic",
    )
    wave_timeout: float = Field(
        default=30.0,
        description="Seconds before a non-boss wave is considered cleared",
    )
    wave_announce_delay: float = Field(
        default=2.0,
        description="Pause between a wave clear and the next spawn",
    )
    stagger_interval: float = Field(
        default=0.15,
        description="Seconds between consecutive enemy spawns within a formation",
    )
    invulnerability_window: float = Field(
        default=0.6,
        description="Seconds after a hit during which further hits are ignored",
    )
    projectile_soft_cap: int = Field(
        default=500,
        ge=1,
        description="Maximum concurrent non-beam projectiles before recycling",
    )
    flyby_interval: float = Field(
        default=12.0,
        description="Seconds between background flyby spawns; 0 disables them",
    )

    # Rewards
    zone: str = Field(default="lissome_plains", description="Reward zone id")

    # API
    api_enabled: bool = Field(default=True, description="Mount the /api/blaster router")
    autostart_loop: bool = Field(
        default=True,
        description="Run the background tick task from the app lifespan",
    )

    @property
    def player_collision_y(self) -> float:
        return self.playfield_height - self.player_collision_offset


settings = Settings()
