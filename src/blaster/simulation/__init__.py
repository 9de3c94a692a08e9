# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Combat simulation: director, formations, enemies, projectiles, collisions."""

from .collision import CollisionReport, CollisionResolver
from .director import WaveDirector, WaveState
from .enemies import Enemy, EnemyRegistry
from .enemy_types import EnemyType, get_enemy_type
from .formations import FormationEntry, FormationGenerator
from .game import BlasterGame
from .player import Character, Player, get_character
from .powerups import Powerup, PowerupManager
from .projectiles import Beam, Projectile, ProjectileManager
from .rewards import RewardDistributor, get_reward_table, reward_count
from .state_machine import State, StateMachine
from .stats import RunStats
from .timers import TimerQueue

__all__ = [
    "BlasterGame",
    "Beam",
    "Character",
    "CollisionReport",
    "CollisionResolver",
    "Enemy",
    "EnemyRegistry",
    "EnemyType",
    "FormationEntry",
    "FormationGenerator",
    "Player",
    "Powerup",
    "PowerupManager",
    "Projectile",
    "ProjectileManager",
    "RewardDistributor",
    "RunStats",
    "State",
    "StateMachine",
    "TimerQueue",
    "WaveDirector",
    "WaveState",
    "get_character",
    "get_enemy_type",
    "get_reward_table",
    "reward_count",
]
