# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""End-of-run loot roll.

Called exactly once per run, when the director reaches ``victory`` or
``game_over``.  The roll is:

  1. ``min(score // 100, 100)`` items drawn uniformly from the zone list
  2. if ``score >= 2000``: three independent 25% trials for the rare item
  3. on victory only: one 25% trial for the legendary item

The resulting ordered id list is handed to the inventory layer through the
``on_run_complete`` callback.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from loguru import logger

POINTS_PER_REWARD = 100
MAX_REWARDS = 100
RARE_SCORE_THRESHOLD = 2000
RARE_TRIALS = 3
RARE_CHANCE = 0.25
LEGENDARY_CHANCE = 0.25


@dataclass(frozen=True)
class RewardTable:
    zone: str
    items: tuple[str, ...]
    rare_item: str
    legendary_item: str


_REWARD_TABLES: dict[str, RewardTable] = {
    "lissome_plains": RewardTable(
        zone="lissome_plains",
        items=(
            "cottonfluff", "eggs", "butter", "cream", "birch-syrup",
            "fractalcopper", "flour", "rocksalt", "savourherb",
            "sweetleaf", "springwater", "barkgum", "berrimaters",
        ),
        rare_item="touchoflove",
        legendary_item="distillationofnightsky",
    ),
}

DEFAULT_ZONE = "lissome_plains"


def get_reward_table(zone: str) -> RewardTable:
    table = _REWARD_TABLES.get(zone)
    if table is None:
        logger.warning(f"Unknown reward zone '{zone}', using '{DEFAULT_ZONE}'")
        table = _REWARD_TABLES[DEFAULT_ZONE]
    return table


def reward_count(score: int) -> int:
    """Number of zone items a score earns (capped)."""
    return min(max(score, 0) // POINTS_PER_REWARD, MAX_REWARDS)


class RewardDistributor:
    """Rolls the reward list for a finished run."""

    def __init__(self, rng: random.Random, table: RewardTable | None = None) -> None:
        self._rng = rng
        self.table = table or _REWARD_TABLES[DEFAULT_ZONE]

    def roll(self, score: int, victory: bool) -> list[str]:
        rewards = [self._rng.choice(self.table.items) for _ in range(reward_count(score))]
        if score >= RARE_SCORE_THRESHOLD:
            for _ in range(RARE_TRIALS):
                if self._rng.random() < RARE_CHANCE:
                    rewards.append(self.table.rare_item)
        if victory and self._rng.random() < LEGENDARY_CHANCE:
            rewards.append(self.table.legendary_item)
        logger.info(f"Rolled {len(rewards)} rewards for score {score} (victory={victory})")
        return rewards
