# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""RunStats -- after-action statistics for one run.

Run totals:
  Shots fired and landed, enemies defeated (by type), damage taken split
  into shield and health, potions collected, specials used.  Computed
  property: accuracy.

Per-wave stats (WaveStats):
  Enemies spawned and defeated, shots, bonus awarded, duration on the
  game clock, and whether the wave ended on the timeout rather than by
  clearing the field.

The game calls the ``on_*`` hooks directly from its tick; there is no
EventBus subscription and no wall-clock timing.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field


@dataclass
class WaveStats:
    """Per-wave aggregate statistics."""

    round_number: int
    wave_number: int
    boss_wave: bool = False
    enemies_spawned: int = 0
    enemies_defeated: int = 0
    shots_fired: int = 0
    shots_hit: int = 0
    duration: float = 0.0
    bonus: int = 0
    timed_out: bool = False

    def to_dict(self) -> dict:
        return {
            "round": self.round_number,
            "wave": self.wave_number,
            "boss_wave": self.boss_wave,
            "enemies_spawned": self.enemies_spawned,
            "enemies_defeated": self.enemies_defeated,
            "shots_fired": self.shots_fired,
            "shots_hit": self.shots_hit,
            "duration": round(self.duration, 2),
            "bonus": self.bonus,
            "timed_out": self.timed_out,
        }


@dataclass
class RunStats:
    """Totals for the current run plus one ``WaveStats`` per wave started."""

    character: str | None = None
    shots_fired: int = 0
    shots_hit: int = 0
    enemies_defeated: int = 0
    defeated_by_type: Counter = field(default_factory=Counter)
    shield_damage_taken: float = 0.0
    health_damage_taken: int = 0
    hits_ignored: int = 0
    powerups_collected: Counter = field(default_factory=Counter)
    specials_used: int = 0
    waves_cleared: int = 0
    waves: list[WaveStats] = field(default_factory=list)

    @property
    def accuracy(self) -> float:
        """Hit rate: shots_hit / shots_fired.  0 if no shots fired."""
        return self.shots_hit / self.shots_fired if self.shots_fired > 0 else 0.0

    @property
    def current_wave(self) -> WaveStats | None:
        return self.waves[-1] if self.waves else None

    # -- Combat events ------------------------------------------------------

    def on_shots_fired(self, count: int) -> None:
        self.shots_fired += count
        if self.current_wave is not None:
            self.current_wave.shots_fired += count

    def on_shot_hit(self, count: int = 1) -> None:
        self.shots_hit += count
        if self.current_wave is not None:
            self.current_wave.shots_hit += count

    def on_enemy_defeated(self, type_id: str) -> None:
        self.enemies_defeated += 1
        self.defeated_by_type[type_id] += 1
        if self.current_wave is not None:
            self.current_wave.enemies_defeated += 1

    def on_damage_taken(self, shield: float, health: int) -> None:
        self.shield_damage_taken += shield
        self.health_damage_taken += health

    def on_hit_ignored(self, count: int = 1) -> None:
        self.hits_ignored += count

    def on_powerup(self, kind: str) -> None:
        self.powerups_collected[kind] += 1

    def on_special(self) -> None:
        self.specials_used += 1

    # -- Wave events --------------------------------------------------------

    def on_wave_start(self, round_number: int, wave_number: int,
                      enemy_count: int, boss_wave: bool) -> None:
        self.waves.append(WaveStats(round_number, wave_number, boss_wave, enemy_count))

    def on_wave_complete(self, duration: float, bonus: int, timed_out: bool) -> None:
        wave = self.current_wave
        if wave is None:
            return
        wave.duration = duration
        wave.bonus = bonus
        wave.timed_out = timed_out
        self.waves_cleared += 1

    def to_dict(self) -> dict:
        return {
            "character": self.character,
            "shots_fired": self.shots_fired,
            "shots_hit": self.shots_hit,
            "accuracy": round(self.accuracy, 4),
            "enemies_defeated": self.enemies_defeated,
            "defeated_by_type": dict(self.defeated_by_type),
            "shield_damage_taken": round(self.shield_damage_taken, 2),
            "health_damage_taken": self.health_damage_taken,
            "hits_ignored": self.hits_ignored,
            "powerups_collected": dict(self.powerups_collected),
            "specials_used": self.specials_used,
            "waves_cleared": self.waves_cleared,
            "waves": [w.to_dict() for w in self.waves],
        }
