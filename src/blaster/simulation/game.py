# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""BlasterGame — the combat core behind one command/snapshot surface.

Owns every subsystem and runs them in a fixed order each tick:

  1. WaveDirector     -- game-clock timers, wave clock, formation drift
  2. EnemyRegistry    -- movement, fleeing, flybys, enemy fire
     Player           -- movement, shield regen, player fire
  3. ProjectileManager -- motion, homing, expiry, beam lifetimes
  4. CollisionResolver -- damage and pickups
  5. PowerupManager   -- potion fall
  6. WaveDirector     -- player death / wave completion, rewards on a
                         terminal state

Nothing advances outside ``tick(dt)``; while paused (or before a character
is picked) ``tick`` is a no-op, which is what freezes every timer.
"""

from __future__ import annotations

import random
from typing import Callable

from loguru import logger

from blaster.comms.event_bus import EventBus

from .collision import CollisionResolver
from .director import CHARACTER_SELECT, WaveDirector
from .enemies import Enemy, EnemyRegistry
from .player import Player, get_character
from .powerups import PowerupManager
from .projectiles import DEFAULT_SOFT_CAP, ProjectileManager
from .rewards import DEFAULT_ZONE, RewardDistributor, get_reward_table
from .stats import RunStats


class BlasterGame:
    """One run of the shooter, driven by commands and ``tick(dt)``.

    Args:
        event_bus: Shared bus; a private one is created when omitted.
        seed: Seed for the single injected ``random.Random``.  ``reset``
            re-seeds with it, so a seeded game replays identically.
        on_run_complete: Receives the reward id list at victory or game over.
    """

    def __init__(
        self,
        event_bus: EventBus | None = None,
        *,
        seed: int | None = None,
        playfield_width: float = 600.0,
        playfield_height: float = 800.0,
        player_collision_offset: float = 275.0,
        wave_timeout: float = 30.0,
        announce_delay: float = 2.0,
        stagger_interval: float = 0.15,
        invulnerability_window: float = 0.6,
        projectile_soft_cap: int = DEFAULT_SOFT_CAP,
        flyby_interval: float = 12.0,
        zone: str = DEFAULT_ZONE,
        on_run_complete: Callable[[list[str]], None] | None = None,
    ) -> None:
        self.event_bus = event_bus or EventBus()
        self.seed = seed
        self.rng = random.Random(seed)
        self.playfield_width = playfield_width
        self.playfield_height = playfield_height
        self.collision_y = playfield_height - player_collision_offset
        self.invulnerability_window = invulnerability_window
        self.on_run_complete = on_run_complete

        self.stats = RunStats()
        self.projectiles = ProjectileManager(soft_cap=projectile_soft_cap)
        self.powerups = PowerupManager(self.rng, playfield_height)
        self.enemies = EnemyRegistry(
            self.event_bus, self.projectiles, self.rng, self.powerups,
            playfield_width=playfield_width,
            playfield_height=playfield_height,
            flyby_interval=flyby_interval,
            on_defeat=self._on_enemy_defeated,
        )
        self.collisions = CollisionResolver(
            self.event_bus, self.enemies, self.projectiles, self.powerups)
        self.rewards = RewardDistributor(self.rng, get_reward_table(zone))
        self.director = WaveDirector(
            self.event_bus, self.enemies, self.rewards, self.rng,
            stats=self.stats,
            wave_timeout=wave_timeout,
            announce_delay=announce_delay,
            stagger_interval=stagger_interval,
            on_run_complete=self._deliver_rewards,
        )
        self.player: Player | None = None
        self.tick_count = 0

    # -- Derived state ------------------------------------------------------

    @property
    def state(self) -> str:
        return self.director.state

    @property
    def score(self) -> int:
        return self.director.score

    def _controllable(self, command: str) -> bool:
        if self.player is None or not self.director.world_running:
            logger.debug(f"{command} ignored in state {self.state}")
            return False
        return True

    # -- Callbacks ----------------------------------------------------------

    def _on_enemy_defeated(self, enemy: Enemy) -> None:
        self.director.add_points(enemy.points)
        self.stats.on_enemy_defeated(enemy.type_id)

    def _deliver_rewards(self, rewards: list[str]) -> None:
        if self.player is not None:
            self.player.firing = False
        self.projectiles.release_continuous_beams()
        if self.on_run_complete is not None:
            self.on_run_complete(rewards)

    # -- Commands -----------------------------------------------------------

    def select_character(self, char_id: str) -> bool:
        """Pick a character and start the run.

        Raises ``ValueError`` for an unknown id; returns False (no change)
        when a run is already underway.
        """
        character = get_character(char_id)
        if self.state != CHARACTER_SELECT:
            logger.debug(f"select_character ignored in state {self.state}")
            return False
        self.player = Player(character, self.collision_y, self.invulnerability_window)
        self.stats.character = character.char_id
        self.event_bus.publish("character_selected", {"character": character.char_id})
        logger.info(f"Character selected: {character.char_id}")
        return self.director.start()

    def move_left(self, held: bool = True) -> bool:
        """Press (``held=True``) or release the left key."""
        if not self._controllable("move_left"):
            return False
        self.player.moving_left = bool(held)
        return True

    def move_right(self, held: bool = True) -> bool:
        """Press (``held=True``) or release the right key."""
        if not self._controllable("move_right"):
            return False
        self.player.moving_right = bool(held)
        return True

    def tap_left(self) -> bool:
        return self._tap(-1)

    def tap_right(self) -> bool:
        return self._tap(1)

    def _tap(self, direction: int) -> bool:
        # A single tap steps at half speed and leaves the held keys alone
        if not self._controllable("tap"):
            return False
        self.player.nudge(direction, held=False)
        return True

    def stop(self) -> bool:
        """Release any held movement."""
        if not self._controllable("stop"):
            return False
        self.player.moving_left = self.player.moving_right = False
        return True

    def set_aim_point(self, x: float, y: float) -> bool:
        if not self._controllable("set_aim_point"):
            return False
        self.player.aim = (float(x), float(y))
        return True

    def set_firing(self, firing: bool) -> bool:
        if not self._controllable("set_firing"):
            return False
        self.player.firing = bool(firing)
        return True

    def trigger_special(self) -> bool:
        if not self._controllable("trigger_special"):
            return False
        if not self.player.trigger_special(self.projectiles, self.enemies, self.rng):
            logger.debug("Special not ready")
            return False
        self.stats.on_special()
        if self.player.last_special_shots:
            self.stats.on_shots_fired(self.player.last_special_shots)
        self.event_bus.publish("special_used", {"character": self.player.char_id})
        return True

    def pause(self) -> bool:
        return self.director.pause()

    def resume(self) -> bool:
        return self.director.resume()

    def quit(self) -> bool:
        """Abandon the run: pending work is dropped and no rewards are rolled."""
        if self.state == CHARACTER_SELECT:
            logger.debug("quit ignored, no run in progress")
            return False
        state = self.state
        self._clear_world()
        self.event_bus.publish("run_abandoned", {"state": state, "score": self.score})
        logger.info(f"Run abandoned in state {state}")
        self.director.reset()
        return True

    def reset(self) -> None:
        """Back to character select with fresh stats and a re-seeded RNG."""
        self._clear_world()
        self.director.reset()
        self.rng.seed(self.seed)
        self.stats = RunStats()
        self.director.stats = self.stats
        self.tick_count = 0

    def _clear_world(self) -> None:
        self.player = None
        self.enemies.clear()
        self.projectiles.clear()
        self.powerups.clear()

    # -- Tick ---------------------------------------------------------------

    def tick(self, dt: float) -> None:
        """Advance the whole combat core by ``dt`` seconds."""
        if dt <= 0 or self.player is None or not self.director.world_running:
            return
        director = self.director
        player = self.player

        director.tick(dt)
        ws = director.wave_state
        self.enemies.tick(dt, ws.elapsed, ws.formation_offset, player.collision_point)
        fired = player.tick(dt, self.projectiles)
        if fired:
            self.stats.on_shots_fired(fired)
        self.projectiles.tick(dt, self.enemies.targetable_positions())

        report = self.collisions.resolve(dt, player)
        if report.shot_hits:
            self.stats.on_shot_hit(report.shot_hits)
        if report.player_hits:
            self.stats.on_damage_taken(report.shield_damage, report.health_damage)
        if report.ignored_hits:
            self.stats.on_hit_ignored(report.ignored_hits)
        for kind in report.pickups:
            self.stats.on_powerup(kind)

        self.powerups.tick(dt)

        if report.player_killed:
            director.player_defeated()
        else:
            director.check_completion()
        self.tick_count += 1

    # -- Snapshot -----------------------------------------------------------

    def snapshot(self) -> dict:
        """Per-tick render state."""
        return {
            "state": self.state,
            "round": self.director.wave_state.round,
            "wave": self.director.wave_state.wave,
            "score": self.score,
            "tick": self.tick_count,
            "wave_state": self.director.wave_state.to_dict(),
            "player": self.player.to_dict() if self.player is not None else None,
            "enemies": self.enemies.to_telemetry(),
            "projectiles": self.projectiles.to_telemetry(),
            "powerups": self.powerups.to_telemetry(),
        }
