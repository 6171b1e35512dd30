# cosmic_ball/game/simulation.py
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import List, Optional
from .config import (
    WIDTH, HEIGHT, GRAVITY, BASE_GAME_SPEED, SCROLL_SPEED, GAME_OVER_DELAY_MS,
    HIGHSCORE_KEY, HIGHSCORE_SAVE_INTERVAL_MS, COLOR_FG, COLOR_DANGER
)
from .effects import EffectEmitter
from .entities import Platform, Hazard, PowerUp
from .level import LevelGen
from .physics import (
    InputState, integrate, resolve_platforms, snap_to_platform,
    collides_with_powerup, collides_with_hazard, hit_hazard, attract_powerup
)
from .player import Player
from .scoring import collect_powerup, update_height_score, TIMED_ABILITIES
from .storage import MemoryStore
from .timers import Clock, DeferredTimers

logger = logging.getLogger(__name__)

_SAME_SEED = object()


@dataclass(frozen=True)
class Snapshot:
    """What the HUD shows after a tick."""
    score: int
    high_score: int
    combo: int
    game_speed: float
    running: bool
    tick: int


class Simulation:
    """
    One game instance: owns the player, the level, the timers and every
    counter, and advances them one fixed tick at a time.
    Tick order: due timers -> extend level -> player -> other entities
    -> prune -> visited-set GC -> high score.
    """
    def __init__(self,
                 width: int = WIDTH,
                 height: int = HEIGHT,
                 seed: Optional[int] = None,
                 store=None,
                 clock: Optional[Clock] = None,
                 effects_seed: Optional[int] = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid canvas size {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.store = store if store is not None else MemoryStore()
        self.high_score: int = max(0, int(self.store.get(HIGHSCORE_KEY)))
        self._saved_high = self.high_score
        self._last_save_ms = -math.inf
        self.timers = DeferredTimers(clock)
        self.effects = EffectEmitter(effects_seed)

        self.player: Optional[Player] = None
        self.level: Optional[LevelGen] = None
        self.seed: Optional[int] = None
        self.generation = 0
        self.restart(seed)

    # -------------------- Lifecycle --------------------

    def restart(self, seed=_SAME_SEED) -> None:
        """Fresh game. Timers scheduled by the previous game never fire.
        seed: omitted -> same layout as before, None -> new random layout."""
        if seed is _SAME_SEED:
            seed = self.seed
        self.generation = self.timers.invalidate()

        self.score = 0
        self.combo = 0
        self.current_gravity = GRAVITY
        self.game_speed = BASE_GAME_SPEED
        self.running = True
        self.game_over_reason: Optional[str] = None
        self.camera_y = 0.0
        self.tick_count = 0
        self.screen_shake = 0
        self.screen_shake_intensity = 0.0
        self._beat_high_score = False

        self.player = Player(x=self.width / 2, y=self.height / 2)
        self.level = LevelGen(self.width, self.height, seed)
        self.seed = self.level.seed
        self.level.seed_level()
        self.effects.clear()
        logger.info("new game (seed=%s, generation=%d)", self.seed, self.generation)

    def schedule_game_over(self, reason: str) -> None:
        if not self.running:
            return
        self.timers.schedule_once("game_over", GAME_OVER_DELAY_MS,
                                  lambda: self.game_over(reason))

    def game_over(self, reason: str = "") -> None:
        if not self.running:
            return
        self.running = False
        self.game_over_reason = reason or None
        if self.player is not None:
            self.effects.burst(self.player.x, self.player.y, 100, COLOR_DANGER)
        self._sync_high_score(force=True)
        logger.info("game over (%s): score=%d high=%d", reason or "stopped",
                    self.score, self.high_score)

    # -------------------- Shared state helpers --------------------

    @property
    def platforms(self) -> List[Platform]:
        return self.level.platforms

    @property
    def hazards(self) -> List[Hazard]:
        return self.level.hazards

    @property
    def power_ups(self) -> List[PowerUp]:
        return self.level.power_ups

    @property
    def particles(self):
        return self.effects.particles

    @property
    def gravity_reversed(self) -> bool:
        return self.current_gravity < 0

    @property
    def altitude(self) -> float:
        """Player's world-space y: screen y minus everything scrolled so far."""
        return self.player.y - self.camera_y

    def now(self) -> float:
        return self.timers.now()

    def add_score(self, delta: int) -> None:
        self.score = max(0, self.score + int(delta))

    def shake(self, duration: int, intensity: float) -> None:
        self.screen_shake = max(self.screen_shake, duration)
        self.screen_shake_intensity = intensity

    # -------------------- Deferred callbacks --------------------
    # Fired by DeferredTimers; all tolerate a missing player.

    def restore_gravity(self) -> None:
        self.current_gravity = abs(GRAVITY)

    def end_time_warp(self) -> None:
        self.game_speed = BASE_GAME_SPEED

    def expire_ability(self, ability: str) -> None:
        if self.player is None or ability not in TIMED_ABILITIES:
            return
        setattr(self.player, ability, False)

    def restore_vx(self, vx: float) -> None:
        if self.player is not None:
            self.player.vx = vx

    # -------------------- Input --------------------

    def jump(self) -> bool:
        if not self.running or self.player is None:
            return False
        if self.player.jump():
            self.effects.burst(self.player.x, self.player.y, 5, COLOR_FG)
            return True
        return False

    # -------------------- Tick --------------------

    def tick(self, inp: Optional[InputState] = None) -> Snapshot:
        self.timers.poll()
        if not self.running:
            self.effects.update()
            return self.snapshot()

        inp = inp or InputState()
        self.level.extend()
        self._update_player(inp)

        live_ids = self.level.update(self.now(), self.game_speed)
        self.effects.update()
        self.player.forget_platforms(live_ids)

        self.camera_y += SCROLL_SPEED
        self._sync_high_score()
        if self.screen_shake > 0:
            self.screen_shake -= 1
        self.tick_count += 1
        return self.snapshot()

    def _update_player(self, inp: InputState) -> None:
        p = self.player
        integrate(self, p, inp)
        p.record_trail()
        p.tick_shield()

        touched = resolve_platforms(self, p)
        if not p.on_ground and p.vy >= 0 and not touched:
            snap_to_platform(self, p)

        for powerup in list(self.power_ups):
            if p.magnetized:
                attract_powerup(p, powerup)
            if not powerup.collected and collides_with_powerup(p, powerup):
                collect_powerup(self, p, powerup)
                self.effects.burst(p.x, p.y, 20, COLOR_FG)
        self.level.power_ups = [u for u in self.power_ups if not u.collected]

        for hazard in list(self.hazards):
            if collides_with_hazard(p, hazard) and p.touch(hazard.id):
                hit_hazard(self, p, hazard.hazard_type)
        p.end_contacts()

        update_height_score(self, p, self.altitude)

    def _sync_high_score(self, force: bool = False) -> None:
        self.score = max(0, self.score)
        if self.score > self.high_score:
            if not self._beat_high_score:
                self._beat_high_score = True
                logger.info("new high score (previous best %d)", self.high_score)
            self.high_score = self.score
        if self.high_score <= self._saved_high:
            return
        now = self.now()
        if force or now - self._last_save_ms >= HIGHSCORE_SAVE_INTERVAL_MS:
            self.store.set(HIGHSCORE_KEY, self.high_score)
            self._saved_high = self.high_score
            self._last_save_ms = now

    def save_high_score(self) -> None:
        """Flush a high score still waiting on the write interval."""
        self._sync_high_score(force=True)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            score=self.score,
            high_score=self.high_score,
            combo=self.combo,
            game_speed=self.game_speed,
            running=self.running,
            tick=self.tick_count,
        )
