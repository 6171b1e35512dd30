# cosmic_ball/game/player.py
from __future__ import annotations
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Deque, Optional, Set, Tuple
import pygame
from .config import (
    PLAYER_X, PLAYER_Y, PLAYER_RADIUS, MAX_JUMPS, JUMP_FORCE,
    SEQUENCE_LENGTH, TRAIL_LENGTH
)
from .entities import PowerUpType


@dataclass
class Player:
    """
    The ball. Screen-space position, per-tick velocity.
    - jumps counts jumps used since the last landing, 0 <= jumps <= max_jumps
    - ability flags combine freely (shielded and phasing at once is fine)
    - shield is tick-counted; the other abilities expire through deferred timers
    """
    x: float = PLAYER_X
    y: float = PLAYER_Y
    vx: float = 0.0
    vy: float = 0.0
    radius: float = PLAYER_RADIUS
    on_ground: bool = False
    jumps: int = 0
    max_jumps: int = MAX_JUMPS

    # --- abilities ---
    shielded: bool = False
    shield_time: int = 0              # ticks left
    magnetized: bool = False
    phasing: bool = False
    invincible: bool = False

    # --- combo bookkeeping ---
    last_powerup_time: Optional[float] = None   # ms, None until the first pickup
    quick_collect_streak: int = 0
    same_type_streak: int = 0
    last_powerup_type: Optional[PowerUpType] = None
    powerup_sequence: Deque[PowerUpType] = field(
        default_factory=lambda: deque(maxlen=SEQUENCE_LENGTH))
    collected_types: Set[PowerUpType] = field(default_factory=set)
    pickup_counts: Counter = field(default_factory=Counter)

    # ids of live platforms already scored; pruned with the platforms
    visited_platforms: Set[int] = field(default_factory=set)
    current_platform: Optional[int] = None

    # hazard / spike ids overlapped last tick and so far this tick
    touching_hazards: Set[int] = field(default_factory=set)
    contacts_this_tick: Set[int] = field(default_factory=set)

    trail: Deque[Tuple[float, float]] = field(
        default_factory=lambda: deque(maxlen=TRAIL_LENGTH))

    @property
    def rect(self) -> pygame.Rect:
        d = int(self.radius * 2)
        return pygame.Rect(int(self.x - self.radius), int(self.y - self.radius), d, d)

    @property
    def jumps_left(self) -> int:
        return max(0, self.max_jumps - self.jumps)

    def can_jump(self) -> bool:
        return self.jumps < self.max_jumps

    def jump(self) -> bool:
        """Jump if any jump is left. Returns True if performed."""
        if not self.can_jump():
            return False
        self.vy = JUMP_FORCE
        self.jumps += 1
        self.on_ground = False
        return True

    def land(self) -> None:
        self.on_ground = True
        self.jumps = 0

    def grant_shield(self, ticks: int) -> None:
        """Shield time stacks on top of whatever is left."""
        if ticks <= 0:
            return
        self.shielded = True
        self.shield_time += ticks

    def tick_shield(self) -> None:
        if self.shielded:
            self.shield_time -= 1
            if self.shield_time <= 0:
                self.shield_time = 0
                self.shielded = False

    def break_shield(self) -> None:
        self.shielded = False
        self.shield_time = 0

    def record_trail(self) -> None:
        self.trail.append((self.x, self.y))

    def touch(self, entity_id: int) -> bool:
        """Record an overlap. True only on the tick the contact starts."""
        self.contacts_this_tick.add(entity_id)
        return entity_id not in self.touching_hazards

    def end_contacts(self) -> None:
        self.touching_hazards = self.contacts_this_tick
        self.contacts_this_tick = set()

    def forget_platforms(self, live_ids: Set[int]) -> None:
        self.visited_platforms &= live_ids
        if self.current_platform is not None and self.current_platform not in live_ids:
            self.current_platform = None
