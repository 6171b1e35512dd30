# cosmic_ball/game/level.py
from __future__ import annotations
import logging
import random
from typing import List, Optional, Set
from .config import (
    PLATFORM_WIDTH, PLATFORM_GAP, ROW_SPACING, SEED_DEPTH, EXTEND_SPAN,
    MAX_PLATFORMS_PER_ROW, POWERUP_CHANCE, HAZARD_CHANCE,
    SPIKE_TWISTED_CHANCE, SPIKE_CHANCE, SEED_DEFAULT
)
from .entities import (
    Platform, PlatformType, STANDARD_PLATFORM_TYPES, Hazard, HazardType,
    PowerUp, PowerUpType
)

logger = logging.getLogger(__name__)


class LevelGen:
    """
    Generates an endless column of platform rows above the player.
    - seed(): starting Star platform + random rows down to SEED_DEPTH (hazards allowed)
    - extend(): evenly spaced rows ahead of the highest platform (no hazards)
    Both draw from one seeded RNG so a seed reproduces the whole layout.
    """
    def __init__(self, width: int, height: int, seed: Optional[int] = None,
                 rng: Optional[random.Random] = None):
        if width < PLATFORM_WIDTH or height <= 0:
            raise ValueError(f"canvas {width}x{height} too small for platforms")
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self.rng = rng or random.Random(seed)
        self.width = width
        self.height = height
        self.platforms: List[Platform] = []
        self.hazards: List[Hazard] = []
        self.power_ups: List[PowerUp] = []

    # ---- type draws ----
    def random_platform_type(self) -> PlatformType:
        roll = self.rng.random()
        if roll < SPIKE_TWISTED_CHANCE:
            return PlatformType.SPIKE_TWISTED
        if roll < SPIKE_TWISTED_CHANCE + SPIKE_CHANCE:
            return PlatformType.SPIKE
        return self.rng.choice(STANDARD_PLATFORM_TYPES)

    def random_powerup_type(self) -> PowerUpType:
        return self.rng.choice(tuple(PowerUpType))

    def random_hazard_type(self) -> HazardType:
        return self.rng.choice(tuple(HazardType))

    # ---- placement ----
    def _random_item_x(self) -> float:
        return self.rng.random() * (self.width - 50) + 25

    def _maybe_add_powerup(self, row_y: float) -> None:
        if self.rng.random() < POWERUP_CHANCE:
            self.power_ups.append(PowerUp(self._random_item_x(), row_y - 30,
                                          self.random_powerup_type()))

    def _maybe_add_hazard(self, row_y: float) -> None:
        if self.rng.random() < HAZARD_CHANCE:
            self.hazards.append(Hazard(self._random_item_x(), row_y - 60,
                                       self.random_hazard_type()))

    def _seed_row(self, y: float) -> None:
        # fully random x: platforms in one row may overlap
        for _ in range(self.rng.randint(1, MAX_PLATFORMS_PER_ROW)):
            x = self.rng.random() * (self.width - PLATFORM_WIDTH)
            self.platforms.append(Platform(x, y, self.random_platform_type()))
        self._maybe_add_powerup(y)
        self._maybe_add_hazard(y)

    def slots_per_row(self) -> int:
        return max(1, self.width // (PLATFORM_WIDTH + PLATFORM_GAP))

    def _extension_row(self, y: float) -> None:
        count = min(self.slots_per_row(), self.rng.randint(1, MAX_PLATFORMS_PER_ROW))
        slot = PLATFORM_WIDTH + PLATFORM_GAP
        total_w = count * PLATFORM_WIDTH + (count - 1) * PLATFORM_GAP
        start_x = (self.width - total_w) / 2
        for i in range(count):
            self.platforms.append(Platform(start_x + i * slot, y, self.random_platform_type()))
        self._maybe_add_powerup(y)

    # ---- entry points ----
    def seed_level(self) -> None:
        self.platforms.clear()
        self.hazards.clear()
        self.power_ups.clear()
        self.platforms.append(Platform(self.width / 2 - PLATFORM_WIDTH / 2,
                                       self.height - 50, PlatformType.STAR))
        y = self.height - 150
        rows = 0
        while y > SEED_DEPTH:
            self._seed_row(y)
            y -= ROW_SPACING
            rows += 1
        logger.debug("seeded %d rows (%d platforms, %d power-ups, %d hazards)",
                     rows, len(self.platforms), len(self.power_ups), len(self.hazards))

    def highest_platform_y(self) -> float:
        # with nothing alive, grow from the bottom of the view
        return min((p.y for p in self.platforms), default=float(self.height))

    def extension_threshold(self) -> float:
        return -self.height * 2

    def needs_extension(self) -> bool:
        return self.highest_platform_y() > self.extension_threshold()

    def extend(self) -> int:
        """Add rows until the highest platform is 2 canvas heights up. Returns rows added."""
        rows = 0
        while self.needs_extension():
            highest = self.highest_platform_y()
            y = highest - ROW_SPACING
            while y > highest - EXTEND_SPAN:
                self._extension_row(y)
                y -= ROW_SPACING
                rows += 1
        if rows:
            logger.debug("extended %d rows, highest platform at %.1f",
                         rows, self.highest_platform_y())
        return rows

    # ---- per-tick update ----
    def update(self, now_ms: float, game_speed: float) -> Set[int]:
        """Scroll every entity one tick and drop what left the screen.
        Returns the ids of the platforms still alive."""
        self.platforms = [p for p in self.platforms if not p.update(now_ms, self.height)]
        self.hazards = [h for h in self.hazards if not h.update(game_speed, now_ms, self.height)]
        self.power_ups = [u for u in self.power_ups if not u.collected and not u.update(self.height)]
        return {p.id for p in self.platforms}


def default_seed(seed: Optional[int]) -> Optional[int]:
    """CLI convention: None -> SEED_DEFAULT, -1 -> random each launch."""
    if seed is None:
        return SEED_DEFAULT
    if seed == -1:
        return None
    return seed
