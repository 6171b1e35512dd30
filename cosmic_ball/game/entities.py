# cosmic_ball/game/entities.py
from __future__ import annotations
import itertools
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple
import pygame
from .config import (
    PLATFORM_WIDTH, PLATFORM_HEIGHT, HAZARD_SCALE, POWERUP_RADIUS,
    SCROLL_SPEED, SPIKE_FALL_SPEED, SPIKE_TWISTED_FALL_SPEED,
    PLATFORM_PRUNE_MARGIN, ITEM_PRUNE_MARGIN
)

Color = Tuple[int, int, int]


class PlatformType(str, Enum):
    NEBULA = "nebula"                  # bouncy
    METEOR = "meteor"                  # breaks after one landing
    BLACK_HOLE = "blackhole"           # reverses gravity
    COMET = "comet"                    # slippery, speed boost
    STAR = "star"                      # extends the shield
    SPIKE = "spike"                    # falling hazard
    SPIKE_TWISTED = "spike_twisted"    # faster falling hazard, rotates

    @property
    def is_spike(self) -> bool:
        return self in SPIKE_TYPES


SPIKE_TYPES = frozenset({PlatformType.SPIKE, PlatformType.SPIKE_TWISTED})
STANDARD_PLATFORM_TYPES: Tuple[PlatformType, ...] = tuple(
    t for t in PlatformType if t not in SPIKE_TYPES
)


class HazardType(str, Enum):
    ASTEROID_SPIKE = "asteroid_spike"
    DARK_VOID = "dark_void"
    UNSTABLE_PLATFORM = "unstable_platform"


class PowerUpType(str, Enum):
    STARDUST = "stardust"              # points
    CRYSTAL = "crystal"                # shield
    PULSAR = "pulsar"                  # extra jumps
    TIME_WARP = "time_warp"            # slows the game
    MAGNET = "magnet"                  # attracts power-ups
    NEBULA_SHIFT = "nebula_shift"      # phase through platforms


# (fill, glow)
PLATFORM_COLORS: Dict[PlatformType, Tuple[Color, Color]] = {
    PlatformType.NEBULA: ((160, 64, 255), (208, 128, 255)),
    PlatformType.METEOR: ((255, 96, 64), (255, 144, 112)),
    PlatformType.BLACK_HOLE: ((32, 32, 64), (80, 80, 128)),
    PlatformType.COMET: ((64, 160, 255), (112, 208, 255)),
    PlatformType.STAR: ((255, 255, 64), (255, 255, 255)),
    PlatformType.SPIKE: ((255, 64, 128), (255, 128, 192)),
    PlatformType.SPIKE_TWISTED: ((192, 64, 255), (224, 128, 255)),
}

# Extra downward speed on top of the world scroll
PLATFORM_FALL_SPEED: Dict[PlatformType, float] = {
    PlatformType.SPIKE: SPIKE_FALL_SPEED,
    PlatformType.SPIKE_TWISTED: SPIKE_TWISTED_FALL_SPEED,
}

HAZARD_COLORS: Dict[HazardType, Color] = {
    HazardType.ASTEROID_SPIKE: (255, 64, 64),
    HazardType.DARK_VOID: (16, 16, 48),
    HazardType.UNSTABLE_PLATFORM: (128, 96, 96),
}

POWERUP_COLORS: Dict[PowerUpType, Color] = {
    PowerUpType.STARDUST: (255, 255, 128),
    PowerUpType.CRYSTAL: (128, 255, 255),
    PowerUpType.PULSAR: (255, 128, 255),
    PowerUpType.TIME_WARP: (64, 255, 255),
    PowerUpType.MAGNET: (255, 128, 128),
    PowerUpType.NEBULA_SHIFT: (160, 64, 255),
}

# platforms and hazards share one id space
_entity_ids = itertools.count(1)


def _next_entity_id() -> int:
    return next(_entity_ids)


@dataclass
class Platform:
    x: float
    y: float
    platform_type: PlatformType
    width: int = PLATFORM_WIDTH
    height: int = PLATFORM_HEIGHT
    broken: bool = False               # Meteor only, never reset
    angle: float = 0.0                 # SpikeTwisted only
    id: int = field(default_factory=_next_entity_id)

    @property
    def rect(self) -> pygame.Rect:
        return pygame.Rect(int(self.x), int(self.y), self.width, self.height)

    @property
    def color(self) -> Color:
        return PLATFORM_COLORS[self.platform_type][0]

    @property
    def glow_color(self) -> Color:
        return PLATFORM_COLORS[self.platform_type][1]

    def update(self, now_ms: float, canvas_height: float) -> bool:
        """Scroll down one tick. Returns True once the platform left the screen."""
        self.y += SCROLL_SPEED + PLATFORM_FALL_SPEED.get(self.platform_type, 0.0)
        if self.platform_type is PlatformType.SPIKE_TWISTED:
            self.angle = math.sin(now_ms / 300.0) * 0.2
        return self.y > canvas_height + PLATFORM_PRUNE_MARGIN


@dataclass
class Hazard:
    x: float
    y: float
    hazard_type: HazardType
    width: float = PLATFORM_WIDTH * HAZARD_SCALE
    height: float = PLATFORM_HEIGHT * HAZARD_SCALE
    angle: float = 0.0
    pulse: float = 1.0
    id: int = field(default_factory=_next_entity_id)

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    @property
    def color(self) -> Color:
        return HAZARD_COLORS[self.hazard_type]

    def update(self, game_speed: float, now_ms: float, canvas_height: float) -> bool:
        self.y += SCROLL_SPEED * game_speed
        self.angle += 0.05
        self.pulse = math.sin(now_ms / 200.0) * 0.3 + 0.7
        return self.y > canvas_height + ITEM_PRUNE_MARGIN


@dataclass
class PowerUp:
    x: float
    y: float
    powerup_type: PowerUpType
    radius: float = POWERUP_RADIUS
    collected: bool = False            # guards against double application
    angle: float = 0.0

    @property
    def color(self) -> Color:
        return POWERUP_COLORS[self.powerup_type]

    def update(self, canvas_height: float) -> bool:
        self.y += SCROLL_SPEED
        self.angle += 0.1
        return self.y > canvas_height + ITEM_PRUNE_MARGIN
