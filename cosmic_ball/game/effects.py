# cosmic_ball/game/effects.py
"""Cosmetic particles and score popups.

Nothing in the simulation reads these back; they exist only so a renderer
has something to draw when a gameplay event happens. The emitter owns its
own RNG so the number of particles spawned never shifts the level layout
drawn from the simulation's seeded RNG.
"""
from __future__ import annotations
import colorsys
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

Color = Tuple[int, int, int]

PARTICLE_LIFE = 30
POPUP_LIFE = 60


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    color: Color
    radius: float
    life: int = PARTICLE_LIFE

    @property
    def alpha(self) -> float:
        return max(0.0, self.life / PARTICLE_LIFE)

    def update(self) -> bool:
        """Advance one tick. Returns True when dead."""
        self.x += self.vx
        self.y += self.vy
        self.vx *= 0.98
        self.vy *= 0.98
        self.life -= 1
        return self.life <= 0


@dataclass
class ScorePopup:
    x: float
    y: float
    text: str
    vy: float = -2.0
    life: int = POPUP_LIFE

    @property
    def alpha(self) -> float:
        return max(0.0, self.life / POPUP_LIFE)

    def update(self) -> bool:
        self.y += self.vy
        self.vy *= 0.9
        self.life -= 1
        return self.life <= 0


class EffectEmitter:
    """Spawns and ages transient decorative entities."""

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)
        self.particles: List[Particle] = []
        self.popups: List[ScorePopup] = []

    # ---- Spawn helpers ----
    def _particle(self, x: float, y: float, color: Color) -> Particle:
        p = Particle(
            x=x, y=y,
            vx=(self.rng.random() - 0.5) * 8,
            vy=(self.rng.random() - 0.5) * 8,
            color=color,
            radius=self.rng.random() * 3 + 1,
        )
        self.particles.append(p)
        return p

    def burst(self, x: float, y: float, count: int, color: Color) -> None:
        for _ in range(max(0, count)):
            self._particle(x, y, color)

    def ring(self, cx: float, cy: float, count: int, distance: float, color: Color) -> None:
        for i in range(max(0, count)):
            angle = (i / count) * math.pi * 2
            self._particle(cx + math.cos(angle) * distance,
                           cy + math.sin(angle) * distance, color)

    def scatter(self, width: float, height: float, count: int, color: Color) -> None:
        """Particles at random spots across the whole canvas (milestones)."""
        for _ in range(max(0, count)):
            self._particle(self.rng.random() * width, self.rng.random() * height, color)

    def scatter_around(self, x: float, y: float, count: int, spread: float, color: Color) -> None:
        for _ in range(max(0, count)):
            self._particle(x + (self.rng.random() - 0.5) * spread,
                           y + (self.rng.random() - 0.5) * spread, color)

    def galaxy(self, cx: float, cy: float, count: int, max_distance: float) -> None:
        for _ in range(max(0, count)):
            angle = self.rng.random() * math.pi * 2
            dist = self.rng.random() * max_distance
            r, g, b = colorsys.hls_to_rgb(self.rng.random(), 0.7, 1.0)
            self._particle(cx + math.cos(angle) * dist, cy + math.sin(angle) * dist,
                           (int(r * 255), int(g * 255), int(b * 255)))

    def popup(self, x: float, y: float, text: str) -> ScorePopup:
        pop = ScorePopup(x, y, text)
        self.popups.append(pop)
        return pop

    # ---- Update ----
    def update(self) -> None:
        self.particles = [p for p in self.particles if not p.update()]
        self.popups = [p for p in self.popups if not p.update()]

    def clear(self) -> None:
        self.particles.clear()
        self.popups.clear()

    def __len__(self) -> int:
        return len(self.particles) + len(self.popups)
