# cosmic_ball/game/render.py
from __future__ import annotations
import math
import random
from typing import List, Optional, Sequence, Tuple
import pygame
from .config import (
    COLOR_BG, COLOR_BG_EDGE, COLOR_FG, COLOR_PLAYER, COLOR_PLAYER_GLOW,
    COLOR_GOLD, COLOR_DANGER, COLOR_SHIELD, COLOR_MAGNET, COLOR_PHASE, COLOR_HUD
)
from .entities import Platform, PlatformType, Hazard, HazardType, PowerUp
from .simulation import Simulation

Color = Tuple[int, int, int]
Point = Tuple[float, float]

STAR_COUNT = 120
STAR_PARALLAX = 0.2


def _fade(color: Color, alpha: float, bg: Color = COLOR_BG) -> Color:
    """Blend towards the background instead of per-pixel alpha."""
    a = max(0.0, min(1.0, alpha))
    return tuple(int(bg[i] + (color[i] - bg[i]) * a) for i in range(3))


def _rotated_rect(cx: float, cy: float, w: float, h: float, angle: float) -> List[Point]:
    c, s = math.cos(angle), math.sin(angle)
    pts = []
    for dx, dy in ((-w / 2, -h / 2), (w / 2, -h / 2), (w / 2, h / 2), (-w / 2, h / 2)):
        pts.append((cx + dx * c - dy * s, cy + dx * s + dy * c))
    return pts


class Renderer:
    """
    Draws a Simulation onto any pygame Surface.
    Used by the playable front end and by the Gym env's render().
    """
    def __init__(self, width: int, height: int, star_seed: int = 7):
        self.width = width
        self.height = height
        rng = random.Random(star_seed)
        self.stars = [(rng.random() * width, rng.random() * height, rng.random() * 1.5 + 0.5)
                      for _ in range(STAR_COUNT)]
        self.world = pygame.Surface((width, height))
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None
        self._shake_rng = random.Random(star_seed)

    @property
    def font(self) -> pygame.font.Font:
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.SysFont("jetbrainsmono", 18)
        return self._font

    @property
    def big_font(self) -> pygame.font.Font:
        if self._big_font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._big_font = pygame.font.SysFont("jetbrainsmono", 42, bold=True)
        return self._big_font

    # -------------------- Frame --------------------

    def draw(self, screen: pygame.Surface, sim: Simulation) -> None:
        surf = self.world
        self._draw_background(surf, sim.camera_y)
        for p in sim.platforms:
            self._draw_platform(surf, p)
        for h in sim.hazards:
            self._draw_hazard(surf, h)
        for u in sim.power_ups:
            self._draw_powerup(surf, u)
        self._draw_effects(surf, sim)
        self._draw_player(surf, sim)

        offset = (0, 0)
        if sim.screen_shake > 0:
            k = sim.screen_shake_intensity
            offset = (int((self._shake_rng.random() - 0.5) * k),
                      int((self._shake_rng.random() - 0.5) * k))
        screen.fill(COLOR_BG_EDGE)
        screen.blit(surf, offset)
        self._draw_hud(screen, sim)

    def _draw_background(self, surf: pygame.Surface, camera_y: float) -> None:
        surf.fill(COLOR_BG)
        shift = camera_y * STAR_PARALLAX
        for x, y, r in self.stars:
            sy = (y + shift) % self.height
            pygame.draw.circle(surf, _fade(COLOR_FG, 0.3 + r / 4), (int(x), int(sy)), max(1, int(r)))

    # -------------------- Entities --------------------

    def _draw_platform(self, surf: pygame.Surface, p: Platform) -> None:
        if p.broken:
            return
        if p.platform_type.is_spike:
            self._draw_spike(surf, p)
            return
        glow = p.rect.inflate(6, 6)
        pygame.draw.rect(surf, _fade(p.glow_color, 0.4), glow, border_radius=8)
        pygame.draw.rect(surf, p.color, p.rect, border_radius=6)
        if p.platform_type is PlatformType.BLACK_HOLE:
            pygame.draw.circle(surf, p.glow_color, p.rect.center, p.height // 2, width=2)
        elif p.platform_type is PlatformType.STAR:
            pygame.draw.rect(surf, COLOR_FG, p.rect, width=1, border_radius=6)

    def _draw_spike(self, surf: pygame.Surface, p: Platform) -> None:
        cx, cy = p.x + p.width / 2, p.y + p.height / 2
        teeth = 5
        tooth_w = p.width / teeth
        c, s = math.cos(p.angle), math.sin(p.angle)

        def rot(px: float, py: float) -> Point:
            dx, dy = px - cx, py - cy
            return cx + dx * c - dy * s, cy + dx * s + dy * c

        for i in range(teeth):
            left = p.x + i * tooth_w
            tri = [rot(left, p.y + p.height), rot(left + tooth_w / 2, p.y),
                   rot(left + tooth_w, p.y + p.height)]
            pygame.draw.polygon(surf, p.color, tri)
        pygame.draw.polygon(surf, p.glow_color, _rotated_rect(cx, cy, p.width, p.height, p.angle), width=1)

    def _draw_hazard(self, surf: pygame.Surface, h: Hazard) -> None:
        cx, cy = h.center
        if h.hazard_type is HazardType.DARK_VOID:
            r = int(h.width / 2 * h.pulse)
            pygame.draw.circle(surf, h.color, (int(cx), int(cy)), max(2, r))
            pygame.draw.circle(surf, COLOR_PHASE, (int(cx), int(cy)), max(2, r), width=2)
        elif h.hazard_type is HazardType.ASTEROID_SPIKE:
            pts = []
            for i in range(3):
                a = h.angle + i * 2 * math.pi / 3
                pts.append((cx + math.cos(a) * h.width / 2, cy + math.sin(a) * h.width / 2))
            pygame.draw.polygon(surf, _fade(h.color, h.pulse), pts)
        else:
            pts = _rotated_rect(cx, cy, h.width, h.height, math.sin(h.angle) * 0.1)
            pygame.draw.polygon(surf, _fade(h.color, h.pulse), pts)
            pygame.draw.polygon(surf, COLOR_DANGER, pts, width=1)

    def _draw_powerup(self, surf: pygame.Surface, u: PowerUp) -> None:
        center = (int(u.x), int(u.y))
        r = int(u.radius)
        pygame.draw.circle(surf, _fade(u.color, 0.35), center, r + 4)
        pygame.draw.circle(surf, u.color, center, r)
        tip = (u.x + math.cos(u.angle) * r, u.y + math.sin(u.angle) * r)
        pygame.draw.line(surf, COLOR_FG, center, tip, 2)

    def _draw_effects(self, surf: pygame.Surface, sim: Simulation) -> None:
        for part in sim.effects.particles:
            pygame.draw.circle(surf, _fade(part.color, part.alpha),
                               (int(part.x), int(part.y)), max(1, int(part.radius)))
        for pop in sim.effects.popups:
            txt = self.font.render(pop.text, True, _fade(COLOR_GOLD, pop.alpha))
            surf.blit(txt, (pop.x - txt.get_width() // 2, pop.y))

    def _draw_player(self, surf: pygame.Surface, sim: Simulation) -> None:
        pl = sim.player
        if pl is None:
            return
        n = len(pl.trail)
        for i, (tx, ty) in enumerate(pl.trail):
            a = (i + 1) / max(1, n)
            pygame.draw.circle(surf, _fade(COLOR_PLAYER_GLOW, a * 0.5),
                               (int(tx), int(ty)), max(1, int(pl.radius * a * 0.8)))

        center = (int(pl.x), int(pl.y))
        r = int(pl.radius)
        body = COLOR_PLAYER if sim.running else COLOR_DANGER
        pygame.draw.circle(surf, _fade(COLOR_PLAYER_GLOW, 0.5), center, r + 5)
        pygame.draw.circle(surf, body, center, r)

        rings: Sequence[Tuple[bool, Color]] = (
            (pl.shielded, COLOR_SHIELD),
            (pl.magnetized, COLOR_MAGNET),
            (pl.phasing, COLOR_PHASE),
            (pl.invincible, COLOR_GOLD),
        )
        extra = 8
        for active, color in rings:
            if active:
                pygame.draw.circle(surf, color, center, r + extra, width=2)
                extra += 5

    # -------------------- HUD / overlays --------------------

    def _draw_hud(self, screen: pygame.Surface, sim: Simulation) -> None:
        snap = sim.snapshot()
        grav = "↑" if sim.gravity_reversed else "↓"
        lines = [
            f"Score: {snap.score}   High: {snap.high_score}",
            f"Combo: {snap.combo}   Speed: x{snap.game_speed:.1f}   Grav: {grav}",
        ]
        for i, msg in enumerate(lines):
            screen.blit(self.font.render(msg, True, COLOR_HUD), (12, 10 + i * 22))

    def draw_title(self, screen: pygame.Surface, high_score: int) -> None:
        screen.fill(COLOR_BG)
        self._center(screen, "COSMIC BALL", self.big_font, COLOR_GOLD, -60)
        self._center(screen, "SPACE to start / jump   ARROWS or A/D to move", self.font, COLOR_HUD, 0)
        self._center(screen, f"High score: {high_score}", self.font, COLOR_FG, 30)

    def draw_game_over(self, screen: pygame.Surface, sim: Simulation) -> None:
        panel = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        panel.fill((5, 5, 16, 180))
        screen.blit(panel, (0, 0))
        self._center(screen, "GAME OVER", self.big_font, COLOR_DANGER, -60)
        self._center(screen, f"Score: {sim.score}   High: {sim.high_score}", self.font, COLOR_FG, 0)
        self._center(screen, "R restart   N new level   ESC quit", self.font, COLOR_HUD, 30)

    def _center(self, screen: pygame.Surface, text: str, font: pygame.font.Font,
                color: Color, dy: int) -> None:
        img = font.render(text, True, color)
        screen.blit(img, (self.width // 2 - img.get_width() // 2,
                          self.height // 2 - img.get_height() // 2 + dy))
