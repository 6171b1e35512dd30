# cosmic_ball/game/physics.py
from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional
from .config import (
    JUMP_FORCE, MOVE_ACCEL, MAX_VX, FRICTION, RESTITUTION, SNAP_DISTANCE,
    KEYS_LEFT, KEYS_RIGHT, NEBULA_BOUNCE_MULTIPLIER, NEBULA_PHASING_MULTIPLIER,
    COMET_SPEED_BOOST, COMET_BOUNCE_MULTIPLIER, STAR_SHIELD_BONUS,
    STAR_PHASING_SHIELD_BONUS, STAR_PHASING_COMBO, LANDING_BONUS,
    ASTEROID_PENALTY, ASTEROID_BOUNCE, BLACK_HOLE_REVERSE_MS,
    MAGNET_RANGE, MAGNET_PULL, COLOR_PLAYER, COLOR_GOLD, COLOR_FG, COLOR_SHIELD,
    COLOR_DANGER
)
from .entities import Platform, PlatformType, Hazard, HazardType, PowerUp
from .player import Player
from . import scoring

if TYPE_CHECKING:
    from .simulation import Simulation


@dataclass
class InputState:
    """Live key-identifier -> pressed map, filled by the input collaborator."""
    pressed: Dict[str, bool] = field(default_factory=dict)

    @classmethod
    def holding(cls, *keys: str) -> "InputState":
        return cls({k: True for k in keys})

    @property
    def left(self) -> bool:
        return any(self.pressed.get(k, False) for k in KEYS_LEFT)

    @property
    def right(self) -> bool:
        return any(self.pressed.get(k, False) for k in KEYS_RIGHT)


class HitResult(str, Enum):
    IGNORED = "ignored"      # invincible
    ABSORBED = "absorbed"    # shield consumed
    DAMAGED = "damaged"


# -------------------- Collision tests --------------------

def circle_rect_collides(cx: float, cy: float, r: float,
                         rx: float, ry: float, rw: float, rh: float) -> bool:
    """Circle vs axis-aligned rect (top-left rx, ry)."""
    dist_x = abs(cx - (rx + rw / 2))
    dist_y = abs(cy - (ry + rh / 2))

    if dist_x > rw / 2 + r:
        return False
    if dist_y > rh / 2 + r:
        return False

    if dist_x <= rw / 2:
        return True
    if dist_y <= rh / 2:
        return True

    corner_sq = (dist_x - rw / 2) ** 2 + (dist_y - rh / 2) ** 2
    return corner_sq <= r * r


def collides_with_platform(player: Player, platform: Platform) -> bool:
    return circle_rect_collides(player.x, player.y, player.radius,
                                platform.x, platform.y, platform.width, platform.height)


def collides_with_powerup(player: Player, powerup: PowerUp) -> bool:
    return math.hypot(player.x - powerup.x, player.y - powerup.y) < player.radius + powerup.radius


def collides_with_hazard(player: Player, hazard: Hazard) -> bool:
    if hazard.hazard_type is HazardType.DARK_VOID:
        hx, hy = hazard.center
        return math.hypot(player.x - hx, player.y - hy) < player.radius + hazard.width / 2
    return circle_rect_collides(player.x, player.y, player.radius,
                                hazard.x, hazard.y, hazard.width, hazard.height)


# -------------------- Integration --------------------

def integrate(sim: "Simulation", player: Player, inp: InputState) -> None:
    """One fixed step: gravity, horizontal input/friction, move, boundaries."""
    player.vy += sim.current_gravity

    if inp.left:
        player.vx = max(player.vx - MOVE_ACCEL, -MAX_VX)
    elif inp.right:
        player.vx = min(player.vx + MOVE_ACCEL, MAX_VX)
    else:
        player.vx *= FRICTION

    player.x += player.vx
    player.y += player.vy

    apply_boundaries(sim, player)


def apply_boundaries(sim: "Simulation", player: Player) -> None:
    """Clamp to the canvas and reflect with restitution. Bottom is fatal."""
    r = player.radius
    if player.x < r:
        player.x = r
        player.vx = abs(player.vx) * RESTITUTION
        sim.effects.burst(player.x, player.y, 5, COLOR_PLAYER)
    elif player.x > sim.width - r:
        player.x = sim.width - r
        player.vx = -abs(player.vx) * RESTITUTION
        sim.effects.burst(player.x, player.y, 5, COLOR_PLAYER)

    if player.y < r:
        player.y = r
        player.vy = abs(player.vy) * RESTITUTION
        sim.effects.burst(player.x, player.y, 5, COLOR_PLAYER)
    elif player.y > sim.height - r:
        player.y = sim.height - r
        player.vy = -abs(player.vy) * RESTITUTION
        sim.effects.burst(player.x, player.y, 5, COLOR_PLAYER)
        sim.schedule_game_over("fell")


# -------------------- Gravity --------------------

def reverse_gravity(sim: "Simulation") -> None:
    """Reverse gravity; a second reversal while active only pushes the restore out."""
    if not sim.gravity_reversed:
        sim.current_gravity = -abs(sim.current_gravity)
    sim.timers.push_back("gravity", BLACK_HOLE_REVERSE_MS, sim.restore_gravity)


# -------------------- Platform reactions --------------------

def _land(sim: "Simulation", player: Player, platform: Platform, vy: float) -> None:
    player.vy = vy
    player.land()
    if platform.id in player.visited_platforms:
        return
    player.visited_platforms.add(platform.id)
    sim.add_score(LANDING_BONUS)
    sim.effects.burst(player.x, player.y, 8, COLOR_GOLD)
    cx, cy = platform.x + platform.width / 2, platform.y + platform.height / 2
    sim.effects.ring(cx, cy, 15, 30, COLOR_GOLD)
    sim.effects.popup(cx, cy, f"+{LANDING_BONUS}")


def _on_nebula(sim: "Simulation", player: Player, platform: Platform) -> None:
    _land(sim, player, platform, JUMP_FORCE * NEBULA_BOUNCE_MULTIPLIER)
    sim.effects.burst(player.x, player.y, 10, platform.color)
    if player.phasing:
        player.vy *= NEBULA_PHASING_MULTIPLIER
        sim.effects.burst(player.x, player.y, 15, platform.glow_color)


def _on_meteor(sim: "Simulation", player: Player, platform: Platform) -> None:
    _land(sim, player, platform, JUMP_FORCE)
    platform.broken = True
    sim.effects.burst(platform.x + platform.width / 2, platform.y, 15, platform.color)
    if player.magnetized:
        sim.effects.burst(platform.x + platform.width / 2, platform.y, 10, (255, 128, 128))


def _on_black_hole(sim: "Simulation", player: Player, platform: Platform) -> None:
    _land(sim, player, platform, JUMP_FORCE)
    reverse_gravity(sim)
    sim.effects.burst(player.x, player.y, 20, platform.color)
    if sim.game_speed < 1:
        sim.effects.burst(player.x, player.y, 25, (64, 64, 128))


def _on_comet(sim: "Simulation", player: Player, platform: Platform) -> None:
    _land(sim, player, platform, JUMP_FORCE * COMET_BOUNCE_MULTIPLIER)
    player.vx *= COMET_SPEED_BOOST
    if sim.game_speed < 1:
        player.vx *= COMET_SPEED_BOOST
    sim.effects.burst(player.x, player.y, 8, platform.color)


def _on_star(sim: "Simulation", player: Player, platform: Platform) -> None:
    _land(sim, player, platform, JUMP_FORCE)
    if player.shielded:
        player.shield_time += STAR_SHIELD_BONUS
    sim.effects.burst(player.x, player.y, 15, COLOR_FG)
    if player.phasing:
        if player.shielded:
            player.shield_time += STAR_PHASING_SHIELD_BONUS
        scoring.advance_combo(sim, player, STAR_PHASING_COMBO)


PlatformReaction = Callable[["Simulation", Player, Platform], None]

PLATFORM_REACTIONS: Dict[PlatformType, PlatformReaction] = {
    PlatformType.NEBULA: _on_nebula,
    PlatformType.METEOR: _on_meteor,
    PlatformType.BLACK_HOLE: _on_black_hole,
    PlatformType.COMET: _on_comet,
    PlatformType.STAR: _on_star,
}


def handle_platform_collision(sim: "Simulation", player: Player, platform: Platform) -> None:
    if platform.platform_type.is_spike:
        if player.touch(platform.id):
            hit_hazard(sim, player, HazardType.ASTEROID_SPIKE)
        return
    # descending contact only, one reaction per tick
    if player.vy > 0 and not player.on_ground:
        PLATFORM_REACTIONS[platform.platform_type](sim, player, platform)


def is_solid(player: Player, platform: Platform) -> bool:
    """Broken meteors never collide. A phasing ball rises through everything
    but Black Holes and still lands on the way down."""
    if platform.broken:
        return False
    if player.phasing and player.vy < 0 and platform.platform_type is not PlatformType.BLACK_HOLE:
        return False
    return True


def resolve_platforms(sim: "Simulation", player: Player) -> bool:
    """Test every live platform. Returns True if any was touched this tick."""
    player.on_ground = False
    player.current_platform = None
    for platform in list(sim.platforms):
        if not is_solid(player, platform):
            continue
        if collides_with_platform(player, platform):
            handle_platform_collision(sim, player, platform)
            player.current_platform = platform.id
    return player.current_platform is not None


def snap_to_platform(sim: "Simulation", player: Player) -> Optional[Platform]:
    """Catch a fast-falling player that would tunnel through a thin platform."""
    closest: Optional[Platform] = None
    closest_dist = math.inf
    r = player.radius
    for platform in sim.platforms:
        if platform.platform_type.is_spike or not is_solid(player, platform):
            continue
        if platform.y <= player.y:
            continue
        if platform.x - r <= player.x <= platform.x + platform.width + r:
            dist = platform.y - player.y
            if 0 < dist < closest_dist:
                closest_dist = dist
                closest = platform

    if closest is None or closest_dist >= SNAP_DISTANCE:
        return None
    player.y = closest.y - r
    player.vy = 0.0
    player.land()
    player.current_platform = closest.id
    return closest


# -------------------- Hazards --------------------

def _asteroid_spike(sim: "Simulation", player: Player) -> None:
    sim.add_score(-ASTEROID_PENALTY)
    player.vy = JUMP_FORCE * ASTEROID_BOUNCE
    sim.effects.burst(player.x, player.y, 25, COLOR_DANGER)
    sim.schedule_game_over("asteroid spike")


def _dark_void(sim: "Simulation", player: Player) -> None:
    # no control reversal, cosmetic only
    sim.effects.burst(player.x, player.y, 40, (64, 64, 128))


def _unstable_platform(sim: "Simulation", player: Player) -> None:
    sim.effects.burst(player.x, player.y, 35, (128, 96, 96))


HAZARD_PENALTIES: Dict[HazardType, Callable[["Simulation", Player], None]] = {
    HazardType.ASTEROID_SPIKE: _asteroid_spike,
    HazardType.DARK_VOID: _dark_void,
    HazardType.UNSTABLE_PLATFORM: _unstable_platform,
}


def hit_hazard(sim: "Simulation", player: Player, hazard_type: HazardType) -> HitResult:
    if player.invincible:
        sim.effects.burst(player.x, player.y, 20, COLOR_FG)
        return HitResult.IGNORED

    if player.shielded:
        player.break_shield()
        sim.effects.burst(player.x, player.y, 30, COLOR_SHIELD)
        return HitResult.ABSORBED

    scoring.reset_combo(sim)
    HAZARD_PENALTIES[hazard_type](sim, player)
    return HitResult.DAMAGED


# -------------------- Magnet --------------------

def attract_powerup(player: Player, powerup: PowerUp) -> None:
    dx = player.x - powerup.x
    dy = player.y - powerup.y
    dist = math.hypot(dx, dy)
    if 0 < dist < MAGNET_RANGE:
        powerup.x += dx / dist * MAGNET_PULL
        powerup.y += dy / dist * MAGNET_PULL
