# cosmic_ball/game/scoring.py
"""Score, combo and power-up rules.

Height climbed sets a floor the score can only rise above; everything else
is an additive bonus. Bonuses are independent predicates over the player
and the simulation, each evaluated once per pickup and each clamped at 0,
so adding a rule never means re-ordering the others.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Tuple
from .config import (
    HEIGHT_SCORE_DIVISOR, SCORE_MILESTONES, SUPER_MILESTONE_START,
    SUPER_MILESTONE_STEP, SUPER_ABILITY_MS, SPEED_STEP_SCORE, SPEED_STEP,
    BASE_GAME_SPEED, MAX_GAME_SPEED, TIME_WARP_SPEED, TIME_WARP_MS, MAGNET_MS,
    PHASING_MS, STARDUST_BOOST_MS, CRYSTAL_SHIELD_TICKS, CRYSTAL_BONUS_TICKS,
    QUICK_COLLECT_MS, FAST_RECOLLECT_MS, PATIENT_RECOLLECT_MS,
    COMBO_INVINCIBLE_AT, COMBO_INVINCIBLE_MS, COMPLETION_BONUS,
    COLOR_FG, COLOR_GOLD, COLOR_DANGER, COLOR_SHIELD, COLOR_MAGNET, COLOR_PHASE
)
from .entities import PowerUp, PowerUpType
from .player import Player

if TYPE_CHECKING:
    from .simulation import Simulation

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

TIMED_ABILITIES = ("magnetized", "phasing", "invincible")


# -------------------- Height score --------------------

def height_score(altitude: float) -> int:
    """Score earned by reaching altitude (world y grows downward)."""
    return max(0, math.floor(-altitude / HEIGHT_SCORE_DIVISOR))


def update_height_score(sim: "Simulation", player: Player, altitude: float) -> int:
    """Raise the score to the height reached. Returns the points gained."""
    new = height_score(altitude)
    prev = sim.score
    if new <= prev:
        return 0
    sim.score = new

    for milestone in SCORE_MILESTONES:
        if prev < milestone <= new:
            logger.info("score milestone %d", milestone)
            sim.effects.scatter(sim.width, sim.height, 100, COLOR_GOLD)

    first = max(SUPER_MILESTONE_START,
                (prev // SUPER_MILESTONE_STEP + 1) * SUPER_MILESTONE_STEP)
    for milestone in range(first, new + 1, SUPER_MILESTONE_STEP):
        logger.info("super milestone %d", milestone)
        sim.effects.galaxy(sim.width / 2, sim.height / 2, 200, 300)
        for ability in TIMED_ABILITIES:
            grant_ability(sim, player, ability, SUPER_ABILITY_MS)

    if new // SPEED_STEP_SCORE > prev // SPEED_STEP_SCORE:
        sim.game_speed = min(MAX_GAME_SPEED,
                             BASE_GAME_SPEED + (new // SPEED_STEP_SCORE) * SPEED_STEP)
        if sim.game_speed > 1.5:
            sim.effects.burst(sim.width / 2, sim.height / 2, 50, COLOR_DANGER)

    return new - prev


# -------------------- Combo --------------------

def reset_combo(sim: "Simulation") -> None:
    sim.combo = 0


def advance_combo(sim: "Simulation", player: Player, steps: int = 1) -> None:
    """Step the combo one at a time so no milestone is skipped."""
    for _ in range(max(0, steps)):
        sim.combo += 1
        combo = sim.combo
        if combo % 5 == 0:
            sim.add_score(combo * 10)
            if combo % 10 == 0:
                sim.effects.burst(player.x, player.y, 50, COLOR_FG)
            if combo % 20 == 0:
                sim.effects.ring(player.x, player.y, 30, 100, COLOR_GOLD)
                sim.shake(10, 5)

        reached = combo == COMBO_INVINCIBLE_AT or (combo > COMBO_INVINCIBLE_AT and combo % 20 == 0)
        if reached and not player.invincible:
            grant_ability(sim, player, "invincible", COMBO_INVINCIBLE_MS)
            sim.effects.scatter_around(player.x, player.y, 50, 50, COLOR_FG)


# -------------------- Timed abilities --------------------

def grant_ability(sim: "Simulation", player: Player, ability: str, duration_ms: float) -> None:
    """Turn a wall-clock ability on; an active one gets duration_ms more."""
    if ability not in TIMED_ABILITIES:
        raise ValueError(f"unknown ability {ability!r}")
    setattr(player, ability, True)
    sim.timers.extend(ability, duration_ms, lambda: sim.expire_ability(ability))


def start_time_warp(sim: "Simulation", duration_ms: float) -> None:
    sim.game_speed = TIME_WARP_SPEED
    sim.timers.extend("time_warp", duration_ms, sim.end_time_warp)


# -------------------- Power-up effects --------------------

def _stardust(sim: "Simulation", player: Player, count: int) -> None:
    sim.add_score(50)
    sim.effects.burst(player.x, player.y, 15, COLOR_GOLD)
    if count % 25 == 0:
        original_vx = player.vx
        player.vx *= 2
        sim.timers.call_later(STARDUST_BOOST_MS, lambda: sim.restore_vx(original_vx))
        sim.effects.burst(player.x, player.y, 30, COLOR_FG)


def _crystal(sim: "Simulation", player: Player, count: int) -> None:
    player.grant_shield(CRYSTAL_SHIELD_TICKS)
    sim.effects.burst(player.x, player.y, 20, COLOR_SHIELD)
    if count % 5 == 0:
        player.grant_shield(CRYSTAL_BONUS_TICKS)
        sim.effects.burst(player.x, player.y, 25, COLOR_FG)


def _pulsar(sim: "Simulation", player: Player, count: int) -> None:
    player.max_jumps = max(player.max_jumps, 3)
    player.jumps = 0
    sim.effects.burst(player.x, player.y, 25, (255, 128, 255))
    if count % 3 == 0:
        player.max_jumps += 1
        sim.effects.burst(player.x, player.y, 30, COLOR_FG)


def _time_warp(sim: "Simulation", player: Player, count: int) -> None:
    duration = TIME_WARP_MS * 2 if count % 3 == 0 else TIME_WARP_MS
    start_time_warp(sim, duration)
    sim.effects.burst(player.x, player.y, 30, (64, 255, 255))
    if count % 3 == 0:
        sim.effects.burst(player.x, player.y, 35, COLOR_FG)
    # the pickup itself happens in slow time
    if sim.game_speed < 1:
        sim.add_score(100)


def _magnet(sim: "Simulation", player: Player, count: int) -> None:
    grant_ability(sim, player, "magnetized", MAGNET_MS * 2 if count % 3 == 0 else MAGNET_MS)
    sim.effects.burst(player.x, player.y, 25, COLOR_MAGNET)


def _nebula_shift(sim: "Simulation", player: Player, count: int) -> None:
    grant_ability(sim, player, "phasing", PHASING_MS * 2 if count % 3 == 0 else PHASING_MS)
    sim.effects.burst(player.x, player.y, 35, COLOR_PHASE)


POWERUP_EFFECTS: Dict[PowerUpType, Callable[["Simulation", Player, int], None]] = {
    PowerUpType.STARDUST: _stardust,
    PowerUpType.CRYSTAL: _crystal,
    PowerUpType.PULSAR: _pulsar,
    PowerUpType.TIME_WARP: _time_warp,
    PowerUpType.MAGNET: _magnet,
    PowerUpType.NEBULA_SHIFT: _nebula_shift,
}


# -------------------- Contextual bonuses --------------------

@dataclass(frozen=True)
class Bonus:
    name: str
    points: int
    applies: Callable[["Simulation", Player], bool]
    particles: int
    color: Color


CONTEXT_BONUSES: Tuple[Bonus, ...] = (
    Bonus("invincible", 100, lambda s, p: p.invincible, 15, COLOR_FG),
    Bonus("phasing", 50, lambda s, p: p.phasing, 10, COLOR_PHASE),
    Bonus("magnet", 30, lambda s, p: p.magnetized, 8, COLOR_MAGNET),
    Bonus("shielded", 20, lambda s, p: p.shielded, 6, COLOR_SHIELD),
    Bonus("high_speed", 75, lambda s, p: s.game_speed > 1.5, 12, COLOR_DANGER),
    Bonus("slow_speed", 150, lambda s, p: s.game_speed < 0.5, 18, (64, 255, 255)),
    Bonus("grounded", 25, lambda s, p: p.on_ground, 5, COLOR_FG),
    Bonus("airborne", 40, lambda s, p: not p.on_ground, 8, (160, 160, 255)),
    Bonus("fast_horizontal", 60, lambda s, p: abs(p.vx) > 6, 10, (64, 160, 255)),
    Bonus("fast_vertical", 60, lambda s, p: abs(p.vy) > 8, 10, (255, 64, 160)),
    Bonus("top_band", 80, lambda s, p: p.y < s.height * 0.3, 15, (208, 128, 255)),
    Bonus("bottom_band", 80, lambda s, p: p.y > s.height * 0.7, 15, (64, 255, 128)),
    Bonus("edge_band", 70, lambda s, p: p.x < s.width * 0.2 or p.x > s.width * 0.8, 12, (255, 128, 64)),
    Bonus("center_band", 90, lambda s, p: s.width * 0.4 < p.x < s.width * 0.6, 18, (128, 64, 255)),
)

# evaluated after the combo step
LATE_BONUSES: Tuple[Bonus, ...] = (
    Bonus("max_jumps", 100, lambda s, p: p.jumps >= p.max_jumps, 20, (255, 128, 255)),
    Bonus("fresh_jumps", 50, lambda s, p: p.jumps == 0, 10, (64, 255, 64)),
)
HIGH_COMBO = 30


def _award(sim: "Simulation", player: Player, points: int, particles: int, color: Color) -> None:
    sim.add_score(points)
    if particles:
        sim.effects.burst(player.x, player.y, particles, color)


def _apply_bonuses(sim: "Simulation", player: Player, bonuses: Tuple[Bonus, ...]) -> None:
    for bonus in bonuses:
        if bonus.applies(sim, player):
            _award(sim, player, bonus.points, bonus.particles, bonus.color)


def _timing_bonuses(sim: "Simulation", player: Player, now: float) -> None:
    gap = None if player.last_powerup_time is None else now - player.last_powerup_time

    if gap is not None and gap < QUICK_COLLECT_MS:
        player.quick_collect_streak += 1
        if player.quick_collect_streak >= 3:
            _award(sim, player, player.quick_collect_streak * 20, 20, COLOR_FG)
            advance_combo(sim, player)
    else:
        player.quick_collect_streak = 0

    if gap is not None:
        if gap < FAST_RECOLLECT_MS:
            _award(sim, player, 100, 20, (64, 255, 255))
        elif gap > PATIENT_RECOLLECT_MS:
            _award(sim, player, 150, 25, (255, 255, 64))

    if player.quick_collect_streak >= 5:
        _award(sim, player, 200, 30, (255, 64, 255))

    player.last_powerup_time = now


def _streak_bonus(sim: "Simulation", player: Player, kind: PowerUpType) -> None:
    if player.last_powerup_type is kind:
        player.same_type_streak += 1
    else:
        player.same_type_streak = 1
    player.last_powerup_type = kind
    if player.same_type_streak >= 3:
        _award(sim, player, player.same_type_streak * 30, 15, COLOR_FG)


def is_alternating(sequence) -> bool:
    """A-B-A-B... with A != B, at least four long."""
    seq = list(sequence)
    if len(seq) < 4 or seq[0] == seq[1]:
        return False
    return all(kind == seq[i % 2] for i, kind in enumerate(seq))


def _sequence_bonus(sim: "Simulation", player: Player, kind: PowerUpType) -> None:
    player.powerup_sequence.append(kind)
    if is_alternating(player.powerup_sequence):
        _award(sim, player, 200, 30, COLOR_GOLD)


def _completion_bonus(sim: "Simulation", player: Player, kind: PowerUpType) -> None:
    player.collected_types.add(kind)
    if len(player.collected_types) == len(PowerUpType):
        logger.info("collected every power-up type")
        sim.effects.ring(player.x, player.y, 100, 150, COLOR_FG)
        _award(sim, player, COMPLETION_BONUS, 0, COLOR_FG)
        player.collected_types.clear()


def collect_powerup(sim: "Simulation", player: Player, powerup: PowerUp) -> int:
    """Apply a pickup once. Returns the net score change."""
    if powerup.collected:
        return 0
    powerup.collected = True
    before = sim.score
    kind = powerup.powerup_type

    player.pickup_counts[kind] += 1
    POWERUP_EFFECTS[kind](sim, player, player.pickup_counts[kind])

    _apply_bonuses(sim, player, CONTEXT_BONUSES)
    _timing_bonuses(sim, player, sim.now())
    _streak_bonus(sim, player, kind)
    _sequence_bonus(sim, player, kind)
    advance_combo(sim, player)
    if sim.combo > HIGH_COMBO:
        sim.add_score(sim.combo)
    _apply_bonuses(sim, player, LATE_BONUSES)
    _completion_bonus(sim, player, kind)

    return sim.score - before
