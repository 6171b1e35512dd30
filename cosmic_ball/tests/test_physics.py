# cosmic_ball/tests/test_physics.py
"""
Collision & physics tests on a real Simulation with a cleared level.

Usage (from repo root):
  python -m cosmic_ball.tests.test_physics
"""
from __future__ import annotations
import math
from cosmic_ball.game.config import GRAVITY, JUMP_FORCE, LANDING_BONUS, PLAYER_RADIUS
from cosmic_ball.game.entities import Platform, PlatformType, Hazard, HazardType
from cosmic_ball.game.physics import (
    InputState, HitResult, apply_boundaries, circle_rect_collides, collides_with_hazard,
    hit_hazard, integrate, is_solid, resolve_platforms, snap_to_platform
)
from cosmic_ball.game.simulation import Simulation


class FakeClock:
    def __init__(self, t: float = 0.0):
        self.t = t

    def __call__(self) -> float:
        return self.t


def make_sim(*platforms: Platform):
    clock = FakeClock()
    sim = Simulation(800, 600, seed=1, clock=clock, effects_seed=1)
    sim.level.platforms = list(platforms)
    sim.level.hazards = []
    sim.level.power_ups = []
    return sim, clock


def falling_onto(sim: Simulation, platform: Platform) -> None:
    """Put the ball so it overlaps the top of platform while descending."""
    p = sim.player
    p.x = platform.x + platform.width / 2
    p.y = platform.y - PLAYER_RADIUS + 5
    p.vy = 2.0
    p.on_ground = False


def test_circle_rect():
    assert circle_rect_collides(50, 50, 10, 40, 55, 20, 10)          # overlap from above
    assert not circle_rect_collides(50, 30, 10, 40, 55, 20, 10)      # too high
    # corner: distance to (40, 55) is sqrt(50) > 5
    assert not circle_rect_collides(35, 50, 5, 40, 55, 20, 10)


def test_left_boundary_restitution():
    sim, _ = make_sim()
    p = sim.player
    p.x, p.vx = 5.0, -5.0
    apply_boundaries(sim, p)
    assert p.x == p.radius
    assert math.isclose(p.vx, 3.5)


def test_right_boundary_restitution():
    sim, _ = make_sim()
    p = sim.player
    p.x, p.vx = sim.width + 3.0, 10.0
    apply_boundaries(sim, p)
    assert p.x == sim.width - p.radius
    assert math.isclose(p.vx, -7.0)


def test_bottom_boundary_schedules_game_over():
    sim, clock = make_sim()
    p = sim.player
    p.y, p.vy = sim.height + 10.0, 6.0
    apply_boundaries(sim, p)
    assert p.y == sim.height - p.radius and p.vy < 0
    assert sim.timers.is_pending("game_over")
    assert sim.running, "game over is deferred"
    clock.t = 100
    sim.tick()
    assert not sim.running


def test_integrate_reflects_off_left_wall_after_friction():
    sim, _ = make_sim()
    p = sim.player
    p.x, p.vx = 5.0, -5.0
    integrate(sim, p, InputState())
    # friction first (-4.5), then the wall keeps 70%
    assert p.x == p.radius
    assert math.isclose(p.vx, 3.15)


def test_integrate_gravity_and_friction():
    sim, _ = make_sim()
    p = sim.player
    p.vx, p.vy = 4.0, 0.0
    integrate(sim, p, InputState())
    assert p.vy == GRAVITY
    assert math.isclose(p.vx, 3.6)
    integrate(sim, p, InputState.holding("d"))
    assert math.isclose(p.vx, 4.1)


def test_landing_bonus_paid_once_per_platform():
    star = Platform(300, 400, PlatformType.STAR)
    sim, _ = make_sim(star)
    falling_onto(sim, star)
    assert resolve_platforms(sim, sim.player)
    assert sim.score == LANDING_BONUS
    assert sim.player.vy == JUMP_FORCE and sim.player.jumps == 0

    falling_onto(sim, star)
    resolve_platforms(sim, sim.player)
    assert sim.score == LANDING_BONUS, "second landing must not score"
    assert star.id in sim.player.visited_platforms


def test_ascending_contact_is_ignored():
    nebula = Platform(300, 400, PlatformType.NEBULA)
    sim, _ = make_sim(nebula)
    falling_onto(sim, nebula)
    sim.player.vy = -3.0
    resolve_platforms(sim, sim.player)
    assert sim.score == 0 and sim.player.vy == -3.0


def test_nebula_bounces_higher():
    nebula = Platform(300, 400, PlatformType.NEBULA)
    sim, _ = make_sim(nebula)
    falling_onto(sim, nebula)
    resolve_platforms(sim, sim.player)
    assert math.isclose(sim.player.vy, JUMP_FORCE * 1.3)


def test_meteor_breaks_after_landing():
    meteor = Platform(300, 400, PlatformType.METEOR)
    sim, _ = make_sim(meteor)
    falling_onto(sim, meteor)
    resolve_platforms(sim, sim.player)
    assert meteor.broken
    assert not is_solid(sim.player, meteor)


def test_black_hole_gravity_latest_expiry_wins():
    hole = Platform(300, 400, PlatformType.BLACK_HOLE)
    sim, clock = make_sim(hole)
    falling_onto(sim, hole)
    resolve_platforms(sim, sim.player)
    assert sim.gravity_reversed

    clock.t = 1000
    falling_onto(sim, hole)
    resolve_platforms(sim, sim.player)
    assert sim.gravity_reversed, "second reversal must not flip back"

    clock.t = 3999
    sim.timers.poll()
    assert sim.gravity_reversed
    clock.t = 4000
    sim.timers.poll()
    assert sim.current_gravity == GRAVITY


def test_phasing_passes_through_only_while_rising():
    sim, _ = make_sim()
    p = sim.player
    p.phasing = True
    p.vy = -4.0
    assert not is_solid(p, Platform(0, 0, PlatformType.NEBULA))
    assert is_solid(p, Platform(0, 0, PlatformType.BLACK_HOLE))
    p.vy = 3.0
    assert is_solid(p, Platform(0, 0, PlatformType.NEBULA))


def test_phasing_rises_through_nebula():
    nebula = Platform(300, 400, PlatformType.NEBULA)
    sim, _ = make_sim(nebula)
    falling_onto(sim, nebula)
    sim.player.phasing = True
    sim.player.vy = -6.0
    assert not resolve_platforms(sim, sim.player)
    assert sim.player.vy == -6.0 and sim.score == 0


def test_phasing_landing_on_nebula_boosts_bounce():
    nebula = Platform(300, 400, PlatformType.NEBULA)
    sim, _ = make_sim(nebula)
    falling_onto(sim, nebula)
    sim.player.phasing = True
    resolve_platforms(sim, sim.player)
    assert math.isclose(sim.player.vy, JUMP_FORCE * 1.3 * 1.5)
    assert sim.score == LANDING_BONUS


def test_phasing_landing_on_star_extends_shield_and_combo():
    star = Platform(300, 400, PlatformType.STAR)
    sim, _ = make_sim(star)
    falling_onto(sim, star)
    p = sim.player
    p.phasing = True
    p.grant_shield(100)
    resolve_platforms(sim, p)
    assert p.shield_time == 100 + 300 + 150
    assert sim.combo == 2


def test_snap_catches_fast_fall():
    comet = Platform(300, 400, PlatformType.COMET)
    sim, _ = make_sim(comet)
    p = sim.player
    p.x, p.y, p.vy = 350.0, 375.0, 15.0
    assert snap_to_platform(sim, p) is comet
    assert p.y == 400 - p.radius and p.vy == 0.0
    assert p.on_ground and p.current_platform == comet.id


def test_snap_ignores_spikes_and_far_platforms():
    spike = Platform(300, 400, PlatformType.SPIKE)
    far = Platform(300, 450, PlatformType.NEBULA)
    sim, _ = make_sim(spike, far)
    p = sim.player
    p.x, p.y, p.vy = 350.0, 375.0, 15.0
    assert snap_to_platform(sim, p) is None


def test_spike_platform_hits_like_asteroid():
    spike = Platform(300, 400, PlatformType.SPIKE)
    sim, _ = make_sim(spike)
    sim.score, sim.combo = 120, 4
    falling_onto(sim, spike)
    resolve_platforms(sim, sim.player)
    assert sim.score == 70 and sim.combo == 0
    assert sim.timers.is_pending("game_over")


def test_spike_platform_hits_once_per_contact():
    spike = Platform(300, 400, PlatformType.SPIKE)
    sim, _ = make_sim(spike)
    sim.score = 120
    p = sim.player
    for _ in range(3):
        falling_onto(sim, spike)
        resolve_platforms(sim, p)
        p.end_contacts()
    assert sim.score == 70

    p.x = 700.0                    # step off for a tick
    resolve_platforms(sim, p)
    p.end_contacts()
    falling_onto(sim, spike)
    resolve_platforms(sim, p)
    assert sim.score == 20


def test_hazard_hit_outcomes():
    sim, _ = make_sim()
    p = sim.player

    sim.combo = 7
    p.invincible = True
    assert hit_hazard(sim, p, HazardType.ASTEROID_SPIKE) is HitResult.IGNORED
    assert sim.combo == 7
    p.invincible = False

    p.grant_shield(100)
    assert hit_hazard(sim, p, HazardType.ASTEROID_SPIKE) is HitResult.ABSORBED
    assert not p.shielded and p.shield_time == 0 and sim.combo == 7

    assert hit_hazard(sim, p, HazardType.DARK_VOID) is HitResult.DAMAGED
    assert sim.combo == 0
    assert not sim.timers.is_pending("game_over"), "voids are cosmetic"


def test_asteroid_penalty_floors_at_zero():
    sim, _ = make_sim()
    sim.score = 20
    hit_hazard(sim, sim.player, HazardType.ASTEROID_SPIKE)
    assert sim.score == 0


def test_dark_void_is_circular():
    sim, _ = make_sim()
    void = Hazard(100, 100, HazardType.DARK_VOID)
    cx, cy = void.center
    p = sim.player
    # well below the 14px-high rect, still inside the circle
    p.x, p.y = cx, cy + 40
    assert collides_with_hazard(p, void)
    p.x, p.y = cx + 45, cy + 35
    assert not collides_with_hazard(p, void)


def main():
    test_circle_rect()
    test_left_boundary_restitution()
    test_right_boundary_restitution()
    test_bottom_boundary_schedules_game_over()
    test_integrate_reflects_off_left_wall_after_friction()
    test_integrate_gravity_and_friction()
    test_landing_bonus_paid_once_per_platform()
    test_ascending_contact_is_ignored()
    test_nebula_bounces_higher()
    test_meteor_breaks_after_landing()
    test_black_hole_gravity_latest_expiry_wins()
    test_phasing_passes_through_only_while_rising()
    test_phasing_rises_through_nebula()
    test_phasing_landing_on_nebula_boosts_bounce()
    test_phasing_landing_on_star_extends_shield_and_combo()
    test_snap_catches_fast_fall()
    test_snap_ignores_spikes_and_far_platforms()
    test_spike_platform_hits_like_asteroid()
    test_spike_platform_hits_once_per_contact()
    test_hazard_hit_outcomes()
    test_asteroid_penalty_floors_at_zero()
    test_dark_void_is_circular()
    print("✓ physics tests passed")


if __name__ == "__main__":
    main()
