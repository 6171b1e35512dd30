# cosmic_ball/tests/test_env.py
"""
Quick tests for CosmicEnv (Gymnasium environment).

Usage (from repo root):
  python -m cosmic_ball.tests.test_env
  python -m cosmic_ball.tests.test_env --render
  python -m cosmic_ball.tests.test_env --no-api-check --no-determinism
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Tuple

import numpy as np
from gymnasium.utils.env_checker import check_env

from cosmic_ball.env.cosmic_env import CosmicEnv, JUMP
from cosmic_ball.env.observations import build_observation, OBS_SIZE
from cosmic_ball.game.entities import PowerUp, PowerUpType
from cosmic_ball.game.simulation import Simulation


def test_api_check(frame_skip: int = 4) -> None:
    """Verify Gym API contract (spaces, step/reset signatures, types)."""
    env = CosmicEnv(frame_skip=frame_skip)
    try:
        check_env(env)
    finally:
        env.close()
    print("✓ API check ok")


def test_smoke(steps: int = 300, seed: int = 123, frame_skip: int = 4) -> None:
    """Short random rollout: no crashes, obs in space, reward type, proper terminations."""
    env = CosmicEnv(frame_skip=frame_skip)
    env.action_space.seed(seed)
    try:
        obs, info = env.reset(seed=seed)
        assert env.observation_space.contains(obs), "Initial observation not in space"
        assert info["seed"] == seed and info["score"] == 0

        for t in range(steps):
            a = env.action_space.sample()
            obs, r, term, trunc, info = env.step(a)
            assert isinstance(r, float), "Reward must be a float"
            assert env.observation_space.contains(obs), f"Step {t}: observation out of bounds"
            assert info["score"] >= 0
            if term or trunc:
                break
    finally:
        env.close()
    print("✓ Smoke test ok")


def test_determinism(steps: int = 300, seed: int = 123, frame_skip: int = 4) -> None:
    """Same seed + same action sequence => identical obs/reward/terminal flags."""
    def rollout(seed_val: int, action_seq: List[int]) -> List[Tuple[np.ndarray, float, bool, bool]]:
        env = CosmicEnv(frame_skip=frame_skip)
        traj: List[Tuple[np.ndarray, float, bool, bool]] = []
        try:
            obs, _ = env.reset(seed=seed_val)
            for a in action_seq:
                obs, r, term, trunc, _ = env.step(int(a))
                traj.append((obs.copy(), float(r), bool(term), bool(trunc)))
                if term or trunc:
                    break
        finally:
            env.close()
        return traj

    # Fixed action sequence using a local RNG (not numpy global)
    rng = np.random.RandomState(42)
    action_seq = [int(rng.randint(0, 4)) for _ in range(steps)]

    t1 = rollout(seed, action_seq)
    t2 = rollout(seed, action_seq)

    assert len(t1) == len(t2), "Determinism: trajectory length mismatch"
    for i, ((o1, r1, te1, tr1), (o2, r2, te2, tr2)) in enumerate(zip(t1, t2)):
        if not np.array_equal(o1, o2):
            raise AssertionError(f"Determinism: obs mismatch at step {i}")
        if not (r1 == r2 and te1 == te2 and tr1 == tr2):
            raise AssertionError(f"Determinism: transition mismatch at step {i}")

    print("✓ Determinism ok")


def test_truncation(frame_skip: int = 4) -> None:
    """A short time limit truncates a surviving episode."""
    env = CosmicEnv(frame_skip=frame_skip, time_limit_seconds=0.2)
    try:
        env.reset(seed=5)
        limit = env.time_limit_decisions
        assert limit == 3
        for _ in range(limit):
            env.sim.player.invincible = True
            obs, r, term, trunc, info = env.step(JUMP)
        assert trunc and not term
    finally:
        env.close()
    print("✓ Truncation ok")


def test_observation_layout() -> None:
    sim = Simulation(800, 600, seed=1, clock=lambda: 0.0)
    sim.level.platforms = []
    sim.level.hazards = []
    sim.level.power_ups = [PowerUp(600, 300, PowerUpType.MAGNET)]
    sim.player.x, sim.player.y = 400.0, 300.0
    sim.player.shielded = True

    obs = build_observation(sim)
    assert isinstance(obs, np.ndarray) and obs.dtype == np.float32 and obs.shape == (OBS_SIZE,)
    assert obs[0] == 0.5 and obs[1] == 0.5
    assert obs[4] == 1.0, "gravity points down"
    assert obs[5] == 1.0 and obs[6] == 0.0
    assert obs[9] == 1.0, "no jumps used"
    assert tuple(obs[10:12]) == (0.0, -1.0), "no platform above"
    assert tuple(obs[12:14]) == (0.0, 1.0), "no platform below"
    assert np.isclose(obs[14], 0.25) and obs[15] == 0.0, "power-up to the right"
    print("✓ Observation layout ok")


def render_demo(steps: int, seed: int, frame_skip: int) -> None:
    """Open a window and run a short NOOP demo so you can visually verify behavior."""
    env = CosmicEnv(render_mode="human", frame_skip=frame_skip)
    try:
        obs, info = env.reset(seed=seed)
        for _ in range(steps):
            obs, r, term, trunc, info = env.step(0)
            if term or trunc:
                break
    finally:
        env.close()
    print("✓ Render demo finished")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--seed", type=int, default=123, help="Episode seed for tests")
    ap.add_argument("--steps", type=int, default=300, help="Max decision steps per test")
    ap.add_argument("--frame-skip", type=int, default=4, help="Sim frames per decision step")
    ap.add_argument("--render", action="store_true", help="Run a short visual demo")
    ap.add_argument("--no-api-check", action="store_true", help="Skip Gym API compliance check")
    ap.add_argument("--no-smoke", action="store_true", help="Skip smoke test")
    ap.add_argument("--no-determinism", action="store_true", help="Skip determinism test")
    args = ap.parse_args()

    try:
        test_observation_layout()
        test_truncation(frame_skip=args.frame_skip)
        if not args.no_api_check:
            test_api_check(frame_skip=args.frame_skip)
        if not args.no_smoke:
            test_smoke(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
        if not args.no_determinism:
            test_determinism(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
        if args.render:
            render_demo(steps=min(args.steps, 600), seed=args.seed, frame_skip=args.frame_skip)
    except AssertionError as e:
        print(f"✗ Test failed: {e}", file=sys.stderr)
        sys.exit(1)
    else:
        print("🎉 All selected tests passed")


if __name__ == "__main__":
    main()
