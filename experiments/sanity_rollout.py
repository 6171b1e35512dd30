# /experiments/sanity_rollout.py
"""
Sanity rollouts for CosmicEnv:
- Runs RANDOM and/or TINY-HEURISTIC policies over fixed seeds
- Writes an episodes CSV for notebook analysis

Usage examples (from repo root):
  # Run both policies over 20 default seeds, frame_skip=4:
  python -m experiments.sanity_rollout --policies both

  # Only heuristic, custom seeds:
  python -m experiments.sanity_rollout --policies heuristic --seeds 111,222,333

  # Quick random-only smoke with fewer steps:
  python -m experiments.sanity_rollout --policies random --steps 300 --out-dir /tmp/sanity
"""

from __future__ import annotations
import argparse
import csv
from pathlib import Path
from typing import List, Tuple, Optional

import numpy as np

from cosmic_ball.env.cosmic_env import CosmicEnv, NOOP, LEFT, RIGHT, JUMP


# ------------------------ Policies ------------------------

def random_policy_init(action_seed: int):
    rng = np.random.RandomState(action_seed)
    def act(_obs: np.ndarray) -> int:
        return int(rng.randint(0, 4))
    return act

def tiny_heuristic_policy_init():
    """
    Very small rule:
      - Falling with no platform close below and a jump left: jump.
      - Otherwise steer toward the nearest power-up if one is on screen,
        else toward the nearest platform above.
      - Steer away from a hazard that is close and roughly level.
    """
    def act(obs: np.ndarray) -> int:
        vy, jumps_left = obs[3], obs[9]
        below_dy = obs[13]
        pu_dx, pu_dy = obs[14], obs[15]
        hz_dx, hz_dy = obs[16], obs[17]
        above_dx = obs[10]

        if vy > 0.2 and below_dy > 0.25 and jumps_left > 0.0:
            return JUMP
        if abs(hz_dy) < 0.1 and abs(hz_dx) < 0.15:
            return RIGHT if hz_dx < 0 else LEFT
        target = pu_dx if abs(pu_dy) < 0.5 else above_dx
        if target > 0.02:
            return RIGHT
        if target < -0.02:
            return LEFT
        return NOOP
    return act


# ------------------------ Rollout core ------------------------

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)

def write_episode_row(csv_path: Path, header: List[str], row: List):
    exists = csv_path.exists()
    with csv_path.open("a", newline="") as f:
        w = csv.writer(f)
        if not exists:
            w.writerow(header)
        w.writerow(row)

def run_one_episode(policy_name: str,
                    seed: int,
                    frame_skip: int,
                    steps_limit: int) -> Tuple[int, float, int, int, bool, bool, Optional[str]]:
    """
    Returns: (ep_len, ret_sum, score, max_combo, terminated, truncated, game_over_reason)
    """
    # The env carries its own time limit (60s default).
    env = CosmicEnv(frame_skip=frame_skip)

    if policy_name == "random":
        # Make action RNG seed a function of seed for determinism
        policy = random_policy_init(10_000 + seed)
    elif policy_name == "heuristic":
        policy = tiny_heuristic_policy_init()
    else:
        raise ValueError("Unknown policy")

    ret_sum = 0.0
    ep_len = 0
    max_combo = 0
    term = trunc = False

    try:
        obs, info = env.reset(seed=seed)
        for t in range(steps_limit):
            a = policy(obs)
            obs, r, term, trunc, info = env.step(a)
            ret_sum += float(r)
            ep_len += 1
            max_combo = max(max_combo, int(info["combo"]))
            if term or trunc:
                break
    finally:
        env.close()

    return (ep_len, ret_sum, int(info["score"]), max_combo,
            bool(term), bool(trunc), info.get("game_over_reason"))


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--policies", type=str, default="both",
                    choices=["random", "heuristic", "both"],
                    help="Which policy to run")
    ap.add_argument("--seeds", type=str, default="",
                    help="Comma-separated seeds. If empty, uses 20 defaults: 101..120")
    ap.add_argument("--frame-skip", type=int, default=4,
                    help="Sim frames per decision step")
    ap.add_argument("--steps", type=int, default=10_000,
                    help="Hard cap on decision steps (env may truncate earlier)")
    ap.add_argument("--out-dir", type=str, default="experiments/runs",
                    help="Directory to store episodes.csv")
    args = ap.parse_args()

    out_dir = Path(args.out_dir)
    ensure_dir(out_dir)

    if args.seeds.strip():
        seeds = [int(s) for s in args.seeds.split(",") if s.strip()]
    else:
        seeds = list(range(101, 121))  # 20 fixed eval seeds by default

    episodes_csv = out_dir / "episodes.csv"
    header = [
        "env_name", "policy_name", "seed",
        "frame_skip", "sim_fps", "decision_hz",
        "episode_len_decisions", "return_sum", "score", "max_combo",
        "terminated", "truncated", "game_over_reason",
    ]
    env_name = "CosmicEnv"
    sim_fps = 60
    decision_hz = sim_fps / max(1, args.frame_skip)

    to_run = ["random", "heuristic"] if args.policies == "both" else [args.policies]

    print(f"Running policies={to_run} on {len(seeds)} seeds "
          f"(frame_skip={args.frame_skip}, decision_hz≈{decision_hz:.1f})")
    print(f"Writing summaries to {episodes_csv}")

    for policy_name in to_run:
        for seed in seeds:
            ep_len, ret_sum, score, max_combo, terminated, truncated, reason = run_one_episode(
                policy_name=policy_name,
                seed=seed,
                frame_skip=args.frame_skip,
                steps_limit=args.steps,
            )

            row = [
                env_name, policy_name, seed,
                args.frame_skip, sim_fps, decision_hz,
                ep_len, f"{ret_sum:.1f}", score, max_combo,
                int(terminated), int(truncated), (reason or ""),
            ]
            write_episode_row(episodes_csv, header, row)

            print(f"[{policy_name}] seed={seed}  len={ep_len}  score={score}  combo={max_combo}  "
                  f"ret={ret_sum:.1f}  term={terminated} trunc={truncated}  cause={reason}")

    print("✓ Sanity rollouts complete")


if __name__ == "__main__":
    main()
