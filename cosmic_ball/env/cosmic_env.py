# cosmic_ball/env/cosmic_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from cosmic_ball.game.config import WIDTH, HEIGHT, FPS, TICK_MS
from cosmic_ball.game.physics import InputState
from cosmic_ball.game.render import Renderer
from cosmic_ball.game.simulation import Simulation
from cosmic_ball.game.storage import MemoryStore
from cosmic_ball.env.observations import build_observation, OBS_SIZE

GAME_OVER_PENALTY = 10.0

# Actions
NOOP, LEFT, RIGHT, JUMP = 0, 1, 2, 3
_ACTION_KEYS = {
    NOOP: (),
    LEFT: ("ArrowLeft",),
    RIGHT: ("ArrowRight",),
    JUMP: (),
}


class CosmicEnv(gym.Env):
    """
    Cosmic Ball Gymnasium environment (vector observations).
    - Simulation at 60 Hz (internal) on a simulated clock, so a seed and an
      action sequence always replay the same trajectory.
    - Agent acts every `frame_skip` ticks (default 4) -> 15 decisions/sec.
    - Observation: shape (18,), float32 (see build_observation).
    - Reward: score gained over the decision, -10 once on game over.
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": FPS}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 60.0):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)

        # Optional built-in truncation (you can also use a TimeLimit wrapper)
        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(FPS * time_limit_seconds / self.frame_skip)

        # --- Gym spaces ---
        self.action_space = gym.spaces.Discrete(4)
        low = np.full(OBS_SIZE, -1.0, dtype=np.float32)
        low[[0, 1, 5, 6, 7, 8, 9]] = 0.0
        high = np.ones(OBS_SIZE, dtype=np.float32)
        self.observation_space = gym.spaces.Box(low=low, high=high, dtype=np.float32)

        # --- Runtime state ---
        self.sim: Optional[Simulation] = None
        self.store = MemoryStore()            # high score survives resets
        self.clock_ms: float = 0.0
        self.timestep: int = 0                 # number of *decision* steps elapsed
        self.current_seed: Optional[int] = None

        # Rendering
        self.screen = None
        self.clock = None
        self.renderer = None

    def _now(self) -> float:
        return self.clock_ms

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)  # initializes self.np_random

        # An explicit seed drives the level directly; otherwise draw one
        # from np_random so the episode is still reproducible from it.
        if seed is not None:
            level_seed = int(seed)
        else:
            level_seed = int(self.np_random.integers(0, 2**31 - 1))

        self.clock_ms = 0.0
        self.sim = Simulation(WIDTH, HEIGHT, seed=level_seed, store=self.store,
                              clock=self._now, effects_seed=level_seed)
        self.current_seed = self.sim.seed
        self.timestep = 0

        obs = build_observation(self.sim)
        info = self._info()
        if self.render_mode == "human":
            self.render()
        return obs, info

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.sim is not None, "call reset() first"
        sim = self.sim

        prev_score = sim.score
        if action == JUMP:
            sim.jump()
        inp = InputState.holding(*_ACTION_KEYS[int(action)])

        for _ in range(self.frame_skip):
            self.clock_ms += TICK_MS
            sim.tick(inp)
            if not sim.running:
                break

        terminated = not sim.running
        reward = float(sim.score - prev_score)
        if terminated:
            reward -= GAME_OVER_PENALTY

        self.timestep += 1
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = not terminated

        obs = build_observation(sim)
        info = self._info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _info(self) -> Dict[str, Any]:
        sim = self.sim
        return {
            "score": sim.score,
            "combo": sim.combo,
            "seed": self.current_seed,
            "tick": sim.tick_count,
            "timestep": self.timestep,
            "game_over_reason": sim.game_over_reason,
        }

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.sim is None:
            return None

        if self.renderer is None:
            pygame.init()
            self.renderer = Renderer(WIDTH, HEIGHT)
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
                pygame.display.set_caption("Cosmic Ball - Gym Env")
                self.clock = pygame.time.Clock()
            else:
                self.screen = pygame.Surface((WIDTH, HEIGHT))

        if self.render_mode == "human":
            # Pump minimal event queue so the OS doesn't think we're hung
            pygame.event.pump()

        self.renderer.draw(self.screen, self.sim)

        if self.render_mode == "human":
            pygame.display.flip()
            self.clock.tick(self.metadata["render_fps"])
            return None

        # (H, W, 3) uint8
        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None and self.render_mode == "human":
            pygame.display.quit()
        if self.renderer is not None:
            pygame.quit()
        self.screen = None
        self.clock = None
        self.renderer = None
