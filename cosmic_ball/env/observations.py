# cosmic_ball/env/observations.py
from __future__ import annotations
import math
from typing import Iterable, Optional, Tuple
import numpy as np

from cosmic_ball.game.config import MAX_VX, JUMP_FORCE
from cosmic_ball.game.physics import is_solid
from cosmic_ball.game.simulation import Simulation

OBS_SIZE = 18
# |vy| beyond this reads as saturated (a nebula bounce while phasing is ~23)
MAX_VY_OBS = abs(JUMP_FORCE) * 2

Target = Tuple[float, float]
UP: Target = (0.0, -1.0)
DOWN: Target = (0.0, 1.0)


def _clip(v: float, lo: float = -1.0, hi: float = 1.0) -> float:
    return lo if v < lo else (hi if v > hi else v)


def _nearest(px: float, py: float, points: Iterable[Target]) -> Optional[Target]:
    best: Optional[Target] = None
    best_d = math.inf
    for x, y in points:
        d = math.hypot(x - px, y - py)
        if d < best_d:
            best_d, best = d, (x, y)
    return best


def _relative(px: float, py: float, target: Optional[Target], missing: Target,
              width: float, height: float) -> Target:
    if target is None:
        return missing
    return _clip((target[0] - px) / width), _clip((target[1] - py) / height)


def build_observation(sim: Simulation) -> np.ndarray:
    """
    Returns float32 vector (18,):
    [x, y, vx, vy, gravity,
     shielded, magnetized, phasing, invincible, jumps_left,
     plat_above_dx, plat_above_dy, plat_below_dx, plat_below_dy,
     powerup_dx, powerup_dy, hazard_dx, hazard_dy]
    x, y in [0,1]; everything else in [-1,1]. Platform targets use the centre
    of the platform's top edge; hazards include falling spike platforms.
    """
    p = sim.player
    w, h = float(sim.width), float(sim.height)

    above, below = [], []
    hazards = [hz.center for hz in sim.hazards]
    for plat in sim.platforms:
        top = (plat.x + plat.width / 2, plat.y)
        if plat.platform_type.is_spike:
            hazards.append((top[0], plat.y + plat.height / 2))
        elif is_solid(p, plat):
            (above if plat.y < p.y else below).append(top)
    powerups = [(u.x, u.y) for u in sim.power_ups if not u.collected]

    obs = [
        _clip(p.x / w, 0.0, 1.0),
        _clip(p.y / h, 0.0, 1.0),
        _clip(p.vx / MAX_VX),
        _clip(p.vy / MAX_VY_OBS),
        -1.0 if sim.gravity_reversed else 1.0,
        float(p.shielded),
        float(p.magnetized),
        float(p.phasing),
        float(p.invincible),
        _clip(p.jumps_left / max(1, p.max_jumps), 0.0, 1.0),
    ]
    obs.extend(_relative(p.x, p.y, _nearest(p.x, p.y, above), UP, w, h))
    obs.extend(_relative(p.x, p.y, _nearest(p.x, p.y, below), DOWN, w, h))
    obs.extend(_relative(p.x, p.y, _nearest(p.x, p.y, powerups), UP, w, h))
    obs.extend(_relative(p.x, p.y, _nearest(p.x, p.y, hazards), UP, w, h))
    return np.asarray(obs, dtype=np.float32)
