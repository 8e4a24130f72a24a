# src/env/observations.py
from __future__ import annotations
import numpy as np

from src.flappy.config import GameConfig

# Velocity is clipped to this magnitude before scaling to [-1, 1]
MAX_ABS_VELOCITY = 16.0

OBS_SIZE = 5


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)


def _norm_velocity(v: float, v_max: float = MAX_ABS_VELOCITY) -> float:
    vv = max(-v_max, min(v, v_max))
    return vv / v_max


def build_observation(session, config: GameConfig | None = None) -> np.ndarray:
    """
    Returns a fixed (5,) float32 vector:
      [ y_norm, velocity_norm, next_dx_norm, gap_top_norm, gap_bottom_norm ]
    - y_norm: bird top in [0,1] over [0, height - bird_h]
    - velocity_norm in [-1,1]
    - next_dx_norm: distance from bird.x to the next pipe's trailing edge / width
    - gap_*_norm: next gap edges / height
    Without a pipe ahead: dx=1.0 and a centered gap of the configured size.
    """
    c = config or session.config
    bird = session.bird

    y_norm = _clamp01(bird.y / max(1.0, c.height - bird.height))
    v_norm = _norm_velocity(float(bird.velocity))

    pipe = session.pipes.next_pipe(bird)
    if pipe is None:
        dx_norm = 1.0
        gap_top = (c.height - c.pipe_gap) / 2
        gap_bottom = gap_top + c.pipe_gap
    else:
        dx_norm = _clamp01((pipe.trailing_edge - bird.x) / float(c.width))
        gap_top, gap_bottom = pipe.gap_top, pipe.gap_bottom

    feats = [
        y_norm,
        v_norm,
        dx_norm,
        _clamp01(gap_top / float(c.height)),
        _clamp01(gap_bottom / float(c.height)),
    ]
    return np.asarray(feats, dtype=np.float32)
