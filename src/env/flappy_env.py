# src/env/flappy_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from src.flappy.config import GameConfig
from src.flappy.renderer import PygameRenderer
from src.flappy.scheduler import Scheduler
from src.flappy.session import GameSession
from src.env.observations import build_observation, OBS_SIZE


class FlappyEnv(gym.Env):
    """
    Flappy Gymnasium environment (vector observations).
    - One sim frame = 1000/fps ms of simulated time on a private Scheduler,
      so pipes spawn on the same interval rule as the real game.
    - Agent acts every `frame_skip` frames (default 2).
    - Observation: shape (5,), float32 (see build_observation).
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    ALIVE_REWARD = 0.1
    PIPE_REWARD = 1.0
    DEATH_REWARD = -1.0

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 2,
                 time_limit_seconds: Optional[float] = 60.0,
                 config: Optional[GameConfig] = None):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.config = config or GameConfig()
        self.frame_ms = self.config.frame_ms

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(self.config.fps * time_limit_seconds / self.frame_skip)

        # Actions: 0 = NOOP, 1 = FLAP
        self.action_space = gym.spaces.Discrete(2)
        low = np.array([0.0, -1.0, 0.0, 0.0, 0.0], dtype=np.float32)
        high = np.ones(OBS_SIZE, dtype=np.float32)
        self.observation_space = gym.spaces.Box(low=low, high=high, dtype=np.float32)

        self.session: Optional[GameSession] = None
        self.scheduler: Optional[Scheduler] = None
        self.timestep: int = 0

        self.screen = None
        self.clock = None
        self._renderer: Optional[PygameRenderer] = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)
        if self.session is not None:
            self.session.teardown()

        # Explicit seed -> exact gap layout; otherwise derive one from np_random.
        gap_seed = int(seed) if seed is not None else int(self.np_random.integers(0, 2**31 - 1))

        self.scheduler = Scheduler(now_ms=0.0)
        self.session = GameSession(self.config, self.scheduler, seed=gap_seed)
        self.session.start()
        self.timestep = 0

        obs = self._get_obs()
        info = {"seed": self.session.seed, "score": 0}
        return obs, info

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.session is not None and self.scheduler is not None

        if action == 1:
            self.session.jump()

        score_before = self.session.score
        for _ in range(self.frame_skip):
            if self.session.over:
                break
            self.scheduler.pump(self.scheduler.now_ms + self.frame_ms)

        passed = self.session.score - score_before
        if self.session.over:
            reward = self.DEATH_REWARD + self.PIPE_REWARD * passed
        else:
            reward = self.ALIVE_REWARD + self.PIPE_REWARD * passed

        self.timestep += 1
        terminated = self.session.over
        truncated = (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions)

        obs = self._get_obs()
        info = {
            "score": self.session.score,
            "timestep": self.timestep,
            "ticks": self.session.ticks,
            "seed": self.session.seed,
            "pipes": len(self.session.pipes),
        }

        if self.render_mode == "human":
            self.render()

        return obs, float(reward), bool(terminated), bool(truncated), info

    def _get_obs(self) -> np.ndarray:
        assert self.session is not None
        return build_observation(self.session)

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.session is None:
            return None

        if self.screen is None:
            pygame.init()
            size = (self.config.width, self.config.height)
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode(size)
                pygame.display.set_caption("Flappy — Gym Env")
                self.clock = pygame.time.Clock()
            else:
                self.screen = pygame.Surface(size)
            self._renderer = PygameRenderer(self.screen, self.config)

        self._renderer.render(self.session)

        if self.render_mode == "human":
            pygame.event.pump()
            pygame.display.flip()
            self.clock.tick(self.metadata["render_fps"])
            return None

        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.session is not None:
            self.session.teardown()
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
            self._renderer = None
