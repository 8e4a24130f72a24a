# src/tests/conftest.py
import os

# headless pygame for every test module
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pytest

from src.flappy.config import GameConfig
from src.flappy.scheduler import Scheduler
from src.flappy.session import GameSession


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler(now_ms=0)


@pytest.fixture
def session(config, scheduler) -> GameSession:
    return GameSession(config, scheduler, seed=1234)


@pytest.fixture
def steady_config() -> GameConfig:
    """No gravity and a gap that always spans [50, 430]: the bird never dies by itself."""
    return GameConfig(gravity=0.0, pipe_gap=380)
