# src/flappy/pipes.py
from __future__ import annotations
import random
from dataclasses import dataclass
from typing import List, NamedTuple, Optional
import pygame

from .bird import Bird
from .config import GameConfig


@dataclass
class Pipe:
    """A vertical column with a passable gap spanning [gap_top, gap_bottom]."""
    x: float
    gap_top: float
    gap_height: float
    width: float
    passed: bool = False

    @property
    def trailing_edge(self) -> float:
        return self.x + self.width

    @property
    def gap_bottom(self) -> float:
        return self.gap_top + self.gap_height

    @property
    def is_offscreen(self) -> bool:
        return self.trailing_edge <= 0

    def collides_with(self, bird: Bird) -> bool:
        """AABB test against the column; touching a gap edge exactly is safe."""
        if bird.right > self.x and bird.x < self.trailing_edge:
            return bird.y < self.gap_top or bird.bottom > self.gap_bottom
        return False

    def top_rect(self) -> pygame.Rect:
        return pygame.Rect(int(self.x), 0, int(self.width), int(self.gap_top))

    def bottom_rect(self, height: float) -> pygame.Rect:
        top = int(self.gap_bottom)
        return pygame.Rect(int(self.x), top, int(self.width), max(0, int(height) - top))


class PipeStep(NamedTuple):
    collided: bool
    scored: int


class PipeField:
    """
    Ordered pipe collection (spawn order) plus the seeded RNG that places gaps.
    """
    def __init__(self, config: GameConfig, seed: int | None = None):
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self.rng = random.Random(seed)
        self.config = config
        self.pipes: List[Pipe] = []

    def __len__(self) -> int:
        return len(self.pipes)

    def __iter__(self):
        return iter(self.pipes)

    def gap_range(self) -> tuple[float, float]:
        """Half-open [lo, hi) range the gap top is drawn from."""
        c = self.config
        return c.gap_margin, c.height - c.pipe_gap - c.gap_margin

    def spawn(self) -> Pipe:
        c = self.config
        lo, hi = self.gap_range()
        gap_top = lo + self.rng.random() * (hi - lo)
        pipe = Pipe(x=float(c.width), gap_top=gap_top, gap_height=c.pipe_gap, width=c.pipe_width)
        self.pipes.append(pipe)
        return pipe

    def advance(self, bird: Bird) -> PipeStep:
        """
        Scroll every pipe left, in spawn order. Stops at the first collision.
        A pipe scores once, when its trailing edge is strictly left of bird.x
        (the bird's left side, not its full box).
        """
        scored = 0
        for pipe in self.pipes:
            pipe.x -= self.config.pipe_speed

            if pipe.collides_with(bird):
                return PipeStep(True, scored)

            if not pipe.passed and pipe.trailing_edge < bird.x:
                pipe.passed = True
                scored += 1
        return PipeStep(False, scored)

    def cull(self) -> int:
        """Drop pipes that left the screen; returns how many were removed."""
        before = len(self.pipes)
        self.pipes = [p for p in self.pipes if not p.is_offscreen]
        return before - len(self.pipes)

    def next_pipe(self, bird: Bird) -> Optional[Pipe]:
        """First pipe whose trailing edge has not yet gone behind the bird."""
        for pipe in self.pipes:
            if pipe.trailing_edge >= bird.x:
                return pipe
        return None
