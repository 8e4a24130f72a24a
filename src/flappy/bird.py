# src/flappy/bird.py
from __future__ import annotations
import math
import pygame
from dataclasses import dataclass
from .config import BIRD_W, BIRD_H, TILT_PER_VELOCITY


@dataclass
class Bird:
    """
    The falling character. x never changes after creation (the pipes scroll);
    y is TOP-based, velocity is in px/tick and positive means falling.
    """
    x: float
    y: float
    width: float = BIRD_W
    height: float = BIRD_H
    velocity: float = 0.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def rect(self) -> pygame.Rect:
        return pygame.Rect(int(self.x), int(self.y), int(self.width), int(self.height))

    @property
    def tilt_degrees(self) -> float:
        # pygame rotates counter-clockwise, so a falling bird gets a negative angle
        return -math.degrees(self.velocity * TILT_PER_VELOCITY)

    def jump(self, impulse: float):
        """Override the current velocity with the jump impulse."""
        self.velocity = impulse

    def update_physics(self, gravity: float):
        """One tick: accumulate gravity, then move by the new velocity."""
        self.velocity += gravity
        self.y += self.velocity

    def out_of_bounds(self, height: float) -> bool:
        return self.y < 0 or self.bottom > height
