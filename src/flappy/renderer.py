# src/flappy/renderer.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Tuple
import pygame

from .config import (
    GameConfig, COLOR_BG, COLOR_FG, COLOR_BIRD, COLOR_PIPE, COLOR_PIPE_EDGE, COLOR_PANEL, COLOR_DANGER
)

logger = logging.getLogger(__name__)

BIRD_ASSET = "bird.svg"
PIPE_ASSET = "pipe.svg"


def load_image(path: Path) -> Optional[pygame.Surface]:
    """Load an image, or None (with a warning) when it is missing or unreadable."""
    try:
        return pygame.image.load(str(path))
    except (FileNotFoundError, pygame.error) as e:
        logger.warning("could not load %s (%s); drawing placeholder", path, e)
        return None


class PygameRenderer:
    """
    Draws a GameSession onto a surface. Read-only with respect to the session:
    every call redraws the whole scene from the current state.
    """
    def __init__(self, surface: pygame.Surface, config: GameConfig, assets_dir: str | Path | None = None):
        self.surface = surface
        self.config = config
        self.bird_img: Optional[pygame.Surface] = None
        self.pipe_img: Optional[pygame.Surface] = None
        if assets_dir is not None:
            assets = Path(assets_dir)
            self.bird_img = load_image(assets / BIRD_ASSET)
            self.pipe_img = load_image(assets / PIPE_ASSET)

        if not pygame.font.get_init():
            pygame.font.init()
        self.font = pygame.font.SysFont("arial", 24)
        self.small_font = pygame.font.SysFont("arial", 18)

        btn_w, btn_h = 200, 50
        self.restart_button = pygame.Rect((config.width - btn_w) // 2, config.height // 2 + 20, btn_w, btn_h)

    def render(self, session) -> None:
        self.surface.fill(COLOR_BG)
        for pipe in session.pipes:
            self._draw_column(pipe.top_rect())
            self._draw_column(pipe.bottom_rect(self.config.height))
        self._draw_bird(session.bird)

        score_txt = self.font.render(f"Score: {session.score}", True, COLOR_FG)
        self.surface.blit(score_txt, (12, 10))

        if not session.started:
            self._blit_centered("Click or Press Space to Start", self.font, self.config.height // 2)
        if session.over:
            self._draw_game_over(session.score)

    # -------------------- Helpers --------------------

    def _draw_column(self, rect: pygame.Rect):
        if rect.height <= 0 or rect.width <= 0:
            return
        if self.pipe_img is not None:
            self.surface.blit(pygame.transform.scale(self.pipe_img, rect.size), rect.topleft)
        else:
            pygame.draw.rect(self.surface, COLOR_PIPE, rect)
            pygame.draw.rect(self.surface, COLOR_PIPE_EDGE, rect, width=3)

    def _draw_bird(self, bird):
        rect = bird.rect
        if self.bird_img is not None:
            sprite = pygame.transform.scale(self.bird_img, rect.size)
        else:
            sprite = pygame.Surface(rect.size, pygame.SRCALPHA)
            sprite.fill(COLOR_BIRD)
        rotated = pygame.transform.rotate(sprite, bird.tilt_degrees)
        self.surface.blit(rotated, rotated.get_rect(center=rect.center))

    def _blit_centered(self, msg: str, font: pygame.font.Font, y: int,
                       color: Tuple[int, int, int] = COLOR_FG):
        txt = font.render(msg, True, color)
        self.surface.blit(txt, (self.config.width // 2 - txt.get_width() // 2, y - txt.get_height() // 2))

    def _draw_game_over(self, score: int):
        panel_w, panel_h = 320, 180
        panel = pygame.Surface((panel_w, panel_h), pygame.SRCALPHA)
        panel.fill((*COLOR_PANEL, 210))
        cx, cy = self.config.width // 2, self.config.height // 2
        self.surface.blit(panel, (cx - panel_w // 2, cy - panel_h // 2 - 20))

        self._blit_centered("Game Over", self.font, cy - 70, COLOR_DANGER)
        self._blit_centered(f"Final score: {score}", self.small_font, cy - 30)

        pygame.draw.rect(self.surface, (40, 60, 90), self.restart_button, border_radius=10)
        pygame.draw.rect(self.surface, (90, 130, 180), self.restart_button, width=2, border_radius=10)
        self._blit_centered("Restart (R)", self.small_font, self.restart_button.centery)
