# src/flappy/config.py
from __future__ import annotations
from dataclasses import dataclass, replace, fields

# --- Display ---
WIDTH = 640
HEIGHT = 480
FPS = 60
MAX_FRAME_MS = 1000.0 / 30.0   # clamp stalls: sim time never jumps more than this per loop

# --- World / Physics (per tick) ---
GRAVITY = 0.5               # added to velocity every tick
JUMP_IMPULSE = -8.0         # velocity set by a jump (negative = up)

# --- Pipes ---
PIPE_SPEED = 2.0            # px per tick, pipes scroll left
PIPE_GAP = 150              # vertical size of the passable window
PIPE_WIDTH = 60
PIPE_SPAWN_MS = 2000        # wall-clock spawn interval
GAP_MARGIN = 50             # min distance between gap and playfield edge

# --- Bird ---
BIRD_W = 40
BIRD_H = 40
TILT_PER_VELOCITY = 0.1     # radians of tilt per unit of velocity (visual only)

SEED_DEFAULT = None         # None -> random gaps each launch

# --- Colors (RGB) ---
COLOR_BG = (78, 192, 202)
COLOR_FG = (255, 255, 255)
COLOR_BIRD = (250, 204, 50)
COLOR_PIPE = (92, 184, 64)
COLOR_PIPE_EDGE = (46, 110, 30)
COLOR_PANEL = (30, 40, 60)
COLOR_DANGER = (255, 86, 110)


@dataclass(frozen=True)
class GameConfig:
    """Tunable constants for one session. Defaults mirror the module constants."""
    width: int = WIDTH
    height: int = HEIGHT
    fps: int = FPS
    gravity: float = GRAVITY
    jump_impulse: float = JUMP_IMPULSE
    pipe_speed: float = PIPE_SPEED
    pipe_gap: float = PIPE_GAP
    pipe_width: float = PIPE_WIDTH
    spawn_interval_ms: float = PIPE_SPAWN_MS
    gap_margin: float = GAP_MARGIN
    bird_width: float = BIRD_W
    bird_height: float = BIRD_H

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"playfield must be positive, got {self.width}x{self.height}")
        if self.fps <= 0:
            raise ValueError("fps must be > 0")
        if self.pipe_gap <= 0 or self.pipe_width <= 0:
            raise ValueError("pipe gap and width must be > 0")
        if self.pipe_gap + 2 * self.gap_margin > self.height:
            raise ValueError(
                f"gap {self.pipe_gap} with margin {self.gap_margin} does not fit height {self.height}"
            )
        if self.spawn_interval_ms <= 0:
            raise ValueError("spawn_interval_ms must be > 0")

    @property
    def bird_x(self) -> float:
        return self.width / 4

    @property
    def bird_start_y(self) -> float:
        return self.height / 2

    @property
    def frame_ms(self) -> float:
        return 1000.0 / self.fps

    def with_overrides(self, **overrides) -> "GameConfig":
        """Copy with every non-None override applied (unknown keys raise TypeError)."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"unknown config fields: {sorted(unknown)}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
