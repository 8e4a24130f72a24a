# src/flappy/session.py
from __future__ import annotations
import logging
from typing import Callable, Optional, Protocol

from .bird import Bird
from .config import GameConfig
from .pipes import PipeField, Pipe
from .scheduler import Scheduler, ScheduledTask

logger = logging.getLogger(__name__)

ScoreListener = Callable[[int], None]


class Renderer(Protocol):
    def render(self, session: "GameSession") -> None: ...


class GameSession:
    """
    One playthrough, from the first input to game over.

    Lifecycle: idle (started=False) -> running (started) -> over (terminal).
    While running two tasks live on the scheduler: the per-frame tick+render
    and the pipe spawner. Both are cancelled inside end(), before any listener
    runs, so nothing queued later can touch a finished session.
    """

    def __init__(self,
                 config: Optional[GameConfig] = None,
                 scheduler: Optional[Scheduler] = None,
                 renderer: Optional[Renderer] = None,
                 seed: Optional[int] = None,
                 on_score: Optional[ScoreListener] = None,
                 on_game_over: Optional[ScoreListener] = None):
        self.config = config or GameConfig()
        self.scheduler = scheduler or Scheduler()
        self.renderer = renderer
        self.on_score = on_score
        self.on_game_over = on_game_over

        c = self.config
        self.bird = Bird(x=c.bird_x, y=c.bird_start_y, width=c.bird_width, height=c.bird_height)
        self.pipes = PipeField(c, seed)
        self.score = 0
        self.started = False
        self.over = False
        self.ticks = 0

        self._frame_task: Optional[ScheduledTask] = None
        self._spawn_task: Optional[ScheduledTask] = None

    @property
    def seed(self) -> int:
        return self.pipes.seed

    @property
    def running(self) -> bool:
        return self.started and not self.over

    # -------------------- Input --------------------

    def trigger(self):
        """The single input (SPACE / click): starts on first use, then jumps."""
        if self.over:
            return
        if not self.started:
            self.start()
        self.jump()

    def jump(self):
        if self.over:
            return
        self.bird.jump(self.config.jump_impulse)

    # -------------------- Lifecycle --------------------

    def start(self):
        if self.started or self.over:
            return
        self.started = True
        self.spawn_pipe()
        self._frame_task = self.scheduler.every_frame(self.frame, owner=self)
        self._spawn_task = self.scheduler.every(self.config.spawn_interval_ms, self.spawn_pipe, owner=self)
        logger.info("session started (seed=%s)", self.seed)

    def end(self):
        if self.over:
            return
        self.over = True
        self._cancel_tasks()
        logger.info("game over: score=%d after %d ticks", self.score, self.ticks)
        if self.on_game_over is not None:
            self.on_game_over(self.score)

    def teardown(self):
        """Detach everything this session scheduled. Safe to call more than once."""
        self._cancel_tasks()
        self.scheduler.cancel_owner(self)

    def restart(self, seed: Optional[int] = None) -> "GameSession":
        self.teardown()
        logger.info("restarting (previous score=%d)", self.score)
        return GameSession(
            config=self.config,
            scheduler=self.scheduler,
            renderer=self.renderer,
            seed=seed,
            on_score=self.on_score,
            on_game_over=self.on_game_over,
        )

    def _cancel_tasks(self):
        for task in (self._frame_task, self._spawn_task):
            if task is not None:
                task.cancel()
        self._frame_task = None
        self._spawn_task = None

    # -------------------- Simulation --------------------

    def spawn_pipe(self) -> Optional[Pipe]:
        if self.over:
            return None
        pipe = self.pipes.spawn()
        logger.debug("spawned pipe gap_top=%.1f (%d active)", pipe.gap_top, len(self.pipes))
        return pipe

    def tick(self):
        """Advance one frame. Order: gravity, move, bounds, pipes, cull."""
        if not self.running:
            return
        self.ticks += 1
        self.bird.update_physics(self.config.gravity)

        if self.bird.out_of_bounds(self.config.height):
            self.end()
            return

        collided, scored = self.pipes.advance(self.bird)
        if scored:
            self.score += scored
            logger.debug("score=%d", self.score)
            if self.on_score is not None:
                self.on_score(self.score)
        if collided:
            self.end()
            return

        self.pipes.cull()

    def frame(self):
        self.tick()
        if self.renderer is not None:
            self.renderer.render(self)
