# src/flappy/game.py
import sys, argparse, logging
import pygame
from pygame import K_SPACE, K_ESCAPE, K_r
from .config import GameConfig, SEED_DEFAULT, MAX_FRAME_MS
from .renderer import PygameRenderer
from .scheduler import Scheduler
from .session import GameSession

logger = logging.getLogger("flappy")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Flappy: jump through the gaps.")
    p.add_argument("--seed", type=int, default=SEED_DEFAULT,
                   help="Gap seed. Omit for a random layout each session.")
    p.add_argument("--gravity", type=float, default=None, help="Velocity added per tick")
    p.add_argument("--jump", type=float, default=None, dest="jump_impulse",
                   help="Velocity set by a jump (negative = up)")
    p.add_argument("--pipe-speed", type=float, default=None, help="Pipe scroll px per tick")
    p.add_argument("--gap", type=float, default=None, dest="pipe_gap", help="Gap height in px")
    p.add_argument("--pipe-width", type=float, default=None)
    p.add_argument("--spawn-ms", type=float, default=None, dest="spawn_interval_ms",
                   help="Pipe spawn interval in milliseconds")
    p.add_argument("--width", type=int, default=None)
    p.add_argument("--height", type=int, default=None)
    p.add_argument("--assets", type=str, default=None,
                   help="Directory holding bird.svg / pipe.svg (placeholders if omitted)")
    p.add_argument("--log-level", type=str, default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def config_from_args(args) -> GameConfig:
    return GameConfig().with_overrides(
        gravity=args.gravity,
        jump_impulse=args.jump_impulse,
        pipe_speed=args.pipe_speed,
        pipe_gap=args.pipe_gap,
        pipe_width=args.pipe_width,
        spawn_interval_ms=args.spawn_interval_ms,
        width=args.width,
        height=args.height,
    )


def run(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    pygame.init()
    pygame.display.set_caption("Flappy")
    screen = pygame.display.set_mode((config.width, config.height))
    clock = pygame.time.Clock()
    renderer = PygameRenderer(screen, config, args.assets)
    scheduler = Scheduler(now_ms=0)
    last_ticks = pygame.time.get_ticks()

    def show_score(score: int):
        pygame.display.set_caption(f"Flappy  Score: {score}")

    def show_game_over(score: int):
        pygame.display.set_caption(f"Flappy  Game over, final score: {score}")

    session = GameSession(config, scheduler, renderer, seed=args.seed,
                          on_score=show_score, on_game_over=show_game_over)

    def quit_game():
        session.teardown()
        pygame.quit()
        sys.exit()

    while True:
        clock.tick(config.fps)

        # Advance sim time before input so a trigger schedules from "now".
        # Running sessions render from their frame task.
        ticks = pygame.time.get_ticks()
        scheduler.advance(ticks - last_ticks, max_step_ms=MAX_FRAME_MS)
        last_ticks = ticks

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                quit_game()
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    quit_game()
                if event.key == K_SPACE:
                    session.trigger()
                if event.key == K_r and session.over:
                    session = session.restart(seed=args.seed)
                    pygame.display.set_caption("Flappy")
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if session.over:
                    if renderer.restart_button.collidepoint(event.pos):
                        session = session.restart(seed=args.seed)
                        pygame.display.set_caption("Flappy")
                else:
                    session.trigger()

        # idle/over frames are redrawn here
        if not session.running:
            renderer.render(session)

        pygame.display.flip()


if __name__ == "__main__":
    run()
