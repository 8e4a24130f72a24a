# src/tests/test_session.py
import pytest

from src.flappy.config import MAX_FRAME_MS
from src.flappy.pipes import Pipe
from src.flappy.scheduler import Scheduler
from src.flappy.session import GameSession


class RecordingRenderer:
    def __init__(self):
        self.frames = []

    def render(self, session):
        self.frames.append((session.bird.y, session.score, session.over))


def run_frames(scheduler, n, frame_ms=16):
    for _ in range(n):
        scheduler.pump(scheduler.now_ms + frame_ms)


# -------------------- Lifecycle --------------------

def test_initial_state(session, config):
    assert not session.started and not session.over
    assert session.score == 0
    assert len(session.pipes) == 0
    assert session.bird.x == config.bird_x
    assert session.bird.y == config.bird_start_y
    assert session.scheduler.tasks == []


def test_first_trigger_starts_and_jumps(session):
    session.trigger()
    assert session.started and session.running
    assert len(session.pipes) == 1
    assert session.bird.velocity == -8.0
    assert len(session.scheduler.tasks) == 2


def test_start_does_not_tick_synchronously(session):
    session.start()
    assert session.ticks == 0
    assert session.bird.y == 240


def test_tick_before_start_is_a_noop(session):
    session.tick()
    assert session.bird.y == 240 and session.bird.velocity == 0.0


def test_first_jump_then_one_frame(session, scheduler):
    session.trigger()
    scheduler.pump(16)
    assert session.bird.velocity == -7.5
    assert session.bird.y == 240 - 7.5


def test_velocity_grows_by_gravity_each_tick(session, scheduler):
    session.trigger()
    seen = []
    for _ in range(6):
        run_frames(scheduler, 1)
        seen.append(session.bird.velocity)
    assert seen == [-7.5, -7.0, -6.5, -6.0, -5.5, -5.0]


def test_repeated_triggers_keep_jumping(session, scheduler):
    session.trigger()
    run_frames(scheduler, 5)
    session.trigger()
    assert session.bird.velocity == -8.0
    assert len(session.pipes) == 1


# -------------------- Spawning --------------------

def test_spawner_adds_two_pipes_in_4100ms(session, scheduler):
    session.trigger()
    scheduler.pump(4100)
    assert len(session.pipes) == 3


def test_spawner_timing_with_frames(steady_config):
    scheduler = Scheduler(now_ms=0)
    session = GameSession(steady_config, scheduler, seed=3)
    session.start()
    while scheduler.now_ms + 16 <= 4100:
        scheduler.pump(scheduler.now_ms + 16)
    assert not session.over
    assert len(session.pipes) == 3
    assert [p.gap_top for p in session.pipes] == [50, 50, 50]


def test_spawn_after_over_is_ignored(session):
    session.start()
    session.end()
    assert session.spawn_pipe() is None
    assert len(session.pipes) == 1


# -------------------- Scoring --------------------

def test_score_increments_once_per_pipe(steady_config):
    scheduler = Scheduler(now_ms=0)
    scores = []
    session = GameSession(steady_config, scheduler, seed=3, on_score=scores.append)
    session.start()
    run_frames(scheduler, 300)
    # first pipe needs 271 ticks for its trailing edge to pass x=160; the second spawned at tick 125
    assert session.score == 1
    assert scores == [1]
    assert session.pipes.pipes[0].passed


def test_score_is_monotonic_over_a_long_run(steady_config):
    scheduler = Scheduler(now_ms=0)
    session = GameSession(steady_config, scheduler, seed=3)
    session.start()
    last = 0
    for _ in range(2000):
        run_frames(scheduler, 1)
        assert session.score >= last
        last = session.score
    assert not session.over
    assert session.score > 5
    assert all(p.trailing_edge > 0 for p in session.pipes)


# -------------------- Game over --------------------

def test_falling_out_of_the_playfield_ends_the_game(session, scheduler):
    finals = []
    session.on_game_over = finals.append
    session.start()
    run_frames(scheduler, 200)
    assert session.over
    assert finals == [0]
    assert scheduler.tasks == []


def test_state_is_frozen_after_over(session, scheduler):
    session.start()
    run_frames(scheduler, 200)
    assert session.over
    snapshot = (session.bird.y, session.bird.velocity, session.score,
                [(p.x, p.gap_top) for p in session.pipes], session.ticks)

    scheduler.pump(scheduler.now_ms + 10_000)
    session.trigger()
    session.jump()
    session.tick()

    assert snapshot == (session.bird.y, session.bird.velocity, session.score,
                        [(p.x, p.gap_top) for p in session.pipes], session.ticks)


def test_collision_ends_the_game(session):
    session.start()
    session.pipes.pipes = [Pipe(x=152, gap_top=300, gap_height=150, width=60)]
    session.tick()
    assert session.over
    assert session.score == 0


def test_score_then_collision_in_same_tick(session):
    scores, finals = [], []
    session.on_score, session.on_game_over = scores.append, finals.append
    session.start()
    session.pipes.pipes = [
        Pipe(x=101, gap_top=50, gap_height=150, width=60),
        Pipe(x=152, gap_top=300, gap_height=150, width=60),
        Pipe(x=400, gap_top=50, gap_height=150, width=60),
    ]
    session.tick()
    assert session.over
    assert scores == [1] and finals == [1]
    assert session.pipes.pipes[2].x == 400


def test_spawner_cancelled_in_the_same_pump_as_game_over(session, scheduler):
    session.start()
    session.bird.y = 439.9       # first tick pushes the bottom past 480
    scheduler.pump(4100)
    assert session.over
    assert len(session.pipes) == 1


def test_end_is_idempotent(session):
    finals = []
    session.on_game_over = finals.append
    session.start()
    session.end()
    session.end()
    assert finals == [0]


# -------------------- Rendering --------------------

def test_each_frame_ticks_then_renders(config, scheduler):
    renderer = RecordingRenderer()
    session = GameSession(config, scheduler, renderer=renderer, seed=5)
    session.trigger()
    run_frames(scheduler, 3)
    assert [f[0] for f in renderer.frames] == pytest.approx([232.5, 225.5, 219.0])


def test_terminal_frame_is_rendered_once(config, scheduler):
    renderer = RecordingRenderer()
    session = GameSession(config, scheduler, renderer=renderer, seed=5)
    session.start()
    run_frames(scheduler, 300)
    assert renderer.frames[-1][2] is True
    assert sum(1 for f in renderer.frames if f[2]) == 1


# -------------------- Restart --------------------

def test_restart_builds_a_fresh_session(session, scheduler):
    session.trigger()
    run_frames(scheduler, 5)
    fresh = session.restart(seed=42)

    assert fresh is not session
    assert not fresh.started and not fresh.over
    assert fresh.score == 0 and len(fresh.pipes) == 0
    assert fresh.bird.y == fresh.config.bird_start_y
    assert fresh.seed == 42
    assert scheduler.tasks == []


def test_old_session_cannot_touch_state_after_restart(session, scheduler):
    session.trigger()
    run_frames(scheduler, 5)
    old_y, old_ticks = session.bird.y, session.ticks

    fresh = session.restart()
    fresh.trigger()
    run_frames(scheduler, 5)

    assert (session.bird.y, session.ticks) == (old_y, old_ticks)
    assert fresh.ticks == 5
    assert all(t.owner is fresh for t in scheduler.tasks)


def test_restart_keeps_listeners(session, scheduler):
    finals = []
    session.on_game_over = finals.append
    fresh = session.restart()
    fresh.start()
    run_frames(scheduler, 300)
    assert fresh.over
    assert finals == [0]


# -------------------- Host stalls --------------------

def test_stall_does_not_stack_pipes(steady_config):
    scheduler = Scheduler(now_ms=0)
    session = GameSession(steady_config, scheduler, seed=3)
    session.start()
    scheduler.advance(16, max_step_ms=MAX_FRAME_MS)
    scheduler.advance(10_000, max_step_ms=MAX_FRAME_MS)     # host blocked for 10 s
    assert len(session.pipes) == 1

    for _ in range(400):
        scheduler.advance(10_000, max_step_ms=MAX_FRAME_MS)
    xs = [p.x for p in session.pipes]
    assert not session.over
    assert len(xs) >= 3
    assert len(set(xs)) == len(xs)


def test_first_spawn_is_one_interval_after_the_trigger(session, scheduler):
    scheduler.pump(500)
    session.trigger()
    spawner = [t for t in scheduler.tasks if not t.per_frame][0]
    assert spawner.next_due_ms == 2500
    scheduler.pump(2499)
    assert len(session.pipes) == 1
    scheduler.pump(2500)
    assert len(session.pipes) == 2
