# /experiments/sanity_rollout.py
"""
Sanity rollouts for FlappyEnv:
- Runs RANDOM and/or HEURISTIC policies over fixed seeds
- Writes an episodes CSV for notebook analysis
- Optionally saves per-episode action sequences for exact replay

Usage examples (from repo root):
  python -m experiments.sanity_rollout --policies both --save-traces
  python -m experiments.sanity_rollout --policies heuristic --seeds 111,222,333
"""

from __future__ import annotations
import argparse
import csv
from pathlib import Path
from typing import List, Tuple

import numpy as np

from src.env.flappy_env import FlappyEnv
from src.flappy.config import GameConfig


# ------------------------ Policies ------------------------

def random_policy_init(action_seed: int, flap_prob: float = 0.08):
    rng = np.random.RandomState(action_seed)
    def act(_obs: np.ndarray) -> int:
        return int(rng.random_sample() < flap_prob)
    return act

def heuristic_policy_init(margin: float = 0.02, config: GameConfig | None = None):
    """
    Flap when the bird's bottom is about to sink under the next gap's bottom
    and it is not already rising.
    obs = [y_norm, v_norm, dx_norm, gap_top_norm, gap_bottom_norm]
    """
    c = config or GameConfig()
    bird_h_norm = c.bird_height / c.height

    def act(obs: np.ndarray) -> int:
        y, v, _dx, _gap_top, gap_bottom = (float(o) for o in obs)
        bird_bottom = y + bird_h_norm
        return 1 if (bird_bottom > gap_bottom - margin and v >= 0.0) else 0
    return act


# ------------------------ Rollout core ------------------------

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)

def write_episode_row(csv_path: Path, header: List[str], row: List):
    exists = csv_path.exists()
    with csv_path.open("a", newline="") as f:
        w = csv.writer(f)
        if not exists:
            w.writerow(header)
        w.writerow(row)

def run_one_episode(policy_name: str,
                    seed: int,
                    frame_skip: int,
                    steps_limit: int,
                    save_traces: bool,
                    out_dir: Path) -> Tuple[int, float, int, bool, bool]:
    """Returns: (ep_len, ret_sum, score, terminated, truncated)."""
    env = FlappyEnv(frame_skip=frame_skip)

    if policy_name == "random":
        action_seed = 10_000 + seed
        policy = random_policy_init(action_seed)
    elif policy_name == "heuristic":
        action_seed = -1
        policy = heuristic_policy_init(config=env.config)
    else:
        raise ValueError(f"Unknown policy {policy_name!r}")

    actions: List[int] = []
    ret_sum = 0.0
    ep_len = 0
    term = trunc = False
    info = {}

    try:
        obs, info = env.reset(seed=seed)
        for _ in range(steps_limit):
            a = policy(obs)
            actions.append(int(a))
            obs, r, term, trunc, info = env.step(a)
            ret_sum += float(r)
            ep_len += 1
            if term or trunc:
                break
    finally:
        env.close()

    if save_traces:
        trace_dir = out_dir / "traces" / policy_name
        ensure_dir(trace_dir)
        np.save(trace_dir / f"{seed}_actions.npy", np.asarray(actions, dtype=np.int8))
        meta_lines = [
            f"seed={seed}",
            f"frame_skip={frame_skip}",
            f"policy={policy_name}",
            f"action_rng_seed={action_seed}",
            f"steps_limit={steps_limit}",
        ]
        (trace_dir / f"{seed}_meta.txt").write_text("\n".join(meta_lines), encoding="utf-8")

    return ep_len, ret_sum, int(info.get("score", 0)), bool(term), bool(trunc)


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--policies", type=str, default="both",
                    choices=["random", "heuristic", "both"])
    ap.add_argument("--seeds", type=str, default="",
                    help="Comma-separated seeds. If empty, uses 20 defaults: 101..120")
    ap.add_argument("--frame-skip", type=int, default=2)
    ap.add_argument("--steps", type=int, default=5_000,
                    help="Hard cap on decision steps (env may truncate earlier)")
    ap.add_argument("--out-dir", type=str, default="experiments/runs")
    ap.add_argument("--save-traces", action="store_true")
    args = ap.parse_args(argv)

    out_dir = Path(args.out_dir)
    ensure_dir(out_dir)

    if args.seeds.strip():
        seeds = [int(s) for s in args.seeds.split(",") if s.strip()]
    else:
        seeds = list(range(101, 121))

    episodes_csv = out_dir / "episodes.csv"
    header = ["policy_name", "seed", "frame_skip", "episode_len_decisions",
              "return_sum", "score", "terminated", "truncated"]

    to_run = ["random", "heuristic"] if args.policies == "both" else [args.policies]
    print(f"Running policies={to_run} on {len(seeds)} seeds (frame_skip={args.frame_skip})")

    for policy_name in to_run:
        for seed in seeds:
            ep_len, ret_sum, score, terminated, truncated = run_one_episode(
                policy_name=policy_name,
                seed=seed,
                frame_skip=args.frame_skip,
                steps_limit=args.steps,
                save_traces=args.save_traces,
                out_dir=out_dir,
            )
            write_episode_row(episodes_csv, header, [
                policy_name, seed, args.frame_skip, ep_len,
                f"{ret_sum:.1f}", score, int(terminated), int(truncated),
            ])
            print(f"[{policy_name}] seed={seed}  len={ep_len}  score={score}  "
                  f"ret={ret_sum:.1f}  term={terminated} trunc={truncated}")

    print("✓ Sanity rollouts complete")


if __name__ == "__main__":
    main()
