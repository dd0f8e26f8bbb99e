#!/usr/bin/env python3
import argparse, os
from pathlib import Path
import matplotlib
if "MPLBACKEND" not in os.environ:
    matplotlib.use("Agg")
import matplotlib.pyplot as plt

from typing import List

from kpuzzle.domains.state import SIZE, PuzzleState, parse_state
from kpuzzle.heuristics.manhattan import distance_with_final
from kpuzzle.search.ida_star import IDAStar


def draw_board(state: PuzzleState, out_path: Path, title: str = ""):
    n = SIZE
    plt.figure(figsize=(3, 3))
    ax = plt.gca()
    ax.set_xlim(0, n); ax.set_ylim(0, n)
    ax.set_xticks([]); ax.set_yticks([]); ax.invert_yaxis()
    for i in range(n + 1):
        ax.plot([0, n], [i, i], linewidth=1)
        ax.plot([i, i], [0, n], linewidth=1)
    for idx, t in enumerate(state.values()):
        if t == 0: continue
        r, c = divmod(idx, n)
        ax.text(c + 0.5, r + 0.6, str(t), ha="center", va="center", fontsize=16)
    if title:
        ax.set_title(title)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(out_path, dpi=200)
    plt.close()


def save_frames(start: PuzzleState, path: str, outdir: Path) -> List[Path]:
    frames = []
    s = start
    out = outdir / "step_000.png"
    draw_board(s, out, "start")
    frames.append(out)
    for i, m in enumerate(path, start=1):
        s = s.apply(m)
        out = outdir / f"step_{i:03d}.png"
        draw_board(s, out, f"{i}: {m}")
        frames.append(out)
    return frames


def main(argv=None):
    p = argparse.ArgumentParser(description="Solve one instance and save board images along the path.")
    p.add_argument("--state", default=None, help="Comma separated values; defaults to a scramble")
    p.add_argument("--depth", type=int, default=10)
    p.add_argument("--seed", type=int, default=1)
    p.add_argument("--outdir", default="results/figs/example_path")
    args = p.parse_args(argv)

    start = parse_state(args.state) if args.state else PuzzleState.scramble(args.depth, args.seed)
    solver = IDAStar()
    res = solver.find_solution(start, distance_with_final)
    if not res.solution_found:
        print("No path (exhausted). Try smaller depth.")
        return

    frames = save_frames(start, solver.solution_path, Path(args.outdir))
    print(f"Saved {len(frames)} frames to {args.outdir}")


if __name__ == "__main__":
    main()
