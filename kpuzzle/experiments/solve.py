#!/usr/bin/env python3
"""Solve one 15-puzzle instance optimally and print the solution."""
from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from kpuzzle.config import DEFAULT_MODEL, HEURISTICS, PARTITION_MODELS, SolverSettings, configure_logging
from kpuzzle.domains.state import InvalidStateError, PuzzleState, parse_state
from kpuzzle.heuristics.manhattan import distance_with_final
from kpuzzle.heuristics.pattern_db import load_or_generate
from kpuzzle.search.ida_star import Heuristic, IDAStar


def choose_heuristic(settings: SolverSettings) -> Heuristic:
    if settings.heuristic == "MANHATTAN":
        return distance_with_final
    if settings.heuristic == "PATTERN":
        return load_or_generate(settings.partition_model, settings.pdb_file, workers=settings.workers)
    raise ValueError(settings.heuristic)


def solve_problem(start: PuzzleState, hfun: Heuristic, settings: SolverSettings, solver: IDAStar) -> bool:
    def print_stats(explored: int, depth: int):
        print(f"\rNode Explored: {explored} | Current MaxDepth: {depth}", end="", flush=True)

    print(f"Initial State: {start}")
    if settings.interactive:
        future = solver.solve_in_background(start, hfun)
        result = solver.wait_with_progress(future, print_stats, period=settings.refresh_period)
    else:
        result = solver.find_solution(start, hfun)
        print_stats(*solver.progress())

    print(f"\nTime Elapsed: {result.time_elapsed * 1000:.0f} [ms]")
    return result.solution_found


def print_solution(solver: IDAStar, start: PuzzleState):
    print(f"Solution Length: {solver.solution_length}")
    print("Solution Moves: [" + ",".join(solver.solution_path) + "]")
    print("--- Solution States ---")
    s = start
    print(s)
    for m in solver.solution_path:
        s = s.apply(m)
        print(s)
    print("-----------------------")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="kpuzzle", description="Optimal 15-puzzle solver (IDA*)")
    p.add_argument("-a", "--heuristic", "--algorithm", dest="heuristic", required=True,
                   type=str.upper, choices=HEURISTICS, help="Heuristic used to guide IDA*")
    p.add_argument("-s", "--state", required=True, metavar="{RANDOM|0,1,2,3,...}",
                   help="Initial state, row major, 0 is the blank")
    p.add_argument("--seed", type=int, default=None, help="Seed for --state RANDOM")
    p.add_argument("-i", "--interactive", action="store_true",
                   help="Run the search in background and refresh progress")
    p.add_argument("--model", choices=sorted(PARTITION_MODELS), default=DEFAULT_MODEL,
                   help="Pattern database partition model")
    p.add_argument("--pdb-file", type=Path, default=None,
                   help="Pattern database file (generated and saved when missing)")
    p.add_argument("--workers", type=int, default=1, help="Processes used to build the pattern DB")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        start = parse_state(args.state, seed=args.seed)
    except InvalidStateError as e:
        print(e, file=sys.stderr)
        return 2

    settings = SolverSettings(heuristic=args.heuristic, model=args.model, pdb_file=args.pdb_file,
                              interactive=args.interactive, workers=args.workers)
    hfun = choose_heuristic(settings)
    solver = IDAStar()
    if not solve_problem(start, hfun, settings, solver):
        print("No solution found within the depth limit.")
        return 1
    print_solution(solver, start)
    return 0


if __name__ == "__main__":
    sys.exit(main())
