from __future__ import annotations
import argparse, csv
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from kpuzzle.config import DEFAULT_MODEL, PARTITION_MODELS, configure_logging, default_pdb_file
from kpuzzle.domains.state import PuzzleState
from kpuzzle.heuristics.manhattan import distance_with_final
from kpuzzle.heuristics.pattern_db import load_or_generate
from kpuzzle.search.ida_star import Heuristic, ida_star

HEADER = ["algorithm", "heuristic", "depth", "seed", "expanded", "g", "time_sec",
          "bound_final", "termination"]


@dataclass
class Instance:
    seed: int
    depth: int
    state: PuzzleState


def make_instances(depths: List[int], per_depth: int, start_seed: int = 0) -> List[Instance]:
    out: List[Instance] = []
    seed = start_seed
    for d in depths:
        made = 0
        while made < per_depth:
            s = PuzzleState.scramble(d, seed)
            if s.is_valid() and s.is_solvable():
                out.append(Instance(seed=seed, depth=d, state=s))
                made += 1
            seed += 1
    return out


def choose_heuristics(names: List[str], model: str, pdb_file: Path, workers: int) -> Dict[str, Heuristic]:
    out: Dict[str, Heuristic] = {}
    for n in names:
        if n == "manhattan":
            out[n] = distance_with_final
        else:
            out[n] = load_or_generate(PARTITION_MODELS[model], pdb_file, workers=workers)
    return out


def main(argv=None):
    ap = argparse.ArgumentParser(description="IDA* 15-puzzle experiment runner")
    ap.add_argument("--heuristic", choices=["manhattan", "pattern", "both"], default="manhattan")
    ap.add_argument("--depths", type=int, nargs="+", default=[6, 10, 14, 18, 22])
    ap.add_argument("--per_depth", type=int, default=10)
    ap.add_argument("--start_seed", type=int, default=0)
    ap.add_argument("--model", choices=sorted(PARTITION_MODELS), default=DEFAULT_MODEL)
    ap.add_argument("--pdb_file", type=Path, default=None)
    ap.add_argument("--workers", type=int, default=1)
    ap.add_argument("--out", type=Path, default=Path("results/last_run.csv"))
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)
    configure_logging(args.verbose)

    names = ["manhattan", "pattern"] if args.heuristic == "both" else [args.heuristic]
    hfuns = choose_heuristics(names, args.model, args.pdb_file or default_pdb_file(args.model), args.workers)

    insts = make_instances(args.depths, args.per_depth, args.start_seed)
    args.out.parent.mkdir(parents=True, exist_ok=True)

    with args.out.open("w", newline="") as f:
        w = csv.writer(f); w.writerow(HEADER)
        for inst in insts:
            for name, hfun in hfuns.items():
                r = ida_star(inst.state, hfun, return_path=False)
                w.writerow([
                    r["algorithm"], name, inst.depth, inst.seed,
                    r["expanded"], r["g"] if r["g"] is not None else "",
                    f"{r['time']:.6f}", r["bound_final"], r["termination"],
                ])

    print(f"Wrote {args.out} ({len(insts)} instances)")


if __name__ == "__main__":
    main()
