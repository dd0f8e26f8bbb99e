#!/usr/bin/env python3
import subprocess, sys
from pathlib import Path

def run(cmd):
    print("Running:", cmd)
    r = subprocess.run(cmd, shell=True)
    if r.returncode != 0:
        sys.exit(r.returncode)

def main():
    Path("results").mkdir(exist_ok=True)
    run("python -m kpuzzle.experiments.runner --depths 6 10 14 18 --per_depth 10 --heuristic manhattan --out results/manhattan.csv")
    run("python -m kpuzzle.experiments.runner --depths 6 10 14 18 --per_depth 10 --heuristic pattern --model 33333 --out results/pattern_33333.csv")
    run("python -m kpuzzle.experiments.analyze results/manhattan.csv results/pattern_33333.csv --out results/summary.csv")

if __name__ == "__main__":
    main()
