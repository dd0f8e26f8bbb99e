#!/usr/bin/env python3
import argparse, glob, os
from pathlib import Path

import pandas as pd


def load_many(patterns):
    dfs = []
    for pat in patterns:
        for fn in sorted(glob.glob(str(pat))):
            df = pd.read_csv(fn)
            df["__src__"] = os.path.basename(fn)
            dfs.append(df)
    if not dfs:
        return pd.DataFrame()
    df = pd.concat(dfs, ignore_index=True, sort=False)

    for c in ("depth", "seed", "expanded", "g", "bound_final", "time_sec"):
        if c in df.columns:
            df[c] = pd.to_numeric(df[c], errors="coerce")
    return df


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Mean/median/max of explored nodes and time per (heuristic, depth), solved runs only."""
    ok = df[df["termination"].fillna("ok") == "ok"]
    out = ok.groupby(["heuristic", "depth"]).agg(
        runs=("seed", "count"),
        g_mean=("g", "mean"),
        expanded_mean=("expanded", "mean"),
        expanded_median=("expanded", "median"),
        expanded_max=("expanded", "max"),
        time_mean=("time_sec", "mean"),
        time_max=("time_sec", "max"),
    )
    return out.reset_index()


def ratio_table(summary: pd.DataFrame, num="pattern", den="manhattan") -> pd.DataFrame:
    """Per depth, ratio of mean explored nodes and time between two heuristics."""
    if num not in summary["heuristic"].values or den not in summary["heuristic"].values:
        return pd.DataFrame(columns=["depth", "expanded_ratio", "time_ratio"])
    piv = summary.pivot(index="depth", columns="heuristic", values=["expanded_mean", "time_mean"])
    out = pd.DataFrame({
        "expanded_ratio": piv[("expanded_mean", num)] / piv[("expanded_mean", den)],
        "time_ratio": piv[("time_mean", num)] / piv[("time_mean", den)],
    })
    return out.dropna().reset_index()


def main(argv=None):
    ap = argparse.ArgumentParser(description="Summarize IDA* runner CSVs")
    ap.add_argument("csv", nargs="+", help="CSV files or glob patterns")
    ap.add_argument("--out", type=Path, default=None, help="Write the summary as CSV")
    args = ap.parse_args(argv)

    df = load_many(args.csv)
    if df.empty:
        print("no rows found")
        return
    summary = summarize(df)
    print(summary.to_string(index=False))

    ratios = ratio_table(summary)
    if not ratios.empty:
        print("\npattern / manhattan")
        print(ratios.to_string(index=False))

    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        summary.to_csv(args.out, index=False)
        print(f"Wrote {args.out}")


if __name__ == "__main__":
    main()
