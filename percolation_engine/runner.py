"""
Runner script for the percolation threshold engine.

Two sub-commands:

stats
    One Monte Carlo estimate on an n-by-n grid; prints mean, standard
    deviation, 95% confidence interval and elapsed time.

compare
    Loads a JSON config, times the naive and weighted union-find engines over
    a sweep of grid sizes, optionally searches for the largest n each engine
    finishes within the time limit, and writes comparison_results.csv and
    summary.json.

Usage
-----
    python -m percolation_engine.runner stats 200 100 [--engine naive] [--seed 7]
    python -m percolation_engine.runner compare config.json [--output-dir results/]

A config snapshot with SHA-256 hash is always saved alongside compare results
for reproducibility.
"""

from __future__ import annotations

import argparse
import csv
import hashlib
import json
import math
import sys
import time
from pathlib import Path

from .comparison import (
    ComparisonRow,
    compare_engines,
    find_max_n,
    record_fieldnames,
    rows_to_records,
)
from .config import build_seed, load_config
from .monte_carlo import MonteCarloResult, run_monte_carlo
from .union_find import EngineKind


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Percolation threshold engine: Monte Carlo estimator and "
        "union-find comparison."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    stats = sub.add_parser("stats", help="Estimate the threshold on one grid size.")
    stats.add_argument("n", type=int, help="Grid side length.")
    stats.add_argument("trials", type=int, help="Number of independent trials (>= 2).")
    stats.add_argument(
        "--engine",
        default=EngineKind.WEIGHTED.value,
        choices=[k.value for k in EngineKind],
        help="Union-find backing (default: weighted).",
    )
    stats.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Master seed (default: fresh entropy each run).",
    )

    compare = sub.add_parser("compare", help="Time both engines from a JSON config.")
    compare.add_argument("config", help="Path to JSON configuration file.")
    compare.add_argument(
        "--output-dir",
        default="results",
        help="Directory for output files (default: results/).",
    )
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _write_csv(path: Path, fieldnames: list[str], rows: list[dict]) -> None:
    with path.open("w", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def _config_hash(cfg: dict) -> str:
    """Compute a SHA-256 hash of the JSON-serialised config for reproducibility."""
    serialised = json.dumps(cfg, sort_keys=True).encode("utf-8")
    return hashlib.sha256(serialised).hexdigest()


def _nan_to_none(v):
    """Replace float NaN/inf with None for valid JSON serialisation."""
    return None if (isinstance(v, float) and not math.isfinite(v)) else v


def _save_config_snapshot(output_dir: Path, cfg: dict) -> None:
    snapshot = {
        "config": cfg,
        "sha256": _config_hash(cfg),
    }
    (output_dir / "config_snapshot.json").write_text(json.dumps(snapshot, indent=2))


# ---------------------------------------------------------------------------
# stats
# ---------------------------------------------------------------------------


def _run_stats(n: int, trials: int, engine: str, seed: int | None) -> MonteCarloResult:
    print(f"[Stats] engine={engine} | n={n} | trials={trials}")
    result = run_monte_carlo(n, trials, engine=engine, seed=seed)
    _print_stats_summary(result)
    return result


def _print_stats_summary(result: MonteCarloResult) -> None:
    sep = "-" * 58
    print(sep)
    print(f"  Percolation Threshold, {result.engine.value} union-find")
    print(sep)
    print(f"  n                : {result.n}")
    print(f"  trials           : {result.trials}")
    print(f"  seed             : {result.seed}")
    print(f"  mean()           = {result.mean:.6f}")
    print(f"  stddev()         = {result.stddev:.6f}")
    print(f"  confidenceLow()  = {result.ci_low:.6f}")
    print(f"  confidenceHigh() = {result.ci_high:.6f}")
    print(f"  elapsed time     = {result.elapsed_s:.6f}s")
    print(sep)


# ---------------------------------------------------------------------------
# compare
# ---------------------------------------------------------------------------


def _run_compare(cfg: dict, output_dir: Path) -> dict:
    """Execute the engine comparison pipeline and write its outputs."""
    sizes: list[int] = list(cfg["grid_sizes"])
    trials: int = int(cfg["trials"])
    engines = [EngineKind.parse(e) for e in cfg["engines"]]
    limit: float = float(cfg["time_limit_s"])
    seed = build_seed(cfg)

    print(
        f"[Compare] sizes={sizes} | trials={trials} | "
        f"engines={[e.value for e in engines]} | limit={limit:.1f}s"
    )
    t0 = time.perf_counter()
    rows = compare_engines(sizes, trials, engines=engines, seed=seed, time_limit_s=limit)
    elapsed = time.perf_counter() - t0

    records = rows_to_records(rows, engines)
    _write_csv(output_dir / "comparison_results.csv", record_fieldnames(engines), records)
    _print_comparison_table(rows, engines)

    max_n: dict[str, int] = {}
    search = cfg["max_n_search"]
    if search.get("enabled", False):
        for kind in engines:
            start, stop, step = search[kind.value]
            print(f"[Search] {kind.value}: n in [{start}, {stop}] step {step}")
            max_n[kind.value] = find_max_n(
                kind, start, stop, step, trials, limit, seed=seed
            )
            print(f"[Search] {kind.value}: max n within {limit:.1f}s = {max_n[kind.value]}")

    summary = {
        "grid_sizes": sizes,
        "trials": trials,
        "engines": [e.value for e in engines],
        "time_limit_s": limit,
        "elapsed_total_s": round(elapsed, 4),
        "rows": [{k: _nan_to_none(v) for k, v in rec.items()} for rec in records],
        "max_n_within_limit": max_n,
    }
    if max_n.get("naive") and max_n.get("weighted"):
        summary["max_n_ratio"] = round(max_n["weighted"] / max_n["naive"], 4)
    (output_dir / "summary.json").write_text(json.dumps(summary, indent=2))
    return summary


def _print_comparison_table(rows: list[ComparisonRow], engines: list[EngineKind]) -> None:
    sep = "-" * 58
    print(sep)
    print("  Union-Find Engine Comparison (elapsed seconds)")
    print(sep)
    header = f"  {'n':>6}" + "".join(f"  {e.value + ' (s)':>14}" for e in engines)
    header += f"  {'Speedup':>9}"
    print(header)
    for row in rows:
        line = f"  {row.n:>6}"
        for e in engines:
            el = row.elapsed(e)
            line += f"  {'-' if el is None else f'{el:.3f}':>14}"
        sp = row.speedup
        line += f"  {'-' if sp is None else f'{sp:.2f}x':>9}"
        print(line)
    print(sep)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    if args.command == "stats":
        try:
            _run_stats(args.n, args.trials, args.engine, args.seed)
        except ValueError as exc:
            print(f"ERROR: {exc}")
            sys.exit(2)
        return

    output_dir = Path(args.output_dir)
    _ensure_dir(output_dir)

    cfg = load_config(args.config)
    _save_config_snapshot(output_dir, cfg)

    (output_dir / "experiment_metadata.json").write_text(
        json.dumps(
            {
                "config_file": str(Path(args.config).resolve()),
                "output_dir": str(output_dir.resolve()),
                "config_sha256": _config_hash(cfg),
                "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            },
            indent=2,
        )
    )

    _run_compare(cfg, output_dir)
    print(f"  Results saved to : {output_dir.resolve()}")


if __name__ == "__main__":
    main()
