"""
Performance comparison of the weighted and naive union-find engines.

Times the full Monte Carlo estimator for each engine over a sweep of grid
sizes and searches for the largest grid each engine can finish within a
wall-clock budget.  Both engines produce statistically equivalent
thresholds; only the elapsed time differs.

An engine that exceeds the budget at some n is not run at larger n (its
cost only grows with n); a ``UserWarning`` reports where that happened.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Sequence

from .monte_carlo import TimeLimitExceeded, run_monte_carlo
from .union_find import EngineKind


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimingResult:
    """Elapsed time and headline statistics of one estimator run."""
    n: int
    engine: EngineKind
    trials: int
    elapsed_s: float
    mean: float
    stddev: float


@dataclass
class ComparisonRow:
    """Per-grid-size timings; ``None`` marks an engine that was skipped or timed out."""
    n: int
    trials: int
    timings: dict[EngineKind, TimingResult | None] = field(default_factory=dict)

    def elapsed(self, engine: str | EngineKind) -> float | None:
        timing = self.timings.get(EngineKind.parse(engine))
        return None if timing is None else timing.elapsed_s

    @property
    def speedup(self) -> float | None:
        """Naive elapsed / weighted elapsed, when both ran."""
        naive = self.elapsed(EngineKind.NAIVE)
        weighted = self.elapsed(EngineKind.WEIGHTED)
        if naive is None or weighted is None or weighted == 0.0:
            return None
        return naive / weighted


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------


def time_estimator(
    n: int,
    trials: int,
    engine: str | EngineKind,
    seed: int | None = None,
    time_limit_s: float | None = None,
) -> TimingResult:
    """Run one estimator and report its wall-clock time.

    Raises
    ------
    TimeLimitExceeded
        If ``time_limit_s`` is given and runs out between trials.
    """
    result = run_monte_carlo(
        n, trials, engine=engine, seed=seed, time_limit_s=time_limit_s
    )
    return TimingResult(
        n=n,
        engine=result.engine,
        trials=trials,
        elapsed_s=result.elapsed_s,
        mean=result.mean,
        stddev=result.stddev,
    )


def compare_engines(
    grid_sizes: Sequence[int],
    trials: int,
    engines: Sequence[str | EngineKind] = (EngineKind.NAIVE, EngineKind.WEIGHTED),
    seed: int | None = None,
    time_limit_s: float | None = None,
) -> list[ComparisonRow]:
    """Time every engine at every grid size.

    Parameters
    ----------
    grid_sizes : sequence of int
        Grid side lengths, run in the given order.
    trials : int
        Trials per estimator run (>= 2).
    engines : sequence of str or EngineKind
        Engines to time at each size.
    seed : int or None
        Master seed shared by every run, so all engines see the same
        random streams at a given n.
    time_limit_s : float or None
        Per-run budget.  An engine that exceeds it is skipped at later sizes.

    Returns
    -------
    list of ComparisonRow
        One row per grid size, in input order.
    """
    kinds = [EngineKind.parse(e) for e in engines]
    exhausted: set[EngineKind] = set()
    rows: list[ComparisonRow] = []

    for n in grid_sizes:
        row = ComparisonRow(n=n, trials=trials)
        for kind in kinds:
            if kind in exhausted:
                row.timings[kind] = None
                continue
            try:
                timing = time_estimator(n, trials, kind, seed=seed, time_limit_s=time_limit_s)
            except TimeLimitExceeded as exc:
                row.timings[kind] = None
                exhausted.add(kind)
                warnings.warn(
                    f"compare_engines: {kind.value} engine aborted at n={n}: {exc} "
                    f"Larger grid sizes are skipped for this engine.",
                    UserWarning,
                    stacklevel=2,
                )
                continue
            row.timings[kind] = timing
            if time_limit_s is not None and timing.elapsed_s > time_limit_s:
                exhausted.add(kind)
                warnings.warn(
                    f"compare_engines: {kind.value} engine took {timing.elapsed_s:.2f}s "
                    f"at n={n}, over the {time_limit_s:.2f}s limit. "
                    f"Larger grid sizes are skipped for this engine.",
                    UserWarning,
                    stacklevel=2,
                )
        rows.append(row)
    return rows


def find_max_n(
    engine: str | EngineKind,
    start: int,
    stop: int,
    step: int,
    trials: int,
    time_limit_s: float,
    seed: int | None = None,
) -> int:
    """Largest n in ``range(start, stop + 1, step)`` finishing within the limit.

    The search walks upward and stops at the first n that runs out of time.

    Returns
    -------
    int
        The largest n that completed in time, or 0 if none did.
    """
    if step <= 0:
        raise ValueError(f"step must be > 0; got {step}.")
    if time_limit_s <= 0:
        raise ValueError(f"time_limit_s must be > 0; got {time_limit_s}.")

    best = 0
    for n in range(start, stop + 1, step):
        try:
            timing = time_estimator(n, trials, engine, seed=seed, time_limit_s=time_limit_s)
        except TimeLimitExceeded:
            break
        if timing.elapsed_s > time_limit_s:
            break
        best = n
    return best


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def rows_to_records(
    rows: Sequence[ComparisonRow],
    engines: Sequence[str | EngineKind] = (EngineKind.NAIVE, EngineKind.WEIGHTED),
) -> list[dict]:
    """Flatten comparison rows into CSV-ready dicts.

    Columns: ``n``, ``trials``, then ``<engine>_elapsed_s`` and
    ``<engine>_mean`` per engine, then ``speedup``.  Skipped runs are empty.
    """
    kinds = [EngineKind.parse(e) for e in engines]
    records = []
    for row in rows:
        rec: dict = {"n": row.n, "trials": row.trials}
        for kind in kinds:
            timing = row.timings.get(kind)
            rec[f"{kind.value}_elapsed_s"] = None if timing is None else round(timing.elapsed_s, 6)
            rec[f"{kind.value}_mean"] = None if timing is None else round(timing.mean, 6)
        speedup = row.speedup
        rec["speedup"] = None if speedup is None else round(speedup, 4)
        records.append(rec)
    return records


def record_fieldnames(
    engines: Sequence[str | EngineKind] = (EngineKind.NAIVE, EngineKind.WEIGHTED),
) -> list[str]:
    """Column order matching :func:`rows_to_records`."""
    names = ["n", "trials"]
    for kind in (EngineKind.parse(e) for e in engines):
        names += [f"{kind.value}_elapsed_s", f"{kind.value}_mean"]
    names.append("speedup")
    return names
