"""
Monte Carlo estimator for the site-percolation threshold.

Each trial builds a fresh :class:`~percolation_engine.grid.PercolationGrid`,
opens uniformly random blocked sites until the grid percolates and records
the fraction of open sites at that moment.  The threshold samples are then
summarised by their mean, Bessel-corrected standard deviation and a 95%
normal-approximation confidence interval.

Design principles
-----------------
* No global RNG state: every trial draws from its own Generator spawned from
  one SeedSequence, so a whole experiment replays from a single seed.
* ``seed=None`` means fresh OS entropy; the entropy used is kept on the result.
* One trial loop for both engines; the backing is a runtime argument.
* Results are immutable once recorded.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.random import Generator

from .grid import PercolationGrid
from .union_find import EngineKind
from .utils import (
    Stopwatch,
    confidence_interval,
    iter_trial_rngs,
    make_seed_sequence,
    normal_confidence_interval,
    sample_stddev,
)


class TimeLimitExceeded(RuntimeError):
    """Raised between trials when a budgeted run exceeds its wall-clock limit."""

    def __init__(self, completed: int, trials: int, elapsed_s: float, limit_s: float) -> None:
        super().__init__(
            f"time limit of {limit_s:.2f}s exceeded after {completed}/{trials} "
            f"trials ({elapsed_s:.2f}s elapsed)."
        )
        self.completed = completed
        self.trials = trials
        self.elapsed_s = elapsed_s
        self.limit_s = limit_s


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonteCarloResult:
    """Immutable container for a threshold experiment.

    Attributes
    ----------
    thresholds : np.ndarray, shape (trials,)
        Fraction of open sites at first percolation, per trial.
    mean : float
        Sample mean of the thresholds.
    stddev : float
        Sample standard deviation (ddof=1).
    ci_low, ci_high : float
        ``mean ∓ 1.96 * stddev / sqrt(trials)``.
    trials : int
        Number of trials executed.
    n : int
        Grid side length.
    engine : EngineKind
        Union-find backing used.
    seed : int
        Entropy of the root SeedSequence; pass it back as ``seed`` to replay.
    elapsed_s : float
        Wall-clock time spent running the trials.
    """
    thresholds: np.ndarray
    mean: float
    stddev: float
    ci_low: float
    ci_high: float
    trials: int
    n: int
    engine: EngineKind
    seed: int
    elapsed_s: float

    def summary_dict(self) -> dict:
        """Return a JSON-serialisable summary (no arrays)."""
        t_low, t_high = confidence_interval(self.thresholds)
        return {
            "n": self.n,
            "trials": self.trials,
            "engine": self.engine.value,
            "seed": self.seed,
            "mean": self.mean,
            "stddev": self.stddev,
            "ci_95_low": self.ci_low,
            "ci_95_high": self.ci_high,
            "ci_95_t_low": t_low,
            "ci_95_t_high": t_high,
            "min_threshold": float(np.min(self.thresholds)),
            "max_threshold": float(np.max(self.thresholds)),
            "median_threshold": float(np.median(self.thresholds)),
            "elapsed_s": self.elapsed_s,
        }


# ---------------------------------------------------------------------------
# Single trial
# ---------------------------------------------------------------------------


def run_trial(n: int, engine: str | EngineKind, rng: Generator) -> float:
    """Open random blocked sites until percolation; return the open fraction.

    Row and column are drawn independently and uniformly from ``[0, n)``;
    draws that land on an open site are rejected and redrawn.  Always
    terminates because the grid percolates once every site is open.
    """
    grid = PercolationGrid(n, engine)
    while not grid.percolates():
        row, col = rng.integers(0, n, size=2).tolist()
        while grid.is_open(row, col):
            row, col = rng.integers(0, n, size=2).tolist()
        grid.open(row, col)
    return grid.number_of_open_sites() / (n * n)


# ---------------------------------------------------------------------------
# Core runner
# ---------------------------------------------------------------------------


def _validate_args(n: int, trials: int) -> None:
    if n <= 0:
        raise ValueError(f"Grid size n must be positive; got {n}.")
    if trials <= 0:
        raise ValueError(f"Number of trials must be positive; got {trials}.")
    if trials < 2:
        raise ValueError(
            f"trials must be >= 2 for a sample standard deviation; got {trials}."
        )


def run_monte_carlo(
    n: int,
    trials: int,
    engine: str | EngineKind = EngineKind.WEIGHTED,
    seed: int | None = None,
    time_limit_s: float | None = None,
) -> MonteCarloResult:
    """Run independent percolation trials on an n-by-n grid.

    Parameters
    ----------
    n : int
        Grid side length (> 0).
    trials : int
        Number of independent trials (>= 2).
    engine : str or EngineKind, optional
        Union-find backing, ``"weighted"`` (default) or ``"naive"``.
    seed : int or None, optional
        Master seed.  ``None`` draws fresh entropy, so runs are not
        reproducible unless the recorded ``result.seed`` is reused.
    time_limit_s : float or None, optional
        Wall-clock budget.  Checked between trials, never mid-trial.

    Returns
    -------
    MonteCarloResult
        Frozen dataclass with the raw thresholds and summary statistics.

    Raises
    ------
    ValueError
        If ``n <= 0``, ``trials <= 0``, ``trials == 1`` or ``engine`` is unknown.
    TimeLimitExceeded
        If the budget runs out before the last trial.
    """
    _validate_args(n, trials)
    kind = EngineKind.parse(engine)
    seed_seq = make_seed_sequence(seed)

    thresholds = np.empty(trials, dtype=np.float64)
    sw = Stopwatch()
    for trial, rng in enumerate(iter_trial_rngs(seed_seq, trials)):
        thresholds[trial] = run_trial(n, kind, rng)
        if time_limit_s is not None and trial < trials - 1:
            elapsed = sw.elapsed_time()
            if elapsed > time_limit_s:
                raise TimeLimitExceeded(trial + 1, trials, elapsed, time_limit_s)
    elapsed_s = sw.elapsed_time()

    thresholds.setflags(write=False)
    mean = float(np.mean(thresholds))
    stddev = sample_stddev(thresholds)
    ci_low, ci_high = normal_confidence_interval(mean, stddev, trials)

    return MonteCarloResult(
        thresholds=thresholds,
        mean=mean,
        stddev=stddev,
        ci_low=ci_low,
        ci_high=ci_high,
        trials=trials,
        n=n,
        engine=kind,
        seed=int(seed_seq.entropy),
        elapsed_s=elapsed_s,
    )


# ---------------------------------------------------------------------------
# Estimator facade
# ---------------------------------------------------------------------------


class ThresholdEstimator:
    """Perform ``trials`` independent experiments on an n-by-n grid.

    All trials run on construction; the accessors only read the stored
    statistics.
    """

    def __init__(
        self,
        n: int,
        trials: int,
        engine: str | EngineKind = EngineKind.WEIGHTED,
        seed: int | None = None,
    ) -> None:
        self.result = run_monte_carlo(n, trials, engine=engine, seed=seed)

    @property
    def thresholds(self) -> np.ndarray:
        return self.result.thresholds

    def mean(self) -> float:
        """Sample mean of the percolation threshold."""
        return self.result.mean

    def stddev(self) -> float:
        """Sample standard deviation of the percolation threshold."""
        return self.result.stddev

    def confidence_low(self) -> float:
        """Low endpoint of the 95% confidence interval."""
        return self.result.ci_low

    def confidence_high(self) -> float:
        """High endpoint of the 95% confidence interval."""
        return self.result.ci_high
