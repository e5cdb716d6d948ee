"""
Shared utilities for the percolation engine.

Centralises helpers that would otherwise be duplicated across modules:
  - sample statistics and confidence intervals for threshold samples
  - SeedSequence-based per-trial RNG spawning
  - Stopwatch, the wall-clock timer used by the comparison runs

All functions are pure (no global state).
"""

from __future__ import annotations

import math
import time
from typing import Iterator

import numpy as np
from numpy.random import Generator, SeedSequence, default_rng
import scipy.stats as stats


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

Z_95: float = 1.96


def sample_stddev(samples: np.ndarray) -> float:
    """Sample standard deviation with Bessel's correction (ddof=1).

    Raises
    ------
    ValueError
        If fewer than 2 samples are given.
    """
    if len(samples) < 2:
        raise ValueError("Need at least 2 samples for a sample standard deviation.")
    return float(np.std(samples, ddof=1))


def normal_confidence_interval(mean: float, stddev: float, m: int) -> tuple[float, float]:
    """95% normal-approximation interval ``mean ∓ 1.96 * stddev / sqrt(m)``."""
    if m <= 0:
        raise ValueError(f"m must be > 0; got {m}.")
    margin = Z_95 * stddev / math.sqrt(m)
    return mean - margin, mean + margin


def confidence_interval(
    samples: np.ndarray,
    confidence: float = 0.95,
) -> tuple[float, float]:
    """Compute a confidence interval for the population mean via t-distribution.

    Parameters
    ----------
    samples : np.ndarray, shape (m,)
        Sample array with m >= 2.
    confidence : float, optional
        Confidence level in (0, 1).  Default 0.95.

    Returns
    -------
    (ci_low, ci_high) : tuple of float
        Lower and upper bounds.

    Raises
    ------
    ValueError
        If m < 2 or confidence is not in (0, 1).
    """
    m = len(samples)
    if m < 2:
        raise ValueError("Need at least 2 samples for CI computation.")
    if not (0 < confidence < 1):
        raise ValueError(f"confidence must be in (0, 1); got {confidence}.")
    mean = float(np.mean(samples))
    se = float(stats.sem(samples))
    # Zero-variance samples (e.g. n=1 grids) have a degenerate interval.
    if se == 0.0:
        return mean, mean
    interval = stats.t.interval(confidence, df=m - 1, loc=mean, scale=se)
    return float(interval[0]), float(interval[1])


# ---------------------------------------------------------------------------
# SeedSequence-based RNG spawning
# ---------------------------------------------------------------------------


def make_seed_sequence(master_seed: int | None) -> SeedSequence:
    """Build the root SeedSequence for an experiment.

    ``None`` pulls fresh entropy from the OS, so successive runs differ.
    ``int(seq.entropy)`` is the seed that replays the run.
    """
    if master_seed is not None and master_seed < 0:
        raise ValueError(f"seed must be >= 0 or None; got {master_seed}.")
    return SeedSequence(master_seed)


def iter_trial_rngs(seed_seq: SeedSequence, n_trials: int) -> Iterator[Generator]:
    """Yield *n_trials* statistically-independent Generators, one per trial.

    Children are spawned lazily, one at a time; the streams are identical to
    ``seed_seq.spawn(n_trials)`` on a fresh SeedSequence.
    """
    for _ in range(n_trials):
        yield default_rng(seed_seq.spawn(1)[0])


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------


class Stopwatch:
    """Wall-clock timer started on construction."""

    def __init__(self) -> None:
        self._start = time.perf_counter()

    def elapsed_time(self) -> float:
        """Seconds since construction."""
        return time.perf_counter() - self._start
