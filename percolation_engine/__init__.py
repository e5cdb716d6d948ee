"""
percolation_engine: Monte Carlo Percolation Threshold Estimator
===============================================================

Estimates the site-percolation threshold of an n×n grid and compares two
union-find backings for the connectivity test:

  Weighted quick-union
      Union-by-size with path compression; near-constant amortised cost.

  Naive quick-find
      Label array with an O(N) relabel scan per union; the slow baseline.

Quick start
-----------
>>> from percolation_engine import PercolationGrid, ThresholdEstimator
>>> grid = PercolationGrid(3)
>>> for row in range(3):
...     grid.open(row, 1)
>>> grid.percolates()
True
>>> est = ThresholdEstimator(20, 50, engine="weighted", seed=42)
>>> lo, hi = est.confidence_low(), est.confidence_high()
"""

from .union_find import (
    ConnectivityEngine,
    WeightedUnionFind,
    NaiveUnionFind,
    EngineKind,
    make_engine,
)
from .grid import PercolationGrid
from .monte_carlo import (
    run_monte_carlo,
    run_trial,
    MonteCarloResult,
    ThresholdEstimator,
    TimeLimitExceeded,
)
from .comparison import (
    compare_engines,
    find_max_n,
    time_estimator,
    ComparisonRow,
    TimingResult,
)
from .config import load_config, build_seed
from .utils import confidence_interval, Stopwatch

__all__ = [
    # union-find
    "ConnectivityEngine", "WeightedUnionFind", "NaiveUnionFind",
    "EngineKind", "make_engine",
    # grid
    "PercolationGrid",
    # monte carlo
    "run_monte_carlo", "run_trial", "MonteCarloResult",
    "ThresholdEstimator", "TimeLimitExceeded",
    # comparison
    "compare_engines", "find_max_n", "time_estimator",
    "ComparisonRow", "TimingResult",
    # config
    "load_config", "build_seed",
    # utils
    "confidence_interval", "Stopwatch",
]
