"""
Unit tests for the Monte Carlo threshold estimator.

Covers:
  - Argument validation (grid size, trial count, single-trial policy)
  - Single-trial bounds
  - Reproducibility with a fixed seed and replay of an unseeded run
  - Engine equivalence: same seed -> identical thresholds
  - Summary statistics and the 95% interval
  - Known finite-size result for n = 2
  - Wall-clock budget between trials
"""

from __future__ import annotations

import json
import math
import sys
import unittest
from pathlib import Path

import numpy as np
from numpy.random import default_rng

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from percolation_engine.monte_carlo import (
    MonteCarloResult,
    ThresholdEstimator,
    TimeLimitExceeded,
    run_monte_carlo,
    run_trial,
)
from percolation_engine.union_find import EngineKind
from percolation_engine.utils import confidence_interval


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation(unittest.TestCase):

    def test_non_positive_grid_size_raises(self):
        for n in (0, -1):
            with self.assertRaises(ValueError):
                run_monte_carlo(n, 10)
            with self.assertRaises(ValueError):
                ThresholdEstimator(n, 10)

    def test_non_positive_trials_raises(self):
        for trials in (0, -5):
            with self.assertRaises(ValueError):
                run_monte_carlo(5, trials)

    def test_single_trial_rejected(self):
        with self.assertRaises(ValueError) as ctx:
            ThresholdEstimator(5, 1)
        self.assertIn(">= 2", str(ctx.exception))

    def test_unknown_engine_raises(self):
        with self.assertRaises(ValueError):
            run_monte_carlo(5, 3, engine="quick-union")

    def test_negative_seed_raises(self):
        with self.assertRaises(ValueError):
            run_monte_carlo(5, 3, seed=-1)


# ---------------------------------------------------------------------------
# Single trial
# ---------------------------------------------------------------------------


class TestRunTrial(unittest.TestCase):

    def test_threshold_bounds(self):
        rng = default_rng(0)
        for n in (1, 2, 5, 12):
            for engine in EngineKind:
                t = run_trial(n, engine, rng)
                # At least one full column of n sites must be open.
                self.assertGreaterEqual(t, n / (n * n))
                self.assertLessEqual(t, 1.0)

    def test_single_site_threshold_is_one(self):
        self.assertEqual(run_trial(1, EngineKind.WEIGHTED, default_rng(5)), 1.0)

    def test_threshold_is_multiple_of_site_fraction(self):
        n = 6
        t = run_trial(n, EngineKind.WEIGHTED, default_rng(9))
        self.assertAlmostEqual(t * n * n, round(t * n * n))


# ---------------------------------------------------------------------------
# Reproducibility and engine equivalence
# ---------------------------------------------------------------------------


class TestReproducibility(unittest.TestCase):

    def test_same_seed_same_thresholds(self):
        r1 = run_monte_carlo(8, 20, seed=123)
        r2 = run_monte_carlo(8, 20, seed=123)
        np.testing.assert_array_equal(r1.thresholds, r2.thresholds)
        self.assertEqual(r1.mean, r2.mean)

    def test_different_seeds_differ(self):
        r1 = run_monte_carlo(10, 20, seed=1)
        r2 = run_monte_carlo(10, 20, seed=2)
        self.assertFalse(np.array_equal(r1.thresholds, r2.thresholds))

    def test_unseeded_run_records_replayable_seed(self):
        r1 = run_monte_carlo(6, 10)
        self.assertIsInstance(r1.seed, int)
        r2 = run_monte_carlo(6, 10, seed=r1.seed)
        np.testing.assert_array_equal(r1.thresholds, r2.thresholds)

    def test_engines_give_identical_thresholds_for_same_seed(self):
        weighted = run_monte_carlo(7, 15, engine="weighted", seed=77)
        naive = run_monte_carlo(7, 15, engine="naive", seed=77)
        np.testing.assert_array_equal(weighted.thresholds, naive.thresholds)
        self.assertIs(weighted.engine, EngineKind.WEIGHTED)
        self.assertIs(naive.engine, EngineKind.NAIVE)


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class TestStatistics(unittest.TestCase):

    def setUp(self):
        self.result = run_monte_carlo(10, 40, seed=2024)

    def test_result_is_frozen(self):
        self.assertIsInstance(self.result, MonteCarloResult)
        with self.assertRaises(Exception):
            self.result.mean = 0.0  # type: ignore[misc]
        with self.assertRaises(ValueError):
            self.result.thresholds[0] = 0.0

    def test_mean_and_bessel_stddev(self):
        t = self.result.thresholds
        self.assertEqual(len(t), 40)
        self.assertAlmostEqual(self.result.mean, float(np.mean(t)))
        expected_sd = math.sqrt(float(np.sum((t - t.mean()) ** 2)) / (len(t) - 1))
        self.assertAlmostEqual(self.result.stddev, expected_sd)

    def test_confidence_interval_formula(self):
        r = self.result
        margin = 1.96 * r.stddev / math.sqrt(r.trials)
        self.assertAlmostEqual(r.ci_low, r.mean - margin)
        self.assertAlmostEqual(r.ci_high, r.mean + margin)
        self.assertLess(r.ci_low, r.mean)
        self.assertGreater(r.ci_high, r.mean)

    def test_estimator_accessors_match_result(self):
        est = ThresholdEstimator(10, 40, engine=EngineKind.WEIGHTED, seed=2024)
        self.assertEqual(est.mean(), self.result.mean)
        self.assertEqual(est.stddev(), self.result.stddev)
        self.assertEqual(est.confidence_low(), self.result.ci_low)
        self.assertEqual(est.confidence_high(), self.result.ci_high)
        np.testing.assert_array_equal(est.thresholds, self.result.thresholds)

    def test_single_site_grid_has_zero_spread(self):
        r = run_monte_carlo(1, 5, seed=0)
        self.assertEqual(r.mean, 1.0)
        self.assertEqual(r.stddev, 0.0)
        self.assertEqual((r.ci_low, r.ci_high), (1.0, 1.0))

    def test_summary_dict_is_json_serialisable(self):
        summary = self.result.summary_dict()
        text = json.dumps(summary)
        self.assertIn("ci_95_low", text)
        self.assertEqual(summary["engine"], "weighted")
        self.assertEqual(summary["trials"], 40)
        self.assertLessEqual(summary["min_threshold"], summary["median_threshold"])
        self.assertLessEqual(summary["median_threshold"], summary["max_threshold"])


class TestKnownThresholds(unittest.TestCase):

    def test_two_by_two_mean(self):
        """n=2: threshold is 1/2 w.p. 1/3 and 3/4 w.p. 2/3, so the mean is 2/3."""
        est = ThresholdEstimator(2, 20000, seed=31337)
        self.assertGreaterEqual(est.mean(), 0.64)
        self.assertLessEqual(est.mean(), 0.70)
        self.assertTrue(set(np.unique(est.thresholds)) <= {0.5, 0.75})

    def test_two_by_two_mean_naive(self):
        est = ThresholdEstimator(2, 5000, engine="naive", seed=8)
        self.assertGreaterEqual(est.mean(), 0.64)
        self.assertLessEqual(est.mean(), 0.70)

    def test_larger_grid_near_asymptotic_threshold(self):
        r = run_monte_carlo(20, 200, seed=99)
        self.assertGreater(r.mean, 0.55)
        self.assertLess(r.mean, 0.65)

    def test_t_interval_contains_mean(self):
        r = run_monte_carlo(10, 30, seed=4)
        lo, hi = confidence_interval(r.thresholds)
        self.assertLessEqual(lo, r.mean)
        self.assertGreaterEqual(hi, r.mean)


# ---------------------------------------------------------------------------
# Wall-clock budget
# ---------------------------------------------------------------------------


class TestTimeLimit(unittest.TestCase):

    def test_budget_exceeded_between_trials(self):
        with self.assertRaises(TimeLimitExceeded) as ctx:
            run_monte_carlo(5, 4, seed=0, time_limit_s=0.0)
        exc = ctx.exception
        self.assertEqual(exc.completed, 1)
        self.assertEqual(exc.trials, 4)
        self.assertIsInstance(exc, RuntimeError)

    def test_generous_budget_completes(self):
        r = run_monte_carlo(5, 4, seed=0, time_limit_s=600.0)
        self.assertEqual(r.trials, 4)
        self.assertGreaterEqual(r.elapsed_s, 0.0)


if __name__ == "__main__":
    unittest.main()
