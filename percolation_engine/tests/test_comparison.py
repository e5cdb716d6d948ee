"""Unit tests for the engine performance comparison."""

from __future__ import annotations

import sys
import unittest
import warnings
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from percolation_engine.comparison import (
    ComparisonRow,
    TimingResult,
    compare_engines,
    find_max_n,
    record_fieldnames,
    rows_to_records,
    time_estimator,
)
from percolation_engine.union_find import EngineKind


class TestTimeEstimator(unittest.TestCase):

    def test_timing_fields(self):
        timing = time_estimator(5, 6, "naive", seed=3)
        self.assertIsInstance(timing, TimingResult)
        self.assertIs(timing.engine, EngineKind.NAIVE)
        self.assertEqual((timing.n, timing.trials), (5, 6))
        self.assertGreaterEqual(timing.elapsed_s, 0.0)
        self.assertTrue(0.0 < timing.mean <= 1.0)


class TestCompareEngines(unittest.TestCase):

    def test_rows_per_size_with_both_engines(self):
        rows = compare_engines([3, 4, 6], trials=5, seed=1)
        self.assertEqual([r.n for r in rows], [3, 4, 6])
        for row in rows:
            naive = row.timings[EngineKind.NAIVE]
            weighted = row.timings[EngineKind.WEIGHTED]
            self.assertIsNotNone(naive)
            self.assertIsNotNone(weighted)
            # Same seed -> same thresholds -> same mean, whatever the backing.
            self.assertEqual(naive.mean, weighted.mean)

    def test_exhausted_engine_skipped_with_warning(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            rows = compare_engines(
                [5, 6], trials=5, engines=["naive"], seed=0, time_limit_s=1e-9
            )
        self.assertIsNone(rows[0].timings[EngineKind.NAIVE])
        self.assertIsNone(rows[1].timings[EngineKind.NAIVE])
        user_warnings = [w for w in caught if issubclass(w.category, UserWarning)]
        self.assertEqual(len(user_warnings), 1)
        self.assertIn("naive", str(user_warnings[0].message))

    def test_no_warning_within_budget(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            compare_engines([3], trials=3, seed=0, time_limit_s=600.0)
        self.assertEqual(
            [w for w in caught if issubclass(w.category, UserWarning)], []
        )


class TestComparisonRow(unittest.TestCase):

    def _timing(self, engine, elapsed):
        return TimingResult(n=4, engine=engine, trials=2, elapsed_s=elapsed,
                            mean=0.6, stddev=0.1)

    def test_speedup_is_naive_over_weighted(self):
        row = ComparisonRow(n=4, trials=2, timings={
            EngineKind.NAIVE: self._timing(EngineKind.NAIVE, 3.0),
            EngineKind.WEIGHTED: self._timing(EngineKind.WEIGHTED, 1.5),
        })
        self.assertAlmostEqual(row.speedup, 2.0)
        self.assertEqual(row.elapsed("naive"), 3.0)

    def test_speedup_none_when_engine_missing(self):
        row = ComparisonRow(n=4, trials=2, timings={
            EngineKind.NAIVE: None,
            EngineKind.WEIGHTED: self._timing(EngineKind.WEIGHTED, 1.5),
        })
        self.assertIsNone(row.speedup)
        self.assertIsNone(row.elapsed(EngineKind.NAIVE))


class TestFindMaxN(unittest.TestCase):

    def test_generous_limit_reaches_stop(self):
        self.assertEqual(find_max_n("weighted", 2, 6, 2, trials=3,
                                    time_limit_s=600.0, seed=0), 6)

    def test_tiny_limit_finds_nothing(self):
        self.assertEqual(find_max_n("naive", 4, 8, 2, trials=3,
                                    time_limit_s=1e-9, seed=0), 0)

    def test_invalid_arguments_raise(self):
        with self.assertRaises(ValueError):
            find_max_n("weighted", 2, 6, 0, trials=3, time_limit_s=1.0)
        with self.assertRaises(ValueError):
            find_max_n("weighted", 2, 6, 1, trials=3, time_limit_s=0.0)


class TestRecords(unittest.TestCase):

    def test_records_match_fieldnames(self):
        rows = compare_engines([3], trials=3, seed=2)
        records = rows_to_records(rows)
        self.assertEqual(list(records[0].keys()), record_fieldnames())
        self.assertEqual(records[0]["n"], 3)
        self.assertIsNotNone(records[0]["speedup"])

    def test_skipped_engine_has_empty_cells(self):
        row = ComparisonRow(n=9, trials=2, timings={EngineKind.WEIGHTED: None})
        rec = rows_to_records([row], engines=["weighted"])[0]
        self.assertIsNone(rec["weighted_elapsed_s"])
        self.assertIsNone(rec["speedup"])
        self.assertEqual(list(rec), ["n", "trials", "weighted_elapsed_s",
                                     "weighted_mean", "speedup"])


if __name__ == "__main__":
    unittest.main()
