import math
import pandas as pd
import unittest

from sphase_SuperplotReporter.core.estimate import estimate_population
from sphase_SuperplotReporter.core.model import CleaningReport, EmptyDataset
from sphase_SuperplotReporter.core.replicates import select_method, summarize_replicates, tag_replicates


def _dated(rows):
    """rows: (year, group, method, value)"""
    return pd.DataFrame(rows, columns=["year", "group", "method", "value"])


class ReplicateAggregatorTests(unittest.TestCase):
    def test_replicate_id_is_year_space_group(self):
        df = tag_replicates(_dated([(2023, "A", "manual", 40.0), (2024, "Team 7", "manual", 41.0)]))
        self.assertEqual(["2023 A", "2024 Team 7"], df["replicate"].tolist())

    def test_technical_replicates_collapse_to_count_and_mean(self):
        df = tag_replicates(_dated([
            (2023, "A", "manual", 40.0),
            (2023, "A", "manual", 50.0),
            (2023, "A", "automated", 47.0),
            (2024, "A", "manual", 30.0),
        ]))
        summary = summarize_replicates(select_method(df, "manual"))

        self.assertEqual(["2023 A", "2024 A"], summary["replicate"].tolist())
        first = summary.iloc[0]
        self.assertEqual(2, first["n"])
        self.assertAlmostEqual(45.0, first["percentage"])
        self.assertEqual({"manual"}, set(summary["method"]))

    def test_summary_keeps_methods_apart(self):
        df = tag_replicates(_dated([
            (2023, "A", "manual", 40.0),
            (2023, "A", "automated", 44.0),
        ]))
        summary = summarize_replicates(df).set_index("method")
        self.assertAlmostEqual(40.0, summary.loc["manual", "percentage"])
        self.assertAlmostEqual(44.0, summary.loc["automated", "percentage"])

    def test_empty_input_gives_empty_summary(self):
        summary = summarize_replicates(tag_replicates(_dated([])))
        self.assertTrue(summary.empty)
        self.assertIn("percentage", summary.columns)


class PopulationEstimatorTests(unittest.TestCase):
    def test_two_stage_estimate_matches_t_table(self):
        est = estimate_population([30.0, 35.0, 40.0])
        self.assertEqual(3, est.n)
        self.assertAlmostEqual(35.0, est.average)
        self.assertAlmostEqual(5.0, est.sd)
        self.assertAlmostEqual(5.0 / math.sqrt(2), est.sem, places=6)
        # t(0.975, df=2) = 4.303
        self.assertAlmostEqual(35.0 - 4.303 * 3.5355, est.ci_lower, delta=0.01)
        self.assertAlmostEqual(35.0 + 4.303 * 3.5355, est.ci_upper, delta=0.01)
        self.assertLess(est.ci_lower, est.average)

    def test_accepts_summary_table(self):
        summary = pd.DataFrame({"replicate": ["a", "b", "c"], "method": ["manual"] * 3,
                                "n": [1, 2, 3], "percentage": [30.0, 35.0, 40.0]})
        self.assertAlmostEqual(35.0, estimate_population(summary).average)

    def test_single_replicate_propagates_nan(self):
        est = estimate_population([42.0])
        self.assertEqual(1, est.n)
        self.assertEqual(42.0, est.average)
        for value in (est.sd, est.sem, est.ci_lower, est.ci_upper):
            self.assertTrue(math.isnan(value))
        self.assertFalse(est.defined)
        self.assertEqual("NA", est.as_row()["95% CI"])

    def test_no_replicates_is_fatal(self):
        with self.assertRaises(EmptyDataset):
            estimate_population([])

    def test_display_row_rounds_to_one_decimal(self):
        row = estimate_population([30.0, 35.0, 40.0]).as_row()
        self.assertEqual(3, row["N"])
        self.assertEqual(35.0, row["Average"])
        self.assertEqual(3.5, row["sem"])
        self.assertEqual("19.8 - 50.2", row["95% CI"])

    def test_wider_confidence_gives_wider_interval(self):
        narrow = estimate_population([30.0, 35.0, 40.0, 38.0], confidence=0.90)
        wide = estimate_population([30.0, 35.0, 40.0, 38.0], confidence=0.99)
        self.assertLess(wide.ci_lower, narrow.ci_lower)
        self.assertGreater(wide.ci_upper, narrow.ci_upper)


class CleaningReportTests(unittest.TestCase):
    def test_add_returns_new_report(self):
        base = CleaningReport()
        more = base.add("non_numeric", 2).add("non_numeric", 1)
        self.assertEqual(0, base.total)
        self.assertEqual(3, more.count("non_numeric"))
        self.assertEqual(3, base.merge(more).total)

    def test_unknown_reason_rejected(self):
        with self.assertRaises(KeyError):
            CleaningReport().add("cosmic_rays", 1)
