import pandas as pd
import unittest

from sphase_SuperplotReporter.core.clean import clean_values
from sphase_SuperplotReporter.core.model import MalformedTimestamp, SchemaMismatch
from sphase_SuperplotReporter.core.normalize import drop_incomplete_rows, normalize_schema
from sphase_SuperplotReporter.core.reshape import to_long
from sphase_SuperplotReporter.core.temporal import split_timestamp


def _raw(rows, columns=("Timestamp", "Group", "Manual", "Automated")):
    return pd.DataFrame(rows, columns=list(columns), dtype=str)


def _long(values, timestamp="12-03-2023 10:15:30", group="A", method="manual"):
    return pd.DataFrame({
        "submission": list(range(len(values))),
        "timestamp": [timestamp] * len(values),
        "group": [group] * len(values),
        "method": [method] * len(values),
        "value": values,
    })


class SchemaTests(unittest.TestCase):
    def test_named_lookup_ignores_case_order_and_extra_columns(self):
        raw = pd.DataFrame({
            "e-mail": ["x@y.org"],
            " automated ": ["31"],
            "GROUP": ["B"],
            "Manual": ["30"],
            "Timestamp": ["01-02-2024 09:00:00"],
        })
        df = normalize_schema(raw)
        self.assertEqual(["timestamp", "group", "manual", "automated"], list(df.columns))
        self.assertEqual(["01-02-2024 09:00:00", "B", "30", "31"], df.iloc[0].tolist())

    def test_missing_column_raises_schema_mismatch(self):
        raw = _raw([["01-02-2024 09:00:00", "B", "30"]], columns=("Timestamp", "Group", "Manual"))
        with self.assertRaises(SchemaMismatch) as ctx:
            normalize_schema(raw)
        self.assertEqual(("automated",), ctx.exception.missing)

    def test_configured_aliases_are_used(self):
        raw = _raw([["01-02-2024 09:00:00", "B", "30", "31"]],
                   columns=("Tijd", "Team", "Hand", "Software"))
        cols = {"timestamp": ["Tijd"], "group": ["Team"], "manual": ["Hand"], "automated": ["Software"]}
        df = normalize_schema(raw, columns=cols)
        self.assertEqual("31", df.loc[0, "automated"])

    def test_positional_rename(self):
        raw = _raw([["01-02-2024 09:00:00", "B", "30", "31"]], columns=("a", "b", "c", "d"))
        df = normalize_schema(raw, positional=True)
        self.assertEqual("B", df.loc[0, "group"])
        with self.assertRaises(SchemaMismatch):
            normalize_schema(raw[["a", "b"]], positional=True)

    def test_rows_with_empty_cells_are_dropped(self):
        df = normalize_schema(_raw([
            ["01-02-2024 09:00:00", "B", "30", "31"],
            ["01-02-2024 09:05:00", "  ", "30", "31"],
            ["01-02-2024 09:10:00", "C", "", "31"],
        ]))
        kept, dropped = drop_incomplete_rows(df)
        self.assertEqual(2, dropped)
        self.assertEqual(["B"], kept["group"].tolist())


class ReshapeTests(unittest.TestCase):
    def test_two_rows_per_submission_with_keys_preserved(self):
        wide = normalize_schema(_raw([
            ["01-02-2024 09:00:00", "A", "30", "31"],
            ["02-02-2024 10:00:00", "B", " 4 5 ", "abc"],
            ["03-02-2024 11:00:00", "C", "0", "100"],
        ]))
        long = to_long(wide)

        self.assertEqual(2 * len(wide), len(long))
        self.assertEqual({"manual", "automated"}, set(long["method"]))
        for sub, part in long.groupby("submission"):
            self.assertEqual(["manual", "automated"], part["method"].tolist())
            self.assertEqual({wide.loc[sub, "timestamp"]}, set(part["timestamp"]))
            self.assertEqual({wide.loc[sub, "group"]}, set(part["group"]))

    def test_whitespace_removed_inside_value(self):
        wide = normalize_schema(_raw([["01-02-2024 09:00:00", "A", " 4 5 ", "45 %"]]))
        long = to_long(wide)
        self.assertEqual(["45", "45%"], long["value"].tolist())


class ValueCleanerTests(unittest.TestCase):
    def test_range_invariant_and_drop_reasons(self):
        df = _long(["12.5", "abc", "45%", "-3", "150", "nan", "87"])
        out, report = clean_values(df)

        self.assertEqual([12.5, 87.0], out["value"].tolist())
        self.assertTrue(((out["value"] > 0) & (out["value"] < 100)).all())
        self.assertEqual(3, report.count("non_numeric"))
        self.assertEqual(2, report.count("out_of_range"))

    def test_boundaries_are_excluded(self):
        out, report = clean_values(_long(["0", "100", "0.01", "99.99"]))
        self.assertEqual([0.01, 99.99], out["value"].tolist())
        self.assertEqual(2, report.count("out_of_range"))

    def test_cleaning_is_idempotent(self):
        once, _ = clean_values(_long(["10", "x", "20", "100"]))
        twice, report = clean_values(once)
        pd.testing.assert_frame_equal(once, twice)
        self.assertEqual(0, report.total)


class TimestampTests(unittest.TestCase):
    def test_split_into_day_month_year_time(self):
        out, report = split_timestamp(_long(["10"], timestamp="12-03-2023 10:15:30"))
        self.assertEqual(0, report.total)
        row = out.iloc[0]
        self.assertEqual((12, 3, 2023, "10:15:30"), (row["day"], row["month"], row["year"], row["time"]))

    def test_malformed_rows_are_dropped_and_counted(self):
        df = pd.concat([
            _long(["10"], timestamp="12-03-2023 10:15:30"),
            _long(["11"], timestamp="2023/03/12 10:15"),
            _long(["12"], timestamp="31-02-2023 10:15:30"),
            _long(["13"], timestamp="12-03-2023"),
            _long(["14"], timestamp="12-03-2023 25:61:00"),
        ], ignore_index=True)
        out, report = split_timestamp(df)
        self.assertEqual(["12-03-2023 10:15:30"], out["timestamp"].tolist())
        self.assertEqual(4, report.count("malformed_timestamp"))

    def test_raise_policy(self):
        with self.assertRaises(MalformedTimestamp) as ctx:
            split_timestamp(_long(["10"], timestamp="yesterday"), on_malformed="raise")
        self.assertEqual(("yesterday",), ctx.exception.values)

    def test_impossible_clock_time_raises_under_raise_policy(self):
        with self.assertRaises(MalformedTimestamp) as ctx:
            split_timestamp(_long(["10"], timestamp="12-03-2023 99:99:99"), on_malformed="raise")
        self.assertEqual(("12-03-2023 99:99:99",), ctx.exception.values)
