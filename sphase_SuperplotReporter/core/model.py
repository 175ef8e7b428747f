# sphase_SuperplotReporter/core/model.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from pathlib import Path
import math
import pandas as pd

CANONICAL_COLUMNS: tuple[str, ...] = ("timestamp", "group", "manual", "automated")
METHODS: tuple[str, ...] = ("manual", "automated")
GROUND_TRUTH_METHOD = "manual"

# every count is in long-form observations (one per submission and method)
DROP_REASONS: tuple[str, ...] = ("incomplete", "non_numeric", "out_of_range", "malformed_timestamp")


# ---------- errors ----------
class PipelineError(ValueError):
    """Base class for fatal, run-level failures."""


class SchemaMismatch(PipelineError):
    def __init__(self, missing, seen):
        self.missing = tuple(missing)
        self.seen = tuple(str(c) for c in seen)
        super().__init__(f"source is missing required column(s) {list(self.missing)}; "
                         f"columns seen: {list(self.seen)}")


class MalformedTimestamp(PipelineError):
    def __init__(self, values):
        self.values = tuple(str(v) for v in values)
        preview = ", ".join(repr(v) for v in self.values[:5])
        more = f" (+{len(self.values) - 5} more)" if len(self.values) > 5 else ""
        super().__init__(f"{len(self.values)} timestamp(s) do not match DD-MM-YYYY HH:MM:SS: {preview}{more}")


class SourceUnavailable(PipelineError):
    pass


class EmptyDataset(PipelineError):
    pass


# ---------- records ----------
@dataclass(frozen=True)
class CleaningReport:
    """Rows dropped per reason, accumulated across stages."""
    dropped: dict[str, int] = field(default_factory=dict)

    def add(self, reason: str, count: int) -> "CleaningReport":
        if reason not in DROP_REASONS:
            raise KeyError(f"unknown drop reason: {reason}")
        merged = dict(self.dropped)
        merged[reason] = merged.get(reason, 0) + int(count)
        return replace(self, dropped=merged)

    def merge(self, other: "CleaningReport") -> "CleaningReport":
        out = self
        for reason, count in other.dropped.items():
            out = out.add(reason, count)
        return out

    def count(self, reason: str) -> int:
        return int(self.dropped.get(reason, 0))

    @property
    def total(self) -> int:
        return sum(self.dropped.values())

    def as_rows(self) -> list[dict]:
        return [{"reason": r, "dropped": self.count(r)} for r in DROP_REASONS]


@dataclass(frozen=True)
class PopulationEstimate:
    n: int
    average: float
    sd: float
    sem: float
    ci_lower: float
    ci_upper: float
    confidence: float = 0.95

    @property
    def defined(self) -> bool:
        return not math.isnan(self.sem)

    def as_row(self, decimals: int = 1) -> dict:
        def rnd(x: float) -> float:
            return x if math.isnan(x) else round(x, decimals)
        pct = f"{self.confidence * 100:g}%"
        lo, hi = rnd(self.ci_lower), rnd(self.ci_upper)
        return {
            "N": self.n,
            "Average": rnd(self.average),
            "sd": rnd(self.sd),
            "sem": rnd(self.sem),
            "lower": lo,
            "upper": hi,
            f"{pct} CI": "NA" if math.isnan(lo) else f"{lo} - {hi}",
        }


@dataclass(frozen=True)
class PipelineResult:
    wide: pd.DataFrame             # normalized submissions: timestamp, group, manual, automated
    observations: pd.DataFrame     # cleaned long form with day/month/year/time/replicate
    ground_truth: pd.DataFrame     # observations restricted to the estimate method
    summary: pd.DataFrame          # replicate, method, n, percentage (estimate method only)
    estimate: PopulationEstimate
    report: CleaningReport
    outputs: tuple[Path, ...] = ()
