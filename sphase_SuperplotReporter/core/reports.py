# sphase_SuperplotReporter/core/reports.py
from __future__ import annotations
from pathlib import Path
import pandas as pd

from .model import CleaningReport, PopulationEstimate

EXPORT_COLUMNS = ["replicate", "method", "S_phase", "day", "month", "year", "time"]


def _build_export(df: pd.DataFrame) -> pd.DataFrame:
    """One row per technical replicate; the value column is named S_phase."""
    out = df.rename(columns={"value": "S_phase"})
    missing = [c for c in EXPORT_COLUMNS if c not in out.columns]
    if missing:
        raise KeyError(f"export table missing columns: {missing}")
    out = out[EXPORT_COLUMNS].reset_index(drop=True)
    out.index = out.index + 1          # 1-based row index, first (unnamed) CSV column
    return out


def _write_csv(df_out: pd.DataFrame, out_csv: Path, title: str, index: bool = False) -> None:
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_csv(out_csv, index=index, encoding="utf-8")
    print(f"[OK] wrote report: {title} → {out_csv}")


def export_replicates(df: pd.DataFrame, out_csv: Path) -> Path:
    """
    Write the cleaned, replicate-tagged ground-truth rows for external
    statistics/plotting tools. Read back with pd.read_csv(path, index_col=0).
    """
    _write_csv(_build_export(df), out_csv, "replicate data", index=True)
    return out_csv


def read_export(path: Path) -> pd.DataFrame:
    return pd.read_csv(path, index_col=0, dtype={"replicate": str, "method": str, "time": str})


def _build_summary(summary: pd.DataFrame, estimate: PopulationEstimate,
                   report: CleaningReport, decimals: int) -> pd.DataFrame:
    rows = [
        {"section": "replicate", "key": r.replicate, "method": r.method,
         "n": int(r.n), "value": round(float(r.percentage), decimals)}
        for r in summary.itertuples(index=False)
    ]
    for key, value in estimate.as_row(decimals).items():
        rows.append({"section": "estimate", "key": key, "method": "", "n": "", "value": value})
    for r in report.as_rows():
        rows.append({"section": "dropped", "key": r["reason"], "method": "", "n": "", "value": r["dropped"]})
    return pd.DataFrame(rows, columns=["section", "key", "method", "n", "value"])


def write_summary(summary: pd.DataFrame, estimate: PopulationEstimate, report: CleaningReport,
                  out_base: Path, decimals: int = 1) -> Path:
    """
    Replicate means, the population estimate and drop counts in one CSV.
    out_base is a base path without extension (e.g. .../summary).
    """
    out_csv = out_base.with_suffix(".csv")
    _write_csv(_build_summary(summary, estimate, report, decimals), out_csv, "summary")
    return out_csv


def format_estimate(estimate: PopulationEstimate, decimals: int = 1) -> str:
    row = estimate.as_row(decimals)
    return "  ".join(f"{k}={v}" for k, v in row.items())
