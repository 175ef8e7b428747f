# sphase_SuperplotReporter/core/clean.py
from __future__ import annotations
import logging
import numpy as np
import pandas as pd

from .model import CleaningReport

_LOG = logging.getLogger(__name__)

DEFAULT_LOWER = 0.0
DEFAULT_UPPER = 100.0


def to_float(s) -> pd.Series:
    """Numeric coercion after whitespace removal; failures become NaN."""
    if pd.api.types.is_numeric_dtype(s):
        return s.astype(float)
    return pd.to_numeric(s.astype(str).str.replace(r"\s+", "", regex=True), errors="coerce")


def clean_values(df: pd.DataFrame,
                 lower: float = DEFAULT_LOWER,
                 upper: float = DEFAULT_UPPER) -> tuple[pd.DataFrame, CleaningReport]:
    """
    Keep rows whose value is numeric and strictly inside (lower, upper).
    Both bounds are excluded: 0 and 100 count as entry errors, not edge percentages.
    """
    values = to_float(df["value"])
    numeric = values.notna() & np.isfinite(values)
    in_range = numeric & (values > lower) & (values < upper)

    n_non_numeric = int((~numeric).sum())
    n_out_of_range = int((numeric & ~in_range).sum())

    out = df.loc[in_range].copy()
    out["value"] = values.loc[in_range].astype(float)
    out = out.reset_index(drop=True)

    report = CleaningReport()
    if n_non_numeric:
        report = report.add("non_numeric", n_non_numeric)
    if n_out_of_range:
        report = report.add("out_of_range", n_out_of_range)
    if report.total:
        _LOG.info("value cleaner: %d non-numeric, %d out of (%g, %g); %d kept",
                  n_non_numeric, n_out_of_range, lower, upper, len(out))
    return out, report


def configure_from_config(cfg: dict) -> dict:
    cln = (cfg or {}).get("cleaning", {}) or {}
    lower = float(cln.get("lower", DEFAULT_LOWER))
    upper = float(cln.get("upper", DEFAULT_UPPER))
    if upper < lower:
        lower, upper = upper, lower
    return {"lower": lower, "upper": upper}
