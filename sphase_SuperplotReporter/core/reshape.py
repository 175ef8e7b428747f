# sphase_SuperplotReporter/core/reshape.py
from __future__ import annotations
import pandas as pd

from .model import METHODS

LONG_COLUMNS = ["submission", "timestamp", "group", "method", "value"]


def to_long(df: pd.DataFrame) -> pd.DataFrame:
    """
    Unpivot the per-method columns: one row per (submission, method).
    Values keep their text form with all whitespace removed; nothing is dropped.
    """
    wide = df.reset_index(drop=True).copy()
    wide["submission"] = range(len(wide))
    long = wide.melt(
        id_vars=["submission", "timestamp", "group"],
        value_vars=list(METHODS),
        var_name="method",
        value_name="value",
    )
    long["value"] = long["value"].astype(str).str.replace(r"\s+", "", regex=True)
    # keep the two rows of a submission adjacent, manual first
    order = long["method"].map({m: i for i, m in enumerate(METHODS)})
    long = long.assign(_order=order).sort_values(["submission", "_order"], kind="stable")
    return long[LONG_COLUMNS].reset_index(drop=True)
