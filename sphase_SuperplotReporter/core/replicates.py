# sphase_SuperplotReporter/core/replicates.py
from __future__ import annotations
import pandas as pd

from .model import GROUND_TRUTH_METHOD

SUMMARY_COLUMNS = ["replicate", "method", "year", "group", "n", "percentage"]


def tag_replicates(df: pd.DataFrame) -> pd.DataFrame:
    """Add 'replicate' = '<year> <group>': one independent experimental unit."""
    out = df.copy()
    if out.empty:
        out["replicate"] = pd.Series(dtype=str)
        return out
    out["replicate"] = out["year"].astype(int).astype(str) + " " + out["group"].astype(str)
    return out


def select_method(df: pd.DataFrame, method: str = GROUND_TRUTH_METHOD) -> pd.DataFrame:
    return df.loc[df["method"] == method].reset_index(drop=True)


def summarize_replicates(df: pd.DataFrame) -> pd.DataFrame:
    """
    Collapse technical replicates: one row per (replicate, method) with the
    number of measurements (n) and their mean (percentage).
    """
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    grouped = (
        df.groupby(["replicate", "method"], sort=True)
        .agg(year=("year", "first"), group=("group", "first"), n=("value", "size"), percentage=("value", "mean"))
        .reset_index()
    )
    grouped["n"] = grouped["n"].astype(int)
    grouped["percentage"] = grouped["percentage"].astype(float)
    return grouped[SUMMARY_COLUMNS]
