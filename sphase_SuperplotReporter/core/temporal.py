# sphase_SuperplotReporter/core/temporal.py
from __future__ import annotations
from typing import Literal
import logging
import pandas as pd

from .model import CleaningReport, MalformedTimestamp

_LOG = logging.getLogger(__name__)

MalformedPolicy = Literal["drop", "raise"]

# DD-MM-YYYY HH:MM[:SS]; date and time separated by one space
TIMESTAMP_PATTERN = r"^(?P<day>\d{1,2})-(?P<month>\d{1,2})-(?P<year>\d{4}) (?P<time>(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?)$"


def split_timestamp(df: pd.DataFrame,
                    on_malformed: MalformedPolicy = "drop") -> tuple[pd.DataFrame, CleaningReport]:
    """
    Add integer day, month, year and the text time from 'timestamp'.
    Rows that do not parse, or name an impossible calendar date or clock time,
    are dropped (counted as malformed_timestamp) or raise MalformedTimestamp.
    """
    if on_malformed not in ("drop", "raise"):
        raise ValueError(f"on_malformed must be 'drop' or 'raise', got {on_malformed!r}")

    if df.empty:
        out = df.copy()
        for col in ("day", "month", "year"):
            out[col] = pd.Series(dtype=int)
        out["time"] = pd.Series(dtype=str)
        return out, CleaningReport()

    ts = df["timestamp"].astype(str).str.strip()
    parts = ts.str.extract(TIMESTAMP_PATTERN)
    day = pd.to_numeric(parts["day"], errors="coerce")
    month = pd.to_numeric(parts["month"], errors="coerce")
    year = pd.to_numeric(parts["year"], errors="coerce")

    # reject 31-02-2024 and 25:61:00 alike
    iso = parts["year"].str.cat([parts["month"].str.zfill(2), parts["day"].str.zfill(2)], sep="-")
    clock = parts["hour"].str.zfill(2).str.cat([parts["minute"], parts["second"].fillna("00")], sep=":")
    stamp = iso.str.cat(clock, sep=" ")
    calendar = pd.to_datetime(stamp, format="%Y-%m-%d %H:%M:%S", errors="coerce")
    ok = calendar.notna()

    bad = ts.loc[~ok]
    report = CleaningReport()
    if not bad.empty:
        if on_malformed == "raise":
            raise MalformedTimestamp(bad.tolist())
        report = report.add("malformed_timestamp", len(bad))
        _LOG.warning("dropped %d row(s) with malformed timestamps, e.g. %r", len(bad), bad.iloc[0])

    out = df.loc[ok].copy()
    out["day"] = day.loc[ok].astype(int)
    out["month"] = month.loc[ok].astype(int)
    out["year"] = year.loc[ok].astype(int)
    out["time"] = parts["time"].loc[ok].astype(str)
    return out.reset_index(drop=True), report


def configure_from_config(cfg: dict) -> MalformedPolicy:
    cln = (cfg or {}).get("cleaning", {}) or {}
    policy = str(cln.get("on_malformed_timestamp", "drop")).lower().strip()
    return "raise" if policy == "raise" else "drop"
