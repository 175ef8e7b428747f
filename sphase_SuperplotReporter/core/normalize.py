# sphase_SuperplotReporter/core/normalize.py
from __future__ import annotations
import re
import pandas as pd

from .model import CANONICAL_COLUMNS, SchemaMismatch

# header aliases per canonical column (matched case/whitespace-insensitively)
DEFAULT_ALIASES: dict[str, tuple[str, ...]] = {
    "timestamp": ("timestamp", "tijdstempel", "zeitstempel", "date"),
    "group":     ("group", "groep", "group name", "student group"),
    "manual":    ("manual", "handmatig", "manual count", "s-phase manual", "s_phase_manual"),
    "automated": ("automated", "automatisch", "automated count", "s-phase automated", "s_phase_automated"),
}

_WS = re.compile(r"\s+")


def _key(name) -> str:
    return _WS.sub(" ", str(name)).strip().lower()


def _aliases(columns: dict | None) -> dict[str, tuple[str, ...]]:
    out = dict(DEFAULT_ALIASES)
    for canon, names in (columns or {}).items():
        if canon not in CANONICAL_COLUMNS:
            continue
        if isinstance(names, str):
            names = [names]
        out[canon] = tuple(str(n) for n in names) + (canon,)
    return out


def parse_columns(df: pd.DataFrame, columns: dict | None = None) -> dict[str, str | None]:
    """Map each canonical column to the source header carrying it (or None)."""
    cmap = {_key(c): c for c in df.columns}
    found: dict[str, str | None] = {}
    for canon, names in _aliases(columns).items():
        found[canon] = None
        for n in names:
            hit = cmap.get(_key(n))
            if hit is not None:
                found[canon] = hit
                break
    return found


def normalize_schema(df: pd.DataFrame, columns: dict | None = None, positional: bool = False) -> pd.DataFrame:
    """
    Return a table with exactly timestamp, group, manual, automated (as text).
    Named lookup by default; positional=True renames the first four columns.
    """
    if positional:
        if df.columns.size < len(CANONICAL_COLUMNS):
            raise SchemaMismatch(CANONICAL_COLUMNS[df.columns.size:], df.columns)
        src = list(df.columns[:len(CANONICAL_COLUMNS)])
    else:
        found = parse_columns(df, columns)
        missing = [c for c, hit in found.items() if hit is None]
        if missing:
            raise SchemaMismatch(missing, df.columns)
        src = [found[c] for c in CANONICAL_COLUMNS]

    out = df[src].copy()
    out.columns = list(CANONICAL_COLUMNS)
    return out.apply(to_str).reset_index(drop=True)


def drop_incomplete_rows(df: pd.DataFrame, columns=None) -> tuple[pd.DataFrame, int]:
    """
    Treat empty strings (after stripping) as nulls and drop every row holding one.
    Returns the kept rows and the number dropped.
    """
    cols = list(columns) if columns is not None else list(df.columns)
    if df.empty:
        return df.copy(), 0
    blank = df[cols].apply(lambda s: s.isna() | s.astype(str).str.strip().eq(""))
    mask = ~blank.any(axis=1)
    return df.loc[mask].reset_index(drop=True), int((~mask).sum())


def to_str(s) -> pd.Series:
    return s.where(s.notna(), "").astype(str)


def configure_from_config(cfg: dict) -> dict:
    """Schema options from the 'schema' section: {'columns': ..., 'positional': ...}."""
    sch = (cfg or {}).get("schema", {}) or {}
    return {
        "columns": sch.get("columns") or None,
        "positional": bool(sch.get("positional", False)),
    }
