# sphase_SuperplotReporter/utils/detect.py
from __future__ import annotations
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

SourceKind = Literal["url", "csv", "tsv", "unknown"]


def detect_kind(location: str | Path) -> SourceKind:
    """
    Classify a data source location.
    - http(s)://...   -> 'url' (published sheet export)
    - *.csv           -> 'csv'
    - *.tsv / *.txt   -> 'tsv'
    else              -> 'unknown'
    """
    text = str(location).strip()
    if urlparse(text).scheme.lower() in ("http", "https"):
        return "url"
    suffix = Path(text).suffix.lower()
    if suffix == ".csv":
        return "csv"
    if suffix in (".tsv", ".txt"):
        return "tsv"
    return "unknown"


def separator_for(location: str | Path, kind: SourceKind) -> str:
    """Field separator for a source; published sheets declare it via 'output=tsv'."""
    if kind == "tsv":
        return "\t"
    if kind == "url" and "output=tsv" in str(location).lower():
        return "\t"
    return ","


def resolve_source(cfg: dict, base_dir: Path | None = None) -> str:
    """
    Pick the input location from config: 'input.url' wins over 'input.path'.
    Relative paths are resolved against base_dir (the config's folder).
    """
    inp = (cfg or {}).get("input", {}) or {}
    url = str(inp.get("url") or "").strip()
    if url:
        return url
    path = str(inp.get("path") or "").strip()
    if not path:
        return ""
    p = Path(path)
    if not p.is_absolute() and base_dir is not None:
        p = base_dir / p
    return str(p.resolve())
