# sphase_SuperplotReporter/loaders/sheet_loader.py
from __future__ import annotations
from pathlib import Path
import io, logging
import pandas as pd
import requests

from ..core.model import SourceUnavailable
from ..utils.detect import detect_kind, separator_for

_LOG = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0


# ---------- fetch ----------
def _fetch_bytes(url: str, timeout: float) -> bytes:
    """One-shot GET of a published sheet; no retry."""
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailable(f"could not fetch {url}: {e}") from e
    return resp.content


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise SourceUnavailable(f"could not read {path}: {e}") from e


# ---------- parse ----------
def _df_from_bytes(buff: bytes, sep: str, origin: str) -> pd.DataFrame:
    """Every cell as text; blanks are kept as '' and handled by drop_incomplete_rows."""
    try:
        df = pd.read_csv(io.BytesIO(buff), sep=sep, dtype=str, keep_default_na=False,
                         skipinitialspace=False, encoding="utf-8-sig")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise SourceUnavailable(f"{origin}: not a readable table ({e})") from e
    if df.columns.size == 0:
        raise SourceUnavailable(f"{origin}: table has no columns")
    # drop trailing unnamed spreadsheet columns that are blank everywhere
    blank_cols = [c for c in df.columns
                  if str(c).startswith("Unnamed:") and df[c].str.strip().eq("").all()]
    return df.drop(columns=blank_cols)


# ---------- public loader ----------
def load(location: str | Path, cfg: dict | None = None) -> pd.DataFrame:
    """
    Accepts: a published-sheet URL (CSV/TSV export) or a local .csv/.tsv file.
    Returns: the raw submission table, one string column per source column.
    Raises SourceUnavailable on any fetch or parse failure.
    """
    inp = (cfg or {}).get("input", {}) or {}
    timeout = float(inp.get("timeout_s", DEFAULT_TIMEOUT_S))

    if not str(location).strip():
        raise SourceUnavailable("no input configured (set input.url or input.path)")

    kind = detect_kind(location)
    if kind == "unknown":
        raise SourceUnavailable(f"unsupported source: {location}")

    if kind == "url":
        buff = _fetch_bytes(str(location), timeout)
    else:
        buff = _read_bytes(Path(location))

    df = _df_from_bytes(buff, separator_for(location, kind), str(location))
    _LOG.info("loaded %d row(s) x %d column(s) from %s", len(df), df.columns.size, kind)
    return df
