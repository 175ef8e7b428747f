# sphase_SuperplotReporter/main.py
from __future__ import annotations
from pathlib import Path
import logging
import sys
import yaml

from sphase_SuperplotReporter.core.model import PipelineError
from sphase_SuperplotReporter.core.pipeline import run_pipeline
from sphase_SuperplotReporter.loaders import sheet_loader
from sphase_SuperplotReporter.utils.detect import resolve_source

HERE = Path(__file__).resolve().parent


def load_config(cfg_path: Path) -> dict:
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _configure_logging(cfg: dict) -> bool:
    log_cfg = cfg.get("logging", {}) or {}
    level = getattr(logging, str(log_cfg.get("level", "WARNING")).upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    return bool(log_cfg.get("verbose", True))


def run(cfg: dict, base_dir: Path | None = None):
    base_dir = Path.cwd() if base_dir is None else Path(base_dir)
    source = resolve_source(cfg, base_dir)
    out_root = Path(str((cfg.get("output", {}) or {}).get("root", "out")))
    if not out_root.is_absolute():
        out_root = (base_dir / out_root).resolve()

    raw = sheet_loader.load(source, cfg)
    return run_pipeline(raw, cfg, out_root)


def main():
    # ---------- config ----------
    cfg = load_config(HERE / "config.yaml")
    verbose = _configure_logging(cfg)
    if verbose:
        print(f"[cfg] input={resolve_source(cfg, Path.cwd()) or '<unset>'}")
        print(f"[cfg] output={Path(str((cfg.get('output', {}) or {}).get('root', 'out'))).resolve()}")

    try:
        result = run(cfg)
    except PipelineError as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)

    if verbose:
        print(f"[summary] wrote {len(result.outputs)} file(s)")
        for reason, count in sorted(result.report.dropped.items()):
            print(f"  [dropped] {reason:20} {count}")


if __name__ == "__main__":
    main()
