# sphase_SuperplotReporter/core/pipeline.py
from __future__ import annotations
from pathlib import Path
import logging
import pandas as pd

from . import clean, estimate, normalize, temporal
from .clean import clean_values
from .estimate import estimate_population
from .model import METHODS, CleaningReport, EmptyDataset, PipelineResult
from .normalize import drop_incomplete_rows, normalize_schema
from .plotting import save_report_plots
from .replicates import select_method, summarize_replicates, tag_replicates
from .reports import export_replicates, format_estimate, write_summary
from .reshape import to_long
from .temporal import split_timestamp

_LOG = logging.getLogger(__name__)


def prepare_observations(raw: pd.DataFrame, cfg: dict) -> tuple[pd.DataFrame, pd.DataFrame, CleaningReport]:
    """
    Schema -> drop incomplete -> long form -> value cleaning -> date split -> replicate tag.
    Returns (wide submissions, tagged observations of both methods, drop report).
    """
    schema = normalize.configure_from_config(cfg)
    wide = normalize_schema(raw, columns=schema["columns"], positional=schema["positional"])

    report = CleaningReport()
    wide, n_incomplete = drop_incomplete_rows(wide)
    if n_incomplete:
        _LOG.info("dropped %d submission(s) with empty cells", n_incomplete)
        report = report.add("incomplete", n_incomplete * len(METHODS))

    long = to_long(wide)
    cleaned, r_values = clean_values(long, **clean.configure_from_config(cfg))
    dated, r_dates = split_timestamp(cleaned, on_malformed=temporal.configure_from_config(cfg))
    observations = tag_replicates(dated)
    return wide, observations, report.merge(r_values).merge(r_dates)


def run_pipeline(raw: pd.DataFrame, cfg: dict, out_root: Path | None = None) -> PipelineResult:
    """
    Full run over one raw submission table. Everything is computed before the
    first file is written, so a fatal error leaves no partial output.
    """
    cfg = cfg or {}
    est_cfg = estimate.configure_from_config(cfg)
    method = est_cfg["method"]

    wide, observations, report = prepare_observations(raw, cfg)
    if observations.empty:
        raise EmptyDataset(f"no valid observations left after cleaning "
                           f"({len(raw)} submission(s) in, {report.total} observation(s) dropped)")

    ground_truth = select_method(observations, method)
    if ground_truth.empty:
        raise EmptyDataset(f"no valid '{method}' observations left after cleaning")

    summary = summarize_replicates(ground_truth)
    est = estimate_population(summary, confidence=est_cfg["confidence"])

    print(f"[pipeline] {len(wide)} submission(s) → {len(observations)} observation(s), "
          f"{len(ground_truth)} {method} across {len(summary)} replicate(s); dropped {report.total} observation(s)")
    print(f"[estimate] {format_estimate(est, est_cfg['decimals'])}")

    outputs: list[Path] = []
    if out_root is not None:
        out_root = Path(out_root)
        out_cfg = cfg.get("output", {}) or {}
        export_name = str(out_cfg.get("export_name", "replicates.csv"))
        outputs.append(export_replicates(ground_truth, out_root / export_name))

        if bool((cfg.get("reports", {}) or {}).get("write_summary", False)):
            outputs.append(write_summary(summary, est, report, out_root / "summary",
                                         decimals=est_cfg["decimals"]))

        plots_cfg = cfg.get("plots", {}) or {}
        if bool(plots_cfg.get("enabled", True)):
            tables = {
                "observations": observations,
                "replicates": summarize_replicates(observations),
                "ground_truth": ground_truth,
                "summary": summary,
            }
            outputs.extend(save_report_plots(tables, out_root / "plots",
                                             dpi=int(plots_cfg.get("dpi", 160))))

    return PipelineResult(
        wide=wide,
        observations=observations,
        ground_truth=ground_truth,
        summary=summary,
        estimate=est,
        report=report,
        outputs=tuple(outputs),
    )
