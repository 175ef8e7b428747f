# sphase_SuperplotReporter/core/estimate.py
from __future__ import annotations
import logging
import math
import numpy as np
import pandas as pd
from scipy import stats

from .model import EmptyDataset, PopulationEstimate

_LOG = logging.getLogger(__name__)


def estimate_population(summary, confidence: float = 0.95) -> PopulationEstimate:
    """
    Two-stage estimate: every replicate mean is one independent sample.

    `summary` is a ReplicateSummary table or a plain sequence of replicate means.
    sem is sd / sqrt(N - 1) rather than sd / sqrt(N), for parity with
    previously reported figures.
    CI bounds use the two-tailed Student-t quantile at df = N - 1.
    With N <= 1, sd, sem and the CI are NaN.
    """
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")
    values = summary["percentage"] if isinstance(summary, pd.DataFrame) else summary
    x = np.asarray(pd.to_numeric(pd.Series(values), errors="coerce").dropna(), dtype=float)

    n = int(x.size)
    if n == 0:
        raise EmptyDataset("no replicate means to estimate from")

    average = float(np.mean(x))
    if n <= 1:
        _LOG.warning("only %d independent replicate; sd, sem and CI are undefined", n)
        nan = float("nan")
        return PopulationEstimate(n=n, average=average, sd=nan, sem=nan,
                                  ci_lower=nan, ci_upper=nan, confidence=confidence)

    sd = float(np.std(x, ddof=1))
    sem = sd / math.sqrt(n - 1)
    q = float(stats.t.ppf((1 - confidence) / 2, df=n - 1))   # negative
    return PopulationEstimate(
        n=n,
        average=average,
        sd=sd,
        sem=sem,
        ci_lower=average + q * sem,
        ci_upper=average - q * sem,
        confidence=confidence,
    )


def configure_from_config(cfg: dict) -> dict:
    est = (cfg or {}).get("estimate", {}) or {}
    return {
        "method": str(est.get("method", "manual")),
        "confidence": float(est.get("confidence", 0.95)),
        "decimals": int(est.get("decimals", 1)),
    }
