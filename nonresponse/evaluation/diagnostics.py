from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from nonresponse.errors import DimensionMismatch, EmptyRespondentGroup


@dataclass(frozen=True)
class WeightSummary:
    n_respondents: int
    weight_sum: float
    weight_min: float
    weight_max: float
    weight_mean: float
    weight_cv: float
    deff: float
    effective_n: float


def summarize_weights(weights, missing) -> WeightSummary:
    """Respondent weight diagnostics.

    Kish (1965): DEFF = 1 + CV^2(w) where CV = std/mean; effective N = n / DEFF.
    """

    w = np.asarray(weights, dtype=float)
    m = np.asarray(missing, dtype=int)
    if w.shape[0] != m.shape[0]:
        raise DimensionMismatch(m.shape[0], w.shape[0], what="weights")

    wr = w[m == 0]
    n = int(wr.size)
    if n == 0:
        raise EmptyRespondentGroup("No respondents to summarize.")

    mean = float(wr.mean())
    cv = float(wr.std() / mean) if mean > 0 else np.nan
    deff = 1.0 + cv**2
    return WeightSummary(
        n_respondents=n,
        weight_sum=float(wr.sum()),
        weight_min=float(wr.min()),
        weight_max=float(wr.max()),
        weight_mean=mean,
        weight_cv=cv,
        deff=deff,
        effective_n=n / deff,
    )


def covariate_balance(df: pd.DataFrame, missing, weights, covariates: Iterable[str]) -> pd.DataFrame:
    """Compare Z-variable means: full sample vs. respondents (unweighted / weighted) vs. non-respondents.

    If the weights work, the weighted respondent mean moves toward the full-sample mean.
    """

    m = np.asarray(missing, dtype=int)
    w = np.asarray(weights, dtype=float)
    if m.shape[0] != len(df) or w.shape[0] != len(df):
        raise DimensionMismatch(len(df), min(m.shape[0], w.shape[0]), what="missing/weights")

    resp = m == 0
    rows = []
    for cov in covariates:
        x = pd.to_numeric(df[cov], errors="coerce").to_numpy(dtype=float)
        xr, wr = x[resp], w[resp]
        ok = ~np.isnan(xr)
        rows.append(
            {
                "covariate": cov,
                "full_sample_mean": float(np.nanmean(x)) if np.any(~np.isnan(x)) else np.nan,
                "respondent_mean_unweighted": float(xr[ok].mean()) if ok.any() else np.nan,
                "respondent_mean_weighted": (
                    float(np.average(xr[ok], weights=wr[ok])) if wr[ok].sum() > 0 else np.nan
                ),
                "nonrespondent_mean": (
                    float(np.nanmean(x[~resp])) if np.any(~np.isnan(x[~resp])) else np.nan
                ),
            }
        )
    return pd.DataFrame(rows)
