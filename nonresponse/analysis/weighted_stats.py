from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.stats.weightstats import DescrStatsW

from nonresponse.errors import DimensionMismatch, ZeroWeightSum

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegressionResult:
    params: pd.Series
    bse: pd.Series
    conf_low: pd.Series
    conf_high: pd.Series
    pvalues: pd.Series
    nobs: int
    df_resid: float
    rsquared: float
    weighted: bool


@dataclass(frozen=True)
class Comparison:
    statistic: str
    unweighted: Any = None
    weighted: Any = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ComparisonReport:
    outcome: str
    predictors: List[str]
    weight_col: str
    comparisons: List[Comparison] = field(default_factory=list)

    def get(self, statistic: str) -> Comparison:
        for c in self.comparisons:
            if c.statistic == statistic:
                return c
        raise KeyError(statistic)


def _as_weights(weights, n: int) -> np.ndarray:
    w = np.asarray(weights, dtype=float)
    if w.ndim != 1:
        raise ValueError("weights must be one-dimensional.")
    if w.shape[0] != n:
        raise DimensionMismatch(n, w.shape[0], what="weights")
    if not np.isfinite(w).all() or (w < 0).any():
        raise ValueError("weights must be finite and non-negative.")
    return w


def weighted_mean(values, weights) -> float:
    """Sum(w * v) / sum(w) over rows where the value is observed."""
    v = np.asarray(values, dtype=float)
    w = _as_weights(weights, v.shape[0])
    mask = ~np.isnan(v)
    w_sum = float(w[mask].sum())
    if w_sum == 0.0:
        raise ZeroWeightSum("Weighted mean is undefined: weights of observed values sum to zero.")
    return float(np.sum(w[mask] * v[mask]) / w_sum)


def weighted_pearson_correlation(x, y, weights) -> float:
    """Weighted Pearson correlation on pairwise complete rows.

    Returns nan when either variable has zero weighted variance.
    """

    xv = np.asarray(x, dtype=float)
    yv = np.asarray(y, dtype=float)
    if yv.shape[0] != xv.shape[0]:
        raise DimensionMismatch(xv.shape[0], yv.shape[0], what="y")
    w = _as_weights(weights, xv.shape[0])

    mask = ~(np.isnan(xv) | np.isnan(yv)) & (w > 0)
    if float(w[mask].sum()) == 0.0:
        raise ZeroWeightSum("Weighted correlation is undefined: weights of complete pairs sum to zero.")

    ds = DescrStatsW(np.column_stack([xv[mask], yv[mask]]), weights=w[mask], ddof=0)
    if np.any(ds.std == 0):
        return float("nan")
    r = float(ds.corrcoef[0, 1])
    return float(np.clip(r, -1.0, 1.0))


def _design_matrix(X, n: int) -> pd.DataFrame:
    if X is None:
        return pd.DataFrame(index=range(n))
    if isinstance(X, pd.Series):
        Xd = X.to_frame()
    elif isinstance(X, pd.DataFrame):
        Xd = X
    else:
        arr = np.asarray(X, dtype=float)
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        Xd = pd.DataFrame(arr, columns=[f"x{i + 1}" for i in range(arr.shape[1])])
    if len(Xd) != n:
        raise DimensionMismatch(n, len(Xd), what="X")
    return Xd.reset_index(drop=True).astype(float)


def weighted_linear_regression(y, X=None, weights=None, alpha: float = 0.05) -> RegressionResult:
    """Weighted least squares of y on X (intercept added), minimizing sum(w * (y - Xb)^2).

    weights=None fits OLS. Rows with a missing outcome or predictor and rows with
    zero weight are dropped before fitting, so nobs and df_resid count only the
    cases that contribute to the fit.
    """

    yv = pd.Series(np.asarray(y, dtype=float))
    n = yv.shape[0]
    Xd = _design_matrix(X, n)
    is_weighted = weights is not None
    w = _as_weights(weights, n) if is_weighted else np.ones(n)

    mask = yv.notna().to_numpy() & Xd.notna().all(axis=1).to_numpy()
    if float(w[mask].sum()) == 0.0:
        raise ZeroWeightSum("Weighted regression is undefined: weights of complete cases sum to zero.")
    mask &= w > 0

    exog = Xd.loc[mask].copy()
    exog.insert(0, "Intercept", 1.0)
    res = sm.WLS(yv.loc[mask], exog, weights=w[mask]).fit()

    ci = res.conf_int(alpha=alpha)
    return RegressionResult(
        params=res.params,
        bse=res.bse,
        conf_low=ci.iloc[:, 0],
        conf_high=ci.iloc[:, 1],
        pvalues=res.pvalues,
        nobs=int(res.nobs),
        df_resid=float(res.df_resid),
        rsquared=float(res.rsquared),
        weighted=is_weighted,
    )


def _compare(statistic: str, func, *args, **kwargs) -> Comparison:
    out: Dict[str, Any] = {}
    for label, weights in (("unweighted", kwargs.pop("unit_weights")), ("weighted", kwargs.pop("weights"))):
        try:
            out[label] = func(*args, weights, **kwargs)
        except ZeroWeightSum as exc:
            logger.warning("%s (%s): %s", statistic, label, exc)
            return Comparison(statistic=statistic, unweighted=out.get("unweighted"), error=str(exc))
    return Comparison(statistic=statistic, **out)


def compare_statistics(
    df: pd.DataFrame,
    outcome: str,
    predictors: Sequence[str],
    weight_col: str,
    alpha: float = 0.05,
) -> ComparisonReport:
    """Run each statistic with unit weights and with df[weight_col], side by side.

    A zero weight sum in one statistic is recorded on that comparison only.
    """

    predictors = list(predictors)
    missing_cols = [c for c in [outcome, weight_col] + predictors if c not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns: {missing_cols}")

    y = df[outcome].to_numpy(dtype=float)
    w = df[weight_col].to_numpy(dtype=float)
    ones = np.ones(len(df))

    comparisons = [_compare("mean", weighted_mean, y, unit_weights=ones, weights=w)]
    for p in predictors:
        x = df[p].to_numpy(dtype=float)
        comparisons.append(
            _compare(f"correlation:{p}", weighted_pearson_correlation, x, y, unit_weights=ones, weights=w)
        )

    X = df[predictors] if predictors else None
    comparisons.append(
        _compare("regression", weighted_linear_regression, y, X, unit_weights=None, weights=w, alpha=alpha)
    )
    return ComparisonReport(outcome=outcome, predictors=predictors, weight_col=weight_col, comparisons=comparisons)
