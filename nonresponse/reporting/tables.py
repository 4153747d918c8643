from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping

import numpy as np
import pandas as pd

from nonresponse.analysis.weighted_stats import ComparisonReport, RegressionResult
from nonresponse.models.probit import PropensityModel


def _stars(p: float) -> str:
    if np.isnan(p):
        return ""
    if p < 0.001:
        return "***"
    if p < 0.01:
        return "**"
    if p < 0.05:
        return "*"
    return ""


def _cell(est: float, se: float, lo: float, hi: float, p: float, *, digits: int, ci: bool, stars: bool) -> str:
    if ci:
        text = f"{est:.{digits}f} [{lo:.{digits}f}; {hi:.{digits}f}]"
        # With CIs, a star marks a 0 outside the interval.
        if stars and not (lo <= 0.0 <= hi):
            text += "*"
        return text
    text = f"{est:.{digits}f} ({se:.{digits}f})"
    return text + _stars(p) if stars else text


def regression_table(
    models: Mapping[str, RegressionResult],
    digits: int = 3,
    ci: bool = True,
    stars: bool = False,
) -> pd.DataFrame:
    """One column per model, estimate and CI (or SE) in a single row per term."""

    terms: List[str] = []
    for res in models.values():
        for t in res.params.index.astype(str):
            if t not in terms:
                terms.append(t)

    columns: Dict[str, List[str]] = {}
    for name, res in models.items():
        col = []
        for t in terms:
            if t not in res.params.index:
                col.append("")
                continue
            col.append(
                _cell(
                    float(res.params[t]),
                    float(res.bse[t]),
                    float(res.conf_low[t]),
                    float(res.conf_high[t]),
                    float(res.pvalues[t]),
                    digits=digits,
                    ci=ci,
                    stars=stars,
                )
            )
        col.append(f"{res.rsquared:.{digits}f}")
        col.append(str(res.nobs))
        columns[name] = col

    out = pd.DataFrame(columns, index=terms + ["R^2", "Num. obs."])
    return out.rename_axis("term").reset_index()


def propensity_table(model: PropensityModel, digits: int = 3) -> pd.DataFrame:
    s = model.summary
    cells = [
        _cell(r.estimate, r.std_error, r.ci_low, r.ci_high, r.p_value, digits=digits, ci=True, stars=True)
        for r in s.itertuples(index=False)
    ]
    out = pd.DataFrame({"term": s["term"].tolist(), "Probit Regression Model on Missingness": cells})
    extra = pd.DataFrame(
        {
            "term": ["AIC", "Log Likelihood", "Num. obs."],
            "Probit Regression Model on Missingness": [
                f"{model.aic:.{digits}f}",
                f"{model.llf:.{digits}f}",
                str(model.nobs),
            ],
        }
    )
    return pd.concat([out, extra], ignore_index=True)


def comparison_frame(report: ComparisonReport) -> pd.DataFrame:
    """Long table of unweighted vs. weighted values; regressions expand to one row per coefficient."""

    rows = []
    for c in report.comparisons:
        if isinstance(c.unweighted, RegressionResult) or isinstance(c.weighted, RegressionResult):
            ref = c.unweighted if c.unweighted is not None else c.weighted
            for t in ref.params.index.astype(str):
                rows.append(
                    {
                        "statistic": f"{c.statistic}:{t}",
                        "unweighted": float(c.unweighted.params[t]) if c.unweighted is not None else np.nan,
                        "weighted": float(c.weighted.params[t]) if c.weighted is not None else np.nan,
                        "error": c.error,
                    }
                )
            continue
        rows.append(
            {
                "statistic": c.statistic,
                "unweighted": np.nan if c.unweighted is None else float(c.unweighted),
                "weighted": np.nan if c.weighted is None else float(c.weighted),
                "error": c.error,
            }
        )
    return pd.DataFrame(rows, columns=["statistic", "unweighted", "weighted", "error"])


def write_table(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
