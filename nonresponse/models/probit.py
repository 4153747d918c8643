from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf

from nonresponse.data.coding import coerce_missingness_indicator
from nonresponse.data.validate import assert_fully_observed, assert_required_columns


@dataclass(frozen=True)
class PropensityModel:
    formula: str
    fitted: np.ndarray
    summary: pd.DataFrame
    nobs: int
    converged: bool
    llf: float
    aic: float


def build_propensity_formula(indicator: str, covariates: Sequence[str], categorical: Iterable[str] = ()) -> str:
    categorical = set(categorical)
    if not covariates:
        raise ValueError("At least one covariate is required to model missingness.")
    terms = [f"C({c})" if c in categorical else c for c in covariates]
    return f"{indicator} ~ " + " + ".join(terms)


def coefficient_table(params: pd.Series, bse: pd.Series, conf_int: pd.DataFrame, pvalues: pd.Series) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "term": params.index.astype(str),
            "estimate": params.to_numpy(dtype=float),
            "std_error": bse.to_numpy(dtype=float),
            "ci_low": conf_int.iloc[:, 0].to_numpy(dtype=float),
            "ci_high": conf_int.iloc[:, 1].to_numpy(dtype=float),
            "p_value": pvalues.to_numpy(dtype=float),
        }
    )


def fit_response_propensity(
    df: pd.DataFrame,
    indicator: str,
    covariates: Sequence[str],
    *,
    categorical: Iterable[str] = (),
    alpha: float = 0.05,
) -> PropensityModel:
    """Probit regression of the missingness indicator on the Z-variables.

    Fitted values are P(indicator == 1 | Z), one per row of df in row order.
    If the coefficients are not significant, weighting is not needed.
    """

    covariates = list(covariates)
    assert_required_columns(df, [indicator] + covariates)
    assert_fully_observed(df, covariates)

    data = df[[indicator] + covariates].reset_index(drop=True).copy()
    data[indicator] = coerce_missingness_indicator(data[indicator])

    formula = build_propensity_formula(indicator, covariates, categorical)
    family = sm.families.Binomial(link=sm.families.links.Probit())
    res = smf.glm(formula, data=data, family=family).fit()

    fitted = np.asarray(res.fittedvalues, dtype=float)
    if fitted.shape[0] != len(df):
        raise ValueError(f"Probit model returned {fitted.shape[0]} fitted values for {len(df)} rows.")

    summary = coefficient_table(res.params, res.bse, res.conf_int(alpha=alpha), res.pvalues)
    return PropensityModel(
        formula=formula,
        fitted=fitted,
        summary=summary,
        nobs=int(res.nobs),
        converged=bool(res.converged),
        llf=float(res.llf),
        aic=float(res.aic),
    )
