"""Response propensity weights for unit nonresponse.

The probit model is fitted on the missingness indicator (1 = non-respondent), so
its fitted value p is the predicted probability of being missing. Each unit gets
a raw weight 1 / (1 - p), the inverse of its predicted probability of responding.
Respondents' raw weights are then rescaled so they sum to the number of
respondents; non-respondents get weight 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from nonresponse.errors import DegenerateProbability, DimensionMismatch, EmptyRespondentGroup


@dataclass(frozen=True)
class PropensityWeights:
    response_prob: np.ndarray
    raw_weight: np.ndarray
    normalized_weight: np.ndarray
    group_count: int
    weight_sum: float


def _check_propensities(missing: np.ndarray, p: np.ndarray) -> None:
    for i, (m, v) in enumerate(zip(missing, p)):
        if not np.isfinite(v):
            raise DegenerateProbability(i, float(v), "not a finite number")
        if v <= 0.0 or v > 1.0:
            raise DegenerateProbability(i, float(v), "outside (0, 1]")
        if m == 0 and v == 1.0:
            raise DegenerateProbability(i, float(v), "respondent with zero probability of responding")


def derive_weights(missing: Sequence[int], fitted_propensities: Sequence[float]) -> PropensityWeights:
    m = np.asarray(missing, dtype=int)
    p = np.asarray(fitted_propensities, dtype=float)
    if m.ndim != 1 or p.ndim != 1:
        raise ValueError("missing and fitted_propensities must be one-dimensional.")
    if p.shape[0] != m.shape[0]:
        raise DimensionMismatch(m.shape[0], p.shape[0], what="fitted_propensities")
    if not np.isin(m, (0, 1)).all():
        raise ValueError("missing must be coded 0 (respondent) / 1 (non-respondent).")

    _check_propensities(m, p)

    response_prob = 1.0 - p
    # Non-respondents with p == 1 get an infinite raw weight; it is never used.
    with np.errstate(divide="ignore"):
        raw_weight = 1.0 / response_prob

    respondent = m == 0
    group_count = int(respondent.sum())
    weight_sum = float(raw_weight[respondent].sum())
    if group_count == 0 or weight_sum == 0.0:
        raise EmptyRespondentGroup(
            f"Cannot normalize weights: {group_count} respondents, raw weight sum {weight_sum}."
        )

    normalized = np.zeros_like(raw_weight)
    normalized[respondent] = raw_weight[respondent] * group_count / weight_sum

    for arr in (response_prob, raw_weight, normalized):
        arr.setflags(write=False)

    return PropensityWeights(
        response_prob=response_prob,
        raw_weight=raw_weight,
        normalized_weight=normalized,
        group_count=group_count,
        weight_sum=weight_sum,
    )


def attach_weights(
    df: pd.DataFrame,
    indicator_col: str,
    fitted_propensities: Sequence[float],
    weight_col: str = "norm_weight",
) -> pd.DataFrame:
    """Return a copy of df with the normalized weight column appended."""

    weights = derive_weights(df[indicator_col].to_numpy(), fitted_propensities)
    out = df.copy()
    out[weight_col] = np.array(weights.normalized_weight)
    return out
