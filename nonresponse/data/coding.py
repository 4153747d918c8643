from __future__ import annotations

import numpy as np
import pandas as pd


def coerce_missingness_indicator(series: pd.Series) -> pd.Series:
    """Recode a unit-nonresponse indicator to int {0,1}.

    - True / 1 / 1.0 map to 1 (non-respondent)
    - False / 0 / 0.0 map to 0 (respondent)

    Raises ValueError on missing values or any other code; the indicator must be
    known for every sampled unit.
    """

    s = series
    if s.isna().any():
        raise ValueError(
            f"Missingness indicator {s.name!r} has {int(s.isna().sum())} missing values; "
            "it must be observed for every sampled unit."
        )

    if pd.api.types.is_bool_dtype(s):
        return s.astype(int)

    numeric = pd.to_numeric(s, errors="coerce")
    unexpected = s.loc[~numeric.isin([0, 1])].unique()
    if len(unexpected) > 0:
        raise ValueError(
            f"Unexpected codes in missingness indicator {s.name!r}: {sorted(map(str, unexpected))}; "
            "expected 0 (respondent) or 1 (non-respondent)."
        )
    return numeric.astype(int)


def summarize_missingness(df: pd.DataFrame) -> pd.DataFrame:
    """Return per-column missingness summary in stable column order."""

    n = len(df)
    rows = []
    for col in df.columns.astype(str).tolist():
        n_missing = int(df[col].isna().sum())
        missing_rate = round(n_missing / n, 6) if n else np.nan
        rows.append({"column": col, "n": n, "n_missing": n_missing, "missing_rate": missing_rate})
    return pd.DataFrame(rows)


def describe_dataset(df: pd.DataFrame) -> pd.DataFrame:
    """Per-column summary statistics (count, mean, quartiles) for numeric columns."""

    numeric = df.select_dtypes(include="number")
    if numeric.empty:
        return pd.DataFrame()
    out = numeric.describe().T
    out.insert(1, "n_missing", numeric.isna().sum())
    return out.rename_axis("column").reset_index()
