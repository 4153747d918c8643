from typing import Iterable


def assert_required_columns(df, required: Iterable[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def assert_fully_observed(df, columns: Iterable[str]) -> None:
    """Propensity covariates must be known for respondents and non-respondents alike."""
    incomplete = {c: int(df[c].isna().sum()) for c in columns if df[c].isna().any()}
    if incomplete:
        raise ValueError(f"Columns must be fully observed but contain missing values: {incomplete}")
