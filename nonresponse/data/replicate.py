import numbers

import pandas as pd


def replicate_dataset(df: pd.DataFrame, k: int) -> pd.DataFrame:
    """Stack k copies of df (rows repeated block-wise, index reset).

    Column values, including any weight column, are carried over unchanged.
    """

    if isinstance(k, bool) or not isinstance(k, numbers.Integral) or k < 1:
        raise ValueError(f"Replication factor must be a positive integer, got {k!r}.")
    return pd.concat([df] * int(k), ignore_index=True)
