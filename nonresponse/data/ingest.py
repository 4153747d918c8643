from pathlib import Path
from typing import Optional

import pandas as pd


def load_survey(path: Path, nrows: Optional[int] = None) -> pd.DataFrame:
    """Read a survey file by extension (.sav, .csv, .xlsx/.xls, .parquet)."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".sav":
        df = pd.read_spss(path, convert_categoricals=False)
    elif suffix == ".csv":
        return pd.read_csv(path, nrows=nrows)
    elif suffix in {".xlsx", ".xls"}:
        return pd.read_excel(path, nrows=nrows)
    elif suffix == ".parquet":
        df = pd.read_parquet(path)
    else:
        raise ValueError(f"Unsupported survey file type: {path.suffix!r} ({path})")

    if nrows is not None:
        df = df.head(nrows).copy()
    return df
