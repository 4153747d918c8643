import numpy as np
import pandas as pd
import pytest

from nonresponse.data.coding import coerce_missingness_indicator, describe_dataset, summarize_missingness
from nonresponse.data.ingest import load_survey
from nonresponse.data.replicate import replicate_dataset
from nonresponse.data.validate import assert_fully_observed, assert_required_columns


def test_coerce_indicator_accepts_common_codings():
    assert coerce_missingness_indicator(pd.Series([True, False])).tolist() == [1, 0]
    assert coerce_missingness_indicator(pd.Series([1.0, 0.0, 1.0])).tolist() == [1, 0, 1]
    assert coerce_missingness_indicator(pd.Series(["1", "0"])).tolist() == [1, 0]


def test_coerce_indicator_rejects_missing_and_unexpected():
    with pytest.raises(ValueError, match="missing values"):
        coerce_missingness_indicator(pd.Series([1, np.nan], name="M_missing"))
    with pytest.raises(ValueError, match="Unexpected codes"):
        coerce_missingness_indicator(pd.Series([0, 1, 9], name="M_missing"))


def test_validation_helpers():
    df = pd.DataFrame({"a": [1, 2], "b": [np.nan, 1.0]})
    assert_required_columns(df, ["a", "b"])
    with pytest.raises(ValueError):
        assert_required_columns(df, ["c"])
    assert_fully_observed(df, ["a"])
    with pytest.raises(ValueError):
        assert_fully_observed(df, ["a", "b"])


def test_summaries():
    df = pd.DataFrame({"a": [1.0, np.nan, 3.0, 4.0], "b": ["x", "y", None, "z"]})

    miss = summarize_missingness(df)
    assert miss["n_missing"].tolist() == [1, 1]
    assert miss["missing_rate"].tolist() == [0.25, 0.25]

    desc = describe_dataset(df)
    assert desc["column"].tolist() == ["a"]
    assert desc.loc[0, "n_missing"] == 1


def test_replicate_dataset():
    df = pd.DataFrame({"id": [1, 2], "w": [0.5, 1.5]})

    out = replicate_dataset(df, 3)

    assert len(out) == 6
    assert out["id"].tolist() == [1, 2, 1, 2, 1, 2]
    assert out.index.tolist() == list(range(6))
    assert replicate_dataset(df, np.int64(2)).shape == (4, 2)


@pytest.mark.parametrize("k", [0, -1, 2.5, True])
def test_replicate_dataset_rejects_bad_factor(k):
    with pytest.raises(ValueError):
        replicate_dataset(pd.DataFrame({"a": [1]}), k)


def test_load_survey_csv_and_parquet(tmp_path):
    df = pd.DataFrame({"M_missing": [0, 1, 0], "Z_account": [3.0, 1.0, 7.0]})
    df.to_csv(tmp_path / "s.csv", index=False)
    df.to_parquet(tmp_path / "s.parquet", index=False)

    assert load_survey(tmp_path / "s.csv").equals(df)
    assert len(load_survey(tmp_path / "s.parquet", nrows=2)) == 2
    with pytest.raises(ValueError, match="Unsupported"):
        load_survey(tmp_path / "s.json")
