import numpy as np
import pandas as pd
import pytest

from nonresponse.errors import DegenerateProbability, DimensionMismatch, EmptyRespondentGroup
from nonresponse.weighting.derive import attach_weights, derive_weights


def test_ten_respondents_at_point_eight():
    missing = [0] * 10 + [1] * 10
    fitted = [0.8] * 10 + [0.3] * 10

    w = derive_weights(missing, fitted)

    assert w.group_count == 10
    assert w.raw_weight[:10] == pytest.approx([5.0] * 10)
    assert w.weight_sum == pytest.approx(50.0)
    assert w.normalized_weight[:10] == pytest.approx([1.0] * 10)
    assert w.normalized_weight.sum() == pytest.approx(10.0)


def test_nonrespondents_get_exactly_zero():
    rng = np.random.default_rng(2026)
    missing = rng.integers(0, 2, size=200)
    missing[0] = 0
    fitted = rng.uniform(0.01, 0.99, size=200)

    w = derive_weights(missing, fitted)

    assert np.all(w.normalized_weight[missing == 1] == 0.0)
    assert np.all(w.normalized_weight[missing == 0] > 0.0)


def test_normalized_weights_sum_to_respondent_count():
    rng = np.random.default_rng(7)
    for _ in range(20):
        n = int(rng.integers(5, 500))
        missing = rng.integers(0, 2, size=n)
        missing[0] = 0
        fitted = rng.uniform(1e-6, 1 - 1e-6, size=n)

        w = derive_weights(missing, fitted)

        n_resp = int((missing == 0).sum())
        assert w.group_count == n_resp
        assert np.isclose(w.normalized_weight.sum(), n_resp, rtol=1e-9, atol=0.0)


def test_raw_weight_is_inverse_response_probability():
    w = derive_weights([0, 0, 1], [0.5, 0.75, 0.9])

    assert w.response_prob == pytest.approx([0.5, 0.25, 0.1])
    assert w.raw_weight == pytest.approx([2.0, 4.0, 10.0])
    # Only respondents enter the normalization: raw * 2 / (2 + 4).
    assert w.weight_sum == pytest.approx(6.0)
    assert w.normalized_weight == pytest.approx([2.0 / 3.0, 4.0 / 3.0, 0.0])


def test_replication_leaves_per_unit_weights_unchanged():
    missing = np.array([0, 0, 0, 1, 1, 0, 1])
    fitted = np.array([0.2, 0.5, 0.7, 0.6, 0.9, 0.1, 0.4])
    k = 5

    base = derive_weights(missing, fitted)
    rep = derive_weights(np.tile(missing, k), np.tile(fitted, k))

    assert rep.group_count == k * base.group_count
    assert rep.weight_sum == pytest.approx(k * base.weight_sum)
    assert np.allclose(rep.normalized_weight, np.tile(base.normalized_weight, k))


def test_length_mismatch():
    with pytest.raises(DimensionMismatch):
        derive_weights([0, 1, 0], [0.5, 0.5])


def test_zero_probability_is_degenerate():
    with pytest.raises(DegenerateProbability) as excinfo:
        derive_weights([0, 0, 1], [0.4, 0.0, 0.5])
    assert excinfo.value.index == 1


def test_respondent_with_certain_missingness_is_degenerate():
    with pytest.raises(DegenerateProbability) as excinfo:
        derive_weights([0, 0, 1], [0.4, 1.0, 0.5])
    assert excinfo.value.index == 1


def test_nonrespondent_with_certain_missingness_is_allowed():
    w = derive_weights([0, 1], [0.5, 1.0])
    assert w.normalized_weight.tolist() == [1.0, 0.0]


@pytest.mark.parametrize("bad", [float("nan"), -0.1, 1.5])
def test_out_of_range_probability(bad):
    with pytest.raises(DegenerateProbability):
        derive_weights([0, 1], [bad, 0.5])


def test_no_respondents():
    with pytest.raises(EmptyRespondentGroup):
        derive_weights([1, 1, 1], [0.2, 0.3, 0.4])


def test_weights_are_read_only():
    w = derive_weights([0, 1], [0.5, 0.5])
    with pytest.raises(ValueError):
        w.normalized_weight[0] = 3.0


def test_attach_weights_returns_new_frame():
    df = pd.DataFrame({"M_missing": [0, 0, 1, 1], "y": [1.0, 2.0, np.nan, np.nan]})

    out = attach_weights(df, "M_missing", [0.8, 0.8, 0.5, 0.5])

    assert "norm_weight" not in df.columns
    assert out["norm_weight"].tolist() == pytest.approx([1.0, 1.0, 0.0, 0.0])
    assert out[["M_missing", "y"]].equals(df)
