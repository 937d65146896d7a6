"""
Tests for the exposure-weighted evaluation metrics and decile tables.
"""

import numpy as np
import pandas as pd
import pytest
from sklearn.metrics import auc, mean_tweedie_deviance

import evaluation


def _reference_gini(y, yhat, w):
    # Ascending Lorenz curve integrated with sklearn's auc: Gini = 1 - 2 * area
    order = np.argsort(yhat)
    cum_w = np.r_[0.0, np.cumsum(w[order]) / np.sum(w)]
    cum_loss = np.r_[0.0, np.cumsum((y * w)[order]) / np.sum(y * w)]
    return 1 - 2 * auc(cum_w, cum_loss)


@pytest.fixture
def synthetic_sample():
    rng = np.random.default_rng(42)
    n = 1000
    w = rng.uniform(0.05, 1.0, size=n)
    y = rng.gamma(shape=0.5, scale=200.0, size=n)
    return y, w


def test_gini_of_perfect_ranking_matches_reference(synthetic_sample) -> None:
    y, w = synthetic_sample

    gini = evaluation.weighted_gini(y, y, w)

    assert gini == pytest.approx(_reference_gini(y, y, w), abs=1e-10)
    assert 0 < gini < 1


def test_gini_of_noisy_ranking_matches_reference(synthetic_sample) -> None:
    y, w = synthetic_sample
    yhat = y * np.random.default_rng(1).uniform(0.5, 1.5, size=len(y)) + 1.0

    assert evaluation.weighted_gini(y, yhat, w) == pytest.approx(
        _reference_gini(y, yhat, w), abs=1e-10
    )


def test_constant_predictions_give_zero_gini(synthetic_sample) -> None:
    y, w = synthetic_sample

    assert evaluation.weighted_gini(y, np.full(len(y), 3.0), w) == 0.0


def test_gini_with_ties_does_not_depend_on_row_order() -> None:
    y = np.array([0.0, 10.0, 0.0, 5.0, 20.0, 0.0])
    yhat = np.array([1.0, 2.0, 2.0, 1.0, 3.0, 3.0])
    w = np.array([1.0, 0.5, 0.5, 1.0, 0.25, 0.75])

    perm = np.array([5, 2, 0, 4, 1, 3])
    g1 = evaluation.weighted_gini(y, yhat, w)
    g2 = evaluation.weighted_gini(y[perm], yhat[perm], w[perm])

    assert np.isfinite(g1)
    assert g1 == pytest.approx(g2)


def test_gini_with_no_losses_is_zero() -> None:
    assert evaluation.weighted_gini(np.zeros(4), np.arange(4.0), np.ones(4)) == 0.0


def test_gini_rejects_bad_inputs() -> None:
    with pytest.raises(ValueError, match="Length mismatch"):
        evaluation.weighted_gini([1.0, 2.0], [1.0], [1.0, 1.0])
    with pytest.raises(ValueError, match="strictly positive"):
        evaluation.weighted_gini([1.0, 2.0], [1.0, 2.0], [1.0, 0.0])


def test_normalized_gini_of_oracle_is_one(synthetic_sample) -> None:
    y, w = synthetic_sample

    assert evaluation.normalized_gini(y, y, w) == pytest.approx(1.0)


def test_assign_deciles_equal_count_with_ties_by_row_order() -> None:
    yhat = np.array([5.0, 5.0, 5.0, 5.0, 1.0, 9.0, 2.0, 2.0, 7.0, 3.0])

    deciles = evaluation.assign_deciles(yhat, groups=5)

    assert np.bincount(deciles)[1:].tolist() == [2, 2, 2, 2, 2]
    # The four tied 5.0 predictions fill buckets in original row order
    assert deciles[:4].tolist() == [3, 3, 4, 4]
    assert deciles[5] == 5


def test_assign_deciles_rejects_zero_groups() -> None:
    with pytest.raises(ValueError):
        evaluation.assign_deciles([1.0, 2.0], groups=0)


def test_lift_table_partitions_exposure(synthetic_sample) -> None:
    y, w = synthetic_sample
    yhat = y + 1.0

    lift = evaluation.lift_table(y, yhat, w)

    assert lift["decile"].tolist() == list(range(10, 0, -1))
    assert lift["count"].sum() == len(y)
    assert lift["exposure"].sum() == pytest.approx(w.sum())
    assert lift["exposure_share"].sum() == pytest.approx(1.0)
    assert lift["cum_exp"].iloc[-1] == 1.0
    assert lift["cum_loss"].iloc[-1] == 1.0
    assert lift["cum_exp"].is_monotonic_increasing


def test_lift_of_perfect_ranking_front_loads_losses(synthetic_sample) -> None:
    y, w = synthetic_sample

    lift = evaluation.lift_table(y, y, w)

    assert lift["lift"].iloc[0] > 1.0
    assert lift["lift"].iloc[-1] == pytest.approx(1.0)


def test_calibration_table_ascending_and_weighted() -> None:
    y = np.array([0.0, 100.0, 0.0, 300.0])
    yhat = np.array([10.0, 20.0, 30.0, 40.0])
    w = np.array([1.0, 0.5, 0.5, 1.0])

    cal = evaluation.calibration_table(y, yhat, w, groups=2)

    assert cal["decile"].tolist() == [1, 2]
    # Decile 1 holds rows 0 and 1: observed = (0*1 + 100*0.5) / 1.5
    assert cal.loc[0, "obs"] == pytest.approx(50.0 / 1.5)
    assert cal.loc[0, "pred"] == pytest.approx((10.0 * 1.0 + 20.0 * 0.5) / 1.5)
    assert cal.loc[1, "obs"] == pytest.approx(300.0 / 1.5)
    assert cal["cum_exp"].iloc[-1] == 1.0


def test_tweedie_deviance_is_canonical() -> None:
    y = np.array([0.0, 50.0, 0.0, 400.0])
    yhat = np.array([20.0, 40.0, 30.0, 100.0])
    w = np.array([1.0, 0.5, 0.25, 1.0])

    expected = mean_tweedie_deviance(y, yhat, sample_weight=w, power=1.6)

    assert evaluation.tweedie_deviance(y, yhat, w, 1.6) == pytest.approx(expected)


def test_evaluate_samples_tags_model_and_sample(scored_portfolio) -> None:
    metrics, lift, cal = evaluation.evaluate_samples(
        {"train": scored_portfolio, "test": scored_portfolio}, power=1.5
    )

    assert set(zip(metrics["sample"], metrics["model"])) == {
        ("train", "glm"),
        ("train", "gbm"),
        ("test", "glm"),
        ("test", "gbm"),
    }
    assert list(metrics.columns) == ["model", "sample", "wmae", "deviance", "gini", "normalized_gini"]
    assert len(lift) == len(cal) == 40
    assert isinstance(lift, pd.DataFrame)
