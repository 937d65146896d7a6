"""
Tests for the GLM and GBM pure-premium models on synthetic policies.
"""

import numpy as np
import pytest

import config
import data_preprocessing
import fit_models
import gbm_model
import glm_model


@pytest.fixture
def split(policies):
    return data_preprocessing.split_train_test(policies)


def test_glm_predicts_positive_pure_premium(split) -> None:
    train, test = split

    model, features = glm_model.train_glm_model(train, power=1.5)
    preds = model.predict(test[features])

    assert features == config.MODEL_FEATURES
    assert preds.shape == (len(test),)
    assert np.all(preds > 0)


def test_glm_handles_unseen_category(split) -> None:
    train, test = split

    model, features = glm_model.train_glm_model(train, power=1.5)
    unseen = test.head(5).copy()
    unseen["Region"] = "R99"

    preds = model.predict(unseen[features])

    assert np.all(np.isfinite(preds))


def test_gbm_predicts_positive_pure_premium(split) -> None:
    train, test = split

    model, features = gbm_model.train_gbm_model(train, power=1.5, n_estimators=50)
    preds = model.predict(test[features])

    assert preds.shape == (len(test),)
    assert np.all(preds > 0)
    assert 1 <= model.best_iteration_ <= 50


def test_score_floors_predictions(split) -> None:
    train, test = split

    class ZeroModel:
        def predict(self, X):
            return np.zeros(len(X))

    scores = fit_models.score(ZeroModel(), test, config.MODEL_FEATURES)

    assert np.all(scores == config.MIN_PREDICTION)
