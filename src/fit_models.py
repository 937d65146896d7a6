"""
GLM Tweedie vs GBM on the French MTPL data.

Creates:
    data/mtpl_model_data.joblib, models/glm_tweedie.joblib, models/gbm_tweedie.joblib,
    outputs/metrics.csv, outputs/lift.csv, outputs/calibration.csv,
    outputs/tweedie_profile.csv and outputs/scored.csv (read by the dashboard)

Usage:
    python src/fit_models.py
"""

import logging

import joblib
import numpy as np

import config
import data_preprocessing
import evaluation
import gbm_model
import glm_model
import tweedie_power
from logging_utils import configure_logging

logger = logging.getLogger(__name__)


def score(model, df, features):
    """Predicted pure premium, floored at config.MIN_PREDICTION."""
    return np.maximum(config.MIN_PREDICTION, model.predict(df[features]))


def run_pipeline(df_freq, df_sev, grid=None, profile_sample_size=None, gbm_n_estimators=None):
    """
    Runs preparation, power selection, fitting, scoring and evaluation.

    Parameters:
    -----------
    df_freq, df_sev : pd.DataFrame
        Raw frequency (one row per policy) and severity (one row per claim) tables
    grid : list of float, optional
        Candidate Tweedie powers (default: config.TWEEDIE_POWER_GRID)
    profile_sample_size : int, optional
        Rows used for power selection (default: config.PROFILE_SAMPLE_SIZE)
    gbm_n_estimators : int, optional
        Maximum number of boosting rounds (default: config.GBM_N_ESTIMATORS)

    Returns:
    --------
    dict containing:
        - train, test: scored DataFrames with pred_glm / pred_gbm
        - p_hat: float, profile: pd.DataFrame
        - models: dict with glm, gbm and their feature lists
        - metrics, lift, calibration: pd.DataFrame
    """
    df = data_preprocessing.preprocess_data(df_freq, df_sev)
    df = data_preprocessing.cast_categoricals(df)
    logger.info("Prepared %d policies, total exposure %.1f years", len(df), df[config.EXPOSURE].sum())

    train, test = data_preprocessing.split_train_test(df)

    p_hat, profile = tweedie_power.select_tweedie_power(
        train, grid=grid, sample_size=profile_sample_size
    )

    glm, glm_features = glm_model.train_glm_model(train, p_hat)
    gbm, gbm_features = gbm_model.train_gbm_model(train, p_hat, n_estimators=gbm_n_estimators)

    logger.info("Scoring train and test samples...")
    for sample in (train, test):
        sample["pred_glm"] = score(glm, sample, glm_features)
        sample["pred_gbm"] = score(gbm, sample, gbm_features)

    logger.info("=" * 50)
    logger.info("MODEL VALIDATION")
    logger.info("=" * 50)
    metrics, lift, calibration = evaluation.evaluate_samples({"train": train, "test": test}, p_hat)

    return {
        "train": train,
        "test": test,
        "p_hat": p_hat,
        "profile": profile,
        "models": {
            "glm": glm,
            "gbm": gbm,
            "glm_features": glm_features,
            "gbm_features": gbm_features,
        },
        "metrics": metrics,
        "lift": lift,
        "calibration": calibration,
    }


def write_outputs(result):
    """
    Persists models, evaluation tables and the scored test set.
    """
    for directory in (config.DATA_DIR, config.MODELS_DIR, config.OUTPUTS_DIR):
        directory.mkdir(parents=True, exist_ok=True)

    models = result["models"]
    joblib.dump(
        {"model": models["glm"], "features": models["glm_features"], "p_hat": result["p_hat"]},
        config.MODELS_DIR / config.GLM_MODEL_FILE,
    )
    joblib.dump(
        {"model": models["gbm"], "features": models["gbm_features"], "p_hat": result["p_hat"]},
        config.MODELS_DIR / config.GBM_MODEL_FILE,
    )

    result["metrics"].to_csv(config.OUTPUTS_DIR / config.METRICS_FILE, index=False)
    result["lift"].to_csv(config.OUTPUTS_DIR / config.LIFT_FILE, index=False)
    result["calibration"].to_csv(config.OUTPUTS_DIR / config.CALIBRATION_FILE, index=False)
    result["profile"].to_csv(config.OUTPUTS_DIR / config.PROFILE_FILE, index=False)

    scored = result["test"][config.SCORED_COLUMNS]
    scored.to_csv(config.OUTPUTS_DIR / config.SCORED_FILE, index=False)

    joblib.dump(
        {
            "train": result["train"],
            "test": result["test"],
            "p_hat": result["p_hat"],
            "profile": result["profile"],
        },
        config.DATA_DIR / config.MODEL_DATA_FILE,
    )

    logger.info("Wrote models to %s/ and tables to %s/", config.MODELS_DIR, config.OUTPUTS_DIR)


def main():
    configure_logging()

    df_f, df_s = data_preprocessing.fetch_raw_data()
    result = run_pipeline(df_f, df_s)
    write_outputs(result)

    logger.info("Done.")


if __name__ == "__main__":
    main()
