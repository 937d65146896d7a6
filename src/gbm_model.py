import logging

import lightgbm as lgb
from sklearn.model_selection import train_test_split

import config

logger = logging.getLogger(__name__)


def train_gbm_model(df_train, power, n_estimators=None):
    """
    Fits a gradient-boosted Tweedie model (log link) for Pure Premium.

    Categorical rating factors are passed as pandas categoricals and handled
    natively by LightGBM. The number of trees is chosen by early stopping on
    a held-out slice of the training data.
    """
    features = config.MODEL_FEATURES.copy()
    if n_estimators is None:
        n_estimators = config.GBM_N_ESTIMATORS

    fit_part, valid_part = train_test_split(
        df_train,
        train_size=config.GBM_TRAIN_FRACTION,
        random_state=config.RANDOM_STATE,
    )

    gbm = lgb.LGBMRegressor(
        objective="tweedie",
        tweedie_variance_power=power,
        n_estimators=n_estimators,
        learning_rate=config.GBM_LEARNING_RATE,
        max_depth=config.GBM_MAX_DEPTH,
        num_leaves=config.GBM_NUM_LEAVES,
        subsample=config.GBM_BAGGING_FRACTION,
        subsample_freq=1,
        min_child_samples=config.GBM_MIN_CHILD_SAMPLES,
        random_state=config.RANDOM_STATE,
        verbose=-1,
    )

    logger.info(
        "Fitting Tweedie GBM (p=%.2f, up to %d trees) on %d policies...",
        power,
        n_estimators,
        len(fit_part),
    )

    # Weight by exposure, consistent with the GLM
    gbm.fit(
        fit_part[features],
        fit_part[config.TARGET],
        sample_weight=fit_part[config.EXPOSURE],
        eval_set=[(valid_part[features], valid_part[config.TARGET])],
        eval_sample_weight=[valid_part[config.EXPOSURE]],
        callbacks=[lgb.early_stopping(config.GBM_EARLY_STOPPING_ROUNDS, verbose=False)],
    )

    logger.info("GBM best iteration: %s", gbm.best_iteration_)

    return gbm, features
