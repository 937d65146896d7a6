import logging

import numpy as np
from sklearn.compose import ColumnTransformer
from sklearn.linear_model import TweedieRegressor
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import FunctionTransformer, OneHotEncoder

import config

logger = logging.getLogger(__name__)


def build_preprocessor(sparse_output=True):
    """
    Design-matrix builder shared by the final GLM and the power profile fits.
    """
    # OneHotEncoder with drop='first' avoids dummy variable trap
    # handle_unknown='ignore' means unseen categories won't break predictions
    return ColumnTransformer(
        transformers=[
            (
                "cat",
                OneHotEncoder(
                    drop="first", handle_unknown="ignore", sparse_output=sparse_output
                ),
                config.CATEGORICAL_FEATURES,
            ),
            ("log", FunctionTransformer(np.log1p), config.LOG_FEATURES),
            ("num", "passthrough", config.NUMERICAL_FEATURES),
        ]
    )


def train_glm_model(df_train, power):
    """
    Fits a Tweedie GLM (log link) for Pure Premium.
    Uses a Pipeline to handle categorical variables (One-Hot Encoding) automatically.
    """
    features = config.MODEL_FEATURES.copy()

    glm = TweedieRegressor(
        power=power,
        link="log",
        alpha=config.GLM_ALPHA,
        max_iter=config.MAX_ITER,
        solver=config.GLM_SOLVER,
    )

    model_pipeline = Pipeline([("preprocessor", build_preprocessor()), ("regressor", glm)])

    logger.info("Fitting Tweedie GLM (p=%.2f) on %d policies...", power, len(df_train))

    # Target is loss per unit exposure, so exposure goes in as the weight
    model_pipeline.fit(
        df_train[features],
        df_train[config.TARGET],
        regressor__sample_weight=df_train[config.EXPOSURE],
    )

    return model_pipeline, features
