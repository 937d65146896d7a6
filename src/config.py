"""
Configuration file for the Motor Pricing Lab (Tweedie GLM vs GBM).

This module centralizes all hardcoded parameters and constants used throughout
the project to improve maintainability and configurability.
"""

import os
from pathlib import Path

# ============================================================================
# PROJECT PATHS
# ============================================================================

# Resolved from this file so scripts behave the same from any working directory
ROOT_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = ROOT_DIR / "data"
MODELS_DIR = ROOT_DIR / "models"
OUTPUTS_DIR = ROOT_DIR / "outputs"
FIGURES_DIR = ROOT_DIR / "figures"

GLM_MODEL_FILE = "glm_tweedie.joblib"
GBM_MODEL_FILE = "gbm_tweedie.joblib"
MODEL_DATA_FILE = "mtpl_model_data.joblib"

METRICS_FILE = "metrics.csv"
LIFT_FILE = "lift.csv"
CALIBRATION_FILE = "calibration.csv"
PROFILE_FILE = "tweedie_profile.csv"
SCORED_FILE = "scored.csv"

# ============================================================================
# LOGGING
# ============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# ============================================================================
# DATA SOURCES
# ============================================================================

# OpenML Dataset IDs (freMTPL2freq / freMTPL2sev)
OPENML_FREQUENCY_DATA_ID = 41214
OPENML_SEVERITY_DATA_ID = 41215

# ============================================================================
# DATA SPLITTING
# ============================================================================

TEST_SIZE = 0.2
RANDOM_STATE = 42

# ============================================================================
# TWEEDIE POWER SELECTION
# ============================================================================

TWEEDIE_POWER_GRID = [1.1, 1.2, 1.3, 1.4, 1.5, 1.6, 1.7, 1.8, 1.9]

# Profile likelihood is run on a subsample for speed
PROFILE_SAMPLE_SIZE = 200_000

# ============================================================================
# MODEL PARAMETERS
# ============================================================================

# Near-unpenalized GLM, matching a classical actuarial fit
GLM_ALPHA = 1e-4
GLM_SOLVER = "newton-cholesky"
MAX_ITER = 1000

GBM_N_ESTIMATORS = 4000
GBM_LEARNING_RATE = 0.01
GBM_MAX_DEPTH = 4
GBM_NUM_LEAVES = 2**GBM_MAX_DEPTH
GBM_BAGGING_FRACTION = 0.7
GBM_MIN_CHILD_SAMPLES = 50
GBM_TRAIN_FRACTION = 0.9
GBM_EARLY_STOPPING_ROUNDS = 100

# Scored predictions never go below this floor
MIN_PREDICTION = 1e-8

# ============================================================================
# MODEL FEATURES
# ============================================================================

CATEGORICAL_FEATURES = ["VehPower", "VehBrand", "VehGas", "Area", "Region"]

# Density spans several orders of magnitude - log-transformed in the GLM
LOG_FEATURES = ["Density"]

NUMERICAL_FEATURES = ["VehAge", "DrivAge", "BonusMalus"]

MODEL_FEATURES = CATEGORICAL_FEATURES + NUMERICAL_FEATURES + LOG_FEATURES

TARGET = "PurePrem"
EXPOSURE = "Exposure"

MODEL_NAMES = ["glm", "gbm"]

# Columns written to the scored table consumed by the dashboard
SCORED_COLUMNS = [
    "IDpol",
    "Exposure",
    "ClaimAmount",
    "PurePrem",
    "pred_glm",
    "pred_gbm",
    "Area",
    "VehAge",
    "DrivAge",
    "BonusMalus",
    "VehBrand",
    "VehGas",
    "Density",
    "Region",
    "VehPower",
]

# ============================================================================
# EVALUATION
# ============================================================================

# Lift / calibration deciles
RISK_BUCKET_COUNT = 10

# ============================================================================
# VISUALIZATION PARAMETERS
# ============================================================================

PLOT_FIGSIZE_WIDTH = 7
PLOT_FIGSIZE_HEIGHT = 5
PLOT_DPI = 150
HISTOGRAM_BINS = 50
HISTOGRAM_RANGE_PAD = 0.01

# ============================================================================
# DASHBOARD
# ============================================================================

RATE_CHANGE_MIN = -20
RATE_CHANGE_MAX = 40
RATE_CHANGE_STEP = 1

TARGET_LOSS_RATIO_DEFAULT = 0.65
TARGET_LOSS_RATIO_MIN = 0.3
TARGET_LOSS_RATIO_MAX = 1.5
TARGET_LOSS_RATIO_STEP = 0.01
