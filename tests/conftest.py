"""
Shared test configuration.
Puts the flat src/ modules on the import path and builds small synthetic
freMTPL2-shaped tables so tests stay fast and deterministic.
"""

import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


def make_raw_tables(n_policies=2000, seed=0):
    """Synthetic frequency (one row per policy) and severity (one row per claim) tables."""
    rng = np.random.default_rng(seed)

    bonus_malus = rng.integers(50, 150, size=n_policies)
    driv_age = rng.integers(18, 85, size=n_policies)
    exposure = rng.uniform(0.1, 1.0, size=n_policies)

    # Riskier drivers claim more often so the models have something to find
    freq_rate = 0.05 * np.exp(0.01 * (bonus_malus - 50) + 0.3 * (driv_age < 25))
    claim_nb = rng.poisson(freq_rate * exposure)

    freq = pd.DataFrame(
        {
            "IDpol": np.arange(1, n_policies + 1),
            "ClaimNb": claim_nb,
            "Exposure": exposure,
            "VehPower": rng.integers(4, 10, size=n_policies),
            "VehAge": rng.integers(0, 20, size=n_policies),
            "DrivAge": driv_age,
            "BonusMalus": bonus_malus,
            "VehBrand": rng.choice(["B1", "B2", "B3"], size=n_policies),
            "VehGas": rng.choice(["Regular", "Diesel"], size=n_policies),
            "Area": rng.choice(["A", "B", "C"], size=n_policies),
            "Density": rng.integers(10, 5000, size=n_policies),
            "Region": rng.choice(["R11", "R24", "R82"], size=n_policies),
        }
    )

    claim_ids = np.repeat(freq["IDpol"].to_numpy(), claim_nb)
    sev = pd.DataFrame(
        {
            "IDpol": claim_ids,
            "ClaimAmount": rng.gamma(shape=2.0, scale=500.0, size=len(claim_ids)),
        }
    )
    return freq, sev


@pytest.fixture
def raw_tables():
    return make_raw_tables()


@pytest.fixture
def policies(raw_tables):
    """Prepared policy table with categorical rating factors."""
    import data_preprocessing

    freq, sev = raw_tables
    df = data_preprocessing.preprocess_data(freq, sev)
    return data_preprocessing.cast_categoricals(df)


@pytest.fixture
def scored_portfolio():
    """Small scored table in the layout of outputs/scored.csv."""
    rng = np.random.default_rng(7)
    n = 500
    exposure = rng.uniform(0.2, 1.0, size=n)
    pred_glm = rng.gamma(shape=2.0, scale=50.0, size=n)
    claim = np.where(rng.uniform(size=n) < 0.1, rng.gamma(2.0, 800.0, size=n), 0.0)
    return pd.DataFrame(
        {
            "IDpol": np.arange(n),
            "Exposure": exposure,
            "ClaimAmount": claim,
            "PurePrem": claim / exposure,
            "pred_glm": pred_glm,
            "pred_gbm": pred_glm * rng.uniform(0.8, 1.2, size=n),
        }
    )
