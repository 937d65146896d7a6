import logging

import pandas as pd
from sklearn.datasets import fetch_openml
from sklearn.model_selection import train_test_split

import config

logger = logging.getLogger(__name__)


def fetch_raw_data():
    """
    Loads the standard French Motor Third-Party Liability datasets.
    """
    logger.info("Downloading freMTPL2 frequency and severity tables from OpenML...")
    freq = fetch_openml(data_id=config.OPENML_FREQUENCY_DATA_ID, as_frame=True, parser="auto").frame
    sev = fetch_openml(data_id=config.OPENML_SEVERITY_DATA_ID, as_frame=True, parser="auto").frame

    # OpenML sometimes returns IDs as strings, force to int for reliable merging
    freq["IDpol"] = freq["IDpol"].astype(int)
    sev["IDpol"] = sev["IDpol"].astype(int)

    return freq, sev


def load_raw_data(freq_path, sev_path):
    """
    Reads the frequency and severity tables from local CSV files.
    """
    logger.info("Reading raw tables from %s and %s", freq_path, sev_path)
    freq = pd.read_csv(freq_path)
    sev = pd.read_csv(sev_path)

    freq["IDpol"] = freq["IDpol"].astype(int)
    sev["IDpol"] = sev["IDpol"].astype(int)

    return freq, sev


def preprocess_data(df_freq, df_sev):
    """
    Joins claim amounts onto the policy table and derives the pure premium.

    One policy can have several claims, so severity is summed per IDpol before
    the left join. Policies without claims get ClaimAmount = 0 and policies
    with non-positive exposure are dropped.
    """
    sev_agg = df_sev.groupby("IDpol")["ClaimAmount"].sum(min_count=1).reset_index()

    # Policy table may already carry a ClaimAmount column from a previous join
    df = df_freq.drop(columns=["ClaimAmount"], errors="ignore")
    df = pd.merge(df, sev_agg, on="IDpol", how="left")

    df["ClaimAmount"] = df["ClaimAmount"].fillna(0)

    n_before = len(df)
    df = df[df["Exposure"] > 0].copy()
    dropped = n_before - len(df)
    if dropped:
        logger.info("Dropped %d policies with non-positive exposure", dropped)

    df["PurePrem"] = df["ClaimAmount"] / df["Exposure"]

    return df


def cast_categoricals(df):
    """
    Casts rating factors to pandas categoricals.

    Done on the full table before splitting so that train and test share the
    same category levels (LightGBM checks this at predict time).
    """
    df = df.copy()
    for col in config.CATEGORICAL_FEATURES:
        df[col] = df[col].astype(str).astype("category")
    return df


def split_train_test(df):
    """
    Standard 80/20 split with fixed random_state for reproducibility.
    """
    train, test = train_test_split(
        df, test_size=config.TEST_SIZE, random_state=config.RANDOM_STATE
    )
    logger.info("Train rows: %d, test rows: %d", len(train), len(test))
    return train.copy(), test.copy()
