"""
Rate-change simulation on a scored portfolio.

Takes the scored test set written by fit_models.py and recomputes premiums,
loss ratios and decile calibration for a chosen model and a uniform rate
change. Used by the Streamlit dashboard.
"""

import logging

import numpy as np
import pandas as pd

import config
import evaluation

logger = logging.getLogger(__name__)


def load_scored(path=None):
    """Reads the scored table, defaulting to outputs/scored.csv."""
    if path is None:
        path = config.OUTPUTS_DIR / config.SCORED_FILE
    return pd.read_csv(path)


def _loss_ratio(total_loss, total_premium):
    return total_loss / total_premium if total_premium > 0 else 0.0


def required_rate_change(lr_base, target_lr):
    """
    Uniform rate change (as a fraction) that moves lr_base to target_lr.
    """
    if target_lr <= 0:
        raise ValueError(f"Target loss ratio must be positive, got {target_lr}")
    return lr_base / target_lr - 1


def simulate_rate_change(scored, model="glm", rate_pct=0, target_lr=None):
    """
    Applies a uniform rate change to the model premium of every policy.

    Parameters:
    -----------
    scored : pd.DataFrame
        Scored policies with Exposure, PurePrem and pred_<model> columns
    model : str
        'glm' or 'gbm'
    rate_pct : float
        Global rate change in percent (e.g. 5 for +5%)
    target_lr : float, optional
        Target loss ratio; when given, the rate change needed to reach it
        from the base loss ratio is reported

    Returns:
    --------
    dict containing:
        - policies: pd.DataFrame with prem_base, prem_new, loss, premium_change
        - total_prem_base, total_prem_new, total_loss: float
        - lr_base, lr_new: float
        - required_rate: float or None (fraction, e.g. 0.08 for +8%)
        - calibration: pd.DataFrame of decile observed vs predicted pure premium
        - summary_text: str
    """
    if model not in config.MODEL_NAMES:
        raise ValueError(f"Unknown model '{model}', expected one of {config.MODEL_NAMES}")

    pred_col = f"pred_{model}"
    rate_mult = 1 + rate_pct / 100

    df = scored.copy()
    df["prem_base"] = df[pred_col] * df[config.EXPOSURE]
    df["prem_new"] = df["prem_base"] * rate_mult
    df["loss"] = df[config.TARGET] * df[config.EXPOSURE]

    # Uniform multiplier: every policy moves by the same percentage
    df["premium_change"] = np.where(df["prem_base"] > 0, rate_mult - 1, np.nan)

    total_prem_base = float(df["prem_base"].sum())
    total_prem_new = float(df["prem_new"].sum())
    total_loss = float(df["loss"].sum())

    lr_base = _loss_ratio(total_loss, total_prem_base)
    lr_new = _loss_ratio(total_loss, total_prem_new)

    required_rate = None
    if target_lr is not None:
        required_rate = required_rate_change(lr_base, target_lr)

    calibration = evaluation.calibration_table(
        df[config.TARGET], df[pred_col], df[config.EXPOSURE]
    )

    summary_text = (
        f"Base premium {total_prem_base / 1e6:.1f}M, New premium {total_prem_new / 1e6:.1f}M, "
        f"Base LR {lr_base:.3f}, New LR {lr_new:.3f}\n"
        f"Rate change: {rate_pct:+g}%, Model: {model.upper()}"
    )
    if required_rate is not None:
        summary_text += (
            f"\nRate change needed for target LR {target_lr:.2f}: {required_rate * 100:+.1f}%"
        )

    logger.info(
        "Simulated %s at %+g%%: LR %.3f -> %.3f", model.upper(), rate_pct, lr_base, lr_new
    )

    return {
        "policies": df[df["prem_base"] > 0],
        "total_prem_base": total_prem_base,
        "total_prem_new": total_prem_new,
        "total_loss": total_loss,
        "lr_base": lr_base,
        "lr_new": lr_new,
        "required_rate": required_rate,
        "calibration": calibration,
        "summary_text": summary_text,
    }
