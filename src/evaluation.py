"""
Exposure-weighted evaluation of pure-premium models.

All aggregates here are weighted by exposure (policy-years), never by row
count: Gini, decile lift and calibration tables, MAE and Tweedie deviance.
"""

import logging

import numpy as np
import pandas as pd
from sklearn.metrics import mean_tweedie_deviance

import config

logger = logging.getLogger(__name__)


def _as_arrays(y, yhat, w):
    y = np.asarray(y, dtype=float)
    yhat = np.asarray(yhat, dtype=float)
    w = np.asarray(w, dtype=float)
    if not (len(y) == len(yhat) == len(w)):
        raise ValueError(
            f"Length mismatch: y={len(y)}, yhat={len(yhat)}, weights={len(w)}"
        )
    if len(y) == 0:
        raise ValueError("Cannot evaluate an empty sample")
    if np.any(w <= 0):
        raise ValueError("Exposure weights must be strictly positive")
    return y, yhat, w


def weighted_gini(y, yhat, w):
    """
    Exposure-weighted Gini coefficient of a ranking.

    Policies are sorted by predicted pure premium (highest first) and the
    Lorenz curve of cumulative loss share against cumulative exposure share is
    integrated with the trapezoidal rule from the origin. Tied predictions form
    a single step of the curve, so a constant prediction vector scores exactly
    zero whatever the row order. Non-constant ties are likewise averaged over
    their orderings rather than ordered by row.
    """
    y, yhat, w = _as_arrays(y, yhat, w)

    order = np.argsort(-yhat, kind="stable")
    yhat = yhat[order]
    w = w[order]
    loss = y[order] * w

    if loss.sum() <= 0:
        return 0.0

    last_of_tie = np.r_[yhat[1:] != yhat[:-1], True]
    cum_w = np.cumsum(w)[last_of_tie]
    cum_loss = np.cumsum(loss)[last_of_tie]

    cw = np.r_[0.0, cum_w / cum_w[-1]]
    cy = np.r_[0.0, cum_loss / cum_loss[-1]]

    return float(np.sum((cy[1:] + cy[:-1]) * np.diff(cw)) - 1.0)


def normalized_gini(y, yhat, w):
    """Gini of the model relative to the oracle ranking by observed values."""
    oracle = weighted_gini(y, y, w)
    if oracle == 0:
        return 0.0
    return weighted_gini(y, yhat, w) / oracle


def weighted_mae(y, yhat, w):
    y, yhat, w = _as_arrays(y, yhat, w)
    return float(np.average(np.abs(y - yhat), weights=w))


def tweedie_deviance(y, yhat, w, power):
    """Mean canonical Tweedie unit deviance, weighted by exposure."""
    y, yhat, w = _as_arrays(y, yhat, w)
    return float(mean_tweedie_deviance(y, yhat, sample_weight=w, power=power))


def assign_deciles(yhat, groups=None):
    """
    Equal-count risk buckets 1..groups, ascending in predicted value.

    Ranks break ties by original row order; a policy of rank r out of n lands
    in bucket ceil(r * groups / n).
    """
    if groups is None:
        groups = config.RISK_BUCKET_COUNT
    if groups < 1:
        raise ValueError(f"groups must be >= 1, got {groups}")

    yhat = np.asarray(yhat, dtype=float)
    n = len(yhat)
    ranks = np.empty(n, dtype=np.int64)
    ranks[np.argsort(yhat, kind="stable")] = np.arange(1, n + 1)

    # Integer ceiling avoids float edge effects at exact bucket boundaries
    return (ranks * groups + n - 1) // n


def _decile_aggregates(y, yhat, w, groups):
    y, yhat, w = _as_arrays(y, yhat, w)
    frame = pd.DataFrame(
        {
            "decile": assign_deciles(yhat, groups),
            "exposure": w,
            "loss": y * w,
            "pred_loss": yhat * w,
        }
    )
    agg = (
        frame.groupby("decile")
        .agg(
            exposure=("exposure", "sum"),
            loss=("loss", "sum"),
            pred_loss=("pred_loss", "sum"),
            count=("exposure", "size"),
        )
        .reset_index()
    )
    agg["observed"] = agg["loss"] / agg["exposure"]
    agg["predicted"] = agg["pred_loss"] / agg["exposure"]
    agg["exposure_share"] = agg["exposure"] / agg["exposure"].sum()
    return agg


def _cumulative_share(values):
    cum = np.cumsum(np.asarray(values, dtype=float))
    if cum[-1] == 0:
        return np.zeros_like(cum)
    # Dividing by the last cumulative value pins the final share at exactly 1.0
    return cum / cum[-1]


def lift_table(y, yhat, w, groups=None):
    """
    Decile lift table, ordered from the highest- to the lowest-risk decile.

    Returns:
    --------
    pd.DataFrame with columns: decile, exposure, exposure_share, actual_pp,
    pred_pp, count, cum_exp, cum_loss, lift
    """
    agg = _decile_aggregates(y, yhat, w, groups)
    agg = agg.sort_values("decile", ascending=False).reset_index(drop=True)

    agg["cum_exp"] = _cumulative_share(agg["exposure"])
    agg["cum_loss"] = _cumulative_share(agg["loss"])
    agg["lift"] = agg["cum_loss"] / agg["cum_exp"]

    agg = agg.rename(columns={"observed": "actual_pp", "predicted": "pred_pp"})
    return agg[
        [
            "decile",
            "exposure",
            "exposure_share",
            "actual_pp",
            "pred_pp",
            "count",
            "cum_exp",
            "cum_loss",
            "lift",
        ]
    ]


def calibration_table(y, yhat, w, groups=None):
    """
    Decile calibration table (observed vs predicted pure premium), ascending.
    """
    agg = _decile_aggregates(y, yhat, w, groups)
    agg = agg.sort_values("decile").reset_index(drop=True)

    agg["cum_exp"] = _cumulative_share(agg["exposure"])

    agg = agg.rename(columns={"observed": "obs", "predicted": "pred"})
    return agg[["decile", "exposure", "exposure_share", "obs", "pred", "count", "cum_exp"]]


def evaluate_predictions(y, yhat, w, power, groups=None):
    """
    Computes the metric row plus lift and calibration tables for one model.

    Returns:
    --------
    (dict, pd.DataFrame, pd.DataFrame): metrics, lift table, calibration table
    """
    metrics = {
        "wmae": weighted_mae(y, yhat, w),
        "deviance": tweedie_deviance(y, yhat, w, power),
        "gini": weighted_gini(y, yhat, w),
        "normalized_gini": normalized_gini(y, yhat, w),
    }
    return metrics, lift_table(y, yhat, w, groups), calibration_table(y, yhat, w, groups)


def evaluate_samples(samples, power, models=None, groups=None):
    """
    Evaluates every (sample, model) pair.

    Parameters:
    -----------
    samples : dict
        Maps a sample name (e.g. 'train', 'test') to a scored DataFrame holding
        PurePrem, Exposure and one 'pred_<model>' column per model
    power : float
        Tweedie power used for the deviance
    models : list of str, optional
        Model names (default: config.MODEL_NAMES)

    Returns:
    --------
    (pd.DataFrame, pd.DataFrame, pd.DataFrame): metrics, lift, calibration,
    each tagged with 'model' and 'sample' columns
    """
    if models is None:
        models = config.MODEL_NAMES

    metric_rows, lifts, cals = [], [], []
    for sample_name, df in samples.items():
        for model in models:
            metrics, lift, cal = evaluate_predictions(
                df[config.TARGET],
                df[f"pred_{model}"],
                df[config.EXPOSURE],
                power,
                groups,
            )
            metric_rows.append({"model": model, "sample": sample_name, **metrics})
            lifts.append(lift.assign(model=model, sample=sample_name))
            cals.append(cal.assign(model=model, sample=sample_name))
            logger.info(
                "%-5s %-3s gini=%.4f norm_gini=%.4f deviance=%.4f wmae=%.2f",
                sample_name,
                model,
                metrics["gini"],
                metrics["normalized_gini"],
                metrics["deviance"],
                metrics["wmae"],
            )

    return (
        pd.DataFrame(metric_rows),
        pd.concat(lifts, ignore_index=True),
        pd.concat(cals, ignore_index=True),
    )
