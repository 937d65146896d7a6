"""
Lift and calibration charts from the evaluation outputs, plus the figure
builders used by the rate-change dashboard.

Run as a script after fit_models.py:
    python src/plots.py
"""

import logging

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.ticker import PercentFormatter

import config
from logging_utils import configure_logging

logger = logging.getLogger(__name__)


def get_figures_dir():
    """
    Returns the absolute path to the figures directory.
    Creates the directory if it doesn't exist.
    """
    if not config.FIGURES_DIR.exists():
        config.FIGURES_DIR.mkdir(parents=True, exist_ok=True)
        logger.info("Created directory: %s/", config.FIGURES_DIR)
    return config.FIGURES_DIR


def _finish(fig, filename, return_fig):
    fig.tight_layout()
    if return_fig:
        return fig
    if filename:
        fig.savefig(str(filename), dpi=config.PLOT_DPI, bbox_inches="tight")
        logger.info("Saved %s", filename)
    plt.close(fig)
    return None


def plot_cumulative_lift(lift, sample="test", filename=None, return_fig=False):
    """
    Cumulative loss share against cumulative exposure share, one line per model.

    Parameters:
    -----------
    lift : pd.DataFrame
        Lift table as written to outputs/lift.csv (model, sample, cum_exp, cum_loss)
    sample : str
        Which sample to plot (default: 'test')
    filename : str or Path, optional
        Where to save the chart
    return_fig : bool, default False
        If True, returns the matplotlib figure instead of saving
    """
    data = lift[lift["sample"] == sample]

    fig, ax = plt.subplots(figsize=(config.PLOT_FIGSIZE_WIDTH, config.PLOT_FIGSIZE_HEIGHT))

    linestyles = ["-", "--", "-.", ":"]
    for i, (model, grp) in enumerate(data.groupby("model", sort=True)):
        # Lift tables run from the riskiest decile down; prepend the origin
        ax.plot(
            [0.0] + grp["cum_exp"].tolist(),
            [0.0] + grp["cum_loss"].tolist(),
            linestyle=linestyles[i % len(linestyles)],
            marker="o",
            linewidth=2,
            label=model.upper(),
        )

    ax.plot([0, 1], [0, 1], "k-", linewidth=1, label="Random")
    ax.set_xlabel("Cumulative exposure")
    ax.set_ylabel("Cumulative loss share")
    ax.set_title(f"Cumulative lift - {sample}", fontweight="bold")
    ax.set_xlim([0, 1])
    ax.set_ylim([0, 1])
    ax.grid(True, linestyle="--", alpha=0.5)
    ax.legend(loc="lower right")

    return _finish(fig, filename, return_fig)


def plot_calibration(calibration, sample="test", filename=None, return_fig=False):
    """
    Observed vs predicted pure premium per decile, one marker shape per model.
    """
    data = calibration[calibration["sample"] == sample]

    fig, ax = plt.subplots(figsize=(config.PLOT_FIGSIZE_WIDTH, config.PLOT_FIGSIZE_HEIGHT))

    markers = ["o", "^", "s", "D"]
    for i, (model, grp) in enumerate(data.groupby("model", sort=True)):
        ax.scatter(grp["obs"], grp["pred"], marker=markers[i % len(markers)], s=50, label=model.upper())

    upper = max(data["obs"].max(), data["pred"].max()) if len(data) else 1.0
    ax.plot([0, upper], [0, upper], "k-", linewidth=1)
    ax.set_xlabel("Observed pure premium")
    ax.set_ylabel("Predicted pure premium")
    ax.set_title(f"Calibration by decile - {sample}", fontweight="bold")
    ax.grid(True, linestyle="--", alpha=0.5)
    ax.legend(loc="upper left")

    return _finish(fig, filename, return_fig)


def plot_premium_change_histogram(policies, rate_pct):
    """
    Distribution of per-policy premium change for the dashboard.

    A flat rate change puts every policy in the same bin; the dashed line marks
    the requested rate.
    """
    changes = policies["premium_change"].dropna()
    rate = rate_pct / 100

    # Explicit range: a flat change has zero spread and numpy cannot bin it alone
    lo = min(changes.min(), rate) if len(changes) else rate
    hi = max(changes.max(), rate) if len(changes) else rate
    pad = max(config.HISTOGRAM_RANGE_PAD, (hi - lo) * 0.05)

    fig, ax = plt.subplots(figsize=(config.PLOT_FIGSIZE_WIDTH, config.PLOT_FIGSIZE_HEIGHT))

    ax.hist(
        changes,
        bins=config.HISTOGRAM_BINS,
        range=(lo - pad, hi + pad),
        color="steelblue",
        alpha=0.7,
        edgecolor="white",
    )
    ax.axvline(x=rate, color="red", linestyle="--", linewidth=1.5, label=f"{rate_pct:+g}%")

    ax.xaxis.set_major_formatter(PercentFormatter(xmax=1.0, decimals=1))
    ax.set_xlabel("Policy premium change")
    ax.set_ylabel("Count")
    ax.set_title(f"Premium Change Distribution ({rate_pct:+g}% rate change)", fontweight="bold")
    ax.legend(loc="upper right")
    ax.grid(axis="y", linestyle="--", alpha=0.5)

    fig.tight_layout()
    return fig


def plot_calibration_scatter(calibration, model):
    """
    Decile calibration of one model for the dashboard.
    """
    fig, ax = plt.subplots(figsize=(config.PLOT_FIGSIZE_WIDTH, config.PLOT_FIGSIZE_HEIGHT))

    ax.scatter(calibration["pred"], calibration["obs"], s=80, color="steelblue", alpha=0.8)

    upper = max(calibration["obs"].max(), calibration["pred"].max())
    ax.plot([0, upper], [0, upper], linestyle="--", color="red", linewidth=1)

    ax.set_xlabel("Predicted Pure Premium")
    ax.set_ylabel("Observed Pure Premium")
    ax.set_title(f"Model Calibration: {model.upper()}", fontweight="bold")
    ax.grid(True, linestyle="--", alpha=0.5)

    fig.tight_layout()
    return fig


def main():
    configure_logging()

    lift = pd.read_csv(config.OUTPUTS_DIR / config.LIFT_FILE)
    cal = pd.read_csv(config.OUTPUTS_DIR / config.CALIBRATION_FILE)

    figures_dir = get_figures_dir()
    plot_cumulative_lift(lift, sample="test", filename=figures_dir / "lift_test.png")
    plot_calibration(cal, sample="test", filename=figures_dir / "calibration_test.png")

    logger.info("Saved plots in %s/", figures_dir)


if __name__ == "__main__":
    main()
