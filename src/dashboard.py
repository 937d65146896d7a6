"""
Streamlit Dashboard: Motor Pricing Rate Change Simulator

Applies a uniform rate change to the GLM or GBM premium of the scored test
portfolio and shows the resulting loss ratios, premium change distribution
and decile calibration.

    streamlit run src/dashboard.py
"""

import logging

import matplotlib.pyplot as plt
import streamlit as st

import config
import plots
import rate_simulator
from logging_utils import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

# Page Configuration
st.set_page_config(
    page_title="Rate Change Simulator", layout="wide", initial_sidebar_state="expanded"
)

# Metric cards - dark & white
st.markdown(
    """
    <style>
    div[data-testid="stMetric"] {
        background-color: #0f172a;
        border: 1px solid #1e293b;
        padding: 15px 20px;
        border-radius: 8px;
    }

    div[data-testid="stMetric"] > div {
        color: #ffffff !important;
    }

    div[data-testid="stMetricLabel"] {
        font-size: 0.875rem;
        color: #94a3b8;
        text-transform: uppercase;
        letter-spacing: 0.05em;
    }
    </style>
""",
    unsafe_allow_html=True,
)

st.title("Motor Pricing - Rate Change Simulator")


# ============================================================================
# CACHED DATA
# ============================================================================


@st.cache_data
def load_scored_portfolio():
    """
    Load the scored test set written by fit_models.py.
    Cached so the CSV is only read once per session.
    """
    return rate_simulator.load_scored()


scored_path = config.OUTPUTS_DIR / config.SCORED_FILE
if not scored_path.exists():
    st.error(f"Scored portfolio not found at {scored_path}. Run `python src/fit_models.py` first.")
    st.stop()

scored = load_scored_portfolio()

# ============================================================================
# SIDEBAR - Pricing Controls
# ============================================================================

st.sidebar.header("Pricing Controls")

model_choice = st.sidebar.selectbox(
    "Model for pricing",
    options=config.MODEL_NAMES,
    format_func=str.upper,
    index=0,
)

rate_pct = st.sidebar.slider(
    "Global rate change percent",
    min_value=config.RATE_CHANGE_MIN,
    max_value=config.RATE_CHANGE_MAX,
    value=0,
    step=config.RATE_CHANGE_STEP,
)

target_lr = st.sidebar.number_input(
    "Target loss ratio",
    min_value=config.TARGET_LOSS_RATIO_MIN,
    max_value=config.TARGET_LOSS_RATIO_MAX,
    value=config.TARGET_LOSS_RATIO_DEFAULT,
    step=config.TARGET_LOSS_RATIO_STEP,
)

apply_clicked = st.sidebar.button("Apply", type="primary")

# Results only refresh on Apply (and once on first load)
if apply_clicked or "simulation" not in st.session_state:
    logger.info("Calculating with rate %+d%%, model %s", rate_pct, model_choice)
    st.session_state["simulation"] = rate_simulator.simulate_rate_change(
        scored, model=model_choice, rate_pct=rate_pct, target_lr=target_lr
    )
    st.session_state["simulation_inputs"] = (model_choice, rate_pct)

result = st.session_state["simulation"]
current_model, current_rate = st.session_state["simulation_inputs"]

# ============================================================================
# PORTFOLIO SUMMARY
# ============================================================================

st.subheader("Portfolio summary")

col1, col2, col3, col4 = st.columns(4)

with col1:
    st.metric(label="Base Premium", value=f"€{result['total_prem_base'] / 1e6:.1f}M")

with col2:
    st.metric(
        label="New Premium",
        value=f"€{result['total_prem_new'] / 1e6:.1f}M",
        delta=f"{current_rate:+d}%",
    )

with col3:
    st.metric(label="Base Loss Ratio", value=f"{result['lr_base']:.3f}")

with col4:
    st.metric(
        label="New Loss Ratio",
        value=f"{result['lr_new']:.3f}",
        delta=f"{result['lr_new'] - result['lr_base']:+.3f}",
        delta_color="inverse",
    )

st.text(result["summary_text"])

# ============================================================================
# CHARTS
# ============================================================================

col_left, col_right = st.columns(2)

with col_left:
    st.subheader("Premium change distribution")
    hist_fig = plots.plot_premium_change_histogram(result["policies"], current_rate)
    st.pyplot(hist_fig, use_container_width=True)
    plt.close(hist_fig)

with col_right:
    st.subheader("Calibration by decile")
    cal_fig = plots.plot_calibration_scatter(result["calibration"], current_model)
    st.pyplot(cal_fig, use_container_width=True)
    plt.close(cal_fig)

st.markdown("---")
st.markdown(
    "**Tip:** A uniform rate change moves every policy by the same percentage, so "
    "the histogram collapses to a single bar and the new loss ratio is the base "
    "loss ratio divided by the rate multiplier."
)
