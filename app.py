from __future__ import annotations

import logging
import time
from pathlib import Path

import plotly.graph_objects as go
import streamlit as st

# Project modules (works when you run: PYTHONPATH=src streamlit run app.py)
from hedgesim.config import TRADE_LOT
from hedgesim.scores import JsonScoreStore
from hedgesim.session import INTRO_STEPS, HedgingSession, Phase, start_session

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")

SCORE_PATH = Path(__file__).resolve().parent / "data" / "best_score.json"

THEME_RED = "rgba(255, 77, 77, 0.90)"
THEME_GREEN = "rgba(16, 185, 129, 0.95)"
GRIDLINE = "rgba(255,255,255,0.08)"

# ----------------------------
# Streamlit page config
# ----------------------------
st.set_page_config(
    page_title="Delta Hedging Simulator",
    layout="wide",
)

st.title("QUANT_OS // Delta Hedging Simulator")


# ----------------------------
# Helpers
# ----------------------------
def _session() -> HedgingSession:
    if "session" not in st.session_state:
        st.session_state["session"] = start_session(store=JsonScoreStore(SCORE_PATH))
    return st.session_state["session"]


def _line_fig(y: list[float], title: str, ytitle: str, color: str):
    fig = go.Figure()
    fig.add_trace(go.Scatter(y=y, mode="lines", line=dict(color=color, width=2), fill="tozeroy"))
    fig.update_layout(
        title=title,
        height=320,
        margin=dict(l=20, r=20, t=50, b=20),
        showlegend=False,
    )
    fig.update_xaxes(showgrid=True, gridcolor=GRIDLINE, zeroline=False)
    fig.update_yaxes(title=ytitle, showgrid=True, gridcolor=GRIDLINE, zeroline=False)
    return fig


_INTRO_TEXT = {
    "OBJECTIVE: DELTA_NEUTRAL": (
        "Your portfolio has intrinsic **directional risk**.\n\n"
        "- **Delta positive (+)**: you are long, a price drop is a loss. Action: SELL SHARES\n"
        "- **Delta negative (−)**: you are short, a price rise is a loss. Action: BUY SHARES\n\n"
        "Keep net delta at **zero**."
    ),
    "WARNING: GAMMA_RISK": (
        "Time is your enemy. As expiration approaches (T → 0), **gamma** increases. "
        "Your delta will swing violently, and the market speeds up. Hedge faster."
    ),
}

session = _session()
view = session.view()

# ----------------------------
# Sidebar
# ----------------------------
with st.sidebar:
    st.markdown("### SESSION")
    st.caption(f"{view.scenario_name} · {view.difficulty}")
    st.metric("Best Score", f"${view.best_score:,.0f}")
    if st.button("New Session", use_container_width=True):
        session.reset()
        st.rerun()


# ----------------------------
# Intro
# ----------------------------
if view.phase == Phase.INTRO.value:
    title = INTRO_STEPS[view.intro_step]
    st.subheader(f"/// {title}")
    st.caption(f"STEP {view.intro_step + 1}/{len(INTRO_STEPS)}")

    if title == "SYSTEM_INIT":
        st.markdown(f"**{view.scenario_name}**\n\n{view.scenario_description}")
    else:
        st.markdown(_INTRO_TEXT[title])

    last = view.intro_step >= len(INTRO_STEPS) - 1
    if st.button("EXECUTE >>" if last else "NEXT >>"):
        if last:
            session.advance_to_active()
        else:
            session.next_intro_step()
        st.rerun()

# ----------------------------
# Game over
# ----------------------------
elif view.phase == Phase.GAME_OVER.value:
    st.subheader("/// EXPIRY REACHED")
    g1, g2 = st.columns(2)
    g1.metric("Final Liquidation Value", f"${view.liquidation_value:,.0f}")
    g2.metric("Best Score", f"${view.best_score:,.0f}")

    hist = session.history_frame()
    st.plotly_chart(
        _line_fig(hist["liquidation_value"].tolist(), "Liquidation Value by Day", "Value ($)", THEME_GREEN),
        use_container_width=True,
    )
    st.dataframe(hist, use_container_width=True)

# ----------------------------
# Active market
# ----------------------------
else:
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Price", f"${view.price_path[-1]:,.2f}")
    m2.metric("Net Delta", f"{view.net_delta:+,.1f}", "HEDGED" if view.is_hedged else "EXPOSED")
    m3.metric("Liquidation Value", f"${view.liquidation_value:,.0f}")
    m4.metric("Days Remaining", f"{view.days_remaining}")

    b1, b2, b3 = st.columns([1, 1, 2])
    if b1.button(f"SELL {TRADE_LOT}", use_container_width=True):
        session.trade(-TRADE_LOT)
        st.rerun()
    if b2.button(f"BUY {TRADE_LOT}", use_container_width=True):
        session.trade(TRADE_LOT)
        st.rerun()
    b3.caption(
        f"Shares: {view.shares_held:+,.0f} · Cash: ${view.cash:,.0f} · "
        f"Gamma: {view.gamma:+,.2f} · Tick: {view.tick_interval_ms:.0f}ms"
    )

    c1, c2 = st.columns(2)
    with c1:
        st.plotly_chart(_line_fig(view.price_path, "Underlying Price", "Price", THEME_RED), use_container_width=True)
    with c2:
        st.plotly_chart(_line_fig(view.pnl_history, "Liquidation Value", "Value ($)", THEME_GREEN), use_container_width=True)

    # one simulated day per rerun, paced by the session cadence
    time.sleep(view.tick_interval_ms / 1000.0)
    session.tick()
    st.rerun()
