"""
Main Streamlit application.
"""

import logging
import time

import streamlit as st

from config import (
    BET_CLEAR_DELAY,
    DEFAULT_BET,
    MONTE_CARLO_SIMULATIONS,
    MONTE_CARLO_SIMULATIONS_NEXT_ROW,
    ROW_SETTLE_DELAY,
    STATUS_IN_PROGRESS,
    STRATEGY_MAX_ROWS,
)
from engine import TowerEngine
from analytics import (
    cash_out_value,
    compute_draw_ev,
    estimate_next_row,
    strategy_table,
    survival_table,
)

from ui import (
    print_rules,
    render_next_row_estimate,
    render_row_result,
    render_savior,
    render_status,
    render_strategy_table,
    render_survival_chart,
    render_tower,
)

logger = logging.getLogger(__name__)


@st.cache_data(show_spinner=False)
def cached_strategy_tables(max_rows: int, n_rounds: int):
    return strategy_table(max_rows, n_rounds=n_rounds, seed=0), survival_table(max_rows, n_rounds=n_rounds, seed=0)


def reset_session() -> None:
    st.session_state["engine"] = TowerEngine()
    st.session_state["last_row"] = None
    st.session_state["last_payout"] = None
    st.session_state["rejection"] = None
    logger.info("New session with balance %d", st.session_state["engine"].balance)


def report(result) -> bool:
    """Remember a rejection for display; returns whether the action went through."""
    st.session_state["rejection"] = None if result.ok else result.message
    return result.ok


def run_app() -> None:
    """Run the main Streamlit application."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    st.set_page_config(page_title="Fortune's Tower", layout="wide")
    st.title("Fortune's Tower")

    # Initialize session state
    if "engine" not in st.session_state:
        reset_session()

    engine: TowerEngine = st.session_state["engine"]

    with st.expander("Rules", expanded=False):
        print_rules()

    # Controls
    col_bet, col_start, col_draw, col_cash, col_reset = st.columns([1.4, 1, 1, 1, 1])

    with col_bet:
        amount = st.number_input("Bet amount", min_value=1, value=DEFAULT_BET, step=1)
        if st.button("💰 Place bet"):
            result = engine.begin_place_bet(int(amount))
            if report(result) and engine.snapshot().clear_pending:
                with st.spinner("Clearing the board..."):
                    time.sleep(BET_CLEAR_DELAY)
                report(engine.settle_place_bet())
            st.session_state["last_row"] = None

    with col_start:
        if st.button("▶️ Start round"):
            if report(engine.start_game()):
                st.session_state["last_payout"] = None

    with col_draw:
        if st.button("🃏 Draw row"):
            if report(engine.begin_draw_row()):
                with st.spinner("Turning cards..."):
                    time.sleep(ROW_SETTLE_DELAY)
                result = engine.settle_draw_row()
                if report(result):
                    st.session_state["last_row"] = result.value

    with col_cash:
        if st.button("🏦 Cash out"):
            result = engine.cash_out()
            if report(result):
                st.session_state["last_payout"] = result.value

    with col_reset:
        if st.button("🔁 Reset game"):
            reset_session()
            engine = st.session_state["engine"]

    if st.session_state["rejection"]:
        st.warning(st.session_state["rejection"])

    snap = engine.snapshot()
    render_status(snap)

    if st.session_state["last_row"] is not None:
        render_row_result(st.session_state["last_row"])
    if st.session_state["last_payout"] is not None:
        st.success(f"Cashed out **{st.session_state['last_payout']}**")

    # Layout: tower + dashboards
    board_col, metrics_col = st.columns([1.4, 1.6])

    with board_col:
        st.subheader("Tower")
        render_tower(snap)
        render_savior(snap)

    with metrics_col:
        st.subheader("Dashboards")

        if snap.status == STATUS_IN_PROGRESS and snap.cards_remaining > 0:
            estimate = estimate_next_row(engine, n_samples=MONTE_CARLO_SIMULATIONS_NEXT_ROW)
            render_next_row_estimate(estimate, cash_out_value(engine), compute_draw_ev(engine, estimate))
            st.caption(f"Estimated via Monte Carlo with {MONTE_CARLO_SIMULATIONS_NEXT_ROW} reshuffles of the unseen deck.")

        strategies, survival = cached_strategy_tables(STRATEGY_MAX_ROWS, MONTE_CARLO_SIMULATIONS)
        render_strategy_table(strategies)
        render_survival_chart(survival)
        st.caption(f"Strategy stats estimated via Monte Carlo with {MONTE_CARLO_SIMULATIONS} rounds each.")


if __name__ == "__main__":
    run_app()
