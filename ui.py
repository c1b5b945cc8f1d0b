"""
UI components and visualization helpers.
"""

from typing import Dict, Optional

import pandas as pd
import plotly.express as px
import streamlit as st

from config import (
    CARD_LABELS,
    CARD_STATE_COLORS,
    COPIES_PER_VALUE,
    DECK_SIZE,
    KNIGHT_COUNT,
    OUTCOME_KNIGHT_SAVE,
    OUTCOME_ROUND_FAILED,
)
from models import RowResult, TowerSnapshot


def print_rules() -> None:
    """Display the rules of the game."""
    st.markdown("### How to play")
    st.write(f"The deck holds {DECK_SIZE} cards: values 1-7, {COPIES_PER_VALUE} of each, plus {KNIGHT_COUNT} Knights.")
    st.write("- Place a bet, then start the round. One card is set aside as your savior card.")
    st.write("- Each draw adds a row one card wider than the last.")
    st.write("- A card may not share its value with a card it touches in the row above.")
    st.write("- A Knight anywhere in a row protects the whole row.")
    st.write("- The first clash is covered by the savior card, once per round. Any other clash ends the round.")
    st.info(
        "Multiplier: a row whose numbered cards all match pays its length as a multiplier; "
        "the round keeps the highest multiplier seen.\n"
        "Cash out pays bet x multiplier + the value of the last row drawn."
    )


def render_status(snap: TowerSnapshot) -> None:
    """Headline numbers for the current round."""
    col_status, col_balance, col_bet, col_mult, col_last = st.columns(5)
    col_status.metric("Status", snap.status.replace("_", " ").title())
    col_balance.metric("Balance", snap.balance)
    col_bet.metric("Bet", snap.bet)
    col_mult.metric("Multiplier", f"{snap.current_multiplier}x")
    col_last.metric("Last row value", snap.last_row_value)


def render_savior(snap: TowerSnapshot) -> None:
    st.markdown("#### Savior card")
    if snap.savior is None:
        st.write("*None held*")
    else:
        st.write(f"**{CARD_LABELS[snap.savior.value]}**")
    st.caption(f"{snap.cards_remaining} cards left in the deck")


def render_tower(snap: TowerSnapshot) -> None:
    """Plot the tower using Plotly: one marker per card, laid out as a pyramid."""
    rows = []
    last_index = len(snap.board) - 1
    for r, row in enumerate(snap.board):
        for j, card in enumerate(row):
            state = "pending" if snap.draw_pending and r == last_index else card.state
            rows.append(
                {
                    "x": j - r / 2,
                    "row": r,
                    "label": CARD_LABELS[card.value],
                    "state": state,
                }
            )

    if not rows:
        st.info("No cards on the board.")
        return

    df = pd.DataFrame(rows)
    fig = px.scatter(
        df,
        x="x",
        y="row",
        color="state",
        text="label",
        color_discrete_map=CARD_STATE_COLORS,
        hover_data={"x": False, "row": True, "label": True, "state": True},
    )
    fig.update_traces(
        marker=dict(size=36, symbol="square", line=dict(width=1, color="black")),
        textfont=dict(color="white", size=12),
    )
    fig.update_layout(
        xaxis=dict(visible=False),
        yaxis=dict(visible=False, autorange="reversed"),
        height=max(250, 60 * (last_index + 2)),
        margin=dict(l=10, r=10, t=30, b=10),
        legend_title_text="Card",
    )
    st.plotly_chart(fig, width="stretch")


def render_row_result(row_result: RowResult) -> None:
    values = ", ".join(CARD_LABELS[c.value] for c in row_result.row)
    msg = f"Row {row_result.row_index + 1}: [{values}] worth **{row_result.row_value}**, x{row_result.row_multiplier}"
    if row_result.outcome == OUTCOME_ROUND_FAILED:
        st.error(msg + " - clash! The round is lost.")
    elif row_result.outcome == OUTCOME_KNIGHT_SAVE:
        st.success(msg + " - a Knight protects the row.")
    elif row_result.rescued:
        st.warning(msg + " - rescued by the savior card.")
    else:
        st.markdown(msg)


def render_next_row_estimate(estimate: Dict[str, float], cash_now: Optional[int], draw_ev: Optional[float]) -> None:
    """Render the risk of drawing one more row."""
    st.markdown("#### Next row")
    data = [
        {"Measure": "P(round fails)", "Value": estimate["p_fail"]},
        {"Measure": "P(knight saves row)", "Value": estimate["p_knight"]},
        {"Measure": "P(savior needed)", "Value": estimate["p_rescue"]},
        {"Measure": "E[payout after next row]", "Value": estimate["expected_payout"]},
    ]
    if cash_now is not None:
        data.append({"Measure": "Payout if cashing out now", "Value": float(cash_now)})
    df = pd.DataFrame(data)
    st.dataframe(df, width="stretch", hide_index=True)
    if draw_ev is not None:
        st.metric("Draw EV vs cash out", f"{draw_ev:+.2f}")


def render_strategy_table(df: pd.DataFrame) -> None:
    st.markdown("#### Cash-out strategies")
    st.dataframe(df, width="stretch", hide_index=True)


def render_survival_chart(df: pd.DataFrame) -> None:
    """Bar chart of how often each row stands."""
    st.markdown("#### Row survival")
    fig = px.bar(df, x="Row", y="P(row stands)")
    fig.update_layout(
        xaxis=dict(dtick=1),
        yaxis=dict(range=[0, 1]),
        height=300,
        margin=dict(l=10, r=10, t=30, b=10),
    )
    st.plotly_chart(fig, width="stretch")
