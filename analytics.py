"""
Decision support: next-row risk, draw-versus-cash-out value, strategy tables.
"""

import random
from typing import Dict, Optional

import pandas as pd

from config import (
    DEFAULT_BET,
    MONTE_CARLO_SIMULATIONS,
    MONTE_CARLO_SIMULATIONS_NEXT_ROW,
    OUTCOME_KNIGHT_SAVE,
    OUTCOME_ROUND_FAILED,
    STATUS_IN_PROGRESS,
    STRATEGY_MAX_ROWS,
)
from engine import TowerEngine
from scoring import compute_payout
from simulation import simulate_strategy, simulate_survival


def cash_out_value(engine: TowerEngine) -> Optional[int]:
    """Payout if the player cashed out right now, or None when not allowed."""
    snap = engine.snapshot()
    if snap.status != STATUS_IN_PROGRESS or not snap.board or snap.draw_pending:
        return None
    return compute_payout(snap.bet, snap.current_multiplier, snap.last_row_value)


def estimate_next_row(
    engine: TowerEngine,
    n_samples: int = MONTE_CARLO_SIMULATIONS_NEXT_ROW,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """
    Monte Carlo over the unseen deck order: draw one more row from a copy of
    the live round and record what happens.

    Returns:
      - p_fail: probability the next row fails the round
      - p_knight: probability the next row is knight-saved
      - p_rescue: probability the savior card is needed
      - expected_payout: mean payout if cashing out right after the next row
        (0 for a failed row)
    """
    snap = engine.snapshot()
    if snap.status != STATUS_IN_PROGRESS or snap.draw_pending:
        raise ValueError("next-row estimates need a round in progress with no pending draw")
    if snap.cards_remaining == 0:
        raise ValueError("the deck is exhausted")
    if n_samples <= 0:
        raise ValueError(f"n_samples must be positive, got {n_samples}")

    rng = random.Random(seed)
    fails = knights = rescues = 0
    payout_sum = 0

    for _ in range(n_samples):
        trial = engine.clone(shuffle_rng=rng)
        row_result = trial.draw_row().value
        if row_result.outcome == OUTCOME_ROUND_FAILED:
            fails += 1
        else:
            payout_sum += trial.cash_out().value
        if row_result.outcome == OUTCOME_KNIGHT_SAVE:
            knights += 1
        if row_result.rescued:
            rescues += 1

    return {
        "p_fail": fails / n_samples,
        "p_knight": knights / n_samples,
        "p_rescue": rescues / n_samples,
        "expected_payout": payout_sum / n_samples,
    }


def compute_draw_ev(engine: TowerEngine, estimate: Dict[str, float]) -> Optional[float]:
    """
    Expected gain of drawing one more row and then cashing out, compared with
    cashing out now:
        EV(draw) = E[payout after next row] - payout now.
    None when cashing out is not currently possible (empty board).
    """
    now = cash_out_value(engine)
    if now is None:
        return None
    return estimate["expected_payout"] - now


def strategy_table(
    max_rows: int = STRATEGY_MAX_ROWS,
    n_rounds: int = MONTE_CARLO_SIMULATIONS,
    bet: int = DEFAULT_BET,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """One row per "cash out after N rows" strategy, N = 1..max_rows."""
    records = []
    for target in range(1, max_rows + 1):
        # Offset the seed per strategy so strategies are not sampled in lockstep
        stats = simulate_strategy(target, n_rounds=n_rounds, bet=bet, seed=None if seed is None else seed + target)
        records.append(
            {
                "Cash out after": target,
                "Bust rate": stats["bust_rate"],
                "Savior used": stats["rescue_rate"],
                "Mean payout": stats["mean_payout"],
                "Return per unit": stats["mean_return"],
            }
        )
    return pd.DataFrame(records)


def survival_table(
    max_rows: int = STRATEGY_MAX_ROWS,
    n_rounds: int = MONTE_CARLO_SIMULATIONS,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Share of rounds in which each row stands."""
    survived = simulate_survival(max_rows, n_rounds=n_rounds, seed=seed)
    return pd.DataFrame(
        [
            {"Row": row_index + 1, "P(row stands)": survived[row_index] / n_rounds}
            for row_index in range(max_rows)
        ]
    )
