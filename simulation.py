"""
Headless round simulation for cash-out strategies.
"""

import random
from typing import Dict, Optional
from collections import Counter

from config import DEFAULT_BET, OUTCOME_KNIGHT_SAVE, OUTCOME_ROUND_FAILED, STATUS_IN_PROGRESS
from engine import TowerEngine


def play_round(target_rows: int, bet: int = DEFAULT_BET, rng: Optional[random.Random] = None) -> Dict:
    """
    Play one round with the strategy "cash out once `target_rows` rows stand".
    If the deck runs out first, cash out with what is on the board.
    Returns:
      - payout: amount returned to the player (0 on a failed round)
      - rows: rows drawn, the failing row included
      - failed / rescued: whether the round busted / used the savior
      - knight_saves: number of knight-saved rows
    """
    if target_rows < 1:
        raise ValueError(f"target_rows must be at least 1, got {target_rows}")
    if bet <= 0:
        raise ValueError(f"bet must be positive, got {bet}")

    engine = TowerEngine(balance=bet, rng=rng)
    placed = engine.place_bet(bet)
    if not placed.ok:
        raise ValueError(f"bet {bet!r} rejected: {placed.reason}")
    started = engine.start_game()
    assert started.ok, f"round did not start: {started.reason}"

    info = {"payout": 0, "rows": 0, "failed": False, "rescued": False, "knight_saves": 0}

    while info["rows"] < target_rows:
        result = engine.draw_row()
        if not result.ok:
            # deck exhausted
            break
        row_result = result.value
        info["rows"] += 1
        info["rescued"] = info["rescued"] or row_result.rescued
        if row_result.outcome == OUTCOME_KNIGHT_SAVE:
            info["knight_saves"] += 1
        if row_result.outcome == OUTCOME_ROUND_FAILED:
            info["failed"] = True
            return info

    if engine.status == STATUS_IN_PROGRESS:
        info["payout"] = engine.cash_out().value
    return info


def simulate_strategy(
    target_rows: int,
    n_rounds: int = 2000,
    bet: int = DEFAULT_BET,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """
    Monte Carlo: estimate how the "cash out after `target_rows` rows" strategy
    performs.

    Returns:
      - bust_rate: share of rounds that failed
      - rescue_rate: share of rounds where the savior card was used
      - mean_payout: average payout per round
      - mean_return: average net result per unit staked
    """
    if n_rounds <= 0:
        raise ValueError(f"n_rounds must be positive, got {n_rounds}")
    if bet <= 0:
        raise ValueError(f"bet must be positive, got {bet}")

    rng = random.Random(seed)
    busts = 0
    rescues = 0
    payout_sum = 0

    for _ in range(n_rounds):
        info = play_round(target_rows, bet=bet, rng=rng)
        busts += info["failed"]
        rescues += info["rescued"]
        payout_sum += info["payout"]

    mean_payout = payout_sum / n_rounds
    return {
        "target_rows": target_rows,
        "bust_rate": busts / n_rounds,
        "rescue_rate": rescues / n_rounds,
        "mean_payout": mean_payout,
        "mean_return": (mean_payout - bet) / bet,
    }


def simulate_survival(max_rows: int, n_rounds: int = 2000, seed: Optional[int] = None) -> Counter:
    """
    Count, for each row index, how many of `n_rounds` rounds had that row
    stand (i.e. reached it without failing).
    """
    if n_rounds <= 0:
        raise ValueError(f"n_rounds must be positive, got {n_rounds}")

    rng = random.Random(seed)
    survived = Counter()
    for _ in range(n_rounds):
        info = play_round(max_rows, rng=rng)
        standing = info["rows"] - 1 if info["failed"] else info["rows"]
        for row_index in range(standing):
            survived[row_index] += 1
    return survived
