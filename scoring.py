"""
Row scoring, running multiplier and cash-out payout.
"""

from typing import Iterable, Tuple

from models import Card


def score_row(row: Iterable[Card]) -> Tuple[int, int]:
    """
    Returns (row_value, row_multiplier):
      - row_value: sum of card values (Knights count 0).
      - row_multiplier: the row length when every non-Knight card shares one
        value, otherwise 1. A row of only Knights scores 1.
    """
    cards = list(row)
    row_value = sum(c.value for c in cards)
    non_zero = {c.value for c in cards if not c.is_knight}
    if len(non_zero) == 1:
        return row_value, len(cards)
    return row_value, 1


def fold_multiplier(current: int, row_multiplier: int) -> int:
    """Running maximum of per-row multipliers."""
    return max(current, row_multiplier)


def compute_payout(bet: int, multiplier: int, last_row_value: int) -> int:
    """
    Cash-out payout. Only the most recent row's value is added as a bonus;
    values of earlier rows are not accumulated.
    """
    return bet * multiplier + last_row_value
