"""
Row generation and adjacency validation.
"""

from typing import List, Optional, Sequence, Tuple

from config import OUTCOME_KNIGHT_SAVE, OUTCOME_ROUND_FAILED, OUTCOME_SAFE
from deck import CardSource
from models import Card, Row, RowDraw


def touching_positions(position: int, previous_len: int) -> List[int]:
    """
    Previous-row indices touched by `position` in the next row:
      - position 0 touches [0],
      - the last position touches the previous row's last index,
      - interior positions touch [position - 1, position].
    """
    return [i for i in (position - 1, position) if 0 <= i < previous_len]


def find_first_duplicate(row: Sequence[Card], previous_row: Sequence[Card]) -> Optional[Tuple[int, int]]:
    """
    Scan the new row left to right and return (new_index, previous_index) of
    the first card whose value equals a card it touches, or None.
    Knights are wild and never form a duplicate.
    """
    for j, card in enumerate(row):
        if card.is_knight:
            continue
        for i in touching_positions(j, len(previous_row)):
            above = previous_row[i]
            if not above.is_knight and above.value == card.value:
                return j, i
    return None


def draw_cards(source: CardSource, count: int) -> Row:
    """Draw up to `count` cards; fewer if the source runs out."""
    cards = []
    for _ in range(count):
        card = source.draw()
        if card is None:
            break
        cards.append(card)
    return tuple(cards)


def _mark_failed(row: Row, previous_row: Row, dup: Tuple[int, int]) -> Tuple[Row, Row]:
    j, i = dup
    new_row = list(row)
    new_prev = list(previous_row)
    new_row[j] = new_row[j].annotate(failed=True)
    new_prev[i] = new_prev[i].annotate(failed=True)
    return tuple(new_row), tuple(new_prev)


def evaluate_row(row: Row, previous_row: Row, savior: Optional[Card]) -> RowDraw:
    """
    Classify an already drawn row against the row above it.

    Order of checks:
      1) any Knight in the row -> whole row knight-saved,
      2) no previous row -> safe,
      3) first duplicate -> rescue with the savior if held, else fail.
    Only one duplicate pair is resolved; after a rescue a remaining duplicate
    fails the round. A Knight savior brings the knight rule into the row.
    """
    if any(c.is_knight for c in row):
        saved = tuple(c.annotate(knight_saved=True) for c in row)
        return RowDraw(saved, previous_row, OUTCOME_KNIGHT_SAVE, savior)

    if not previous_row:
        return RowDraw(row, previous_row, OUTCOME_SAFE, savior)

    dup = find_first_duplicate(row, previous_row)
    if dup is None:
        return RowDraw(row, previous_row, OUTCOME_SAFE, savior)

    if savior is None:
        failed_row, failed_prev = _mark_failed(row, previous_row, dup)
        return RowDraw(failed_row, failed_prev, OUTCOME_ROUND_FAILED, None)

    # Rescue: swap the savior in at the failing position and rescan once
    rescued = list(row)
    rescued[dup[0]] = savior.annotate(replaced=True)
    rescued_row = tuple(rescued)

    if savior.is_knight:
        saved = tuple(c.annotate(knight_saved=True) for c in rescued_row)
        return RowDraw(saved, previous_row, OUTCOME_KNIGHT_SAVE, None, rescued=True)

    second = find_first_duplicate(rescued_row, previous_row)
    if second is not None:
        failed_row, failed_prev = _mark_failed(rescued_row, previous_row, second)
        return RowDraw(failed_row, failed_prev, OUTCOME_ROUND_FAILED, None, rescued=True)

    return RowDraw(rescued_row, previous_row, OUTCOME_SAFE, None, rescued=True)


def draw_row(source: CardSource, previous_row: Row, row_index: int, savior: Optional[Card]) -> RowDraw:
    """Draw `row_index + 1` cards and validate them against `previous_row`."""
    if row_index < 0:
        raise ValueError(f"row_index must be non-negative, got {row_index}")
    row = draw_cards(source, row_index + 1)
    return evaluate_row(row, previous_row, savior)
