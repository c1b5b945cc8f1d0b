"""
Card source: a shuffled, finite, depletable deck for one round.
"""

import random
from typing import Iterable, List, Optional

from config import CARD_VALUES, COPIES_PER_VALUE, DECK_SIZE, KNIGHT_COUNT, KNIGHT_VALUE
from models import Card


def make_deck() -> List[Card]:
    """Unshuffled deck: every numbered value ten times, then the Knights."""
    cards = [Card(value) for _ in range(COPIES_PER_VALUE) for value in CARD_VALUES]
    cards.extend(Card(KNIGHT_VALUE) for _ in range(KNIGHT_COUNT))
    return cards


class CardSource:
    """
    Cards are drawn from the end of the internal list, so the list is kept
    in reverse draw order.
    """

    def __init__(self, cards: List[Card]):
        assert len(cards) <= DECK_SIZE, "deck larger than a full deck"
        self._cards = cards

    @classmethod
    def from_values(cls, values: Iterable[int]) -> "CardSource":
        """Stacked source that deals `values` in the given order."""
        cards = [Card(v) for v in values]
        cards.reverse()
        return cls(cards)

    def draw(self) -> Optional[Card]:
        """Remove and return the top card, or None once the deck is exhausted."""
        if not self._cards:
            return None
        return self._cards.pop()

    def remaining(self) -> List[Card]:
        """Remaining cards in draw order."""
        return self._cards[::-1]

    def clone(self) -> "CardSource":
        return CardSource(self._cards[:])

    def shuffle(self, rng: random.Random) -> None:
        rng.shuffle(self._cards)

    def __len__(self) -> int:
        return len(self._cards)


def new_source(rng: Optional[random.Random] = None) -> CardSource:
    """Fresh 74-card source, uniformly shuffled (Fisher-Yates via Random.shuffle)."""
    source = CardSource(make_deck())
    source.shuffle(rng or random.Random())
    return source
