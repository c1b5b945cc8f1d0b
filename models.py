"""
Data models and state representations.
"""

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from config import KNIGHT_VALUE, REJECTION_MESSAGES


@dataclass(frozen=True)
class Card:
    """A single card. Annotating a card produces a new record."""
    value: int
    knight_saved: bool = False
    replaced: bool = False
    failed: bool = False

    @property
    def is_knight(self) -> bool:
        return self.value == KNIGHT_VALUE

    @property
    def state(self) -> str:
        if self.failed:
            return "failed"
        if self.replaced:
            return "replaced"
        if self.knight_saved:
            return "knight_saved"
        return "plain"

    def annotate(self, **flags) -> "Card":
        return replace(self, **flags)


Row = Tuple[Card, ...]


@dataclass(frozen=True)
class RowDraw:
    """Everything the validator decided about one freshly drawn row."""
    row: Row
    previous_row: Row
    outcome: str
    savior: Optional[Card]
    rescued: bool = False


@dataclass(frozen=True)
class RowResult:
    row: Row
    outcome: str
    row_index: int
    row_value: int
    row_multiplier: int
    rescued: bool = False


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a player action: accepted with a value, or rejected with a reason code."""
    ok: bool
    reason: Optional[str] = None
    value: Any = None

    @classmethod
    def accepted(cls, value: Any = None) -> "ActionResult":
        return cls(ok=True, value=value)

    @classmethod
    def rejected(cls, reason: str) -> "ActionResult":
        return cls(ok=False, reason=reason)

    @property
    def message(self) -> str:
        if self.ok:
            return ""
        return REJECTION_MESSAGES.get(self.reason, self.reason)


@dataclass(frozen=True)
class TowerSnapshot:
    """Read-only view of the engine for rendering."""
    status: str
    balance: int
    bet: int
    current_multiplier: int
    last_row_value: int
    board: Tuple[Row, ...]
    savior: Optional[Card]
    cards_remaining: int
    draw_pending: bool = False
    clear_pending: bool = False


@dataclass
class RoundState:
    """All mutable round fields, kept together so transitions update them as one."""
    status: str
    balance: int
    bet: int = 0
    current_multiplier: int = 1
    last_row_value: int = 0
    board: List[Row] = field(default_factory=list)
    savior: Optional[Card] = None
    draw_pending: bool = False
    pending_bet: Optional[int] = None

    def clone(self) -> "RoundState":
        return RoundState(
            status=self.status,
            balance=self.balance,
            bet=self.bet,
            current_multiplier=self.current_multiplier,
            last_row_value=self.last_row_value,
            board=self.board[:],
            savior=self.savior,
            draw_pending=self.draw_pending,
            pending_bet=self.pending_bet,
        )
