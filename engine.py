"""
Round state machine: the single entry point for player actions.

Every action returns an ActionResult. Out-of-turn actions are rejected with a
stable reason code and leave the state untouched. The two presentation delays
(row settle, board clear) are split into begin_* / settle_* pairs so callers
decide how long to wait; the plain draw_row() / place_bet() run both phases
back to back.
"""

import logging
import random
from typing import Callable, Optional

from config import (
    DECK_SIZE,
    OUTCOME_ROUND_FAILED,
    REASON_BET_ALREADY_PLACED,
    REASON_BOARD_CLEARING,
    REASON_BOARD_EMPTY,
    REASON_DECK_EXHAUSTED,
    REASON_DRAW_IN_PROGRESS,
    REASON_INSUFFICIENT_BALANCE,
    REASON_INVALID_AMOUNT,
    REASON_NO_ACTIVE_BET,
    REASON_NO_ACTIVE_ROUND,
    REASON_NOTHING_TO_SETTLE,
    REASON_ROUND_IN_PROGRESS,
    REASON_ROUND_SETTLED,
    STARTING_BALANCE,
    STATUS_BET_PLACED,
    STATUS_IN_PROGRESS,
    STATUS_INITIAL,
    STATUS_ROUND_OVER,
)
from deck import CardSource, new_source
from game_logic import draw_cards, evaluate_row
from models import ActionResult, RoundState, RowResult, TowerSnapshot
from scoring import compute_payout, fold_multiplier, score_row

logger = logging.getLogger(__name__)


class TowerEngine:
    def __init__(
        self,
        balance: int = STARTING_BALANCE,
        rng: Optional[random.Random] = None,
        source_factory: Optional[Callable[[], CardSource]] = None,
    ):
        if balance < 0:
            raise ValueError(f"balance must be non-negative, got {balance}")
        self._rng = rng or random.Random()
        self._source_factory = source_factory or (lambda: new_source(self._rng))
        self._source: Optional[CardSource] = None
        self._state = RoundState(status=STATUS_INITIAL, balance=balance)

    # ---- read-only views ----

    @property
    def status(self) -> str:
        return self._state.status

    @property
    def balance(self) -> int:
        return self._state.balance

    def snapshot(self) -> TowerSnapshot:
        s = self._state
        return TowerSnapshot(
            status=s.status,
            balance=s.balance,
            bet=s.bet,
            current_multiplier=s.current_multiplier,
            last_row_value=s.last_row_value,
            board=tuple(s.board),
            savior=s.savior,
            cards_remaining=len(self._source) if self._source is not None else 0,
            draw_pending=s.draw_pending,
            clear_pending=s.pending_bet is not None,
        )

    def clone(self, shuffle_rng: Optional[random.Random] = None) -> "TowerEngine":
        """
        Independent copy of the engine. With `shuffle_rng`, the remaining deck
        of the copy is reshuffled, which is what a player who cannot see the
        deck order should assume.
        """
        other = TowerEngine.__new__(TowerEngine)
        other._rng = shuffle_rng or random.Random()
        other._source_factory = lambda: new_source(other._rng)
        other._source = self._source.clone() if self._source is not None else None
        other._state = self._state.clone()
        if shuffle_rng is not None and other._source is not None:
            other._source.shuffle(shuffle_rng)
        return other

    # ---- betting ----

    def begin_place_bet(self, amount: int) -> ActionResult:
        """
        Validate a bet. From INITIAL the bet is accepted immediately; from
        ROUND_OVER it waits for settle_place_bet(), which clears the board.
        """
        s = self._state
        if s.pending_bet is not None:
            return self._reject("place_bet", REASON_BOARD_CLEARING)
        if s.status == STATUS_BET_PLACED:
            return self._reject("place_bet", REASON_BET_ALREADY_PLACED)
        if s.status == STATUS_IN_PROGRESS:
            return self._reject("place_bet", REASON_ROUND_IN_PROGRESS)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            return self._reject("place_bet", REASON_INVALID_AMOUNT)
        if amount > s.balance:
            return self._reject("place_bet", REASON_INSUFFICIENT_BALANCE)

        if s.status == STATUS_ROUND_OVER:
            s.pending_bet = amount
            logger.debug("Bet of %d pending board clear", amount)
            return ActionResult.accepted(amount)

        self._accept_bet(amount)
        return ActionResult.accepted(amount)

    def settle_place_bet(self) -> ActionResult:
        s = self._state
        if s.pending_bet is None:
            return self._reject("settle_place_bet", REASON_NOTHING_TO_SETTLE)
        amount = s.pending_bet
        s.pending_bet = None
        s.board = []
        s.last_row_value = 0
        self._accept_bet(amount)
        return ActionResult.accepted(amount)

    def place_bet(self, amount: int) -> ActionResult:
        result = self.begin_place_bet(amount)
        if result.ok and self._state.pending_bet is not None:
            return self.settle_place_bet()
        return result

    def _accept_bet(self, amount: int) -> None:
        s = self._state
        s.balance -= amount
        s.bet = amount
        s.status = STATUS_BET_PLACED
        logger.debug("Bet placed: %d (balance %d)", amount, s.balance)
        self._check_invariants()

    # ---- round ----

    def start_game(self) -> ActionResult:
        s = self._state
        if s.pending_bet is not None:
            return self._reject("start_game", REASON_BOARD_CLEARING)
        if s.status == STATUS_IN_PROGRESS:
            return self._reject("start_game", REASON_ROUND_IN_PROGRESS)
        if s.status != STATUS_BET_PLACED:
            return self._reject("start_game", REASON_NO_ACTIVE_BET)

        self._source = self._source_factory()
        s.savior = self._source.draw()
        s.board = []
        s.current_multiplier = 1
        s.last_row_value = 0
        s.draw_pending = False
        s.status = STATUS_IN_PROGRESS
        logger.debug("Round started with savior %s, %d cards left", s.savior, len(self._source))
        self._check_invariants()
        return ActionResult.accepted()

    def begin_draw_row(self) -> ActionResult:
        """Draw the next row onto the board; its evaluation waits for settle_draw_row()."""
        s = self._state
        rejection = self._round_action_guard("draw_row")
        if rejection is not None:
            return rejection
        if len(self._source) == 0:
            return self._reject("draw_row", REASON_DECK_EXHAUSTED)

        row_index = len(s.board)
        row = draw_cards(self._source, row_index + 1)
        s.board.append(row)
        s.draw_pending = True
        logger.debug("Row %d drawn: %s", row_index, [c.value for c in row])
        self._check_invariants()
        return ActionResult.accepted(row)

    def settle_draw_row(self) -> ActionResult:
        s = self._state
        if not s.draw_pending:
            return self._reject("settle_draw_row", REASON_NOTHING_TO_SETTLE)

        row_index = len(s.board) - 1
        previous_row = s.board[row_index - 1] if row_index > 0 else ()
        checked = evaluate_row(s.board[row_index], previous_row, s.savior)

        s.board[row_index] = checked.row
        if row_index > 0:
            s.board[row_index - 1] = checked.previous_row
        s.savior = checked.savior
        s.draw_pending = False

        row_value, row_multiplier = score_row(checked.row)
        s.last_row_value = row_value
        if checked.outcome == OUTCOME_ROUND_FAILED:
            logger.debug("Row %d failed; bet of %d forfeited", row_index, s.bet)
            s.bet = 0
            s.status = STATUS_ROUND_OVER
        else:
            s.current_multiplier = fold_multiplier(s.current_multiplier, row_multiplier)
            logger.debug(
                "Row %d %s (value %d, x%d, running x%d)",
                row_index, checked.outcome, row_value, row_multiplier, s.current_multiplier,
            )
        self._check_invariants()

        return ActionResult.accepted(
            RowResult(
                row=checked.row,
                outcome=checked.outcome,
                row_index=row_index,
                row_value=row_value,
                row_multiplier=row_multiplier,
                rescued=checked.rescued,
            )
        )

    def draw_row(self) -> ActionResult:
        result = self.begin_draw_row()
        if not result.ok:
            return result
        return self.settle_draw_row()

    def cash_out(self) -> ActionResult:
        s = self._state
        rejection = self._round_action_guard("cash_out")
        if rejection is not None:
            return rejection
        if not s.board:
            return self._reject("cash_out", REASON_BOARD_EMPTY)

        payout = compute_payout(s.bet, s.current_multiplier, s.last_row_value)
        s.balance += payout
        s.bet = 0
        s.current_multiplier = 1
        s.board = []
        s.savior = None
        s.status = STATUS_ROUND_OVER
        logger.debug("Cashed out %d (balance %d)", payout, s.balance)
        self._check_invariants()
        return ActionResult.accepted(payout)

    # ---- guards ----

    def _round_action_guard(self, action: str) -> Optional[ActionResult]:
        s = self._state
        if s.draw_pending:
            return self._reject(action, REASON_DRAW_IN_PROGRESS)
        if s.pending_bet is not None:
            return self._reject(action, REASON_BOARD_CLEARING)
        if s.status == STATUS_ROUND_OVER:
            return self._reject(action, REASON_ROUND_SETTLED)
        if s.status != STATUS_IN_PROGRESS:
            return self._reject(action, REASON_NO_ACTIVE_ROUND)
        return None

    def _reject(self, action: str, reason: str) -> ActionResult:
        logger.info("%s rejected in %s: %s", action, self._state.status, reason)
        return ActionResult.rejected(reason)

    def _check_invariants(self) -> None:
        s = self._state
        assert s.balance >= 0, f"negative balance {s.balance}"
        assert s.current_multiplier >= 1, f"multiplier below 1: {s.current_multiplier}"
        if s.status in (STATUS_BET_PLACED, STATUS_IN_PROGRESS):
            assert s.bet > 0, f"no stake while {s.status}"
        else:
            assert s.bet == 0, f"stake {s.bet} outside an active round"
        if self._source is not None:
            assert len(self._source) <= DECK_SIZE, "deck grew past a full deck"
