import random
import unittest

from config import (
    DECK_SIZE,
    OUTCOME_KNIGHT_SAVE,
    OUTCOME_ROUND_FAILED,
    OUTCOME_SAFE,
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
    REJECTION_MESSAGES,
    STATUS_BET_PLACED,
    STATUS_IN_PROGRESS,
    STATUS_INITIAL,
    STATUS_ROUND_OVER,
)
from deck import CardSource
from engine import TowerEngine


def stacked(*rounds):
    """Source factory dealing one stacked deck per round. First card of each is the savior."""
    decks = list(rounds)

    def factory():
        return CardSource.from_values(decks.pop(0))

    return factory


class EngineTestCase(unittest.TestCase):
    def make_engine(self, *rounds, balance=100):
        return TowerEngine(balance=balance, source_factory=stacked(*rounds))

    def make_running_engine(self, *rounds, balance=100, bet=10):
        engine = self.make_engine(*rounds, balance=balance)
        self.assertTrue(engine.place_bet(bet).ok)
        self.assertTrue(engine.start_game().ok)
        return engine

    def assertRejected(self, result, reason):
        self.assertFalse(result.ok)
        self.assertEqual(reason, result.reason)


class RoundFlowTests(EngineTestCase):
    def test_bet_start_and_first_rows(self):
        engine = TowerEngine(balance=100, rng=random.Random(1))
        self.assertEqual(STATUS_INITIAL, engine.status)

        self.assertTrue(engine.place_bet(10).ok)
        snap = engine.snapshot()
        self.assertEqual(90, snap.balance)
        self.assertEqual(10, snap.bet)
        self.assertEqual(STATUS_BET_PLACED, snap.status)

        self.assertTrue(engine.start_game().ok)
        snap = engine.snapshot()
        self.assertEqual(STATUS_IN_PROGRESS, snap.status)
        self.assertEqual(1, snap.current_multiplier)
        self.assertIsNotNone(snap.savior)
        self.assertEqual(DECK_SIZE - 1, snap.cards_remaining)
        self.assertEqual((), snap.board)

        first = engine.draw_row()
        self.assertTrue(first.ok)
        self.assertEqual(0, first.value.row_index)
        self.assertEqual(1, len(first.value.row))
        self.assertIn(first.value.outcome, (OUTCOME_SAFE, OUTCOME_KNIGHT_SAVE))

        second = engine.draw_row()
        self.assertTrue(second.ok)
        self.assertEqual(2, len(second.value.row))

    def test_clean_second_row_updates_multiplier(self):
        engine = self.make_running_engine([1, 5, 6, 6])
        self.assertEqual(OUTCOME_SAFE, engine.draw_row().value.outcome)
        result = engine.draw_row().value
        self.assertEqual(OUTCOME_SAFE, result.outcome)
        self.assertEqual(2, result.row_multiplier)
        self.assertEqual(12, result.row_value)
        snap = engine.snapshot()
        self.assertEqual(2, snap.current_multiplier)
        self.assertEqual(12, snap.last_row_value)

    def test_rescue_then_failure_without_savior(self):
        engine = self.make_running_engine([7, 3, 3, 4, 1, 4, 2])
        engine.draw_row()

        rescued = engine.draw_row().value
        self.assertEqual(OUTCOME_SAFE, rescued.outcome)
        self.assertTrue(rescued.rescued)
        self.assertEqual([7, 4], [c.value for c in rescued.row])
        self.assertIsNone(engine.snapshot().savior)

        failed = engine.draw_row().value
        self.assertEqual(OUTCOME_ROUND_FAILED, failed.outcome)
        self.assertTrue(failed.row[1].failed)
        snap = engine.snapshot()
        self.assertTrue(snap.board[1][1].failed)
        self.assertEqual(STATUS_ROUND_OVER, snap.status)
        self.assertEqual(0, snap.bet)
        self.assertEqual(90, snap.balance)
        self.assertEqual(3, len(snap.board))

    def test_failed_round_rejects_further_play(self):
        engine = self.make_running_engine([7, 3, 3, 3])
        engine.draw_row()
        self.assertEqual(OUTCOME_ROUND_FAILED, engine.draw_row().value.outcome)
        self.assertRejected(engine.draw_row(), REASON_ROUND_SETTLED)
        self.assertRejected(engine.cash_out(), REASON_ROUND_SETTLED)
        self.assertRejected(engine.start_game(), REASON_NO_ACTIVE_BET)

    def test_knight_row_scores_its_own_multiplier(self):
        engine = self.make_running_engine([1, 5, 0, 5])
        engine.draw_row()
        result = engine.draw_row().value
        self.assertEqual(OUTCOME_KNIGHT_SAVE, result.outcome)
        self.assertEqual(2, result.row_multiplier)
        self.assertEqual(2, engine.snapshot().current_multiplier)
        self.assertEqual(1, engine.snapshot().savior.value)

    def test_knight_savior_rescue_is_a_knight_save(self):
        engine = self.make_running_engine([0, 3, 3, 1])
        engine.draw_row()
        result = engine.draw_row().value
        self.assertEqual(OUTCOME_KNIGHT_SAVE, result.outcome)
        self.assertTrue(result.rescued)
        self.assertEqual([0, 1], [c.value for c in result.row])
        self.assertTrue(all(c.knight_saved for c in result.row))
        snap = engine.snapshot()
        self.assertIsNone(snap.savior)
        self.assertEqual(STATUS_IN_PROGRESS, snap.status)
        self.assertEqual(2, snap.current_multiplier)

    def test_short_row_can_clash_after_rescue(self):
        # savior 4; row 2 has only [6, 5] left; the savior lands on position 1
        # and clashes with the 4 at the left of the row above
        engine = self.make_running_engine([4, 2, 4, 5, 6, 5])
        engine.draw_row()
        engine.draw_row()
        result = engine.draw_row().value
        self.assertEqual(2, len(result.row))
        self.assertEqual(OUTCOME_ROUND_FAILED, result.outcome)
        self.assertEqual([4, 5], [c.value for c in engine.snapshot().board[1]])
        self.assertEqual([True, False], [c.failed for c in engine.snapshot().board[1]])
        self.assertTrue(result.row[1].replaced)
        self.assertTrue(result.row[1].failed)
        self.assertEqual(STATUS_ROUND_OVER, engine.status)

    def test_rows_grow_by_one_card(self):
        engine = TowerEngine(rng=random.Random(11))
        engine.place_bet(10)
        engine.start_game()
        row_index = 0
        while engine.status == STATUS_IN_PROGRESS:
            result = engine.draw_row()
            if not result.ok:
                break
            row_len = len(result.value.row)
            self.assertLessEqual(row_len, row_index + 1)
            if row_len < row_index + 1:
                self.assertEqual(0, engine.snapshot().cards_remaining)
            row_index += 1


class CashOutTests(EngineTestCase):
    def test_cash_out_pays_bet_times_multiplier_plus_last_row(self):
        engine = self.make_running_engine([1, 5, 6, 6])
        engine.draw_row()
        engine.draw_row()
        result = engine.cash_out()
        self.assertTrue(result.ok)
        self.assertEqual(10 * 2 + 12, result.value)
        snap = engine.snapshot()
        self.assertEqual(90 + 32, snap.balance)
        self.assertEqual(0, snap.bet)
        self.assertEqual(1, snap.current_multiplier)
        self.assertEqual((), snap.board)
        self.assertEqual(STATUS_ROUND_OVER, snap.status)

    def test_payout_bonus_uses_only_last_row_value(self):
        engine = self.make_running_engine([1, 5, 6, 6, 1, 2, 3])
        for _ in range(3):
            engine.draw_row()
        snap = engine.snapshot()
        self.assertEqual(2, snap.current_multiplier)
        self.assertEqual(6, snap.last_row_value)
        # 5 and 12 from the earlier rows are not part of the bonus
        self.assertEqual(10 * 2 + 6, engine.cash_out().value)

    def test_cash_out_needs_a_drawn_row(self):
        engine = self.make_running_engine([1, 2])
        self.assertRejected(engine.cash_out(), REASON_BOARD_EMPTY)
        self.assertEqual(STATUS_IN_PROGRESS, engine.status)

    def test_multiplier_never_decreases_within_a_round(self):
        for seed in range(25):
            engine = TowerEngine(rng=random.Random(seed))
            engine.place_bet(10)
            engine.start_game()
            last = 1
            while engine.status == STATUS_IN_PROGRESS:
                result = engine.draw_row()
                if not result.ok:
                    break
                current = engine.snapshot().current_multiplier
                self.assertGreaterEqual(current, last)
                last = current


class GuardTests(EngineTestCase):
    def test_bet_above_balance_is_rejected(self):
        engine = self.make_engine([1], balance=20)
        self.assertRejected(engine.place_bet(21), REASON_INSUFFICIENT_BALANCE)
        self.assertEqual(20, engine.balance)
        self.assertEqual(STATUS_INITIAL, engine.status)

    def test_non_positive_bets_are_rejected(self):
        engine = self.make_engine([1])
        for amount in (0, -5, True, 2.5):
            self.assertRejected(engine.place_bet(amount), REASON_INVALID_AMOUNT)
        self.assertEqual(100, engine.balance)

    def test_out_of_turn_actions(self):
        engine = self.make_engine([1, 2])
        self.assertRejected(engine.start_game(), REASON_NO_ACTIVE_BET)
        self.assertRejected(engine.draw_row(), REASON_NO_ACTIVE_ROUND)
        self.assertRejected(engine.cash_out(), REASON_NO_ACTIVE_ROUND)

        engine.place_bet(10)
        self.assertRejected(engine.place_bet(10), REASON_BET_ALREADY_PLACED)
        self.assertRejected(engine.draw_row(), REASON_NO_ACTIVE_ROUND)

        engine.start_game()
        self.assertRejected(engine.place_bet(10), REASON_ROUND_IN_PROGRESS)
        self.assertRejected(engine.start_game(), REASON_ROUND_IN_PROGRESS)
        self.assertEqual(90, engine.balance)

    def test_every_reason_has_a_message(self):
        engine = self.make_engine([1])
        result = engine.start_game()
        self.assertEqual(REJECTION_MESSAGES[REASON_NO_ACTIVE_BET], result.message)

    def test_deck_exhaustion(self):
        engine = self.make_running_engine([1, 2, 3, 4])
        engine.draw_row()
        self.assertEqual(OUTCOME_SAFE, engine.draw_row().value.outcome)
        self.assertRejected(engine.draw_row(), REASON_DECK_EXHAUSTED)
        self.assertTrue(engine.cash_out().ok)

    def test_short_row_when_deck_runs_out(self):
        engine = self.make_running_engine([1, 2, 3])
        engine.draw_row()
        result = engine.draw_row().value
        self.assertEqual(1, len(result.row))
        self.assertEqual(OUTCOME_SAFE, result.outcome)
        self.assertRejected(engine.draw_row(), REASON_DECK_EXHAUSTED)

    def test_invariant_breach_is_an_assertion(self):
        engine = self.make_engine([1, 2])
        engine.place_bet(10)
        engine._state.balance = -1
        with self.assertRaises(AssertionError):
            engine.start_game()

    def test_negative_starting_balance(self):
        with self.assertRaises(ValueError):
            TowerEngine(balance=-1)


class TwoPhaseTests(EngineTestCase):
    def test_draw_in_flight_blocks_other_actions(self):
        engine = self.make_running_engine([1, 5, 6, 2])
        begun = engine.begin_draw_row()
        self.assertTrue(begun.ok)
        self.assertTrue(engine.snapshot().draw_pending)
        self.assertEqual(1, len(engine.snapshot().board))

        self.assertRejected(engine.draw_row(), REASON_DRAW_IN_PROGRESS)
        self.assertRejected(engine.begin_draw_row(), REASON_DRAW_IN_PROGRESS)
        self.assertRejected(engine.cash_out(), REASON_DRAW_IN_PROGRESS)

        settled = engine.settle_draw_row()
        self.assertTrue(settled.ok)
        self.assertFalse(engine.snapshot().draw_pending)
        self.assertRejected(engine.settle_draw_row(), REASON_NOTHING_TO_SETTLE)
        self.assertTrue(engine.draw_row().ok)

    def test_bet_after_failed_round_clears_board_on_settle(self):
        engine = self.make_running_engine([7, 3, 3, 3], [2, 4])
        engine.draw_row()
        engine.draw_row()
        self.assertEqual(STATUS_ROUND_OVER, engine.status)
        self.assertEqual(2, len(engine.snapshot().board))

        self.assertTrue(engine.begin_place_bet(20).ok)
        snap = engine.snapshot()
        self.assertTrue(snap.clear_pending)
        self.assertEqual(2, len(snap.board))
        self.assertEqual(90, snap.balance)

        self.assertRejected(engine.place_bet(5), REASON_BOARD_CLEARING)
        self.assertRejected(engine.start_game(), REASON_BOARD_CLEARING)

        self.assertTrue(engine.settle_place_bet().ok)
        snap = engine.snapshot()
        self.assertFalse(snap.clear_pending)
        self.assertEqual((), snap.board)
        self.assertEqual(70, snap.balance)
        self.assertEqual(20, snap.bet)
        self.assertEqual(STATUS_BET_PLACED, snap.status)
        self.assertRejected(engine.settle_place_bet(), REASON_NOTHING_TO_SETTLE)

    def test_new_round_draws_a_new_savior(self):
        engine = self.make_running_engine([7, 3, 3, 4], [2, 5])
        engine.draw_row()
        self.assertTrue(engine.draw_row().value.rescued)
        self.assertIsNone(engine.snapshot().savior)
        engine.cash_out()

        self.assertTrue(engine.place_bet(10).ok)
        engine.start_game()
        self.assertEqual(2, engine.snapshot().savior.value)

    def test_bet_above_balance_after_round_is_rejected_before_clearing(self):
        engine = self.make_running_engine([7, 3, 3, 3], balance=10)
        engine.draw_row()
        engine.draw_row()
        self.assertRejected(engine.begin_place_bet(5), REASON_INSUFFICIENT_BALANCE)
        self.assertFalse(engine.snapshot().clear_pending)


class CloneTests(EngineTestCase):
    def test_clone_does_not_touch_the_original(self):
        engine = self.make_running_engine([1, 5, 6, 2, 3, 4])
        engine.draw_row()
        before = engine.snapshot()
        copy = engine.clone(shuffle_rng=random.Random(0))
        copy.draw_row()
        copy.cash_out()
        self.assertEqual(before, engine.snapshot())


if __name__ == "__main__":
    unittest.main()
