"""
Game configuration and constants.
"""

# Deck composition
CARD_VALUES = [1, 2, 3, 4, 5, 6, 7]
COPIES_PER_VALUE = 10
KNIGHT_VALUE = 0
KNIGHT_COUNT = 4
DECK_SIZE = len(CARD_VALUES) * COPIES_PER_VALUE + KNIGHT_COUNT  # 74

# Bankroll
STARTING_BALANCE = 100
DEFAULT_BET = 10

# Round status
STATUS_INITIAL = "INITIAL"
STATUS_BET_PLACED = "BET_PLACED"
STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_ROUND_OVER = "ROUND_OVER"

# Row outcomes
OUTCOME_SAFE = "SAFE"
OUTCOME_KNIGHT_SAVE = "KNIGHT_SAVE"
OUTCOME_ROUND_FAILED = "ROUND_FAILED"

# Rejection reasons
REASON_INVALID_AMOUNT = "invalid_amount"
REASON_INSUFFICIENT_BALANCE = "insufficient_balance"
REASON_BET_ALREADY_PLACED = "bet_already_placed"
REASON_ROUND_IN_PROGRESS = "round_in_progress"
REASON_NO_ACTIVE_BET = "no_active_bet"
REASON_NO_ACTIVE_ROUND = "no_active_round"
REASON_ROUND_SETTLED = "round_already_settled"
REASON_DECK_EXHAUSTED = "deck_exhausted"
REASON_DRAW_IN_PROGRESS = "draw_in_progress"
REASON_BOARD_EMPTY = "board_empty"
REASON_BOARD_CLEARING = "board_clearing"
REASON_NOTHING_TO_SETTLE = "nothing_to_settle"

REJECTION_MESSAGES = {
    REASON_INVALID_AMOUNT: "Bet must be a positive whole number.",
    REASON_INSUFFICIENT_BALANCE: "Insufficient balance for the bet.",
    REASON_BET_ALREADY_PLACED: "A bet is already placed for this round.",
    REASON_ROUND_IN_PROGRESS: "A round is in progress.",
    REASON_NO_ACTIVE_BET: "Place a bet first.",
    REASON_NO_ACTIVE_ROUND: "No round is in progress.",
    REASON_ROUND_SETTLED: "The round is already settled.",
    REASON_DECK_EXHAUSTED: "The deck is exhausted.",
    REASON_DRAW_IN_PROGRESS: "A draw is already in progress.",
    REASON_BOARD_EMPTY: "Draw at least one row before cashing out.",
    REASON_BOARD_CLEARING: "The board is still being cleared.",
    REASON_NOTHING_TO_SETTLE: "Nothing is waiting to settle.",
}

# Presentation delays (seconds); the engine itself never waits
ROW_SETTLE_DELAY = 0.6
BET_CLEAR_DELAY = 1.0

# Card display
CARD_LABELS = {0: "Knight", 1: "1", 2: "2", 3: "3", 4: "4", 5: "5", 6: "6", 7: "7"}
CARD_STATE_COLORS = {
    "plain": "#377eb8",      # blue
    "knight_saved": "#4daf4a",  # green
    "replaced": "#ff7f00",   # orange
    "failed": "#e41a1c",     # red
    "pending": "#999999",    # gray
}

# Simulation settings
MONTE_CARLO_SIMULATIONS = 2000
MONTE_CARLO_SIMULATIONS_NEXT_ROW = 1000
STRATEGY_MAX_ROWS = 8
