"""
Engine constants: piece values, evaluation weights, piece-square tables and
search parameters.

All numeric constants used throughout the engine are defined here so that
no other module needs to introduce magic numbers. The weights are fixed;
they are not learned or tuned at runtime.

Scores use a doubled centipawn-like scale (1 pawn = 200). Every evaluation
is White-relative: positive favours White, negative favours Black.
"""

import chess

# ---------------------------------------------------------------------------
# Piece values
# ---------------------------------------------------------------------------

PAWN_VALUE: int = 200
KNIGHT_VALUE: int = 600
BISHOP_VALUE: int = 700
ROOK_VALUE: int = 1000
QUEEN_VALUE: int = 1800

# The king has no material value; it is never traded.
PIECE_VALUES: dict[int, int] = {
    chess.PAWN:   PAWN_VALUE,
    chess.KNIGHT: KNIGHT_VALUE,
    chess.BISHOP: BISHOP_VALUE,
    chess.ROOK:   ROOK_VALUE,
    chess.QUEEN:  QUEEN_VALUE,
}

# ---------------------------------------------------------------------------
# Special scores
# ---------------------------------------------------------------------------

CHECKMATE_SCORE: int = 99_999  # Forced win/loss
DRAW_SCORE: int = 0            # Stalemate, insufficient material, repetition

# Window sentinel for alpha-beta. Must exceed CHECKMATE_SCORE so that a
# mate score always fits strictly inside the initial window.
INFINITY: int = 1_000_000

# ---------------------------------------------------------------------------
# Pawn structure weights
# ---------------------------------------------------------------------------

DOUBLED_PAWN_PENALTY: int = 20
ISOLATED_PAWN_PENALTY: int = 20
PASSED_PAWN_BONUS: int = 50
PAWN_CENTER_BONUS: int = 100
PAWN_CAPTURE_TARGET_BONUS: int = 5
BACKWARD_PAWN_PENALTY: int = 20
PAWN_CHAIN_BONUS: int = 1

# ---------------------------------------------------------------------------
# Piece activity weights
# ---------------------------------------------------------------------------

BISHOP_PAIR_BONUS: int = 50
BISHOP_MOBILITY_BONUS: int = 5
BISHOP_CENTER_BONUS: int = 40

KNIGHT_MOBILITY_BONUS: int = 25

ROOK_OPEN_LINE_BONUS: int = 35
STACKED_ROOKS_BONUS: int = 25
ROOK_MOBILITY_BONUS: int = 5

# Attacks landing on the enemy king square / on the ring around it.
CHECK_BONUS: int = 25
KING_RESTRICTION_BONUS: int = 8

# King attacked by two or more units at once (double attack / fork pattern).
KING_MULTI_ATTACK_PENALTY: int = 300

# ---------------------------------------------------------------------------
# Hanging-piece penalties
# ---------------------------------------------------------------------------
# "Undefended" = attacked by at least one enemy unit and defended by none.
# "Exchange" penalties are per unit of (attackers - defenders).

PAWN_UNDEFENDED_PENALTY: int = 40
PAWN_EXCHANGE_PENALTY: int = 10

BISHOP_PAWN_ATTACK_PENALTY: int = 75
BISHOP_UNDEFENDED_PENALTY: int = 75
BISHOP_EXCHANGE_PENALTY: int = 15

KNIGHT_UNDEFENDED_PENALTY: int = 60
KNIGHT_PAWN_ATTACK_PENALTY: int = 50
KNIGHT_EXCHANGE_PENALTY: int = 15

ROOK_UNDEFENDED_PENALTY: int = 125
ROOK_PAWN_ATTACK_PENALTY: int = 125
ROOK_MINOR_ATTACK_PENALTY: int = 50
ROOK_EXCHANGE_PENALTY: int = 15

# ---------------------------------------------------------------------------
# Board regions
# ---------------------------------------------------------------------------

# d4, e4, d5, e5
CENTER_SQUARES: int = (
    (chess.BB_FILE_D | chess.BB_FILE_E) & (chess.BB_RANK_4 | chess.BB_RANK_5)
)

# The queen switches from its early to its late table once the opponent is
# down to this many pieces (king and pawns included).
QUEEN_PHASE_PIECE_COUNT: int = 10

# ---------------------------------------------------------------------------
# Piece-square tables
# ---------------------------------------------------------------------------
# Written from Black's point of view and indexed by python-chess square
# numbers (a1 = 0, h8 = 63): the first row below is rank 1, the last row is
# rank 8. A Black piece on `sq` reads `table[sq]`; a White piece reads the
# vertically mirrored entry `table[sq ^ 56]`.

PAWN_TABLE: tuple[int, ...] = (
      0,   0,   0,   0,   0,   0,   0,   0,
     50,  50,  50,  50,  50,  50,  50,  50,
     10,  10,  20,  30,  30,  20,  10,  10,
      5,   5,  10,  25,  25,  10,   5,   5,
      0,   0,   0,  20,  20,   0,   0,   0,
      5,  -5, -10, -10, -10, -10,  -5,   5,
      5,  10,  10, -20, -20,  10,  10,   5,
      0,   0,   0,   0,   0,   0,   0,   0,
)

KNIGHT_TABLE: tuple[int, ...] = (
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20,   0,   0,   0,   0, -20, -40,
    -30,   0,  10,  15,  15,  10,   0, -30,
    -30,   5,  15,  20,  20,  15,   5, -30,
    -30,   0,  15,  20,  20,  15,   0, -30,
    -30,   5,  10,  15,  15,  10,   5, -30,
    -40, -20,   0,   5,   5,   0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
)

BISHOP_TABLE: tuple[int, ...] = (
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,  10,  10,   5,   0, -10,
    -10,   5,   5,  10,  10,   5,   5, -10,
    -10,   0,  10,  10,  10,  10,   0, -10,
    -10,  10,  10,  10,  10,  10,  10, -10,
    -10,  10,   0,   0,   0,   0,  10, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
)

ROOK_TABLE: tuple[int, ...] = (
      0,   0,   0,   0,   0,   0,   0,   0,
      5,  10,  10,  10,  10,  10,  10,   5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
      0,   0,   0,   5,   5,   0,   0,   0,
)

# Early table: keep the queen home while the board is crowded.
QUEEN_EARLY_TABLE: tuple[int, ...] = (
    -30, -20, -20, -20, -20, -20, -20, -30,
    -20, -20, -10, -10, -10, -10, -20, -20,
    -20, -10,  -5,  -5,  -5,  -5, -10, -20,
    -10, -10,  -5,  -5,  -5,  -5, -10, -10,
    -10, -10,  -5,  -5,  -5,  -5, -10, -10,
    -20, -10,  -5,  -5,  -5,  -5, -10, -20,
    -20, -20, 100, 100, 100, 100, -20, -20,
    -30,  50, 120, 150, 150, 120,  50, -30,
)

QUEEN_LATE_TABLE: tuple[int, ...] = (
    -20, -10, -10,  -5,  -5, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,   5,   5,   5,   0, -10,
     -5,   0,   5,   5,   5,   5,   0,  -5,
      0,   0,   5,   5,   5,   5,   0,  -5,
    -10,   5,   5,   5,   5,   5,   0, -10,
    -10,   0,   5,   0,   0,   0,   0, -10,
    -20, -10, -10,  -5,  -5, -10, -10, -20,
)

KING_TABLE: tuple[int, ...] = (
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -10, -20, -20, -20, -20, -20, -20, -10,
     20,  20,   0,   0,   0,   0,  20,  20,
     20,  30,  10,   0,   0,  10,  30,  20,
)

# Queen is handled separately (early/late switch).
PST: dict[int, tuple[int, ...]] = {
    chess.PAWN:   PAWN_TABLE,
    chess.KNIGHT: KNIGHT_TABLE,
    chess.BISHOP: BISHOP_TABLE,
    chess.ROOK:   ROOK_TABLE,
    chess.KING:   KING_TABLE,
}

# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------
# The search has no clock: the only budget is depth. Drivers that receive
# no explicit depth use DEFAULT_DEPTH and clamp requests to MAX_DEPTH.
DEFAULT_DEPTH: int = 3
MAX_DEPTH: int = 8

# ---------------------------------------------------------------------------
# Transposition table
# ---------------------------------------------------------------------------
# Number of slots. Slots are allocated lazily, so an idle table costs nothing.
TT_SIZE: int = 1 << 20  # 1,048,576 entries
