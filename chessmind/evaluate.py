"""
Static position evaluation: material, piece-square tables and a set of
positional and tactical heuristics.

The search needs a number for every leaf it reaches. This module produces
that number by adding up independent terms, each computed once per side and
combined as (white_term - black_term) * weight. The result is therefore
always White-relative: positive favours White, negative favours Black. The
search layer, not the evaluator, decides whether a given side wants the
number to go up or down.

Terms:
    material     — piece counts times fixed values
    positional   — piece-square tables (queen switches early/late table)
    pawns        — doubled, isolated, passed, central, capture targets,
                   backward and chained pawns
    bishops      — pair, mobility, central occupancy
    knights      — mobility
    rooks        — open lines, stacked rooks, mobility
    hanging      — attacked-vs-defended penalties for pawns and minor/rook
                   pieces
    king_safety  — king attacked by two or more units at once
    checks       — attacks on the enemy king square and the ring around it

A game-over position skips all of the above and scores ±CHECKMATE_SCORE or
DRAW_SCORE.

The evaluator is color symmetric: flipping the board vertically and
swapping colours negates the score (`evaluate(b) == -evaluate(b.mirror())`).
"""

import chess

from chessmind.constants import (
    BACKWARD_PAWN_PENALTY,
    BISHOP_CENTER_BONUS,
    BISHOP_EXCHANGE_PENALTY,
    BISHOP_MOBILITY_BONUS,
    BISHOP_PAIR_BONUS,
    BISHOP_PAWN_ATTACK_PENALTY,
    BISHOP_UNDEFENDED_PENALTY,
    CENTER_SQUARES,
    CHECK_BONUS,
    CHECKMATE_SCORE,
    DOUBLED_PAWN_PENALTY,
    DRAW_SCORE,
    ISOLATED_PAWN_PENALTY,
    KING_MULTI_ATTACK_PENALTY,
    KING_RESTRICTION_BONUS,
    KNIGHT_EXCHANGE_PENALTY,
    KNIGHT_MOBILITY_BONUS,
    KNIGHT_PAWN_ATTACK_PENALTY,
    KNIGHT_UNDEFENDED_PENALTY,
    PASSED_PAWN_BONUS,
    PAWN_CAPTURE_TARGET_BONUS,
    PAWN_CENTER_BONUS,
    PAWN_CHAIN_BONUS,
    PAWN_EXCHANGE_PENALTY,
    PAWN_UNDEFENDED_PENALTY,
    PIECE_VALUES,
    PST,
    QUEEN_EARLY_TABLE,
    QUEEN_LATE_TABLE,
    QUEEN_PHASE_PIECE_COUNT,
    ROOK_EXCHANGE_PENALTY,
    ROOK_MINOR_ATTACK_PENALTY,
    ROOK_MOBILITY_BONUS,
    ROOK_OPEN_LINE_BONUS,
    ROOK_PAWN_ATTACK_PENALTY,
    ROOK_UNDEFENDED_PENALTY,
    STACKED_ROOKS_BONUS,
)
from chessmind.position import Terminal, terminal_state

# Order of the entries returned by Evaluator.breakdown().
TERMS: tuple[str, ...] = (
    "material",
    "positional",
    "pawns",
    "bishops",
    "knights",
    "rooks",
    "hanging",
    "king_safety",
    "checks",
)


def _sign(color: chess.Color) -> int:
    return 1 if color == chess.WHITE else -1


def _forward(bb: int, color: chess.Color) -> int:
    """Shift every bit one rank towards the opponent's back rank."""
    return chess.shift_up(bb) if color == chess.WHITE else chess.shift_down(bb)


def _pawn_attacks(pawns: int, color: chess.Color) -> int:
    """Squares attacked diagonally by the given pawns."""
    advanced = _forward(pawns, color)
    return chess.shift_left(advanced) | chess.shift_right(advanced)


class Evaluator:
    """
    Single-use scorer for one board snapshot.

    The evaluator reads the board and never modifies it. Several terms are
    accumulated as side effects while the per-piece terms are computed (the
    piece-square, hanging, king-safety and checks buckets), so the work is
    done once per instance: `static_eval()` and `breakdown()` share the same
    cached result. Build a new Evaluator for every position.

    Attributes:
        board: The position being scored. Not modified.
        side:  Perspective used only for the game-over override; the
               heuristic score is White-relative regardless of this value.
    """

    def __init__(self, board: chess.Board, side: chess.Color | None = None) -> None:
        self.board = board
        self.side = board.turn if side is None else side
        self.occupied = board.occupied
        self.kings = {
            chess.WHITE: board.king(chess.WHITE),
            chess.BLACK: board.king(chess.BLACK),
        }

        # Side-effect accumulators, all White-relative.
        self.positional_score = 0
        self.hanging_score = 0
        self.king_safety_score = 0
        self.pins_and_checks_score = 0

        self._terms: dict[str, int] | None = None

    # -----------------------------------------------------------------------
    # Public entry points
    # -----------------------------------------------------------------------

    def static_eval(self) -> int:
        """White-relative score, or the game-over score if the game has ended."""
        return self.breakdown()["total"]

    def breakdown(self) -> dict[str, int]:
        """
        Per-term contributions and their total.

        For a finished game the only entries are "terminal" and "total".
        """
        if self._terms is None:
            state = terminal_state(self.board)
            if state is Terminal.NONE:
                self._terms = self._score_terms()
            else:
                score = self._terminal_score(state)
                self._terms = {"terminal": score, "total": score}
        return dict(self._terms)

    # -----------------------------------------------------------------------
    # Aggregation
    # -----------------------------------------------------------------------

    def _terminal_score(self, state: Terminal) -> int:
        if state is Terminal.DRAW:
            return DRAW_SCORE
        # `state` is relative to the side to move; the sign follows `side`.
        if state is Terminal.LOSS:
            return -CHECKMATE_SCORE if self.side == chess.WHITE else CHECKMATE_SCORE
        return CHECKMATE_SCORE if self.side == chess.WHITE else -CHECKMATE_SCORE

    def _score_terms(self) -> dict[str, int]:
        terms = {
            "material": self.material_balance(),
            "pawns": self._differential(self._pawn_structure),
            "bishops": self._differential(self._bishops),
            "knights": self._differential(self._knights),
            "rooks": self._differential(self._rooks),
        }
        for color in chess.COLORS:
            self._queens(color)
            self._king(color)

        terms["positional"] = self.positional_score
        terms["hanging"] = self.hanging_score
        terms["king_safety"] = self.king_safety_score
        terms["checks"] = self.pins_and_checks_score

        ordered = {name: terms[name] for name in TERMS}
        ordered["total"] = sum(ordered.values())
        return ordered

    @staticmethod
    def _differential(term) -> int:
        return term(chess.WHITE) - term(chess.BLACK)

    def material_balance(self) -> int:
        balance = 0
        for piece_type, value in PIECE_VALUES.items():
            white = chess.popcount(self.board.pieces_mask(piece_type, chess.WHITE))
            black = chess.popcount(self.board.pieces_mask(piece_type, chess.BLACK))
            balance += (white - black) * value
        return balance

    # -----------------------------------------------------------------------
    # Shared helpers
    # -----------------------------------------------------------------------

    def _add_table(self, table: tuple[int, ...], square: chess.Square, color: chess.Color) -> None:
        # Tables are written for Black; White reads the vertical mirror.
        index = square ^ 56 if color == chess.WHITE else square
        self.positional_score += _sign(color) * table[index]

    def _track_king_pressure(self, attacks: int, color: chess.Color) -> None:
        """Reward attacks that hit the enemy king or the squares around it."""
        enemy_king = self.kings[not color]
        if enemy_king is None:
            return
        if attacks & chess.BB_SQUARES[enemy_king]:
            self.pins_and_checks_score += _sign(color) * CHECK_BONUS
        if attacks & chess.BB_KING_ATTACKS[enemy_king]:
            self.pins_and_checks_score += _sign(color) * KING_RESTRICTION_BONUS

    def _add_hanging(self, square: chess.Square, color: chess.Color, piece_type: chess.PieceType) -> None:
        self.hanging_score -= _sign(color) * self._hanging_penalty(square, color, piece_type)

    def _hanging_penalty(self, square: chess.Square, color: chess.Color, piece_type: chess.PieceType) -> int:
        """
        Penalty for a piece that the opponent can win in an exchange.

        Compares the number of enemy units attacking `square` with the number
        of friendly units defending it. A piece attacked by nobody costs
        nothing. The magnitudes depend on the piece type and, for bishops,
        knights and rooks, on whether a cheap attacker (a pawn or a minor
        piece) is among the attackers.
        """
        attackers = self.board.attackers_mask(not color, square)
        if not attackers:
            return 0
        defenders = self.board.attackers_mask(color, square)
        enemy = chess.popcount(attackers)
        allied = chess.popcount(defenders)
        deficit = max(enemy - allied, 0)
        by_pawn = bool(attackers & self.board.pawns)

        if piece_type == chess.PAWN:
            if not allied:
                return PAWN_UNDEFENDED_PENALTY
            return deficit * PAWN_EXCHANGE_PENALTY

        if piece_type == chess.BISHOP:
            if by_pawn or not allied:
                return BISHOP_PAWN_ATTACK_PENALTY if by_pawn else BISHOP_UNDEFENDED_PENALTY
            return deficit * BISHOP_EXCHANGE_PENALTY

        if piece_type == chess.KNIGHT:
            if not allied:
                return KNIGHT_UNDEFENDED_PENALTY
            if by_pawn:
                return KNIGHT_PAWN_ATTACK_PENALTY
            return deficit * KNIGHT_EXCHANGE_PENALTY

        if piece_type == chess.ROOK:
            if not allied:
                return ROOK_UNDEFENDED_PENALTY
            if by_pawn:
                return ROOK_PAWN_ATTACK_PENALTY
            if attackers & (self.board.knights | self.board.bishops):
                return ROOK_MINOR_ATTACK_PENALTY if allied < enemy else 0
            return deficit * ROOK_EXCHANGE_PENALTY

        return 0

    # -----------------------------------------------------------------------
    # Pawns
    # -----------------------------------------------------------------------

    def _pawn_structure(self, color: chess.Color) -> int:
        """
        Weighted pawn-structure score for one side (not signed by colour).

        Walks the eight files once. For each file holding pawns of `color`:
            doubled   — every pawn beyond the first on the file
            isolated  — pawns with no friendly pawn on either adjacent file
            passed    — pawns with no enemy pawn on the file or its neighbours
            targets   — enemy non-pawn pieces standing on squares the file's
                        pawns attack
            chain     — friendly pawns defended by the file's pawns
            backward  — the defending pawn has no friendly pawn on the file
                        on its other side (or defends on both sides)
        Central control counts pawns on d4, e4, d5 and e5.

        Each pawn's square-table entry and hanging penalty are accumulated
        on the way.
        """
        pawns = self.board.pieces_mask(chess.PAWN, color)
        if not pawns:
            return 0
        enemy_pawns = self.board.pieces_mask(chess.PAWN, not color)
        enemy_pieces = self.board.occupied_co[not color] & ~enemy_pawns

        doubled = isolated = passed = targets = backward = chain = 0

        for file_bb in chess.BB_FILES:
            on_file = pawns & file_bb
            if not on_file:
                continue

            count = chess.popcount(on_file)
            left = chess.shift_left(file_bb)
            right = chess.shift_right(file_bb)
            attacks = _pawn_attacks(on_file, color)

            if count > 1:
                doubled += count - 1
            if not pawns & (left | right):
                isolated += count
            if not enemy_pawns & (left | file_bb | right):
                passed += count

            targets += chess.popcount(attacks & enemy_pieces)
            self._track_king_pressure(attacks, color)

            supported = attacks & pawns
            supported_count = chess.popcount(supported)
            if supported_count == 2:
                backward += 1
                chain += 2
            elif supported_count == 1:
                chain += 1
                other_side = right if supported & left else left
                if not pawns & other_side:
                    backward += 1

            for square in chess.scan_forward(on_file):
                self._add_table(PST[chess.PAWN], square, color)
                self._add_hanging(square, color, chess.PAWN)

        center = chess.popcount(pawns & CENTER_SQUARES)

        return (
            - doubled * DOUBLED_PAWN_PENALTY
            - isolated * ISOLATED_PAWN_PENALTY
            + passed * PASSED_PAWN_BONUS
            + center * PAWN_CENTER_BONUS
            + targets * PAWN_CAPTURE_TARGET_BONUS
            - backward * BACKWARD_PAWN_PENALTY
            + chain * PAWN_CHAIN_BONUS
        )

    # -----------------------------------------------------------------------
    # Pieces
    # -----------------------------------------------------------------------

    def _bishops(self, color: chess.Color) -> int:
        bishops = self.board.pieces_mask(chess.BISHOP, color)
        if not bishops:
            return 0

        score = BISHOP_PAIR_BONUS if chess.popcount(bishops) > 1 else 0
        mobility = 0
        for square in chess.scan_forward(bishops):
            attacks = self.board.attacks_mask(square)
            mobility += chess.popcount(attacks)
            self._track_king_pressure(attacks, color)
            self._add_table(PST[chess.BISHOP], square, color)
            self._add_hanging(square, color, chess.BISHOP)

        center = chess.popcount(bishops & CENTER_SQUARES)
        return score + mobility * BISHOP_MOBILITY_BONUS + center * BISHOP_CENTER_BONUS

    def _knights(self, color: chess.Color) -> int:
        knights = self.board.pieces_mask(chess.KNIGHT, color)
        own = self.board.occupied_co[color]

        mobility = 0
        for square in chess.scan_forward(knights):
            attacks = chess.BB_KNIGHT_ATTACKS[square]
            mobility += chess.popcount(attacks & ~own)
            self._track_king_pressure(attacks, color)
            self._add_table(PST[chess.KNIGHT], square, color)
            self._add_hanging(square, color, chess.KNIGHT)

        return mobility * KNIGHT_MOBILITY_BONUS

    def _rooks(self, color: chess.Color) -> int:
        """
        Open lines, stacked rooks and mobility for one side.

        A line counts as open when the opponent has no pawn on it; the
        rook's own pawns do not close it.
        """
        rooks = self.board.pieces_mask(chess.ROOK, color)
        if not rooks:
            return 0
        enemy_pawns = self.board.pieces_mask(chess.PAWN, not color)

        open_lines = mobility = 0
        for square in chess.scan_forward(rooks):
            if not enemy_pawns & chess.BB_FILES[chess.square_file(square)]:
                open_lines += 1
            if not enemy_pawns & chess.BB_RANKS[chess.square_rank(square)]:
                open_lines += 1

            attacks = self.board.attacks_mask(square)
            mobility += chess.popcount(attacks)
            self._track_king_pressure(attacks, color)
            self._add_table(PST[chess.ROOK], square, color)
            self._add_hanging(square, color, chess.ROOK)

        stacked = sum(
            1 for line in chess.BB_FILES + chess.BB_RANKS
            if chess.popcount(rooks & line) >= 2
        )

        return (
            open_lines * ROOK_OPEN_LINE_BONUS
            + stacked * STACKED_ROOKS_BONUS
            + mobility * ROOK_MOBILITY_BONUS
        )

    def _queens(self, color: chess.Color) -> None:
        # Material is already counted; queens only feed the side-effect terms.
        queens = self.board.pieces_mask(chess.QUEEN, color)
        if not queens:
            return
        crowded = chess.popcount(self.board.occupied_co[not color]) > QUEEN_PHASE_PIECE_COUNT
        table = QUEEN_EARLY_TABLE if crowded else QUEEN_LATE_TABLE

        for square in chess.scan_forward(queens):
            self._add_table(table, square, color)
            self._track_king_pressure(self.board.attacks_mask(square), color)

    def _king(self, color: chess.Color) -> None:
        square = self.kings[color]
        if square is None:
            return
        self._add_table(PST[chess.KING], square, color)

        attackers = self.board.attackers_mask(not color, square)
        if chess.popcount(attackers) >= 2:
            self.king_safety_score -= _sign(color) * KING_MULTI_ATTACK_PENALTY


def evaluate(board: chess.Board, side: chess.Color | None = None) -> int:
    """
    White-relative static score of `board`.

    Builds a fresh Evaluator for every call. `side` only affects the sign of
    a game-over score and defaults to the side to move, which makes the
    game-over score White-relative too.

    Example:
        >>> import chess
        >>> evaluate(chess.Board())  # symmetric start position
        0
    """
    return Evaluator(board, side).static_eval()
