"""
Position helpers: the boundary between the search core and python-chess.

python-chess owns the board representation, legal move generation,
make/unmake, terminal detection and hashing. This module wraps the few
operations the search needs so that the rest of the engine never reaches
into the board directly for them.

The search mutates one shared board through push/pop pairs. `applied()`
turns each pair into a scoped block, so the board is restored on every exit
path, including alpha-beta cutoffs that break out of a move loop.
"""

import enum
from contextlib import contextmanager
from typing import Iterator

import chess
import chess.polyglot


class Terminal(enum.Enum):
    """
    Game-over classification from the side to move's point of view.

    DRAW covers stalemate, insufficient material and the draw rules
    (fifty moves, threefold repetition and their automatic 75-move and
    fivefold forms).
    """

    NONE = "none"
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


def position_key(board: chess.Board) -> int:
    """Stable 64-bit content hash (Polyglot Zobrist key) of the position."""
    return chess.polyglot.zobrist_hash(board)


def terminal_state(board: chess.Board) -> Terminal:
    """
    Classify the position as ongoing, won, lost or drawn for the side to move.

    Besides the automatic terminations python-chess reports (checkmate,
    stalemate, insufficient material, the 75-move rule and fivefold
    repetition), the draws a player may claim count as game over too: the
    fifty-move rule and threefold repetition of the current position.
    """
    outcome = board.outcome()
    if outcome is None:
        if board.is_fifty_moves() or board.is_repetition(3):
            return Terminal.DRAW
        return Terminal.NONE
    if outcome.winner is None:
        return Terminal.DRAW
    return Terminal.WIN if outcome.winner == board.turn else Terminal.LOSS


def is_terminal(board: chess.Board) -> bool:
    return terminal_state(board) is not Terminal.NONE


@contextmanager
def applied(board: chess.Board, move: chess.Move) -> Iterator[chess.Board]:
    """
    Push `move` for the duration of the block and pop it on the way out.

    Example:
        >>> board = chess.Board()
        >>> with applied(board, chess.Move.from_uci("e2e4")):
        ...     board.turn == chess.BLACK
        True
        >>> board.fen() == chess.STARTING_FEN
        True
    """
    board.push(move)
    try:
        yield board
    finally:
        board.pop()


def is_noisy(board: chess.Board, move: chess.Move) -> bool:
    """
    True for captures, promotions and check-giving moves.

    These are the moves quiescence search keeps following past the depth
    horizon. `gives_check` answers the check question without making the move.
    """
    return (
        board.is_capture(move)
        or move.promotion is not None
        or board.gives_check(move)
    )
