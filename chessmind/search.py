"""
Search: minimax with alpha-beta pruning, quiescence search at the leaves,
a transposition table, and an iterative deepening root driver.

find_best_move() is the entry point drivers call (interface/uci.py,
web/app.py). It is synchronous and has no clock: the only budget is
`max_depth`. A caller that needs a time limit must pick a smaller depth.

Sign convention:
    The evaluator always returns White-relative scores. The search does not
    negate them between plies (this is plain minimax, not negamax). Instead
    every node carries a `maximizing` flag saying whether the side to move
    there wants the White-relative score to go up (White) or down (Black).
    The root driver is the only place that converts between the two views:
    it searches the root mover's children with the opposite flag, then
    compares their scores in the mover's own signed view.

Board ownership:
    One board is mutated in place for the whole search. Every push is done
    through position.applied(), which pops on every exit path, so a cutoff
    that breaks out of a move loop cannot leave the board out of sync.

Known approximations (kept on purpose, see DESIGN.md):
    - Every minimax result is stored as exact, even when an alpha-beta
      cutoff made it a bound.
    - Quiescence results are never written back to the table.
    - Checkmate and stalemate are not told apart in the no-legal-moves branch.
"""

import logging
from dataclasses import dataclass
from typing import Callable, NamedTuple

import chess

from chessmind.constants import INFINITY
from chessmind.evaluate import evaluate
from chessmind.position import applied, is_noisy, is_terminal, position_key
from chessmind.transposition import TranspositionTable

_log = logging.getLogger(__name__)

EvaluateFn = Callable[[chess.Board, chess.Color], int]


class ScoredMove(NamedTuple):
    """A move paired with its one-ply ordering score."""

    move: chess.Move
    score: int


@dataclass
class SearchResult:
    """
    Outcome of one iterative-deepening search.

    Attributes:
        move:   Best move found, or None if the root has no legal moves.
        score:  White-relative score of `move`.
        depth:  Last completed depth; 0 when no search was run (no legal
                moves, or a single legal move).
        nodes:  Minimax nodes visited.
        qnodes: Quiescence nodes visited.
    """

    move: chess.Move | None
    score: int
    depth: int
    nodes: int = 0
    qnodes: int = 0


class Searcher:
    """
    Owns the transposition table and counters for a series of searches.

    A Searcher is not thread safe. Reusing one across the moves of a game
    keeps its table warm; create a new one (or inject an empty table) for
    an independent search.
    """

    def __init__(
        self,
        table: TranspositionTable | None = None,
        evaluator: EvaluateFn = evaluate,
    ) -> None:
        self.table = table if table is not None else TranspositionTable()
        self.evaluator = evaluator
        self.nodes = 0
        self.qnodes = 0

    # -----------------------------------------------------------------------
    # Transposition table
    # -----------------------------------------------------------------------

    def _probe(self, key: int, depth: int, alpha: int, beta: int, maximizing: bool) -> int | None:
        """
        Cached value usable at this node, or None.

        An entry searched shallower than `depth` is never used. Exact entries
        are returned as they are. A bound entry is returned only when it
        already decides the node: at a maximizing node a value at or below
        alpha, at a minimizing node a value at or above beta.
        """
        entry = self.table.probe(key)
        if entry is None or entry.depth < depth:
            return None
        if entry.is_exact:
            return entry.value
        if maximizing and entry.value <= alpha:
            return entry.value
        if not maximizing and entry.value >= beta:
            return entry.value
        return None

    # -----------------------------------------------------------------------
    # Quiescence
    # -----------------------------------------------------------------------

    def quiescence(self, board: chess.Board, alpha: int, beta: int, maximizing: bool) -> int:
        """
        Follow captures, promotions and checks until the position is quiet.

        A fixed-depth search that stops in the middle of an exchange sees
        only half of it (the horizon effect). Quiescence keeps searching the
        noisy moves, using the static evaluation ("stand pat") as the score
        the side to move can always fall back on by not making one.

        Args:
            board:      Position to resolve. Restored before returning.
            alpha:      Score the maximizing side is already guaranteed.
            beta:       Score the minimizing side is already guaranteed.
            maximizing: True if the side to move wants a higher score.

        Returns:
            White-relative score. Not stored in the transposition table.
        """
        self.qnodes += 1
        stand_pat = self.evaluator(board, board.turn)

        if is_terminal(board):
            return stand_pat

        # Quiescence has no remaining depth, so any stored entry is deep enough.
        cached = self._probe(position_key(board), 0, alpha, beta, maximizing)
        if cached is not None:
            return cached

        if maximizing:
            if stand_pat >= beta:
                return stand_pat
            alpha = max(alpha, stand_pat)
        else:
            if stand_pat <= alpha:
                return stand_pat
            beta = min(beta, stand_pat)

        noisy_moves = [move for move in board.legal_moves if is_noisy(board, move)]
        if not noisy_moves:
            return stand_pat

        if maximizing:
            max_eval = alpha
            for move in noisy_moves:
                with applied(board, move):
                    score = self.quiescence(board, alpha, beta, False)
                max_eval = max(max_eval, score)
                alpha = max(alpha, score)
                if alpha >= beta:
                    break
            return max_eval

        min_eval = beta
        for move in noisy_moves:
            with applied(board, move):
                score = self.quiescence(board, alpha, beta, True)
            min_eval = min(min_eval, score)
            beta = min(beta, score)
            if alpha >= beta:
                break
        return min_eval

    # -----------------------------------------------------------------------
    # Minimax
    # -----------------------------------------------------------------------

    def order_moves(self, board: chess.Board) -> list[ScoredMove]:
        """
        Legal moves sorted by the static score of the position they lead to.

        Each move is made, evaluated once (no recursion) and taken back. The
        list is sorted highest White-relative score first whichever side is
        to move; the ordering only affects how early cutoffs happen, never
        the value the search returns.
        """
        scored = []
        for move in board.legal_moves:
            with applied(board, move):
                scored.append(ScoredMove(move, self.evaluator(board, board.turn)))
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored

    def minimax(self, board: chess.Board, depth: int, alpha: int, beta: int, maximizing: bool) -> int:
        """
        Alpha-beta minimax to `depth` plies, then quiescence.

        Args:
            board:      Position to search. Restored before returning.
            depth:      Remaining plies. At 0 (or in a finished game) the
                        node is handed to quiescence with the same window.
            alpha:      Lower bound of the window. Raised by maximizing nodes.
            beta:       Upper bound of the window. Lowered by minimizing nodes.
            maximizing: True if the side to move wants a higher score.

        Returns:
            White-relative score. ±INFINITY if the side to move has no
            legal moves (mate and stalemate alike).
        """
        if depth == 0 or is_terminal(board):
            return self.quiescence(board, alpha, beta, maximizing)

        self.nodes += 1
        key = position_key(board)
        cached = self._probe(key, depth, alpha, beta, maximizing)
        if cached is not None:
            return cached

        ordered = self.order_moves(board)
        if not ordered:
            return -INFINITY if maximizing else INFINITY

        if maximizing:
            best = -INFINITY
            for move, _ in ordered:
                with applied(board, move):
                    score = self.minimax(board, depth - 1, alpha, beta, False)
                best = max(best, score)
                alpha = max(alpha, score)
                if beta <= alpha:
                    break
        else:
            best = INFINITY
            for move, _ in ordered:
                with applied(board, move):
                    score = self.minimax(board, depth - 1, alpha, beta, True)
                best = min(best, score)
                beta = min(beta, score)
                if beta <= alpha:
                    break

        self.table.store(key, best, depth, is_exact=True)
        return best

    # -----------------------------------------------------------------------
    # Root driver
    # -----------------------------------------------------------------------

    def search(
        self,
        board: chess.Board,
        max_depth: int,
        side: chess.Color | None = None,
    ) -> SearchResult:
        """
        Iterative deepening from depth 1 to `max_depth`.

        Each depth expands the root moves itself (in move-generation order)
        and searches every child one ply shallower with the opposite
        `maximizing` flag. The depth's best move replaces the overall best
        only if its score, seen from the root mover, is at least as good as
        the overall best so far; ties go to the deeper iteration. After each
        depth the root position's table entry is overwritten with the
        overall best score.

        A root with a single legal move returns it at once, scored with one
        static evaluation and without searching.

        Args:
            board:     Position to search. Restored before returning.
            max_depth: Deepest iteration, at least 1.
            side:      Root mover. Defaults to the side to move.

        Returns:
            SearchResult with a White-relative score.

        Raises:
            ValueError: If `max_depth` is less than 1.
        """
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")

        side = board.turn if side is None else side
        self.nodes = 0
        self.qnodes = 0

        moves = list(board.legal_moves)
        if not moves:
            return SearchResult(None, self.evaluator(board, board.turn), 0)
        if len(moves) == 1:
            with applied(board, moves[0]):
                score = self.evaluator(board, board.turn)
            return SearchResult(moves[0], score, 0)

        # sign turns a White-relative score into the root mover's view.
        sign = 1 if side == chess.WHITE else -1
        child_maximizing = side == chess.BLACK
        root_key = position_key(board)

        best_move = moves[0]
        best_relative = -INFINITY
        completed = 0

        for depth in range(1, max_depth + 1):
            alpha, beta = -INFINITY, INFINITY
            depth_move = moves[0]
            depth_relative = -INFINITY

            for move in moves:
                with applied(board, move):
                    score = self.minimax(board, depth - 1, alpha, beta, child_maximizing)
                relative = sign * score
                if relative > depth_relative:
                    depth_relative = relative
                    depth_move = move
                if side == chess.WHITE:
                    alpha = max(alpha, score)
                else:
                    beta = min(beta, score)

            if depth_relative >= best_relative:
                best_relative = depth_relative
                best_move = depth_move

            self.table.store(root_key, sign * best_relative, depth, is_exact=True)
            completed = depth
            _log.debug(
                "depth=%d move=%s score=%d nodes=%d qnodes=%d",
                depth, depth_move.uci(), sign * depth_relative, self.nodes, self.qnodes,
            )

        result = SearchResult(best_move, sign * best_relative, completed, self.nodes, self.qnodes)
        _log.info(
            "search done: move=%s score=%d depth=%d nodes=%d qnodes=%d tt=%d",
            result.move.uci(), result.score, result.depth, result.nodes, result.qnodes, len(self.table),
        )
        return result

    def find_best_move(
        self,
        board: chess.Board,
        max_depth: int,
        side: chess.Color | None = None,
    ) -> chess.Move | None:
        """Move part of `search()`; None when the root has no legal moves."""
        return self.search(board, max_depth, side).move


def find_best_move(
    board: chess.Board,
    max_depth: int,
    side: chess.Color | None = None,
    searcher: Searcher | None = None,
) -> chess.Move | None:
    """
    Best move for the root mover after an iterative-deepening search.

    This is the stable entry point for drivers. It blocks until every depth
    up to `max_depth` has been searched.

    Args:
        board:     The current position. Mutated during the search and
                   restored before returning.
        max_depth: Deepest iteration, at least 1.
        side:      Root mover; defaults to the side to move.
        searcher:  Searcher whose table to use. A fresh one when omitted.

    Returns:
        A legal move, or None if the position has no legal moves.
    """
    searcher = searcher if searcher is not None else Searcher()
    return searcher.find_best_move(board, max_depth, side)
