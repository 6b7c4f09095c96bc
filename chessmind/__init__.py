"""
Chess search engine package.

This package implements a classical chess engine on top of python-chess:
minimax search with alpha-beta pruning, quiescence search, a transposition
table, iterative deepening, and a hand-crafted evaluation function.

Modules:
    constants     — Piece values, evaluation weights, PST arrays, search parameters
    position      — Hashing, terminal classification, scoped push/pop
    evaluate      — Static position evaluation (White-relative)
    transposition — Fixed-capacity transposition table
    search        — Minimax, quiescence, iterative deepening, find_best_move()
"""

from chessmind.evaluate import Evaluator, evaluate
from chessmind.search import Searcher, SearchResult, find_best_move
from chessmind.transposition import TranspositionTable, TTEntry

__all__ = [
    "Evaluator",
    "SearchResult",
    "Searcher",
    "TTEntry",
    "TranspositionTable",
    "evaluate",
    "find_best_move",
]
