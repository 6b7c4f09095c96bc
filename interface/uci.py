"""
UCI front end for chessmind.

Reads commands on stdin and answers on stdout: uci, isready, ucinewgame,
position, go, stop and quit. "go" runs a synchronous, depth-bounded search
and replies with one "info" line and "bestmove" once it finishes. "go depth
N" picks the depth and every other time control uses DEFAULT_DEPTH; "stop"
has nothing to interrupt.

stdout carries protocol lines only. Diagnostics are logged to stderr.
"""

import logging
import os
import sys
import time

# Allows `python interface/uci.py` from a checkout without installing.
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

import chess

from chessmind.constants import DEFAULT_DEPTH, MAX_DEPTH
from chessmind.search import Searcher

_log = logging.getLogger(__name__)

ENGINE_NAME = "chessmind"
ENGINE_AUTHOR = "chessmind developers"


def _send(line: str) -> None:
    """Emit one protocol line; GUIs read line by line, so flush every time."""
    print(line, flush=True)


class UciHandler:
    """
    Stateful handler for the UCI protocol.

    Holds the current board position and one Searcher whose transposition
    table persists across the moves of a game and is cleared by
    "ucinewgame".

    Attributes:
        board:    The current board position, updated by "position" commands.
        searcher: Search context (transposition table and counters).
    """

    def __init__(self) -> None:
        self.board: chess.Board = chess.Board()
        self.searcher: Searcher = Searcher()

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_uci(self) -> None:
        _send(f"id name {ENGINE_NAME}")
        _send(f"id author {ENGINE_AUTHOR}")
        _send("uciok")

    def handle_isready(self) -> None:
        _send("readyok")

    def handle_ucinewgame(self) -> None:
        """Reset the board and forget everything the table learned."""
        self.board = chess.Board()
        self.searcher.table.clear()

    def handle_position(self, tokens: list[str]) -> None:
        """
        Replace the board from "position startpos|fen <FEN> [moves ...]".

        An unparsable FEN keeps the previous board. Move replay stops at the
        first malformed or illegal move and keeps the position reached so far.
        """
        if not tokens:
            return

        if tokens[0] == "startpos":
            board = chess.Board()
            move_tokens = tokens[2:] if len(tokens) > 1 and tokens[1] == "moves" else []
        elif tokens[0] == "fen":
            # The FEN spans several tokens, up to "moves" if present.
            if "moves" in tokens:
                moves_idx = tokens.index("moves")
                fen = " ".join(tokens[1:moves_idx])
                move_tokens = tokens[moves_idx + 1:]
            else:
                fen = " ".join(tokens[1:])
                move_tokens = []
            try:
                board = chess.Board(fen)
            except ValueError as exc:
                _log.warning("uci: invalid fen %r: %s", fen, exc)
                return
        else:
            _log.warning("uci: unknown position type: %s", tokens[0])
            return

        for uci_move in move_tokens:
            try:
                move = chess.Move.from_uci(uci_move)
            except ValueError:
                _log.warning("uci: malformed move in position command: %s", uci_move)
                break
            if move not in board.legal_moves:
                _log.warning("uci: illegal move in position command: %s", uci_move)
                break
            board.push(move)

        self.board = board

    def handle_go(self, tokens: list[str]) -> None:
        """
        Search the current position and reply with "info" and "bestmove".

        Args:
            tokens: The command tokens with "go" already stripped.
        """
        depth = self._parse_go_depth(tokens)

        # Search a copy so the replayed game history stays untouched even if
        # the search is aborted by an exception.
        board = self.board.copy()
        start = time.monotonic()
        result = self.searcher.search(board, depth)
        elapsed_ms = max(1, int((time.monotonic() - start) * 1000))

        if result.move is None:
            # Mated or stalemated; a bestmove line is still owed.
            _send("bestmove (none)")
            return

        # UCI scores are from the side to move's point of view.
        score_cp = result.score if self.board.turn == chess.WHITE else -result.score
        nodes = result.nodes + result.qnodes
        _send(
            f"info depth {result.depth} score cp {score_cp} nodes {nodes} "
            f"nps {nodes * 1000 // elapsed_ms} time {elapsed_ms} "
            f"hashfull {self.searcher.table.hashfull()}"
        )
        _send(f"bestmove {result.move.uci()}")

    def handle_stop(self) -> None:
        """Nothing to stop: "go" only returns once its search has finished."""

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    @staticmethod
    def _parse_go_depth(tokens: list[str]) -> int:
        """
        Depth requested by a "go" command, clamped to [1, MAX_DEPTH].

        "go depth N" sets the depth. Time controls (movetime, wtime/btime,
        infinite) cannot be honoured by a depth-bounded search and map to
        DEFAULT_DEPTH.
        """
        if "depth" in tokens:
            idx = tokens.index("depth")
            try:
                return max(1, min(int(tokens[idx + 1]), MAX_DEPTH))
            except (ValueError, IndexError):
                _log.warning("uci: bad depth in go command: %s", " ".join(tokens))
        return DEFAULT_DEPTH


def run_uci_loop(stream=None) -> None:
    """
    Dispatch commands from `stream` (stdin by default) until "quit" or EOF.

    An exception inside one command is logged and the loop keeps reading.
    """
    handler = UciHandler()
    stream = sys.stdin if stream is None else stream

    for raw_line in stream:
        line = raw_line.strip()
        if not line:
            continue

        tokens = line.split()
        command = tokens[0]
        args = tokens[1:]

        if command == "quit":
            return

        try:
            if command == "uci":
                handler.handle_uci()
            elif command == "isready":
                handler.handle_isready()
            elif command == "ucinewgame":
                handler.handle_ucinewgame()
            elif command == "position":
                handler.handle_position(args)
            elif command == "go":
                handler.handle_go(args)
            elif command == "stop":
                handler.handle_stop()
            else:
                # Unknown commands are ignored, as UCI requires.
                _log.info("uci: ignoring unknown command: %r", command)
        except Exception:
            _log.exception("uci: unhandled error for command %r", command)


def main() -> None:
    logging.basicConfig(stream=sys.stderr, level=logging.WARNING)
    run_uci_loop()


if __name__ == "__main__":
    main()
