from __future__ import annotations

import chess
import pytest

from chessmind.constants import (
    BACKWARD_PAWN_PENALTY,
    BISHOP_CENTER_BONUS,
    BISHOP_MOBILITY_BONUS,
    BISHOP_PAIR_BONUS,
    BISHOP_PAWN_ATTACK_PENALTY,
    CHECK_BONUS,
    CHECKMATE_SCORE,
    ISOLATED_PAWN_PENALTY,
    KING_MULTI_ATTACK_PENALTY,
    KING_RESTRICTION_BONUS,
    PASSED_PAWN_BONUS,
    PAWN_CAPTURE_TARGET_BONUS,
    PAWN_CENTER_BONUS,
    PAWN_CHAIN_BONUS,
    PAWN_UNDEFENDED_PENALTY,
    QUEEN_EARLY_TABLE,
    QUEEN_LATE_TABLE,
    QUEEN_PHASE_PIECE_COUNT,
    QUEEN_VALUE,
    ROOK_EXCHANGE_PENALTY,
    ROOK_MINOR_ATTACK_PENALTY,
    ROOK_MOBILITY_BONUS,
    ROOK_OPEN_LINE_BONUS,
    ROOK_PAWN_ATTACK_PENALTY,
    ROOK_UNDEFENDED_PENALTY,
    STACKED_ROOKS_BONUS,
)
from chessmind.evaluate import TERMS, Evaluator, evaluate

SYMMETRY_FENS = [
    chess.STARTING_FEN,
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4",
    "r2q1rk1/ppp2ppp/2np1n2/2b1p1B1/2B1P1b1/2NP1N2/PPP2PPP/R2Q1RK1 w - - 0 8",
    "8/5pk1/6p1/7p/7P/6P1/5PK1/8 w - - 0 1",
    "4r2k/8/8/8/1b6/8/8/4K3 w - - 0 1",
    "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3",
]


def _play(*ucis: str) -> chess.Board:
    board = chess.Board()
    for uci in ucis:
        board.push_uci(uci)
    return board


def test_start_position_is_balanced() -> None:
    assert evaluate(chess.Board()) == 0


@pytest.mark.parametrize("fen", SYMMETRY_FENS)
def test_mirrored_position_negates_score(fen: str) -> None:
    board = chess.Board(fen)
    assert evaluate(board) == -evaluate(board.mirror())


def test_evaluate_does_not_touch_the_board() -> None:
    board = chess.Board(SYMMETRY_FENS[1])
    fen = board.fen()
    evaluate(board)
    assert board.fen() == fen


def test_material_term_is_white_relative() -> None:
    white_up = Evaluator(chess.Board("4k3/8/8/8/8/8/8/3QK3 w - - 0 1")).breakdown()
    black_up = Evaluator(chess.Board("3qk3/8/8/8/8/8/8/4K3 w - - 0 1")).breakdown()
    assert white_up["material"] == QUEEN_VALUE
    assert black_up["material"] == -QUEEN_VALUE


def test_breakdown_total_is_sum_of_terms() -> None:
    terms = Evaluator(chess.Board(SYMMETRY_FENS[3])).breakdown()
    assert list(terms) == [*TERMS, "total"]
    assert terms["total"] == sum(terms[name] for name in TERMS)


def test_repeated_calls_on_one_evaluator_agree() -> None:
    evaluator = Evaluator(chess.Board(SYMMETRY_FENS[1]))
    first = evaluator.static_eval()
    assert evaluator.static_eval() == first
    assert evaluator.breakdown()["total"] == first


def test_checkmate_scores_extreme_sentinel() -> None:
    # Fool's mate: White is mated.
    board = _play("f2f3", "e7e5", "g2g4", "d8h4")
    assert evaluate(board) == -CHECKMATE_SCORE
    assert evaluate(board, chess.BLACK) == CHECKMATE_SCORE

    # Scholar-style Qh5 mate: Black is mated.
    board = _play("e2e4", "f7f6", "d2d4", "g7g5", "d1h5")
    assert board.is_checkmate()
    assert evaluate(board) == CHECKMATE_SCORE
    assert Evaluator(board).breakdown() == {"terminal": CHECKMATE_SCORE, "total": CHECKMATE_SCORE}


@pytest.mark.parametrize(
    "fen",
    [
        "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1",  # stalemate
        "8/8/4k3/8/8/4K3/8/8 w - - 0 1",  # insufficient material
    ],
)
def test_drawn_position_scores_zero(fen: str) -> None:
    assert evaluate(chess.Board(fen)) == 0
    assert evaluate(chess.Board(fen), chess.BLACK) == 0


def test_doubled_isolated_pawns_score_below_split_pawns() -> None:
    doubled = Evaluator(chess.Board("7k/8/8/8/8/4P3/4P3/7K w - - 0 1")).breakdown()
    split = Evaluator(chess.Board("7k/8/8/8/8/3P4/4P3/7K w - - 0 1")).breakdown()

    assert doubled["material"] == split["material"]
    assert doubled["positional"] == split["positional"]
    assert doubled["pawns"] < split["pawns"]
    assert doubled["total"] < split["total"]


def test_rook_prefers_file_without_enemy_pawns() -> None:
    closed = Evaluator(chess.Board("7k/3p4/8/8/8/8/7K/3R4 w - - 0 1")).breakdown()
    opened = Evaluator(chess.Board("7k/7p/8/8/8/8/7K/3R4 w - - 0 1")).breakdown()
    assert opened["rooks"] > closed["rooks"]


def test_check_and_king_ring_pressure_accumulate() -> None:
    # Re1 checks the king on e8 and also hits e7 next to it.
    terms = Evaluator(chess.Board("4k3/8/8/8/8/8/8/4RK2 b - - 0 1")).breakdown()
    assert terms["checks"] == CHECK_BONUS + KING_RESTRICTION_BONUS


def test_king_attacked_twice_is_penalised() -> None:
    # Rook e8 and bishop b4 both give check.
    terms = Evaluator(chess.Board("4r2k/8/8/8/1b6/8/8/4K3 w - - 0 1")).breakdown()
    assert terms["king_safety"] == -KING_MULTI_ATTACK_PENALTY


def test_hanging_knight_is_penalised() -> None:
    defended = Evaluator(chess.Board("4k3/8/8/3p4/4N3/5P2/8/4K3 w - - 0 1")).breakdown()
    undefended = Evaluator(chess.Board("4k3/8/8/3p4/4N3/8/5P2/4K3 w - - 0 1")).breakdown()
    assert undefended["hanging"] < defended["hanging"]


def test_draw_rules_score_zero() -> None:
    assert evaluate(chess.Board("4k3/8/8/8/8/8/8/R3K3 w - - 100 80")) == 0

    board = chess.Board("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    assert evaluate(board) > 0
    for _ in range(2):
        for uci in ("e1d1", "e8d8", "d1e1", "d8e8"):
            board.push_uci(uci)
    assert board.is_repetition(3)
    assert evaluate(board) == 0
    assert Evaluator(board).breakdown() == {"terminal": 0, "total": 0}


# ---------------------------------------------------------------------------
# Individual terms
# ---------------------------------------------------------------------------


def test_bishop_pair_and_mobility() -> None:
    # Bc1 and Bf1 each see seven squares.
    pair = Evaluator(chess.Board("4k3/8/8/8/8/8/8/2B1KB2 w - - 0 1")).breakdown()
    single = Evaluator(chess.Board("4k3/8/8/8/8/8/8/2B1K3 w - - 0 1")).breakdown()
    assert pair["bishops"] == BISHOP_PAIR_BONUS + 14 * BISHOP_MOBILITY_BONUS
    assert single["bishops"] == 7 * BISHOP_MOBILITY_BONUS


def test_centralised_bishop() -> None:
    terms = Evaluator(chess.Board("4k3/8/8/8/3B4/8/8/4K3 w - - 0 1")).breakdown()
    assert terms["bishops"] == 13 * BISHOP_MOBILITY_BONUS + BISHOP_CENTER_BONUS
    mirrored = Evaluator(chess.Board("4k3/8/8/3b4/8/8/8/4K3 w - - 0 1")).breakdown()
    assert mirrored["bishops"] == -terms["bishops"]


def test_bishop_attacked_by_pawn_pays_even_when_defended() -> None:
    # Bd4 is defended by c3 but hit by e5; Bd4 in turn hits the loose e5 pawn.
    by_pawn = Evaluator(chess.Board("4k3/8/8/4p3/3B4/2P5/8/4K3 w - - 0 1")).breakdown()
    assert by_pawn["hanging"] == -BISHOP_PAWN_ATTACK_PENALTY + PAWN_UNDEFENDED_PENALTY

    # One knight against one defender is an even exchange.
    by_knight = Evaluator(chess.Board("4k3/8/2n5/8/3B4/2P5/8/4K3 w - - 0 1")).breakdown()
    assert by_knight["hanging"] == 0


@pytest.mark.parametrize(
    ("black_back_rank", "table"),
    [
        ("4k3/pppppppp", QUEEN_LATE_TABLE),  # 9 pieces
        ("4k1n1/pppppppp", QUEEN_LATE_TABLE),  # 10 pieces
        ("2b1k1n1/pppppppp", QUEEN_EARLY_TABLE),  # 11 pieces
    ],
)
def test_queen_table_follows_enemy_piece_count(black_back_rank: str, table: tuple[int, ...]) -> None:
    board = chess.Board(f"{black_back_rank}/8/8/8/8/8/3QK3 w - - 0 1")
    assert chess.popcount(board.occupied_co[chess.BLACK]) - QUEEN_PHASE_PIECE_COUNT in (-1, 0, 1)

    evaluator = Evaluator(board)
    evaluator._queens(chess.WHITE)
    assert evaluator.positional_score == table[chess.D1 ^ 56]


@pytest.mark.parametrize(
    ("fen", "expected"),
    [
        # e2 is passed and isolated.
        ("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1", PASSED_PAWN_BONUS - ISOLATED_PAWN_PENALTY),
        # d7 blocks e2 from being passed and e2 blocks d7: both isolated only.
        ("4k3/3p4/8/8/8/8/4P3/4K3 w - - 0 1", 0),
        # d2 supports e3: one chain link, and d2 has no partner on its c side.
        (
            "4k3/8/8/8/8/4P3/3P4/4K3 w - - 0 1",
            2 * PASSED_PAWN_BONUS + PAWN_CHAIN_BONUS - BACKWARD_PAWN_PENALTY,
        ),
        # d2 supports both c3 and e3.
        (
            "4k3/8/8/8/8/2P1P3/3P4/4K3 w - - 0 1",
            3 * PASSED_PAWN_BONUS + 2 * PAWN_CHAIN_BONUS - BACKWARD_PAWN_PENALTY,
        ),
        # e4 sits in the centre and attacks the knight on d5.
        (
            "4k3/8/8/3n4/4P3/8/8/4K3 w - - 0 1",
            PASSED_PAWN_BONUS - ISOLATED_PAWN_PENALTY + PAWN_CENTER_BONUS + PAWN_CAPTURE_TARGET_BONUS,
        ),
    ],
)
def test_pawn_structure_terms(fen: str, expected: int) -> None:
    assert Evaluator(chess.Board(fen)).breakdown()["pawns"] == expected


def test_rooks_on_one_rank_are_stacked() -> None:
    # Ra1 sees 11 squares, Rh1 sees 10; both stand on an open file and rank.
    terms = Evaluator(chess.Board("4k3/8/8/8/8/8/8/R3K2R w - - 0 1")).breakdown()
    assert terms["rooks"] == 4 * ROOK_OPEN_LINE_BONUS + STACKED_ROOKS_BONUS + 21 * ROOK_MOBILITY_BONUS


@pytest.mark.parametrize(
    ("fen", "expected"),
    [
        # Undefended rook attacked by a queen.
        ("4k3/8/8/8/3R3q/8/8/K7 w - - 0 1", -ROOK_UNDEFENDED_PENALTY),
        # Defended by c3, attacked by the c5 pawn.
        ("4k3/8/8/2p5/3R4/2P5/8/4K3 w - - 0 1", -ROOK_PAWN_ATTACK_PENALTY),
        # Defended once, attacked by one knight.
        ("4k3/8/4n3/8/3R4/2P5/8/4K3 w - - 0 1", 0),
        # Defended once, attacked by a knight and a bishop.
        ("4k3/8/1b2n3/8/3R4/2P5/8/4K3 w - - 0 1", -ROOK_MINOR_ATTACK_PENALTY),
        # Defended once, attacked by a rook and a queen.
        ("3rk3/8/8/8/3R3q/2P5/8/K7 w - - 0 1", -ROOK_EXCHANGE_PENALTY),
    ],
)
def test_rook_hanging_penalty_depends_on_attackers(fen: str, expected: int) -> None:
    assert Evaluator(chess.Board(fen)).breakdown()["hanging"] == expected
