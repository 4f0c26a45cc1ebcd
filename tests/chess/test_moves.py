"""Unit tests for /src/chess/moves.py"""

import pytest

from src.chess.board import Board
from src.chess.moves import (
    candidate_bishop_moves,
    candidate_king_moves,
    candidate_knight_moves,
    candidate_pawn_moves,
    candidate_queen_moves,
    candidate_rook_moves,
    castling_destinations,
    en_passant_victim,
    is_attacked_by_bishop,
    is_attacked_by_king,
    is_attacked_by_knight,
    is_attacked_by_pawn,
    is_attacked_by_queen,
    is_attacked_by_rook,
    is_pattern_legal,
    is_square_attacked,
    rook_transit_squares,
)
from src.chess.notation import piece_from_token
from src.chess.pieces import Color, Piece
from src.chess.square import Square

KINGS = ["Ke1", "ke8"]


def make_board(*tokens: str) -> Board:
    return Board.from_pieces(piece_from_token(token) for token in tokens)


def squares(*names: str) -> set[Square]:
    return {Square.from_algebraic(name) for name in names}


def piece_on(board: Board, name: str) -> Piece:
    piece = board.piece_at(Square.from_algebraic(name))
    assert piece is not None
    return piece


# --- MOVEMENT RULES ---
def test_pawn_from_starting_line() -> None:
    board = Board.starting_position()
    assert set(candidate_pawn_moves(piece_on(board, "e2"), board)) == squares("e3", "e4")
    assert set(candidate_pawn_moves(piece_on(board, "d7"), board)) == squares("d6", "d5")


def test_pawn_single_step_after_leaving_starting_line() -> None:
    board = make_board(*KINGS, "Pc3")
    assert set(candidate_pawn_moves(piece_on(board, "c3"), board)) == squares("c4")


def test_pawn_cannot_push_onto_occupied_square() -> None:
    """Neither a single nor a double step is possible when the square in front is taken"""
    board = make_board(*KINGS, "Pc2", "nc3")
    assert candidate_pawn_moves(piece_on(board, "c2"), board) == []


def test_pawn_double_step_blocked() -> None:
    board = make_board(*KINGS, "Pc2", "nc4")
    assert set(candidate_pawn_moves(piece_on(board, "c2"), board)) == squares("c3")


def test_pawn_captures_diagonally() -> None:
    board = make_board(*KINGS, "Pc2", "nb3", "Nd3")
    assert set(candidate_pawn_moves(piece_on(board, "c2"), board)) == squares("c3", "c4", "b3")


def test_en_passant_destination() -> None:
    board = make_board(*KINGS, "Pe5", "pd5")
    black_pawn = piece_on(board, "d5")
    white_pawn = piece_on(board, "e5")
    assert Square.from_algebraic("d6") not in candidate_pawn_moves(white_pawn, board)

    black_pawn.en_passant_eligible = True
    assert set(candidate_pawn_moves(white_pawn, board)) == squares("e6", "d6")
    assert en_passant_victim(white_pawn, Square.from_algebraic("d6"), board) is black_pawn


def test_en_passant_victim_only_for_diagonal_steps() -> None:
    board = make_board(*KINGS, "Pe5", "pd5")
    piece_on(board, "d5").en_passant_eligible = True
    white_pawn = piece_on(board, "e5")
    assert en_passant_victim(white_pawn, Square.from_algebraic("e6"), board) is None
    assert en_passant_victim(white_pawn, Square.from_algebraic("f6"), board) is None


def test_knight_moves_from_corner() -> None:
    board = make_board(*KINGS, "Na1")
    assert set(candidate_knight_moves(piece_on(board, "a1"), board)) == squares("b3", "c2")


def test_knight_jumps_over_pieces() -> None:
    board = Board.starting_position()
    assert set(candidate_knight_moves(piece_on(board, "b1"), board)) == squares("a3", "c3")


def test_rook_on_empty_lines() -> None:
    board = make_board("Kh1", "kh8", "Rd4")
    assert len(candidate_rook_moves(piece_on(board, "d4"), board)) == 14


def test_rook_blocked_by_own_piece_and_capturing() -> None:
    board = make_board(*KINGS, "Ra1", "Pa3")
    assert set(candidate_rook_moves(piece_on(board, "a1"), board)) == squares("a2", "b1", "c1", "d1")

    board = make_board(*KINGS, "Ra1", "pa3")
    assert set(candidate_rook_moves(piece_on(board, "a1"), board)) == squares("a2", "a3", "b1", "c1", "d1")


def test_bishop_on_empty_diagonals() -> None:
    board = make_board(*KINGS, "Bd4")
    expected = squares(
        "c5", "b6", "a7", "e5", "f6", "g7", "h8", "c3", "b2", "a1", "e3", "f2", "g1"
    )
    assert set(candidate_bishop_moves(piece_on(board, "d4"), board)) == expected


def test_queen_combines_rook_and_bishop() -> None:
    board = make_board(*KINGS, "Qd4")
    queen = piece_on(board, "d4")
    assert len(candidate_queen_moves(queen, board)) == 27


def test_king_does_not_step_onto_attacked_squares() -> None:
    board = make_board("Ke1", "ke8", "rd8")
    assert set(candidate_king_moves(piece_on(board, "e1"), board)) == squares("e2", "f1", "f2")


def test_king_cannot_retreat_along_the_attacking_line() -> None:
    """Stepping away from the rook along its own line stays illegal, even though the king hides that square now"""
    board = make_board("Ke2", "ka8", "re8")
    moves = set(candidate_king_moves(piece_on(board, "e2"), board))
    assert Square.from_algebraic("e1") not in moves
    assert Square.from_algebraic("e3") not in moves
    assert squares("d1", "d2", "d3", "f1", "f2", "f3") == moves


def test_pattern_legality() -> None:
    board = Board.starting_position()
    knight = piece_on(board, "g1")
    assert is_pattern_legal(knight, Square.from_algebraic("f3"), board)
    assert not is_pattern_legal(knight, Square.from_algebraic("g3"), board)
    assert not is_pattern_legal(knight, Square(-1, 5), board)


# --- ATTACKING RULES ---
def test_pawn_attacks_diagonally_only() -> None:
    board = make_board(*KINGS, "Pe4", "pd6")
    assert is_attacked_by_pawn(Square.from_algebraic("d5"), Color.WHITE, board)
    assert is_attacked_by_pawn(Square.from_algebraic("f5"), Color.WHITE, board)
    assert not is_attacked_by_pawn(Square.from_algebraic("e5"), Color.WHITE, board)

    assert is_attacked_by_pawn(Square.from_algebraic("e5"), Color.BLACK, board)
    assert not is_attacked_by_pawn(Square.from_algebraic("d5"), Color.BLACK, board)


def test_knight_attack() -> None:
    board = make_board(*KINGS, "nf6")
    assert is_attacked_by_knight(Square.from_algebraic("e4"), Color.BLACK, board)
    assert not is_attacked_by_knight(Square.from_algebraic("e4"), Color.WHITE, board)
    assert not is_attacked_by_knight(Square.from_algebraic("f4"), Color.BLACK, board)


def test_sliding_attacks_are_blocked() -> None:
    board = make_board(*KINGS, "Ra4", "Bb1", "Qh4", "pc4")
    target = Square.from_algebraic("d4")
    assert not is_attacked_by_rook(target, Color.WHITE, board)
    assert is_attacked_by_queen(target, Color.WHITE, board)
    assert is_attacked_by_bishop(Square.from_algebraic("d3"), Color.WHITE, board)
    assert not is_attacked_by_bishop(Square.from_algebraic("e3"), Color.WHITE, board)


def test_king_attacks_adjacent_squares() -> None:
    board = make_board(*KINGS)
    assert is_attacked_by_king(Square.from_algebraic("d2"), Color.WHITE, board)
    assert not is_attacked_by_king(Square.from_algebraic("e3"), Color.WHITE, board)


def test_square_attacked_by_any_piece() -> None:
    board = Board.starting_position()
    assert is_square_attacked(Square.from_algebraic("f3"), Color.WHITE, board)
    assert is_square_attacked(Square.from_algebraic("f6"), Color.BLACK, board)
    assert not is_square_attacked(Square.from_algebraic("e4"), Color.WHITE, board)
    assert not is_square_attacked(Square.from_algebraic("e5"), Color.BLACK, board)


# --- CASTLING HELPERS ---
@pytest.mark.parametrize(
    "king_square, rook_square, king_to, rook_to, transit",
    [
        ("e1", "h1", "g1", "f1", ["g1", "f1"]),
        ("e1", "a1", "c1", "d1", ["b1", "c1", "d1"]),
        ("e8", "h8", "g8", "f8", ["g8", "f8"]),
        ("e8", "a8", "c8", "d8", ["b8", "c8", "d8"]),
    ],
)
def test_castling_squares(
    king_square: str, rook_square: str, king_to: str, rook_to: str, transit: list[str]
) -> None:
    board = make_board(f"K{king_square}*" if king_square.endswith("1") else f"k{king_square}*")
    rook_symbol = "R" if rook_square.endswith("1") else "r"
    board.place(piece_from_token(f"{rook_symbol}{rook_square}*"))

    king = piece_on(board, king_square)
    rook = piece_on(board, rook_square)
    assert castling_destinations(king, rook) == (
        Square.from_algebraic(king_to),
        Square.from_algebraic(rook_to),
    )
    assert rook_transit_squares(rook, Square.from_algebraic(rook_to)) == [
        Square.from_algebraic(name) for name in transit
    ]
