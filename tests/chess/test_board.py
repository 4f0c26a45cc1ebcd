"""Unit tests for /src/chess/board.py"""

import pytest

from src.chess.board import Board
from src.chess.moves import en_passant_victim
from src.chess.notation import piece_from_token
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square
from src.core.exceptions import GameStateError


def make_board(*tokens: str) -> Board:
    return Board.from_pieces(piece_from_token(token) for token in tokens)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


# --- CREATION ---
def test_creating_board_in_starting_position() -> None:
    board = Board.starting_position()
    assert len(board.pieces()) == 32
    assert len(board.pieces_of(Color.WHITE)) == 16
    assert len(board.pieces_of(Color.BLACK)) == 16

    expected = {
        "a1": "R",
        "b1": "N",
        "c1": "B",
        "d1": "Q",
        "e1": "K",
        "h1": "R",
        "e2": "P",
        "a8": "r",
        "d8": "q",
        "e8": "k",
        "g8": "n",
        "h7": "p",
    }
    for name, symbol in expected.items():
        piece = board.piece_at(sq(name))
        assert piece is not None
        assert piece.symbol() == symbol
        assert piece.square == sq(name)

    for rank in "3456":
        for file in "abcdefgh":
            assert board.piece_at(sq(f"{file}{rank}")) is None


def test_pieces_are_listed_from_a8_to_h1() -> None:
    pieces = Board.starting_position().pieces()
    assert pieces[0].square == sq("a8")
    assert pieces[-1].square == sq("h1")
    assert "".join(piece.symbol() for piece in pieces[:8]) == "rnbqkbnr"


def test_from_pieces_refuses_shared_squares() -> None:
    with pytest.raises(GameStateError):
        make_board("Ke1", "ke1")


def test_finding_the_king() -> None:
    board = Board.starting_position()
    white_king = board.find_king(Color.WHITE)
    assert white_king is not None and white_king.square == sq("e1")
    assert board.count_kings(Color.BLACK) == 1

    board.remove(sq("e8"))
    assert board.find_king(Color.BLACK) is None
    assert board.count_kings(Color.BLACK) == 0


# --- RAW MANIPULATION ---
def test_place_and_remove() -> None:
    board = Board()
    knight = Piece(PieceType.KNIGHT, Color.WHITE, sq("c3"))
    assert board.place(knight)
    assert not board.place(Piece(PieceType.PAWN, Color.BLACK, sq("c3")))
    assert not board.place(Piece(PieceType.PAWN, Color.BLACK, Square(8, 0)))

    assert board.remove(sq("c3")) is knight
    assert board.remove(sq("c3")) is None
    assert board.remove(Square(-1, 3)) is None


def test_piece_at_off_board() -> None:
    assert Board.starting_position().piece_at(Square(9, 9)) is None


def test_raw_move_keeps_moved_flags() -> None:
    board = make_board("Ke1*", "ke8*", "Rh1*")
    rook = board.raw_move(sq("h1"), sq("h5"))
    assert rook is not None
    assert board.piece_at(sq("h5")) is rook
    assert board.piece_at(sq("h1")) is None
    assert not rook.moved


def test_move_piece_returns_captured_piece() -> None:
    board = make_board("Ke1*", "ke8*", "Rh1*", "nh5")
    knight = board.piece_at(sq("h5"))
    captured = board.move_piece(sq("h1"), sq("h5"))
    assert captured is knight

    rook = board.piece_at(sq("h5"))
    assert rook is not None and rook.type == PieceType.ROOK
    assert rook.moved


def test_perform_castle() -> None:
    board = make_board("Ke1*", "ke8*", "Ra1*")
    king = board.piece_at(sq("e1"))
    rook = board.piece_at(sq("a1"))
    assert king is not None and rook is not None

    board.perform_castle(king, rook)
    assert board.piece_at(sq("c1")) is king
    assert board.piece_at(sq("d1")) is rook
    assert board.piece_at(sq("e1")) is None
    assert board.piece_at(sq("a1")) is None
    assert king.moved and rook.moved


def test_deep_copy_is_independent() -> None:
    board = Board.starting_position()
    copy = board.deep_copy()
    copy.move_piece(sq("e2"), sq("e4"))

    assert board.piece_at(sq("e2")) is not None
    assert board.piece_at(sq("e4")) is None
    assert copy.piece_at(sq("e2")) is None
    assert copy.piece_at(sq("a1")) is not board.piece_at(sq("a1"))


# --- RULES ---
def test_twenty_opening_moves_per_side() -> None:
    board = Board.starting_position()
    for color in Color:
        moves = [
            (piece.square, target)
            for piece in board.pieces_of(color)
            for target in board.legal_moves(piece.square)
        ]
        assert len(moves) == 20


def test_legal_moves_of_empty_square() -> None:
    board = Board.starting_position()
    assert board.legal_moves(sq("e4")) == []
    assert board.legal_moves(Square(12, 12)) == []


def test_pinned_piece_cannot_move() -> None:
    board = make_board("Ke1", "Be2", "ka8", "re8")
    assert board.legal_moves(sq("e2")) == []
    assert board.pattern_legal(sq("e2"), sq("d3"))


def test_en_passant_that_exposes_the_king_is_illegal() -> None:
    """Both pawns leave the line between the rook and the king"""
    board = make_board("Ka5", "Pb5", "pc5", "rh5", "ke8")
    black_pawn = board.piece_at(sq("c5"))
    assert black_pawn is not None
    black_pawn.en_passant_eligible = True

    assert board.pattern_legal(sq("b5"), sq("c6"))
    assert board.legal_moves(sq("b5")) == [sq("b6")]


def test_check_detection() -> None:
    board = make_board("Ke1", "ke8", "qe4")
    assert board.is_in_check(Color.WHITE)
    assert not board.is_in_check(Color.BLACK)
    assert board.is_square_threatened(Color.WHITE, sq("e2"))
    assert not board.is_square_threatened(Color.WHITE, sq("d1"))


def test_check_detection_without_king() -> None:
    board = make_board("Ke1")
    with pytest.raises(GameStateError):
        board.is_in_check(Color.BLACK)


def test_simulation_leaves_board_untouched() -> None:
    board = make_board("Ke1", "Be2", "ka8", "re8")
    assert board.simulate_move_and_check_king_safety(Color.WHITE, sq("e2"), sq("d3"))
    assert not board.simulate_move_and_check_king_safety(Color.WHITE, sq("e1"), sq("d1"))

    bishop = board.piece_at(sq("e2"))
    assert bishop is not None and bishop.square == sq("e2")
    assert board.piece_at(sq("d3")) is None


@pytest.mark.parametrize(
    "tokens, en_passant_square, mover",
    [
        pytest.param(None, None, Color.WHITE, id="start-white"),
        pytest.param(None, None, Color.BLACK, id="start-black"),
        pytest.param("Ke1,Be2,ka8,re8", None, Color.WHITE, id="pin"),
        pytest.param("Ke1,Nc3,Bf1,Rh1,Pd2,ke8,qe4", None, Color.WHITE, id="check"),
        pytest.param("Ke1,Qd1,ke8,re7,bb4", None, Color.WHITE, id="double-check"),
        pytest.param("Ka5,Pb5,pc5,rh5,ke8", "c5", Color.WHITE, id="en-passant-discovered-check"),
        pytest.param("ka4,pc4,Pd4,Rh4,Ke1", "d4", Color.BLACK, id="black-en-passant-discovered-check"),
    ],
)
def test_no_legal_move_leaves_the_king_attacked(
    tokens: str | None, en_passant_square: str | None, mover: Color
) -> None:
    """Play out every legal move on a copy of the board: the mover's king is never attacked afterwards"""
    board = Board.starting_position() if tokens is None else make_board(*tokens.split(","))
    if en_passant_square is not None:
        pawn = board.piece_at(sq(en_passant_square))
        assert pawn is not None
        pawn.en_passant_eligible = True

    played = 0
    for piece in board.pieces_of(mover):
        for target in board.legal_moves(piece.square):
            after = board.deep_copy()
            moving = after.piece_at(piece.square)
            assert moving is not None
            victim = en_passant_victim(moving, target, after)
            if victim is not None:
                after.remove(victim.square)
            after.move_piece(piece.square, target)

            assert not after.is_in_check(mover), f"{piece.symbol()}{piece.square.to_algebraic()}-{target.to_algebraic()}"
            played += 1
    assert played > 0
