"""Unit tests for /src/chess/pieces.py"""

import pytest

from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square


@pytest.mark.parametrize(
    "symbol, piece_type, color",
    [
        ("P", PieceType.PAWN, Color.WHITE),
        ("n", PieceType.KNIGHT, Color.BLACK),
        ("B", PieceType.BISHOP, Color.WHITE),
        ("r", PieceType.ROOK, Color.BLACK),
        ("Q", PieceType.QUEEN, Color.WHITE),
        ("k", PieceType.KING, Color.BLACK),
    ],
)
def test_creating_from_symbol(symbol: str, piece_type: PieceType, color: Color) -> None:
    """Upper case symbols are white pieces, lower case are black"""
    piece = Piece.from_symbol(symbol, Square(3, 3))
    assert piece.type == piece_type
    assert piece.color == color
    assert piece.symbol() == symbol
    assert not piece.moved
    assert not piece.en_passant_eligible


def test_unknown_symbol() -> None:
    with pytest.raises(KeyError):
        Piece.from_symbol("x", Square(0, 0))


def test_opponent_color() -> None:
    assert Color.WHITE.opponent == Color.BLACK
    assert Color.BLACK.opponent == Color.WHITE


@pytest.mark.parametrize("symbol", ["K", "r"])
def test_king_and_rook_remember_moving(symbol: str) -> None:
    piece = Piece.from_symbol(symbol, Square(7, 4))
    piece.relocate(Square(7, 5))
    assert piece.square == Square(7, 5)
    assert piece.moved


@pytest.mark.parametrize("symbol", ["P", "n", "B", "q"])
def test_other_pieces_do_not_track_moving(symbol: str) -> None:
    piece = Piece.from_symbol(symbol, Square(4, 4))
    piece.relocate(Square(3, 4))
    assert piece.square == Square(3, 4)
    assert not piece.moved


def test_simulated_relocation_keeps_moved_flag() -> None:
    """Moves on a throw-away board must not cost the king its right to castle"""
    king = Piece.from_symbol("K", Square(7, 4))
    king.relocate(Square(7, 5), simulation=True)
    assert king.square == Square(7, 5)
    assert not king.moved
