"""Defines the types of chess pieces"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from src.chess.square import Square


class PieceType(Enum):
    PAWN = auto()
    KNIGHT = auto()
    BISHOP = auto()
    ROOK = auto()
    QUEEN = auto()
    KING = auto()


class Color(Enum):
    WHITE = auto()
    BLACK = auto()

    @property
    def opponent(self) -> Color:
        return Color.BLACK if self == Color.WHITE else Color.WHITE


SYMBOL_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_SYMBOL: dict[PieceType, str] = {
    value: key for key, value in SYMBOL_TO_PIECE.items()
}

# Only these pieces remember whether they moved: it decides if they can still castle.
TRACKS_MOVED: frozenset[PieceType] = frozenset({PieceType.ROOK, PieceType.KING})

PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)


@dataclass
class Piece:
    type: PieceType
    color: Color
    square: Square
    moved: bool = False
    en_passant_eligible: bool = False

    @classmethod
    def from_symbol(cls, character: str, square: Square) -> Piece:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = SYMBOL_TO_PIECE[character.lower()]
        return cls(piece_type, color, square)

    def symbol(self) -> str:
        return (
            PIECE_TO_SYMBOL[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_SYMBOL[self.type].lower()
        )

    @property
    def tracks_moved(self) -> bool:
        return self.type in TRACKS_MOVED

    def relocate(self, square: Square, simulation: bool = False) -> None:
        """Update the stored coordinates. A real (non-simulated) move of a king/rook is remembered forever."""
        self.square = square
        if not simulation and self.tracks_moved:
            self.moved = True
