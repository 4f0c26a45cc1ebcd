"""Side-specific bookkeeping: which pieces a player still has, what they captured, which pawns can be taken en passant."""

from dataclasses import dataclass, field
from typing import Self

from src.chess.board import Board
from src.chess.pieces import Color, Piece, PieceType

# Material that can never force checkmate on its own (besides the king)
MINOR_PIECES: frozenset[PieceType] = frozenset({PieceType.BISHOP, PieceType.KNIGHT})


@dataclass
class Player:
    """
    NOTE: `pieces` holds the very same objects that stand on the Board (references, not copies).
    Whenever the board gets replaced as a whole, build a new Player with `from_board()`.
    """

    color: Color
    name: str
    pieces: list[Piece] = field(default_factory=list)
    captured: list[Piece] = field(default_factory=list)
    en_passant_pawns: list[Piece] = field(default_factory=list)
    consecutive_non_pawn_moves: int = 0

    @classmethod
    def from_board(cls, color: Color, name: str, board: Board) -> Self:
        """Scan the board for the pieces of this color"""
        pieces = board.pieces_of(color)
        en_passant_pawns = [
            piece
            for piece in pieces
            if piece.type == PieceType.PAWN and piece.en_passant_eligible
        ]
        return cls(color, name, pieces, en_passant_pawns=en_passant_pawns)

    def lose_piece(self, piece: Piece) -> None:
        self.pieces = [own for own in self.pieces if own is not piece]

    def add_piece(self, piece: Piece) -> None:
        self.pieces.append(piece)

    def replace_piece(self, old: Piece, new: Piece) -> None:
        """Used for promotion: the pawn leaves, the new piece takes its place"""
        self.lose_piece(old)
        self.add_piece(new)

    def record_capture(self, piece: Piece) -> None:
        self.captured.append(piece)

    def captured_symbols(self) -> list[str]:
        return [piece.symbol() for piece in self.captured]

    # -- EN PASSANT --
    def mark_en_passant(self, pawn: Piece) -> None:
        """The pawn just made its double step: the opponent may take it en passant on their very next turn."""
        pawn.en_passant_eligible = True
        self.en_passant_pawns.append(pawn)

    def clear_en_passant(self) -> None:
        """Called as soon as this player moves again: the window of the opponent has closed."""
        for pawn in self.en_passant_pawns:
            pawn.en_passant_eligible = False
        self.en_passant_pawns.clear()

    # -- MOVE COUNTERS --
    def pawn_moved(self) -> None:
        self.consecutive_non_pawn_moves = 0

    def non_pawn_moved(self) -> None:
        self.consecutive_non_pawn_moves += 1

    # -- MATERIAL --
    def has_insufficient_material(self) -> bool:
        """
        A lone king, or a king with a single bishop OR a single knight, cannot mate.
        Any pawn, rook, or queen (or two minor pieces) can.
        """
        others = [piece for piece in self.pieces if piece.type != PieceType.KING]
        if any(piece.type not in MINOR_PIECES for piece in others):
            return False
        return len(others) <= 1
