"""
Immutable copy of the full game state. Used to implement undo / redo and to persist a game.

Everything is stored by value (records, not live pieces), so the live game can keep mutating its own objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.chess.board import Board
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square
from src.core.shared_types import GameStatus, Outcome


@dataclass(frozen=True)
class PieceRecord:
    type: PieceType
    color: Color
    square: Square
    moved: bool = False
    en_passant_eligible: bool = False

    @classmethod
    def from_piece(cls, piece: Piece) -> PieceRecord:
        return cls(
            piece.type,
            piece.color,
            piece.square,
            piece.moved,
            piece.en_passant_eligible,
        )

    def to_piece(self) -> Piece:
        return Piece(
            self.type,
            self.color,
            self.square,
            moved=self.moved,
            en_passant_eligible=self.en_passant_eligible,
        )


@dataclass(frozen=True)
class GameSnapshot:
    pieces: tuple[PieceRecord, ...]
    color_to_move: Color
    white_name: str
    black_name: str
    draw: bool
    white_captures: tuple[PieceRecord, ...] = ()
    black_captures: tuple[PieceRecord, ...] = ()
    white_non_pawn_moves: int = 0
    black_non_pawn_moves: int = 0
    status: GameStatus = GameStatus.AWAITING_MOVE
    last_outcome: Optional[Outcome] = None
    promotion_square: Optional[Square] = None

    @staticmethod
    def records(pieces: list[Piece]) -> tuple[PieceRecord, ...]:
        return tuple(PieceRecord.from_piece(piece) for piece in pieces)

    def build_board(self) -> Board:
        """Every call creates brand new pieces"""
        return Board.from_pieces(record.to_piece() for record in self.pieces)

    def captures_of(self, color: Color) -> list[Piece]:
        records = self.white_captures if color == Color.WHITE else self.black_captures
        return [record.to_piece() for record in records]

    def non_pawn_moves_of(self, color: Color) -> int:
        return self.white_non_pawn_moves if color == Color.WHITE else self.black_non_pawn_moves

    def name_of(self, color: Color) -> str:
        return self.white_name if color == Color.WHITE else self.black_name
