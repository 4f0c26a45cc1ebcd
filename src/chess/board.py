"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Iterable, Optional, Self

from src.chess.moves import (
    castling_destinations,
    en_passant_victim,
    is_pattern_legal,
    is_square_attacked,
    pattern_destinations,
)
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_SIZE, Square
from src.core.exceptions import GameStateError

BACK_RANK = "rnbqkbnr"


@dataclass
class Board:
    """
    The squares that hold a piece. An empty square is simply absent.

    Invariant: every piece is stored under the square it thinks it stands on.
    """

    position: dict[Square, Piece] = field(default_factory=dict)

    @classmethod
    def starting_position(cls) -> Self:
        """Standard setup: black on lines 0 and 1 (ranks 8 and 7), white on lines 6 and 7 (ranks 2 and 1)"""
        board = cls()
        for column, character in enumerate(BACK_RANK):
            board.place(Piece.from_symbol(character, Square(0, column)))
            board.place(Piece.from_symbol("p", Square(1, column)))
            board.place(Piece.from_symbol("P", Square(BOARD_SIZE - 2, column)))
            board.place(Piece.from_symbol(character.upper(), Square(BOARD_SIZE - 1, column)))
        return board

    @classmethod
    def from_pieces(cls, pieces: Iterable[Piece]) -> Self:
        """Build a board out of freshly created pieces. Pieces that do not fit (off the board / square taken) are refused."""
        board = cls()
        for piece in pieces:
            if not board.place(piece):
                raise GameStateError(f"Cannot place {piece.symbol()} on {piece.square}")
        return board

    # --- QUERIES ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        """Off-board squares are simply empty"""
        if not square.is_within_bounds():
            return None
        return self.position.get(square)

    def pieces(self) -> list[Piece]:
        """All pieces, read line by line (8th rank first) and left-to-right within a line"""
        return [self.position[square] for square in sorted(self.position, key=lambda sq: (sq.line, sq.column))]

    def pieces_of(self, color: Color) -> list[Piece]:
        return [piece for piece in self.pieces() if piece.color == color]

    def find_king(self, color: Color) -> Optional[Piece]:
        return next(
            (piece for piece in self.pieces_of(color) if piece.type == PieceType.KING),
            None,
        )

    def count_kings(self, color: Color) -> int:
        return len([piece for piece in self.pieces_of(color) if piece.type == PieceType.KING])

    # --- RAW MANIPULATION (no rules applied) ---
    def place(self, piece: Piece) -> bool:
        """Put a piece on the square stored in the piece. Fails when the square is off the board or taken."""
        if not piece.square.is_within_bounds():
            return False
        if piece.square in self.position:
            return False
        self.position[piece.square] = piece
        return True

    def remove(self, square: Square) -> Optional[Piece]:
        """Take whatever stands on the square off the board (no-op for empty or off-board squares)"""
        if not square.is_within_bounds():
            return None
        return self.position.pop(square, None)

    def raw_move(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """
        Relocate a piece without any check. Whatever stood on the destination disappears.
        Used when replaying positions / simulating: the 'moved' flag of kings and rooks is left alone.
        """
        if not (from_square.is_within_bounds() and to_square.is_within_bounds()):
            return None
        piece = self.position.pop(from_square, None)
        if piece is None:
            return None
        self.position[to_square] = piece
        piece.relocate(to_square, simulation=True)
        return piece

    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """
        Commit a move to the board (legality already verified by the Game).
        Returns the captured piece (if any).
        """
        piece = self.position.pop(from_square)
        captured = self.position.pop(to_square, None)
        self.position[to_square] = piece
        piece.relocate(to_square)
        return captured

    def perform_castle(self, king: Piece, rook: Piece) -> None:
        """Move both the King and the Rook at once"""
        king_to, rook_to = castling_destinations(king, rook)
        del self.position[king.square]
        del self.position[rook.square]
        king.relocate(king_to)
        rook.relocate(rook_to)
        self.position[king_to] = king
        self.position[rook_to] = rook

    def deep_copy(self) -> Self:
        """Fully independent board: every piece is a new object"""
        return deepcopy(self)

    # --- RULES ---
    def pattern_legal(self, from_square: Square, to_square: Square) -> bool:
        piece = self.piece_at(from_square)
        if piece is None:
            return False
        return is_pattern_legal(piece, to_square, self)

    def legal_moves(self, square: Square) -> list[Square]:
        """
        Destinations of the piece on `square` that do not leave its own king under attack.
        ---

        1. generate candidate squares, using the movement pattern of the piece
        2. remove the ones that put (or leave) your own king in check (simulated on a copy of the board)
        """
        piece = self.piece_at(square)
        if piece is None:
            return []

        return [
            target
            for target in pattern_destinations(piece, self)
            if not self.simulate_move_and_check_king_safety(piece.color, square, target)
        ]

    def is_square_threatened(self, by_opponent_of: Color, square: Square) -> bool:
        """
        Could any piece of the opponent of `by_opponent_of` capture on this square?

        NOTE: Only looks at attack patterns, never at the safety of the attacker's king.
        """
        return is_square_attacked(square, by_opponent_of.opponent, self)

    def is_in_check(self, color: Color) -> bool:
        king = self.find_king(color)
        if king is None:
            raise GameStateError(f"No {color.name.lower()} king on the board.")
        return self.is_square_threatened(color, king.square)

    def simulate_move_and_check_king_safety(
        self, mover_color: Color, from_square: Square, to_square: Square
    ) -> bool:
        """Return True if the move would leave the mover's king attacked

        plan:
        1. Copy the board
        2. make the candidate move on the copy (an en passant capture also removes the pawn it takes)
        3. determine if the king is in check on the new board

        The copy is thrown away afterwards. The live board is never touched.
        """
        board = self.deep_copy()
        piece = board.piece_at(from_square)
        if piece is not None:
            victim = en_passant_victim(piece, to_square, board)
            if victim is not None:
                board.remove(victim.square)
            board.raw_move(from_square, to_square)
        return board.is_in_check(mover_color)
