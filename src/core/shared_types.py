"""
Type definitions used across layers
"""

from enum import StrEnum


class Outcome(StrEnum):
    """Result of every operation that (attempts to) change the position"""

    NORMAL = "normal"
    FAILED = "failed"
    PROMOTION_PENDING = "promotion pending"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW_INSUFFICIENT_MATERIAL = "draw by insufficient material"


class GameStatus(StrEnum):
    AWAITING_MOVE = "awaiting move"
    AWAITING_PROMOTION = "awaiting promotion"
    GAME_OVER = "game over"


# --- Boundary versions of Color and PieceType. The chess package has its own (Enum based) versions.
# --- NOTE Same names on purpose: the imports show which versions are used in what part of the code


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
