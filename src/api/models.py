"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, GameStatus, Outcome, PieceType

PlayerName = str
SquareName = str

PROMOTION_CHOICES = [PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT]


def _is_algebraic_notation(value: str) -> bool:
    if len(value) != 2:
        return False

    file_character, rank_character = value[0], value[1]
    return file_character in "abcdefgh" and rank_character in "12345678"


def _validate_square(value: str) -> str:
    value = value.strip().lower()
    if not _is_algebraic_notation(value):
        raise InvalidRequestError(f"Cannot interpret {value!r} as a valid square name.")
    return value


# --- REQUEST MODELS ---
class NewGameRequest(BaseModel):
    white_name: Optional[PlayerName] = None
    black_name: Optional[PlayerName] = None


class MoveRequest(BaseModel):
    from_square: SquareName
    to_square: SquareName

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class CastleRequest(BaseModel):
    king_square: SquareName
    rook_square: SquareName

    @field_validator(*["king_square", "rook_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class PromotionRequest(BaseModel):
    promote_to: PieceType

    @field_validator("promote_to")
    @classmethod
    def validate_choice(cls, value: PieceType) -> PieceType:
        if value not in PROMOTION_CHOICES:
            raise InvalidRequestError(
                f"A pawn cannot be promoted to a {value}. Pick one from {', '.join(PROMOTION_CHOICES)}."
            )
        return value


class LegalMovesRequest(BaseModel):
    square: SquareName

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class ExportGameRequest(BaseModel):
    path: str


class ImportGameRequest(BaseModel):
    path: str
    white_name: Optional[PlayerName] = None
    black_name: Optional[PlayerName] = None


class LoadGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    players: dict[Color, PlayerName]
    color_to_move: Color
    status: GameStatus
    last_outcome: Optional[Outcome]
    in_check: bool
    draw: bool
    pending_promotion: Optional[SquareName]
    position: str
    captured: dict[Color, list[str]]
    can_undo: bool
    can_redo: bool
    log: list[str]


class MoveResponse(BaseModel):
    outcome: Outcome
    game: GameResponse


class LegalMovesResponse(BaseModel):
    square: SquareName
    legal_moves: list[SquareName]


class SavedGameResponse(BaseModel):
    game_id: UUID
    players: dict[Color, PlayerName]
    status: GameStatus
