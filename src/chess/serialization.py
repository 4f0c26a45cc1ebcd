"""
Conversion of a GameSnapshot into bytes (and back) for the persistence layer.

The snapshot is dumped as JSON through pydantic models, so decoding also validates the stored data.
"""

from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

from src.chess.moves import PROMOTION_LINE
from src.chess.notation import is_valid_square
from src.chess.pieces import Color, PieceType
from src.chess.snapshot import GameSnapshot, PieceRecord
from src.chess.square import Square
from src.core.exceptions import GameStateError, InvalidSnapshotError
from src.core.shared_types import Color as ColorName
from src.core.shared_types import GameStatus, Outcome
from src.core.shared_types import PieceType as PieceTypeName


def square_to_name(square: Optional[Square]) -> Optional[str]:
    return square.to_algebraic() if square is not None else None


def name_to_square(name: Optional[str]) -> Optional[Square]:
    return Square.from_algebraic(name) if name is not None else None


def validate_square_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not is_valid_square(value):
        raise ValueError(f"{value!r} is not a square of the board.")
    return value


class PieceData(BaseModel):
    type: PieceTypeName
    color: ColorName
    square: str
    moved: bool = False
    en_passant_eligible: bool = False

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return validate_square_name(value)

    @classmethod
    def from_record(cls, record: PieceRecord) -> "PieceData":
        return cls(
            type=PieceTypeName(record.type.name.lower()),
            color=ColorName(record.color.name.lower()),
            square=record.square.to_algebraic(),
            moved=record.moved,
            en_passant_eligible=record.en_passant_eligible,
        )

    def to_record(self) -> PieceRecord:
        return PieceRecord(
            PieceType[self.type.name],
            Color[self.color.name],
            Square.from_algebraic(self.square),
            moved=self.moved,
            en_passant_eligible=self.en_passant_eligible,
        )


class SnapshotData(BaseModel):
    pieces: list[PieceData]
    color_to_move: ColorName
    white_name: str
    black_name: str
    draw: bool = False
    white_captures: list[PieceData] = []
    black_captures: list[PieceData] = []
    white_non_pawn_moves: int = 0
    black_non_pawn_moves: int = 0
    status: GameStatus = GameStatus.AWAITING_MOVE
    last_outcome: Optional[Outcome] = None
    promotion_square: Optional[str] = None

    @field_validator("promotion_square")
    @classmethod
    def validate_promotion_square(cls, value: Optional[str]) -> Optional[str]:
        return validate_square_name(value)

    @classmethod
    def from_snapshot(cls, snapshot: GameSnapshot) -> "SnapshotData":
        return cls(
            pieces=[PieceData.from_record(record) for record in snapshot.pieces],
            color_to_move=ColorName(snapshot.color_to_move.name.lower()),
            white_name=snapshot.white_name,
            black_name=snapshot.black_name,
            draw=snapshot.draw,
            white_captures=[PieceData.from_record(record) for record in snapshot.white_captures],
            black_captures=[PieceData.from_record(record) for record in snapshot.black_captures],
            white_non_pawn_moves=snapshot.white_non_pawn_moves,
            black_non_pawn_moves=snapshot.black_non_pawn_moves,
            status=snapshot.status,
            last_outcome=snapshot.last_outcome,
            promotion_square=square_to_name(snapshot.promotion_square),
        )

    def to_snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            pieces=tuple(piece.to_record() for piece in self.pieces),
            color_to_move=Color[self.color_to_move.name],
            white_name=self.white_name,
            black_name=self.black_name,
            draw=self.draw,
            white_captures=tuple(piece.to_record() for piece in self.white_captures),
            black_captures=tuple(piece.to_record() for piece in self.black_captures),
            white_non_pawn_moves=self.white_non_pawn_moves,
            black_non_pawn_moves=self.black_non_pawn_moves,
            status=self.status,
            last_outcome=self.last_outcome,
            promotion_square=name_to_square(self.promotion_square),
        )


def capture_snapshot(snapshot: GameSnapshot) -> bytes:
    """Encode a snapshot for storage"""
    return SnapshotData.from_snapshot(snapshot).model_dump_json().encode("utf-8")


def validate_playable(snapshot: GameSnapshot) -> None:
    """
    Refuse snapshots the Game could not continue from:
    * a board that cannot be set up (ex. two pieces on a single square)
    * anything but exactly one king per color
    * a promotion status without the promoting pawn on its last line (or the other way around)
    """
    try:
        board = snapshot.build_board()
    except GameStateError as error:
        raise InvalidSnapshotError(f"Stored snapshot describes an impossible board: {error}") from error

    for color in Color:
        kings = board.count_kings(color)
        if kings != 1:
            raise InvalidSnapshotError(
                f"Expected exactly one {color.name.lower()} king, found {kings}."
            )

    awaiting_promotion = snapshot.status == GameStatus.AWAITING_PROMOTION
    if awaiting_promotion != (snapshot.promotion_square is not None):
        raise InvalidSnapshotError("Promotion status and promotion square do not match.")

    if snapshot.promotion_square is not None:
        # the turn already passed: the promoting pawn belongs to the opponent of the side to move
        pawn = board.piece_at(snapshot.promotion_square)
        promoting_color = snapshot.color_to_move.opponent
        if (
            pawn is None
            or pawn.type != PieceType.PAWN
            or pawn.color != promoting_color
            or pawn.square.line != PROMOTION_LINE[promoting_color]
        ):
            raise InvalidSnapshotError(
                f"No pawn waiting for promotion on {snapshot.promotion_square.to_algebraic()}."
            )


def restore_snapshot(blob: bytes) -> GameSnapshot:
    """
    Decode stored bytes into a snapshot.
    ---
    Raises InvalidSnapshotError if the bytes are no snapshot, or describe a game that cannot be continued.
    """
    try:
        data = SnapshotData.model_validate_json(blob)
    except ValidationError as error:
        raise InvalidSnapshotError(f"Stored snapshot could not be decoded: {error}") from error

    snapshot = data.to_snapshot()
    validate_playable(snapshot)
    return snapshot
