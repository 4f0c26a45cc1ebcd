"""
Boundary layer data model(s).

These objects are sent between the Service and the persistence layer.
(Decouples the table layout of the DB layer from the in-memory state of the domain layer)
"""

from dataclasses import dataclass

from src.core.shared_types import GameStatus


@dataclass
class GameModel:
    """Transport-safe representation of a saved chess game: the encoded snapshot plus a few searchable fields."""

    snapshot: bytes
    white_name: str
    black_name: str
    status: GameStatus
