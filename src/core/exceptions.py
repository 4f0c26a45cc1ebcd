"""
Custom exceptions shared by all layers.

Illegal moves are NOT exceptions: the Game reports them as an Outcome.
Exceptions are reserved for malformed input at the boundaries and for broken invariants.
"""


class GameError(Exception):
    """Top-level exception for anything going wrong in this application"""


class GameStateError(GameError):
    """The game ended up in a state that should be unreachable (ex. a king vanished from the board)"""


class InvalidNotationError(GameError):
    """Text could not be interpreted as an exported game"""


class InvalidSnapshotError(GameError):
    """Stored snapshot could not be decoded"""


class RepositoryError(GameError):
    """Persistence layer could not find / store the requested game"""


class InvalidRequestError(GameError):
    """
    Request models reject the data they were constructed with.

    NOTE: deliberately not a ValueError, so pydantic lets it through instead of wrapping it into a ValidationError.
    """
