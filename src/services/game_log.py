"""Human readable record of what happened in the current game (the move list shown next to the board)."""

from loguru import logger


class GameLog:
    """
    Ordered log entries.

    NOTE: the same entry is never stored twice in a row (ex. re-sending the same failed move).
    """

    def __init__(self) -> None:
        self._entries: list[str] = []

    def add(self, entry: str) -> None:
        if self._entries and self._entries[-1] == entry:
            return
        self._entries.append(entry)
        logger.bind(component="game").info(entry)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
