"""Linear undo / redo history built out of game snapshots."""

from typing import Protocol

from src.chess.snapshot import GameSnapshot


class Originator(Protocol):
    """Whatever owns the live state (the Game)"""

    def capture_snapshot(self) -> GameSnapshot: ...
    def restore_snapshot(self, snapshot: GameSnapshot) -> None: ...


class HistoryManager:
    """
    Two stacks of snapshots.
    ---

    * `save()` is called with the state BEFORE every committed move.
    * `undo()` puts the live state on the redo stack and restores the latest saved state.
    * `redo()` is the mirror operation.
    * A fresh move after some undos clears the redo stack (no branching history).
    """

    def __init__(self, originator: Originator) -> None:
        self._originator = originator
        self._undo_stack: list[GameSnapshot] = []
        self._redo_stack: list[GameSnapshot] = []

    def save(self, snapshot: GameSnapshot) -> None:
        self._redo_stack.clear()
        self._undo_stack.append(snapshot)

    def undo(self) -> bool:
        if not self._undo_stack:
            return False
        previous = self._undo_stack.pop()
        self._redo_stack.append(self._originator.capture_snapshot())
        self._originator.restore_snapshot(previous)
        return True

    def redo(self) -> bool:
        if not self._redo_stack:
            return False
        following = self._redo_stack.pop()
        self._undo_stack.append(self._originator.capture_snapshot())
        self._originator.restore_snapshot(following)
        return True

    def reset(self) -> None:
        self._undo_stack.clear()
        self._redo_stack.clear()

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)
