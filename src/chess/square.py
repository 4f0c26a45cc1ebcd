"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8.
BOARD_SIZE = 8
FILE_NAMES = "abcdefgh"
RANK_NAMES = "12345678"


@dataclass(frozen=True)
class Square:
    """
    Grid coordinates: line 0 is the 8th rank (black's back rank), line 7 is the 1st rank.
    Column 0 is the a-file.
    """

    line: int
    column: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' - 'h1' get converted to (0,0) - (7,7)"""
        column = ord(sq[0].lower()) - ord("a")
        line = BOARD_SIZE - int(sq[1])
        return cls(line, column)

    def to_algebraic(self) -> str:
        return f"{chr(self.column + ord('a'))}{BOARD_SIZE - self.line}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.line < BOARD_SIZE) and (0 <= self.column < BOARD_SIZE)

    def offset(self, d_line: int, d_column: int) -> Square:
        return Square(self.line + d_line, self.column + d_column)
