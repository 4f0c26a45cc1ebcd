"""
Plain-text export / import of a position.

<side to move>,<piece token>,<piece token>,...

* The side to move is either "WHITE" or "BLACK"
* A piece token is <symbol><file><rank>[*]
    - symbol: K Q R B N P (upper case: white pieces, lower case: black pieces)
    - file: a-h, rank: 1-8
    - a trailing '*' marks a king / rook that has NOT moved yet (i.e. still allowed to castle).
      Pawns, knights, bishops and queens never carry one.

ex) The standard starting position reads
WHITE,ra8*,nb8,bc8,qd8,ke8*,bf8,ng8,rh8*,pa7,...,Ra1*,Nb1,Bc1,Qd1,Ke1*,Bf1,Ng1,Rh1*
"""

from dataclasses import dataclass
from typing import Self

from src.chess.board import Board
from src.chess.pieces import SYMBOL_TO_PIECE, Color, Piece, PieceType
from src.chess.square import BOARD_SIZE, FILE_NAMES, RANK_NAMES, Square
from src.core.exceptions import InvalidNotationError

TOKEN_SEPARATOR = ","
UNMOVED_MARKER = "*"
SIDE_TO_COLOR: dict[str, Color] = {"WHITE": Color.WHITE, "BLACK": Color.BLACK}
COLOR_TO_SIDE: dict[Color, str] = {value: key for key, value in SIDE_TO_COLOR.items()}
MARKABLE_SYMBOLS = {"k", "r"}


def is_valid_side(token: str) -> bool:
    return token.strip().upper() in SIDE_TO_COLOR


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    if len(square) != 2:
        return False

    file_char, rank_char = square[0], square[1]
    if file_char not in FILE_NAMES[:BOARD_SIZE]:
        return False

    return rank_char in RANK_NAMES[:BOARD_SIZE]


def is_valid_piece_token(token: str) -> bool:
    """ex) 'Ke1*', 'pd5', 'Rh1'"""
    if token.endswith(UNMOVED_MARKER):
        token = token[: -len(UNMOVED_MARKER)]
        if token[:1].lower() not in MARKABLE_SYMBOLS:
            return False

    if len(token) != 3:
        return False

    symbol, square = token[0], token[1:]
    return symbol.lower() in SYMBOL_TO_PIECE and is_valid_square(square)


def split_tokens(text: str) -> list[str]:
    """Trim every token and skip the empty ones (ex. a trailing comma)"""
    return [token.strip() for token in text.split(TOKEN_SEPARATOR) if token.strip()]


def is_valid_notation(text: str) -> bool:
    """Structural check only. Whether the kings are present is checked by `NotationState.from_notation`"""
    tokens = split_tokens(text)
    if not tokens or not is_valid_side(tokens[0]):
        return False
    return all(is_valid_piece_token(token) for token in tokens[1:])


def piece_to_token(piece: Piece) -> str:
    unmoved = UNMOVED_MARKER if piece.tracks_moved and not piece.moved else ""
    return f"{piece.symbol()}{piece.square.to_algebraic()}{unmoved}"


def piece_from_token(token: str) -> Piece:
    """Piece factory for the notation. A king / rook without '*' has already moved."""
    if not is_valid_piece_token(token):
        raise InvalidNotationError(f"Cannot interpret {token!r} as a piece.")

    unmoved = token.endswith(UNMOVED_MARKER)
    piece = Piece.from_symbol(token[0], Square.from_algebraic(token[1:3]))
    if piece.tracks_moved:
        piece.moved = not unmoved
    return piece


@dataclass
class NotationState:
    """Data that can be constructed from the exported text"""

    color_to_move: Color
    pieces: list[Piece]

    @classmethod
    def from_board(cls, board: Board, color_to_move: Color) -> Self:
        return cls(color_to_move, board.pieces())

    @classmethod
    def from_notation(cls, text: str) -> Self:
        """Parse the text into data. Rejects anything that would not give a playable board."""

        if not is_valid_notation(text):
            raise InvalidNotationError(f"Cannot interpret supplied text as a game: {text!r}")

        side, *piece_tokens = split_tokens(text)
        color_to_move = SIDE_TO_COLOR[side.upper()]
        pieces = [piece_from_token(token) for token in piece_tokens]

        squares = [piece.square for piece in pieces]
        if len(set(squares)) != len(squares):
            raise InvalidNotationError("Two pieces cannot share a square.")

        for color in Color:
            kings = [
                piece
                for piece in pieces
                if piece.color == color and piece.type == PieceType.KING
            ]
            if len(kings) != 1:
                raise InvalidNotationError(
                    f"Expected exactly one {color.name.lower()} king, found {len(kings)}."
                )

        return cls(color_to_move, pieces)

    def to_notation(self) -> str:
        """reverse operation: write the text from the given data"""
        tokens = [COLOR_TO_SIDE[self.color_to_move]]
        tokens.extend(piece_to_token(piece) for piece in self.pieces)
        return TOKEN_SEPARATOR.join(tokens)

    def to_board(self) -> Board:
        return Board.from_pieces(self.pieces)
