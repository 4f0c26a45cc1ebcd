"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the movement pattern for each piece type.


Whether a move leaves your own king in check is checked later by the Board (on a throw-away copy).
The only exception is the king itself: its pattern already refuses to step onto an attacked square.
"""

from typing import Callable, Optional, Protocol

from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_SIZE, Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece_at(self, square: Square) -> Optional[Piece]: ...
    def simulate_move_and_check_king_safety(
        self, mover_color: Color, from_square: Square, to_square: Square
    ) -> bool: ...


# (delta line, delta column)
Vector = tuple[int, int]

DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS

# White moves UP the board (towards line 0), black moves DOWN
PAWN_DIRECTION: dict[Color, int] = {Color.WHITE: -1, Color.BLACK: 1}
PAWN_START_LINE: dict[Color, int] = {Color.WHITE: BOARD_SIZE - 2, Color.BLACK: 1}
PROMOTION_LINE: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: BOARD_SIZE - 1}


# --- MOVEMENT RULES ---
def raycasting_move(piece: Piece, board: Board, directions: list[Vector]) -> list[Square]:
    """
    Raycasting algorithm
    -----

    ---
    We define move directions and move along them until we hit another piece or
    the edge of the board. An opponent's piece can be captured, so it is the last square of the ray.
    Your own piece blocks the ray without being included.
    """
    squares: list[Square] = []
    for d_line, d_column in directions:
        target = piece.square
        while True:
            target = target.offset(d_line, d_column)
            if not target.is_within_bounds():
                break

            occupant = board.piece_at(target)
            if occupant is not None:
                if occupant.color != piece.color:
                    squares.append(target)
                break

            squares.append(target)
    return squares


def single_step_move(piece: Piece, board: Board, deltas: list[Vector]) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that jump a single step along a direction"""
    squares: list[Square] = []
    for d_line, d_column in deltas:
        target = piece.square.offset(d_line, d_column)
        if not target.is_within_bounds():
            continue

        occupant = board.piece_at(target)
        if occupant is None or occupant.color != piece.color:
            squares.append(target)
    return squares


def en_passant_victim(piece: Piece, target: Square, board: Board) -> Optional[Piece]:
    """
    The pawn that gets taken when `piece` moves diagonally onto the empty `target` square.
    ---

    The victim stands next to the moving pawn (same line, the target's column),
    must be an opponent's pawn, and must have just made its double step.
    Returns None if the move is not an en passant capture.
    """
    if piece.type != PieceType.PAWN:
        return None

    is_diagonal_step = (target.line - piece.square.line == PAWN_DIRECTION[piece.color]) and (
        abs(target.column - piece.square.column) == 1
    )
    if not is_diagonal_step or board.piece_at(target) is not None:
        return None

    adjacent = board.piece_at(Square(piece.square.line, target.column))
    if adjacent is None or adjacent.type != PieceType.PAWN:
        return None
    if adjacent.color == piece.color or not adjacent.en_passant_eligible:
        return None
    return adjacent


def candidate_pawn_moves(piece: Piece, board: Board) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward (onto an empty square).
    - can move by two from its starting line, if both squares are empty
    - takes diagonally
    - takes en passant diagonally onto an empty square

    NOTE: Promotion is handled by the Game
    """
    squares: list[Square] = []
    direction = PAWN_DIRECTION[piece.color]

    one_step = piece.square.offset(direction, 0)
    if one_step.is_within_bounds() and board.piece_at(one_step) is None:
        squares.append(one_step)

        two_steps = piece.square.offset(2 * direction, 0)
        on_start_line = piece.square.line == PAWN_START_LINE[piece.color]
        if on_start_line and board.piece_at(two_steps) is None:
            squares.append(two_steps)

    for d_column in [-1, 1]:
        target = piece.square.offset(direction, d_column)
        if not target.is_within_bounds():
            continue

        occupant = board.piece_at(target)
        if occupant is not None:
            if occupant.color != piece.color:
                squares.append(target)
        elif en_passant_victim(piece, target, board) is not None:
            squares.append(target)
    return squares


def candidate_knight_moves(piece: Piece, board: Board) -> list[Square]:
    """Knights always move such that |delta_line| + |delta_column| = 3, jumping over anything in between"""
    return single_step_move(piece, board, KNIGHT_DELTAS)


def candidate_bishop_moves(piece: Piece, board: Board) -> list[Square]:
    """Bishops move diagonally: |delta_line| = |delta_column|"""
    return raycasting_move(piece, board, DIAGONALS)


def candidate_rook_moves(piece: Piece, board: Board) -> list[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(piece, board, STRAIGHTS)


def candidate_queen_moves(piece: Piece, board: Board) -> list[Square]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_move(piece, board, DIAGONALS + STRAIGHTS)


def candidate_king_moves(piece: Piece, board: Board) -> list[Square]:
    """
    The king can move by a single square at the time, but never onto an attacked square.

    NOTE: The attack is computed with the king already standing on the destination.
    Looking at the current board would miss a slider whose line of sight was blocked by the king itself.

    Castling is a separate operation of the Game.
    """
    return [
        target
        for target in single_step_move(piece, board, KING_DELTAS)
        if not board.simulate_move_and_check_king_safety(piece.color, piece.square, target)
    ]


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Piece, Board], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def pattern_destinations(piece: Piece, board: Board) -> list[Square]:
    """All squares the piece could move to by its movement pattern (ignoring the safety of its own king)"""
    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(piece, board)


def is_pattern_legal(piece: Piece, target: Square, board: Board) -> bool:
    return target.is_within_bounds() and target in pattern_destinations(piece, board)


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    ---
    Where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and type
    that is allowed to move along the given directions?"_

    ---
    Returns TRUE if the first piece encountered along a direction is of the specified color and type.
    """
    for d_line, d_column in directions:
        target = square
        while True:
            target = target.offset(d_line, d_column)
            if not target.is_within_bounds():
                break

            piece_found = board.piece_at(target)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type == by_piece_type:
                    return True
                break
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Equivalent of `raycasting_attack()` for pawns, kings, and knights that only reach a single step along a direction.
    """
    for d_line, d_column in deltas:
        target = square.offset(d_line, d_column)
        if not target.is_within_bounds():
            continue

        piece_found = board.piece_at(target)
        if piece_found is not None and piece_found.color == by_color and piece_found.type == by_piece_type:
            return True
    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn attacks your square, look one line DOWN the board
    (white pawns move towards line 0). Hence the deltas are the opposite of the pawn's own capturing direction.

    NOTE: a pawn push does not attack anything, so only the diagonals count.
    The diagonal square may be empty: it is still covered (ex. a king cannot step there).
    """
    behind = -PAWN_DIRECTION[by_color]
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, [(behind, -1), (behind, 1)]
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, PieceType.BISHOP, board, DIAGONALS)


def is_attacked_by_rook(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, PieceType.ROOK, board, STRAIGHTS)


def is_attacked_by_queen(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(
        square, by_color, PieceType.QUEEN, board, STRAIGHTS + DIAGONALS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    """Adjacency only: the attacking king's own safety is irrelevant here (and would recurse forever)"""
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    return any(
        attack_rule(square, by_color, board) for attack_rule in ATTACK_RULES.values()
    )


# -- CASTLING MOVES ---
def castling_destinations(king: Piece, rook: Piece) -> tuple[Square, Square]:
    """
    Squares where the king and the rook end up:
    the king moves two columns towards the rook, the rook lands right next to the king on the side it came from.
    """
    direction = 1 if rook.square.column > king.square.column else -1
    king_to = king.square.offset(0, 2 * direction)
    rook_to = king_to.offset(0, -direction)
    return king_to, rook_to


def rook_transit_squares(rook: Piece, rook_to: Square) -> list[Square]:
    """
    Squares the rook crosses while castling: from its current column (exclusive) to its destination (inclusive).

    ex) rook on a1 -> d1 gives [b1, c1, d1]. rook on h1 -> f1 gives [g1, f1]
    """
    direction = 1 if rook_to.column > rook.square.column else -1
    return [
        Square(rook.square.line, column)
        for column in range(
            rook.square.column + direction, rook_to.column + direction, direction
        )
    ]
