"""
The Game class is the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the rules required to play a turn:
it asks the board whether a move fits the piece's pattern and keeps the king safe,
commits it, does the bookkeeping of both players, and reports the Outcome.

NOTE: Nothing in here raises for an illegal move. Every operation that can fail returns a value saying so.
"""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.board import Board
from src.chess.history import HistoryManager
from src.chess.moves import (
    PROMOTION_LINE,
    castling_destinations,
    en_passant_victim,
    rook_transit_squares,
)
from src.chess.notation import NotationState
from src.chess.pieces import PROMOTION_OPTIONS, Color, Piece, PieceType
from src.chess.player import Player
from src.chess.snapshot import GameSnapshot
from src.chess.square import BOARD_SIZE, Square
from src.core.exceptions import GameStateError, InvalidNotationError
from src.core.shared_types import GameStatus, Outcome

DEFAULT_WHITE_NAME = "White"
DEFAULT_BLACK_NAME = "Black"

# Outcomes after which no more moves are accepted
GAME_ENDING_OUTCOMES = frozenset(
    {Outcome.CHECKMATE, Outcome.STALEMATE, Outcome.DRAW_INSUFFICIENT_MATERIAL}
)
DRAWING_OUTCOMES = frozenset({Outcome.STALEMATE, Outcome.DRAW_INSUFFICIENT_MATERIAL})


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    players: dict[Color, Player]
    color_to_move: Color = Color.WHITE
    draw: bool = False
    status: GameStatus = GameStatus.AWAITING_MOVE
    last_outcome: Optional[Outcome] = None
    promotion_square: Optional[Square] = None
    history: HistoryManager = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.history = HistoryManager(self)

    @classmethod
    def new_game(
        cls, white_name: str = DEFAULT_WHITE_NAME, black_name: str = DEFAULT_BLACK_NAME
    ) -> Self:
        """Standard starting position, white to move."""
        board = Board.starting_position()
        return cls(board=board, players=cls._build_players(board, white_name, black_name))

    @classmethod
    def from_snapshot(cls, snapshot: GameSnapshot) -> Self:
        """Create a game (with an empty history) in the state captured by the snapshot"""
        game = cls.new_game(snapshot.white_name, snapshot.black_name)
        game.restore_snapshot(snapshot)
        return game

    @classmethod
    def from_notation(
        cls,
        text: str,
        white_name: str = DEFAULT_WHITE_NAME,
        black_name: str = DEFAULT_BLACK_NAME,
    ) -> Self:
        """Convenience constructor. Raises InvalidNotationError for text that `import_game` would refuse."""
        game = cls.new_game(white_name, black_name)
        state = NotationState.from_notation(text)
        game._load_position(state, white_name, black_name)
        return game

    # --- QUERIES ---
    def current_side(self) -> Color:
        return self.color_to_move

    def is_game_over(self) -> bool:
        return self.status == GameStatus.GAME_OVER

    def is_draw(self) -> bool:
        return self.draw

    def is_in_check(self, color: Color) -> bool:
        return self.board.is_in_check(color)

    def legal_moves(self, square: Square) -> list[Square]:
        """Recomputed on every call (nothing is cached). Off-board or empty squares have no moves."""
        return self.board.legal_moves(square)

    def king_square(self, color: Color) -> Optional[Square]:
        king = self.board.find_king(color)
        return king.square if king else None

    @property
    def pending_promotion(self) -> Optional[Square]:
        return self.promotion_square

    def player_name(self, color: Color) -> str:
        return self.players[color].name

    def captured_symbols(self, color: Color) -> list[str]:
        """Pieces captured BY the player of this color"""
        return self.players[color].captured_symbols()

    # --- MOVES ---
    def request_move(self, from_square: Square, to_square: Square) -> Outcome:
        """
        Attempt to make a move
        -----

        1. reject off-board squares, an empty origin, or a piece of the wrong color
        2. reject moves that do not fit the piece's pattern or would leave your own king attacked
        3. commit the move on the board
        4. hand a captured piece over to the mover's captures
        5. close the mover's old en passant window, open a new one after a double step
        6. remove the pawn taken en passant
        7. pass the turn
        8. a pawn on its last line waits for a promotion choice
        9. otherwise evaluate the position of the player who is now to move
        """
        if self.status != GameStatus.AWAITING_MOVE:
            return Outcome.FAILED

        if not (from_square.is_within_bounds() and to_square.is_within_bounds()):
            return Outcome.FAILED

        piece = self.board.piece_at(from_square)
        if piece is None or piece.color != self.color_to_move:
            return Outcome.FAILED

        # clicking your king onto your own rook (or moving it two columns) is a castling request
        castling_rook = self._castling_rook_for(piece, to_square)
        if castling_rook is not None:
            return self.attempt_castle(from_square, castling_rook.square)

        if not self.board.pattern_legal(from_square, to_square):
            return Outcome.FAILED

        if self.board.simulate_move_and_check_king_safety(piece.color, from_square, to_square):
            return Outcome.FAILED

        # Passed all checks. Store the state before the move for undo.
        snapshot = self.capture_snapshot()
        mover = self.players[piece.color]
        opponent = self.players[piece.color.opponent]

        # Determine before the board changes (the target square is still empty now)
        taken_en_passant = en_passant_victim(piece, to_square, self.board)

        captured = self.board.move_piece(from_square, to_square)
        if captured is not None:
            self._transfer_capture(captured, mover, opponent)

        mover.clear_en_passant()
        if piece.type == PieceType.PAWN:
            mover.pawn_moved()
            if abs(to_square.line - from_square.line) == 2:
                mover.mark_en_passant(piece)
            if taken_en_passant is not None:
                self.board.remove(taken_en_passant.square)
                self._transfer_capture(taken_en_passant, mover, opponent)
        else:
            mover.non_pawn_moved()

        self.history.save(snapshot)
        self.color_to_move = piece.color.opponent

        if self._is_promotion_move(piece, to_square):
            self.promotion_square = to_square
            self.status = GameStatus.AWAITING_PROMOTION
            self.last_outcome = Outcome.PROMOTION_PENDING
            return Outcome.PROMOTION_PENDING

        return self._conclude_turn()

    def attempt_castle(self, king_square: Square, rook_square: Square) -> Outcome:
        """
        Castle with the pieces on the two squares (in either order).
        ---

        **you are allowed to castle if**

        * One piece is a king and the other a rook, both of the color to move.
        * Neither of them has ever moved.
        * Every square the rook crosses (up to and including its destination) is empty and not attacked by the opponent.
        * The king's destination is empty.

        NOTE: Only the rook's path is checked. The king's path is a subset of it for the standard setup.
        """
        if self.status != GameStatus.AWAITING_MOVE:
            return Outcome.FAILED

        pieces = [self.board.piece_at(king_square), self.board.piece_at(rook_square)]
        king = next((p for p in pieces if p is not None and p.type == PieceType.KING), None)
        rook = next((p for p in pieces if p is not None and p.type == PieceType.ROOK), None)
        if king is None or rook is None:
            return Outcome.FAILED

        if king.color != rook.color or king.color != self.color_to_move:
            return Outcome.FAILED

        if king.moved or rook.moved:
            return Outcome.FAILED

        if king.square.line != rook.square.line:
            return Outcome.FAILED

        king_to, rook_to = castling_destinations(king, rook)
        if not king_to.is_within_bounds():
            return Outcome.FAILED

        # both landing squares must be free (the castling pieces themselves do not count)
        for square in (king_to, rook_to):
            occupant = self.board.piece_at(square)
            if occupant is not None and occupant is not king and occupant is not rook:
                return Outcome.FAILED

        for square in rook_transit_squares(rook, rook_to):
            if self.board.piece_at(square) is not None:
                return Outcome.FAILED
            if self.board.is_square_threatened(king.color, square):
                return Outcome.FAILED

        snapshot = self.capture_snapshot()
        mover = self.players[king.color]

        self.board.perform_castle(king, rook)
        mover.clear_en_passant()
        mover.non_pawn_moved()

        self.history.save(snapshot)
        self.color_to_move = king.color.opponent
        return self._conclude_turn()

    def promote(self, choice: PieceType) -> Outcome:
        """Replace the pawn waiting on its last line by a piece of the chosen type"""
        if self.status != GameStatus.AWAITING_PROMOTION or self.promotion_square is None:
            return Outcome.FAILED

        if choice not in PROMOTION_OPTIONS:
            return Outcome.FAILED

        pawn = self.board.piece_at(self.promotion_square)
        if pawn is None or pawn.type != PieceType.PAWN:
            raise GameStateError(
                f"Promotion pending on {self.promotion_square.to_algebraic()}, but no pawn found there."
            )

        promoted = Piece(choice, pawn.color, pawn.square)
        self.board.remove(pawn.square)
        self.board.place(promoted)
        self.players[pawn.color].replace_piece(pawn, promoted)

        self.promotion_square = None
        self.status = GameStatus.AWAITING_MOVE
        return self._conclude_turn()

    # --- HISTORY ---
    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def capture_snapshot(self) -> GameSnapshot:
        white = self.players[Color.WHITE]
        black = self.players[Color.BLACK]
        return GameSnapshot(
            pieces=GameSnapshot.records(self.board.pieces()),
            color_to_move=self.color_to_move,
            white_name=white.name,
            black_name=black.name,
            draw=self.draw,
            white_captures=GameSnapshot.records(white.captured),
            black_captures=GameSnapshot.records(black.captured),
            white_non_pawn_moves=white.consecutive_non_pawn_moves,
            black_non_pawn_moves=black.consecutive_non_pawn_moves,
            status=self.status,
            last_outcome=self.last_outcome,
            promotion_square=self.promotion_square,
        )

    def restore_snapshot(self, snapshot: GameSnapshot) -> None:
        """Replace the live state. Players are rebuilt from the new board: never reuse the old piece objects."""
        self.board = snapshot.build_board()
        self.players = {
            color: Player.from_board(color, snapshot.name_of(color), self.board)
            for color in Color
        }
        for color, player in self.players.items():
            player.captured = snapshot.captures_of(color)
            player.consecutive_non_pawn_moves = snapshot.non_pawn_moves_of(color)

        self.color_to_move = snapshot.color_to_move
        self.draw = snapshot.draw
        self.status = snapshot.status
        self.last_outcome = snapshot.last_outcome
        self.promotion_square = snapshot.promotion_square

    # --- EXPORT / IMPORT ---
    def export(self) -> str:
        return NotationState.from_board(self.board, self.color_to_move).to_notation()

    def import_game(self, text: str, white_name: str, black_name: str) -> bool:
        """
        Replace the game by the exported position in `text`.
        Returns False (and keeps the current game untouched) if the text is malformed or a king is missing.
        """
        try:
            state = NotationState.from_notation(text)
        except InvalidNotationError:
            return False

        self._load_position(state, white_name, black_name)
        return True

    # -- PRIVATE HELPERS ---
    @staticmethod
    def _build_players(board: Board, white_name: str, black_name: str) -> dict[Color, Player]:
        return {
            Color.WHITE: Player.from_board(Color.WHITE, white_name, board),
            Color.BLACK: Player.from_board(Color.BLACK, black_name, board),
        }

    def _load_position(self, state: NotationState, white_name: str, black_name: str) -> None:
        """Start over from an imported position (with an empty history)."""
        self.board = state.to_board()
        self.players = self._build_players(self.board, white_name, black_name)
        self.color_to_move = state.color_to_move
        self.draw = False
        self.promotion_square = None
        self.last_outcome = None
        self.status = GameStatus.AWAITING_MOVE
        self.history.reset()

        # The imported position may already be decided
        outcome = self._evaluate_position(self.color_to_move)
        if outcome in GAME_ENDING_OUTCOMES:
            self._finish(outcome)

    @staticmethod
    def _transfer_capture(captured: Piece, mover: Player, opponent: Player) -> None:
        opponent.lose_piece(captured)
        mover.record_capture(captured)

    def _castling_rook_for(self, piece: Piece, to_square: Square) -> Optional[Piece]:
        """
        Find the rook a king move refers to, if the move is meant as castling:
        * the king is sent onto its own rook, or
        * the king is sent two columns sideways (the rook in that corner is used)
        """
        if piece.type != PieceType.KING:
            return None

        target = self.board.piece_at(to_square)
        if target is not None:
            if target.type == PieceType.ROOK and target.color == piece.color:
                return target
            return None

        d_column = to_square.column - piece.square.column
        if to_square.line == piece.square.line and abs(d_column) == 2:
            corner = Square(piece.square.line, 0 if d_column < 0 else BOARD_SIZE - 1)
            rook = self.board.piece_at(corner)
            if rook is not None and rook.type == PieceType.ROOK and rook.color == piece.color:
                return rook
        return None

    @staticmethod
    def _is_promotion_move(piece: Piece, to_square: Square) -> bool:
        return piece.type == PieceType.PAWN and to_square.line == PROMOTION_LINE[piece.color]

    def _has_legal_move(self, color: Color) -> bool:
        return any(
            self.board.legal_moves(piece.square) for piece in self.players[color].pieces
        )

    def _is_insufficient_material(self) -> bool:
        return all(player.has_insufficient_material() for player in self.players.values())

    def _evaluate_position(self, color: Color) -> Outcome:
        """
        The position, seen from the player of `color` (the one to move):
        * they can move: the game goes on, unless neither side can ever mate
        * they cannot move: checkmate if their king is attacked, stalemate otherwise
        """
        if self._has_legal_move(color):
            if self._is_insufficient_material():
                return Outcome.DRAW_INSUFFICIENT_MATERIAL
            return Outcome.NORMAL

        if self.board.is_in_check(color):
            return Outcome.CHECKMATE
        return Outcome.STALEMATE

    def _conclude_turn(self) -> Outcome:
        outcome = self._evaluate_position(self.color_to_move)
        if outcome in GAME_ENDING_OUTCOMES:
            self._finish(outcome)
        else:
            self.status = GameStatus.AWAITING_MOVE
            self.last_outcome = outcome
        return outcome

    def _finish(self, outcome: Outcome) -> None:
        self.status = GameStatus.GAME_OVER
        self.last_outcome = outcome
        if outcome in DRAWING_OUTCOMES:
            self.draw = True
