"""Orchestration of communication from API requests to business logic and persistence layers (and the reverse direction)."""

from pathlib import Path
from typing import Optional
from uuid import UUID

from loguru import logger

from src.api.models import (
    CastleRequest,
    DeleteGameRequest,
    ExportGameRequest,
    GameResponse,
    ImportGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    LoadGameRequest,
    MoveRequest,
    MoveResponse,
    NewGameRequest,
    PromotionRequest,
    SavedGameResponse,
)
from src.chess import pieces
from src.chess.game import Game
from src.chess.serialization import capture_snapshot, restore_snapshot
from src.chess.square import Square
from src.core.config import Settings, load_settings
from src.core.exceptions import RepositoryError
from src.core.logging import configure_logging
from src.core.models import GameModel
from src.core.shared_types import Color, Outcome
from src.db.database import create_db_engine, init_db
from src.db.repository import GameRepository
from src.db.sql_repository import SQLGameRepository
from src.services.game_log import GameLog

# Log lines for the outcomes that end (or pause) the game, formatted with the name of the player to move
OUTCOME_MESSAGES: dict[Outcome, str] = {
    Outcome.CHECKMATE: "Checkmate! {name} has lost the game.",
    Outcome.STALEMATE: "Stalemate: {name} cannot move. The game is a draw.",
    Outcome.DRAW_INSUFFICIENT_MATERIAL: "Neither side can checkmate anymore. The game is a draw.",
    Outcome.PROMOTION_PENDING: "A pawn reached the last rank and awaits promotion.",
}


def to_boundary_color(color: pieces.Color) -> Color:
    return Color[color.name]


class ChessService:
    """Orchestration of layers for a (single, live) chess game."""

    def __init__(
        self,
        repository: GameRepository,
        game_log: Optional[GameLog] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.repo = repository
        self.log = game_log or GameLog()
        self.settings = settings or Settings()
        self.game = Game.new_game(
            self.settings.default_white_name, self.settings.default_black_name
        )

    # -- Game lifecycle ---
    def new_game(self, request: Optional[NewGameRequest] = None) -> GameResponse:
        """Throw away the live game and start from the standard position."""
        request = request or NewGameRequest()
        white_name, black_name = self._player_names(request.white_name, request.black_name)
        self.game = Game.new_game(white_name, black_name)

        self.log.clear()
        self.log.add(f"New game: {white_name} (white) vs. {black_name} (black).")
        return self.get_game_state()

    def get_game_state(self) -> GameResponse:
        """Retrieve current game state (the frontend redraws the board from this)."""
        game = self.game
        side = game.current_side()
        return GameResponse(
            players={to_boundary_color(color): game.player_name(color) for color in pieces.Color},
            color_to_move=to_boundary_color(side),
            status=game.status,
            last_outcome=game.last_outcome,
            in_check=game.is_in_check(side),
            draw=game.is_draw(),
            pending_promotion=(
                game.pending_promotion.to_algebraic() if game.pending_promotion else None
            ),
            position=game.export(),
            captured={
                to_boundary_color(color): game.captured_symbols(color) for color in pieces.Color
            },
            can_undo=game.can_undo(),
            can_redo=game.can_redo(),
            log=self.log.entries,
        )

    # -- Playing ---
    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Destinations for the piece on the requested square (used to highlight squares)."""
        moves = self.game.legal_moves(Square.from_algebraic(request.square))
        return LegalMovesResponse(
            square=request.square,
            legal_moves=[square.to_algebraic() for square in moves],
        )

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """Make a move attempt."""
        mover = self.game.player_name(self.game.current_side())
        outcome = self.game.request_move(
            Square.from_algebraic(request.from_square),
            Square.from_algebraic(request.to_square),
        )
        self._record(f"{mover}: {request.from_square}-{request.to_square}", outcome)
        return MoveResponse(outcome=outcome, game=self.get_game_state())

    def castle(self, request: CastleRequest) -> MoveResponse:
        """Castling requested explicitly with the king and rook squares."""
        mover = self.game.player_name(self.game.current_side())
        outcome = self.game.attempt_castle(
            Square.from_algebraic(request.king_square),
            Square.from_algebraic(request.rook_square),
        )
        self._record(f"{mover}: castles ({request.king_square}/{request.rook_square})", outcome)
        return MoveResponse(outcome=outcome, game=self.get_game_state())

    def promote(self, request: PromotionRequest) -> MoveResponse:
        """The player chose what the waiting pawn becomes."""
        promotion_square = self.game.pending_promotion
        outcome = self.game.promote(pieces.PieceType[request.promote_to.name])
        where = promotion_square.to_algebraic() if promotion_square else "-"
        self._record(f"Pawn on {where} promoted to {request.promote_to}", outcome)
        return MoveResponse(outcome=outcome, game=self.get_game_state())

    def undo(self) -> bool:
        if not self.game.undo():
            logger.debug("Nothing to undo.")
            return False
        self.log.add("Move undone.")
        return True

    def redo(self) -> bool:
        if not self.game.redo():
            logger.debug("Nothing to redo.")
            return False
        self.log.add("Move redone.")
        return True

    # -- Export / Import (plain text files) ---
    def export_game(self, request: ExportGameRequest) -> bool:
        """Write the position in the live game to a text file."""
        path = Path(request.path)
        try:
            path.write_text(self.game.export() + "\n", encoding="utf-8")
        except OSError as error:
            logger.error(f"Could not export the game to {path}: {error}")
            return False

        self.log.add(f"Game exported to {path.name}.")
        return True

    def import_game(self, request: ImportGameRequest) -> bool:
        """
        Replace the live game by the position stored in a text file.
        ---
        The file may spread the notation over several lines: they are joined before parsing.
        Returns False (live game untouched) if the file cannot be read or does not hold a valid game.
        """
        path = Path(request.path)
        try:
            text = "".join(line.strip() for line in path.read_text(encoding="utf-8").splitlines())
        except OSError as error:
            logger.error(f"Could not read {path}: {error}")
            return False

        white_name, black_name = self._player_names(request.white_name, request.black_name)
        if not self.game.import_game(text, white_name, black_name):
            logger.warning(f"{path} does not contain a valid game.")
            return False

        self.log.clear()
        self.log.add(f"Game imported from {path.name}.")
        if self.game.is_game_over() and self.game.last_outcome is not None:
            self._record_outcome(self.game.last_outcome)
        return True

    # -- Persistence (repository) ---
    def save_game(self, game_id: Optional[UUID] = None) -> SavedGameResponse:
        """Store the live game. A known `game_id` gets overwritten, otherwise a new record is created."""
        model = self._to_model()
        if game_id is not None and self.repo.update_game(game_id, model) is not None:
            stored_id = game_id
        else:
            model, stored_id = self.repo.create_game(model)

        logger.info(f"Game saved with {stored_id=}")
        return self._saved_game_response(stored_id, model)

    def load_game(self, request: LoadGameRequest) -> GameResponse:
        """
        Replace the live game by a stored one.
        Raises RepositoryError (unknown id) or InvalidSnapshotError (corrupt record). The live game is untouched in both cases.
        """
        model = self._fetch_game(request.game_id)
        snapshot = restore_snapshot(model.snapshot)
        self.game = Game.from_snapshot(snapshot)

        self.log.clear()
        self.log.add(f"Game {request.game_id} loaded.")
        return self.get_game_state()

    def list_games(self) -> list[SavedGameResponse]:
        """Show all recorded games."""
        return [self._saved_game_response(game_id, model) for game_id, model in self.repo.list_games()]

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")
        logger.info(f"Deleted game with game_id={request.game_id}")

    # -- Internal helpers --
    def _player_names(self, white_name: Optional[str], black_name: Optional[str]) -> tuple[str, str]:
        return (
            white_name or self.settings.default_white_name,
            black_name or self.settings.default_black_name,
        )

    def _record(self, entry: str, outcome: Outcome) -> None:
        """Log the attempt, and whatever the attempt caused"""
        if outcome == Outcome.FAILED:
            self.log.add(f"{entry} (illegal)")
            return

        self.log.add(entry)
        self._record_outcome(outcome)

    def _record_outcome(self, outcome: Outcome) -> None:
        side = self.game.current_side()
        if outcome in OUTCOME_MESSAGES:
            self.log.add(OUTCOME_MESSAGES[outcome].format(name=self.game.player_name(side)))
        elif self.game.is_in_check(side):
            self.log.add(f"{self.game.player_name(side)} is in check.")

    def _to_model(self) -> GameModel:
        snapshot = self.game.capture_snapshot()
        return GameModel(
            snapshot=capture_snapshot(snapshot),
            white_name=snapshot.white_name,
            black_name=snapshot.black_name,
            status=snapshot.status,
        )

    def _saved_game_response(self, game_id: UUID, model: GameModel) -> SavedGameResponse:
        return SavedGameResponse(
            game_id=game_id,
            players={Color.WHITE: model.white_name, Color.BLACK: model.black_name},
            status=model.status,
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model


def build_chess_service(settings: Optional[Settings] = None) -> ChessService:
    """
    Assemble the service the way the application runs it.
    ---

    1. settings from the CHESS_* environment variables (unless passed in)
    2. loguru sinks for that log level / log file
    3. the database (tables created if missing) behind a SQLGameRepository
    """
    settings = settings or load_settings()
    configure_logging(settings)

    session_factory = init_db(create_db_engine(settings))
    service = ChessService(SQLGameRepository(session_factory()), settings=settings)
    logger.info(f"Chess service ready, games stored in {settings.database_url}")
    return service
