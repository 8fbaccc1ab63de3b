"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from typing import Optional
from uuid import UUID

from chessrules.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    RedoRequest,
    UndoRequest,
)
from chessrules.chess import pieces
from chessrules.chess.game import Game, move_to_record, new_game, new_game_from_text
from chessrules.chess.game_state import Draw
from chessrules.chess.moves import Move
from chessrules.chess.square import Square
from chessrules.core.config import Settings, get_settings
from chessrules.core.exceptions import RepositoryError
from chessrules.core.models import GameModel
from chessrules.core.shared_types import Color
from chessrules.db.repository import GameRepository

logger = logging.getLogger(__name__)


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(self, repository: GameRepository, settings: Optional[Settings] = None) -> None:
        self.repo = repository
        self.settings = settings or get_settings()

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Player requested to create a new game (optionally from a FEN record)."""

        # Use info in CreateGameRequest to create a new Game, and convert into GameModel
        if request.starting_fen is None:
            game = new_game(self.settings)
        else:
            game = new_game_from_text(request.starting_fen, self.settings)

        # Store the GameModel in the repository
        _, game_id = self.repo.create_game(game.to_model())
        logger.info("Created game %s from %r", game_id, game.starting_fen)

        return self._create_game_response(game_id, game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        game = self._load_game(request.game_id)
        return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Retrieve the moves the side to move can choose from."""
        game = self._load_game(request.game_id)
        return LegalMovesResponse(
            game_id=request.game_id,
            color=Color[game.color_to_move.name],
            legal_moves=[move_to_record(move) for move in game.legal_moves()],
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt. IllegalMoveError propagates and nothing gets stored."""
        game = self._load_game(request.game_id)

        # Parse data in MoveRequest to a domain Move (castling / en passant flags get resolved by the Game)
        move = Move(
            from_square=Square.from_algebraic(request.from_square),
            to_square=Square.from_algebraic(request.to_square),
            promote_to=(
                pieces.PieceType[request.promote_to.name]
                if request.promote_to is not None
                else None
            ),
        )

        # Attempt the move
        game.make_move(move)
        return self._store(request.game_id, game)

    def undo(self, request: UndoRequest) -> GameResponse:
        """Take back the last move. NoHistoryError propagates."""
        game = self._load_game(request.game_id)
        game.undo()
        return self._store(request.game_id, game)

    def redo(self, request: RedoRequest) -> GameResponse:
        """Replay the last move taken back. NoRedoError propagates."""
        game = self._load_game(request.game_id)
        game.redo()
        return self._store(request.game_id, game)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _store(self, game_id: UUID, game: Game) -> GameResponse:
        """Capture updated state in GameModel, store in repository and build the response"""
        if self.repo.update_game(game_id, game.to_model()) is None:
            raise RepositoryError(f"Game with {game_id=} disappeared while playing.")
        return self._create_game_response(game_id, game)

    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        """Convert the state of the Game to a GameResponse (for game with given ID.)"""
        state = game.get_game_state()
        winner = game.winner
        return GameResponse(
            game_id=game_id,
            fen_state=game.to_text(),
            starting_state=game.starting_fen,
            status=state.status,
            side_to_move=Color[game.color_to_move.name],
            winner=Color[winner.name] if winner is not None else None,
            draw_reason=state.reason if isinstance(state, Draw) else None,
            move_history=[move_to_record(move) for move in game.moves],
            can_undo=game.can_undo,
            can_redo=game.can_redo,
        )

    def _load_game(self, game_id: UUID) -> Game:
        """Rebuild the Game from its stored record"""
        return Game.from_model(self._fetch_game(game_id), self.settings)

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
