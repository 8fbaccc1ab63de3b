"""
The Game class will be the entrypoint into the domain layer for the service layer (and any other caller).
It owns the board, the move history and the repetition table of a single game, and is the only one allowed to change them.

After every change (make move / undo / redo) the GameState is recomputed: whose turn, which moves are legal, is the game over.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from chessrules.chess import move_generator
from chessrules.chess.board import Board
from chessrules.chess.castling import CastlingRights
from chessrules.chess.codec import PositionKey, encode_position
from chessrules.chess.game_state import (
    Check,
    Checkmate,
    Draw,
    GameState,
    InProgress,
    Stalemate,
)
from chessrules.chess.history import HistoryEntry, HistoryLog, RepetitionTable
from chessrules.chess.moves import Move
from chessrules.chess.pieces import Color, PieceType
from chessrules.chess.position import (
    Position,
    en_passant_square_after,
    full_move_number_after,
    half_move_clock_after,
    revoke_castling_rights,
)
from chessrules.chess.square import Square
from chessrules.core.config import Settings, get_settings
from chessrules.core.exceptions import IllegalMoveError, MalformedRecordError
from chessrules.core.models import GameModel, MoveRecord
from chessrules.core.shared_types import DrawReason

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Game:
    # --- POSITION (mutated in place, only by this class) ---
    board: Board
    color_to_move: Color
    castling_rights: CastlingRights
    en_passant_square: Optional[Square]
    half_move_clock: int
    full_move_number: int

    # --- BOOKKEEPING ---
    starting_fen: str
    settings: Settings = field(default_factory=get_settings)
    history: HistoryLog = field(default_factory=HistoryLog)
    repetitions: RepetitionTable = field(default_factory=RepetitionTable)
    _state: GameState = field(init=False)

    def __post_init__(self) -> None:
        # the starting position counts as its first occurrence
        self.repetitions.increment(self.position_key)
        self._state = self._compute_state()

    @classmethod
    def from_position(cls, position: Position, settings: Optional[Settings] = None) -> Self:
        """Start a game from a snapshot. The game works on its own copy of the board."""
        return cls(
            board=position.board.copy(),
            color_to_move=position.color_to_move,
            castling_rights=position.castling_rights,
            en_passant_square=position.en_passant_square,
            half_move_clock=position.half_move_clock,
            full_move_number=position.full_move_number,
            starting_fen=position.to_fen(),
            settings=settings or get_settings(),
        )

    # --- DOMAIN LAYER API ---
    def get_game_state(self) -> GameState:
        """Current state. Cheap: it is computed once per change, not per call."""
        return self._state

    def legal_moves(self) -> list[Move]:
        """Moves the side to move can choose from (none once the game is over)."""
        if isinstance(self._state, (InProgress, Check)):
            return list(self._state.legal_moves)
        return []

    def make_move(self, move: Move) -> GameState:
        """
        Attempt to make a move
        -----

        1. make sure the game is (still) in progress
        2. make sure the move is one of the legal moves (a move without castling / en passant flags gets matched on its squares)
        3. update the board, castling rights, en passant square and move clocks
        4. record the move in the history, forget about undone moves
        5. count the new position and recompute the game state

        Raises IllegalMoveError and leaves the game untouched if the move cannot be played.
        """
        legal_move = self._validate(move)
        self._apply(legal_move)
        self.history.clear_redo()
        return self._state

    def undo(self) -> GameState:
        """
        Take back the last move.
        ----

        Raises NoHistoryError if no move was made yet. The move taken back can be replayed with `redo()`.
        """
        entry = self.history.pop_for_undo()

        # the position we are leaving has one occurrence less
        self.repetitions.decrement(self.position_key)

        self.board.unmove_piece(entry.move, entry.moving_piece, entry.captured_piece)
        mover = entry.moving_piece.color
        if mover == Color.BLACK:
            self.full_move_number -= 1
        self.color_to_move = mover
        self.castling_rights = entry.prior_castling_rights
        self.en_passant_square = entry.prior_en_passant_square
        self.half_move_clock = entry.prior_half_move_clock

        self._state = self._compute_state()
        logger.debug("Took back %s", entry.move)
        return self._state

    def redo(self) -> GameState:
        """Replay the last move taken back. Raises NoRedoError if there is none."""
        legal_move = self._validate(self.history.next_redo())
        self.history.pop_for_redo()
        self._apply(legal_move)
        logger.debug("Replayed %s", legal_move)
        return self._state

    def to_text(self) -> str:
        """Current position as a FEN record"""
        return self.position.to_fen()

    def get_board(self) -> Board:
        """A copy of the board: changing it does not affect the game"""
        return self.board.copy()

    # --- QUERIES ---
    @property
    def position(self) -> Position:
        return Position(
            board=self.board.copy(),
            color_to_move=self.color_to_move,
            castling_rights=self.castling_rights,
            en_passant_square=self.en_passant_square,
            half_move_clock=self.half_move_clock,
            full_move_number=self.full_move_number,
        )

    @property
    def position_key(self) -> PositionKey:
        return encode_position(
            self.board, self.color_to_move, self.castling_rights, self.en_passant_square
        )

    @property
    def moves(self) -> list[Move]:
        """Moves played so far, oldest first"""
        return self.history.moves

    @property
    def redo_moves(self) -> list[Move]:
        return self.history.redo_moves

    @property
    def can_undo(self) -> bool:
        return len(self.history) > 0

    @property
    def can_redo(self) -> bool:
        return bool(self.history.redo_stack)

    @property
    def winner(self) -> Optional[Color]:
        """Only a checkmate has a winner"""
        if isinstance(self._state, Checkmate):
            return self._state.winner
        return None

    # --- CONVERSION FOR THE SERVICE LAYER ---
    @classmethod
    def from_model(cls, model: GameModel, settings: Optional[Settings] = None) -> Self:
        """
        Define how to construct a Game from the information the Service layer actually has
        ---

        Replays the moves from the starting position (so history and repetition counts are rebuilt),
        then replays and takes back the undone moves to rebuild the redo stack.
        """
        game = new_game_from_text(model.starting_fen, settings)
        try:
            for record in [*model.moves, *model.undone_moves]:
                game.make_move(move_from_record(record))
        except IllegalMoveError as exc:
            raise MalformedRecordError("moves", str(exc)) from exc

        for _ in model.undone_moves:
            game.undo()

        if game.to_text() != model.current_fen:
            raise MalformedRecordError(
                "current_fen",
                f"replaying the moves gives {game.to_text()!r}, record says {model.current_fen!r}",
            )
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            starting_fen=self.starting_fen,
            current_fen=self.to_text(),
            moves=[move_to_record(move) for move in self.moves],
            undone_moves=[move_to_record(move) for move in self.redo_moves],
            status=self._state.status.value,
        )

    # -- PRIVATE HELPERS ---
    def _validate(self, move: Move) -> Move:
        """Return the legal move matching the request, or raise IllegalMoveError"""
        if move.promote_to is not None and not isinstance(move.promote_to, PieceType):
            logger.warning("Rejected move with unknown promotion piece: %r", move)
            raise IllegalMoveError(f"Cannot promote to {move.promote_to!r}.")

        if self._state.is_over:
            logger.warning("Rejected %s: game is over (%s)", move, self._state)
            raise IllegalMoveError(
                f"Game is over ({self._state.status.value}), no more moves allowed."
            )

        candidates = self.legal_moves()
        if move in candidates:
            return move

        # callers building a move from squares alone do not know about the castling / en passant flags
        if not move.is_castle and not move.is_en_passant:
            legal_move = move_generator.find_move(
                candidates, move.from_square, move.to_square, move.promote_to
            )
            if legal_move is not None:
                return legal_move

        logger.warning("Rejected illegal move %s in %s", move, self.to_text())
        raise IllegalMoveError(f"Move not allowed: {move}")

    def _apply(self, move: Move) -> None:
        """Update every part of the position for an already validated move."""
        moving_piece = self.board.get(move.from_square)
        assert moving_piece is not None, f"No piece to move on {move.from_square}"

        prior_castling_rights = self.castling_rights
        prior_en_passant_square = self.en_passant_square
        prior_half_move_clock = self.half_move_clock

        captured = self.board.move_piece(move)

        # NOTE update color to move AFTER everything that depends on who made the move
        self.castling_rights = revoke_castling_rights(
            self.castling_rights, move, moving_piece, captured
        )
        self.en_passant_square = en_passant_square_after(move, moving_piece)
        self.half_move_clock = half_move_clock_after(
            self.half_move_clock, moving_piece, captured
        )
        self.full_move_number = full_move_number_after(
            self.full_move_number, moving_piece.color
        )
        self.color_to_move = moving_piece.color.opposite()

        self.history.record(
            HistoryEntry(
                move=move,
                moving_piece=moving_piece,
                captured_piece=captured,
                prior_castling_rights=prior_castling_rights,
                prior_en_passant_square=prior_en_passant_square,
                prior_half_move_clock=prior_half_move_clock,
            )
        )
        self.repetitions.increment(self.position_key)
        self._state = self._compute_state()

        logger.debug("Played %s, now %s", move, self._state.status.value)
        if self._state.is_over:
            logger.info("Game over after %s: %s", move, self._state)

    def _compute_state(self) -> GameState:
        """
        Performs checks to see if game has ended
        ---

        1. no legal moves: checkmate if in check, stalemate otherwise
        2. draws: insufficient material, threefold repetition, fifty-move rule (in that order)
        3. still playing: check or not
        """
        moves = tuple(move_generator.legal_moves(self.position))
        in_check = self.board.is_check(self.color_to_move)

        if not moves:
            if in_check:
                return Checkmate(winner=self.color_to_move.opposite())
            return Stalemate()

        if is_insufficient_material(self.board):
            return Draw(DrawReason.INSUFFICIENT_MATERIAL)

        if self.repetitions.count(self.position_key) >= self.settings.repetition_limit:
            return Draw(DrawReason.THREEFOLD_REPETITION)

        if self.half_move_clock >= self.settings.fifty_move_limit:
            return Draw(DrawReason.FIFTY_MOVE)

        if in_check:
            return Check(legal_moves=moves, side_to_move=self.color_to_move)
        return InProgress(legal_moves=moves, side_to_move=self.color_to_move)


# --- ENTRYPOINTS ---
def new_game(settings: Optional[Settings] = None) -> Game:
    """A game in the standard starting position"""
    return Game.from_position(Position.starting_position(), settings)


def new_game_from_text(record: str, settings: Optional[Settings] = None) -> Game:
    """A game starting in the position of the FEN record. Raises MalformedRecordError for invalid records."""
    return Game.from_position(Position.from_fen(record), settings)


# --- DRAW RULE HELPERS ---
def is_insufficient_material(board: Board) -> bool:
    """
    Positions where neither side can ever checkmate:

    * King vs King
    * King + Bishop vs King, King + Knight vs King
    * Kings + any number of bishops, all standing on squares of the same color (this includes K+B vs K+B with same-colored bishops)
    """
    non_king_pieces = list(
        board.squares_with(lambda _, piece: piece.type != PieceType.KING)
    )
    if any(
        piece.type in (PieceType.PAWN, PieceType.ROOK, PieceType.QUEEN)
        for _, piece in non_king_pieces
    ):
        return False

    if len(non_king_pieces) <= 1:
        return True

    all_bishops = all(piece.type == PieceType.BISHOP for _, piece in non_king_pieces)
    square_colors = {square.is_light for square, _ in non_king_pieces}
    return all_bishops and len(square_colors) == 1


# --- MOVE RECORDS (persistence format) ---
def move_to_record(move: Move) -> MoveRecord:
    return {
        "from_square": move.from_square.to_algebraic(),
        "to_square": move.to_square.to_algebraic(),
        "promote_to": move.promote_to.name.lower() if move.promote_to else None,
    }


def move_from_record(record: MoveRecord) -> Move:
    """Only the squares and promotion are stored; castling / en passant flags get resolved by `Game.make_move()`."""
    try:
        from_square = Square.from_algebraic(str(record["from_square"]))
        to_square = Square.from_algebraic(str(record["to_square"]))
        promotion = record.get("promote_to")
        if promotion is not None and not isinstance(promotion, str):
            raise ValueError(f"promotion must be a piece name, got {promotion!r}")
        promote_to = PieceType[promotion.upper()] if promotion else None
    except (KeyError, ValueError) as exc:
        raise MalformedRecordError("moves", f"cannot read move {record!r}") from exc

    return Move(from_square, to_square, promote_to)
