"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from chessrules.core.exceptions import InvalidRequestError
from chessrules.core.shared_types import Color, DrawReason, PieceType, Status

FEN_FIELD_COUNT = 6

# Same shape as chessrules.core.models.MoveRecord
MoveEntry = dict[str, Optional[str]]


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    """No starting FEN means the standard starting position."""

    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        parts = value.split()
        if len(parts) != FEN_FIELD_COUNT:
            raise InvalidRequestError(
                "FEN string must contain 6 space-separated parts."
            )
        return " ".join(parts)


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        def _is_algebraic_notation(value: str) -> bool:
            if len(value) != 2:
                return False

            file_character, rank_character = value[0], value[1]
            return file_character in "abcdefgh" and rank_character in "12345678"

        value = value.strip().lower()
        if not _is_algebraic_notation(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value in (PieceType.PAWN, PieceType.KING):
            raise InvalidRequestError(f"A pawn cannot promote to a {value}.")
        return value


class UndoRequest(BaseModel):
    game_id: UUID


class RedoRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    fen_state: str
    starting_state: str
    status: Status
    side_to_move: Color
    winner: Optional[Color] = None
    draw_reason: Optional[DrawReason] = None
    move_history: list[MoveEntry]
    can_undo: bool
    can_redo: bool


class LegalMovesResponse(BaseModel):
    game_id: UUID
    color: Color
    legal_moves: list[MoveEntry]
