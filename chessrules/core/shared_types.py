"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


class DrawReason(StrEnum):
    FIFTY_MOVE = "fifty-move"
    THREEFOLD_REPETITION = "threefold-repetition"
    INSUFFICIENT_MATERIAL = "insufficient-material"


# --- Color and PieceType here are the string-valued versions used at the boundary (requests / responses / db).
# --- The domain layer has its own versions in chessrules/chess/pieces.py. Names match, so converting is `Color[color.name]`.


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
