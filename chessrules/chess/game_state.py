"""
The state a game is in, recomputed after every move.

A tagged variant: exactly one of InProgress, Check, Checkmate, Stalemate, Draw.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from chessrules.chess.moves import Move
from chessrules.chess.pieces import Color
from chessrules.core.shared_types import DrawReason, Status


@dataclass(frozen=True)
class InProgress:
    legal_moves: tuple[Move, ...]
    side_to_move: Color

    status: ClassVar[Status] = Status.IN_PROGRESS
    is_over: ClassVar[bool] = False


@dataclass(frozen=True)
class Check:
    """The side to move is in check, but has a way out."""

    legal_moves: tuple[Move, ...]
    side_to_move: Color

    status: ClassVar[Status] = Status.CHECK
    is_over: ClassVar[bool] = False


@dataclass(frozen=True)
class Checkmate:
    winner: Color

    status: ClassVar[Status] = Status.CHECKMATE
    is_over: ClassVar[bool] = True


@dataclass(frozen=True)
class Stalemate:
    status: ClassVar[Status] = Status.STALEMATE
    is_over: ClassVar[bool] = True


@dataclass(frozen=True)
class Draw:
    reason: DrawReason

    status: ClassVar[Status] = Status.DRAW
    is_over: ClassVar[bool] = True


GameState = Union[InProgress, Check, Checkmate, Stalemate, Draw]
