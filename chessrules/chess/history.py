"""
Everything needed to take moves back (and replay them).

The Game never stores copies of the board per move: an entry only keeps the delta needed to invert its move.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from chessrules.chess.castling import CastlingRights
from chessrules.chess.moves import Move
from chessrules.chess.pieces import Piece
from chessrules.chess.square import Square
from chessrules.core.exceptions import NoHistoryError, NoRedoError


@dataclass(frozen=True)
class HistoryEntry:
    """Snapshot of what a move changed, taken right before the move was made."""

    move: Move
    moving_piece: Piece
    captured_piece: Optional[Piece]
    prior_castling_rights: CastlingRights
    prior_en_passant_square: Optional[Square]
    prior_half_move_clock: int


@dataclass
class HistoryLog:
    """
    Ordered record of applied moves + the moves that were taken back.
    ---

    * make a move: entry pushed, redo stack cleared
    * undo: entry popped, its move pushed onto the redo stack
    * redo: move popped from the redo stack (and pushed as a new entry by the Game)
    """

    entries: list[HistoryEntry] = field(default_factory=list)
    redo_stack: list[Move] = field(default_factory=list)

    def record(self, entry: HistoryEntry) -> None:
        self.entries.append(entry)

    def clear_redo(self) -> None:
        self.redo_stack.clear()

    def pop_for_undo(self) -> HistoryEntry:
        if not self.entries:
            raise NoHistoryError("No move to take back.")
        entry = self.entries.pop()
        self.redo_stack.append(entry.move)
        return entry

    def next_redo(self) -> Move:
        """The move the next redo will replay (left on the stack)."""
        if not self.redo_stack:
            raise NoRedoError("No undone move to replay.")
        return self.redo_stack[-1]

    def pop_for_redo(self) -> Move:
        move = self.next_redo()
        self.redo_stack.pop()
        return move

    @property
    def moves(self) -> list[Move]:
        return [entry.move for entry in self.entries]

    @property
    def redo_moves(self) -> list[Move]:
        """Undone moves, the one the next redo replays first."""
        return list(reversed(self.redo_stack))

    def __len__(self) -> int:
        return len(self.entries)


class RepetitionTable:
    """Counts how often every position (by its packed key) has occurred in this game."""

    def __init__(self) -> None:
        self._counts: Counter[int] = Counter()

    def increment(self, key: int) -> int:
        self._counts[key] += 1
        return self._counts[key]

    def decrement(self, key: int) -> None:
        # a key only gets decremented when leaving a position that was previously counted
        assert self._counts[key] > 0, "Decrementing a position that was never recorded"
        self._counts[key] -= 1
        if self._counts[key] == 0:
            del self._counts[key]

    def count(self, key: int) -> int:
        return self._counts.get(key, 0)

    def snapshot(self) -> dict[int, int]:
        return dict(self._counts)
