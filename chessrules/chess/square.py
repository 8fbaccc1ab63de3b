"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase
from typing import Optional

# Chess board is always 8x8.
BOARD_DIMENSIONS = (8, 8)
NUM_SQUARES = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]
FILE_NAMES = ascii_lowercase[: BOARD_DIMENSIONS[0]]


@dataclass(frozen=True, order=True)
class Square:
    """
    Zero-based coordinates: file 0 is the a-file, rank 0 is the 1st rank.

    A Square can only exist on the board. Trying to create one outside of it raises a ValueError,
    use `offset()` when stepping around the board instead.
    """

    file: int
    rank: int

    def __post_init__(self) -> None:
        if not is_within_bounds(self.file, self.rank):
            raise ValueError(f"Square off the board: file={self.file}, rank={self.rank}")

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        if len(sq) != 2 or sq[0] not in FILE_NAMES or sq[1] not in "12345678":
            raise ValueError(f"Cannot interpret {sq!r} as a square name.")
        return cls(FILE_NAMES.index(sq[0]), int(sq[1]) - 1)

    @classmethod
    def from_index(cls, index: int) -> Square:
        return cls(index % BOARD_DIMENSIONS[0], index // BOARD_DIMENSIONS[0])

    @property
    def index(self) -> int:
        """Position in the board's arena (a1 = 0, b1 = 1, ..., h8 = 63)"""
        return self.rank * BOARD_DIMENSIONS[0] + self.file

    @property
    def is_light(self) -> bool:
        """a1 is a dark square"""
        return (self.file + self.rank) % 2 == 1

    def offset(self, df: int, dr: int) -> Optional[Square]:
        """The square reached by stepping (df, dr) away, or None if that falls off the board."""
        file, rank = self.file + df, self.rank + dr
        if not is_within_bounds(file, rank):
            return None
        return Square(file, rank)

    def to_algebraic(self) -> str:
        return f"{FILE_NAMES[self.file]}{self.rank + 1}"

    def __str__(self) -> str:
        return self.to_algebraic()


def is_within_bounds(file: int, rank: int) -> bool:
    return (0 <= file < BOARD_DIMENSIONS[0]) and (0 <= rank < BOARD_DIMENSIONS[1])


ALL_SQUARES: tuple[Square, ...] = tuple(Square.from_index(i) for i in range(NUM_SQUARES))
