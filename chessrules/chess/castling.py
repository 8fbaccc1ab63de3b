"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Self

from chessrules.chess.pieces import Color
from chessrules.chess.square import Square


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK


# Order in which the rights are written in a FEN string (and packed into a position key)
CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If castling rights have not been revoked, we already know the king / rook are still at their starting squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(
        cls, k_from: str, k_to: str, r_from: str, r_to: str
    ) -> Self:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    @property
    def between(self) -> list[Square]:
        """Squares strictly in between king and rook: these must all be empty to castle."""
        low, high = sorted([self.king_from.file, self.rook_from.file])
        return [Square(file, self.king_from.rank) for file in range(low + 1, high)]

    @property
    def king_path(self) -> list[Square]:
        """Squares the king stands on, passes through and lands on: none of them may be under attack."""
        step = 1 if self.king_to.file > self.king_from.file else -1
        return [
            Square(file, self.king_from.rank)
            for file in range(self.king_from.file, self.king_to.file + step, step)
        ]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_directions(color: Color) -> list[CastlingDirection]:
    return [direction for direction in CASTLING_ORDER if direction.color == color]


@dataclass(frozen=True)
class CastlingRights:
    """
    Four independent rights. Rights only ever get revoked during a game: every revoke returns a new value.
    """

    white_king_side: bool = True
    white_queen_side: bool = True
    black_king_side: bool = True
    black_queen_side: bool = True

    @classmethod
    def none(cls) -> Self:
        return cls(False, False, False, False)

    @classmethod
    def from_fen(cls, castle_fen: str) -> Self:
        """parse the part of the FEN string that encodes castling rights (validation happens in fen.py)"""
        return cls(
            *(direction.value in castle_fen for direction in CASTLING_ORDER)
        )

    def to_fen(self) -> str:
        """create the part of the FEN string that encodes castling rights"""
        castling_chars = "".join(
            direction.value for direction in CASTLING_ORDER if self.has(direction)
        )
        return castling_chars or "-"

    def has(self, direction: CastlingDirection) -> bool:
        return getattr(self, _FIELD_NAMES[direction])

    def has_any(self, color: Color) -> bool:
        return any(self.has(direction) for direction in castling_directions(color))

    def revoke(self, direction: CastlingDirection) -> Self:
        if not self.has(direction):
            return self
        return replace(self, **{_FIELD_NAMES[direction]: False})

    def revoke_all(self, color: Color) -> Self:
        rights = self
        for direction in castling_directions(color):
            rights = rights.revoke(direction)
        return rights

    def as_bits(self) -> int:
        """4 bits, K being the most significant one"""
        bits = 0
        for direction in CASTLING_ORDER:
            bits = (bits << 1) | int(self.has(direction))
        return bits

    @classmethod
    def from_bits(cls, bits: int) -> Self:
        return cls(*(bool(bits >> shift & 1) for shift in (3, 2, 1, 0)))


_FIELD_NAMES: dict[CastlingDirection, str] = {
    CastlingDirection.WHITE_KING_SIDE: "white_king_side",
    CastlingDirection.WHITE_QUEEN_SIDE: "white_queen_side",
    CastlingDirection.BLACK_KING_SIDE: "black_king_side",
    CastlingDirection.BLACK_QUEEN_SIDE: "black_queen_side",
}
