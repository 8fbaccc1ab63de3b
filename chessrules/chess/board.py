"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Self

from chessrules.chess.castling import CASTLING_RULES
from chessrules.chess.moves import Move, is_square_attacked
from chessrules.chess.pieces import Color, Piece, PieceType
from chessrules.chess.square import (
    ALL_SQUARES,
    BOARD_DIMENSIONS,
    FILE_NAMES,
    NUM_SQUARES,
    Square,
)

PiecePredicate = Callable[[Square, Piece], bool]


def _empty_arena() -> list[Optional[Piece]]:
    return [None] * NUM_SQUARES


@dataclass
class Board:
    """
    8x8 arena of optional pieces, indexed by `Square.index`.

    Only the Game mutates its own board. Anything handed out to callers is a copy.
    """

    squares: list[Optional[Piece]] = field(default_factory=_empty_arena)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using a given FEN string.

        That is, we supply the first part of the FEN string that denotes the board position
        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        NOTE: The string is assumed to be valid here (see fen.py for the validation).
        """
        board = cls()
        fen_by_ranks = fen_str.split("/")
        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - 1 - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 0
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    board.set(Square(file, rank), Piece.from_fen(character))
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(BOARD_DIMENSIONS[0]):
            piece = self.get(Square(file, rank))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- QUERIES ---
    def get(self, square: Square) -> Optional[Piece]:
        return self.squares[square.index]

    def squares_with(self, predicate: PiecePredicate) -> Iterator[tuple[Square, Piece]]:
        """Lazily walk the occupied squares (a1, b1, ..., h8) and yield those matching the predicate."""
        for square in ALL_SQUARES:
            piece = self.squares[square.index]
            if piece is not None and predicate(square, piece):
                yield square, piece

    def locate_pieces(self, piece_type: PieceType, color: Color) -> list[Square]:
        return [
            square
            for square, _ in self.squares_with(
                lambda _, piece: piece.type == piece_type and piece.color == color
            )
        ]

    def find_king(self, color: Color) -> Square:
        kings = self.locate_pieces(PieceType.KING, color)
        # a committed position always has exactly one king per color
        assert len(kings) == 1, f"Expected exactly one {color.name} king, found {len(kings)}"
        return kings[0]

    def is_attacked(self, square: Square, by_color: Color) -> bool:
        return is_square_attacked(square, by_color, self)

    def is_check(self, color: Color) -> bool:
        """Is the king of `color` under attack?"""
        return self.is_attacked(self.find_king(color), color.opposite())

    def is_any_occupied(self, squares: list[Square]) -> bool:
        return any(self.get(square) is not None for square in squares)

    def is_any_under_attack(self, squares: list[Square], by_color: Color) -> bool:
        return any(self.is_attacked(square, by_color) for square in squares)

    # --- MUTATION (Game / FEN parsing only) ---
    def set(self, square: Square, piece: Optional[Piece]) -> None:
        self.squares[square.index] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        piece = self.get(square)
        self.set(square, None)
        return piece

    def move_piece(self, move: Move) -> Optional[Piece]:
        """
        Update the position on the board and return the piece that got captured (if any)
        ---

        * castling: the rook hops over the king as well
        * en passant: the captured pawn stands next to the moving pawn, not on the target square
        * promotion: the pawn gets replaced by the promoted piece
        """
        moving_piece = self.get(move.from_square)
        assert moving_piece is not None, f"No piece to move on {move.from_square}"

        if move.castling_direction is not None:
            rule = CASTLING_RULES[move.castling_direction]
            self.set(rule.rook_to, self.remove_piece(rule.rook_from))
            captured = None
        elif move.is_en_passant:
            captured = self.remove_piece(en_passant_victim_square(move))
        else:
            captured = self.get(move.to_square)

        self.set(move.from_square, None)
        landing_piece = (
            Piece(move.promote_to, moving_piece.color) if move.promote_to else moving_piece
        )
        self.set(move.to_square, landing_piece)
        return captured

    def unmove_piece(
        self, move: Move, moving_piece: Piece, captured: Optional[Piece]
    ) -> None:
        """Exact inverse of `move_piece()`, given what it moved and what it returned."""
        self.set(move.from_square, moving_piece)

        if move.castling_direction is not None:
            rule = CASTLING_RULES[move.castling_direction]
            self.set(move.to_square, None)
            self.set(rule.rook_from, self.remove_piece(rule.rook_to))
        elif move.is_en_passant:
            self.set(move.to_square, None)
            self.set(en_passant_victim_square(move), captured)
        else:
            self.set(move.to_square, captured)

    def copy(self) -> Self:
        return type(self)(list(self.squares))

    # --- DISPLAY ---
    def render(self) -> str:
        """8x8 text grid, white at the bottom. Empty squares are dots."""
        lines: list[str] = []
        for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1):
            row = " ".join(
                str(piece) if piece is not None else "."
                for piece in (self.get(Square(file, rank)) for file in range(BOARD_DIMENSIONS[0]))
            )
            lines.append(f"{rank + 1} {row}")
        lines.append(f"  {' '.join(FILE_NAMES)}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()


def en_passant_victim_square(move: Move) -> Square:
    """
    The pawn taken en passant was standing in the same file as the target square,
    and on the same rank as the moving pawn was originally standing at.
    """
    return Square(file=move.to_square.file, rank=move.from_square.rank)


STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
