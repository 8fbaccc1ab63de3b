"""
Representation of a single position on the board. The part that can be encoded in a FEN string.

Also home of the rules describing how the non-board parts of a position (castling rights, en passant square,
move clocks) change when a move is made. The Game and `Position.after()` both use them.
"""

from dataclasses import dataclass
from typing import Optional, Self

from chessrules.chess import fen
from chessrules.chess.board import Board
from chessrules.chess.castling import CASTLING_RULES, CastlingRights, castling_directions
from chessrules.chess.moves import Move
from chessrules.chess.pieces import Color, Piece, PieceType
from chessrules.chess.square import Square


@dataclass(frozen=True)
class Position:
    """
    Data that can be constructed from a FEN string.
    ----

    <board position string><active color><castling rights><en passant square><# half move clock><number turns played>

    * The string to describe the board position is described in the Board class
    * The active color is either "w" or "b"
    * Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for the white pieces, small letters for the black pieces.
        In the starting position: KQkq (all rights available), and as rights get revoked a "-" is used instead of the designated letter.
    * The en passant square indicates the square a pawn can take on. If not available a "-" is used.
    * The half move clock counts the number of half-moves made since the last pawn move or capture.
    * The number of turns starts at 1 and increments after every move black makes.

    A Position is a snapshot: it owns its own copy of the board and is never changed after creation.
    """

    board: Board
    color_to_move: Color = Color.WHITE
    castling_rights: CastlingRights = CastlingRights()
    en_passant_square: Optional[Square] = None
    half_move_clock: int = 0
    full_move_number: int = 1

    @classmethod
    def from_fen(cls, record: str) -> Self:
        """Parse the FEN into data. Raises MalformedRecordError for the first field that does not make sense."""

        # extract the different components. FEN is space separated
        (
            placement,
            active_color,
            castling_str,
            en_passant_algebraic,
            half_move_clock,
            full_move_number,
        ) = fen.split_fen(record)

        board = fen.parse_placement(placement)
        color_to_move = fen.parse_color_code(active_color)
        castling_rights = fen.parse_castling_rights(castling_str)
        en_passant_square = fen.parse_en_passant(en_passant_algebraic)
        half_moves = fen.parse_move_counter(half_move_clock, fen.HALF_MOVE_CLOCK, 0)
        full_moves = fen.parse_move_counter(full_move_number, fen.FULL_MOVE_NUMBER, 1)

        # the fields have to agree with each other as well
        fen.validate_castling_against_board(castling_rights, board)
        fen.validate_en_passant_against_board(en_passant_square, color_to_move, board)
        fen.validate_not_capturable_king(board, color_to_move)

        return cls(
            board,
            color_to_move,
            castling_rights,
            en_passant_square,
            half_moves,
            full_moves,
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        active_color = fen.COLOR_TO_CODE[self.color_to_move]
        castling_str = self.castling_rights.to_fen()
        en_passant_algebraic = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else "-"
        )
        return (
            f"{self.board.to_fen()} {active_color} {castling_str} {en_passant_algebraic} "
            f"{self.half_move_clock} {self.full_move_number}"
        )

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(fen.STARTING_FEN)

    def after(self, move: Move) -> Self:
        """
        The position reached by making the move. The move is trusted to be legal (see move_generator.py).
        This position stays untouched.
        """
        board = self.board.copy()
        moving_piece = board.get(move.from_square)
        assert moving_piece is not None, f"No piece to move on {move.from_square}"
        captured = board.move_piece(move)
        return Position(
            board=board,
            color_to_move=self.color_to_move.opposite(),
            castling_rights=revoke_castling_rights(self.castling_rights, move, moving_piece, captured),
            en_passant_square=en_passant_square_after(move, moving_piece),
            half_move_clock=half_move_clock_after(self.half_move_clock, moving_piece, captured),
            full_move_number=full_move_number_after(self.full_move_number, moving_piece.color),
        )


# --- STATE TRANSITIONS FOR THE NON-BOARD PARTS ---
def revoke_castling_rights(
    rights: CastlingRights,
    move: Move,
    moving_piece: Piece,
    captured: Optional[Piece],
) -> CastlingRights:
    """
    Checks which rights should get revoked
    ----

    1. If you are moving your king (castling included) --> revoke both
    2. If you are moving your rook from its starting square --> revoke the right on that side
    3. If you are taking your opponent's rook on its starting square --> revoke your opponent's right on that side
    """
    player_color = moving_piece.color

    if moving_piece.type == PieceType.KING:
        rights = rights.revoke_all(player_color)

    if moving_piece.type == PieceType.ROOK:
        for direction in castling_directions(player_color):
            if move.from_square == CASTLING_RULES[direction].rook_from:
                rights = rights.revoke(direction)

    if captured is not None and captured.type == PieceType.ROOK:
        for direction in castling_directions(captured.color):
            if move.to_square == CASTLING_RULES[direction].rook_from:
                rights = rights.revoke(direction)

    return rights


def en_passant_square_after(move: Move, moving_piece: Piece) -> Optional[Square]:
    """The possible en passant square for the next turn: the square a pawn skipped over by advancing two squares."""
    ranks_moved = move.to_square.rank - move.from_square.rank
    if moving_piece.type != PieceType.PAWN or abs(ranks_moved) != 2:
        return None
    return Square(file=move.from_square.file, rank=move.from_square.rank + ranks_moved // 2)


def half_move_clock_after(clock: int, moving_piece: Piece, captured: Optional[Piece]) -> int:
    """Pawn moves and captures reset the clock, anything else adds a half-move."""
    if moving_piece.type == PieceType.PAWN or captured is not None:
        return 0
    return clock + 1


def full_move_number_after(number: int, mover: Color) -> int:
    return number + 1 if mover == Color.BLACK else number
