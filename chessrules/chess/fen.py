"""
Validation of FEN records.

FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.
The purpose of FEN is to provide all the necessary information to restart a game from a particular position.

<board position string> <active color> <castling rights> <en passant square> <# half move clock> <number turns played>

ex) The standard starting position has a FEN
rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
i.e. it is white to move, all castling options available, no en passant square, no half moves and we are in the first turn.

Every check raises a MalformedRecordError naming the offending field. Nothing in here mutates caller state.
"""

from typing import Optional

from chessrules.chess.board import Board
from chessrules.chess.castling import CASTLING_ORDER, CASTLING_RULES, CastlingRights
from chessrules.chess.moves import pawn_direction
from chessrules.chess.pieces import FEN_TO_PIECE, Color, Piece, PieceType
from chessrules.chess.square import BOARD_DIMENSIONS, FILE_NAMES, Square
from chessrules.core.exceptions import MalformedRecordError

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# Field names reported in MalformedRecordError
RECORD = "record"
PLACEMENT = "placement"
ACTIVE_COLOR = "active_color"
CASTLING = "castling"
EN_PASSANT = "en_passant"
HALF_MOVE_CLOCK = "half_move_clock"
FULL_MOVE_NUMBER = "full_move_number"

COLOR_CODES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
COLOR_TO_CODE: dict[Color, str] = {value: key for key, value in COLOR_CODES.items()}


def split_fen(fen: str) -> list[str]:
    """there should be 6 space separated parts to the string"""
    parts = fen.split()
    if len(parts) != 6:
        raise MalformedRecordError(
            RECORD, f"expected 6 space-separated fields, got {len(parts)} in {fen!r}"
        )
    return parts


def parse_placement(position: str) -> Board:
    """Only check the part of the FEN encoding for the board position, then build the board."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        raise MalformedRecordError(
            PLACEMENT, f"expected {num_ranks} ranks, got {len(rank_fens)}"
        )

    for rank_idx, rank_fen in enumerate(rank_fens):
        rank_name = num_ranks - rank_idx
        file_count = 0
        previous_was_digit = False
        for character in rank_fen:
            # make sure every character is valid
            if character in "0123456789":
                if previous_was_digit or character == "0":
                    raise MalformedRecordError(
                        PLACEMENT, f"invalid empty-square count in rank {rank_name}: {rank_fen!r}"
                    )
                file_count += int(character)
                previous_was_digit = True
            elif character.isascii() and character.lower() in FEN_TO_PIECE:
                file_count += 1
                previous_was_digit = False
            else:
                raise MalformedRecordError(
                    PLACEMENT, f"unknown character {character!r} in rank {rank_name}"
                )

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            raise MalformedRecordError(
                PLACEMENT, f"rank {rank_name} covers {file_count} files instead of {num_files}"
            )

    board = Board.from_fen(position)
    _validate_piece_counts(board)
    return board


def _validate_piece_counts(board: Board) -> None:
    """Exactly one king per side, and no pawns on the first or last rank."""
    for color in Color:
        kings = board.locate_pieces(PieceType.KING, color)
        if len(kings) != 1:
            raise MalformedRecordError(
                PLACEMENT, f"expected one {color.name.lower()} king, found {len(kings)}"
            )

    back_rank_pawns = list(
        board.squares_with(
            lambda square, piece: piece.type == PieceType.PAWN
            and square.rank in (0, BOARD_DIMENSIONS[1] - 1)
        )
    )
    if back_rank_pawns:
        square, _ = back_rank_pawns[0]
        raise MalformedRecordError(PLACEMENT, f"pawn on back rank square {square}")


def parse_color_code(color: str) -> Color:
    if color not in COLOR_CODES:
        raise MalformedRecordError(ACTIVE_COLOR, f"expected 'w' or 'b', got {color!r}")
    return COLOR_CODES[color]


def parse_castling_rights(castling: str) -> CastlingRights:
    """A valid castling encoding has KQkq, KQk, etc. (always in this order) or a '-' if all rights have been revoked."""
    if castling == "-":
        return CastlingRights.none()
    if not castling:
        raise MalformedRecordError(CASTLING, "empty castling field, use '-' for no rights")

    order = "".join(direction.value for direction in CASTLING_ORDER)
    position_in_order = -1
    for character in castling:
        if character not in order:
            raise MalformedRecordError(
                CASTLING, f"unknown character {character!r} in {castling!r}"
            )
        if order.index(character) <= position_in_order:
            raise MalformedRecordError(
                CASTLING, f"rights must be listed once each, in the order KQkq: {castling!r}"
            )
        position_in_order = order.index(character)
    return CastlingRights.from_fen(castling)


def parse_en_passant(en_passant: str) -> Optional[Square]:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    if en_passant == "-":
        return None
    if not is_valid_square(en_passant):
        raise MalformedRecordError(EN_PASSANT, f"not a square: {en_passant!r}")
    return Square.from_algebraic(en_passant)


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    if len(square) != 2:
        return False

    file_char, rank_char = square[0], square[1]
    if file_char not in FILE_NAMES:
        return False

    if rank_char not in "0123456789":
        return False

    return 1 <= int(rank_char) <= BOARD_DIMENSIONS[1]


def parse_move_counter(counter: str, field: str, minimum: int) -> int:
    if not (counter.isascii() and counter.isdigit()) or int(counter) < minimum:
        raise MalformedRecordError(
            field, f"expected a whole number of at least {minimum}, got {counter!r}"
        )
    return int(counter)


# --- CROSS-FIELD CHECKS ---
def validate_castling_against_board(rights: CastlingRights, board: Board) -> None:
    """A castling right can only still exist if the king and the rook never left their starting squares."""
    for direction in CASTLING_ORDER:
        if not rights.has(direction):
            continue
        rule = CASTLING_RULES[direction]
        color = direction.color
        if board.get(rule.king_from) != Piece(PieceType.KING, color) or board.get(
            rule.rook_from
        ) != Piece(PieceType.ROOK, color):
            raise MalformedRecordError(
                CASTLING,
                f"right {direction.value!r} requires king on {rule.king_from} and rook on {rule.rook_from}",
            )


def validate_en_passant_against_board(
    en_passant_square: Optional[Square], color_to_move: Color, board: Board
) -> None:
    """
    The en passant square is the square the opponent's pawn just skipped over:
    * it lies on the 6th rank when white is to move (3rd rank when black is to move)
    * the opponent's pawn stands right in front of it, the square itself and the pawn's origin are empty
    """
    if en_passant_square is None:
        return

    mover = color_to_move.opposite()
    direction = pawn_direction(mover)
    expected_rank = 2 if mover == Color.WHITE else BOARD_DIMENSIONS[1] - 3
    if en_passant_square.rank != expected_rank:
        raise MalformedRecordError(
            EN_PASSANT,
            f"{en_passant_square} is not on the rank a {mover.name.lower()} pawn skips over",
        )

    pawn_square = en_passant_square.offset(0, direction)
    origin_square = en_passant_square.offset(0, -direction)
    assert pawn_square is not None and origin_square is not None
    if board.get(pawn_square) != Piece(PieceType.PAWN, mover):
        raise MalformedRecordError(
            EN_PASSANT, f"no {mover.name.lower()} pawn on {pawn_square} that could have just advanced"
        )
    if board.is_any_occupied([en_passant_square, origin_square]):
        raise MalformedRecordError(
            EN_PASSANT, f"{en_passant_square} and {origin_square} must be empty"
        )


def validate_not_capturable_king(board: Board, color_to_move: Color) -> None:
    """The side that just moved cannot have left its own king in check."""
    if board.is_check(color_to_move.opposite()):
        raise MalformedRecordError(
            ACTIVE_COLOR,
            f"{color_to_move.name.lower()} to move while the {color_to_move.opposite().name.lower()} king is in check",
        )
