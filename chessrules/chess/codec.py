"""
Compact binary encoding of a position.
---

Every square takes 4 bits: 3 bits for the kind of piece followed by 1 bit for its color.

    |Square state |Bits |        |Color |Bit |
    | ----------- | --- |        | ---- | -- |
    |Empty        |000  |        |White |0   |
    |Pawn         |001  |        |Black |1   |
    |Rook         |010  |
    |Knight       |011  |
    |Bishop       |100  |
    |King         |101  |
    |Queen        |110  |
    |(reserved)   |111  |

The board is read like a FEN string: a8, b8, ..., h8, a7, ..., h1. Two squares share a byte, the first one in the
high nibble. So the board takes 32 bytes (256 bits).

A position key appends 9 more bits to the board bits:

    <board: 256><side to move: 1><castling K Q k q: 4><en passant present: 1><en passant file: 3>

The rank of the en passant square does not need to be stored: it follows from the side to move.
Move clocks are not part of the key (two positions only differing in their clocks are the same position).
"""

from typing import Optional

from chessrules.chess.board import Board
from chessrules.chess.castling import CastlingRights
from chessrules.chess.pieces import Color, Piece, PieceType
from chessrules.chess.position import Position
from chessrules.chess.square import BOARD_DIMENSIONS, NUM_SQUARES, Square
from chessrules.core.exceptions import MalformedRecordError

PositionKey = int

BITS_PER_SQUARE = 4
BOARD_BYTES = NUM_SQUARES * BITS_PER_SQUARE // 8
BOARD_BITS = BOARD_BYTES * 8
META_BITS = 9
KEY_BITS = BOARD_BITS + META_BITS

PIECE_TO_CODE: dict[PieceType, int] = {
    PieceType.PAWN: 0b001,
    PieceType.ROOK: 0b010,
    PieceType.KNIGHT: 0b011,
    PieceType.BISHOP: 0b100,
    PieceType.KING: 0b101,
    PieceType.QUEEN: 0b110,
}
CODE_TO_PIECE: dict[int, PieceType] = {value: key for key, value in PIECE_TO_CODE.items()}
EMPTY_CODE = 0b000
RESERVED_CODE = 0b111

COLOR_TO_BIT: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: 1}
BIT_TO_COLOR: dict[int, Color] = {value: key for key, value in COLOR_TO_BIT.items()}


def _scan_order() -> list[Square]:
    """Top rank first, a-file first: the same order as a FEN string"""
    num_files, num_ranks = BOARD_DIMENSIONS
    return [
        Square(file, rank)
        for rank in range(num_ranks - 1, -1, -1)
        for file in range(num_files)
    ]


SCAN_ORDER: tuple[Square, ...] = tuple(_scan_order())


# --- SINGLE SQUARE ---
def encode_square(piece: Optional[Piece]) -> int:
    if piece is None:
        return EMPTY_CODE
    return (PIECE_TO_CODE[piece.type] << 1) | COLOR_TO_BIT[piece.color]


def decode_square(nibble: int, square: Square) -> Optional[Piece]:
    kind_code, color_bit = nibble >> 1, nibble & 1
    if kind_code == EMPTY_CODE:
        if color_bit:
            raise MalformedRecordError("board", f"empty square {square} carries a color bit")
        return None
    if kind_code == RESERVED_CODE:
        raise MalformedRecordError("board", f"reserved piece code on {square}")
    return Piece(CODE_TO_PIECE[kind_code], BIT_TO_COLOR[color_bit])


# --- BOARD ---
def encode_board(board: Board) -> bytes:
    """32 bytes, two squares per byte"""
    nibbles = [encode_square(board.get(square)) for square in SCAN_ORDER]
    return bytes(
        (high << BITS_PER_SQUARE) | low for high, low in zip(nibbles[::2], nibbles[1::2])
    )


def decode_board(data: bytes) -> Board:
    """Exact inverse of `encode_board()`"""
    if len(data) != BOARD_BYTES:
        raise MalformedRecordError(
            "board", f"expected {BOARD_BYTES} bytes, got {len(data)}"
        )

    board = Board()
    squares = iter(SCAN_ORDER)
    for byte in data:
        for nibble in (byte >> BITS_PER_SQUARE, byte & 0b1111):
            square = next(squares)
            board.set(square, decode_square(nibble, square))
    return board


# --- POSITION KEY ---
def encode_position(
    board: Board,
    color_to_move: Color,
    castling_rights: CastlingRights,
    en_passant_square: Optional[Square],
) -> PositionKey:
    """Pack everything that makes two positions 'the same position' into a single integer of KEY_BITS bits."""
    key = int.from_bytes(encode_board(board), "big")
    key = (key << 1) | COLOR_TO_BIT[color_to_move]
    key = (key << 4) | castling_rights.as_bits()
    if en_passant_square is None:
        key = key << 4
    else:
        key = (key << 4) | 0b1000 | en_passant_square.file
    return key


def position_key(position: Position) -> PositionKey:
    return encode_position(
        position.board,
        position.color_to_move,
        position.castling_rights,
        position.en_passant_square,
    )


def decode_position(key: PositionKey) -> Position:
    """
    Exact inverse of `position_key()` for the parts that are stored.
    NOTE: Clocks are not stored, the decoded position has a half move clock of 0 and is in its first turn.
    """
    if not 0 <= key < (1 << KEY_BITS):
        raise MalformedRecordError("key", f"key must fit in {KEY_BITS} unsigned bits")

    en_passant_bits = key & 0b1111
    castling_bits = (key >> 4) & 0b1111
    color_to_move = BIT_TO_COLOR[(key >> 8) & 1]
    board = decode_board((key >> META_BITS).to_bytes(BOARD_BYTES, "big"))

    en_passant_square = None
    if en_passant_bits & 0b1000:
        # the pawn that just moved is the opponent's: black pawns skip the 6th rank, white pawns the 3rd
        rank = BOARD_DIMENSIONS[1] - 3 if color_to_move == Color.WHITE else 2
        en_passant_square = Square(en_passant_bits & 0b0111, rank)
    elif en_passant_bits:
        raise MalformedRecordError("key", "en passant file set without en passant flag")

    return Position(
        board=board,
        color_to_move=color_to_move,
        castling_rights=CastlingRights.from_bits(castling_bits),
        en_passant_square=en_passant_square,
    )
