"""Unit tests for chessrules/chess/codec.py"""

import pytest

from chessrules.chess.board import Board
from chessrules.chess.castling import CastlingRights
from chessrules.chess.codec import (
    BOARD_BYTES,
    KEY_BITS,
    decode_board,
    decode_position,
    decode_square,
    encode_board,
    encode_position,
    encode_square,
    position_key,
)
from chessrules.chess.fen import STARTING_FEN
from chessrules.chess.moves import Move
from chessrules.chess.pieces import Color, Piece, PieceType
from chessrules.chess.position import Position
from chessrules.chess.square import Square
from chessrules.core.exceptions import MalformedRecordError


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


@pytest.mark.parametrize(
    "piece, nibble",
    [
        (None, 0b0000),
        (Piece(PieceType.PAWN, Color.WHITE), 0b0010),
        (Piece(PieceType.PAWN, Color.BLACK), 0b0011),
        (Piece(PieceType.ROOK, Color.WHITE), 0b0100),
        (Piece(PieceType.KNIGHT, Color.BLACK), 0b0111),
        (Piece(PieceType.BISHOP, Color.WHITE), 0b1000),
        (Piece(PieceType.KING, Color.BLACK), 0b1011),
        (Piece(PieceType.QUEEN, Color.WHITE), 0b1100),
    ],
)
def test_square_codes(piece: Piece | None, nibble: int) -> None:
    """3 bits for the kind of piece, then 1 bit for its color"""
    assert encode_square(piece) == nibble
    assert decode_square(nibble, sq("a1")) == piece


@pytest.mark.parametrize("nibble", [0b0001, 0b1110, 0b1111])
def test_invalid_square_codes(nibble: int) -> None:
    """An empty square with a color, and the unused piece code"""
    with pytest.raises(MalformedRecordError) as exc_info:
        decode_square(nibble, sq("a1"))
    assert exc_info.value.field == "board"


def test_starting_board_bytes() -> None:
    data = encode_board(Position.starting_position().board)
    assert len(data) == BOARD_BYTES == 32
    # a8 black rook (010 1), b8 black knight (011 1)
    assert data[0] == 0b01010111
    assert data[1] == 0b10011101
    assert data[2] == 0b10111001
    assert data[4:8] == bytes([0b00110011] * 4)
    assert data[24:28] == bytes([0b00100010] * 4)
    assert data[28] == 0b01000110
    # ranks 6 - 3 are empty
    assert data[8:24] == bytes(16)
    # g1 white knight (011 0), h1 white rook (010 0)
    assert data[31] == 0b01100100


@pytest.mark.parametrize(
    "placement",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR",
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R",
        "8/8/8/8/8/8/8/8",
    ],
)
def test_board_round_trip(placement: str) -> None:
    board = Board.from_fen(placement)
    assert decode_board(encode_board(board)) == board


def test_decode_board_wrong_length() -> None:
    with pytest.raises(MalformedRecordError):
        decode_board(bytes(31))


@pytest.mark.parametrize(
    "record",
    [
        STARTING_FEN,
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1",
        "rnbqkbnr/ppp1pppp/8/2Pp4/8/8/PP1PPPPP/RNBQKBNR w Kq d6 0 3",
        "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 b - - 0 1",
    ],
)
def test_position_key_round_trip(record: str) -> None:
    """Clocks are not part of the key: decoding gives the position with its clocks reset"""
    position = Position.from_fen(record)
    key = position_key(position)
    assert 0 <= key < 1 << KEY_BITS

    decoded = decode_position(key)
    assert decoded.board == position.board
    assert decoded.color_to_move == position.color_to_move
    assert decoded.castling_rights == position.castling_rights
    assert decoded.en_passant_square == position.en_passant_square
    assert decoded.half_move_clock == 0
    assert decoded.full_move_number == 1


def test_key_ignores_clocks() -> None:
    a = Position.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    b = Position.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 12 40")
    assert position_key(a) == position_key(b)


def test_key_distinguishes_side_rights_and_en_passant() -> None:
    board = Position.starting_position().board
    base = encode_position(board, Color.WHITE, CastlingRights(), None)
    assert base != encode_position(board, Color.BLACK, CastlingRights(), None)
    assert base != encode_position(board, Color.WHITE, CastlingRights.none(), None)

    after_e4 = Position.starting_position().after(Move(sq("e2"), sq("e4")))
    with_ep = position_key(after_e4)
    without_ep = encode_position(
        after_e4.board, after_e4.color_to_move, after_e4.castling_rights, None
    )
    assert with_ep != without_ep
    assert with_ep & 0b1111 == 0b1000 | sq("e3").file


@pytest.mark.parametrize("key", [-1, 1 << KEY_BITS])
def test_key_out_of_range(key: int) -> None:
    with pytest.raises(MalformedRecordError) as exc_info:
        decode_position(key)
    assert exc_info.value.field == "key"


def test_key_with_file_but_no_en_passant_flag() -> None:
    key = position_key(Position.starting_position()) | 0b0011
    with pytest.raises(MalformedRecordError):
        decode_position(key)


def test_decode_then_encode_gives_the_same_key() -> None:
    for record in (
        STARTING_FEN,
        "rnbqkbnr/ppp1pppp/8/2Pp4/8/8/PP1PPPPP/RNBQKBNR w Kq d6 0 3",
    ):
        key = position_key(Position.from_fen(record))
        assert position_key(decode_position(key)) == key
