"""Unit tests for chessrules/chess/board.py"""

import pytest

from chessrules.chess.board import STARTING_PLACEMENT, Board, en_passant_victim_square
from chessrules.chess.castling import CastlingDirection
from chessrules.chess.moves import Move
from chessrules.chess.pieces import Color, Piece, PieceType
from chessrules.chess.square import Square

EMPTY_FEN = "/".join(["8"] * 8)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


@pytest.fixture
def starting_board() -> Board:
    return Board.from_fen(STARTING_PLACEMENT)


@pytest.fixture
def castling_board() -> Board:
    """Create a board with only the Kings and the Rooks. Ready to perform any castling move (if allowed)."""
    return Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R")


# --- FEN ---
@pytest.mark.parametrize(
    "placement",
    [
        STARTING_PLACEMENT,
        EMPTY_FEN,
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R",
        "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8",
    ],
)
def test_fen_round_trip(placement: str) -> None:
    assert Board.from_fen(placement).to_fen() == placement


def test_starting_board_contents(starting_board: Board) -> None:
    assert starting_board.get(sq("e1")) == Piece(PieceType.KING, Color.WHITE)
    assert starting_board.get(sq("d8")) == Piece(PieceType.QUEEN, Color.BLACK)
    assert starting_board.get(sq("a2")) == Piece(PieceType.PAWN, Color.WHITE)
    assert starting_board.get(sq("e4")) is None
    assert len(list(starting_board.squares_with(lambda _, piece: True))) == 32
    assert len(list(starting_board.squares_with(lambda _, piece: piece.color == Color.BLACK))) == 16


def test_locate_pieces(starting_board: Board) -> None:
    assert starting_board.locate_pieces(PieceType.KNIGHT, Color.WHITE) == [sq("b1"), sq("g1")]
    assert starting_board.find_king(Color.BLACK) == sq("e8")


# --- ATTACKS ---
def test_no_check_in_starting_position(starting_board: Board) -> None:
    assert not starting_board.is_check(Color.WHITE)
    assert not starting_board.is_check(Color.BLACK)


def test_check_by_rook() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K2r")
    assert board.is_check(Color.WHITE)
    assert not board.is_check(Color.BLACK)


def test_blocked_attack() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4KB1r")
    assert not board.is_check(Color.WHITE)
    assert board.is_attacked(sq("f1"), Color.BLACK)


def test_attacks_by_pawns_are_diagonal() -> None:
    board = Board.from_fen("4k3/8/8/3p4/8/8/8/4K3")
    assert board.is_attacked(sq("c4"), Color.BLACK)
    assert board.is_attacked(sq("e4"), Color.BLACK)
    assert not board.is_attacked(sq("d4"), Color.BLACK)
    assert not board.is_attacked(sq("c6"), Color.BLACK)


# --- MOVING PIECES ---
def test_simple_move_and_unmove(starting_board: Board) -> None:
    original = starting_board.copy()
    move = Move(sq("g1"), sq("f3"))
    knight = starting_board.get(sq("g1"))
    assert knight is not None

    captured = starting_board.move_piece(move)
    assert captured is None
    assert starting_board.get(sq("f3")) == knight
    assert starting_board.get(sq("g1")) is None

    starting_board.unmove_piece(move, knight, captured)
    assert starting_board == original


def test_capture_and_unmove() -> None:
    board = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3")
    original = board.copy()
    move = Move(sq("e4"), sq("d5"))
    pawn = board.get(sq("e4"))
    assert pawn is not None

    captured = board.move_piece(move)
    assert captured == Piece(PieceType.PAWN, Color.BLACK)
    board.unmove_piece(move, pawn, captured)
    assert board == original


@pytest.mark.parametrize(
    "direction, king_to, rook_to, rook_from",
    [
        (CastlingDirection.WHITE_KING_SIDE, "g1", "f1", "h1"),
        (CastlingDirection.WHITE_QUEEN_SIDE, "c1", "d1", "a1"),
    ],
)
def test_castling_moves_the_rook(
    castling_board: Board,
    direction: CastlingDirection,
    king_to: str,
    rook_to: str,
    rook_from: str,
) -> None:
    original = castling_board.copy()
    king = Piece(PieceType.KING, Color.WHITE)
    move = Move(sq("e1"), sq(king_to), castling_direction=direction)

    captured = castling_board.move_piece(move)
    assert captured is None
    assert castling_board.get(sq(king_to)) == king
    assert castling_board.get(sq(rook_to)) == Piece(PieceType.ROOK, Color.WHITE)
    assert castling_board.get(sq(rook_from)) is None
    assert castling_board.get(sq("e1")) is None

    castling_board.unmove_piece(move, king, captured)
    assert castling_board == original


def test_en_passant_removes_the_passed_pawn() -> None:
    board = Board.from_fen("4k3/8/8/3pP3/8/8/8/4K3")
    original = board.copy()
    move = Move(sq("e5"), sq("d6"), is_en_passant=True)
    assert en_passant_victim_square(move) == sq("d5")

    pawn = Piece(PieceType.PAWN, Color.WHITE)
    captured = board.move_piece(move)
    assert captured == Piece(PieceType.PAWN, Color.BLACK)
    assert board.get(sq("d5")) is None
    assert board.get(sq("d6")) == pawn

    board.unmove_piece(move, pawn, captured)
    assert board == original


def test_promotion_replaces_the_pawn() -> None:
    board = Board.from_fen("1r2k3/P7/8/8/8/8/8/4K3")
    original = board.copy()
    move = Move(sq("a7"), sq("b8"), promote_to=PieceType.QUEEN)
    pawn = Piece(PieceType.PAWN, Color.WHITE)

    captured = board.move_piece(move)
    assert captured == Piece(PieceType.ROOK, Color.BLACK)
    assert board.get(sq("b8")) == Piece(PieceType.QUEEN, Color.WHITE)

    board.unmove_piece(move, pawn, captured)
    assert board == original


def test_copy_is_independent(starting_board: Board) -> None:
    copy = starting_board.copy()
    copy.remove_piece(sq("d1"))
    assert starting_board.get(sq("d1")) == Piece(PieceType.QUEEN, Color.WHITE)


# --- DISPLAY ---
def test_render(starting_board: Board) -> None:
    lines = starting_board.render().splitlines()
    assert len(lines) == 9
    assert lines[0] == "8 r n b q k b n r"
    assert lines[4] == "4 . . . . . . . ."
    assert lines[7] == "1 R N B Q K B N R"
    assert lines[8] == "  a b c d e f g h"
    assert str(starting_board) == starting_board.render()
