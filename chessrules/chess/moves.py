"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the movement of each piece type.
Every rule is a pure function (square, board) -> destination squares.

Legality (not leaving your own king in check, castling, en passant, promotion) is taken care of by move_generator.py
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from chessrules.chess.castling import CastlingDirection
from chessrules.chess.pieces import PIECE_TO_FEN, Color, Piece, PieceType
from chessrules.chess.square import BOARD_DIMENSIONS, Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def get(self, square: Square) -> Optional[Piece]: ...


Vector = tuple[int, int]


@dataclass(frozen=True)
class Move:
    """
    Basic definition of a move to be made
    ---

    * castling moves are king moves with `castling_direction` set (the rook hop is implied)
    * `is_en_passant` marks the pawn capture where the captured pawn is not standing on `to_square`
    """

    from_square: Square
    to_square: Square
    promote_to: Optional[PieceType] = None
    castling_direction: Optional[CastlingDirection] = None
    is_en_passant: bool = False

    @property
    def is_castle(self) -> bool:
        return self.castling_direction is not None

    def __str__(self) -> str:
        promotion = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square}{self.to_square}{promotion}"


# --- DIRECTIONS ---
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS


def pawn_direction(color: Color) -> int:
    """White moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def pawn_start_rank(color: Color) -> int:
    return 1 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 2


def promotion_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[1] - 1 if color == Color.WHITE else 0


# --- MOVEMENT RULES ---
def raycasting_move(square: Square, board: Board, directions: list[Vector]) -> list[Square]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board. The square of an opponent's piece is included (capture), your own is not.
    """
    player_color = _color_on(square, board)

    targets: list[Square] = []
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square is not None:
            piece_found = board.get(target_square)
            if piece_found is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if piece_found.color != player_color:
                    targets.append(target_square)
                break

            targets.append(target_square)
            target_square = target_square.offset(df, dr)
    return targets


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just jump to a fixed offset"""
    player_color = _color_on(square, board)

    targets: list[Square] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if target_square is None:
            continue

        piece_found = board.get(target_square)
        if piece_found is None or piece_found.color != player_color:
            targets.append(target_square)
    return targets


def candidate_pawn_moves(square: Square, board: Board) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally

    NOTE: En passant and promotion are taken care of by the move generator
    """
    player_color = _color_on(square, board)
    direction = pawn_direction(player_color)

    targets: list[Square] = []
    one_step = square.offset(0, direction)
    if one_step is not None and board.get(one_step) is None:
        targets.append(one_step)
        two_steps = one_step.offset(0, direction)
        if (
            square.rank == pawn_start_rank(player_color)
            and two_steps is not None
            and board.get(two_steps) is None
        ):
            targets.append(two_steps)

    # pawns take diagonally:
    for df in (-1, 1):
        target_square = square.offset(df, direction)
        if target_square is None:
            continue
        piece_found = board.get(target_square)
        if piece_found is not None and piece_found.color != player_color:
            targets.append(target_square)
    return targets


def candidate_knight_moves(square: Square, board: Board) -> list[Square]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Square]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Square]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_bishop_moves(square, board) + candidate_rook_moves(square, board)


def candidate_king_moves(square: Square, board: Board) -> list[Square]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (handled by the move generator).
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    ---
    Similar to raycasting moves.
    However, where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and that
    is allowed to move along the given direction?"_

    ---
    Returns TRUE if the first piece encountered along any direction is of the given color and one of the given types.
    """
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square is not None:
            piece_found = board.get(target_square)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target_square = target_square.offset(df, dr)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that just can move a single step along a direction.

    ---
    Returns TRUE if a piece of the given color and type stands on any of the offsets.
    """
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if target_square is None:
            continue

        if board.get(target_square) == Piece(by_piece_type, by_color):
            return True
    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could take on your square -->
    Must look one rank DOWN the board. That is, you are asking "Could a white pawn, that moves UP the board, take on the specified square?"
    """
    back = -pawn_direction(by_color)
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, [(1, back), (-1, back)]
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, (PieceType.BISHOP,), board, DIAGONALS)


def is_attacked_by_rook(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, (PieceType.ROOK,), board, STRAIGHTS)


def is_attacked_by_queen(square: Square, by_color: Color, board: Board) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_attack(
        square, by_color, (PieceType.QUEEN,), board, STRAIGHTS + DIAGONALS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    """Is any piece of `by_color` attacking the square? (whether the square is occupied or not does not matter)"""
    # sliders first: most checks in a real game come from them
    if raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    ):
        return True
    if raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    ):
        return True
    return any(
        ATTACK_RULES[piece_type](square, by_color, board)
        for piece_type in (PieceType.KNIGHT, PieceType.PAWN, PieceType.KING)
    )


# -- PAWN PROMOTION MOVES --
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
]


def pawn_moves_w_promotion(from_square: Square, to_square: Square) -> list[Move]:
    """One move for every piece type the pawn can promote into."""
    return [
        Move(from_square=from_square, to_square=to_square, promote_to=piece_type)
        for piece_type in PROMOTION_OPTIONS
    ]


def _color_on(square: Square, board: Board) -> Color:
    piece = board.get(square)
    assert piece is not None, f"No piece to move on {square}"
    return piece.color
