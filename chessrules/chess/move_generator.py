"""
Legal move generation
---

Two phases:
1. pseudo-legal moves: the movement rules of every piece of the side to move (moves.py), plus the special moves
   (en passant, promotions, castling) that need more than just the board to be decided.
2. legality filter: make every candidate on a scratch copy of the board and drop those that leave your own king in check.

Order of the result is deterministic (board scan a1, b1, ..., h8, castling moves last), nothing more.
"""

from typing import Optional

from chessrules.chess.board import Board
from chessrules.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    castling_directions,
)
from chessrules.chess.moves import (
    MOVEMENT_RULES,
    Move,
    pawn_direction,
    pawn_moves_w_promotion,
    promotion_rank,
)
from chessrules.chess.pieces import Color, Piece, PieceType
from chessrules.chess.position import Position
from chessrules.chess.square import Square


# --- PHASE 1: PSEUDO-LEGAL MOVES ---
def pseudo_legal_moves(position: Position) -> list[Move]:
    """
    Every move that follows the movement rules, ignoring whether it leaves your own king in check.
    ----

    1. generate candidate moves, using the basic movement rules for all pieces
    2. Pawn reaching the final rank? --> one move for every choice of piece type to promote into.
    3. add candidate en passant moves
    4. add candidate castling moves
    """
    board = position.board
    color = position.color_to_move

    candidate_moves: list[Move] = []
    for square, piece in board.squares_with(lambda _, piece: piece.color == color):
        targets = MOVEMENT_RULES[piece.type](square, board)
        if piece.type != PieceType.PAWN:
            candidate_moves.extend(Move(square, target) for target in targets)
            continue

        for target in targets:
            if target.rank == promotion_rank(color):
                candidate_moves.extend(pawn_moves_w_promotion(square, target))
            else:
                candidate_moves.append(Move(square, target))

        en_passant_move = _en_passant_move(square, color, position.en_passant_square)
        if en_passant_move is not None:
            candidate_moves.append(en_passant_move)

    candidate_moves.extend(_castling_moves(position))
    return candidate_moves


def _en_passant_move(
    square: Square, color: Color, en_passant_square: Optional[Square]
) -> Optional[Move]:
    """The pawn on `square` can take en passant if the en passant square is diagonally in front of it."""
    if en_passant_square is None:
        return None

    direction = pawn_direction(color)
    for df in (-1, 1):
        if square.offset(df, direction) == en_passant_square:
            return Move(square, en_passant_square, is_en_passant=True)
    return None


def _castling_moves(position: Position) -> list[Move]:
    """
    Castling directions that pass the checks that only need the board as it is:

    * Castling rights are not yet revoked.
    * The king and the rook stand on their starting squares.
    * Every square in between the king and the rook is empty.

    Whether any of the king's squares are attacked is part of the legality filter.
    """
    board = position.board
    color = position.color_to_move

    moves: list[Move] = []
    for direction in castling_directions(color):
        if not position.castling_rights.has(direction):
            continue

        rule = CASTLING_RULES[direction]
        if board.get(rule.king_from) != Piece(PieceType.KING, color):
            continue
        if board.get(rule.rook_from) != Piece(PieceType.ROOK, color):
            continue
        if board.is_any_occupied(rule.between):
            continue

        moves.append(Move(rule.king_from, rule.king_to, castling_direction=direction))
    return moves


# --- PHASE 2: LEGALITY FILTER ---
def legal_moves(position: Position) -> list[Move]:
    """The exact set of moves the side to move is allowed to play."""
    return [
        move for move in pseudo_legal_moves(position) if _is_safe_for_king(position, move)
    ]


def _is_safe_for_king(position: Position, move: Move) -> bool:
    """Return True if the move does not put (or leave) your own king in check

    plan:
    1. (castling only) the king may not castle out of, through, or into check
    2. Copy the board
    3. make the candidate move
    4. determine if king is in check on the new board
    """
    color = position.color_to_move
    if move.castling_direction is not None and not _is_castling_path_safe(
        position.board, move.castling_direction, color
    ):
        return False

    scratch_board = position.board.copy()
    scratch_board.move_piece(move)
    return not scratch_board.is_check(color)


def _is_castling_path_safe(board: Board, direction: CastlingDirection, color: Color) -> bool:
    """None of the squares the king stands on, passes through, or lands on may be under attack."""
    return not board.is_any_under_attack(
        CASTLING_RULES[direction].king_path, color.opposite()
    )


def find_move(
    moves: list[Move],
    from_square: Square,
    to_square: Square,
    promote_to: Optional[PieceType] = None,
) -> Optional[Move]:
    """
    Look up the move going from -> to (with the given promotion) in a list of moves.
    Lets a caller that only knows the squares get hold of the move with its castling / en passant flags set.
    """
    return next(
        (
            move
            for move in moves
            if move.from_square == from_square
            and move.to_square == to_square
            and move.promote_to == promote_to
        ),
        None,
    )
