"""Unit tests for chessrules/api/models.py"""

from uuid import UUID, uuid4

import pytest

from chessrules.api.models import CreateGameRequest, MoveRequest
from chessrules.core.exceptions import InvalidRequestError
from chessrules.core.shared_types import PieceType


@pytest.fixture
def mock_id() -> UUID:
    return uuid4()


# -- Validation - CreateGameRequest --
def test_valid_fen() -> None:
    """Test that CreateGameRequest accepts a valid FEN string."""

    valid_fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
    request = CreateGameRequest(starting_fen=valid_fen)
    assert request.starting_fen == valid_fen


def test_fen_whitespace_is_normalized() -> None:
    request = CreateGameRequest(
        starting_fen=" rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR  w KQkq - 0 1 "
    )
    assert request.starting_fen == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def test_starting_fen_is_optional() -> None:
    """Should be able to not supply a starting FEN, and validator just returns None."""
    assert CreateGameRequest().starting_fen is None
    assert CreateGameRequest(starting_fen=None).starting_fen is None


@pytest.mark.parametrize(
    "invalid_fen",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0",  # only 5 space-separated values
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1 extra",  # too many space-separated values
        "",
    ],
)
def test_invalid_fen(invalid_fen: str) -> None:
    """Structurally invalid FEN: more or less than 6 space-separated fields."""

    with pytest.raises(InvalidRequestError):
        _ = CreateGameRequest(starting_fen=invalid_fen)


# -- Validation - MoveRequest --
@pytest.mark.parametrize("square", ["a1", "h8", "e4", "E4", " d5 "])
def test_valid_squares(mock_id: UUID, square: str) -> None:
    request = MoveRequest(game_id=mock_id, from_square=square, to_square="a1")
    assert request.from_square == square.strip().lower()
    assert request.promote_to is None


@pytest.mark.parametrize("square", ["a9", "i1", "a0", "e", "e44", "4e", ""])
def test_invalid_squares(mock_id: UUID, square: str) -> None:
    with pytest.raises(InvalidRequestError):
        MoveRequest(game_id=mock_id, from_square="e2", to_square=square)


def test_promotion_choices(mock_id: UUID) -> None:
    request = MoveRequest(
        game_id=mock_id, from_square="e7", to_square="e8", promote_to=PieceType.KNIGHT
    )
    assert request.promote_to == PieceType.KNIGHT

    # the string value works as well
    request = MoveRequest(game_id=mock_id, from_square="e7", to_square="e8", promote_to="queen")
    assert request.promote_to == PieceType.QUEEN

    for invalid in (PieceType.KING, PieceType.PAWN):
        with pytest.raises(InvalidRequestError):
            MoveRequest(game_id=mock_id, from_square="e7", to_square="e8", promote_to=invalid)
