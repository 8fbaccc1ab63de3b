"""
Custom exceptions used across layers.

Every exception raised on purpose by this package derives from `GameError`, so a caller
can catch the whole family at once (specific types are the responsibility of the layer raising them).
"""


class GameError(Exception):
    """Top-level exception for anything that went wrong while playing a game."""


class IllegalMoveError(GameError):
    """Move is not part of the current set of legal moves (or the game is already over)."""


class NoHistoryError(GameError):
    """Undo requested, but no move has been made yet."""


class NoRedoError(GameError):
    """Redo requested, but there is no undone move waiting to be replayed."""


class MalformedRecordError(GameError):
    """
    A FEN record (or packed position key) could not be interpreted.
    ---

    `field` names the part of the record that is broken, so a caller can point the user to it.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Malformed {field}: {reason}")


class RepositoryError(GameError):
    """Persistence layer could not deliver the requested record."""


class InvalidRequestError(GameError):
    """Request sent to the service does not have the expected shape."""
