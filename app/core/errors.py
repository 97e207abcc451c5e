"""
Error kinds raised by the scoreboard core.

Request handlers translate these into HTTP status codes; nothing below the
API layer knows about transport codes.
"""


class ScoreboardError(Exception):
    """Base class for every error the core signals."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ScoreboardError):
    """Malformed or out-of-range input."""


class NotFound(ScoreboardError):
    """Referenced student or exam detail does not exist."""


class Conflict(ScoreboardError):
    """Duplicate student name or a concurrent write won the race."""


class StorageError(ScoreboardError):
    """Persistence layer failure."""
