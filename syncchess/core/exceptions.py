"""
Custom exceptions raised by the domain and service layers.

Everything derives from GameError so the transport layer can catch a single type and report it back
to the player that caused it. Nothing in here is fatal or retried automatically.
"""

from syncchess.core.shared_types import RejectionReason


class GameError(Exception):
    """Base class for every error the core reports to a player."""


# --- REJECTED SUBMISSIONS ---
class RejectedSubmissionError(GameError):
    """A submission was refused. The game state has not been touched."""

    def __init__(self, reason: RejectionReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or str(reason))


class MoveRejectedError(RejectedSubmissionError):
    """Move submission refused (no piece, wrong color, repeated piece, illegal, king left in check)."""


class PromotionRejectedError(RejectedSubmissionError):
    """Promotion choice refused (square mismatch, nothing to promote, bad piece type)."""


# --- STATE / STRUCTURAL ERRORS ---
class GameStateError(GameError):
    """The request does not fit the current phase of the game (game over, already submitted, ...)."""


class RoomNotFoundError(GameError):
    pass


class NotInRoomError(GameError):
    """The player is not seated in the room they are addressing."""


class RoomFullError(GameError):
    pass


# --- PARSING ---
class InvalidFENError(GameError):
    pass


class InvalidRequestError(GameError, ValueError):
    """Raised from request validators. Also a ValueError so pydantic wraps it into a ValidationError."""
