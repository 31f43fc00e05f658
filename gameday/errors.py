"""Exception types raised by the game-day engine."""

from typing import Optional


class GameDayError(Exception):
    """Base class for engine errors."""


class ValidationError(GameDayError):
    """Squad, report, or event input is incomplete or breaks a match rule.

    Raised before any network call is issued.
    """

    def __init__(self, messages: list[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__('; '.join(self.messages))


class ConfirmationRequired(GameDayError):
    """Soft warnings that the user must acknowledge before proceeding."""

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__('; '.join(self.messages))


class LifecycleError(GameDayError):
    """Operation not allowed for the game's current status."""


class TransientNetworkError(GameDayError):
    """A request to the backing store failed; safe to retry."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(GameDayError):
    """Bearer credential missing, invalid or expired."""


class NotFoundError(GameDayError):
    """Game or event does not exist in the backing store."""


class AbortError(GameDayError):
    """Request belonged to a session that has been torn down."""
