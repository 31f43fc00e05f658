"""Cancellation tokens tying network calls to an editing session's lifetime."""

import threading
from typing import Optional

from .errors import AbortError


class CancellationToken:
    """
    Flag shared between a session and the requests it issues.

    The session cancels the token on teardown (game identity change or close);
    request code checks it before sending and again before applying a result,
    so a response that arrives after teardown is dropped instead of applied.
    """

    def __init__(self, reason: str = ''):
        self._event = threading.Event()
        self.reason = reason

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = 'session closed') -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AbortError(self.reason or 'cancelled')

    def child(self) -> 'CancellationToken':
        """A token that is cancelled when either it or this token is."""
        return _LinkedToken(self)


class _LinkedToken(CancellationToken):
    def __init__(self, parent: CancellationToken):
        super().__init__()
        self._parent = parent

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self._parent.cancelled

    def raise_if_cancelled(self) -> None:
        if self._parent.cancelled:
            raise AbortError(self._parent.reason or 'cancelled')
        super().raise_if_cancelled()


def check(token: Optional[CancellationToken]) -> None:
    """Raise AbortError if token is set and cancelled."""
    if token is not None:
        token.raise_if_cancelled()
