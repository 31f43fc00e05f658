"""Minimal change notification for the in-memory stores."""

from typing import Callable

Listener = Callable[[object], None]


class Observable:
    """Mixin holding a list of listeners called with the store after each change."""

    def __init__(self):
        self._listeners: list[Listener] = []
        self._batch_depth = 0
        self._dirty = False

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        if self._batch_depth:
            self._dirty = True
            return
        for listener in list(self._listeners):
            listener(self)

    def batch(self) -> '_Batch':
        """Context manager collapsing several mutations into one notification."""
        return _Batch(self)


class _Batch:
    def __init__(self, store: Observable):
        self._store = store

    def __enter__(self):
        self._store._batch_depth += 1
        return self._store

    def __exit__(self, exc_type, exc, tb):
        self._store._batch_depth -= 1
        if self._store._batch_depth == 0 and self._store._dirty:
            self._store._dirty = False
            self._store.notify()
        return False
