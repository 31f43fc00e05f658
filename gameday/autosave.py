"""Debounced, cancellable draft persistence."""

import logging
import threading
import time
from typing import Any, Callable, Optional

from .cancellation import CancellationToken
from .config import get_autosave_debounce, get_hydration_grace
from .errors import AbortError, GameDayError
from .observable import Observable
from .utils import canonical_json

logger = logging.getLogger('gameday.autosave')

SnapshotFn = Callable[[], Any]
WriteFn = Callable[..., Any]


class DraftAutosaveCoordinator:
    """
    Timer-gated write queue for one draft document.

    Watches a set of stores, serializes their composite state on every change
    and, once edits have been quiet for the debounce window, issues a single
    full write. At most one write is pending at any time; the snapshot it
    compares against only advances when a write succeeds.

    Used for the lineup draft while a game is Scheduled and for the report
    draft while it is Played; enabled_fn gates which one is live.
    """

    def __init__(
        self,
        snapshot_fn: SnapshotFn,
        write_fn: WriteFn,
        debounce: Optional[float] = None,
        grace: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Callable[..., Any] = threading.Timer,
        enabled_fn: Optional[Callable[[], bool]] = None,
        name: str = 'draft',
    ):
        """
        Args:
            snapshot_fn: Returns the JSON-serializable draft body
            write_fn: Persists a body; called as write_fn(body, cancel_token=token)
            debounce: Quiet period before writing (defaults to config)
            grace: Hydration window after start() during which changes only rebaseline
            clock: Monotonic clock in seconds
            timer_factory: Called as timer_factory(seconds, callback); must return an
                object with start() and cancel()
            enabled_fn: Returns False when writes must not happen (e.g. wrong status)
            name: Label used in log messages
        """
        self.snapshot_fn = snapshot_fn
        self.write_fn = write_fn
        self.debounce = get_autosave_debounce() if debounce is None else debounce
        self.grace = get_hydration_grace() if grace is None else grace
        self.clock = clock
        self.timer_factory = timer_factory
        self.enabled_fn = enabled_fn or (lambda: True)
        self.name = name

        self.cancel_token = CancellationToken()
        self.is_autosaving = False
        self.autosave_error: Optional[str] = None
        self.last_saved_at: Optional[float] = None
        self.write_count = 0

        self._lock = threading.Lock()
        self._timer = None
        self._last_snapshot: Optional[str] = None
        self._opened_at: Optional[float] = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def observe(self, *stores: Observable) -> None:
        """Subscribe to change notifications of each store."""
        for store in stores:
            self._unsubscribers.append(store.subscribe(self.on_change))

    def start(self, cancel_token: Optional[CancellationToken] = None) -> None:
        """Begin the grace period and take the initial baseline."""
        if cancel_token is not None:
            self.cancel_token = cancel_token
        self._opened_at = self.clock()
        self._last_snapshot = self._serialize()
        logger.debug(f'{self.name} autosave started, grace {self.grace}s')

    def in_grace_period(self) -> bool:
        if self._opened_at is None:
            return False
        return self.clock() - self._opened_at < self.grace

    def on_change(self, *_args) -> None:
        """Store listener: restart the debounce timer when the composite changed."""
        if self._closed or not self.enabled_fn():
            return

        serialized = self._serialize()
        with self._lock:
            if self.in_grace_period():
                self._last_snapshot = serialized
                self._cancel_timer()
                logger.debug(f'{self.name} change during hydration grace, rebaselined')
                return

            if serialized == self._last_snapshot:
                self._cancel_timer()
                logger.debug(f'{self.name} unchanged since last save, nothing scheduled')
                return

            self._cancel_timer()
            timer = self.timer_factory(self.debounce, self.flush)
            if hasattr(timer, 'daemon'):
                timer.daemon = True
            self._timer = timer
            timer.start()

    def flush(self) -> bool:
        """
        Write the current composite now if it differs from the last saved one.

        Failures are kept in autosave_error rather than raised; an abort is
        not a failure.

        Returns:
            True if a write succeeded
        """
        with self._lock:
            self._timer = None
            if self._closed or not self.enabled_fn():
                return False
            body = self.snapshot_fn()
            serialized = canonical_json(body)
            if serialized == self._last_snapshot:
                logger.debug(f'{self.name} unchanged, skipping write')
                return False
            self.is_autosaving = True

        token = self.cancel_token
        try:
            self.write_fn(body, cancel_token=token)
        except AbortError:
            logger.debug(f'{self.name} write aborted')
            return False
        except GameDayError as e:
            self.autosave_error = str(e)
            logger.warning(f'{self.name} autosave failed, will retry on next change: {e}')
            return False
        finally:
            self.is_autosaving = False

        if token.cancelled:
            logger.debug(f'{self.name} write finished after teardown, result ignored')
            return False

        with self._lock:
            self._last_snapshot = serialized
            self.autosave_error = None
            self.last_saved_at = self.clock()
            self.write_count += 1
        logger.info(f'{self.name} autosaved')
        return True

    def dismiss_error(self) -> None:
        """Clear the failure status; the unsaved change is still retried on the next edit."""
        self.autosave_error = None

    def rebaseline(self) -> None:
        """Treat the current composite as saved (e.g. after an explicit commit)."""
        with self._lock:
            self._cancel_timer()
            self._last_snapshot = self._serialize()

    def close(self) -> None:
        """Drop any pending write, cancel in-flight ones and stop observing."""
        with self._lock:
            self._closed = True
            self._cancel_timer()
        self.cancel_token.cancel('autosave closed')
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _serialize(self) -> str:
        return canonical_json(self.snapshot_fn())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
