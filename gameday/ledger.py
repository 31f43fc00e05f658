"""Goals, cards and substitutions for a game in progress."""

import logging
import threading
from typing import Any, Callable, Optional

from .cancellation import CancellationToken
from .constants import EVENT_CARD, EVENT_GOAL, EVENT_SUBSTITUTION, STATUS_PLAYED
from .errors import AbortError, LifecycleError, NotFoundError, ValidationError
from .models import Card, FinalScore, Game, Goal, PlayerStats, Substitution, TimelineEntry
from .observable import Observable
from .rules import MatchContext, validate_card, validate_goal, validate_substitution
from .timeline import build_timeline, calculate_player_stats, derive_score

logger = logging.getLogger('gameday.ledger')

EVENT_VALIDATORS = {
    EVENT_GOAL: validate_goal,
    EVENT_CARD: validate_card,
    EVENT_SUBSTITUTION: validate_substitution,
}

REFRESH_DEBOUNCE_SECONDS = 0.3


class MatchEventLedger(Observable):
    """
    Local collections of match events, kept in step with the backing store.

    Mutations validate against the current timeline first, then persist, and
    only touch local state once the store has accepted the change. Score,
    timeline and per-player aggregates are recomputed synchronously after
    every committed change.
    """

    def __init__(
        self,
        game: Game,
        client,
        starters: set[str],
        squad: set[str],
        cancel_token: Optional[CancellationToken] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        super().__init__()
        self.game = game
        self.client = client
        self.starters = set(starters)
        self.squad = set(squad) | self.starters
        self.cancel_token = cancel_token or CancellationToken()
        self.timer_factory = timer_factory

        self.goals: list[Goal] = []
        self.cards: list[Card] = []
        self.substitutions: list[Substitution] = []
        self.timeline: list[TimelineEntry] = []
        self.score = FinalScore()
        self.player_stats: dict[str, PlayerStats] = {}
        self._refresh_timer = None

    @property
    def total_minutes(self) -> int:
        return self.game.match_duration.total_minutes

    @property
    def read_only(self) -> bool:
        return self.game.status != STATUS_PLAYED

    def context(self, exclude_id: Optional[str] = None) -> MatchContext:
        """Rule context built from all events except exclude_id."""
        goals = [g for g in self.goals if exclude_id is None or g.id != exclude_id]
        cards = [c for c in self.cards if exclude_id is None or c.id != exclude_id]
        subs = [s for s in self.substitutions if exclude_id is None or s.id != exclude_id]
        return MatchContext(
            timeline=build_timeline(goals, cards, subs),
            starters=self.starters,
            squad=self.squad,
            total_minutes=self.total_minutes,
            cards=cards,
        )

    # ----- loading -----

    def load(self) -> None:
        """Fetch every event collection from the store and recompute."""
        goals = self.client.list_events(self.game.id, EVENT_GOAL, cancel_token=self.cancel_token)
        cards = self.client.list_events(self.game.id, EVENT_CARD, cancel_token=self.cancel_token)
        subs = self.client.list_events(self.game.id, EVENT_SUBSTITUTION, cancel_token=self.cancel_token)
        self.goals, self.cards, self.substitutions = list(goals), list(cards), list(subs)
        logger.debug(
            f'Game {self.game.id}: loaded {len(goals)} goals, {len(cards)} cards, {len(subs)} substitutions'
        )
        self.recompute()

    def request_refresh(self) -> None:
        """Debounced reload for refreshes not caused by a local mutation."""
        if self._refresh_timer is not None:
            self._refresh_timer.cancel()
        timer = self.timer_factory(REFRESH_DEBOUNCE_SECONDS, self._run_refresh)
        if hasattr(timer, 'daemon'):
            timer.daemon = True
        self._refresh_timer = timer
        timer.start()

    def _run_refresh(self) -> None:
        self._refresh_timer = None
        if self.cancel_token.cancelled:
            return
        try:
            self.load()
        except AbortError:
            logger.debug(f'Game {self.game.id}: refresh aborted')

    # ----- mutations -----

    def create(self, event):
        """
        Validate and persist a new event.

        Args:
            event: Goal, Card or Substitution without an id

        Returns:
            The stored event (with the id assigned by the store), or None if
            the session was torn down before the store answered

        Raises:
            LifecycleError: If the game is not Played
            ValidationError: If the event breaks a match rule
        """
        self._check_writable()
        self._validate(event, exclude_id=None)
        try:
            stored = self.client.create_event(self.game.id, event, cancel_token=self.cancel_token)
        except AbortError:
            logger.debug(f'Game {self.game.id}: create {event.event_type} aborted')
            return None
        self._collection(event.event_type).append(stored)
        logger.info(f'Game {self.game.id}: recorded {event.event_type} at {event.minute}\'')
        self.recompute()
        return stored

    def update(self, event):
        """Validate and persist changes to an existing event (matched by id). None if aborted."""
        self._check_writable()
        collection = self._collection(event.event_type)
        index = self._index_of(collection, event.id, event.event_type)
        self._validate(event, exclude_id=event.id)
        try:
            stored = self.client.update_event(self.game.id, event, cancel_token=self.cancel_token)
        except AbortError:
            logger.debug(f'Game {self.game.id}: update {event.event_type} {event.id} aborted')
            return None
        collection[index] = stored
        logger.info(f'Game {self.game.id}: updated {event.event_type} {event.id}')
        self.recompute()
        return stored

    def delete(self, event_type: str, event_id: str) -> None:
        """Delete an event from the store, then locally."""
        self._check_writable()
        collection = self._collection(event_type)
        index = self._index_of(collection, event_id, event_type)
        try:
            self.client.delete_event(self.game.id, event_type, event_id, cancel_token=self.cancel_token)
        except AbortError:
            logger.debug(f'Game {self.game.id}: delete {event_type} {event_id} aborted')
            return
        del collection[index]
        logger.info(f'Game {self.game.id}: deleted {event_type} {event_id}')
        self.recompute()

    def create_goal(self, goal: Goal) -> Goal:
        return self.create(goal)

    def create_card(self, card: Card) -> Card:
        return self.create(card)

    def create_substitution(self, substitution: Substitution) -> Substitution:
        return self.create(substitution)

    # ----- derived state -----

    def recompute(self) -> None:
        """Rebuild timeline, derived score and per-player aggregates."""
        self.timeline = build_timeline(self.goals, self.cards, self.substitutions)
        self.score = derive_score(self.goals)
        self.player_stats = calculate_player_stats(
            self.goals,
            self.cards,
            self.substitutions,
            self.starters,
            self.squad,
            self.total_minutes,
        )
        self.notify()

    def stats_for(self, player_id: str) -> PlayerStats:
        return self.player_stats.get(player_id) or PlayerStats(player_id=player_id)

    # ----- internals -----

    def _validate(self, event, exclude_id: Optional[str]) -> None:
        errors = EVENT_VALIDATORS[event.event_type](event, self.context(exclude_id))
        if errors:
            logger.debug(f'Rejected {event.event_type} at {event.minute}: {errors}')
            raise ValidationError(errors)

    def _collection(self, event_type: str) -> list:
        if event_type == EVENT_GOAL:
            return self.goals
        if event_type == EVENT_CARD:
            return self.cards
        if event_type == EVENT_SUBSTITUTION:
            return self.substitutions
        raise ValueError(f'Unknown event type: {event_type}')

    def _index_of(self, collection: list, event_id: Optional[str], event_type: str) -> int:
        for i, existing in enumerate(collection):
            if existing.id == event_id:
                return i
        raise NotFoundError(f'No {event_type} with id {event_id} in game {self.game.id}')

    def _check_writable(self) -> None:
        if self.read_only:
            raise LifecycleError(
                f'Match events can only be changed while the game is Played (game is {self.game.status})'
            )

    def close(self) -> None:
        if self._refresh_timer is not None:
            self._refresh_timer.cancel()
            self._refresh_timer = None
