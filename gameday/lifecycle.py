"""Scheduled -> Played -> Done state machine for one game editing session."""

import logging
import threading
import time
from dataclasses import asdict
from functools import partial
from typing import Any, Callable, Optional

from pydantic import ValidationError as SchemaError

from .autosave import DraftAutosaveCoordinator
from .cancellation import CancellationToken
from .config import get_config
from .constants import LIFECYCLE_TRANSITIONS, STATUS_DONE, STATUS_PLAYED, STATUS_SCHEDULED
from .draft import draft_payload, hydrate, start_game_payload
from .errors import AbortError, ConfirmationRequired, LifecycleError, ValidationError
from .formation import FormationAssignmentStore
from .ledger import MatchEventLedger
from .models import Game, MatchDuration, TeamSummary
from .reports import ReportBook
from .roster import RosterAssignmentStore
from .schemas import (
    FinalScoreSchema,
    MatchDurationSchema,
    PlayerReportSchema,
    ReportDraftSchema,
    SubmitReportSchema,
    TeamSummarySchema,
)
from .validators import validate_for_done, validate_squad_for_played

logger = logging.getLogger('gameday.lifecycle')


def merge_team_summary(saved: TeamSummary, draft: TeamSummary) -> TeamSummary:
    """Draft text wins wherever it is non-empty."""
    merged = asdict(saved)
    for field_name, text in asdict(draft).items():
        if text:
            merged[field_name] = text
    return TeamSummary(**merged)


class GameLifecycleController:
    """
    One editing session for one game.

    open() loads the game and wires up the stores for its status: roster and
    formation with lineup autosave while Scheduled; ledger and report book
    with report autosave while Played; everything read-only once Done.
    Every network call made on behalf of the session carries the session's
    cancellation token, which close() (or opening another game) cancels.
    """

    def __init__(
        self,
        client,
        cache,
        timer_factory: Callable[..., Any] = threading.Timer,
        clock: Callable[[], float] = time.monotonic,
        debounce: Optional[float] = None,
        grace: Optional[float] = None,
        bench_range: Optional[tuple[int, int]] = None,
    ):
        self.client = client
        self.cache = cache
        self.timer_factory = timer_factory
        self.clock = clock
        self.debounce = debounce
        self.grace = grace
        self.bench_range = bench_range

        self.cancel_token: Optional[CancellationToken] = None
        self.game: Optional[Game] = None
        self.roster: Optional[RosterAssignmentStore] = None
        self.formation: Optional[FormationAssignmentStore] = None
        self.ledger: Optional[MatchEventLedger] = None
        self.reports: Optional[ReportBook] = None
        self.lineup_autosave: Optional[DraftAutosaveCoordinator] = None
        self.report_autosave: Optional[DraftAutosaveCoordinator] = None
        self.hydration_source: Optional[str] = None

    @property
    def status(self) -> Optional[str]:
        return self.game.status if self.game else None

    # ----- session -----

    def open(self, game_id: str) -> Game:
        """
        Load a game and hydrate the stores.

        Opening a different game first tears down the current session, so
        in-flight writes for the old game are dropped.

        Raises:
            NotFoundError: If the game does not exist
        """
        if self.game is not None:
            self.close()

        self.cancel_token = CancellationToken()
        game = self.client.get_game(game_id, cancel_token=self.cancel_token)
        self.game = game

        players = self.cache.get_players(game.team_id)
        records = [] if game.status == STATUS_SCHEDULED else self.cache.get_game_rosters(game.id)

        self.roster = RosterAssignmentStore(players)
        self.formation = FormationAssignmentStore(self.roster)
        self.hydration_source = hydrate(game, self.roster, self.formation, records)
        logger.info(f'Opened game {game.id} ({game.status}) vs {game.opponent or "?"}, source={self.hydration_source}')

        if game.status == STATUS_SCHEDULED:
            self._start_lineup_autosave()
        else:
            self._lock_lineup()
            self._open_match()
        return game

    def close(self) -> None:
        """End the session: cancel in-flight requests and pending autosaves."""
        if self.cancel_token is not None:
            self.cancel_token.cancel('session closed')
        for coordinator in (self.lineup_autosave, self.report_autosave):
            if coordinator is not None:
                coordinator.close()
        if self.ledger is not None:
            self.ledger.close()
        if self.formation is not None:
            self.formation.detach()
        if self.game is not None:
            logger.debug(f'Closed session for game {self.game.id}')
        self.lineup_autosave = self.report_autosave = None
        self.ledger = self.reports = None
        self.roster = self.formation = None
        self.game = None

    # ----- transitions -----

    def start_game(self, confirm_warnings: bool = False) -> None:
        """
        Scheduled -> Played.

        The roster records committed by the store are cached so reopening
        the game hydrates from them. If the session is torn down before the
        store answers, nothing changes locally.

        Raises:
            LifecycleError: If the game is not Scheduled
            ValidationError: If the squad fails a hard check
            ConfirmationRequired: If there are warnings and confirm_warnings is False
        """
        self._require_status(STATUS_SCHEDULED)
        result = validate_squad_for_played(self.formation, self.roster, self.bench_range)
        if not result.is_valid:
            raise ValidationError(result.messages)
        if result.needs_confirmation and not confirm_warnings:
            raise ConfirmationRequired(result.warnings)

        payload = start_game_payload(self.roster, self.formation)
        try:
            records = self.client.start_game(self.game.id, payload, cancel_token=self.cancel_token)
        except AbortError:
            logger.debug(f'Game {self.game.id}: start aborted')
            return
        if records:
            self.cache.set_game_rosters(self.game.id, records)

        self.lineup_autosave.close()
        self.lineup_autosave = None
        self.game.status = LIFECYCLE_TRANSITIONS[STATUS_SCHEDULED]
        self.game.lineup_draft = None
        self._lock_lineup()
        logger.info(
            f'Game {self.game.id} started: {len(payload["rosters"])} rostered, '
            f'formation {payload["formationType"]}'
        )
        self._open_match()

    def submit_report(self, confirm_warnings: bool = False, auto_fill: bool = False) -> None:
        """
        Played -> Done.

        The submitted final score is always the one derived from goal events.
        If the session is torn down before the store answers, nothing changes
        locally.

        Args:
            confirm_warnings: Acknowledge soft warnings (e.g. a 0-0 score)
            auto_fill: Give players without a report default ratings first

        Raises:
            LifecycleError: If the game is not Played
            ValidationError: If summaries or player reports are incomplete
            ConfirmationRequired: If there are warnings and confirm_warnings is False
        """
        self._require_status(STATUS_PLAYED)
        if auto_fill:
            self.reports.auto_fill_defaults()

        score = self.ledger.score
        result = validate_for_done(
            self.reports.team_summary, self.reports.missing_reports(), self.roster.players, score
        )
        if not result.is_valid:
            raise ValidationError(result.messages)
        if result.needs_confirmation and not confirm_warnings:
            raise ConfirmationRequired(result.warnings)

        payload = self._submit_payload()
        try:
            self.client.submit_report(self.game.id, payload, cancel_token=self.cancel_token)
        except AbortError:
            logger.debug(f'Game {self.game.id}: report submission aborted')
            return

        self.report_autosave.close()
        self.report_autosave = None
        self.game.status = LIFECYCLE_TRANSITIONS[STATUS_PLAYED]
        self.game.final_score = score
        self.game.team_summary = self.reports.team_summary
        self.reports.read_only = True
        logger.info(f'Game {self.game.id} done: {score.our_score}-{score.opponent_score}')

    def update_match_duration(
        self,
        regular_time: Optional[int] = None,
        first_half_extra_time: int = 0,
        second_half_extra_time: int = 0,
    ) -> MatchDuration:
        """
        Change match length while Played.

        Args:
            regular_time: Minutes of regular time (default from config when None)
            first_half_extra_time: Stoppage minutes added to the first half
            second_half_extra_time: Stoppage minutes added to the second half

        Raises:
            ValidationError: If a length is out of range, or an existing event
                would fall outside the new length
        """
        self._require_status(STATUS_PLAYED)
        try:
            duration = MatchDurationSchema(
                regular_time=get_config().default_regular_time if regular_time is None else regular_time,
                first_half_extra_time=first_half_extra_time,
                second_half_extra_time=second_half_extra_time,
            ).to_model()
        except SchemaError as e:
            raise ValidationError([err['msg'] for err in e.errors()]) from e

        latest = max((entry.minute for entry in self.ledger.timeline), default=0)
        if latest > duration.total_minutes:
            raise ValidationError(
                f'An event is recorded at minute {latest}; match cannot end at {duration.total_minutes}'
            )

        self.game.match_duration = duration
        self.ledger.recompute()
        return duration

    # ----- wiring -----

    def _start_lineup_autosave(self) -> None:
        self.lineup_autosave = DraftAutosaveCoordinator(
            snapshot_fn=partial(draft_payload, self.roster, self.formation),
            write_fn=partial(self.client.save_draft, self.game.id),
            debounce=self.debounce,
            grace=self.grace,
            clock=self.clock,
            timer_factory=self.timer_factory,
            enabled_fn=lambda: self.status == STATUS_SCHEDULED,
            name='lineup draft',
        )
        self.lineup_autosave.observe(self.roster, self.formation)
        self.lineup_autosave.start(self.cancel_token.child())

    def _lock_lineup(self) -> None:
        self.roster.read_only = True
        self.formation.read_only = True

    def _open_match(self) -> None:
        squad = self.roster.squad_ids()
        starters = {p.id for p in self.roster.starting_lineup()}
        self.ledger = MatchEventLedger(
            self.game, self.client, starters, squad, self.cancel_token, self.timer_factory
        )
        self.ledger.load()

        squad_order = [pid for pid in self.roster.players if pid in squad]
        self.reports = ReportBook(squad_order, self.ledger)
        self.reports.load([], team_summary=self.game.team_summary)
        self._hydrate_report_draft()

        if self.game.status == STATUS_DONE:
            self.reports.read_only = True
            return

        self.report_autosave = DraftAutosaveCoordinator(
            snapshot_fn=self._report_draft_payload,
            write_fn=partial(self.client.save_draft, self.game.id),
            debounce=self.debounce,
            grace=self.grace,
            clock=self.clock,
            timer_factory=self.timer_factory,
            enabled_fn=lambda: self.status == STATUS_PLAYED,
            name='report draft',
        )
        self.report_autosave.observe(self.reports, self.ledger)
        self.report_autosave.start(self.cancel_token.child())

    def _hydrate_report_draft(self) -> None:
        if not self.game.report_draft:
            return
        try:
            draft = ReportDraftSchema.model_validate(self.game.report_draft)
        except SchemaError as e:
            logger.warning(f'Ignoring unreadable report draft for game {self.game.id}: {e}')
            return

        summary = merge_team_summary(self.game.team_summary, TeamSummary(**draft.team_summary.model_dump()))
        self.reports.load(
            [r.to_model() for r in draft.player_reports.values()],
            team_summary=summary,
        )
        logger.debug(f'Game {self.game.id}: restored {len(self.reports.reports)} draft reports')

    def _report_draft_payload(self) -> dict:
        return ReportDraftSchema(
            team_summary=TeamSummarySchema(**asdict(self.reports.team_summary)),
            final_score=FinalScoreSchema(**asdict(self.ledger.score)),
            match_duration=MatchDurationSchema(**asdict(self.game.match_duration)),
            player_reports={
                pid: PlayerReportSchema.from_model(report)
                for pid, report in self.reports.reports.items()
            },
        ).to_wire()

    def _submit_payload(self) -> dict:
        return SubmitReportSchema(
            final_score=FinalScoreSchema(**asdict(self.ledger.score)),
            match_duration=MatchDurationSchema(**asdict(self.game.match_duration)),
            team_summary=TeamSummarySchema(**asdict(self.reports.team_summary)),
            player_reports=[PlayerReportSchema.from_model(r) for r in self.reports.reports.values()],
        ).to_wire()

    def _require_status(self, expected: str) -> None:
        if self.game is None:
            raise LifecycleError('No game is open')
        if self.game.status != expected:
            raise LifecycleError(
                f'Game {self.game.id} is {self.game.status}; this action requires {expected}'
            )
