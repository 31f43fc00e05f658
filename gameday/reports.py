"""Per-player performance reports and team summaries for a played game."""

import logging
from dataclasses import asdict
from typing import Iterable, Optional

from .config import get_config
from .constants import RATING_FIELDS, RATING_MAX, RATING_MIN, TEAM_SUMMARY_FIELDS
from .errors import LifecycleError, ValidationError
from .models import PlayerReport, TeamSummary
from .observable import Observable

logger = logging.getLogger('gameday.reports')


def validate_rating(field_name: str, value) -> Optional[str]:
    """Return an error message if value is not a 1-5 rating (None is allowed)."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        return f'{field_name} must be a whole number, got {value!r}'
    if not RATING_MIN <= value <= RATING_MAX:
        return f'{field_name} must be between {RATING_MIN} and {RATING_MAX}, got {value}'
    return None


class ReportBook(Observable):
    """
    Reports for the rostered players of one game, plus the team summaries.

    Derived minutes/goals/assists are never stored here; player_view() reads
    them from the ledger.
    """

    def __init__(self, squad: Iterable[str], ledger=None, default_rating: Optional[int] = None):
        super().__init__()
        self.squad = list(squad)
        self.ledger = ledger
        self.default_rating = default_rating or get_config().default_report_rating
        self.reports: dict[str, PlayerReport] = {}
        self.team_summary = TeamSummary()
        self.read_only = False

    def get(self, player_id: str) -> Optional[PlayerReport]:
        return self.reports.get(player_id)

    def set_report(self, player_id: str, notes: Optional[str] = None, **ratings) -> PlayerReport:
        """
        Create or update a player's report.

        Args:
            player_id: Rostered player
            notes: Free-text notes (unchanged if None)
            **ratings: Any of rating_physical, rating_technical, rating_tactical, rating_mental

        Raises:
            ValidationError: If the player is not rostered or a rating is out of range
        """
        self._check_writable()
        if player_id not in self.squad:
            raise ValidationError(f'Player {player_id} is not in the squad for this game')

        errors = []
        for name, value in ratings.items():
            if name not in RATING_FIELDS:
                errors.append(f'Unknown rating field: {name}')
                continue
            error = validate_rating(name, value)
            if error:
                errors.append(error)
        if errors:
            raise ValidationError(errors)

        report = self.reports.get(player_id) or PlayerReport(player_id=player_id)
        for name, value in ratings.items():
            setattr(report, name, value)
        if notes is not None:
            report.notes = notes
        report.auto_filled = False
        self.reports[player_id] = report
        self.notify()
        return report

    def set_summary(self, field_name: str, text: str) -> None:
        self._check_writable()
        if field_name not in TEAM_SUMMARY_FIELDS:
            raise ValueError(f'Unknown team summary field: {field_name}')
        setattr(self.team_summary, field_name, text)
        self.notify()

    def missing_reports(self) -> list[str]:
        """Rostered players without a complete (or auto-filled) report."""
        return [
            pid for pid in self.squad
            if not (pid in self.reports and self.reports[pid].is_complete)
        ]

    def auto_fill_defaults(self) -> list[str]:
        """
        Give every rostered player lacking a complete report default ratings.

        Existing ratings and notes are kept; only empty ratings are filled.

        Returns:
            Ids of players whose report was auto-filled
        """
        self._check_writable()
        filled = []
        for pid in self.missing_reports():
            report = self.reports.get(pid) or PlayerReport(player_id=pid)
            for name in RATING_FIELDS:
                if getattr(report, name) is None:
                    setattr(report, name, self.default_rating)
            report.auto_filled = True
            self.reports[pid] = report
            filled.append(pid)
        if filled:
            logger.info(f'Auto-filled default reports for {len(filled)} players')
            self.notify()
        return filled

    def load(self, reports: Iterable[PlayerReport], team_summary: Optional[TeamSummary] = None) -> None:
        """Replace reports (hydration); reports for players outside the squad are dropped."""
        loaded = {}
        for report in reports:
            if report.player_id in self.squad:
                loaded[report.player_id] = report
            else:
                logger.warning(f'Dropping report for {report.player_id}: not in squad')
        self.reports = loaded
        if team_summary is not None:
            self.team_summary = team_summary
        self.notify()

    def player_view(self, player_id: str) -> dict:
        """Ratings and notes merged with the ledger's derived figures."""
        report = self.reports.get(player_id) or PlayerReport(player_id=player_id)
        view = asdict(report)
        if self.ledger is not None:
            stats = self.ledger.stats_for(player_id)
            view.update(
                minutes_played=stats.minutes_played,
                goals=stats.goals,
                assists=stats.assists,
            )
        return view

    def rows(self) -> list[dict]:
        return [self.player_view(pid) for pid in self.squad]

    def _check_writable(self) -> None:
        if self.read_only:
            raise LifecycleError('Reports are read-only once the game is Done')
