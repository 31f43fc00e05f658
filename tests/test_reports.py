"""Unit tests for the report book."""

import pytest

from gameday.errors import LifecycleError, ValidationError
from gameday.ledger import MatchEventLedger
from gameday.models import Goal, PlayerReport
from gameday.reports import ReportBook

SQUAD = ['p1', 'p2', 'p12']


def complete(book, player_id, rating=4):
    return book.set_report(
        player_id,
        rating_physical=rating,
        rating_technical=rating,
        rating_tactical=rating,
        rating_mental=rating,
    )


class TestSetReport:
    """Tests for entering ratings."""

    def test_complete_report(self):
        """Test four ratings make a report complete."""
        book = ReportBook(SQUAD)
        report = complete(book, 'p1')
        assert report.is_complete
        assert book.missing_reports() == ['p2', 'p12']

    def test_partial_report_is_missing(self):
        """Test a report with a blank rating still counts as missing."""
        book = ReportBook(SQUAD)
        book.set_report('p1', rating_physical=3, notes='Tired late on')
        assert 'p1' in book.missing_reports()
        assert book.get('p1').notes == 'Tired late on'

    @pytest.mark.parametrize('value', [0, 6, 3.5, True])
    def test_rating_out_of_range(self, value):
        """Test ratings must be whole numbers from 1 to 5."""
        book = ReportBook(SQUAD)
        with pytest.raises(ValidationError):
            book.set_report('p1', rating_physical=value)
        assert book.get('p1') is None

    def test_player_outside_squad(self):
        """Test reports are only for rostered players."""
        with pytest.raises(ValidationError, match='not in the squad'):
            ReportBook(SQUAD).set_report('p20', rating_mental=3)

    def test_unknown_field(self):
        """Test unknown rating names are rejected."""
        with pytest.raises(ValidationError, match='Unknown rating field'):
            ReportBook(SQUAD).set_report('p1', rating_speed=3)

    def test_read_only(self):
        """Test a finalized book refuses edits."""
        book = ReportBook(SQUAD)
        book.read_only = True
        with pytest.raises(LifecycleError):
            complete(book, 'p1')


class TestAutoFill:
    """Tests for default reports."""

    def test_fills_only_missing(self):
        """Test auto-fill gives default ratings to players without a complete report."""
        book = ReportBook(SQUAD)
        complete(book, 'p1', rating=5)
        book.set_report('p2', rating_physical=2)

        filled = book.auto_fill_defaults()

        assert filled == ['p2', 'p12']
        assert book.missing_reports() == []
        assert book.get('p1').rating_mental == 5
        assert book.get('p1').auto_filled is False
        assert book.get('p2').rating_physical == 2
        assert book.get('p2').rating_mental == 3
        assert book.get('p12').auto_filled is True

    def test_manual_edit_clears_auto_flag(self):
        """Test editing an auto-filled report marks it as the coach's own."""
        book = ReportBook(SQUAD)
        book.auto_fill_defaults()
        book.set_report('p12', rating_tactical=4)
        assert book.get('p12').auto_filled is False


class TestPlayerView:
    """Tests for merged ratings and derived stats."""

    def test_merges_ledger_stats(self, played_game, mock_client):
        """Test the view carries minutes and goals from the ledger."""
        ledger = MatchEventLedger(played_game, mock_client, {'p1', 'p2'}, {'p1', 'p2', 'p12'})
        ledger.create_goal(Goal(minute=23, scorer_id='p1', assisted_by_id='p2'))
        book = ReportBook(SQUAD, ledger)
        complete(book, 'p1')

        view = book.player_view('p1')

        assert view['rating_physical'] == 4
        assert view['goals'] == 1
        assert view['minutes_played'] == 90
        assert book.player_view('p2')['assists'] == 1
        assert book.player_view('p12')['minutes_played'] == 0

    def test_load_drops_reports_outside_squad(self):
        """Test hydrated reports for non-rostered players are ignored."""
        book = ReportBook(SQUAD)
        book.load([PlayerReport(player_id='p1', rating_physical=3), PlayerReport(player_id='p9')])
        assert list(book.reports) == ['p1']

    def test_rows_follow_squad_order(self):
        """Test rows list every rostered player, reported or not."""
        book = ReportBook(SQUAD)
        complete(book, 'p12')
        rows = book.rows()
        assert [row['player_id'] for row in rows] == SQUAD
        assert rows[2]['rating_mental'] == 4
        assert rows[0]['rating_mental'] is None
