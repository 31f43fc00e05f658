"""Unit tests for validation functions."""

import pytest

from conftest import full_formation
from gameday.constants import BENCH, STARTING_LINEUP, UNAVAILABLE
from gameday.formation import FormationAssignmentStore
from gameday.models import FinalScore, TeamSummary
from gameday.roster import RosterAssignmentStore
from gameday.validators import (
    validate_bench_size,
    validate_final_score,
    validate_for_done,
    validate_goalkeeper,
    validate_report_completeness,
    validate_squad_for_played,
    validate_starting_lineup,
    validate_team_summary,
    validate_unavailable_in_formation,
)

FULL_SUMMARY = TeamSummary(
    defense_summary='Solid at the back',
    midfield_summary='Won the second balls',
    attack_summary='Clinical',
    general_summary='Deserved win',
)


def squad(players, bench=7):
    roster = RosterAssignmentStore(players)
    formation = FormationAssignmentStore(roster)
    statuses = {f'p{i}': STARTING_LINEUP for i in range(1, 12)}
    statuses.update({f'p{i}': BENCH for i in range(12, 12 + bench)})
    roster.load(statuses)
    return roster, formation


class TestStartingLineup:
    """Tests for starting lineup size."""

    def test_full_lineup(self):
        """Test 11 filled slots pass."""
        assert validate_starting_lineup(full_formation()) == []

    def test_empty_lineup(self):
        """Test an empty formation is rejected."""
        assert validate_starting_lineup({'gk': None}) == ['No players assigned to starting lineup']

    def test_too_few(self):
        """Test a partial lineup reports the count."""
        slots = {'gk': 'p1', 'cb1': 'p2', 'cb2': None, 'lb': 'p3'}
        assert validate_starting_lineup(slots) == [
            'Only 3 players in starting lineup. Need exactly 11 players.'
        ]

    def test_too_many(self):
        """Test an oversized lineup is rejected."""
        slots = {f's{i}': f'p{i}' for i in range(13)}
        assert validate_starting_lineup(slots) == [
            'Too many players (13) in starting lineup. Maximum 11 players allowed.'
        ]


class TestGoalkeeperAndBench:
    """Tests for goalkeeper and bench checks."""

    def test_missing_goalkeeper(self):
        """Test an empty gk slot is reported."""
        slots = full_formation()
        slots['gk'] = None
        assert validate_goalkeeper(slots) == ['No goalkeeper assigned to the team']

    def test_empty_bench(self):
        """Test an empty bench needs confirmation."""
        assert validate_bench_size(0, (7, 12)) == [
            'You have no players on the bench. Are you sure you want to continue?'
        ]

    def test_small_bench(self):
        """Test a bench below the recommended minimum needs confirmation."""
        messages = validate_bench_size(4, (7, 12))
        assert len(messages) == 1
        assert 'fewer than 7 bench players' in messages[0]

    def test_large_bench(self):
        """Test a bench above the recommended maximum needs confirmation."""
        assert 'more than 12 bench players' in validate_bench_size(13, (7, 12))[0]

    @pytest.mark.parametrize('count', [7, 9, 12])
    def test_adequate_bench(self, count):
        """Test benches within range pass."""
        assert validate_bench_size(count, (7, 12)) == []

    def test_bench_range_from_config(self):
        """Test the range defaults to the configured 7-12."""
        assert validate_bench_size(7) == []
        assert validate_bench_size(6)

    def test_unavailable_in_formation(self, players):
        """Test an unavailable slot occupant is a hard failure."""
        players_by_id = {p.id: p for p in players}
        errors = validate_unavailable_in_formation({'gk': 'p1'}, {'p1': UNAVAILABLE}, players_by_id)
        assert errors == ['Player 1 is unavailable but assigned to gk']


class TestSquadForPlayed:
    """Tests for the Scheduled -> Played composite check."""

    def test_valid_squad(self, players):
        """Test a full 1-4-4-2 with goalkeeper is valid."""
        roster, formation = squad(players)
        result = validate_squad_for_played(formation, roster, (7, 12))

        assert formation.as_dict() == full_formation()
        assert result.is_valid
        assert not result.needs_confirmation

    def test_missing_goalkeeper(self, players):
        """Test the same formation without a goalkeeper is invalid."""
        roster, formation = squad(players)
        formation.remove('gk')
        result = validate_squad_for_played(formation, roster, (7, 12))

        assert not result.is_valid
        assert any('goalkeeper' in m for m in result.messages)

    def test_small_bench_is_soft(self, players):
        """Test a short bench is valid but needs confirmation."""
        roster, formation = squad(players, bench=3)
        result = validate_squad_for_played(formation, roster, (7, 12))

        assert result.is_valid
        assert result.needs_confirmation
        assert result.warnings


class TestForDone:
    """Tests for the Played -> Done composite check."""

    def test_complete_report(self, players):
        """Test full summaries and reports pass."""
        result = validate_for_done(FULL_SUMMARY, [], {}, FinalScore(2, 1))
        assert result.is_valid
        assert not result.needs_confirmation

    def test_empty_summary_named(self):
        """Test a blank summary is rejected by name."""
        summary = TeamSummary(
            defense_summary='ok', midfield_summary='   ', attack_summary='ok', general_summary='ok'
        )
        assert validate_team_summary(summary) == ['Midfield summary is required']

        result = validate_for_done(summary, [], {}, FinalScore(1, 0))
        assert not result.is_valid
        assert 'Midfield summary' in result.messages[0]

    def test_missing_reports_named(self, players):
        """Test players without reports are listed."""
        players_by_id = {p.id: p for p in players}
        messages = validate_report_completeness(['p3', 'p12'], players_by_id)
        assert messages == ['Missing player reports for 2 players: Player 3, Player 12']

    def test_goalless_draw_needs_confirmation(self):
        """Test a 0-0 final score is a warning, not an error."""
        assert validate_final_score(FinalScore(0, 0))
        result = validate_for_done(FULL_SUMMARY, [], {}, FinalScore(0, 0))
        assert result.is_valid
        assert result.needs_confirmation
