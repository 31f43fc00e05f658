"""Unit tests for the roster assignment store."""

import pytest

from gameday.constants import BENCH, NOT_IN_SQUAD, STARTING_LINEUP, UNAVAILABLE
from gameday.errors import LifecycleError
from gameday.roster import RosterAssignmentStore


class TestRosterAssignmentStore:
    """Tests for status get/set and notifications."""

    def test_defaults_to_not_in_squad(self, players):
        """Test every team player starts as 'Not in Squad'."""
        roster = RosterAssignmentStore(players)
        assert all(roster.get(p.id) == NOT_IN_SQUAD for p in players)

    def test_set_and_get(self, players):
        """Test setting a status is reflected by get."""
        roster = RosterAssignmentStore(players)
        roster.set('p3', BENCH)
        assert roster.get('p3') == BENCH
        assert [p.id for p in roster.bench()] == ['p3']

    def test_unknown_player(self, players):
        """Test players outside the team pool are rejected."""
        roster = RosterAssignmentStore(players)
        with pytest.raises(KeyError):
            roster.get('nobody')
        with pytest.raises(KeyError):
            roster.set('nobody', BENCH)

    def test_invalid_status(self, players):
        """Test unknown status strings are rejected."""
        roster = RosterAssignmentStore(players)
        with pytest.raises(ValueError, match='Invalid roster status'):
            roster.set('p1', 'Injured')

    def test_notifies_only_on_change(self, players):
        """Test listeners fire once per real change."""
        roster = RosterAssignmentStore(players)
        calls = []
        roster.subscribe(lambda store: calls.append(store))

        roster.set('p1', STARTING_LINEUP)
        roster.set('p1', STARTING_LINEUP)

        assert len(calls) == 1

    def test_batch_collapses_notifications(self, players):
        """Test several changes inside a batch notify once."""
        roster = RosterAssignmentStore(players)
        calls = []
        roster.subscribe(lambda store: calls.append(store))

        with roster.batch():
            roster.set('p1', STARTING_LINEUP)
            roster.set('p2', BENCH)
            roster.set('p3', UNAVAILABLE)

        assert len(calls) == 1

    def test_unsubscribe(self, players):
        """Test an unsubscribed listener stops receiving changes."""
        roster = RosterAssignmentStore(players)
        calls = []
        unsubscribe = roster.subscribe(lambda store: calls.append(store))
        unsubscribe()
        roster.set('p1', BENCH)
        assert calls == []

    def test_read_only(self, players):
        """Test a locked roster refuses changes."""
        roster = RosterAssignmentStore(players)
        roster.read_only = True
        with pytest.raises(LifecycleError):
            roster.set('p1', BENCH)


class TestRosterLoad:
    """Tests for hydration through load()."""

    def test_load_fills_missing_with_default(self, players):
        """Test players absent from the loaded map are 'Not in Squad'."""
        roster = RosterAssignmentStore(players)
        roster.set('p5', BENCH)
        roster.load({'p1': STARTING_LINEUP})

        assert roster.get('p1') == STARTING_LINEUP
        assert roster.get('p5') == NOT_IN_SQUAD

    def test_load_drops_unknown_players(self, players):
        """Test statuses for players no longer on the team are ignored."""
        roster = RosterAssignmentStore(players)
        roster.load({'p1': BENCH, 'ghost': STARTING_LINEUP})

        assert roster.get('p1') == BENCH
        assert 'ghost' not in roster.as_dict()

    def test_squad_ids(self, players):
        """Test squad is Starting Lineup plus Bench."""
        roster = RosterAssignmentStore(players)
        roster.load({'p1': STARTING_LINEUP, 'p2': BENCH, 'p3': UNAVAILABLE})
        assert roster.squad_ids() == {'p1', 'p2'}
