"""Unit tests for timeline ordering, player state and derived aggregates."""

from gameday.models import Card, Goal, Substitution
from gameday.timeline import (
    PlayerState,
    build_timeline,
    calculate_goals_assists,
    calculate_minutes,
    calculate_player_stats,
    derive_score,
    player_state_at_minute,
)

STARTERS = {f'p{i}' for i in range(1, 12)}
SQUAD = STARTERS | {'p12', 'p13', 'p14'}


class TestBuildTimeline:
    """Tests for merged event ordering."""

    def test_orders_by_minute_then_type(self):
        """Test ties within a minute go goal, card, substitution."""
        sub = Substitution(player_out_id='p10', player_in_id='p12', minute=30, id='s1')
        card = Card(player_id='p4', card_type='Yellow', minute=30, id='c1')
        goal = Goal(minute=30, scorer_id='p9', id='g1')
        early = Goal(minute=5, scorer_id='p10', id='g0')

        timeline = build_timeline([goal, early], [card], [sub])

        assert [e.event.id for e in timeline] == ['g0', 'g1', 'c1', 's1']

    def test_insertion_order_breaks_remaining_ties(self):
        """Test same-minute events of one type keep insertion order."""
        first = Card(player_id='p4', card_type='Yellow', minute=12, id='a')
        second = Card(player_id='p5', card_type='Yellow', minute=12, id='b')
        assert [e.event.id for e in build_timeline([], [first, second], [])] == ['a', 'b']


class TestPlayerState:
    """Tests for reconstructing a player's state at a minute."""

    def test_initial_states(self):
        """Test starters are on the pitch and bench players on the bench."""
        assert player_state_at_minute([], 'p1', 1, STARTERS, SQUAD) == PlayerState.ON_PITCH
        assert player_state_at_minute([], 'p12', 1, STARTERS, SQUAD) == PlayerState.BENCH
        assert player_state_at_minute([], 'p99', 1, STARTERS, SQUAD) == PlayerState.NOT_IN_SQUAD

    def test_substitution_and_rolling_sub(self):
        """Test players swap states and a subbed-off player can return."""
        timeline = build_timeline(
            [],
            [],
            [
                Substitution(player_out_id='p10', player_in_id='p12', minute=30),
                Substitution(player_out_id='p12', player_in_id='p10', minute=60),
            ],
        )
        assert player_state_at_minute(timeline, 'p10', 29, STARTERS, SQUAD) == PlayerState.ON_PITCH
        assert player_state_at_minute(timeline, 'p10', 30, STARTERS, SQUAD) == PlayerState.SUBSTITUTED_OUT
        assert player_state_at_minute(timeline, 'p12', 45, STARTERS, SQUAD) == PlayerState.ON_PITCH
        assert player_state_at_minute(timeline, 'p10', 70, STARTERS, SQUAD) == PlayerState.ON_PITCH
        assert player_state_at_minute(timeline, 'p12', 70, STARTERS, SQUAD) == PlayerState.SUBSTITUTED_OUT

    def test_sending_off(self):
        """Test a red or second yellow sends the player off."""
        timeline = build_timeline(
            [],
            [
                Card(player_id='p2', card_type='Red', minute=60),
                Card(player_id='p3', card_type='Yellow', minute=10),
                Card(player_id='p3', card_type='Second Yellow', minute=50),
            ],
            [],
        )
        assert player_state_at_minute(timeline, 'p2', 60, STARTERS, SQUAD) == PlayerState.SENT_OFF
        assert player_state_at_minute(timeline, 'p3', 20, STARTERS, SQUAD) == PlayerState.ON_PITCH
        assert player_state_at_minute(timeline, 'p3', 50, STARTERS, SQUAD) == PlayerState.SENT_OFF


class TestAggregates:
    """Tests for derived score, minutes and goal tallies."""

    def test_derived_score(self):
        """Test score counts goals by side."""
        goals = [
            Goal(minute=10, scorer_id='p9'),
            Goal(minute=20, is_opponent_goal=True),
            Goal(minute=30, scorer_id='p10', assisted_by_id='p9'),
        ]
        score = derive_score(goals)
        assert (score.our_score, score.opponent_score) == (2, 1)

    def test_minutes_full_match_for_starters(self):
        """Test starters play the full match and unused bench players 0."""
        minutes = calculate_minutes([], [], STARTERS, SQUAD, 90)
        assert minutes['p1'] == 90
        assert minutes['p12'] == 0

    def test_minutes_with_substitution_and_red_card(self):
        """Test sessions end at sub-off or sending-off and start at sub-on."""
        subs = [Substitution(player_out_id='p10', player_in_id='p12', minute=60)]
        cards = [Card(player_id='p2', card_type='Red', minute=70), Card(player_id='p3', card_type='Yellow', minute=5)]
        minutes = calculate_minutes(subs, cards, STARTERS, SQUAD, 94)

        assert minutes['p10'] == 60
        assert minutes['p12'] == 34
        assert minutes['p2'] == 70
        assert minutes['p3'] == 94

    def test_minutes_rolling_sub(self):
        """Test a player returning opens a second session."""
        subs = [
            Substitution(player_out_id='p10', player_in_id='p12', minute=30),
            Substitution(player_out_id='p12', player_in_id='p10', minute=60),
        ]
        minutes = calculate_minutes(subs, [], STARTERS, SQUAD, 90)
        assert minutes['p10'] == 60
        assert minutes['p12'] == 30

    def test_goals_and_assists_ignore_opponent_goals(self):
        """Test only our goals count toward player tallies."""
        goals = [
            Goal(minute=10, scorer_id='p9', assisted_by_id='p10'),
            Goal(minute=20, scorer_id='p9'),
            Goal(minute=30, is_opponent_goal=True),
        ]
        tallies = calculate_goals_assists(goals)
        assert tallies == {'p9': (2, 0), 'p10': (0, 1)}

    def test_player_stats(self):
        """Test stats combine minutes and goals per squad player."""
        stats = calculate_player_stats(
            [Goal(minute=10, scorer_id='p9')], [], [], STARTERS, SQUAD, 90
        )
        assert stats['p9'].goals == 1
        assert stats['p9'].minutes_played == 90
        assert stats['p14'].minutes_played == 0
