"""Match timeline, player state reconstruction and derived aggregates."""

import logging
from typing import Iterable, Optional

from .constants import EVENT_CARD, EVENT_GOAL, EVENT_SUBSTITUTION, EVENT_TYPE_ORDER
from .models import Card, FinalScore, Goal, PlayerStats, Substitution, TimelineEntry

logger = logging.getLogger('gameday.timeline')


class PlayerState:
    """Where a player stands at a given minute."""
    NOT_IN_SQUAD = 'NOT_IN_SQUAD'
    BENCH = 'BENCH'
    ON_PITCH = 'ON_PITCH'
    SUBSTITUTED_OUT = 'SUBSTITUTED_OUT'
    SENT_OFF = 'SENT_OFF'


STATE_DESCRIPTIONS = {
    PlayerState.NOT_IN_SQUAD: 'not in squad',
    PlayerState.BENCH: 'on bench',
    PlayerState.ON_PITCH: 'on the pitch',
    PlayerState.SUBSTITUTED_OUT: 'substituted out',
    PlayerState.SENT_OFF: 'sent off',
}


def build_timeline(
    goals: Iterable[Goal] = (),
    cards: Iterable[Card] = (),
    substitutions: Iterable[Substitution] = (),
) -> list[TimelineEntry]:
    """
    Merge all events into one list ordered by minute.

    Ties within a minute are broken by type (goal, card, substitution),
    then by insertion order within the type.
    """
    entries = []
    for events in (goals, cards, substitutions):
        for sequence, event in enumerate(events):
            entries.append(
                TimelineEntry(
                    event_type=event.event_type,
                    minute=event.minute,
                    event=event,
                    sequence=sequence,
                )
            )
    entries.sort(key=lambda e: (e.minute, EVENT_TYPE_ORDER[e.event_type], e.sequence))
    return entries


def player_state_at_minute(
    timeline: list[TimelineEntry],
    player_id: str,
    minute: int,
    starters: set[str],
    squad: set[str],
) -> str:
    """
    Reconstruct a player's state by replaying events up to and including minute.

    Args:
        timeline: Ordered entries from build_timeline()
        player_id: Player to track
        minute: Target minute
        starters: Ids of Starting Lineup players
        squad: Ids of all rostered players (Starting Lineup + Bench)

    Returns:
        One of the PlayerState values
    """
    if player_id not in squad:
        return PlayerState.NOT_IN_SQUAD

    state = PlayerState.ON_PITCH if player_id in starters else PlayerState.BENCH

    for entry in timeline:
        if entry.minute > minute:
            break
        event = entry.event
        if entry.event_type == EVENT_SUBSTITUTION:
            if event.player_out_id == player_id and state == PlayerState.ON_PITCH:
                state = PlayerState.SUBSTITUTED_OUT
            if event.player_in_id == player_id and state in (
                PlayerState.BENCH,
                PlayerState.SUBSTITUTED_OUT,
            ):
                state = PlayerState.ON_PITCH
        elif entry.event_type == EVENT_CARD:
            if event.player_id == player_id and event.is_sending_off:
                state = PlayerState.SENT_OFF

    return state


def derive_score(goals: Iterable[Goal]) -> FinalScore:
    """Score as counted from goal events."""
    score = FinalScore()
    for goal in goals:
        if goal.is_opponent_goal:
            score.opponent_score += 1
        else:
            score.our_score += 1
    return score


def calculate_minutes(
    substitutions: Iterable[Substitution],
    cards: Iterable[Card],
    starters: Iterable[str],
    squad: Iterable[str],
    total_minutes: int,
) -> dict[str, int]:
    """
    Minutes played per rostered player from play sessions.

    Starters open a session at 0 and every substitution-in opens one at its
    minute. A session ends at the earliest of match end, the player's
    substitution-out minute or a sending-off. Rostered players who never
    played get 0.

    Returns:
        Dict mapping player id to minutes played
    """
    sessions: dict[str, list[list[int]]] = {pid: [[0, total_minutes]] for pid in starters}

    events = [(s.minute, EVENT_TYPE_ORDER[EVENT_SUBSTITUTION], s) for s in substitutions]
    events += [(c.minute, EVENT_TYPE_ORDER[EVENT_CARD], c) for c in cards if c.is_sending_off]
    events.sort(key=lambda e: (e[0], e[1]))

    def end_active(player_id: str, minute: int, reason: str) -> None:
        for session in sessions.get(player_id, []):
            if session[1] == total_minutes and session[0] <= minute:
                session[1] = minute
                return
        logger.warning(f'Player {player_id} not on the pitch at minute {minute} ({reason}), ignoring')

    for minute, _order, event in events:
        if isinstance(event, Substitution):
            end_active(event.player_out_id, minute, 'substitution')
            sessions.setdefault(event.player_in_id, []).append([minute, total_minutes])
        else:
            end_active(event.player_id, minute, event.card_type)

    minutes = {pid: sum(end - start for start, end in spans) for pid, spans in sessions.items()}
    for pid in squad:
        minutes.setdefault(pid, 0)
    return minutes


def calculate_goals_assists(goals: Iterable[Goal]) -> dict[str, tuple[int, int]]:
    """Tally (goals, assists) per player over non-opponent goals."""
    tally: dict[str, list[int]] = {}
    for goal in goals:
        if goal.is_opponent_goal:
            continue
        if goal.scorer_id:
            tally.setdefault(goal.scorer_id, [0, 0])[0] += 1
        if goal.assisted_by_id:
            tally.setdefault(goal.assisted_by_id, [0, 0])[1] += 1
    return {pid: (g, a) for pid, (g, a) in tally.items()}


def calculate_player_stats(
    goals: list[Goal],
    cards: list[Card],
    substitutions: list[Substitution],
    starters: set[str],
    squad: set[str],
    total_minutes: int,
    player_ids: Optional[Iterable[str]] = None,
) -> dict[str, PlayerStats]:
    """
    Combine minutes and goal tallies into PlayerStats per player.

    Args:
        player_ids: Players to report on; defaults to the squad
    """
    minutes = calculate_minutes(substitutions, cards, starters, squad, total_minutes)
    tallies = calculate_goals_assists(goals)
    ids = list(player_ids) if player_ids is not None else sorted(squad)

    stats = {}
    for pid in ids:
        scored, assisted = tallies.get(pid, (0, 0))
        stats[pid] = PlayerStats(
            player_id=pid,
            minutes_played=minutes.get(pid, 0),
            goals=scored,
            assists=assisted,
        )
    return stats
