"""Eligibility rules for match events.

Each check returns a list of error messages; an empty list means the event
may be recorded. Checks run against the timeline with the event under edit
already removed, so an update is validated as if it were a fresh insert.
"""

from dataclasses import dataclass, field

from .constants import CARD_TYPES, EVENT_CARD, EVENT_GOAL, GOAL_TYPES, RED, SECOND_YELLOW, YELLOW
from .models import Card, Goal, Substitution, TimelineEntry
from .timeline import STATE_DESCRIPTIONS, PlayerState, player_state_at_minute


@dataclass
class MatchContext:
    """Everything the rules need to know about a match in progress."""
    timeline: list[TimelineEntry]
    starters: set[str]
    squad: set[str]
    total_minutes: int
    cards: list[Card] = field(default_factory=list)

    def state(self, player_id: str, minute: int) -> str:
        return player_state_at_minute(self.timeline, player_id, minute, self.starters, self.squad)


def validate_minute(minute: int, total_minutes: int) -> list[str]:
    if not isinstance(minute, int) or isinstance(minute, bool):
        return [f'Minute must be a whole number, got {minute!r}']
    if minute < 1 or minute > total_minutes:
        return [f'Minute must be between 1 and {total_minutes}']
    return []


def validate_goal(goal: Goal, ctx: MatchContext) -> list[str]:
    """
    Own-team goals need an on-pitch scorer; an assister must be a different
    on-pitch player. Opponent goals carry no scorer or assister.
    """
    errors = validate_minute(goal.minute, ctx.total_minutes)
    if goal.goal_type not in GOAL_TYPES:
        errors.append(f'Invalid goal type: {goal.goal_type}')
    if errors:
        return errors

    if goal.is_opponent_goal:
        if goal.scorer_id or goal.assisted_by_id:
            errors.append('Opponent goals cannot have a scorer or assister from our team')
        return errors

    if not goal.scorer_id:
        return ['Scorer is required for our goals']

    if goal.scorer_id not in ctx.squad:
        return ['Scorer must be in the game squad (starting lineup or bench)']
    scorer_state = ctx.state(goal.scorer_id, goal.minute)
    if scorer_state != PlayerState.ON_PITCH:
        errors.append(f'Scorer must be on the pitch. Current state: {STATE_DESCRIPTIONS[scorer_state]}')

    if goal.assisted_by_id:
        if goal.assisted_by_id == goal.scorer_id:
            errors.append('Assister cannot be the same as scorer')
        elif goal.assisted_by_id not in ctx.squad:
            errors.append('Assister must be in the game squad (starting lineup or bench)')
        else:
            assister_state = ctx.state(goal.assisted_by_id, goal.minute)
            if assister_state != PlayerState.ON_PITCH:
                errors.append(
                    f'Assister must be on the pitch. Current state: {STATE_DESCRIPTIONS[assister_state]}'
                )
    return errors


def validate_substitution(sub: Substitution, ctx: MatchContext) -> list[str]:
    """Player out must be on the pitch; player in must be on the bench or previously subbed off."""
    errors = validate_minute(sub.minute, ctx.total_minutes)
    if errors:
        return errors
    if sub.player_out_id == sub.player_in_id:
        return ['Player out and player in must be different']
    if sub.player_out_id not in ctx.squad:
        errors.append('Player leaving field must be in the game squad')
    if sub.player_in_id not in ctx.squad:
        errors.append('Player entering field must be in the game squad')
    if errors:
        return errors

    out_state = ctx.state(sub.player_out_id, sub.minute)
    if out_state == PlayerState.SENT_OFF:
        errors.append('Cannot substitute a player who has been sent off')
    elif out_state != PlayerState.ON_PITCH:
        errors.append(
            f'Player leaving field must be on the pitch. Current state: {STATE_DESCRIPTIONS[out_state]}'
        )

    in_state = ctx.state(sub.player_in_id, sub.minute)
    if in_state == PlayerState.SENT_OFF:
        errors.append('Cannot substitute in a player who has been sent off')
    elif in_state == PlayerState.ON_PITCH:
        errors.append('Player entering field is already on the pitch')

    if not errors:
        errors.extend(validate_future_consistency(sub.player_out_id, sub.minute, 'be substituted out', ctx))
    return errors


def can_receive_card(existing: list[Card], card_type: str) -> list[str]:
    """
    Card sequence for one player.

    No cards: Yellow or Red. One Yellow: Second Yellow or Red. Sent off:
    nothing further.
    """
    if card_type not in CARD_TYPES:
        return [f'Invalid card type: {card_type}']
    if any(c.is_sending_off for c in existing):
        return ['Player has already been sent off and cannot receive additional cards']

    yellows = sum(1 for c in existing if c.card_type == YELLOW)
    if card_type == YELLOW and yellows:
        return ['Player already has a yellow card. Use "Second Yellow" instead']
    if card_type == SECOND_YELLOW and yellows != 1:
        if yellows == 0:
            return ['Player must have a yellow card before receiving a second yellow']
        return ['Player already has multiple yellow cards or has been sent off']
    return []


def validate_card(card: Card, ctx: MatchContext) -> list[str]:
    """Players in the squad and not sent off can be booked, including from the bench."""
    errors = validate_minute(card.minute, ctx.total_minutes)
    if errors:
        return errors
    if card.player_id not in ctx.squad:
        return ['Player must be in the game squad (starting lineup or bench) to receive a card']

    state = ctx.state(card.player_id, card.minute)
    if state == PlayerState.SENT_OFF:
        return ['Cannot give a card to a player who has already been sent off']
    if state not in (PlayerState.ON_PITCH, PlayerState.BENCH):
        return [
            f'Player must be on the pitch or on the bench to receive a card. '
            f'Current state: {STATE_DESCRIPTIONS[state]}'
        ]

    prior = [c for c in ctx.cards if c.player_id == card.player_id and c.id != card.id]
    errors.extend(can_receive_card(prior, card.card_type))

    if not errors and card.card_type in (SECOND_YELLOW, RED):
        errors.extend(
            validate_future_consistency(card.player_id, card.minute, f'receive a {card.card_type} card', ctx)
        )
    return errors


def validate_future_consistency(player_id: str, minute: int, action: str, ctx: MatchContext) -> list[str]:
    """
    Reject removing a player at minute when they feature in a later event.

    Args:
        player_id: Player being substituted out or sent off
        minute: Minute of the removal
        action: Verb phrase for the message (e.g. 'be substituted out')
    """
    conflicts = []
    for entry in ctx.timeline:
        if entry.minute <= minute:
            continue
        event = entry.event
        if entry.event_type == EVENT_GOAL:
            if event.scorer_id == player_id:
                conflicts.append(f'scored a goal at minute {entry.minute}')
            if event.assisted_by_id == player_id:
                conflicts.append(f'assisted a goal at minute {entry.minute}')
        elif entry.event_type == EVENT_CARD:
            if event.player_id == player_id:
                conflicts.append(f'received a {event.card_type} card at minute {entry.minute}')
        else:
            if event.player_out_id == player_id:
                conflicts.append(f'was substituted out at minute {entry.minute}')
            if event.player_in_id == player_id:
                conflicts.append(f'was substituted in at minute {entry.minute}')

    if not conflicts:
        return []
    return [
        f'Cannot {action} at minute {minute} because the player {", ".join(conflicts)}. '
        'Please delete or modify the conflicting events first.'
    ]
