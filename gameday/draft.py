"""Draft serialization and store hydration."""

import logging
from typing import Optional

from .constants import NOT_IN_SQUAD, STATUS_SCHEDULED
from .formation import FormationAssignmentStore
from .models import Game, LineupDraft, RosterRecord
from .roster import RosterAssignmentStore
from .schemas import LineupDraftSchema

logger = logging.getLogger('gameday.draft')

# Hydration sources, in priority order
SOURCE_DRAFT = 'draft'
SOURCE_ROSTER_RECORDS = 'roster_records'
SOURCE_DEFAULT = 'default'


def serialize_draft(roster: RosterAssignmentStore, formation: FormationAssignmentStore) -> LineupDraft:
    """Snapshot both stores as a full draft (every player, every slot)."""
    return LineupDraft(
        rosters=roster.as_dict(),
        formation=formation.as_dict(),
        formation_type=formation.formation_type,
    )


def draft_payload(roster: RosterAssignmentStore, formation: FormationAssignmentStore) -> dict:
    """Wire body for PUT /games/{id}/draft."""
    return LineupDraftSchema.from_model(serialize_draft(roster, formation)).to_wire()


def start_game_payload(roster: RosterAssignmentStore, formation: FormationAssignmentStore) -> dict:
    """
    Wire body for POST /games/{id}/start-game.

    Unlike the draft, only rostered players and filled slots are sent:
    'Not in Squad' players get no roster record.
    """
    rosters = {pid: status for pid, status in roster.as_dict().items() if status != NOT_IN_SQUAD}
    draft = LineupDraft(
        rosters=rosters,
        formation=formation.filled(),
        formation_type=formation.formation_type,
    )
    return LineupDraftSchema.from_model(draft).to_wire()


def hydrate(
    game: Game,
    roster: RosterAssignmentStore,
    formation: FormationAssignmentStore,
    roster_records: Optional[list[RosterRecord]] = None,
) -> str:
    """
    Populate the stores for an opened game.

    Priority:
        1. The saved lineup draft, when the game is Scheduled and has one
        2. Committed roster records (Played/Done games)
        3. 'Not in Squad' for every player, empty default formation

    Args:
        game: Game working copy
        roster: Roster store to fill
        formation: Formation store to fill
        roster_records: Committed roster records for the game, if any

    Returns:
        Name of the source used (SOURCE_DRAFT, SOURCE_ROSTER_RECORDS or SOURCE_DEFAULT)
    """
    if game.status == STATUS_SCHEDULED and game.lineup_draft:
        draft = game.lineup_draft
        roster.load(draft.rosters)
        has_slots = any(draft.formation.values())
        formation.load(draft.formation_type, draft.formation, manual=has_slots)
        logger.debug(
            f'Game {game.id}: hydrated from draft '
            f'({len(draft.rosters)} statuses, {len(formation.filled())} slots)'
        )
        return SOURCE_DRAFT

    if roster_records:
        roster.load({r.player_id: r.status for r in roster_records})
        first = roster_records[0]
        formation_type = first.formation_type or formation.formation_type
        formation.load(formation_type, first.formation or {}, manual=True)
        logger.debug(f'Game {game.id}: hydrated from {len(roster_records)} roster records')
        return SOURCE_ROSTER_RECORDS

    roster.load({})
    formation.load(formation.formation_type, {}, manual=False)
    logger.debug(f'Game {game.id}: no draft or roster records, using defaults')
    return SOURCE_DEFAULT
