"""Formation slot assignment, auto-build and position checks."""

import logging
from typing import Optional

from .constants import (
    DEFAULT_FORMATION,
    FORMATIONS,
    GOALKEEPER_SLOT,
    NOT_IN_SQUAD,
    POSITION_MAPPINGS,
    STARTING_LINEUP,
    UNAVAILABLE,
)
from .errors import ConfirmationRequired, LifecycleError, ValidationError
from .models import FormationSlot, Player
from .observable import Observable
from .roster import RosterAssignmentStore

logger = logging.getLogger('gameday.formation')

SWITCH_CONFIRMATION = 'Changing formation will clear all current position assignments. Continue?'


def get_layout(formation_type: str) -> dict[str, FormationSlot]:
    """
    Slot layout for a formation type.

    Args:
        formation_type: Layout name (e.g., '1-4-4-2')

    Returns:
        Dict mapping slot id to FormationSlot, in pitch order

    Raises:
        ValueError: If the formation type is unknown
    """
    if formation_type not in FORMATIONS:
        raise ValueError(f'Unknown formation type: {formation_type}')
    return {
        slot_id: FormationSlot(id=slot_id, label=label, type=slot_type)
        for slot_id, (label, slot_type) in FORMATIONS[formation_type].items()
    }


def required_starters(formation_type: str) -> int:
    """Number of slots that must be filled for the layout."""
    return len(FORMATIONS[formation_type])


def check_player_position(player: Optional[Player], slot: Optional[FormationSlot]) -> tuple[bool, str]:
    """
    Check whether a player is being placed in their natural position.

    Advisory only; out-of-position placements are allowed.

    Returns:
        Tuple of (is_natural_position, message)
    """
    if not player or not slot:
        return True, 'Position validation passed'

    player_position = (player.position or '').lower()
    slot_type = slot.type.lower()
    slot_label = slot.label.lower()
    natural = POSITION_MAPPINGS.get(player_position, [])

    if (
        slot_type in natural
        or slot_label in natural
        or player_position == slot_type
        or player_position == slot_label
    ):
        return True, f'{player.name} is in their natural position'

    return False, (
        f'{player.name} is being placed out of their natural position '
        f'({player.position} -> {slot.label})'
    )


def auto_build(
    layout: dict[str, FormationSlot], starters: list[Player]
) -> dict[str, Optional[str]]:
    """
    Place Starting Lineup players into slots by recorded position.

    First pass matches the slot label exactly (player 'RM' -> slot 'RM'),
    second pass matches the slot type ('Midfielder' -> any midfield slot).
    Unmatched slots stay empty.

    Args:
        layout: Slot layout from get_layout()
        starters: Starting Lineup players in priority order

    Returns:
        Dict mapping every slot id to a player id or None
    """
    built: dict[str, Optional[str]] = {slot_id: None for slot_id in layout}
    placed: set[str] = set()

    for match_on in ('label', 'type'):
        for slot_id, slot in layout.items():
            if built[slot_id]:
                continue
            target = getattr(slot, match_on)
            for player in starters:
                if player.id not in placed and player.position == target:
                    built[slot_id] = player.id
                    placed.add(player.id)
                    break

    unplaced = len(starters) - len(placed)
    if unplaced:
        logger.debug(f'Auto-build left {unplaced} starting players without a matching slot')
    return built


class FormationAssignmentStore(Observable):
    """
    Slot -> player mapping for one formation layout.

    Mutates the roster alongside the slots: assigning makes the player a
    starter, removing drops them to 'Not in Squad'. It also listens to the
    roster so a player moved away from 'Starting Lineup' by any path loses
    their slot, and so auto-build can re-place starters until the first
    manual edit.
    """

    def __init__(self, roster: RosterAssignmentStore, formation_type: str = DEFAULT_FORMATION):
        super().__init__()
        self.roster = roster
        self.formation_type = formation_type
        self.layout = get_layout(formation_type)
        self._slots: dict[str, Optional[str]] = {slot_id: None for slot_id in self.layout}
        self.manual_mode = False
        self.read_only = False
        self._unsubscribe = roster.subscribe(self._on_roster_change)

    # ----- queries -----

    def get(self, slot_id: str) -> Optional[str]:
        self._check_slot(slot_id)
        return self._slots[slot_id]

    def slot_of(self, player_id: str) -> Optional[str]:
        for slot_id, occupant in self._slots.items():
            if occupant == player_id:
                return slot_id
        return None

    def as_dict(self) -> dict[str, Optional[str]]:
        return dict(self._slots)

    def filled(self) -> dict[str, str]:
        return {slot_id: pid for slot_id, pid in self._slots.items() if pid}

    def is_empty(self) -> bool:
        return not any(self._slots.values())

    def has_goalkeeper(self) -> bool:
        return bool(self._slots.get(GOALKEEPER_SLOT))

    def position_warnings(self) -> list[str]:
        """Out-of-position messages for every filled slot."""
        warnings = []
        for slot_id, pid in self.filled().items():
            natural, message = check_player_position(self.roster.players.get(pid), self.layout[slot_id])
            if not natural:
                warnings.append(message)
        return warnings

    # ----- mutations -----

    def assign(self, player_id: str, slot_id: str) -> None:
        """
        Put a player in a slot.

        The player leaves any slot they already hold, the previous occupant of
        the target slot drops to 'Not in Squad', and the player becomes a
        starter. Manual mode switches on, disabling auto-build.

        Raises:
            ValidationError: If the player is marked Unavailable
        """
        self._check_writable()
        self._check_slot(slot_id)
        status = self.roster.get(player_id)
        if status == UNAVAILABLE:
            name = self.roster.players[player_id].name
            raise ValidationError(f'{name} is unavailable and cannot be placed in the formation')

        self.manual_mode = True
        with self.batch(), self.roster.batch():
            current = self.slot_of(player_id)
            if current:
                self._slots[current] = None
            displaced = self._slots[slot_id]
            self._slots[slot_id] = player_id
            self.notify()
            if displaced and displaced != player_id:
                self.roster.set(displaced, NOT_IN_SQUAD)
            self.roster.set(player_id, STARTING_LINEUP)

        logger.debug(f'Assigned {player_id} to {slot_id}')

    def remove(self, slot_id: str) -> Optional[str]:
        """
        Empty a slot; its occupant drops to 'Not in Squad'.

        Returns:
            Id of the removed player, or None if the slot was empty
        """
        self._check_writable()
        self._check_slot(slot_id)
        occupant = self._slots[slot_id]
        if occupant is None:
            return None

        self.manual_mode = True
        with self.batch(), self.roster.batch():
            self._slots[slot_id] = None
            self.notify()
            self.roster.set(occupant, NOT_IN_SQUAD)
        return occupant

    def set_player_status(self, player_id: str, status: str) -> None:
        """Change a roster status, clearing the player's slot when they stop starting."""
        self._check_writable()
        if status != STARTING_LINEUP:
            slot_id = self.slot_of(player_id)
            if slot_id:
                self._slots[slot_id] = None
                self.notify()
        self.roster.set(player_id, status)

    def switch_formation_type(self, new_type: str, confirmed: bool = False) -> None:
        """
        Change layout. Destructive: every slot is cleared.

        Raises:
            ConfirmationRequired: If confirmed is False and the switch would change anything
            ValueError: If new_type is unknown
        """
        self._check_writable()
        layout = get_layout(new_type)
        if new_type == self.formation_type:
            return
        if not confirmed:
            raise ConfirmationRequired([SWITCH_CONFIRMATION])

        logger.info(f'Formation switched {self.formation_type} -> {new_type}, slots cleared')
        self.formation_type = new_type
        self.layout = layout
        self._slots = {slot_id: None for slot_id in layout}
        self.manual_mode = False
        self.notify()

    def load(self, formation_type: str, slots: dict[str, Optional[str]], manual: bool = True) -> None:
        """
        Replace layout and slots (hydration).

        Slots outside the layout and players that are unknown, duplicated or
        no longer starting are dropped.
        With manual False and no slots given, auto-build fills the layout
        from the current starters.
        """
        layout = get_layout(formation_type)
        loaded: dict[str, Optional[str]] = {slot_id: None for slot_id in layout}
        seen: set[str] = set()
        for slot_id, pid in slots.items():
            if not pid:
                continue
            if slot_id not in layout:
                logger.warning(f'Dropping slot {slot_id!r}: not in {formation_type}')
                continue
            if pid not in self.roster.players:
                logger.warning(f'Dropping {slot_id}: player {pid} is not on this team')
                continue
            if pid in seen or self.roster.get(pid) != STARTING_LINEUP:
                logger.warning(f'Dropping {slot_id}: player {pid} is not an unplaced starter')
                continue
            loaded[slot_id] = pid
            seen.add(pid)

        self.formation_type = formation_type
        self.layout = layout
        self.manual_mode = manual
        if not manual and not any(loaded.values()):
            loaded = auto_build(layout, self.roster.starting_lineup())
        self._slots = loaded
        self.notify()

    def rebuild(self) -> None:
        """Run auto-build now if no manual edit has happened."""
        if self.manual_mode or self.read_only:
            return
        built = auto_build(self.layout, self.roster.starting_lineup())
        if built != self._slots:
            self._slots = built
            self.notify()

    def detach(self) -> None:
        """Stop listening to the roster."""
        self._unsubscribe()

    # ----- internals -----

    def _on_roster_change(self, _roster) -> None:
        stale = [
            slot_id
            for slot_id, pid in self._slots.items()
            if pid and self.roster.get(pid) != STARTING_LINEUP
        ]
        if stale:
            for slot_id in stale:
                self._slots[slot_id] = None
            self.notify()
        self.rebuild()

    def _check_slot(self, slot_id: str) -> None:
        if slot_id not in self.layout:
            raise KeyError(f'Slot {slot_id!r} is not part of formation {self.formation_type}')

    def _check_writable(self) -> None:
        if self.read_only:
            raise LifecycleError('Formation is read-only once the game has started')
