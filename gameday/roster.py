"""Per-player squad status for one game."""

import logging
from typing import Iterable, Set

from .constants import BENCH, NOT_IN_SQUAD, ROSTER_STATUSES, STARTING_LINEUP, UNAVAILABLE
from .errors import LifecycleError
from .models import Player
from .observable import Observable

logger = logging.getLogger('gameday.roster')


class RosterAssignmentStore(Observable):
    """
    Total mapping from team player to roster status.

    Every player in the team pool always has exactly one status, defaulting
    to 'Not in Squad'. The store only mutates memory; persistence belongs to
    the autosave coordinator and lifecycle controller.
    """

    def __init__(self, players: Iterable[Player]):
        super().__init__()
        self.players: dict[str, Player] = {p.id: p for p in players}
        self._statuses: dict[str, str] = {pid: NOT_IN_SQUAD for pid in self.players}
        self.read_only = False

    def get(self, player_id: str) -> str:
        """Return the player's status. Raises KeyError for players outside the team pool."""
        if player_id not in self._statuses:
            raise KeyError(f'Player {player_id} is not on this team')
        return self._statuses[player_id]

    def set(self, player_id: str, status: str) -> None:
        """Set one player's status; listeners fire only when the value changes."""
        self._check_writable()
        if status not in ROSTER_STATUSES:
            raise ValueError(f'Invalid roster status: {status}')
        if self.get(player_id) == status:
            return
        self._statuses[player_id] = status
        logger.debug(f'{self.players[player_id].name}: {status}')
        self.notify()

    def load(self, statuses: dict[str, str]) -> None:
        """
        Replace all statuses (hydration).

        Players missing from statuses fall back to 'Not in Squad'; ids that are
        no longer on the team are dropped.
        """
        unknown = [pid for pid in statuses if pid not in self.players]
        if unknown:
            logger.warning(f'Ignoring roster statuses for {len(unknown)} players not on team: {unknown}')

        loaded = {pid: NOT_IN_SQUAD for pid in self.players}
        for pid, status in statuses.items():
            if pid not in loaded:
                continue
            if status not in ROSTER_STATUSES:
                raise ValueError(f'Invalid roster status for {pid}: {status}')
            loaded[pid] = status

        if loaded != self._statuses:
            self._statuses = loaded
            self.notify()

    def as_dict(self) -> dict[str, str]:
        return dict(self._statuses)

    def players_with(self, status: str) -> list[Player]:
        """Players holding status, in team-pool order."""
        return [self.players[pid] for pid, s in self._statuses.items() if s == status]

    def starting_lineup(self) -> list[Player]:
        return self.players_with(STARTING_LINEUP)

    def bench(self) -> list[Player]:
        return self.players_with(BENCH)

    def unavailable(self) -> list[Player]:
        return self.players_with(UNAVAILABLE)

    def squad_ids(self) -> Set[str]:
        """Ids of rostered players (Starting Lineup + Bench)."""
        return {pid for pid, s in self._statuses.items() if s in (STARTING_LINEUP, BENCH)}

    def _check_writable(self) -> None:
        if self.read_only:
            raise LifecycleError('Roster is read-only once the game has started')
