"""Data models for the game-day engine."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .constants import (
    DEFAULT_FORMATION,
    EVENT_CARD,
    EVENT_GOAL,
    EVENT_SUBSTITUTION,
    SENDING_OFF_CARDS,
    STATUS_SCHEDULED,
)


@dataclass
class Player:
    """A player from the team's pool (read-only for the engine)."""
    id: str
    name: str
    position: str = ''
    kit_number: Optional[int] = None


@dataclass(frozen=True)
class FormationSlot:
    """A named tactical position within a formation layout."""
    id: str
    label: str
    type: str


@dataclass
class MatchDuration:
    """Regular time plus stoppage time per half, in minutes."""
    regular_time: int = 90
    first_half_extra_time: int = 0
    second_half_extra_time: int = 0

    @property
    def total_minutes(self) -> int:
        return self.regular_time + self.first_half_extra_time + self.second_half_extra_time


@dataclass
class FinalScore:
    our_score: int = 0
    opponent_score: int = 0


@dataclass
class TeamSummary:
    defense_summary: str = ''
    midfield_summary: str = ''
    attack_summary: str = ''
    general_summary: str = ''


@dataclass
class LineupDraft:
    """Serialized roster + formation state saved while a game is Scheduled."""
    rosters: Dict[str, str] = field(default_factory=dict)
    formation: Dict[str, Optional[str]] = field(default_factory=dict)  # slot id -> player id
    formation_type: str = DEFAULT_FORMATION


@dataclass
class RosterRecord:
    """Committed roster entry created when a game is started."""
    player_id: str
    status: str
    formation: Dict[str, Optional[str]] = field(default_factory=dict)
    formation_type: Optional[str] = None


@dataclass
class Game:
    """Working copy of a game owned by the backing store."""
    id: str
    team_id: str
    status: str = STATUS_SCHEDULED
    opponent: str = ''
    match_duration: MatchDuration = field(default_factory=MatchDuration)
    final_score: FinalScore = field(default_factory=FinalScore)
    team_summary: TeamSummary = field(default_factory=TeamSummary)
    lineup_draft: Optional[LineupDraft] = None
    report_draft: Optional[dict] = None


@dataclass
class Goal:
    minute: int
    scorer_id: Optional[str] = None
    assisted_by_id: Optional[str] = None
    goal_type: str = 'open-play'
    is_opponent_goal: bool = False
    id: Optional[str] = None

    event_type = EVENT_GOAL


@dataclass
class Card:
    player_id: str
    card_type: str
    minute: int
    id: Optional[str] = None

    event_type = EVENT_CARD

    @property
    def is_sending_off(self) -> bool:
        return self.card_type in SENDING_OFF_CARDS


@dataclass
class Substitution:
    player_out_id: str
    player_in_id: str
    minute: int
    id: Optional[str] = None

    event_type = EVENT_SUBSTITUTION


@dataclass
class TimelineEntry:
    """One event in the merged, minute-ordered match timeline."""
    event_type: str
    minute: int
    event: object
    sequence: int = 0  # insertion order within the event type


@dataclass
class PlayerReport:
    """Coach's per-game assessment of one player."""
    player_id: str
    rating_physical: Optional[int] = None
    rating_technical: Optional[int] = None
    rating_tactical: Optional[int] = None
    rating_mental: Optional[int] = None
    notes: str = ''
    auto_filled: bool = False

    @property
    def is_complete(self) -> bool:
        return all(
            r is not None
            for r in (
                self.rating_physical,
                self.rating_technical,
                self.rating_tactical,
                self.rating_mental,
            )
        )


@dataclass
class PlayerStats:
    """Derived per-player aggregates computed from the match events."""
    player_id: str
    minutes_played: int = 0
    goals: int = 0
    assists: int = 0


@dataclass
class ValidationResult:
    """Outcome of a squad or report check."""
    is_valid: bool = True
    needs_confirmation: bool = False
    messages: List[str] = field(default_factory=list)  # hard failures
    warnings: List[str] = field(default_factory=list)  # need user confirmation

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            needs_confirmation=self.needs_confirmation or other.needs_confirmation,
            messages=self.messages + other.messages,
            warnings=self.warnings + other.warnings,
        )
