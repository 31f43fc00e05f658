"""Pydantic schemas for configuration and backing-store payloads."""

from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .constants import (
    CARD_TYPES,
    DEFAULT_FORMATION,
    FORMATIONS,
    GOAL_TYPES,
    RATING_MAX,
    RATING_MIN,
    ROSTER_STATUSES,
)
from .models import (
    Card,
    FinalScore,
    Game,
    Goal,
    LineupDraft,
    MatchDuration,
    PlayerReport,
    RosterRecord,
    Substitution,
    TeamSummary,
)


def _ref_id(value: Any) -> Any:
    """Accept either a bare id or a populated reference like {'_id': ..., 'fullName': ...}."""
    if isinstance(value, dict):
        return value.get('_id') or value.get('id')
    return value


class EngineConfig(BaseModel):
    """Engine settings loaded from data/engine_config.json."""

    api_base_url: str = Field(default='http://localhost:3001/api', min_length=1)
    request_timeout: float = Field(default=30.0, gt=0)
    autosave_debounce_seconds: float = Field(default=2.5, ge=0)
    hydration_grace_seconds: float = Field(default=1.0, ge=0)
    recommended_bench_min: int = Field(default=7, ge=0)
    recommended_bench_max: int = Field(default=12, ge=0)
    default_regular_time: int = Field(default=90, ge=1, le=120)
    default_report_rating: int = Field(default=3, ge=RATING_MIN, le=RATING_MAX)

    model_config = ConfigDict(extra='forbid')

    @model_validator(mode='after')
    def validate_bench_range(self):
        """Ensure the recommended bench range is not inverted."""
        if self.recommended_bench_min > self.recommended_bench_max:
            raise ValueError(
                f'recommended_bench_min ({self.recommended_bench_min}) exceeds '
                f'recommended_bench_max ({self.recommended_bench_max})'
            )
        return self


class WireModel(BaseModel):
    """Base for backing-store payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')

    def to_wire(self, **kwargs) -> dict:
        return self.model_dump(by_alias=True, **kwargs)


class MatchDurationSchema(WireModel):
    regular_time: int = Field(default=90, ge=1, le=120)
    first_half_extra_time: int = Field(default=0, ge=0)
    second_half_extra_time: int = Field(default=0, ge=0)

    def to_model(self) -> MatchDuration:
        return MatchDuration(**self.model_dump())


class FinalScoreSchema(WireModel):
    our_score: int = Field(default=0, ge=0)
    opponent_score: int = Field(default=0, ge=0)


class LineupDraftSchema(WireModel):
    """Draft body for PUT /games/{id}/draft and POST /games/{id}/start-game."""

    rosters: dict[str, str] = Field(default_factory=dict)
    formation: dict[str, Optional[str]] = Field(default_factory=dict)
    formation_type: str = DEFAULT_FORMATION

    @field_validator('rosters')
    @classmethod
    def validate_statuses(cls, v):
        """Ensure every roster status is known."""
        for player_id, status in v.items():
            if status not in ROSTER_STATUSES:
                raise ValueError(f'Invalid roster status for {player_id}: {status}')
        return v

    @field_validator('formation', mode='before')
    @classmethod
    def normalize_formation(cls, v):
        """Older drafts stored populated player objects per slot."""
        if not isinstance(v, dict):
            return v
        return {slot: _ref_id(player) for slot, player in v.items()}

    @field_validator('formation_type')
    @classmethod
    def validate_formation_type(cls, v):
        if v not in FORMATIONS:
            raise ValueError(f'Unknown formation type: {v}')
        return v

    def to_model(self) -> LineupDraft:
        return LineupDraft(
            rosters=dict(self.rosters),
            formation=dict(self.formation),
            formation_type=self.formation_type,
        )

    @classmethod
    def from_model(cls, draft: LineupDraft) -> 'LineupDraftSchema':
        return cls(
            rosters=draft.rosters,
            formation=draft.formation,
            formation_type=draft.formation_type,
        )


class GameSchema(WireModel):
    """Game entity as returned by GET /games/{id}."""

    id: str = Field(validation_alias=AliasChoices('id', '_id'))
    team_id: str = Field(validation_alias=AliasChoices('teamId', 'team', 'team_id'))
    status: Literal['Scheduled', 'Played', 'Done']
    opponent: str = ''
    match_duration: MatchDurationSchema = Field(default_factory=MatchDurationSchema)
    final_score: FinalScoreSchema = Field(default_factory=FinalScoreSchema)
    defense_summary: str = ''
    midfield_summary: str = ''
    attack_summary: str = ''
    general_summary: str = ''
    lineup_draft: Optional[LineupDraftSchema] = None
    report_draft: Optional[dict] = None

    @field_validator('team_id', mode='before')
    @classmethod
    def extract_team_id(cls, v):
        return _ref_id(v)

    @model_validator(mode='before')
    @classmethod
    def lift_flat_score(cls, data):
        """Some responses carry ourScore/opponentScore at top level."""
        if isinstance(data, dict) and 'finalScore' not in data and 'ourScore' in data:
            data = dict(data)
            data['finalScore'] = {
                'ourScore': data.get('ourScore') or 0,
                'opponentScore': data.get('opponentScore') or 0,
            }
        if isinstance(data, dict) and not data.get('lineupDraft'):
            # Cleared drafts come back as {} or null
            data = dict(data)
            data['lineupDraft'] = None
        return data

    def to_model(self) -> Game:
        return Game(
            id=self.id,
            team_id=self.team_id,
            status=self.status,
            opponent=self.opponent,
            match_duration=self.match_duration.to_model(),
            final_score=FinalScore(
                our_score=self.final_score.our_score,
                opponent_score=self.final_score.opponent_score,
            ),
            team_summary=TeamSummary(
                defense_summary=self.defense_summary,
                midfield_summary=self.midfield_summary,
                attack_summary=self.attack_summary,
                general_summary=self.general_summary,
            ),
            lineup_draft=self.lineup_draft.to_model() if self.lineup_draft else None,
            report_draft=self.report_draft or None,
        )


class RosterRecordSchema(WireModel):
    """Committed roster record for a started game."""

    player_id: str = Field(validation_alias=AliasChoices('player', 'playerId', 'player_id'))
    status: str
    formation: Optional[dict[str, Optional[str]]] = None
    formation_type: Optional[str] = None

    @field_validator('player_id', mode='before')
    @classmethod
    def extract_player_id(cls, v):
        return _ref_id(v)

    @field_validator('formation', mode='before')
    @classmethod
    def normalize_formation(cls, v):
        if not isinstance(v, dict):
            return v
        return {slot: _ref_id(player) for slot, player in v.items()}

    def to_model(self) -> RosterRecord:
        return RosterRecord(
            player_id=self.player_id,
            status=self.status,
            formation=dict(self.formation or {}),
            formation_type=self.formation_type,
        )


class GoalSchema(WireModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices('id', '_id'))
    minute: int = Field(..., ge=1)
    scorer_id: Optional[str] = None
    assisted_by_id: Optional[str] = None
    goal_type: str = 'open-play'
    is_opponent_goal: bool = False

    @field_validator('scorer_id', 'assisted_by_id', mode='before')
    @classmethod
    def extract_player_ids(cls, v):
        return _ref_id(v)

    @field_validator('goal_type')
    @classmethod
    def validate_goal_type(cls, v):
        if v not in GOAL_TYPES:
            raise ValueError(f'Invalid goal type: {v}')
        return v

    def to_model(self) -> Goal:
        return Goal(**self.model_dump())

    @classmethod
    def from_model(cls, goal: Goal) -> 'GoalSchema':
        return cls(
            id=goal.id,
            minute=goal.minute,
            scorer_id=goal.scorer_id,
            assisted_by_id=goal.assisted_by_id,
            goal_type=goal.goal_type,
            is_opponent_goal=goal.is_opponent_goal,
        )


class CardSchema(WireModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices('id', '_id'))
    player_id: str
    card_type: str
    minute: int = Field(..., ge=1)

    @field_validator('player_id', mode='before')
    @classmethod
    def extract_player_id(cls, v):
        return _ref_id(v)

    @field_validator('card_type')
    @classmethod
    def validate_card_type(cls, v):
        if v not in CARD_TYPES:
            raise ValueError(f'Invalid card type: {v}')
        return v

    def to_model(self) -> Card:
        return Card(**self.model_dump())

    @classmethod
    def from_model(cls, card: Card) -> 'CardSchema':
        return cls(id=card.id, player_id=card.player_id, card_type=card.card_type, minute=card.minute)


class SubstitutionSchema(WireModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices('id', '_id'))
    player_out_id: str
    player_in_id: str
    minute: int = Field(..., ge=1)

    @field_validator('player_out_id', 'player_in_id', mode='before')
    @classmethod
    def extract_player_ids(cls, v):
        return _ref_id(v)

    def to_model(self) -> Substitution:
        return Substitution(**self.model_dump())

    @classmethod
    def from_model(cls, sub: Substitution) -> 'SubstitutionSchema':
        return cls(
            id=sub.id,
            player_out_id=sub.player_out_id,
            player_in_id=sub.player_in_id,
            minute=sub.minute,
        )


EVENT_SCHEMAS: dict[str, type[WireModel]] = {
    'goal': GoalSchema,
    'card': CardSchema,
    'substitution': SubstitutionSchema,
}


class PlayerReportSchema(WireModel):
    player_id: str
    rating_physical: Optional[int] = Field(default=None, ge=RATING_MIN, le=RATING_MAX)
    rating_technical: Optional[int] = Field(default=None, ge=RATING_MIN, le=RATING_MAX)
    rating_tactical: Optional[int] = Field(default=None, ge=RATING_MIN, le=RATING_MAX)
    rating_mental: Optional[int] = Field(default=None, ge=RATING_MIN, le=RATING_MAX)
    notes: str = ''
    auto_filled: bool = False

    def to_model(self) -> PlayerReport:
        return PlayerReport(**self.model_dump())

    @classmethod
    def from_model(cls, report: PlayerReport) -> 'PlayerReportSchema':
        return cls(
            player_id=report.player_id,
            rating_physical=report.rating_physical,
            rating_technical=report.rating_technical,
            rating_tactical=report.rating_tactical,
            rating_mental=report.rating_mental,
            notes=report.notes,
            auto_filled=report.auto_filled,
        )


class TeamSummarySchema(WireModel):
    defense_summary: str = ''
    midfield_summary: str = ''
    attack_summary: str = ''
    general_summary: str = ''


class ReportDraftSchema(WireModel):
    """Report draft body saved while a game is Played."""

    team_summary: TeamSummarySchema = Field(default_factory=TeamSummarySchema)
    final_score: FinalScoreSchema = Field(default_factory=FinalScoreSchema)
    match_duration: MatchDurationSchema = Field(default_factory=MatchDurationSchema)
    player_reports: dict[str, PlayerReportSchema] = Field(default_factory=dict)


class SubmitReportSchema(WireModel):
    """Body for POST /games/{id}/submit-report."""

    final_score: FinalScoreSchema
    match_duration: MatchDurationSchema
    team_summary: TeamSummarySchema
    player_reports: list[PlayerReportSchema] = Field(default_factory=list)
