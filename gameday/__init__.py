from .models import (
    Player,
    FormationSlot,
    MatchDuration,
    FinalScore,
    TeamSummary,
    LineupDraft,
    RosterRecord,
    Game,
    Goal,
    Card,
    Substitution,
    PlayerReport,
    PlayerStats,
    ValidationResult,
)
from .errors import (
    GameDayError,
    ValidationError,
    ConfirmationRequired,
    LifecycleError,
    TransientNetworkError,
    AuthenticationError,
    NotFoundError,
    AbortError,
)
from .cancellation import CancellationToken
from .roster import RosterAssignmentStore
from .formation import FormationAssignmentStore, check_player_position, get_layout
from .draft import serialize_draft, draft_payload, start_game_payload, hydrate
from .autosave import DraftAutosaveCoordinator
from .timeline import PlayerState, build_timeline, player_state_at_minute, calculate_minutes
from .ledger import MatchEventLedger
from .reports import ReportBook
from .validators import validate_squad_for_played, validate_for_done
from .client import GameStoreClient, EntityCache, InMemoryEntityCache
from .lifecycle import GameLifecycleController

__all__ = [
    # Models
    'Player',
    'FormationSlot',
    'MatchDuration',
    'FinalScore',
    'TeamSummary',
    'LineupDraft',
    'RosterRecord',
    'Game',
    'Goal',
    'Card',
    'Substitution',
    'PlayerReport',
    'PlayerStats',
    'ValidationResult',
    # Errors
    'GameDayError',
    'ValidationError',
    'ConfirmationRequired',
    'LifecycleError',
    'TransientNetworkError',
    'AuthenticationError',
    'NotFoundError',
    'AbortError',
    # Stores
    'CancellationToken',
    'RosterAssignmentStore',
    'FormationAssignmentStore',
    'check_player_position',
    'get_layout',
    # Drafts
    'serialize_draft',
    'draft_payload',
    'start_game_payload',
    'hydrate',
    'DraftAutosaveCoordinator',
    # Match events
    'PlayerState',
    'build_timeline',
    'player_state_at_minute',
    'calculate_minutes',
    'MatchEventLedger',
    'ReportBook',
    # Validation
    'validate_squad_for_played',
    'validate_for_done',
    # Backing store
    'GameStoreClient',
    'EntityCache',
    'InMemoryEntityCache',
    # Lifecycle
    'GameLifecycleController',
]
