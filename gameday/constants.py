"""Constants and mappings for the game-day engine."""

# Game lifecycle statuses
STATUS_SCHEDULED = 'Scheduled'
STATUS_PLAYED = 'Played'
STATUS_DONE = 'Done'

GAME_STATUSES = (STATUS_SCHEDULED, STATUS_PLAYED, STATUS_DONE)

# Allowed lifecycle transitions (one-directional)
LIFECYCLE_TRANSITIONS = {
    STATUS_SCHEDULED: STATUS_PLAYED,
    STATUS_PLAYED: STATUS_DONE,
}

# Roster statuses
NOT_IN_SQUAD = 'Not in Squad'
BENCH = 'Bench'
STARTING_LINEUP = 'Starting Lineup'
UNAVAILABLE = 'Unavailable'

ROSTER_STATUSES = (NOT_IN_SQUAD, BENCH, STARTING_LINEUP, UNAVAILABLE)
SQUAD_STATUSES = (STARTING_LINEUP, BENCH)

# Card types
YELLOW = 'Yellow'
SECOND_YELLOW = 'Second Yellow'
RED = 'Red'

CARD_TYPES = (YELLOW, SECOND_YELLOW, RED)
SENDING_OFF_CARDS = (SECOND_YELLOW, RED)

# Goal types
GOAL_TYPES = ('open-play', 'set-piece', 'penalty', 'counter-attack', 'own-goal')

# Timeline ordering for events sharing a minute
EVENT_GOAL = 'goal'
EVENT_CARD = 'card'
EVENT_SUBSTITUTION = 'substitution'

EVENT_TYPE_ORDER = {
    EVENT_GOAL: 0,
    EVENT_CARD: 1,
    EVENT_SUBSTITUTION: 2,
}

# Endpoint collection names per event type
EVENT_COLLECTIONS = {
    EVENT_GOAL: 'goals',
    EVENT_CARD: 'cards',
    EVENT_SUBSTITUTION: 'substitutions',
}

# Slot types
GOALKEEPER = 'Goalkeeper'
DEFENDER = 'Defender'
MIDFIELDER = 'Midfielder'
FORWARD = 'Forward'

GOALKEEPER_SLOT = 'gk'

# Formation layouts: slot id -> (label, type)
FORMATIONS = {
    '1-4-4-2': {
        'gk': ('GK', GOALKEEPER),
        'lb': ('LB', DEFENDER),
        'cb1': ('CB', DEFENDER),
        'cb2': ('CB', DEFENDER),
        'rb': ('RB', DEFENDER),
        'lm': ('LM', MIDFIELDER),
        'cm1': ('CM', MIDFIELDER),
        'cm2': ('CM', MIDFIELDER),
        'rm': ('RM', MIDFIELDER),
        'st1': ('ST', FORWARD),
        'st2': ('ST', FORWARD),
    },
    '1-4-3-3': {
        'gk': ('GK', GOALKEEPER),
        'lb': ('LB', DEFENDER),
        'cb1': ('CB', DEFENDER),
        'cb2': ('CB', DEFENDER),
        'rb': ('RB', DEFENDER),
        'cm1': ('CM', MIDFIELDER),
        'cm2': ('CM', MIDFIELDER),
        'cm3': ('CM', MIDFIELDER),
        'lw': ('LW', FORWARD),
        'st': ('ST', FORWARD),
        'rw': ('RW', FORWARD),
    },
    '1-3-5-2': {
        'gk': ('GK', GOALKEEPER),
        'cb1': ('CB', DEFENDER),
        'cb2': ('CB', DEFENDER),
        'cb3': ('CB', DEFENDER),
        'lwb': ('LWB', MIDFIELDER),
        'cm1': ('CM', MIDFIELDER),
        'cm2': ('CM', MIDFIELDER),
        'cm3': ('CM', MIDFIELDER),
        'rwb': ('RWB', MIDFIELDER),
        'st1': ('ST', FORWARD),
        'st2': ('ST', FORWARD),
    },
}

DEFAULT_FORMATION = '1-4-4-2'

# Player position -> slot labels/types considered natural
POSITION_MAPPINGS = {
    'goalkeeper': ['gk', 'goalkeeper'],
    'defender': [
        'cb', 'lb', 'rb', 'lcb', 'rcb', 'defender',
        'centre-back', 'left-back', 'right-back',
    ],
    'midfielder': [
        'cm', 'lm', 'rm', 'cam', 'cdm', 'lcm', 'rcm', 'lwb', 'rwb', 'midfielder',
        'centre-mid', 'left-mid', 'right-mid', 'attacking-mid', 'defensive-mid',
    ],
    'forward': [
        'st', 'cf', 'lw', 'rw', 'forward', 'striker',
        'centre-forward', 'left-wing', 'right-wing',
    ],
}

# Team summary fields required before a game can be finalized
TEAM_SUMMARY_FIELDS = {
    'defense_summary': 'Defense summary',
    'midfield_summary': 'Midfield summary',
    'attack_summary': 'Attack summary',
    'general_summary': 'General summary',
}

# Report ratings
RATING_FIELDS = ('rating_physical', 'rating_technical', 'rating_tactical', 'rating_mental')
RATING_MIN = 1
RATING_MAX = 5
