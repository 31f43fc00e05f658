"""Shared fixtures for game-day engine tests."""

from unittest.mock import MagicMock

import pytest

from gameday.config import get_config
from gameday.models import Game, MatchDuration, Player


class FakeTimer:
    """Stand-in for threading.Timer that only runs when fired by the test."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled and not self.fired:
            self.fired = True
            self.function()


class FakeTimerFactory:
    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]

    def fire_all(self):
        for timer in self.active:
            timer.fire()


class ManualClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# 1-4-4-2 starters: one natural fit per slot
STARTER_POSITIONS = [
    ('gk', 'Goalkeeper'),
    ('lb', 'LB'),
    ('cb1', 'Defender'),
    ('cb2', 'Defender'),
    ('rb', 'RB'),
    ('lm', 'LM'),
    ('cm1', 'Midfielder'),
    ('cm2', 'Midfielder'),
    ('rm', 'RM'),
    ('st1', 'Forward'),
    ('st2', 'Forward'),
]


def make_players(count: int = 20) -> list[Player]:
    """Players p1..pN; the first 11 match the 1-4-4-2 slots in order."""
    players = []
    for i in range(1, count + 1):
        if i <= len(STARTER_POSITIONS):
            position = STARTER_POSITIONS[i - 1][1]
        else:
            position = ('Defender', 'Midfielder', 'Forward', 'Goalkeeper')[i % 4]
        players.append(Player(id=f'p{i}', name=f'Player {i}', position=position, kit_number=i))
    return players


def full_formation() -> dict[str, str]:
    """Every 1-4-4-2 slot filled with p1..p11."""
    return {slot_id: f'p{i}' for i, (slot_id, _) in enumerate(STARTER_POSITIONS, start=1)}


@pytest.fixture(autouse=True)
def clear_config_cache():
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def players():
    return make_players()


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduled_game():
    return Game(id='g1', team_id='t1', status='Scheduled', opponent='Rovers')


@pytest.fixture
def played_game():
    return Game(id='g1', team_id='t1', status='Played', opponent='Rovers', match_duration=MatchDuration())


@pytest.fixture
def mock_client():
    """GameStoreClient double: events echo back with sequential ids."""
    client = MagicMock()
    counter = {'n': 0}

    def echo(game_id, event, cancel_token=None):
        if event.id is None:
            counter['n'] += 1
            event.id = f'e{counter["n"]}'
        return event

    client.create_event.side_effect = echo
    client.update_event.side_effect = echo
    client.list_events.side_effect = lambda *args, **kwargs: []
    client.start_game.return_value = []
    return client
