import datetime
import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from catbar.database import MemoryStore
from catbar.satiety import SatietyEngine
from catbar.scheduler import Scheduler


class FakeClock:
    def __init__(self, start=None):
        self.current = start or datetime.datetime(2024, 3, 4, 9, 0, 0)

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current += datetime.timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, title, body):
        self.sent.append((title, body))


class RecordingSounds:
    def __init__(self):
        self.played = []

    def play(self, name):
        self.played.append(name)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def scheduler():
    return Scheduler()


@pytest.fixture
def engine(store, clock, notifier):
    eng = SatietyEngine(store, clock, notifier)
    eng.load()
    return eng
