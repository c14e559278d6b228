import datetime

import pytest
import pytz

from eco_assistant import EcoAssistant
from gamification_engine import GamificationEngine
from profile_store import InMemoryProfileStore

FIXED_NOW = datetime.datetime(2024, 3, 13, 12, 0, tzinfo=pytz.utc)  # a Wednesday


class FakeModelClient:
    """Replays scripted responses; an Exception instance in the script is raised instead."""

    def __init__(self, *responses, configured=True):
        self.responses = list(responses)
        self.calls = []
        self.configured = configured

    def generate(self, prompt, image=None, use_case="analyze"):
        self.calls.append({"prompt": prompt, "image": image, "use_case": use_case})
        if not self.responses:
            raise AssertionError("FakeModelClient ran out of scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


class FakeClock:
    def __init__(self, now=FIXED_NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + datetime.timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryProfileStore()


@pytest.fixture
def engine(store, clock):
    return GamificationEngine(store, clock=clock, tz=pytz.utc)


@pytest.fixture
def make_assistant():
    def _make(*responses, **kwargs):
        client = FakeModelClient(*responses)
        kwargs.setdefault("sleep", lambda seconds: None)
        kwargs.setdefault("base_delay_ms", 0)
        return EcoAssistant(client, **kwargs), client
    return _make


@pytest.fixture
def make_client(engine):
    """Flask test client wired to a scripted model and the in-memory engine."""
    from main import create_app

    def _make(*responses):
        model = FakeModelClient(*responses)
        assistant = EcoAssistant(model, sleep=lambda seconds: None, base_delay_ms=0)
        app = create_app(config={"TESTING": True, "RATELIMIT_ENABLED": False},
                         assistant=assistant, engine=engine)
        return app.test_client(), model
    return _make
