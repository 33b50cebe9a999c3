import json
import random
from datetime import datetime, timedelta, timezone

import pytest

from bitlings.config import Settings
from bitlings.database.db_manager import DBManager
from bitlings.llm.llm_connector import LLMConnector
from bitlings.services.collection_service import CollectionService
from bitlings.services.voting_service import VotingService

IMAGE_URL = "https://img.example/bitling.png"


class MutableClock:
    """Stands in for utc_now so tests control created_at ordering."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeConnector(LLMConnector):
    """Records calls; returns a canned response or raises a canned error."""

    def __init__(self, response=None, image_url=IMAGE_URL, error=None):
        self.response = response if response is not None else {}
        self.image_url = image_url
        self.error = error
        self.calls = []
        self.image_prompts = []

    def get_json_response(self, system_prompt, chat_history, temperature=0.7):
        self.calls.append({"system_prompt": system_prompt, "chat_history": chat_history})
        if self.error:
            raise self.error
        if isinstance(self.response, str):
            return self.response
        return json.dumps(self.response)

    def generate_image(self, prompt):
        self.image_prompts.append(prompt)
        if self.error:
            raise self.error
        return self.image_url


class ScriptedRng:
    """Minimal random.Random stand-in: fixed levels, scripted rarity rolls."""

    def __init__(self, rolls=None, level=10):
        self.rolls = list(rolls or [])
        self.level = level

    def randint(self, low, high):
        return max(low, min(high, self.level))

    def random(self):
        return self.rolls.pop(0) if self.rolls else 0.99


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def db(clock):
    manager = DBManager(":memory:", clock=clock)
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def collection_service(db):
    return CollectionService(db, rng=random.Random(7))


@pytest.fixture
def voting_service(db, collection_service):
    service = VotingService(db, approval_threshold=10)
    service.add_promotion_listener(collection_service.on_promoted)
    return service


@pytest.fixture
def settings():
    return Settings(llm_provider="none")


@pytest.fixture
def make_proposal(db, clock):
    def _make(name="AQUABYTE", prompt="A sleek aquatic creature.", status=None, **kwargs):
        proposal = db.proposals.create(name, prompt, IMAGE_URL, **kwargs)
        clock.advance(minutes=1)
        if status is not None:
            proposal = db.proposals.set_status(proposal.id, status)
        return proposal

    return _make
