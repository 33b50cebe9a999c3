import pytest

from bitlings.errors import ConflictError, ExternalServiceError, NotFoundError, ValidationError
from bitlings.models.creature_type import CreatureType
from bitlings.services.proposal_service import ProposalService
from bitlings.services.stats_generator import SYSTEM_PROMPT, StatsGenerator
from tests.conftest import IMAGE_URL, FakeConnector

BUNDLE = {
    "types": ["water", "ice"],
    "stats": {"hp": 44, "attack": 38, "defense": 41, "speed": 47},
    "description": "Glides beneath frozen lakes.",
    "behavior": "Curious.",
    "moves": [
        {"name": "Frost Fin", "type": "ice", "power": 55, "accuracy": 95, "pp": 20, "maxPp": 20,
         "category": "special", "levelLearned": 5, "description": "A chilling swipe."},
    ],
}


def test_generate_sends_prompt_and_image():
    llm = FakeConnector(BUNDLE)
    bundle = StatsGenerator(llm).generate("AQUABYTE", "A sleek aquatic creature.", IMAGE_URL)

    assert bundle.types == [CreatureType.WATER, CreatureType.ICE]
    assert bundle.stats.speed == 47
    call = llm.calls[0]
    assert call["system_prompt"] == SYSTEM_PROMPT
    message = call["chat_history"][0]
    assert message.role == "user"
    assert message.image_url == IMAGE_URL
    assert "AQUABYTE" in message.content


def test_generate_repairs_bad_output():
    bundle = StatsGenerator(FakeConnector("Sorry, I can't do that")).generate("X", "Y", IMAGE_URL)
    assert bundle.types == [CreatureType.NORMAL]
    assert len(bundle.moves) == 1


@pytest.mark.parametrize(
    "name, description, image_url", [("", "d", IMAGE_URL), ("n", " ", IMAGE_URL), ("n", "d", "")]
)
def test_generate_requires_inputs(name, description, image_url):
    llm = FakeConnector(BUNDLE)
    with pytest.raises(ValidationError):
        StatsGenerator(llm).generate(name, description, image_url)
    assert llm.calls == []


def test_transport_failure_is_external_error():
    generator = StatsGenerator(FakeConnector(error=ConnectionError("timeout")))
    with pytest.raises(ExternalServiceError, match="timeout"):
        generator.generate("X", "Y", IMAGE_URL)
    with pytest.raises(ExternalServiceError):
        generator.generate_image("a fox")


def test_no_backend_configured():
    generator = StatsGenerator(None)
    with pytest.raises(ExternalServiceError):
        generator.generate("X", "Y", IMAGE_URL)
    with pytest.raises(ExternalServiceError):
        generator.generate_image("a fox")


def test_generate_image():
    llm = FakeConnector(image_url="https://img.example/new.png")
    assert StatsGenerator(llm).generate_image("  an ember fox ") == "https://img.example/new.png"
    assert "an ember fox" in llm.image_prompts[0]

    with pytest.raises(ValidationError):
        StatsGenerator(llm).generate_image("")
    with pytest.raises(ExternalServiceError):
        StatsGenerator(FakeConnector(image_url="")).generate_image("fox")


def test_generate_stats_for_proposal_persists_once(db, make_proposal):
    service = ProposalService(db, StatsGenerator(FakeConnector(BUNDLE)))
    proposal = make_proposal()

    service.generate_stats(proposal.id)
    stored = service.get(proposal.id)
    assert stored.stats.hp == 44
    assert stored.moves[0].name == "Frost Fin"
    assert stored.types == [CreatureType.WATER, CreatureType.ICE]
    assert stored.behavior == "Curious."

    with pytest.raises(ConflictError):
        service.generate_stats(proposal.id)
    with pytest.raises(NotFoundError):
        service.generate_stats("missing")


def test_failed_generation_stores_nothing(db, make_proposal):
    service = ProposalService(db, StatsGenerator(FakeConnector(error=RuntimeError("boom"))))
    proposal = make_proposal()
    with pytest.raises(ExternalServiceError):
        service.generate_stats(proposal.id)
    assert db.stats.get(proposal.id) is None


def test_submit_with_client_bundle(db):
    service = ProposalService(db, StatsGenerator(None))
    created = service.submit(
        "FROSTBITE",
        "A small ice fox.",
        IMAGE_URL,
        creator_handle="icecaster",
        stats={"hp": 500, "attack": 50, "defense": 50, "speed": 50},
        moves=[{"name": "Chill", "type": "ice", "power": 30}],
    )
    assert created.stats.hp == 100
    assert created.types == [CreatureType.NORMAL]
    assert created.moves[0].name == "Chill"


def test_submit_keeps_client_types(db):
    service = ProposalService(db, StatsGenerator(None))
    created = service.submit(
        "FROSTBITE",
        "A small ice fox.",
        IMAGE_URL,
        types=["ice"],
        stats={"hp": 50, "attack": 50, "defense": 50, "speed": 50},
        moves=[{"name": "Chill", "type": "laser"}],
    )
    assert created.types == [CreatureType.ICE]
    assert created.moves[0].type == CreatureType.ICE


def test_submit_without_bundle_and_lookup(db):
    service = ProposalService(db, StatsGenerator(None))
    created = service.submit("PSYCAT", "A feline creature.", IMAGE_URL)
    assert created.stats is None
    assert created.types is None
    with pytest.raises(NotFoundError, match="Bitling not found"):
        service.get("missing")
