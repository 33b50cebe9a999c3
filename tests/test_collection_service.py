import random

import pytest

from bitlings.database.seed import DEMO_BITLINGS, demo_moves, demo_stats, seed_demo_data
from bitlings.errors import ConflictError, NotFoundError, ValidationError
from bitlings.models.creature_type import CreatureType, MoveCategory, ProposalStatus
from bitlings.models.stat_block import Move, Stats
from bitlings.services.collection_service import CollectionService
from tests.conftest import ScriptedRng


@pytest.fixture
def accepted(db, make_proposal):
    proposal = make_proposal("FLAMELOX", types=["fire"], status=ProposalStatus.ACCEPTED)
    db.stats.create(
        proposal.id,
        Stats(hp=65, attack=85, defense=60, speed=90),
        [Move(name="EMBER TAIL", type="fire", power=60, pp=2, max_pp=2, category="special")],
    )
    return proposal


def test_materialize_snapshots_proposal_and_stats(collection_service, accepted):
    entry = collection_service.materialize("ash", accepted.id, nickname="Foxy")
    assert entry.id.startswith("collection-")
    assert entry.user_id == "ash"
    assert entry.nickname == "Foxy"
    assert entry.name == "FLAMELOX"
    assert entry.types == [CreatureType.FIRE]
    assert entry.stats.attack == 85
    assert entry.moves[0].category == MoveCategory.SPECIAL
    assert 5 <= entry.level <= 15
    assert entry.experience == entry.level * 100


def test_materialize_is_at_most_once_per_user(db, collection_service, accepted):
    collection_service.materialize("ash", accepted.id)
    with pytest.raises(ConflictError):
        collection_service.materialize("ash", accepted.id)
    collection_service.materialize("misty", accepted.id)
    assert len(db.collection.get_by_user("ash")) == 1
    assert len(db.collection.get_by_user("misty")) == 1


def test_materialize_unknown_proposal_or_user(collection_service, accepted):
    with pytest.raises(NotFoundError):
        collection_service.materialize("ash", "missing")
    with pytest.raises(ValidationError):
        collection_service.materialize("", accepted.id)


def test_entry_without_stats(collection_service, make_proposal):
    proposal = make_proposal("BARE")
    entry = collection_service.materialize("ash", proposal.id)
    assert entry.stats is None
    assert entry.moves == []
    assert entry.types is None


def test_snapshot_is_independent_of_later_edits(db, collection_service, accepted):
    collection_service.materialize("ash", accepted.id)
    db.stats.replace(accepted.id, Stats(hp=1, attack=1, defense=1, speed=1), [])
    db.proposals.set_types(accepted.id, ["ghost"])

    entry = collection_service.get_collection("ash")[0]
    assert entry.stats.hp == 65
    assert entry.types == [CreatureType.FIRE]
    assert [m.name for m in entry.moves] == ["EMBER TAIL"]


def test_collection_is_ordered_by_level(db, make_proposal):
    service = CollectionService(db, rng=random.Random(1))
    for name in ("A", "B", "C", "D"):
        service.materialize("ash", make_proposal(name).id)
    levels = [e.level for e in service.get_collection("ash")]
    assert levels == sorted(levels, reverse=True)


def test_collection_stats(db, make_proposal):
    service = CollectionService(db, rng=ScriptedRng([0.1, 0.9, 0.9]))
    for name, creature_type in (("EMBERLING", "fire"), ("AQUABYTE", "water"), ("FLAMELOX", "fire")):
        service.materialize("ash", make_proposal(name, types=[creature_type]).id)

    stats = service.get_collection_stats("ash")
    assert stats.total == 3
    assert stats.distinct_type_count == 2
    assert stats.rare_count == 1
    assert stats.completion_percentage == 7


def test_empty_collection_stats(collection_service):
    stats = collection_service.get_collection_stats("nobody")
    assert (stats.total, stats.distinct_type_count, stats.rare_count, stats.completion_percentage) == (0, 0, 0, 0)
    assert collection_service.get_collection("nobody") == []


def test_on_promoted_skips_existing_entry(db, collection_service, accepted):
    collection_service.materialize(collection_service.default_user_id, accepted.id)
    collection_service.on_promoted(db.proposals.require(accepted.id))
    assert len(collection_service.get_collection(collection_service.default_user_id)) == 1


def test_demo_stats_and_moves():
    stats = demo_stats(CreatureType.FIRE, random.Random(3))
    assert all(30 <= v <= 100 for v in stats.model_dump().values())

    moves = demo_moves(CreatureType.WATER)
    assert [m.level_learned for m in moves] == [1, 5, 10, 15]
    assert moves[-1].name == "QUICK DASH"
    assert moves[0].pp == 130 // 75


def test_seed_demo_data(db, collection_service):
    added = seed_demo_data(db, collection_service, random.Random(5))
    assert added == len(DEMO_BITLINGS)
    assert db.proposals.count() == 6

    accepted = db.proposals.list(status="accepted")
    assert len(accepted) == 4
    assert all(db.stats.get(p.id) is not None for p in accepted)
    assert len(db.proposals.list(status="voting")) == 2

    owned = collection_service.get_collection(collection_service.default_user_id)
    assert {e.name for e in owned} == {"AQUABYTE", "FLAMELOX", "LEAFLET", "ZAPZAP"}

    # newest first: FROSTBITE was created twelve hours ago
    assert db.proposals.list()[0].name == "FROSTBITE"
    assert seed_demo_data(db, collection_service) == 0
