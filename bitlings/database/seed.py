"""
Demo content for a fresh store: six creatures, four accepted (with stats and
a place in the default user's collection) and two still in voting.
"""

import logging
import random
from datetime import timedelta
from typing import Dict, List, Optional

from bitlings.database.db_manager import DBManager
from bitlings.models.creature_type import CreatureType, MoveCategory, ProposalStatus
from bitlings.models.stat_block import Move, Stats
from bitlings.services.collection_service import CollectionService

logger = logging.getLogger(__name__)

DEMO_BITLINGS = [
    {
        "name": "AQUABYTE",
        "prompt": "A sleek aquatic creature with shimmering scales and fin-like ears.",
        "image_url": "https://via.placeholder.com/400x300/2196F3/FFFFFF?text=Aquabyte",
        "creator_handle": "watertrainer",
        "status": ProposalStatus.ACCEPTED,
        "upvotes": 24,
        "downvotes": 3,
        "type": CreatureType.WATER,
        "age": timedelta(days=7),
    },
    {
        "name": "FLAMELOX",
        "prompt": "A fox-like creature with fiery fur and ember-tipped tail that glows in the dark.",
        "image_url": "https://via.placeholder.com/400x300/FF5722/FFFFFF?text=Flamelox",
        "creator_handle": "flamecreator",
        "status": ProposalStatus.ACCEPTED,
        "upvotes": 42,
        "downvotes": 7,
        "type": CreatureType.FIRE,
        "age": timedelta(days=5),
    },
    {
        "name": "LEAFLET",
        "prompt": "A small plant-based creature with leaf-like appendages and flower buds on its back.",
        "image_url": "https://via.placeholder.com/400x300/4CAF50/FFFFFF?text=Leaflet",
        "creator_handle": "naturelover",
        "status": ProposalStatus.ACCEPTED,
        "upvotes": 18,
        "downvotes": 2,
        "type": CreatureType.GRASS,
        "age": timedelta(days=3),
    },
    {
        "name": "ZAPZAP",
        "prompt": "A small electric rodent with lightning bolt markings and static-charged fur.",
        "image_url": "https://via.placeholder.com/400x300/FFEB3B/212121?text=ZapZap",
        "creator_handle": "shockmaster",
        "status": ProposalStatus.ACCEPTED,
        "upvotes": 31,
        "downvotes": 5,
        "type": CreatureType.ELECTRIC,
        "age": timedelta(days=2),
    },
    {
        "name": "PSYCAT",
        "prompt": "A feline creature with glowing purple eyes and telepathic abilities.",
        "image_url": "https://via.placeholder.com/400x300/9C27B0/FFFFFF?text=PsyCat",
        "creator_handle": "mindmaster",
        "status": ProposalStatus.VOTING,
        "upvotes": 15,
        "downvotes": 2,
        "type": CreatureType.PSYCHIC,
        "age": timedelta(days=1),
    },
    {
        "name": "FROSTBITE",
        "prompt": "A small ice fox with crystals forming on its tail and ears.",
        "image_url": "https://via.placeholder.com/400x300/00BCD4/FFFFFF?text=Frostbite",
        "creator_handle": "icecaster",
        "status": ProposalStatus.VOTING,
        "upvotes": 12,
        "downvotes": 3,
        "type": CreatureType.ICE,
        "age": timedelta(hours=12),
    },
]

BASE_STATS: Dict[CreatureType, Dict[str, int]] = {
    CreatureType.FIRE: {"hp": 65, "attack": 85, "defense": 60, "speed": 90},
    CreatureType.WATER: {"hp": 70, "attack": 65, "defense": 80, "speed": 85},
    CreatureType.GRASS: {"hp": 75, "attack": 70, "defense": 75, "speed": 80},
    CreatureType.ELECTRIC: {"hp": 60, "attack": 75, "defense": 60, "speed": 95},
    CreatureType.PSYCHIC: {"hp": 65, "attack": 95, "defense": 60, "speed": 90},
    CreatureType.ICE: {"hp": 70, "attack": 80, "defense": 70, "speed": 80},
    CreatureType.GHOST: {"hp": 60, "attack": 85, "defense": 75, "speed": 85},
    CreatureType.NORMAL: {"hp": 75, "attack": 75, "defense": 75, "speed": 75},
}

TYPE_MOVES: Dict[CreatureType, List[tuple]] = {
    CreatureType.FIRE: [
        ("FIRE BREATH", 75, "Unleashes a powerful stream of fire at the opponent."),
        ("EMBER TAIL", 60, "Whips opponent with its ember-tipped tail, may cause burn."),
        ("HEAT WAVE", 85, "Creates a wave of intense heat that damages all opponents."),
    ],
    CreatureType.WATER: [
        ("WATER BLAST", 75, "Shoots a powerful jet of water at high pressure."),
        ("BUBBLE BEAM", 65, "Fires a stream of bubbles that may lower speed."),
        ("TIDAL CRASH", 85, "Summons a small tidal wave to crash into the opponent."),
    ],
    CreatureType.GRASS: [
        ("VINE WHIP", 70, "Strikes the opponent with vine-like appendages."),
        ("SEED BOMB", 80, "Launches explosive seeds that burst on impact."),
        ("PETAL DANCE", 90, "Unleashes a furious dance of petals, but causes confusion."),
    ],
    CreatureType.ELECTRIC: [
        ("THUNDER SHOCK", 75, "Zaps opponent with an electric jolt, may cause paralysis."),
        ("SPARK", 65, "Charges with electricity and tackles, may cause paralysis."),
        ("VOLT TACKLE", 90, "Powerful electric tackle that also damages the user."),
    ],
    CreatureType.PSYCHIC: [
        ("MIND BLAST", 75, "Emits a psychic shock wave that damages the opponent."),
        ("CONFUSION", 60, "Mentally assaults the foe, may cause confusion."),
        ("PSYCHIC WAVE", 85, "Sends a powerful psychic wave that may lower defense."),
    ],
    CreatureType.ICE: [
        ("ICE BEAM", 75, "Fires a freezing beam that may freeze the opponent."),
        ("FROST BITE", 65, "Bites with freezing fangs, may cause frostbite."),
        ("BLIZZARD", 90, "Summons a powerful snowstorm that hits all opponents."),
    ],
    CreatureType.GHOST: [
        ("SHADOW BALL", 75, "Hurls a shadowy blob that may lower defense."),
        ("PHANTOM FORCE", 85, "Disappears and strikes on the next turn."),
        ("SPIRIT SHACKLE", 80, "Stitches the opponent to their shadow, preventing escape."),
    ],
    CreatureType.NORMAL: [
        ("TACKLE", 50, "A physical attack in which the user charges and slams into the target."),
        ("QUICK ATTACK", 40, "An extremely fast attack that always strikes first."),
        ("HYPER BEAM", 95, "A powerful attack that requires rest afterward."),
    ],
}

QUICK_DASH = Move(
    name="QUICK DASH",
    type=CreatureType.NORMAL,
    power=40,
    pp=30,
    max_pp=30,
    description="Dashes at high speed to strike the opponent first.",
)

DEMO_STAT_FLOOR = 30


def demo_stats(creature_type: CreatureType, rng: random.Random) -> Stats:
    """Type base stats shifted by one shared variation in [-15, 14]."""
    variation = rng.randint(-15, 14)
    base = BASE_STATS[creature_type]
    return Stats(**{k: max(DEMO_STAT_FLOOR, min(100, v + variation)) for k, v in base.items()})


def demo_moves(creature_type: CreatureType) -> List[Move]:
    """Three signature moves (higher power, fewer PP) plus QUICK DASH."""
    moves = []
    for level, (name, power, description) in zip((1, 5, 10), TYPE_MOVES[creature_type]):
        pp = max(1, 130 // power)
        moves.append(
            Move(
                name=name,
                type=creature_type,
                power=power,
                pp=pp,
                max_pp=pp,
                category=MoveCategory.SPECIAL if creature_type != CreatureType.NORMAL else MoveCategory.PHYSICAL,
                description=description,
                level_learned=level,
            )
        )
    return moves + [QUICK_DASH.model_copy(update={"level_learned": 15})]


def seed_demo_data(
    db: DBManager, collection: CollectionService, rng: Optional[random.Random] = None
) -> int:
    """Insert the demo creatures unless the store already has proposals. Returns how many were added."""
    rng = rng or random.Random()
    if db.proposals.count() > 0:
        logger.info("Store already has Bitlings, skipping demo data.")
        return 0

    now = db.clock()
    with db.transaction():
        for demo in DEMO_BITLINGS:
            proposal = db.proposals.create(
                demo["name"],
                demo["prompt"],
                demo["image_url"],
                creator_handle=demo["creator_handle"],
                types=[demo["type"].value],
                created_at=now - demo["age"],
            )
            db.proposals.apply_vote_delta(proposal.id, demo["upvotes"], demo["downvotes"])
            db.proposals.set_status(proposal.id, demo["status"])

            if demo["status"] == ProposalStatus.ACCEPTED:
                db.stats.create(proposal.id, demo_stats(demo["type"], rng), demo_moves(demo["type"]))
                collection.materialize(collection.default_user_id, proposal.id)

    logger.info(f"Seeded {len(DEMO_BITLINGS)} demo Bitlings")
    return len(DEMO_BITLINGS)
