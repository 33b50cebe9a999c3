import logging
import random
from typing import List, Optional, Tuple

from bitlings.database.db_manager import DBManager
from bitlings.errors import ConflictError, ValidationError
from bitlings.models.collection_entry import CollectionEntry, CollectionStats
from bitlings.models.creature_type import CreatureType
from bitlings.models.proposal import Proposal

logger = logging.getLogger(__name__)

CREATURES_PER_TYPE = 5
LEVEL_RANGE = (5, 15)
RARE_CHANCE = 0.2
EXPERIENCE_PER_LEVEL = 100


class CollectionService:
    """
    Materializes accepted creatures into per-user collections and summarizes
    them. Entries are snapshot copies of the proposal and its stat block.
    """

    def __init__(
        self,
        db: DBManager,
        rng: Optional[random.Random] = None,
        creatures_per_type: int = CREATURES_PER_TYPE,
        level_range: Tuple[int, int] = LEVEL_RANGE,
        rare_chance: float = RARE_CHANCE,
        default_user_id: str = "demo-user-id",
    ):
        self.db = db
        self.rng = rng or random.Random()
        self.total_possible = len(CreatureType) * creatures_per_type
        self.level_range = level_range
        self.rare_chance = rare_chance
        self.default_user_id = default_user_id

    def materialize(
        self, user_id: str, proposal_id: str, nickname: Optional[str] = None
    ) -> CollectionEntry:
        """Copy a proposal (and its stats, when it has them) into a user's collection."""
        if not user_id:
            raise ValidationError("Missing user id")

        with self.db.transaction():
            proposal = self.db.proposals.require(proposal_id)
            if self.db.collection.exists(user_id, proposal_id):
                raise ConflictError(f"{proposal.name} is already in this collection")

            stat_block = self.db.stats.get(proposal_id)
            snapshot = {
                "name": proposal.name,
                "types": [t.value for t in proposal.types] if proposal.types else None,
                "image_url": proposal.image_url,
                "stats": stat_block.stats.model_dump() if stat_block else None,
                "moves": [m.model_dump(mode="json") for m in stat_block.moves] if stat_block else [],
            }
            level = self.rng.randint(*self.level_range)
            entry = self.db.collection.create(
                user_id=user_id,
                proposal_id=proposal_id,
                snapshot=snapshot,
                level=level,
                experience=level * EXPERIENCE_PER_LEVEL,
                is_rare=self.rng.random() < self.rare_chance,
                nickname=nickname,
            )

        logger.info(
            f"{proposal.name} joined {user_id}'s collection at level {entry.level}"
            f"{' (rare)' if entry.is_rare else ''}"
        )
        return entry

    def on_promoted(self, proposal: Proposal):
        """Promotion listener: the creator (or the default user) receives the creature."""
        user_id = proposal.creator_handle or self.default_user_id
        if self.db.collection.exists(user_id, proposal.id):
            logger.debug(f"{proposal.id} already collected by {user_id}")
            return
        self.materialize(user_id, proposal.id)

    def get_collection(self, user_id: str) -> List[CollectionEntry]:
        """Highest level first."""
        return self.db.collection.get_by_user(user_id)

    def get_collection_stats(self, user_id: str) -> CollectionStats:
        entries = self.get_collection(user_id)
        distinct_types = set()
        for entry in entries:
            distinct_types.update(entry.types or [])
        return CollectionStats(
            total=len(entries),
            distinct_type_count=len(distinct_types),
            rare_count=sum(1 for entry in entries if entry.is_rare),
            completion_percentage=(len(entries) * 100) // self.total_possible,
        )
