import logging
import random
from dataclasses import dataclass
from typing import Optional

from bitlings.config import Settings
from bitlings.database.db_manager import DBManager
from bitlings.database.seed import seed_demo_data
from bitlings.llm.factory import build_connector
from bitlings.llm.llm_connector import LLMConnector
from bitlings.services.collection_service import CollectionService
from bitlings.services.proposal_service import ProposalService
from bitlings.services.stats_generator import StatsGenerator
from bitlings.services.voting_service import VotingService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    db: DBManager
    generator: StatsGenerator
    proposals: ProposalService
    voting: VotingService
    collection: CollectionService

    def close(self):
        self.db.close()


def build_services(
    settings: Settings,
    db: Optional[DBManager] = None,
    llm: Optional[LLMConnector] = None,
    rng: Optional[random.Random] = None,
) -> Services:
    """
    Wire the store and services once per process. An explicit `llm` wins over
    the configured provider.
    """
    db = db or DBManager(settings.db_path)
    db.create_tables()

    if llm is None:
        try:
            llm = build_connector(settings)
        except ValueError as e:
            logger.warning(f"Stats generation disabled: {e}")

    generator = StatsGenerator(llm)
    collection = CollectionService(
        db,
        rng=rng,
        creatures_per_type=settings.creatures_per_type,
        default_user_id=settings.default_user_id,
    )
    voting = VotingService(db, approval_threshold=settings.approval_threshold)
    voting.add_promotion_listener(collection.on_promoted)

    if settings.seed_demo:
        seed_demo_data(db, collection, rng)

    return Services(
        db=db,
        generator=generator,
        proposals=ProposalService(db, generator),
        voting=voting,
        collection=collection,
    )
