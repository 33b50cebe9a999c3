import logging
from typing import Any, Iterable, List, Optional, Union

from bitlings.database.db_manager import DBManager
from bitlings.errors import ConflictError, NotFoundError
from bitlings.llm.schemas import GeneratedBundle
from bitlings.models.creature_type import ProposalStatus
from bitlings.models.proposal import Proposal, ProposalWithStats
from bitlings.services.stats_generator import StatsGenerator
from bitlings.utils.bundle_validator import repair_bundle_data

logger = logging.getLogger(__name__)


class ProposalService:
    """Submission, lookup, listing and stat generation for creature proposals."""

    def __init__(self, db: DBManager, generator: StatsGenerator):
        self.db = db
        self.generator = generator

    def submit(
        self,
        name: str,
        prompt: str,
        image_url: Optional[str],
        creator_handle: Optional[str] = None,
        types: Optional[Iterable[str]] = None,
        stats: Optional[Any] = None,
        moves: Optional[Any] = None,
        description: Optional[str] = None,
        behavior: Optional[str] = None,
    ) -> ProposalWithStats:
        """
        Create a proposal. When the client sends a full bundle (stats and
        moves), it goes through the same repair step as model output and is
        stored with the proposal in one transaction.
        """
        with self.db.transaction():
            proposal = self.db.proposals.create(
                name, prompt, image_url, creator_handle=creator_handle, types=types
            )
            if stats is not None and moves is not None:
                bundle = repair_bundle_data(
                    {
                        "types": list(types) if types else None,
                        "stats": stats,
                        "moves": moves,
                        "description": description,
                        "behavior": behavior,
                    }
                )
                self._store_bundle(proposal.id, bundle, set_types=not types)

        logger.info(f"Bitling '{proposal.name}' submitted ({proposal.id})")
        return self.get(proposal.id)

    def get(self, proposal_id: str) -> ProposalWithStats:
        proposal = self.db.proposals.get_with_stats(proposal_id)
        if proposal is None:
            raise NotFoundError("Bitling not found")
        return proposal

    def list(
        self,
        status: Optional[Union[str, ProposalStatus]] = None,
        sort: str = "newest",
        page: int = 1,
        limit: int = 12,
    ) -> List[Proposal]:
        return self.db.proposals.list(status=status, sort=sort, page=page, limit=limit)

    def generate_stats(self, proposal_id: str) -> GeneratedBundle:
        """
        Generate and persist stats for a proposal that has none yet.
        The model call happens outside the store lock; a concurrent request
        that persisted first turns this one into a ConflictError.
        """
        proposal = self.db.proposals.require(proposal_id)
        if self.db.stats.get(proposal_id) is not None:
            raise ConflictError("Bitling already has stats")

        bundle = self.generator.generate(proposal.name, proposal.prompt, proposal.image_url)

        with self.db.transaction():
            self._store_bundle(proposal_id, bundle, set_types=True)
        logger.info(f"Stats generated for '{proposal.name}' ({proposal_id})")
        return bundle

    def _store_bundle(self, proposal_id: str, bundle: GeneratedBundle, set_types: bool):
        self.db.stats.create(
            proposal_id,
            bundle.stats,
            bundle.moves,
            description=bundle.description,
            behavior=bundle.behavior,
        )
        if set_types:
            self.db.proposals.set_types(proposal_id, [t.value for t in bundle.types])
