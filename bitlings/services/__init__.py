from bitlings.services.stats_generator import StatsGenerator
from bitlings.services.voting_service import VotingService
from bitlings.services.collection_service import CollectionService
from bitlings.services.proposal_service import ProposalService

__all__ = [
    "StatsGenerator",
    "VotingService",
    "CollectionService",
    "ProposalService",
]
