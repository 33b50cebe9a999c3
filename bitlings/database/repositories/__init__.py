from .base_repository import BaseRepository
from .proposal_repository import ProposalRepository
from .stats_repository import StatsRepository
from .vote_repository import VoteRepository
from .collection_repository import CollectionRepository

__all__ = [
    "BaseRepository",
    "ProposalRepository",
    "StatsRepository",
    "VoteRepository",
    "CollectionRepository",
]
