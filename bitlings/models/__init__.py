from bitlings.models.creature_type import CreatureType, ProposalStatus, MoveCategory
from bitlings.models.stat_block import Stats, Move, StatBlock
from bitlings.models.proposal import Proposal, ProposalWithStats
from bitlings.models.vote import Vote, VoteResult
from bitlings.models.collection_entry import CollectionEntry, CollectionStats
from bitlings.models.message import Message

__all__ = [
    "CreatureType",
    "ProposalStatus",
    "MoveCategory",
    "Stats",
    "Move",
    "StatBlock",
    "Proposal",
    "ProposalWithStats",
    "Vote",
    "VoteResult",
    "CollectionEntry",
    "CollectionStats",
    "Message",
]
