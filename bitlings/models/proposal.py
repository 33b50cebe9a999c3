from datetime import datetime
from typing import List, Optional
from pydantic import Field

from bitlings.models.base import CamelModel
from bitlings.models.creature_type import CreatureType, ProposalStatus, MAX_TYPES_PER_CREATURE
from bitlings.models.stat_block import Move, Stats


class Proposal(CamelModel):
    """A user-submitted creature (a Bitling) and its community tally."""

    id: str
    name: str
    prompt: str = Field(..., description="Free-text description the creature was generated from.")
    image_url: str
    creator_handle: Optional[str] = None
    status: ProposalStatus = ProposalStatus.PROPOSED
    upvotes: int = 0
    downvotes: int = 0
    votes: int = Field(0, description="Net votes: upvotes - downvotes.")
    types: Optional[List[CreatureType]] = Field(
        None, min_length=1, max_length=MAX_TYPES_PER_CREATURE
    )
    created_at: datetime
    updated_at: datetime


class ProposalWithStats(Proposal):
    stats: Optional[Stats] = None
    moves: Optional[List[Move]] = None
    description: Optional[str] = None
    behavior: Optional[str] = None
