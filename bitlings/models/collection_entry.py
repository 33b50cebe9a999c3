from datetime import datetime
from typing import List, Optional
from pydantic import Field

from bitlings.models.base import CamelModel
from bitlings.models.creature_type import CreatureType
from bitlings.models.stat_block import Move, Stats


class CollectionEntry(CamelModel):
    """
    A user's own copy of an accepted creature.

    name/types/image_url/stats/moves are a snapshot taken at capture time and
    do not follow later edits of the source proposal.
    """

    id: str
    user_id: str
    proposal_id: str
    nickname: Optional[str] = None
    level: int = Field(1, ge=1)
    experience: int = Field(0, ge=0)
    is_rare: bool = False
    captured_at: datetime

    name: str
    types: Optional[List[CreatureType]] = None
    image_url: str
    stats: Optional[Stats] = None
    moves: List[Move] = Field(default_factory=list)


class CollectionStats(CamelModel):
    total: int
    distinct_type_count: int
    rare_count: int
    completion_percentage: int
