"""
Gameplay numbers for a creature: the four base stats plus its move list.
Range constants live here so the repair step and the models agree.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import Field

from bitlings.models.base import CamelModel
from bitlings.models.creature_type import CreatureType, MoveCategory

STAT_MIN, STAT_MAX = 1, 100
MOVE_POWER_MIN, MOVE_POWER_MAX = 0, 120
ACCURACY_MIN, ACCURACY_MAX = 0, 100
PP_MIN, PP_MAX = 1, 64
LEVEL_LEARNED_MIN, LEVEL_LEARNED_MAX = 1, 36


class Stats(CamelModel):
    hp: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    attack: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    defense: int = Field(..., ge=STAT_MIN, le=STAT_MAX)
    speed: int = Field(..., ge=STAT_MIN, le=STAT_MAX)


class Move(CamelModel):
    name: str = Field(..., min_length=1)
    type: CreatureType = CreatureType.NORMAL
    power: int = Field(0, ge=MOVE_POWER_MIN, le=MOVE_POWER_MAX, description="0 for status moves.")
    accuracy: int = Field(100, ge=ACCURACY_MIN, le=ACCURACY_MAX)
    pp: int = Field(10, ge=PP_MIN, le=PP_MAX)
    max_pp: int = Field(10, ge=PP_MIN, le=PP_MAX)
    category: MoveCategory = MoveCategory.PHYSICAL
    description: str = ""
    level_learned: int = Field(1, ge=LEVEL_LEARNED_MIN, le=LEVEL_LEARNED_MAX)


class StatBlock(CamelModel):
    """One per proposal. Replaced wholesale, never patched."""

    id: str
    proposal_id: str
    stats: Stats
    moves: List[Move] = Field(default_factory=list)
    description: Optional[str] = None
    behavior: Optional[str] = None
    created_at: datetime
    updated_at: datetime
