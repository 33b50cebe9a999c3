from typing import List
from pydantic import Field

from bitlings.models.base import CamelModel
from bitlings.models.creature_type import CreatureType, MAX_TYPES_PER_CREATURE
from bitlings.models.stat_block import Move, Stats


class GeneratedBundle(CamelModel):
    """Game-ready output of stats generation, after repair."""

    types: List[CreatureType] = Field(
        ...,
        min_length=1,
        max_length=MAX_TYPES_PER_CREATURE,
        description="Primary type first, optional secondary type.",
    )
    stats: Stats = Field(..., description="Base stats for a level 1 creature.")
    moves: List[Move] = Field(
        ...,
        min_length=1,
        description="Moves ordered by the level they are learned at.",
    )
    description: str = Field(..., description="One or two sentences based on appearance.")
    behavior: str = Field(..., description="How the creature behaves in its natural habitat.")
