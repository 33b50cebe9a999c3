from enum import Enum


class CreatureType(str, Enum):
    FIRE = "fire"
    WATER = "water"
    GRASS = "grass"
    ELECTRIC = "electric"
    PSYCHIC = "psychic"
    ICE = "ice"
    GHOST = "ghost"
    NORMAL = "normal"


class ProposalStatus(str, Enum):
    PROPOSED = "proposed"
    VOTING = "voting"
    ACCEPTED = "accepted"
    IN_GAME = "inGame"  # reserved, nothing transitions into it yet


class MoveCategory(str, Enum):
    PHYSICAL = "physical"
    SPECIAL = "special"
    STATUS = "status"


MAX_TYPES_PER_CREATURE = 2
