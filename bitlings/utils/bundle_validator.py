"""
Bundle Validator
================
Repairs whatever the generative model returned into a `GeneratedBundle`.

The model is asked for JSON shaped like:
    {"types": [...], "stats": {...}, "moves": [...], "description": str, "behavior": str}

Nothing it sends is trusted:
1. Unparseable text or a non-object becomes the default bundle
2. Missing sections are replaced with fixed defaults
3. Numbers are rounded and clamped into range; non-numbers get the field default
4. Unknown enum values fall back to a safe member

repair_bundle() never raises.
"""

import json
import logging
import math
from typing import Any, Dict, List, Optional

from bitlings.llm.schemas import GeneratedBundle
from bitlings.models.creature_type import CreatureType, MoveCategory, MAX_TYPES_PER_CREATURE
from bitlings.models.stat_block import (
    Move,
    Stats,
    STAT_MIN,
    STAT_MAX,
    MOVE_POWER_MIN,
    MOVE_POWER_MAX,
    ACCURACY_MIN,
    ACCURACY_MAX,
    PP_MIN,
    PP_MAX,
    LEVEL_LEARNED_MIN,
    LEVEL_LEARNED_MAX,
)

logger = logging.getLogger(__name__)

DEFAULT_TYPES = [CreatureType.NORMAL]
DEFAULT_STAT_VALUE = 40
DEFAULT_STATS = {"hp": 40, "attack": 40, "defense": 40, "speed": 40}
DEFAULT_DESCRIPTION = "A mysterious creature with unknown origins."
DEFAULT_BEHAVIOR = "Behaves cautiously around strangers but is friendly once it trusts you."
DEFAULT_MOVE = {
    "name": "Tackle",
    "type": "normal",
    "power": 40,
    "accuracy": 100,
    "pp": 35,
    "max_pp": 35,
    "description": "A physical attack in which the user charges and slams into the target with its whole body.",
    "category": "physical",
    "level_learned": 1,
}

# Per-field fallbacks for a move that came back partially filled in
MOVE_FIELD_DEFAULTS = {
    "power": 0,
    "accuracy": 100,
    "pp": 10,
    "level_learned": 1,
}


# =============================================================================
# SCALAR HELPERS
# =============================================================================

def coerce_int(value: Any, default: int, low: int, high: int) -> int:
    """
    Round a numeric value into [low, high].
    Booleans, NaN/inf and non-numeric strings yield `default`.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if not isinstance(value, (int, float)):
        return default
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        value = int(round(value))
    return max(low, min(high, value))


def _clean_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _first(data: Dict[str, Any], *keys: str) -> Any:
    """The model mixes camelCase and snake_case; take whichever is present."""
    for key in keys:
        if key in data:
            return data[key]
    return None


# =============================================================================
# SECTION REPAIRS
# =============================================================================

def repair_types(raw: Any) -> List[CreatureType]:
    if not isinstance(raw, list):
        return list(DEFAULT_TYPES)
    types: List[CreatureType] = []
    for entry in raw:
        if not isinstance(entry, str):
            continue
        try:
            creature_type = CreatureType(entry.strip().lower())
        except ValueError:
            logger.debug(f"Dropping unknown creature type {entry!r}")
            continue
        if creature_type not in types:
            types.append(creature_type)
    return types[:MAX_TYPES_PER_CREATURE] or list(DEFAULT_TYPES)


def repair_stats(raw: Any) -> Stats:
    if not isinstance(raw, dict):
        return Stats(**DEFAULT_STATS)
    return Stats(
        **{
            name: coerce_int(raw.get(name), DEFAULT_STAT_VALUE, STAT_MIN, STAT_MAX)
            for name in DEFAULT_STATS
        }
    )


def repair_move(raw: Any, fallback_type: CreatureType) -> Optional[Move]:
    """A usable move needs at least a name; everything else has a default."""
    if not isinstance(raw, dict):
        return None
    name = _clean_text(raw.get("name"))
    if name is None:
        return None

    try:
        move_type = CreatureType(str(raw.get("type", "")).strip().lower())
    except ValueError:
        move_type = fallback_type

    try:
        category = MoveCategory(str(raw.get("category", "")).strip().lower())
    except ValueError:
        category = MoveCategory.PHYSICAL

    power = coerce_int(raw.get("power"), MOVE_FIELD_DEFAULTS["power"], MOVE_POWER_MIN, MOVE_POWER_MAX)
    if category == MoveCategory.STATUS:
        power = 0

    pp = coerce_int(raw.get("pp"), MOVE_FIELD_DEFAULTS["pp"], PP_MIN, PP_MAX)
    max_pp = coerce_int(_first(raw, "maxPp", "max_pp"), pp, PP_MIN, PP_MAX)

    return Move(
        name=name,
        type=move_type,
        power=power,
        accuracy=coerce_int(
            raw.get("accuracy"), MOVE_FIELD_DEFAULTS["accuracy"], ACCURACY_MIN, ACCURACY_MAX
        ),
        pp=pp,
        max_pp=max(pp, max_pp),
        category=category,
        description=_clean_text(raw.get("description")) or "",
        level_learned=coerce_int(
            _first(raw, "levelLearned", "level_learned"),
            MOVE_FIELD_DEFAULTS["level_learned"],
            LEVEL_LEARNED_MIN,
            LEVEL_LEARNED_MAX,
        ),
    )


def repair_moves(raw: Any, fallback_type: CreatureType = CreatureType.NORMAL) -> List[Move]:
    if not isinstance(raw, list):
        return [Move(**DEFAULT_MOVE)]
    moves = [m for m in (repair_move(entry, fallback_type) for entry in raw) if m is not None]
    if not moves:
        return [Move(**DEFAULT_MOVE)]
    # sorted() is stable, so moves sharing a level keep the model's order
    return sorted(moves, key=lambda m: m.level_learned)


# =============================================================================
# ENTRY POINTS
# =============================================================================

def default_bundle() -> GeneratedBundle:
    return GeneratedBundle(
        types=list(DEFAULT_TYPES),
        stats=Stats(**DEFAULT_STATS),
        moves=[Move(**DEFAULT_MOVE)],
        description=DEFAULT_DESCRIPTION,
        behavior=DEFAULT_BEHAVIOR,
    )


def repair_bundle_data(data: Any) -> GeneratedBundle:
    """Repair an already-decoded payload."""
    if not isinstance(data, dict):
        logger.warning(f"Generated bundle is not an object ({type(data).__name__}), using defaults.")
        return default_bundle()

    missing = [key for key in ("types", "stats", "moves", "description", "behavior") if not data.get(key)]
    if missing:
        logger.warning(f"Generated bundle missing {missing}, substituting defaults.")

    types = repair_types(data.get("types"))
    return GeneratedBundle(
        types=types,
        stats=repair_stats(data.get("stats")),
        moves=repair_moves(data.get("moves"), fallback_type=types[0]),
        description=_clean_text(data.get("description")) or DEFAULT_DESCRIPTION,
        behavior=_clean_text(data.get("behavior")) or DEFAULT_BEHAVIOR,
    )


def repair_bundle(raw_text: Optional[str]) -> GeneratedBundle:
    """Repair raw model text."""
    try:
        data = json.loads(raw_text) if raw_text else None
    except (json.JSONDecodeError, TypeError) as e:
        logger.error(f"Error parsing generated bundle: {e}")
        logger.error(f"Raw content: {raw_text}")
        return default_bundle()
    return repair_bundle_data(data)
