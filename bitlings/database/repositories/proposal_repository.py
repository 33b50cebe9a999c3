"""Repository for creature proposal operations."""

import json
import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Union

from bitlings.errors import NotFoundError, ValidationError
from bitlings.models.creature_type import CreatureType, ProposalStatus, MAX_TYPES_PER_CREATURE
from bitlings.models.proposal import Proposal, ProposalWithStats
from bitlings.models.stat_block import Move, Stats
from .base_repository import BaseRepository, to_timestamp

SORT_NEWEST = "newest"
SORT_TOP_RATED = "topRated"

# Largest value sqlite accepts for LIMIT/OFFSET
SQLITE_MAX_INT = 2**63 - 1

_ORDER_BY = {
    SORT_NEWEST: "p.created_at DESC, p.rowid DESC",
    SORT_TOP_RATED: "p.votes DESC, p.created_at DESC, p.rowid DESC",
}


def parse_types(types: Optional[Iterable[Union[str, CreatureType]]]) -> Optional[List[CreatureType]]:
    """Validate a caller-supplied type list. Duplicates collapse, order is kept."""
    if types is None:
        return None
    if isinstance(types, str):
        raise ValidationError("types must be a list")
    parsed: List[CreatureType] = []
    for raw in types:
        try:
            creature_type = CreatureType(raw)
        except ValueError:
            raise ValidationError(f"Unknown creature type: {raw!r}")
        if creature_type not in parsed:
            parsed.append(creature_type)
    if not parsed:
        raise ValidationError("types must contain at least one entry")
    if len(parsed) > MAX_TYPES_PER_CREATURE:
        raise ValidationError(f"A creature has at most {MAX_TYPES_PER_CREATURE} types")
    return parsed


def parse_status(status: Union[str, ProposalStatus]) -> ProposalStatus:
    try:
        return ProposalStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown status: {status!r}")


class ProposalRepository(BaseRepository):
    """Handles all proposal-related database operations."""

    _COLUMNS = """p.id, p.name, p.prompt, p.image_url, p.creator_handle, p.status,
                  p.upvotes, p.downvotes, p.votes, p.types, p.created_at, p.updated_at"""

    def create_table(self):
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS proposals (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                prompt TEXT NOT NULL,
                image_url TEXT NOT NULL,
                creator_handle TEXT,
                status TEXT NOT NULL DEFAULT 'proposed',
                upvotes INTEGER NOT NULL DEFAULT 0,
                downvotes INTEGER NOT NULL DEFAULT 0,
                votes INTEGER NOT NULL DEFAULT 0,
                types TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                CHECK (votes = upvotes - downvotes)
            );
            """
        )

    def _row_to_proposal(self, row) -> Proposal:
        data = dict(row)
        data["types"] = json.loads(data["types"]) if data["types"] else None
        return Proposal(**data)

    def create(
        self,
        name: str,
        prompt: str,
        image_url: Optional[str],
        creator_handle: Optional[str] = None,
        types: Optional[Iterable[str]] = None,
        created_at: Optional[datetime] = None,
    ) -> Proposal:
        """Create a new proposal in the `proposed` state with zeroed counters."""
        if not name or not name.strip():
            raise ValidationError("Name is required")
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required")
        if not image_url or not image_url.strip():
            raise ValidationError("Image URL is required")
        parsed_types = parse_types(types)

        proposal_id = str(uuid.uuid4())
        now = to_timestamp(created_at) if created_at else self._now()
        self._execute(
            """INSERT INTO proposals
               (id, name, prompt, image_url, creator_handle, status, types, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                proposal_id,
                name.strip(),
                prompt.strip(),
                image_url.strip(),
                creator_handle or None,
                ProposalStatus.PROPOSED.value,
                json.dumps([t.value for t in parsed_types]) if parsed_types else None,
                now,
                now,
            ),
        )
        return self.get_by_id(proposal_id)

    def get_by_id(self, proposal_id: str) -> Optional[Proposal]:
        row = self._fetchone(
            f"SELECT {self._COLUMNS} FROM proposals p WHERE p.id = ?", (proposal_id,)
        )
        return self._row_to_proposal(row) if row else None

    def require(self, proposal_id: str) -> Proposal:
        proposal = self.get_by_id(proposal_id)
        if proposal is None:
            raise NotFoundError(f"Bitling with ID {proposal_id} not found")
        return proposal

    def get_with_stats(self, proposal_id: str) -> Optional[ProposalWithStats]:
        """Proposal merged with its stat block; bare proposal when it has none."""
        row = self._fetchone(
            f"""SELECT {self._COLUMNS}, s.stats_json, s.moves_json,
                       s.description AS stats_description, s.behavior AS stats_behavior
                FROM proposals p
                LEFT JOIN bitling_stats s ON s.proposal_id = p.id
                WHERE p.id = ?""",
            (proposal_id,),
        )
        if not row:
            return None
        data = dict(row)
        stats_json = data.pop("stats_json")
        moves_json = data.pop("moves_json")
        description = data.pop("stats_description")
        behavior = data.pop("stats_behavior")
        base = self._row_to_proposal(data)
        if stats_json is None:
            return ProposalWithStats(**base.model_dump())
        return ProposalWithStats(
            **base.model_dump(),
            stats=Stats.model_validate_json(stats_json),
            moves=[Move(**m) for m in json.loads(moves_json)],
            description=description,
            behavior=behavior,
        )

    def list(
        self,
        status: Optional[Union[str, ProposalStatus]] = None,
        sort: str = SORT_NEWEST,
        page: int = 1,
        limit: int = 12,
    ) -> List[Proposal]:
        """1-indexed pagination. A page past the end is an empty list."""
        if sort not in _ORDER_BY:
            raise ValidationError(f"Unknown sort key: {sort!r}")
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        query = f"SELECT {self._COLUMNS} FROM proposals p"
        params: list = []
        if status is not None:
            query += " WHERE p.status = ?"
            params.append(parse_status(status).value)
        query += f" ORDER BY {_ORDER_BY[sort]} LIMIT ? OFFSET ?"
        offset = (page - 1) * limit
        if offset > SQLITE_MAX_INT:
            return []
        params.extend([min(limit, SQLITE_MAX_INT), offset])

        rows = self._fetchall(query, tuple(params))
        return [self._row_to_proposal(row) for row in rows]

    def leaderboard(self, since: Optional[datetime], limit: int) -> List[Proposal]:
        query = f"SELECT {self._COLUMNS} FROM proposals p"
        params: list = []
        if since is not None:
            query += " WHERE p.created_at >= ?"
            params.append(to_timestamp(since))
        query += f" ORDER BY {_ORDER_BY[SORT_TOP_RATED]} LIMIT ?"
        params.append(min(limit, SQLITE_MAX_INT))
        rows = self._fetchall(query, tuple(params))
        return [self._row_to_proposal(row) for row in rows]

    def set_types(self, proposal_id: str, types: Iterable[str]) -> Proposal:
        if types is None:
            raise ValidationError("types must contain at least one entry")
        parsed = parse_types(types)
        self.require(proposal_id)
        self._execute(
            "UPDATE proposals SET types = ?, updated_at = ? WHERE id = ?",
            (json.dumps([t.value for t in parsed]), self._now(), proposal_id),
        )
        return self.require(proposal_id)

    def set_status(self, proposal_id: str, status: Union[str, ProposalStatus]) -> Proposal:
        parsed = parse_status(status)
        self.require(proposal_id)
        self._execute(
            "UPDATE proposals SET status = ?, updated_at = ? WHERE id = ?",
            (parsed.value, self._now(), proposal_id),
        )
        return self.require(proposal_id)

    def apply_vote_delta(self, proposal_id: str, up_delta: int, down_delta: int) -> Proposal:
        """Shift the tallies; net votes always move with them."""
        cursor = self._execute(
            """UPDATE proposals
               SET upvotes = upvotes + ?, downvotes = downvotes + ?,
                   votes = votes + ?, updated_at = ?
               WHERE id = ?""",
            (up_delta, down_delta, up_delta - down_delta, self._now(), proposal_id),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"Bitling with ID {proposal_id} not found")
        return self.require(proposal_id)

    def count(self) -> int:
        row = self._fetchone("SELECT COUNT(*) AS n FROM proposals")
        return row["n"] if row else 0
