"""Repository for stat block operations."""

import json
import sqlite3
import uuid
from typing import List, Optional

from bitlings.errors import ConflictError, NotFoundError
from bitlings.models.stat_block import Move, StatBlock, Stats
from .base_repository import BaseRepository


class StatsRepository(BaseRepository):
    """At most one stat block per proposal, enforced by a UNIQUE column."""

    def create_table(self):
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS bitling_stats (
                id TEXT PRIMARY KEY,
                proposal_id TEXT NOT NULL UNIQUE,
                stats_json TEXT NOT NULL,
                moves_json TEXT NOT NULL,
                description TEXT,
                behavior TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (proposal_id) REFERENCES proposals (id) ON DELETE CASCADE
            );
            """
        )

    def _row_to_stat_block(self, row) -> StatBlock:
        data = dict(row)
        return StatBlock(
            id=data["id"],
            proposal_id=data["proposal_id"],
            stats=Stats.model_validate_json(data["stats_json"]),
            moves=[Move(**m) for m in json.loads(data["moves_json"])],
            description=data["description"],
            behavior=data["behavior"],
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )

    def _ensure_proposal(self, proposal_id: str):
        row = self._fetchone("SELECT id FROM proposals WHERE id = ?", (proposal_id,))
        if not row:
            raise NotFoundError(f"Bitling with ID {proposal_id} not found")

    def create(
        self,
        proposal_id: str,
        stats: Stats,
        moves: List[Move],
        description: Optional[str] = None,
        behavior: Optional[str] = None,
    ) -> StatBlock:
        self._ensure_proposal(proposal_id)
        if self.get(proposal_id) is not None:
            raise ConflictError("Bitling already has stats")

        now = self._now()
        try:
            self._execute(
                """INSERT INTO bitling_stats
                   (id, proposal_id, stats_json, moves_json, description, behavior, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    str(uuid.uuid4()),
                    proposal_id,
                    stats.model_dump_json(),
                    json.dumps([m.model_dump(mode="json") for m in moves]),
                    description,
                    behavior,
                    now,
                    now,
                ),
            )
        except sqlite3.IntegrityError:
            raise ConflictError("Bitling already has stats")
        return self.get(proposal_id)

    def get(self, proposal_id: str) -> Optional[StatBlock]:
        row = self._fetchone(
            "SELECT * FROM bitling_stats WHERE proposal_id = ?", (proposal_id,)
        )
        return self._row_to_stat_block(row) if row else None

    def replace(
        self,
        proposal_id: str,
        stats: Stats,
        moves: List[Move],
        description: Optional[str] = None,
        behavior: Optional[str] = None,
    ) -> StatBlock:
        """Full replacement of an existing stat block. Collection snapshots are untouched."""
        cursor = self._execute(
            """UPDATE bitling_stats
               SET stats_json = ?, moves_json = ?, description = ?, behavior = ?, updated_at = ?
               WHERE proposal_id = ?""",
            (
                stats.model_dump_json(),
                json.dumps([m.model_dump(mode="json") for m in moves]),
                description,
                behavior,
                self._now(),
                proposal_id,
            ),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"No stats for Bitling {proposal_id}")
        return self.get(proposal_id)
