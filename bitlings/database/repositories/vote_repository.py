"""Repository for vote operations."""

import sqlite3
import uuid
from typing import List, Optional

from bitlings.errors import ConflictError, NotFoundError
from bitlings.models.vote import Vote
from .base_repository import BaseRepository


class VoteRepository(BaseRepository):
    """One row per (voter_identity, proposal_id); a changed mind updates it in place."""

    def create_table(self):
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS votes (
                id TEXT PRIMARY KEY,
                proposal_id TEXT NOT NULL,
                voter_identity TEXT NOT NULL,
                user_id TEXT,
                value INTEGER NOT NULL CHECK (value IN (1, -1)),
                created_at TEXT NOT NULL,
                UNIQUE (voter_identity, proposal_id),
                FOREIGN KEY (proposal_id) REFERENCES proposals (id) ON DELETE CASCADE
            );
            """
        )

    def get_by_id(self, vote_id: str) -> Optional[Vote]:
        row = self._fetchone("SELECT * FROM votes WHERE id = ?", (vote_id,))
        return Vote(**dict(row)) if row else None

    def get_by_voter(self, voter_identity: str, proposal_id: str) -> Optional[Vote]:
        row = self._fetchone(
            "SELECT * FROM votes WHERE voter_identity = ? AND proposal_id = ?",
            (voter_identity, proposal_id),
        )
        return Vote(**dict(row)) if row else None

    def get_by_proposal(self, proposal_id: str) -> List[Vote]:
        rows = self._fetchall(
            "SELECT * FROM votes WHERE proposal_id = ? ORDER BY created_at",
            (proposal_id,),
        )
        return [Vote(**dict(row)) for row in rows]

    def create(
        self, proposal_id: str, voter_identity: str, value: int, user_id: Optional[str] = None
    ) -> Vote:
        vote_id = str(uuid.uuid4())
        try:
            self._execute(
                """INSERT INTO votes (id, proposal_id, voter_identity, user_id, value, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (vote_id, proposal_id, voter_identity, user_id, value, self._now()),
            )
        except sqlite3.IntegrityError:
            raise ConflictError(f"{voter_identity} already has a vote on {proposal_id}")
        return self.get_by_id(vote_id)

    def update_value(self, vote_id: str, value: int) -> Vote:
        cursor = self._execute("UPDATE votes SET value = ? WHERE id = ?", (value, vote_id))
        if cursor.rowcount == 0:
            raise NotFoundError(f"Vote with ID {vote_id} not found")
        return self.get_by_id(vote_id)
