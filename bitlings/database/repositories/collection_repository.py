"""Repository for user collection entries."""

import json
import sqlite3
import uuid
from typing import Any, Dict, List, Optional

from bitlings.errors import ConflictError
from bitlings.models.collection_entry import CollectionEntry
from .base_repository import BaseRepository


class CollectionRepository(BaseRepository):
    """
    Collection rows keep a JSON snapshot of the creature instead of a foreign
    key, so they outlive edits to (or removal of) the source proposal.
    """

    def create_table(self):
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS collection (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                proposal_id TEXT NOT NULL,
                nickname TEXT,
                level INTEGER NOT NULL DEFAULT 1,
                experience INTEGER NOT NULL DEFAULT 0,
                is_rare INTEGER NOT NULL DEFAULT 0,
                captured_at TEXT NOT NULL,
                snapshot_json TEXT NOT NULL,
                UNIQUE (user_id, proposal_id)
            );
            """
        )

    def _row_to_entry(self, row) -> CollectionEntry:
        data = dict(row)
        snapshot = json.loads(data.pop("snapshot_json"))
        data["is_rare"] = bool(data["is_rare"])
        return CollectionEntry(**data, **snapshot)

    def create(
        self,
        user_id: str,
        proposal_id: str,
        snapshot: Dict[str, Any],
        level: int,
        experience: int,
        is_rare: bool,
        nickname: Optional[str] = None,
    ) -> CollectionEntry:
        entry_id = f"collection-{uuid.uuid4()}"
        try:
            self._execute(
                """INSERT INTO collection
                   (id, user_id, proposal_id, nickname, level, experience, is_rare, captured_at, snapshot_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    entry_id,
                    user_id,
                    proposal_id,
                    nickname,
                    level,
                    experience,
                    int(is_rare),
                    self._now(),
                    json.dumps(snapshot),
                ),
            )
        except sqlite3.IntegrityError:
            raise ConflictError(f"Bitling {proposal_id} is already in {user_id}'s collection")
        return self.get_by_id(entry_id)

    def get_by_id(self, entry_id: str) -> Optional[CollectionEntry]:
        row = self._fetchone("SELECT * FROM collection WHERE id = ?", (entry_id,))
        return self._row_to_entry(row) if row else None

    def exists(self, user_id: str, proposal_id: str) -> bool:
        row = self._fetchone(
            "SELECT 1 FROM collection WHERE user_id = ? AND proposal_id = ?",
            (user_id, proposal_id),
        )
        return row is not None

    def get_by_user(self, user_id: str) -> List[CollectionEntry]:
        rows = self._fetchall(
            """SELECT * FROM collection WHERE user_id = ?
               ORDER BY level DESC, captured_at DESC, rowid DESC""",
            (user_id,),
        )
        return [self._row_to_entry(row) for row in rows]
