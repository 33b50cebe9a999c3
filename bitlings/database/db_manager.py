import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Optional

from bitlings.database.repositories import (
    ProposalRepository,
    StatsRepository,
    VoteRepository,
    CollectionRepository,
)
from bitlings.database.repositories.base_repository import utc_now

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class DBManager:
    """
    Connection manager with repository-based access.

    The default ":memory:" database lives as long as the manager; a file path
    gives the same interface backed by disk.

    Usage:
        with DBManager() as db:
            db.create_tables()
            proposal = db.proposals.create("AQUABYTE", "A sleek aquatic creature", url)
    """

    def __init__(self, db_path: str = MEMORY_DB, clock: Callable[[], datetime] = utc_now):
        self.db_path = db_path
        self.clock = clock
        self.conn: Optional[sqlite3.Connection] = None
        # Serializes every use of the shared connection across request threads.
        self.lock = threading.RLock()
        self._tx_depth = 0

        # Repositories (initialized in open())
        self.proposals: Optional[ProposalRepository] = None
        self.stats: Optional[StatsRepository] = None
        self.votes: Optional[VoteRepository] = None
        self.collection: Optional[CollectionRepository] = None

    def open(self) -> "DBManager":
        if self.conn is not None:
            return self
        # Autocommit mode; multi-statement writes go through transaction().
        self.conn = sqlite3.connect(
            self.db_path, timeout=30.0, isolation_level=None, check_same_thread=False
        )
        if self.db_path != MEMORY_DB:
            self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.execute("PRAGMA foreign_keys=ON;")
        self.conn.row_factory = sqlite3.Row

        self.proposals = ProposalRepository(self.conn, self.lock, self.clock)
        self.stats = StatsRepository(self.conn, self.lock, self.clock)
        self.votes = VoteRepository(self.conn, self.lock, self.clock)
        self.collection = CollectionRepository(self.conn, self.lock, self.clock)
        logger.debug(f"Opened store at {self.db_path}")
        return self

    def close(self):
        with self.lock:
            if self.conn:
                self.conn.close()
                self.conn = None
                logger.debug(f"Closed store at {self.db_path}")

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @contextmanager
    def transaction(self):
        """
        All-or-nothing scope for multi-statement writes. Re-entrant: only the
        outermost scope issues BEGIN/COMMIT/ROLLBACK. Holds the connection lock
        for its whole duration.
        """
        with self.lock:
            outermost = self._tx_depth == 0
            if outermost:
                self.conn.execute("BEGIN IMMEDIATE")
            self._tx_depth += 1
            try:
                yield self
            except BaseException:
                self._tx_depth -= 1
                if outermost:
                    self.conn.execute("ROLLBACK")
                raise
            self._tx_depth -= 1
            if outermost:
                self.conn.execute("COMMIT")

    def create_tables(self):
        """Initialize all database tables."""
        self.open()
        repositories = [
            self.proposals,
            self.stats,
            self.votes,
            self.collection,
        ]
        for repo in repositories:
            repo.create_table()
        self._create_indexes()

    def _create_indexes(self):
        with self.lock:
            self.conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_proposals_status ON proposals(status);"
            )
            self.conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_proposals_created_at ON proposals(created_at);"
            )
            self.conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_collection_user_id ON collection(user_id);"
            )
