"""Base repository for database operations."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
import sqlite3
import threading
from typing import Callable, List, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_timestamp(moment: datetime) -> str:
    """Fixed-width ISO-8601 in UTC so text ordering matches time ordering."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds")


class BaseRepository(ABC):
    """Base class for all repositories with common DB operations."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        lock: threading.RLock,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.conn = connection
        self.lock = lock
        self.clock = clock

    @abstractmethod
    def create_table(self):
        """
        Creates the necessary table(s) for this repository.
        This method should be implemented by all subclasses.
        """
        pass

    def _now(self) -> str:
        return to_timestamp(self.clock())

    def _execute(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute a query and return cursor."""
        with self.lock:
            return self.conn.execute(query, params)

    def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute and fetch one result."""
        with self.lock:
            return self.conn.execute(query, params).fetchone()

    def _fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        """Execute and fetch all results."""
        with self.lock:
            return self.conn.execute(query, params).fetchall()
