"""
Counter storage - persistent per-user tallies for leaderboard features.

One SQLite table holds every named counter. Each operation opens its own
connection and runs inside a single IMMEDIATE transaction, so concurrent
read-modify-write sequences for the same (counter, user) pair serialize.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .constants import LEADERBOARD_SIZE

logger = logging.getLogger("mysteriousbot.counter")

SCHEMA = """
CREATE TABLE IF NOT EXISTS counters (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    counter TEXT NOT NULL,
    user_id INTEGER NOT NULL,
    count INTEGER NOT NULL DEFAULT 0,
    CONSTRAINT one_count_per_user UNIQUE (counter, user_id)
)
"""


class CounterError(RuntimeError):
    pass


class CounterStore:
    """
    Owns the SQLite database and hands out named counters.

    ":memory:" is supported for tests; in that case a single shared
    connection is kept and guarded by a lock.
    """

    def __init__(self, path: Union[str, Path], timeout: float = 30.0) -> None:
        self.path = str(path)
        self.timeout = timeout
        self._memory = self.path == ":memory:"
        self._shared: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def open(self) -> None:
        """Create the database file and schema."""
        try:
            if not self._memory:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            else:
                self._shared = sqlite3.connect(
                    self.path, check_same_thread=False, isolation_level=None
                )
            with self._transaction() as conn:
                conn.execute(SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise CounterError(f"cannot open {self.path}: {exc}") from exc
        logger.info("Counter store ready at %s", self.path)

    def close(self) -> None:
        if self._shared is not None:
            self._shared.close()
            self._shared = None

    def counter(self, name: str) -> "Counter":
        return Counter(self, name)

    # ─── Transactions ─────────────────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        if self._shared is not None:
            return self._shared
        # isolation_level=None so BEGIN/COMMIT are issued explicitly
        return sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)

    def _transaction(self) -> "_Transaction":
        return _Transaction(self)

    def run(self, fn, *args):
        """Run fn(conn, *args) inside one transaction."""
        try:
            with self._transaction() as conn:
                return fn(conn, *args)
        except sqlite3.Error as exc:
            raise CounterError(str(exc)) from exc


class _Transaction:
    def __init__(self, store: CounterStore) -> None:
        self.store = store
        self.conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> sqlite3.Connection:
        if self.store._shared is not None:
            self.store._lock.acquire()
        try:
            self.conn = self.store._connect()
            self.conn.execute("BEGIN IMMEDIATE")
        except BaseException:
            self._release()
            raise
        return self.conn

    def __exit__(self, exc_type, exc, tb) -> None:
        assert self.conn is not None
        try:
            if exc_type is None:
                self.conn.execute("COMMIT")
            else:
                self.conn.execute("ROLLBACK")
        finally:
            self._release()

    def _release(self) -> None:
        if self.store._shared is not None:
            self.store._lock.release()
        elif self.conn is not None:
            self.conn.close()


def _get_count(conn: sqlite3.Connection, counter: str, user_id: int) -> int:
    row = conn.execute(
        "SELECT count FROM counters WHERE counter = ? AND user_id = ? LIMIT 1",
        (counter, user_id),
    ).fetchone()
    return int(row[0]) if row else 0


def _set_count(conn: sqlite3.Connection, counter: str, user_id: int, count: int) -> None:
    conn.execute(
        "INSERT INTO counters (counter, user_id, count) VALUES (?, ?, ?) "
        "ON CONFLICT(counter, user_id) DO UPDATE SET count = excluded.count",
        (counter, user_id, count),
    )


def _add(conn: sqlite3.Connection, counter: str, user_id: int, delta: int) -> int:
    count = max(0, _get_count(conn, counter, user_id) + delta)
    _set_count(conn, counter, user_id, count)
    return count


def _top(conn: sqlite3.Connection, counter: str, limit: int) -> List[Tuple[int, int]]:
    rows = conn.execute(
        "SELECT user_id, count FROM counters WHERE counter = ? "
        "ORDER BY count DESC, user_id ASC LIMIT ?",
        (counter, limit),
    ).fetchall()
    return [(int(user_id), int(count)) for user_id, count in rows]


def _standings(
    conn: sqlite3.Connection,
    counter: str,
    user_id: int,
    limit: int,
) -> List[Tuple[int, int]]:
    top = _top(conn, counter, limit)
    if not any(entry[0] == user_id for entry in top):
        # Let the caller know where they stand even outside the top
        if len(top) >= limit:
            top.pop()
        top.append((user_id, _get_count(conn, counter, user_id)))
    return top


class Counter:
    """A named counter. All methods are async and run off the event loop."""

    def __init__(self, store: CounterStore, name: str) -> None:
        self.store = store
        self.name = name

    def __repr__(self) -> str:
        return f"Counter({self.name!r})"

    async def get(self, user_id: int) -> int:
        return await asyncio.to_thread(self.store.run, _get_count, self.name, user_id)

    async def set(self, user_id: int, count: int) -> None:
        if count < 0:
            raise ValueError("count must be non-negative")
        await asyncio.to_thread(self.store.run, _set_count, self.name, user_id, count)

    async def increment(self, user_id: int) -> int:
        """Add one for user_id and return the new value."""
        return await asyncio.to_thread(self.store.run, _add, self.name, user_id, 1)

    async def decrement(self, user_id: int) -> int:
        """Subtract one for user_id (never below zero) and return the new value."""
        return await asyncio.to_thread(self.store.run, _add, self.name, user_id, -1)

    async def top_n(self, n: int = LEADERBOARD_SIZE) -> List[Tuple[int, int]]:
        return await asyncio.to_thread(self.store.run, _top, self.name, n)

    async def standings(
        self,
        user_id: int,
        n: int = LEADERBOARD_SIZE,
    ) -> List[Tuple[int, int]]:
        """Top n, with user_id swapped in for the last row when not already listed."""
        return await asyncio.to_thread(self.store.run, _standings, self.name, user_id, n)
