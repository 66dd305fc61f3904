"""SQLite implementation of the storage interfaces.

Every scope opens its own connection so readers only ever see committed
rows (WAL mode). Write scopes run under ``BEGIN EXCLUSIVE`` and are further
serialised in-process by an :class:`asyncio.Lock`. Blocking sqlite3 calls
are pushed off the event loop with :func:`asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, List, Optional, Union

from ..errors import StorageFailure
from ..models import Balance, Category, Transaction, TransactionType
from .base import KeyValueStore, LedgerBackend, LedgerSession

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS balances (
    id INTEGER PRIMARY KEY,
    total REAL NOT NULL,
    current REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    label TEXT NOT NULL,
    amount REAL NOT NULL,
    color TEXT NOT NULL,
    emoji TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    type TEXT NOT NULL CHECK (type IN ('income', 'expense')),
    category_key TEXT,
    amount REAL NOT NULL CHECK (amount > 0),
    created_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_txn_created_at ON transactions (created_at);

CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

BALANCE_ROW_ID = 1


def _connect(path: Path) -> sqlite3.Connection:
    # Autocommit mode; scopes issue BEGIN/COMMIT explicitly.
    conn = sqlite3.connect(str(path), timeout=30, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


async def _call(func: Callable[..., Any], *args: Any) -> Any:
    try:
        return await asyncio.to_thread(func, *args)
    except sqlite3.Error as exc:
        raise StorageFailure(f"SQLite operation failed: {exc}") from exc
    except OSError as exc:
        raise StorageFailure(f"Database file is not accessible: {exc}") from exc


def _begin(path: Path, statement: str) -> sqlite3.Connection:
    conn = _connect(path)
    try:
        conn.execute(statement)
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def _commit_and_close(conn: sqlite3.Connection) -> None:
    try:
        conn.execute("COMMIT")
    finally:
        # Closing with an open transaction discards it.
        conn.close()


def _rollback_and_close(conn: sqlite3.Connection) -> None:
    try:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
    except sqlite3.Error as exc:
        logger.warning("Rollback failed, discarding connection: %s", exc)
    finally:
        conn.close()


def _initialize_schema(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = _connect(path)
    try:
        conn.executescript(SCHEMA_SQL)
    finally:
        conn.close()


def _row_to_category(row: sqlite3.Row) -> Category:
    return Category(
        id=row['id'],
        key=row['key'],
        label=row['label'],
        amount=float(row['amount']),
        color=row['color'],
        emoji=row['emoji'],
    )


def _row_to_transaction(row: sqlite3.Row) -> Transaction:
    return Transaction(
        id=int(row['id']),
        type=TransactionType(row['type']),
        category_key=row['category_key'],
        amount=float(row['amount']),
        created_at=int(row['created_at']),
    )


class _SqliteSession(LedgerSession):
    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    async def _fetchone(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        return await _call(lambda: self._conn.execute(sql, params).fetchone())

    async def _fetchall(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        return await _call(lambda: self._conn.execute(sql, params).fetchall())

    async def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return await _call(lambda: self._conn.execute(sql, params))

    async def count_balances(self) -> int:
        row = await self._fetchone("SELECT COUNT(*) AS count FROM balances")
        return int(row['count'])

    async def get_balance(self) -> Optional[Balance]:
        row = await self._fetchone("SELECT total, current FROM balances WHERE id = ?", (BALANCE_ROW_ID,))
        if row is None:
            return None
        return Balance(total=float(row['total']), current=float(row['current']))

    async def insert_balance(self, total: float, current: float) -> None:
        await self._execute(
            "INSERT INTO balances (id, total, current) VALUES (?, ?, ?)",
            (BALANCE_ROW_ID, total, current),
        )

    async def update_balance(self, total: float, current: float) -> int:
        cursor = await self._execute(
            "UPDATE balances SET total = ?, current = ? WHERE id = ?",
            (total, current, BALANCE_ROW_ID),
        )
        return cursor.rowcount

    async def count_categories(self) -> int:
        row = await self._fetchone("SELECT COUNT(*) AS count FROM categories")
        return int(row['count'])

    async def list_categories(self) -> List[Category]:
        rows = await self._fetchall(
            "SELECT id, key, label, amount, color, emoji FROM categories ORDER BY id ASC"
        )
        return [_row_to_category(row) for row in rows]

    async def get_category(self, key: str) -> Optional[Category]:
        row = await self._fetchone(
            "SELECT id, key, label, amount, color, emoji FROM categories WHERE key = ?", (key,)
        )
        return _row_to_category(row) if row is not None else None

    async def insert_category(self, key: str, label: str, amount: float, color: str, emoji: str) -> None:
        await self._execute(
            "INSERT OR IGNORE INTO categories (key, label, amount, color, emoji) VALUES (?, ?, ?, ?, ?)",
            (key, label, amount, color, emoji),
        )

    async def set_category_amount(self, key: str, amount: float) -> int:
        cursor = await self._execute("UPDATE categories SET amount = ? WHERE key = ?", (amount, key))
        return cursor.rowcount

    async def insert_transaction(
        self,
        txn_type: TransactionType,
        category_key: Optional[str],
        amount: float,
        created_at: int,
    ) -> Transaction:
        cursor = await self._execute(
            "INSERT INTO transactions (type, category_key, amount, created_at) VALUES (?, ?, ?, ?)",
            (TransactionType(txn_type).value, category_key, amount, created_at),
        )
        return Transaction(
            id=int(cursor.lastrowid),
            type=TransactionType(txn_type),
            category_key=category_key,
            amount=amount,
            created_at=created_at,
        )

    async def query_transactions(
        self,
        start: Optional[int] = None,
        end: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        where: List[str] = []
        params: List[Any] = []
        if start is not None:
            where.append("created_at >= ?")
            params.append(start)
        if end is not None:
            where.append("created_at <= ?")
            params.append(end)

        sql = "SELECT id, type, category_key, amount, created_at FROM transactions"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at DESC, id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        rows = await self._fetchall(sql, tuple(params))
        return [_row_to_transaction(row) for row in rows]


class SqliteLedgerBackend(LedgerBackend):
    """Ledger tables in a SQLite database file."""

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self._write_lock = asyncio.Lock()
        self._opened = False

    async def open(self) -> None:
        await _call(_initialize_schema, self.db_path)
        self._opened = True
        logger.info("Opened SQLite ledger at %s", self.db_path)

    async def close(self) -> None:
        self._opened = False
        logger.info("Closed SQLite ledger at %s", self.db_path)

    def _require_open(self) -> None:
        if not self._opened:
            raise StorageFailure(f"Ledger database {self.db_path} is not open")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[LedgerSession]:
        self._require_open()
        async with self._write_lock:
            conn = await _call(_begin, self.db_path, "BEGIN EXCLUSIVE")
            try:
                yield _SqliteSession(conn)
            except BaseException:
                await asyncio.to_thread(_rollback_and_close, conn)
                raise
            await _call(_commit_and_close, conn)

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[LedgerSession]:
        self._require_open()
        conn = await _call(_begin, self.db_path, "BEGIN")
        try:
            yield _SqliteSession(conn)
        finally:
            await asyncio.to_thread(_rollback_and_close, conn)


class SqliteKeyValueStore(KeyValueStore):
    """Key-value rows in the ``kv_store`` table of the ledger database."""

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)

    async def open(self) -> None:
        await _call(_initialize_schema, self.db_path)

    def _get(self, key: str) -> Optional[str]:
        conn = _connect(self.db_path)
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row['value'] if row is not None else None

    def _set(self, key: str, value: str) -> None:
        conn = _connect(self.db_path)
        try:
            conn.execute(
                "INSERT INTO kv_store (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
        finally:
            conn.close()

    def _remove(self, key: str) -> None:
        conn = _connect(self.db_path)
        try:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        finally:
            conn.close()

    async def get(self, key: str) -> Optional[str]:
        return await _call(self._get, key)

    async def set(self, key: str, value: str) -> None:
        logger.debug("kv set %s", key)
        await _call(self._set, key, value)

    async def remove(self, key: str) -> None:
        logger.debug("kv remove %s", key)
        await _call(self._remove, key)
