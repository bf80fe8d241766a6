"""Prepared-statement storage boundary and its aiosqlite implementation.

Handlers and repositories only see the :class:`Database` protocol::

    row = await db.prepare("SELECT * FROM accounts WHERE account_id = ?1").bind(account_id).first()

Placeholders are SQLite's numbered ``?N`` form, bound positionally.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import aiosqlite

from .schema import PRAGMA_SQL, SCHEMA_SQL

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
MEMORY_PATH = ":memory:"


class DatabaseNotConnectedError(RuntimeError):
    """Raised when a statement runs before ``connect()`` or after ``close()``."""


@dataclass(frozen=True, slots=True)
class RunResult:
    changes: int
    last_row_id: Optional[int] = None


class PreparedStatement(Protocol):
    def bind(self, *values: Any) -> "PreparedStatement": ...

    async def first(self) -> Optional[Row]: ...

    async def all(self) -> List[Row]: ...

    async def run(self) -> RunResult: ...


class Database(Protocol):
    def prepare(self, sql: str) -> PreparedStatement: ...


class SqliteStatement:
    def __init__(self, database: "SqliteDatabase", sql: str, params: Sequence[Any] = ()) -> None:
        self._database = database
        self.sql = sql
        self.params: Tuple[Any, ...] = tuple(params)

    def bind(self, *values: Any) -> "SqliteStatement":
        return SqliteStatement(self._database, self.sql, values)

    async def first(self) -> Optional[Row]:
        connection = self._database.connection()
        async with connection.execute(self.sql, self.params) as cursor:
            row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def all(self) -> List[Row]:
        connection = self._database.connection()
        async with connection.execute(self.sql, self.params) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def run(self) -> RunResult:
        connection = self._database.connection()
        async with connection.execute(self.sql, self.params) as cursor:
            result = RunResult(changes=cursor.rowcount, last_row_id=cursor.lastrowid)
        await connection.commit()
        return result


class SqliteDatabase:
    def __init__(self, path: str = MEMORY_PATH) -> None:
        self.path = path
        self._connection: Optional[aiosqlite.Connection] = None

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> "SqliteDatabase":
        if self._connection is not None:
            return self
        if self.path != MEMORY_PATH:
            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)
        logger.info("Opening database at %s", self.path)
        self._connection = await aiosqlite.connect(self.path)
        self._connection.row_factory = aiosqlite.Row
        for line in PRAGMA_SQL.strip().splitlines():
            line = line.strip()
            if line and not line.startswith("--"):
                await self._connection.execute(line)
        return self

    async def migrate(self) -> None:
        await self.connection().executescript(SCHEMA_SQL)
        await self.connection().commit()
        logger.info("Database schema applied")

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("Database closed")

    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise DatabaseNotConnectedError("Database not initialized. Call connect() first.")
        return self._connection

    def prepare(self, sql: str) -> SqliteStatement:
        return SqliteStatement(self, sql)

    async def __aenter__(self) -> "SqliteDatabase":
        return await self.connect()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


__all__ = [
    "Database",
    "DatabaseNotConnectedError",
    "MEMORY_PATH",
    "PreparedStatement",
    "Row",
    "RunResult",
    "SqliteDatabase",
    "SqliteStatement",
]
