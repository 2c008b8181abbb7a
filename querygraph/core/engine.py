"""DuckDB storage engine client.

Executes SQL produced by the query compiler and returns rows as ordered
``{column: value}`` dicts with JSON-safe values.

The compiler never talks to the engine; only the query and catalog services
do. DuckDB connections are not safe to share across threads, so every
statement runs on its own cursor and the client serialises access with a lock.
"""

import asyncio
import math
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

import duckdb
import structlog

from querygraph.core.config import settings
from querygraph.core.errors import ExecutionError

logger = structlog.stdlib.get_logger("querygraph.engine")

FETCH_BATCH_SIZE = 1000


def to_json_value(value: Any) -> Any:
    """Normalise a DuckDB value to null/bool/int/float/str.

    Dates and timestamps become ISO-8601 strings; non-finite floats become
    None; anything else unknown falls back to ``str()``.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


@dataclass
class PreparedStatement:
    """A statement that has been run on its own cursor and awaits fetching."""

    sql: str
    cursor: duckdb.DuckDBPyConnection

    @property
    def column_names(self) -> list[str]:
        description = self.cursor.description or []
        return [desc[0] for desc in description]


class DuckDBEngine:
    """Thin client around a single DuckDB database.

    Implements the execution interface the query service relies on:
    ``prepare(sql)``, ``execute(statement)`` and ``column_names(statement)``,
    plus ``fetch``/``fetch_value`` async helpers that run on a worker thread.
    """

    def __init__(self, path: str, read_only: bool = False):
        self._path = path
        self._read_only = read_only
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def _connection(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self._conn = duckdb.connect(self._path, read_only=self._read_only)
            logger.info("engine_connected", path=self._path, read_only=self._read_only)
        return self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # --- Execution interface ---

    def prepare(self, sql: str) -> PreparedStatement:
        """Run ``sql`` on a fresh cursor, ready for ``execute``."""
        cursor = self._connection().cursor()
        try:
            cursor.execute(sql)
        except duckdb.Error as exc:
            cursor.close()
            raise ExecutionError(f"Failed to execute query: {exc}") from exc
        return PreparedStatement(sql=sql, cursor=cursor)

    def column_names(self, statement: PreparedStatement) -> list[str]:
        return statement.column_names

    def execute(self, statement: PreparedStatement) -> Iterator[dict[str, Any]]:
        """Yield each result row as an ordered ``{column: value}`` dict."""
        columns = statement.column_names
        try:
            while True:
                batch = statement.cursor.fetchmany(FETCH_BATCH_SIZE)
                if not batch:
                    break
                for row in batch:
                    yield {
                        name: to_json_value(value)
                        for name, value in zip(columns, row, strict=True)
                    }
        except duckdb.Error as exc:
            raise ExecutionError(f"Failed to fetch row: {exc}") from exc
        finally:
            statement.cursor.close()

    # --- Async helpers ---

    def _fetch_sync(self, sql: str) -> tuple[list[str], list[dict[str, Any]]]:
        with self._lock:
            statement = self.prepare(sql)
            columns = self.column_names(statement)
            rows = list(self.execute(statement))
        return columns, rows

    async def fetch(self, sql: str) -> tuple[list[str], list[dict[str, Any]]]:
        """Execute ``sql`` and return (column names, rows)."""
        return await asyncio.to_thread(self._fetch_sync, sql)

    async def fetch_value(self, sql: str) -> Any:
        """Execute ``sql`` and return the first column of the first row."""
        _, rows = await self.fetch(sql)
        if not rows:
            return None
        return next(iter(rows[0].values()))

    def _run_sync(self, sql: str) -> None:
        with self._lock:
            statement = self.prepare(sql)
            statement.cursor.close()

    async def run(self, sql: str) -> None:
        """Execute a statement whose result is not needed (DDL)."""
        await asyncio.to_thread(self._run_sync, sql)

    async def ping(self) -> bool:
        """Health check."""
        try:
            return await self.fetch_value("SELECT 1") == 1
        except ExecutionError as exc:
            logger.warning("engine_ping_failed", reason=str(exc))
            return False


def get_engine() -> DuckDBEngine:
    return DuckDBEngine(
        path=settings.engine.duckdb_path,
        read_only=settings.engine.duckdb_read_only,
    )
