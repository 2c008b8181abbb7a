"""Query Service — compiles a node graph and runs it against the engine.

This is the only service that executes compiled SQL. The compiler itself
stays pure; pagination and row counting are compiled here, executed once,
and never cached or retried.
"""

import time
from dataclasses import dataclass
from typing import Any

import structlog

from querygraph.core.config import settings
from querygraph.core.engine import DuckDBEngine
from querygraph.core.metrics import query_execution_duration_seconds, query_result_rows
from querygraph.schemas.graph import NodeGraph
from querygraph.services.query_compiler import QueryCompiler

logger = structlog.stdlib.get_logger(__name__)


@dataclass
class QueryResult:
    """One page of results for the selected node."""

    columns: list[str]
    rows: list[dict[str, Any]]
    row_count: int
    page: int
    page_size: int


class QueryService:
    """Executes compiled node graphs page by page."""

    def __init__(self, compiler: QueryCompiler, engine: DuckDBEngine):
        self._compiler = compiler
        self._engine = engine

    async def run_query(
        self,
        graph: NodeGraph,
        page: int = 1,
        page_size: int | None = None,
    ) -> QueryResult:
        """Fetch one page of the selected node's output.

        ``page_size`` defaults to the configured page size and is capped at
        ``max_page_size``.
        """
        page_size = min(
            page_size or settings.query.default_page_size,
            settings.query.max_page_size,
        )
        compiled = self._compiler.compile_page(graph, page=page, page_size=page_size)

        start = time.perf_counter()
        columns, rows = await self._engine.fetch(compiled.sql)
        duration = time.perf_counter() - start

        query_execution_duration_seconds.labels(kind="page").observe(duration)
        query_result_rows.observe(len(rows))
        logger.info(
            "query_executed",
            kind="page",
            page=page,
            page_size=page_size,
            duration_ms=round(duration * 1000, 2),
            rows=len(rows),
        )

        return QueryResult(
            columns=columns,
            rows=rows,
            row_count=len(rows),
            page=page,
            page_size=page_size,
        )

    async def row_count(self, graph: NodeGraph) -> int:
        """Count every row the selected node would produce."""
        compiled = self._compiler.compile_count(graph)

        start = time.perf_counter()
        value = await self._engine.fetch_value(compiled.sql)
        duration = time.perf_counter() - start

        query_execution_duration_seconds.labels(kind="count").observe(duration)
        logger.info(
            "query_executed",
            kind="count",
            duration_ms=round(duration * 1000, 2),
            row_count=value,
        )
        return int(value or 0)
