"""Query Compiler — translates an editor node graph into executable SQL.

Steps:
1. Resolve the chain from the selected node back to its table
2. Interpret the chain into a QuerySpec
3. Render the QuerySpec via SQLGlot
4. Optionally wrap it for pagination or row counting

The compiler is a pure, synchronous transformation: no I/O, no shared
state, no caching. It is safe to call concurrently.
"""

import time
from dataclasses import dataclass, field

import structlog

from querygraph.core.config import settings
from querygraph.core.errors import QueryGraphError
from querygraph.core.metrics import (
    query_compilation_duration_seconds,
    query_compilation_errors_total,
)
from querygraph.schemas.graph import NodeGraph
from querygraph.services import pagination
from querygraph.services.graph_path_resolver import resolve
from querygraph.services.sql_renderer import render
from querygraph.services.stage_interpreter import QuerySpec, interpret

logger = structlog.stdlib.get_logger(__name__)


@dataclass
class CompiledQuery:
    """SQL compiled from one node graph."""

    sql: str
    node_ids: list[str] = field(default_factory=list)  # root-first path
    limit: int | None = None
    offset: int | None = None


class QueryCompiler:
    """Compiles node graphs into SQL text in a single dialect."""

    def __init__(self, dialect: str | None = None):
        self._dialect = dialect or settings.query.sql_dialect

    @property
    def dialect(self) -> str:
        return self._dialect

    def build_spec(self, graph: NodeGraph) -> tuple[QuerySpec, list[str]]:
        """Resolve and interpret a graph; returns the QuerySpec and the path ids."""
        path = resolve(graph)
        return interpret(path), [node.id for node in path]

    def compile(
        self,
        graph: NodeGraph,
        pagination_window: tuple[int, int] | None = None,
    ) -> CompiledQuery:
        """Compile a graph to SQL.

        ``pagination_window`` is ``(limit, offset)``; when given, the query
        is wrapped in an outer bounding SELECT.
        """
        start = time.perf_counter()
        try:
            spec, node_ids = self.build_spec(graph)
            if pagination_window is None:
                sql = render(spec, dialect=self._dialect)
                compiled = CompiledQuery(sql=sql, node_ids=node_ids)
            else:
                limit, offset = pagination_window
                sql = pagination.paginate(spec, limit, offset, dialect=self._dialect)
                compiled = CompiledQuery(
                    sql=sql, node_ids=node_ids, limit=limit, offset=offset
                )
        except QueryGraphError as exc:
            self._record_failure(graph, exc)
            raise

        self._record_success(start, compiled)
        return compiled

    def compile_page(
        self,
        graph: NodeGraph,
        page: int = 1,
        page_size: int | None = None,
    ) -> CompiledQuery:
        """Compile a graph for a 1-based page of ``page_size`` rows."""
        return self.compile(
            graph, pagination_window=pagination.page_to_limit_offset(page, page_size)
        )

    def compile_count(self, graph: NodeGraph) -> CompiledQuery:
        """Compile a graph into a total-row count query."""
        start = time.perf_counter()
        try:
            spec, node_ids = self.build_spec(graph)
            sql = pagination.count(spec, dialect=self._dialect)
        except QueryGraphError as exc:
            self._record_failure(graph, exc)
            raise

        compiled = CompiledQuery(sql=sql, node_ids=node_ids)
        self._record_success(start, compiled)
        return compiled

    @staticmethod
    def _record_success(start: float, compiled: CompiledQuery) -> None:
        duration = time.perf_counter() - start
        query_compilation_duration_seconds.observe(duration)
        logger.info(
            "graph_compiled",
            node_count=len(compiled.node_ids),
            paginated=compiled.limit is not None,
            compilation_ms=round(duration * 1000, 2),
        )

    @staticmethod
    def _record_failure(graph: NodeGraph, exc: QueryGraphError) -> None:
        query_compilation_errors_total.labels(error=type(exc).__name__).inc()
        logger.warning(
            "graph_compile_failed",
            selected_node_id=graph.selected_node_id,
            error=type(exc).__name__,
            detail=str(exc),
        )
