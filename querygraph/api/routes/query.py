"""Query endpoints: compile a node graph, fetch a page, count rows.

Compiler errors are not caught here; the application-level handler turns
them into JSON error responses with the compiler's message verbatim.
"""

from fastapi import APIRouter, Depends

from querygraph.api.deps import get_query_compiler, get_query_service
from querygraph.schemas.graph import parse_graph
from querygraph.schemas.query import (
    ColumnInfo,
    CountRequest,
    QueryRequest,
    QueryResultResponse,
    RowCountResponse,
    SqlPreviewRequest,
    SqlPreviewResponse,
)
from querygraph.services.query_compiler import QueryCompiler
from querygraph.services.query_service import QueryService

router = APIRouter()


@router.post("/sql", response_model=SqlPreviewResponse)
async def compile_sql(
    body: SqlPreviewRequest,
    compiler: QueryCompiler = Depends(get_query_compiler),
):
    """Return the SQL the selected node compiles to, without running it."""
    graph = parse_graph(body.node_graph)
    if body.paginate:
        compiled = compiler.compile_page(graph, page=body.page, page_size=body.page_size)
    else:
        compiled = compiler.compile(graph)
    return SqlPreviewResponse(sql=compiled.sql, node_ids=compiled.node_ids)


@router.post("/run", response_model=QueryResultResponse)
async def run_query(
    body: QueryRequest,
    service: QueryService = Depends(get_query_service),
):
    """Execute the selected node's query and return one page of rows."""
    graph = parse_graph(body.node_graph)
    result = await service.run_query(graph, page=body.page, page_size=body.page_size)
    return QueryResultResponse(
        columns=[ColumnInfo(name=name) for name in result.columns],
        rows=result.rows,
        row_count=result.row_count,
        page=result.page,
        page_size=result.page_size,
    )


@router.post("/count", response_model=RowCountResponse)
async def count_rows(
    body: CountRequest,
    service: QueryService = Depends(get_query_service),
):
    """Return the total number of rows the selected node produces."""
    graph = parse_graph(body.node_graph)
    return RowCountResponse(row_count=await service.row_count(graph))
