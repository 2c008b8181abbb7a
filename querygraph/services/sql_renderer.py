"""SQL Renderer — turns a QuerySpec into SQL text.

All SQL is built via SQLGlot expression trees — never string concatenation.
Clause order is fixed:

    SELECT <projection> FROM <table> [WHERE ...] [GROUP BY ...]
    [ORDER BY col ASC|DESC, ...] [LIMIT n]

String literals are single-quoted with only the escaping the dialect itself
requires. That is quoting, not sanitisation: never feed untrusted input
through the renderer expecting it to be safe.
"""

from sqlglot import exp
from sqlglot.errors import SqlglotError

from querygraph.core.config import settings
from querygraph.core.errors import RenderError
from querygraph.schemas.graph import AggregationNodeData, Metric, OrderByData
from querygraph.services.stage_interpreter import QuerySpec, column_expression, identifier

AGG_FUNC_MAP: dict[str, type[exp.AggFunc]] = {
    "COUNT": exp.Count,
    "SUM": exp.Sum,
    "AVG": exp.Avg,
    "MAX": exp.Max,
    "MIN": exp.Min,
}


def table_expression(name: str) -> exp.Table:
    """Build a table reference, honouring ``catalog.db.table`` qualification."""
    parts = name.split(".")
    table = exp.Table(this=identifier(parts[-1]))
    if len(parts) >= 2:
        table.set("db", identifier(parts[-2]))
    if len(parts) >= 3:
        table.set("catalog", identifier(".".join(parts[:-2])))
    return table


def aggregate_expression(metric: Metric) -> exp.Expression:
    """Build the aggregate call for one metric; COUNT(*) ignores the column."""
    if metric.function == "COUNT(*)":
        return exp.Count(this=exp.Star())
    return AGG_FUNC_MAP[metric.function](this=column_expression(metric.column))


def aggregation_projection(aggregation: AggregationNodeData) -> list[exp.Expression]:
    """Dimensions first, then metrics, each in declaration order."""
    projection: list[exp.Expression] = [
        column_expression(d) for d in aggregation.dimensions
    ]
    projection.extend(aggregate_expression(m) for m in aggregation.metrics)
    return projection


def _projection(spec: QuerySpec) -> list[exp.Expression]:
    aggregation = spec.aggregation
    if aggregation is not None and (aggregation.dimensions or aggregation.metrics):
        return aggregation_projection(aggregation)
    if aggregation is None and spec.columns:
        return [column_expression(c) for c in spec.columns]
    return [exp.Star()]


def _ordered(rule: OrderByData) -> exp.Ordered:
    # nulls_first is pinned so the dialect never appends a NULLS clause
    return exp.Ordered(
        this=column_expression(rule.column),
        desc=rule.direction == "desc",
        nulls_first=False,
    )


def build_select(spec: QuerySpec) -> exp.Select:
    """Build the SQLGlot SELECT tree for a QuerySpec."""
    query = exp.Select().select(*_projection(spec)).from_(table_expression(spec.table))

    if spec.predicate is not None:
        query.set("where", exp.Where(this=spec.predicate.copy()))

    group_by = spec.group_by
    if group_by:
        query = query.group_by(*[column_expression(d) for d in group_by])

    if spec.order_by:
        query = query.order_by(*[_ordered(rule) for rule in spec.order_by])

    if spec.limit is not None:
        query = query.limit(spec.limit)

    return query


def render(spec: QuerySpec, dialect: str | None = None) -> str:
    """Render a QuerySpec as a single SELECT statement.

    Raises:
        RenderError: SQLGlot could not build or generate the statement, or
            the dialect name is unknown.
    """
    dialect = dialect or settings.query.sql_dialect
    try:
        return build_select(spec).sql(dialect=dialect)
    except (SqlglotError, ValueError) as exc:
        raise RenderError(f"Failed to render SQL for table {spec.table}: {exc}") from exc
