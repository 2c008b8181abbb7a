"""Stage Interpreter — folds an ordered node chain into a single QuerySpec.

Folding rules, in path order:
- table, select, sort, limit: a later node of the same kind replaces the
  earlier value (so their relative order does not matter)
- filter: condition lists are concatenated
- aggregation: replaces the projection with dimensions + metrics; a select
  with columns *before* it is rejected, a select *after* it is ignored

The predicate is built here as a SQLGlot expression tree, so everything the
renderer receives is already validated.
"""

import math
import re
from dataclasses import dataclass, field

import structlog
from sqlglot import exp
from sqlglot.tokens import Tokenizer

from querygraph.core.errors import (
    AggregationAfterSelect,
    InvalidInValue,
    MissingTable,
    NoValidFilters,
    UnsupportedFilterValue,
    UnsupportedNodeKind,
)
from querygraph.schemas.graph import (
    AggregationNode,
    AggregationNodeData,
    FilterCondition,
    FilterNode,
    LimitNode,
    Node,
    OrderByData,
    SelectNode,
    SortNode,
    TableNode,
)

logger = structlog.stdlib.get_logger(__name__)

COMPARISON_OPERATORS: dict[str, type[exp.Binary]] = {
    "==": exp.EQ,
    "!=": exp.NEQ,
    ">": exp.GT,
    "<": exp.LT,
    ">=": exp.GTE,
    "<=": exp.LTE,
}

_BARE_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Every word of every tokenizer keyword ("GROUP BY" contributes GROUP and BY)
SQL_KEYWORDS = frozenset(
    word
    for keyword in Tokenizer.KEYWORDS
    for word in keyword.split()
    if word.replace("_", "").isalpha()
)


def identifier(name: str) -> exp.Identifier:
    """Bare identifier, quoted when the name is a keyword or not a plain word."""
    quoted = (
        _BARE_IDENTIFIER.fullmatch(name) is None or name.upper() in SQL_KEYWORDS
    )
    return exp.Identifier(this=name, quoted=quoted)


def column_expression(name: str) -> exp.Column:
    return exp.Column(this=identifier(name))


@dataclass
class QuerySpec:
    """Dialect-neutral description of one SELECT statement.

    Built fresh for every compile call and discarded after rendering.
    """

    table: str
    columns: list[str] = field(default_factory=list)
    conditions: list[FilterCondition] = field(default_factory=list)
    predicate: exp.Expression | None = None
    order_by: list[OrderByData] = field(default_factory=list)
    limit: int | None = None
    aggregation: AggregationNodeData | None = None

    @property
    def group_by(self) -> list[str]:
        if self.aggregation is None:
            return []
        return list(self.aggregation.dimensions)


def interpret(nodes: list[Node]) -> QuerySpec:
    """Interpret a root-first node chain into a QuerySpec.

    Raises:
        UnsupportedNodeKind: a node on the path has an unknown kind.
        AggregationAfterSelect: a select with columns precedes an aggregation.
        MissingTable: no table node (or an empty table name) on the path.
        InvalidInValue, UnsupportedFilterValue: a filter value has the wrong type.
    """
    table_name = ""
    columns: list[str] = []
    order_by: list[OrderByData] = []
    limit: int | None = None
    conditions: list[FilterCondition] = []
    aggregation: AggregationNodeData | None = None
    has_select_before_aggregation = False

    for node in nodes:
        match node:
            case TableNode():
                table_name = node.data.table_name
            case SelectNode():
                # Aggregation owns the projection once it has been seen
                if aggregation is not None:
                    continue
                columns = list(node.data.columns)
                if columns:
                    has_select_before_aggregation = True
            case SortNode():
                order_by = list(node.data.order)
            case LimitNode():
                limit = node.data.limit
            case FilterNode():
                conditions.extend(node.data.conditions)
            case AggregationNode():
                if has_select_before_aggregation:
                    raise AggregationAfterSelect()
                aggregation = node.data
            case _:
                raise UnsupportedNodeKind(node.type)

    if not table_name:
        raise MissingTable()

    predicate: exp.Expression | None = None
    if conditions:
        try:
            predicate = build_predicate(conditions)
        except NoValidFilters:
            # Every condition was cleared in the editor: no WHERE clause
            logger.debug("filters_dropped", condition_count=len(conditions))

    spec = QuerySpec(
        table=table_name,
        columns=columns,
        conditions=conditions,
        predicate=predicate,
        order_by=order_by,
        limit=limit,
        aggregation=aggregation,
    )
    logger.debug(
        "query_spec_built",
        table=table_name,
        node_count=len(nodes),
        condition_count=len(conditions),
        aggregated=aggregation is not None,
    )
    return spec


# --- Predicate construction ---


def is_empty_value(value: object) -> bool:
    """True for ``""``, ``[]`` and lists whose every element is empty."""
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return not value or all(is_empty_value(v) for v in value)
    return False


def make_literal(value: object) -> exp.Expression:
    """Build a SQLGlot literal from a JSON scalar."""
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return exp.Boolean(this=value)
    # NaN and Infinity would render as bare identifiers
    if isinstance(value, float) and not math.isfinite(value):
        raise UnsupportedFilterValue(value)
    if isinstance(value, (int, float)):
        return exp.Literal.number(value)
    if isinstance(value, str):
        return exp.Literal.string(value)
    raise UnsupportedFilterValue(value)


def condition_to_expression(condition: FilterCondition) -> exp.Expression:
    """Translate one condition; ``negate`` wraps the result in NOT."""
    col_expr = column_expression(condition.column)

    condition_expr: exp.Expression
    if condition.operator == "in":
        if not isinstance(condition.value, (list, tuple)):
            raise InvalidInValue()
        # One bad element fails the whole condition
        values = [make_literal(v) for v in condition.value]
        condition_expr = exp.In(this=col_expr, expressions=values)
    else:
        op_class = COMPARISON_OPERATORS[condition.operator]
        condition_expr = op_class(this=col_expr, expression=make_literal(condition.value))

    if condition.negate:
        return exp.Not(this=condition_expr)
    return condition_expr


def build_predicate(conditions: list[FilterCondition]) -> exp.Expression:
    """AND together every condition whose value is not empty.

    Raises:
        NoValidFilters: nothing is left after dropping empty values.
    """
    valid_conditions = [c for c in conditions if not is_empty_value(c.value)]
    if not valid_conditions:
        raise NoValidFilters()

    expressions = [condition_to_expression(c) for c in valid_conditions]

    result = expressions[0]
    for expression in expressions[1:]:
        result = exp.And(this=result, expression=expression)
    return result
