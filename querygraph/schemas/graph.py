"""Pydantic schemas for the node graph produced by the visual editor.

Each node kind is a distinct model with a strongly-typed ``data`` payload.
Payloads are validated when the graph is parsed, so a malformed node is
rejected before any compilation starts. Node kinds the compiler does not
know are kept as ``UnknownNode`` and only fail if they end up on the
resolved path.
"""

import json
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    ValidationError,
    model_validator,
)

from querygraph.core.errors import PayloadShapeError

NODE_KINDS = ("table", "select", "sort", "limit", "filter", "aggregation")

FilterOperator = Literal["==", "!=", ">", "<", ">=", "<=", "in"]
AggregateFunction = Literal["COUNT(*)", "COUNT", "SUM", "AVG", "MAX", "MIN"]
SortDirection = Literal["asc", "desc"]


class Edge(BaseModel):
    """Directed edge: ``source`` feeds into ``target``."""

    source: str
    target: str


# --- Node payloads ---


class TableNodeData(BaseModel):
    table_name: str


class SelectNodeData(BaseModel):
    columns: list[str] = []


class OrderByData(BaseModel):
    column: str
    direction: SortDirection = "asc"


class SortNodeData(BaseModel):
    order: list[OrderByData] = []


class LimitNodeData(BaseModel):
    limit: int | None = Field(default=None, ge=0)


class FilterCondition(BaseModel):
    """A single atomic filter condition.

    ``value`` is raw JSON: a string, number or boolean for the comparison
    operators, a list of those for ``in``. Its type is checked when the
    predicate is built, not here, so that UI-cleared values (``""``, ``[]``)
    can still be dropped silently.
    """

    column: str
    operator: FilterOperator
    value: Any
    negate: bool = False


class FilterNodeData(BaseModel):
    conditions: list[FilterCondition] = []


class Metric(BaseModel):
    function: AggregateFunction
    column: str = ""  # ignored for COUNT(*)


class AggregationNodeData(BaseModel):
    dimensions: list[str] = []
    metrics: list[Metric] = []


# --- Nodes ---


class TableNode(BaseModel):
    id: str
    type: Literal["table"]
    data: TableNodeData


class SelectNode(BaseModel):
    id: str
    type: Literal["select"]
    data: SelectNodeData


class SortNode(BaseModel):
    id: str
    type: Literal["sort"]
    data: SortNodeData


class LimitNode(BaseModel):
    id: str
    type: Literal["limit"]
    data: LimitNodeData


class FilterNode(BaseModel):
    id: str
    type: Literal["filter"]
    data: FilterNodeData


class AggregationNode(BaseModel):
    id: str
    type: Literal["aggregation"]
    data: AggregationNodeData


class UnknownNode(BaseModel):
    """A node whose kind this compiler does not support."""

    id: str
    type: str
    data: dict[str, Any] = {}


def _node_kind(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if kind in NODE_KINDS else "unknown"


Node = Annotated[
    Annotated[TableNode, Tag("table")]
    | Annotated[SelectNode, Tag("select")]
    | Annotated[SortNode, Tag("sort")]
    | Annotated[LimitNode, Tag("limit")]
    | Annotated[FilterNode, Tag("filter")]
    | Annotated[AggregationNode, Tag("aggregation")]
    | Annotated[UnknownNode, Tag("unknown")],
    Discriminator(_node_kind),
]


class NodeGraph(BaseModel):
    """Serialized editor graph: the selected node plus all nodes and edges."""

    model_config = ConfigDict(populate_by_name=True)

    selected_node_id: str = Field(
        validation_alias=AliasChoices("selected_node_id", "selectedNodeId")
    )
    nodes: list[Node]
    edges: list[Edge] = []

    @model_validator(mode="after")
    def _validate_unique_ids(self) -> "NodeGraph":
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"Duplicate node id: {node.id}")
            seen.add(node.id)
        return self


def _describe_validation_error(exc: ValidationError, payload: Any) -> str:
    """Build a stable one-line message naming the node kind that failed."""
    first = exc.errors()[0]
    loc = first.get("loc", ())
    msg = first.get("msg", "invalid value")

    # loc looks like ("nodes", 2, "filter", "data", "conditions", 0, "operator")
    if len(loc) >= 3 and loc[0] == "nodes" and loc[2] in NODE_KINDS:
        field_path = ".".join(str(part) for part in loc[4:]) or str(loc[3])
        return f"Failed to parse {loc[2]} node data: {field_path}: {msg}"

    if loc and loc[0] == "nodes" and len(loc) >= 2 and isinstance(payload, dict):
        nodes = payload.get("nodes")
        index = loc[1]
        if isinstance(nodes, list) and isinstance(index, int) and index < len(nodes):
            raw = nodes[index]
            kind = raw.get("type") if isinstance(raw, dict) else None
            if kind:
                return f"Failed to parse {kind} node data: {msg}"

    field_path = ".".join(str(part) for part in loc)
    if field_path:
        return f"Failed to parse node graph: {field_path}: {msg}"
    return f"Failed to parse node graph: {msg}"


def parse_graph(payload: dict | str | bytes) -> NodeGraph:
    """Validate an editor payload (dict or JSON text) into a ``NodeGraph``.

    Raises:
        PayloadShapeError: the payload or one of its nodes has the wrong shape.
    """
    raw: Any = payload
    if isinstance(payload, (str, bytes)):
        try:
            raw = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise PayloadShapeError(f"Failed to parse node graph: {exc}") from exc

    try:
        return NodeGraph.model_validate(raw)
    except ValidationError as exc:
        raise PayloadShapeError(_describe_validation_error(exc, raw)) from exc
