"""Error taxonomy for graph compilation and query execution.

Every error carries a stable, user-facing message: ``str(exc)`` is what the
API layer returns verbatim. No error here is retried by the compiler.
"""


class QueryGraphError(Exception):
    """Base class for all QueryGraph errors."""


# --- Graph shape ---


class GraphError(QueryGraphError):
    """The node graph cannot be walked."""


class NodeNotFound(GraphError):
    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id


class MalformedGraph(GraphError):
    """The chain of incoming edges does not terminate (cycle)."""


# --- Node payloads ---


class PayloadShapeError(QueryGraphError):
    """A node's data does not match the shape its kind requires."""


# --- Interpretation ---


class SemanticError(QueryGraphError):
    """The chain is well-formed but cannot be turned into a query."""


class MissingTable(SemanticError):
    def __init__(self) -> None:
        super().__init__("No table node found in path")


class AggregationAfterSelect(SemanticError):
    def __init__(self) -> None:
        super().__init__(
            "Cannot use Aggregation after Select node. "
            "Please remove the Select node or reorder the nodes."
        )


class UnsupportedNodeKind(SemanticError):
    def __init__(self, kind: str):
        super().__init__(f"Unsupported node type: {kind}")
        self.kind = kind


class NoValidFilters(SemanticError):
    def __init__(self) -> None:
        super().__init__("No valid filter conditions (all have empty values)")


class InvalidInValue(SemanticError):
    def __init__(self) -> None:
        super().__init__("Expected array for 'in' operator")


class UnsupportedFilterValue(SemanticError):
    def __init__(self, value: object):
        super().__init__(f"Unsupported value type: {value!r}")
        self.value = value


# --- Catalog ---


class TableNotFound(QueryGraphError):
    def __init__(self, table_name: str):
        super().__init__(f"Table not found: {table_name}")
        self.table_name = table_name


# --- Rendering and execution ---


class RenderError(QueryGraphError):
    """SQL text assembly failed on a QuerySpec. Indicates a defect."""


class ExecutionError(QueryGraphError):
    """The storage engine rejected or failed a compiled query."""
