"""Error taxonomy tests — messages are returned to the editor verbatim."""

import pytest

from querygraph.core.errors import (
    AggregationAfterSelect,
    ExecutionError,
    GraphError,
    InvalidInValue,
    MalformedGraph,
    MissingTable,
    NodeNotFound,
    NoValidFilters,
    PayloadShapeError,
    QueryGraphError,
    RenderError,
    SemanticError,
    TableNotFound,
    UnsupportedFilterValue,
    UnsupportedNodeKind,
)


@pytest.mark.parametrize(
    "error,family",
    [
        (NodeNotFound("n1"), GraphError),
        (MalformedGraph("cycle"), GraphError),
        (MissingTable(), SemanticError),
        (AggregationAfterSelect(), SemanticError),
        (UnsupportedNodeKind("join"), SemanticError),
        (NoValidFilters(), SemanticError),
        (InvalidInValue(), SemanticError),
        (UnsupportedFilterValue(None), SemanticError),
        (PayloadShapeError("bad"), QueryGraphError),
        (RenderError("bad"), QueryGraphError),
        (ExecutionError("bad"), QueryGraphError),
        (TableNotFound("users"), QueryGraphError),
    ],
)
def test_families(error, family):
    assert isinstance(error, family)
    assert isinstance(error, QueryGraphError)


def test_fixed_messages():
    assert str(MissingTable()) == "No table node found in path"
    assert str(NoValidFilters()) == "No valid filter conditions (all have empty values)"
    assert str(InvalidInValue()) == "Expected array for 'in' operator"
    assert str(UnsupportedNodeKind("join")) == "Unsupported node type: join"
    assert str(UnsupportedFilterValue({"a": 1})) == "Unsupported value type: {'a': 1}"
    assert str(TableNotFound("users")) == "Table not found: users"
