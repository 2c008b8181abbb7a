"""Graph Path Resolver — turns the editor graph into a linear operation chain.

Each node has at most one incoming edge, so walking incoming edges from the
selected node always yields a single chain ending at a root node.
"""

import structlog

from querygraph.core.errors import MalformedGraph, NodeNotFound
from querygraph.schemas.graph import Edge, Node, NodeGraph

logger = structlog.stdlib.get_logger(__name__)


def _index_incoming(edges: list[Edge]) -> dict[str, Edge]:
    """Map target id -> first edge pointing at it."""
    incoming: dict[str, Edge] = {}
    for edge in edges:
        incoming.setdefault(edge.target, edge)
    return incoming


def resolve(graph: NodeGraph) -> list[Node]:
    """Return the chain from the root node to the selected node, root first.

    Raises:
        NodeNotFound: the selected node or an edge source is not in the graph.
        MalformedGraph: the walk exceeds the node count (cycle).
    """
    node_map: dict[str, Node] = {}
    for node in graph.nodes:
        node_map.setdefault(node.id, node)
    incoming = _index_incoming(graph.edges)

    path: list[Node] = []
    current_id = graph.selected_node_id

    while True:
        node = node_map.get(current_id)
        if node is None:
            raise NodeNotFound(current_id)
        if len(path) >= len(node_map):
            raise MalformedGraph(
                f"Node graph contains a cycle reachable from node "
                f"{graph.selected_node_id}"
            )
        path.append(node)

        edge = incoming.get(current_id)
        if edge is None:
            break
        current_id = edge.source

    path.reverse()
    logger.debug(
        "graph_path_resolved",
        selected_node_id=graph.selected_node_id,
        path=[n.id for n in path],
    )
    return path
