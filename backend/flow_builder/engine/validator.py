"""Connection rules and whole-graph validation."""
from collections import deque

from ..nodes.base import NodeKind, Predicate
from .errors import GraphValidationError, InvalidConnectionError
from .graph import Graph, Node

# Which node kinds each kind may point at.
ALLOWED_TARGETS: dict[NodeKind, set[NodeKind]] = {
    NodeKind.ACTION: {NodeKind.CONDITION},
    NodeKind.CONDITION: {NodeKind.CONDITION_CHECK},
    NodeKind.CONDITION_CHECK: {NodeKind.ACTION, NodeKind.CONDITION},
}

# Kinds whose export descriptor has room for a single nextStepId.
SINGLE_SUCCESSOR_KINDS = {NodeKind.ACTION, NodeKind.CONDITION_CHECK}


def connection_error(source: Node, target: Node, entry_id: str | None) -> str | None:
    """Return why ``source -> target`` is not allowed, or None if it is.

    Rules are checked in order and the first match wins.
    """
    if target.id == entry_id:
        return "the first node cannot have incoming connections"
    allowed = ALLOWED_TARGETS[source.kind]
    if target.kind not in allowed:
        names = " or ".join(sorted(k.value for k in allowed))
        return f"{source.kind.value} nodes can only connect to {names} nodes"
    return None


def can_connect(source: Node, target: Node, entry_id: str | None) -> bool:
    return connection_error(source, target, entry_id) is None


def check_connection(source: Node, target: Node, entry_id: str | None) -> None:
    reason = connection_error(source, target, entry_id)
    if reason is not None:
        raise InvalidConnectionError(source.id, target.id, reason)


def validate_graph(graph: Graph, entry_id: str | None = None) -> list[str]:
    """Validate a graph, returning a list of error messages (empty = valid)."""
    errors: list[str] = []
    errors.extend(_check_entry(graph, entry_id))
    errors.extend(_check_edges(graph, entry_id))
    errors.extend(_check_out_degree(graph))
    errors.extend(_check_payloads(graph))
    errors.extend(_check_cycles(graph))
    return errors


def ensure_valid(graph: Graph, entry_id: str | None = None) -> None:
    errors = validate_graph(graph, entry_id)
    if errors:
        raise GraphValidationError(errors)


def _check_entry(graph: Graph, entry_id: str | None) -> list[str]:
    if entry_id is None:
        return []
    node = graph.nodes.get(entry_id)
    if node is None:
        return [f"First node '{entry_id}' does not exist"]
    if node.kind == NodeKind.CONDITION_CHECK:
        return [f"First node '{entry_id}' is a condition check"]
    return []


def _check_edges(graph: Graph, entry_id: str | None) -> list[str]:
    errors: list[str] = []
    for edge in graph.edges:
        src = graph.nodes.get(edge.source)
        tgt = graph.nodes.get(edge.target)
        if not src or not tgt:
            errors.append(f"Edge {edge.id} references missing node")
            continue
        reason = connection_error(src, tgt, entry_id)
        if reason:
            errors.append(f"Edge {edge.id}: {reason}")
    return errors


def _check_out_degree(graph: Graph) -> list[str]:
    errors: list[str] = []
    for node_id, node in graph.nodes.items():
        if node.kind not in SINGLE_SUCCESSOR_KINDS:
            continue
        outgoing = graph.get_outgoing_edges(node_id)
        if len(outgoing) > 1:
            errors.append(
                f"Node '{node_id}' ({node.kind.value}): "
                f"{len(outgoing)} outgoing connections, at most one allowed"
            )
    return errors


def _check_payloads(graph: Graph) -> list[str]:
    errors: list[str] = []
    for node in graph.nodes_of_kind(NodeKind.CONDITION_CHECK):
        if not node.payload.checks:
            errors.append(f"Node '{node.id}' (condition_check): no checks")
        for check in node.payload.checks:
            if check.condition == Predicate.HAS_TIME_PASSED and check.time_in_hours is None:
                errors.append(
                    f"Node '{node.id}' (condition_check): "
                    f"HAS_TIME_PASSED requires timeInHours"
                )
    return errors


def _check_cycles(graph: Graph) -> list[str]:
    """Detect cycles using Kahn's algorithm."""
    in_degree: dict[str, int] = {nid: 0 for nid in graph.nodes}
    adj: dict[str, list[str]] = {nid: [] for nid in graph.nodes}
    for edge in graph.edges:
        if edge.source not in adj or edge.target not in in_degree:
            continue
        in_degree[edge.target] += 1
        adj[edge.source].append(edge.target)

    queue = deque(nid for nid, deg in in_degree.items() if deg == 0)
    visited = 0
    while queue:
        node_id = queue.popleft()
        visited += 1
        for succ in adj[node_id]:
            in_degree[succ] -= 1
            if in_degree[succ] == 0:
                queue.append(succ)

    if visited != len(graph.nodes):
        return ["Graph contains a cycle"]
    return []
