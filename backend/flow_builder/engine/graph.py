"""Graph data structures for the flow editor."""
from dataclasses import dataclass, field
from typing import Any

from ..nodes.base import NodeKind
from ..nodes.registry import NodeRegistry


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, raw: Any) -> "Position":
        if not isinstance(raw, dict):
            return cls()
        return cls(x=raw.get("x", 0.0), y=raw.get("y", 0.0))


@dataclass
class Edge:
    id: str
    source: str
    target: str
    source_handle: str | None = None  # port ids, reserved
    target_handle: str | None = None


@dataclass
class Node:
    id: str
    kind: NodeKind
    payload: Any = None
    position: Position = field(default_factory=Position)

    def __post_init__(self):
        self.kind = NodeKind(self.kind)
        if self.payload is None:
            self.payload = NodeRegistry.get(self.kind).default_payload()


@dataclass
class Graph:
    nodes: dict[str, Node] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)

    def get_incoming_edges(self, node_id: str) -> list[Edge]:
        return [e for e in self.edges if e.target == node_id]

    def get_outgoing_edges(self, node_id: str) -> list[Edge]:
        return [e for e in self.edges if e.source == node_id]

    def get_successors(self, node_id: str) -> set[str]:
        return {e.target for e in self.edges if e.source == node_id}

    def next_step_id(self, node_id: str) -> str | None:
        """Target of the first outgoing edge, in edge-list order."""
        for edge in self.edges:
            if edge.source == node_id:
                return edge.target
        return None

    def nodes_of_kind(self, kind: NodeKind) -> list[Node]:
        return [n for n in self.nodes.values() if n.kind == kind]


# -- Editor (React Flow) dict form ------------------------------------------

def node_from_dict(raw: dict[str, Any]) -> Node:
    """Build a Node from ``{id, type, position, data}``.

    Raises ValueError on an unknown type or malformed data.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"node must be an object, got {type(raw).__name__}")
    node_id = raw.get("id")
    if not isinstance(node_id, str) or not node_id:
        raise ValueError("node is missing an 'id'")
    try:
        node_cls = NodeRegistry.get(raw.get("type"))
    except KeyError as e:
        raise ValueError(f"node '{node_id}': {e.args[0]}") from None
    data = raw.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError(f"node '{node_id}': data must be an object")
    try:
        payload = node_cls.parse_data(data)
    except ValueError as e:
        raise ValueError(f"node '{node_id}': {e}") from None
    return Node(
        id=node_id,
        kind=node_cls.KIND,
        payload=payload,
        position=Position.from_dict(raw.get("position")),
    )


def node_to_dict(node: Node) -> dict[str, Any]:
    return {
        "id": node.id,
        "type": node.kind.value,
        "position": node.position.to_dict(),
        "data": NodeRegistry.get(node.kind).dump_data(node.payload),
    }


def edge_from_dict(raw: dict[str, Any]) -> Edge:
    if not isinstance(raw, dict):
        raise ValueError(f"edge must be an object, got {type(raw).__name__}")
    for key in ("id", "source", "target"):
        if not isinstance(raw.get(key), str):
            raise ValueError(f"edge is missing '{key}'")
    return Edge(
        id=raw["id"],
        source=raw["source"],
        target=raw["target"],
        source_handle=raw.get("sourceHandle"),
        target_handle=raw.get("targetHandle"),
    )


def edge_to_dict(edge: Edge) -> dict[str, Any]:
    out: dict[str, Any] = {"id": edge.id, "source": edge.source, "target": edge.target}
    if edge.source_handle is not None:
        out["sourceHandle"] = edge.source_handle
    if edge.target_handle is not None:
        out["targetHandle"] = edge.target_handle
    return out


def graph_from_dicts(nodes: list[dict[str, Any]], edges: list[dict[str, Any]]) -> Graph:
    graph = Graph()
    for raw in nodes:
        node = node_from_dict(raw)
        if node.id in graph.nodes:
            raise ValueError(f"duplicate node id '{node.id}'")
        graph.nodes[node.id] = node
    graph.edges = [edge_from_dict(raw) for raw in edges]
    return graph


def graph_to_dicts(graph: Graph) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    return (
        [node_to_dict(n) for n in graph.nodes.values()],
        [edge_to_dict(e) for e in graph.edges],
    )
