"""Editing session: owns one flow graph and its first-node marker."""
import logging
import uuid
from typing import Any

from ..nodes.base import NodeKind
from .compiler import compile_graph
from .decompiler import DecompiledFlow, decompile
from .entry import EntryPolicy
from .errors import InvalidConnectionError, MalformedDescriptorWarning, UnknownNodeError
from .graph import Edge, Graph, Node, Position
from .validator import (
    SINGLE_SUCCESSOR_KINDS, check_connection, connection_error, ensure_valid, validate_graph,
)

logger = logging.getLogger(__name__)


class EditorSession:
    """All graph mutations go through here so the connection rules and the
    first-node marker stay consistent with the edge set."""

    def __init__(self, graph: Graph | None = None, entry_id: str | None = None):
        self.graph = graph or Graph()
        self.entry = EntryPolicy(entry_id)

    @property
    def entry_id(self) -> str | None:
        return self.entry.entry_id

    def get_node(self, node_id: str) -> Node:
        node = self.graph.nodes.get(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        return node

    # -- Nodes ---------------------------------------------------------------

    def add_node(
        self,
        kind: NodeKind | str,
        position: Position | None = None,
        payload: Any = None,
        node_id: str | None = None,
    ) -> Node:
        node = Node(
            id=node_id or str(uuid.uuid4()),
            kind=kind,
            payload=payload,
            position=position or Position(),
        )
        if node.id in self.graph.nodes:
            raise ValueError(f"Node '{node.id}' already exists")
        self.graph.nodes[node.id] = node
        return node

    def update_payload(self, node_id: str, payload: Any) -> Node:
        node = self.get_node(node_id)
        node.payload = payload
        return node

    def move_node(self, node_id: str, position: Position) -> Node:
        node = self.get_node(node_id)
        node.position = position
        return node

    def delete_node(self, node_id: str) -> None:
        """Remove a node and its incident edges."""
        self.get_node(node_id)
        if self.entry.is_entry(node_id):
            self.entry.clear_entry()
        del self.graph.nodes[node_id]
        self.graph.edges = [
            e for e in self.graph.edges if e.source != node_id and e.target != node_id
        ]

    # -- Edges ---------------------------------------------------------------

    def _edge_conflict(self, source: Node, target: Node) -> str | None:
        outgoing = self.graph.get_outgoing_edges(source.id)
        if any(e.target == target.id for e in outgoing):
            return "nodes are already connected"
        if source.kind in SINGLE_SUCCESSOR_KINDS and outgoing:
            return f"{source.kind.value} nodes can only have one next step"
        return None

    def connection_error(self, source_id: str, target_id: str) -> str | None:
        """Why ``source -> target`` would be refused, or None."""
        source = self.get_node(source_id)
        target = self.get_node(target_id)
        return connection_error(source, target, self.entry_id) or self._edge_conflict(source, target)

    def connect(
        self,
        source_id: str,
        target_id: str,
        source_handle: str | None = None,
        target_handle: str | None = None,
        edge_id: str | None = None,
    ) -> Edge:
        source = self.get_node(source_id)
        target = self.get_node(target_id)
        try:
            check_connection(source, target, self.entry_id)
            reason = self._edge_conflict(source, target)
            if reason is None and edge_id is not None and self._find_edge(edge_id) is not None:
                reason = f"edge id '{edge_id}' is already in use"
            if reason is not None:
                raise InvalidConnectionError(source_id, target_id, reason)
        except InvalidConnectionError as e:
            logger.debug("Refused connection %s -> %s: %s", source_id, target_id, e.reason)
            raise
        edge = Edge(
            id=edge_id or f"edge-{uuid.uuid4()}",
            source=source_id,
            target=target_id,
            source_handle=source_handle,
            target_handle=target_handle,
        )
        self.graph.edges.append(edge)
        return edge

    def _find_edge(self, edge_id: str) -> int | None:
        for index, edge in enumerate(self.graph.edges):
            if edge.id == edge_id:
                return index
        return None

    def disconnect(self, edge_id: str) -> Edge:
        index = self._find_edge(edge_id)
        if index is None:
            raise KeyError(f"Unknown edge: {edge_id}")
        return self.graph.edges.pop(index)

    def next_step_id(self, node_id: str) -> str | None:
        return self.graph.next_step_id(node_id)

    # -- First node ----------------------------------------------------------

    def set_entry(self, node_id: str) -> None:
        node = self.get_node(node_id)
        self.entry.set_entry(node, self.graph.get_incoming_edges(node_id))

    def clear_entry(self) -> None:
        self.entry.clear_entry()

    # -- Whole flow ----------------------------------------------------------

    def validate(self) -> list[str]:
        return validate_graph(self.graph, self.entry_id)

    def export(self, strict: bool = False) -> dict[str, Any]:
        """Compile the flow; with ``strict`` refuse graphs that fail validation."""
        if strict:
            ensure_valid(self.graph, self.entry_id)
        return compile_graph(self.graph, self.entry_id)

    def import_flow(self, payload: Any) -> list[MalformedDescriptorWarning]:
        """Replace the whole graph with a decompiled payload.

        On InvalidImportError the session is left untouched. Edges into the
        first node and edges to unknown nodes are dropped; the returned
        warnings describe the latter.
        """
        flow = decompile(payload)
        graph = _cleaned_graph(flow)
        self.graph = graph
        self.entry = EntryPolicy(flow.entry_id)
        logger.info(
            "Imported flow: %d nodes, %d edges, first node %s",
            len(graph.nodes), len(graph.edges), flow.entry_id,
        )
        return flow.warnings

    def reset(self) -> None:
        self.graph = Graph()
        self.entry = EntryPolicy()


def _cleaned_graph(flow: DecompiledFlow) -> Graph:
    graph = flow.to_graph()
    graph.edges = [
        e for e in graph.edges
        if e.target != flow.entry_id and e.target in graph.nodes
    ]
    return graph
