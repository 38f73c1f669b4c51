"""Graph decompiler: execution JSON -> flat editor graph.

Accepts the wrapped ``{"version"?, "nodes", "positions"?}`` form written by
the compiler and the legacy bare list of descriptors. Branches of a
CONDITION become ConditionCheck nodes with derived ids
(``<condition id>-check-<index>``), so compiling a decompiled graph and
decompiling it again yields the same ids.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from ..nodes.action import ActionNode
from ..nodes.base import NodeKind
from ..nodes.condition import ConditionPayload
from ..nodes.condition_check import ConditionCheckPayload
from .compiler import SCHEMA_VERSION
from .errors import InvalidImportError, MalformedDescriptorWarning
from .graph import Edge, Graph, Node, Position

logger = logging.getLogger(__name__)

CHECK_ID_SEPARATOR = "-check-"

# Fallback layout for nodes without a saved position.
PRIMARY_X = 250.0
PRIMARY_Y_START = 100.0
PRIMARY_Y_STEP = 200.0
CHECK_X_OFFSET = 350.0
CHECK_Y_STEP = 120.0

ENTRY_TYPES = {NodeKind.ACTION, NodeKind.CONDITION}


@dataclass
class DecompiledFlow:
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    entry_id: str | None = None
    warnings: list[MalformedDescriptorWarning] = field(default_factory=list)

    def to_graph(self) -> Graph:
        return Graph(nodes={n.id: n for n in self.nodes}, edges=list(self.edges))


def check_node_id(condition_id: str, index: int) -> str:
    return f"{condition_id}{CHECK_ID_SEPARATOR}{index}"


def parse_import(text: str | bytes) -> Any:
    """Parse pasted/uploaded JSON text."""
    try:
        return json.loads(text)
    except (ValueError, TypeError) as e:
        raise InvalidImportError(f"not valid JSON ({e})") from None


def decompile(payload: Any) -> DecompiledFlow:
    """Expand execution JSON into nodes, edges and the entry id.

    Raises InvalidImportError on any malformed input; nothing is returned
    partially. A nextStepId naming no node in the payload still produces
    an edge and is reported in ``warnings``.
    """
    descriptors, positions = _unwrap(payload)
    if not descriptors:
        raise InvalidImportError("flow has no nodes")

    builder = _Builder(positions)
    for index, descriptor in enumerate(descriptors):
        if not isinstance(descriptor, dict):
            raise InvalidImportError(f"node #{index} is not an object")
        node_id = descriptor.get("id")
        if not isinstance(node_id, str) or not node_id:
            raise InvalidImportError(f"node #{index} is missing an 'id'")
        kind = _descriptor_kind(descriptor, node_id)
        if index == 0 and kind not in ENTRY_TYPES:
            raise InvalidImportError(
                "first node must be an ACTION or CONDITION, "
                f"got {descriptor.get('type')}"
            )
        try:
            if kind == NodeKind.ACTION:
                builder.add_action(node_id, descriptor)
            elif kind == NodeKind.CONDITION:
                builder.add_condition(node_id, descriptor)
            else:
                builder.add_standalone_check(node_id, descriptor)
        except ValueError as e:
            raise InvalidImportError(f"node '{node_id}': {e}") from None

    flow = builder.finish()
    flow.entry_id = descriptors[0]["id"]
    for warning in flow.warnings:
        logger.warning("%s", warning)
    return flow


def _unwrap(payload: Any) -> tuple[list[Any], dict[str, Any]]:
    if isinstance(payload, list):
        return payload, {}
    if not isinstance(payload, dict) or "nodes" not in payload:
        raise InvalidImportError(
            "expected a list of nodes or an object with a 'nodes' list"
        )
    version = payload.get("version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise InvalidImportError(f"unsupported schema version {version!r}")
    nodes = payload["nodes"]
    if not isinstance(nodes, list):
        raise InvalidImportError("'nodes' must be a list")
    positions = payload.get("positions")
    if positions is None:
        positions = {}
    if not isinstance(positions, dict):
        raise InvalidImportError("'positions' must be an object")
    return nodes, positions


def _descriptor_kind(descriptor: dict[str, Any], node_id: str) -> NodeKind:
    tag = descriptor.get("type")
    try:
        return NodeKind.from_wire(tag)
    except (KeyError, TypeError):
        raise InvalidImportError(f"node '{node_id}' has unknown type {tag!r}") from None


def _next_step(source: dict[str, Any]) -> str | None:
    next_step = source.get("nextStepId")
    if next_step is None or next_step == "":
        return None
    if not isinstance(next_step, str):
        raise ValueError(f"nextStepId must be a string, got {next_step!r}")
    return next_step


def _saved_position(raw: Any) -> Position | None:
    if not isinstance(raw, dict):
        return None
    x, y = raw.get("x"), raw.get("y")
    if isinstance(x, (int, float)) and isinstance(y, (int, float)):
        return Position(x=x, y=y)
    return None


class _Builder:
    def __init__(self, positions: dict[str, Any]):
        self.positions = positions
        self.nodes: dict[str, Node] = {}
        self.edges: list[Edge] = []
        self.primary_count = 0

    def _primary_position(self, node_id: str) -> Position:
        slot = self.primary_count
        self.primary_count += 1
        saved = _saved_position(self.positions.get(node_id))
        if saved is not None:
            return saved
        return Position(x=PRIMARY_X, y=PRIMARY_Y_START + slot * PRIMARY_Y_STEP)

    def _child_position(self, node_id: str, parent: Position, index: int) -> Position:
        saved = _saved_position(self.positions.get(node_id))
        if saved is not None:
            return saved
        return Position(x=parent.x + CHECK_X_OFFSET, y=parent.y + index * CHECK_Y_STEP)

    def _add_node(self, node: Node) -> None:
        if node.id in self.nodes:
            raise InvalidImportError(f"duplicate node id '{node.id}'")
        self.nodes[node.id] = node

    def _link(self, source: str, target: str | None) -> None:
        if target is None:
            return
        # Index prefix keeps ids unique when node ids contain "-".
        edge_id = f"edge-{len(self.edges)}-{source}-{target}"
        self.edges.append(Edge(id=edge_id, source=source, target=target))

    def add_action(self, node_id: str, descriptor: dict[str, Any]) -> None:
        # Current form nests fields under "child"; legacy form keeps them flat.
        child = descriptor.get("child")
        source = child if isinstance(child, dict) else descriptor
        fields = dict(source)
        data = source.get("data")
        if fields.get("message") is None and isinstance(data, dict):
            fields["message"] = data.get("message")
        payload = ActionNode.parse_data(fields)
        next_step = _next_step(source)
        if next_step is None and source is not descriptor:
            next_step = _next_step(descriptor)
        self._add_node(Node(
            id=node_id, kind=NodeKind.ACTION, payload=payload,
            position=self._primary_position(node_id),
        ))
        self._link(node_id, next_step)

    def add_condition(self, node_id: str, descriptor: dict[str, Any]) -> None:
        branches = descriptor.get("child")
        if branches is None:
            branches = []
        if not isinstance(branches, list):
            raise ValueError("condition 'child' must be a list of branches")
        position = self._primary_position(node_id)
        self._add_node(Node(
            id=node_id, kind=NodeKind.CONDITION, payload=ConditionPayload(),
            position=position,
        ))
        for index, branch in enumerate(branches):
            if not isinstance(branch, dict):
                raise ValueError(f"branch #{index} is not an object")
            checks = branch.get("checks", branch.get("conditions"))
            check_id = check_node_id(node_id, index)
            self._add_node(Node(
                id=check_id, kind=NodeKind.CONDITION_CHECK,
                payload=ConditionCheckPayload.from_list(checks),
                position=self._child_position(check_id, position, index),
            ))
            self._link(node_id, check_id)
            self._link(check_id, _next_step(branch))

    def add_standalone_check(self, node_id: str, descriptor: dict[str, Any]) -> None:
        checks = descriptor.get("conditions", descriptor.get("checks"))
        self._add_node(Node(
            id=node_id, kind=NodeKind.CONDITION_CHECK,
            payload=ConditionCheckPayload.from_list(checks),
            position=self._primary_position(node_id),
        ))
        self._link(node_id, _next_step(descriptor))

    def finish(self) -> DecompiledFlow:
        warnings = [
            MalformedDescriptorWarning(edge.source, edge.target)
            for edge in self.edges
            if edge.target not in self.nodes
        ]
        return DecompiledFlow(
            nodes=list(self.nodes.values()), edges=self.edges, warnings=warnings,
        )
