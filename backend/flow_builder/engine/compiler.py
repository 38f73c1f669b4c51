"""Graph compiler: flat editor graph -> nested execution JSON.

Output shape (schema version 1)::

    {
      "version": 1,
      "nodes": [
        {"id": ..., "type": "ACTION",
         "child": {"action", "provider", "data"?: {"message"}, "nextStepId"?}},
        {"id": ..., "type": "CONDITION",
         "child": [{"nextStepId"?, "checks": [{"condition", "value",
                                               "conditionExtraValue"?}]}]},
        {"id": ..., "type": "CONDITION_CHECK", "conditions": [...],
         "nextStepId"?},
      ],
      "positions": {node_id: {"x", "y"}},
    }

Condition nodes absorb the ConditionCheck nodes they point at as branches;
only ConditionChecks no Condition points at are emitted on their own.
Optional fields are omitted, never null.
"""
from typing import Any

from ..nodes.base import NodeKind
from .graph import Graph, Node

SCHEMA_VERSION = 1


def compile_graph(graph: Graph, entry_id: str | None = None) -> dict[str, Any]:
    """Fold the node/edge set into the execution JSON. Pure and total."""
    actions: list[dict[str, Any]] = []
    branches: dict[str, list[dict[str, Any]]] = {}
    checks: dict[str, Node] = {}

    for node in graph.nodes.values():
        if node.kind == NodeKind.ACTION:
            actions.append(_action_descriptor(graph, node))
        elif node.kind == NodeKind.CONDITION:
            branches[node.id] = []
        elif node.kind == NodeKind.CONDITION_CHECK:
            checks[node.id] = node

    owned: set[str] = set()
    for edge in graph.edges:
        if edge.source in branches and edge.target in checks:
            check_node = checks[edge.target]
            branches[edge.source].append(_branch(graph, check_node))
            owned.add(check_node.id)

    conditions = [
        {"id": node_id, "type": NodeKind.CONDITION.wire_type, "child": node_branches}
        for node_id, node_branches in branches.items()
    ]
    standalone = [
        _standalone_check_descriptor(graph, node)
        for node_id, node in checks.items()
        if node_id not in owned
    ]

    descriptors = actions + conditions + standalone
    if entry_id is not None:
        descriptors = _entry_first(descriptors, entry_id)

    return {
        "version": SCHEMA_VERSION,
        "nodes": descriptors,
        "positions": {
            node_id: node.position.to_dict() for node_id, node in graph.nodes.items()
        },
    }


def _action_descriptor(graph: Graph, node: Node) -> dict[str, Any]:
    payload = node.payload
    child: dict[str, Any] = {
        "action": payload.action.value,
        "provider": payload.provider.value,
    }
    if payload.message is not None:
        child["data"] = {"message": payload.message}
    next_step = graph.next_step_id(node.id)
    if next_step is not None:
        child["nextStepId"] = next_step
    return {"id": node.id, "type": NodeKind.ACTION.wire_type, "child": child}


def _branch(graph: Graph, check_node: Node) -> dict[str, Any]:
    branch: dict[str, Any] = {}
    next_step = graph.next_step_id(check_node.id)
    if next_step is not None:
        branch["nextStepId"] = next_step
    branch["checks"] = check_node.payload.to_wire()
    return branch


def _standalone_check_descriptor(graph: Graph, node: Node) -> dict[str, Any]:
    descriptor: dict[str, Any] = {
        "id": node.id,
        "type": NodeKind.CONDITION_CHECK.wire_type,
        "conditions": node.payload.to_wire(),
    }
    next_step = graph.next_step_id(node.id)
    if next_step is not None:
        descriptor["nextStepId"] = next_step
    return descriptor


def _entry_first(descriptors: list[dict[str, Any]], entry_id: str) -> list[dict[str, Any]]:
    for index, descriptor in enumerate(descriptors):
        if descriptor["id"] == entry_id:
            if index == 0:
                return descriptors
            return [descriptor] + descriptors[:index] + descriptors[index + 1:]
    return descriptors
