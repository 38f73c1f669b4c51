"""Tests for connection rules and whole-graph validation."""
import pytest

from flow_builder.engine.errors import GraphValidationError, InvalidConnectionError
from flow_builder.engine.graph import Edge, Graph, Node
from flow_builder.engine.validator import (
    can_connect, check_connection, connection_error, ensure_valid, validate_graph,
)
from flow_builder.nodes.base import NodeKind, Predicate
from flow_builder.nodes.condition_check import Check, ConditionCheckPayload

A, C, K = NodeKind.ACTION, NodeKind.CONDITION, NodeKind.CONDITION_CHECK


def _node(node_id, kind):
    return Node(id=node_id, kind=kind)


class TestConnectionRules:
    @pytest.mark.parametrize("source_kind,target_kind,allowed", [
        (A, A, False),
        (A, C, True),
        (A, K, False),
        (C, A, False),
        (C, C, False),
        (C, K, True),
        (K, A, True),
        (K, C, True),
        (K, K, False),
    ])
    def test_kind_matrix(self, source_kind, target_kind, allowed):
        src = _node("src", source_kind)
        tgt = _node("tgt", target_kind)
        assert can_connect(src, tgt, None) is allowed

    def test_nothing_may_point_at_entry(self):
        check = _node("k", K)
        action = _node("a", A)
        assert can_connect(check, action, entry_id="a") is False
        assert "first node" in connection_error(check, action, "a")

    def test_entry_rule_checked_first(self):
        reason = connection_error(_node("c", C), _node("a", A), entry_id="a")
        assert "first node" in reason

    def test_reason_names_allowed_targets(self):
        reason = connection_error(_node("k", K), _node("k2", K), None)
        assert reason == "condition_check nodes can only connect to action or condition nodes"

    def test_check_connection_raises(self):
        with pytest.raises(InvalidConnectionError) as exc:
            check_connection(_node("c", C), _node("a", A), None)
        assert exc.value.source_id == "c"
        assert exc.value.target_id == "a"
        assert "condition_check" in exc.value.reason


class TestValidateGraph:
    def test_valid_graph(self, wait_then_message_graph):
        assert validate_graph(wait_then_message_graph, "send") == []
        ensure_valid(wait_then_message_graph, "send")

    def test_missing_node(self):
        graph = Graph(nodes={"a": _node("a", A)}, edges=[Edge("e1", "a", "ghost")])
        errors = validate_graph(graph)
        assert any("missing node" in e for e in errors)

    def test_rule_violation(self):
        graph = Graph(
            nodes={"c": _node("c", C), "a": _node("a", A)},
            edges=[Edge("e1", "c", "a")],
        )
        errors = validate_graph(graph)
        assert any(e.startswith("Edge e1:") for e in errors)

    def test_edge_into_entry(self, wait_then_message_graph):
        errors = validate_graph(wait_then_message_graph, entry_id="followup")
        assert any("first node cannot have incoming" in e for e in errors)

    def test_entry_must_exist(self, wait_then_message_graph):
        errors = validate_graph(wait_then_message_graph, entry_id="nope")
        assert any("does not exist" in e for e in errors)

    def test_entry_cannot_be_check(self):
        graph = Graph(nodes={"k": _node("k", K)})
        errors = validate_graph(graph, entry_id="k")
        assert any("is a condition check" in e for e in errors)

    def test_out_degree(self):
        graph = Graph(
            nodes={"k": _node("k", K), "a1": _node("a1", A), "a2": _node("a2", A)},
            edges=[Edge("e1", "k", "a1"), Edge("e2", "k", "a2")],
        )
        errors = validate_graph(graph)
        assert any("2 outgoing connections" in e for e in errors)

    def test_condition_may_branch(self):
        graph = Graph(
            nodes={"c": _node("c", C), "k1": _node("k1", K), "k2": _node("k2", K)},
            edges=[Edge("e1", "c", "k1"), Edge("e2", "c", "k2")],
        )
        assert validate_graph(graph) == []

    def test_empty_checks(self):
        graph = Graph(nodes={
            "k": Node(id="k", kind=K, payload=ConditionCheckPayload([])),
        })
        assert validate_graph(graph) == ["Node 'k' (condition_check): no checks"]

    def test_time_passed_needs_hours(self):
        graph = Graph(nodes={
            "k": Node(id="k", kind=K, payload=ConditionCheckPayload([
                Check(Predicate.HAS_TIME_PASSED, True),
            ])),
        })
        errors = validate_graph(graph)
        assert any("requires timeInHours" in e for e in errors)

    def test_cycle(self):
        graph = Graph(
            nodes={"c": _node("c", C), "k": _node("k", K)},
            edges=[Edge("e1", "c", "k"), Edge("e2", "k", "c")],
        )
        errors = validate_graph(graph)
        assert "Graph contains a cycle" in errors

    def test_ensure_valid_raises(self):
        graph = Graph(nodes={"k": Node(id="k", kind=K, payload=ConditionCheckPayload([]))})
        with pytest.raises(GraphValidationError) as exc:
            ensure_valid(graph)
        assert exc.value.errors == ["Node 'k' (condition_check): no checks"]
