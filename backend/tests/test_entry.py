"""Tests for the first-node policy."""
import pytest

from flow_builder.engine.entry import EntryPolicy, ineligibility_reason, is_eligible
from flow_builder.engine.errors import IneligibleNodeError
from flow_builder.engine.graph import Edge, Node
from flow_builder.nodes.base import NodeKind


class TestEligibility:
    def test_action_without_inputs(self):
        assert is_eligible(Node(id="a", kind=NodeKind.ACTION), [])

    def test_condition_without_inputs(self):
        assert is_eligible(Node(id="c", kind=NodeKind.CONDITION), [Edge("e", "c", "k")])

    def test_condition_check_never_eligible(self):
        node = Node(id="k", kind=NodeKind.CONDITION_CHECK)
        assert not is_eligible(node, [])
        assert ineligibility_reason(node, []) == "condition checks cannot be first nodes"

    def test_incoming_edge(self):
        node = Node(id="a", kind=NodeKind.ACTION)
        assert ineligibility_reason(node, [Edge("e", "k", "a")]) == "node has incoming connections"


class TestEntryPolicy:
    def test_set_and_clear(self):
        policy = EntryPolicy()
        policy.set_entry(Node(id="a", kind=NodeKind.ACTION), [])
        assert policy.entry_id == "a"
        assert policy.is_entry("a")
        policy.clear_entry()
        assert policy.entry_id is None
        assert not policy.is_entry("a")

    def test_set_on_condition_check_fails(self):
        policy = EntryPolicy("a")
        with pytest.raises(IneligibleNodeError) as exc:
            policy.set_entry(Node(id="k", kind=NodeKind.CONDITION_CHECK), [])
        assert exc.value.node_id == "k"
        assert policy.entry_id == "a"

    def test_set_on_node_with_inputs_fails(self):
        policy = EntryPolicy()
        with pytest.raises(IneligibleNodeError, match="incoming connections"):
            policy.set_entry(Node(id="a", kind=NodeKind.ACTION), [Edge("e", "k", "a")])
        assert policy.entry_id is None

    def test_clear_is_unconditional(self):
        policy = EntryPolicy()
        policy.clear_entry()
        assert policy.entry_id is None
