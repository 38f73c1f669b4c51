"""Shared test fixtures for flow builder backend tests."""
import sys
from pathlib import Path

import pytest

# Ensure flow_builder package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from flow_builder.config import settings
from flow_builder.engine.graph import Edge, Graph, Node, Position
from flow_builder.nodes.action import ActionPayload
from flow_builder.nodes.base import ActionKind, NodeKind, Predicate, Provider
from flow_builder.nodes.condition_check import Check, ConditionCheckPayload


@pytest.fixture(scope="session", autouse=True)
def register_nodes():
    """Discover and register all node kinds once per test session."""
    from flow_builder.nodes.registry import NodeRegistry
    NodeRegistry.discover("flow_builder.nodes")


@pytest.fixture
def wait_then_message_graph():
    """send -> cond -> check(HAS_TIME_PASSED 24h) -> followup."""
    nodes = {
        "send": Node(
            id="send", kind=NodeKind.ACTION,
            payload=ActionPayload(ActionKind.SEND_CONTACT_REQUEST, Provider.LINKEDIN),
            position=Position(0, 0),
        ),
        "cond": Node(id="cond", kind=NodeKind.CONDITION, position=Position(0, 200)),
        "check": Node(
            id="check", kind=NodeKind.CONDITION_CHECK,
            payload=ConditionCheckPayload([
                Check(Predicate.HAS_TIME_PASSED, True, 24),
            ]),
            position=Position(300, 200),
        ),
        "followup": Node(
            id="followup", kind=NodeKind.ACTION,
            payload=ActionPayload(ActionKind.SEND_MESSAGE, Provider.LINKEDIN, "Thanks!"),
            position=Position(0, 400),
        ),
    }
    edges = [
        Edge(id="e1", source="send", target="cond"),
        Edge(id="e2", source="cond", target="check"),
        Edge(id="e3", source="check", target="followup"),
    ]
    return Graph(nodes=nodes, edges=edges)


@pytest.fixture
def branching_payload():
    """Execution JSON with a two-way condition and a standalone check."""
    return {
        "version": 1,
        "nodes": [
            {
                "id": "start", "type": "ACTION",
                "child": {
                    "action": "SEND_CONTACT_REQUEST", "provider": "LINKEDIN",
                    "nextStepId": "gate",
                },
            },
            {
                "id": "gate", "type": "CONDITION",
                "child": [
                    {
                        "nextStepId": "thanks",
                        "checks": [{"condition": "IS_LINKEDIN_CONTACT", "value": True}],
                    },
                    {
                        "checks": [
                            {"condition": "HAS_TIME_PASSED", "value": True,
                             "conditionExtraValue": {"timeInHours": 48}},
                            {"condition": "IS_LINKEDIN_CONTACT", "value": False},
                        ],
                    },
                ],
            },
            {
                "id": "thanks", "type": "ACTION",
                "child": {
                    "action": "SEND_MESSAGE", "provider": "LINKEDIN",
                    "data": {"message": "Thanks for connecting"},
                },
            },
            {
                "id": "orphan", "type": "CONDITION_CHECK",
                "conditions": [{"condition": "IS_NOVA", "value": True}],
                "nextStepId": "thanks",
            },
        ],
        "positions": {
            "start": {"x": 10, "y": 20},
            "gate-check-1": {"x": 500, "y": 500},
        },
    }


@pytest.fixture
def flows_dir(tmp_path):
    """Point settings.flows_dir at a temp directory."""
    original = settings.flows_dir
    settings.flows_dir = tmp_path
    yield tmp_path
    settings.flows_dir = original


@pytest.fixture
def client(flows_dir):
    from fastapi.testclient import TestClient
    from flow_builder.main import app

    with TestClient(app) as test_client:
        yield test_client
