"""Condition node: a branching point whose branches are ConditionCheck nodes."""
from dataclasses import dataclass
from typing import Any

from .base import BaseNode, NodeKind
from .registry import NodeRegistry


@dataclass
class ConditionPayload:
    pass


@NodeRegistry.register()
class ConditionNode(BaseNode):
    """Conditional branching."""

    KIND = NodeKind.CONDITION
    CATEGORY = "Conditions"
    DISPLAY_NAME = "Condition"

    @classmethod
    def default_payload(cls) -> ConditionPayload:
        return ConditionPayload()

    @classmethod
    def parse_data(cls, data: dict[str, Any]) -> ConditionPayload:
        return ConditionPayload()

    @classmethod
    def dump_data(cls, payload: ConditionPayload) -> dict[str, Any]:
        return {}
