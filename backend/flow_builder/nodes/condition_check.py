"""ConditionCheck node: an AND-combined list of predicate checks guarding a branch."""
from dataclasses import dataclass, field
from typing import Any

from .base import BaseNode, NodeKind, Predicate, coerce_enum
from .registry import NodeRegistry


@dataclass
class Check:
    condition: Predicate
    value: bool = True
    time_in_hours: float | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Check":
        """Accept both the flat editor shape and the wire shape.

        Flat: ``{condition, value, timeInHours?}``
        Wire: ``{condition, value, conditionExtraValue?: {timeInHours}}``
        """
        if not isinstance(raw, dict):
            raise ValueError(f"check must be an object, got {type(raw).__name__}")
        value = raw.get("value", True)
        if not isinstance(value, bool):
            raise ValueError(f"check value must be a boolean, got {value!r}")
        hours = raw.get("timeInHours")
        extra = raw.get("conditionExtraValue")
        if hours is None and isinstance(extra, dict):
            hours = extra.get("timeInHours")
        if hours is not None and (isinstance(hours, bool) or not isinstance(hours, (int, float))):
            raise ValueError(f"timeInHours must be a number, got {hours!r}")
        return cls(
            condition=coerce_enum(Predicate, raw.get("condition"), "condition"),
            value=value,
            time_in_hours=hours,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"condition": self.condition.value, "value": self.value}
        if self.time_in_hours is not None:
            out["timeInHours"] = self.time_in_hours
        return out

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {"condition": self.condition.value, "value": self.value}
        if self.time_in_hours is not None:
            out["conditionExtraValue"] = {"timeInHours": self.time_in_hours}
        return out


@dataclass
class ConditionCheckPayload:
    checks: list[Check] = field(default_factory=list)

    @classmethod
    def from_list(cls, raw: Any) -> "ConditionCheckPayload":
        if raw is None:
            return cls()
        if not isinstance(raw, list):
            raise ValueError(f"conditions must be a list, got {type(raw).__name__}")
        return cls(checks=[Check.from_dict(item) for item in raw])

    def to_wire(self) -> list[dict[str, Any]]:
        return [check.to_wire() for check in self.checks]


@NodeRegistry.register()
class ConditionCheckNode(BaseNode):
    """Validate conditions."""

    KIND = NodeKind.CONDITION_CHECK
    CATEGORY = "Condition Checks"
    DISPLAY_NAME = "Condition Check"

    @classmethod
    def default_payload(cls) -> ConditionCheckPayload:
        return ConditionCheckPayload(
            checks=[Check(condition=Predicate.IS_LINKEDIN_CONTACT, value=True)]
        )

    @classmethod
    def parse_data(cls, data: dict[str, Any]) -> ConditionCheckPayload:
        return ConditionCheckPayload.from_list(data.get("conditions"))

    @classmethod
    def dump_data(cls, payload: ConditionCheckPayload) -> dict[str, Any]:
        return {"conditions": [check.to_dict() for check in payload.checks]}
