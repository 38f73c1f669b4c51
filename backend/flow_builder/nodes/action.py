"""Action node: one outward step (contact request or message) via a provider."""
from dataclasses import dataclass
from typing import Any

from .base import ActionKind, BaseNode, NodeKind, Provider, coerce_enum
from .registry import NodeRegistry


@dataclass
class ActionPayload:
    action: ActionKind = ActionKind.SEND_CONTACT_REQUEST
    provider: Provider = Provider.LINKEDIN
    # Meaningful for SEND_MESSAGE only; not enforced.
    message: str | None = None

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> "ActionPayload":
        if not isinstance(fields, dict):
            raise ValueError(f"action must be an object, got {type(fields).__name__}")
        message = fields.get("message")
        if message is not None and not isinstance(message, str):
            raise ValueError(f"message must be a string, got {type(message).__name__}")
        return cls(
            action=coerce_enum(ActionKind, fields.get("action"), "action"),
            provider=coerce_enum(Provider, fields.get("provider"), "provider"),
            message=message,
        )

    def to_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "action": self.action.value,
            "provider": self.provider.value,
        }
        if self.message is not None:
            fields["message"] = self.message
        return fields


@NodeRegistry.register()
class ActionNode(BaseNode):
    """Single action step."""

    KIND = NodeKind.ACTION
    CATEGORY = "Actions"
    DISPLAY_NAME = "Action"

    @classmethod
    def default_payload(cls) -> ActionPayload:
        return ActionPayload()

    @classmethod
    def parse_data(cls, data: dict[str, Any]) -> ActionPayload:
        # Older editor builds stored a list of actions; only the first counts.
        if isinstance(data.get("actions"), list):
            actions = data["actions"]
            if not actions:
                return cls.default_payload()
            return ActionPayload.from_fields(actions[0])
        return ActionPayload.from_fields(data)

    @classmethod
    def dump_data(cls, payload: ActionPayload) -> dict[str, Any]:
        return payload.to_fields()
