"""Base node abstraction and the closed wire vocabulary."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class NodeKind(str, Enum):
    ACTION = "action"
    CONDITION = "condition"
    CONDITION_CHECK = "condition_check"

    @property
    def wire_type(self) -> str:
        """Descriptor tag used in the execution JSON (``ACTION`` etc.)."""
        return self.name

    @classmethod
    def from_wire(cls, tag: str) -> "NodeKind":
        return cls[tag]


class ActionKind(str, Enum):
    SEND_CONTACT_REQUEST = "SEND_CONTACT_REQUEST"
    SEND_MESSAGE = "SEND_MESSAGE"


class Provider(str, Enum):
    NOVA = "NOVA"
    LINKEDIN = "LINKEDIN"


class Predicate(str, Enum):
    IS_NOVA = "IS_NOVA"
    IS_NOVA_CONTACT = "IS_NOVA_CONTACT"
    IS_LINKEDIN_CONTACT = "IS_LINKEDIN_CONTACT"
    HAS_TIME_PASSED = "HAS_TIME_PASSED"
    HAS_REJECTED_CONTACT_NOVA = "HAS_REJECTED_CONTACT_NOVA"
    HAS_REJECTED_CONTACT_LINKEDIN = "HAS_REJECTED_CONTACT_LINKEDIN"


def coerce_enum(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    """Look up an enum member by value, with a readable error."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(
            f"invalid {field_name} {value!r} (expected one of: {allowed})"
        ) from None


@dataclass
class NodeDefinition:
    """Serializable node definition sent to the frontend palette."""
    kind: str
    display_name: str
    category: str
    description: str
    default_data: dict[str, Any]


class BaseNode(ABC):
    """Abstract base class for the node kinds a flow can contain."""

    KIND: NodeKind
    CATEGORY: str = "Uncategorized"
    DISPLAY_NAME: str = ""
    DESCRIPTION: str = ""

    @classmethod
    @abstractmethod
    def default_payload(cls) -> Any:
        ...

    @classmethod
    @abstractmethod
    def parse_data(cls, data: dict[str, Any]) -> Any:
        """Build a payload from the editor's ``data`` dict."""
        ...

    @classmethod
    @abstractmethod
    def dump_data(cls, payload: Any) -> dict[str, Any]:
        ...

    @classmethod
    def get_definition(cls) -> NodeDefinition:
        return NodeDefinition(
            kind=cls.KIND.value,
            display_name=cls.DISPLAY_NAME or cls.__name__,
            category=cls.CATEGORY,
            description=cls.DESCRIPTION or cls.__doc__ or "",
            default_data=cls.dump_data(cls.default_payload()),
        )
