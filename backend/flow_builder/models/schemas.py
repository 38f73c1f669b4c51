"""Pydantic schemas for API request/response models."""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire names are camelCase (the canvas speaks React Flow)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PositionSchema(CamelModel):
    x: float = 0.0
    y: float = 0.0


class NodeSchema(CamelModel):
    id: str
    type: Literal["action", "condition", "condition_check"]
    position: PositionSchema = PositionSchema()
    data: dict[str, Any] = {}


class EdgeSchema(CamelModel):
    id: str
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None


class GraphSchema(CamelModel):
    nodes: list[NodeSchema]
    edges: list[EdgeSchema] = []
    first_node_id: str | None = None


class ConnectionCheckRequest(GraphSchema):
    source: str
    target: str


class ConnectionCheckResponse(CamelModel):
    allowed: bool
    reason: str | None = None


class EntryCheckRequest(CamelModel):
    nodes: list[NodeSchema]
    edges: list[EdgeSchema] = []
    node_id: str


class EntryCheckResponse(CamelModel):
    eligible: bool
    reason: str | None = None


class ValidationResponse(CamelModel):
    valid: bool
    errors: list[str] = []


class DecompileResponse(CamelModel):
    nodes: list[NodeSchema]
    edges: list[EdgeSchema]
    first_node_id: str | None = None
    warnings: list[str] = []


class NodeDefinitionResponse(CamelModel):
    kind: str
    display_name: str
    category: str
    description: str
    default_data: dict[str, Any]


class FlowCreate(CamelModel):
    name: str
    description: str | None = None
    nodes: list[NodeSchema] = []
    edges: list[EdgeSchema] = []


class FlowUpdate(CamelModel):
    name: str | None = None
    description: str | None = None
    nodes: list[NodeSchema] | None = None
    edges: list[EdgeSchema] | None = None


class FlowRecord(CamelModel):
    id: str
    name: str
    description: str | None = None
    nodes: list[NodeSchema]
    edges: list[EdgeSchema]
    created_at: str
    updated_at: str
