"""REST API routes."""
import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Response

from ..config import settings
from ..engine.entry import ineligibility_reason
from ..engine.errors import GraphValidationError, InvalidImportError
from ..engine.graph import Graph, graph_from_dicts, graph_to_dicts
from ..engine.session import EditorSession
from ..engine.store import FlowStore
from ..engine.validator import validate_graph
from ..models.schemas import (
    ConnectionCheckRequest, ConnectionCheckResponse,
    DecompileResponse, EdgeSchema, EntryCheckRequest, EntryCheckResponse,
    FlowCreate, FlowRecord, FlowUpdate, GraphSchema, NodeDefinitionResponse,
    NodeSchema, ValidationResponse,
)
from ..nodes.registry import NodeRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_store() -> FlowStore:
    return FlowStore(settings.flows_dir)


def _dump(items: list[NodeSchema] | list[EdgeSchema]) -> list[dict[str, Any]]:
    return [item.model_dump(by_alias=True, exclude_none=True) for item in items]


def _schema_to_graph(nodes: list[NodeSchema], edges: list[EdgeSchema]) -> Graph:
    try:
        return graph_from_dicts(_dump(nodes), _dump(edges))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/nodes", response_model=dict[str, NodeDefinitionResponse])
async def list_nodes():
    """Return the node palette definitions."""
    return {
        kind: NodeDefinitionResponse(
            kind=defn.kind,
            display_name=defn.display_name,
            category=defn.category,
            description=defn.description,
            default_data=defn.default_data,
        )
        for kind, defn in NodeRegistry.all_definitions().items()
    }


# -- Compile / import --------------------------------------------------------

@router.post("/flows/compile")
async def compile_flow(request: GraphSchema, strict: bool = False):
    """Compile the editor graph into the execution JSON.

    With ``strict`` a graph that fails validation is refused with its issues.
    """
    graph = _schema_to_graph(request.nodes, request.edges)
    session = EditorSession(graph, request.first_node_id)
    try:
        return session.export(strict=strict)
    except GraphValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors)


@router.post("/flows/decompile", response_model=DecompileResponse)
async def decompile_flow(payload: Any = Body(...)):
    """Rebuild an editor graph from execution JSON (wrapped or legacy list)."""
    session = EditorSession()
    try:
        warnings = session.import_flow(payload)
    except InvalidImportError as e:
        raise HTTPException(status_code=400, detail=e.reason)
    nodes, edges = graph_to_dicts(session.graph)
    return DecompileResponse(
        nodes=nodes,
        edges=edges,
        first_node_id=session.entry_id,
        warnings=[str(w) for w in warnings],
    )


@router.post("/flows/validate", response_model=ValidationResponse)
async def validate_flow(request: GraphSchema):
    graph = _schema_to_graph(request.nodes, request.edges)
    errors = validate_graph(graph, request.first_node_id)
    return ValidationResponse(valid=not errors, errors=errors)


@router.post("/connections/check", response_model=ConnectionCheckResponse)
async def check_connection(request: ConnectionCheckRequest):
    """Tell the canvas whether a prospective edge would be accepted."""
    graph = _schema_to_graph(request.nodes, request.edges)
    for node_id in (request.source, request.target):
        if node_id not in graph.nodes:
            raise HTTPException(status_code=400, detail=f"Unknown node: {node_id}")
    session = EditorSession(graph, request.first_node_id)
    reason = session.connection_error(request.source, request.target)
    return ConnectionCheckResponse(allowed=reason is None, reason=reason)


@router.post("/entry/check", response_model=EntryCheckResponse)
async def check_entry(request: EntryCheckRequest):
    graph = _schema_to_graph(request.nodes, request.edges)
    node = graph.nodes.get(request.node_id)
    if node is None:
        raise HTTPException(status_code=400, detail=f"Unknown node: {request.node_id}")
    reason = ineligibility_reason(node, graph.edges)
    return EntryCheckResponse(eligible=reason is None, reason=reason)


# -- Saved flows -------------------------------------------------------------

@router.get("/flows", response_model=list[FlowRecord])
async def list_flows():
    return get_store().list()


@router.get("/flows/{flow_id}", response_model=FlowRecord)
async def get_flow(flow_id: str):
    record = get_store().get(flow_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Flow sequence not found")
    return record


@router.post("/flows", response_model=FlowRecord, status_code=201)
async def create_flow(flow: FlowCreate):
    _schema_to_graph(flow.nodes, flow.edges)
    return get_store().create(
        name=flow.name,
        description=flow.description,
        nodes=_dump(flow.nodes),
        edges=_dump(flow.edges),
    )


@router.put("/flows/{flow_id}", response_model=FlowRecord)
async def update_flow(flow_id: str, flow: FlowUpdate):
    store = get_store()
    current = store.get(flow_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Flow sequence not found")
    changes: dict[str, Any] = flow.model_dump(exclude_unset=True, include={"name", "description"})
    if flow.nodes is not None:
        changes["nodes"] = _dump(flow.nodes)
    if flow.edges is not None:
        changes["edges"] = _dump(flow.edges)
    try:
        graph_from_dicts(changes.get("nodes", current["nodes"]), changes.get("edges", current["edges"]))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return store.update(flow_id, changes)


@router.delete("/flows/{flow_id}", status_code=204)
async def delete_flow(flow_id: str):
    if not get_store().delete(flow_id):
        raise HTTPException(status_code=404, detail="Flow sequence not found")
    return Response(status_code=204)
