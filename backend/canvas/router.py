# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Canvas endpoints – nodes, connections, element links and the full-graph
save / load pair.

Security invariants enforced by every handler
---------------------------------------------
* JWT is required on every endpoint.
* ``require_project_owner`` runs before any handler body.  A project the
  caller does not own is indistinguishable from one that does not exist.

Nodes are addressed by their frontend ``clientId``; connections reference
client ids as well, so a full canvas save can recreate every row without
the frontend ever learning server ids.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from core.errors import ConflictError, ValidationError
from core.logger import logger
from core.schemas import MessageResponse
from core.security import require_project_owner
from models.canvas_node import CanvasNode, NodeConnection
from models.project import Project
from canvas import graph
from canvas.schemas import (
    CanvasSave,
    CanvasSaveResponse,
    CanvasState,
    ConnectionPair,
    ConnectRequest,
    DisconnectRequest,
    NodeCreate,
    NodeResponse,
    NodeUpdate,
)

router = APIRouter(prefix="/api/projects/{project_id}", tags=["canvas"])

# Columns that may not be cleared with an explicit null in a PATCH body
_NOT_NULLABLE = {"title", "description", "x", "y", "width", "height", "status", "picked",
                 "element_links", "env_vars"}


def _is_duplicate_node_id(exc: IntegrityError) -> bool:
    """PostgreSQL names the constraint, SQLite names the columns."""
    detail = str(exc.orig)
    return "canvas_nodes_project_id_client_id_key" in detail or "canvas_nodes.client_id" in detail


# ---------------------------------------------------------------------------
# GET /api/projects/{id}/canvas  – full graph + viewport
# ---------------------------------------------------------------------------


@router.get("/canvas", response_model=CanvasState)
def load_canvas(
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """Everything a client needs to rehydrate its canvas session."""
    return CanvasState(
        nodes=graph.list_nodes(db, project.id),
        connections=graph.list_connections(db, project.id),
        zoom=project.zoom,
        pan_x=project.pan_x,
        pan_y=project.pan_y,
    )


# ---------------------------------------------------------------------------
# PUT /api/projects/{id}/canvas  – atomic full replace
# ---------------------------------------------------------------------------


@router.put("/canvas", response_model=CanvasSaveResponse)
def save_canvas(
    body: CanvasSave,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """
    Replace the project's whole node set and connection set in a single
    transaction.  Either the canvas becomes exactly *body* or nothing
    changes.
    """
    try:
        if body.zoom is not None:
            project.zoom = body.zoom
        if body.pan_x is not None:
            project.pan_x = body.pan_x
        if body.pan_y is not None:
            project.pan_y = body.pan_y

        db.query(CanvasNode).filter(CanvasNode.project_id == project.id).delete()
        db.add_all([graph.build_node(project.id, node) for node in body.nodes])
        db.flush()

        db.query(NodeConnection).filter(NodeConnection.project_id == project.id).delete()
        graph.add_connections(db, project.id, body.connections)

        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if _is_duplicate_node_id(exc):
            logger.warning("Canvas save for project %s rejected: duplicate node ids", project.id)
            raise ConflictError("Canvas contains duplicate node ids")
        logger.warning("Canvas save for project %s rejected: %s", project.id, exc.orig)
        raise ConflictError("Canvas conflicts with a database constraint")
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Canvas saved for project %s: %d nodes, %d connections",
        project.id,
        len(body.nodes),
        len(body.connections),
    )
    return CanvasSaveResponse(message="Canvas saved", node_count=len(body.nodes))


# ---------------------------------------------------------------------------
# GET /api/projects/{id}/nodes
# ---------------------------------------------------------------------------


@router.get("/nodes", response_model=List[NodeResponse])
def list_nodes(
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    return graph.list_nodes(db, project.id)


# ---------------------------------------------------------------------------
# POST /api/projects/{id}/nodes
# ---------------------------------------------------------------------------


@router.post("/nodes", response_model=NodeResponse, status_code=status.HTTP_201_CREATED)
def create_node(
    body: NodeCreate,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """
    Insert a node, plus one edge to every client id in ``connectedTo``.
    A clientId already used in this project is a 409 and leaves the
    existing node untouched.
    """
    if not body.client_id:
        raise ValidationError("clientId is required")
    if graph.client_id_exists(db, project.id, body.client_id):
        raise ConflictError(f"Node '{body.client_id}' already exists in this project")

    node = graph.build_node(project.id, body)
    db.add(node)
    graph.add_connections(db, project.id, ((body.client_id, target) for target in body.connected_to or []))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Node '{body.client_id}' already exists in this project")

    db.refresh(node)
    return graph.node_response(db, project.id, node)


# ---------------------------------------------------------------------------
# GET /api/projects/{id}/nodes/{clientId}
# ---------------------------------------------------------------------------


@router.get("/nodes/{client_id}", response_model=NodeResponse)
def get_node(
    client_id: str,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    node = graph.get_node(db, project.id, client_id)
    return graph.node_response(db, project.id, node)


# ---------------------------------------------------------------------------
# PATCH /api/projects/{id}/nodes/{clientId}
# ---------------------------------------------------------------------------


@router.patch("/nodes/{client_id}", response_model=NodeResponse)
def update_node(
    client_id: str,
    body: NodeUpdate,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """
    True patch: only the keys present in the body are written.
    """
    node = graph.get_node(db, project.id, client_id)
    changes = body.model_dump(exclude_unset=True)

    for field, value in changes.items():
        if value is None and field in _NOT_NULLABLE:
            raise ValidationError(f"{field} cannot be null")
        if field == "element_links":
            value = graph.dump_element_links(body.element_links)
        setattr(node, field, value)

    db.commit()
    db.refresh(node)
    return graph.node_response(db, project.id, node)


# ---------------------------------------------------------------------------
# DELETE /api/projects/{id}/nodes/{clientId}
# ---------------------------------------------------------------------------


@router.delete("/nodes/{client_id}", response_model=MessageResponse)
def delete_node(
    client_id: str,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """Deletes the node, its edges, and element links pointing at it."""
    node = graph.get_node(db, project.id, client_id)
    graph.delete_node(db, node)
    db.commit()
    return MessageResponse(message="Node deleted")


# ---------------------------------------------------------------------------
# POST /api/projects/{id}/nodes/{clientId}/duplicate
# ---------------------------------------------------------------------------


@router.post(
    "/nodes/{client_id}/duplicate",
    response_model=NodeResponse,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_node(
    client_id: str,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """
    Copy every field of the source except the client id, the title (gets a
    " (copy)" suffix) and the position (offset by +20/+20).  Outgoing
    connections are not copied.
    """
    source = graph.get_node(db, project.id, client_id)

    copy = CanvasNode(
        project_id=project.id,
        client_id=graph.next_copy_client_id(db, project.id, client_id),
        node_type=source.node_type,
        title=f"{source.title} (copy)",
        description=source.description,
        x=source.x + graph.DUPLICATE_OFFSET,
        y=source.y + graph.DUPLICATE_OFFSET,
        width=source.width,
        height=source.height,
        status=source.status,
        content=source.content,
        file_name=source.file_name,
        generated_code=source.generated_code,
        picked=source.picked,
        parent_id=source.parent_id,
        page_role=source.page_role,
        tag=source.tag,
        platform=source.platform,
        language=source.language,
        ai_model=source.ai_model,
        element_links=list(source.element_links or []),
        env_vars=dict(source.env_vars or {}),
    )
    db.add(copy)
    db.commit()
    db.refresh(copy)
    return graph.to_response(copy)


# ---------------------------------------------------------------------------
# DELETE /api/projects/{id}/nodes/{clientId}/element-links/{targetId}
# ---------------------------------------------------------------------------


@router.delete("/nodes/{client_id}/element-links/{target_id}", response_model=NodeResponse)
def remove_element_link(
    client_id: str,
    target_id: str,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """Remove every element link of the node that targets *target_id*."""
    node = graph.get_node(db, project.id, client_id)
    graph.remove_element_links(node, target_id)
    db.commit()
    db.refresh(node)
    return graph.node_response(db, project.id, node)


# ---------------------------------------------------------------------------
# /api/projects/{id}/connections
# ---------------------------------------------------------------------------


@router.get("/connections", response_model=List[ConnectionPair])
def list_connections(
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """``[[from, to], ...]``"""
    return graph.list_connections(db, project.id)


@router.post("/connections", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def connect_nodes(
    body: ConnectRequest,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """Idempotent – connecting an already connected pair is not an error."""
    if not body.from_client_id or not body.to_client_id:
        raise ValidationError("fromClientId and toClientId are required")

    graph.add_connections(db, project.id, [(body.from_client_id, body.to_client_id)])
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same edge first
        db.rollback()
    return MessageResponse(message="Connection created")


@router.delete("/connections", response_model=MessageResponse)
def disconnect_nodes(
    body: DisconnectRequest,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """Remove the exact edge if present; absent edges are not an error."""
    db.query(NodeConnection).filter(
        NodeConnection.project_id == project.id,
        NodeConnection.from_client_id == body.from_client_id,
        NodeConnection.to_client_id == body.to_client_id,
    ).delete(synchronize_session=False)
    db.commit()
    return MessageResponse(message="Connection removed")
