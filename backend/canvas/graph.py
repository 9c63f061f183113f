# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Graph helpers shared by the node, connection and canvas endpoints.

None of these functions commit; the calling handler owns the transaction.
Element links and env vars are JSON columns.  They are validated against
their typed schema on the way out, and a row that no longer matches is
reported as an internal error rather than silently emptied.
"""

import time
import uuid
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

import pydantic
from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.errors import InternalError, NotFoundError
from models.canvas_node import CanvasNode, NodeConnection
from canvas.schemas import ElementLink, NodeCreate, NodeResponse

_LINKS_ADAPTER = pydantic.TypeAdapter(List[ElementLink])
_ENV_ADAPTER = pydantic.TypeAdapter(Dict[str, str])

# Canvas units added to x and y of a duplicated node
DUPLICATE_OFFSET = 20.0


# ---------------------------------------------------------------------------
# JSON columns
# ---------------------------------------------------------------------------


def dump_element_links(links: Optional[Iterable[ElementLink]]) -> list:
    return [link.model_dump(by_alias=True) for link in links or []]


def load_element_links(node: CanvasNode) -> List[ElementLink]:
    try:
        return _LINKS_ADAPTER.validate_python(node.element_links or [])
    except pydantic.ValidationError as exc:
        raise InternalError(f"Corrupt element links on node {node.client_id!r}: {exc}") from exc


def load_env_vars(node: CanvasNode) -> Dict[str, str]:
    try:
        return _ENV_ADAPTER.validate_python(node.env_vars or {})
    except pydantic.ValidationError as exc:
        raise InternalError(f"Corrupt env vars on node {node.client_id!r}: {exc}") from exc


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


def build_node(project_id: uuid.UUID, body: NodeCreate) -> CanvasNode:
    """Turn a create payload into an (unsaved) ORM row."""
    return CanvasNode(
        project_id=project_id,
        client_id=body.client_id,
        node_type=body.node_type,
        title=body.title,
        description=body.description,
        x=body.x,
        y=body.y,
        width=body.width,
        height=body.height,
        status=body.status or "idle",
        content=body.content,
        file_name=body.file_name,
        generated_code=body.generated_code,
        picked=bool(body.picked),
        parent_id=body.parent_id,
        page_role=body.page_role,
        tag=body.tag,
        platform=body.platform,
        language=body.language,
        ai_model=body.ai_model,
        element_links=dump_element_links(body.element_links),
        env_vars=dict(body.env_vars or {}),
    )


def to_response(node: CanvasNode, connected_to: Optional[List[str]] = None) -> NodeResponse:
    return NodeResponse(
        id=node.id,
        client_id=node.client_id,
        node_type=node.node_type,
        title=node.title,
        description=node.description,
        x=node.x,
        y=node.y,
        width=node.width,
        height=node.height,
        status=node.status,
        content=node.content,
        file_name=node.file_name,
        generated_code=node.generated_code,
        picked=node.picked,
        parent_id=node.parent_id,
        page_role=node.page_role,
        tag=node.tag,
        platform=node.platform,
        language=node.language,
        ai_model=node.ai_model,
        element_links=load_element_links(node),
        env_vars=load_env_vars(node),
        connected_to=list(connected_to or []),
        created_at=node.created_at,
        updated_at=node.updated_at,
    )


def get_node(db: Session, project_id: uuid.UUID, client_id: str) -> CanvasNode:
    """Fetch one node or raise 404."""
    node = (
        db.query(CanvasNode)
        .filter(CanvasNode.project_id == project_id, CanvasNode.client_id == client_id)
        .first()
    )
    if not node:
        raise NotFoundError(f"Node '{client_id}' not found")
    return node


def client_id_exists(db: Session, project_id: uuid.UUID, client_id: str) -> bool:
    return (
        db.query(CanvasNode.id)
        .filter(CanvasNode.project_id == project_id, CanvasNode.client_id == client_id)
        .first()
        is not None
    )


def list_nodes(db: Session, project_id: uuid.UUID) -> List[NodeResponse]:
    """All nodes in creation order, each with its outgoing targets."""
    nodes = (
        db.query(CanvasNode)
        .filter(CanvasNode.project_id == project_id)
        .order_by(CanvasNode.created_at.asc(), CanvasNode.id.asc())
        .all()
    )
    targets = outgoing_map(db, project_id)
    return [to_response(node, targets.get(node.client_id)) for node in nodes]


def node_response(db: Session, project_id: uuid.UUID, node: CanvasNode) -> NodeResponse:
    targets = outgoing_map(db, project_id, from_client_id=node.client_id)
    return to_response(node, targets.get(node.client_id))


def next_copy_client_id(db: Session, project_id: uuid.UUID, source_client_id: str) -> str:
    """
    ``<source>-copy-<epoch ms>``.  Two copies made within the same
    millisecond get a numeric suffix.
    """
    base = f"{source_client_id}-copy-{int(time.time() * 1000)}"
    candidate, n = base, 1
    while client_id_exists(db, project_id, candidate):
        n += 1
        candidate = f"{base}-{n}"
    return candidate


def delete_node(db: Session, node: CanvasNode) -> None:
    """
    Delete *node* and everything that points at it: connections in either
    direction and element links on other nodes of the project.
    """
    project_id, client_id = node.project_id, node.client_id

    db.query(NodeConnection).filter(
        NodeConnection.project_id == project_id,
        or_(
            NodeConnection.from_client_id == client_id,
            NodeConnection.to_client_id == client_id,
        ),
    ).delete(synchronize_session=False)

    db.delete(node)

    others = (
        db.query(CanvasNode)
        .filter(CanvasNode.project_id == project_id, CanvasNode.client_id != client_id)
        .all()
    )
    for other in others:
        remove_element_links(other, client_id)


def remove_element_links(node: CanvasNode, target_client_id: str) -> int:
    """Drop every element link of *node* targeting *target_client_id*."""
    links = load_element_links(node)
    kept = [link for link in links if link.target_node_id != target_client_id]
    removed = len(links) - len(kept)
    if removed:
        # Reassign so the JSON column is flagged dirty
        node.element_links = dump_element_links(kept)
    return removed


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------


def list_connections(db: Session, project_id: uuid.UUID) -> List[Tuple[str, str]]:
    rows = (
        db.query(NodeConnection.from_client_id, NodeConnection.to_client_id)
        .filter(NodeConnection.project_id == project_id)
        .order_by(NodeConnection.created_at.asc(), NodeConnection.id.asc())
        .all()
    )
    return [(row[0], row[1]) for row in rows]


def outgoing_map(
    db: Session,
    project_id: uuid.UUID,
    from_client_id: Optional[str] = None,
) -> Dict[str, List[str]]:
    """``{from_client_id: [to_client_id, ...]}`` for the project (or one node)."""
    query = db.query(NodeConnection.from_client_id, NodeConnection.to_client_id).filter(
        NodeConnection.project_id == project_id
    )
    if from_client_id is not None:
        query = query.filter(NodeConnection.from_client_id == from_client_id)

    targets: Dict[str, List[str]] = defaultdict(list)
    for source, target in query.order_by(NodeConnection.created_at.asc(), NodeConnection.id.asc()):
        targets[source].append(target)
    return targets


def add_connections(
    db: Session,
    project_id: uuid.UUID,
    pairs: Iterable[Tuple[str, str]],
) -> int:
    """
    Insert-or-ignore each (from, to) edge.  Edges that already exist, and
    repeats within *pairs*, are absorbed.  Returns the number added.
    """
    wanted = list(dict.fromkeys((source, target) for source, target in pairs))
    if not wanted:
        return 0

    existing = set(list_connections(db, project_id))
    added = 0
    for source, target in wanted:
        if (source, target) in existing:
            continue
        db.add(NodeConnection(project_id=project_id, from_client_id=source, to_client_id=target))
        added += 1
    return added
