# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
UI variation endpoints – generated alternative renderings of a node.

Variations live and die independently of the node they were generated
from; they are only removed one by one or together with their project.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from core.errors import NotFoundError, ValidationError
from core.schemas import MessageResponse
from core.security import require_project_owner
from models.project import Project
from models.ui_variation import UiVariation
from variations.schemas import VariationResponse, VariationsSave, VariationsSaveResponse

router = APIRouter(prefix="/api/projects/{project_id}/variations", tags=["variations"])


@router.get("", response_model=List[VariationResponse])
def list_variations(
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """Newest first."""
    return (
        db.query(UiVariation)
        .filter(UiVariation.project_id == project.id)
        .order_by(UiVariation.created_at.desc())
        .all()
    )


@router.post("", response_model=VariationsSaveResponse)
def save_variations(
    body: VariationsSave,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """Append every variation in the batch; all rows commit together."""
    if not body.source_node_client_id:
        raise ValidationError("sourceNodeClientId is required")

    db.add_all([
        UiVariation(
            project_id=project.id,
            source_node_client_id=body.source_node_client_id,
            label=v.label,
            description=v.description,
            preview_html=v.preview_html,
            code=v.code,
            category=v.category,
        )
        for v in body.variations
    ])
    db.commit()
    return VariationsSaveResponse(message="Variations saved", count=len(body.variations))


@router.delete("/{variation_id}", response_model=MessageResponse)
def delete_variation(
    variation_id: uuid.UUID,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    deleted = (
        db.query(UiVariation)
        .filter(UiVariation.id == variation_id, UiVariation.project_id == project.id)
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        raise NotFoundError(f"Variation {variation_id} not found")
    db.commit()
    return MessageResponse(message="Variation deleted")
