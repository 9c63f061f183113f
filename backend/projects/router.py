# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Project endpoints – CRUD over the caller's canvases.

Every handler that takes a project id goes through ``require_project_owner``,
which answers 404 for both unknown projects and projects owned by another
user.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from core.errors import ValidationError
from core.logger import logger
from core.schemas import MessageResponse
from core.security import CurrentUser, get_current_user, require_project_owner
from models.project import Project
from projects.schemas import ProjectCreate, ProjectResponse, ProjectUpdate

router = APIRouter(prefix="/api/projects", tags=["projects"])


# ---------------------------------------------------------------------------
# GET /api/projects  – list the current user's projects
# ---------------------------------------------------------------------------


@router.get("", response_model=List[ProjectResponse])
def list_projects(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Most recently updated first."""
    return (
        db.query(Project)
        .filter(Project.user_id == current_user.id)
        .order_by(Project.updated_at.desc())
        .all()
    )


# ---------------------------------------------------------------------------
# POST /api/projects  – create a project
# ---------------------------------------------------------------------------


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    body: ProjectCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not body.name.strip():
        raise ValidationError("Project name is required")

    project = Project(
        user_id=current_user.id,
        name=body.name,
        description=body.description or "",
        ai_model=body.ai_model or "auto",
    )
    db.add(project)
    db.commit()
    db.refresh(project)

    logger.info("Project %s created by user %s", project.id, current_user.id)
    return project


# ---------------------------------------------------------------------------
# GET /api/projects/{id}
# ---------------------------------------------------------------------------


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project: Project = Depends(require_project_owner)):
    return project


# ---------------------------------------------------------------------------
# PUT /api/projects/{id}  – update metadata or viewport
# ---------------------------------------------------------------------------


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    body: ProjectUpdate,
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """
    Partial update.  Only fields that are explicitly provided (non-None) are
    changed.
    """
    if body.name is not None:
        if not body.name.strip():
            raise ValidationError("Project name cannot be empty")
        project.name = body.name
    if body.description is not None:
        project.description = body.description
    if body.zoom is not None:
        project.zoom = body.zoom
    if body.pan_x is not None:
        project.pan_x = body.pan_x
    if body.pan_y is not None:
        project.pan_y = body.pan_y
    if body.ai_model is not None:
        project.ai_model = body.ai_model

    db.commit()
    db.refresh(project)
    return project


# ---------------------------------------------------------------------------
# DELETE /api/projects/{id}
# ---------------------------------------------------------------------------


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project: Project = Depends(require_project_owner),
    db: Session = Depends(get_db),
):
    """Removes the project together with its nodes, connections and variations."""
    project_id = project.id
    db.delete(project)
    db.commit()

    logger.info("Project %s deleted", project_id)
    return MessageResponse(message="Project deleted")
