from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from ..models import ProjectCreate, ProjectUpdate
from ..services import projects_repo

router = APIRouter(tags=["projects"])


def _parse_id(raw: object) -> int:
    try:
        return int(str(raw))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid project ID") from None


@router.post("", status_code=201)
def create_project(body: ProjectCreate):
    return {"project": projects_repo.create_project(body.model_dump(exclude_unset=True))}


@router.put("")
def update_project(body: ProjectUpdate):
    if body.id is None:
        raise HTTPException(status_code=400, detail="Project ID is required")
    updates = body.model_dump(exclude_unset=True, exclude={"id"})
    return {"project": projects_repo.update_project(body.id, updates)}


@router.delete("")
def delete_project(id: str | None = Query(default=None)):
    if not id:
        raise HTTPException(status_code=400, detail="Project ID is required")
    projects_repo.delete_project(_parse_id(id))
    return {"message": "Project deleted successfully"}
