"""Project hub endpoints."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from backend.auth import get_current_user
from backend.models.project import CreateProjectRequest, ProjectDto, UpdateMetricsRequest
from backend.services.project_hub import (
    create_project,
    get_project,
    list_projects,
    to_dto,
    update_metrics,
)

router = APIRouter(prefix="/api/projects", tags=["Project Hub"])


@router.get("", response_model=List[ProjectDto])
async def get_projects(user_id: str = Depends(get_current_user)):
    return [to_dto(p) for p in list_projects(user_id)]


@router.post("", response_model=ProjectDto, status_code=201)
async def post_project(
    request: CreateProjectRequest,
    user_id: str = Depends(get_current_user)
):
    return to_dto(create_project(user_id, request))


@router.get("/{project_id}", response_model=ProjectDto)
async def get_project_detail(project_id: str, user_id: str = Depends(get_current_user)):
    project = get_project(user_id, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found")
    return to_dto(project)


@router.patch("/{project_id}/metrics", response_model=ProjectDto)
async def patch_project_metrics(
    project_id: str,
    request: UpdateMetricsRequest,
    user_id: str = Depends(get_current_user)
):
    """Record new revenue / Instagram numbers for a project."""
    project = update_metrics(user_id, project_id, request)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found")
    return to_dto(project)
