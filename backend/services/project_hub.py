"""Project hub service - side projects and the XP bonuses they display."""
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from backend.models.project import (
    CreateProjectRequest,
    Project,
    ProjectDto,
    UpdateMetricsRequest,
    XpBonusDto,
)

# In-memory storage per user (projects are not part of the persisted progress)
_projects: Dict[str, List[Project]] = {}


def calculate_xp_bonus(project: Project) -> XpBonusDto:
    """
    Bonus XP shown for a project's traction.

    +5 XP per full $10 of revenue and +10 XP per full 1000 Instagram views.
    The bonus is display-only; it is never added to the quest trail XP.
    """
    revenue_bonus = int(project.revenue // 10) * 5
    views_bonus = (project.instagramMetrics.views // 1000) * 10
    return XpBonusDto(
        revenueBonus=revenue_bonus,
        viewsBonus=views_bonus,
        total=revenue_bonus + views_bonus,
    )


def format_metric(num: float) -> str:
    if num >= 1000:
        return f"{num / 1000:.1f}k"
    return str(int(num)) if float(num).is_integer() else str(num)


def to_dto(project: Project) -> ProjectDto:
    return ProjectDto(
        **project.model_dump(),
        xpBonus=calculate_xp_bonus(project),
        formattedViews=format_metric(project.instagramMetrics.views),
    )


def list_projects(user_id: str) -> List[Project]:
    """Projects for a user, newest first."""
    return list(reversed(_projects.get(user_id, [])))


def get_project(user_id: str, project_id: str) -> Optional[Project]:
    return next((p for p in _projects.get(user_id, []) if p.id == project_id), None)


def create_project(user_id: str, request: CreateProjectRequest) -> Project:
    project = Project(
        id=str(uuid.uuid4()),
        name=request.name,
        description=request.description,
        problem=request.problem,
        uniqueness=request.uniqueness,
        passionTags=request.passionTags,
        createdAt=datetime.now(),
    )
    _projects.setdefault(user_id, []).append(project)
    print(f"[ProjectHub] Created project '{project.name}' for user={user_id}")
    return project


def update_metrics(user_id: str, project_id: str, request: UpdateMetricsRequest) -> Optional[Project]:
    project = get_project(user_id, project_id)
    if project is None:
        return None

    metrics = project.instagramMetrics.model_copy(update={
        k: v for k, v in {
            "views": request.views,
            "likes": request.likes,
            "clicks": request.clicks,
        }.items() if v is not None
    })
    updated = project.model_copy(update={
        "revenue": project.revenue if request.revenue is None else request.revenue,
        "instagramMetrics": metrics,
    })

    projects = _projects[user_id]
    projects[projects.index(project)] = updated
    return updated
