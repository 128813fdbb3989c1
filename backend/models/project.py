"""Backend models for the project hub."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class InstagramMetrics(BaseModel):
    views: int = Field(default=0, ge=0)
    likes: int = Field(default=0, ge=0)
    clicks: int = Field(default=0, ge=0)


class Project(BaseModel):
    """A side project the learner is building."""
    id: str
    name: str
    description: str
    problem: str
    uniqueness: str
    passionTags: List[str]
    revenue: float = Field(default=0, ge=0)
    instagramMetrics: InstagramMetrics = Field(default_factory=InstagramMetrics)
    createdAt: datetime = Field(default_factory=datetime.now)


class XpBonusDto(BaseModel):
    revenueBonus: int
    viewsBonus: int
    total: int


class ProjectDto(Project):
    xpBonus: XpBonusDto
    formattedViews: str


class CreateProjectRequest(BaseModel):
    name: str
    description: str
    problem: str
    uniqueness: str
    passionTags: List[str]

    @field_validator("name", "description", "problem", "uniqueness")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("passionTags")
    @classmethod
    def at_least_one_tag(cls, v: List[str]) -> List[str]:
        tags = [t for t in v if t and t.strip()]
        if not tags:
            raise ValueError("pick at least one passion tag")
        return tags


class UpdateMetricsRequest(BaseModel):
    revenue: Optional[float] = Field(default=None, ge=0)
    views: Optional[int] = Field(default=None, ge=0)
    likes: Optional[int] = Field(default=None, ge=0)
    clicks: Optional[int] = Field(default=None, ge=0)
