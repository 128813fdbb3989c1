"""Data models for the Quest Trail learning path and progression state."""
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class LessonState(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    COMPLETED = "completed"


class Lesson(BaseModel):
    """A single step on the learning path.

    ``kind`` is an open set: "video", "quiz" and "scenario" get dedicated
    treatment, anything else is shown as a generic lesson. On the wire and in
    storage the field is called ``type``.
    """
    id: str
    sequence_no: int
    title: str
    kind: str = Field(default="lesson", alias="type")
    unlock_xp: int = Field(default=0, ge=0)
    xp_reward: int = Field(default=10, ge=1)
    completed: bool = False

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "lesson1",
                "sequence_no": 1,
                "title": "Introduction to AI & Entrepreneurship",
                "type": "video",
                "unlock_xp": 0,
                "xp_reward": 10,
                "completed": False
            }
        }


class ProgressState(BaseModel):
    """Everything the progression engine needs for one user."""
    xp: int = 0
    streak: int = 0
    last_visit_date: Optional[date] = None
    lessons: List[Lesson] = Field(default_factory=list)

    @field_validator("xp", "streak", mode="before")
    @classmethod
    def clamp_non_negative(cls, v):
        """Corrupted persisted values fall back to zero instead of failing."""
        try:
            return max(0, int(v or 0))
        except (TypeError, ValueError):
            return 0


# ============================================
# Quest Trail API models
# ============================================

class TrailLessonDto(BaseModel):
    id: str
    sequenceNo: int
    title: str
    type: str
    unlockXp: int
    xpReward: int
    completed: bool
    state: LessonState
    highlight: bool
    tagLabel: str
    tagIcon: str
    actionLabel: str


class TrailResponse(BaseModel):
    lessons: List[TrailLessonDto]
    xp: int
    streak: int
    streakGlow: bool
    lastVisitDate: Optional[str] = None
    currentLessonId: Optional[str] = None


class CompleteLessonRequest(BaseModel):
    lessonId: str


class CompleteLessonResponse(BaseModel):
    completed: bool
    xpEarned: int
    xp: int
    persisted: bool
    trail: TrailResponse


class GeneratePathRequest(BaseModel):
    passions: Optional[List[str]] = None


class GeneratePathResponse(BaseModel):
    source: str  # "groq" or "fallback"
    passions: List[str]
    persisted: bool
    trail: TrailResponse
