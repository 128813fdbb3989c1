"""Quest trail endpoints: lesson states, completion, streaks and path generation."""
import sqlite3
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from backend.auth import get_current_user
from backend.learning.progression import (
    apply_completion,
    compute_state,
    current_lesson_id,
    highlight_flags,
    kind_display,
    visit,
)
from backend.models.quest import (
    CompleteLessonRequest,
    CompleteLessonResponse,
    GeneratePathRequest,
    GeneratePathResponse,
    LessonState,
    ProgressState,
    TrailLessonDto,
    TrailResponse,
)
from backend.progress_db import load_progress, replace_lessons, save_progress, save_passions
from backend.services.passions import clean_passions, get_user_passions, passion_label
from backend.services.path_generator import build_personal_learning_path, fallback_path

router = APIRouter(prefix="/api/quest-trail", tags=["Quest Trail"])


def today() -> date:
    return date.today()


def build_trail(progress: ProgressState, streak_glow: bool = False) -> TrailResponse:
    """Snapshot of the trail as the client renders it."""
    states = compute_state(progress.lessons, progress.xp)
    highlights = highlight_flags(states)

    lessons = []
    for lesson, state, highlight in zip(progress.lessons, states, highlights):
        display = kind_display(lesson.kind)
        lessons.append(TrailLessonDto(
            id=lesson.id,
            sequenceNo=lesson.sequence_no,
            title=lesson.title,
            type=lesson.kind,
            unlockXp=lesson.unlock_xp,
            xpReward=lesson.xp_reward,
            completed=lesson.completed,
            state=state,
            highlight=highlight,
            tagLabel=display.label,
            tagIcon=display.icon,
            actionLabel=display.action_label,
        ))

    return TrailResponse(
        lessons=lessons,
        xp=progress.xp,
        streak=progress.streak,
        streakGlow=streak_glow,
        lastVisitDate=progress.last_visit_date.isoformat() if progress.last_visit_date else None,
        currentLessonId=current_lesson_id(progress.lessons),
    )


async def _load(user_id: str) -> ProgressState:
    try:
        return await load_progress(user_id)
    except sqlite3.Error as e:
        print(f"[QuestTrail] Could not load progress for user={user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Couldn't load your learning path. Please try again.",
        )


@router.get("", response_model=TrailResponse)
async def get_trail(user_id: str = Depends(get_current_user)):
    """Record today's visit, update the streak and return the trail."""
    progress = await _load(user_id)

    progress, streak = visit(progress, today())
    if streak.glow:
        print(f"[QuestTrail] Streak +1 for user={user_id} -> {streak.streak}")

    if not progress.lessons:
        progress = progress.model_copy(update={"lessons": fallback_path()})
        print(f"[QuestTrail] Seeded starter path for user={user_id}")

    if not await save_progress(user_id, progress):
        print(f"[QuestTrail] Visit for user={user_id} was not saved")

    return build_trail(progress, streak_glow=streak.glow)


@router.post("/complete", response_model=CompleteLessonResponse)
async def complete_lesson(
    request: CompleteLessonRequest,
    user_id: str = Depends(get_current_user)
):
    """Mark a lesson complete and award its XP (once)."""
    progress = await _load(user_id)

    states = compute_state(progress.lessons, progress.xp)
    idx = next((i for i, l in enumerate(progress.lessons) if l.id == request.lessonId), None)
    if idx is not None and states[idx] == LessonState.LOCKED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This lesson is still locked. Earn more XP to unlock it.",
        )

    updated, result = apply_completion(progress, request.lessonId)

    persisted = True
    if result.changed:
        persisted = await save_progress(user_id, updated)
        print(f"[QuestTrail] user={user_id} completed {request.lessonId}: +{result.xp_earned} XP (total {updated.xp})")
    else:
        print(f"[QuestTrail] Completion of {request.lessonId} for user={user_id} was a no-op")

    return CompleteLessonResponse(
        completed=result.changed,
        xpEarned=result.xp_earned,
        xp=updated.xp,
        persisted=persisted,
        trail=build_trail(updated),
    )


@router.post("/generate", response_model=GeneratePathResponse)
async def generate_path(
    request: Optional[GeneratePathRequest] = None,
    user_id: str = Depends(get_current_user)
):
    """Replace the user's path with a freshly generated one.

    Uses the passions in the request when given (and stores them), otherwise
    the user's saved passions.
    """
    if request is not None and request.passions is not None:
        passions = clean_passions(request.passions)
        if not passions:
            raise HTTPException(status_code=400, detail="Pick at least one passion")
        await save_passions(user_id, passions)
    else:
        passions = await get_user_passions(user_id)

    generated = await build_personal_learning_path([passion_label(p) for p in passions])

    progress = await _load(user_id)
    progress = progress.model_copy(update={"lessons": generated.lessons})
    persisted = await replace_lessons(user_id, generated.lessons)

    return GeneratePathResponse(
        source=generated.source,
        passions=passions,
        persisted=persisted,
        trail=build_trail(progress),
    )
