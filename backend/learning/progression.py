from __future__ import annotations

"""Progression rules for the quest trail.

Everything here is pure: functions take lessons / XP / dates and hand back new
values. Loading and saving is the caller's job.

- a lesson is completed, unlocked or locked;
- the first incomplete lesson is always unlocked, whatever its threshold;
- completing a lesson awards its XP once;
- the daily streak moves at most once per calendar day.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from ..models.quest import Lesson, LessonState, ProgressState


@dataclass(frozen=True)
class CompletionResult:
    lessons: List[Lesson]
    xp: int
    changed: bool
    xp_earned: int = 0


@dataclass(frozen=True)
class StreakResult:
    streak: int
    glow: bool  # one-shot celebration when the streak grows


@dataclass(frozen=True)
class KindDisplay:
    label: str
    icon: str
    action_label: str


KIND_DISPLAY = {
    "video": KindDisplay(label="Watch", icon="📺", action_label="Mark as Watched"),
    "quiz": KindDisplay(label="Quiz", icon="❓", action_label="Submit Quiz"),
    "scenario": KindDisplay(label="Scenario", icon="🎭", action_label="Finish Scenario"),
}
GENERIC_DISPLAY = KindDisplay(label="Learn", icon="📝", action_label="Complete")


def kind_display(kind: Optional[str]) -> KindDisplay:
    return KIND_DISPLAY.get((kind or "").strip().lower(), GENERIC_DISPLAY)


def first_incomplete_index(lessons: Sequence[Lesson]) -> Optional[int]:
    for i, lesson in enumerate(lessons):
        if not lesson.completed:
            return i
    return None


def current_lesson_id(lessons: Sequence[Lesson]) -> Optional[str]:
    idx = first_incomplete_index(lessons)
    return lessons[idx].id if idx is not None else None


def compute_state(lessons: Sequence[Lesson], xp: int) -> List[LessonState]:
    """Return the display state of every lesson, in list order.

    List position decides order; ``sequence_no`` is only a label and may be
    duplicated in corrupted data.
    """
    xp = max(0, xp)
    first_incomplete = first_incomplete_index(lessons)

    states: List[LessonState] = []
    for i, lesson in enumerate(lessons):
        if lesson.completed:
            states.append(LessonState.COMPLETED)
        elif i == first_incomplete:
            states.append(LessonState.UNLOCKED)
        elif xp >= lesson.unlock_xp:
            states.append(LessonState.UNLOCKED)
        else:
            states.append(LessonState.LOCKED)
    return states


def highlight_flags(states: Sequence[LessonState]) -> List[bool]:
    """Mark unlocked nodes whose predecessor is not unlocked.

    The node before the first one counts as completed.
    """
    flags: List[bool] = []
    prev = LessonState.COMPLETED
    for state in states:
        flags.append(state == LessonState.UNLOCKED and prev != LessonState.UNLOCKED)
        prev = state
    return flags


def complete_lesson(lessons: Sequence[Lesson], xp: int, lesson_id: str) -> CompletionResult:
    """Mark ``lesson_id`` completed and award its XP.

    Unknown ids and lessons that are already completed are no-ops, so retries
    and double clicks never grant XP twice. The input list is left untouched.
    """
    xp = max(0, xp)
    idx = next((i for i, l in enumerate(lessons) if l.id == lesson_id), -1)
    if idx == -1 or lessons[idx].completed:
        return CompletionResult(lessons=list(lessons), xp=xp, changed=False)

    reward = lessons[idx].xp_reward
    updated = list(lessons)
    updated[idx] = lessons[idx].model_copy(update={"completed": True})
    return CompletionResult(lessons=updated, xp=xp + reward, changed=True, xp_earned=reward)


def evaluate_streak(today: date, last_visit_date: Optional[date], current_streak: int) -> StreakResult:
    current_streak = max(0, current_streak)
    if last_visit_date is None:
        return StreakResult(streak=current_streak, glow=False)

    diff_days = (today - last_visit_date).days
    if diff_days == 1:
        return StreakResult(streak=current_streak + 1, glow=True)
    if diff_days > 1:
        return StreakResult(streak=1, glow=False)
    # Same day, or a clock that went backwards.
    return StreakResult(streak=current_streak, glow=False)


def visit(progress: ProgressState, today: date) -> Tuple[ProgressState, StreakResult]:
    """Evaluate the streak for a visit on ``today`` and record the visit."""
    result = evaluate_streak(today, progress.last_visit_date, progress.streak)
    updated = progress.model_copy(update={"streak": result.streak, "last_visit_date": today})
    return updated, result


def apply_completion(progress: ProgressState, lesson_id: str) -> Tuple[ProgressState, CompletionResult]:
    result = complete_lesson(progress.lessons, progress.xp, lesson_id)
    if not result.changed:
        return progress, result
    return progress.model_copy(update={"xp": result.xp, "lessons": result.lessons}), result
