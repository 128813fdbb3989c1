"""Learning-path generator: passions in, an ordered list of lessons out.

The LLM designs a six-lesson micro-course around the learner's passions. If
the model is unavailable or returns something unusable, the static starter
path is used instead, so callers always receive lessons.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from backend.models.quest import Lesson
from backend.services.groq_client import get_groq_client

MAX_PASSIONS = 6

# Reward used when the model leaves xp_reward out
DEFAULT_REWARD_BY_KIND = {"video": 10, "quiz": 15, "scenario": 20}
DEFAULT_REWARD = 10

# Upper bounds for model-supplied numbers
MAX_UNLOCK_XP = 100_000
MAX_XP_REWARD = 1_000
MAX_SEQUENCE_NO = 1_000

FALLBACK_PATH: List[Dict[str, Any]] = [
    {"sequence_no": 1, "title": "Introduction to AI & Entrepreneurship", "type": "video", "unlock_xp": 0, "xp_reward": 10},
    {"sequence_no": 2, "title": "Finding Your Niche", "type": "quiz", "unlock_xp": 10, "xp_reward": 15},
    {"sequence_no": 3, "title": "Market Research Basics", "type": "scenario", "unlock_xp": 25, "xp_reward": 20},
    {"sequence_no": 4, "title": "AI Tools for Entrepreneurs", "type": "video", "unlock_xp": 45, "xp_reward": 15},
    {"sequence_no": 5, "title": "Creating Your MVP", "type": "scenario", "unlock_xp": 60, "xp_reward": 25},
    {"sequence_no": 6, "title": "Launch Strategy", "type": "video", "unlock_xp": 85, "xp_reward": 30},
]

SYSTEM_PROMPT = "You are an AI curriculum designer specialized in creating personalized learning paths."

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


@dataclass
class GeneratedPath:
    lessons: List[Lesson]
    source: str  # "groq" or "fallback"


def build_prompt(passions: List[str]) -> str:
    return f"""Create a personalized learning path for a student interested in AI entrepreneurship with these passions: {', '.join(passions)}.
Design a 6-lesson curriculum that connects AI concepts and entrepreneurship principles with these specific interests.

For each lesson, provide:
1. A title that clearly connects AI/entrepreneurship with one of their passions
2. The lesson format (choose from: video, quiz, or scenario)
3. A logical sequence number (1-6)
4. XP awarded for completion (between 10-30)
5. XP required to unlock (first lesson = 0, then increase gradually)

Return the data as a valid JSON array of lesson objects with these exact fields:
[
  {{
    "sequence_no": number,
    "title": string,
    "type": string,
    "unlock_xp": number,
    "xp_reward": number
  }}
]
Only return the JSON array, nothing else."""


def extract_json_array(text: str) -> Optional[List[Any]]:
    """Pull a JSON array out of a model reply.

    Handles bare arrays, arrays inside a Markdown code fence and arrays
    surrounded by prose. Returns None when no array can be decoded.
    """
    if not text:
        return None

    candidates = []
    fence = _CODE_FENCE.search(text)
    if fence:
        candidates.append(fence.group(1))
    start, end = text.find("["), text.rfind("]")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])
    candidates.append(text)

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            # {"lessons": [...]} is a common variation
            data = data.get("lessons")
        if isinstance(data, list):
            return data
    return None


def _as_int(value: Any, default: int) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def normalise_lessons(raw: List[Any]) -> List[Lesson]:
    """Turn generator output into fresh, uncompleted lessons.

    Order is kept exactly as produced. Ids are reassigned (lesson1..lessonN)
    because a new path always replaces the previous one wholesale.
    """
    lessons: List[Lesson] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        title = str(entry.get("title") or "").strip()
        if not title:
            continue
        kind = str(entry.get("type") or entry.get("lesson_type") or "lesson").strip().lower()
        position = len(lessons) + 1
        lessons.append(Lesson(
            id=f"lesson{position}",
            sequence_no=min(MAX_SEQUENCE_NO, max(1, _as_int(entry.get("sequence_no"), position))),
            title=title,
            type=kind,
            unlock_xp=min(MAX_UNLOCK_XP, max(0, _as_int(entry.get("unlock_xp"), 0))),
            xp_reward=min(MAX_XP_REWARD, max(1, _as_int(entry.get("xp_reward"), DEFAULT_REWARD_BY_KIND.get(kind, DEFAULT_REWARD)))),
            completed=False,
        ))
    return lessons


def fallback_path() -> List[Lesson]:
    return normalise_lessons(FALLBACK_PATH)


def limit_passions(passions: List[str]) -> List[str]:
    """Drop blanks and duplicates (first occurrence wins) and keep at most six."""
    seen = []
    for p in passions:
        p = (p or "").strip()
        if p and p not in seen:
            seen.append(p)
    return seen[:MAX_PASSIONS]


async def build_personal_learning_path(passions: List[str]) -> GeneratedPath:
    """Generate a learning path for the given passions."""
    limited = limit_passions(passions)
    if not limited:
        print("[PathGenerator] No passions given, using fallback path")
        return GeneratedPath(lessons=fallback_path(), source="fallback")

    try:
        groq = get_groq_client()
    except ValueError as exc:
        print(f"[PathGenerator] {exc}. Using fallback path")
        return GeneratedPath(lessons=fallback_path(), source="fallback")

    reply = await groq.chat(SYSTEM_PROMPT, build_prompt(limited), temperature=0.7, max_tokens=1000)
    raw = extract_json_array(reply or "")
    if raw is None:
        print("[PathGenerator] Model reply was not a JSON array, using fallback path")
        return GeneratedPath(lessons=fallback_path(), source="fallback")

    lessons = normalise_lessons(raw)
    if not lessons:
        print("[PathGenerator] Model returned no usable lessons, using fallback path")
        return GeneratedPath(lessons=fallback_path(), source="fallback")

    print(f"[PathGenerator] Generated {len(lessons)} lessons for passions={limited}")
    return GeneratedPath(lessons=lessons, source="groq")
