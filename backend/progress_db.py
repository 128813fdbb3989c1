"""Database functions for quest progress, learning paths and passions.
Supports Supabase (primary) with SQLite fallback."""
import os
import json
import sqlite3
from datetime import date, datetime
from typing import Any, List, Mapping, Optional

from backend import db
from backend.db import get_connection, init_db
from backend.models.quest import Lesson, ProgressState

# Check if Supabase is configured
USE_SUPABASE = bool(os.getenv("SUPABASE_URL"))
if USE_SUPABASE:
    try:
        from backend.supabase_client import get_supabase
        print("[ProgressDB] Supabase mode enabled")
    except Exception as e:
        print(f"[ProgressDB] Supabase import failed: {e}. Falling back to SQLite")
        USE_SUPABASE = False

_schema_ready_for = None


def _connection() -> sqlite3.Connection:
    """SQLite connection with the schema created on first use for this file."""
    global _schema_ready_for
    if _schema_ready_for != db.DB_PATH:
        init_db()
        _schema_ready_for = db.DB_PATH
    return get_connection()


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        print(f"[ProgressDB] Ignoring unreadable last visit date: {value!r}")
        return None


def _int_or(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def lesson_from_row(row: Mapping[str, Any], position: int = 0) -> Optional[Lesson]:
    """Build a Lesson from a stored row, repairing what can be repaired.

    Rows without an id cannot be completed later and are dropped.
    """
    lesson_id = row.get("id")
    if not lesson_id:
        return None
    return Lesson(
        id=str(lesson_id),
        sequence_no=_int_or(row.get("sequence_no"), position + 1),
        title=row.get("title") or "Untitled lesson",
        type=row.get("type") or "lesson",
        unlock_xp=max(0, _int_or(row.get("unlock_xp"), 0)),
        xp_reward=max(1, _int_or(row.get("xp_reward"), 10)),
        completed=bool(row.get("completed")),
    )


def _lessons_from_rows(rows: List[Mapping[str, Any]]) -> List[Lesson]:
    lessons = []
    for i, row in enumerate(rows):
        lesson = lesson_from_row(row, i)
        if lesson is not None:
            lessons.append(lesson)
    return lessons


def _lesson_rows(user_id: str, lessons: List[Lesson]) -> List[dict]:
    return [
        {
            "user_id": user_id,
            "id": lesson.id,
            "position": i,
            "sequence_no": lesson.sequence_no,
            "title": lesson.title,
            "type": lesson.kind,
            "unlock_xp": lesson.unlock_xp,
            "xp_reward": lesson.xp_reward,
            "completed": lesson.completed,
        }
        for i, lesson in enumerate(lessons)
    ]


def _progress_row(user_id: str, progress: ProgressState) -> dict:
    return {
        "user_id": user_id,
        "xp": progress.xp,
        "streak": progress.streak,
        "last_visit_date": progress.last_visit_date.isoformat() if progress.last_visit_date else None,
        "updated_at": datetime.now().isoformat(),
    }


async def load_progress(user_id: str) -> ProgressState:
    """Load XP, streak, last visit and the current path for a user.

    Anything missing falls back to a fresh start (0 XP, no streak, no lessons).
    """
    if USE_SUPABASE:
        try:
            supabase = get_supabase()
            result = supabase.table("user_progress").select("*").eq("user_id", user_id).execute()
            row = result.data[0] if result.data else {}
            lesson_result = (
                supabase.table("lessons").select("*").eq("user_id", user_id).order("position").execute()
            )
            progress = ProgressState(
                xp=row.get("xp"),
                streak=row.get("streak"),
                last_visit_date=_parse_date(row.get("last_visit_date")),
                lessons=_lessons_from_rows(lesson_result.data or []),
            )
            print(f"[ProgressDB] Loaded progress from Supabase for user={user_id}")
            return progress
        except Exception as e:
            print(f"[ProgressDB] Supabase progress load failed: {e}. Falling back to SQLite")

    # SQLite fallback
    conn = _connection()
    try:
        row = conn.execute(
            "SELECT xp, streak, last_visit_date FROM user_progress WHERE user_id = ?",
            (user_id,)
        ).fetchone()
        lesson_rows = conn.execute(
            """
            SELECT id, sequence_no, title, type, unlock_xp, xp_reward, completed
            FROM lessons
            WHERE user_id = ?
            ORDER BY position
            """,
            (user_id,)
        ).fetchall()

        row = dict(row) if row else {}
        progress = ProgressState(
            xp=row.get("xp"),
            streak=row.get("streak"),
            last_visit_date=_parse_date(row.get("last_visit_date")),
            lessons=_lessons_from_rows([dict(r) for r in lesson_rows]),
        )
        print(f"[ProgressDB] Loaded progress for user={user_id} ({len(progress.lessons)} lessons)")
        return progress
    finally:
        conn.close()


async def save_progress(user_id: str, progress: ProgressState) -> bool:
    """Store XP, streak, last visit and lesson completion flags.

    Returns False when nothing could be written; the caller decides whether to
    ask the user to retry.
    """
    if USE_SUPABASE:
        try:
            supabase = get_supabase()
            supabase.table("user_progress").upsert(
                _progress_row(user_id, progress), on_conflict="user_id"
            ).execute()
            if progress.lessons:
                supabase.table("lessons").upsert(
                    _lesson_rows(user_id, progress.lessons), on_conflict="user_id,id"
                ).execute()
            print(f"[ProgressDB] Saved progress to Supabase for user={user_id}, xp={progress.xp}")
            return True
        except Exception as e:
            print(f"[ProgressDB] Supabase progress save failed: {e}. Falling back to SQLite")

    # SQLite fallback
    try:
        conn = _connection()
    except sqlite3.Error as e:
        print(f"[ProgressDB] Could not open SQLite database: {e}")
        return False
    try:
        conn.execute(
            """
            INSERT OR REPLACE INTO user_progress (user_id, xp, streak, last_visit_date, updated_at)
            VALUES (:user_id, :xp, :streak, :last_visit_date, :updated_at)
            """,
            _progress_row(user_id, progress),
        )
        conn.executemany(
            """
            INSERT OR REPLACE INTO lessons (
                user_id, id, position, sequence_no, title, type,
                unlock_xp, xp_reward, completed
            ) VALUES (
                :user_id, :id, :position, :sequence_no, :title, :type,
                :unlock_xp, :xp_reward, :completed
            )
            """,
            _lesson_rows(user_id, progress.lessons),
        )
        conn.commit()
        print(f"[ProgressDB] Saved progress for user={user_id}, xp={progress.xp}, streak={progress.streak}")
        return True
    except (sqlite3.Error, OverflowError) as e:
        print(f"[ProgressDB] Progress save failed for user={user_id}: {e}")
        return False
    finally:
        conn.close()


async def replace_lessons(user_id: str, lessons: List[Lesson]) -> bool:
    """Swap the user's whole learning path for a freshly generated one."""
    if USE_SUPABASE:
        try:
            supabase = get_supabase()
            supabase.table("lessons").delete().eq("user_id", user_id).execute()
            if lessons:
                supabase.table("lessons").insert(_lesson_rows(user_id, lessons)).execute()
            print(f"[ProgressDB] Replaced path in Supabase for user={user_id} ({len(lessons)} lessons)")
            return True
        except Exception as e:
            print(f"[ProgressDB] Supabase path replace failed: {e}. Falling back to SQLite")

    # SQLite fallback
    try:
        conn = _connection()
    except sqlite3.Error as e:
        print(f"[ProgressDB] Could not open SQLite database: {e}")
        return False
    try:
        conn.execute("DELETE FROM lessons WHERE user_id = ?", (user_id,))
        conn.executemany(
            """
            INSERT INTO lessons (
                user_id, id, position, sequence_no, title, type,
                unlock_xp, xp_reward, completed
            ) VALUES (
                :user_id, :id, :position, :sequence_no, :title, :type,
                :unlock_xp, :xp_reward, :completed
            )
            """,
            _lesson_rows(user_id, lessons),
        )
        conn.commit()
        print(f"[ProgressDB] Replaced path for user={user_id} ({len(lessons)} lessons)")
        return True
    except (sqlite3.Error, OverflowError) as e:
        conn.rollback()
        print(f"[ProgressDB] Path replace failed for user={user_id}: {e}")
        return False
    finally:
        conn.close()


async def load_passions(user_id: str) -> Optional[List[str]]:
    """Return the user's stored passions, or None if they never picked any."""
    if USE_SUPABASE:
        try:
            supabase = get_supabase()
            result = supabase.table("user_passions").select("passions").eq("user_id", user_id).execute()
            if result.data:
                return list(result.data[0].get("passions") or [])
            return None
        except Exception as e:
            print(f"[ProgressDB] Supabase passions load failed: {e}. Falling back to SQLite")

    # SQLite fallback
    conn = _connection()
    try:
        row = conn.execute(
            "SELECT passions FROM user_passions WHERE user_id = ?", (user_id,)
        ).fetchone()
        if not row:
            return None
        try:
            passions = json.loads(row["passions"])
        except (TypeError, ValueError):
            print(f"[ProgressDB] Stored passions for user={user_id} are unreadable, ignoring")
            return None
        return [str(p) for p in passions] if isinstance(passions, list) else None
    finally:
        conn.close()


async def save_passions(user_id: str, passions: List[str]) -> bool:
    """Save passions to database (Supabase or SQLite)."""
    updated_at = datetime.now().isoformat()
    if USE_SUPABASE:
        try:
            supabase = get_supabase()
            supabase.table("user_passions").upsert(
                {"user_id": user_id, "passions": passions, "updated_at": updated_at},
                on_conflict="user_id"
            ).execute()
            print(f"[ProgressDB] Saved passions to Supabase for user={user_id}")
            return True
        except Exception as e:
            print(f"[ProgressDB] Supabase passions save failed: {e}. Falling back to SQLite")

    # SQLite fallback
    try:
        conn = _connection()
    except sqlite3.Error as e:
        print(f"[ProgressDB] Could not open SQLite database: {e}")
        return False
    try:
        conn.execute(
            "INSERT OR REPLACE INTO user_passions (user_id, passions, updated_at) VALUES (?, ?, ?)",
            (user_id, json.dumps(passions), updated_at)
        )
        conn.commit()
        print(f"[ProgressDB] Saved passions for user={user_id}: {passions}")
        return True
    except (sqlite3.Error, OverflowError) as e:
        print(f"[ProgressDB] Passions save failed for user={user_id}: {e}")
        return False
    finally:
        conn.close()
