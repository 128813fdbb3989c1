import asyncio
from datetime import date

from backend import db
from backend.models.quest import Lesson, ProgressState
from backend.progress_db import (
    lesson_from_row,
    load_passions,
    load_progress,
    replace_lessons,
    save_passions,
    save_progress,
)
from backend.services.path_generator import fallback_path


def run(coro):
    return asyncio.run(coro)


def test_first_run_defaults():
    progress = run(load_progress("new_user"))
    assert progress.xp == 0
    assert progress.streak == 0
    assert progress.last_visit_date is None
    assert progress.lessons == []


def test_save_and_load_round_trip():
    lessons = fallback_path()
    lessons[0] = lessons[0].model_copy(update={"completed": True})
    progress = ProgressState(xp=10, streak=3, last_visit_date=date(2024, 6, 2), lessons=lessons)

    assert run(save_progress("u1", progress)) is True
    loaded = run(load_progress("u1"))

    assert loaded.xp == 10
    assert loaded.streak == 3
    assert loaded.last_visit_date == date(2024, 6, 2)
    assert [l.id for l in loaded.lessons] == [l.id for l in lessons]
    assert loaded.lessons[0].completed is True
    assert loaded.lessons[1].completed is False


def test_users_are_isolated():
    run(save_progress("u1", ProgressState(xp=40, lessons=fallback_path())))
    assert run(load_progress("u2")).xp == 0


def test_replace_lessons_discards_previous_batch():
    run(save_progress("u1", ProgressState(xp=25, lessons=fallback_path())))
    new_path = [
        Lesson(id="lesson1", sequence_no=1, title="Brand New", type="quiz", unlock_xp=0, xp_reward=15),
    ]

    assert run(replace_lessons("u1", new_path)) is True
    loaded = run(load_progress("u1"))

    assert [l.title for l in loaded.lessons] == ["Brand New"]
    assert loaded.xp == 25


def test_corrupted_rows_are_tolerated():
    run(save_progress("u1", ProgressState()))
    conn = db.get_connection()
    try:
        conn.execute(
            "UPDATE user_progress SET xp = -30, last_visit_date = 'yesterday-ish' WHERE user_id = 'u1'"
        )
        conn.execute(
            """
            INSERT INTO lessons (user_id, id, position, sequence_no, title, type, unlock_xp, xp_reward, completed)
            VALUES ('u1', 'x', 0, 1, 'Odd', 'hologram', -4, 0, 0)
            """
        )
        conn.commit()
    finally:
        conn.close()

    loaded = run(load_progress("u1"))
    assert loaded.xp == 0
    assert loaded.last_visit_date is None
    assert loaded.lessons[0].kind == "hologram"
    assert loaded.lessons[0].unlock_xp == 0
    assert loaded.lessons[0].xp_reward == 1


def test_lesson_from_row_without_id():
    assert lesson_from_row({"title": "No id"}) is None


def test_passions_round_trip():
    assert run(load_passions("u1")) is None
    assert run(save_passions("u1", ["tech", "music"])) is True
    assert run(load_passions("u1")) == ["tech", "music"]


def test_out_of_range_numbers_are_refused_not_raised():
    run(replace_lessons("u1", fallback_path()))
    huge = Lesson(id="lesson1", sequence_no=1, title="Huge", type="video", unlock_xp=10**20, xp_reward=10)

    assert run(replace_lessons("u1", [huge])) is False
    assert run(save_progress("u1", ProgressState(xp=5, lessons=[huge]))) is False

    # The failed writes leave the previous path and XP untouched
    loaded = run(load_progress("u1"))
    assert loaded.xp == 0
    assert [l.title for l in loaded.lessons] == [l.title for l in fallback_path()]
