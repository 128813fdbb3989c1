import json
import sqlite3
from datetime import date, timedelta

from fastapi.testclient import TestClient

from ..main import app
from ..routers import passions as passions_router
from ..routers import quest_trail


client = TestClient(app)

GUEST = {"X-Guest-Id": "guest-123"}


def set_today(monkeypatch, day):
    monkeypatch.setattr(quest_trail, "today", lambda: day)


def test_health_check():
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_first_visit_seeds_starter_path(monkeypatch):
    set_today(monkeypatch, date(2024, 5, 1))
    response = client.get("/api/quest-trail", headers=GUEST)
    assert response.status_code == 200

    data = response.json()
    assert data["xp"] == 0
    assert data["streak"] == 0
    assert data["streakGlow"] is False
    assert data["lastVisitDate"] == "2024-05-01"
    assert len(data["lessons"]) == 6
    assert data["currentLessonId"] == "lesson1"

    states = [l["state"] for l in data["lessons"]]
    assert states == ["unlocked"] + ["locked"] * 5

    first = data["lessons"][0]
    assert first["tagLabel"] == "Watch"
    assert first["actionLabel"] == "Mark as Watched"
    assert first["highlight"] is True


def test_complete_lesson_awards_xp_once(monkeypatch):
    set_today(monkeypatch, date(2024, 5, 1))
    client.get("/api/quest-trail", headers=GUEST)

    response = client.post("/api/quest-trail/complete", json={"lessonId": "lesson1"}, headers=GUEST)
    assert response.status_code == 200
    data = response.json()
    assert data["completed"] is True
    assert data["xpEarned"] == 10
    assert data["xp"] == 10
    assert data["persisted"] is True
    assert [l["state"] for l in data["trail"]["lessons"][:3]] == ["completed", "unlocked", "locked"]

    again = client.post("/api/quest-trail/complete", json={"lessonId": "lesson1"}, headers=GUEST).json()
    assert again["completed"] is False
    assert again["xpEarned"] == 0
    assert again["xp"] == 10

    trail = client.get("/api/quest-trail", headers=GUEST).json()
    assert trail["xp"] == 10
    assert trail["currentLessonId"] == "lesson2"


def test_unknown_lesson_is_noop(monkeypatch):
    set_today(monkeypatch, date(2024, 5, 1))
    client.get("/api/quest-trail", headers=GUEST)

    data = client.post("/api/quest-trail/complete", json={"lessonId": "ghost"}, headers=GUEST).json()
    assert data["completed"] is False
    assert data["xp"] == 0


def test_locked_lesson_is_refused(monkeypatch):
    set_today(monkeypatch, date(2024, 5, 1))
    client.get("/api/quest-trail", headers=GUEST)

    response = client.post("/api/quest-trail/complete", json={"lessonId": "lesson4"}, headers=GUEST)
    assert response.status_code == 409


def test_streak_over_several_days(monkeypatch):
    day = date(2024, 5, 1)
    set_today(monkeypatch, day)
    assert client.get("/api/quest-trail", headers=GUEST).json()["streak"] == 0

    set_today(monkeypatch, day + timedelta(days=1))
    data = client.get("/api/quest-trail", headers=GUEST).json()
    assert data["streak"] == 1
    assert data["streakGlow"] is True

    # second visit on the same day does not count twice
    data = client.get("/api/quest-trail", headers=GUEST).json()
    assert data["streak"] == 1
    assert data["streakGlow"] is False

    set_today(monkeypatch, day + timedelta(days=2))
    assert client.get("/api/quest-trail", headers=GUEST).json()["streak"] == 2

    set_today(monkeypatch, day + timedelta(days=10))
    data = client.get("/api/quest-trail", headers=GUEST).json()
    assert data["streak"] == 1
    assert data["streakGlow"] is False


def test_generate_path_from_request_passions(monkeypatch, fake_groq):
    set_today(monkeypatch, date(2024, 5, 1))
    client.get("/api/quest-trail", headers=GUEST)
    client.post("/api/quest-trail/complete", json={"lessonId": "lesson1"}, headers=GUEST)

    fake_groq(json.dumps([
        {"sequence_no": 1, "title": "Beats with AI", "type": "video", "unlock_xp": 0, "xp_reward": 10},
        {"sequence_no": 2, "title": "Selling Sample Packs", "type": "quiz", "unlock_xp": 40, "xp_reward": 15},
    ]))
    response = client.post("/api/quest-trail/generate", json={"passions": ["music"]}, headers=GUEST)
    assert response.status_code == 200

    data = response.json()
    assert data["source"] == "groq"
    assert data["passions"] == ["music"]
    assert data["persisted"] is True
    titles = [l["title"] for l in data["trail"]["lessons"]]
    assert titles == ["Beats with AI", "Selling Sample Packs"]
    # XP survives a new path; the new lessons start uncompleted
    assert data["trail"]["xp"] == 10
    assert [l["state"] for l in data["trail"]["lessons"]] == ["unlocked", "locked"]

    assert client.get("/api/passions", headers=GUEST).json() == {"passions": ["music"]}


def test_generate_path_without_model_uses_fallback(monkeypatch):
    set_today(monkeypatch, date(2024, 5, 1))
    response = client.post("/api/quest-trail/generate", headers=GUEST)
    assert response.status_code == 200

    data = response.json()
    assert data["source"] == "fallback"
    assert data["passions"] == ["Technology", "Business"]
    assert len(data["trail"]["lessons"]) == 6


def test_generate_path_rejects_empty_passions():
    response = client.post("/api/quest-trail/generate", json={"passions": ["  "]}, headers=GUEST)
    assert response.status_code == 400


def test_guests_do_not_share_progress(monkeypatch):
    set_today(monkeypatch, date(2024, 5, 1))
    client.get("/api/quest-trail", headers=GUEST)
    client.post("/api/quest-trail/complete", json={"lessonId": "lesson1"}, headers=GUEST)

    other = client.get("/api/quest-trail", headers={"X-Guest-Id": "someone-else"}).json()
    assert other["xp"] == 0


def test_passion_options_and_save():
    options = client.get("/api/passions/options").json()
    assert len(options) == 12
    assert {"id": "tech", "label": "Technology"} in options

    response = client.put(
        "/api/passions",
        json={"passions": ["tech", "art", "tech", "music", "gaming", "writing", "fashion", "finance"]},
        headers=GUEST,
    )
    assert response.status_code == 200
    assert response.json()["passions"] == ["tech", "art", "music", "gaming", "writing", "fashion"]

    assert client.put("/api/passions", json={"passions": []}, headers=GUEST).status_code == 400


def test_generate_path_prompts_with_passion_labels(monkeypatch, fake_groq):
    set_today(monkeypatch, date(2024, 5, 1))
    fake = fake_groq(json.dumps([
        {"sequence_no": 1, "title": "Designing Apps", "type": "video", "unlock_xp": 0, "xp_reward": 10},
    ]))
    response = client.post("/api/quest-trail/generate", json={"passions": ["tech", "art"]}, headers=GUEST)
    assert response.status_code == 200

    assert "Technology, Art & Design" in fake.calls[0]
    assert response.json()["passions"] == ["tech", "art"]


def test_generate_path_caps_oversized_thresholds(monkeypatch, fake_groq):
    set_today(monkeypatch, date(2024, 5, 1))
    fake_groq(json.dumps([
        {"title": "A", "type": "video", "unlock_xp": 0, "xp_reward": 10},
        {"title": "B", "type": "video", "unlock_xp": 100000000000000000000, "xp_reward": 10},
    ]))
    response = client.post("/api/quest-trail/generate", json={"passions": ["music"]}, headers=GUEST)
    assert response.status_code == 200

    data = response.json()
    assert data["persisted"] is True
    assert [l["unlockXp"] for l in data["trail"]["lessons"]] == [0, 100000]

    reloaded = client.get("/api/quest-trail", headers=GUEST).json()
    assert [l["unlockXp"] for l in reloaded["lessons"]] == [0, 100000]


def test_unsaved_completion_reports_not_persisted(monkeypatch):
    set_today(monkeypatch, date(2024, 5, 1))
    client.get("/api/quest-trail", headers=GUEST)

    async def failing_save(user_id, progress):
        return False

    monkeypatch.setattr(quest_trail, "save_progress", failing_save)
    data = client.post("/api/quest-trail/complete", json={"lessonId": "lesson1"}, headers=GUEST).json()
    assert data["completed"] is True
    assert data["xp"] == 10
    assert data["persisted"] is False


def test_unsaved_path_reports_not_persisted(monkeypatch):
    set_today(monkeypatch, date(2024, 5, 1))

    async def failing_replace(user_id, lessons):
        return False

    monkeypatch.setattr(quest_trail, "replace_lessons", failing_replace)
    response = client.post("/api/quest-trail/generate", json={"passions": ["music"]}, headers=GUEST)
    assert response.status_code == 200
    assert response.json()["persisted"] is False
    assert len(response.json()["trail"]["lessons"]) == 6


def test_unreadable_progress_is_503(monkeypatch):
    async def broken_load(user_id):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(quest_trail, "load_progress", broken_load)
    response = client.get("/api/quest-trail", headers=GUEST)
    assert response.status_code == 503
    assert response.json()["detail"] == "Couldn't load your learning path. Please try again."

    complete = client.post("/api/quest-trail/complete", json={"lessonId": "lesson1"}, headers=GUEST)
    assert complete.status_code == 503


def test_unsaved_passions_is_503(monkeypatch):
    async def failing_save(user_id, passions):
        return False

    monkeypatch.setattr(passions_router, "save_passions", failing_save)
    response = client.put("/api/passions", json={"passions": ["tech"]}, headers=GUEST)
    assert response.status_code == 503
    assert response.json()["detail"] == "Couldn't save, try again."
