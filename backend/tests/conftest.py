import pytest

from backend import db, progress_db
from backend.services import groq_client, project_hub


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    """Every test gets its own SQLite file and no external services."""
    monkeypatch.setattr(db, "DB_PATH", tmp_path / "quest_trail.db")
    monkeypatch.setattr(progress_db, "USE_SUPABASE", False)
    monkeypatch.setattr(groq_client, "_groq_client", None)
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    project_hub._projects.clear()
    yield
    project_hub._projects.clear()


class FakeGroq:
    """Stands in for GroqClient and replays a canned reply."""

    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    async def chat(self, system_prompt, user_prompt, temperature=0.7, max_tokens=1000):
        self.calls.append(user_prompt)
        return self.reply


@pytest.fixture
def fake_groq(monkeypatch):
    from backend.services import path_generator

    def install(reply):
        fake = FakeGroq(reply)
        monkeypatch.setattr(path_generator, "get_groq_client", lambda: fake)
        return fake

    return install
