import sqlite3
import os
from pathlib import Path

# Load environment variables from .env file in backend directory
from dotenv import load_dotenv
env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)

# Check if Supabase is configured
USE_SUPABASE = bool(os.getenv("SUPABASE_URL"))

if USE_SUPABASE:
    print("[DB] Using Supabase database")
else:
    print("[DB] Using SQLite database (local file)")

DB_PATH = Path(os.getenv("QUEST_TRAIL_DB_PATH") or Path(__file__).parent / "quest_trail.db")


def get_connection() -> sqlite3.Connection:
    """Get SQLite connection (used when Supabase is not configured or fails)."""
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db() -> None:
    conn = get_connection()
    try:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_progress (
                user_id TEXT PRIMARY KEY,
                xp INTEGER NOT NULL DEFAULT 0,
                streak INTEGER NOT NULL DEFAULT 0,
                last_visit_date TEXT,
                updated_at TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS lessons (
                user_id TEXT NOT NULL,
                id TEXT NOT NULL,
                position INTEGER NOT NULL,
                sequence_no INTEGER NOT NULL,
                title TEXT NOT NULL,
                type TEXT,
                unlock_xp INTEGER NOT NULL DEFAULT 0,
                xp_reward INTEGER NOT NULL DEFAULT 10,
                completed BOOLEAN NOT NULL DEFAULT 0,
                PRIMARY KEY (user_id, id)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_passions (
                user_id TEXT PRIMARY KEY,
                passions TEXT NOT NULL,
                updated_at TEXT
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_lessons_user ON lessons(user_id, position)")
        conn.commit()
    finally:
        conn.close()
