"""SQLite database connection management and schema initialization.

Provides a single-file database at ~/.meal_assistant/meal_assistant.db.
Every public function that needs a connection should call get_connection(),
use it, and close it in a finally block.

JSON columns (meals, items, ingredients, metadata, ...) hold the exact shapes
the LLM returns; use dumps_json/loads_json to read and write them.
"""

import json
import os
import sqlite3
from pathlib import Path


def get_db_path() -> Path:
    """Return the active DB path.

    Priority order:
    1. DB_PATH environment variable (used by Docker / tests)
    2. Default ~/.meal_assistant/meal_assistant.db
    """
    env_url = os.environ.get("DB_PATH")
    if env_url:
        p = Path(env_url)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    db_dir = Path.home() / ".meal_assistant"
    db_dir.mkdir(exist_ok=True)
    return db_dir / "meal_assistant.db"


def get_connection(db_path: Path = None) -> sqlite3.Connection:
    """Return a new SQLite connection with Row factory and foreign keys enabled.

    Callers are responsible for closing the connection when done.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def dumps_json(value) -> str:
    return json.dumps(value)


def loads_json(raw, default=None):
    """Decode a JSON column, returning default for NULL or corrupt values."""
    if raw is None or raw == "":
        return default
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return default


def init_db(db_path: Path = None) -> None:
    """Create all tables if they don't already exist.

    Called once at application startup from main.py.
    """
    conn = get_connection(db_path)
    cursor = conn.cursor()

    cursor.executescript("""
        CREATE TABLE IF NOT EXISTS users (
            id         INTEGER PRIMARY KEY AUTOINCREMENT,
            email      TEXT NOT NULL UNIQUE,
            name       TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS user_preferences (
            user_id           INTEGER PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            skill_level       TEXT,
            max_cook_time     TEXT,
            budget            TEXT,
            household_size    INTEGER,
            dietary           TEXT,
            allergies         TEXT,
            dislikes          TEXT,
            favorite_cuisines TEXT,
            pantry_items      TEXT,
            additional_notes  TEXT,
            updated_at        TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS recipes (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            title        TEXT NOT NULL,
            description  TEXT,
            ingredients  TEXT NOT NULL DEFAULT '[]',
            instructions TEXT NOT NULL DEFAULT '[]',
            prep_time    INTEGER,
            cook_time    INTEGER,
            total_time   TEXT,
            servings     INTEGER,
            difficulty   TEXT,
            image_url    TEXT,
            source       TEXT,
            metadata     TEXT,
            created_at   TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS favorite_recipes (
            id         INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id    INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            recipe_id  INTEGER NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (user_id, recipe_id)
        );

        CREATE TABLE IF NOT EXISTS meal_plans (
            id         INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id    INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            week_start TEXT NOT NULL,
            meals      TEXT NOT NULL,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS meal_plan_recipes (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            meal_plan_id INTEGER NOT NULL REFERENCES meal_plans(id) ON DELETE CASCADE,
            day_index    INTEGER NOT NULL,
            recipe_id    INTEGER NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
            created_at   TEXT DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (meal_plan_id, day_index)
        );

        CREATE TABLE IF NOT EXISTS shopping_lists (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id      INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            meal_plan_id INTEGER REFERENCES meal_plans(id) ON DELETE SET NULL,
            items        TEXT NOT NULL DEFAULT '[]',
            stale        INTEGER NOT NULL DEFAULT 0,
            created_at   TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at   TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS chat_sessions (
            session_id TEXT PRIMARY KEY,
            parameters TEXT NOT NULL DEFAULT '{}',
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS settings (
            key   TEXT PRIMARY KEY,
            value TEXT
        );
    """)

    conn.commit()

    # Migrations for existing databases
    for col, table, col_type in [
        ("stale", "shopping_lists", "INTEGER NOT NULL DEFAULT 0"),
        ("total_time", "recipes", "TEXT"),
        ("difficulty", "recipes", "TEXT"),
        ("metadata", "recipes", "TEXT"),
    ]:
        try:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {col} {col_type}")
            conn.commit()
        except sqlite3.OperationalError:
            pass  # Column already exists

    conn.close()
