"""Key-value settings storage backed by the SQLite settings table.

Known keys:
    claude_api_key: Anthropic API key for AI features (stored as-is, never exported).

Environment fallbacks are read at call time so tests can set them via env.
"""

import os
from typing import Optional

from meal_assistant.db.database import get_connection

DEFAULT_COMPLEX_MODEL = "claude-sonnet-4-20250514"
DEFAULT_FAST_MODEL = "claude-haiku-4-5-20251001"


def get_setting(key: str, default: str = None) -> str:
    """Return the value for a settings key, or default if not found."""
    conn = get_connection()
    try:
        row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else default
    finally:
        conn.close()


def set_setting(key: str, value: str) -> None:
    """Insert or update a settings key-value pair (upsert)."""
    conn = get_connection()
    try:
        conn.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (key, value),
        )
        conn.commit()
    finally:
        conn.close()


def get_api_key() -> Optional[str]:
    """Claude API key from the settings table, falling back to ANTHROPIC_API_KEY."""
    return get_setting("claude_api_key") or os.environ.get("ANTHROPIC_API_KEY") or None


def get_model(complex_task: bool) -> str:
    if complex_task:
        return os.environ.get("CLAUDE_MODEL_COMPLEX", DEFAULT_COMPLEX_MODEL)
    return os.environ.get("CLAUDE_MODEL_FAST", DEFAULT_FAST_MODEL)


def get_spoonacular_key() -> Optional[str]:
    return os.environ.get("SPOONACULAR_API_KEY") or None
