"""Conversation session parameter storage.

Session parameters are a flat JSON-able dict keyed by session id (lastRecipes,
currentRecipe, currentMealPlan, cookingMode, currentStep, ...).  The chat
endpoint uses SQLiteSessionStore so state survives restarts and is shared by
every worker pointing at the same database; MemorySessionStore exists for
tests and single-process tooling.  There is no expiry.
"""

from typing import Protocol

from meal_assistant.db.database import dumps_json, get_connection, loads_json


class SessionStore(Protocol):
    def get(self, session_id: str) -> dict: ...

    def merge(self, session_id: str, parameters: dict) -> dict: ...


class MemorySessionStore:
    def __init__(self):
        self._sessions: dict[str, dict] = {}

    def get(self, session_id: str) -> dict:
        return dict(self._sessions.get(session_id, {}))

    def merge(self, session_id: str, parameters: dict) -> dict:
        merged = {**self._sessions.get(session_id, {}), **parameters}
        self._sessions[session_id] = merged
        return dict(merged)


class SQLiteSessionStore:
    """Session parameters persisted in the chat_sessions table (last write wins)."""

    def get(self, session_id: str) -> dict:
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT parameters FROM chat_sessions WHERE session_id = ?", (session_id,)
            ).fetchone()
            return loads_json(row["parameters"], {}) if row else {}
        finally:
            conn.close()

    def merge(self, session_id: str, parameters: dict) -> dict:
        merged = {**self.get(session_id), **parameters}
        conn = get_connection()
        try:
            conn.execute(
                """INSERT INTO chat_sessions (session_id, parameters, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)
                   ON CONFLICT(session_id) DO UPDATE
                   SET parameters=excluded.parameters, updated_at=excluded.updated_at""",
                (session_id, dumps_json(merged)),
            )
            conn.commit()
        finally:
            conn.close()
        return merged
