"""User accounts. Sign-in itself is delegated; this only maps an email to a stable id."""

from meal_assistant.db.database import get_connection
from meal_assistant.db.models import User


def _row_to_user(row) -> User:
    return User(id=row["id"], email=row["email"], name=row["name"], created_at=row["created_at"])


def get_or_create(email: str, name: str = None) -> User:
    """Return the user for email, creating it (name defaults to the local part) if needed."""
    email = email.strip().lower()
    conn = get_connection()
    try:
        row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        if row:
            return _row_to_user(row)
        cursor = conn.execute(
            "INSERT INTO users (email, name) VALUES (?, ?)",
            (email, name or email.split("@")[0]),
        )
        conn.commit()
        row = conn.execute("SELECT * FROM users WHERE id = ?", (cursor.lastrowid,)).fetchone()
        return _row_to_user(row)
    finally:
        conn.close()
