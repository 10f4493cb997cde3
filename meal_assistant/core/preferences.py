"""Per-user cooking preferences.

The API speaks camelCase (the same keys the prompt builders read); the table
stores snake_case columns with list fields JSON-encoded.
"""

from typing import Optional

from meal_assistant.db.database import dumps_json, get_connection, loads_json
from meal_assistant.db.models import UserPreferencesRow
from meal_assistant.core.schemas import UserPreferences

# camelCase API key -> column name
FIELD_MAP = {
    "skillLevel": "skill_level",
    "maxCookTime": "max_cook_time",
    "budget": "budget",
    "householdSize": "household_size",
    "dietary": "dietary",
    "allergies": "allergies",
    "dislikes": "dislikes",
    "favoriteCuisines": "favorite_cuisines",
    "pantryItems": "pantry_items",
    "additionalNotes": "additional_notes",
}

LIST_COLUMNS = {"dietary", "allergies", "dislikes", "favorite_cuisines", "pantry_items"}
SKILL_LEVELS = ("beginner", "intermediate", "advanced")


def _row_to_prefs(row) -> UserPreferencesRow:
    return UserPreferencesRow(
        user_id=row["user_id"],
        skill_level=row["skill_level"],
        max_cook_time=row["max_cook_time"],
        budget=row["budget"],
        household_size=row["household_size"],
        dietary=loads_json(row["dietary"], []),
        allergies=loads_json(row["allergies"], []),
        dislikes=loads_json(row["dislikes"], []),
        favorite_cuisines=loads_json(row["favorite_cuisines"], []),
        pantry_items=loads_json(row["pantry_items"], []),
        additional_notes=row["additional_notes"],
        updated_at=row["updated_at"],
    )


def get(user_id: int) -> Optional[UserPreferencesRow]:
    conn = get_connection()
    try:
        row = conn.execute("SELECT * FROM user_preferences WHERE user_id = ?", (user_id,)).fetchone()
        return _row_to_prefs(row) if row else None
    finally:
        conn.close()


def update(user_id: int, changes: dict) -> UserPreferencesRow:
    """Apply camelCase changes (unknown keys ignored), creating the row if needed.

    Raises ValueError if changes holds no known field.
    """
    updates = {FIELD_MAP[k]: v for k, v in changes.items() if k in FIELD_MAP}
    if not updates:
        raise ValueError("No fields to update")

    columns = list(updates)
    values = [dumps_json(updates[c]) if c in LIST_COLUMNS else updates[c] for c in columns]
    assignments = ", ".join(f"{c}=excluded.{c}" for c in columns)

    conn = get_connection()
    try:
        conn.execute(
            f"""INSERT INTO user_preferences (user_id, {", ".join(columns)}, updated_at)
                VALUES (?, {", ".join("?" * len(columns))}, CURRENT_TIMESTAMP)
                ON CONFLICT(user_id) DO UPDATE SET {assignments}, updated_at=excluded.updated_at""",
            [user_id, *values],
        )
        conn.commit()
    finally:
        conn.close()
    return get(user_id)


def to_prompt_preferences(prefs: Optional[UserPreferencesRow]) -> UserPreferences:
    """Convert a stored row into the camelCase dict the prompt builders expect."""
    if prefs is None:
        return {}
    result: UserPreferences = {
        "dietary": prefs.dietary or [],
        "allergies": prefs.allergies or [],
        "dislikes": prefs.dislikes or [],
        "favoriteCuisines": prefs.favorite_cuisines or [],
        "skillLevel": prefs.skill_level if prefs.skill_level in SKILL_LEVELS else "intermediate",
    }
    if prefs.household_size:
        result["householdSize"] = prefs.household_size
    if prefs.max_cook_time:
        result["maxCookTime"] = prefs.max_cook_time
    if prefs.budget:
        result["budget"] = prefs.budget
    if prefs.pantry_items:
        result["pantryItems"] = prefs.pantry_items
    if prefs.additional_notes:
        result["additionalNotes"] = prefs.additional_notes
    return result


def for_user(user_id: int) -> UserPreferences:
    return to_prompt_preferences(get(user_id))
