"""Meal plan persistence, generation and single-day re-roll.

A plan's ``meals`` column holds the WeeklyMealPlan blob exactly as Claude
returned it (or as the client sent it). Any change to ``meals`` marks the
plan's shopping lists stale in the same transaction.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from meal_assistant.core import ai_assistant
from meal_assistant.core.ai_assistant import GenerationError, Task
from meal_assistant.core.schemas import UserPreferences
from meal_assistant.db.database import dumps_json, get_connection, loads_json
from meal_assistant.db.models import MealPlan, MealPlanRecipeLink

logger = logging.getLogger(__name__)

RECENT_PLAN_COUNT = 3


def _row_to_plan(row) -> MealPlan:
    return MealPlan(
        id=row["id"],
        user_id=row["user_id"],
        week_start=row["week_start"],
        meals=loads_json(row["meals"], {}),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_link(row) -> MealPlanRecipeLink:
    return MealPlanRecipeLink(
        id=row["id"],
        meal_plan_id=row["meal_plan_id"],
        day_index=row["day_index"],
        recipe_id=row["recipe_id"],
        created_at=row["created_at"],
    )


def next_monday(today: date = None) -> date:
    """The Monday strictly after today (a Monday maps to the following week)."""
    if today is None:
        today = date.today()
    return today + timedelta(days=7 - today.weekday())


def _mark_lists_stale(conn, meal_plan_id: int) -> None:
    conn.execute(
        "UPDATE shopping_lists SET stale = 1, updated_at = CURRENT_TIMESTAMP WHERE meal_plan_id = ?",
        (meal_plan_id,),
    )


# ── CRUD ──────────────────────────────────────────────────────────────────────

def list_for_user(user_id: int, limit: int = 10, offset: int = 0) -> list[MealPlan]:
    conn = get_connection()
    try:
        rows = conn.execute(
            "SELECT * FROM meal_plans WHERE user_id = ? ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            (user_id, limit, offset),
        ).fetchall()
        return [_row_to_plan(r) for r in rows]
    finally:
        conn.close()


def get(plan_id: int, user_id: int) -> Optional[MealPlan]:
    """Return the plan if it exists and belongs to user_id."""
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT * FROM meal_plans WHERE id = ? AND user_id = ?", (plan_id, user_id)
        ).fetchone()
        return _row_to_plan(row) if row else None
    finally:
        conn.close()


def create(user_id: int, week_start: str, meals: dict) -> MealPlan:
    conn = get_connection()
    try:
        cursor = conn.execute(
            "INSERT INTO meal_plans (user_id, week_start, meals) VALUES (?, ?, ?)",
            (user_id, week_start, dumps_json(meals)),
        )
        conn.commit()
        plan_id = cursor.lastrowid
    finally:
        conn.close()
    return get(plan_id, user_id)


def update(plan_id: int, user_id: int, week_start: str = None, meals: dict = None) -> Optional[MealPlan]:
    """Partial update. Returns None if the plan is not found for this user.

    Raises ValueError when neither field is given.
    """
    updates = {}
    if week_start is not None:
        updates["week_start"] = week_start
    if meals is not None:
        updates["meals"] = dumps_json(meals)
    if not updates:
        raise ValueError("No fields to update")

    assignments = ", ".join(f"{c} = ?" for c in updates)
    conn = get_connection()
    try:
        cursor = conn.execute(
            f"UPDATE meal_plans SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ? AND user_id = ?",
            [*updates.values(), plan_id, user_id],
        )
        if cursor.rowcount == 0:
            return None
        if meals is not None:
            _mark_lists_stale(conn, plan_id)
        conn.commit()
    finally:
        conn.close()
    return get(plan_id, user_id)


def delete(plan_id: int, user_id: int) -> None:
    conn = get_connection()
    try:
        conn.execute("DELETE FROM meal_plans WHERE id = ? AND user_id = ?", (plan_id, user_id))
        conn.commit()
    finally:
        conn.close()


# ── Generation ────────────────────────────────────────────────────────────────

def recent_meal_names(user_id: int, limit: int = RECENT_PLAN_COUNT) -> list[str]:
    """Lower-cased meal names from the user's most recent plans."""
    names = []
    for plan in list_for_user(user_id, limit=limit):
        for day in (plan.meals or {}).get("weekPlan") or []:
            meal = day.get("meal") if isinstance(day, dict) else None
            if isinstance(meal, str) and meal.strip():
                names.append(meal.strip().lower())
    return names


def generate_plan(
    user_id: int,
    preferences: Optional[UserPreferences] = None,
    number_of_days: int = 7,
    slow_cooker_meals: int = 0,
    week_start: str = None,
) -> tuple[MealPlan, str]:
    """Generate and store a new plan, avoiding meals from recent plans.

    Raises GenerationError if Claude returned no plan.
    """
    recent = recent_meal_names(user_id)
    response = ai_assistant.create_meal_plan(preferences, number_of_days or 7, recent, slow_cooker_meals or 0)
    if not isinstance(response.data, dict) or not isinstance(response.data.get("weekPlan"), list):
        raise GenerationError(Task.CREATE_MEAL_PLAN, response.message)

    start = week_start or next_monday().isoformat()
    plan = create(user_id, start, response.data)
    logger.info("Generated %d-day meal plan %s for user %s", len(response.data["weekPlan"]), plan.id, user_id)
    return plan, response.message


def reroll_day(
    plan: MealPlan,
    day_index: int,
    preferences: Optional[UserPreferences] = None,
) -> tuple[MealPlan, str]:
    """Replace weekPlan[day_index] with a fresh Claude suggestion.

    Only that entry changes; its ``day`` label is preserved. The day's
    recipe link is dropped and the plan's shopping lists are marked stale.
    Raises IndexError for an out-of-range day and GenerationError on failure.
    """
    week_plan = (plan.meals or {}).get("weekPlan") or []
    if not isinstance(week_plan, list):
        week_plan = []
    if not 0 <= day_index < len(week_plan):
        raise IndexError(f"Day index {day_index} out of range")

    response = ai_assistant.reroll_meal(plan.meals, day_index, preferences)
    meal = response.data.get("meal") if isinstance(response.data, dict) else None
    if not isinstance(meal, str) or not meal.strip():
        raise GenerationError(Task.REROLL_MEAL, response.message)

    new_day = dict(response.data)
    old_day = week_plan[day_index]
    if isinstance(old_day, dict) and old_day.get("day"):
        new_day["day"] = old_day["day"]
    meals = dict(plan.meals)
    meals["weekPlan"] = [new_day if i == day_index else d for i, d in enumerate(week_plan)]

    conn = get_connection()
    try:
        conn.execute(
            "UPDATE meal_plans SET meals = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (dumps_json(meals), plan.id),
        )
        conn.execute(
            "DELETE FROM meal_plan_recipes WHERE meal_plan_id = ? AND day_index = ?",
            (plan.id, day_index),
        )
        _mark_lists_stale(conn, plan.id)
        conn.commit()
    finally:
        conn.close()
    return get(plan.id, plan.user_id), response.message


# ── Recipe links ──────────────────────────────────────────────────────────────

def get_link(plan_id: int, day_index: int) -> Optional[MealPlanRecipeLink]:
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT * FROM meal_plan_recipes WHERE meal_plan_id = ? AND day_index = ?",
            (plan_id, day_index),
        ).fetchone()
        return _row_to_link(row) if row else None
    finally:
        conn.close()


def get_links(plan_id: int) -> list[MealPlanRecipeLink]:
    conn = get_connection()
    try:
        rows = conn.execute(
            "SELECT * FROM meal_plan_recipes WHERE meal_plan_id = ? ORDER BY day_index",
            (plan_id,),
        ).fetchall()
        return [_row_to_link(r) for r in rows]
    finally:
        conn.close()


def upsert_link(plan_id: int, day_index: int, recipe_id: int) -> MealPlanRecipeLink:
    """Link recipe_id to one day of the plan, replacing any existing link."""
    conn = get_connection()
    try:
        conn.execute(
            """INSERT INTO meal_plan_recipes (meal_plan_id, day_index, recipe_id) VALUES (?, ?, ?)
               ON CONFLICT(meal_plan_id, day_index) DO UPDATE SET recipe_id=excluded.recipe_id""",
            (plan_id, day_index, recipe_id),
        )
        conn.commit()
    finally:
        conn.close()
    return get_link(plan_id, day_index)
