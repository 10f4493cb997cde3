"""Recipe library: stored recipes, favorites, and Claude-backed generation.

Recipes are global rows; favorites and meal-plan links tie them to a user.
Generated recipes keep the model's ingredients/instructions verbatim and put
tips, substitutions, nutrition and the model's own name into ``metadata``.
"""

import re
from typing import Optional

from meal_assistant.core import ai_assistant
from meal_assistant.core.ai_assistant import GenerationError, Task
from meal_assistant.core.schemas import DIFFICULTIES, FullRecipe, RecipeConstraints, UserPreferences
from meal_assistant.db.database import dumps_json, get_connection, loads_json
from meal_assistant.db.models import Recipe

SAVED_FILTERS = ("all", "favorites")


def _row_to_recipe(row) -> Recipe:
    return Recipe(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        ingredients=loads_json(row["ingredients"], []),
        instructions=loads_json(row["instructions"], []),
        prep_time=row["prep_time"],
        cook_time=row["cook_time"],
        total_time=row["total_time"],
        servings=row["servings"],
        difficulty=row["difficulty"],
        image_url=row["image_url"],
        source=row["source"],
        metadata=loads_json(row["metadata"]),
        created_at=row["created_at"],
    )


def parse_time_to_minutes(time_str) -> Optional[int]:
    """"30 minutes" -> 30. Takes the first integer; None if there is none."""
    if time_str is None:
        return None
    if isinstance(time_str, int):
        return time_str
    match = re.search(r"(\d+)", str(time_str))
    return int(match.group(1)) if match else None


# ── Queries ───────────────────────────────────────────────────────────────────

def list_recipes(search: str = None, limit: int = 20, offset: int = 0) -> list[Recipe]:
    """Newest first, optionally filtered by a case-insensitive title match."""
    conn = get_connection()
    try:
        if search:
            rows = conn.execute(
                "SELECT * FROM recipes WHERE title LIKE ? ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                (f"%{search}%", limit, offset),
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM recipes ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()
        return [_row_to_recipe(r) for r in rows]
    finally:
        conn.close()


def get_titles(recipe_ids: list[int]) -> list[dict]:
    """Return [{id, title}] for the given ids (unknown ids are skipped)."""
    if not recipe_ids:
        return []
    conn = get_connection()
    try:
        rows = conn.execute(
            "SELECT id, title FROM recipes WHERE id IN ({})".format(",".join("?" * len(recipe_ids))),
            recipe_ids,
        ).fetchall()
        return [{"id": r["id"], "title": r["title"]} for r in rows]
    finally:
        conn.close()


def get(recipe_id: int) -> Optional[Recipe]:
    conn = get_connection()
    try:
        row = conn.execute("SELECT * FROM recipes WHERE id = ?", (recipe_id,)).fetchone()
        return _row_to_recipe(row) if row else None
    finally:
        conn.close()


def add(recipe: Recipe) -> Recipe:
    """Insert a recipe and return it as stored."""
    conn = get_connection()
    try:
        cursor = conn.execute(
            """INSERT INTO recipes (title, description, ingredients, instructions, prep_time,
               cook_time, total_time, servings, difficulty, image_url, source, metadata)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                recipe.title, recipe.description,
                dumps_json(recipe.ingredients or []), dumps_json(recipe.instructions or []),
                recipe.prep_time, recipe.cook_time, recipe.total_time, recipe.servings,
                recipe.difficulty, recipe.image_url, recipe.source,
                dumps_json(recipe.metadata) if recipe.metadata is not None else None,
            ),
        )
        conn.commit()
        recipe_id = cursor.lastrowid
    finally:
        conn.close()
    return get(recipe_id)


# ── Favorites ─────────────────────────────────────────────────────────────────

def is_favorite(user_id: int, recipe_id: int) -> bool:
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT id FROM favorite_recipes WHERE user_id = ? AND recipe_id = ?",
            (user_id, recipe_id),
        ).fetchone()
        return row is not None
    finally:
        conn.close()


def add_favorite(user_id: int, recipe_id: int) -> bool:
    """Favorite a recipe. Returns False if it was already a favorite."""
    conn = get_connection()
    try:
        cursor = conn.execute(
            "INSERT OR IGNORE INTO favorite_recipes (user_id, recipe_id) VALUES (?, ?)",
            (user_id, recipe_id),
        )
        conn.commit()
        return cursor.rowcount > 0
    finally:
        conn.close()


def remove_favorite(user_id: int, recipe_id: int) -> None:
    conn = get_connection()
    try:
        conn.execute(
            "DELETE FROM favorite_recipes WHERE user_id = ? AND recipe_id = ?",
            (user_id, recipe_id),
        )
        conn.commit()
    finally:
        conn.close()


def list_favorites(user_id: int, limit: int = 20, offset: int = 0) -> list[tuple[Recipe, str]]:
    """Return [(recipe, favorited_at)], most recently favorited first."""
    conn = get_connection()
    try:
        rows = conn.execute(
            """SELECT r.*, f.created_at AS favorited_at
               FROM favorite_recipes f JOIN recipes r ON r.id = f.recipe_id
               WHERE f.user_id = ?
               ORDER BY f.created_at DESC, f.id DESC
               LIMIT ? OFFSET ?""",
            (user_id, limit, offset),
        ).fetchall()
        return [(_row_to_recipe(r), r["favorited_at"]) for r in rows]
    finally:
        conn.close()


def list_saved(user_id: int, filter: str = "all", search: str = "") -> list[tuple[Recipe, bool]]:
    """Recipes the user has favorited or linked from one of their meal plans.

    Returns [(recipe, is_favorite)] newest first.  filter="favorites" keeps
    only favorites; search is a case-insensitive title substring.
    """
    conn = get_connection()
    try:
        favorite_ids = {
            r["recipe_id"] for r in conn.execute(
                "SELECT recipe_id FROM favorite_recipes WHERE user_id = ?", (user_id,)
            ).fetchall()
        }
        plan_ids = {
            r["recipe_id"] for r in conn.execute(
                """SELECT l.recipe_id FROM meal_plan_recipes l
                   JOIN meal_plans p ON p.id = l.meal_plan_id
                   WHERE p.user_id = ?""",
                (user_id,),
            ).fetchall()
        }
        recipe_ids = favorite_ids if filter == "favorites" else favorite_ids | plan_ids
        if not recipe_ids:
            return []
        ids = sorted(recipe_ids)
        rows = conn.execute(
            "SELECT * FROM recipes WHERE id IN ({}) ORDER BY created_at DESC, id DESC".format(",".join("?" * len(ids))),
            ids,
        ).fetchall()
    finally:
        conn.close()

    recipes = [_row_to_recipe(r) for r in rows]
    if search:
        needle = search.lower()
        recipes = [r for r in recipes if needle in r.title.lower()]
    return [(r, r.id in favorite_ids) for r in recipes]


# ── Claude-backed operations ──────────────────────────────────────────────────

def _normalize_difficulty(value) -> str:
    text = str(value or "").strip().capitalize()
    return text if text in DIFFICULTIES else "Medium"


def discover(
    ingredients: list[str],
    preferences: Optional[UserPreferences] = None,
    cooking_method: Optional[str] = None,
) -> tuple[list[dict], str]:
    """Ask Claude for recipe suggestions. Returns (suggestions, message).

    Entries that are not objects are dropped. Raises GenerationError when
    the reply carried no usable suggestion.
    """
    response = ai_assistant.find_recipes(ingredients, preferences, cooking_method)
    suggestions = response.data.get("recipes") if isinstance(response.data, dict) else None
    if not isinstance(suggestions, list):
        raise GenerationError(Task.FIND_RECIPES, response.message)
    suggestions = [s for s in suggestions if isinstance(s, dict)]
    if not suggestions:
        raise GenerationError(Task.FIND_RECIPES, response.message)

    for suggestion in suggestions:
        suggestion["difficulty"] = _normalize_difficulty(suggestion.get("difficulty"))
        suggestion.setdefault("usesIngredients", [])
        suggestion.setdefault("additionalIngredients", [])
    return suggestions, response.message


def generate_details(
    recipe_name: str,
    ingredients: list[str],
    skill_level: Optional[str] = None,
    constraints: Optional[RecipeConstraints] = None,
) -> tuple[FullRecipe, str]:
    """Ask Claude for a full recipe. Raises GenerationError on failure."""
    response = ai_assistant.get_recipe_details(recipe_name, ingredients, skill_level, constraints)
    if not isinstance(response.data, dict):
        raise GenerationError(Task.GET_RECIPE_DETAILS, response.message)
    return response.data, response.message


def save_generated(
    recipe_name: str,
    generated: FullRecipe,
    constraints: Optional[RecipeConstraints] = None,
    image_url: Optional[str] = None,
) -> Recipe:
    """Persist a FullRecipe under the name the user asked for."""
    metadata = {
        "tips": generated.get("tips", []),
        "substitutions": generated.get("substitutions", []),
        "nutrition": generated.get("nutrition"),
        "generatedName": generated.get("recipeName"),
    }
    if constraints:
        metadata["constraints"] = constraints
    difficulty = generated.get("difficulty")
    total_time = generated.get("totalTime")
    return add(Recipe(
        id=None,
        title=recipe_name,
        description=f"{difficulty} recipe - {total_time}",
        ingredients=generated.get("ingredients", []),
        instructions=generated.get("instructions", []),
        prep_time=parse_time_to_minutes(generated.get("prepTime")),
        cook_time=parse_time_to_minutes(generated.get("cookTime")),
        total_time=total_time,
        servings=generated.get("servings"),
        difficulty=difficulty,
        image_url=image_url,
        source="claude",
        metadata=metadata,
    ))


def to_full_recipe(recipe: Recipe) -> FullRecipe:
    """Rebuild the FullRecipe shape from a stored row (for modification prompts)."""
    metadata = recipe.metadata or {}
    return {
        "recipeName": metadata.get("generatedName") or recipe.title,
        "servings": recipe.servings,
        "prepTime": f"{recipe.prep_time} minutes" if recipe.prep_time is not None else "",
        "cookTime": f"{recipe.cook_time} minutes" if recipe.cook_time is not None else "",
        "totalTime": recipe.total_time or "",
        "difficulty": recipe.difficulty or "Medium",
        "ingredients": recipe.ingredients,
        "instructions": recipe.instructions,
        "tips": metadata.get("tips", []),
        "substitutions": metadata.get("substitutions", []),
        "nutrition": metadata.get("nutrition") or {},
    }


def modify(recipe: Recipe, modification: str) -> tuple[dict, str]:
    """Ask Claude for a modified version of a stored recipe (not persisted)."""
    response = ai_assistant.modify_recipe(to_full_recipe(recipe), modification)
    if not isinstance(response.data, dict):
        raise GenerationError(Task.MODIFY_RECIPE, response.message)
    return response.data, response.message
