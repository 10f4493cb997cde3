import logging
import sqlite3
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from meal_assistant.core import preferences, recipes as recipes_core
from meal_assistant.core.ai_assistant import GenerationError
from meal_assistant.core.images import search_recipe_image
from meal_assistant.db.models import Recipe
from app.dependencies import current_user_id
from app.schemas import DiscoverRequest, ModifyRecipeRequest, RecipeCreate, RecipeDetailsRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


def _parse_ids(ids: str) -> list[int]:
    try:
        return [int(i) for i in ids.split(",") if i.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="ids must be comma-separated integers")


def _get_or_404(recipe_id: int) -> Recipe:
    recipe = recipes_core.get(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


@router.get("")
def recipe_list(search: str = "", ids: str = "", limit: int = 20, offset: int = 0):
    if ids:
        return {"recipes": recipes_core.get_titles(_parse_ids(ids))}
    return {"recipes": [asdict(r) for r in recipes_core.list_recipes(search or None, limit, offset)]}


@router.post("", status_code=201)
def recipe_create(body: RecipeCreate):
    title = (body.title or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")

    recipe = recipes_core.add(Recipe(
        id=None,
        title=title,
        description=body.description,
        ingredients=body.ingredients or [],
        instructions=body.instructions or [],
        prep_time=body.prepTime,
        cook_time=body.cookTime,
        total_time=body.totalTime,
        servings=body.servings,
        difficulty=body.difficulty,
        image_url=body.imageUrl,
        source=body.source or "manual",
        metadata=body.metadata,
    ))
    return {"recipe": asdict(recipe)}


@router.get("/favorites")
def favorites_list(limit: int = 20, offset: int = 0, user_id: int = Depends(current_user_id)):
    return {"recipes": [
        {**asdict(recipe), "favoritedAt": favorited_at}
        for recipe, favorited_at in recipes_core.list_favorites(user_id, limit, offset)
    ]}


@router.get("/saved")
def saved_list(filter: str = "all", search: str = "", user_id: int = Depends(current_user_id)):
    if filter not in recipes_core.SAVED_FILTERS:
        raise HTTPException(status_code=400, detail=f"filter must be one of {', '.join(recipes_core.SAVED_FILTERS)}")
    return {"recipes": [
        {
            "id": recipe.id,
            "title": recipe.title,
            "description": recipe.description,
            "difficulty": recipe.difficulty,
            "total_time": recipe.total_time,
            "servings": recipe.servings,
            "created_at": recipe.created_at,
            "metadata": recipe.metadata,
            "isFavorite": is_favorite,
        }
        for recipe, is_favorite in recipes_core.list_saved(user_id, filter, search)
    ]}


@router.post("/discover")
def recipe_discover(body: DiscoverRequest, user_id: int = Depends(current_user_id)):
    ingredients = [i.strip() for i in body.ingredients or [] if i.strip()]
    if not ingredients:
        raise HTTPException(status_code=400, detail="At least one ingredient is required")

    prefs = body.preferences or preferences.for_user(user_id) or None
    try:
        suggestions, message = recipes_core.discover(ingredients, prefs, body.cookingMethod)
    except GenerationError as e:
        logger.error("%s failed for %s: %s", e.task.value, ingredients, e.message)
        raise HTTPException(status_code=500, detail="Failed to discover recipes")
    return {"recipes": suggestions, "message": message}


@router.post("/details")
def recipe_details(body: RecipeDetailsRequest, user_id: int = Depends(current_user_id)):
    """Generate a full recipe with Claude and save it; the id is returned for linking."""
    recipe_name = (body.recipeName or "").strip()
    if not recipe_name:
        raise HTTPException(status_code=400, detail="Recipe name is required")

    constraints = body.constraints()
    has_constraints = bool(constraints)

    skill_level = body.skillLevel
    if not skill_level or "servings" not in constraints:
        stored = preferences.get(user_id)
        if not skill_level:
            skill_level = (stored.skill_level if stored else None) or "intermediate"
        if "servings" not in constraints and stored and stored.household_size:
            constraints["servings"] = stored.household_size

    try:
        generated, message = recipes_core.generate_details(
            recipe_name, body.ingredients or [], skill_level, constraints or None,
        )
    except GenerationError as e:
        logger.error("%s failed for %r: %s", e.task.value, recipe_name, e.message)
        raise HTTPException(status_code=500, detail="Failed to generate recipe")

    image_url = search_recipe_image(recipe_name)
    try:
        saved = recipes_core.save_generated(
            recipe_name, generated, constraints if has_constraints else None, image_url,
        )
    except sqlite3.Error:
        logger.exception("Error saving generated recipe %r", recipe_name)
        return {"recipe": generated, "recipeId": None, "message": message, "saved": False}

    return {
        "recipe": generated,
        "recipeId": saved.id,
        "imageUrl": image_url,
        "message": message,
        "saved": True,
    }


@router.get("/{recipe_id}")
def recipe_get(recipe_id: int, user_id: int = Depends(current_user_id)):
    recipe = _get_or_404(recipe_id)
    return {"recipe": asdict(recipe), "isFavorite": recipes_core.is_favorite(user_id, recipe_id)}


@router.post("/{recipe_id}/favorite", status_code=201)
def favorite_add(recipe_id: int, user_id: int = Depends(current_user_id)):
    _get_or_404(recipe_id)
    if not recipes_core.add_favorite(user_id, recipe_id):
        return JSONResponse({"message": "Already favorited"}, status_code=200)
    return {"message": "Added to favorites"}


@router.delete("/{recipe_id}/favorite")
def favorite_remove(recipe_id: int, user_id: int = Depends(current_user_id)):
    recipes_core.remove_favorite(user_id, recipe_id)
    return {"message": "Removed from favorites"}


@router.post("/{recipe_id}/modify")
def recipe_modify(recipe_id: int, body: ModifyRecipeRequest):
    """Preview a modified version of a stored recipe; nothing is saved."""
    modification = (body.modification or "").strip()
    if not modification:
        raise HTTPException(status_code=400, detail="Modification is required")

    recipe = _get_or_404(recipe_id)
    try:
        modified, message = recipes_core.modify(recipe, modification)
    except GenerationError as e:
        logger.error("%s failed for recipe %s: %s", e.task.value, recipe_id, e.message)
        raise HTTPException(status_code=500, detail="Failed to modify recipe")
    return {"recipe": modified, "message": message}
