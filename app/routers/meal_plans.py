import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from meal_assistant.core import meal_plans as mp_core, preferences, recipes as recipes_core
from meal_assistant.core.ai_assistant import GenerationError
from meal_assistant.db.models import MealPlan
from app.dependencies import current_user_id
from app.schemas import MealPlanCreate, MealPlanUpdate, RecipeLinkRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/meal-plans", tags=["meal-plans"])


def _get_or_404(plan_id: int, user_id: int) -> MealPlan:
    plan = mp_core.get(plan_id, user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Meal plan not found")
    return plan


@router.get("")
def meal_plan_list(limit: int = 10, offset: int = 0, user_id: int = Depends(current_user_id)):
    return {"mealPlans": [asdict(p) for p in mp_core.list_for_user(user_id, limit, offset)]}


@router.post("")
def meal_plan_create(body: MealPlanCreate, user_id: int = Depends(current_user_id)):
    if body.generate:
        prefs = body.preferences or preferences.for_user(user_id) or None
        try:
            plan, message = mp_core.generate_plan(
                user_id,
                prefs,
                number_of_days=body.numberOfDays or 7,
                slow_cooker_meals=body.slowCookerMeals or 0,
                week_start=body.weekStart,
            )
        except GenerationError as e:
            logger.error("%s failed for user %s: %s", e.task.value, user_id, e.message)
            raise HTTPException(status_code=500, detail="Failed to generate meal plan")
        return {"mealPlan": asdict(plan), "message": message}

    if not body.weekStart or not body.meals:
        raise HTTPException(status_code=400, detail="weekStart and meals are required")
    plan = mp_core.create(user_id, body.weekStart, body.meals)
    return JSONResponse({"mealPlan": asdict(plan)}, status_code=201)


@router.get("/{plan_id}")
def meal_plan_get(plan_id: int, user_id: int = Depends(current_user_id)):
    return {"mealPlan": asdict(_get_or_404(plan_id, user_id))}


@router.put("/{plan_id}")
def meal_plan_update(plan_id: int, body: MealPlanUpdate, user_id: int = Depends(current_user_id)):
    try:
        plan = mp_core.update(plan_id, user_id, week_start=body.weekStart, meals=body.meals)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if plan is None:
        raise HTTPException(status_code=404, detail="Meal plan not found")
    return {"mealPlan": asdict(plan)}


@router.delete("/{plan_id}")
def meal_plan_delete(plan_id: int, user_id: int = Depends(current_user_id)):
    mp_core.delete(plan_id, user_id)
    return {"success": True}


@router.post("/{plan_id}/days/{day_index}/reroll")
def meal_plan_reroll(plan_id: int, day_index: int, user_id: int = Depends(current_user_id)):
    """Swap one day's meal for a new suggestion, leaving the rest of the plan alone."""
    plan = _get_or_404(plan_id, user_id)
    try:
        plan, message = mp_core.reroll_day(plan, day_index, preferences.for_user(user_id) or None)
    except IndexError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GenerationError as e:
        logger.error("%s failed for plan %s day %s: %s", e.task.value, plan_id, day_index, e.message)
        raise HTTPException(status_code=500, detail="Failed to re-roll meal")
    return {"mealPlan": asdict(plan), "message": message}


@router.get("/{plan_id}/recipes")
def meal_plan_recipes(plan_id: int, dayIndex: Optional[int] = None, user_id: int = Depends(current_user_id)):
    _get_or_404(plan_id, user_id)
    if dayIndex is not None:
        link = mp_core.get_link(plan_id, dayIndex)
        return {"hasRecipe": link is not None, "recipeId": link.recipe_id if link else None}
    return {"links": [
        {"day_index": link.day_index, "recipe_id": link.recipe_id}
        for link in mp_core.get_links(plan_id)
    ]}


@router.post("/{plan_id}/recipes")
def meal_plan_link_recipe(plan_id: int, body: RecipeLinkRequest, user_id: int = Depends(current_user_id)):
    if body.dayIndex is None or not body.recipeId:
        raise HTTPException(status_code=400, detail="dayIndex and recipeId are required")

    _get_or_404(plan_id, user_id)
    if recipes_core.get(body.recipeId) is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    link = mp_core.upsert_link(plan_id, body.dayIndex, body.recipeId)
    return {"link": asdict(link)}
