import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from meal_assistant.core import meal_plans as mp_core, shopping_lists as sl_core
from meal_assistant.core.ai_assistant import GenerationError
from app.dependencies import current_user_id
from app.schemas import ItemPurchasedRequest, ShoppingListCreate, ShoppingListUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/shopping-lists", tags=["shopping-lists"])


def _items_or_400(items) -> list:
    if items is None:
        raise HTTPException(status_code=400, detail="Items array is required")
    try:
        return sl_core.normalize_items(items)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("")
def shopping_list_index(
    mealPlanId: Optional[int] = None,
    limit: int = 10,
    offset: int = 0,
    user_id: int = Depends(current_user_id),
):
    if mealPlanId is not None:
        latest = sl_core.latest_for_meal_plan(user_id, mealPlanId)
        return {"shoppingList": {"id": latest.id, "stale": latest.stale} if latest else None}
    return {"shoppingLists": [asdict(s) for s in sl_core.list_for_user(user_id, limit, offset)]}


@router.post("")
def shopping_list_create(body: ShoppingListCreate, user_id: int = Depends(current_user_id)):
    meal_plan_id = body.mealPlanId

    if body.generate and meal_plan_id:
        plan = mp_core.get(meal_plan_id, user_id)
        if plan is None:
            raise HTTPException(status_code=404, detail="Meal plan not found")
        try:
            shopping_list, message = sl_core.generate_for_meal_plan(plan, body.pantryItems or [])
        except GenerationError as e:
            logger.error("%s failed for meal plan %s: %s", e.task.value, meal_plan_id, e.message)
            raise HTTPException(status_code=500, detail="Failed to generate shopping list")
        return {"shoppingList": asdict(shopping_list), "message": message}

    items = _items_or_400(body.items)
    if meal_plan_id and mp_core.get(meal_plan_id, user_id) is None:
        raise HTTPException(status_code=404, detail="Meal plan not found")
    shopping_list = sl_core.create(user_id, items, meal_plan_id=meal_plan_id or None)
    return JSONResponse({"shoppingList": asdict(shopping_list)}, status_code=201)


@router.get("/{list_id}")
def shopping_list_get(list_id: int, user_id: int = Depends(current_user_id)):
    shopping_list = sl_core.get(list_id, user_id)
    if shopping_list is None:
        raise HTTPException(status_code=404, detail="Shopping list not found")
    return {"shoppingList": asdict(shopping_list)}


@router.put("/{list_id}")
def shopping_list_update(list_id: int, body: ShoppingListUpdate, user_id: int = Depends(current_user_id)):
    items = _items_or_400(body.items)
    shopping_list = sl_core.update_items(list_id, user_id, items)
    if shopping_list is None:
        raise HTTPException(status_code=404, detail="Shopping list not found")
    return {"shoppingList": asdict(shopping_list)}


@router.patch("/{list_id}/items/{index}")
def shopping_list_item_toggle(
    list_id: int,
    index: int,
    body: Optional[ItemPurchasedRequest] = Body(default=None),
    user_id: int = Depends(current_user_id),
):
    """Set `purchased` on one item, or flip it when the body omits the field."""
    purchased = body.purchased if body else None
    try:
        shopping_list = sl_core.set_item_purchased(list_id, user_id, index, purchased)
    except IndexError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if shopping_list is None:
        raise HTTPException(status_code=404, detail="Shopping list not found")
    return {"shoppingList": asdict(shopping_list)}


@router.delete("/{list_id}")
def shopping_list_delete(list_id: int, user_id: int = Depends(current_user_id)):
    sl_core.delete(list_id, user_id)
    return {"success": True}
