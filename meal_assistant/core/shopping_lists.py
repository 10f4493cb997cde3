"""Shopping lists: generation from a meal plan, storage, and purchased toggling.

Claude returns items grouped by store section; they are flattened into
``{item, quantity, category, purchased}`` before they are stored. After
creation only ``purchased`` changes, unless the client replaces the items
wholesale.
"""

import logging
from typing import Optional

from meal_assistant.core import ai_assistant
from meal_assistant.core.ai_assistant import GenerationError, Task
from meal_assistant.core.schemas import GeneratedShoppingList, ShoppingListItem
from meal_assistant.db.database import dumps_json, get_connection, loads_json
from meal_assistant.db.models import MealPlan, ShoppingList

logger = logging.getLogger(__name__)


def _row_to_list(row) -> ShoppingList:
    return ShoppingList(
        id=row["id"],
        user_id=row["user_id"],
        meal_plan_id=row["meal_plan_id"],
        items=loads_json(row["items"], []),
        stale=bool(row["stale"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def flatten(generated: GeneratedShoppingList) -> list[ShoppingListItem]:
    """Flatten {section: [items]} into a list, tagging each item with its section."""
    items = []
    for category, section_items in (generated.get("shoppingList") or {}).items():
        if not isinstance(section_items, list):
            continue
        for entry in section_items:
            items.append({
                "item": entry.get("item", ""),
                "quantity": entry.get("quantity", ""),
                "category": category,
                "purchased": False,
            })
    return items


def normalize_items(items: list) -> list[ShoppingListItem]:
    """Fill defaults for client-supplied items (purchased defaults to False)."""
    result = []
    for entry in items:
        if not isinstance(entry, dict):
            raise ValueError("Each item must be an object")
        item: ShoppingListItem = {
            "item": entry.get("item") or "",
            "quantity": entry.get("quantity") or "",
            "purchased": bool(entry.get("purchased", False)),
        }
        if entry.get("category") is not None:
            item["category"] = entry["category"]
        result.append(item)
    return result


# ── Queries ───────────────────────────────────────────────────────────────────

def list_for_user(user_id: int, limit: int = 10, offset: int = 0) -> list[ShoppingList]:
    conn = get_connection()
    try:
        rows = conn.execute(
            "SELECT * FROM shopping_lists WHERE user_id = ? ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            (user_id, limit, offset),
        ).fetchall()
        return [_row_to_list(r) for r in rows]
    finally:
        conn.close()


def latest_for_meal_plan(user_id: int, meal_plan_id: int) -> Optional[ShoppingList]:
    conn = get_connection()
    try:
        row = conn.execute(
            """SELECT * FROM shopping_lists WHERE user_id = ? AND meal_plan_id = ?
               ORDER BY created_at DESC, id DESC LIMIT 1""",
            (user_id, meal_plan_id),
        ).fetchone()
        return _row_to_list(row) if row else None
    finally:
        conn.close()


def get(list_id: int, user_id: int) -> Optional[ShoppingList]:
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT * FROM shopping_lists WHERE id = ? AND user_id = ?", (list_id, user_id)
        ).fetchone()
        return _row_to_list(row) if row else None
    finally:
        conn.close()


# ── Mutations ─────────────────────────────────────────────────────────────────

def create(user_id: int, items: list, meal_plan_id: int = None) -> ShoppingList:
    conn = get_connection()
    try:
        cursor = conn.execute(
            "INSERT INTO shopping_lists (user_id, meal_plan_id, items) VALUES (?, ?, ?)",
            (user_id, meal_plan_id, dumps_json(items)),
        )
        conn.commit()
        list_id = cursor.lastrowid
    finally:
        conn.close()
    return get(list_id, user_id)


def update_items(list_id: int, user_id: int, items: list) -> Optional[ShoppingList]:
    """Replace all items. Returns None if the list is not found for this user."""
    conn = get_connection()
    try:
        cursor = conn.execute(
            "UPDATE shopping_lists SET items = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ? AND user_id = ?",
            (dumps_json(items), list_id, user_id),
        )
        conn.commit()
        if cursor.rowcount == 0:
            return None
    finally:
        conn.close()
    return get(list_id, user_id)


def set_item_purchased(list_id: int, user_id: int, index: int, purchased: bool = None) -> Optional[ShoppingList]:
    """Set (or toggle, when purchased is None) one item's purchased flag.

    Nothing else in the list changes. Returns None if the list is not found;
    raises IndexError for a bad index without writing anything.
    """
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT items FROM shopping_lists WHERE id = ? AND user_id = ?", (list_id, user_id)
        ).fetchone()
        if row is None:
            return None
        items = loads_json(row["items"], [])
        if not 0 <= index < len(items):
            raise IndexError(f"Item index {index} out of range")
        current = bool(items[index].get("purchased", False))
        items[index]["purchased"] = (not current) if purchased is None else bool(purchased)
        conn.execute(
            "UPDATE shopping_lists SET items = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (dumps_json(items), list_id),
        )
        conn.commit()
    finally:
        conn.close()
    return get(list_id, user_id)


def delete(list_id: int, user_id: int) -> None:
    conn = get_connection()
    try:
        conn.execute("DELETE FROM shopping_lists WHERE id = ? AND user_id = ?", (list_id, user_id))
        conn.commit()
    finally:
        conn.close()


def generate_for_meal_plan(plan: MealPlan, pantry_items: list[str] = None) -> tuple[ShoppingList, str]:
    """Ask Claude for a list covering plan, flatten it and store it.

    Raises GenerationError if Claude returned no categorized list.
    """
    response = ai_assistant.generate_shopping_list(plan.meals, pantry_items or [])
    if not isinstance(response.data, dict) or not isinstance(response.data.get("shoppingList"), dict):
        raise GenerationError(Task.GENERATE_SHOPPING_LIST, response.message)

    items = flatten(response.data)
    shopping_list = create(plan.user_id, items, meal_plan_id=plan.id)
    logger.info("Generated shopping list %s with %d items for meal plan %s", shopping_list.id, len(items), plan.id)
    return shopping_list, response.message
