"""Conversational intent resolution and routing.

Two resolvers turn an inbound request into a ResolvedIntent:

    RegexIntentResolver:      raw chat text, classified by a fixed regex cascade
    DialogflowIntentResolver: a Dialogflow CX webhook payload (intentInfo.displayName)

route() then dispatches the intent name to a handler that calls the task
dispatcher and folds the result into session parameters under fixed keys.
Each message is classified on its own; the only memory between turns is the
session parameter dict the caller passes back in.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from meal_assistant.core import ai_assistant
from meal_assistant.core.ai_assistant import Task

logger = logging.getLogger(__name__)

FIND_RECIPES = "find.recipe.by.ingredients"
GET_DETAILS = "get.recipe.details"
CREATE_PLAN = "create.meal.plan"
GET_SHOPPING_LIST = "get.shopping.list"
SAVE_FAVORITE = "save.favorite.recipe"
START_COOKING = "start.cooking.mode"
GENERAL_QUERY = "general_query"

NO_MEAL_PLAN_MESSAGE = (
    "I don't have a meal plan to create a shopping list from. "
    "Would you like me to create a meal plan first?"
)
NO_RECIPE_MESSAGE = (
    "I don't have a recipe loaded. Please select a recipe first by asking me for recipe details."
)


@dataclass
class ResolvedIntent:
    name: str
    parameters: dict = field(default_factory=dict)  # {name: {"originalValue", "resolvedValue"}}
    query: str = ""


@dataclass
class IntentResult:
    message: str
    session_parameters: dict = field(default_factory=dict)


class IntentResolver(Protocol):
    def resolve(self, payload: Any) -> ResolvedIntent: ...


def make_parameter(original: str, resolved: Any) -> dict:
    return {"originalValue": original, "resolvedValue": resolved}


# ── Resolvers ─────────────────────────────────────────────────────────────────

_INGREDIENT_PATTERNS = [
    re.compile(r"i have (.+)", re.IGNORECASE),
    re.compile(r"what can i make with (.+)", re.IGNORECASE),
    re.compile(r"recipes? (?:with|using|for) (.+)", re.IGNORECASE),
    re.compile(r"cook (?:with|using) (.+)", re.IGNORECASE),
]

_DETAIL_PATTERNS = [
    re.compile(r"(?:tell me (?:more )?about|how (?:do i|to) make|recipe for|details (?:for|about)) (.+)", re.IGNORECASE),
    re.compile(r"^make (.+)$", re.IGNORECASE),
]

_MEAL_PLAN_PHRASES = ("meal plan", "plan my meals", "weekly plan", "plan for the week")
_SHOPPING_PHRASES = ("shopping list", "grocery list", "what do i need to buy")
_COOKING_PHRASES = ("start cooking", "let's cook", "walk me through", "guide me")


def split_ingredients(text: str) -> list[str]:
    """Split "chicken, rice and broccoli" into ["chicken", "rice", "broccoli"]."""
    parts = re.split(r",|\band\b", text.rstrip(" .!?"))
    return [p.strip() for p in parts if p.strip()]


class RegexIntentResolver:
    """Keyword/regex intent detection for the lightweight chat endpoint."""

    def resolve(self, payload: str) -> ResolvedIntent:
        message = payload.strip()
        lower = message.lower()

        for pattern in _INGREDIENT_PATTERNS:
            match = pattern.search(message)
            if match:
                raw = match.group(1)
                return ResolvedIntent(FIND_RECIPES, {
                    "ingredients": make_parameter(raw, split_ingredients(raw)),
                }, message)

        for pattern in _DETAIL_PATTERNS:
            match = pattern.search(message)
            if match:
                name = match.group(1).strip().rstrip(" .!?")
                return ResolvedIntent(GET_DETAILS, {"recipe_name": make_parameter(name, name)}, message)

        if any(phrase in lower for phrase in _MEAL_PLAN_PHRASES):
            days_match = re.search(r"(\d+)\s*days?", message, re.IGNORECASE)
            days = int(days_match.group(1)) if days_match else 7
            return ResolvedIntent(CREATE_PLAN, {"days": make_parameter(str(days), days)}, message)

        if any(phrase in lower for phrase in _SHOPPING_PHRASES):
            return ResolvedIntent(GET_SHOPPING_LIST, {}, message)

        if any(phrase in lower for phrase in _COOKING_PHRASES):
            return ResolvedIntent(START_COOKING, {}, message)

        return ResolvedIntent(GENERAL_QUERY, {}, message)


class DialogflowIntentResolver:
    """Read the intent already classified by Dialogflow from a webhook request body."""

    def resolve(self, payload: dict) -> ResolvedIntent:
        intent_info = payload.get("intentInfo") or {}
        return ResolvedIntent(
            name=intent_info.get("displayName") or "Default",
            parameters=intent_info.get("parameters") or {},
            query=payload.get("text") or "",
        )


# ── Handlers ──────────────────────────────────────────────────────────────────

def _value(parameters: dict, name: str, default=None):
    param = parameters.get(name)
    if isinstance(param, dict) and param.get("resolvedValue") not in (None, "", []):
        return param["resolvedValue"]
    return default


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return split_ingredients(value)
    return list(value)


def _preferences(session: dict) -> dict:
    return dict(session.get("userPreferences") or {})


def _find_recipes(parameters: dict, session: dict, query: str) -> IntentResult:
    ingredients = _as_list(_value(parameters, "ingredients"))
    response = ai_assistant.find_recipes(ingredients, _preferences(session))
    recipes = (response.data or {}).get("recipes", []) if isinstance(response.data, dict) else []
    return IntentResult(response.message, {
        "lastRecipes": recipes,
        "lastIngredients": ingredients,
    })


def _recipe_details(parameters: dict, session: dict, query: str) -> IntentResult:
    recipe_name = _value(parameters, "recipe_name", "")
    ingredients = session.get("lastIngredients") or _as_list(_value(parameters, "ingredients"))
    skill_level = _preferences(session).get("skillLevel") or "intermediate"
    response = ai_assistant.get_recipe_details(recipe_name, ingredients, skill_level)
    return IntentResult(response.message, {"currentRecipe": response.data})


def _create_plan(parameters: dict, session: dict, query: str) -> IntentResult:
    days = _value(parameters, "days", 7)
    try:
        days = int(days)
    except (TypeError, ValueError):
        days = 7
    days = max(1, days)
    preferences = _preferences(session)
    dietary = _value(parameters, "preferences")
    if dietary:
        preferences["dietary"] = _as_list(dietary)
    response = ai_assistant.create_meal_plan(preferences, days)
    return IntentResult(response.message, {"currentMealPlan": response.data})


def _shopping_list(parameters: dict, session: dict, query: str) -> IntentResult:
    meal_plan = session.get("currentMealPlan")
    if not meal_plan:
        return IntentResult(NO_MEAL_PLAN_MESSAGE)
    pantry_items = session.get("pantryItems") or _preferences(session).get("pantryItems") or []
    response = ai_assistant.generate_shopping_list(meal_plan, pantry_items)
    return IntentResult(response.message, {"currentShoppingList": response.data})


def _save_favorite(parameters: dict, session: dict, query: str) -> IntentResult:
    recipe_name = _value(parameters, "recipe_name") or (session.get("currentRecipe") or {}).get("recipeName")
    if not recipe_name:
        return IntentResult("Which recipe would you like me to save?")
    favorites = list(session.get("favoriteRecipes") or [])
    if recipe_name not in favorites:
        favorites.append(recipe_name)
    return IntentResult(f"I've saved {recipe_name} to your favorites!", {"favoriteRecipes": favorites})


def _start_cooking(parameters: dict, session: dict, query: str) -> IntentResult:
    recipe = session.get("currentRecipe")
    if not recipe:
        return IntentResult(NO_RECIPE_MESSAGE)
    response = ai_assistant.ask_claude(Task.START_COOKING_MODE, {"recipe": recipe, "currentStep": 1})
    return IntentResult(response.message, {
        "cookingMode": True,
        "currentStep": 1,
        "currentRecipe": recipe,
    })


def _general_query(parameters: dict, session: dict, query: str) -> IntentResult:
    response = ai_assistant.ask_claude(Task.GENERAL_QUERY, {
        "query": query,
        "userPreferences": _preferences(session),
    })
    return IntentResult(response.message)


INTENT_HANDLERS: dict[str, Callable[[dict, dict, str], IntentResult]] = {
    FIND_RECIPES: _find_recipes,
    GET_DETAILS: _recipe_details,
    CREATE_PLAN: _create_plan,
    GET_SHOPPING_LIST: _shopping_list,
    SAVE_FAVORITE: _save_favorite,
    START_COOKING: _start_cooking,
}


def route(
    intent_name: str,
    parameters: Optional[dict] = None,
    session_parameters: Optional[dict] = None,
    user_query: str = "",
) -> IntentResult:
    """Dispatch an intent to its handler; unknown intents become a general query."""
    handler = INTENT_HANDLERS.get(intent_name, _general_query)
    logger.debug("Routing intent %s to %s", intent_name, handler.__name__)
    return handler(parameters or {}, session_parameters or {}, user_query)


def handle(intent: ResolvedIntent, session_parameters: Optional[dict] = None) -> IntentResult:
    return route(intent.name, intent.parameters, session_parameters, intent.query)


def webhook_response(message: str, session_parameters: Optional[dict] = None) -> dict:
    """Wrap a reply in the Dialogflow CX fulfillment envelope."""
    body = {"fulfillmentResponse": {"messages": [{"text": {"text": [message]}}]}}
    if session_parameters:
        body["sessionInfo"] = {"parameters": session_parameters}
    return body
