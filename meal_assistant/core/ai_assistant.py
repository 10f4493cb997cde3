"""Claude task dispatcher, the single entry point for every LLM-backed operation.

ask_claude() picks the prompt builder, model tier, token budget and temperature
for a Task, calls the Anthropic Messages API with a fixed system prompt, and
parses the JSON reply into a ClaudeResponse(message, data).

Failures are never raised to callers: any API, configuration or parse error is
logged and turned into FALLBACK_MESSAGE with data=None.  Callers must treat a
missing ``data`` as the failure signal.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from meal_assistant.config import get_api_key, get_model
from meal_assistant.core import prompts
from meal_assistant.core.schemas import FullRecipe, RecipeConstraints, UserPreferences, WeeklyMealPlan

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "I'm having trouble processing that request. Could you try again?"

SYSTEM_PROMPT = """You are a helpful meal planning assistant. You help users find recipes, plan meals, and create shopping lists.

When responding, always provide:
1. A conversational response for voice output
2. Structured data when applicable (recipes, meal plans, shopping lists)

Format your responses as JSON with this structure:
{
  "message": "The conversational response to speak to the user",
  "data": { /* structured data in the format requested by the user message */ }
}

Keep voice responses concise and natural for a voice assistant. Avoid lists in spoken responses - summarize instead."""


class Task(str, Enum):
    FIND_RECIPES = "find_recipes"
    GET_RECIPE_DETAILS = "get_recipe_details"
    CREATE_MEAL_PLAN = "create_meal_plan"
    GENERATE_SHOPPING_LIST = "generate_shopping_list"
    EXTRACT_PREFERENCES = "extract_preferences"
    MODIFY_RECIPE = "modify_recipe"
    REROLL_MEAL = "reroll_meal"
    START_COOKING_MODE = "start_cooking_mode"
    GENERAL_QUERY = "general_query"


@dataclass(frozen=True)
class TaskSettings:
    complex_model: bool
    max_tokens: int
    temperature: float
    default_message: str


TASK_SETTINGS: dict[Task, TaskSettings] = {
    Task.FIND_RECIPES: TaskSettings(False, 1500, 0.7, "Here are a few recipes you can make."),
    Task.GET_RECIPE_DETAILS: TaskSettings(False, 3000, 0.5, "Here's the full recipe."),
    Task.CREATE_MEAL_PLAN: TaskSettings(True, 4096, 0.9, "Here's your meal plan for the week."),
    Task.GENERATE_SHOPPING_LIST: TaskSettings(False, 3000, 0.3, "Here's your shopping list."),
    Task.EXTRACT_PREFERENCES: TaskSettings(False, 800, 0.1, "I've updated your preferences."),
    Task.MODIFY_RECIPE: TaskSettings(True, 3000, 0.5, "Here's the modified recipe."),
    Task.REROLL_MEAL: TaskSettings(True, 1024, 1.0, "Here's a different meal for that day."),
    Task.START_COOKING_MODE: TaskSettings(False, 1024, 0.5, "Let's start cooking."),
    Task.GENERAL_QUERY: TaskSettings(True, 1024, 0.7, ""),
}


class GenerationError(Exception):
    """Raised by domain helpers when a task came back without structured data."""

    def __init__(self, task: "Task", message: str = FALLBACK_MESSAGE):
        super().__init__(message)
        self.task = task
        self.message = message


@dataclass
class ClaudeResponse:
    message: str
    data: Optional[Any] = None


# ── Prompt selection ──────────────────────────────────────────────────────────

def _find_recipes(ctx: dict) -> str:
    return prompts.find_recipes_prompt(
        ctx.get("ingredients") or [], ctx.get("preferences"), ctx.get("cookingMethod"),
    )


def _recipe_details(ctx: dict) -> str:
    return prompts.recipe_details_prompt(
        ctx.get("recipeName", ""), ctx.get("ingredients") or [],
        ctx.get("skillLevel"), ctx.get("constraints"),
    )


def _meal_plan(ctx: dict) -> str:
    return prompts.weekly_meal_plan_prompt(
        ctx.get("preferences"), ctx.get("numberOfDays") or 7,
        ctx.get("recentRecipes"), ctx.get("slowCookerMeals") or 0,
    )


def _shopping_list(ctx: dict) -> str:
    return prompts.shopping_list_prompt(ctx.get("mealPlan") or {}, ctx.get("pantryItems"))


def _preferences(ctx: dict) -> str:
    return prompts.extract_preferences_prompt(ctx.get("userInput", ""), ctx.get("currentPreferences"))


def _modify(ctx: dict) -> str:
    return prompts.modify_recipe_prompt(ctx.get("recipe") or {}, ctx.get("modification", ""))


def _reroll(ctx: dict) -> str:
    return prompts.reroll_meal_prompt(ctx.get("mealPlan") or {}, ctx.get("dayIndex", 0), ctx.get("preferences"))


PROMPT_BUILDERS: dict[Task, Callable[[dict], str]] = {
    Task.FIND_RECIPES: _find_recipes,
    Task.GET_RECIPE_DETAILS: _recipe_details,
    Task.CREATE_MEAL_PLAN: _meal_plan,
    Task.GENERATE_SHOPPING_LIST: _shopping_list,
    Task.EXTRACT_PREFERENCES: _preferences,
    Task.MODIFY_RECIPE: _modify,
    Task.REROLL_MEAL: _reroll,
}


def build_prompt(task: Task, context: dict) -> str:
    builder = PROMPT_BUILDERS.get(task)
    if builder is None:
        return prompts.task_prompt(task.value, context)
    return builder(context)


# ── API call and reply parsing ────────────────────────────────────────────────

def _get_client():
    """Create and return an Anthropic client. Raises ValueError if the API key is not set."""
    import anthropic
    api_key = get_api_key()
    if not api_key:
        raise ValueError("Claude API key not set. Add it under /api/settings or set ANTHROPIC_API_KEY.")
    return anthropic.Anthropic(api_key=api_key)


def strip_code_fence(text: str) -> str:
    """Return the body of a ```json fenced block if present, else the stripped text."""
    match = re.search(r"```(?:json)?\s*([\s\S]+?)\s*```", text)
    if match:
        return match.group(1)
    return text.strip()


def parse_reply(task: Task, text: str) -> ClaudeResponse:
    """Parse a model reply into the {message, data} envelope.

    Raises json.JSONDecodeError if the reply is not JSON.
    """
    parsed = json.loads(strip_code_fence(text))
    if isinstance(parsed, dict) and ("message" in parsed or "data" in parsed):
        return ClaudeResponse(message=str(parsed.get("message") or ""), data=parsed.get("data"))
    return ClaudeResponse(message=TASK_SETTINGS[task].default_message, data=parsed)


def ask_claude(task: Task, context: dict, session_id: Optional[str] = None) -> ClaudeResponse:
    """Run one task against Claude. Never raises; see module docstring."""
    task = Task(task)
    settings = TASK_SETTINGS[task]
    try:
        content = build_prompt(task, context)
        if session_id:
            content += f"\n\nSession: {session_id}"

        client = _get_client()
        message = client.messages.create(
            model=get_model(settings.complex_model),
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": content}],
        )
        block = message.content[0]
        if block.type != "text":
            raise ValueError(f"Unexpected response block type: {block.type}")
        return parse_reply(task, block.text)
    except Exception:
        logger.exception("Claude task %s failed", task.value)
        return ClaudeResponse(message=FALLBACK_MESSAGE)


# ── Typed task wrappers ───────────────────────────────────────────────────────

def find_recipes(
    ingredients: list[str],
    preferences: Optional[UserPreferences] = None,
    cooking_method: Optional[str] = None,
) -> ClaudeResponse:
    """data: {"recipes": [RecipeSuggestion, ...]}"""
    return ask_claude(Task.FIND_RECIPES, {
        "ingredients": ingredients,
        "preferences": preferences or {},
        "cookingMethod": cooking_method,
    })


def get_recipe_details(
    recipe_name: str,
    ingredients: list[str],
    skill_level: Optional[str] = None,
    constraints: Optional[RecipeConstraints] = None,
) -> ClaudeResponse:
    """data: FullRecipe"""
    return ask_claude(Task.GET_RECIPE_DETAILS, {
        "recipeName": recipe_name,
        "ingredients": ingredients,
        "skillLevel": skill_level,
        "constraints": constraints,
    })


def create_meal_plan(
    preferences: Optional[UserPreferences] = None,
    number_of_days: int = 7,
    recent_recipes: Optional[list[str]] = None,
    slow_cooker_meals: int = 0,
) -> ClaudeResponse:
    """data: WeeklyMealPlan"""
    return ask_claude(Task.CREATE_MEAL_PLAN, {
        "preferences": preferences or {},
        "numberOfDays": number_of_days,
        "recentRecipes": recent_recipes or [],
        "slowCookerMeals": slow_cooker_meals,
    })


def generate_shopping_list(meal_plan: WeeklyMealPlan, pantry_items: Optional[list[str]] = None) -> ClaudeResponse:
    """data: GeneratedShoppingList"""
    return ask_claude(Task.GENERATE_SHOPPING_LIST, {
        "mealPlan": meal_plan,
        "pantryItems": pantry_items or [],
    })


def extract_preferences(user_input: str, current_preferences: Optional[UserPreferences] = None) -> ClaudeResponse:
    """data: UserPreferences"""
    return ask_claude(Task.EXTRACT_PREFERENCES, {
        "userInput": user_input,
        "currentPreferences": current_preferences or {},
    })


def modify_recipe(recipe: FullRecipe, modification: str) -> ClaudeResponse:
    """data: ModifiedRecipe"""
    return ask_claude(Task.MODIFY_RECIPE, {"recipe": recipe, "modification": modification})


def reroll_meal(
    meal_plan: WeeklyMealPlan,
    day_index: int,
    preferences: Optional[UserPreferences] = None,
) -> ClaudeResponse:
    """data: MealPlanDay"""
    return ask_claude(Task.REROLL_MEAL, {
        "mealPlan": meal_plan,
        "dayIndex": day_index,
        "preferences": preferences or {},
    })

