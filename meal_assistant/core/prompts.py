"""Prompt templates for every Claude task.

Each builder is a pure function: it interpolates the caller's context into a
fixed natural-language instruction and appends the JSON schema the model must
return.  Missing preference fields render as "none"/"any"-style defaults and
lists render comma-joined, so builders never fail on well-typed input.
"""

import json
from typing import Optional, Union

from meal_assistant.core.schemas import (
    FullRecipe, MealPlanDay, RecipeConstraints, UserPreferences, WeeklyMealPlan,
)

JSON_ONLY = "Only return valid JSON, no other text."

RECIPE_SUGGESTIONS_SCHEMA = """{
  "recipes": [
    {
      "name": "Recipe Name",
      "description": "Brief description",
      "cookTime": "30 minutes",
      "difficulty": "Easy",
      "usesIngredients": ["chicken", "rice"],
      "additionalIngredients": ["soy sauce", "garlic"],
      "cuisineType": "Asian"
    }
  ]
}"""

FULL_RECIPE_SCHEMA = """{
  "recipeName": "Recipe Name",
  "servings": 4,
  "prepTime": "10 minutes",
  "cookTime": "25 minutes",
  "totalTime": "35 minutes",
  "difficulty": "Easy",
  "ingredients": [
    {"item": "chicken breast", "amount": "1 lb", "notes": "cut into bite-sized pieces"}
  ],
  "instructions": [
    {"step": 1, "instruction": "Detailed step here", "time": "5 minutes", "tip": "Optional tip for this step"}
  ],
  "tips": ["Pro tip 1", "Pro tip 2"],
  "substitutions": [
    {"original": "soy sauce", "alternative": "tamari or coconut aminos", "reason": "gluten-free option"}
  ],
  "nutrition": {
    "calories": "approx 350 per serving",
    "protein": "high",
    "notes": "High protein, moderate carbs"
  }
}"""

MEAL_PLAN_DAY_SCHEMA = """{
  "day": "Monday",
  "meal": "Chicken Stir Fry",
  "cookTime": "25 minutes",
  "difficulty": "Easy",
  "description": "Quick weeknight dinner",
  "mainIngredients": ["chicken", "vegetables", "rice"],
  "cuisineType": "Asian",
  "tags": ["quick", "healthy"]
}"""

WEEKLY_PLAN_SCHEMA = """{
  "weekPlan": [
    %s
  ],
  "shoppingCategories": {
    "proteins": ["chicken breast 2 lbs", "ground beef 1 lb"],
    "produce": ["broccoli", "bell peppers", "onions"],
    "pantry": ["rice", "pasta", "soy sauce"],
    "dairy": ["cheese", "milk"]
  },
  "prepTips": [
    "Marinate Monday's chicken on Sunday night",
    "Chop all vegetables on Sunday for the week"
  ],
  "budgetEstimate": "$60-80 for the week"
}""" % MEAL_PLAN_DAY_SCHEMA.replace("\n", "\n    ")

SHOPPING_LIST_SCHEMA = """{
  "shoppingList": {
    "Produce": [
      {"item": "broccoli", "quantity": "2 heads", "usedIn": ["Monday: Stir Fry", "Wednesday: Pasta"], "priority": "essential"}
    ],
    "Meat": [
      {"item": "chicken breast", "quantity": "2 lbs", "usedIn": ["Monday: Stir Fry", "Thursday: Chicken Tacos"], "priority": "essential", "notes": "Can buy in bulk and freeze half"}
    ]
  },
  "estimatedTotal": "$65-75",
  "optionalItems": [
    {"item": "fresh herbs", "reason": "Enhances flavor but dried herbs work too"}
  ],
  "moneySavingTips": [
    "Buy whole chicken and break it down yourself to save $5-10"
  ]
}"""

PREFERENCES_SCHEMA = """{
  "dietary": ["vegetarian"],
  "allergies": ["tree nuts"],
  "dislikes": ["mushrooms", "olives"],
  "favoriteCuisines": ["Italian", "Mexican"],
  "skillLevel": "beginner",
  "maxCookTime": "30 minutes",
  "householdSize": 2,
  "additionalNotes": "Prefers one-pot meals"
}"""

MODIFIED_RECIPE_SCHEMA = """{
  "recipeName": "Modified Recipe Name",
  "servings": 4,
  "prepTime": "10 minutes",
  "cookTime": "25 minutes",
  "totalTime": "35 minutes",
  "difficulty": "Easy",
  "ingredients": [...],
  "instructions": [...],
  "tips": [...],
  "substitutions": [...],
  "nutrition": {...},
  "modifications": [
    {
      "type": "ingredient substitution",
      "original": "chicken breast",
      "replacement": "tofu",
      "reason": "vegetarian request",
      "impactOnRecipe": "Reduce cooking time by 5 minutes"
    }
  ],
  "modificationNotes": "This vegetarian version maintains the same flavor profile using..."
}"""

STORE_SECTIONS = (
    "Produce", "Meat/Seafood", "Dairy", "Pantry/Dry Goods", "Frozen", "Bakery", "Condiments/Sauces",
)

# Instructions for tasks that only forward a JSON context to the model.
CONTEXT_TASK_PROMPTS = {
    "start_cooking_mode": "Provide step-by-step cooking instructions for the recipe. Start with the first step.",
    "general_query": "Answer the user's question about cooking, recipes, or meal planning.",
}


def _join(values, default: str) -> str:
    """Comma-join a list (or pass a plain string through); default when empty."""
    if not values:
        return default
    if isinstance(values, str):
        return values
    return ", ".join(str(v) for v in values)


def _dietary(preferences: UserPreferences) -> str:
    return _join(preferences.get("dietary"), "none")


def _cuisines(preferences: UserPreferences, default: str) -> str:
    return _join(preferences.get("favoriteCuisines") or preferences.get("cuisines"), default)


def find_recipes_prompt(
    ingredients: list[str],
    preferences: Optional[UserPreferences] = None,
    cooking_method: Optional[str] = None,
) -> str:
    """Ask for 3 recipe suggestions built mostly from the given ingredients."""
    preferences = preferences or {}
    method_line = f"\n- Cooking method: {cooking_method}" if cooking_method else ""
    method_req = f"\n5. Use the {cooking_method} cooking method" if cooking_method else ""
    return f"""You are a helpful cooking assistant. A user has these ingredients: {_join(ingredients, "none")}.

User preferences:
- Dietary restrictions: {_dietary(preferences)}
- Allergies: {_join(preferences.get("allergies"), "none")}
- Dislikes: {_join(preferences.get("dislikes"), "none")}
- Skill level: {preferences.get("skillLevel") or "any"}
- Cuisine preferences: {_cuisines(preferences, "any")}
- Maximum cook time: {preferences.get("maxCookTime") or "any"}{method_line}

Generate 3 recipe suggestions that:
1. Primarily use the provided ingredients
2. Are practical and achievable
3. Include variety (different cuisines/styles)
4. Respect dietary restrictions and never include allergens{method_req}

For each recipe, provide:
- Recipe name
- Brief description (one sentence)
- Cook time
- Difficulty level (Easy/Medium/Hard)
- Main ingredients used from their list
- Key additional ingredients needed (if any, max 3-4 common items)

Format as JSON:
{RECIPE_SUGGESTIONS_SCHEMA}

{JSON_ONLY}"""


def recipe_details_prompt(
    recipe_name: str,
    ingredients: list[str],
    skill_level: Optional[str] = None,
    constraints: Optional[RecipeConstraints] = None,
) -> str:
    """Ask for a complete recipe, optionally pinned to a meal plan's cook time/difficulty/servings."""
    constraint_lines = []
    if constraints:
        if constraints.get("cookTime"):
            constraint_lines.append(f"- Total cook time must be about {constraints['cookTime']}")
        if constraints.get("difficulty"):
            constraint_lines.append(f"- Difficulty must be {constraints['difficulty']}")
        if constraints.get("servings"):
            constraint_lines.append(f"- Must serve exactly {constraints['servings']} people")
    constraints_block = ""
    if constraint_lines:
        constraints_block = "\nHard requirements (do not deviate):\n" + "\n".join(constraint_lines) + "\n"

    return f"""Generate a complete, detailed recipe for: {recipe_name}

Primary ingredients to use: {_join(ingredients, "chef's choice")}
User skill level: {skill_level or "intermediate"}
{constraints_block}
Provide a comprehensive recipe with:

1. Full ingredient list with precise measurements
2. Step-by-step instructions (numbered, clear, concise)
3. Prep time and cook time
4. Servings
5. Pro tips (2-3 helpful hints)
6. Substitution suggestions (if applicable)

Tailor the complexity and detail to the user's skill level.
For beginners: more detailed steps, basic techniques explained
For advanced: can be more concise, assume technique knowledge

Format as JSON:
{FULL_RECIPE_SCHEMA}

{JSON_ONLY}"""


def weekly_meal_plan_prompt(
    preferences: Optional[UserPreferences] = None,
    number_of_days: int = 7,
    recent_recipes: Optional[list[str]] = None,
    slow_cooker_meals: int = 0,
) -> str:
    """Ask for an N-day dinner plan with shopping categories and prep tips."""
    preferences = preferences or {}
    avoid_block = ""
    if recent_recipes:
        avoid_block = (
            "\nRecently planned meals (avoid repeating these or close variations):\n"
            + _join(sorted(set(recent_recipes)), "none") + "\n"
        )
    slow_cooker_req = ""
    if slow_cooker_meals:
        slow_cooker_req = (
            f"\n- Exactly {slow_cooker_meals} of the meals must be slow-cooker meals "
            "(tag them \"slow-cooker\")"
        )

    return f"""Create a {number_of_days}-day meal plan for dinner.

User preferences:
- Dietary restrictions: {_dietary(preferences)}
- Allergies: {_join(preferences.get("allergies"), "none")}
- Dislikes: {_join(preferences.get("dislikes"), "none")}
- Favorite cuisines: {_cuisines(preferences, "varied")}
- Skill level: {preferences.get("skillLevel") or "intermediate"}
- Cooking time preference: {preferences.get("maxCookTime") or "45 minutes max"}
- Budget: {preferences.get("budget") or "moderate"}
- Household size: {preferences.get("householdSize") or 2}
{avoid_block}
Requirements:
1. Variety - different proteins, cuisines, and cooking methods
2. Balance - include vegetables, proteins, and carbs
3. Practical - use common ingredients, minimize waste
4. Progressive complexity - mix of quick/easy and more involved meals
5. Ingredient overlap - some ingredients used across multiple meals to reduce waste

Generate a meal plan with:
- Balanced nutrition across the week
- Strategic ingredient reuse (e.g., if buying chicken, use it 2-3 times in different ways)
- Mix of cuisines and flavors
- One "leftover-friendly" meal that can provide lunch
- One quick meal (under 30 min) for busy nights
- Weekend meal can be more involved/special{slow_cooker_req}

Format as JSON:
{WEEKLY_PLAN_SCHEMA}

{JSON_ONLY}"""


def shopping_list_prompt(
    meal_plan: Union[WeeklyMealPlan, list[MealPlanDay]],
    pantry_items: Optional[list[str]] = None,
) -> str:
    """Ask for a consolidated, sectioned shopping list for a meal plan."""
    return f"""Generate a comprehensive shopping list for this meal plan:

{json.dumps(meal_plan, indent=2)}

Items already in pantry: {_join(pantry_items, "none specified")}

Create a shopping list that:
1. Consolidates duplicate ingredients across meals
2. Provides specific quantities needed
3. Organizes by store section for efficient shopping
4. Indicates which meals use each ingredient
5. Excludes pantry items already owned
6. Notes optional/substitutable items

Store sections: {", ".join(STORE_SECTIONS)}

Format as JSON:
{SHOPPING_LIST_SCHEMA}

{JSON_ONLY}"""


def extract_preferences_prompt(user_input: str, current_preferences: Optional[UserPreferences] = None) -> str:
    """Ask Claude to merge a free-text statement into the structured preferences."""
    return f"""A user has stated their dietary preferences or restrictions. Extract and structure this information.

User said: "{user_input}"

Current preferences: {json.dumps(current_preferences or {}, indent=2)}

Extract:
1. Dietary restrictions (vegetarian, vegan, gluten-free, dairy-free, etc.)
2. Allergies (specific ingredients to avoid)
3. Dislikes (foods they don't enjoy)
4. Cuisine preferences (favorite types of food)
5. Skill level indicators (mentions of being beginner/experienced)
6. Time constraints (how long they want to spend cooking)

Update the existing preferences with new information. If something contradicts existing preferences, use the new information.

Format as JSON:
{PREFERENCES_SCHEMA}

{JSON_ONLY}"""


def modify_recipe_prompt(original_recipe: FullRecipe, modification: str) -> str:
    return f"""Modify this recipe based on the user's request.

Original recipe: {json.dumps(original_recipe, indent=2)}

User request: "{modification}"

Common modifications:
- Make it vegetarian/vegan
- Make it gluten-free
- Make it faster/easier
- Substitute an ingredient
- Scale servings up/down
- Reduce calories/make healthier
- Make it spicier/milder

Provide the modified recipe with:
1. Updated ingredient list with substitutions clearly marked
2. Modified instructions (if cooking method changes)
3. Explanation of what changed and why
4. Any tips for making the substitution work well

Format as JSON with the same structure as original recipe, plus:
{MODIFIED_RECIPE_SCHEMA}

{JSON_ONLY}"""


def reroll_meal_prompt(
    meal_plan: WeeklyMealPlan,
    day_index: int,
    preferences: Optional[UserPreferences] = None,
) -> str:
    """Ask for one replacement MealPlanDay for weekPlan[day_index]."""
    preferences = preferences or {}
    week = [d if isinstance(d, dict) else {} for d in meal_plan.get("weekPlan") or []]
    current = week[day_index] if 0 <= day_index < len(week) else {}
    day_name = current.get("day") or f"Day {day_index + 1}"
    other_meals = [d["meal"] for i, d in enumerate(week) if i != day_index and isinstance(d.get("meal"), str)]

    return f"""Replace the {day_name} dinner in an existing meal plan with a different meal.

Current {day_name} meal: {current.get("meal") or "none"}
Other meals already in the plan (do not repeat any of them): {_join(other_meals, "none")}

User preferences:
- Dietary restrictions: {_dietary(preferences)}
- Allergies: {_join(preferences.get("allergies"), "none")}
- Dislikes: {_join(preferences.get("dislikes"), "none")}
- Favorite cuisines: {_cuisines(preferences, "varied")}
- Skill level: {preferences.get("skillLevel") or "intermediate"}
- Cooking time preference: {preferences.get("maxCookTime") or "45 minutes max"}

Requirements:
1. Keep "day" set to "{day_name}"
2. Suggest something clearly different from the current meal
3. Prefer ingredients already used elsewhere in the plan to limit waste

Format as JSON (a single day object):
{MEAL_PLAN_DAY_SCHEMA}

{JSON_ONLY}"""


def task_prompt(task: str, context: dict) -> str:
    """Fixed instruction plus the raw JSON context, for tasks with no dedicated template."""
    instruction = CONTEXT_TASK_PROMPTS.get(task, CONTEXT_TASK_PROMPTS["general_query"])
    return f"{instruction}\n\nContext: {json.dumps(context)}"
