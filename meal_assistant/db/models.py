"""Dataclass models for all database entities.

Each class maps 1:1 to a database table. JSON columns are decoded into plain
lists/dicts so that to_dict-style serialization (dataclasses.asdict) yields the
API shape directly. These are plain data containers with no business logic.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class User:
    id: Optional[int]
    email: str
    name: Optional[str] = None
    created_at: Optional[str] = None


@dataclass
class UserPreferencesRow:
    """Stored preferences for one user. List columns are JSON-encoded in SQLite."""

    user_id: int
    skill_level: Optional[str] = None
    max_cook_time: Optional[str] = None
    budget: Optional[str] = None
    household_size: Optional[int] = None
    dietary: list = field(default_factory=list)
    allergies: list = field(default_factory=list)
    dislikes: list = field(default_factory=list)
    favorite_cuisines: list = field(default_factory=list)
    pantry_items: list = field(default_factory=list)
    additional_notes: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Recipe:
    """A stored recipe, either generated by Claude or entered manually.

    prep_time/cook_time are whole minutes; total_time keeps the model's text.
    metadata carries tips, substitutions, nutrition, generatedName, constraints.
    """

    id: Optional[int]
    title: str
    description: Optional[str] = None
    ingredients: list = field(default_factory=list)
    instructions: list = field(default_factory=list)
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    total_time: Optional[str] = None
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    image_url: Optional[str] = None
    source: Optional[str] = None
    metadata: Optional[dict] = None
    created_at: Optional[str] = None


@dataclass
class MealPlan:
    """A saved plan. meals is the WeeklyMealPlan JSON blob, stored verbatim."""

    id: Optional[int]
    user_id: int
    week_start: str  # ISO YYYY-MM-DD
    meals: dict = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class MealPlanRecipeLink:
    """Junction row tying a generated recipe to one day of a meal plan."""

    id: Optional[int]
    meal_plan_id: int
    day_index: int
    recipe_id: int
    created_at: Optional[str] = None


@dataclass
class ShoppingList:
    """A flattened shopping list; items are {item, quantity, category, purchased}.

    stale is set when the source meal plan's meals change after generation.
    """

    id: Optional[int]
    user_id: int
    meal_plan_id: Optional[int] = None
    items: list = field(default_factory=list)
    stale: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
