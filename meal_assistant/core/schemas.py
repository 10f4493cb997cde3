"""JSON contracts exchanged with Claude.

These shapes are also the on-disk format of the meals/items/ingredients JSON
columns, so field names are camelCase and must not be renamed.
"""

from typing import Literal, TypedDict, Union

Difficulty = Literal["Easy", "Medium", "Hard"]
SkillLevel = Literal["beginner", "intermediate", "advanced"]

DIFFICULTIES = ("Easy", "Medium", "Hard")


class UserPreferences(TypedDict, total=False):
    dietary: Union[str, list[str]]
    allergies: list[str]
    dislikes: list[str]
    cuisines: list[str]
    favoriteCuisines: list[str]
    skillLevel: SkillLevel
    maxCookTime: str
    budget: str
    householdSize: int
    pantryItems: list[str]
    additionalNotes: str


class RecipeSuggestion(TypedDict):
    name: str
    description: str
    cookTime: str
    difficulty: Difficulty
    usesIngredients: list[str]
    additionalIngredients: list[str]
    cuisineType: str


class RecipeIngredient(TypedDict, total=False):
    item: str
    amount: str
    notes: str


class RecipeInstruction(TypedDict, total=False):
    step: int
    instruction: str
    time: str
    tip: str


class RecipeSubstitution(TypedDict):
    original: str
    alternative: str
    reason: str


class Nutrition(TypedDict):
    calories: str
    protein: str
    notes: str


class FullRecipe(TypedDict):
    recipeName: str
    servings: int
    prepTime: str
    cookTime: str
    totalTime: str
    difficulty: Difficulty
    ingredients: list[RecipeIngredient]
    instructions: list[RecipeInstruction]
    tips: list[str]
    substitutions: list[RecipeSubstitution]
    nutrition: Nutrition


class RecipeModification(TypedDict):
    type: str
    original: str
    replacement: str
    reason: str
    impactOnRecipe: str


class ModifiedRecipe(FullRecipe, total=False):
    modifications: list[RecipeModification]
    modificationNotes: str


class RecipeConstraints(TypedDict, total=False):
    cookTime: str
    difficulty: str
    servings: int


class MealPlanDay(TypedDict):
    day: str
    meal: str
    cookTime: str
    difficulty: Difficulty
    description: str
    mainIngredients: list[str]
    cuisineType: str
    tags: list[str]


class ShoppingCategories(TypedDict, total=False):
    proteins: list[str]
    produce: list[str]
    pantry: list[str]
    dairy: list[str]


class WeeklyMealPlan(TypedDict):
    weekPlan: list[MealPlanDay]
    shoppingCategories: ShoppingCategories
    prepTips: list[str]
    budgetEstimate: str


class GeneratedShoppingItem(TypedDict, total=False):
    item: str
    quantity: str
    usedIn: list[str]
    priority: Literal["essential", "optional"]
    notes: str


class OptionalItem(TypedDict):
    item: str
    reason: str


class GeneratedShoppingList(TypedDict):
    shoppingList: dict[str, list[GeneratedShoppingItem]]
    estimatedTotal: str
    optionalItems: list[OptionalItem]
    moneySavingTips: list[str]


class ShoppingListItem(TypedDict, total=False):
    item: str
    quantity: str
    category: str
    purchased: bool
