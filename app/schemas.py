"""Request bodies for the JSON API.

Fields carry the camelCase names clients send. Anything a route treats as
required is still Optional here so the route can answer with its own message;
pydantic only rejects values of the wrong type.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class SettingsRequest(BaseModel):
    claude_api_key: Optional[str] = None


class PreferencesUpdate(BaseModel):
    """Partial update; only the fields a client sets are written."""
    skillLevel: Optional[str] = None
    maxCookTime: Optional[Union[int, str]] = None
    budget: Optional[str] = None
    householdSize: Optional[int] = Field(default=None, ge=1)
    dietary: Optional[list[str]] = None
    allergies: Optional[list[str]] = None
    dislikes: Optional[list[str]] = None
    favoriteCuisines: Optional[list[str]] = None
    pantryItems: Optional[list[str]] = None
    additionalNotes: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ExtractPreferencesRequest(BaseModel):
    text: Optional[str] = None


class RecipeCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    ingredients: Optional[list[dict[str, Any]]] = None
    instructions: Optional[list[dict[str, Any]]] = None
    prepTime: Optional[int] = Field(default=None, ge=0)
    cookTime: Optional[int] = Field(default=None, ge=0)
    totalTime: Optional[str] = None
    servings: Optional[int] = Field(default=None, ge=1)
    difficulty: Optional[str] = None
    imageUrl: Optional[str] = None
    source: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class DiscoverRequest(BaseModel):
    ingredients: Optional[list[str]] = None
    preferences: Optional[dict[str, Any]] = None
    cookingMethod: Optional[str] = None


class RecipeDetailsRequest(BaseModel):
    recipeName: Optional[str] = None
    ingredients: Optional[list[str]] = None
    skillLevel: Optional[str] = None
    cookTime: Optional[str] = None
    difficulty: Optional[str] = None
    servings: Optional[int] = Field(default=None, ge=1)

    def constraints(self) -> dict:
        return {k: v for k, v in self.model_dump(include={"cookTime", "difficulty", "servings"}).items() if v}


class ModifyRecipeRequest(BaseModel):
    modification: Optional[str] = None


class MealPlanCreate(BaseModel):
    weekStart: Optional[str] = None
    meals: Optional[dict[str, Any]] = None
    generate: bool = False
    preferences: Optional[dict[str, Any]] = None
    numberOfDays: Optional[int] = Field(default=None, ge=1, le=14)
    slowCookerMeals: Optional[int] = Field(default=None, ge=0)


class MealPlanUpdate(BaseModel):
    weekStart: Optional[str] = None
    meals: Optional[dict[str, Any]] = None


class RecipeLinkRequest(BaseModel):
    dayIndex: Optional[int] = Field(default=None, ge=0)
    recipeId: Optional[int] = None


class ShoppingListCreate(BaseModel):
    mealPlanId: Optional[int] = None
    generate: bool = False
    pantryItems: Optional[list[str]] = None
    items: Optional[list[dict[str, Any]]] = None


class ShoppingListUpdate(BaseModel):
    items: Optional[list[dict[str, Any]]] = None


class ItemPurchasedRequest(BaseModel):
    purchased: Optional[bool] = None


class VoiceCommandRequest(BaseModel):
    transcript: Optional[str] = None
    currentStep: int = 0
    totalSteps: int = Field(default=1, ge=1)
    showIngredients: bool = False


class TimerRequest(BaseModel):
    time: Optional[str] = None


class ChatRequest(BaseModel):
    message: Optional[str] = None
    sessionId: Optional[str] = None
