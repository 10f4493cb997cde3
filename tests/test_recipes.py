from conftest import sample_full_recipe

from meal_assistant.core import recipes


def _create(client, title, **extra):
    resp = client.post("/api/recipes", json={"title": title, **extra})
    assert resp.status_code == 201
    return resp.json()["recipe"]


def test_parse_time_to_minutes():
    assert recipes.parse_time_to_minutes("30 minutes") == 30
    assert recipes.parse_time_to_minutes("1-2 hours") == 1
    assert recipes.parse_time_to_minutes("a while") is None
    assert recipes.parse_time_to_minutes(None) is None


def test_recipe_create_requires_title(authed_client):
    resp = authed_client.post("/api/recipes", json={"description": "no title"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Title is required"}


def test_recipe_create_rejects_invalid_json(authed_client):
    resp = authed_client.post("/api/recipes", content=b"{not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400


def test_recipe_create_and_get(authed_client):
    recipe = _create(
        authed_client, "Tomato Soup",
        ingredients=[{"item": "tomatoes", "amount": "6"}],
        instructions=[{"step": 1, "instruction": "Simmer."}],
        prepTime=10, cookTime=25, servings=4,
    )
    assert recipe["ingredients"] == [{"item": "tomatoes", "amount": "6"}]

    resp = authed_client.get(f"/api/recipes/{recipe['id']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["recipe"]["title"] == "Tomato Soup"
    assert data["recipe"]["cook_time"] == 25
    assert data["isFavorite"] is False


def test_recipe_not_found(authed_client):
    resp = authed_client.get("/api/recipes/99999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Recipe not found"}


def test_recipe_list_search_and_ids(authed_client):
    first = _create(authed_client, "Zucchini Bread Unique")
    second = _create(authed_client, "Banana Bread Unique")

    resp = authed_client.get("/api/recipes?search=zucchini bread")
    titles = [r["title"] for r in resp.json()["recipes"]]
    assert titles == ["Zucchini Bread Unique"]

    resp = authed_client.get(f"/api/recipes?ids={first['id']},{second['id']}")
    assert sorted(r["title"] for r in resp.json()["recipes"]) == ["Banana Bread Unique", "Zucchini Bread Unique"]
    assert set(resp.json()["recipes"][0]) == {"id", "title"}


def test_recipe_list_limit(authed_client):
    _create(authed_client, "Limit One")
    _create(authed_client, "Limit Two")
    resp = authed_client.get("/api/recipes?limit=1")
    assert len(resp.json()["recipes"]) == 1


def test_favorite_add_remove(authed_client):
    recipe = _create(authed_client, "Favorite Pie")
    resp = authed_client.post(f"/api/recipes/{recipe['id']}/favorite")
    assert resp.status_code == 201
    assert resp.json() == {"message": "Added to favorites"}

    again = authed_client.post(f"/api/recipes/{recipe['id']}/favorite")
    assert again.status_code == 200
    assert again.json() == {"message": "Already favorited"}

    assert authed_client.get(f"/api/recipes/{recipe['id']}").json()["isFavorite"] is True
    favorites = authed_client.get("/api/recipes/favorites").json()["recipes"]
    match = [f for f in favorites if f["id"] == recipe["id"]]
    assert match and match[0]["favoritedAt"]

    resp = authed_client.delete(f"/api/recipes/{recipe['id']}/favorite")
    assert resp.json() == {"message": "Removed from favorites"}
    assert authed_client.get(f"/api/recipes/{recipe['id']}").json()["isFavorite"] is False


def test_favorite_unknown_recipe(authed_client):
    assert authed_client.post("/api/recipes/99999/favorite").status_code == 404


def test_saved_combines_favorites_and_plan_links(authed_client):
    favorite = _create(authed_client, "Saved Favorite Stew")
    linked = _create(authed_client, "Saved Linked Curry")
    authed_client.post(f"/api/recipes/{favorite['id']}/favorite")
    plan = authed_client.post("/api/meal-plans", json={
        "weekStart": "2026-01-05", "meals": {"weekPlan": [{"day": "Monday", "meal": "Curry"}]},
    }).json()["mealPlan"]
    authed_client.post(f"/api/meal-plans/{plan['id']}/recipes", json={"dayIndex": 0, "recipeId": linked["id"]})

    saved = {r["title"]: r for r in authed_client.get("/api/recipes/saved?search=saved").json()["recipes"]}
    assert saved["Saved Favorite Stew"]["isFavorite"] is True
    assert saved["Saved Linked Curry"]["isFavorite"] is False

    favorites_only = authed_client.get("/api/recipes/saved?filter=favorites&search=saved").json()["recipes"]
    assert [r["title"] for r in favorites_only] == ["Saved Favorite Stew"]


def test_saved_rejects_unknown_filter(authed_client):
    assert authed_client.get("/api/recipes/saved?filter=recent").status_code == 400


def test_discover_returns_suggestions(authed_client, fake_claude):
    fake_claude.reply({"recipes": [
        {"name": "Chicken Fried Rice", "description": "Quick", "cookTime": "20 minutes", "difficulty": "easy",
         "usesIngredients": ["chicken", "rice"], "additionalIngredients": ["soy sauce"], "cuisineType": "Chinese"},
        {"name": "Arroz con Pollo", "description": "Hearty", "cookTime": "45 minutes", "difficulty": "Tricky",
         "usesIngredients": ["chicken", "rice"], "additionalIngredients": [], "cuisineType": "Latin"},
    ]}, message="Here are two ideas")

    resp = authed_client.post("/api/recipes/discover", json={"ingredients": ["chicken", "rice"]})
    assert resp.status_code == 200
    data = resp.json()
    assert data["message"] == "Here are two ideas"
    for suggestion in data["recipes"]:
        assert suggestion["difficulty"] in {"Easy", "Medium", "Hard"}
        assert set(suggestion["usesIngredients"]) & {"chicken", "rice"}
    assert "chicken, rice" in fake_claude.last_prompt


def test_discover_requires_ingredients(authed_client):
    resp = authed_client.post("/api/recipes/discover", json={"ingredients": []})
    assert resp.status_code == 400
    assert resp.json() == {"error": "At least one ingredient is required"}


def test_discover_failure_is_500(authed_client, fake_claude):
    fake_claude.reply("not json at all")
    resp = authed_client.post("/api/recipes/discover", json={"ingredients": ["tofu"]})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to discover recipes"}


def test_details_generates_and_saves(authed_client, fake_claude):
    fake_claude.reply(sample_full_recipe("Chicken Fried Rice Deluxe"), message="Enjoy!")
    resp = authed_client.post("/api/recipes/details", json={
        "recipeName": "Chicken Fried Rice",
        "ingredients": ["chicken", "rice"],
        "cookTime": "35 minutes",
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["saved"] is True
    assert data["message"] == "Enjoy!"
    assert data["imageUrl"] is None

    stored = authed_client.get(f"/api/recipes/{data['recipeId']}").json()["recipe"]
    assert stored["title"] == "Chicken Fried Rice"
    assert stored["prep_time"] == 15
    assert stored["cook_time"] == 20
    assert stored["total_time"] == "35 minutes"
    assert stored["description"] == "Easy recipe - 35 minutes"
    assert stored["source"] == "claude"
    assert stored["metadata"]["generatedName"] == "Chicken Fried Rice Deluxe"
    assert stored["metadata"]["tips"] == ["Use day-old rice"]
    assert stored["metadata"]["constraints"]["cookTime"] == "35 minutes"
    assert "35 minutes" in fake_claude.last_prompt


def test_details_requires_name(authed_client):
    assert authed_client.post("/api/recipes/details", json={}).status_code == 400


def test_details_failure_is_500(authed_client, fake_claude):
    resp = authed_client.post("/api/recipes/details", json={"recipeName": "Ghost Dish"})
    assert resp.status_code == 500


def test_modify_returns_preview_without_saving(authed_client, fake_claude):
    recipe = _create(authed_client, "Mac and Cheese", servings=4, prepTime=5, cookTime=20)
    modified = {**sample_full_recipe("Vegan Mac and Cheese"), "modificationNotes": "Swapped dairy"}
    fake_claude.reply(modified, message="Made it vegan")

    resp = authed_client.post(f"/api/recipes/{recipe['id']}/modify", json={"modification": "make it vegan"})
    assert resp.status_code == 200
    assert resp.json()["recipe"]["modificationNotes"] == "Swapped dairy"
    assert "make it vegan" in fake_claude.last_prompt
    assert "Mac and Cheese" in fake_claude.last_prompt
    assert authed_client.get(f"/api/recipes/{recipe['id']}").json()["recipe"]["title"] == "Mac and Cheese"


def test_to_full_recipe_from_stored_row(db):
    stored = recipes.save_generated("Pad Thai", sample_full_recipe("Pad Thai Classic"))
    full = recipes.to_full_recipe(stored)
    assert full["recipeName"] == "Pad Thai Classic"
    assert full["prepTime"] == "15 minutes"
    assert full["nutrition"]["calories"] == "450"


def test_recipe_create_rejects_wrong_types(authed_client):
    resp = authed_client.post("/api/recipes", json={"title": "Odd Timing", "prepTime": {"m": 5}})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("prepTime:")

    resp = authed_client.post("/api/recipes", json={"title": "Odd Steps", "instructions": "stir"})
    assert resp.status_code == 400

    titles = [r["title"] for r in authed_client.get("/api/recipes?search=Odd").json()["recipes"]]
    assert titles == []


def test_discover_rejects_string_ingredients(authed_client):
    resp = authed_client.post("/api/recipes/discover", json={"ingredients": "chicken"})
    assert resp.status_code == 400


def test_discover_drops_non_object_suggestions(authed_client, fake_claude):
    fake_claude.reply({"recipes": ["Pad Thai", {"name": "Pad See Ew", "difficulty": "easy"}]})
    resp = authed_client.post("/api/recipes/discover", json={"ingredients": ["noodles"]})
    assert resp.status_code == 200
    assert [s["name"] for s in resp.json()["recipes"]] == ["Pad See Ew"]


def test_discover_without_object_suggestions_is_500(authed_client, fake_claude):
    fake_claude.reply({"recipes": ["Pad Thai"]})
    resp = authed_client.post("/api/recipes/discover", json={"ingredients": ["noodles"]})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to discover recipes"}


def test_details_and_modify_reject_wrong_types(authed_client):
    resp = authed_client.post("/api/recipes/details", json={"recipeName": "Stew", "servings": "four"})
    assert resp.status_code == 400
    recipe = _create(authed_client, "Plain Rice")
    resp = authed_client.post(f"/api/recipes/{recipe['id']}/modify", json={"modification": 5})
    assert resp.status_code == 400
