import json
import os
from types import SimpleNamespace

import pytest


@pytest.fixture(scope="session", autouse=True)
def set_test_env(tmp_path_factory):
    db_file = tmp_path_factory.mktemp("data") / "test.db"
    os.environ["DB_PATH"] = str(db_file)
    os.environ["APP_PASSWORD"] = "testpass"
    os.environ["SECRET_KEY"] = "test-secret-key-for-testing"
    os.environ.pop("SPOONACULAR_API_KEY", None)
    os.environ.pop("ANTHROPIC_API_KEY", None)


@pytest.fixture(scope="session")
def db(set_test_env):
    from meal_assistant.db.database import init_db
    init_db()


@pytest.fixture(scope="session")
def client(set_test_env):
    from fastapi.testclient import TestClient
    from app.main import app
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture(scope="session")
def authed_client(client):
    resp = client.post("/api/auth/login", json={"email": "cook@example.com", "password": "testpass"})
    assert resp.status_code == 200
    return client


@pytest.fixture
def user_id(db):
    from meal_assistant.core import users
    return users.get_or_create("cook@example.com").id


class FakeClaude:
    """Stands in for anthropic.Anthropic; replies are served in order."""

    def __init__(self):
        self.replies = []
        self.calls = []
        self.messages = SimpleNamespace(create=self._create)

    def reply(self, payload, message="OK"):
        """Queue a {message, data} envelope (or raw text when payload is a str)."""
        if isinstance(payload, str):
            self.replies.append(payload)
        else:
            self.replies.append(json.dumps({"message": message, "data": payload}))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.replies:
            raise RuntimeError("FakeClaude has no reply queued")
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.replies.pop(0))])

    @property
    def last_prompt(self) -> str:
        return self.calls[-1]["messages"][0]["content"]


@pytest.fixture
def fake_claude(monkeypatch):
    from meal_assistant.core import ai_assistant
    fake = FakeClaude()
    monkeypatch.setattr(ai_assistant, "_get_client", lambda: fake)
    return fake


def sample_week_plan(days=7):
    names = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    return {
        "weekPlan": [
            {
                "day": names[i % 7],
                "meal": f"Meal {i}",
                "cookTime": "30 minutes",
                "difficulty": "Easy",
                "description": f"Dinner number {i}",
                "mainIngredients": ["chicken", "rice"],
                "cuisineType": "Italian",
                "tags": ["quick"],
            }
            for i in range(days)
        ],
        "shoppingCategories": {"proteins": ["chicken"], "produce": [], "pantry": ["rice"], "dairy": []},
        "prepTips": ["Cook rice in bulk"],
        "budgetEstimate": "$80-100",
    }


def sample_full_recipe(name="Chicken Fried Rice"):
    return {
        "recipeName": name,
        "servings": 4,
        "prepTime": "15 minutes",
        "cookTime": "20 minutes",
        "totalTime": "35 minutes",
        "difficulty": "Easy",
        "ingredients": [{"item": "chicken", "amount": "1 lb"}, {"item": "rice", "amount": "2 cups"}],
        "instructions": [
            {"step": 1, "instruction": "Cook the rice."},
            {"step": 2, "instruction": "Fry the chicken.", "time": "10 minutes"},
        ],
        "tips": ["Use day-old rice"],
        "substitutions": [{"original": "chicken", "alternative": "tofu", "reason": "vegetarian"}],
        "nutrition": {"calories": "450", "protein": "30g", "notes": "per serving"},
    }
