import json

from meal_assistant.core import ai_assistant
from meal_assistant.core.ai_assistant import FALLBACK_MESSAGE, Task


def test_strip_code_fence():
    assert ai_assistant.strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert ai_assistant.strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


def test_parse_reply_envelope():
    reply = ai_assistant.parse_reply(Task.FIND_RECIPES, json.dumps({"message": "Hi", "data": {"recipes": []}}))
    assert reply.message == "Hi"
    assert reply.data == {"recipes": []}


def test_parse_reply_bare_data_gets_default_message():
    reply = ai_assistant.parse_reply(Task.GENERATE_SHOPPING_LIST, json.dumps({"shoppingList": {}}))
    assert reply.data == {"shoppingList": {}}
    assert reply.message == ai_assistant.TASK_SETTINGS[Task.GENERATE_SHOPPING_LIST].default_message


def test_ask_claude_uses_task_settings(fake_claude, monkeypatch):
    monkeypatch.setenv("CLAUDE_MODEL_COMPLEX", "complex-model")
    monkeypatch.setenv("CLAUDE_MODEL_FAST", "fast-model")

    fake_claude.reply({"weekPlan": []})
    ai_assistant.create_meal_plan({"dietary": ["vegan"]}, 3)
    call = fake_claude.calls[-1]
    assert call["model"] == "complex-model"
    assert call["temperature"] == 0.9
    assert call["system"] == ai_assistant.SYSTEM_PROMPT
    assert "3-day meal plan" in fake_claude.last_prompt

    fake_claude.reply({"dietary": ["vegan"]})
    ai_assistant.extract_preferences("I'm vegan")
    call = fake_claude.calls[-1]
    assert call["model"] == "fast-model"
    assert call["temperature"] == 0.1


def test_ask_claude_parses_fenced_reply(fake_claude):
    fake_claude.reply('```json\n{"message": "Try these", "data": {"recipes": [{"name": "Fried Rice"}]}}\n```')
    response = ai_assistant.find_recipes(["rice"])
    assert response.data is not None
    assert response.message == "Try these"
    assert response.data["recipes"][0]["name"] == "Fried Rice"


def test_ask_claude_returns_fallback_on_bad_json(fake_claude):
    fake_claude.reply("Sure! Here are some ideas...")
    response = ai_assistant.find_recipes(["rice"])
    assert response.data is None
    assert response.message == FALLBACK_MESSAGE


def test_ask_claude_returns_fallback_on_api_error(fake_claude):
    # No reply queued: the fake raises like a failed API call would.
    response = ai_assistant.get_recipe_details("Soup", [])
    assert response.data is None
    assert response.message == FALLBACK_MESSAGE


def test_ask_claude_without_api_key_returns_fallback(monkeypatch):
    monkeypatch.setattr(ai_assistant, "get_api_key", lambda: None)
    response = ai_assistant.ask_claude(Task.GENERAL_QUERY, {"query": "hello"})
    assert response.data is None
    assert response.message == FALLBACK_MESSAGE


def test_session_id_is_appended_to_prompt(fake_claude):
    fake_claude.reply({"answer": "yes"})
    ai_assistant.ask_claude(Task.GENERAL_QUERY, {"query": "hi"}, session_id="abc123")
    assert fake_claude.last_prompt.endswith("Session: abc123")
