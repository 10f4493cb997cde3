def _payload(intent, parameters=None, session_parameters=None, text=""):
    return {
        "intentInfo": {"displayName": intent, "parameters": parameters or {}},
        "sessionInfo": {"session": "projects/p/sessions/s1", "parameters": session_parameters or {}},
        "text": text,
        "languageCode": "en",
    }


def test_webhook_find_recipes(client, fake_claude):
    fake_claude.reply({"recipes": [{"name": "Shakshuka"}]}, message="Try shakshuka.")
    resp = client.post("/api/dialogflow", json=_payload(
        "find.recipe.by.ingredients", {"ingredients": {"originalValue": "eggs", "resolvedValue": ["eggs"]}},
    ))
    assert resp.status_code == 200
    body = resp.json()
    assert body["fulfillmentResponse"]["messages"][0]["text"]["text"] == ["Try shakshuka."]
    assert body["sessionInfo"]["parameters"]["lastRecipes"] == [{"name": "Shakshuka"}]


def test_webhook_needs_no_auth_and_uses_session_params(fake_claude):
    from fastapi.testclient import TestClient
    from app.main import app
    with TestClient(app) as fresh:
        resp = fresh.post("/api/dialogflow", json=_payload("get.shopping.list"))
    assert resp.status_code == 200
    text = resp.json()["fulfillmentResponse"]["messages"][0]["text"]["text"][0]
    assert "meal plan" in text
    assert "sessionInfo" not in resp.json()


def test_webhook_error_still_returns_200(client):
    resp = client.post("/api/dialogflow", content=b"not json", headers={"content-type": "application/json"})
    assert resp.status_code == 200
    assert resp.json() == {
        "fulfillmentResponse": {"messages": [{"text": {"text": ["Sorry, something went wrong. Please try again."]}}]},
    }
