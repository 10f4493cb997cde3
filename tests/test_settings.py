def test_settings_masks_key(authed_client):
    resp = authed_client.post("/api/settings", json={"claude_api_key": "sk-ant-1234567890abcdef"})
    assert resp.status_code == 200
    assert resp.json() == {"keySet": True, "maskedKey": "sk-ant-1..."}

    resp = authed_client.get("/api/settings")
    assert resp.json()["maskedKey"] == "sk-ant-1..."
    assert "1234567890abcdef" not in resp.text


def test_settings_blank_key_keeps_existing(authed_client):
    authed_client.post("/api/settings", json={"claude_api_key": "sk-ant-keepme-000000"})
    resp = authed_client.post("/api/settings", json={"claude_api_key": "   "})
    assert resp.json()["keySet"] is True


def test_settings_key_feeds_api_key_lookup(authed_client):
    from meal_assistant.config import get_api_key
    authed_client.post("/api/settings", json={"claude_api_key": "sk-ant-lookup-000000"})
    assert get_api_key() == "sk-ant-lookup-000000"
