def test_login_wrong_password_returns_401(client):
    resp = client.post("/api/auth/login", json={"email": "cook@example.com", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password"}


def test_login_requires_email(client):
    resp = client.post("/api/auth/login", json={"password": "testpass"})
    assert resp.status_code == 400


def test_login_sets_cookie_and_returns_token(client):
    resp = client.post("/api/auth/login", json={"email": "Cook@Example.com", "password": "testpass"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["email"] == "cook@example.com"
    assert data["user"]["name"] == "cook"
    assert data["token"]
    assert "mp_session" in resp.cookies


def test_protected_route_rejects_unauthenticated():
    from fastapi.testclient import TestClient
    from app.main import app
    with TestClient(app, raise_server_exceptions=True) as fresh:
        resp = fresh.get("/api/recipes")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}


def test_bearer_token_is_accepted():
    from fastapi.testclient import TestClient
    from app.main import app
    with TestClient(app, raise_server_exceptions=True) as fresh:
        token = fresh.post("/api/auth/login", json={"email": "bearer@example.com", "password": "testpass"}).json()["token"]
        fresh.cookies.clear()
        resp = fresh.get("/api/meal-plans", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json() == {"mealPlans": []}


def test_tampered_token_is_rejected():
    from fastapi.testclient import TestClient
    from app.main import app
    with TestClient(app, raise_server_exceptions=True) as fresh:
        resp = fresh.get("/api/meal-plans", headers={"Authorization": "Bearer not-a-real-token"})
    assert resp.status_code == 401


def test_logout_clears_session():
    # Use an isolated client so logout doesn't pollute the session-scoped authed_client
    from fastapi.testclient import TestClient
    from app.main import app
    with TestClient(app, raise_server_exceptions=True) as c:
        c.post("/api/auth/login", json={"email": "cook@example.com", "password": "testpass"})
        resp = c.post("/api/auth/logout")
    assert resp.status_code == 200
    set_cookie = resp.headers.get("set-cookie", "")
    assert "mp_session" in set_cookie
    assert "max-age=0" in set_cookie.lower()


def test_public_paths_skip_auth(client):
    resp = client.get("/api/chat?sessionId=auth-public")
    assert resp.status_code == 200


def test_login_rejects_non_string_email(client):
    resp = client.post("/api/auth/login", json={"email": 123, "password": "testpass"})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("email:")


def test_login_rejects_non_object_body(client):
    resp = client.post("/api/auth/login", json=["cook@example.com", "testpass"])
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_login_rejects_invalid_json(client):
    resp = client.post("/api/auth/login", content=b"{email", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON body"}
