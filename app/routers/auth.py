import os

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from meal_assistant.core import users
from app.dependencies import create_session_token, SESSION_COOKIE, SESSION_MAX_AGE
from app.schemas import LoginRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _app_password() -> str:
    """Read APP_PASSWORD at call time so tests can set it via env."""
    return os.environ.get("APP_PASSWORD", "")


@router.post("/login")
def login(body: LoginRequest):
    email = (body.email or "").strip()
    password = body.password or ""
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")
    if not password or password != _app_password():
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user = users.get_or_create(email, body.name)
    token = create_session_token(user.id)
    resp = JSONResponse({
        "user": {"id": user.id, "email": user.email, "name": user.name},
        "token": token,
    })
    resp.set_cookie(
        SESSION_COOKIE,
        token,
        httponly=True,
        samesite="lax",
        max_age=SESSION_MAX_AGE,
    )
    return resp


@router.post("/logout")
async def logout():
    resp = JSONResponse({"success": True})
    resp.delete_cookie(SESSION_COOKIE)
    return resp
