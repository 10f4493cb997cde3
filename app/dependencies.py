import os
from typing import Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer
from fastapi import HTTPException, Request

SESSION_COOKIE = "mp_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days


def _get_signer() -> URLSafeTimedSerializer:
    key = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")
    return URLSafeTimedSerializer(key)


def create_session_token(user_id: int) -> str:
    return _get_signer().dumps(user_id)


def verify_session_token(token: str) -> Optional[int]:
    """Return the signed user id, or None for a bad or expired token."""
    try:
        user_id = _get_signer().loads(token, max_age=SESSION_MAX_AGE)
    except BadSignature:
        return None
    return user_id if isinstance(user_id, int) else None


def token_from_request(request: Request) -> Optional[str]:
    """Session cookie first, then an `Authorization: Bearer` header."""
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        return token
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    return None


# Paths that don't require auth
_PUBLIC_PREFIXES = ("/api/auth", "/api/dialogflow", "/api/chat", "/docs", "/openapi.json")


def is_public(path: str) -> bool:
    return any(path.startswith(p) for p in _PUBLIC_PREFIXES)


def current_user_id(request: Request) -> int:
    """Dependency: the user id the auth middleware attached to the request."""
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id

