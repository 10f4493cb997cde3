import logging
import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from meal_assistant.db.database import init_db
from app.dependencies import verify_session_token, is_public, token_from_request
from app.routers import (
    auth, chat, dialogflow, meal_plans, preferences, recipes, settings, shopping_lists, voice,
)

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Meal Assistant", lifespan=lifespan)


@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    if not is_public(request.url.path):
        token = token_from_request(request)
        user_id = verify_session_token(token) if token else None
        if user_id is None:
            return JSONResponse({"error": "Unauthorized"}, status_code=401)
        request.state.user_id = user_id
    return await call_next(request)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


def _describe_validation_error(exc: RequestValidationError) -> str:
    """First problem as "field: message", e.g. "email: Input should be a valid string"."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    return f"{field}: {first['msg']}" if field else first["msg"]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": _describe_validation_error(exc)}, status_code=400)


app.include_router(auth.router)
app.include_router(settings.router)
app.include_router(preferences.router)
app.include_router(recipes.router)
app.include_router(meal_plans.router)
app.include_router(shopping_lists.router)
app.include_router(voice.router)
app.include_router(dialogflow.router)
app.include_router(chat.router)
