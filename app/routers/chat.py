import logging

from fastapi import APIRouter, HTTPException

from meal_assistant.core import intents
from meal_assistant.core.intents import RegexIntentResolver
from meal_assistant.core.sessions import SQLiteSessionStore
from app.schemas import ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])

DEFAULT_SESSION = "test-session"
# First non-empty key wins when picking the data returned with a reply.
DATA_KEYS = ("lastRecipes", "currentRecipe", "currentMealPlan", "currentShoppingList")

resolver = RegexIntentResolver()
sessions = SQLiteSessionStore()


@router.post("")
def chat(body: ChatRequest):
    """Plain-text chat over the same intent handlers the Dialogflow webhook uses."""
    message = (body.message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")
    session_id = body.sessionId or DEFAULT_SESSION

    intent = resolver.resolve(message)
    result = intents.handle(intent, sessions.get(session_id))
    if result.session_parameters:
        session = sessions.merge(session_id, result.session_parameters)
    else:
        session = sessions.get(session_id)

    response = {"message": result.message, "intent": intent.name}
    for key in DATA_KEYS:
        if session.get(key):
            response["data"] = session[key]
            break
    return response


@router.get("")
def chat_session(sessionId: str = DEFAULT_SESSION):
    return {"sessionId": sessionId, "data": sessions.get(sessionId)}
