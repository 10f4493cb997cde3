import logging

from fastapi import APIRouter, Request

from meal_assistant.core import intents
from meal_assistant.core.intents import DialogflowIntentResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dialogflow", tags=["dialogflow"])

ERROR_MESSAGE = "Sorry, something went wrong. Please try again."

resolver = DialogflowIntentResolver()


@router.post("")
async def dialogflow_webhook(request: Request):
    """Dialogflow CX webhook. Always answers 200 so the agent can speak a reply."""
    try:
        body = await request.json()
        intent = resolver.resolve(body)
        session_parameters = (body.get("sessionInfo") or {}).get("parameters") or {}
        result = intents.handle(intent, session_parameters)
        return intents.webhook_response(result.message, result.session_parameters)
    except Exception:
        logger.exception("Dialogflow webhook error")
        return intents.webhook_response(ERROR_MESSAGE)
