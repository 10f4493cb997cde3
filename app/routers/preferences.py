import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from meal_assistant.core import ai_assistant, preferences
from app.dependencies import current_user_id
from app.schemas import ExtractPreferencesRequest, PreferencesUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


def _to_dict(prefs):
    return asdict(prefs) if prefs else None


@router.get("")
def preferences_get(user_id: int = Depends(current_user_id)):
    return {"preferences": _to_dict(preferences.get(user_id))}


@router.put("")
def preferences_update(body: PreferencesUpdate, user_id: int = Depends(current_user_id)):
    try:
        prefs = preferences.update(user_id, body.changes())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"preferences": _to_dict(prefs)}


@router.post("/extract")
def preferences_extract(body: ExtractPreferencesRequest, user_id: int = Depends(current_user_id)):
    """Pull preferences out of free text and merge them into the stored ones."""
    text = (body.text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Text is required")

    current = preferences.for_user(user_id)
    response = ai_assistant.extract_preferences(text, current)
    if not isinstance(response.data, dict):
        raise HTTPException(status_code=500, detail="Failed to extract preferences")
    try:
        changes = PreferencesUpdate.model_validate(response.data).changes()
    except ValidationError as e:
        logger.error("Extracted preferences had the wrong shape: %s", e.errors()[0]["msg"])
        raise HTTPException(status_code=500, detail="Failed to extract preferences")

    try:
        prefs = preferences.update(user_id, changes)
    except ValueError:
        # Nothing recognizable in the text; keep what is stored.
        prefs = preferences.get(user_id)
    return {"preferences": _to_dict(prefs), "message": response.message}
