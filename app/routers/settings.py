from fastapi import APIRouter

from meal_assistant.config import get_setting, set_setting
from app.schemas import SettingsRequest

router = APIRouter(prefix="/api/settings", tags=["settings"])


def _masked(key: str) -> str:
    return key[:8] + "..." if len(key) > 8 else ""


@router.get("")
def settings_get():
    key = get_setting("claude_api_key") or ""
    return {"keySet": bool(key), "maskedKey": _masked(key)}


@router.post("")
def settings_save(body: SettingsRequest):
    claude_api_key = (body.claude_api_key or "").strip()
    if claude_api_key:
        set_setting("claude_api_key", claude_api_key)
    key = get_setting("claude_api_key") or ""
    return {"keySet": bool(key), "maskedKey": _masked(key)}
