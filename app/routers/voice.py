from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from meal_assistant.core.voice import CookingModeState, apply_command, format_time, parse_command, parse_time_string
from app.schemas import TimerRequest, VoiceCommandRequest

router = APIRouter(prefix="/api/voice", tags=["voice"])


@router.post("/command")
def voice_command(body: VoiceCommandRequest):
    """Map a transcript to a cooking-mode command and return the resulting step state."""
    if body.transcript is None:
        raise HTTPException(status_code=400, detail="Transcript is required")

    state = CookingModeState.at_step(body.currentStep, body.totalSteps, body.showIngredients)
    command = parse_command(body.transcript)
    return {"command": command, "state": asdict(apply_command(state, command))}


@router.post("/timer")
def voice_timer(body: TimerRequest):
    seconds = parse_time_string(body.time or "")
    if seconds is None:
        raise HTTPException(status_code=400, detail="Could not parse a duration")
    return {"seconds": seconds, "formatted": format_time(seconds)}
