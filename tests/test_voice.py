import pytest

from meal_assistant.core.voice import CookingModeState, apply_command, format_time, parse_command, parse_time_string


@pytest.mark.parametrize("transcript", ["next", "Continue please", "go on"])
def test_parse_command_next(transcript):
    assert parse_command(transcript) == "next"


def test_parse_command_other_commands():
    assert parse_command("go back") == "previous"
    assert parse_command("show ingredients") == "ingredients"
    assert parse_command("I'm done") == "exit"


def test_parse_command_unknown():
    assert parse_command("what time is it") is None


def test_parse_time_string():
    assert parse_time_string("5 minutes") == 300
    assert parse_time_string("90 seconds") == 90
    assert parse_time_string("1 hour") == 3600
    assert parse_time_string("10") == 600
    assert parse_time_string("soon") is None


def test_format_time():
    assert format_time(90) == "1:30"
    assert format_time(5) == "0:05"
    assert format_time(3725) == "1:02:05"


def test_apply_command_clamps_steps():
    state = CookingModeState(current_step=2, total_steps=3)
    assert apply_command(state, "next").current_step == 2
    assert apply_command(state, "previous").current_step == 1
    assert apply_command(CookingModeState(), "previous").current_step == 0


def test_apply_command_toggles_ingredients_and_exits():
    state = apply_command(CookingModeState(total_steps=4), "ingredients")
    assert state.show_ingredients
    assert not apply_command(state, "ingredients").show_ingredients
    assert not apply_command(state, "exit").active
    assert apply_command(state, None) == state


def test_voice_command_endpoint(authed_client):
    resp = authed_client.post("/api/voice/command", json={"transcript": "next step", "currentStep": 0, "totalSteps": 5})
    assert resp.status_code == 200
    data = resp.json()
    assert data["command"] == "next"
    assert data["state"]["current_step"] == 1


def test_voice_command_requires_transcript(authed_client):
    resp = authed_client.post("/api/voice/command", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Transcript is required"


def test_voice_timer_endpoint(authed_client):
    resp = authed_client.post("/api/voice/timer", json={"time": "2 minutes"})
    assert resp.json() == {"seconds": 120, "formatted": "2:00"}
    assert authed_client.post("/api/voice/timer", json={"time": "later"}).status_code == 400


def test_at_step_clamps_into_range():
    assert CookingModeState.at_step(9, 3).current_step == 2
    assert CookingModeState.at_step(-4, 3).current_step == 0
    assert CookingModeState.at_step(0, 0).total_steps == 1


def test_apply_command_clamps_out_of_range_state():
    assert apply_command(CookingModeState(current_step=9, total_steps=3), "previous").current_step == 2
    assert apply_command(CookingModeState(current_step=-4, total_steps=3), "next").current_step == 0


def test_voice_command_clamps_current_step(authed_client):
    resp = authed_client.post("/api/voice/command", json={"transcript": "previous", "currentStep": 9, "totalSteps": 3})
    assert resp.json()["state"]["current_step"] == 1

    resp = authed_client.post("/api/voice/command", json={"transcript": "next", "currentStep": -4, "totalSteps": 3})
    assert resp.json()["state"]["current_step"] == 1

    resp = authed_client.post("/api/voice/command", json={"transcript": "what now", "currentStep": 12, "totalSteps": 3})
    assert resp.json()["state"]["current_step"] == 2


def test_voice_command_rejects_wrong_types(authed_client):
    resp = authed_client.post("/api/voice/command", json={"transcript": "next", "currentStep": "two", "totalSteps": 3})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("currentStep:")
    assert authed_client.post("/api/voice/command", json={"transcript": ["next"]}).status_code == 400
