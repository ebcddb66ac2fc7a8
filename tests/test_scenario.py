import json

import pytest
import requests

from aerogen.config import GeminiConfig
from aerogen.scenario import (
    EMPTY_ANALYSIS,
    FALLBACK_ANALYSIS,
    FALLBACK_WEATHER,
    SYSTEM_INSTRUCTION,
    ScenarioClient,
    extract_text,
)
from aerogen.weather import TimeOfDay, WeatherState


class FakeResponse:
    def __init__(self, body=None, status=200):
        self.body = body if body is not None else {}
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


SCENARIO = {
    "windSpeed": 33.0,
    "windDirection": 270.0,
    "turbulence": 0.7,
    "temperature": 24.0,
    "timeOfDay": "sunset",
    "description": "Hurricane bands rolling in at dusk",
}

CFG = GeminiConfig(api_key="test-key", model="gemini-2.5-flash")


def test_generate_scenario_success_forces_zero_pitch():
    payload = dict(SCENARIO, bladePitch=45.0)
    session = FakeSession(FakeResponse(gemini_body(json.dumps(payload))))
    client = ScenarioClient(CFG, session=session)

    weather = client.generate_scenario("hurricane at dusk")

    assert weather == WeatherState(
        wind_speed=33.0,
        wind_direction=270.0,
        turbulence=0.7,
        temperature=24.0,
        blade_pitch=0.0,
        time_of_day=TimeOfDay.SUNSET,
        description="Hurricane bands rolling in at dusk",
    )

    call = session.calls[0]
    assert call["url"].endswith("/models/gemini-2.5-flash:generateContent")
    assert call["headers"]["x-goog-api-key"] == "test-key"
    body = call["json"]
    assert body["systemInstruction"]["parts"][0]["text"] == SYSTEM_INSTRUCTION
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert "timeOfDay" in body["generationConfig"]["responseSchema"]["required"]
    assert "hurricane at dusk" in body["contents"][0]["parts"][0]["text"]


def test_network_failure_yields_fallback():
    session = FakeSession(error=requests.ConnectionError("unreachable"))
    weather = ScenarioClient(CFG, session=session).generate_scenario("anything")
    assert weather == FALLBACK_WEATHER
    assert weather == WeatherState(
        wind_speed=10.0,
        wind_direction=0.0,
        turbulence=0.1,
        temperature=20.0,
        blade_pitch=0.0,
        time_of_day=TimeOfDay.DAY,
        description="Fallback: Moderate breeze (AI Error)",
    )


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(status=500),
        FakeResponse({"candidates": []}),
        FakeResponse(gemini_body("")),
        FakeResponse(gemini_body("not json at all")),
        FakeResponse(gemini_body(json.dumps({k: v for k, v in SCENARIO.items() if k != "windSpeed"}))),
        FakeResponse(gemini_body(json.dumps(dict(SCENARIO, timeOfDay="noon")))),
        FakeResponse(ValueError("bad body")),
    ],
)
def test_bad_responses_yield_fallback(response):
    client = ScenarioClient(CFG, session=FakeSession(response))
    assert client.generate_scenario("storm") == FALLBACK_WEATHER


def test_missing_api_key_never_calls_out():
    session = FakeSession(FakeResponse(gemini_body(json.dumps(SCENARIO))))
    client = ScenarioClient(GeminiConfig(api_key=None), session=session)
    assert client.generate_scenario("storm") == FALLBACK_WEATHER
    assert client.analyze_efficiency(10.0, 900, 30.0) == FALLBACK_ANALYSIS
    assert session.calls == []


def test_analyze_efficiency():
    session = FakeSession(FakeResponse(gemini_body("Output is tracking the cubic curve nicely.")))
    client = ScenarioClient(CFG, session=session)
    assert client.analyze_efficiency(9.0, 700, 25.3) == "Output is tracking the cubic curve nicely."
    prompt = session.calls[0]["json"]["contents"][0]["parts"][0]["text"]
    assert "Wind Speed: 9.0m/s" in prompt
    assert "generationConfig" not in session.calls[0]["json"]


def test_analyze_efficiency_fallbacks():
    empty = ScenarioClient(CFG, session=FakeSession(FakeResponse({"candidates": []})))
    assert empty.analyze_efficiency(9.0, 700, 25.3) == EMPTY_ANALYSIS

    broken = ScenarioClient(CFG, session=FakeSession(error=requests.Timeout("slow")))
    assert broken.analyze_efficiency(9.0, 700, 25.3) == FALLBACK_ANALYSIS


def test_extract_text_joins_parts():
    body = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
    assert extract_text(body) == "ab"
    assert extract_text({}) == ""


def test_context_manager_closes_session():
    session = FakeSession()
    with ScenarioClient(CFG, session=session):
        pass
    assert session.closed


def test_config_from_env(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("AEROGEN_GEMINI_MODEL", raising=False)
    monkeypatch.setenv("API_KEY", "fallback-key")
    monkeypatch.setenv("AEROGEN_GEMINI_TIMEOUT", "5")
    cfg = GeminiConfig.from_env()
    assert cfg.api_key == "fallback-key"
    assert cfg.timeout_s == 5.0
    assert cfg.model == "gemini-2.5-flash"

    monkeypatch.setenv("GEMINI_API_KEY", "primary-key")
    assert GeminiConfig.from_env().api_key == "primary-key"
