"""
Gemini-backed weather scenarios and efficiency insights.

Both calls are best effort: any failure is logged and mapped to a fixed
fallback value, so callers never see an exception from here.
"""
from __future__ import annotations

import json
import logging

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import GeminiConfig
from .weather import TimeOfDay, WeatherState

logger = logging.getLogger(__name__)


FALLBACK_WEATHER = WeatherState(
    wind_speed=10.0,
    wind_direction=0.0,
    turbulence=0.1,
    temperature=20.0,
    blade_pitch=0.0,
    time_of_day=TimeOfDay.DAY,
    description="Fallback: Moderate breeze (AI Error)",
)
FALLBACK_ANALYSIS = "AI Analysis unavailable."
EMPTY_ANALYSIS = "Analysis unavailable."

SYSTEM_INSTRUCTION = "You are an expert meteorologist and physics engine controller."

SCENARIO_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "windSpeed": {"type": "NUMBER", "description": "Wind speed in meters per second (0-35)"},
        "windDirection": {"type": "NUMBER", "description": "Wind direction in degrees (0-360)"},
        "turbulence": {"type": "NUMBER", "description": "Turbulence factor (0.0 to 1.0)"},
        "temperature": {"type": "NUMBER", "description": "Ambient temperature in Celsius (-20 to 50)"},
        "timeOfDay": {
            "type": "STRING",
            "enum": [t.value for t in (TimeOfDay.DAY, TimeOfDay.NIGHT, TimeOfDay.SUNSET, TimeOfDay.SUNRISE)],
            "description": "Visual time of day",
        },
        "description": {"type": "STRING", "description": "A short, creative description of the weather conditions"},
    },
    "required": ["windSpeed", "windDirection", "turbulence", "temperature", "timeOfDay", "description"],
}


class ScenarioPayload(BaseModel):
    """JSON body the model is asked to produce."""

    model_config = ConfigDict(extra="ignore")

    wind_speed: float = Field(alias="windSpeed")
    wind_direction: float = Field(alias="windDirection")
    turbulence: float
    temperature: float
    time_of_day: TimeOfDay = Field(alias="timeOfDay")
    description: str

    def to_weather(self) -> WeatherState:
        # Generated scenarios always start from full-power pitch
        return WeatherState(
            wind_speed=self.wind_speed,
            wind_direction=self.wind_direction,
            turbulence=self.turbulence,
            temperature=self.temperature,
            blade_pitch=0.0,
            time_of_day=self.time_of_day,
            description=self.description,
        )


class AIUnavailable(RuntimeError):
    pass


def scenario_prompt(prompt: str) -> str:
    return (
        "Generate a realistic weather scenario for a wind turbine simulation based on this "
        f'request: "{prompt}". Ensure physics are plausible (e.g., hurricanes have high speed).'
    )


def analysis_prompt(wind_speed: float, power: float, rpm: float) -> str:
    return (
        f"Analyze these wind turbine stats: Wind Speed: {wind_speed}m/s, Power: {power}kW, RPM: {rpm}. "
        "The turbine is a generic 2MW model. Provide a 1-sentence quick insight on efficiency or safety."
    )


def extract_text(body: dict) -> str:
    """Concatenate the text parts of the first candidate ('' if there are none)."""
    candidates = body.get("candidates") or []
    if not candidates:
        return ""
    parts = candidates[0].get("content", {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)


class ScenarioClient:
    """
    Thin client for the Gemini generateContent REST endpoint.

    Owns its HTTP session; construct one per component that issues
    requests and close it on teardown.
    """

    def __init__(self, config: GeminiConfig | None = None, session: requests.Session | None = None):
        self.config = config or GeminiConfig.from_env()
        self.session = session or requests.Session()

    def _generate(self, contents: str, generation_config: dict | None = None,
                  system_instruction: str | None = None) -> str:
        if not self.config.api_key:
            raise AIUnavailable("no Gemini API key configured")

        payload: dict = {"contents": [{"role": "user", "parts": [{"text": contents}]}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if generation_config:
            payload["generationConfig"] = generation_config

        resp = self.session.post(
            self.config.endpoint,
            headers={"x-goog-api-key": self.config.api_key, "Content-Type": "application/json"},
            json=payload,
            timeout=self.config.timeout_s,
        )
        resp.raise_for_status()
        return extract_text(resp.json())

    def generate_scenario(self, prompt: str) -> WeatherState:
        try:
            text = self._generate(
                scenario_prompt(prompt),
                generation_config={
                    "responseMimeType": "application/json",
                    "responseSchema": SCENARIO_SCHEMA,
                },
                system_instruction=SYSTEM_INSTRUCTION,
            )
            if not text:
                raise AIUnavailable("No response from AI")
            weather = ScenarioPayload.model_validate(json.loads(text)).to_weather()
        except (AIUnavailable, requests.RequestException, ValueError,
                KeyError, IndexError, TypeError, AttributeError, ValidationError):
            logger.exception("Gemini scenario request failed; using fallback weather")
            return FALLBACK_WEATHER

        logger.info("Generated scenario: %s", weather.description)
        return weather

    def analyze_efficiency(self, wind_speed: float, power: float, rpm: float) -> str:
        try:
            text = self._generate(analysis_prompt(wind_speed, power, rpm))
        except (AIUnavailable, requests.RequestException, ValueError,
                KeyError, IndexError, TypeError, AttributeError) as e:
            logger.warning("Gemini analysis request failed: %s", e)
            return FALLBACK_ANALYSIS
        return text or EMPTY_ANALYSIS

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ScenarioClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
