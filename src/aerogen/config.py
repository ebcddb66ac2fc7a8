from __future__ import annotations

from dataclasses import dataclass
import logging
import os


LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger for scripts and the dashboard."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


@dataclass(frozen=True)
class SimulatorConfig:
    physics_interval_s: float = 0.05    # 20 Hz
    history_interval_s: float = 1.0
    status_interval_s: float = 1.0
    history_capacity: int = 30
    seed: int | None = None

    def __post_init__(self):
        for name in ("physics_interval_s", "history_interval_s", "status_interval_s"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.history_capacity <= 0:
            raise ValueError("history_capacity must be positive")


@dataclass(frozen=True)
class GeminiConfig:
    api_key: str | None = None
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_s: float = 20.0

    @classmethod
    def from_env(cls) -> "GeminiConfig":
        api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
        model = os.environ.get("AEROGEN_GEMINI_MODEL", cls.model)
        timeout_s = float(os.environ.get("AEROGEN_GEMINI_TIMEOUT", cls.timeout_s))
        return cls(api_key=api_key, model=model, timeout_s=timeout_s)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"
