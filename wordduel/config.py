"""
Settings for wordduel.

Values come from, in order of precedence: an optional YAML file, environment
variables (``.env`` is loaded first), then defaults.  The mock/LLM oracle
choice is resolved here once; the rest of the code only sees ``Settings.oracle``.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional

import yaml
from dotenv import load_dotenv

ORACLE_MOCK = "mock"
ORACLE_LLM = "llm"


def load_config(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("config must be a YAML mapping")
    return data


def _default_oracle() -> str:
    key = os.getenv("OPENAI_API_KEY", "")
    if not key or key.startswith("mock") or os.getenv("USE_MOCK_AI", "").lower() == "true":
        return ORACLE_MOCK
    return ORACLE_LLM


@dataclass(frozen=True)
class Settings:
    oracle: str = ORACLE_MOCK
    model: str = "gpt-4o-mini"
    model_judge: Optional[str] = None
    model_opponent: Optional[str] = None
    model_hint: Optional[str] = None
    request_timeout_seconds: float = 20.0
    max_retries: int = 1
    timezone: str = "America/Denver"
    epoch: date = date(2025, 1, 1)
    opponent_question_limit: int = 8
    poll_interval_seconds: float = 3.0
    log_level: str = "WARNING"

    def model_for(self, role: str) -> str:
        per_role = {
            "judge": self.model_judge,
            "opponent": self.model_opponent,
            "hint": self.model_hint,
        }.get(role)
        return per_role or self.model


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build :class:`Settings` from YAML, environment and defaults."""

    load_dotenv()
    config = load_config(config_path or os.getenv("WORDDUEL_CONFIG"))
    defaults = Settings()

    def get(key: str, env: str, default: Any, cast: Callable[[Any], Any]) -> Any:
        value = config.get(key, os.getenv(env))
        if value is None:
            return default
        return cast(value)

    oracle = get("oracle", "WORDDUEL_ORACLE", _default_oracle(), str).lower()
    if oracle not in (ORACLE_MOCK, ORACLE_LLM):
        raise ValueError(f"oracle must be '{ORACLE_MOCK}' or '{ORACLE_LLM}', got {oracle!r}")

    model = get("model", "MODEL_NAME", defaults.model, str)
    return Settings(
        oracle=oracle,
        model=model,
        model_judge=get("model_judge", "MODEL_JUDGE", None, str),
        model_opponent=get("model_opponent", "MODEL_OPPONENT", None, str),
        model_hint=get("model_hint", "MODEL_HINT", None, str),
        request_timeout_seconds=get(
            "request_timeout_seconds", "REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds, float
        ),
        max_retries=get("max_retries", "MAX_RETRIES", defaults.max_retries, int),
        timezone=get("timezone", "WORDDUEL_TIMEZONE", defaults.timezone, str),
        epoch=get("epoch", "WORDDUEL_EPOCH", defaults.epoch, _as_date),
        opponent_question_limit=get(
            "opponent_question_limit", "OPPONENT_QUESTION_LIMIT", defaults.opponent_question_limit, int
        ),
        poll_interval_seconds=get(
            "poll_interval_seconds", "POLL_INTERVAL_SECONDS", defaults.poll_interval_seconds, float
        ),
        log_level=get("log_level", "LOG_LEVEL", defaults.log_level, str).upper(),
    )
