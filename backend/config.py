"""
Runtime settings for the GEO analyzer backend.

The Claude API key must be defined in a .env file in the backend root
(or in the process environment):

ANTHROPIC_API_KEY=your_real_key_here

Settings are read once at start-up and handed to the components that
need them; nothing below the HTTP layer reads the environment.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ENV_PATH = Path(__file__).resolve().parent / ".env"

DEFAULT_MODEL = "claude-3-5-sonnet-latest"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 4000
DEFAULT_ENGINE_TIMEOUT_SECONDS = 120.0
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0


class EngineConfig(BaseModel):
    """Everything the reasoning-engine client needs, passed in at construction."""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    model: str = DEFAULT_MODEL
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=1.0)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    timeout_seconds: float = Field(default=DEFAULT_ENGINE_TIMEOUT_SECONDS, gt=0)
    max_retries: int = Field(default=0, ge=0)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip())


class Settings(BaseModel):
    """Application settings."""

    model_config = ConfigDict(frozen=True)

    engine: EngineConfig = Field(default_factory=EngineConfig)
    fetch_timeout_seconds: float = Field(default=DEFAULT_FETCH_TIMEOUT_SECONDS, gt=0)
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("*",)


def _env_text(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return value if value else default


def _env_number(name: str, default: float, cast: type = float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring malformed setting", extra={"setting": name, "value": raw})
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items if items else default


def load_settings(env_path: Path | None = ENV_PATH) -> Settings:
    """Load .env (if any) and build the settings record from the environment."""
    if env_path is not None:
        load_dotenv(dotenv_path=env_path)

    engine = EngineConfig(
        api_key=_env_text("ANTHROPIC_API_KEY", ""),
        model=_env_text("CLAUDE_MODEL", DEFAULT_MODEL),
        temperature=_env_number("CLAUDE_TEMPERATURE", DEFAULT_TEMPERATURE),
        max_tokens=_env_number("CLAUDE_MAX_TOKENS", DEFAULT_MAX_TOKENS, int),
        timeout_seconds=_env_number("CLAUDE_TIMEOUT_SECONDS", DEFAULT_ENGINE_TIMEOUT_SECONDS),
        max_retries=_env_number("CLAUDE_MAX_RETRIES", 0, int),
    )
    return Settings(
        engine=engine,
        fetch_timeout_seconds=_env_number("FETCH_TIMEOUT_SECONDS", DEFAULT_FETCH_TIMEOUT_SECONDS),
        log_level=_env_text("LOG_LEVEL", "INFO").upper(),
        cors_origins=_env_list("CORS_ORIGINS", ("*",)),
    )
