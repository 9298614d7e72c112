"""Environment configuration loaded from .env, env vars, or programmatic input."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from chatrelay.models import DEFAULT_AI_BASE_URL, DEFAULT_MODEL_KEY, ModelRegistry

TELEGRAM_MAX_MESSAGE_LEN = 4096

# Leaves headroom under the Telegram limit for escapes and multi-byte text.
DEFAULT_CHUNK_SIZE = 3900

# Hosting platforms typically kill a webhook request at ~28s.
PLATFORM_REQUEST_DEADLINE = 28.0


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Config:
    """Relay configuration. Can be built from env, CLI args, or programmatic input."""

    bot_token: str = ""
    app_env: str = "development"
    ai_base_url: str = DEFAULT_AI_BASE_URL
    default_model: str = DEFAULT_MODEL_KEY
    ai_timeout: float = 25.0
    chunk_size: int = DEFAULT_CHUNK_SIZE
    history_window: int = 10
    max_session_turns: int = 20
    keep_session_turns: int = 10
    typing_interval: float = 4.0
    webhook_path: str = "/api/bot"
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls) -> Config:
        """Load config from environment variables and .env file."""
        load_dotenv()
        return cls(
            bot_token=os.getenv("BOT_TOKEN", ""),
            app_env=os.getenv("APP_ENV") or os.getenv("VERCEL_ENV") or "development",
            ai_base_url=os.getenv("AI_BASE_URL", DEFAULT_AI_BASE_URL),
            default_model=os.getenv("DEFAULT_MODEL", DEFAULT_MODEL_KEY).lower(),
            ai_timeout=_env_float("AI_TIMEOUT", 25.0),
            chunk_size=_env_int("CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            webhook_path=os.getenv("WEBHOOK_PATH", "/api/bot"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 8000),
        )

    @classmethod
    def from_args(
        cls,
        bot_token: str | None = None,
        host: str | None = None,
        port: int | None = None,
    ) -> Config:
        """Build config from explicit arguments, falling back to env."""
        env = cls.from_env()
        if bot_token:
            env.bot_token = bot_token
        if host:
            env.host = host
        if port is not None:
            env.port = port
        return env

    def validate(self) -> list[str]:
        """Return list of fatal validation errors, empty if config is usable.

        A missing BOT_TOKEN is not fatal: the relay starts and drops
        outbound messages (see ``has_token``).
        """
        errors = []
        registry = self.model_registry()
        if registry.resolve(self.default_model) is None:
            errors.append(
                f"DEFAULT_MODEL '{self.default_model}' is not one of: "
                f"{', '.join(registry.keys())}."
            )
        if not 0 < self.ai_timeout < PLATFORM_REQUEST_DEADLINE:
            errors.append(
                f"AI_TIMEOUT must be between 0 and {PLATFORM_REQUEST_DEADLINE:.0f} "
                f"seconds, got {self.ai_timeout}."
            )
        if not 0 < self.chunk_size <= TELEGRAM_MAX_MESSAGE_LEN:
            errors.append(
                f"CHUNK_SIZE must be between 1 and {TELEGRAM_MAX_MESSAGE_LEN}, "
                f"got {self.chunk_size}."
            )
        if self.keep_session_turns > self.max_session_turns:
            errors.append("keep_session_turns must not exceed max_session_turns.")
        if not self.webhook_path.startswith("/") or self.webhook_path.endswith("/"):
            errors.append(
                f"WEBHOOK_PATH must start with '/' and not end with it, "
                f"got {self.webhook_path!r}."
            )
        return errors

    @property
    def has_token(self) -> bool:
        """True if a Telegram bot token is configured."""
        return bool(self.bot_token)

    def model_registry(self) -> ModelRegistry:
        """Build the model registry rooted at ``ai_base_url``."""
        return ModelRegistry.from_base_url(self.ai_base_url)
