from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass(frozen=True)
class Settings:
    proxy_url: Optional[str] = None
    fetch_timeout: float = 12.0
    refresh_minutes: float = 15.0
    user_agent: str = "Mozilla/5.0"
    sources_file: Optional[str] = None
    autostart: bool = True
    summary_provider: str = "groq"
    summary_model: Optional[str] = None
    log_level: str = "INFO"

    @property
    def refresh_seconds(self) -> float:
        return self.refresh_minutes * 60.0


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw!r}")
    return value


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    When `env` is omitted, a `.env` file in the working directory is loaded first.
    """
    if env is None:
        load_dotenv()
        env = os.environ
    return Settings(
        proxy_url=(env.get("NEWSDESK_PROXY_URL") or "").strip() or None,
        fetch_timeout=_float(env, "NEWSDESK_FETCH_TIMEOUT", 12.0),
        refresh_minutes=_float(env, "NEWSDESK_REFRESH_MINUTES", 15.0),
        user_agent=(env.get("NEWSDESK_USER_AGENT") or "").strip() or "Mozilla/5.0",
        sources_file=(env.get("NEWSDESK_SOURCES_FILE") or "").strip() or None,
        autostart=_bool(env, "NEWSDESK_AUTOSTART", True),
        summary_provider=(env.get("NEWSDESK_SUMMARY_PROVIDER") or "groq").strip().lower(),
        summary_model=(env.get("NEWSDESK_SUMMARY_MODEL") or "").strip() or None,
        log_level=(env.get("NEWSDESK_LOG_LEVEL") or "INFO").strip().upper(),
    )


def configure_logging(level_name: str = "INFO") -> logging.Logger:
    root = logging.getLogger()
    level = getattr(logging, level_name.upper(), logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
    return logging.getLogger("newsdesk")


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    parts = [f"event={event}"]
    for key, value in fields.items():
        parts.append(f"{key}={value}")
    logger.log(level, " ".join(parts))
