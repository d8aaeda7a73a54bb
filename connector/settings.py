"""Environment configuration for the dashboard and its store clients."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .store_client import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


def _clean(value: Optional[str]) -> str:
    # Strip trailing comments left in hand-edited .env files.
    return (value or "").split(" #")[0].strip()


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = _clean(environ.get(name))
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    store_url: str
    store_key: str
    secret_key: Optional[str] = None
    port: int = 5000
    timeout: int = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    password_reset_redirect: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, *, dotenv: bool = True) -> "Settings":
        """Read settings from the environment, failing if the store is not configured."""

        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        store_url = _clean(environ.get("SUPABASE_URL"))
        store_key = _clean(environ.get("SUPABASE_ANON_KEY"))
        missing = [
            name
            for name, value in (("SUPABASE_URL", store_url), ("SUPABASE_ANON_KEY", store_key))
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing store environment variables: {', '.join(missing)}")

        settings = cls(
            store_url=store_url,
            store_key=store_key,
            secret_key=_clean(environ.get("FLASK_SECRET_KEY")) or None,
            port=_int_setting(environ, "PORT", 5000),
            timeout=_int_setting(environ, "STORE_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            max_retries=_int_setting(environ, "STORE_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            password_reset_redirect=_clean(environ.get("PASSWORD_RESET_REDIRECT_URL")) or None,
        )
        logger.info("Loaded configuration: store=%s port=%s", settings.store_url, settings.port)
        return settings
