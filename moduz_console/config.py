from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_CONTEXT_FILE = Path.home() / ".moduz_console_context.json"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ConsoleConfig:
    api_base_url: str
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    retries: int = 2
    retry_backoff_seconds: float = 0.3
    max_connections: int = 10
    verify_ssl: bool = True
    module_cache_ttl_seconds: float = 60.0
    context_path: Path = DEFAULT_CONTEXT_FILE


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def load_config(env_file: str | None = None) -> ConsoleConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    api_base_url = (os.getenv("MODUZ_API_BASE_URL") or "").strip()
    _validate(bool(api_base_url), "Missing required config values: MODUZ_API_BASE_URL")

    connect_timeout_seconds = _read_float("MODUZ_CONNECT_TIMEOUT_SECONDS", "5")
    read_timeout_seconds = _read_float("MODUZ_READ_TIMEOUT_SECONDS", "15")
    _validate(
        connect_timeout_seconds > 0 and read_timeout_seconds > 0,
        "Invalid MODUZ_*_TIMEOUT_SECONDS: expected > 0",
    )

    retries = _read_int("MODUZ_RETRIES", "2")
    _validate(retries >= 0, f"Invalid MODUZ_RETRIES: expected >= 0, got {retries}")

    retry_backoff_seconds = _read_float("MODUZ_RETRY_BACKOFF_SECONDS", "0.3")
    _validate(retry_backoff_seconds >= 0, "Invalid MODUZ_RETRY_BACKOFF_SECONDS: expected >= 0")

    cache_ttl = _read_float("MODUZ_MODULE_CACHE_TTL_SECONDS", "60")
    _validate(cache_ttl > 0, f"Invalid MODUZ_MODULE_CACHE_TTL_SECONDS: expected > 0, got {cache_ttl}")

    context_path = (os.getenv("MODUZ_CONSOLE_CONTEXT_PATH") or "").strip()

    return ConsoleConfig(
        api_base_url=api_base_url.rstrip("/"),
        connect_timeout_seconds=connect_timeout_seconds,
        read_timeout_seconds=read_timeout_seconds,
        retries=retries,
        retry_backoff_seconds=retry_backoff_seconds,
        max_connections=_read_int("MODUZ_MAX_CONNECTIONS", "10"),
        verify_ssl=_coerce_bool(os.getenv("MODUZ_VERIFY_SSL"), True),
        module_cache_ttl_seconds=cache_ttl,
        context_path=Path(context_path) if context_path else DEFAULT_CONTEXT_FILE,
    )
