from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

DEFAULT_API_BASE_URL = "https://todo-backend-1dzp.onrender.com/api/v1"
DEFAULT_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class Settings:
    """
    Client settings loaded from environment variables.

    Env vars:
    - TODOSYNC_API_BASE_URL: base URL of the todo API (default: the hosted backend)
    - TODOSYNC_TIMEOUT_S: per-request timeout in seconds (default: 5.0)
    - TODOSYNC_LOG_LEVEL: DEBUG/INFO/WARNING/ERROR (default: INFO)
    - TODOSYNC_LOG_JSON: 'true' to emit JSON log lines (default: false)
    - TODOSYNC_CORS_ALLOW_ORIGINS: comma-separated origins for the dev backend; '*' by default
    """

    api_base_url: str
    timeout_s: float
    log_level: str
    log_json: bool
    cors_allow_origins: List[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return client settings loaded from environment variables."""
    base_url = _get_env("TODOSYNC_API_BASE_URL", DEFAULT_API_BASE_URL).strip().rstrip("/")

    log_level = _get_env("TODOSYNC_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
        log_level = "INFO"

    return Settings(
        api_base_url=base_url,
        timeout_s=_parse_float(_get_env("TODOSYNC_TIMEOUT_S", str(DEFAULT_TIMEOUT_S)), DEFAULT_TIMEOUT_S),
        log_level=log_level,
        log_json=_parse_bool(_get_env("TODOSYNC_LOG_JSON", "false"), False),
        cors_allow_origins=_parse_origins(_get_env("TODOSYNC_CORS_ALLOW_ORIGINS", "*")),
    )
