from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .client import BASE_URL


@dataclass(frozen=True)
class Settings:
    """
    Command-line settings loaded from environment variables.

    Env vars:
    - TMAC_BASE_URL: API root URL. Default 'https://jsonplaceholder.typicode.com'
    - TMAC_EXPORT_PATH: file written by `tmac list -o` when no path is given. Default 'todos.json'
    - TMAC_TIMEOUT: request timeout in seconds; unset (or invalid) keeps the HTTP client's default
    - TMAC_LOG_LEVEL: logging level name. Default 'WARNING'
    """

    base_url: str
    export_path: str
    timeout: Optional[float]
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        timeout = float(value)
    except ValueError:
        return None
    return timeout if timeout > 0 else None


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return command-line settings loaded from environment variables."""
    level = _get_env("TMAC_LOG_LEVEL", "WARNING").strip().upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        level = "WARNING"

    return Settings(
        base_url=_get_env("TMAC_BASE_URL", BASE_URL).strip(),
        export_path=_get_env("TMAC_EXPORT_PATH", "todos.json").strip(),
        timeout=_parse_timeout(os.getenv("TMAC_TIMEOUT")),
        log_level=level,
    )
