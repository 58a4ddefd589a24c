"""Settings read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from arrests.errors import ConfigurationError

SOURCE_VAR = "ARREST_LOG_SOURCE"


@dataclass(frozen=True)
class Settings:
    source: str
    cache_ttl: int = 3600
    max_workers: int = 8
    page_size: int = 50
    max_page_size: int = 500


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer",
            f"Got {raw!r} for {name}",
        ) from None
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative", f"Got {value} for {name}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``env`` (defaults to ``os.environ``)."""
    env = os.environ if env is None else env
    source = (env.get(SOURCE_VAR) or "").strip()
    if not source:
        raise ConfigurationError(
            "Arrest log data source not configured",
            f"Set {SOURCE_VAR} to the Parquet or CSV file (or glob) holding arrest_logs",
        )
    return Settings(
        source=source,
        cache_ttl=_int(env, "ARREST_LOG_CACHE_TTL", 3600),
        max_workers=max(1, _int(env, "ARREST_LOG_MAX_WORKERS", 8)),
        page_size=max(1, _int(env, "ARREST_LOG_PAGE_SIZE", 50)),
        max_page_size=max(1, _int(env, "ARREST_LOG_MAX_PAGE_SIZE", 500)),
    )
