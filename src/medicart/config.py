"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    store_path: Path = Field(
        default=Path("./data/medicart.db"),
        description="SQLite file backing the shared key-value store.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    watch_poll_interval: float = Field(
        default=1.0,
        description="Seconds between storage watcher polling iterations.",
    )
    extractor_seed: Optional[int] = Field(
        default=None,
        description="Seed for the mocked prescription extractor (random when unset).",
    )

    model_config = ConfigDict(frozen=True)


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (store_path := _env("MEDICART_STORE_PATH")):
        payload["store_path"] = Path(store_path)
    if (log_level := _env("MEDICART_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("MEDICART_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (poll_interval := _env("MEDICART_WATCH_POLL_INTERVAL")):
        try:
            payload["watch_poll_interval"] = float(poll_interval)
        except ValueError:
            pass
    if (extractor_seed := _env("MEDICART_EXTRACTOR_SEED")):
        try:
            payload["extractor_seed"] = int(extractor_seed)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
