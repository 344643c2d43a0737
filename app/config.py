"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


class StorageBackend:
    SQLALCHEMY = "sqlalchemy"
    MEMORY = "memory"

    ALL = frozenset({SQLALCHEMY, MEMORY})


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _require_storage_backend() -> str:
    """
    Read and validate IMPORT_STORAGE_BACKEND.

    An unknown value raises instead of silently falling back to the
    in-memory store, which would lose every import on exit.
    """

    raw = _get_str_env("IMPORT_STORAGE_BACKEND", StorageBackend.SQLALCHEMY)
    backend = raw.lower()
    if backend not in StorageBackend.ALL:
        raise RuntimeError(
            f"IMPORT_STORAGE_BACKEND '{raw}' is not valid. "
            f"Allowed values: {sorted(StorageBackend.ALL)}."
        )
    return backend


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for import runs.
    """

    storage_backend: str = StorageBackend.SQLALCHEMY
    batch_size: int = 1000
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        storage_backend=_require_storage_backend(),
        batch_size=max(1, _get_int_env("IMPORT_BATCH_SIZE", 1000)),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )
