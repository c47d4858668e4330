from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

BACKENDS = {"memory", "json", "sqlite"}
DEFAULT_BACKEND = "json"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'json' (default), 'memory' or 'sqlite'
    - TASKS_JSON_PATH: path to the JSON storage file. Default './data/tasks.json'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - STORAGE_KEY: key the task collection is stored under. Default 'todos'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level name. Default 'INFO'
    - LOG_FILE: optional path of a debug log file
    """

    persistence_backend: str
    json_path: str
    sqlite_db_path: str
    storage_key: str
    cors_allow_origins: List[str]
    log_level: str
    log_file: Optional[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


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
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", DEFAULT_BACKEND).strip().lower()
    if backend not in BACKENDS:
        backend = DEFAULT_BACKEND

    log_file = os.getenv("LOG_FILE") or None

    return Settings(
        persistence_backend=backend,
        json_path=_get_env("TASKS_JSON_PATH", "./data/tasks.json").strip(),
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasks.db").strip(),
        storage_key=_get_env("STORAGE_KEY", "todos").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_file=log_file.strip() if log_file else None,
    )
