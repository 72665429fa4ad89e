"""Run history persistence for blogflow."""

from __future__ import annotations

import os
from typing import Optional

from ..config import DEFAULT_CONFIG_PATH, BlogflowConfig, load_config
from .inmemory import InMemoryRunRepository
from .models import PhaseRecord, RunRecord
from .repository import RunRepository
from .sqlite import SQLiteRunRepository

HISTORY_FILENAME = "blogflow_runs.db"

_repository_instance: RunRepository | None = None


def default_history_url() -> str:
    """SQLite URL of the history file kept beside the configuration file."""
    config_path = os.getenv("BLOGFLOW_CONFIG", DEFAULT_CONFIG_PATH)
    directory = os.path.dirname(os.path.abspath(config_path))
    return f"sqlite://{os.path.join(directory, HISTORY_FILENAME)}"


def get_repository(
    database_url: Optional[str] = None,
    config: Optional[BlogflowConfig] = None,
    default_url: Optional[str] = None,
) -> RunRepository:
    """Factory function to obtain a run repository.

    The backend is selected based on ``database_url`` which can be provided
    explicitly, via environment variable ``BLOGFLOW_DATABASE_URL``, or from
    loaded configuration, falling back to ``default_url``. When none of these
    is set, an in-memory repository is returned.
    """

    global _repository_instance
    if _repository_instance is not None and database_url is None and config is None:
        return _repository_instance

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("BLOGFLOW_DATABASE_URL")
        or getattr(config, "database_url", None)
        or default_url
    )

    if not database_url:
        _repository_instance = InMemoryRunRepository()
        return _repository_instance

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        _repository_instance = SQLiteRunRepository(path)
    else:
        raise ValueError(f"Unsupported database backend: {database_url}")

    return _repository_instance


def close_repository() -> None:
    """Close the shared SQLite repository, if one is open."""

    global _repository_instance
    if isinstance(_repository_instance, SQLiteRunRepository):
        _repository_instance.close()
        _repository_instance = None


__all__ = [
    "PhaseRecord",
    "RunRecord",
    "RunRepository",
    "InMemoryRunRepository",
    "SQLiteRunRepository",
    "close_repository",
    "default_history_url",
    "get_repository",
]
