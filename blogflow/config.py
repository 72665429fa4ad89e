from __future__ import annotations

import logging
import math
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .constants import (
    DEFAULT_AGENT_TIMEOUT_SECONDS,
    DEFAULT_CONCURRENT_AGENTS,
    DEFAULT_PHASE_INTERVAL,
    MAX_AGENT_TIMEOUT_SECONDS,
    MAX_CONCURRENT_AGENTS,
    MIN_AGENT_TIMEOUT_SECONDS,
    MIN_CONCURRENT_AGENTS,
)
from .contracts import Length, Tone

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "blogflow.yaml"

NUMERIC_BOUNDS = {
    "max_concurrent_agents": (MIN_CONCURRENT_AGENTS, MAX_CONCURRENT_AGENTS),
    "agent_timeout_seconds": (MIN_AGENT_TIMEOUT_SECONDS, MAX_AGENT_TIMEOUT_SECONDS),
}

_number_adapter = TypeAdapter(float)


class WorkflowConfig(BaseModel):
    """User-adjustable limits and request defaults."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    max_concurrent_agents: int = Field(
        default=DEFAULT_CONCURRENT_AGENTS,
        ge=MIN_CONCURRENT_AGENTS,
        le=MAX_CONCURRENT_AGENTS,
    )
    agent_timeout_seconds: int = Field(
        default=DEFAULT_AGENT_TIMEOUT_SECONDS,
        ge=MIN_AGENT_TIMEOUT_SECONDS,
        le=MAX_AGENT_TIMEOUT_SECONDS,
    )
    default_tone: Tone = Tone.PROFESSIONAL
    default_length: Length = Length.MEDIUM
    auto_publish: bool = False


class EngineSettings(BaseModel):
    """Settings for the workflow engine itself."""

    phase_interval: float = Field(default=DEFAULT_PHASE_INTERVAL, ge=0.0)


class BlogflowConfig(BaseModel):
    """Top-level configuration model."""

    workflow: WorkflowConfig = WorkflowConfig()
    engine: EngineSettings = EngineSettings()
    database_url: Optional[str] = None


def clamp_workflow_values(data: Dict[str, Any]) -> Dict[str, Any]:
    """Clamp numeric workflow settings into their allowed ranges.

    Numeric strings and floats are accepted and rounded to whole numbers.
    Values that are not numbers at all are left for model validation to
    reject.
    """
    clamped = dict(data)
    for key, value in data.items():
        field = key if key in NUMERIC_BOUNDS else _field_for_alias(key)
        if field is None or isinstance(value, bool):
            continue
        try:
            number = _number_adapter.validate_python(value)
        except PydanticValidationError:
            continue
        if not math.isfinite(number):
            continue
        low, high = NUMERIC_BOUNDS[field]
        in_range = min(max(number, low), high)
        bounded = int(round(in_range))
        if in_range != number:
            logger.warning(
                f"Setting {key}={value!r} is outside [{low}, {high}]; using {bounded}"
            )
        elif bounded != number:
            logger.warning(f"Setting {key}={value!r} is not a whole number; using {bounded}")
        clamped[key] = bounded
    return clamped


def _field_for_alias(key: str) -> Optional[str]:
    for name in NUMERIC_BOUNDS:
        if to_camel(name) == key:
            return name
    return None


def load_config(path: Optional[str] = None) -> BlogflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to BLOGFLOW_CONFIG env
            variable or 'blogflow.yaml' in the current directory.
    """

    config_path = path or os.getenv("BLOGFLOW_CONFIG", DEFAULT_CONFIG_PATH)
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if isinstance(data.get("workflow"), dict):
            data["workflow"] = clamp_workflow_values(data["workflow"])
        config = BlogflowConfig(**data)
    else:
        config = BlogflowConfig()

    env_db_url = os.getenv("BLOGFLOW_DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    return config


def save_config(config: BlogflowConfig, path: Optional[str] = None) -> str:
    """Write ``config`` as YAML and return the path written."""

    config_path = path or os.getenv("BLOGFLOW_CONFIG", DEFAULT_CONFIG_PATH)
    with open(config_path, "w") as f:
        yaml.safe_dump(config.model_dump(mode="json"), f, sort_keys=False)
    logger.info(f"Saved configuration to {config_path}")
    return config_path
