"""Data models for persisted run history."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class PhaseRecord(BaseModel):
    """Record of an individual phase execution."""

    id: Optional[int] = None
    run_id: str
    phase_name: str
    ordinal: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: Optional[str] = None


class RunRecord(BaseModel):
    """Persisted generation run. Generated content is not stored."""

    run_id: str
    request: dict[str, Any] = Field(default_factory=dict)
    status: str = "running"
    error: Optional[str] = None
    created_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    phases: list[PhaseRecord] = Field(default_factory=list)
