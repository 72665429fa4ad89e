"""Repository abstraction for run history persistence."""

from __future__ import annotations

from typing import Protocol

from .models import RunRecord


class RunRepository(Protocol):
    """Protocol for run history backends."""

    async def create_run(self, run_id: str, request: dict) -> None:
        """Persist a newly started run."""

    async def mark_phase_started(
        self, run_id: str, phase_name: str, ordinal: int
    ) -> None:
        """Record start of a phase."""

    async def mark_phase_completed(
        self, run_id: str, phase_name: str, status: str
    ) -> None:
        """Record completion of a phase."""

    async def mark_run_finished(
        self, run_id: str, status: str, error: str | None = None
    ) -> None:
        """Mark the run as finished."""

    async def get_run(self, run_id: str) -> RunRecord | None:
        """Retrieve the run by id."""

    async def list_runs(self) -> list[RunRecord]:
        """Return all persisted runs."""
