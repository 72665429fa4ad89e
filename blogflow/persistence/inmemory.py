"""In-memory implementation of the run repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from .models import PhaseRecord, RunRecord
from .repository import RunRepository


class InMemoryRunRepository(RunRepository):
    """Store run history in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._runs: Dict[str, RunRecord] = {}
        self._phase_id = 0

    # ------------------------------------------------------------------
    async def create_run(self, run_id: str, request: dict) -> None:
        self._runs[run_id] = RunRecord(
            run_id=run_id,
            request=request,
            status="running",
            created_at=datetime.now(timezone.utc),
        )

    async def mark_phase_started(
        self, run_id: str, phase_name: str, ordinal: int
    ) -> None:
        run = self._runs.get(run_id)
        if not run:
            return
        # ignore duplicate starts
        for phase in run.phases:
            if phase.phase_name == phase_name:
                return
        self._phase_id += 1
        run.phases.append(
            PhaseRecord(
                id=self._phase_id,
                run_id=run_id,
                phase_name=phase_name,
                ordinal=ordinal,
                started_at=datetime.now(timezone.utc),
            )
        )

    async def mark_phase_completed(
        self, run_id: str, phase_name: str, status: str
    ) -> None:
        run = self._runs.get(run_id)
        if not run:
            return
        for phase in run.phases:
            if phase.phase_name == phase_name and phase.completed_at is None:
                phase.completed_at = datetime.now(timezone.utc)
                phase.status = status
                break

    async def mark_run_finished(
        self, run_id: str, status: str, error: str | None = None
    ) -> None:
        run = self._runs.get(run_id)
        if run:
            run.status = status
            run.error = error
            run.finished_at = datetime.now(timezone.utc)

    async def get_run(self, run_id: str) -> RunRecord | None:
        return self._runs.get(run_id)

    async def list_runs(self) -> list[RunRecord]:
        return list(self._runs.values())
