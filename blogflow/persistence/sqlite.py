"""SQLite implementation of the run repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import PhaseRecord, RunRecord
from .repository import RunRepository


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SQLiteRunRepository(RunRepository):
    """Persist run history using SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS runs (
                run_id TEXT PRIMARY KEY,
                request TEXT NOT NULL,
                status TEXT NOT NULL,
                error TEXT,
                created_at TEXT,
                finished_at TEXT
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS phase_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                run_id TEXT NOT NULL,
                phase_name TEXT NOT NULL,
                ordinal INTEGER NOT NULL,
                started_at TEXT,
                completed_at TEXT,
                status TEXT
            )
            """
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        self._conn.commit()

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchall()

    def _start_phase(self, run_id: str, phase_name: str, ordinal: int) -> None:
        existing = self._fetchone(
            "SELECT id FROM phase_history WHERE run_id = ? AND phase_name = ?",
            run_id,
            phase_name,
        )
        if existing:
            return
        self._execute(
            "INSERT INTO phase_history (run_id, phase_name, ordinal, started_at) VALUES (?, ?, ?, ?)",
            run_id,
            phase_name,
            ordinal,
            _now(),
        )

    def _row_to_run(self, row: sqlite3.Row, phases: list[PhaseRecord]) -> RunRecord:
        return RunRecord(
            run_id=row["run_id"],
            request=json.loads(row["request"]),
            status=row["status"],
            error=row["error"],
            created_at=_parse_ts(row["created_at"]),
            finished_at=_parse_ts(row["finished_at"]),
            phases=phases,
        )

    # ------------------------------------------------------------------
    # Repository API
    async def create_run(self, run_id: str, request: dict) -> None:
        await asyncio.to_thread(
            self._execute,
            "INSERT INTO runs (run_id, request, status, created_at) VALUES (?, ?, ?, ?)",
            run_id,
            json.dumps(request),
            "running",
            _now(),
        )

    async def mark_phase_started(
        self, run_id: str, phase_name: str, ordinal: int
    ) -> None:
        await asyncio.to_thread(self._start_phase, run_id, phase_name, ordinal)

    async def mark_phase_completed(
        self, run_id: str, phase_name: str, status: str
    ) -> None:
        await asyncio.to_thread(
            self._execute,
            """
            UPDATE phase_history
            SET completed_at = ?, status = ?
            WHERE run_id = ? AND phase_name = ? AND completed_at IS NULL
            """,
            _now(),
            status,
            run_id,
            phase_name,
        )

    async def mark_run_finished(
        self, run_id: str, status: str, error: str | None = None
    ) -> None:
        await asyncio.to_thread(
            self._execute,
            "UPDATE runs SET status = ?, error = ?, finished_at = ? WHERE run_id = ?",
            status,
            error,
            _now(),
            run_id,
        )

    async def get_run(self, run_id: str) -> RunRecord | None:
        row = await asyncio.to_thread(
            self._fetchone,
            "SELECT run_id, request, status, error, created_at, finished_at FROM runs WHERE run_id = ?",
            run_id,
        )
        if not row:
            return None
        phase_rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT id, run_id, phase_name, ordinal, started_at, completed_at, status FROM phase_history WHERE run_id = ? ORDER BY id",
            run_id,
        )
        phases = [
            PhaseRecord(
                id=r["id"],
                run_id=r["run_id"],
                phase_name=r["phase_name"],
                ordinal=r["ordinal"],
                started_at=_parse_ts(r["started_at"]),
                completed_at=_parse_ts(r["completed_at"]),
                status=r["status"],
            )
            for r in phase_rows
        ]
        return self._row_to_run(row, phases)

    async def list_runs(self) -> list[RunRecord]:
        rows = await asyncio.to_thread(
            self._fetchall,
            "SELECT run_id, request, status, error, created_at, finished_at FROM runs ORDER BY created_at",
        )
        return [self._row_to_run(row, []) for row in rows]
