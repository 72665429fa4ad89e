import uuid

import pytest

from blogflow.persistence import InMemoryRunRepository, SQLiteRunRepository


@pytest.mark.asyncio
async def test_sqlite_repository_crud(tmp_path):
    db_path = tmp_path / "runs.db"
    repo = SQLiteRunRepository(db_path)

    run_id = str(uuid.uuid4())
    await repo.create_run(run_id, {"topic": "Remote Work"})
    await repo.mark_phase_started(run_id, "Ideation & Planning", 0)
    await repo.mark_phase_completed(run_id, "Ideation & Planning", status="completed")
    await repo.mark_phase_started(run_id, "Research & Structuring", 1)
    await repo.mark_phase_completed(run_id, "Research & Structuring", status="failed")
    await repo.mark_run_finished(run_id, "failed", "research backend down")

    run = await repo.get_run(run_id)
    assert run is not None
    assert run.run_id == run_id
    assert run.request == {"topic": "Remote Work"}
    assert run.status == "failed"
    assert run.error == "research backend down"
    assert run.created_at is not None
    assert run.finished_at is not None
    assert [p.phase_name for p in run.phases] == [
        "Ideation & Planning",
        "Research & Structuring",
    ]
    assert [p.status for p in run.phases] == ["completed", "failed"]
    assert run.phases[1].ordinal == 1

    all_runs = await repo.list_runs()
    assert any(r.run_id == run_id for r in all_runs)


@pytest.mark.asyncio
async def test_sqlite_repository_survives_reopen(tmp_path):
    db_path = tmp_path / "runs.db"
    repo = SQLiteRunRepository(db_path)
    await repo.create_run("run-1", {"topic": "Persistence"})
    await repo.mark_run_finished("run-1", "completed")
    repo.close()

    reopened = SQLiteRunRepository(db_path)
    run = await reopened.get_run("run-1")
    assert run is not None
    assert run.status == "completed"
    assert run.error is None


@pytest.mark.asyncio
async def test_sqlite_repository_idempotent_phase_updates(tmp_path):
    repo = SQLiteRunRepository(tmp_path / "runs.db")
    await repo.create_run("run-2", {"topic": "Dupes"})

    # Duplicate calls should not create duplicate records
    await repo.mark_phase_started("run-2", "Plagiarism Check", 7)
    await repo.mark_phase_started("run-2", "Plagiarism Check", 7)
    await repo.mark_phase_completed("run-2", "Plagiarism Check", status="completed")
    await repo.mark_phase_completed("run-2", "Plagiarism Check", status="failed")

    run = await repo.get_run("run-2")
    assert len(run.phases) == 1
    assert run.phases[0].status == "completed"


@pytest.mark.asyncio
async def test_inmemory_repository_tracks_runs():
    repo = InMemoryRunRepository()
    await repo.create_run("run-3", {"topic": "Memory"})
    await repo.mark_phase_started("run-3", "Content Enrichment", 4)
    await repo.mark_phase_started("run-3", "Content Enrichment", 4)
    await repo.mark_phase_completed("run-3", "Content Enrichment", status="completed")
    await repo.mark_run_finished("run-3", "completed")

    run = await repo.get_run("run-3")
    assert run.status == "completed"
    assert len(run.phases) == 1
    assert run.phases[0].completed_at is not None
    assert await repo.get_run("missing") is None
    assert [r.run_id for r in await repo.list_runs()] == ["run-3"]


@pytest.mark.asyncio
async def test_updates_for_unknown_runs_are_ignored():
    repo = InMemoryRunRepository()
    await repo.mark_phase_started("nope", "Plan", 0)
    await repo.mark_run_finished("nope", "completed")
    assert await repo.list_runs() == []
