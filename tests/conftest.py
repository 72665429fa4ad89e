import pytest

import blogflow.persistence as persistence


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep tests away from a developer's blogflow.yaml and shared repository."""
    monkeypatch.setenv("BLOGFLOW_CONFIG", str(tmp_path / "blogflow.yaml"))
    monkeypatch.delenv("BLOGFLOW_DATABASE_URL", raising=False)
    persistence._repository_instance = None
    yield
    persistence.close_repository()
    persistence._repository_instance = None
