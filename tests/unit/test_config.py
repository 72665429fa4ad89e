"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from blogflow.config import WorkflowConfig, load_config, save_config
from blogflow.contracts import Length, Tone
from blogflow.persistence import (
    InMemoryRunRepository,
    SQLiteRunRepository,
    close_repository,
    default_history_url,
    get_repository,
)


def test_defaults_without_config_file(tmp_path, monkeypatch):
    monkeypatch.setenv("BLOGFLOW_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("BLOGFLOW_DATABASE_URL", raising=False)

    config = load_config()
    assert config.workflow.max_concurrent_agents == 25
    assert config.workflow.agent_timeout_seconds == 120
    assert config.workflow.default_tone is Tone.PROFESSIONAL
    assert config.workflow.default_length is Length.MEDIUM
    assert config.workflow.auto_publish is False
    assert config.engine.phase_interval == 0.8
    assert config.database_url is None


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "blogflow.yaml"
    config_path.write_text(
        """
workflow:
  maxConcurrentAgents: 10
  agent_timeout_seconds: 45
  default_tone: casual
  default_length: long
engine:
  phase_interval: 0.1
"""
    )
    monkeypatch.setenv("BLOGFLOW_CONFIG", str(config_path))

    config = load_config()
    assert config.workflow.max_concurrent_agents == 10
    assert config.workflow.agent_timeout_seconds == 45
    assert config.workflow.default_tone is Tone.CASUAL
    assert config.workflow.default_length is Length.LONG
    assert config.engine.phase_interval == 0.1


def test_out_of_range_file_values_are_clamped(tmp_path, caplog):
    config_path = tmp_path / "blogflow.yaml"
    config_path.write_text(
        """
workflow:
  max_concurrent_agents: 3
  agentTimeoutSeconds: 900
"""
    )

    config = load_config(str(config_path))
    assert config.workflow.max_concurrent_agents == 5
    assert config.workflow.agent_timeout_seconds == 300
    assert "outside [5, 50]" in caplog.text


def test_numeric_strings_and_floats_in_file_are_clamped(tmp_path, caplog):
    config_path = tmp_path / "blogflow.yaml"
    config_path.write_text(
        """
workflow:
  max_concurrent_agents: "3"
  agentTimeoutSeconds: 45.7
"""
    )

    config = load_config(str(config_path))
    assert config.workflow.max_concurrent_agents == 5
    assert config.workflow.agent_timeout_seconds == 46
    assert "outside [5, 50]" in caplog.text
    assert "not a whole number" in caplog.text


def test_non_numeric_file_value_is_rejected(tmp_path):
    config_path = tmp_path / "blogflow.yaml"
    config_path.write_text("workflow:\n  max_concurrent_agents: lots\n")

    with pytest.raises(PydanticValidationError):
        load_config(str(config_path))


def test_workflow_config_rejects_out_of_range_values():
    with pytest.raises(PydanticValidationError):
        WorkflowConfig(max_concurrent_agents=51)
    with pytest.raises(PydanticValidationError):
        WorkflowConfig(agentTimeoutSeconds=29)


def test_save_config_round_trips(tmp_path):
    path = str(tmp_path / "saved.yaml")
    config = load_config(path)
    config.workflow = WorkflowConfig(max_concurrent_agents=40, auto_publish=True)

    assert save_config(config, path) == path
    reloaded = load_config(path)
    assert reloaded.workflow.max_concurrent_agents == 40
    assert reloaded.workflow.auto_publish is True


def test_get_repository_uses_config(tmp_path, monkeypatch):
    config_path = tmp_path / "blogflow.yaml"
    config_path.write_text(f"database_url: sqlite://{tmp_path / 'runs.db'}\n")
    monkeypatch.setenv("BLOGFLOW_CONFIG", str(config_path))
    monkeypatch.delenv("BLOGFLOW_DATABASE_URL", raising=False)

    repo = get_repository(config=load_config())
    assert isinstance(repo, SQLiteRunRepository)
    assert repo.db_path == str(tmp_path / "runs.db")


def test_get_repository_rejects_unknown_backend():
    with pytest.raises(ValueError):
        get_repository("mysql://localhost/runs")


def test_default_history_lives_beside_config_file(tmp_path):
    assert default_history_url() == f"sqlite://{tmp_path / 'blogflow_runs.db'}"

    repo = get_repository(default_url=default_history_url())
    assert isinstance(repo, SQLiteRunRepository)
    assert repo.db_path == str(tmp_path / "blogflow_runs.db")

    close_repository()
    assert get_repository() is not repo


def test_close_repository_keeps_in_memory_instance():
    repo = get_repository()
    assert isinstance(repo, InMemoryRunRepository)

    close_repository()
    assert get_repository() is repo
