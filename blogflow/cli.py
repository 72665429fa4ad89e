"""Command line interface for blogflow."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from pydantic import ValidationError as PydanticValidationError

from blogflow import (
    ConfigurationStore,
    GenerationRequestBuilder,
    InvalidRequestError,
    ValidationError,
    WorkflowEngine,
    get_repository,
    load_config,
    save_config,
)
from blogflow.config import BlogflowConfig, WorkflowConfig
from blogflow.contracts import (
    FailureEvent,
    GenerationRequest,
    ProgressEvent,
    TerminalEvent,
)
from blogflow.persistence import (
    RunRepository,
    close_repository,
    default_history_url,
)
from blogflow.phases import PhaseSequencer

app = typer.Typer(help="CLI for blogflow generation runs")

# Command groups
config_app = typer.Typer(help="Commands for managing settings")
runs_app = typer.Typer(help="Commands for inspecting run history")

app.add_typer(config_app, name="config")
app.add_typer(runs_app, name="runs")


@contextmanager
def _reporting_config_errors() -> Iterator[None]:
    try:
        yield
    except PydanticValidationError as exc:
        typer.secho("Invalid configuration file:", fg=typer.colors.RED)
        for err in exc.errors():
            field = ".".join(str(p) for p in err["loc"])
            typer.secho(f"{field}: {err['msg']}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _load_config() -> BlogflowConfig:
    with _reporting_config_errors():
        return load_config()


@contextmanager
def _history() -> Iterator[RunRepository]:
    """Run history kept beside the configuration file unless configured."""
    try:
        with _reporting_config_errors():
            repo = get_repository(default_url=default_history_url())
        yield repo
    finally:
        close_repository()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Blogflow CLI entry point."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _run_generation(
    engine: WorkflowEngine, request: GenerationRequest, workflow: WorkflowConfig
) -> TerminalEvent:
    handle = await engine.start(request, workflow)
    async for event in handle.events():
        if isinstance(event, ProgressEvent):
            typer.echo(
                f"[{round(event.percent_complete):>3}%] Executing: {event.phase_name}"
            )
    return await handle.wait()


@app.command("generate")
def generate(
    topic: str,
    audience: Optional[str] = typer.Option(None, help="general, technical, business or academic"),
    tone: Optional[str] = typer.Option(None, help="Defaults to the configured tone"),
    length: Optional[str] = typer.Option(None, help="Defaults to the configured length"),
    seo_focus: bool = typer.Option(True, "--seo-focus/--no-seo-focus"),
    images: bool = typer.Option(True, "--images/--no-images"),
    social: bool = typer.Option(True, "--social/--no-social"),
    analytics: bool = typer.Option(True, "--analytics/--no-analytics"),
    interval: Optional[float] = typer.Option(
        None, min=0.0, help="Seconds spent in each phase (overrides configuration)"
    ),
) -> None:
    """
    Generate a blog preview for TOPIC.

    Runs every phase in order, printing progress as it goes, then prints the
    title, meta description and content preview.

    Example:
        blogflow generate "Remote Work" --tone casual --length short
    """
    config = _load_config()
    builder = GenerationRequestBuilder(config.workflow)
    try:
        request = builder.build(
            {
                "topic": topic,
                "audience": audience,
                "tone": tone,
                "length": length,
                "seo_focus": seo_focus,
                "include_images": images,
                "social_media": social,
                "analytics_enabled": analytics,
            }
        )
    except InvalidRequestError as exc:
        for err in exc.errors:
            typer.secho(f"{err.field}: {err.reason}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if interval is not None:
        config.engine.phase_interval = interval
    with _history() as repo:
        engine = WorkflowEngine.from_config(config, repository=repo)
        terminal = asyncio.run(_run_generation(engine, request, config.workflow))

    if isinstance(terminal, FailureEvent):
        typer.secho(f"Generation failed: {terminal.reason}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    artifact = terminal.artifact
    typer.echo("")
    typer.echo(f"Title: {artifact.title}")
    typer.echo(f"Meta Description: {artifact.meta_description}")
    typer.echo("Content Preview:")
    typer.echo(artifact.body_markdown)
    typer.echo(f"Run ID: {terminal.run_id}")


@app.command("phases")
def phases() -> None:
    """List the phases every run goes through, in order."""
    for phase in PhaseSequencer().phases():
        typer.echo(f"{phase.ordinal + 1}. {phase.name}")


@config_app.command("show")
def config_show() -> None:
    """Show the current settings."""
    config = _load_config()
    for name, value in config.workflow.model_dump(mode="json").items():
        typer.echo(f"{name}: {value}")
    typer.echo(f"phase_interval: {config.engine.phase_interval}")
    typer.echo(f"database_url: {config.database_url or default_history_url()}")


@config_app.command("set")
def config_set(
    max_concurrent_agents: Optional[int] = typer.Option(None, help="Between 5 and 50"),
    agent_timeout: Optional[int] = typer.Option(None, help="Seconds, between 30 and 300"),
    default_tone: Optional[str] = typer.Option(None),
    default_length: Optional[str] = typer.Option(None),
    auto_publish: Optional[bool] = typer.Option(None, "--auto-publish/--no-auto-publish"),
) -> None:
    """
    Update settings and save them to the configuration file.

    All changes are validated together; if any value is invalid nothing is
    saved.

    Example:
        blogflow config set --max-concurrent-agents 10 --agent-timeout 60
    """
    changes = {
        "max_concurrent_agents": max_concurrent_agents,
        "agent_timeout_seconds": agent_timeout,
        "default_tone": default_tone,
        "default_length": default_length,
        "auto_publish": auto_publish,
    }
    changes = {key: value for key, value in changes.items() if value is not None}
    for key in ("default_tone", "default_length"):
        if key in changes:
            changes[key] = changes[key].strip().lower()
    if not changes:
        typer.echo("Nothing to update.")
        return

    config = _load_config()
    store = ConfigurationStore(config.workflow)
    try:
        config.workflow = store.set(changes)
    except ValidationError as exc:
        for err in exc.errors:
            typer.secho(f"{err.field}: {err.reason}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    path = save_config(config)
    typer.echo(f"Settings saved to {path}")


@runs_app.command("list")
def runs_list() -> None:
    """List recorded runs with their status."""
    with _history() as repo:
        runs = asyncio.run(repo.list_runs())
    if not runs:
        typer.echo("No runs found")
        return
    for run in runs:
        typer.echo(f"{run.run_id}\t{run.status}\t{run.request.get('topic', '')}")


@runs_app.command("show")
def runs_show(run_id: str) -> None:
    """Show status and phase history for RUN_ID."""
    with _history() as repo:
        run = asyncio.run(repo.get_run(run_id))
    if run is None:
        typer.echo("Run not found")
        raise typer.Exit(code=1)
    typer.echo(f"Run {run.run_id}: {run.status}")
    typer.echo(f"Topic: {run.request.get('topic', '')}")
    if run.error:
        typer.echo(f"Error: {run.error}")
    for phase in run.phases:
        typer.echo(
            f"- {phase.phase_name}: {phase.status or 'running'}"
            + (
                f" ({phase.started_at} -> {phase.completed_at})"
                if phase.started_at or phase.completed_at
                else ""
            )
        )


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
