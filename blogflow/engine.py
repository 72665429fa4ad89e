"""Workflow engine driving one generation run at a time."""

from __future__ import annotations

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    List,
    Mapping,
    Optional,
    Union,
)

from pydantic import ValidationError as PydanticValidationError

from .channels import InMemoryEventChannel
from .config import BlogflowConfig, WorkflowConfig
from .constants import DEFAULT_PHASE_INTERVAL
from .contracts import (
    Artifact,
    FailureEvent,
    GenerationRequest,
    Phase,
    ProgressEvent,
    ResultEvent,
    RunState,
    TerminalEvent,
    WorkflowEvent,
    WorkflowRun,
)
from .errors import ConflictError, FieldError, InvalidRequestError, RunFailure
from .persistence import RunRepository
from .phases import PhaseSequencer, SimulatedPhaseRunner
from .rendering import compose_artifact

logger = logging.getLogger(__name__)

Listener = Callable[[WorkflowEvent], Union[None, Awaitable[None]]]
PhaseRunner = Callable[[Phase, GenerationRequest], Awaitable[None]]
Composer = Callable[[GenerationRequest], Artifact]

CANCELLED_REASON = "Run cancelled"


class RunHandle:
    """Caller-side view of a started run."""

    def __init__(
        self, run: WorkflowRun, channel: InMemoryEventChannel, cancel_token: asyncio.Event
    ) -> None:
        self._snapshot = run
        self._channel = channel
        self._cancel_token = cancel_token
        self._task: Optional[asyncio.Task] = None

    @property
    def id(self) -> str:
        return self._snapshot.id

    @property
    def snapshot(self) -> WorkflowRun:
        """Latest read-only state of the run."""
        return self._snapshot

    def done(self) -> bool:
        return self._snapshot.state.is_terminal

    def events(self) -> AsyncIterator[WorkflowEvent]:
        """Iterate over every event of this run, ending with the terminal one."""
        return self._channel.subscribe()

    async def wait(self) -> TerminalEvent:
        """Wait for the run to finish and return its terminal event."""
        if self._task is not None:
            await asyncio.wait({self._task})
        history = self._channel.history
        if history and history[-1].is_terminal:
            return history[-1]
        raise RuntimeError(f"Run {self.id} ended without a terminal event")

    def cancel(self) -> bool:
        """Ask the run to stop at its current phase.

        Returns ``False`` when the run has already finished. A cancelled run
        ends in the ``failed`` state with a ``FailureEvent``.
        """
        if self.done():
            return False
        self._cancel_token.set()
        return True


class WorkflowEngine:
    """Sequences a validated request through the phase catalog.

    Only one run may be in flight per engine instance. Progress events are
    emitted in phase order and every run ends with exactly one terminal
    event. A finished engine must be ``reset()`` before the next ``start``.
    """

    def __init__(
        self,
        sequencer: Optional[PhaseSequencer] = None,
        phase_runner: Optional[PhaseRunner] = None,
        phase_interval: float = DEFAULT_PHASE_INTERVAL,
        composer: Composer = compose_artifact,
        repository: Optional[RunRepository] = None,
    ) -> None:
        self._sequencer = sequencer or PhaseSequencer()
        self._phase_runner = phase_runner or SimulatedPhaseRunner(phase_interval)
        self._composer = composer
        self._repository = repository
        self._listeners: List[Listener] = []
        self._state = RunState.IDLE
        self._run: Optional[WorkflowRun] = None
        self._handle: Optional[RunHandle] = None

    @classmethod
    def from_config(
        cls, config: BlogflowConfig, repository: Optional[RunRepository] = None
    ) -> "WorkflowEngine":
        """Build an engine using the engine settings of ``config``."""
        return cls(phase_interval=config.engine.phase_interval, repository=repository)

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def phases(self) -> PhaseSequencer:
        return self._sequencer

    def snapshot(self) -> Optional[WorkflowRun]:
        """Read-only view of the current (or last finished) run."""
        return self._run

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for the events of every run.

        Returns a callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(
        self,
        request: Union[GenerationRequest, Mapping[str, Any]],
        config: Optional[WorkflowConfig] = None,
    ) -> RunHandle:
        """Start a run for ``request``.

        Raises:
            ConflictError: If a run is in flight or the engine was not reset.
            InvalidRequestError: If the request is malformed or its topic blank.
        """
        if self._state is RunState.RUNNING:
            raise ConflictError("A generation run is already in progress")
        if self._state.is_terminal:
            raise ConflictError(
                f"Engine is {self._state.value}; call reset() before starting a new run"
            )
        request = self._validate_request(request)
        config = (config or WorkflowConfig()).model_copy()

        run = WorkflowRun(
            state=RunState.RUNNING,
            request=request,
            total_phases=len(self._sequencer),
        )
        channel = InMemoryEventChannel()
        cancel_token = asyncio.Event()
        handle = RunHandle(run, channel, cancel_token)
        self._state = RunState.RUNNING
        self._run = run
        self._handle = handle

        if self._repository is not None:
            try:
                await self._repository.create_run(
                    run.id, request.model_dump(mode="json")
                )
            except Exception:
                self._state = RunState.IDLE
                self._run = None
                self._handle = None
                raise

        logger.info(f"Started run {run.id} for topic {request.topic!r}")
        handle._task = asyncio.create_task(
            self._execute(handle, config, channel, cancel_token),
            name=f"blogflow-run-{run.id}",
        )
        return handle

    def reset(self) -> None:
        """Return a finished engine to ``idle``."""
        if self._state is RunState.RUNNING:
            raise ConflictError("Cannot reset while a run is in progress")
        self._state = RunState.IDLE
        self._run = None
        self._handle = None

    # ------------------------------------------------------------------
    def _validate_request(
        self, request: Union[GenerationRequest, Mapping[str, Any]]
    ) -> GenerationRequest:
        if isinstance(request, Mapping):
            try:
                request = GenerationRequest.model_validate(request)
            except PydanticValidationError as exc:
                raise InvalidRequestError(
                    [
                        FieldError(
                            field=".".join(str(p) for p in err["loc"]) or "request",
                            reason=err["msg"],
                        )
                        for err in exc.errors()
                    ]
                ) from exc
        elif not isinstance(request, GenerationRequest):
            raise InvalidRequestError(
                [FieldError(field="request", reason="expected a GenerationRequest")]
            )
        if not request.topic.strip():
            raise InvalidRequestError(
                [FieldError(field="topic", reason="topic must not be empty")]
            )
        return request

    def _update(self, handle: RunHandle, **changes: Any) -> None:
        snapshot = handle.snapshot.model_copy(update=changes)
        handle._snapshot = snapshot
        if self._handle is handle:
            self._run = snapshot

    async def _execute(
        self,
        handle: RunHandle,
        config: WorkflowConfig,
        channel: InMemoryEventChannel,
        cancel_token: asyncio.Event,
    ) -> None:
        run_id = handle.id
        request = handle.snapshot.request
        total = len(self._sequencer)
        current: Optional[Phase] = None
        try:
            for phase in self._sequencer.phases():
                current = phase
                percent = (phase.ordinal + 1) / total * 100
                self._update(
                    handle, current_phase_index=phase.ordinal, percent_complete=percent
                )
                if self._repository is not None:
                    await self._repository.mark_phase_started(
                        run_id, phase.name, phase.ordinal
                    )
                logger.debug(f"Run {run_id}: phase {phase.name} ({percent:.0f}%)")
                await self._emit(
                    channel,
                    ProgressEvent(
                        run_id=run_id,
                        phase_name=phase.name,
                        phase_index=phase.ordinal,
                        percent_complete=percent,
                    ),
                )
                await self._run_phase(
                    phase, request, config.agent_timeout_seconds, cancel_token
                )
                if self._repository is not None:
                    await self._repository.mark_phase_completed(
                        run_id, phase.name, status="completed"
                    )
            # a cancel that raced the final phase still wins
            if cancel_token.is_set():
                raise RunFailure(CANCELLED_REASON, current.name if current else None)
            artifact = self._composer(request)
        except asyncio.CancelledError:
            await self._fail(handle, channel, CANCELLED_REASON, current)
            raise
        except Exception as exc:
            await self._fail(handle, channel, _describe(exc), current)
            return

        self._update(
            handle,
            state=RunState.COMPLETED,
            artifact=artifact,
            finished_at=datetime.now(timezone.utc),
        )
        if self._handle is handle:
            self._state = RunState.COMPLETED
        logger.info(f"Run {run_id} completed")
        await self._emit(channel, ResultEvent(run_id=run_id, artifact=artifact), terminal=True)
        await self._record_finish(run_id, "completed")

    async def _run_phase(
        self,
        phase: Phase,
        request: GenerationRequest,
        timeout: float,
        cancel_token: asyncio.Event,
    ) -> None:
        if cancel_token.is_set():
            raise RunFailure(CANCELLED_REASON, phase.name)
        work = asyncio.ensure_future(self._phase_runner(phase, request))
        cancelled = asyncio.ensure_future(cancel_token.wait())
        try:
            done, _ = await asyncio.wait(
                {work, cancelled}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            cancelled.cancel()

        if work in done:
            # re-raises whatever the phase runner raised
            work.result()
            return
        work.cancel()
        if cancelled in done:
            raise RunFailure(CANCELLED_REASON, phase.name)
        raise RunFailure(
            f"Phase '{phase.name}' timed out after {timeout} seconds", phase.name
        )

    async def _fail(
        self,
        handle: RunHandle,
        channel: InMemoryEventChannel,
        reason: str,
        phase: Optional[Phase],
    ) -> None:
        run_id = handle.id
        self._update(
            handle,
            state=RunState.FAILED,
            error=reason,
            finished_at=datetime.now(timezone.utc),
        )
        if self._handle is handle:
            self._state = RunState.FAILED
        logger.error(f"Run {run_id} failed: {reason}")
        await self._emit(
            channel,
            FailureEvent(
                run_id=run_id,
                reason=reason,
                phase_name=phase.name if phase else None,
            ),
            terminal=True,
        )

        if self._repository is not None and phase is not None:
            try:
                await self._repository.mark_phase_completed(
                    run_id, phase.name, status="failed"
                )
            except Exception:
                logger.exception(f"Could not record failed phase for run {run_id}")
        await self._record_finish(run_id, "failed", reason)

    async def _record_finish(
        self, run_id: str, status: str, error: Optional[str] = None
    ) -> None:
        if self._repository is None:
            return
        try:
            await self._repository.mark_run_finished(run_id, status, error)
        except Exception:
            logger.exception(f"Could not record {status} status for run {run_id}")

    async def _emit(
        self,
        channel: InMemoryEventChannel,
        event: WorkflowEvent,
        terminal: bool = False,
    ) -> None:
        """Deliver ``event`` to the run's channel and to engine listeners.

        Listener errors on progress events fail the run. The outcome of a run
        is fixed once its terminal event exists, so errors raised while
        delivering it are logged instead.
        """
        await channel.publish(event)
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                if not terminal:
                    raise
                logger.exception(
                    f"Listener failed while handling {event.type} event for run {event.run_id}"
                )


def _describe(exc: Exception) -> str:
    if isinstance(exc, RunFailure):
        return exc.reason
    return f"{type(exc).__name__}: {exc}"
