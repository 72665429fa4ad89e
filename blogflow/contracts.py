"""Core data contracts for the blogflow generation workflow."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import WORD_COUNT_BANDS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Audience(str, Enum):
    GENERAL = "general"
    TECHNICAL = "technical"
    BUSINESS = "business"
    ACADEMIC = "academic"


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    INFORMATIVE = "informative"
    PERSUASIVE = "persuasive"


class Length(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"

    @property
    def word_range(self) -> Tuple[int, Optional[int]]:
        """Target word-count band as ``(minimum, maximum)``."""
        return WORD_COUNT_BANDS[self.value]


class GenerationRequest(BaseModel):
    """What to generate. Immutable once built.

    Blank topics are accepted by the model itself; the request builder and
    the engine are responsible for rejecting them.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    topic: str
    audience: Audience = Audience.GENERAL
    tone: Tone = Tone.PROFESSIONAL
    length: Length = Length.MEDIUM
    seo_focus: bool = True
    include_images: bool = True
    social_media: bool = True
    analytics_enabled: bool = True


class Phase(BaseModel):
    """One named step of the generation sequence."""

    model_config = ConfigDict(frozen=True)

    name: str
    ordinal: int = Field(ge=0)


class Artifact(BaseModel):
    """Output synthesized when a run completes."""

    title: str
    meta_description: str
    body_markdown: str


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.FAILED)


class WorkflowRun(BaseModel):
    """Read-only snapshot of one generation run."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    state: RunState = RunState.IDLE
    request: GenerationRequest
    total_phases: int
    current_phase_index: Optional[int] = None
    percent_complete: float = Field(default=0.0, ge=0.0, le=100.0)
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None
    artifact: Optional[Artifact] = None
    error: Optional[str] = None


class ProgressEvent(BaseModel):
    """Emitted once per phase, before the phase's work is awaited."""

    type: Literal["progress"] = "progress"
    run_id: str
    phase_name: str
    phase_index: int
    percent_complete: float
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def is_terminal(self) -> bool:
        return False


class ResultEvent(BaseModel):
    """Terminal event of a successful run."""

    type: Literal["result"] = "result"
    run_id: str
    artifact: Artifact
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def is_terminal(self) -> bool:
        return True


class FailureEvent(BaseModel):
    """Terminal event of a failed run."""

    type: Literal["failure"] = "failure"
    run_id: str
    reason: str
    phase_name: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def is_terminal(self) -> bool:
        return True


WorkflowEvent = Union[ProgressEvent, ResultEvent, FailureEvent]
TerminalEvent = Union[ResultEvent, FailureEvent]
