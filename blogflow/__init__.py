"""Blogflow: phased blog generation workflow engine."""

from .config import BlogflowConfig, WorkflowConfig, load_config, save_config
from .contracts import (
    Artifact,
    Audience,
    FailureEvent,
    GenerationRequest,
    Length,
    Phase,
    ProgressEvent,
    ResultEvent,
    RunState,
    Tone,
    WorkflowRun,
)
from .engine import RunHandle, WorkflowEngine
from .errors import (
    BlogflowError,
    ConflictError,
    FieldError,
    InvalidRequestError,
    RunFailure,
    ValidationError,
)
from .persistence import get_repository
from .phases import PhaseSequencer
from .request import GenerationRequestBuilder
from .store import ConfigurationStore

__version__ = "0.1.0"
__all__ = [
    "Artifact",
    "Audience",
    "BlogflowConfig",
    "BlogflowError",
    "ConfigurationStore",
    "ConflictError",
    "FailureEvent",
    "FieldError",
    "GenerationRequest",
    "GenerationRequestBuilder",
    "InvalidRequestError",
    "Length",
    "Phase",
    "PhaseSequencer",
    "ProgressEvent",
    "ResultEvent",
    "RunFailure",
    "RunHandle",
    "RunState",
    "Tone",
    "ValidationError",
    "WorkflowConfig",
    "WorkflowEngine",
    "WorkflowRun",
    "get_repository",
    "load_config",
    "save_config",
]
