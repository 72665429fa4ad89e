"""Error taxonomy for blogflow."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class FieldError(BaseModel):
    """A single field-level validation problem."""

    field: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"


class BlogflowError(Exception):
    """Base class for all blogflow errors."""


class InvalidRequestError(BlogflowError):
    """Raised when a generation request is rejected before a run starts.

    ``errors`` holds every field-level violation so callers can highlight
    all invalid fields at once.
    """

    def __init__(self, errors: List[FieldError]) -> None:
        self.errors = list(errors)
        summary = "; ".join(str(e) for e in self.errors) or "invalid request"
        super().__init__(f"Invalid generation request: {summary}")

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]


class ConflictError(BlogflowError):
    """Raised when an engine operation is not allowed in its current state."""


class ValidationError(BlogflowError):
    """Raised by the configuration store when an update is rejected."""

    def __init__(
        self,
        field: str,
        reason: str,
        errors: Optional[List[FieldError]] = None,
    ) -> None:
        self.field = field
        self.reason = reason
        self.errors = list(errors) if errors else [FieldError(field=field, reason=reason)]
        super().__init__(f"Invalid setting '{field}': {reason}")


class RunFailure(BlogflowError):
    """Raised inside a run when a phase cannot be completed."""

    def __init__(self, reason: str, phase_name: Optional[str] = None) -> None:
        self.reason = reason
        self.phase_name = phase_name
        super().__init__(reason)
