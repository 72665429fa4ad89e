"""Event channels delivering run events to consumers."""

from __future__ import annotations

from .base import BaseEventChannel
from .inmemory import InMemoryEventChannel

__all__ = ["BaseEventChannel", "InMemoryEventChannel"]
