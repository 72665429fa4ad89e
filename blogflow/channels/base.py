"""Base interface for per-run event channels."""

from __future__ import annotations

import abc
from typing import AsyncIterator

from ..contracts import WorkflowEvent


class BaseEventChannel(metaclass=abc.ABCMeta):
    """Carries the ordered events of a single run to its consumers."""

    @abc.abstractmethod
    async def publish(self, event: WorkflowEvent) -> None:
        """Append an event to the channel."""
        raise NotImplementedError

    @abc.abstractmethod
    def subscribe(self) -> AsyncIterator[WorkflowEvent]:
        """Yield every event of the run in order, ending after the terminal one."""
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def closed(self) -> bool:
        """``True`` once a terminal event has been published."""
        raise NotImplementedError
