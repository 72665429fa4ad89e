"""In-process event channel."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, List

from ..contracts import WorkflowEvent
from .base import BaseEventChannel


class InMemoryEventChannel(BaseEventChannel):
    """Buffers a run's events so late subscribers still see the whole sequence."""

    def __init__(self) -> None:
        self._events: List[WorkflowEvent] = []
        self._changed = asyncio.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def history(self) -> List[WorkflowEvent]:
        return list(self._events)

    async def publish(self, event: WorkflowEvent) -> None:
        if self._closed:
            raise RuntimeError("Cannot publish to a closed event channel")
        async with self._changed:
            self._events.append(event)
            if event.is_terminal:
                self._closed = True
            self._changed.notify_all()

    async def subscribe(self) -> AsyncIterator[WorkflowEvent]:
        position = 0
        while True:
            async with self._changed:
                await self._changed.wait_for(lambda: len(self._events) > position)
                pending = self._events[position:]
            for event in pending:
                position += 1
                yield event
                if event.is_terminal:
                    return
