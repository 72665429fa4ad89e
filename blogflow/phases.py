"""Phase catalog and the default simulated phase step."""

from __future__ import annotations

import asyncio
from typing import Iterator, Sequence, Tuple

from .constants import DEFAULT_PHASE_INTERVAL, PHASE_NAMES
from .contracts import GenerationRequest, Phase


class PhaseSequencer:
    """Ordered, read-only catalog of the phases a run marches through."""

    def __init__(self, names: Sequence[str] = PHASE_NAMES) -> None:
        if not names:
            raise ValueError("Phase catalog must contain at least one phase")
        if len(set(names)) != len(names):
            raise ValueError("Phase names must be unique")
        self._phases: Tuple[Phase, ...] = tuple(
            Phase(name=name, ordinal=i) for i, name in enumerate(names)
        )

    def phases(self) -> Tuple[Phase, ...]:
        return self._phases

    def __len__(self) -> int:
        return len(self._phases)

    def __iter__(self) -> Iterator[Phase]:
        return iter(self._phases)


class SimulatedPhaseRunner:
    """Stand-in for real phase work: a fixed cooperative delay."""

    def __init__(self, interval: float = DEFAULT_PHASE_INTERVAL) -> None:
        if interval < 0:
            raise ValueError("Phase interval must not be negative")
        self.interval = interval

    async def __call__(self, phase: Phase, request: GenerationRequest) -> None:
        await asyncio.sleep(self.interval)
