"""Phase catalog tests."""

import pytest

from blogflow.constants import PHASE_NAMES
from blogflow.contracts import GenerationRequest
from blogflow.phases import PhaseSequencer, SimulatedPhaseRunner


def test_default_catalog_has_nine_ordered_phases():
    sequencer = PhaseSequencer()
    phases = sequencer.phases()

    assert len(sequencer) == 9
    assert [p.name for p in phases] == list(PHASE_NAMES)
    assert [p.ordinal for p in phases] == list(range(9))
    assert phases[0].name == "Ideation & Planning"
    assert phases[-1].name == "Publishing Preparation"


def test_catalog_is_identical_between_calls():
    sequencer = PhaseSequencer()
    assert sequencer.phases() == sequencer.phases()
    assert list(sequencer) == list(PhaseSequencer().phases())


@pytest.mark.parametrize("names", [[], ["Plan", "Plan"]])
def test_invalid_catalogs_are_rejected(names):
    with pytest.raises(ValueError):
        PhaseSequencer(names)


@pytest.mark.asyncio
async def test_simulated_runner_completes():
    runner = SimulatedPhaseRunner(0)
    phase = PhaseSequencer().phases()[0]
    await runner(phase, GenerationRequest(topic="Anything"))


def test_simulated_runner_rejects_negative_interval():
    with pytest.raises(ValueError):
        SimulatedPhaseRunner(-1)
