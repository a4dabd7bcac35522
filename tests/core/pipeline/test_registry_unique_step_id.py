# tests/core/pipeline/test_registry_unique_step_id.py
"""
Testes do StepRegistry: unicidade de `step.id` e ordem de registro.
"""

import pytest

from atlas_xds.core.pipeline.registry import DuplicateStepIdError, StepRegistry


def test_registry_rejects_duplicate_step_id(DummyStep):
    """
    A duplicidade é detectada no registro, antes de qualquer planejamento.
    """
    registry = StepRegistry()
    registry.add(DummyStep(step_id="config.resolve"))

    with pytest.raises(DuplicateStepIdError):
        registry.add(DummyStep(step_id="config.resolve"))


def test_registry_preserves_order(DummyStep):
    registry = StepRegistry()
    for sid in ("c", "a", "b"):
        registry.add(DummyStep(step_id=sid))

    assert [s.id for s in registry.list()] == ["c", "a", "b"]
    assert registry.get("a").id == "a"


@pytest.mark.parametrize("bad_id", ["", "   ", None])
def test_registry_rejects_empty_id(DummyStep, bad_id):
    step = DummyStep()
    step.id = bad_id

    with pytest.raises(ValueError):
        StepRegistry().add(step)
