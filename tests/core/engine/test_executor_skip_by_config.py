# tests/core/engine/test_executor_skip_by_config.py
"""
Testes de Steps desabilitados por configuração (`steps.<id>.enabled`).
"""

from atlas_xds.core.engine.engine import Engine
from atlas_xds.core.pipeline.types import StepStatus


def test_skip_by_config(DummyStep, dummy_ctx):
    """
    Steps desabilitados não executam `run` e terminam como SKIPPED.
    """
    dummy_ctx.config["steps"] = {"export.nodes": {"enabled": False}}

    result = Engine(steps=[DummyStep(step_id="export.nodes")], ctx=dummy_ctx).run()

    assert result.steps["export.nodes"].status == StepStatus.SKIPPED
    assert result.steps["export.nodes"].summary == "skipped by config"
    assert not dummy_ctx.has_artifact("export.nodes.ok")


def test_dependents_of_skipped_step_are_skipped(DummyStep, dummy_ctx):
    dummy_ctx.config["steps"] = {"aggregate.nodes": {"enabled": False}}
    steps = [
        DummyStep(step_id="aggregate.nodes"),
        DummyStep(step_id="export.nodes", depends_on=["aggregate.nodes"]),
    ]

    result = Engine(steps=steps, ctx=dummy_ctx).run()

    assert result.steps["export.nodes"].status == StepStatus.SKIPPED
    assert result.failed == []
