# tests/core/pipeline/test_run_context_logging.py
"""
Testes de logging estruturado e coleta de warnings no RunContext.

Decisões arquiteturais:
    - Logs não são strings livres, mas eventos estruturados
    - Warnings são sinais não fatais indexados por `step_id`
"""


def test_log_event_has_minimum_fields(dummy_ctx):
    dummy_ctx.log(step_id="config.resolve", level="info", message="configs resolved", resolved=3)

    (event,) = dummy_ctx.events
    assert event["run_id"] == "run-test-001"
    assert event["step_id"] == "config.resolve"
    assert event["level"] == "info"
    assert event["message"] == "configs resolved"
    assert event["resolved"] == 3
    assert event["timestamp"].endswith("+00:00")


def test_events_are_appended_in_order(dummy_ctx):
    for i in range(3):
        dummy_ctx.log(step_id="s", level="info", message=f"m{i}")
    assert [e["message"] for e in dummy_ctx.events] == ["m0", "m1", "m2"]


def test_warnings_grouped_by_step(dummy_ctx):
    dummy_ctx.add_warning(step_id="ingest.profiles", message="w1")
    dummy_ctx.add_warning(step_id="ingest.profiles", message="w2")
    dummy_ctx.add_warning(step_id="render.resources", message="w3")

    assert dummy_ctx.warnings == {
        "ingest.profiles": ["w1", "w2"],
        "render.resources": ["w3"],
    }
