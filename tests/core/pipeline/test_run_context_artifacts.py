# tests/core/pipeline/test_run_context_artifacts.py
"""
Testes do artifact store e do controle de unidades falhas no RunContext.

Invariantes:
    - Artefatos são indexados por chave explícita
    - Uma unidade marcada como falha permanece com o primeiro estágio registrado
"""

import pytest

from atlas_xds.core.errors import Finding


def test_artifacts_set_get_has(dummy_ctx):
    assert not dummy_ctx.has_artifact("xds.units")

    dummy_ctx.set_artifact("xds.units", ["u1"])

    assert dummy_ctx.has_artifact("xds.units")
    assert dummy_ctx.get_artifact("xds.units") == ["u1"]


def test_missing_artifact_raises_key_error(dummy_ctx):
    with pytest.raises(KeyError):
        dummy_ctx.get_artifact("xds.rendered")


def test_mark_failed_keeps_first_stage(dummy_ctx):
    dummy_ctx.mark_failed("edge/services/api/us-east-1", "resolve")
    dummy_ctx.mark_failed("edge/services/api/us-east-1", "render")

    assert dummy_ctx.is_failed("edge/services/api/us-east-1")
    assert not dummy_ctx.is_failed("edge/services/api/us-west-2")
    assert dummy_ctx.failed_units == {"edge/services/api/us-east-1": "resolve"}


def test_record_accumulates_in_report(dummy_ctx):
    dummy_ctx.record(Finding(type="X", severity="error", message="boom"))
    dummy_ctx.record(Finding(type="Y", severity="warning", message="hm"))

    assert len(dummy_ctx.report.errors) == 1
    assert len(dummy_ctx.report.warnings) == 1
    assert not dummy_ctx.report.is_valid


def test_contexts_do_not_share_state(dummy_config):
    from datetime import datetime, timezone

    from atlas_xds.core.pipeline.context import RunContext

    a = RunContext(run_id="a", created_at=datetime.now(timezone.utc), config=dummy_config)
    b = RunContext(run_id="b", created_at=datetime.now(timezone.utc), config=dummy_config)

    a.set_artifact("k", 1)
    a.mark_failed("u", "ingest")

    assert not b.has_artifact("k")
    assert b.failed_units == {}
    assert b.report.findings == []
