# tests/core/traceability/test_manifest_event_log.py
"""
Testes do Event Log do Manifest: ordem real das chamadas e payloads.
"""

from datetime import datetime, timezone

from atlas_xds.core.traceability.manifest import add_event, create_manifest, finalize_manifest


T0 = datetime(2026, 1, 16, 12, 0, tzinfo=timezone.utc)


def _manifest():
    return create_manifest(run_id="run-001", started_at=T0, version="0.1.0", config_hash="c", registry_hash=None)


def test_event_log_appends_ordered_events():
    manifest = _manifest()

    add_event(manifest, event_type="custom", ts=T0)
    add_event(manifest, event_type="step_started", ts=T0, step_id="ingest.profiles", payload={"kind": "ingest"})

    events = manifest.to_dict()["events"]
    assert [e["event_type"] for e in events] == ["custom", "step_started"]
    assert "step_id" not in events[0]
    assert events[1]["step_id"] == "ingest.profiles"
    assert events[1]["payload"] == {"kind": "ingest"}


def test_finalize_sets_summary_and_finished_at():
    manifest = _manifest()

    finalize_manifest(manifest, ts=T0, summary={"success": True, "error_count": 0})

    assert manifest.summary == {"success": True, "error_count": 0}
    assert manifest.run["finished_at"] == "2026-01-16T12:00:00+00:00"
    assert manifest.events[-1]["event_type"] == "run_finished"
