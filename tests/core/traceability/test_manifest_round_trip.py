# tests/core/traceability/test_manifest_round_trip.py
"""
Testes de persistência do Manifest: save/load formam um round-trip exato.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

from atlas_xds.core.traceability.manifest import (
    create_manifest,
    finalize_manifest,
    load_manifest,
    save_manifest,
    step_finished,
    step_started,
)


def test_round_trip_save_load(tmp_path: Path):
    t0 = datetime(2026, 1, 16, 12, 0, tzinfo=timezone.utc)
    manifest = create_manifest(run_id="run-001", started_at=t0, version="0.1.0", config_hash="c" * 64, registry_hash="d" * 64)
    step_started(manifest, step_id="ingest.profiles", kind="ingest", ts=t0)
    step_finished(manifest, step_id="ingest.profiles", ts=t0, result={"status": "success", "summary": "ok"})
    finalize_manifest(manifest, ts=t0, summary={"success": True})

    out = tmp_path / "nested" / "manifest.json"
    save_manifest(manifest, out)

    assert out.exists()
    assert load_manifest(out).to_dict() == manifest.to_dict()


def test_saved_manifest_is_deterministic_json(tmp_path: Path):
    t0 = datetime(2026, 1, 16, 12, 0, tzinfo=timezone.utc)
    manifest = create_manifest(run_id="run-001", started_at=t0, version="0.1.0", config_hash="c", registry_hash=None)

    a = tmp_path / "a.json"
    b = tmp_path / "b.json"
    save_manifest(manifest, a)
    save_manifest(manifest, b)

    assert a.read_text(encoding="utf-8") == b.read_text(encoding="utf-8")
    assert list(json.loads(a.read_text(encoding="utf-8"))) == ["events", "inputs", "run", "steps", "summary"]
