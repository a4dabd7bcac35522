# src/atlas_xds/core/traceability/manifest.py
"""
Manifest de geração: rastreabilidade das execuções do Atlas XDS.

O Manifest consolida, de forma determinística e auditável:
    - metadados da execução (run_id, started_at, versão)
    - hashes semânticos das entradas (configuração da ferramenta e registry)
    - estado incremental de cada Step
    - Event Log ordenado de eventos explícitos
    - resumo final da execução (unidades, erros, warnings)

Decisões arquiteturais:
    - UTC é o timezone canônico de todos os timestamps
    - Persistência em JSON com chaves ordenadas
    - Nenhum evento é emitido implicitamente: toda mutação passa pela API

Invariantes:
    - `events` preserva a ordem real das chamadas
    - `steps` é sempre indexado por step_id
    - save_manifest/load_manifest formam um round-trip exato

Limites explícitos:
    - Não executa pipeline
    - Não decide políticas de execução
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps sem timezone são assumidos como UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class XdsManifest:
    """
    Representação canônica do Manifest de uma geração.

    Campos:
        - run: metadados da execução
        - inputs: hashes semânticos de entrada
        - steps: estado por Step
        - events: Event Log ordenado
        - summary: contagens finais (preenchido por `finalize_manifest`)
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "steps": {k: dict(v) for k, v in self.steps.items()},
            "events": [dict(e) for e in self.events],
            "summary": dict(self.summary),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "XdsManifest":
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
            summary=dict(data.get("summary", {}) or {}),
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    version: str,
    config_hash: str,
    registry_hash: Optional[str],
) -> XdsManifest:
    """
    Cria o Manifest inicial de uma execução.

    O Event Log inicia vazio; nenhum evento `run_started` é emitido aqui.

    Args:
        run_id (str): Identificador único da execução.
        started_at (datetime): Início da execução.
        version (str): Versão do Atlas XDS.
        config_hash (str): Hash da configuração da ferramenta.
        registry_hash (Optional[str]): Fingerprint do Endpoint Registry,
            ou None quando nenhum registry foi carregado.

    Returns:
        XdsManifest: Manifest vazio, pronto para receber eventos.
    """
    return XdsManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "version": version,
        },
        inputs={
            "config_hash": config_hash,
            "registry_hash": registry_hash,
        },
    )


def add_event(
    manifest: XdsManifest,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def step_started(manifest: XdsManifest, *, step_id: str, kind: str, ts: datetime) -> None:
    manifest.steps.setdefault(step_id, {})
    manifest.steps[step_id].update(
        {
            "step_id": step_id,
            "kind": kind,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(manifest, event_type="step_started", ts=ts, step_id=step_id, payload={"kind": kind})


def step_finished(
    manifest: XdsManifest,
    *,
    step_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra a conclusão de um Step (SUCCESS ou SKIPPED).

    A duração é calculada a partir de `started_at` quando o Step foi
    iniciado; Steps pulados terminam com duração zero.
    """
    s = manifest.steps.setdefault(step_id, {"step_id": step_id})
    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = result.get("status", "success")
    s.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "summary": result.get("summary"),
            "metrics": result.get("metrics", {}) or {},
            "warnings": result.get("warnings", []) or [],
            "artifacts": result.get("artifacts", {}) or {},
        }
    )
    add_event(
        manifest,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": status, "duration_ms": s["duration_ms"]},
    )


def step_failed(manifest: XdsManifest, *, step_id: str, ts: datetime, error: Dict[str, Any]) -> None:
    s = manifest.steps.setdefault(step_id, {"step_id": step_id})
    s.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "error": dict(error),
        }
    )
    add_event(manifest, event_type="step_failed", ts=ts, step_id=step_id, payload={"error": dict(error)})


def finalize_manifest(manifest: XdsManifest, *, ts: datetime, summary: Dict[str, Any]) -> None:
    manifest.summary = dict(summary)
    manifest.run["finished_at"] = _iso(ts)
    add_event(manifest, event_type="run_finished", ts=ts, payload=dict(summary))


def save_manifest(manifest: XdsManifest, path: Path) -> None:
    """Persiste o Manifest em JSON determinístico (UTF-8, chaves ordenadas)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> XdsManifest:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return XdsManifest.from_dict(data)
