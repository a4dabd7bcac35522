"""
Montagem e execução do pipeline de geração do Atlas XDS.

Cada comando usa um conjunto declarado de Steps:

    generate / generate-target:
        ingest.profiles → config.resolve → validate.distribution
        → render.resources → export.build
                           → aggregate.nodes → export.nodes
    validate:
        ingest.profiles → config.resolve → validate.distribution

O resultado de uma execução é um `RunSummary`: sucesso somente quando
nenhum error foi acumulado e nenhum Step falhou. Warnings nunca alteram
o resultado.
"""

from __future__ import annotations

import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type

from atlas_xds import __version__
from atlas_xds.core.config.hashing import compute_config_hash
from atlas_xds.core.engine.engine import Engine
from atlas_xds.core.errors import Finding
from atlas_xds.core.pipeline.context import RunContext
from atlas_xds.core.pipeline.registry import StepRegistry
from atlas_xds.core.pipeline.step import Step
from atlas_xds.core.pipeline.types import StepResult, StepStatus
from atlas_xds.core.traceability.manifest import (
    XdsManifest,
    create_manifest,
    finalize_manifest,
    save_manifest,
)
from atlas_xds.report.report_md import generate_report_md
from atlas_xds.steps.aggregate.nodes import AggregateNodesStep
from atlas_xds.steps.config.resolve import ResolveConfigStep
from atlas_xds.steps.export.build import ExportBuildStep
from atlas_xds.steps.export.nodes import ExportNodesStep
from atlas_xds.steps.ingest.profiles import IngestProfilesStep
from atlas_xds.steps.render.resources import RenderResourcesStep
from atlas_xds.steps.validate.distribution import ValidateDistributionStep


COMMAND_GENERATE = "generate"
COMMAND_VALIDATE = "validate"

COMMAND_STEPS: Dict[str, Sequence[Type[Any]]] = {
    COMMAND_GENERATE: (
        IngestProfilesStep,
        ResolveConfigStep,
        ValidateDistributionStep,
        RenderResourcesStep,
        ExportBuildStep,
        AggregateNodesStep,
        ExportNodesStep,
    ),
    COMMAND_VALIDATE: (
        IngestProfilesStep,
        ResolveConfigStep,
        ValidateDistributionStep,
    ),
}

MANIFEST_FILE = "manifest.json"
REPORT_FILE = "report.md"


def build_steps(command: str) -> List[Step]:
    if command not in COMMAND_STEPS:
        raise ValueError(f"Unknown command: {command}")
    registry = StepRegistry()
    for step_cls in COMMAND_STEPS[command]:
        registry.add(step_cls())
    return registry.list()


@dataclass(frozen=True)
class RunSummary:
    """Resultado consolidado de uma execução."""

    run_id: str
    success: bool
    units: int
    rendered: int
    errors: List[Finding] = field(default_factory=list)
    warnings: List[Finding] = field(default_factory=list)
    failed_units: Dict[str, str] = field(default_factory=dict)
    steps: Dict[str, StepResult] = field(default_factory=dict)
    manifest: Optional[XdsManifest] = None

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "success": self.success,
            "units": self.units,
            "rendered": self.rendered,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "errors": [f.to_dict() for f in self.errors],
            "warnings": [f.to_dict() for f in self.warnings],
            "failed_units": dict(self.failed_units),
        }


def pipeline_config(
    config: Dict[str, Any],
    *,
    input_dir: Path,
    output_dir: Optional[Path] = None,
    nodes_dir: Optional[Path] = None,
    registry: Optional[Path] = None,
    target: Optional[Dict[str, str]] = None,
    checks: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Injeta os caminhos de execução em `steps.<id>` sem mutar `config`."""
    effective = deepcopy(config)
    steps = effective.setdefault("steps", {})

    ingest = steps.setdefault("ingest.profiles", {})
    ingest["input_dir"] = str(input_dir)
    if registry is not None:
        ingest["registry"] = str(registry)
    if target is not None:
        ingest["target"] = dict(target)

    if checks is not None:
        steps.setdefault("validate.distribution", {})["checks"] = list(checks)

    if output_dir is not None:
        steps.setdefault("export.build", {})["output_dir"] = str(output_dir)

    export_nodes = steps.setdefault("export.nodes", {})
    if nodes_dir is not None:
        export_nodes["output_dir"] = str(nodes_dir)
    elif not export_nodes.get("output_dir"):
        export_nodes["enabled"] = False

    return effective


def run_pipeline(
    config: Dict[str, Any],
    *,
    command: str = COMMAND_GENERATE,
    run_id: Optional[str] = None,
    manifest_dir: Optional[Path] = None,
) -> RunSummary:
    """
    Executa o pipeline de um comando e consolida o resultado.

    Args:
        config: Configuração efetiva, já com os caminhos em `steps.<id>`
            (ver `pipeline_config`).
        command: `generate` ou `validate`.
        run_id: Identificador da execução (gerado quando ausente).
        manifest_dir: Quando informado, recebe `manifest.json` e `report.md`.

    Returns:
        RunSummary: Resultado consolidado.
    """
    run_id = run_id or f"run-{uuid.uuid4().hex[:12]}"
    started_at = datetime.now(timezone.utc)
    ctx = RunContext(run_id=run_id, created_at=started_at, config=config)

    steps = build_steps(command)
    manifest = create_manifest(
        run_id=run_id,
        started_at=started_at,
        version=__version__,
        config_hash=compute_config_hash(config),
        registry_hash=None,
    )

    result = Engine(steps=steps, ctx=ctx, manifest=manifest).run()
    if ctx.registry is not None:
        manifest.inputs["registry_hash"] = ctx.registry.fingerprint()

    units = len(ctx.get_artifact("xds.units")) if ctx.has_artifact("xds.units") else 0
    rendered = len(ctx.get_artifact("xds.rendered")) if ctx.has_artifact("xds.rendered") else 0
    errors = ctx.report.errors
    warnings = ctx.report.warnings
    success = not errors and not any(r.status == StepStatus.FAILED for r in result.steps.values())

    summary = RunSummary(
        run_id=run_id,
        success=success,
        units=units,
        rendered=rendered,
        errors=errors,
        warnings=warnings,
        failed_units=dict(ctx.failed_units),
        steps=dict(result.steps),
        manifest=manifest,
    )
    finalize_manifest(manifest, ts=datetime.now(timezone.utc), summary=summary.to_dict())

    if manifest_dir is not None:
        manifest_dir = Path(manifest_dir)
        save_manifest(manifest, manifest_dir / MANIFEST_FILE)
        (manifest_dir / REPORT_FILE).write_text(generate_report_md(manifest.to_dict()), encoding="utf-8")

    return summary
