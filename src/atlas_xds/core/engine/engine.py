# src/atlas_xds/core/engine/engine.py
"""
Engine de execução do pipeline do Atlas XDS.

Responsabilidades:
- Planejar a ordem dos Steps (planner determinístico).
- Pular Steps desabilitados por configuração (`steps.<id>.enabled`).
- Pular Steps cujas dependências falharam.
- Converter exceções em `Finding` serializável (`payload["error"]`),
  sem expor stack trace ao operador.
- Registrar início/fim/falha de cada Step no Manifest, quando fornecido.

O Engine nunca muta StepResult in-place: enriquecimentos são feitos via
`dataclasses.replace`.

Observação: falhas de *unidade* (role, service, region) são tratadas
pelos próprios Steps e nunca chegam ao Engine. Apenas falhas do Step
inteiro (ex.: registry ausente) produzem FAILED.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from atlas_xds.core.errors import (
    ENGINE_CONFIGURATION_ERROR,
    ENGINE_EXECUTION_ERROR,
    SEVERITY_ERROR,
    Finding,
)
from atlas_xds.core.exceptions import XdsException
from atlas_xds.core.pipeline.context import RunContext
from atlas_xds.core.pipeline.step import Step
from atlas_xds.core.pipeline.types import StepResult, StepStatus
from atlas_xds.core.traceability.manifest import (
    XdsManifest,
    step_failed,
    step_finished,
    step_started,
)

from .planner import plan_execution


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma execução de pipeline."""

    steps: Dict[str, StepResult] = field(default_factory=dict)

    @property
    def failed(self) -> List[str]:
        return [sid for sid, r in self.steps.items() if r.status == StepStatus.FAILED]


class Engine:
    """Engine canônico do Atlas XDS (planner + executor)."""

    def __init__(
        self,
        *,
        steps: Sequence[Step],
        ctx: RunContext,
        manifest: Optional[XdsManifest] = None,
    ):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx
        self.manifest: Optional[XdsManifest] = manifest

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        return bool(step_cfg.get("enabled", True))

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", False))

    def _exception_to_error(self, exc: Exception) -> Finding:
        """Converte exceções em Finding.

        - XdsException: já carrega message/details/hint.
        - Outras exceções: ENGINE_EXECUTION_ERROR com o nome da classe.
        """
        if isinstance(exc, XdsException):
            return Finding(
                type=exc.__class__.__name__,
                severity=SEVERITY_ERROR,
                message=str(exc) or "Erro de execução",
                details=dict(exc.details or {}),
                hint=exc.hint,
            )

        return Finding(
            type=ENGINE_EXECUTION_ERROR,
            severity=SEVERITY_ERROR,
            message=str(exc) or "Erro inesperado durante execução",
            details={"exception_class": exc.__class__.__name__},
            hint="Verifique os eventos do run e a configuração do pipeline",
        )

    def _merge_ctx_warnings(self, result: StepResult) -> StepResult:
        merged: List[str] = []
        for msg in list(result.warnings or []) + list(self.ctx.warnings.get(result.step_id, [])):
            if msg not in merged:
                merged.append(msg)
        return replace(result, warnings=merged)

    def _mk_result(
        self,
        *,
        step: Step,
        status: StepStatus,
        summary: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> StepResult:
        return StepResult(
            step_id=step.id,
            kind=step.kind,
            status=status,
            summary=summary,
            payload=dict(payload or {}),
        )

    def _finish(self, result: StepResult) -> StepResult:
        result = self._merge_ctx_warnings(result)
        self.ctx.log(
            step_id=result.step_id,
            level="error" if result.status == StepStatus.FAILED else "info",
            message=result.summary,
            status=result.status.value,
        )
        if self.manifest is not None:
            if result.status == StepStatus.FAILED:
                step_failed(
                    self.manifest,
                    step_id=result.step_id,
                    ts=_now(),
                    error=result.payload.get("error", {}),
                )
            else:
                step_finished(
                    self.manifest,
                    step_id=result.step_id,
                    ts=_now(),
                    result={
                        "status": result.status.value,
                        "summary": result.summary,
                        "metrics": result.metrics,
                        "warnings": result.warnings,
                        "artifacts": result.artifacts,
                    },
                )
        return result

    def run(self) -> RunResult:
        ordered = plan_execution(self.steps)

        results: Dict[str, StepResult] = {}
        for step in ordered:
            sid = step.id

            if not self._is_enabled(sid):
                results[sid] = self._finish(
                    self._mk_result(step=step, status=StepStatus.SKIPPED, summary="skipped by config")
                )
                continue

            deps = list(getattr(step, "depends_on", []) or [])
            if any(d in results and results[d].status != StepStatus.SUCCESS for d in deps):
                results[sid] = self._finish(
                    self._mk_result(
                        step=step,
                        status=StepStatus.SKIPPED,
                        summary="skipped due to failed dependency",
                    )
                )
                continue

            if self.manifest is not None:
                step_started(self.manifest, step_id=sid, kind=step.kind.value, ts=_now())

            try:
                step_result = step.run(self.ctx)
                if not isinstance(step_result, StepResult):
                    raise TypeError("Step.run(ctx) must return StepResult")
                results[sid] = self._finish(step_result)

            except Exception as e:
                error = self._exception_to_error(e)
                if isinstance(e, TypeError) and "must return StepResult" in str(e):
                    error = Finding(
                        type=ENGINE_CONFIGURATION_ERROR,
                        severity=SEVERITY_ERROR,
                        message="Step retornou tipo inválido",
                        details={"step_id": sid, "expected": "StepResult"},
                        hint="Ajuste o Step para retornar StepResult",
                    )

                self.ctx.record(error)
                results[sid] = self._finish(
                    self._mk_result(
                        step=step,
                        status=StepStatus.FAILED,
                        summary=error.message,
                        payload={"error": error.to_dict()},
                    )
                )

                if self._fail_fast():
                    break

        return RunResult(steps=results)
