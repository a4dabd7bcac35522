"""
Helpers de Steps que operam por unidade (role, service, region).

Uma falha de unidade:
    - vira um `Finding` UNIT_FAILED no report do RunContext
    - marca a unidade como falha (Steps seguintes a ignoram)
    - é espelhada no artifact `xds.failures` (unit key → estágio)

Erros de configuração da própria ferramenta nunca passam por aqui: eles
fazem o Step inteiro falhar.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from atlas_xds.core.errors import SEVERITY_ERROR, Finding, unit_failed

from .context import RunContext
from .types import StepKind, StepResult, StepStatus


FAILURES_ARTIFACT = "xds.failures"


def step_config(ctx: RunContext, step_id: str) -> Dict[str, Any]:
    steps_cfg = (ctx.config or {}).get("steps") or {}
    step_cfg = steps_cfg.get(step_id) or {}
    return step_cfg if isinstance(step_cfg, dict) else {}


def fail_unit(
    ctx: RunContext,
    *,
    step_id: str,
    unit_key: str,
    context: Optional[Mapping[str, Any]],
    stage: str,
    exc: Exception,
) -> None:
    """Registra a falha de uma unidade e segue o lote."""
    ctx.record(
        unit_failed(
            stage=stage,
            error_type=exc.__class__.__name__,
            error_message=str(exc) or exc.__class__.__name__,
            context=dict(context or {}),
        )
    )
    ctx.mark_failed(unit_key, stage)
    ctx.set_artifact(FAILURES_ARTIFACT, dict(ctx.failed_units))
    ctx.log(
        step_id=step_id,
        level="error",
        message=f"unit failed: {unit_key}",
        stage=stage,
        error_type=exc.__class__.__name__,
        error_message=str(exc),
    )


def failed_result(ctx: RunContext, *, step_id: str, kind: StepKind, exc: Exception) -> StepResult:
    """Falha do Step inteiro: registra um error no report e devolve FAILED."""
    ctx.record(
        Finding(
            type=exc.__class__.__name__,
            severity=SEVERITY_ERROR,
            message=str(exc) or f"{step_id} failed",
            details={"step_id": step_id},
        )
    )
    return StepResult(
        step_id=step_id,
        kind=kind,
        status=StepStatus.FAILED,
        summary=str(exc) or f"{step_id} failed",
        payload={
            "error": {
                "type": exc.__class__.__name__,
                "message": str(exc) or "error",
            }
        },
    )


def unit_warnings(ctx: RunContext, step_id: str, messages: List[str]) -> None:
    for message in messages:
        ctx.add_warning(step_id=step_id, message=message)
        ctx.log(step_id=step_id, level="warning", message=message)
