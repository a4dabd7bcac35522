"""Step canônico: validate.distribution.

Valida cada configuração resolvida contra o Endpoint Registry e acumula os
achados no report do RunContext. A checagem de IPs repetidos entre regiões
é feita uma única vez por lote (é uma propriedade do registry).

Configuração (`steps.validate.distribution`):
- checks: subconjunto de ["fields", "weights", "endpoints"] (padrão: todos)

Com `render.skip_invalid` (padrão), unidades com errors são marcadas como
falhas e não são renderizadas. Uma exceção inesperada ao validar uma
unidade isola apenas aquela unidade; grupos de checagem desconhecidos
fazem o Step falhar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from atlas_xds.core.pipeline.context import RunContext
from atlas_xds.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_xds.core.pipeline.units import fail_unit, failed_result, step_config
from atlas_xds.core.validation.distribution import (
    ALL_CHECKS,
    CHECK_ENDPOINTS,
    select_checks,
    validate,
    validate_registry,
)
from atlas_xds.core.validation.report import ValidationReport


VALIDATION_ARTIFACT = "xds.validation"


@dataclass
class ValidateDistributionStep:
    id: str = "validate.distribution"
    kind: StepKind = StepKind.VALIDATE
    depends_on: List[str] = field(default_factory=lambda: ["config.resolve"])

    def run(self, ctx: RunContext) -> StepResult:
        cfg = step_config(ctx, self.id)
        try:
            checks = select_checks(cfg.get("checks") or ALL_CHECKS)
        except ValueError as e:
            return failed_result(ctx, step_id=self.id, kind=self.kind, exc=e)
        skip_invalid = bool(((ctx.config or {}).get("render") or {}).get("skip_invalid", True))

        units = ctx.get_artifact("xds.units")
        resolved = ctx.get_artifact("xds.resolved")

        if CHECK_ENDPOINTS in checks:
            ctx.report.extend(validate_registry(ctx.registry))

        reports: Dict[str, ValidationReport] = {}
        for unit in units:
            if unit.key not in resolved:
                continue
            try:
                report = validate(
                    resolved[unit.key],
                    ctx.registry,
                    context=unit.context,
                    checks=checks,
                    config=ctx.config,
                    include_registry_checks=False,
                )
            except Exception as e:
                fail_unit(ctx, step_id=self.id, unit_key=unit.key, context=unit.context, stage="validate", exc=e)
                continue
            reports[unit.key] = report
            ctx.report.extend(report)
            if not report.is_valid and skip_invalid:
                ctx.mark_failed(unit.key, "validate")

        invalid = sum(1 for r in reports.values() if not r.is_valid)
        ctx.set_artifact(VALIDATION_ARTIFACT, reports)
        ctx.log(
            step_id=self.id,
            level="info",
            message="distributions validated",
            validated=len(reports),
            invalid=invalid,
            checks=checks,
        )

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"{len(reports) - invalid}/{len(reports)} units valid",
            metrics={
                "validated": len(reports),
                "invalid": invalid,
                "errors": sum(len(r.errors) for r in reports.values()),
                "warnings": sum(len(r.warnings) for r in reports.values()),
            },
            payload={"checks": checks},
        )
