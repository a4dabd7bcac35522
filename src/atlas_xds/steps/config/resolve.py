"""Step canônico: config.resolve.

Aplica o merge em cascata role → service → profile em cada unidade
carregada e publica `xds.resolved` (unit key → configuração resolvida).

TypeMismatchError em uma unidade isola apenas aquela unidade.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from atlas_xds.core.config.merge import resolve
from atlas_xds.core.pipeline.context import RunContext
from atlas_xds.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_xds.core.pipeline.units import fail_unit


RESOLVED_ARTIFACT = "xds.resolved"


@dataclass
class ResolveConfigStep:
    id: str = "config.resolve"
    kind: StepKind = StepKind.RESOLVE
    depends_on: List[str] = field(default_factory=lambda: ["ingest.profiles"])

    def run(self, ctx: RunContext) -> StepResult:
        units = ctx.get_artifact("xds.units")
        fragments = ctx.get_artifact("xds.fragments")

        resolved: Dict[str, Dict[str, Any]] = {}
        for unit in units:
            if ctx.is_failed(unit.key) or unit.key not in fragments:
                continue
            role_fragment, service_fragment, profile_fragment = fragments[unit.key]
            try:
                resolved[unit.key] = resolve(role_fragment, service_fragment, profile_fragment)
            except Exception as e:
                fail_unit(ctx, step_id=self.id, unit_key=unit.key, context=unit.context, stage="resolve", exc=e)

        ctx.set_artifact(RESOLVED_ARTIFACT, resolved)
        ctx.log(step_id=self.id, level="info", message="configs resolved", resolved=len(resolved))

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"{len(resolved)} configs resolved",
            metrics={"resolved": len(resolved), "failed": len(units) - len(resolved)},
        )
