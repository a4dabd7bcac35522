"""Step canônico: render.resources.

Renderiza cluster + load assignment de cada unidade resolvida que não
falhou em estágios anteriores e publica `xds.rendered`
(lista de `RenderedResource`, na ordem das unidades).

UnresolvedRegion / IncompleteResolvedConfig isolam a unidade.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from atlas_xds.core.pipeline.context import RunContext
from atlas_xds.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_xds.core.pipeline.units import fail_unit
from atlas_xds.core.render.resources import RenderedResource, render_resource


RENDERED_ARTIFACT = "xds.rendered"


@dataclass
class RenderResourcesStep:
    id: str = "render.resources"
    kind: StepKind = StepKind.RENDER
    depends_on: List[str] = field(default_factory=lambda: ["validate.distribution"])

    def run(self, ctx: RunContext) -> StepResult:
        units = ctx.get_artifact("xds.units")
        resolved = ctx.get_artifact("xds.resolved")

        rendered: List[RenderedResource] = []
        for unit in units:
            if ctx.is_failed(unit.key) or unit.key not in resolved:
                continue
            try:
                rendered.append(
                    render_resource(
                        resolved[unit.key],
                        ctx.registry,
                        unit.role,
                        unit.service,
                        unit.region,
                        source=unit.key,
                    )
                )
            except Exception as e:
                fail_unit(ctx, step_id=self.id, unit_key=unit.key, context=unit.context, stage="render", exc=e)

        ctx.set_artifact(RENDERED_ARTIFACT, rendered)
        ctx.log(step_id=self.id, level="info", message="resources rendered", rendered=len(rendered))

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"{len(rendered)} resources rendered",
            metrics={"rendered": len(rendered), "failed_units": len(ctx.failed_units)},
        )
