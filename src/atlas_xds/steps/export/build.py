"""Step canônico: export.build.

Escreve `{output_dir}/{role}/services/{service}/{region}/cds.json|eds.json`
para cada recurso renderizado.

Configuração (`steps.export.build`):
- output_dir: diretório de build (obrigatório)

Erros de escrita isolam a unidade.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from atlas_xds.core.config.errors import ConfigError
from atlas_xds.core.pipeline.context import RunContext
from atlas_xds.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_xds.core.pipeline.units import fail_unit, failed_result, step_config
from atlas_xds.io.layout import write_build


@dataclass
class ExportBuildStep:
    id: str = "export.build"
    kind: StepKind = StepKind.EXPORT
    depends_on: List[str] = field(default_factory=lambda: ["render.resources"])

    def run(self, ctx: RunContext) -> StepResult:
        cfg = step_config(ctx, self.id)
        output_value = cfg.get("output_dir")
        if not output_value:
            return failed_result(
                ctx,
                step_id=self.id,
                kind=self.kind,
                exc=ConfigError(f"Missing required config: steps.{self.id}.output_dir"),
            )
        output_dir = Path(output_value)

        written = 0
        for resource in ctx.get_artifact("xds.rendered"):
            context = {"role": resource.role, "service": resource.service, "region": resource.region}
            try:
                write_build(output_dir, resource, ctx.config)
                written += 1
            except OSError as e:
                fail_unit(ctx, step_id=self.id, unit_key=resource.location, context=context, stage="export", exc=e)

        ctx.log(step_id=self.id, level="info", message="build written", written=written, output_dir=str(output_dir))

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"{written} units written to {output_dir}",
            metrics={"written": written},
            artifacts={"build_dir": str(output_dir)},
        )
