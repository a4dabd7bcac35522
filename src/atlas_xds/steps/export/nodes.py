"""Step canônico: export.nodes.

Escreve a visão por node (`nodes/` + `resources/`) em
`steps.export.nodes.output_dir`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from atlas_xds.core.config.errors import ConfigError
from atlas_xds.core.pipeline.context import RunContext
from atlas_xds.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_xds.core.pipeline.units import failed_result, step_config
from atlas_xds.io.nodes import write_nodes


@dataclass
class ExportNodesStep:
    id: str = "export.nodes"
    kind: StepKind = StepKind.EXPORT
    depends_on: List[str] = field(default_factory=lambda: ["aggregate.nodes"])

    def run(self, ctx: RunContext) -> StepResult:
        cfg = step_config(ctx, self.id)
        if not cfg.get("output_dir"):
            return failed_result(
                ctx,
                step_id=self.id,
                kind=self.kind,
                exc=ConfigError(f"Missing required config: steps.{self.id}.output_dir"),
            )
        output_dir = Path(cfg["output_dir"])

        try:
            result = write_nodes(output_dir, ctx.get_artifact("xds.rendered"), ctx.config)
        except OSError as e:
            return failed_result(ctx, step_id=self.id, kind=self.kind, exc=e)

        ctx.log(
            step_id=self.id,
            level="info",
            message="node view written",
            nodes=len(result.nodes),
            resources=result.resources,
        )
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"{len(result.nodes)} nodes written to {output_dir}",
            metrics={"nodes": len(result.nodes), "resources": result.resources},
            artifacts={"nodes_dir": str(output_dir)},
        )
