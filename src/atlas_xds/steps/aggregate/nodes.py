"""Step canônico: aggregate.nodes.

Agrupa todos os recursos renderizados por node (`{role}.{region}`) e
verifica a unicidade dos compound names. Executa somente depois de
`render.resources` (dependência explícita no planner).

Nomes duplicados são registrados individualmente no report e fazem o
Step falhar: a visão por node não é exportada.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from atlas_xds.core.aggregate.nodes import aggregate
from atlas_xds.core.exceptions import DuplicateCompoundName
from atlas_xds.core.pipeline.context import RunContext
from atlas_xds.core.pipeline.types import StepKind, StepResult, StepStatus


NODES_ARTIFACT = "xds.nodes"
UNIQUENESS_ARTIFACT = "xds.uniqueness"


@dataclass
class AggregateNodesStep:
    id: str = "aggregate.nodes"
    kind: StepKind = StepKind.AGGREGATE
    depends_on: List[str] = field(default_factory=lambda: ["render.resources"])

    def run(self, ctx: RunContext) -> StepResult:
        rendered = ctx.get_artifact("xds.rendered")
        nodes, uniqueness = aggregate(rendered)

        ctx.set_artifact(NODES_ARTIFACT, nodes)
        ctx.set_artifact(UNIQUENESS_ARTIFACT, uniqueness)

        metrics = {
            "nodes": len(nodes),
            "resources": len(rendered),
            "duplicates": len(uniqueness.duplicates),
        }

        if not uniqueness.is_unique:
            for finding in uniqueness.findings():
                ctx.record(finding)
            try:
                uniqueness.raise_for_duplicates()
            except DuplicateCompoundName as e:
                ctx.log(step_id=self.id, level="error", message=e.message, duplicates=uniqueness.names())
                return StepResult(
                    step_id=self.id,
                    kind=self.kind,
                    status=StepStatus.FAILED,
                    summary=e.message,
                    metrics=metrics,
                    payload={
                        "error": {
                            "type": e.__class__.__name__,
                            "message": e.message,
                            "details": e.details,
                        }
                    },
                )

        ctx.log(step_id=self.id, level="info", message="nodes aggregated", **metrics)
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"{len(rendered)} resources in {len(nodes)} nodes",
            metrics=metrics,
        )
