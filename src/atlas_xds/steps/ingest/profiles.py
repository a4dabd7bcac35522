"""Step canônico: ingest.profiles.

Responsabilidades:
- carregar o Endpoint Registry (somente leitura, compartilhado via RunContext)
- descobrir as unidades do diretório de entrada (ou uma única unidade alvo)
- ler os três fragments de cada unidade
- publicar `xds.units` e `xds.fragments`

Configuração (`steps.ingest.profiles`):
- input_dir: diretório de entrada (obrigatório)
- registry: caminho do registry (padrão: `{input_dir}/{layout.registry_file}`)
- target: {role, service, region} para gerar uma única unidade

Falhas de leitura de fragment isolam a unidade. Registry ausente ou
inválido faz o Step falhar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from atlas_xds.core.config.errors import ConfigError
from atlas_xds.core.pipeline.context import RunContext
from atlas_xds.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_xds.core.pipeline.units import fail_unit, failed_result, step_config, unit_warnings
from atlas_xds.core.registry.endpoints import load_registry
from atlas_xds.io.layout import ProfileUnit, discover_units, registry_path, unit_for


UNITS_ARTIFACT = "xds.units"
FRAGMENTS_ARTIFACT = "xds.fragments"


@dataclass
class IngestProfilesStep:
    """Carrega registry, descobre unidades e lê seus fragments."""

    id: str = "ingest.profiles"
    kind: StepKind = StepKind.INGEST
    depends_on: List[str] = field(default_factory=list)

    def _units(self, input_dir: Path, cfg: Dict[str, Any], config: Dict[str, Any]) -> Tuple[List[ProfileUnit], List[str]]:
        target = cfg.get("target")
        if target:
            unit = unit_for(input_dir, target["role"], target["service"], target["region"], config)
            return [unit], []
        return discover_units(input_dir, config)

    def run(self, ctx: RunContext) -> StepResult:
        cfg = step_config(ctx, self.id)
        try:
            input_value = cfg.get("input_dir")
            if not input_value:
                raise ConfigError(f"Missing required config: steps.{self.id}.input_dir")
            input_dir = Path(input_value)
            if not input_dir.is_dir():
                raise ConfigError(f"Input directory not found: {input_dir}")

            reg_path = Path(cfg["registry"]) if cfg.get("registry") else registry_path(input_dir, ctx.config)
            ctx.registry = load_registry(reg_path)
            units, skipped = self._units(input_dir, cfg, ctx.config)
        except Exception as e:
            ctx.log(
                step_id=self.id,
                level="error",
                message="ingest.profiles failed",
                error_type=e.__class__.__name__,
                error_message=str(e),
            )
            return failed_result(ctx, step_id=self.id, kind=self.kind, exc=e)

        unit_warnings(ctx, self.id, skipped)

        fragments: Dict[str, Tuple[Dict[str, Any], Dict[str, Any], Dict[str, Any]]] = {}
        for unit in units:
            try:
                fragments[unit.key] = unit.load_fragments()
            except Exception as e:
                fail_unit(ctx, step_id=self.id, unit_key=unit.key, context=unit.context, stage="ingest", exc=e)

        ctx.set_artifact(UNITS_ARTIFACT, units)
        ctx.set_artifact(FRAGMENTS_ARTIFACT, fragments)

        ctx.log(
            step_id=self.id,
            level="info",
            message="profiles loaded",
            units=len(units),
            regions=len(ctx.registry),
        )

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"{len(fragments)}/{len(units)} units loaded",
            metrics={
                "units": len(units),
                "loaded": len(fragments),
                "skipped_paths": len(skipped),
                "registry_regions": len(ctx.registry),
            },
            warnings=list(skipped),
            artifacts={
                "input_dir": str(input_dir),
                "registry_path": str(reg_path),
                "registry_sha256": ctx.registry.fingerprint(),
            },
        )
