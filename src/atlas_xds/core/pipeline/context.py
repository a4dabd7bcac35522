"""
Contexto de execução compartilhado do pipeline.

Este módulo define o `RunContext`, a estrutura canônica utilizada para
compartilhar estado explícito entre Steps durante uma geração do
Atlas XDS.

O RunContext atua como o único meio permitido de:
    - troca indireta de informações entre Steps (artifact store)
    - registro de logs estruturados de execução (event log)
    - coleta de warnings não fatais associados a Steps
    - acúmulo de achados (errors/warnings) de todas as unidades
    - registro de unidades que falharam, para que Steps seguintes as ignorem

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio contexto)
    - Ausência de estado global: contadores de erro vivem no `report`
    - Estrutura simples e testável

Invariantes:
    - Artefatos são indexados por chave explícita
    - Logs sempre incluem `run_id` e `step_id`
    - Uma unidade marcada como falha permanece falha até o fim do run

Limites explícitos:
    - Não executa Steps
    - Não persiste dados automaticamente
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from atlas_xds.core.errors import Finding
from atlas_xds.core.registry.endpoints import EndpointRegistry
from atlas_xds.core.validation.report import ValidationReport


@dataclass
class RunContext:
    """
    Contexto de execução compartilhado de uma geração.

    O RunContext consolida:
        - identidade da execução (run_id, created_at)
        - configuração da ferramenta resolvida
        - Endpoint Registry (somente leitura)
        - armazenamento de artefatos produzidos
        - logs estruturados e warnings por Step
        - report acumulado e unidades falhas

    Decisões arquiteturais:
        - Steps interagem apenas via RunContext
        - O registry é compartilhado apenas para leitura
        - Falhas de uma unidade são registradas, nunca propagadas
    """

    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    registry: Optional[EndpointRegistry] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    report: ValidationReport = field(default_factory=ValidationReport, init=False)
    failed_units: Dict[str, str] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        if key not in self._artifacts:
            raise KeyError(key)
        return self._artifacts[key]

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)

    # -----------------------------
    # Achados e falhas por unidade
    # -----------------------------
    def record(self, finding: Finding) -> None:
        self.report.add(finding)

    def mark_failed(self, unit_key: str, stage: str) -> None:
        self.failed_units.setdefault(unit_key, stage)

    def is_failed(self, unit_key: str) -> bool:
        return unit_key in self.failed_units
