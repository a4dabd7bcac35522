"""
Tipos canônicos do pipeline do Atlas XDS.

Componentes principais:
    - StepStatus → enum de estados finais (SUCCESS, SKIPPED, FAILED)
    - StepKind   → enum de classificação semântica de Steps
    - StepResult → estrutura imutável de resultado de execução

Invariantes:
    - Enums possuem valores textuais canônicos (serializáveis em JSON)
    - StepResult é imutável e seguro contra mutação acidental
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps no pipeline.

    Tipos definidos:
        - INGEST: descoberta e leitura de fragments e registry
        - RESOLVE: merge em cascata das configurações
        - VALIDATE: checagens de distribuição e endpoints
        - RENDER: materialização de documentos CDS/EDS
        - AGGREGATE: agrupamento por node e unicidade
        - EXPORT: escrita de artefatos em disco

    O tipo é puramente informativo: o Engine não o utiliza para decidir
    execução.
    """

    INGEST = "ingest"
    RESOLVE = "resolve"
    VALIDATE = "validate"
    RENDER = "render"
    AGGREGATE = "aggregate"
    EXPORT = "export"


class StepStatus(str, Enum):
    """
    Estados finais possíveis da execução de um Step.

    Estados definidos:
        - SUCCESS: execução concluída (mesmo que algumas unidades tenham falhado)
        - SKIPPED: execução pulada por decisão explícita (config ou dependência)
        - FAILED: o Step inteiro não pôde ser executado
    """

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final da execução do Step
        - summary: resumo textual da execução
        - metrics: contagens produzidas pelo Step (unidades, falhas, ...)
        - warnings: avisos não fatais gerados durante a execução
        - artifacts: referências a artefatos produzidos (ex.: paths)
        - payload: dados adicionais livres associados ao resultado
    """

    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, str] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)
