"""
Contrato canônico de Step do Atlas XDS.

Um Step é a menor unidade executável do pipeline de geração. Steps do
Atlas XDS operam sobre o *lote* de unidades (role, service, region) e
isolam falhas por unidade: uma unidade com erro é registrada no
RunContext e as demais seguem.

Princípios fundamentais:
    - Steps não conhecem o Engine nem o planner
    - Comunicação entre Steps é mediada pelo RunContext
    - Conformidade é garantida por duck typing (@runtime_checkable)
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .context import RunContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    """
    Contrato canônico de um Step do Atlas XDS.

    Atributos obrigatórios:
        - id: identificador único e estável do Step
        - kind: classificação semântica do Step (`StepKind`)
        - depends_on: lista de `step_id` dos Steps dos quais depende

    Invariantes:
        - `run` é executado no máximo uma vez por execução
        - O retorno de `run` é sempre um `StepResult`
    """

    id: str
    kind: StepKind
    depends_on: List[str]

    def run(self, ctx: RunContext) -> StepResult:
        """Executa a etapa uma única vez usando exclusivamente o RunContext."""
        ...
