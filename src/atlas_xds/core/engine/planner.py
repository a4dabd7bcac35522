# src/atlas_xds/core/engine/planner.py
"""
Planejador de execução do pipeline de geração (DAG).

Valida a estrutura declarada pelos Steps (ids e `depends_on`) e produz
uma ordem topológica determinística para o Engine.

Decisões arquiteturais:
    - Ordenação topológica pelo algoritmo de Kahn
    - Empates resolvidos por ordem lexicográfica de `step.id`
    - Erros estruturais são fatais e ocorrem antes de qualquer execução

Invariantes:
    - Nenhum Step aparece antes de suas dependências
    - A mesma definição de pipeline produz sempre a mesma ordem

Limites explícitos:
    - Não executa Steps
    - Não interage com RunContext nem com o Manifest
"""

from __future__ import annotations

import heapq
from typing import Dict, Iterable, List, Set

from atlas_xds.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """Um Step declarou em `depends_on` um id que não foi registrado."""


class CycleDetectedError(ValueError):
    """O grafo de dependências entre Steps contém um ciclo."""


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Produz a ordem de execução determinística de um conjunto de Steps.

    Args:
        steps (Iterable[Step]): Steps declarativos do pipeline.

    Returns:
        List[Step]: Steps em ordem topológica estável.

    Raises:
        ValueError: Se algum `step.id` for inválido ou duplicado.
        UnknownDependencyError: Se uma dependência não existir.
        CycleDetectedError: Se houver ciclo entre os Steps.
    """
    by_id: Dict[str, Step] = {}
    for s in steps:
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s

    pending: Dict[str, int] = {}
    children: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, s in by_id.items():
        deps = list(getattr(s, "depends_on", []) or [])
        for dep in deps:
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
            children[dep].add(sid)
        pending[sid] = len(set(deps))

    ready: List[str] = [sid for sid, n in pending.items() if n == 0]
    heapq.heapify(ready)
    order: List[str] = []

    while ready:
        sid = heapq.heappop(ready)
        order.append(sid)
        for child in children[sid]:
            pending[child] -= 1
            if pending[child] == 0:
                heapq.heappush(ready, child)

    if len(order) != len(by_id):
        raise CycleDetectedError("Cycle detected in step dependency graph")

    return [by_id[sid] for sid in order]
