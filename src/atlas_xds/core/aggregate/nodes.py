"""
Aggregator/Sorter do Atlas XDS.

Agrupa recursos renderizados por node (`{role}.{region}`) e verifica a
unicidade global de compound names, tanto do `name` dos clusters quanto
do `cluster_name` dos load assignments.

Decisões arquiteturais:
    - Executa somente após todas as renderizações (precisa do conjunto completo)
    - Não altera nenhum documento: é uma passada de agrupamento e relatório
    - Saída determinística: nodes e serviços ordenados lexicograficamente

Limites explícitos:
    - Não escreve arquivos (ver `atlas_xds.io.nodes`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from atlas_xds.core.errors import Finding, duplicate_compound_name
from atlas_xds.core.exceptions import DuplicateCompoundName
from atlas_xds.core.render.resources import RenderedResource


KIND_CLUSTER = "cluster"
KIND_LOAD_ASSIGNMENT = "load_assignment"


@dataclass(frozen=True)
class DuplicateName:
    kind: str
    name: str
    sources: Tuple[str, ...]


@dataclass
class UniquenessReport:
    duplicates: List[DuplicateName] = field(default_factory=list)
    checked: Dict[str, int] = field(default_factory=dict)

    @property
    def is_unique(self) -> bool:
        return not self.duplicates

    def names(self) -> List[str]:
        return sorted({d.name for d in self.duplicates})

    def findings(self) -> List[Finding]:
        return [
            duplicate_compound_name(kind=d.kind, name=d.name, sources=list(d.sources))
            for d in self.duplicates
        ]

    def raise_for_duplicates(self) -> None:
        if self.duplicates:
            first = self.duplicates[0]
            raise DuplicateCompoundName(
                message=f"Duplicate compound name '{first.name}'",
                details={
                    "duplicates": [
                        {"kind": d.kind, "name": d.name, "sources": list(d.sources)}
                        for d in self.duplicates
                    ]
                },
            )


def find_duplicate_names(entries: Iterable[Tuple[str, str]], *, kind: str) -> List[DuplicateName]:
    """
    Detecta nomes repetidos em pares `(name, source)`.

    Returns:
        Lista de `DuplicateName`, ordenada por nome; as origens de cada nome
        preservam a ordem de entrada.
    """
    sources_by_name: Dict[str, List[str]] = {}
    for name, source in entries:
        sources_by_name.setdefault(name, []).append(source)

    return [
        DuplicateName(kind=kind, name=name, sources=tuple(sources))
        for name, sources in sorted(sources_by_name.items())
        if len(sources) > 1
    ]


def _load_assignment_names(resource: RenderedResource) -> List[str]:
    out: List[str] = []
    for item in resource.load_assignment.get("resources", []) or []:
        name = item.get("cluster_name")
        if name:
            out.append(name)
    return out


def aggregate(
    resources: Iterable[RenderedResource],
) -> Tuple[Dict[str, List[str]], UniquenessReport]:
    """
    Agrupa recursos por node e relata compound names duplicados.

    Args:
        resources: Recursos renderizados de todas as unidades.

    Returns:
        Tuple: (node_id → lista ordenada de compound names, UniquenessReport).
    """
    items = list(resources)

    nodes: Dict[str, List[str]] = {}
    for resource in items:
        nodes.setdefault(resource.node_id, []).append(resource.compound_name)
    nodes = {nid: sorted(services) for nid, services in sorted(nodes.items())}

    cluster_entries: List[Tuple[str, str]] = []
    la_entries: List[Tuple[str, str]] = []
    for resource in items:
        cluster_name: Any = resource.cluster.get("name")
        if cluster_name:
            cluster_entries.append((cluster_name, resource.location))
        for name in _load_assignment_names(resource):
            la_entries.append((name, resource.location))

    report = UniquenessReport(
        duplicates=find_duplicate_names(cluster_entries, kind=KIND_CLUSTER)
        + find_duplicate_names(la_entries, kind=KIND_LOAD_ASSIGNMENT),
        checked={KIND_CLUSTER: len(cluster_entries), KIND_LOAD_ASSIGNMENT: len(la_entries)},
    )
    return nodes, report
