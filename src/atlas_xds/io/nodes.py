"""
Visão por node do Atlas XDS: sort, verificação de nomes e health check.

Estrutura de saída (node-centric):

    {out}/nodes/{role}.{region}.json              # {"services": [compound names]}
    {out}/resources/{role}.{region}.{service}/cds.json
    {out}/resources/{role}.{region}.{service}/eds.json

Decisões arquiteturais:
    - O agrupamento reutiliza `core.aggregate.aggregate` (mesma regra de
      identidade usada pelo pipeline)
    - Listas de services por node são ordenadas
    - Caminhos fora do padrão no build são ignorados com warning

Limites explícitos:
    - Não renderiza nem valida configurações
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from atlas_xds.core.aggregate.nodes import (
    KIND_CLUSTER,
    KIND_LOAD_ASSIGNMENT,
    UniquenessReport,
    aggregate,
    find_duplicate_names,
)
from atlas_xds.core.errors import (
    SEVERITY_WARNING,
    incomplete_resource,
    invalid_document,
    missing_directory,
    missing_name,
)
from atlas_xds.core.render.resources import RenderedResource
from atlas_xds.core.validation.report import ValidationReport

from .layout import iter_build, iter_json_files, layout_settings, read_json, write_json


@dataclass
class SortResult:
    """Resultado da reorganização de um build por node."""

    nodes: Dict[str, List[str]] = field(default_factory=dict)
    resources: int = 0
    warnings: List[str] = field(default_factory=list)
    uniqueness: Optional[UniquenessReport] = None


def write_nodes(
    out_dir: Path,
    resources: Iterable[RenderedResource],
    config: Optional[Mapping[str, Any]] = None,
) -> SortResult:
    """
    Escreve a visão por node a partir de recursos renderizados em memória.

    Returns:
        SortResult: nodes escritos, quantidade de recursos e relatório de unicidade.
    """
    layout = layout_settings(config)
    out_dir = Path(out_dir)
    items = list(resources)
    nodes, uniqueness = aggregate(items)

    nodes_dir = out_dir / layout["nodes_subdir"]
    resources_dir = out_dir / layout["resources_subdir"]
    nodes_dir.mkdir(parents=True, exist_ok=True)
    resources_dir.mkdir(parents=True, exist_ok=True)

    for resource in items:
        target = resources_dir / resource.compound_name
        write_json(target / layout["cluster_file"], resource.cluster)
        write_json(target / layout["load_assignment_file"], resource.load_assignment)

    for nid, services in nodes.items():
        write_json(nodes_dir / f"{nid}.json", {"services": services})

    return SortResult(nodes=nodes, resources=len(items), uniqueness=uniqueness)


def sort_build(
    build_dir: Path,
    out_dir: Path,
    config: Optional[Mapping[str, Any]] = None,
) -> SortResult:
    """
    Reorganiza um diretório de build (role/service/region) por node.

    Os documentos são copiados sem alteração. Documentos ausentes geram
    warning e não impedem o registro do service no node.
    """
    layout = layout_settings(config)
    out_dir = Path(out_dir)
    entries, warnings = iter_build(build_dir, config)

    nodes_dir = out_dir / layout["nodes_subdir"]
    resources_dir = out_dir / layout["resources_subdir"]
    nodes_dir.mkdir(parents=True, exist_ok=True)
    resources_dir.mkdir(parents=True, exist_ok=True)

    nodes: Dict[str, List[str]] = {}
    for entry in entries:
        name = f"{entry.role}.{entry.region}.{entry.service}"
        target = resources_dir / name
        target.mkdir(parents=True, exist_ok=True)
        for file_name in (layout["cluster_file"], layout["load_assignment_file"]):
            source = entry.directory / file_name
            if source.is_file():
                shutil.copyfile(source, target / file_name)
            else:
                warnings.append(f"{file_name} not found: {entry.location}")
        nodes.setdefault(f"{entry.role}.{entry.region}", []).append(name)

    nodes = {nid: sorted(services) for nid, services in sorted(nodes.items())}
    for nid, services in nodes.items():
        write_json(nodes_dir / f"{nid}.json", {"services": services})

    return SortResult(nodes=nodes, resources=len(entries), warnings=warnings)


def check_names(
    build_dir: Path,
    config: Optional[Mapping[str, Any]] = None,
) -> Tuple[UniquenessReport, ValidationReport]:
    """
    Verifica a unicidade de nomes em um diretório de build já gerado.

    Lê `.name` dos documentos de cluster e `.resources[].cluster_name` dos
    documentos de load assignment.

    Returns:
        Tuple: (relatório de unicidade, report com nomes ausentes e JSON inválido).
    """
    layout = layout_settings(config)
    build_dir = Path(build_dir)
    report = ValidationReport()

    cluster_entries: List[Tuple[str, str]] = []
    la_entries: List[Tuple[str, str]] = []

    for path in sorted(build_dir.rglob(layout["cluster_file"])):
        rel = path.relative_to(build_dir).as_posix()
        try:
            doc = read_json(path)
        except json.JSONDecodeError as exc:
            report.add(invalid_document(path=rel, error=str(exc)))
            continue
        name = doc.get("name") if isinstance(doc, dict) else None
        if not name:
            report.add(missing_name(kind=KIND_CLUSTER, path=rel))
            continue
        cluster_entries.append((name, rel))

    for path in sorted(build_dir.rglob(layout["load_assignment_file"])):
        rel = path.relative_to(build_dir).as_posix()
        try:
            doc = read_json(path)
        except json.JSONDecodeError as exc:
            report.add(invalid_document(path=rel, error=str(exc)))
            continue
        items = doc.get("resources") if isinstance(doc, dict) else None
        names = [r.get("cluster_name") for r in items or [] if isinstance(r, dict)]
        if not names or not all(names):
            report.add(missing_name(kind=KIND_LOAD_ASSIGNMENT, path=rel))
        for name in names:
            if name:
                la_entries.append((name, rel))

    uniqueness = UniquenessReport(
        duplicates=find_duplicate_names(cluster_entries, kind=KIND_CLUSTER)
        + find_duplicate_names(la_entries, kind=KIND_LOAD_ASSIGNMENT),
        checked={KIND_CLUSTER: len(cluster_entries), KIND_LOAD_ASSIGNMENT: len(la_entries)},
    )
    report.extend(uniqueness.findings())
    return uniqueness, report


@dataclass
class HealthReport:
    """Resultado do health check: achados e estatísticas de arquivos."""

    report: ValidationReport = field(default_factory=ValidationReport)
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return self.report.is_valid


def _avg_size(paths: List[Path]) -> int:
    if not paths:
        return 0
    return sum(p.stat().st_size for p in paths) // len(paths)


def health_check(
    nodes_dir: Path,
    *,
    build_dir: Optional[Path] = None,
    quick: bool = False,
    config: Optional[Mapping[str, Any]] = None,
) -> HealthReport:
    """
    Verifica a saúde de uma saída por node.

    Checagens:
        - estrutura de diretórios (`nodes/`, `resources/`; build opcional)
        - JSON válido em todos os arquivos (omitida em `quick`)
        - cada service listado em um node possui cluster e load assignment
          (omitida em `quick`)
    """
    layout = layout_settings(config)
    nodes_dir = Path(nodes_dir)
    health = HealthReport()
    report = health.report

    if not nodes_dir.is_dir():
        report.add(missing_directory(path=str(nodes_dir)))
        return health

    node_files_dir = nodes_dir / layout["nodes_subdir"]
    resources_dir = nodes_dir / layout["resources_subdir"]
    for directory in (node_files_dir, resources_dir):
        if not directory.is_dir():
            report.add(missing_directory(path=str(directory)))

    if build_dir is not None and not Path(build_dir).is_dir():
        report.add(missing_directory(path=str(build_dir), severity=SEVERITY_WARNING))

    if not report.is_valid:
        return health

    node_files = sorted(node_files_dir.glob("*.json"))
    cluster_files = sorted(resources_dir.glob(f"*/{layout['cluster_file']}"))
    la_files = sorted(resources_dir.glob(f"*/{layout['load_assignment_file']}"))
    health.stats = {
        "node_files": len(node_files),
        "resource_dirs": sum(1 for p in resources_dir.iterdir() if p.is_dir()),
        "avg_node_bytes": _avg_size(node_files),
        "avg_cluster_bytes": _avg_size(cluster_files),
        "avg_load_assignment_bytes": _avg_size(la_files),
    }

    if quick:
        return health

    parsed: Dict[Path, Any] = {}
    for path in iter_json_files(nodes_dir):
        try:
            parsed[path] = read_json(path)
        except json.JSONDecodeError as exc:
            report.add(invalid_document(path=path.relative_to(nodes_dir).as_posix(), error=str(exc)))

    for node_file in node_files:
        doc = parsed.get(node_file)
        if not isinstance(doc, dict):
            continue
        for service in doc.get("services", []) or []:
            missing = [
                name
                for name in (layout["cluster_file"], layout["load_assignment_file"])
                if not (resources_dir / service / name).is_file()
            ]
            if missing:
                report.add(incomplete_resource(service=service, missing=missing))

    return health
