# src/atlas_xds/report/summary.py
"""
Resumos tabulares de uma saída por node (pandas).

Consultas disponíveis:
    - weights_summary: soma de pesos por prioridade de cada service
    - priority_counts: quantos services usam cada prioridade
    - list_nodes: nodes com role, região e quantidade de services
    - inspect_node: services de um node e presença de seus documentos

Todas as consultas leem apenas a estrutura produzida por `sort`/`generate`
(`nodes/` e `resources/`) e nunca alteram arquivos.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from atlas_xds.core.validation.distribution import EXPECTED_WEIGHT_SUM
from atlas_xds.io.layout import layout_settings, read_json


SORT_KEYS = {
    "name": (["node"], [True]),
    "role": (["role", "node"], [True, True]),
    "region": (["region", "node"], [True, True]),
    "services": (["services", "node"], [False, True]),
}

WEIGHT_COLUMNS = ["service", "role", "region", "priority", "target", "weight"]
SUMMARY_COLUMNS = ["service", "role", "region", "distribution", "has_issues", "issues"]
NODE_COLUMNS = ["node", "role", "region", "services"]


class NodeNotFoundError(LookupError):
    """O node solicitado não existe em `nodes/`."""


class InvalidNodeFileError(ValueError):
    """O arquivo do node existe, mas não é um documento `{"services": [...]}` legível."""


def split_service_name(name: str) -> Tuple[str, str, str]:
    """`role.region.service` → (role, region, service); o service pode conter pontos."""
    role, _, rest = name.partition(".")
    region, _, service = rest.partition(".")
    return role, region, service


def split_node_name(name: str) -> Optional[Tuple[str, str]]:
    parts = name.split(".")
    if len(parts) != 2 or not all(parts):
        return None
    return parts[0], parts[1]


# -----------------------------
# Leitura tolerante
# -----------------------------
def _read_document(path: Path, base: Path, warnings: List[str]) -> Optional[Dict[str, Any]]:
    """Lê um JSON cuja raiz deve ser um mapa; arquivos ilegíveis viram warning e são ignorados."""
    rel = path.relative_to(base).as_posix()
    try:
        doc = read_json(path)
    except (OSError, json.JSONDecodeError) as exc:
        warnings.append(f"Skipping unreadable file {rel}: {exc}")
        return None
    if not isinstance(doc, dict):
        warnings.append(f"Skipping {rel}: root must be an object")
        return None
    return doc


def _as_int(value: Any, default: int) -> Optional[int]:
    """None vale `default`; valores não inteiros devolvem None."""
    if value is None:
        return default
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# -----------------------------
# Pesos
# -----------------------------
def weights_frame(
    nodes_dir: Path,
    config: Optional[Mapping[str, Any]] = None,
) -> Tuple[pd.DataFrame, List[str]]:
    """
    Uma linha por grupo de endpoints de cada load assignment em `resources/`.

    Prioridade ausente ou nula vale 0 e peso ausente ou nulo vale 100.
    Documentos ilegíveis e grupos com valores não inteiros são ignorados.

    Returns:
        Tuple: (DataFrame com WEIGHT_COLUMNS, warnings de arquivos/grupos ignorados).
    """
    layout = layout_settings(config)
    nodes_dir = Path(nodes_dir)
    resources_dir = nodes_dir / layout["resources_subdir"]

    rows: List[Dict[str, Any]] = []
    warnings: List[str] = []
    for path in sorted(resources_dir.glob(f"*/{layout['load_assignment_file']}")):
        doc = _read_document(path, nodes_dir, warnings)
        if doc is None:
            continue
        service_name = path.parent.name
        role, region, _ = split_service_name(service_name)
        for resource in doc.get("resources", []) or []:
            if not isinstance(resource, dict):
                continue
            for group in resource.get("endpoints", []) or []:
                if not isinstance(group, dict):
                    continue
                target = (group.get("locality") or {}).get("region")
                priority = _as_int(group.get("priority"), 0)
                weight = _as_int(group.get("load_balancing_weight"), 100)
                if priority is None or weight is None:
                    warnings.append(f"Skipping endpoint group '{target}' of {service_name}: non-integer priority or weight")
                    continue
                rows.append(
                    {
                        "service": service_name,
                        "role": role,
                        "region": region,
                        "priority": priority,
                        "target": target,
                        "weight": weight,
                    }
                )

    return pd.DataFrame(rows, columns=WEIGHT_COLUMNS), warnings


def _filter(df: pd.DataFrame, role: Optional[str], region: Optional[str]) -> pd.DataFrame:
    if role:
        df = df[df["role"] == role]
    if region:
        df = df[df["region"] == region]
    return df


def weights_summary(
    frame: pd.DataFrame,
    *,
    role: Optional[str] = None,
    region: Optional[str] = None,
    problems_only: bool = False,
) -> pd.DataFrame:
    """
    Resumo por service: `P{prioridade}: {soma} ({n} reg)` para cada prioridade.

    Um service tem problema quando alguma prioridade não soma 100.

    Args:
        frame: Resultado de `weights_frame`.
    """
    df = _filter(frame, role, region)
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    grouped = (
        df.groupby(["service", "role", "region", "priority"], sort=True)
        .agg(total=("weight", "sum"), regions=("target", "nunique"))
        .reset_index()
    )

    rows: List[Dict[str, Any]] = []
    for (service, svc_role, svc_region), part in grouped.groupby(["service", "role", "region"], sort=True):
        has_issues = bool((part["total"] != EXPECTED_WEIGHT_SUM).any())
        distribution = "; ".join(
            f"P{int(r.priority)}: {int(r.total)} ({int(r.regions)} reg)" for r in part.itertuples()
        )
        rows.append(
            {
                "service": service,
                "role": svc_role,
                "region": svc_region,
                "distribution": distribution,
                "has_issues": has_issues,
                "issues": f"Weight sum != {EXPECTED_WEIGHT_SUM}" if has_issues else "None",
            }
        )

    summary = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    if problems_only:
        summary = summary[summary["has_issues"]]
    return summary.reset_index(drop=True)


def priority_counts(
    frame: pd.DataFrame,
    *,
    role: Optional[str] = None,
    region: Optional[str] = None,
) -> Dict[int, int]:
    """Quantidade de services distintos que usam cada prioridade (a partir de `weights_frame`)."""
    df = _filter(frame, role, region)
    if df.empty:
        return {}
    counts = df.groupby("priority")["service"].nunique().sort_index()
    return {int(p): int(n) for p, n in counts.items()}


# -----------------------------
# Nodes
# -----------------------------
def list_nodes(
    nodes_dir: Path,
    *,
    role: Optional[str] = None,
    region: Optional[str] = None,
    sort_by: str = "name",
    config: Optional[Mapping[str, Any]] = None,
) -> Tuple[pd.DataFrame, List[str]]:
    """
    Lista os nodes de `nodes/`.

    Returns:
        Tuple: (DataFrame com node/role/region/services, warnings de nomes
        inválidos e de arquivos ilegíveis).

    Raises:
        ValueError: Se `sort_by` não for um de name, role, region, services.
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Invalid sort option: {sort_by}")

    layout = layout_settings(config)
    nodes_dir = Path(nodes_dir)
    node_files_dir = nodes_dir / layout["nodes_subdir"]

    rows: List[Dict[str, Any]] = []
    warnings: List[str] = []
    for path in sorted(node_files_dir.glob("*.json")):
        parsed = split_node_name(path.stem)
        if parsed is None:
            warnings.append(f"Invalid node name format: {path.stem}")
            continue
        doc = _read_document(path, nodes_dir, warnings)
        if doc is None:
            continue
        node_role, node_region = parsed
        services = doc.get("services", []) or []
        rows.append({"node": path.stem, "role": node_role, "region": node_region, "services": len(services)})

    df = _filter(pd.DataFrame(rows, columns=NODE_COLUMNS), role, region)
    by, ascending = SORT_KEYS[sort_by]
    df = df.sort_values(by=by, ascending=ascending, kind="mergesort").reset_index(drop=True)
    return df, warnings


def inspect_node(
    nodes_dir: Path,
    node: str,
    config: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Detalha um node: role, região e presença de cluster/load assignment por service.

    Raises:
        NodeNotFoundError: Se `nodes/{node}.json` não existir.
        InvalidNodeFileError: Se o arquivo do node não for um JSON com raiz objeto.
    """
    layout = layout_settings(config)
    nodes_dir = Path(nodes_dir)
    node_file = nodes_dir / layout["nodes_subdir"] / f"{node}.json"
    if not node_file.is_file():
        raise NodeNotFoundError(f"Node configuration not found: {node_file}")

    node_role, _, node_region = node.partition(".")
    resources_dir = nodes_dir / layout["resources_subdir"]
    try:
        doc = read_json(node_file)
    except json.JSONDecodeError as exc:
        raise InvalidNodeFileError(f"Invalid node configuration {node_file}: {exc}") from exc
    if not isinstance(doc, dict):
        raise InvalidNodeFileError(f"Invalid node configuration {node_file}: root must be an object")

    services = []
    for name in doc.get("services", []) or []:
        services.append(
            {
                "name": name,
                "cds_present": (resources_dir / name / layout["cluster_file"]).is_file(),
                "eds_present": (resources_dir / name / layout["load_assignment_file"]).is_file(),
            }
        )

    return {
        "node": node,
        "role": node_role,
        "region": node_region,
        "services": services,
        "node_config_path": str(node_file),
        "resources_path": str(resources_dir),
    }


def format_table(df: pd.DataFrame) -> str:
    if df.empty:
        return ""
    return df.to_string(index=False)
