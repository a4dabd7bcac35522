"""
Layout em disco das entradas e da saída de build do Atlas XDS.

Entrada (fragments):

    {in}/{role}/defaults.yaml                              # nível role (opcional)
    {in}/{role}/services/{service}/common.yaml             # nível service (opcional)
    {in}/{role}/services/{service}/{region}/profile.yaml   # nível profile (define a unidade)
    {in}/endpoints.yaml                                    # Endpoint Registry

Saída de build:

    {out}/{role}/services/{service}/{region}/cds.json
    {out}/{role}/services/{service}/{region}/eds.json

Os nomes de arquivo vêm da seção `layout` da configuração da ferramenta.
Caminhos fora do padrão são ignorados e devolvidos como warnings.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from atlas_xds.core.config.errors import FragmentNotFoundError
from atlas_xds.core.config.fragments import SUPPORTED_SUFFIXES, find_fragment, load_fragment
from atlas_xds.core.config.loader import DEFAULT_CONFIG
from atlas_xds.core.render.resources import RenderedResource


SERVICES_DIR = "services"


def layout_settings(config: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    merged = dict(DEFAULT_CONFIG["layout"])
    merged.update(((config or {}).get("layout") or {}))
    return merged


@dataclass(frozen=True)
class ProfileUnit:
    """Uma unidade (role, service, region) descoberta no diretório de entrada."""

    role: str
    service: str
    region: str
    profile_path: Path
    service_path: Optional[Path] = None
    role_path: Optional[Path] = None

    @property
    def key(self) -> str:
        return f"{self.role}/{SERVICES_DIR}/{self.service}/{self.region}"

    @property
    def context(self) -> Dict[str, str]:
        return {"role": self.role, "service": self.service, "region": self.region}

    def load_fragments(self) -> Tuple[Dict[str, Any], Dict[str, Any], Dict[str, Any]]:
        """Lê os três fragments (role, service, profile) da unidade."""
        return (
            load_fragment(self.role_path),
            load_fragment(self.service_path),
            load_fragment(self.profile_path, required=True),
        )


def _make_unit(input_dir: Path, role: str, service: str, region: str, profile_path: Path, layout: Dict[str, Any]) -> ProfileUnit:
    role_dir = input_dir / role
    service_dir = role_dir / SERVICES_DIR / service
    return ProfileUnit(
        role=role,
        service=service,
        region=region,
        profile_path=profile_path,
        service_path=find_fragment(service_dir, layout["service_fragment"]),
        role_path=find_fragment(role_dir, layout["role_fragment"]),
    )


def _suffix_rank(path: Path) -> int:
    return SUPPORTED_SUFFIXES.index(path.suffix.lower())


def discover_units(
    input_dir: Path,
    config: Optional[Mapping[str, Any]] = None,
) -> Tuple[List[ProfileUnit], List[str]]:
    """
    Percorre `input_dir` e devolve todas as unidades com profile.

    Returns:
        Tuple: (unidades ordenadas por role/service/region, warnings de caminhos ignorados).
    """
    input_dir = Path(input_dir)
    layout = layout_settings(config)
    stem = layout["profile_fragment"]

    units: Dict[Tuple[str, str, str], ProfileUnit] = {}
    skipped: List[str] = []

    for path in sorted(input_dir.rglob(f"{stem}.*")):
        if not path.is_file() or path.suffix.lower() not in SUPPORTED_SUFFIXES:
            continue
        parts = path.relative_to(input_dir).parts
        if len(parts) != 5 or parts[1] != SERVICES_DIR:
            skipped.append(f"Skipping file with unexpected path pattern: {path.relative_to(input_dir).as_posix()}")
            continue
        role, _, service, region, _ = parts
        key = (role, service, region)
        if key in units:
            # mesma precedência de `find_fragment`: .yaml, .yml, .json
            current = units[key]
            if _suffix_rank(path) < _suffix_rank(current.profile_path):
                current = units[key] = _make_unit(input_dir, role, service, region, path, layout)
            skipped.append(f"Multiple profile files for {role}/{service}/{region}; using {current.profile_path.name}")
            continue
        units[key] = _make_unit(input_dir, role, service, region, path, layout)

    return [units[k] for k in sorted(units)], skipped


def unit_for(
    input_dir: Path,
    role: str,
    service: str,
    region: str,
    config: Optional[Mapping[str, Any]] = None,
) -> ProfileUnit:
    """
    Localiza uma única unidade explicitamente (generate-target).

    Raises:
        FragmentNotFoundError: Se o diretório do role, do service ou o
            profile da região não existirem.
    """
    input_dir = Path(input_dir)
    layout = layout_settings(config)

    role_dir = input_dir / role
    if not role_dir.is_dir():
        raise FragmentNotFoundError(f"Role directory not found: {role_dir}")

    service_dir = role_dir / SERVICES_DIR / service
    if not service_dir.is_dir():
        raise FragmentNotFoundError(f"Service directory not found: {service_dir}")

    profile_path = find_fragment(service_dir / region, layout["profile_fragment"])
    if profile_path is None:
        raise FragmentNotFoundError(f"Profile not found for region '{region}' in {service_dir}")

    return _make_unit(input_dir, role, service, region, profile_path, layout)


def registry_path(input_dir: Path, config: Optional[Mapping[str, Any]] = None) -> Path:
    return Path(input_dir) / layout_settings(config)["registry_file"]


# -----------------------------
# Saída de build
# -----------------------------
def write_json(path: Path, document: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def build_dir_for(out_dir: Path, role: str, service: str, region: str) -> Path:
    return Path(out_dir) / role / SERVICES_DIR / service / region


def write_build(
    out_dir: Path,
    resource: RenderedResource,
    config: Optional[Mapping[str, Any]] = None,
) -> Tuple[Path, Path]:
    """Escreve cds.json e eds.json de uma unidade renderizada."""
    layout = layout_settings(config)
    target = build_dir_for(out_dir, resource.role, resource.service, resource.region)
    cds_path = target / layout["cluster_file"]
    eds_path = target / layout["load_assignment_file"]
    write_json(cds_path, resource.cluster)
    write_json(eds_path, resource.load_assignment)
    return cds_path, eds_path


@dataclass(frozen=True)
class BuildEntry:
    """Uma unidade encontrada em um diretório de build."""

    role: str
    service: str
    region: str
    directory: Path

    @property
    def location(self) -> str:
        return f"{self.role}/{SERVICES_DIR}/{self.service}/{self.region}"


def iter_build(
    build_dir: Path,
    config: Optional[Mapping[str, Any]] = None,
) -> Tuple[List[BuildEntry], List[str]]:
    """
    Lista as unidades de um diretório de build a partir dos arquivos de cluster.

    Returns:
        Tuple: (entradas ordenadas, warnings de caminhos fora do padrão).
    """
    build_dir = Path(build_dir)
    layout = layout_settings(config)

    entries: List[BuildEntry] = []
    skipped: List[str] = []
    for cds_path in sorted(build_dir.rglob(layout["cluster_file"])):
        rel = cds_path.relative_to(build_dir)
        parts = rel.parts
        if len(parts) != 5 or parts[1] != SERVICES_DIR:
            skipped.append(f"Skipping file with unexpected path pattern: {rel.as_posix()}")
            continue
        role, _, service, region, _ = parts
        entries.append(BuildEntry(role=role, service=service, region=region, directory=cds_path.parent))

    return entries, skipped


def read_json(path: Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def iter_json_files(root: Path) -> Iterator[Path]:
    yield from sorted(p for p in Path(root).rglob("*.json") if p.is_file())
