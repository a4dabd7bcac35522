"""
Carregamento de fragments (ConfigFragment) do Atlas XDS.

Um fragment é um mapa de configurações de um único nível da cascata
(role, service ou profile), escrito em YAML ou JSON. Este módulo lê
fragments do disco e entrega dicionários puros ao merge engine.

Decisões arquiteturais:
    - Arquivos vazios são interpretados como fragments vazios
    - O conteúdo raiz deve ser sempre um dicionário
    - Fragments de role e service são opcionais em disco
    - O fragment de profile é obrigatório (ele define a unidade)

Limites explícitos:
    - Não realiza merge (ver `merge.py`)
    - Não percorre a árvore de diretórios (ver `atlas_xds.io.layout`)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # PyYAML

from .errors import (
    FragmentNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


SUPPORTED_SUFFIXES = (".yaml", ".yml", ".json")


def load_document(path: Path) -> Dict[str, Any]:
    """
    Carrega um documento YAML/JSON e valida que a raiz é um dicionário.

    Args:
        path (Path): Caminho do arquivo.

    Returns:
        Dict[str, Any]: Conteúdo carregado (vazio para arquivos vazios).

    Raises:
        FragmentNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
    """
    if not path.exists():
        raise FragmentNotFoundError(f"Arquivo não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            text = f.read()
        data = json.loads(text) if text.strip() else None

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Raiz de {path.name} deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def find_fragment(directory: Path, stem: str) -> Optional[Path]:
    """Retorna o primeiro `<stem><suffix>` existente em `directory`, na ordem de SUPPORTED_SUFFIXES."""
    for suffix in SUPPORTED_SUFFIXES:
        candidate = directory / f"{stem}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def load_fragment(path: Optional[Path], *, required: bool = False) -> Dict[str, Any]:
    """
    Carrega um fragment de um nível da cascata.

    Quando `path` é `None` (fragment inexistente em disco) e o nível não é
    obrigatório, o fragment vazio `{}` é retornado: o merge engine continua
    recebendo os três níveis explicitamente.

    Raises:
        FragmentNotFoundError: Se `required` e o fragment não existir.
    """
    if path is None:
        if required:
            raise FragmentNotFoundError("Fragment obrigatório não encontrado")
        return {}
    return load_document(path)
