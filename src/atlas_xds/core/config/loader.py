"""
Loader canônico da configuração da ferramenta Atlas XDS.

Não confundir com fragments: este módulo resolve a configuração de
*execução* (engine, layout de diretórios, conjunto de métodos de load
balancing conhecidos, etc.), e não a configuração de serviços.

A configuração é resolvida a partir de:
    - `DEFAULT_CONFIG` embutido (sempre presente)
    - um arquivo de defaults (opcional; quando informado, obrigatório em disco)
    - um arquivo local de overrides (opcional; ignorado se ausente)

Princípios fundamentais:
    - Precedência explícita: embutido < defaults < local
    - O mesmo `deep_merge` dos fragments é reutilizado
    - A mesma entrada sempre produz a mesma configuração final

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - `DEFAULT_CONFIG` nunca é mutado
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import DefaultsNotFoundError
from .fragments import load_document
from .merge import deep_merge


DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "fail_fast": False,
    },
    "steps": {},
    "layout": {
        "role_fragment": "defaults",
        "service_fragment": "common",
        "profile_fragment": "profile",
        "registry_file": "endpoints.yaml",
        "cluster_file": "cds.json",
        "load_assignment_file": "eds.json",
        "nodes_subdir": "nodes",
        "resources_subdir": "resources",
    },
    "validation": {
        "known_load_balancing_methods": [
            "ROUND_ROBIN",
            "LEAST_REQUEST",
            "RING_HASH",
            "RANDOM",
            "MAGLEV",
        ],
        "timeout_units": ["s", "ms"],
    },
    "render": {
        "skip_invalid": True,
    },
}


def default_config() -> Dict[str, Any]:
    """Retorna uma cópia independente de `DEFAULT_CONFIG`."""
    return deepcopy(DEFAULT_CONFIG)


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva da ferramenta.

    Política de resolução:
        - `DEFAULT_CONFIG` é sempre a base
        - `defaults_path`, quando informado, deve existir
        - `local_path`, quando informado e existente, tem prioridade final

    Args:
        defaults_path (Optional[str]): Caminho para um arquivo de defaults.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se `defaults_path` não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        TypeMismatchError: Se ocorrer conflito estrutural durante o merge.
    """
    effective = default_config()

    if defaults_path is not None:
        defaults_file = Path(defaults_path)
        if not defaults_file.exists():
            raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {defaults_file}")
        effective = deep_merge(effective, load_document(defaults_file))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, load_document(local_file))

    return effective
