# src/atlas_xds/core/config/hashing.py
"""
Hashing canônico de configuração do Atlas XDS.

O hash representa a **identidade estrutural** de um documento (configuração
da ferramenta, Endpoint Registry ou configuração resolvida) e é registrado
no Manifest para rastreabilidade de cada geração.

Princípios fundamentais:
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Independente da ordem original das chaves
    - SHA-256, resultado hexadecimal de 64 caracteres

Limites explícitos:
    - Não persiste o hash
    - Não carrega nem resolve configuração
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico de um dicionário de configuração.

    Args:
        config (Dict[str, Any]): Configuração a ser identificada.

    Returns:
        str: Hash SHA-256 hexadecimal.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
