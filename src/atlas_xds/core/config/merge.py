"""
Configuration Merge Engine do Atlas XDS.

Este módulo implementa a política oficial de merge em cascata utilizada
para resolver a configuração de uma unidade (role, service, region) a
partir de três fragments ordenados por precedência crescente:

    role defaults → service overrides → profile overrides

Política de merge (v1):
    - dict + dict → merge recursivo por chave
    - escalar / list → sobrescrita total pelo nível de maior precedência
    - dict contra não-dict no mesmo caminho → TypeMismatchError

Princípios fundamentais:
    - O merge é determinístico e puramente funcional
    - Nenhum input é mutado durante o processo
    - Não existem chaves especiais: `regions` e `distribution` são
      convenções dos autores de fragments, não regras do merge

Invariantes:
    - A mesma entrada sempre produz a mesma saída
    - Chaves não sobrescritas são preservadas
    - Conflitos estruturais interrompem o merge daquela unidade

Limites explícitos:
    - Não carrega arquivos (ver `fragments.py`)
    - Não valida semântica de distribuição (ver `core.validation`)
"""

from copy import deepcopy
from typing import Any, Dict, Optional

from .errors import MissingFragmentError, TypeMismatchError


TIERS = ("role", "service", "profile")


def _join(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


def _merge_into(result: Dict[str, Any], override: Dict[str, Any], path: str) -> None:
    for key, override_value in override.items():
        key_path = _join(path, key)

        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]
        base_is_map = isinstance(base_value, dict)
        override_is_map = isinstance(override_value, dict)

        # dict -> merge recursivo
        if base_is_map and override_is_map:
            _merge_into(base_value, override_value, key_path)
            continue

        # mapa contra escalar: conflito estrutural
        if base_is_map != override_is_map:
            raise TypeMismatchError(
                key_path,
                type(base_value).__name__,
                type(override_value).__name__,
            )

        # escalar / list -> sobrescrita
        result[key] = deepcopy(override_value)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois fragments.

    Esta função combina um fragment base com um fragment de maior
    precedência, produzindo uma nova estrutura sem mutar nenhum dos inputs.

    Política de merge (v1):
        - dict + dict       → merge recursivo por chave
        - escalar / list    → sobrescrita direta pelo override
        - dict vs não-dict  → TypeMismatchError (com o caminho pontuado)

    Invariantes:
        - A estrutura retornada é sempre um novo dicionário
        - Chaves não presentes no override são preservadas da base
        - O mesmo par (base, override) sempre produz o mesmo resultado

    Args:
        base (Dict[str, Any]): Fragment de menor precedência.
        override (Dict[str, Any]): Fragment de maior precedência.

    Returns:
        Dict[str, Any]: Novo dicionário resultante do merge.

    Raises:
        TypeMismatchError: Se houver mapa contra escalar no mesmo caminho,
            ou se algum dos inputs não for um dicionário.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise TypeMismatchError(
            "<root>", type(base).__name__, type(override).__name__
        )

    result: Dict[str, Any] = deepcopy(base)
    _merge_into(result, override, "")
    return result


def resolve(
    role_defaults: Optional[Dict[str, Any]],
    service_overrides: Optional[Dict[str, Any]],
    profile_overrides: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Resolve a configuração final de uma unidade a partir dos três níveis.

    Os três fragments são obrigatórios (podem ser vazios, nunca `None`) e
    são aplicados em ordem de precedência crescente. O resultado é uma
    ResolvedConfig: um dicionário puro, recalculado a cada chamada.

    Args:
        role_defaults: Fragment do nível role (menor precedência).
        service_overrides: Fragment do nível service.
        profile_overrides: Fragment do nível profile (maior precedência).

    Returns:
        Dict[str, Any]: Configuração resolvida.

    Raises:
        MissingFragmentError: Se algum dos níveis for `None`.
        TypeMismatchError: Se ocorrer conflito estrutural durante o merge.
    """
    fragments = (role_defaults, service_overrides, profile_overrides)
    for tier, fragment in zip(TIERS, fragments):
        if fragment is None:
            raise MissingFragmentError(tier)

    resolved = deep_merge(role_defaults, service_overrides)
    return deep_merge(resolved, profile_overrides)
