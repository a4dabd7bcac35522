# src/atlas_xds/core/config/__init__.py

"""
Camada de configuração do Atlas XDS.

Este pacote contém as estruturas e utilitários responsáveis por carregar
fragments, resolvê-los em cascata (role → service → profile), carregar a
configuração da própria ferramenta e identificar configurações por hash.

A configuração no Atlas XDS é:
    - declarativa
    - determinística
    - recalculada a cada geração (nunca persistida como estado)

Responsabilidades do pacote:
    - Merge em cascata de três níveis (`merge.resolve`)
    - Carregamento de fragments YAML/JSON (`fragments`)
    - Configuração da ferramenta com defaults embutidos (`loader`)
    - Hash canônico para rastreabilidade (`hashing`)

Invariantes:
    - Toda configuração resolvida é um dicionário puro (dict)
    - Conflitos estruturais são tratados como erro
"""

from .errors import MissingFragmentError, TypeMismatchError
from .merge import deep_merge, resolve

__all__ = ["deep_merge", "resolve", "MissingFragmentError", "TypeMismatchError"]
