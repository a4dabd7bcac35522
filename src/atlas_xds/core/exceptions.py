"""
Atlas XDS: Canonical Exceptions (v1)

Este módulo define exceções tipadas de domínio do Atlas XDS, levantadas
pelo renderer e pelo agregador.

Objetivo:
- Permitir que renderer/aggregator levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para `Finding` no pipeline
- Evitar ValueError/KeyError genéricos em pontos críticos

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Exceções de resolução de configuração vivem em `core.config.errors`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class XdsException(Exception):
    """Base class para exceções de domínio do Atlas XDS.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(frozen=True)
class UnresolvedRegion(XdsException):
    """Região da distribution ausente do Endpoint Registry durante a renderização."""


@dataclass(frozen=True)
class IncompleteResolvedConfig(XdsException):
    """Configuração resolvida sem campo necessário para renderização."""


@dataclass(frozen=True)
class DuplicateCompoundName(XdsException):
    """Compound name repetido entre recursos renderizados."""
