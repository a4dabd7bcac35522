"""
Validação de configurações resolvidas do Atlas XDS.

Componentes:
    - report       → `ValidationReport`, acumulador explícito de achados
    - distribution → checagens de campos, pesos e endpoints
"""

from .distribution import ALL_CHECKS, validate, validate_registry
from .report import ValidationReport

__all__ = ["ALL_CHECKS", "validate", "validate_registry", "ValidationReport"]
