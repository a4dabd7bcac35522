"""
ValidationReport: acumulador explícito de achados.

Substitui contadores globais de erro/warning: cada chamada de validação
recebe ou produz um report, e reports de várias unidades podem ser
combinados com `extend`.

Invariantes:
    - Findings são mantidos na ordem em que foram registrados
    - Um report sem errors é válido (warnings são apenas consultivos)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from atlas_xds.core.errors import Finding


@dataclass
class ValidationReport:
    findings: List[Finding] = field(default_factory=list)

    @property
    def errors(self) -> List[Finding]:
        return [f for f in self.findings if f.is_error]

    @property
    def warnings(self) -> List[Finding]:
        return [f for f in self.findings if not f.is_error]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, finding: Finding) -> None:
        self.findings.append(finding)

    def extend(self, other: "ValidationReport | Iterable[Finding]") -> None:
        items = other.findings if isinstance(other, ValidationReport) else other
        self.findings.extend(items)

    def of_type(self, finding_type: str) -> List[Finding]:
        return [f for f in self.findings if f.type == finding_type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.is_valid,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "errors": [f.to_dict() for f in self.errors],
            "warnings": [f.to_dict() for f in self.warnings],
        }
