"""
Atlas XDS: Canonical Finding Structures (v1)

Este módulo define o padrão canônico de achados (findings) do Atlas XDS.
Achados são produzidos pelo validator, pelo agregador e pelo pipeline, e
fazem parte do contrato operacional do sistema, devendo ser:

- explícitos
- serializáveis
- associados a um contexto (role / service / region)
- classificados como `error` ou `warning`

Warnings nunca determinam falha; errors acumulados determinam o resultado
final de uma execução.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Finding:
    """
    Achado canônico do Atlas XDS.

    Campos:
    - type: código estável do achado (não é texto livre)
    - severity: `error` ou `warning`
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - context: unidade associada (`role`, `service`, `region`), quando houver
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    severity: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == SEVERITY_ERROR

    def label(self) -> str:
        """Rótulo curto do contexto, no formato `service/region`."""
        service = self.context.get("service")
        region = self.context.get("region")
        if service and region:
            return f"{service}/{region}"
        return service or region or "global"

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do achado."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de achado (v1)
# ---------------------------------------------------------------------------

# Validator
MISSING_FIELD = "MISSING_FIELD"
INVALID_FORMAT = "INVALID_FORMAT"
UNKNOWN_LB_METHOD = "UNKNOWN_LB_METHOD"
INVALID_WEIGHT_SUM = "INVALID_WEIGHT_SUM"
UNKNOWN_REGION = "UNKNOWN_REGION"
INVALID_ENDPOINT = "INVALID_ENDPOINT"
DUPLICATE_ENDPOINT_IP = "DUPLICATE_ENDPOINT_IP"

# Agregação / saída
DUPLICATE_COMPOUND_NAME = "DUPLICATE_COMPOUND_NAME"
MISSING_NAME = "MISSING_NAME"
INVALID_DOCUMENT = "INVALID_DOCUMENT"
INCOMPLETE_RESOURCE = "INCOMPLETE_RESOURCE"
MISSING_DIRECTORY = "MISSING_DIRECTORY"

# Pipeline
UNIT_FAILED = "UNIT_FAILED"

# Engine
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def missing_field(
    *,
    field_path: str,
    context: Optional[Dict[str, Any]] = None,
    hint: str = "Declare o campo em algum nível da cascata (role, service ou profile).",
) -> Finding:
    return Finding(
        type=MISSING_FIELD,
        severity=SEVERITY_ERROR,
        message=f"Missing required field: {field_path}",
        details={"field": field_path},
        context=dict(context or {}),
        hint=hint,
    )


def invalid_format(
    *,
    field_path: str,
    value: Any,
    expected: str,
    severity: str = SEVERITY_ERROR,
    context: Optional[Dict[str, Any]] = None,
) -> Finding:
    return Finding(
        type=INVALID_FORMAT,
        severity=severity,
        message=f"Invalid {field_path}: {value!r} (expected: {expected})",
        details={"field": field_path, "value": value, "expected": expected},
        context=dict(context or {}),
    )


def unknown_lb_method(
    *,
    value: Any,
    known: List[str],
    context: Optional[Dict[str, Any]] = None,
) -> Finding:
    return Finding(
        type=UNKNOWN_LB_METHOD,
        severity=SEVERITY_WARNING,
        message=f"Unknown load balancing method: {value!r}",
        details={"value": value, "known": list(known)},
        context=dict(context or {}),
        hint="O valor é repassado sem alteração; confirme que o proxy o suporta.",
    )


def invalid_weight_sum(
    *,
    priority: int,
    weight_sum: int,
    regions: List[str],
    context: Optional[Dict[str, Any]] = None,
) -> Finding:
    return Finding(
        type=INVALID_WEIGHT_SUM,
        severity=SEVERITY_ERROR,
        message=(
            f"Priority {priority}: weight sum is {weight_sum}, expected 100 "
            f"(regions: {', '.join(regions)})"
        ),
        details={"priority": priority, "sum": weight_sum, "regions": list(regions)},
        context=dict(context or {}),
        hint="Ajuste os pesos das regiões desta prioridade para somarem exatamente 100.",
    )


def unknown_region(
    *,
    region: str,
    context: Optional[Dict[str, Any]] = None,
) -> Finding:
    return Finding(
        type=UNKNOWN_REGION,
        severity=SEVERITY_ERROR,
        message=f"Region '{region}' in distribution not found in endpoint registry",
        details={"region": region},
        context=dict(context or {}),
        hint="Declare a região no Endpoint Registry ou remova-a da distribution.",
    )


def invalid_endpoint(
    *,
    region: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> Finding:
    return Finding(
        type=INVALID_ENDPOINT,
        severity=SEVERITY_ERROR,
        message=message,
        details={"region": region, **(details or {})},
        context=dict(context or {}),
    )


def duplicate_endpoint_ip(*, ip: str, regions: List[str]) -> Finding:
    return Finding(
        type=DUPLICATE_ENDPOINT_IP,
        severity=SEVERITY_WARNING,
        message=f"IP address '{ip}' used in multiple regions: {', '.join(regions)}",
        details={"ip": ip, "regions": list(regions)},
    )


def duplicate_compound_name(*, kind: str, name: str, sources: List[str]) -> Finding:
    return Finding(
        type=DUPLICATE_COMPOUND_NAME,
        severity=SEVERITY_ERROR,
        message=f"Duplicate {kind} name '{name}' found in: {', '.join(sources)}",
        details={"kind": kind, "name": name, "sources": list(sources)},
    )


def unit_failed(
    *,
    stage: str,
    error_type: str,
    error_message: str,
    context: Optional[Dict[str, Any]] = None,
) -> Finding:
    return Finding(
        type=UNIT_FAILED,
        severity=SEVERITY_ERROR,
        message=f"{stage} failed: {error_message}",
        details={"stage": stage, "error_type": error_type, "error_message": error_message},
        context=dict(context or {}),
    )


def missing_name(*, kind: str, path: str) -> Finding:
    return Finding(
        type=MISSING_NAME,
        severity=SEVERITY_ERROR,
        message=f"Missing {kind} name in {path}",
        details={"kind": kind, "path": path},
    )


def invalid_document(*, path: str, error: str) -> Finding:
    return Finding(
        type=INVALID_DOCUMENT,
        severity=SEVERITY_ERROR,
        message=f"Invalid JSON: {path}",
        details={"path": path, "error": error},
    )


def incomplete_resource(*, service: str, missing: List[str]) -> Finding:
    return Finding(
        type=INCOMPLETE_RESOURCE,
        severity=SEVERITY_ERROR,
        message=f"Incomplete files for: {service} (missing: {', '.join(missing)})",
        details={"service": service, "missing": list(missing)},
        hint="Gere novamente o build e execute o sort.",
    )


def missing_directory(*, path: str, severity: str = SEVERITY_ERROR) -> Finding:
    return Finding(
        type=MISSING_DIRECTORY,
        severity=severity,
        message=f"Directory not found: {path}",
        details={"path": path},
    )
