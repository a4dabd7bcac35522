"""
Distribution Validator do Atlas XDS.

Valida uma configuração resolvida (ResolvedConfig) contra o Endpoint
Registry, acumulando achados em um `ValidationReport`.

Checagens (todas independentes, todas executadas):
    1. Campos obrigatórios: load_balancing_method, timeout, distribution
    2. Formato do timeout: `<inteiro positivo><unidade>` (warning)
    3. Método de load balancing conhecido (warning, valor é repassado)
    4. Cada região da distribution tem nome textual, priority (int >= 0) e weight (int > 0)
    5. Por partição de priority, a soma dos weights é exatamente 100
    6. Toda região da distribution existe no registry
    7. IPs IPv4 bem formados e porta em [1, 65535] nas regiões referenciadas
    8. Mesmo IP em regiões distintas do registry (warning, nível registry)

Grupos (para execução parcial, equivalentes aos modos do validador original):
    - fields    → checagens 1 a 4
    - weights   → checagem 5
    - endpoints → checagens 6 a 8

Princípios fundamentais:
    - Nunca muta os inputs
    - Nunca interrompe na primeira falha
    - Entradas inválidas na checagem 4 não participam da soma da checagem 5
      (o problema já foi reportado uma vez)

Limites explícitos:
    - Não renderiza recursos
    - Não resolve configuração
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from atlas_xds.core.config.loader import DEFAULT_CONFIG
from atlas_xds.core.errors import (
    SEVERITY_WARNING,
    duplicate_endpoint_ip,
    invalid_endpoint,
    invalid_format,
    invalid_weight_sum,
    missing_field,
    unknown_lb_method,
    unknown_region,
)
from atlas_xds.core.registry.endpoints import EndpointRegistry

from .report import ValidationReport


REQUIRED_FIELDS: Tuple[str, ...] = ("load_balancing_method", "timeout", "distribution")

CHECK_FIELDS = "fields"
CHECK_WEIGHTS = "weights"
CHECK_ENDPOINTS = "endpoints"
ALL_CHECKS: Tuple[str, ...] = (CHECK_FIELDS, CHECK_WEIGHTS, CHECK_ENDPOINTS)

EXPECTED_WEIGHT_SUM = 100

_IPV4_RE = re.compile(r"[0-9]{1,3}(\.[0-9]{1,3}){3}")


def _is_int(value: Any) -> bool:
    # bool é subclasse de int, mas não é um valor aceitável aqui
    return isinstance(value, int) and not isinstance(value, bool)


def is_valid_ipv4(value: Any) -> bool:
    """Quatro octetos decimais separados por ponto, cada um entre 0 e 255."""
    if not isinstance(value, str) or not _IPV4_RE.fullmatch(value):
        return False
    return all(int(octet) <= 255 for octet in value.split("."))


def is_valid_port(value: Any) -> bool:
    return _is_int(value) and 1 <= value <= 65535


def _timeout_pattern(units: Iterable[str]) -> "re.Pattern[str]":
    # unidades mais longas primeiro: "ms" antes de "s"
    ordered = sorted({str(u) for u in units}, key=lambda u: (-len(u), u))
    alternatives = "|".join(re.escape(u) for u in ordered)
    return re.compile(rf"([0-9]+)({alternatives})")


def is_valid_timeout(value: Any, units: Iterable[str] = ("s", "ms")) -> bool:
    if not isinstance(value, str):
        return False
    match = _timeout_pattern(units).fullmatch(value)
    return bool(match) and int(match.group(1)) > 0


def _validation_settings(config: Optional[Mapping[str, Any]]) -> Tuple[List[str], List[str]]:
    defaults = DEFAULT_CONFIG["validation"]
    section = dict((config or {}).get("validation", {}) or {})
    methods = section.get("known_load_balancing_methods", defaults["known_load_balancing_methods"])
    units = section.get("timeout_units", defaults["timeout_units"])
    return list(methods), list(units)


# ---------------------------------------------------------------------------
# Checagens individuais
# ---------------------------------------------------------------------------

def _check_required_fields(resolved: Mapping[str, Any], ctx: Dict[str, Any], report: ValidationReport) -> None:
    for name in REQUIRED_FIELDS:
        if resolved.get(name) is None:
            report.add(missing_field(field_path=name, context=ctx))


def _check_timeout(resolved: Mapping[str, Any], units: List[str], ctx: Dict[str, Any], report: ValidationReport) -> None:
    timeout = resolved.get("timeout")
    if timeout is None:
        return
    if not is_valid_timeout(timeout, units):
        expected = " or ".join(f"'<n>{u}'" for u in units)
        report.add(
            invalid_format(
                field_path="timeout",
                value=timeout,
                expected=expected,
                severity=SEVERITY_WARNING,
                context=ctx,
            )
        )


def _check_lb_method(resolved: Mapping[str, Any], known: List[str], ctx: Dict[str, Any], report: ValidationReport) -> None:
    method = resolved.get("load_balancing_method")
    if method is None:
        return
    if method not in known:
        report.add(unknown_lb_method(value=method, known=known, context=ctx))


def _check_region_entries(distribution: Mapping[str, Any], ctx: Dict[str, Any], report: ValidationReport) -> None:
    for region in sorted(distribution, key=str):
        entry = distribution[region]
        base = f"distribution.{region}"

        if not isinstance(region, str):
            report.add(
                invalid_format(
                    field_path=base,
                    value=region,
                    expected="region name (string)",
                    context=ctx,
                )
            )

        if not isinstance(entry, dict):
            report.add(
                invalid_format(
                    field_path=base,
                    value=entry,
                    expected="mapping with priority and weight",
                    context=ctx,
                )
            )
            continue

        if entry.get("priority") is None:
            report.add(missing_field(field_path=f"{base}.priority", context=ctx))
        elif not (_is_int(entry["priority"]) and entry["priority"] >= 0):
            report.add(
                invalid_format(
                    field_path=f"{base}.priority",
                    value=entry["priority"],
                    expected="non-negative integer",
                    context=ctx,
                )
            )

        if entry.get("weight") is None:
            report.add(missing_field(field_path=f"{base}.weight", context=ctx))
        elif not (_is_int(entry["weight"]) and entry["weight"] > 0):
            report.add(
                invalid_format(
                    field_path=f"{base}.weight",
                    value=entry["weight"],
                    expected="positive integer",
                    context=ctx,
                )
            )


def priority_partitions(distribution: Mapping[str, Any]) -> Dict[int, List[Tuple[str, int]]]:
    """
    Agrupa as regiões válidas da distribution por priority.

    Apenas entradas com nome de região textual, priority inteira não
    negativa e weight inteiro positivo participam. Regiões de cada
    partição são ordenadas por nome.
    """
    partitions: Dict[int, List[Tuple[str, int]]] = {}
    for region in sorted(distribution, key=str):
        entry = distribution[region]
        if not isinstance(region, str) or not isinstance(entry, dict):
            continue
        priority = entry.get("priority")
        weight = entry.get("weight")
        if not (_is_int(priority) and priority >= 0):
            continue
        if not (_is_int(weight) and weight > 0):
            continue
        partitions.setdefault(priority, []).append((region, weight))
    return partitions


def _check_weight_sums(distribution: Mapping[str, Any], ctx: Dict[str, Any], report: ValidationReport) -> None:
    partitions = priority_partitions(distribution)
    for priority in sorted(partitions):
        members = partitions[priority]
        total = sum(weight for _, weight in members)
        if total != EXPECTED_WEIGHT_SUM:
            report.add(
                invalid_weight_sum(
                    priority=priority,
                    weight_sum=total,
                    regions=[region for region, _ in members],
                    context=ctx,
                )
            )


def _check_endpoints(
    distribution: Mapping[str, Any],
    registry: EndpointRegistry,
    ctx: Dict[str, Any],
    report: ValidationReport,
) -> None:
    for region in sorted(distribution, key=str):
        if region not in registry:
            report.add(unknown_region(region=region, context=ctx))
            continue

        endpoints = registry[region]

        if not endpoints.ips:
            report.add(
                invalid_endpoint(
                    region=region,
                    message=f"Region '{region}' has no IP addresses",
                    context=ctx,
                )
            )

        for ip in endpoints.ips:
            if not is_valid_ipv4(ip):
                report.add(
                    invalid_endpoint(
                        region=region,
                        message=f"Invalid IP address '{ip}' in region '{region}'",
                        details={"ip": ip},
                        context=ctx,
                    )
                )

        if not is_valid_port(endpoints.port):
            report.add(
                invalid_endpoint(
                    region=region,
                    message=f"Invalid port '{endpoints.port}' in region '{region}' (must be 1-65535)",
                    details={"port": endpoints.port},
                    context=ctx,
                )
            )


# ---------------------------------------------------------------------------
# API pública
# ---------------------------------------------------------------------------

def select_checks(checks: Iterable[str]) -> List[str]:
    """
    Valida os grupos de checagem pedidos, preservando a ordem.

    Raises:
        ValueError: Se algum grupo for desconhecido.
    """
    selected = list(checks)
    unknown = set(selected) - set(ALL_CHECKS)
    if unknown:
        raise ValueError(f"Unknown validation checks: {sorted(unknown)}")
    return selected


def validate_registry(registry: EndpointRegistry) -> ValidationReport:
    """
    Checagem de nível registry: o mesmo IP em duas ou mais regiões.

    Cada IP duplicado gera um único warning nomeando todas as regiões que o
    utilizam (ordenadas). Repetições dentro da mesma região são ignoradas.
    """
    report = ValidationReport()
    regions_by_ip: Dict[str, set] = {}
    for region in registry.regions():
        for ip in registry[region].ips:
            regions_by_ip.setdefault(str(ip), set()).add(region)

    for ip in sorted(regions_by_ip):
        regions = regions_by_ip[ip]
        if len(regions) > 1:
            report.add(duplicate_endpoint_ip(ip=ip, regions=sorted(regions)))
    return report


def validate(
    resolved: Mapping[str, Any],
    registry: EndpointRegistry,
    *,
    context: Optional[Mapping[str, Any]] = None,
    checks: Iterable[str] = ALL_CHECKS,
    config: Optional[Mapping[str, Any]] = None,
    include_registry_checks: bool = True,
) -> ValidationReport:
    """
    Valida uma configuração resolvida contra o Endpoint Registry.

    Todas as checagens selecionadas são executadas, independentemente de
    falhas anteriores. Os inputs nunca são mutados.

    Args:
        resolved: Configuração resolvida da unidade.
        registry: Endpoint Registry (somente leitura).
        context: Identificação da unidade (`role`, `service`, `region`),
            anexada a cada achado.
        checks: Grupos de checagem a executar (padrão: todos).
        config: Configuração da ferramenta (seção `validation`).
        include_registry_checks: Executa a checagem 8 (nível registry).
            Em lotes, o pipeline a executa uma única vez e desliga aqui.

    Returns:
        ValidationReport: Achados acumulados (errors e warnings).

    Raises:
        ValueError: Se `checks` contiver um grupo desconhecido.
    """
    selected = set(select_checks(checks))

    known_methods, timeout_units = _validation_settings(config)
    ctx = dict(context or {})
    report = ValidationReport()

    distribution = resolved.get("distribution")
    dist_is_map = isinstance(distribution, dict)

    if CHECK_FIELDS in selected:
        _check_required_fields(resolved, ctx, report)
        _check_timeout(resolved, timeout_units, ctx, report)
        _check_lb_method(resolved, known_methods, ctx, report)
        if distribution is not None and not dist_is_map:
            report.add(
                invalid_format(
                    field_path="distribution",
                    value=distribution,
                    expected="mapping of region to {priority, weight}",
                    context=ctx,
                )
            )
        if dist_is_map:
            _check_region_entries(distribution, ctx, report)

    # execução parcial: a ausência de distribution ainda precisa ser reportada
    if CHECK_FIELDS not in selected and distribution is None:
        report.add(missing_field(field_path="distribution", context=ctx))

    if CHECK_WEIGHTS in selected and dist_is_map:
        _check_weight_sums(distribution, ctx, report)

    if CHECK_ENDPOINTS in selected:
        if dist_is_map:
            _check_endpoints(distribution, registry, ctx, report)
        if include_registry_checks:
            report.extend(validate_registry(registry))

    return report
