# tests/core/validation/test_distribution_validator.py
"""
Testes do Distribution Validator.

Os testes asseguram que:
- as oito checagens são independentes e todas executadas
- cada achado é classificado como error ou warning conforme a regra
- cada achado carrega o contexto (role, service, region) da unidade
- a soma de pesos é verificada por partição de priority
- os inputs nunca são mutados

Decisões arquiteturais:
    - Timeout malformado e método de load balancing desconhecido são
      apenas warnings
    - Entradas com priority/weight inválidos não participam da soma

Limites explícitos:
    - Não valida renderização
"""

import copy

import pytest

from atlas_xds.core.errors import (
    DUPLICATE_ENDPOINT_IP,
    INVALID_ENDPOINT,
    INVALID_FORMAT,
    INVALID_WEIGHT_SUM,
    MISSING_FIELD,
    UNKNOWN_LB_METHOD,
    UNKNOWN_REGION,
)
from atlas_xds.core.registry.endpoints import EndpointRegistry
from atlas_xds.core.validation.distribution import (
    CHECK_ENDPOINTS,
    CHECK_FIELDS,
    CHECK_WEIGHTS,
    is_valid_ipv4,
    is_valid_port,
    is_valid_timeout,
    priority_partitions,
    validate,
    validate_registry,
)
from atlas_xds.core.validation.report import ValidationReport


CTX = {"role": "edge", "service": "api", "region": "us-east-1"}


def _resolved(distribution=None, **overrides):
    doc = {
        "load_balancing_method": "ROUND_ROBIN",
        "timeout": "5s",
        "distribution": distribution
        if distribution is not None
        else {
            "us-east-1": {"priority": 0, "weight": 70},
            "us-west-2": {"priority": 0, "weight": 30},
        },
    }
    doc.update(overrides)
    return doc


def _types(report: ValidationReport):
    return [f.type for f in report.findings]


def test_valid_config_has_no_findings(registry):
    report = validate(_resolved(), registry, context=CTX)

    assert report.is_valid
    assert report.findings == []


def test_validate_does_not_mutate_inputs(registry, registry_doc):
    resolved = _resolved(timeout="bogus", distribution={"nowhere": {"priority": -1}})
    before = copy.deepcopy(resolved)

    validate(resolved, registry, context=CTX)

    assert resolved == before
    assert registry.to_dict() == EndpointRegistry.from_dict(registry_doc).to_dict()


@pytest.mark.parametrize("field_name", ["load_balancing_method", "timeout", "distribution"])
def test_missing_required_field_is_error(registry, field_name):
    resolved = _resolved()
    del resolved[field_name]

    report = validate(resolved, registry, context=CTX)

    missing = report.of_type(MISSING_FIELD)
    assert [f.details["field"] for f in missing] == [field_name]
    assert missing[0].is_error
    assert missing[0].context == CTX


def test_all_required_fields_missing_are_all_reported(registry):
    report = validate({}, registry, context=CTX)
    assert sorted(f.details["field"] for f in report.of_type(MISSING_FIELD)) == [
        "distribution",
        "load_balancing_method",
        "timeout",
    ]


@pytest.mark.parametrize("timeout", ["5", "5m", "0s", "-1s", "1.5s", "s", "5s\n", " 5s"])
def test_bad_timeout_is_warning(registry, timeout):
    report = validate(_resolved(timeout=timeout), registry, context=CTX)

    assert report.is_valid
    assert _types(report) == [INVALID_FORMAT]
    assert report.warnings[0].details["field"] == "timeout"


@pytest.mark.parametrize("timeout", ["5s", "250ms", "30s"])
def test_good_timeouts(timeout):
    assert is_valid_timeout(timeout)


def test_non_string_timeout_is_warning(registry):
    report = validate(_resolved(timeout=5), registry, context=CTX)
    assert report.is_valid
    assert _types(report) == [INVALID_FORMAT]


def test_unknown_lb_method_is_warning(registry):
    report = validate(_resolved(load_balancing_method="FASTEST"), registry, context=CTX)

    assert report.is_valid
    assert _types(report) == [UNKNOWN_LB_METHOD]
    assert report.warnings[0].details["value"] == "FASTEST"


def test_known_lb_methods_come_from_config(registry):
    config = {"validation": {"known_load_balancing_methods": ["FASTEST"]}}
    report = validate(_resolved(load_balancing_method="FASTEST"), registry, context=CTX, config=config)
    assert report.findings == []


@pytest.mark.parametrize(
    "entry, expected_field, expected_type",
    [
        ({"weight": 100}, "distribution.us-east-1.priority", MISSING_FIELD),
        ({"priority": 0}, "distribution.us-east-1.weight", MISSING_FIELD),
        ({"priority": -1, "weight": 100}, "distribution.us-east-1.priority", INVALID_FORMAT),
        ({"priority": "0", "weight": 100}, "distribution.us-east-1.priority", INVALID_FORMAT),
        ({"priority": 0, "weight": 0}, "distribution.us-east-1.weight", INVALID_FORMAT),
        ({"priority": 0, "weight": True}, "distribution.us-east-1.weight", INVALID_FORMAT),
        ({"priority": 0, "weight": 50.5}, "distribution.us-east-1.weight", INVALID_FORMAT),
    ],
)
def test_per_region_field_errors(registry, entry, expected_field, expected_type):
    report = validate(_resolved(distribution={"us-east-1": entry}), registry, context=CTX)

    region_findings = [f for f in report.errors if f.details.get("field") == expected_field]
    assert len(region_findings) == 1
    assert region_findings[0].type == expected_type
    # a entrada inválida não participa da soma de pesos
    assert report.of_type(INVALID_WEIGHT_SUM) == []


def test_non_mapping_distribution_is_error(registry):
    report = validate(_resolved(distribution=["us-east-1"]), registry, context=CTX)
    assert _types(report) == [INVALID_FORMAT]
    assert report.errors[0].details["field"] == "distribution"


def test_weight_sum_valid_partition(registry):
    report = validate(
        _resolved(distribution={"us-east-1": {"priority": 0, "weight": 70}, "us-west-2": {"priority": 0, "weight": 30}}),
        registry,
        context=CTX,
    )
    assert report.of_type(INVALID_WEIGHT_SUM) == []


def test_weight_sum_110_cites_priority_and_sum(registry):
    report = validate(
        _resolved(distribution={"us-east-1": {"priority": 0, "weight": 80}, "us-west-2": {"priority": 0, "weight": 30}}),
        registry,
        context=CTX,
    )

    sums = report.of_type(INVALID_WEIGHT_SUM)
    assert len(sums) == 1
    assert sums[0].details == {"priority": 0, "sum": 110, "regions": ["us-east-1", "us-west-2"]}
    assert "Priority 0" in sums[0].message
    assert "110" in sums[0].message


def test_weight_sum_is_checked_per_priority_partition(registry):
    distribution = {
        "eu-west-1": {"priority": 1, "weight": 90},
        "us-east-1": {"priority": 0, "weight": 60},
        "us-west-2": {"priority": 0, "weight": 40},
    }
    report = validate(_resolved(distribution=distribution), registry, context=CTX)

    sums = report.of_type(INVALID_WEIGHT_SUM)
    assert [f.details["priority"] for f in sums] == [1]
    assert sums[0].details["regions"] == ["eu-west-1"]


def test_every_failing_partition_is_reported(registry):
    distribution = {
        "eu-west-1": {"priority": 1, "weight": 90},
        "us-east-1": {"priority": 0, "weight": 10},
    }
    report = validate(_resolved(distribution=distribution), registry, context=CTX)
    assert [f.details["priority"] for f in report.of_type(INVALID_WEIGHT_SUM)] == [0, 1]


def test_priority_partitions_groups_valid_entries():
    partitions = priority_partitions(
        {
            "b": {"priority": 0, "weight": 50},
            "a": {"priority": 0, "weight": 50},
            "c": {"priority": 2, "weight": 100},
            "d": {"priority": 0, "weight": -5},
        }
    )
    assert partitions == {0: [("a", 50), ("b", 50)], 2: [("c", 100)]}


def test_unknown_region_is_single_error(registry):
    distribution = {"B": {"priority": 0, "weight": 100}}

    report = validate(_resolved(distribution=distribution), registry, context=CTX)

    unknown = report.of_type(UNKNOWN_REGION)
    assert len(unknown) == 1
    assert unknown[0].details["region"] == "B"
    assert "'B'" in unknown[0].message
    assert len(report.errors) == 1


def test_invalid_endpoints_are_errors():
    reg = EndpointRegistry.from_dict(
        {
            "gateways": {
                "bad-ip": {"ips": ["10.0.0.1", "256.0.0.1", "10.0.0"], "port": 80},
                "bad-port": {"ips": ["10.0.0.9"], "port": 70000},
                "no-ips": {"ips": [], "port": 80},
            }
        }
    )
    distribution = {
        "bad-ip": {"priority": 0, "weight": 40},
        "bad-port": {"priority": 0, "weight": 30},
        "no-ips": {"priority": 0, "weight": 30},
    }

    report = validate(_resolved(distribution=distribution), reg, context=CTX)

    endpoints = report.of_type(INVALID_ENDPOINT)
    assert sorted(f.details["region"] for f in endpoints) == ["bad-ip", "bad-ip", "bad-port", "no-ips"]
    assert all(f.is_error for f in endpoints)


def test_ip_with_trailing_newline_is_invalid_endpoint():
    reg = EndpointRegistry.from_dict({"gateways": {"A": {"ips": ["10.0.0.1\n"], "port": 80}}})

    report = validate(_resolved(distribution={"A": {"priority": 0, "weight": 100}}), reg, context=CTX)

    assert not report.is_valid
    assert _types(report) == [INVALID_ENDPOINT]
    assert report.errors[0].details["ip"] == "10.0.0.1\n"


def test_non_string_region_key_is_reported_not_raised(registry):
    distribution = {1: {"priority": 0, "weight": 100}, "us-east-1": {"priority": 0, "weight": 100}}

    report = validate(_resolved(distribution=distribution), registry, context=CTX)

    assert _types(report) == [INVALID_FORMAT, UNKNOWN_REGION]
    assert report.of_type(INVALID_FORMAT)[0].details["field"] == "distribution.1"
    assert priority_partitions(distribution) == {0: [("us-east-1", 100)]}


def test_duplicate_ip_across_regions_is_warning():
    reg = EndpointRegistry.from_dict(
        {
            "gateways": {
                "a": {"ips": ["10.0.0.1", "10.0.0.1"], "port": 80},
                "b": {"ips": ["10.0.0.1"], "port": 80},
                "c": {"ips": ["10.0.0.3"], "port": 80},
            }
        }
    )

    report = validate_registry(reg)

    assert _types(report) == [DUPLICATE_ENDPOINT_IP]
    assert report.warnings[0].details == {"ip": "10.0.0.1", "regions": ["a", "b"]}
    assert report.is_valid


def test_registry_check_can_be_excluded():
    reg = EndpointRegistry.from_dict(
        {"gateways": {"a": {"ips": ["10.0.0.1"], "port": 80}, "b": {"ips": ["10.0.0.1"], "port": 80}}}
    )
    resolved = _resolved(distribution={"a": {"priority": 0, "weight": 100}})

    assert _types(validate(resolved, reg)) == [DUPLICATE_ENDPOINT_IP]
    assert validate(resolved, reg, include_registry_checks=False).findings == []


def test_checks_are_not_short_circuited(registry):
    """
    Uma configuração com problemas em todas as checagens recebe todos os achados.
    """
    resolved = {
        "load_balancing_method": "FASTEST",
        "timeout": "soon",
        "distribution": {
            "nowhere": {"priority": 0, "weight": 10},
            "us-east-1": {"priority": 0},
        },
    }

    report = validate(resolved, registry, context=CTX)

    assert set(_types(report)) == {
        UNKNOWN_LB_METHOD,
        INVALID_FORMAT,
        MISSING_FIELD,
        INVALID_WEIGHT_SUM,
        UNKNOWN_REGION,
    }
    assert all(f.context == CTX for f in report.findings)


def test_check_groups_select_subsets(registry):
    resolved = {
        "timeout": "5s",
        "distribution": {"nowhere": {"priority": 0, "weight": 10}},
    }

    fields = validate(resolved, registry, checks=[CHECK_FIELDS])
    weights = validate(resolved, registry, checks=[CHECK_WEIGHTS])
    endpoints = validate(resolved, registry, checks=[CHECK_ENDPOINTS])

    assert _types(fields) == [MISSING_FIELD]
    assert _types(weights) == [INVALID_WEIGHT_SUM]
    assert _types(endpoints) == [UNKNOWN_REGION]


def test_partial_checks_still_report_missing_distribution(registry):
    report = validate({"timeout": "5s"}, registry, checks=[CHECK_WEIGHTS])
    assert [f.details["field"] for f in report.of_type(MISSING_FIELD)] == ["distribution"]


def test_unknown_check_group_is_rejected(registry):
    with pytest.raises(ValueError):
        validate(_resolved(), registry, checks=["colors"])


@pytest.mark.parametrize(
    "value, ok",
    [("0.0.0.0", True), ("255.255.255.255", True), ("256.1.1.1", False), ("1.2.3", False), (None, False), ("a.b.c.d", False), ("10.0.0.1\n", False), (" 10.0.0.1", False)],
)
def test_is_valid_ipv4(value, ok):
    assert is_valid_ipv4(value) is ok


@pytest.mark.parametrize("value, ok", [(1, True), (65535, True), (0, False), (65536, False), ("80", False), (True, False)])
def test_is_valid_port(value, ok):
    assert is_valid_port(value) is ok


def test_report_to_dict_counts(registry):
    report = validate(_resolved(timeout="soon", distribution={"B": {"priority": 0, "weight": 100}}), registry, context=CTX)

    data = report.to_dict()

    assert data["valid"] is False
    assert data["error_count"] == 1
    assert data["warning_count"] == 1
    assert data["errors"][0]["type"] == UNKNOWN_REGION
