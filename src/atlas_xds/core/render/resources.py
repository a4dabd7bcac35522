"""
Resource Renderer do Atlas XDS.

Materializa uma configuração resolvida + Endpoint Registry em dois
documentos por unidade (role, service, region):

    - cluster (CDS): identidade, timeout e referência ao load assignment
    - load assignment (EDS): grupos de endpoints por região da distribution

Identidade:
    compound name = "{role}.{region}.{service}"

O mesmo compound name é usado como `name` do cluster, como
`eds_cluster_config.service_name` e como `cluster_name` do load
assignment.

Decisões arquiteturais:
    - Grupos de endpoints são emitidos em ordem lexicográfica de região
      (saída determinística, estável para golden files)
    - Região ausente do registry é erro fatal da unidade (UnresolvedRegion)
    - O renderer não valida: espera uma configuração já validada

Limites explícitos:
    - Não escreve arquivos (ver `atlas_xds.io`)
    - Não verifica unicidade entre unidades (ver `core.aggregate`)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from atlas_xds.core.exceptions import IncompleteResolvedConfig, UnresolvedRegion
from atlas_xds.core.registry.endpoints import EndpointRegistry


CLUSTER_TYPE_URL = "type.googleapis.com/envoy.config.cluster.v3.Cluster"
LOAD_ASSIGNMENT_TYPE_URL = "type.googleapis.com/envoy.config.endpoint.v3.ClusterLoadAssignment"


def compound_name(role: str, service: str, region: str) -> str:
    return f"{role}.{region}.{service}"


def node_id(role: str, region: str) -> str:
    return f"{role}.{region}"


@dataclass(frozen=True)
class RenderedResource:
    """Par de documentos renderizados de uma unidade, com sua origem."""

    role: str
    service: str
    region: str
    cluster: Dict[str, Any]
    load_assignment: Dict[str, Any]
    source: Optional[str] = None

    @property
    def compound_name(self) -> str:
        return compound_name(self.role, self.service, self.region)

    @property
    def node_id(self) -> str:
        return node_id(self.role, self.region)

    @property
    def location(self) -> str:
        return self.source or f"{self.role}/services/{self.service}/{self.region}"


def _lb_endpoint(ip: Any, port: Any) -> Dict[str, Any]:
    return {
        "endpoint": {
            "address": {
                "socket_address": {
                    "address": ip,
                    "port_value": port,
                }
            }
        }
    }


def _require(resolved: Mapping[str, Any], key: str, name: str) -> Any:
    value = resolved.get(key)
    if value is None:
        raise IncompleteResolvedConfig(
            message=f"Resolved config for '{name}' is missing '{key}'",
            details={"cluster": name, "field": key},
            hint="Valide a configuração antes de renderizar.",
        )
    return value


def render(
    resolved: Mapping[str, Any],
    registry: EndpointRegistry,
    role: str,
    service: str,
    region: str,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Renderiza os documentos de cluster e load assignment de uma unidade.

    Args:
        resolved: Configuração resolvida (timeout e distribution obrigatórios).
        registry: Endpoint Registry.
        role, service, region: Identidade da unidade.

    Returns:
        Tuple[Dict, Dict]: (cluster_doc, load_assignment_doc).

    Raises:
        IncompleteResolvedConfig: Se faltar `timeout` ou `distribution`.
        UnresolvedRegion: Se uma região da distribution não existir no registry.
    """
    name = compound_name(role, service, region)
    timeout = _require(resolved, "timeout", name)
    distribution = _require(resolved, "distribution", name)
    if not isinstance(distribution, dict):
        raise IncompleteResolvedConfig(
            message=f"Resolved config for '{name}' has a non-mapping distribution",
            details={"cluster": name, "field": "distribution"},
        )

    cluster: Dict[str, Any] = {
        "@type": CLUSTER_TYPE_URL,
        "name": name,
        "connect_timeout": timeout,
        "type": "EDS",
        "eds_cluster_config": {
            "service_name": name,
            "eds_config": {"ads": {}},
        },
    }
    lb_method = resolved.get("load_balancing_method")
    if lb_method is not None:
        cluster["lb_policy"] = lb_method

    endpoints: List[Dict[str, Any]] = []
    for target in sorted(distribution, key=str):
        if target not in registry:
            raise UnresolvedRegion(
                message=f"Region '{target}' referenced by '{name}' is not in the endpoint registry",
                details={"cluster": name, "region": target},
                hint="Execute o validator antes de renderizar.",
            )
        entry = distribution[target]
        gateway = registry[target]
        endpoints.append(
            {
                "locality": {"region": target},
                "priority": entry.get("priority"),
                "load_balancing_weight": entry.get("weight"),
                "lb_endpoints": [_lb_endpoint(ip, gateway.port) for ip in gateway.ips],
            }
        )

    load_assignment: Dict[str, Any] = {
        "resources": [
            {
                "@type": LOAD_ASSIGNMENT_TYPE_URL,
                "cluster_name": name,
                "endpoints": endpoints,
            }
        ]
    }
    return cluster, load_assignment


def render_resource(
    resolved: Mapping[str, Any],
    registry: EndpointRegistry,
    role: str,
    service: str,
    region: str,
    *,
    source: Optional[str] = None,
) -> RenderedResource:
    """Atalho de `render` que devolve um `RenderedResource`."""
    cluster, load_assignment = render(resolved, registry, role, service, region)
    return RenderedResource(
        role=role,
        service=service,
        region=region,
        cluster=cluster,
        load_assignment=load_assignment,
        source=source,
    )


def parse_rendered(cluster: Mapping[str, Any], load_assignment: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Recupera, a partir dos documentos renderizados, os dados que os originaram.

    Returns:
        Dict com `name`, `cluster_name`, `timeout`, `distribution`
        (region → {priority, weight}) e `endpoints`
        (region → {ips, port}).
    """
    resources = load_assignment.get("resources") or []
    first = resources[0] if resources else {}

    distribution: Dict[str, Dict[str, Any]] = {}
    endpoints: Dict[str, Dict[str, Any]] = {}
    for group in first.get("endpoints", []) or []:
        target = (group.get("locality") or {}).get("region")
        distribution[target] = {
            "priority": group.get("priority"),
            "weight": group.get("load_balancing_weight"),
        }
        ips: List[Any] = []
        port: Any = None
        for lb in group.get("lb_endpoints", []) or []:
            socket = lb["endpoint"]["address"]["socket_address"]
            ips.append(socket["address"])
            port = socket["port_value"]
        endpoints[target] = {"ips": ips, "port": port}

    return {
        "name": cluster.get("name"),
        "cluster_name": first.get("cluster_name"),
        "timeout": cluster.get("connect_timeout"),
        "distribution": distribution,
        "endpoints": endpoints,
    }
