"""Endpoint Registry: mapeamento estático region → {ips, port}."""

from .endpoints import EndpointRegistry, RegionEndpoints, load_registry

__all__ = ["EndpointRegistry", "RegionEndpoints", "load_registry"]
