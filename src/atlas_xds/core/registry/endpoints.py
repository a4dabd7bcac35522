"""
Endpoint Registry do Atlas XDS.

O Endpoint Registry é um mapeamento estático, fornecido externamente, de
nome de região para endpoints de rede (conjunto de IPs + porta):

    gateways:
      us-east-1:
        ips: ["10.0.0.1", "10.0.0.2"]
        port: 8443

Decisões arquiteturais:
    - O registry é somente-leitura após o carregamento (frozen)
    - O carregamento valida apenas estrutura (mapas e listas)
    - IPs e portas são preservados como vieram: a validação semântica é
      responsabilidade do Distribution Validator, que precisa enxergar os
      valores malformados para reportá-los

Limites explícitos:
    - Não resolve DNS
    - Não deduplica IPs
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Tuple

from atlas_xds.core.config.errors import RegistryFormatError
from atlas_xds.core.config.fragments import load_document
from atlas_xds.core.config.hashing import compute_config_hash


@dataclass(frozen=True)
class RegionEndpoints:
    """Endpoints de uma região: IPs (ordem preservada) e porta."""

    ips: Tuple[Any, ...]
    port: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"ips": list(self.ips), "port": self.port}


@dataclass(frozen=True)
class EndpointRegistry:
    """Mapeamento region → RegionEndpoints."""

    gateways: Dict[str, RegionEndpoints] = field(default_factory=dict)

    def __contains__(self, region: object) -> bool:
        return region in self.gateways

    def __getitem__(self, region: str) -> RegionEndpoints:
        return self.gateways[region]

    def __iter__(self) -> Iterator[str]:
        return iter(self.gateways)

    def __len__(self) -> int:
        return len(self.gateways)

    def regions(self) -> Tuple[str, ...]:
        return tuple(sorted(self.gateways))

    def to_dict(self) -> Dict[str, Any]:
        return {"gateways": {r: e.to_dict() for r, e in sorted(self.gateways.items())}}

    def fingerprint(self) -> str:
        return compute_config_hash(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EndpointRegistry":
        """
        Constrói o registry a partir de um documento já carregado.

        Estrutura esperada: `{"gateways": {region: {"ips": [...], "port": ...}}}`.

        Raises:
            RegistryFormatError: Se a estrutura mínima não for respeitada.
        """
        if not isinstance(data, dict) or "gateways" not in data:
            raise RegistryFormatError("Endpoint registry deve conter a chave 'gateways'")

        gateways = data["gateways"]
        if not isinstance(gateways, dict):
            raise RegistryFormatError(
                f"'gateways' deve ser dict, recebido: {type(gateways).__name__}"
            )

        parsed: Dict[str, RegionEndpoints] = {}
        for region, entry in gateways.items():
            if not isinstance(entry, dict):
                raise RegistryFormatError(f"Região '{region}' deve ser um mapa com ips/port")
            ips = entry.get("ips", [])
            if isinstance(ips, str) or not isinstance(ips, (list, tuple)):
                raise RegistryFormatError(f"Região '{region}': 'ips' deve ser uma lista")
            parsed[str(region)] = RegionEndpoints(ips=tuple(ips), port=entry.get("port"))

        return cls(gateways=parsed)


def load_registry(path: Path) -> EndpointRegistry:
    """Carrega o Endpoint Registry de um arquivo YAML/JSON."""
    return EndpointRegistry.from_dict(load_document(Path(path)))
