# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas XDS.

Este módulo define fixtures reutilizáveis que fornecem:
- configuração mínima e determinística da ferramenta
- contexto de execução controlado (RunContext)
- Steps dummy para testes estruturais do engine
- Endpoint Registry de referência
- árvore de entrada completa (role → service → profile) em `tmp_path`

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Dados retornados são determinísticos e isolados
    - Steps dummy utilizam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Fixtures de filesystem escrevem apenas em `tmp_path`

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica de domínio
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml


# =====================================================
# Endpoint Registry + árvore de entrada
# =====================================================

REGISTRY_DOC = {
    "gateways": {
        "eu-west-1": {"ips": ["10.2.0.1"], "port": 9443},
        "us-east-1": {"ips": ["10.0.0.1", "10.0.0.2"], "port": 8443},
        "us-west-2": {"ips": ["10.1.0.1"], "port": 8443},
    }
}


def write_yaml(path: Path, data) -> Path:
    """Escreve `data` como YAML (None → arquivo vazio), criando os diretórios."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("" if data is None else yaml.safe_dump(data, sort_keys=True), encoding="utf-8")
    return path


@pytest.fixture
def registry_doc() -> dict:
    """
    Documento do Endpoint Registry com três regiões válidas e sem IPs repetidos.

    Returns:
        dict: Estrutura `gateways → region → {ips, port}`.
    """
    import copy

    return copy.deepcopy(REGISTRY_DOC)


@pytest.fixture
def registry(registry_doc):
    from atlas_xds.core.registry.endpoints import EndpointRegistry

    return EndpointRegistry.from_dict(registry_doc)


@pytest.fixture
def input_tree(tmp_path) -> Path:
    """
    Fixture que materializa uma árvore de entrada completa em `tmp_path/in`.

    Estrutura:

        in/endpoints.yaml
        in/edge/defaults.yaml                               (lb + timeout)
        in/edge/services/api/common.yaml                    (distribution 60/40)
        in/edge/services/api/us-east-1/profile.yaml         (timeout "2s")
        in/edge/services/api/us-west-2/profile.yaml         (vazio)
        in/edge/services/auth/common.yaml                   (distribution 100)
        in/edge/services/auth/eu-west-1/profile.yaml        (LEAST_REQUEST)

    Decisões arquiteturais:
        - Três unidades válidas, três nodes distintos
        - Um profile vazio exercita o fragment vazio `{}`
        - Nenhum achado (error ou warning) é esperado nesta árvore

    Returns:
        Path: Diretório de entrada.
    """
    root = tmp_path / "in"
    write_yaml(root / "endpoints.yaml", REGISTRY_DOC)
    write_yaml(root / "edge" / "defaults.yaml", {"load_balancing_method": "ROUND_ROBIN", "timeout": "5s"})

    api = root / "edge" / "services" / "api"
    write_yaml(
        api / "common.yaml",
        {
            "distribution": {
                "us-east-1": {"priority": 0, "weight": 60},
                "us-west-2": {"priority": 0, "weight": 40},
            }
        },
    )
    write_yaml(api / "us-east-1" / "profile.yaml", {"timeout": "2s"})
    write_yaml(api / "us-west-2" / "profile.yaml", None)

    auth = root / "edge" / "services" / "auth"
    write_yaml(auth / "common.yaml", {"distribution": {"eu-west-1": {"priority": 0, "weight": 100}}})
    write_yaml(auth / "eu-west-1" / "profile.yaml", {"load_balancing_method": "LEAST_REQUEST"})

    return root


# =====================================================
# Pipeline fixtures (Step + RunContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima já resolvida para testes do engine e do RunContext.

    Invariantes:
        - `fail_fast` explicitamente habilitado
        - Nenhum Step configurado
    """
    return {
        "engine": {"fail_fast": True},
        "steps": {},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    Fixture que fornece um RunContext determinístico para testes.

    Decisões arquiteturais:
        - `run_id` e `created_at` são fixos para garantir determinismo
        - O registry não é carregado: Steps reais o carregam em ingest

    Returns:
        RunContext: Contexto de execução isolado e previsível.
    """
    from atlas_xds.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def DummyStep():
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de um Step.

    A implementação retornada:
    - expõe os atributos obrigatórios (`id`, `kind`, `depends_on`)
    - implementa `run(ctx)` registrando um artefato `<id>.ok`

    Invariantes:
        - Sempre retorna StepResult com status SUCCESS
        - Não executa I/O

    Returns:
        type: Classe _DummyStep que pode ser instanciada pelos testes.
    """
    from atlas_xds.core.pipeline.types import StepKind, StepResult, StepStatus

    class _DummyStep:
        def __init__(
            self,
            step_id: str = "ingest.profiles",
            kind: StepKind = StepKind.INGEST,
            depends_on=None,
        ):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []

        def run(self, ctx):
            ctx.set_artifact(f"{self.id}.ok", True)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                metrics={},
                warnings=[],
                artifacts={"ok": f"{self.id}.ok"},
                payload={"note": "dummy"},
            )

    return _DummyStep


@pytest.fixture
def yaml_writer():
    """Devolve `write_yaml` para testes que montam árvores próprias."""
    return write_yaml
