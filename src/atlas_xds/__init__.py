"""
Atlas XDS: templating hierárquico de recursos de service discovery.

Este pacote raiz define o namespace público do Atlas XDS, uma biblioteca
que resolve configurações em cascata (role → service → profile) e as
materializa como descritores de cluster (CDS) e de load assignment (EDS).

Princípios centrais:
    - O merge de configuração é uma função pura e determinística
    - Validação acumula achados: nunca interrompe na primeira falha
    - Falhas são isoladas por unidade (role, service, region)
    - Rastreabilidade (event log + manifest) é requisito de primeira classe

Arquitetura em alto nível:
    - core.config       → merge, fragments, loader e hashing de configuração
    - core.registry     → Endpoint Registry (region → ips + port)
    - core.validation   → Distribution Validator e ValidationReport
    - core.render       → Resource Renderer (cluster + load assignment)
    - core.aggregate    → agrupamento por node e unicidade de nomes
    - core.pipeline     → protocolos, contexto de execução e registro de Steps
    - core.engine       → planejamento (DAG) e execução do pipeline
    - io                → convenções de diretório (input, build, nodes)
    - report            → resumos tabulares e relatório markdown
    - steps             → Steps canônicos do pipeline de geração

Limites explícitos:
    - Não depende de avaliadores externos de template
    - Não formata saída colorida de terminal
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
