"""
Core do Atlas XDS.

Este pacote reúne a implementação canônica e independente de CLI do
Atlas XDS: resolução de configuração em cascata, validação de
distribuição, renderização de recursos e agregação por node.

O core é projetado para ser:
    - determinístico
    - testável de forma isolada
    - livre de dependências de terminal ou de ferramentas externas
    - orientado a contratos explícitos

Componentes principais:
    - config       → merge em três níveis, fragments, loader e hashing
    - registry     → Endpoint Registry
    - validation   → checagens de distribuição e endpoints
    - render       → documentos de cluster e load assignment
    - aggregate    → agrupamento por node e relatório de unicidade
    - pipeline     → protocolos de Step, contexto de execução e registry
    - engine       → planejamento (DAG) e execução controlada
    - traceability → Manifest e Event Log

Limites explícitos:
    - Não percorre diretórios (responsabilidade de `atlas_xds.io`)
    - Não faz parsing de argumentos de linha de comando
"""
