"""
# Pipeline Core (Atlas XDS)

Este pacote define os **contratos canônicos** e as **estruturas
fundamentais** do pipeline de geração do Atlas XDS.

## Componentes

- **types**: `StepStatus`, `StepKind`, `StepResult`
- **step**: `Step` (Protocol)
- **context**: `RunContext` (artefatos, event log, report acumulado)
- **registry**: `StepRegistry` (unicidade de `step.id`)

## Princípios Fundamentais

- Steps **não conhecem** o Engine nem o planner
- Dependências são **explícitas e declarativas**
- Falhas de uma unidade **não interrompem** as demais
"""
