# src/atlas_xds/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Atlas XDS.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento de fragments, o carregamento da configuração da ferramenta
e a resolução em cascata (role → service → profile).

As exceções aqui definidas representam **violações estruturais
explícitas**, e não erros genéricos de execução.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais são fatais para a unidade em resolução
    - Mensagens de erro são claras e direcionadas ao operador

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa achado de validação (esses são acumulados)

Limites explícitos:
    - Não executa pipeline
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Atlas XDS.

    Todas as exceções levantadas durante carregamento, validação estrutural
    e resolução de configuração devem herdar desta classe.

    Limites explícitos:
        - Não representa achado de validação de distribuição
        - Não representa erro de renderização
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando um arquivo de configuração da ferramenta,
    informado explicitamente, não é encontrado.

    Decisões arquiteturais:
        - Um caminho explícito é sempre obrigatório
        - Não existe busca implícita por arquivos alternativos
    """


class FragmentNotFoundError(ConfigError):
    """
    Exceção levantada quando um fragment obrigatório não existe em disco.

    O fragment de profile define a unidade (role, service, region) e por
    isso é obrigatório; fragments de role e de service são opcionais em
    disco e, quando ausentes, equivalem a um fragment vazio.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo não é suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)

    Limites explícitos:
        - Não tenta inferir formato por conteúdo
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz de um arquivo não é um
    dicionário (`dict`).

    Invariantes:
        - Fragments e configuração são sempre mapas chave-valor
    """


class MissingFragmentError(ConfigError):
    """
    Exceção levantada quando um dos três níveis da cascata não é fornecido.

    A resolução exige os três níveis explicitamente (role, service e
    profile), mesmo que vazios. `None` em qualquer posição é rejeitado
    antes de qualquer merge.

    Atributos:
        tier: nome do nível ausente (`role`, `service` ou `profile`)
    """

    def __init__(self, tier: str):
        super().__init__(f"Fragment ausente para o nível '{tier}'")
        self.tier = tier


class TypeMismatchError(ConfigError):
    """
    Exceção levantada quando o merge encontra mapa e escalar no mesmo caminho.

    Exemplo de conflito:
        - base:     {"distribution": {"us-east-1": {...}}}
        - override: {"distribution": "us-east-1"}

    Decisões arquiteturais:
        - Escalar sobre escalar é sobrescrita (nunca erro)
        - Mapa contra não-mapa é conflito estrutural fatal

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito

    Atributos:
        path: caminho pontuado da chave em conflito (ex.: `distribution.a`)
    """

    def __init__(self, path: str, base_type: str, override_type: str):
        super().__init__(
            f"Conflito de tipo na chave '{path}': {base_type} vs {override_type}"
        )
        self.path = path
        self.base_type = base_type
        self.override_type = override_type


class RegistryFormatError(ConfigError):
    """
    Exceção levantada quando o documento do Endpoint Registry não possui a
    estrutura mínima esperada (`gateways` → region → {ips, port}).

    Limites explícitos:
        - Não valida IPs nem portas (responsabilidade do validator)
    """
