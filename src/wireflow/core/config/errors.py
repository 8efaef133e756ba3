# src/wireflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do WireFlow.

Este módulo define a hierarquia de exceções usada durante o parsing das
fontes de cada tier e a coerção de valores para o tipo declarado de cada
chave.

Diferente das falhas de grafo ou execução, quase todas as falhas de
configuração são **recuperadas localmente**: o loader converte a exceção
em um warning e trata a contribuição do tier (ou da chave) como vazia,
deixando que tiers de menor precedência forneçam o valor.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção daqui interrompe a resolução da cascata

Limites explícitos:
    - Não representa erro de grafo, dependência ou execução
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do WireFlow.

    Permite captura genérica de falhas de configuração, separando-as das
    falhas estruturais do grafo e das falhas de execução.
    """


class MalformedTierSourceError(ConfigError):
    """
    Exceção levantada quando a fonte de um tier não pode ser interpretada.

    Exemplos:
        - YAML sintaticamente inválido
        - raiz do documento que não é um mapeamento
        - valor aninhado (mapeamento dentro de mapeamento)

    Decisões arquiteturais:
        - O loader captura esta exceção e devolve um mapa vazio
        - A falha é reportada como warning, nunca como erro fatal
    """


class UnknownConfigKeyError(ConfigError, KeyError):
    """
    Exceção levantada ao consultar uma chave fora do conjunto fechado.

    O conjunto de chaves é estático; chaves desconhecidas em arquivos de
    tier geram apenas warning, mas consultas programáticas a chaves
    inexistentes são erro do chamador.
    """

    def __str__(self) -> str:
        return f"Chave de configuração desconhecida: {self.args[0]!r}"


class ConfigValueTypeError(ConfigError, ValueError):
    """
    Exceção levantada quando um valor não pode ser convertido para o tipo
    declarado da chave (ex.: `max_tokens: muitos`).

    O loader trata a chave como ausente naquele tier e registra warning.
    """
