# src/wireflow/core/config/__init__.py

"""
Camada de configuração do WireFlow.

Este pacote contém as estruturas e utilitários responsáveis por declarar
as chaves conhecidas, carregar as fontes de cada tier e resolver a
configuração efetiva de um workflow com proveniência por chave.

A configuração no WireFlow é:
    - declarativa (YAML plano, lido com `yaml.safe_load`)
    - em cascata (builtin < global < ancestor < project < workflow < cli)
    - com pass-through (valor vazio herda do tier anterior)
    - rastreável (cada valor sabe de qual tier veio)

Invariantes:
    - A configuração resolvida é imutável
    - A mesma entrada sempre produz a mesma configuração final
    - Falhas em fontes de tier nunca interrompem a resolução

Limites explícitos:
    - Não constrói grafo nem executa workflows
"""

from .errors import (
    ConfigError,
    ConfigValueTypeError,
    MalformedTierSourceError,
    UnknownConfigKeyError,
)
from .hashing import canonical_json, compute_config_hash, hash_file
from .keys import BUILTIN, CONFIG_KEYS, ConfigKey, KeyKind, Tier, TierRef, get_key, is_empty
from .loader import TierLoader, TierSource, load_tier, parse_tier_text
from .resolver import ResolvedConfig, ResolvedValue, effective_model, resolve, resolve_all
from .store import DEFAULT_STORE, ConfigStore

__all__ = [
    "BUILTIN",
    "CONFIG_KEYS",
    "ConfigError",
    "ConfigKey",
    "ConfigStore",
    "ConfigValueTypeError",
    "DEFAULT_STORE",
    "KeyKind",
    "MalformedTierSourceError",
    "ResolvedConfig",
    "ResolvedValue",
    "Tier",
    "TierLoader",
    "TierRef",
    "TierSource",
    "UnknownConfigKeyError",
    "canonical_json",
    "compute_config_hash",
    "effective_model",
    "get_key",
    "hash_file",
    "is_empty",
    "load_tier",
    "parse_tier_text",
    "resolve",
    "resolve_all",
]
