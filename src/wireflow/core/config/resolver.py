# src/wireflow/core/config/resolver.py
"""
ConfigResolver — resolução de precedência com pass-through e proveniência.

Este módulo implementa a regra central da cascata de configuração:

    Para cada chave, percorrer os tiers do menor para o maior.
    Uma atribuição não vazia sobrescreve o valor corrente e assume a
    propriedade da chave. Uma atribuição vazia ou ausente não faz nada
    (pass-through): o valor e o tier dono anteriores permanecem.

Política de resolução:
    - escalar → sobrescrita direta pelo tier mais alto com opinião
    - lista   → valor atômico (sem concatenação entre tiers)
    - nenhum tier com opinião → default builtin, dono `builtin`

Decisões arquiteturais:
    - Funções puras: nenhum I/O, nenhum estado global
    - O resultado é imutável depois de construído
    - A proveniência é parte do resultado, não um log paralelo

Invariantes:
    - O valor resolvido é o do tier de maior precedência com opinião
    - O tier dono é exatamente o tier que forneceu o valor
    - Entradas idênticas produzem ResolvedConfig idênticos

Limites explícitos:
    - Não lê arquivos
    - Não converte tipos (responsabilidade do loader)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Tuple

from .errors import UnknownConfigKeyError
from .hashing import canonical_json, compute_config_hash
from .keys import BUILTIN, ConfigKey, TierRef, is_empty
from .loader import TierSource
from .store import DEFAULT_STORE, ConfigStore


def _freeze(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


@dataclass(frozen=True)
class ResolvedValue:
    """Valor efetivo de uma chave e o tier que o forneceu."""

    value: Any
    tier: TierRef

    @property
    def source(self) -> str:
        return self.tier.label


def resolve(key: ConfigKey, tier_values: Sequence[Tuple[TierRef, Optional[Any]]]) -> ResolvedValue:
    """
    Resolve uma única chave a partir das contribuições de cada tier.

    Args:
        key: chave a resolver (fornece o default builtin).
        tier_values: pares (tier, valor). Valores vazios ou None são
            tratados como ausência de opinião. A ordem de entrada não
            importa: os pares são percorridos por precedência.

    Returns:
        ResolvedValue: valor efetivo e tier dono.
    """
    current = ResolvedValue(_freeze(key.default), BUILTIN)
    for ref, value in sorted(tier_values, key=lambda pair: pair[0].rank):
        if is_empty(value):
            continue
        current = ResolvedValue(_freeze(value), ref)
    return current


@dataclass(frozen=True)
class ResolvedConfig:
    """
    Configuração efetiva e imutável de um workflow.

    Acesso:
        cfg["model"]            → valor
        cfg.entry("model")      → ResolvedValue (valor + tier)
        cfg.to_dict()           → {chave: valor} serializável
        cfg.sources()           → {chave: rótulo do tier dono}
    """

    entries: Mapping[str, ResolvedValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __getitem__(self, name: str) -> Any:
        return self.entry(name).value

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def entry(self, name: str) -> ResolvedValue:
        if name not in self.entries:
            raise UnknownConfigKeyError(name)
        return self.entries[name]

    def get(self, name: str, default: Any = None) -> Any:
        if name not in self.entries:
            return default
        return self.entries[name].value

    def to_dict(self) -> Dict[str, Any]:
        return {name: _thaw(rv.value) for name, rv in self.entries.items()}

    def sources(self) -> Dict[str, str]:
        return {name: rv.source for name, rv in self.entries.items()}

    def canonical_json(self) -> str:
        return canonical_json(self.to_dict())

    def config_hash(self) -> str:
        return compute_config_hash(self.to_dict())


def resolve_all(
    sources: Sequence[TierSource],
    store: ConfigStore = DEFAULT_STORE,
) -> ResolvedConfig:
    """
    Resolve todas as chaves do store a partir de uma sequência de TierSource.

    Fontes vazias são aceitas; o builtin é implícito e não precisa ser
    passado.
    """
    entries: Dict[str, ResolvedValue] = {}
    for key in store:
        pairs = [(src.ref, src.values.get(key.name)) for src in sources]
        entries[key.name] = resolve(key, pairs)
    return ResolvedConfig(entries)


_PROFILE_KEYS = {
    "fast": "model_fast",
    "balanced": "model_balanced",
    "deep": "model_deep",
}


def effective_model(config: ResolvedConfig) -> str:
    """
    Modelo efetivo de um workflow.

    `model` explícito vence; caso contrário usa `model_<profile>`.
    Perfil desconhecido cai para `balanced`.
    """
    explicit = config.get("model")
    if not is_empty(explicit):
        return str(explicit)
    profile = str(config.get("profile") or "balanced")
    key = _PROFILE_KEYS.get(profile, "model_balanced")
    return str(config.get(key))
