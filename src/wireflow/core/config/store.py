# src/wireflow/core/config/store.py
"""
ConfigStore — conjunto estático de chaves conhecidas pela cascata.

O store é a fonte única de verdade sobre quais chaves existem, seu tipo
declarado, seu default builtin e quais tiers podem sobrescrevê-las.
Resolver, loader e superfícies de inspeção consultam o store; nenhum
deles mantém sua própria lista de chaves.

Invariantes:
    - A ordem de iteração é a ordem de declaração em `CONFIG_KEYS`
    - O store não muda depois de construído

Limites explícitos:
    - Não lê fontes de tier
    - Não resolve valores
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

from .errors import UnknownConfigKeyError
from .keys import CONFIG_KEYS, ConfigKey


class ConfigStore:
    """Catálogo imutável de ConfigKey indexado por nome."""

    def __init__(self, keys: Optional[Iterable[ConfigKey]] = None):
        items = tuple(keys) if keys is not None else CONFIG_KEYS
        by_name: Dict[str, ConfigKey] = {}
        for k in items:
            if k.name in by_name:
                raise ValueError(f"Duplicate config key: {k.name}")
            by_name[k.name] = k
        self._keys: Tuple[ConfigKey, ...] = items
        self._by_name = by_name

    def __iter__(self) -> Iterator[ConfigKey]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def names(self) -> Tuple[str, ...]:
        return tuple(k.name for k in self._keys)

    def get(self, name: str) -> ConfigKey:
        if name not in self._by_name:
            raise UnknownConfigKeyError(name)
        return self._by_name[name]


DEFAULT_STORE = ConfigStore()
