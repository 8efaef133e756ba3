# src/wireflow/core/config/loader.py
"""
TierLoader — leitura declarativa das fontes de cada tier da cascata.

Este módulo transforma uma fonte de tier (arquivo YAML/JSON ou mapeamento
fornecido pelo chamador) em um mapa parcial `chave → valor` já convertido
para o tipo declarado de cada chave.

Formato aceito:
    - mapeamento plano no nível raiz
    - chaves do conjunto fechado (snake_case; MAIÚSCULAS e hífens também
      são aceitos e normalizados)
    - valores escalares ou listas de escalares

Política de falhas:
    - fonte inexistente        → tier vazio, sem warning
    - fonte malformada         → tier vazio + warning
    - chave desconhecida       → chave ignorada + warning
    - chave fora do seu tier   → chave ignorada + warning
    - valor não conversível    → chave tratada como ausente + warning
    - valor vazio (null, "", []) → chave tratada como ausente, registrada
      em `explicit_empty`

Decisões arquiteturais:
    - Nenhum código é executado: YAML é lido com `yaml.safe_load`
    - Falhas de tier nunca interrompem a resolução
    - Warnings são emitidos no logger do módulo e devolvidos ao chamador

Invariantes:
    - `TierSource.values` nunca contém valores vazios
    - A mesma fonte sempre produz o mesmo TierSource

Limites explícitos:
    - Não resolve precedência entre tiers
    - Não descobre onde as fontes ficam no disco
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

import yaml  # PyYAML

from .errors import ConfigValueTypeError, MalformedTierSourceError
from .keys import TierRef
from .store import DEFAULT_STORE, ConfigStore

logger = logging.getLogger(__name__)


TierInput = Union[None, str, Path, Mapping[str, Any]]


@dataclass(frozen=True)
class TierSource:
    """
    Contribuição parcial de um tier para a cascata.

    Campos:
        - ref: tier de origem (com caminho, quando houver)
        - values: chaves com opinião não vazia, já convertidas
        - warnings: problemas não fatais encontrados na leitura
        - explicit_empty: chaves presentes na fonte com valor vazio
    """

    ref: TierRef
    values: Mapping[str, Any] = field(default_factory=dict)
    warnings: Tuple[str, ...] = ()
    explicit_empty: FrozenSet[str] = frozenset()

    @property
    def label(self) -> str:
        return self.ref.label


def parse_tier_text(text: str, *, fmt: str = "yaml") -> Dict[str, Any]:
    """
    Interpreta o texto de uma fonte de tier e devolve o mapeamento bruto.

    Args:
        text: conteúdo da fonte.
        fmt: "yaml" ou "json".

    Returns:
        Dict[str, Any]: mapeamento bruto (sem coerção).

    Raises:
        MalformedTierSourceError: sintaxe inválida ou raiz que não é mapeamento.
    """
    try:
        if fmt == "json":
            data = json.loads(text) if text.strip() else None
        else:
            data = yaml.safe_load(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise MalformedTierSourceError(f"Sintaxe inválida ({fmt}): {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise MalformedTierSourceError(
            f"Raiz da configuração deve ser um mapeamento, recebido: {type(data).__name__}"
        )

    return data


def _normalize_key(raw_key: Any) -> str:
    return str(raw_key).strip().lower().replace("-", "_")


class TierLoader:
    """
    Carrega fontes de tier e valida cada chave contra o ConfigStore.

    Uso típico:
        loader = TierLoader()
        src = loader.load(Path(".workflow/config.yaml"), TierRef(Tier.PROJECT))
    """

    def __init__(self, store: ConfigStore = DEFAULT_STORE):
        self.store = store

    def load(self, source: TierInput, ref: TierRef) -> TierSource:
        """
        Carrega uma fonte de tier de qualquer formato suportado.

        - None              → tier vazio
        - str / Path        → arquivo YAML (.yaml/.yml) ou JSON (.json)
        - Mapping           → valores já estruturados (ex.: flags de CLI)
        """
        if source is None:
            return TierSource(ref=ref)
        if isinstance(source, (str, Path)):
            return self.load_file(Path(source), ref)
        if isinstance(source, Mapping):
            return self.load_mapping(source, ref)
        raise TypeError(f"Fonte de tier não suportada: {type(source).__name__}")

    def load_file(self, path: Path, ref: TierRef) -> TierSource:
        if ref.source is None:
            ref = TierRef(ref.tier, ref.index, str(path))

        if not path.is_file():
            return TierSource(ref=ref)

        fmt = "json" if path.suffix.lower() == ".json" else "yaml"
        try:
            text = path.read_text(encoding="utf-8")
            raw = parse_tier_text(text, fmt=fmt)
        except (OSError, UnicodeDecodeError, MalformedTierSourceError) as e:
            msg = f"{ref.label}: fonte ignorada ({path}): {e}"
            logger.warning(msg)
            return TierSource(ref=ref, warnings=(msg,))

        return self.load_mapping(raw, ref)

    def load_mapping(self, raw: Mapping[str, Any], ref: TierRef) -> TierSource:
        values: Dict[str, Any] = {}
        warnings: List[str] = []
        empty: set = set()

        def warn(msg: str) -> None:
            full = f"{ref.label}: {msg}"
            logger.warning(full)
            warnings.append(full)

        for raw_key, raw_value in raw.items():
            name = _normalize_key(raw_key)

            if name not in self.store:
                warn(f"chave desconhecida ignorada: {raw_key!r}")
                continue

            key = self.store.get(name)
            if not key.accepts(ref.tier):
                warn(f"chave {name!r} não pode ser definida no tier {ref.tier.value}")
                continue

            if isinstance(raw_value, Mapping):
                warn(f"valor aninhado não suportado em {name!r}")
                continue

            try:
                value = key.coerce(raw_value)
            except ConfigValueTypeError as e:
                warn(f"valor inválido ignorado: {e}")
                continue

            if value is None:
                empty.add(name)
                values.pop(name, None)
                continue

            empty.discard(name)
            values[name] = value

        return TierSource(
            ref=ref,
            values=values,
            warnings=tuple(warnings),
            explicit_empty=frozenset(empty),
        )


def load_tier(source: TierInput, ref: TierRef, store: Optional[ConfigStore] = None) -> TierSource:
    """Atalho funcional para `TierLoader(store).load(source, ref)`."""
    return TierLoader(store or DEFAULT_STORE).load(source, ref)
