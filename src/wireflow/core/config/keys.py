# src/wireflow/core/config/keys.py
"""
Catálogo fechado de chaves de configuração e tiers de precedência.

Este módulo define os tipos estáticos da cascata de configuração:

    - Tier      → níveis de precedência (builtin < global < ancestor < project < workflow < cli)
    - TierRef   → referência concreta a um tier (ancestors carregam índice e origem)
    - KeyKind   → tipo declarado de uma chave (string, número, booleano, lista)
    - ConfigKey → chave com default builtin e tiers autorizados a sobrescrevê-la

Decisões arquiteturais:
    - O conjunto de chaves é fechado; não existe extensão por usuário
    - Listas são valores atômicos: um tier fornece a lista inteira ou nada
    - Valores vazios (None, "", []) significam "sem opinião"

Invariantes:
    - A ordem entre tiers é total e estável
    - Ancestors são ordenados do mais antigo (externo) para o mais novo
    - Todo default builtin já está no tipo declarado da chave

Limites explícitos:
    - Não lê arquivos
    - Não resolve a cascata
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigValueTypeError, UnknownConfigKeyError


class Tier(str, Enum):
    """Níveis de precedência da cascata, do menor para o maior."""

    BUILTIN = "builtin"
    GLOBAL = "global"
    ANCESTOR = "ancestor"
    PROJECT = "project"
    WORKFLOW = "workflow"
    CLI = "cli"


TIER_ORDER: Dict[Tier, int] = {
    Tier.BUILTIN: 0,
    Tier.GLOBAL: 1,
    Tier.ANCESTOR: 2,
    Tier.PROJECT: 3,
    Tier.WORKFLOW: 4,
    Tier.CLI: 5,
}


@dataclass(frozen=True)
class TierRef:
    """
    Referência concreta a um tier da cascata.

    Para a maioria dos tiers existe uma única instância por resolução.
    Ancestors são múltiplos: `index` 0 é o projeto mais externo, e índices
    maiores estão mais próximos do projeto atual.

    Campos:
        - tier: nível de precedência
        - index: posição entre ancestors (0 para os demais tiers)
        - source: caminho ou descrição da origem (não participa da ordem)
    """

    tier: Tier
    index: int = 0
    source: Optional[str] = field(default=None, compare=False)

    @property
    def rank(self) -> Tuple[int, int]:
        return (TIER_ORDER[self.tier], self.index)

    @property
    def label(self) -> str:
        if self.tier is Tier.ANCESTOR:
            return f"ancestor[{self.index}]"
        return self.tier.value

    def __lt__(self, other: "TierRef") -> bool:
        return self.rank < other.rank


BUILTIN = TierRef(Tier.BUILTIN)


class KeyKind(str, Enum):
    """Tipo declarado de uma chave de configuração."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    LIST = "list"


_ALL_TIERS = (Tier.GLOBAL, Tier.ANCESTOR, Tier.PROJECT, Tier.WORKFLOW, Tier.CLI)
_PROJECT_TIERS = (Tier.ANCESTOR, Tier.PROJECT, Tier.WORKFLOW, Tier.CLI)
_WORKFLOW_TIERS = (Tier.WORKFLOW, Tier.CLI)


@dataclass(frozen=True)
class ConfigKey:
    """
    Chave de configuração com tipo declarado, default builtin e os tiers
    que podem sobrescrevê-la.

    Atributos:
        - name: identificador estável (snake_case, igual ao usado nos arquivos)
        - kind: tipo declarado
        - default: valor builtin (pode ser vazio)
        - tiers: tiers autorizados, em ordem de precedência
        - description: texto curto para inspeção
    """

    name: str
    kind: KeyKind
    default: Any
    tiers: Tuple[Tier, ...] = _ALL_TIERS
    description: str = ""

    def accepts(self, tier: Tier) -> bool:
        return tier in self.tiers

    def coerce(self, raw: Any) -> Any:
        """
        Converte um valor bruto para o tipo declarado da chave.

        Valores vazios são normalizados para `None` ("sem opinião").
        Strings em chaves LIST são divididas por vírgula ou espaço,
        preservando a ordem.

        Raises:
            ConfigValueTypeError: se o valor não é conversível.
        """
        if is_empty(raw):
            return None

        if self.kind is KeyKind.LIST:
            if isinstance(raw, str):
                items = [p for p in raw.replace(",", " ").split() if p]
            elif isinstance(raw, (list, tuple)):
                items = []
                for item in raw:
                    if isinstance(item, (dict, list, tuple)):
                        raise ConfigValueTypeError(
                            f"{self.name}: itens de lista devem ser escalares, recebido {type(item).__name__}"
                        )
                    if item is None or str(item) == "":
                        continue
                    items.append(str(item))
            else:
                items = [str(raw)]
            return tuple(items) or None

        if isinstance(raw, (dict, list, tuple)):
            raise ConfigValueTypeError(
                f"{self.name}: esperado valor escalar ({self.kind.value}), recebido {type(raw).__name__}"
            )

        if self.kind is KeyKind.BOOLEAN:
            if isinstance(raw, bool):
                return raw
            text = str(raw).strip().lower()
            if text in {"true", "yes", "on", "1"}:
                return True
            if text in {"false", "no", "off", "0"}:
                return False
            raise ConfigValueTypeError(f"{self.name}: booleano inválido: {raw!r}")

        if self.kind is KeyKind.NUMBER:
            if isinstance(raw, bool):
                raise ConfigValueTypeError(f"{self.name}: número inválido: {raw!r}")
            if isinstance(raw, (int, float)):
                return raw
            text = str(raw).strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                return float(text)
            except ValueError:
                raise ConfigValueTypeError(f"{self.name}: número inválido: {raw!r}") from None

        return str(raw)


def is_empty(value: Any) -> bool:
    """Retorna True quando o valor representa "sem opinião" na cascata."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


CONFIG_KEYS: Tuple[ConfigKey, ...] = (
    ConfigKey("profile", KeyKind.STRING, "balanced",
              description="Perfil de modelo: fast, balanced ou deep"),
    ConfigKey("model_fast", KeyKind.STRING, "claude-haiku-4-5",
              description="Modelo do perfil fast"),
    ConfigKey("model_balanced", KeyKind.STRING, "claude-sonnet-4-5",
              description="Modelo do perfil balanced"),
    ConfigKey("model_deep", KeyKind.STRING, "claude-opus-4-5",
              description="Modelo do perfil deep"),
    ConfigKey("model", KeyKind.STRING, "",
              description="Modelo explícito; vazio usa o perfil"),
    ConfigKey("enable_thinking", KeyKind.BOOLEAN, False),
    ConfigKey("thinking_budget", KeyKind.NUMBER, 10000),
    ConfigKey("effort", KeyKind.STRING, "high"),
    ConfigKey("temperature", KeyKind.NUMBER, 1.0),
    ConfigKey("max_tokens", KeyKind.NUMBER, 16000),
    ConfigKey("enable_citations", KeyKind.BOOLEAN, False),
    ConfigKey("output_format", KeyKind.STRING, "md",
              description="Extensão do arquivo de saída"),
    ConfigKey("system_prompts", KeyKind.LIST, ("base",),
              description="Prompts de sistema concatenados, em ordem"),
    ConfigKey("context_pattern", KeyKind.STRING, "", _PROJECT_TIERS),
    ConfigKey("context_files", KeyKind.LIST, (), _PROJECT_TIERS),
    ConfigKey("depends_on", KeyKind.LIST, (), _WORKFLOW_TIERS,
              description="Workflows cujas saídas este workflow consome"),
    ConfigKey("input_pattern", KeyKind.STRING, "", _WORKFLOW_TIERS),
    ConfigKey("input_files", KeyKind.LIST, (), _WORKFLOW_TIERS),
    ConfigKey("export_file", KeyKind.STRING, "", _WORKFLOW_TIERS),
)

_KEYS_BY_NAME: Dict[str, ConfigKey] = {k.name: k for k in CONFIG_KEYS}


def get_key(name: str) -> ConfigKey:
    """Retorna a ConfigKey pelo nome, ou levanta UnknownConfigKeyError."""
    try:
        return _KEYS_BY_NAME[name]
    except KeyError:
        raise UnknownConfigKeyError(name) from None
