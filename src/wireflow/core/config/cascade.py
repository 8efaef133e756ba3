# src/wireflow/core/config/cascade.py
"""
Coleta das fontes de tier de um projeto e resolução por workflow.

Este módulo conecta o layout de projeto ao loader e ao resolver:

    builtin  → defaults de `CONFIG_KEYS` (implícito)
    global   → $WIREFLOW_CONFIG_DIR/config.yaml
               | $XDG_CONFIG_HOME/wireflow/config.yaml
               | ~/.config/wireflow/config.yaml
    ancestor → .workflow/config.yaml de cada projeto envolvente (externo primeiro)
    project  → <raiz>/.workflow/config.yaml
    workflow → <raiz>/.workflow/run/<id>/config.yaml
    cli      → mapeamento fornecido pelo chamador (apenas para o alvo)

Decisões arquiteturais:
    - Fontes de nível de projeto (global, ancestors, project) são lidas uma
      única vez por cascata e reaproveitadas por todos os workflows
    - Overrides de CLI se aplicam somente ao workflow alvo; dependências
      são resolvidas apenas com a configuração de projeto e a própria
    - Warnings de cada fonte são agregados por workflow

Limites explícitos:
    - Não constrói o grafo de dependências
    - Não cacheia resultados entre execuções
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from wireflow.core.project import CONFIG_FILENAME, Project

from .keys import Tier, TierRef
from .loader import TierLoader, TierSource
from .resolver import ResolvedConfig, resolve_all
from .store import DEFAULT_STORE, ConfigStore


def global_config_path(env: Optional[Mapping[str, str]] = None) -> Path:
    """Caminho do arquivo de configuração global do usuário."""
    env = os.environ if env is None else env
    explicit = env.get("WIREFLOW_CONFIG_DIR")
    if explicit:
        return Path(explicit) / CONFIG_FILENAME
    xdg = env.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "wireflow" / CONFIG_FILENAME
    return Path.home() / ".config" / "wireflow" / CONFIG_FILENAME


class ConfigCascade:
    """
    Resolve a configuração efetiva de workflows de um projeto.

    Uso típico:
        cascade = ConfigCascade(project, cli_overrides={"model": "x"})
        cfg = cascade.resolve("report", cli=True)
    """

    def __init__(
        self,
        project: Project,
        *,
        cli_overrides: Optional[Mapping[str, Any]] = None,
        store: ConfigStore = DEFAULT_STORE,
        global_config: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.project = project
        self.store = store
        self.loader = TierLoader(store)
        self.cli_overrides: Dict[str, Any] = dict(cli_overrides or {})
        self.global_config = global_config if global_config is not None else global_config_path(env)
        self._base: Optional[List[TierSource]] = None
        self._warnings: Dict[str, List[str]] = {}

    def base_sources(self) -> List[TierSource]:
        """Fontes global, ancestors e project (lidas uma vez)."""
        if self._base is None:
            sources = [self.loader.load(self.global_config, TierRef(Tier.GLOBAL))]
            for i, ancestor in enumerate(self.project.ancestors()):
                sources.append(
                    self.loader.load(ancestor.config_file, TierRef(Tier.ANCESTOR, i))
                )
            sources.append(self.loader.load(self.project.config_file, TierRef(Tier.PROJECT)))
            self._base = sources
        return list(self._base)

    def sources_for(self, workflow_id: Optional[str], *, cli: bool = False) -> List[TierSource]:
        sources = self.base_sources()
        if workflow_id is not None:
            sources.append(
                self.loader.load(
                    self.project.workflow_config_file(workflow_id),
                    TierRef(Tier.WORKFLOW),
                )
            )
        if cli and self.cli_overrides:
            sources.append(self.loader.load(self.cli_overrides, TierRef(Tier.CLI, source="command line")))
        return sources

    def resolve(self, workflow_id: Optional[str] = None, *, cli: bool = False) -> ResolvedConfig:
        """
        Resolve a configuração efetiva de `workflow_id` (ou do projeto,
        quando None). `cli=True` aplica os overrides de linha de comando.
        """
        sources = self.sources_for(workflow_id, cli=cli)
        self._warnings[workflow_id or ""] = [w for s in sources for w in s.warnings]
        return resolve_all(sources, self.store)

    def warnings_for(self, workflow_id: Optional[str] = None) -> List[str]:
        return list(self._warnings.get(workflow_id or "", []))

    def explain(self, workflow_id: Optional[str] = None, *, cli: bool = False) -> Tuple[ResolvedConfig, List[TierSource]]:
        """Configuração resolvida junto com as fontes que a produziram."""
        sources = self.sources_for(workflow_id, cli=cli)
        return resolve_all(sources, self.store), sources
