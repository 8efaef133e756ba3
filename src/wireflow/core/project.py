# src/wireflow/core/project.py
"""
Layout de projeto do WireFlow.

Um projeto é qualquer diretório que contém `.workflow/`. Dentro dele:

    .workflow/
        config.yaml            → tier `project`
        project.txt            → descrição livre do projeto
        output/                → saídas publicadas por workflow
        run/<id>/
            config.yaml        → tier `workflow`
            task.txt           → tarefa do workflow
            execution.json     → Execution Log (último sucesso)

Projetos podem estar aninhados: todo projeto acima do atual é um
*ancestor*, e contribui um tier `ancestor[i]` para a cascata (0 é o
mais externo).

Responsabilidades do módulo:
    - Descobrir a raiz do projeto e seus ancestors
    - Expor caminhos canônicos por workflow
    - Listar workflows existentes
    - Resolver padrões glob de input/contexto relativos à raiz
    - Criar o esqueleto de projeto e de workflow

Limites explícitos:
    - Não lê configuração (ver `wireflow.core.config.cascade`)
    - Não decide staleness nem executa workflows
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from wireflow.core.exceptions import (
    InvalidWorkflowNameError,
    ProjectNotFoundError,
    WorkflowExistsError,
)

WORKFLOW_DIRNAME = ".workflow"
CONFIG_FILENAME = "config.yaml"
TASK_FILENAME = "task.txt"
EXECUTION_LOG_FILENAME = "execution.json"
PROJECT_DESCRIPTION_FILENAME = "project.txt"

_PROJECT_CONFIG_TEMPLATE = """\
# WireFlow project configuration.
# Empty values inherit from the global configuration and builtin defaults.
#
# profile: balanced
# model: ""
# temperature: 1.0
# max_tokens: 16000
# system_prompts: [base]
# context_pattern: ""
# context_files: []
"""

_WORKFLOW_CONFIG_TEMPLATE = """\
# Workflow configuration. Empty values inherit from the project.
#
# depends_on: []
# input_pattern: ""
# input_files: []
# export_file: ""
# output_format: md
"""


@dataclass(frozen=True)
class Project:
    """Raiz de um projeto WireFlow e seus caminhos canônicos."""

    root: Path

    @property
    def workflow_root(self) -> Path:
        return self.root / WORKFLOW_DIRNAME

    @property
    def config_file(self) -> Path:
        return self.workflow_root / CONFIG_FILENAME

    @property
    def description_file(self) -> Path:
        return self.workflow_root / PROJECT_DESCRIPTION_FILENAME

    @property
    def run_dir(self) -> Path:
        return self.workflow_root / "run"

    @property
    def output_dir(self) -> Path:
        return self.workflow_root / "output"

    def workflow_dir(self, workflow_id: str) -> Path:
        return self.run_dir / workflow_id

    def workflow_config_file(self, workflow_id: str) -> Path:
        return self.workflow_dir(workflow_id) / CONFIG_FILENAME

    def task_file(self, workflow_id: str) -> Path:
        return self.workflow_dir(workflow_id) / TASK_FILENAME

    def execution_log_path(self, workflow_id: str) -> Path:
        return self.workflow_dir(workflow_id) / EXECUTION_LOG_FILENAME

    def published_output(self, workflow_id: str) -> Optional[Path]:
        """Saída publicada `output/<id>.<formato>`, ou None se não houver."""
        if not self.output_dir.is_dir():
            return None
        found = sorted(p for p in self.output_dir.glob(f"{workflow_id}.*") if p.is_file())
        return found[0] if found else None

    def has_workflow(self, workflow_id: str) -> bool:
        if not is_valid_workflow_name(workflow_id):
            return False
        return self.workflow_dir(workflow_id).is_dir()

    def list_workflows(self) -> List[str]:
        if not self.run_dir.is_dir():
            return []
        return sorted(
            p.name for p in self.run_dir.iterdir()
            if p.is_dir() and is_valid_workflow_name(p.name)
        )

    def ancestors(self) -> List["Project"]:
        """Projetos que envolvem este, do mais externo para o mais próximo."""
        found: List[Project] = []
        for parent in self.root.parents:
            if (parent / WORKFLOW_DIRNAME).is_dir():
                found.append(Project(parent))
        found.reverse()
        return found

    def resolve_files(
        self,
        files: Optional[Sequence[str]] = None,
        pattern: Optional[str] = None,
    ) -> Tuple[Path, ...]:
        """
        Resolve listas explícitas e padrões glob em caminhos absolutos.

        - caminhos relativos são relativos à raiz do projeto
        - `pattern` aceita múltiplos globs separados por espaço; globs
          absolutos são expandidos a partir da própria âncora (`/`)
        - o resultado é ordenado e sem duplicatas
        - arquivos explícitos inexistentes são mantidos (o fingerprint os
          registra como `missing`)
        """
        out = set()
        for f in files or ():
            p = Path(f)
            out.add(p if p.is_absolute() else self.root / p)
        for glob in (pattern or "").split():
            for p in _expand_glob(self.root, glob):
                if p.is_file():
                    out.add(p)
        return tuple(sorted(out))


def _expand_glob(root: Path, pattern: str) -> List[Path]:
    p = Path(pattern)
    if p.is_absolute():
        anchor = Path(p.anchor)
        return list(anchor.glob(str(p.relative_to(anchor))))
    return list(root.glob(pattern))


def is_valid_workflow_name(name: str) -> bool:
    if not name or name.strip() != name:
        return False
    if name.startswith("."):
        return False
    return "/" not in name and "\\" not in name


def find_project_root(start: Optional[Path] = None) -> Optional[Path]:
    """Sobe a partir de `start` até o primeiro diretório com `.workflow/`."""
    current = Path(start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / WORKFLOW_DIRNAME).is_dir():
            return candidate
    return None


def discover_project(start: Optional[Path] = None) -> Project:
    root = find_project_root(start)
    if root is None:
        raise ProjectNotFoundError(
            message=f"Not in a WireFlow project: {Path(start or Path.cwd())}",
            details={"start": str(start or Path.cwd())},
            hint="Inicialize um projeto com: wireflow init",
        )
    return Project(root)


def init_project(path: Path) -> Project:
    """
    Cria (ou completa) o esqueleto `.workflow/` em `path`.

    Arquivos existentes nunca são sobrescritos.
    """
    project = Project(Path(path).resolve())
    project.run_dir.mkdir(parents=True, exist_ok=True)
    project.output_dir.mkdir(parents=True, exist_ok=True)
    if not project.config_file.exists():
        project.config_file.write_text(_PROJECT_CONFIG_TEMPLATE, encoding="utf-8")
    if not project.description_file.exists():
        project.description_file.write_text("", encoding="utf-8")
    return project


def new_workflow(project: Project, name: str, task: str = "") -> Path:
    """
    Cria o diretório de um workflow com `task.txt` e `config.yaml`.

    Raises:
        InvalidWorkflowNameError: nome vazio, oculto ou com separador.
        WorkflowExistsError: o workflow já existe.
    """
    if not is_valid_workflow_name(name):
        raise InvalidWorkflowNameError(
            message=f"Invalid workflow name: {name!r}",
            details={"workflow": name},
            hint="Use um nome simples, sem '/' e sem começar com '.'.",
        )
    wf_dir = project.workflow_dir(name)
    if wf_dir.exists():
        raise WorkflowExistsError(
            message=f"Workflow already exists: '{name}'",
            details={"workflow": name, "path": str(wf_dir)},
        )
    wf_dir.mkdir(parents=True)
    project.task_file(name).write_text(task, encoding="utf-8")
    project.workflow_config_file(name).write_text(_WORKFLOW_CONFIG_TEMPLATE, encoding="utf-8")
    return wf_dir
