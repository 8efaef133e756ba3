# src/wireflow/core/engine/engine.py
"""
Engine do WireFlow — superfícies `run`, `status` e `show_config`.

O Engine liga as peças do core para um projeto:

    cascade (config por workflow) → GraphBuilder → planner → scheduler

Cada chamada de `run` possui seu próprio RunContext; o grafo, os nós e a
configuração resolvida vivem apenas durante a chamada. O único estado
persistido é o Execution Log.

Guardrails:
- Exceções WireflowException são convertidas em ErrorPayload, registradas
  no event log do contexto e devolvidas em `RunResult.error`
- Exceções inesperadas não são engolidas: propagam para o chamador
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from wireflow.core.config.cascade import ConfigCascade
from wireflow.core.config.loader import TierSource
from wireflow.core.config.resolver import ResolvedConfig, effective_model
from wireflow.core.errors import ErrorPayload, exception_to_error
from wireflow.core.exceptions import WireflowException, workflow_not_found
from wireflow.core.project import Project
from wireflow.core.run_context import EventListener, RunContext
from wireflow.core.traceability.execution_log import ExecutionLog

from .executor import Executor, RequestBuilderExecutor
from .graph import DependencyGraph, WorkflowNode, build
from .scheduler import ExecutionResult, ExecutionScheduler
from .staleness import StalenessVerdict


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de `Engine.run`."""

    target: str
    ctx: RunContext
    execution: Optional[ExecutionResult] = None
    error: Optional[ErrorPayload] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


@dataclass(frozen=True)
class WorkflowStatus:
    workflow: str
    verdict: Optional[StalenessVerdict] = None
    error: Optional[ErrorPayload] = None

    @property
    def label(self) -> str:
        if self.error is not None:
            return f"error: {self.error.message}"
        if self.verdict is None:
            return "unknown"
        return self.verdict.status


@dataclass(frozen=True)
class ConfigView:
    """Configuração efetiva de um workflow (ou do projeto) com proveniência."""

    workflow: Optional[str]
    config: ResolvedConfig
    sources: List[TierSource] = field(default_factory=list)

    @property
    def effective_model(self) -> str:
        return effective_model(self.config)

    def rows(self) -> List[Dict[str, Any]]:
        return [
            {"key": name, "value": rv.value, "source": rv.source}
            for name, rv in self.config.entries.items()
        ]


class Engine:
    """Engine canônico do WireFlow (cascade + grafo + scheduler)."""

    def __init__(
        self,
        project: Project,
        *,
        executor: Optional[Executor] = None,
        log: Optional[ExecutionLog] = None,
        global_config: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        on_event: Optional[EventListener] = None,
    ):
        self.project = project
        self.executor: Executor = executor if executor is not None else RequestBuilderExecutor()
        self.log = log if log is not None else ExecutionLog(project.run_dir)
        self.global_config = global_config
        self.env = env
        self.on_event = on_event

    # ------------------------------------------------------------------
    # Montagem
    # ------------------------------------------------------------------
    def _cascade(self, cli_overrides: Optional[Mapping[str, Any]] = None) -> ConfigCascade:
        return ConfigCascade(
            self.project,
            cli_overrides=cli_overrides,
            global_config=self.global_config,
            env=self.env,
        )

    def _new_context(self, **meta: Any) -> RunContext:
        return RunContext(project_root=self.project.root, meta=dict(meta), on_event=self.on_event)

    def load_node(
        self,
        cascade: ConfigCascade,
        workflow_id: str,
        *,
        cli: bool = False,
        ctx: Optional[RunContext] = None,
    ) -> Optional[WorkflowNode]:
        """Carrega um workflow do projeto, ou None se ele não existe."""
        if not self.project.has_workflow(workflow_id):
            return None

        config = cascade.resolve(workflow_id, cli=cli)
        if ctx is not None:
            for w in cascade.warnings_for(workflow_id):
                ctx.add_warning(step_id=workflow_id, message=w)

        return WorkflowNode(
            id=workflow_id,
            config=config,
            depends_on=tuple(config.get("depends_on") or ()),
            task_file=self.project.task_file(workflow_id),
            input_files=self.project.resolve_files(config.get("input_files"), config.get("input_pattern")),
            context_files=self.project.resolve_files(config.get("context_files"), config.get("context_pattern")),
            workflow_dir=self.project.workflow_dir(workflow_id),
        )

    def build_graph(
        self,
        target: str,
        *,
        cli_overrides: Optional[Mapping[str, Any]] = None,
        ctx: Optional[RunContext] = None,
    ) -> DependencyGraph:
        """
        Constrói o grafo do alvo; overrides de CLI valem apenas para o alvo.

        Raises:
            WorkflowNotFoundError / DependencyNotFoundError / CycleError
        """
        cascade = self._cascade(cli_overrides)
        return build(
            target,
            lambda wid: self.load_node(cascade, wid, cli=(wid == target), ctx=ctx),
        )

    # ------------------------------------------------------------------
    # Superfícies
    # ------------------------------------------------------------------
    def run(
        self,
        target: str,
        *,
        auto_deps: bool = True,
        force: bool = False,
        force_all: bool = False,
        cli_overrides: Optional[Mapping[str, Any]] = None,
    ) -> RunResult:
        ctx = self._new_context(target=target, auto_deps=auto_deps, force=force, force_all=force_all)
        try:
            ctx.log(step_id=target, level="info", message="Resolving dependencies...", event="resolve")
            graph = self.build_graph(target, cli_overrides=cli_overrides, ctx=ctx)
            scheduler = ExecutionScheduler(executor=self.executor, log=self.log)
            execution = scheduler.run(graph, ctx, auto_deps=auto_deps, force=force, force_all=force_all)
        except WireflowException as e:
            payload = exception_to_error(e)
            failed = str(payload.details.get("workflow") or target)
            ctx.log(step_id=failed, level="error", message=payload.message, event="error", error=payload.to_dict())
            return RunResult(target=target, ctx=ctx, error=payload)

        return RunResult(target=target, ctx=ctx, execution=execution)

    def status(self, workflow_id: Optional[str] = None) -> List[WorkflowStatus]:
        """
        Estado de um workflow (ou de todos, em ordem alfabética):
        `pending`, `fresh` ou `stale: <motivo>`.
        """
        if workflow_id is not None and not self.project.has_workflow(workflow_id):
            return [WorkflowStatus(workflow_id, error=exception_to_error(workflow_not_found(workflow_id)))]

        ids = [workflow_id] if workflow_id is not None else self.project.list_workflows()
        scheduler = ExecutionScheduler(executor=self.executor, log=self.log)
        out: List[WorkflowStatus] = []
        for wid in ids:
            try:
                graph = self.build_graph(wid)
                assessments = scheduler.assess(graph)
            except WireflowException as e:
                out.append(WorkflowStatus(wid, error=exception_to_error(e)))
                continue
            out.append(WorkflowStatus(wid, verdict=assessments[wid].verdict))
        return out

    def show_config(
        self,
        workflow_id: Optional[str] = None,
        *,
        cli_overrides: Optional[Mapping[str, Any]] = None,
    ) -> ConfigView:
        """
        Configuração efetiva com o tier dono de cada chave.

        Sem `workflow_id`, mostra a configuração de nível de projeto.

        Raises:
            WorkflowNotFoundError: o workflow informado não existe.
        """
        if workflow_id is not None and not self.project.has_workflow(workflow_id):
            raise workflow_not_found(workflow_id)
        cascade = self._cascade(cli_overrides)
        config, sources = cascade.explain(workflow_id, cli=bool(cli_overrides))
        return ConfigView(workflow=workflow_id, config=config, sources=sources)
