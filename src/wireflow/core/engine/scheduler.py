# src/wireflow/core/engine/scheduler.py
"""
ExecutionScheduler — execução incremental de um grafo de workflows.

Ciclo de vida de cada nó (dependências primeiro, alvo por último):

    Pending → Fresh                      (fingerprint igual ao registro)
    Pending → Executing → Fresh | Failed (stale ou forçado)

Políticas:
    - auto_deps=True  → dependências stale são executadas antes do alvo
    - auto_deps=False → qualquer dependência stale aborta a run com
                        MissingDependencyOutputError, sem executar nada
    - force           → força apenas o alvo
    - force_all       → força todos os nós do grafo (apenas com auto_deps)
    - falha do Executor (retorno ou exceção) → ExecutorFailure; a run para
    - outcome de dry run → nenhum registro; o nó continua stale e seus
                           dependentes veem a última saída registrada

Decisões arquiteturais:
    - Execução sequencial e bloqueante: um Executor por vez
    - Todos os fingerprints são calculados antes da primeira execução: o
      fingerprint depende do estado de entrada, não da saída produzida
    - O registro de sucesso é gravado imediatamente após cada execução,
      antes de seguir para o próximo nó
    - Nenhum rollback: um nó interrompido simplesmente não tem registro

Invariantes:
    - Nenhum nó executa antes de todas as suas dependências terminarem
    - Cada nó executa no máximo uma vez por run
    - Nós falhos, não alcançados ou em dry run nunca ganham registro

Limites explícitos:
    - Não constrói o grafo
    - Não executa ramos independentes em paralelo
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from wireflow.core.exceptions import ExecutorFailure, MissingDependencyOutputError
from wireflow.core.run_context import RunContext
from wireflow.core.traceability.execution_log import ExecutionLog, ExecutionRecord

from .executor import ExecutionOutcome, Executor
from .graph import DependencyGraph
from .planner import topological_order
from .staleness import Fingerprint, StalenessVerdict, compute_fingerprint, is_stale


class NodeState(str, Enum):
    PENDING = "pending"
    FRESH = "fresh"
    EXECUTED = "executed"
    FAILED = "failed"
    DRY_RUN = "dry-run"


@dataclass(frozen=True)
class NodeAssessment:
    """Estado de um nó antes da execução: fingerprint, registro e veredito."""

    workflow: str
    fingerprint: Fingerprint
    record: Optional[ExecutionRecord]
    verdict: StalenessVerdict


@dataclass(frozen=True)
class NodeResult:
    workflow: str
    state: NodeState
    verdict: StalenessVerdict
    fingerprint: str
    forced: bool = False
    output_path: Optional[str] = None


@dataclass(frozen=True)
class ExecutionResult:
    """Resultado agregado de uma run."""

    target: str
    order: Tuple[str, ...]
    nodes: Dict[str, NodeResult] = field(default_factory=dict)

    @property
    def executed(self) -> List[str]:
        return [wid for wid in self.order if self.nodes[wid].state is NodeState.EXECUTED]

    @property
    def skipped(self) -> List[str]:
        return [wid for wid in self.order if self.nodes[wid].state is NodeState.FRESH]

    @property
    def dry_run(self) -> List[str]:
        return [wid for wid in self.order if self.nodes[wid].state is NodeState.DRY_RUN]


class ExecutionScheduler:
    """Decide e executa, na ordem topológica, os nós stale de um grafo."""

    def __init__(self, *, executor: Executor, log: ExecutionLog):
        self.executor = executor
        self.log = log

    def assess(self, graph: DependencyGraph) -> Dict[str, NodeAssessment]:
        """
        Fingerprint e veredito de staleness de cada nó, em ordem topológica.

        Não executa nada e não grava nada.
        """
        fingerprints: Dict[str, str] = {}
        out: Dict[str, NodeAssessment] = {}
        for wid in topological_order(graph):
            node = graph.node(wid)
            fp = compute_fingerprint(node, fingerprints)
            fingerprints[wid] = fp.digest
            record = self.log.read(wid, node.workflow_dir)
            out[wid] = NodeAssessment(
                workflow=wid,
                fingerprint=fp,
                record=record,
                verdict=is_stale(node, record, fp),
            )
        return out

    def run(
        self,
        graph: DependencyGraph,
        ctx: RunContext,
        *,
        auto_deps: bool = True,
        force: bool = False,
        force_all: bool = False,
    ) -> ExecutionResult:
        """
        Executa o grafo a partir de suas folhas até o alvo.

        Raises:
            MissingDependencyOutputError: auto_deps=False e há dependência stale.
            ExecutorFailure: o Executor falhou para algum nó.
        """
        target = graph.target
        assessments = self.assess(graph)
        order = tuple(assessments)

        if not auto_deps:
            stale_deps = [wid for wid in order if wid != target and assessments[wid].verdict.stale]
            if stale_deps:
                first = stale_deps[0]
                raise MissingDependencyOutputError(
                    message=f"Dependency '{first}' is {assessments[first].verdict.status} (auto-deps disabled)",
                    details={
                        "workflow": target,
                        "dependency": first,
                        "stale": stale_deps,
                        "reasons": {wid: assessments[wid].verdict.reason for wid in stale_deps},
                    },
                    hint=f"Execute as dependências antes (wireflow run {first}) ou remova --no-auto-deps.",
                )

        ctx.log(step_id=target, level="info", message=f"Execution order: {', '.join(order)}", event="plan", order=list(order))

        outputs = ctx.meta.setdefault("outputs", {})
        results: Dict[str, NodeResult] = {}

        for wid in order:
            a = assessments[wid]
            node = graph.node(wid)
            is_target = wid == target
            forced = force_all if not is_target else (force or force_all)
            if not auto_deps and not is_target:
                forced = False

            if not a.verdict.stale and not forced:
                output = a.record.output_path if a.record else None
                if output is not None:
                    outputs[wid] = output
                results[wid] = NodeResult(
                    workflow=wid,
                    state=NodeState.FRESH,
                    verdict=a.verdict,
                    fingerprint=a.fingerprint.digest,
                    output_path=output,
                )
                ctx.log(step_id=wid, level="info", message=f"Workflow '{wid}' is fresh, skipping", event="fresh")
                continue

            label = "forced" if forced and not a.verdict.stale else a.verdict.status
            if is_target:
                ctx.log(step_id=wid, level="info", message=f"Executing '{wid}' ({label})...", event="start")
            else:
                ctx.log(step_id=wid, level="info", message=f"Dependency '{wid}' is {label}, executing...", event="start")

            outcome = self._execute(node, ctx)
            output = str(outcome.output_path) if outcome.output_path is not None else None

            if outcome.dry_run:
                prior = a.record.output_path if a.record else None
                if prior is not None:
                    outputs[wid] = prior
                results[wid] = NodeResult(
                    workflow=wid,
                    state=NodeState.DRY_RUN,
                    verdict=a.verdict,
                    fingerprint=a.fingerprint.digest,
                    forced=forced,
                    output_path=output,
                )
                ctx.log(step_id=wid, level="info", message=f"Dry run: request for '{wid}' written to {output}", event="dry_run", output_path=output)
                continue

            record = ExecutionRecord(
                workflow=wid,
                fingerprint=a.fingerprint.digest,
                components=dict(a.fingerprint.components),
                dependencies=dict(a.fingerprint.dependencies),
                output_path=output,
                config=node.config.to_dict(),
                config_sources=node.config.sources(),
            )
            self.log.write(record, node.workflow_dir)

            if output is not None:
                outputs[wid] = output
            results[wid] = NodeResult(
                workflow=wid,
                state=NodeState.EXECUTED,
                verdict=a.verdict,
                fingerprint=a.fingerprint.digest,
                forced=forced,
                output_path=output,
            )
            if is_target:
                ctx.log(step_id=wid, level="info", message=f"Workflow '{wid}' completed", event="finish", output_path=output)
            else:
                ctx.log(step_id=wid, level="info", message=f"Dependency '{wid}' completed", event="finish", output_path=output)

        return ExecutionResult(target=target, order=order, nodes=results)

    def _execute(self, node, ctx: RunContext) -> ExecutionOutcome:
        try:
            outcome = self.executor.execute(node, ctx)
        except Exception as e:
            ctx.log(step_id=node.id, level="error", message=f"Workflow '{node.id}' failed: {e}", event="failed")
            raise ExecutorFailure(
                message=f"Workflow '{node.id}' failed: {e}",
                details={"workflow": node.id, "error": str(e), "exception_class": e.__class__.__name__},
                hint="Verifique a saída do executor; nenhum registro foi gravado para este workflow.",
            ) from e

        if not outcome.success:
            detail = outcome.error_detail or "executor reported failure"
            ctx.log(step_id=node.id, level="error", message=f"Workflow '{node.id}' failed: {detail}", event="failed")
            raise ExecutorFailure(
                message=f"Workflow '{node.id}' failed: {detail}",
                details={"workflow": node.id, "error": detail},
            )

        if outcome.output_path is not None and not Path(outcome.output_path).exists():
            ctx.add_warning(step_id=node.id, message=f"Executor reported missing output: {outcome.output_path}")

        return outcome
