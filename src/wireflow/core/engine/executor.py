# src/wireflow/core/engine/executor.py
"""
Executores de workflow.

O scheduler não sabe o que "executar um workflow" significa: ele delega a
um Executor, que recebe o nó (com configuração resolvida) e o RunContext
e devolve um ExecutionOutcome.

Executores fornecidos:
    - CallableExecutor       → adapta uma função simples (testes, embedding)
    - RequestBuilderExecutor → monta o payload de requisição que o backend
                               de modelos receberia, grava `request.json` e,
                               quando há transporte, grava a saída; sem
                               transporte, só funciona em dry run

Decisões arquiteturais:
    - O cliente HTTP do backend é um colaborador externo: entra como
      `transport(request) -> str`, nunca é implementado aqui
    - Saídas de dependências são lidas de `ctx.meta["outputs"]`, preenchido
      pelo scheduler na ordem topológica
    - Exceções do Executor não são tratadas aqui; o scheduler as converte
      em ExecutorFailure

Limites explícitos:
    - Não decide staleness
    - Não grava o Execution Log
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Union

from wireflow.core.config.keys import is_empty
from wireflow.core.config.resolver import effective_model
from wireflow.core.project import PROJECT_DESCRIPTION_FILENAME, WORKFLOW_DIRNAME
from wireflow.core.run_context import RunContext

from .graph import WorkflowNode

REQUEST_FILENAME = "request.json"


@dataclass(frozen=True)
class ExecutionOutcome:
    """
    Resultado de uma execução: sucesso, saída produzida e detalhe do erro.

    `dry_run=True` indica que nada foi produzido de fato (apenas a
    requisição): o scheduler não grava registro para o workflow.
    """

    success: bool
    output_path: Optional[Path] = None
    error_detail: Optional[str] = None
    dry_run: bool = False


class Executor(Protocol):
    def execute(self, node: WorkflowNode, ctx: RunContext) -> ExecutionOutcome:
        ...


ExecutorFn = Callable[[WorkflowNode, RunContext], Union[ExecutionOutcome, Path, str, None]]


class CallableExecutor:
    """
    Adapta uma função `fn(node, ctx)` ao protocolo Executor.

    Retornos aceitos:
        - ExecutionOutcome → repassado como está
        - Path / str       → sucesso, com a saída indicada
        - None             → sucesso, sem arquivo de saída
    """

    def __init__(self, fn: ExecutorFn):
        self.fn = fn

    def execute(self, node: WorkflowNode, ctx: RunContext) -> ExecutionOutcome:
        result = self.fn(node, ctx)
        if isinstance(result, ExecutionOutcome):
            return result
        if result is None:
            return ExecutionOutcome(success=True)
        return ExecutionOutcome(success=True, output_path=Path(result))


Transport = Callable[[Dict[str, Any]], str]


def _read_text(path: Path) -> str:
    return Path(path).read_text(encoding="utf-8", errors="replace")


def _document_block(path: Path, role: str, **attrs: str) -> Dict[str, Any]:
    extra = "".join(f' {k}="{v}"' for k, v in attrs.items())
    body = _read_text(path)
    return {
        "type": "text",
        "text": f'<document role="{role}" source="{Path(path).name}"{extra}>\n{body}\n</document>',
    }


class RequestBuilderExecutor:
    """
    Monta a requisição do backend de modelos para um workflow.

    Ordem dos blocos do usuário: contexto, saídas de dependências, inputs,
    tarefa. O system prompt concatena os prompts nomeados em
    `system_prompts` (lidos de `prompts_dir/<nome>.txt`) e a descrição do
    projeto, quando houver.
    """

    def __init__(
        self,
        *,
        transport: Optional[Transport] = None,
        prompts_dir: Optional[Path] = None,
        dry_run: bool = False,
    ):
        self.transport = transport
        self.dry_run = dry_run
        self.prompts_dir = Path(prompts_dir) if prompts_dir is not None else None

    # -----------------------------
    # Request
    # -----------------------------
    def _system_blocks(self, node: WorkflowNode, ctx: RunContext) -> List[Dict[str, Any]]:
        blocks: List[Dict[str, Any]] = []
        for name in node.config.get("system_prompts") or ():
            if self.prompts_dir is None:
                continue
            prompt = self.prompts_dir / f"{name}.txt"
            if not prompt.is_file():
                ctx.add_warning(step_id=node.id, message=f"System prompt not found: {prompt}")
                continue
            blocks.append({"type": "text", "text": _read_text(prompt)})

        if ctx.project_root is not None:
            desc = Path(ctx.project_root) / WORKFLOW_DIRNAME / PROJECT_DESCRIPTION_FILENAME
            if desc.is_file():
                text = _read_text(desc).strip()
                if text:
                    blocks.append({"type": "text", "text": f"<project-description>\n{text}\n</project-description>"})
        return blocks

    def _user_blocks(self, node: WorkflowNode, ctx: RunContext) -> List[Dict[str, Any]]:
        blocks: List[Dict[str, Any]] = []
        for path in node.context_files:
            if Path(path).is_file():
                blocks.append(_document_block(path, "context"))
            else:
                ctx.add_warning(step_id=node.id, message=f"Context file not found: {path}")

        outputs: Mapping[str, Any] = ctx.meta.get("outputs", {})
        for dep in node.depends_on:
            out = outputs.get(dep)
            if out is not None and Path(out).is_file():
                blocks.append(_document_block(Path(out), "dependency", workflow=dep))
            else:
                ctx.add_warning(step_id=node.id, message=f"Dependency output not found for workflow: {dep}")

        for path in node.input_files:
            if Path(path).is_file():
                blocks.append(_document_block(path, "input"))
            else:
                ctx.add_warning(step_id=node.id, message=f"Input file not found: {path}")

        task = _read_text(node.task_file) if node.task_file and Path(node.task_file).is_file() else ""
        blocks.append({"type": "text", "text": task})
        return blocks

    def build_request(self, node: WorkflowNode, ctx: RunContext) -> Dict[str, Any]:
        cfg = node.config
        request: Dict[str, Any] = {
            "model": effective_model(cfg),
            "max_tokens": cfg.get("max_tokens"),
            "temperature": cfg.get("temperature"),
            "system": self._system_blocks(node, ctx),
            "messages": [{"role": "user", "content": self._user_blocks(node, ctx)}],
        }
        if cfg.get("enable_thinking"):
            request["thinking"] = {"type": "enabled", "budget_tokens": cfg.get("thinking_budget")}
        effort = cfg.get("effort")
        if not is_empty(effort) and effort != "high":
            request["output_config"] = {"effort": effort}
        return request

    # -----------------------------
    # Execution
    # -----------------------------
    def execute(self, node: WorkflowNode, ctx: RunContext) -> ExecutionOutcome:
        if node.workflow_dir is None:
            return ExecutionOutcome(success=False, error_detail=f"Workflow '{node.id}' has no directory")

        wf_dir = Path(node.workflow_dir)
        wf_dir.mkdir(parents=True, exist_ok=True)

        request = self.build_request(node, ctx)
        request_file = wf_dir / REQUEST_FILENAME
        request_file.write_text(json.dumps(request, ensure_ascii=False, indent=2), encoding="utf-8")

        if self.dry_run:
            return ExecutionOutcome(success=True, output_path=request_file, dry_run=True)
        if self.transport is None:
            return ExecutionOutcome(
                success=False,
                error_detail=f"No model backend configured (request written to {request_file}; use --dry-run to only build requests)",
            )

        text = self.transport(request)
        fmt = node.config.get("output_format") or "md"
        output = wf_dir / f"output.{fmt}"
        output.write_text(text, encoding="utf-8")

        if ctx.project_root is not None:
            root = Path(ctx.project_root)
            published = root / WORKFLOW_DIRNAME / "output" / f"{node.id}.{fmt}"
            published.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(output, published)

            export = node.config.get("export_file")
            if not is_empty(export):
                target = root / str(export)
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(output, target)

        return ExecutionOutcome(success=True, output_path=output)
