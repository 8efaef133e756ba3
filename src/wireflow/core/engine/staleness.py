# src/wireflow/core/engine/staleness.py
"""
StalenessOracle — fingerprint de conteúdo e decisão fresh/stale.

O fingerprint de um workflow é o SHA-256 do JSON canônico formado por:

    - config        → valores resolvidos (sem proveniência)
    - task          → hash do conteúdo do arquivo de tarefa
    - inputs        → hash de cada arquivo de input
    - context       → hash de cada arquivo de contexto
    - dependencies  → fingerprint de cada dependência direta

Como o fingerprint de cada dependência entra no do dependente, qualquer
mudança em um workflow se propaga para todos os seus dependentes
transitivos.

Decisões arquiteturais:
    - Apenas conteúdo participa: mtime nunca é consultado
    - Arquivo ausente entra como `missing` (nunca é erro aqui)
    - Os digests parciais são guardados para explicar o motivo do stale

Invariantes:
    - Mesmos arquivos + mesma configuração + mesmas dependências ⇒ mesmo
      fingerprint
    - Sem registro anterior ⇒ stale

Limites explícitos:
    - Não executa workflows
    - Não aplica `force` (responsabilidade do scheduler)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from wireflow.core.config.hashing import canonical_json, hash_file, hash_text
from wireflow.core.traceability.execution_log import ExecutionRecord

from .graph import WorkflowNode

MISSING = "missing"

NEVER_EXECUTED = "never executed"
CONFIG_CHANGED = "config changed"
TASK_CHANGED = "task changed"
INPUT_CHANGED = "input changed"
CONTEXT_CHANGED = "context changed"
DEPENDENCY_CHANGED = "dependency changed"
OUTPUT_MISSING = "output missing"
FINGERPRINT_CHANGED = "fingerprint changed"

# Ordem de verificação dos componentes ao explicar um stale.
_COMPONENT_REASONS = (
    ("config", CONFIG_CHANGED),
    ("task", TASK_CHANGED),
    ("inputs", INPUT_CHANGED),
    ("context", CONTEXT_CHANGED),
    ("dependencies", DEPENDENCY_CHANGED),
)


def file_digest(path: Optional[Path]) -> str:
    if path is None:
        return MISSING
    p = Path(path)
    if not p.is_file():
        return MISSING
    return hash_file(p)


def _files_digest(paths: Sequence[Path]) -> Dict[str, str]:
    return {Path(p).as_posix(): file_digest(p) for p in paths}


@dataclass(frozen=True)
class Fingerprint:
    """Fingerprint de um workflow e seus digests parciais."""

    digest: str
    components: Mapping[str, str] = field(default_factory=dict)
    dependencies: Mapping[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.digest


def compute_fingerprint(node: WorkflowNode, dependency_fingerprints: Mapping[str, str]) -> Fingerprint:
    """
    Calcula o fingerprint de um nó.

    Args:
        node: workflow com configuração resolvida e arquivos.
        dependency_fingerprints: fingerprint (digest) de cada dependência
            direta do nó; todas precisam estar presentes.

    Raises:
        KeyError: se faltar o fingerprint de alguma dependência.
    """
    deps = {dep: dependency_fingerprints[dep] for dep in node.depends_on}
    parts: Dict[str, Any] = {
        "config": node.config.to_dict(),
        "task": file_digest(node.task_file),
        "inputs": _files_digest(node.input_files),
        "context": _files_digest(node.context_files),
        "dependencies": deps,
    }
    components = {name: hash_text(canonical_json(value)) for name, value in parts.items()}
    digest = hash_text(canonical_json(components))
    return Fingerprint(digest=digest, components=components, dependencies=deps)


@dataclass(frozen=True)
class StalenessVerdict:
    """Resultado da comparação entre o estado atual e o último registro."""

    stale: bool
    reason: Optional[str] = None
    pending: bool = False

    @property
    def status(self) -> str:
        if self.pending:
            return "pending"
        if not self.stale:
            return "fresh"
        return f"stale: {self.reason}"


FRESH = StalenessVerdict(stale=False)


def _output_exists(record: ExecutionRecord, node: WorkflowNode) -> bool:
    if not record.output_path:
        return True
    out = Path(record.output_path)
    if not out.is_absolute() and node.workflow_dir is not None:
        out = Path(node.workflow_dir) / out
    return out.exists()


def is_stale(
    node: WorkflowNode,
    prior_record: Optional[ExecutionRecord],
    fingerprint: Fingerprint,
) -> StalenessVerdict:
    """
    Decide se um workflow precisa ser executado.

    - sem registro                 → stale (pending, "never executed")
    - fingerprint igual, saída ok  → fresh
    - fingerprint igual, sem saída → stale ("output missing")
    - fingerprint diferente        → stale, motivo = primeiro componente
      divergente (config, task, inputs, context, dependencies)
    """
    if prior_record is None:
        return StalenessVerdict(stale=True, reason=NEVER_EXECUTED, pending=True)

    if prior_record.fingerprint == fingerprint.digest:
        if not _output_exists(prior_record, node):
            return StalenessVerdict(stale=True, reason=OUTPUT_MISSING)
        return FRESH

    for name, reason in _COMPONENT_REASONS:
        if prior_record.components.get(name) != fingerprint.components.get(name):
            return StalenessVerdict(stale=True, reason=reason)

    return StalenessVerdict(stale=True, reason=FINGERPRINT_CHANGED)
