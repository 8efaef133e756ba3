# src/wireflow/core/engine/__init__.py
"""
Engine do WireFlow.

Este pacote contém a implementação responsável por **construir**,
**planejar** e **executar incrementalmente** o grafo de dependências de
um workflow alvo.

Componentes principais:
    - graph      → GraphBuilder (travessia iterativa + detecção de ciclos)
    - planner    → ordenação topológica determinística e `find_cycle`
    - staleness  → fingerprint de conteúdo e decisão fresh/stale
    - executor   → protocolo Executor e implementações fornecidas
    - scheduler  → execução na ordem topológica, gravação de registros
    - engine     → superfícies run / status / show_config

Invariantes:
    - Workflows só executam após suas dependências
    - Cada workflow executa no máximo uma vez por run
    - O grafo é validado (acíclico, completo) antes de qualquer execução

Limites explícitos:
    - Não executa ramos independentes em paralelo
    - Não implementa o cliente do backend de modelos
"""

from .engine import ConfigView, Engine, RunResult, WorkflowStatus
from .executor import CallableExecutor, ExecutionOutcome, Executor, RequestBuilderExecutor
from .graph import DependencyGraph, WorkflowNode, build
from .planner import find_cycle, plan_execution, topological_order
from .scheduler import ExecutionResult, ExecutionScheduler, NodeResult, NodeState
from .staleness import Fingerprint, StalenessVerdict, compute_fingerprint, is_stale

__all__ = [
    "CallableExecutor",
    "ConfigView",
    "DependencyGraph",
    "Engine",
    "ExecutionOutcome",
    "ExecutionResult",
    "ExecutionScheduler",
    "Executor",
    "Fingerprint",
    "NodeResult",
    "NodeState",
    "RequestBuilderExecutor",
    "RunResult",
    "StalenessVerdict",
    "WorkflowNode",
    "WorkflowStatus",
    "build",
    "compute_fingerprint",
    "find_cycle",
    "is_stale",
    "plan_execution",
    "topological_order",
]
