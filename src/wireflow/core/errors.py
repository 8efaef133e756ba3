"""
WireFlow — Canonical Error Structures (v1)

Este módulo define o payload canônico de erro do WireFlow e o catálogo
de códigos estáveis usados pelo Engine e pela CLI.

Erros são:

- explícitos
- serializáveis
- rastreáveis (nomeiam o workflow responsável)
- acionáveis (carregam `hint` quando há correção óbvia)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from wireflow.core.exceptions import (
    CycleError,
    DependencyNotFoundError,
    ExecutorFailure,
    InvalidWorkflowNameError,
    MissingDependencyOutputError,
    OutputNotFoundError,
    ProjectNotFoundError,
    WireflowException,
    WorkflowExistsError,
    WorkflowNotFoundError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do WireFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Projeto
PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
INVALID_WORKFLOW_NAME = "INVALID_WORKFLOW_NAME"
WORKFLOW_EXISTS = "WORKFLOW_EXISTS"
OUTPUT_NOT_FOUND = "OUTPUT_NOT_FOUND"

# Grafo
WORKFLOW_NOT_FOUND = "WORKFLOW_NOT_FOUND"
DEPENDENCY_NOT_FOUND = "DEPENDENCY_NOT_FOUND"
DEPENDENCY_CYCLE = "DEPENDENCY_CYCLE"

# Execução
MISSING_DEPENDENCY_OUTPUT = "MISSING_DEPENDENCY_OUTPUT"
EXECUTOR_FAILURE = "EXECUTOR_FAILURE"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"


_CODES = {
    ProjectNotFoundError: PROJECT_NOT_FOUND,
    InvalidWorkflowNameError: INVALID_WORKFLOW_NAME,
    WorkflowExistsError: WORKFLOW_EXISTS,
    OutputNotFoundError: OUTPUT_NOT_FOUND,
    WorkflowNotFoundError: WORKFLOW_NOT_FOUND,
    DependencyNotFoundError: DEPENDENCY_NOT_FOUND,
    CycleError: DEPENDENCY_CYCLE,
    MissingDependencyOutputError: MISSING_DEPENDENCY_OUTPUT,
    ExecutorFailure: EXECUTOR_FAILURE,
}


def error_code(exc: BaseException) -> str:
    for cls in type(exc).__mro__:
        if cls in _CODES:
            return _CODES[cls]
    return ENGINE_EXECUTION_ERROR


def exception_to_error(exc: BaseException) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - WireflowException: já vem com message/details/hint.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, WireflowException):
        return ErrorPayload(
            type=error_code(exc),
            message=str(exc) or "Erro de execução",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return ErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log técnico e a configuração do workflow",
    )
