"""
WireFlow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas fatais do WireFlow.

Objetivo:
- Permitir que grafo, scheduler e Engine levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Toda exceção fatal nomeia o workflow responsável em `details`
- Exceções carregam apenas dados estruturados (serializáveis)
- Falhas de configuração de tier NÃO estão aqui: são recuperáveis e vivem
  em `wireflow.core.config.errors`
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class WireflowException(Exception):
    """Base class para exceções fatais do WireFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Projeto / layout
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectNotFoundError(WireflowException):
    """Nenhum diretório `.workflow/` encontrado subindo a partir do cwd."""


@dataclass(frozen=True)
class InvalidWorkflowNameError(WireflowException):
    """Nome de workflow vazio, oculto ou com separador de caminho."""


@dataclass(frozen=True)
class WorkflowExistsError(WireflowException):
    """Tentativa de criar um workflow que já existe."""


@dataclass(frozen=True)
class OutputNotFoundError(WireflowException):
    """O workflow ainda não publicou saída em `.workflow/output/`."""


# ---------------------------------------------------------------------------
# Grafo
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WorkflowNotFoundError(WireflowException):
    """O workflow alvo não existe no projeto."""


@dataclass(frozen=True)
class DependencyNotFoundError(WireflowException):
    """Um workflow declara em `depends_on` um id que não existe."""


@dataclass(frozen=True)
class CycleError(WireflowException):
    """O grafo de dependências contém um ciclo.

    `details["cycle"]` contém o caminho completo, do id repetido até ele
    mesmo, inclusive (ex.: ["A", "C", "B", "A"]). O GraphBuilder rotaciona o
    caminho para começar no menor id do ciclo, então o mesmo ciclo é
    reportado igual a partir de qualquer alvo.
    """

    @property
    def cycle(self) -> List[str]:
        return list(self.details.get("cycle", []))


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MissingDependencyOutputError(WireflowException):
    """Dependência stale com auto_deps desligado: nada é executado."""


@dataclass(frozen=True)
class ExecutorFailure(WireflowException):
    """O Executor falhou para um workflow; a run é interrompida."""


# ---------------------------------------------------------------------------
# Fábricas
# ---------------------------------------------------------------------------

def cycle_error(path: List[str]) -> CycleError:
    return CycleError(
        message=f"Circular dependency detected: {' -> '.join(path)}",
        details={"cycle": list(path)},
        hint="Remova uma das arestas do ciclo em `depends_on`.",
    )


def dependency_not_found(*, dependency: str, declared_by: str) -> DependencyNotFoundError:
    return DependencyNotFoundError(
        message=f"Workflow '{declared_by}' depends on unknown workflow '{dependency}'",
        details={"workflow": declared_by, "dependency": dependency},
        hint=f"Crie o workflow com: wireflow new {dependency}",
    )


def workflow_not_found(workflow: str) -> WorkflowNotFoundError:
    return WorkflowNotFoundError(
        message=f"Workflow not found: '{workflow}'",
        details={"workflow": workflow},
        hint=f"Crie o workflow com: wireflow new {workflow}",
    )
