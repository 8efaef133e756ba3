# src/wireflow/core/traceability/execution_log.py
"""
Execution Log v1 — registro persistido do último sucesso de cada workflow.

O Execution Log é o único estado que sobrevive entre execuções. Cada
workflow possui no máximo um registro, em
`.workflow/run/<id>/execution.json`, descrevendo a última execução bem
sucedida:

    - fingerprint: identidade do estado de entrada executado
    - components: digests parciais (config, task, inputs, context,
      dependencies) usados para explicar staleness
    - dependencies: fingerprints das dependências diretas naquele momento
    - output_path: saída produzida pelo Executor
    - config / config_sources: configuração efetiva e proveniência

Decisões arquiteturais:
    - UTC é o timezone canônico para `executed_at`
    - O formato de persistência é JSON determinístico (chaves ordenadas)
    - A escrita é atômica (arquivo temporário + `os.replace`): um registro
      nunca é lido pela metade
    - Registro ilegível é tratado como ausente (o workflow fica stale)

Invariantes:
    - Apenas execuções bem sucedidas geram registro
    - Um registro só é substituído por outro registro completo

Limites explícitos:
    - Não decide staleness
    - Não implementa locking entre processos
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from wireflow.core.project import EXECUTION_LOG_FILENAME

logger = logging.getLogger(__name__)

RECORD_VERSION = 1


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ExecutionRecord:
    """Registro do último sucesso de um workflow."""

    workflow: str
    fingerprint: str
    executed_at: str = field(default_factory=_iso_now)
    outcome: str = "success"
    components: Dict[str, str] = field(default_factory=dict)
    dependencies: Dict[str, str] = field(default_factory=dict)
    output_path: Optional[str] = None
    config: Dict[str, Any] = field(default_factory=dict)
    config_sources: Dict[str, str] = field(default_factory=dict)
    version: int = RECORD_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "workflow": self.workflow,
            "fingerprint": self.fingerprint,
            "executed_at": self.executed_at,
            "outcome": self.outcome,
            "components": dict(self.components),
            "dependencies": dict(self.dependencies),
            "output_path": self.output_path,
            "config": dict(self.config),
            "config_sources": dict(self.config_sources),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionRecord":
        """
        Reconstrói um registro a partir de sua forma serializada.

        Raises:
            KeyError: se `workflow` ou `fingerprint` estiverem ausentes.
            TypeError: se a raiz não for um dicionário.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Execution record deve ser dict, recebido: {type(data).__name__}")
        return cls(
            workflow=str(data["workflow"]),
            fingerprint=str(data["fingerprint"]),
            executed_at=str(data.get("executed_at") or ""),
            outcome=str(data.get("outcome") or "success"),
            components=dict(data.get("components") or {}),
            dependencies=dict(data.get("dependencies") or {}),
            output_path=data.get("output_path"),
            config=dict(data.get("config") or {}),
            config_sources=dict(data.get("config_sources") or {}),
            version=int(data.get("version") or RECORD_VERSION),
        )


def save_record(record: ExecutionRecord, path: Path) -> None:
    """Persiste o registro em JSON de forma atômica."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(
        json.dumps(record.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )
    os.replace(tmp, path)


def load_record(path: Path) -> ExecutionRecord:
    """
    Carrega um registro persistido.

    Raises:
        FileNotFoundError: registro inexistente.
        json.JSONDecodeError: JSON inválido.
        KeyError / TypeError / ValueError: estrutura inválida.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return ExecutionRecord.from_dict(data)


class ExecutionLog:
    """
    Acesso aos registros de execução de um projeto.

    O caminho de cada registro é `<workflow_dir>/execution.json`. Quando o
    nó não informa `workflow_dir`, usa-se `<root>/<id>/execution.json`.
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else None

    def path_for(self, workflow_id: str, workflow_dir: Optional[Path] = None) -> Path:
        if workflow_dir is not None:
            return Path(workflow_dir) / EXECUTION_LOG_FILENAME
        if self.root is None:
            raise ValueError(f"Sem diretório para o registro de '{workflow_id}'")
        return self.root / workflow_id / EXECUTION_LOG_FILENAME

    def read(self, workflow_id: str, workflow_dir: Optional[Path] = None) -> Optional[ExecutionRecord]:
        """Último registro do workflow, ou None (ausente ou ilegível)."""
        path = self.path_for(workflow_id, workflow_dir)
        if not path.is_file():
            return None
        try:
            return load_record(path)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Execution log ilegível ignorado (%s): %s", path, e)
            return None

    def write(self, record: ExecutionRecord, workflow_dir: Optional[Path] = None) -> Path:
        path = self.path_for(record.workflow, workflow_dir)
        save_record(record, path)
        return path

    def delete(self, workflow_id: str, workflow_dir: Optional[Path] = None) -> bool:
        path = self.path_for(workflow_id, workflow_dir)
        if path.exists():
            path.unlink()
            return True
        return False
