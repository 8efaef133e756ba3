# src/wireflow/core/run_context.py
"""
RunContext — Contexto canônico de uma execução do WireFlow.

O RunContext acompanha uma única invocação de `run` (ou `status`) e é o
único meio permitido de:
- registrar eventos estruturados de execução (ordem real preservada)
- coletar warnings não fatais por workflow (ex.: fontes de tier malformadas)
- repassar ao Executor informações da run (projeto, id, flags)

Cada evento é também encaminhado ao logger `wireflow` e, quando
configurado, a um listener (`on_event`) usado pela CLI para progresso.

Princípios fundamentais:
- Isolamento por execução (cada run possui seu próprio contexto)
- Nenhum estado global é usado para comunicação entre workflows
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger("wireflow")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

EventListener = Callable[[Dict[str, Any]], None]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class RunContext:
    """
    Contexto de execução compartilhado de uma run.

    Campos canônicos:
    - run_id: identificador único da execução
    - created_at: timestamp UTC de criação do contexto
    - project_root: raiz do projeto (quando houver)
    - meta: metadados livres (ex.: alvo, flags da run)
    - warnings: warnings por workflow_id
    - events: log estruturado de eventos
    - on_event: listener opcional chamado a cada evento
    """

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = field(default_factory=_now_iso)
    project_root: Optional[Path] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    warnings: Dict[str, List[str]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    on_event: Optional[EventListener] = field(default=None, repr=False, compare=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": _now_iso(),
        }
        event.update(extra)
        self.events.append(event)

        logger.log(_LEVELS.get(level, logging.INFO), "[%s] %s", step_id, message)
        if self.on_event is not None:
            self.on_event(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)
        self.log(step_id=step_id, level="warning", message=message, event="warning")

    def events_for(self, step_id: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e.get("step_id") == step_id]
