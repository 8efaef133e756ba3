# src/wireflow/core/traceability/__init__.py
"""
Pacote de rastreabilidade do WireFlow — Execution Log v1.

API pública exposta:
    - ExecutionRecord → registro do último sucesso de um workflow
    - ExecutionLog    → leitura/escrita de registros por workflow
    - save_record     → persistência atômica em JSON
    - load_record     → restauração determinística

Invariantes:
    - Apenas execuções bem sucedidas são registradas
    - A escrita nunca deixa um registro parcial em disco
"""

from .execution_log import (
    RECORD_VERSION,
    ExecutionLog,
    ExecutionRecord,
    load_record,
    save_record,
)

__all__ = [
    "RECORD_VERSION",
    "ExecutionLog",
    "ExecutionRecord",
    "load_record",
    "save_record",
]
