# src/wireflow/core/config/hashing.py
"""
Hashing canônico do WireFlow.

Este módulo concentra as funções de hash usadas para identidade de
configuração e de conteúdo:

    - canonical_json       → serialização JSON canônica de estruturas simples
    - compute_config_hash  → SHA-256 da configuração efetiva (dict)
    - hash_file            → SHA-256 do conteúdo de um arquivo (streaming)

Política de hashing (v1):
    - JSON com chaves ordenadas e separadores compactos
    - Codificação UTF-8, sem escape de caracteres não ASCII
    - Algoritmo SHA-256, saída hexadecimal de 64 caracteres

Invariantes:
    - Estruturas equivalentes produzem o mesmo hash, independente da
      ordem original das chaves
    - O hash de arquivo depende apenas dos bytes do arquivo (não de mtime)

Limites explícitos:
    - Não persiste hashes
    - Não decide staleness
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Dict

_CHUNK_SIZE = 1024 * 1024


def canonical_json(data: Any) -> str:
    """Serialização JSON canônica (chaves ordenadas, separadores compactos)."""
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def hash_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva.

    Args:
        config (Dict[str, Any]): configuração efetiva (valores apenas).

    Returns:
        str: hash SHA-256 hexadecimal.

    Raises:
        TypeError: se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )
    return hash_text(canonical_json(config))


def hash_file(path: Path) -> str:
    """
    Hash SHA-256 do conteúdo de um arquivo, lido em blocos de 1 MiB.

    Raises:
        FileNotFoundError: se o arquivo não existe.
    """
    h = hashlib.sha256()
    with Path(path).open("rb") as f:
        while True:
            chunk = f.read(_CHUNK_SIZE)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()
