# src/wireflow/core/engine/graph.py
"""
GraphBuilder — construção do grafo de dependências a partir do alvo.

Este módulo descobre, a partir de um workflow alvo, o fecho transitivo de
suas dependências declaradas em `depends_on`, carregando cada workflow uma
única vez e detectando ciclos durante a própria travessia.

Algoritmo:
    - Travessia em profundidade iterativa, com pilha explícita
    - `visiting` contém o caminho corrente; `done` os workflows concluídos
    - Dependências são empilhadas na ordem de declaração (a última
      declarada é expandida primeiro)
    - Encontrar em `visiting` um id já no caminho é um ciclo: o caminho
      reportado vai desse id até ele mesmo, inclusive, rotacionado para
      começar no menor id do ciclo (o relatório não depende do alvo)

Decisões arquiteturais:
    - Nenhuma recursão: profundidade do grafo não depende da pilha do Python
    - O carregamento de workflows é injetado (`load_node`), tornando o
      builder puro e testável sem filesystem
    - Ciclos e dependências ausentes são falhas fatais antes de qualquer
      execução

Invariantes:
    - Cada workflow é carregado no máximo uma vez por build (diamantes
      não são resolvidos duas vezes)
    - O grafo retornado é acíclico por construção
    - `nodes` preserva a ordem de descoberta

Limites explícitos:
    - Não ordena topologicamente (ver `planner`)
    - Não decide staleness nem executa
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Set, Tuple

from wireflow.core.config.resolver import ResolvedConfig
from wireflow.core.exceptions import cycle_error, dependency_not_found, workflow_not_found


@dataclass(frozen=True)
class WorkflowNode:
    """
    Um workflow com sua configuração resolvida e suas referências de arquivo.

    Campos:
        - id: nome do workflow (namespace único no projeto)
        - config: configuração efetiva (imutável)
        - depends_on: dependências diretas, na ordem de declaração
        - task_file: arquivo de tarefa
        - input_files / context_files: arquivos que participam do fingerprint
        - workflow_dir: diretório do workflow (onde o Execution Log vive)
    """

    id: str
    config: ResolvedConfig = field(default_factory=ResolvedConfig)
    depends_on: Tuple[str, ...] = ()
    task_file: Optional[Path] = None
    input_files: Tuple[Path, ...] = ()
    context_files: Tuple[Path, ...] = ()
    workflow_dir: Optional[Path] = None


@dataclass(frozen=True)
class DependencyGraph:
    """Grafo acíclico de workflows alcançáveis a partir de `target`."""

    target: str
    nodes: Mapping[str, WorkflowNode]
    edges: Mapping[str, Tuple[str, ...]]

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))
        object.__setattr__(self, "edges", MappingProxyType(dict(self.edges)))

    def __contains__(self, workflow_id: object) -> bool:
        return workflow_id in self.nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, workflow_id: str) -> WorkflowNode:
        return self.nodes[workflow_id]

    def dependencies(self, workflow_id: str) -> Tuple[str, ...]:
        return self.edges.get(workflow_id, ())

    def dependents(self, workflow_id: str) -> Tuple[str, ...]:
        return tuple(wid for wid, deps in self.edges.items() if workflow_id in deps)


NodeLoader = Callable[[str], Optional[WorkflowNode]]


def _unique(ids: Tuple[str, ...]) -> Tuple[str, ...]:
    seen: Set[str] = set()
    out: List[str] = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            out.append(i)
    return tuple(out)


def _rotate_cycle(cycle: List[str]) -> List[str]:
    """`[X, ..., X]` rotacionado para começar (e terminar) no menor id."""
    ring = cycle[:-1]
    start = ring.index(min(ring))
    ring = ring[start:] + ring[:start]
    return ring + [ring[0]]


def build(target_id: str, load_node: NodeLoader) -> DependencyGraph:
    """
    Constrói o grafo de dependências do workflow alvo.

    Args:
        target_id: workflow alvo.
        load_node: função id → WorkflowNode (ou None se o workflow não existe).

    Returns:
        DependencyGraph: fecho transitivo do alvo, acíclico.

    Raises:
        WorkflowNotFoundError: o alvo não existe.
        DependencyNotFoundError: uma dependência declarada não existe.
        CycleError: ciclo encontrado (caminho completo em `details["cycle"]`).
    """
    loaded: Dict[str, WorkflowNode] = {}
    edges: Dict[str, Tuple[str, ...]] = {}

    visiting: Set[str] = set()
    done: Set[str] = set()
    path: List[str] = []

    # (id, expandido, quem declarou)
    stack: List[Tuple[str, bool, Optional[str]]] = [(target_id, False, None)]

    while stack:
        wid, expanded, parent = stack.pop()

        if expanded:
            visiting.discard(wid)
            path.pop()
            done.add(wid)
            continue

        if wid in done:
            continue

        if wid in visiting:
            raise cycle_error(_rotate_cycle(path[path.index(wid):] + [wid]))

        node = loaded.get(wid)
        if node is None:
            node = load_node(wid)
            if node is None:
                if parent is None:
                    raise workflow_not_found(wid)
                raise dependency_not_found(dependency=wid, declared_by=parent)
            loaded[wid] = node

        deps = _unique(tuple(node.depends_on))
        edges[wid] = deps

        visiting.add(wid)
        path.append(wid)
        stack.append((wid, True, parent))
        for dep in deps:
            if dep not in done:
                stack.append((dep, False, wid))

    return DependencyGraph(target=target_id, nodes=loaded, edges=edges)
