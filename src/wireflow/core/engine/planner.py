# src/wireflow/core/engine/planner.py
"""
Planejador de execução de workflows (DAG).

Este módulo produz uma ordem de execução topológica determinística a
partir do grafo de dependências construído pelo GraphBuilder, e oferece
validação de ciclos sobre mapas de arestas arbitrários.

Decisões arquiteturais:
    - Utiliza ordenação topológica determinística (Kahn modificado)
    - Empates são resolvidos pela ordem de declaração: o rank de cada
      workflow é a posição da primeira aparição numa busca em largura a
      partir do alvo, seguindo `depends_on` na ordem declarada
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - Nenhum workflow aparece antes de suas dependências
    - Todos os workflows do grafo aparecem exatamente uma vez
    - O mesmo grafo produz sempre a mesma ordem
    - O alvo é sempre o último (todos os demais são suas dependências)

Limites explícitos:
    - Não executa workflows
    - Não decide staleness
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from wireflow.core.exceptions import cycle_error, dependency_not_found

from .graph import DependencyGraph, WorkflowNode


def find_cycle(edges: Mapping[str, Sequence[str]]) -> Optional[List[str]]:
    """
    Procura um ciclo em um mapa `id → dependências`.

    Todos os ids são tentados como ponto de entrada, na ordem do mapa.
    Dependências que não são chaves do mapa são tratadas como folhas.

    Returns:
        O caminho do primeiro ciclo encontrado (ex.: ["A", "C", "B", "A"]),
        ou None quando o grafo é acíclico.
    """
    done: Set[str] = set()

    for entry in edges:
        if entry in done:
            continue

        visiting: Set[str] = set()
        path: List[str] = []
        stack: List[Tuple[str, bool]] = [(entry, False)]

        while stack:
            wid, expanded = stack.pop()
            if expanded:
                visiting.discard(wid)
                path.pop()
                done.add(wid)
                continue
            if wid in done:
                continue
            if wid in visiting:
                return path[path.index(wid):] + [wid]

            visiting.add(wid)
            path.append(wid)
            stack.append((wid, True))
            for dep in edges.get(wid, ()):
                if dep not in done:
                    stack.append((dep, False))

    return None


def declaration_rank(target: str, edges: Mapping[str, Sequence[str]]) -> Dict[str, int]:
    """Rank de primeira aparição em busca em largura a partir do alvo."""
    rank: Dict[str, int] = {target: 0}
    queue = deque([target])
    while queue:
        wid = queue.popleft()
        for dep in edges.get(wid, ()):
            if dep not in rank:
                rank[dep] = len(rank)
                queue.append(dep)
    return rank


def topological_order(graph: DependencyGraph) -> List[str]:
    """
    Ordem de execução (dependências primeiro, alvo por último).

    Raises:
        DependencyNotFoundError: aresta para um id fora do grafo.
        CycleError: o mapa de arestas contém um ciclo.
    """
    edges = graph.edges
    for wid, deps in edges.items():
        for dep in deps:
            if dep not in graph.nodes:
                raise dependency_not_found(dependency=dep, declared_by=wid)

    rank = declaration_rank(graph.target, edges)
    fallback = len(rank)
    for wid in graph.nodes:
        if wid not in rank:
            rank[wid] = fallback
            fallback += 1

    incoming: Dict[str, int] = {wid: len(edges.get(wid, ())) for wid in graph.nodes}
    dependents: Dict[str, List[str]] = {wid: [] for wid in graph.nodes}
    for wid, deps in edges.items():
        for dep in deps:
            dependents[dep].append(wid)

    ready: List[str] = sorted((wid for wid, c in incoming.items() if c == 0), key=rank.__getitem__)
    order: List[str] = []

    while ready:
        wid = ready.pop(0)
        order.append(wid)
        for child in dependents[wid]:
            incoming[child] -= 1
            if incoming[child] == 0:
                ready.append(child)
                ready.sort(key=rank.__getitem__)

    if len(order) != len(graph.nodes):
        cycle = find_cycle(edges) or []
        raise cycle_error(cycle)

    return order


def plan_execution(graph: DependencyGraph) -> List[WorkflowNode]:
    """Nós do grafo em ordem topológica determinística."""
    return [graph.nodes[wid] for wid in topological_order(graph)]
