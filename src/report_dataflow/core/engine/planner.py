# src/report_dataflow/core/engine/planner.py
"""
Ordem de execução do pipeline.

O pipeline canônico é pequeno (contract → ingest → enrich → summary /
filter → change → latest → export), mas a ordem nunca é implícita: ela
é derivada de `depends_on` com um Kahn determinístico em que, entre
Steps prontos ao mesmo tempo, vence o menor `step.id`.

Erros estruturais (id inválido/duplicado, dependência desconhecida,
ciclo) são detectados aqui, antes que qualquer planilha seja lida.
"""

from __future__ import annotations

import heapq
from typing import Dict, Iterable, List

from report_dataflow.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """`depends_on` referencia um Step que não foi declarado."""


class CycleDetectedError(ValueError):
    """As dependências formam um ciclo."""


def _index_steps(steps: Iterable[Step]) -> Dict[str, Step]:
    index: Dict[str, Step] = {}
    for step in steps:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")
        if step_id in index:
            raise ValueError(f"Duplicate step id: {step_id}")
        index[step_id] = step
    return index


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Ordena `steps` topologicamente.

    Raises:
        ValueError: id inválido ou duplicado.
        UnknownDependencyError: dependência não declarada.
        CycleDetectedError: ciclo no grafo (os Steps envolvidos vão na mensagem).
    """
    index = _index_steps(steps)

    pending: Dict[str, int] = {}
    dependents: Dict[str, List[str]] = {step_id: [] for step_id in index}
    for step_id, step in index.items():
        requires = list(getattr(step, "depends_on", None) or [])
        unknown = [d for d in requires if d not in index]
        if unknown:
            raise UnknownDependencyError(f"Step '{step_id}' depends on unknown step(s): {unknown}")
        pending[step_id] = len(requires)
        for dep in requires:
            dependents[dep].append(step_id)

    heap = [step_id for step_id, n in pending.items() if n == 0]
    heapq.heapify(heap)

    ordered: List[Step] = []
    while heap:
        step_id = heapq.heappop(heap)
        ordered.append(index[step_id])
        for child in dependents[step_id]:
            pending[child] -= 1
            if pending[child] == 0:
                heapq.heappush(heap, child)

    if len(ordered) != len(index):
        stuck = sorted(step_id for step_id, n in pending.items() if n > 0)
        raise CycleDetectedError(f"Cycle detected among steps: {stuck}")

    return ordered
