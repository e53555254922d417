# src/report_dataflow/core/pipeline/registry.py
"""
Registro dos Steps de um pipeline.

Guarda os Steps na ordem em que foram declarados (o runner registra o
pipeline canônico de uma vez) e rejeita ids vazios ou repetidos no
momento do registro. A ordem de execução é decidida pelo planner.
"""

from __future__ import annotations

from typing import Dict, Iterator, List

from .step import Step


class DuplicateStepIdError(ValueError):
    """Um segundo Step foi registrado com um `id` já existente."""


class StepRegistry:
    """Steps indexados por `id`, preservando a ordem de declaração."""

    def __init__(self) -> None:
        self._by_id: Dict[str, Step] = {}

    def add(self, step: Step) -> None:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")
        if step_id in self._by_id:
            raise DuplicateStepIdError(f"Step '{step_id}' is already registered")
        self._by_id[step_id] = step

    def get(self, step_id: str) -> Step:
        return self._by_id[step_id]

    def list(self) -> List[Step]:
        return list(self._by_id.values())

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._by_id

    def __iter__(self) -> Iterator[Step]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._by_id)
