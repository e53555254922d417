# src/report_dataflow/core/pipeline/step.py
"""
Protocolo de Step.

Cada Step do Report DataFlow lê tabelas do RunContext (`data.combined`,
`data.selected`, ...), aplica uma operação e publica o resultado sob uma
nova chave. Os Steps canônicos são dataclasses que satisfazem este
protocolo; qualquer objeto com os mesmos atributos também serve.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .context import RunContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    id: str
    kind: StepKind
    depends_on: List[str]

    def run(self, ctx: RunContext) -> StepResult:
        """Executa o Step uma vez; falhas voltam como StepResult FAILED."""
        ...
