# src/report_dataflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do Report DataFlow.

Componentes principais:
    - StepStatus → estados finais (SUCCESS, SKIPPED, FAILED)
    - StepKind   → classificação semântica de Steps
    - StepResult → resultado imutável de um Step

Invariantes:
    - Enums possuem valores textuais canônicos (persistidos no Manifest)
    - StepResult é imutável
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps no pipeline.

    Tipos definidos:
        - DIAGNOSTIC: carga de contrato, inspeções
        - INGEST: leitura do workbook
        - TRANSFORM: enriquecimento, filtro, variação período-a-período
        - AGGREGATE: sumarização por grupo
        - EXPORT: materialização de tabelas

    O tipo é puramente informativo: o Engine não o usa para decidir
    execução.
    """
    DIAGNOSTIC = "diagnostic"
    INGEST = "ingest"
    TRANSFORM = "transform"
    AGGREGATE = "aggregate"
    EXPORT = "export"


class StepStatus(str, Enum):
    """
    Estados finais possíveis da execução de um Step.

    Estados definidos:
        - SUCCESS: execução concluída com sucesso
        - SKIPPED: pulada por decisão explícita (config ou dependência falha)
        - FAILED: execução interrompida por erro

    Estados intermediários (ex.: running) existem apenas no Manifest.
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final da execução
        - summary: resumo textual da execução
        - metrics: métricas numéricas (ex.: rows, sheets)
        - warnings: avisos não fatais (ex.: entidades sem categoria)
        - artifacts: referências a artefatos produzidos (ex.: paths)
        - payload: dados adicionais (ex.: `error`, `impact`)

    O resultado não carrega tabelas: elas vivem no artifact store do
    RunContext, mantendo o StepResult serializável para o Manifest.
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, Any] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value if isinstance(self.kind, StepKind) else self.kind
        data["status"] = self.status.value
        return data
