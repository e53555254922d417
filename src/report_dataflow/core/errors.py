"""
Report DataFlow — Estruturas canônicas de erro (v1)

Este módulo define o payload serializável com que falhas e sinais não
fatais são registrados em StepResult, Manifest e report.md.

Catálogo:
    - SOURCE_NOT_FOUND     → workbook ausente (fatal)
    - UNREADABLE_FORMAT    → arquivo não é um workbook válido (fatal)
    - SCHEMA_MISMATCH      → região de dados ausente ou colunas divergentes (fatal)
    - LOOKUP_MISS          → entidade sem categoria resolvível (não fatal)
    - ENGINE_*             → falhas de execução/configuração do Engine

Nenhum stack trace cru é exposto ao operador: apenas mensagem, detalhes
estruturados e uma dica acionável.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ReportErrorPayload:
    """
    Payload canônico de erro do Report DataFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - fatal: indica se o erro aborta a execução
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    fatal: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Fonte / Leitura
SOURCE_NOT_FOUND = "SOURCE_NOT_FOUND"
UNREADABLE_FORMAT = "UNREADABLE_FORMAT"
SCHEMA_MISMATCH = "SCHEMA_MISMATCH"

# Enriquecimento
LOOKUP_MISS = "LOOKUP_MISS"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def lookup_miss(
    *,
    entities: List[str],
    entity_column: str,
    category_column: str,
    step: Optional[str] = None,
    hint: str = "Corrija o nome da entidade na planilha ou acrescente-a à tabela de lookup.",
) -> ReportErrorPayload:
    return ReportErrorPayload(
        type=LOOKUP_MISS,
        message="Entidades sem categoria resolvível",
        details={
            "entities": list(entities),
            "entity_column": entity_column,
            "category_column": category_column,
            "step": step,
        },
        hint=hint,
        fatal=False,
    )


def engine_execution_error(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique os eventos do run para diagnosticar a falha. Nenhum fallback é aplicado automaticamente.",
) -> ReportErrorPayload:
    return ReportErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=exc_message or "Falha inesperada durante a execução do pipeline",
        details={
            "step": step,
            "exception_class": exc_type,
        },
        hint=hint,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a configuração do run/steps antes de reexecutar.",
) -> ReportErrorPayload:
    return ReportErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )
