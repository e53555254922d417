"""Helpers compartilhados pelos Steps canônicos."""

from __future__ import annotations

from typing import Any

import pandas as pd

from report_dataflow.core.contract.schema import WorkbookContractV1
from report_dataflow.core.errors import ReportErrorPayload
from report_dataflow.core.exceptions import EngineConfigurationError, ReportException
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepResult, StepStatus


ENRICH_STEP_ID = "transform.enrich_category"
DEFAULT_CATEGORY_COLUMN = "category"


def require_table(ctx: RunContext, key: str) -> pd.DataFrame:
    if not ctx.has_artifact(key):
        raise EngineConfigurationError(
            f"Missing required artifact: {key}",
            details={"artifact": key, "available": ctx.artifact_keys()},
            hint="Verifique se o Step produtor está habilitado.",
        )
    table = ctx.get_artifact(key)
    if not isinstance(table, pd.DataFrame):
        raise EngineConfigurationError(
            f"Artifact {key} is not a table",
            details={"artifact": key, "received": type(table).__name__},
        )
    return table


def require_contract(ctx: RunContext) -> WorkbookContractV1:
    if not ctx.contract:
        raise EngineConfigurationError(
            "Workbook contract not loaded",
            hint="contract.load deve executar antes deste Step.",
        )
    return WorkbookContractV1.from_dict(ctx.contract)


def category_column(ctx: RunContext) -> str:
    """Nome da coluna de categoria, como configurado no enriquecimento."""
    value = ctx.step_config(ENRICH_STEP_ID).get("category_column", DEFAULT_CATEGORY_COLUMN)
    if not isinstance(value, str) or not value.strip():
        raise EngineConfigurationError(
            f"steps.{ENRICH_STEP_ID}.category_column must be a non-empty string",
            details={"received": value},
        )
    return value


def failed_result(step: Step, ctx: RunContext, exc: Exception, *, fallback_message: str) -> StepResult:
    """Converte uma exceção do Step em StepResult FAILED com payload de erro."""
    if isinstance(exc, ReportException):
        err = exc.to_payload()
    else:
        err = ReportErrorPayload(
            type=exc.__class__.__name__,
            message=str(exc) or fallback_message,
            details={"exception_class": exc.__class__.__name__},
        )

    ctx.log(
        step_id=step.id,
        level="error",
        message=fallback_message,
        error_type=err.type,
        error_message=err.message,
    )
    return StepResult(
        step_id=step.id,
        kind=step.kind,
        status=StepStatus.FAILED,
        summary=err.message,
        metrics={},
        warnings=[],
        artifacts={},
        payload={"error": err.to_dict()},
    )


def table_shape(table: pd.DataFrame) -> dict[str, Any]:
    return {"rows": int(table.shape[0]), "columns": int(table.shape[1])}
