"""Step canônico: transform.period_change (v1).

Calcula, por entidade, a variação percentual de cada métrica em relação
ao período anterior, sobre `data.selected`, e publica `data.changes`.

Config esperada (exemplo):
steps:
  transform.period_change:
    metrics: [lifeExp, pop, gdpPercap]   # default: colunas numéricas do contrato
    suffix: _change
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from report_dataflow.core.contract.schema import WorkbookContractV1
from report_dataflow.core.exceptions import EngineConfigurationError
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from report_dataflow.steps._common import failed_result, require_contract, require_table, table_shape
from report_dataflow.tables.change import compute_changes


def _resolve_metrics(value: Any, contract: WorkbookContractV1) -> List[str]:
    if value is None:
        return [c.name for c in contract.columns if c.dtype in ("int", "float")]
    if not isinstance(value, list) or not value or not all(isinstance(v, str) and v for v in value):
        raise EngineConfigurationError(
            "steps.transform.period_change.metrics must be a non-empty list of column names",
            details={"received": value},
        )
    return list(value)


@dataclass
class TransformPeriodChangeStep(Step):
    """Variação período-a-período por entidade."""

    id: str = "transform.period_change"
    kind: StepKind = StepKind.TRANSFORM
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["transform.filter_category"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            contract = require_contract(ctx)
            table = require_table(ctx, "data.selected")
            step_cfg = ctx.step_config(self.id)
            metrics = _resolve_metrics(step_cfg.get("metrics"), contract)
            suffix = step_cfg.get("suffix", "_change")

            changes = compute_changes(
                table,
                entity_column=contract.entity_column,
                period_column=contract.period_column,
                metrics=metrics,
                suffix=suffix,
            )
            ctx.set_artifact("data.changes", changes)

            change_columns = [f"{m}{suffix}" for m in metrics]
            nulls = {c: int(changes[c].isna().sum()) for c in change_columns}

            ctx.log(
                step_id=self.id,
                level="info",
                message="period change computed",
                metrics=metrics,
                rows=int(changes.shape[0]),
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"change computed for {len(metrics)} metrics",
                metrics=table_shape(changes),
                warnings=[],
                artifacts={},
                payload={"change_columns": change_columns, "null_changes": nulls},
            )

        except Exception as e:
            return failed_result(self, ctx, e, fallback_message="transform.period_change failed")
