"""Step canônico: transform.latest_figures (v1).

Reduz `data.changes` à linha do período mais recente de cada entidade e
publica `data.latest`. A coluna de período é descartada por padrão
(`drop_period: false` a mantém).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from report_dataflow.core.exceptions import EngineConfigurationError
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from report_dataflow.steps._common import failed_result, require_contract, require_table, table_shape
from report_dataflow.tables.change import latest_figures


@dataclass
class TransformLatestFiguresStep(Step):
    id: str = "transform.latest_figures"
    kind: StepKind = StepKind.TRANSFORM
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["transform.period_change"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            contract = require_contract(ctx)
            table = require_table(ctx, "data.changes")
            drop_period = ctx.step_config(self.id).get("drop_period", True)
            if not isinstance(drop_period, bool):
                raise EngineConfigurationError(
                    "steps.transform.latest_figures.drop_period must be a bool",
                    details={"received": drop_period},
                )

            latest = latest_figures(
                table,
                entity_column=contract.entity_column,
                period_column=contract.period_column,
                drop_period=drop_period,
            )
            ctx.set_artifact("data.latest", latest)

            ctx.log(step_id=self.id, level="info", message="latest figures selected", rows=int(latest.shape[0]))

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"latest figures for {int(latest.shape[0])} entities",
                metrics=table_shape(latest),
                warnings=[],
                artifacts={},
                payload={"drop_period": drop_period},
            )

        except Exception as e:
            return failed_result(self, ctx, e, fallback_message="transform.latest_figures failed")
