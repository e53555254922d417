"""Step canônico: aggregate.summary (v1).

Sumariza `data.combined` por (categoria, período) e publica
`data.summary`. Linhas sem categoria formam o seu próprio grupo.

Config esperada (exemplo):
steps:
  aggregate.summary:
    by: [continent, year]          # default: [<categoria>, <período>]
    metrics:
      - {column: lifeExp, agg: weighted_mean, weight: pop}
      - {column: pop, agg: sum}
      - {column: gdpPercap, agg: mean, name: gdpPercap_mean}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from report_dataflow.core.exceptions import EngineConfigurationError
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from report_dataflow.steps._common import category_column, failed_result, require_contract, require_table, table_shape
from report_dataflow.tables.aggregate import MetricSpec, aggregate


def _parse_metrics(value: Any) -> List[MetricSpec]:
    if not isinstance(value, list) or not value:
        raise EngineConfigurationError(
            "steps.aggregate.summary.metrics must be a non-empty list",
            details={"received": value},
            hint="Declare ao menos uma métrica: {column, agg[, weight, name]}",
        )
    try:
        return [MetricSpec.from_dict(m) for m in value]
    except ValueError as e:
        raise EngineConfigurationError(str(e), details={"received": value}) from e


@dataclass
class AggregateSummaryStep(Step):
    """Métricas agregadas por categoria e período."""

    id: str = "aggregate.summary"
    kind: StepKind = StepKind.AGGREGATE
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["transform.enrich_category"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            contract = require_contract(ctx)
            table = require_table(ctx, "data.combined")
            step_cfg = ctx.step_config(self.id)

            metrics = _parse_metrics(step_cfg.get("metrics"))
            by = step_cfg.get("by") or [category_column(ctx), contract.period_column]
            if not isinstance(by, list) or not all(isinstance(c, str) and c for c in by):
                raise EngineConfigurationError(
                    "steps.aggregate.summary.by must be a list of column names",
                    details={"received": by},
                )

            summary = aggregate(table, by=by, metrics=metrics)
            ctx.set_artifact("data.summary", summary)

            ctx.log(
                step_id=self.id,
                level="info",
                message="summary aggregated",
                by=by,
                groups=int(summary.shape[0]),
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"{int(summary.shape[0])} groups aggregated",
                metrics=table_shape(summary),
                warnings=[],
                artifacts={},
                payload={
                    "by": by,
                    "metrics": [
                        {"column": m.column, "agg": m.agg, "weight": m.weight, "name": m.output_name}
                        for m in metrics
                    ],
                },
            )

        except Exception as e:
            return failed_result(self, ctx, e, fallback_message="aggregate.summary failed")
