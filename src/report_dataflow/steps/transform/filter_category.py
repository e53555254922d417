"""Step canônico: transform.filter_category (v1).

Seleciona as linhas de `data.combined` cuja categoria é o parâmetro
`params.category` do run e publica o resultado em `data.selected`.
Sem parâmetro, todas as linhas seguem adiante.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from report_dataflow.steps._common import category_column, failed_result, require_table
from report_dataflow.tables.filter import filter_category


@dataclass
class TransformFilterCategoryStep(Step):
    id: str = "transform.filter_category"
    kind: StepKind = StepKind.TRANSFORM
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["transform.enrich_category"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            table = require_table(ctx, "data.combined")
            column = category_column(ctx)
            value = ctx.param("category")

            selected = filter_category(table, category_column=column, value=value)
            ctx.set_artifact("data.selected", selected)

            rows_before = int(table.shape[0])
            rows_after = int(selected.shape[0])
            if value is not None and rows_after == 0:
                ctx.add_warning(step_id=self.id, message=f"no rows for category '{value}'")

            ctx.log(
                step_id=self.id,
                level="info",
                message="category filter applied" if value is not None else "no category filter",
                category=value,
                rows_before=rows_before,
                rows_after=rows_after,
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"category = {value}" if value is not None else "all categories",
                metrics={"rows_before": rows_before, "rows_after": rows_after},
                warnings=[],
                artifacts={},
                payload={"filter": {"column": column, "value": value}},
            )

        except Exception as e:
            return failed_result(self, ctx, e, fallback_message="transform.filter_category failed")
