"""Step canônico: transform.enrich_category (v1).

Acrescenta a coluna de categoria a `data.combined` resolvendo cada
entidade numa tabela de lookup.

Config esperada (exemplo):
steps:
  transform.enrich_category:
    lookup: builtin:continents      # ou path YAML/JSON/CSV, ou mapping inline
    category_column: continent

Entidades sem categoria não abortam o run: a linha é mantida com
categoria nula, cada entidade vira um warning do Step e o payload
carrega um `LOOKUP_MISS` (fatal=False).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from report_dataflow.core.errors import lookup_miss
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from report_dataflow.lookups.base import load_lookup
from report_dataflow.steps._common import category_column, failed_result, require_contract, require_table
from report_dataflow.tables.enrich import enrich_category


DEFAULT_LOOKUP = "builtin:continents"


@dataclass
class TransformEnrichCategoryStep(Step):
    """Resolve a categoria de cada entidade via lookup."""

    id: str = "transform.enrich_category"
    kind: StepKind = StepKind.TRANSFORM
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ingest.workbook"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            contract = require_contract(ctx)
            table = require_table(ctx, "data.combined")
            column = category_column(ctx)
            lookup = load_lookup(ctx.step_config(self.id).get("lookup") or DEFAULT_LOOKUP)

            result = enrich_category(
                table,
                lookup,
                entity_column=contract.entity_column,
                category_column=column,
            )
            ctx.set_artifact("data.combined", result.table)

            payload = {"category_column": column, "lookup_source": lookup.source}
            for entity in result.misses:
                ctx.add_warning(step_id=self.id, message=f"no category for entity '{entity}'")
            if result.misses:
                payload["lookup_miss"] = lookup_miss(
                    entities=result.misses,
                    entity_column=contract.entity_column,
                    category_column=column,
                    step=self.id,
                ).to_dict()

            ctx.log(
                step_id=self.id,
                level="warning" if result.misses else "info",
                message="category enrichment applied",
                category_column=column,
                misses=len(result.misses),
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"category resolved ({len(result.misses)} entities without category)",
                metrics={
                    "rows": int(result.table.shape[0]),
                    "entities": int(table[contract.entity_column].nunique()),
                    "lookup_misses": len(result.misses),
                },
                warnings=[],
                artifacts={},
                payload=payload,
            )

        except Exception as e:
            return failed_result(self, ctx, e, fallback_message="transform.enrich_category failed")
