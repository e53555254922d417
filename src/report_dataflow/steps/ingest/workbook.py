"""Step canônico: ingest.workbook (v1).

Responsabilidades:
- enumerar as planilhas do workbook (ordem do arquivo, filtro opcional)
- carregar cada planilha segundo o Workbook Contract
- unir todas as planilhas numa única Table (`data.combined`)
- registrar origem (path) e fingerprint (sha256) no StepResult

Config esperada (exemplo):
steps:
  ingest.workbook:
    path: data/gapminder.xlsx
    skip_rows: 4
    sheet_pattern: "\\d{4}"
    parallel: false
    max_workers: 4
    column_order: [country, year, pop, gdpPercap]

Sem `column_order`, a Table combinada segue a ordem padrão do contrato:
entidade, período e depois as demais colunas declaradas.

Com `parallel: true`, as planilhas são lidas em threads; a Table final
mantém a ordem do workbook.

Limites explícitos (v1):
- NÃO infere schema
- NÃO corrige valores
- NÃO remove linhas duplicadas
"""

from __future__ import annotations

import hashlib
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from report_dataflow.core.contract.schema import WorkbookContractV1
from report_dataflow.core.exceptions import EngineConfigurationError, SchemaMismatch
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from report_dataflow.steps._common import failed_result, require_contract, table_shape
from report_dataflow.tables.union import union_tables
from report_dataflow.workbook.reader import DEFAULT_SKIP_ROWS, list_sheets, load_sheet, resolve_source


def _sha256_and_bytes(path: Path) -> Tuple[str, int]:
    h = hashlib.sha256()
    size = 0
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
            size += len(chunk)
    return h.hexdigest(), size


def _parse_config(step_cfg: Dict[str, Any]) -> Dict[str, Any]:
    skip_rows = step_cfg.get("skip_rows", DEFAULT_SKIP_ROWS)
    if not isinstance(skip_rows, int) or isinstance(skip_rows, bool) or skip_rows < 0:
        raise EngineConfigurationError(
            "steps.ingest.workbook.skip_rows must be a non-negative int",
            details={"received": skip_rows},
        )

    pattern = step_cfg.get("sheet_pattern")
    if pattern is not None and (not isinstance(pattern, str) or not pattern):
        raise EngineConfigurationError(
            "steps.ingest.workbook.sheet_pattern must be a non-empty string",
            details={"received": pattern},
        )
    if pattern is not None:
        try:
            re.compile(pattern)
        except re.error as e:
            raise EngineConfigurationError(
                f"steps.ingest.workbook.sheet_pattern is not a valid regex: {e}",
                details={"received": pattern},
            ) from e

    parallel = step_cfg.get("parallel", False)
    if not isinstance(parallel, bool):
        raise EngineConfigurationError(
            "steps.ingest.workbook.parallel must be a bool",
            details={"received": parallel},
        )

    max_workers: Optional[int] = step_cfg.get("max_workers")
    if max_workers is not None and (not isinstance(max_workers, int) or max_workers < 1):
        raise EngineConfigurationError(
            "steps.ingest.workbook.max_workers must be a positive int",
            details={"received": max_workers},
        )

    column_order = step_cfg.get("column_order")
    if column_order is not None and (
        not isinstance(column_order, list)
        or not column_order
        or not all(isinstance(c, str) and c for c in column_order)
    ):
        raise EngineConfigurationError(
            "steps.ingest.workbook.column_order must be a non-empty list of column names",
            details={"received": column_order},
        )

    return {
        "path": step_cfg.get("path"),
        "skip_rows": skip_rows,
        "sheet_pattern": pattern,
        "parallel": parallel,
        "max_workers": max_workers,
        "column_order": column_order,
    }


def _column_order(requested: Optional[List[str]], contract: WorkbookContractV1) -> List[str]:
    default = contract.default_column_order()
    if requested is None:
        return default
    if len(set(requested)) != len(requested) or set(requested) != set(default):
        raise EngineConfigurationError(
            "steps.ingest.workbook.column_order must list each contract column exactly once",
            details={"received": requested, "expected_columns": sorted(default)},
            hint="Inclua a entidade, o período e todas as colunas declaradas no contrato.",
        )
    return list(requested)


@dataclass
class IngestWorkbookStep(Step):
    """Lê todas as planilhas do workbook e publica a Table combinada."""

    id: str = "ingest.workbook"
    kind: StepKind = StepKind.INGEST
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["contract.load"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            parsed = _parse_config(ctx.step_config(self.id))
            contract = require_contract(ctx)
            column_order = _column_order(parsed["column_order"], contract)

            path = resolve_source(parsed["path"])
            sha256, size_bytes = _sha256_and_bytes(path)

            sheets = list_sheets(path, pattern=parsed["sheet_pattern"])
            if not sheets:
                raise SchemaMismatch(
                    f"Workbook has no sheets to load: {path}",
                    details={"path": str(path), "sheet_pattern": parsed["sheet_pattern"]},
                    hint="Confira sheet_pattern ou o conteúdo do workbook.",
                )

            def _load(name: str) -> pd.DataFrame:
                return load_sheet(path, name, contract=contract, skip_rows=parsed["skip_rows"])

            if parsed["parallel"] and len(sheets) > 1:
                with ThreadPoolExecutor(max_workers=parsed["max_workers"]) as pool:
                    tables = list(pool.map(_load, sheets))
            else:
                tables = [_load(name) for name in sheets]

            rows_per_sheet: Dict[str, int] = {}
            for name, table in zip(sheets, tables):
                rows_per_sheet[name] = int(table.shape[0])
                ctx.log(step_id=self.id, level="debug", message="sheet loaded", sheet=name, rows=rows_per_sheet[name])

            combined = union_tables(tables, column_order=column_order)
            ctx.set_artifact("data.combined", combined)

            ctx.log(
                step_id=self.id,
                level="info",
                message="workbook loaded",
                source_path=str(path),
                sheets=len(sheets),
                rows=int(combined.shape[0]),
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"{len(sheets)} sheets loaded",
                metrics={"sheets": len(sheets), "bytes": size_bytes, **table_shape(combined)},
                warnings=[],
                artifacts={
                    "source_path": str(path),
                    "source_bytes": size_bytes,
                    "source_sha256": sha256,
                },
                payload={
                    "source": {
                        "path": str(path),
                        "sha256": sha256,
                        "bytes": size_bytes,
                        "sheets": sheets,
                    },
                    "rows_per_sheet": rows_per_sheet,
                },
            )

        except Exception as e:
            return failed_result(self, ctx, e, fallback_message="ingest.workbook failed")
