"""Step canônico: export.tables (v1).

Materializa as Tables finais do run em `<run_dir>/artifacts/`:
- um CSV por Table (`<nome>.csv`)
- um workbook XLSX com uma planilha por Table

Config esperada (exemplo):
steps:
  export.tables:
    formats: [csv, xlsx]
    workbook_name: report.xlsx
    tables:
      combined: data.combined
      summary: data.summary
      changes: data.changes
      latest: data.latest

Cada arquivo é registrado com path relativo ao run_dir e sha256.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from report_dataflow.core.exceptions import EngineConfigurationError
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from report_dataflow.steps._common import failed_result, require_table


DEFAULT_TABLES: Dict[str, str] = {
    "combined": "data.combined",
    "summary": "data.summary",
    "changes": "data.changes",
    "latest": "data.latest",
}
_FORMATS = ("csv", "xlsx")


def _sha256_file(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def _get_run_dir(ctx: RunContext) -> Path:
    run_dir = (ctx.meta or {}).get("run_dir")
    if run_dir is None:
        raise EngineConfigurationError(
            "Missing required meta: run_dir",
            hint="Execute via runner (run_report) ou defina ctx.meta['run_dir'].",
        )
    return Path(str(run_dir))


def _parse_config(step_cfg: Dict[str, Any]) -> Dict[str, Any]:
    formats = step_cfg.get("formats", list(_FORMATS))
    if not isinstance(formats, list) or not formats or any(f not in _FORMATS for f in formats):
        raise EngineConfigurationError(
            f"steps.export.tables.formats must be a non-empty subset of {list(_FORMATS)}",
            details={"received": formats},
        )

    tables = step_cfg.get("tables", DEFAULT_TABLES)
    if not isinstance(tables, dict) or not tables:
        raise EngineConfigurationError(
            "steps.export.tables.tables must map output names to artifact keys",
            details={"received": tables},
        )
    for name in tables:
        if not isinstance(name, str) or not name.strip() or len(name) > 31:
            raise EngineConfigurationError(
                "table names must be non-empty strings of at most 31 characters",
                details={"received": name},
            )

    workbook_name = step_cfg.get("workbook_name", "report.xlsx")
    if not isinstance(workbook_name, str) or not workbook_name.endswith(".xlsx"):
        raise EngineConfigurationError(
            "steps.export.tables.workbook_name must end with .xlsx",
            details={"received": workbook_name},
        )

    return {"formats": list(formats), "tables": dict(tables), "workbook_name": workbook_name}


@dataclass
class ExportTablesStep(Step):
    """Exporta as Tables finais em CSV e XLSX."""

    id: str = "export.tables"
    kind: StepKind = StepKind.EXPORT
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["aggregate.summary", "transform.latest_figures"]

    def run(self, ctx: RunContext) -> StepResult:
        try:
            parsed = _parse_config(ctx.step_config(self.id))
            run_dir = _get_run_dir(ctx)
            out_dir = run_dir / "artifacts"
            out_dir.mkdir(parents=True, exist_ok=True)

            tables: Dict[str, pd.DataFrame] = {
                name: require_table(ctx, key) for name, key in parsed["tables"].items()
            }

            files: Dict[str, Dict[str, str]] = {}

            if "csv" in parsed["formats"]:
                for name, table in tables.items():
                    path = out_dir / f"{name}.csv"
                    table.to_csv(path, index=False)
                    files[path.name] = {"path": f"artifacts/{path.name}", "sha256": _sha256_file(path)}

            if "xlsx" in parsed["formats"]:
                path = out_dir / parsed["workbook_name"]
                with pd.ExcelWriter(path, engine="openpyxl") as writer:
                    for name, table in tables.items():
                        table.to_excel(writer, sheet_name=name, index=False)
                files[path.name] = {"path": f"artifacts/{path.name}", "sha256": _sha256_file(path)}

            ctx.log(
                step_id=self.id,
                level="info",
                message="tables exported",
                out_dir=str(out_dir),
                files=sorted(files),
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"{len(files)} files exported",
                metrics={"files": len(files), "tables": len(tables)},
                warnings=[],
                artifacts={"files": files},
                payload={
                    "tables": {name: int(t.shape[0]) for name, t in tables.items()},
                    "formats": parsed["formats"],
                },
            )

        except Exception as e:
            return failed_result(self, ctx, e, fallback_message="export.tables failed")
