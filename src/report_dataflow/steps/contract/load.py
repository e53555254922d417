"""Step canônico: contract.load (v1).

Responsabilidades:
- carregar o Workbook Contract (YAML/JSON) via `contract.path`
- validar contra o Workbook Contract v1
- injetar no RunContext (ctx.contract) e registrar o hash em ctx.meta
- produzir payload rastreável (path + hash + versão)

Falhas de contrato nunca são autocorrigidas: o operador deve corrigir o
contrato ou a config.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from report_dataflow.core.contract.errors import ContractError
from report_dataflow.core.contract.hashing import compute_contract_hash
from report_dataflow.core.contract.loader import load_contract
from report_dataflow.core.contract.schema import validate_workbook_contract_v1
from report_dataflow.core.errors import ReportErrorPayload
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus


@dataclass
class ContractLoadStep(Step):
    """Carrega e valida o Workbook Contract v1."""

    id: str = "contract.load"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def _failed(self, ctx: RunContext, *, error_type: str, message: str, details: Dict[str, Any], hint: Optional[str]) -> StepResult:
        err = ReportErrorPayload(type=error_type, message=message, details=details, hint=hint)
        ctx.log(step_id=self.id, level="error", message="contract.load failed", error_type=error_type, error_message=message)
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.FAILED,
            summary=message,
            metrics={},
            warnings=[],
            artifacts={},
            payload={"error": err.to_dict()},
        )

    def run(self, ctx: RunContext) -> StepResult:
        cfg = ctx.config or {}
        contract_cfg = (cfg.get("contract") or {}) if isinstance(cfg, dict) else {}
        path = contract_cfg.get("path") if isinstance(contract_cfg, dict) else None

        if not path:
            return self._failed(
                ctx,
                error_type="CONTRACT_PATH_MISSING",
                message="Caminho do contrato ausente na configuração",
                details={"expected_config_key": "contract.path", "received": path},
                hint="Declare `contract.path` na config (ex.: contract.workbook.v1.yaml)",
            )

        try:
            data = load_contract(path=path)
            validated = validate_workbook_contract_v1(data)
        except ContractError as e:
            return self._failed(
                ctx,
                error_type=e.__class__.__name__,
                message=str(e) or "Contrato inválido",
                details={"contract_path": str(path), "exception_class": e.__class__.__name__},
                hint="Corrija o contrato para aderir ao Workbook Contract v1",
            )

        effective = validated.to_dict()
        chash = compute_contract_hash(effective)
        ctx.contract = effective
        ctx.meta["contract_hash"] = chash

        ctx.log(
            step_id=self.id,
            level="info",
            message="contract loaded",
            contract_path=str(path),
            contract_hash=chash,
        )

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="contract loaded and validated",
            metrics={"columns_count": len(validated.columns)},
            warnings=[],
            artifacts={},
            payload={
                "contract": {
                    "path": str(Path(str(path))),
                    "hash": chash,
                    "contract_version": validated.contract_version,
                    "entity": validated.entity_column,
                    "period": validated.period_column,
                }
            },
        )
