# tests/core/contract/test_contract_load_step.py
"""
Testes do Step canônico `contract.load`.

Os testes asseguram que:
- contrato válido é injetado em ctx.contract com hash em ctx.meta
- path ausente, arquivo inexistente, parse inválido e schema inválido
  resultam em FAILED com payload de erro tipado
"""

import json
from datetime import datetime, timezone
from pathlib import Path

from report_dataflow.core.contract.hashing import compute_contract_hash
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.types import StepStatus
from report_dataflow.steps.contract.load import ContractLoadStep


def _ctx(config):
    return RunContext(
        run_id="test",
        created_at=datetime.now(timezone.utc),
        config=config,
        contract={},
        meta={},
    )


def test_contract_load_success(tmp_path: Path, dummy_contract) -> None:
    contract_path = tmp_path / "contract.json"
    contract_path.write_text(json.dumps(dummy_contract), encoding="utf-8")
    ctx = _ctx({"contract": {"path": str(contract_path)}})

    sr = ContractLoadStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    assert ctx.contract["entity"] == {"name": "country"}
    assert ctx.contract["allow_extra_columns"] is False
    assert ctx.meta["contract_hash"] == compute_contract_hash(ctx.contract)
    assert sr.payload["contract"]["hash"] == ctx.meta["contract_hash"]
    assert sr.payload["contract"]["period"] == "year"
    assert sr.metrics == {"columns_count": 3}


def test_contract_load_missing_path() -> None:
    sr = ContractLoadStep().run(_ctx({}))
    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "CONTRACT_PATH_MISSING"


def test_contract_load_file_not_found(tmp_path: Path) -> None:
    sr = ContractLoadStep().run(_ctx({"contract": {"path": str(tmp_path / "missing.yaml")}}))
    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "ContractFileNotFoundError"


def test_contract_load_invalid_parse(tmp_path: Path) -> None:
    contract_path = tmp_path / "bad.yaml"
    contract_path.write_text("contract_version: [", encoding="utf-8")
    sr = ContractLoadStep().run(_ctx({"contract": {"path": str(contract_path)}}))
    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "ContractParseError"


def test_contract_load_invalid_schema(tmp_path: Path, dummy_contract) -> None:
    dummy_contract["columns"] = [{"name": "pop", "dtype": "float"}]  # entidade não declarada
    contract_path = tmp_path / "contract.json"
    contract_path.write_text(json.dumps(dummy_contract), encoding="utf-8")

    ctx = _ctx({"contract": {"path": str(contract_path)}})
    sr = ContractLoadStep().run(ctx)

    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "ContractValidationError"
    assert ctx.contract == {}
