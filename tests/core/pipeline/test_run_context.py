# tests/core/pipeline/test_run_context.py
"""
Testes do RunContext: artifact store, helpers de config, logs
estruturados e warnings por Step.
"""

from datetime import datetime, timezone

import pytest

try:
    from report_dataflow.core.pipeline.context import RunContext
except Exception as e:  # noqa: BLE001
    RunContext = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing src/report_dataflow/core/pipeline/context.py. Import error: {_IMPORT_ERR}")


def test_artifact_set_get(dummy_ctx):
    _require_imports()
    dummy_ctx.set_artifact("data.combined", [1, 2, 3])
    assert dummy_ctx.has_artifact("data.combined")
    assert dummy_ctx.get_artifact("data.combined") == [1, 2, 3]
    assert dummy_ctx.artifact_keys() == ["data.combined"]


def test_artifact_missing_key_raises(dummy_ctx):
    _require_imports()
    with pytest.raises(KeyError):
        dummy_ctx.get_artifact("data.summary")


def test_context_isolation(dummy_config, dummy_contract):
    """Dois contextos não compartilham artefatos, eventos ou warnings."""
    _require_imports()
    ts = datetime(2026, 1, 16, tzinfo=timezone.utc)
    a = RunContext(run_id="a", created_at=ts, config=dummy_config, contract=dummy_contract)
    b = RunContext(run_id="b", created_at=ts, config=dummy_config, contract=dummy_contract)

    a.set_artifact("data.combined", "x")
    a.log(step_id="s", level="info", message="m")
    a.add_warning(step_id="s", message="w")

    assert not b.has_artifact("data.combined")
    assert b.events == []
    assert b.warnings == {}


def test_step_config_and_params(dummy_ctx):
    _require_imports()
    assert dummy_ctx.step_config("ingest.workbook") == {"enabled": True}
    assert dummy_ctx.step_config("export.tables") == {}
    assert dummy_ctx.param("category") is None
    assert dummy_ctx.param("missing", "fallback") == "fallback"

    dummy_ctx.config["steps"] = "not-a-dict"
    assert dummy_ctx.step_config("ingest.workbook") == {}


def test_structured_log_event(dummy_ctx):
    _require_imports()
    dummy_ctx.log(step_id="ingest.workbook", level="info", message="workbook loaded", sheets=2)

    ev = dummy_ctx.events[-1]
    assert ev["run_id"] == "run-test-001"
    assert ev["step_id"] == "ingest.workbook"
    assert ev["level"] == "info"
    assert ev["message"] == "workbook loaded"
    assert ev["sheets"] == 2
    assert datetime.fromisoformat(ev["timestamp"]).tzinfo is not None


def test_warning_collection(dummy_ctx):
    _require_imports()
    dummy_ctx.add_warning(step_id="transform.enrich_category", message="no category for entity 'Belgum'")
    dummy_ctx.add_warning(step_id="transform.enrich_category", message="no category for entity 'Frnace'")
    assert dummy_ctx.warnings == {
        "transform.enrich_category": [
            "no category for entity 'Belgum'",
            "no category for entity 'Frnace'",
        ]
    }
