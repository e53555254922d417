# tests/core/engine/test_executor_fail_fast.py
"""
Testes da política de falha do Engine.

Os testes asseguram que:
- exceções levantadas por um Step viram StepResult FAILED com payload
  de erro serializável (sem stack trace cru)
- exceções tipadas do domínio preservam seu código estável
- com fail_fast, nenhum Step adicional é executado após a falha
- sem fail_fast, Steps independentes continuam e dependentes são pulados
"""

import pytest

try:
    from report_dataflow.core.engine.engine import Engine
    from report_dataflow.core.exceptions import SourceNotFound
    from report_dataflow.core.pipeline.types import StepStatus
except Exception as e:  # noqa: BLE001
    Engine = None
    StepStatus = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing Engine. Import error: {_IMPORT_ERR}")


class FailingStep:
    """Step mínimo que falha deliberadamente durante a execução."""

    id = "fail"
    kind = None
    depends_on = []

    def run(self, ctx):
        raise RuntimeError("boom")


class MissingSourceStep:
    id = "ingest.workbook"
    kind = None
    depends_on = []

    def run(self, ctx):
        raise SourceNotFound("Workbook not found: /nope.xlsx", details={"path": "/nope.xlsx"})


class NotAResultStep:
    id = "bad"
    kind = None
    depends_on = []

    def run(self, ctx):
        return {"status": "success"}


def test_fail_fast_stops_execution(DummyStep, dummy_ctx):
    _require_imports()
    dummy_ctx.config["engine"] = {"fail_fast": True}
    steps = [FailingStep(), DummyStep(step_id="later")]
    result = Engine(steps=steps, ctx=dummy_ctx).run()

    assert result.steps["fail"].status == StepStatus.FAILED
    assert "later" not in result.steps
    assert result.failed_steps() == ["fail"]
    error = result.steps["fail"].payload["error"]
    assert error["type"] == "ENGINE_EXECUTION_ERROR"
    assert error["message"] == "boom"
    assert error["details"]["exception_class"] == "RuntimeError"


def test_without_fail_fast_dependents_are_skipped(DummyStep, dummy_ctx):
    _require_imports()
    dummy_ctx.config["engine"] = {"fail_fast": False}
    steps = [
        FailingStep(),
        DummyStep(step_id="after", depends_on=["fail"]),
        DummyStep(step_id="independent"),
    ]
    result = Engine(steps=steps, ctx=dummy_ctx).run()

    assert result.steps["fail"].status == StepStatus.FAILED
    assert result.steps["after"].status == StepStatus.SKIPPED
    assert result.steps["after"].payload["blocked_by"] == ["fail"]
    assert result.steps["independent"].status == StepStatus.SUCCESS


def test_typed_exception_keeps_stable_code(dummy_ctx):
    _require_imports()
    result = Engine(steps=[MissingSourceStep()], ctx=dummy_ctx).run()

    error = result.steps["ingest.workbook"].payload["error"]
    assert error["type"] == "SOURCE_NOT_FOUND"
    assert error["details"] == {"path": "/nope.xlsx"}
    assert error["fatal"] is True
    assert any(ev["level"] == "error" for ev in dummy_ctx.events)


def test_non_step_result_is_configuration_error(dummy_ctx):
    _require_imports()
    result = Engine(steps=[NotAResultStep()], ctx=dummy_ctx).run()

    sr = result.steps["bad"]
    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "ENGINE_CONFIGURATION_ERROR"
    assert sr.payload["error"]["details"]["received"] == "dict"
