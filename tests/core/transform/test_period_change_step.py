import pandas as pd
import pytest

from report_dataflow.core.pipeline.types import StepStatus
from report_dataflow.steps.transform.latest_figures import TransformLatestFiguresStep
from report_dataflow.steps.transform.period_change import TransformPeriodChangeStep


def test_period_change_defaults_to_numeric_contract_columns(make_ctx, combined) -> None:
    ctx = make_ctx(artifacts={"data.selected": combined})

    sr = TransformPeriodChangeStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    changes = ctx.get_artifact("data.changes")
    assert sr.payload["change_columns"] == ["pop_change", "gdpPercap_change"]
    # 4 entidades → 4 primeiros períodos sem variação
    assert sr.payload["null_changes"] == {"pop_change": 4, "gdpPercap_change": 4}

    belgium = changes[(changes["country"] == "Belgium") & (changes["year"] == 2007)].iloc[0]
    assert belgium["gdpPercap_change"] == pytest.approx(0.10)
    assert belgium["pop_change"] == pytest.approx(0.05)


def test_period_change_with_configured_metrics_and_suffix(make_ctx, combined) -> None:
    ctx = make_ctx(
        steps={"transform.period_change": {"metrics": ["gdpPercap"], "suffix": "_growth"}},
        artifacts={"data.selected": combined},
    )

    sr = TransformPeriodChangeStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    assert "gdpPercap_growth" in ctx.get_artifact("data.changes").columns
    assert "pop_growth" not in ctx.get_artifact("data.changes").columns


@pytest.mark.parametrize("metrics", [[], "gdpPercap", [""]])
def test_period_change_invalid_metrics(make_ctx, combined, metrics) -> None:
    ctx = make_ctx(
        steps={"transform.period_change": {"metrics": metrics}},
        artifacts={"data.selected": combined},
    )
    sr = TransformPeriodChangeStep().run(ctx)
    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "ENGINE_CONFIGURATION_ERROR"


def test_period_change_duplicated_rows_fail(make_ctx, combined) -> None:
    table = pd.concat([combined, combined.iloc[[0]]], ignore_index=True)
    sr = TransformPeriodChangeStep().run(make_ctx(artifacts={"data.selected": table}))
    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "SCHEMA_MISMATCH"


def test_latest_figures_step(make_ctx, combined) -> None:
    ctx = make_ctx(artifacts={"data.selected": combined})
    TransformPeriodChangeStep().run(ctx)

    sr = TransformLatestFiguresStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    latest = ctx.get_artifact("data.latest")
    assert latest["country"].tolist() == ["Belgium", "Belgum", "France", "Kenya"]
    assert "year" not in latest.columns
    assert latest.loc[0, "gdpPercap_change"] == pytest.approx(0.10)
    assert sr.metrics == {"rows": 4, "columns": latest.shape[1]}


def test_latest_figures_step_keeps_period_when_configured(make_ctx, combined) -> None:
    ctx = make_ctx(
        steps={"transform.latest_figures": {"drop_period": False}},
        artifacts={"data.changes": combined},
    )
    TransformLatestFiguresStep().run(ctx)
    assert set(ctx.get_artifact("data.latest")["year"]) == {2007}


def test_latest_figures_step_rejects_non_bool_drop_period(make_ctx, combined) -> None:
    ctx = make_ctx(
        steps={"transform.latest_figures": {"drop_period": "no"}},
        artifacts={"data.changes": combined},
    )
    sr = TransformLatestFiguresStep().run(ctx)
    assert sr.status == StepStatus.FAILED
