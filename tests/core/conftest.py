"""Fixtures dos testes de Steps: Table unida de exemplo e fábrica de RunContext."""

from datetime import datetime, timezone

import pandas as pd
import pytest

from report_dataflow.core.pipeline.context import RunContext


@pytest.fixture
def combined() -> pd.DataFrame:
    """Table unida como publicada por ingest.workbook (sem categoria)."""
    return pd.DataFrame(
        {
            "country": ["Belgium", "France", "Kenya", "Belgum"] * 2,
            "year": [2002] * 4 + [2007] * 4,
            "pop": [10000.0, 60000.0, 32000.0, 500.0, 10500.0, 61000.0, 35000.0, 500.0],
            "gdpPercap": [30000.0, 28000.0, 1300.0, 100.0, 33000.0, 30800.0, 1430.0, 110.0],
        }
    )


@pytest.fixture
def make_ctx(dummy_contract):
    def _make(steps=None, params=None, artifacts=None) -> RunContext:
        ctx = RunContext(
            run_id="test",
            created_at=datetime.now(timezone.utc),
            config={"params": dict(params or {}), "steps": dict(steps or {})},
            contract=dummy_contract,
            meta={},
        )
        for key, value in (artifacts or {}).items():
            ctx.set_artifact(key, value)
        return ctx

    return _make
