# tests/core/tables/test_change.py
"""
Testes do Change Calculator e dos números mais recentes.

Exemplo canônico: Belgium 30000 → 33000 produz variação de 0.10.
"""

import pandas as pd
import pytest

from report_dataflow.core.exceptions import SchemaMismatch
from report_dataflow.tables import compute_changes, latest_figures


@pytest.fixture
def table():
    # desordenada de propósito
    return pd.DataFrame(
        {
            "country": ["Belgium", "France", "Belgium", "France", "Kenya"],
            "year": [2007, 2002, 2002, 2007, 2007],
            "gdpPercap": [33000.0, 0.0, 30000.0, 30800.0, 1430.0],
            "pop": [10500.0, 60000.0, None, 61000.0, 35000.0],
        }
    )


def test_belgium_change_between_periods(table):
    out = compute_changes(table, entity_column="country", period_column="year", metrics=["gdpPercap"])

    belgium_2007 = out[(out["country"] == "Belgium") & (out["year"] == 2007)].iloc[0]
    assert belgium_2007["gdpPercap_change"] == pytest.approx(0.10)


def test_first_period_and_zero_or_null_previous_are_null(table):
    out = compute_changes(table, entity_column="country", period_column="year", metrics=["gdpPercap", "pop"])

    changes = {(r.country, r.year): (r.gdpPercap_change, r.pop_change) for r in out.itertuples()}
    # primeiro período de cada entidade
    assert pd.isna(changes[("Belgium", 2002)][0])
    assert pd.isna(changes[("Kenya", 2007)][0])
    # anterior igual a zero
    assert pd.isna(changes[("France", 2007)][0])
    # anterior nulo
    assert pd.isna(changes[("Belgium", 2007)][1])
    assert changes[("France", 2007)][1] == pytest.approx(1000 / 60000)
    assert not out["gdpPercap_change"].isin([float("inf"), float("-inf")]).any()


def test_output_sorted_by_entity_and_period(table):
    out = compute_changes(table, entity_column="country", period_column="year", metrics=["gdpPercap"])
    pairs = list(zip(out["country"], out["year"]))
    assert pairs == sorted(pairs)


def test_custom_suffix(table):
    out = compute_changes(
        table, entity_column="country", period_column="year", metrics=["pop"], suffix="_growth"
    )
    assert "pop_growth" in out.columns


def test_duplicated_entity_period_raises(table):
    dup = pd.concat([table, table.iloc[[0]]], ignore_index=True)
    with pytest.raises(SchemaMismatch):
        compute_changes(dup, entity_column="country", period_column="year", metrics=["gdpPercap"])


def test_missing_metric_raises(table):
    with pytest.raises(SchemaMismatch):
        compute_changes(table, entity_column="country", period_column="year", metrics=["lifeExp"])


def test_latest_figures_one_row_per_entity(table):
    out = latest_figures(table, entity_column="country", period_column="year")

    assert out["country"].tolist() == ["Belgium", "France", "Kenya"]
    assert "year" not in out.columns
    assert out["gdpPercap"].tolist() == [33000.0, 30800.0, 1430.0]


def test_latest_figures_can_keep_period(table):
    out = latest_figures(table, entity_column="country", period_column="year", drop_period=False)
    assert out["year"].tolist() == [2007, 2007, 2007]


def test_latest_figures_uses_each_entity_newest_period():
    table = pd.DataFrame(
        {
            "country": ["Kenya", "Belgium", "Belgium", "Kenya"],
            "year": [2002, 2007, 2002, 1997],
            "gdpPercap": [1290.0, 33000.0, 30000.0, 1340.0],
        }
    )
    out = latest_figures(table, entity_column="country", period_column="year", drop_period=False)

    assert out["country"].tolist() == ["Belgium", "Kenya"]
    assert out["year"].tolist() == [2007, 2002]


def test_latest_figures_keeps_every_row_of_the_newest_period():
    table = pd.DataFrame(
        {
            "country": ["Belgium", "Belgium", "Belgium", "France"],
            "year": [2002, 2007, 2007, 2007],
            "gdpPercap": [30000.0, 33000.0, 33100.0, 30800.0],
        }
    )
    out = latest_figures(table, entity_column="country", period_column="year")

    assert out["country"].tolist() == ["Belgium", "Belgium", "France"]
    # ordem original preservada dentro do mesmo período
    assert out["gdpPercap"].tolist() == [33000.0, 33100.0, 30800.0]
