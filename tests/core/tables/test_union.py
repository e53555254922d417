# tests/core/tables/test_union.py
import pandas as pd
import pytest

from report_dataflow.core.exceptions import SchemaMismatch
from report_dataflow.tables import union_tables


def test_union_preserves_input_order_and_column_order():
    a = pd.DataFrame({"year": [2002], "country": ["Belgium"]})
    b = pd.DataFrame({"country": ["France", "Kenya"], "year": [2007, 2007]})

    out = union_tables([a, b], column_order=["country", "year"])

    assert list(out.columns) == ["country", "year"]
    assert out["country"].tolist() == ["Belgium", "France", "Kenya"]
    assert out.index.tolist() == [0, 1, 2]


def test_union_of_nothing_is_empty_table_with_columns():
    out = union_tables([], column_order=["country", "year"])
    assert out.empty
    assert list(out.columns) == ["country", "year"]


def test_union_rejects_divergent_columns():
    a = pd.DataFrame({"country": ["Belgium"], "year": [2002]})
    b = pd.DataFrame({"country": ["France"], "pop": [1.0]})

    with pytest.raises(SchemaMismatch) as info:
        union_tables([a, b], column_order=["country", "year"])

    assert info.value.details["index"] == 1
    assert info.value.details["missing_columns"] == ["year"]
    assert info.value.details["extra_columns"] == ["pop"]


def test_union_rejects_duplicated_column_order():
    with pytest.raises(SchemaMismatch):
        union_tables([], column_order=["country", "country"])
