# tests/core/errors/test_exceptions.py
"""
Testes das exceções tipadas e do payload canônico de erro.

Invariantes:
    - Cada exceção expõe um código estável
    - `to_payload()` produz um ReportErrorPayload serializável e fatal
    - LOOKUP_MISS é o único erro não fatal do catálogo
"""

import json

import pytest

from report_dataflow.core import errors
from report_dataflow.core.exceptions import (
    EngineConfigurationError,
    ReportException,
    SchemaMismatch,
    SourceNotFound,
    UnreadableFormat,
)


@pytest.mark.parametrize(
    "cls, code",
    [
        (SourceNotFound, errors.SOURCE_NOT_FOUND),
        (UnreadableFormat, errors.UNREADABLE_FORMAT),
        (SchemaMismatch, errors.SCHEMA_MISMATCH),
        (EngineConfigurationError, errors.ENGINE_CONFIGURATION_ERROR),
    ],
)
def test_exception_codes_are_stable(cls, code):
    exc = cls("boom", details={"path": "x.xlsx"}, hint="fix it")

    assert isinstance(exc, ReportException)
    assert isinstance(exc, Exception)
    assert exc.code == code
    assert str(exc) == "boom"

    payload = exc.to_payload()
    assert payload.type == code
    assert payload.fatal is True
    assert payload.to_dict() == {
        "type": code,
        "message": "boom",
        "details": {"path": "x.xlsx"},
        "hint": "fix it",
        "fatal": True,
    }


def test_exception_can_be_raised_and_chained():
    with pytest.raises(SchemaMismatch) as info:
        try:
            raise ValueError("inner")
        except ValueError as e:
            raise SchemaMismatch("Sheet '2007' is missing columns: ['pop']") from e

    assert isinstance(info.value.__cause__, ValueError)
    assert info.value.details == {}


def test_lookup_miss_is_not_fatal():
    payload = errors.lookup_miss(
        entities=["Belgum"],
        entity_column="country",
        category_column="continent",
        step="transform.enrich_category",
    )
    d = payload.to_dict()

    assert d["type"] == errors.LOOKUP_MISS
    assert d["fatal"] is False
    assert d["details"]["entities"] == ["Belgum"]
    json.dumps(d)


def test_engine_execution_error_defaults():
    payload = errors.engine_execution_error(step="s", exc_type="KeyError")
    assert payload.type == errors.ENGINE_EXECUTION_ERROR
    assert payload.message
    assert payload.details == {"step": "s", "exception_class": "KeyError"}
