"""
Schema canônico — Workbook Contract v1.

Descreve o formato que toda planilha do workbook deve ter depois de
descartadas as linhas de cabeçalho:

    contract_version: "1.0"
    entity: {name: country}
    period: {name: year, dtype: int}
    allow_extra_columns: false
    columns:
      - {name: country, dtype: string}
      - {name: pop, dtype: float}

Esta implementação evita dependências externas (ex.: Pydantic) para manter
o core leve.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .errors import ContractValidationError


_ALLOWED_COLUMN_DTYPES = {"int", "float", "string"}
_ALLOWED_PERIOD_DTYPES = {"int", "string"}


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def _expect(cond: bool, msg: str) -> None:
    if not cond:
        raise ContractValidationError(msg)


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    dtype: str


@dataclass(frozen=True)
class WorkbookContractV1:
    """Representação interna explícita do Workbook Contract v1."""

    contract_version: str
    entity_column: str
    period_column: str
    period_dtype: str
    columns: Tuple[ColumnSpec, ...]
    allow_extra_columns: bool = False

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def default_column_order(self) -> List[str]:
        """Entidade, período e então as demais colunas na ordem declarada."""
        rest = [c for c in self.column_names if c != self.entity_column]
        return [self.entity_column, self.period_column, *rest]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract_version": self.contract_version,
            "entity": {"name": self.entity_column},
            "period": {"name": self.period_column, "dtype": self.period_dtype},
            "allow_extra_columns": self.allow_extra_columns,
            "columns": [{"name": c.name, "dtype": c.dtype} for c in self.columns],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkbookContractV1":
        return validate_workbook_contract_v1(data)


def validate_workbook_contract_v1(data: Any) -> WorkbookContractV1:
    """Valida e materializa um Workbook Contract v1."""
    _expect(isinstance(data, dict), "Workbook Contract must be a mapping/dict")

    cv = data.get("contract_version")
    _expect(_is_non_empty_str(cv), "contract_version is required")
    _expect(str(cv) == "1.0", "contract_version must be '1.0' in v1")

    entity = data.get("entity")
    _expect(isinstance(entity, dict), "entity must be a mapping")
    entity_name = entity.get("name")
    _expect(_is_non_empty_str(entity_name), "entity.name is required")

    period = data.get("period")
    _expect(isinstance(period, dict), "period must be a mapping")
    period_name = period.get("name")
    _expect(_is_non_empty_str(period_name), "period.name is required")
    period_dtype = period.get("dtype", "int")
    _expect(
        period_dtype in _ALLOWED_PERIOD_DTYPES,
        f"period.dtype must be one of {sorted(_ALLOWED_PERIOD_DTYPES)}",
    )

    allow_extra = data.get("allow_extra_columns", False)
    _expect(isinstance(allow_extra, bool), "allow_extra_columns must be boolean")

    columns = data.get("columns")
    _expect(isinstance(columns, list) and columns, "columns must be a non-empty list")

    seen: set[str] = set()
    specs: List[ColumnSpec] = []
    for i, c in enumerate(columns):
        _expect(isinstance(c, dict), f"columns[{i}] must be a mapping")
        name = c.get("name")
        _expect(_is_non_empty_str(name), f"columns[{i}].name is required")
        _expect(name not in seen, f"duplicate column name: {name}")
        seen.add(name)

        dtype = c.get("dtype")
        _expect(
            dtype in _ALLOWED_COLUMN_DTYPES,
            f"columns[{i}].dtype must be one of {sorted(_ALLOWED_COLUMN_DTYPES)}",
        )
        specs.append(ColumnSpec(name=name, dtype=dtype))

    by_name = {s.name: s for s in specs}
    _expect(entity_name in by_name, f"entity column '{entity_name}' must be declared in columns")
    _expect(by_name[entity_name].dtype == "string", "entity column must have dtype 'string'")
    _expect(period_name not in by_name, f"period column '{period_name}' must not be declared in columns")

    return WorkbookContractV1(
        contract_version=str(cv),
        entity_column=entity_name,
        period_column=period_name,
        period_dtype=period_dtype,
        columns=tuple(specs),
        allow_extra_columns=allow_extra,
    )
