"""Seleção de linhas por categoria (parametrização do run)."""

from __future__ import annotations

from typing import Any, Optional

import pandas as pd

from report_dataflow.core.exceptions import SchemaMismatch


def filter_category(table: pd.DataFrame, *, category_column: str, value: Optional[Any]) -> pd.DataFrame:
    """
    Mantém apenas as linhas cuja categoria é igual a `value`.

    `value=None` significa "sem filtro": a Table é devolvida inteira
    (cópia). Um valor sem correspondência produz uma Table vazia com as
    mesmas colunas.
    """
    if category_column not in table.columns:
        raise SchemaMismatch(
            f"Column '{category_column}' not found for category filter",
            details={"column": category_column, "found_columns": [str(c) for c in table.columns]},
            hint="Execute o enriquecimento de categoria antes do filtro.",
        )

    if value is None:
        return table.copy()

    mask = table[category_column] == value
    return table.loc[mask].reset_index(drop=True)
