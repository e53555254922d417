"""Concatenação vertical de Tables com o mesmo conjunto de colunas."""

from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from report_dataflow.core.exceptions import SchemaMismatch


def union_tables(tables: Sequence[pd.DataFrame], *, column_order: Sequence[str]) -> pd.DataFrame:
    """
    Empilha as Tables na ordem recebida, com colunas em `column_order`.

    Todas as Tables devem ter exatamente o conjunto de colunas de
    `column_order`. Uma sequência vazia produz uma Table vazia com essas
    colunas.

    Raises:
        SchemaMismatch: Se `column_order` tiver duplicatas ou se alguma
            Table divergir do conjunto de colunas esperado.
    """
    order: List[str] = list(column_order)
    if len(set(order)) != len(order):
        raise SchemaMismatch(
            "column_order has duplicated names",
            details={"column_order": order},
        )

    expected = set(order)
    for i, t in enumerate(tables):
        found = set(t.columns)
        if found != expected:
            raise SchemaMismatch(
                f"Table #{i} does not match the expected columns",
                details={
                    "index": i,
                    "missing_columns": sorted(expected - found),
                    "extra_columns": sorted(str(c) for c in found - expected),
                },
                hint="Todas as planilhas devem seguir o mesmo contrato.",
            )

    if not tables:
        return pd.DataFrame(columns=order)

    return pd.concat([t[order] for t in tables], ignore_index=True)
