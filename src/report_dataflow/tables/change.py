"""
Variação período-a-período por entidade (Change Calculator).

Para cada métrica `m`, a coluna `<m>_change` recebe

    (valor_atual - valor_anterior) / valor_anterior

onde "anterior" é o período imediatamente precedente da mesma entidade.
A variação é nula no primeiro período de cada entidade e sempre que o
valor anterior for nulo ou zero (nunca ±inf).
"""

from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from report_dataflow.core.exceptions import SchemaMismatch


def _require_columns(table: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [c for c in columns if c not in table.columns]
    if missing:
        raise SchemaMismatch(
            f"Columns not found: {missing}",
            details={"missing_columns": missing, "found_columns": [str(c) for c in table.columns]},
        )


def _sorted_by_entity_period(table: pd.DataFrame, entity_column: str, period_column: str) -> pd.DataFrame:
    return table.sort_values([entity_column, period_column], kind="mergesort").reset_index(drop=True)


def compute_changes(
    table: pd.DataFrame,
    *,
    entity_column: str,
    period_column: str,
    metrics: Sequence[str],
    suffix: str = "_change",
) -> pd.DataFrame:
    """
    Acrescenta `<métrica><suffix>` para cada métrica.

    A saída é ordenada por entidade e período.

    Raises:
        SchemaMismatch: Se colunas não existirem ou se houver mais de uma
            linha para o mesmo par (entidade, período).
    """
    _require_columns(table, [entity_column, period_column, *metrics])

    dup = table.duplicated(subset=[entity_column, period_column], keep=False)
    if dup.any():
        pairs = table.loc[dup, [entity_column, period_column]].drop_duplicates().head(5)
        raise SchemaMismatch(
            "Duplicated (entity, period) rows; change is ambiguous",
            details={"examples": [[str(e), str(p)] for e, p in pairs.itertuples(index=False)]},
            hint="Remova linhas repetidas da planilha.",
        )

    out = _sorted_by_entity_period(table, entity_column, period_column)
    entity_key = out[entity_column]
    for m in metrics:
        values = pd.to_numeric(out[m], errors="coerce").astype(float)
        previous = values.groupby(entity_key, sort=False, dropna=False).shift(1)
        out[f"{m}{suffix}"] = (values - previous) / previous.where(previous != 0)
    return out


def latest_figures(
    table: pd.DataFrame,
    *,
    entity_column: str,
    period_column: str,
    drop_period: bool = True,
) -> pd.DataFrame:
    """
    Linhas do período mais recente de cada entidade, ordenadas por entidade.

    Seleciona as linhas cujo período é o máximo da entidade; se a entidade
    tiver mais de uma linha nesse período, todas são mantidas.
    """
    _require_columns(table, [entity_column, period_column])

    ordered = _sorted_by_entity_period(table, entity_column, period_column)
    newest = ordered.groupby(entity_column, dropna=False, sort=False)[period_column].transform("max")
    latest = ordered[ordered[period_column] == newest].reset_index(drop=True)
    if drop_period:
        columns: List[str] = [c for c in latest.columns if c != period_column]
        latest = latest[columns]
    return latest
