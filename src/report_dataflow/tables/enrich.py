"""
Enriquecimento de Tables com a categoria de cada entidade.

Decisões:
- A coluna de categoria é sempre (re)escrita: aplicar o enriquecimento
  duas vezes produz a mesma Table.
- Entidade sem correspondência no lookup recebe categoria nula e é
  reportada em `misses`; nunca é descartada nem aborta o run.
- Entidade nula recebe categoria nula e não entra em `misses`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from report_dataflow.core.exceptions import SchemaMismatch
from report_dataflow.lookups.base import CategoryLookup


@dataclass(frozen=True)
class EnrichResult:
    table: pd.DataFrame
    misses: List[str] = field(default_factory=list)


def enrich_category(
    table: pd.DataFrame,
    lookup: CategoryLookup,
    *,
    entity_column: str,
    category_column: str = "category",
) -> EnrichResult:
    if entity_column not in table.columns:
        raise SchemaMismatch(
            f"Entity column '{entity_column}' not found",
            details={"column": entity_column, "found_columns": [str(c) for c in table.columns]},
        )
    if category_column == entity_column:
        raise SchemaMismatch(
            "category column must differ from the entity column",
            details={"column": category_column},
        )

    resolved: Dict[str, Optional[str]] = {}
    misses: List[str] = []
    for entity in table[entity_column].dropna().unique():
        category = lookup.resolve(entity)
        resolved[entity] = category
        if category is None:
            misses.append(str(entity))

    categories = pd.Series(
        [None if pd.isna(e) else resolved.get(e) for e in table[entity_column]],
        index=table.index,
        dtype=object,
    )

    out = table.copy()
    out[category_column] = categories
    return EnrichResult(table=out, misses=sorted(misses))
