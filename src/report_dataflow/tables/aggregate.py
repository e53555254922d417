"""
Sumarização por grupo (Aggregator).

Cada métrica declara a coluna de origem e a agregação:

    - weighted_mean → Σ(valor·peso) / Σ(peso), apenas sobre linhas em que
                      valor e peso estão presentes
    - sum           → soma dos valores presentes
    - mean          → média aritmética dos valores presentes

Invariantes:
    - exatamente uma linha por combinação distinta das colunas de grupo
    - chave de grupo nula forma o seu próprio grupo (não é descartada)
    - grupo sem valores válidos produz métrica nula; Σ(peso) = 0 também
    - saída ordenada pelas colunas de grupo (nulos por último)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from report_dataflow.core.exceptions import SchemaMismatch


AGGREGATIONS = ("weighted_mean", "sum", "mean")


@dataclass(frozen=True)
class MetricSpec:
    """Declaração de uma métrica agregada."""

    column: str
    agg: str
    weight: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.agg not in AGGREGATIONS:
            raise ValueError(f"Unsupported aggregation '{self.agg}' (expected one of {list(AGGREGATIONS)})")
        if self.agg == "weighted_mean" and not self.weight:
            raise ValueError(f"weighted_mean on '{self.column}' requires a weight column")
        if self.agg != "weighted_mean" and self.weight:
            raise ValueError(f"weight is only valid for weighted_mean (metric '{self.column}')")

    @property
    def output_name(self) -> str:
        return self.name or self.column

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricSpec":
        if not isinstance(data, dict) or "column" not in data or "agg" not in data:
            raise ValueError(f"Metric must be a mapping with 'column' and 'agg': {data!r}")
        return cls(
            column=str(data["column"]),
            agg=str(data["agg"]),
            weight=data.get("weight"),
            name=data.get("name"),
        )


def _as_float(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").astype(float)


def aggregate(table: pd.DataFrame, *, by: Sequence[str], metrics: Sequence[MetricSpec]) -> pd.DataFrame:
    """
    Agrupa `table` por `by` e calcula cada métrica de `metrics`.

    Returns:
        Table com as colunas de grupo seguidas das métricas, na ordem
        declarada.

    Raises:
        SchemaMismatch: Se colunas de grupo, valores ou pesos não existirem,
            ou se nomes de saída colidirem.
    """
    keys: List[str] = list(by)
    if not keys:
        raise ValueError("aggregate requires at least one group column")

    needed: List[str] = list(keys)
    for m in metrics:
        needed.append(m.column)
        if m.weight:
            needed.append(m.weight)
    missing = sorted({c for c in needed if c not in table.columns})
    if missing:
        raise SchemaMismatch(
            f"Columns not found for aggregation: {missing}",
            details={"missing_columns": missing, "found_columns": [str(c) for c in table.columns]},
        )

    names = keys + [m.output_name for m in metrics]
    if len(set(names)) != len(names):
        raise SchemaMismatch("Aggregation output names collide", details={"columns": names})

    work = table[keys].copy()
    for i, m in enumerate(metrics):
        values = _as_float(table[m.column])
        if m.agg == "weighted_mean":
            weights = _as_float(table[m.weight])
            valid = values.notna() & weights.notna()
            work[f"__num_{i}"] = (values * weights).where(valid)
            work[f"__den_{i}"] = weights.where(valid)
        else:
            work[f"__val_{i}"] = values

    grouped = work.groupby(keys, dropna=False, sort=True)
    out = grouped.size().to_frame("__rows")
    for i, m in enumerate(metrics):
        if m.agg == "weighted_mean":
            num = grouped[f"__num_{i}"].sum(min_count=1)
            den = grouped[f"__den_{i}"].sum(min_count=1)
            out[m.output_name] = num / den.where(den != 0)
        elif m.agg == "sum":
            out[m.output_name] = grouped[f"__val_{i}"].sum(min_count=1)
        else:
            out[m.output_name] = grouped[f"__val_{i}"].mean()

    return out.drop(columns="__rows").reset_index()
