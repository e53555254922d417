"""
Operações tabulares do Report DataFlow.

Funções puras sobre `pandas.DataFrame` (Table): não leem arquivos, não
registram eventos e não mutam a entrada. Os Steps do pipeline são a
camada que as orquestra e publica resultados no RunContext.
"""

from .aggregate import AGGREGATIONS, MetricSpec, aggregate  # noqa: F401
from .change import compute_changes, latest_figures  # noqa: F401
from .enrich import EnrichResult, enrich_category  # noqa: F401
from .filter import filter_category  # noqa: F401
from .union import union_tables  # noqa: F401
