"""Leitura de workbooks: enumeração de planilhas e carga tipada por contrato."""

from .reader import DEFAULT_SKIP_ROWS, list_sheets, load_sheet, resolve_source  # noqa: F401
