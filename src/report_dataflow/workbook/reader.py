"""
Leitura canônica de workbooks (Sheet Enumerator + Sheet Loader).

Cada planilha do workbook representa um período e é nomeada pelo próprio
período (ex.: "2002", "2007"). A região de dados começa após um número
fixo de linhas de cabeçalho (4 por padrão): a linha seguinte contém os
nomes das colunas.

Responsabilidades:
- listar as planilhas na ordem em que estão gravadas no arquivo
- ler uma planilha, selecionar e tipar as colunas declaradas no contrato
- acrescentar a coluna de período derivada do nome da planilha

Erros (todos fatais, nomeando path e planilha):
- SourceNotFound   → o path não resolve para um arquivo
- UnreadableFormat → o arquivo não é um workbook válido
- SchemaMismatch   → região de dados ausente, colunas divergentes,
                     valores não convertíveis ou nome de planilha inválido

Limites explícitos:
- NÃO infere schema (o contrato é a fonte de verdade)
- NÃO corrige valores; valores não convertíveis abortam o run
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, List, Optional, Union
from zipfile import BadZipFile

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from report_dataflow.core.contract.schema import ColumnSpec, WorkbookContractV1
from report_dataflow.core.exceptions import SchemaMismatch, SourceNotFound, UnreadableFormat


DEFAULT_SKIP_ROWS = 4

_UNNAMED_RE = re.compile(r"^Unnamed: \d+$")
_READ_ERRORS = (InvalidFileException, BadZipFile, KeyError, OSError)


def resolve_source(path: Union[str, Path]) -> Path:
    """Resolve o path do workbook ou levanta `SourceNotFound`."""
    if not isinstance(path, (str, Path)) or not str(path).strip():
        raise SourceNotFound(
            "Workbook path is missing",
            details={"path": path},
            hint="Declare steps.ingest.workbook.path na config.",
        )

    p = Path(path).expanduser()
    if not p.is_file():
        raise SourceNotFound(
            f"Workbook not found: {p}",
            details={"path": str(p)},
            hint="Verifique o path do workbook (relativo ao arquivo de config).",
        )
    return p.resolve()


def compile_sheet_pattern(pattern: str) -> "re.Pattern[str]":
    """Compila o regex de seleção de planilhas; `ValueError` nomeia o padrão inválido."""
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid sheet pattern {pattern!r}: {e}") from e


def list_sheets(path: Union[str, Path], *, pattern: Optional[str] = None) -> List[str]:
    """
    Lista as planilhas do workbook, na ordem gravada no arquivo.

    Args:
        path: Caminho do workbook (.xlsx).
        pattern: Regex opcional (match completo) para selecionar planilhas;
            a ordem do workbook é preservada.

    Raises:
        SourceNotFound: Se o path não existir.
        UnreadableFormat: Se o arquivo não for um workbook válido.
        ValueError: Se `pattern` não for um regex válido.
    """
    p = resolve_source(path)
    try:
        wb = load_workbook(p, read_only=True)
    except _READ_ERRORS as e:
        raise UnreadableFormat(
            f"Not a readable workbook: {p}",
            details={"path": str(p), "exception_class": e.__class__.__name__},
            hint="Exporte o arquivo como .xlsx e reexecute.",
        ) from e

    try:
        names = list(wb.sheetnames)
    finally:
        wb.close()

    if pattern is not None:
        rx = compile_sheet_pattern(pattern)
        names = [n for n in names if rx.fullmatch(n)]
    return names


def parse_period(sheet_name: str, *, dtype: str, path: Optional[Path] = None) -> Any:
    """Converte o nome da planilha no valor de período (`int` ou `string`)."""
    text = str(sheet_name).strip()
    if dtype == "string":
        return text
    try:
        return int(text)
    except ValueError:
        raise SchemaMismatch(
            f"Sheet name '{sheet_name}' is not a valid period",
            details={"path": str(path) if path else None, "sheet": sheet_name, "period_dtype": dtype},
            hint="Renomeie a planilha para o período que ela representa ou use sheet_pattern.",
        ) from None


def _cast_column(series: pd.Series, spec: ColumnSpec, *, sheet: str, path: Path) -> pd.Series:
    if spec.dtype == "string":
        values = [None if pd.isna(v) else str(v).strip() for v in series]
        return pd.Series(values, index=series.index, dtype=object)

    numeric = pd.to_numeric(series, errors="coerce")
    bad = series[series.notna() & numeric.isna()]
    if not bad.empty:
        raise SchemaMismatch(
            f"Column '{spec.name}' in sheet '{sheet}' has values that are not {spec.dtype}",
            details={
                "path": str(path),
                "sheet": sheet,
                "column": spec.name,
                "expected_dtype": spec.dtype,
                "examples": [str(v) for v in bad.head(5).tolist()],
            },
            hint="Corrija os valores na planilha ou ajuste o dtype no contrato.",
        )

    if spec.dtype == "float":
        return numeric.astype(float)

    non_integral = numeric[numeric.notna() & (numeric % 1 != 0)]
    if not non_integral.empty:
        raise SchemaMismatch(
            f"Column '{spec.name}' in sheet '{sheet}' has non-integer values",
            details={
                "path": str(path),
                "sheet": sheet,
                "column": spec.name,
                "expected_dtype": "int",
                "examples": [str(v) for v in non_integral.head(5).tolist()],
            },
            hint="Declare a coluna como float no contrato.",
        )
    return numeric.astype("Int64")


def load_sheet(
    path: Union[str, Path],
    sheet_name: str,
    *,
    contract: WorkbookContractV1,
    skip_rows: int = DEFAULT_SKIP_ROWS,
) -> pd.DataFrame:
    """
    Lê a região tabular de uma planilha como Table tipada.

    Colunas resultantes: as declaradas no contrato (na ordem declarada)
    seguidas da coluna de período, preenchida com o nome da planilha
    convertido para o dtype de período do contrato. Linhas totalmente
    vazias são descartadas; linhas com dados mas sem entidade abortam a
    leitura (seriam indistinguíveis entre si no cálculo de variações).

    Raises:
        SourceNotFound: Se o path não existir.
        UnreadableFormat: Se o arquivo não for um workbook válido.
        SchemaMismatch: Se a região de dados estiver ausente ou divergir do contrato.
    """
    p = resolve_source(path)
    where = {"path": str(p), "sheet": sheet_name}

    period_value = parse_period(sheet_name, dtype=contract.period_dtype, path=p)

    try:
        raw = pd.read_excel(p, sheet_name=sheet_name, skiprows=skip_rows, engine="openpyxl", dtype=object)
    except ValueError as e:
        # pandas sinaliza planilha inexistente com ValueError
        raise SchemaMismatch(
            f"Sheet '{sheet_name}' could not be read from {p.name}: {e}",
            details=where,
        ) from e
    except _READ_ERRORS as e:
        raise UnreadableFormat(
            f"Not a readable workbook: {p}",
            details={**where, "exception_class": e.__class__.__name__},
        ) from e

    raw.columns = [str(c).strip() for c in raw.columns]
    empty_unnamed = [c for c in raw.columns if _UNNAMED_RE.match(c) and raw[c].isna().all()]
    raw = raw.drop(columns=empty_unnamed).dropna(how="all")

    if raw.columns.empty:
        raise SchemaMismatch(
            f"Sheet '{sheet_name}' has no data region after {skip_rows} header rows",
            details={**where, "skip_rows": skip_rows},
            hint="Confira o número de linhas de cabeçalho (skip_rows).",
        )

    declared = contract.column_names
    missing = [c for c in declared if c not in raw.columns]
    if missing:
        raise SchemaMismatch(
            f"Sheet '{sheet_name}' is missing columns: {missing}",
            details={**where, "missing_columns": missing, "found_columns": list(raw.columns)},
            hint="Ajuste o cabeçalho da planilha ou o contrato.",
        )

    extra = [c for c in raw.columns if c not in declared]
    if extra and not contract.allow_extra_columns:
        raise SchemaMismatch(
            f"Sheet '{sheet_name}' has undeclared columns: {extra}",
            details={**where, "extra_columns": extra},
            hint="Declare as colunas no contrato ou habilite allow_extra_columns.",
        )

    if contract.period_column in raw.columns:
        raise SchemaMismatch(
            f"Sheet '{sheet_name}' already has a '{contract.period_column}' column",
            details={**where, "column": contract.period_column},
            hint="O período é derivado do nome da planilha; remova a coluna.",
        )

    table = pd.DataFrame(
        {spec.name: _cast_column(raw[spec.name], spec, sheet=sheet_name, path=p) for spec in contract.columns}
    ).reset_index(drop=True)

    entity = table[contract.entity_column]
    blank = entity.isna() | (entity.astype(str).str.strip() == "")
    if blank.any():
        # posições 1-based dentro da região de dados (linhas vazias já descartadas)
        positions = [int(i) + 1 for i in table.index[blank]]
        raise SchemaMismatch(
            f"Sheet '{sheet_name}' has rows without '{contract.entity_column}': data rows {positions}",
            details={**where, "column": contract.entity_column, "rows": positions},
            hint="Preencha a entidade ou remova as linhas (notas de rodapé, totais) da região de dados.",
        )

    table[contract.period_column] = period_value
    return table
