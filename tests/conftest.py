# tests/conftest.py
"""
Fixtures compartilhados para testes do Report DataFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- um Workbook Contract reduzido (gapminder-like)
- contexto de execução controlado (RunContext)
- Steps dummy para testes estruturais
- uma fábrica de workbooks `.xlsx` reais (openpyxl) em `tmp_path`

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Dados retornados são determinísticos e isolados
    - Steps dummy utilizam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Apenas `write_workbook` realiza I/O, e sempre dentro de `tmp_path`
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica de domínio
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest


HEADER_ROWS = 4


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real do projeto.

    Usado por:
        - Testes do loader de config
        - Testes de deep-merge (defaults + local)
        - Testes de hashing de config resolvida
    """
    return """\
engine:
  fail_fast: true
contract:
  path: contract.workbook.v1.yaml
params:
  category: null
steps:
  ingest.workbook:
    path: data/gapminder.xlsx
    skip_rows: 4
  transform.period_change:
    metrics: [pop, gdpPercap]
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML de overrides locais: troca a categoria e as métricas de variação."""
    return """\
params:
  category: Europe
steps:
  transform.period_change:
    metrics: [gdpPercap]
"""


# =====================================================
# Pipeline fixtures (Step + RunContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima e já resolvida para exercitar Engine e RunContext.

    Returns:
        dict: Configuração mínima e válida para execução de testes.
    """
    return {
        "engine": {"fail_fast": True},
        "params": {"category": None},
        "steps": {"ingest.workbook": {"enabled": True}},
    }


@pytest.fixture
def dummy_contract() -> dict:
    """
    Workbook Contract v1 mínimo (país, população, PIB per capita).

    Invariantes:
        - Estrutura estável e determinística
        - Entidade declarada como string; período derivado do nome da planilha
    """
    return {
        "contract_version": "1.0",
        "entity": {"name": "country"},
        "period": {"name": "year", "dtype": "int"},
        "allow_extra_columns": False,
        "columns": [
            {"name": "country", "dtype": "string"},
            {"name": "pop", "dtype": "float"},
            {"name": "gdpPercap", "dtype": "float"},
        ],
    }


@pytest.fixture
def dummy_ctx(dummy_config, dummy_contract):
    """
    RunContext determinístico para testes.

    Decisões arquiteturais:
        - `run_id` e `created_at` são fixos para garantir determinismo
        - Config e contract são injetados explicitamente via fixtures
    """
    from report_dataflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        contract=dummy_contract,
        meta={"source": "pytest"},
    )


@pytest.fixture
def DummyStep():
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de um Step.

    Retorna uma *classe* (não uma instância). O Step registra um artefato
    `<id>.ok` no RunContext e sempre retorna SUCCESS.
    """
    from report_dataflow.core.pipeline.types import StepKind, StepStatus, StepResult

    class _DummyStep:
        def __init__(
            self,
            step_id: str = "ingest.workbook",
            kind: StepKind = StepKind.DIAGNOSTIC,
            depends_on=None,
        ):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []

        def run(self, ctx):
            ctx.set_artifact(f"{self.id}.ok", True)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                metrics={},
                warnings=[],
                artifacts={"ok": f"{self.id}.ok"},
                payload={"note": "dummy"},
            )

    return _DummyStep


# =====================================================
# Workbook fixtures
# =====================================================

GAPMINDER_LIKE: Dict[str, List[List[Any]]] = {
    "2002": [
        ["Belgium", 10000.0, 30000.0],
        ["France", 60000.0, 28000.0],
        ["Kenya", 32000.0, 1300.0],
        ["Belgum", 500.0, 100.0],
    ],
    "2007": [
        ["Belgium", 10500.0, 33000.0],
        ["France", 61000.0, 30800.0],
        ["Kenya", 35000.0, 1430.0],
        ["Belgum", 500.0, 110.0],
    ],
}


@pytest.fixture
def write_workbook(tmp_path: Path):
    """
    Fábrica de workbooks `.xlsx` com o layout canônico.

    Cada planilha recebe `header_rows` linhas de título (ignoradas pela
    leitura), depois a linha de cabeçalho e as linhas de dados.

    Uso:
        path = write_workbook({"2002": rows, "2007": rows})
    """
    from openpyxl import Workbook

    def _write(
        sheets: Dict[str, Sequence[Sequence[Any]]],
        *,
        header: Sequence[str] = ("country", "pop", "gdpPercap"),
        name: str = "workbook.xlsx",
        header_rows: int = HEADER_ROWS,
        headers: Optional[Dict[str, Sequence[str]]] = None,
    ) -> Path:
        wb = Workbook()
        wb.remove(wb.active)
        for sheet_name, rows in sheets.items():
            ws = wb.create_sheet(title=sheet_name)
            for i in range(header_rows):
                ws.append([f"Gapminder extract, line {i + 1}"])
            ws.append(list((headers or {}).get(sheet_name, header)))
            for row in rows:
                ws.append(list(row))
        path = tmp_path / name
        wb.save(path)
        return path

    return _write


@pytest.fixture
def gapminder_like_workbook(write_workbook) -> Path:
    """Workbook com dois períodos e um país com erro de digitação ('Belgum')."""
    return write_workbook(GAPMINDER_LIKE)
