"""Helpers comuns dos testes end-to-end do Report DataFlow.

Centraliza o boilerplate dos cenários E2E:
- materialização de contrato e config em `tmp_path` (paths relativos)
- leitura do Manifest e dos artefatos exportados de um run

Princípios:
- usar APENAS APIs públicas (runner, config, traceability)
- paths relativos na config, resolvidos pelo diretório do arquivo
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Dict

import pandas as pd
import yaml


def write_project(root: Path, *, contract: Dict[str, Any], workbook: Path) -> Path:
    """Escreve contrato e config em `root/config/` e retorna o path da config."""
    cfg_dir = root / "config"
    cfg_dir.mkdir(parents=True, exist_ok=True)

    (cfg_dir / "contract.workbook.v1.yaml").write_text(yaml.safe_dump(contract, sort_keys=False), encoding="utf-8")

    config = {
        "engine": {"fail_fast": True},
        "contract": {"path": "contract.workbook.v1.yaml"},
        "params": {"category": None},
        "steps": {
            "ingest.workbook": {"path": f"../{workbook.name}", "skip_rows": 4},
            "transform.enrich_category": {"lookup": "builtin:continents", "category_column": "continent"},
            "aggregate.summary": {
                "metrics": [
                    {"column": "gdpPercap", "agg": "weighted_mean", "weight": "pop"},
                    {"column": "pop", "agg": "sum"},
                ]
            },
            "export.tables": {"formats": ["csv", "xlsx"]},
        },
    }
    path = cfg_dir / "config.defaults.yaml"
    path.write_text(yaml.safe_dump(config, sort_keys=False), encoding="utf-8")
    return path


def read_manifest(run_dir: Path) -> Dict[str, Any]:
    return json.loads((run_dir / "manifest.json").read_text(encoding="utf-8"))


def read_table(run_dir: Path, name: str) -> pd.DataFrame:
    return pd.read_csv(run_dir / "artifacts" / f"{name}.csv")


def sha256_file(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()
