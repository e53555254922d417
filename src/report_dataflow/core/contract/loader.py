"""Leitura do arquivo do Workbook Contract.

O contrato é um documento pequeno e versionado ao lado da config; o
formato é escolhido pela extensão (`.yaml`/`.yml` ou `.json`). Este
módulo só materializa o mapping bruto: a validação estrutural fica em
`schema.validate_workbook_contract_v1`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from .errors import (
    ContractFileNotFoundError,
    ContractParseError,
    ContractPathMissingError,
    UnsupportedContractFormatError,
)


_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.loads,
}


def load_contract(*, path: Optional[str]) -> Dict[str, Any]:
    """
    Lê o contrato apontado por `contract.path`.

    Raises:
        ContractPathMissingError: `path` vazio ou ausente.
        ContractFileNotFoundError: o path não é um arquivo.
        UnsupportedContractFormatError: extensão fora de YAML/JSON.
        ContractParseError: conteúdo ilegível, vazio ou sem mapping na raiz.
    """
    if not path or not str(path).strip():
        raise ContractPathMissingError("config must define contract.path")

    source = Path(path)
    if not source.is_file():
        raise ContractFileNotFoundError(f"workbook contract not found: {source}")

    parse = _PARSERS.get(source.suffix.lower())
    if parse is None:
        raise UnsupportedContractFormatError(
            f"workbook contract must be YAML or JSON, got '{source.suffix or source.name}'"
        )

    try:
        document = parse(source.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ContractParseError(f"{source.name}: {e}") from e

    if document is None:
        raise ContractParseError(f"{source.name}: workbook contract is empty")
    if not isinstance(document, dict):
        raise ContractParseError(f"{source.name}: contract root must be a mapping")

    return document
