# src/report_dataflow/core/config/hashing.py
"""
Hashing canônico de configuração.

O hash identifica estruturalmente a configuração efetiva de um run e é
gravado no Manifest (`inputs.config_hash`). Dois runs com o mesmo hash e
o mesmo workbook produzem as mesmas tabelas.

Política (v1): JSON canônico (chaves ordenadas, separadores compactos,
UTF-8) + SHA-256.
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera o hash SHA-256 (64 caracteres hex) da configuração efetiva.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
