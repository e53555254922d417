"""Hashing canônico do Workbook Contract.

Mesma política do hash de configuração: JSON canônico + SHA-256. Permite
detectar, pelo Manifest, que dois runs leram planilhas sob schemas
diferentes.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict


def compute_contract_hash(contract: Dict[str, Any]) -> str:
    """Computa SHA-256 do contrato em formato canônico."""
    canonical = json.dumps(contract or {}, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
