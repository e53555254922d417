# src/report_dataflow/core/pipeline/context.py
"""
RunContext: o estado de um único run.

Os Steps não se chamam entre si; tudo o que um Step produz e outro
consome passa por aqui:

- tabelas intermediárias, por chave (`data.combined`, `data.summary`,
  `data.selected`, `data.changes`, `data.latest`)
- o contrato validado e metadados (`run_dir`, `contract_hash`)
- eventos de log estruturados e warnings não fatais por Step

Cada run cria o seu próprio RunContext; nada é compartilhado entre runs
(inclusive entre os runs de `run_for_each`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class RunContext:
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    contract: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # artefatos

    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        """Valor publicado sob `key`; `KeyError` se nenhum Step o publicou."""
        try:
            return self._artifacts[key]
        except KeyError:
            raise KeyError(key) from None

    def artifact_keys(self) -> List[str]:
        return sorted(self._artifacts)

    # config

    def _section(self, name: str) -> Dict[str, Any]:
        value = (self.config or {}).get(name)
        return value if isinstance(value, dict) else {}

    def step_config(self, step_id: str) -> Dict[str, Any]:
        """`config.steps.<step_id>`, ou `{}` quando ausente ou malformado."""
        value = self._section("steps").get(step_id)
        return value if isinstance(value, dict) else {}

    def param(self, name: str, default: Optional[Any] = None) -> Any:
        """`config.params.<name>` (ex.: `category`)."""
        return self._section("params").get(name, default)

    # observabilidade

    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        self.events.append(
            {
                "run_id": self.run_id,
                "step_id": step_id,
                "level": level,
                "message": message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                **extra,
            }
        )

    def add_warning(self, *, step_id: str, message: str) -> None:
        self.warnings.setdefault(step_id, []).append(message)
