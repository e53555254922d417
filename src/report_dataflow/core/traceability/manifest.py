"""
Manifest v1 — rastreabilidade de execuções do Report DataFlow.

O Manifest consolida, de forma determinística e auditável:
    - metadados da execução (run_id, started_at, versão, parâmetros)
    - hashes semânticos de entradas (config, contrato e workbook)
    - estado incremental dos Steps
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - A ordem do Event Log reflete a ordem real de chamada
    - O Manifest é serializável e reconstruível (round-trip JSON)
    - UTC é o timezone canônico para todos os timestamps

Limites explícitos:
    - Não executa pipeline
    - Não decide políticas de execução (fail-fast, skip)
    - Não realiza migração de versões de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps naive são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos, truncada em zero."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class ReportManifest:
    """
    Manifest v1 — registro de uma execução de pipeline.

    Campos principais:
        - run: metadados da execução (run_id, started_at, version, params)
        - inputs: hashes de configuração, contrato e fonte
        - steps: estado incremental de cada Step, indexado por step_id
        - events: Event Log ordenado

    Invariantes:
        - `steps` é sempre um dicionário indexado por step_id
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável em JSON
    """
    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "steps": {k: dict(v) for k, v in self.steps.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportManifest":
        """Reconstrução permissiva; campos ausentes viram estruturas vazias."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    version: str,
    config_hash: str,
    contract_hash: Optional[str] = None,
    params: Optional[Dict[str, Any]] = None,
) -> ReportManifest:
    """
    Cria o Manifest inicial de uma execução.

    ⚠️ Esta função **não emite eventos**: o Event Log inicia vazio e só
    é preenchido por `add_event`, `step_started`, `step_finished` ou
    `step_failed`.

    Args:
        run_id (str): Identificador único da execução.
        started_at (datetime): Timestamp de início da execução.
        version (str): Versão do Report DataFlow utilizada.
        config_hash (str): Hash da configuração resolvida.
        contract_hash (Optional[str]): Hash do contrato, quando já conhecido.
        params (Optional[Dict[str, Any]]): Parâmetros do run (ex.: category).

    Returns:
        ReportManifest: Manifest inicializado.
    """
    return ReportManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "version": version,
            "params": dict(params or {}),
        },
        inputs={
            "config_hash": config_hash,
            "contract_hash": contract_hash,
        },
        steps={},
        events=[],
    )


def _get_manifest(manifest: Union[ReportManifest, Dict[str, Any]]) -> Tuple[ReportManifest, bool]:
    """Normaliza a entrada; o bool indica se era dict (para sincronizar de volta)."""
    if isinstance(manifest, ReportManifest):
        return manifest, False
    return ReportManifest.from_dict(manifest), True


def _sync_back(manifest: Union[ReportManifest, Dict[str, Any]], m: ReportManifest, is_dict: bool) -> None:
    if is_dict:
        manifest.clear()  # type: ignore[union-attr]
        manifest.update(m.to_dict())  # type: ignore[union-attr]


def add_event(
    manifest: Union[ReportManifest, Dict[str, Any]],
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log.

    Cada chamada adiciona exatamente um evento; eventos nunca são
    reordenados ou deduplicados.
    """
    m, is_dict = _get_manifest(manifest)
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload
    m.events.append(ev)
    _sync_back(manifest, m, is_dict)


def step_started(
    manifest: Union[ReportManifest, Dict[str, Any]],
    *,
    step_id: str,
    kind: str,
    ts: datetime,
) -> None:
    """Marca o Step como `running` e registra o evento `step_started`."""
    m, is_dict = _get_manifest(manifest)
    m.steps.setdefault(step_id, {})
    m.steps[step_id].update(
        {
            "step_id": step_id,
            "kind": kind,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(m, event_type="step_started", ts=ts, step_id=step_id, payload={"kind": kind})
    _sync_back(manifest, m, is_dict)


def _duration_ms(step: Dict[str, Any], ts: datetime) -> int:
    started_iso = step.get("started_at")
    if not started_iso:
        return 0
    try:
        started_dt = datetime.fromisoformat(started_iso)
    except ValueError:
        return 0
    return _ms_between(started_dt, ts)


def step_finished(
    manifest: Union[ReportManifest, Dict[str, Any]],
    *,
    step_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra a conclusão de um Step (status, duração, métricas, warnings,
    artifacts) e o evento `step_finished`.

    Steps pulados (sem `step_started`) são registrados com duração zero.
    """
    m, is_dict = _get_manifest(manifest)
    s = m.steps.setdefault(step_id, {"step_id": step_id})
    status = result.get("status", "success")
    s.update(
        {
            "kind": s.get("kind") or result.get("kind"),
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _duration_ms(s, ts),
            "summary": result.get("summary"),
            "metrics": result.get("metrics", {}) or {},
            "warnings": result.get("warnings", []) or [],
            "artifacts": result.get("artifacts", {}) or {},
        }
    )
    add_event(
        m,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": status, "duration_ms": s["duration_ms"]},
    )
    _sync_back(manifest, m, is_dict)


def step_failed(
    manifest: Union[ReportManifest, Dict[str, Any]],
    *,
    step_id: str,
    ts: datetime,
    error: Union[str, Dict[str, Any]],
) -> None:
    """Marca o Step como `failed`, anexa o erro e registra `step_failed`."""
    m, is_dict = _get_manifest(manifest)
    s = m.steps.setdefault(step_id, {"step_id": step_id})
    s.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "duration_ms": _duration_ms(s, ts),
            "error": error,
        }
    )
    add_event(m, event_type="step_failed", ts=ts, step_id=step_id, payload={"error": error})
    _sync_back(manifest, m, is_dict)


def save_manifest(manifest: Union[ReportManifest, Dict[str, Any]], path: Path) -> None:
    """Persiste o Manifest em JSON determinístico (chaves ordenadas)."""
    data = manifest.to_dict() if isinstance(manifest, ReportManifest) else manifest
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True, default=str),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> ReportManifest:
    """Restaura um Manifest persistido por `save_manifest`."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return ReportManifest.from_dict(data)
