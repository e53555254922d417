"""
Runner do Report DataFlow: monta o pipeline canônico, executa e persiste
os artefatos de rastreabilidade de um run.

Cada run escreve em `run_dir`:
    - artifacts/       → tabelas exportadas (CSV/XLSX)
    - manifest.json    → Manifest v1 (steps, eventos do Engine e logs)
    - report.md        → relatório derivado exclusivamente do Manifest

Parametrização:
    - `params` é mesclado em `config.params` antes do hash da config, de
      modo que runs com parâmetros diferentes tenham hashes diferentes
    - `run_for_each` repete o pipeline completo para cada valor, cada um
      no seu próprio diretório; nenhum estado é compartilhado entre runs

Os logs estruturados do RunContext entram no Event Log como eventos
`log`, depois dos eventos de Step.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from report_dataflow import __version__
from report_dataflow.core.config import compute_config_hash, deep_merge, load_config, resolve_relative_paths
from report_dataflow.core.engine import Engine, RunResult
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.registry import StepRegistry
from report_dataflow.core.traceability import ReportManifest, add_event, create_manifest, save_manifest
from report_dataflow.report.report_md import generate_report_md
from report_dataflow.steps.aggregate.summary import AggregateSummaryStep
from report_dataflow.steps.contract.load import ContractLoadStep
from report_dataflow.steps.export.tables import ExportTablesStep
from report_dataflow.steps.ingest.workbook import IngestWorkbookStep
from report_dataflow.steps.transform.enrich_category import TransformEnrichCategoryStep
from report_dataflow.steps.transform.filter_category import TransformFilterCategoryStep
from report_dataflow.steps.transform.latest_figures import TransformLatestFiguresStep
from report_dataflow.steps.transform.period_change import TransformPeriodChangeStep


MANIFEST_FILENAME = "manifest.json"
REPORT_FILENAME = "report.md"

_SLUG_RE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class ReportRun:
    """Resultado de um run: contexto (tabelas), RunResult e Manifest final."""

    ctx: RunContext
    result: RunResult
    manifest: ReportManifest

    @property
    def ok(self) -> bool:
        return self.result.ok

    @property
    def run_dir(self) -> Path:
        return Path(self.ctx.meta["run_dir"])


def build_registry() -> StepRegistry:
    """Registry do pipeline canônico, na ordem de declaração."""
    registry = StepRegistry()
    registry.add(ContractLoadStep())
    registry.add(IngestWorkbookStep())
    registry.add(TransformEnrichCategoryStep())
    registry.add(AggregateSummaryStep())
    registry.add(TransformFilterCategoryStep())
    registry.add(TransformPeriodChangeStep())
    registry.add(TransformLatestFiguresStep())
    registry.add(ExportTablesStep())
    return registry


def load_run_config(defaults_path: Union[str, Path], local_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Carrega a config e ancora paths relativos no diretório do arquivo de defaults."""
    defaults = Path(defaults_path)
    config = load_config(
        defaults_path=str(defaults),
        local_path=str(local_path) if local_path is not None else None,
    )
    return resolve_relative_paths(config, base_dir=defaults.resolve().parent)


def _new_run_id(now: datetime) -> str:
    return f"{now.strftime('%Y%m%dT%H%M%SZ')}-{uuid.uuid4().hex[:8]}"


def _parse_ts(value: Any, fallback: datetime) -> datetime:
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return fallback


def _record_logs(manifest: ReportManifest, ctx: RunContext) -> None:
    for ev in ctx.events:
        extra = {k: v for k, v in ev.items() if k not in ("run_id", "step_id", "timestamp")}
        add_event(
            manifest,
            event_type="log",
            ts=_parse_ts(ev.get("timestamp"), ctx.created_at),
            step_id=ev.get("step_id"),
            payload=extra,
        )


def _record_inputs(manifest: ReportManifest, ctx: RunContext, result: RunResult) -> None:
    manifest.inputs["contract_hash"] = ctx.meta.get("contract_hash")
    ingest = result.steps.get("ingest.workbook")
    if ingest is not None:
        manifest.inputs["source_sha256"] = (ingest.artifacts or {}).get("source_sha256")
        manifest.inputs["source_path"] = (ingest.artifacts or {}).get("source_path")


def run_report(
    *,
    config: Dict[str, Any],
    run_dir: Union[str, Path],
    run_id: Optional[str] = None,
    params: Optional[Dict[str, Any]] = None,
) -> ReportRun:
    """
    Executa o pipeline completo uma vez.

    Args:
        config: Configuração já resolvida (ver `load_run_config`).
        run_dir: Diretório de saída do run (criado se não existir).
        run_id: Identificador do run; gerado quando ausente.
        params: Parâmetros do run (ex.: {"category": "Europe"}).

    Returns:
        ReportRun com o contexto, o RunResult e o Manifest final.
    """
    started_at = datetime.now(timezone.utc)
    run_id = run_id or _new_run_id(started_at)
    out_dir = Path(run_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    effective = deep_merge(config, {"params": dict(params)}) if params else deep_merge(config, {})
    run_params = effective.get("params") if isinstance(effective.get("params"), dict) else {}

    ctx = RunContext(
        run_id=run_id,
        created_at=started_at,
        config=effective,
        meta={"run_dir": str(out_dir)},
    )

    manifest = create_manifest(
        run_id=run_id,
        started_at=started_at,
        version=__version__,
        config_hash=compute_config_hash(effective),
        params=run_params,
    )

    result = Engine(steps=build_registry().list(), ctx=ctx, manifest=manifest).run()

    _record_inputs(manifest, ctx, result)
    _record_logs(manifest, ctx)
    manifest.run["status"] = "success" if result.ok else "failed"
    manifest.run["failed_steps"] = result.failed_steps()

    save_manifest(manifest, out_dir / MANIFEST_FILENAME)
    (out_dir / REPORT_FILENAME).write_text(generate_report_md(manifest.to_dict()), encoding="utf-8")

    return ReportRun(ctx=ctx, result=result, manifest=manifest)


def run_dir_name(value: Any) -> str:
    """Nome de diretório seguro para um valor de parâmetro."""
    slug = _SLUG_RE.sub("_", str(value)).strip("._")
    return slug or "_"


def run_for_each(
    *,
    config: Dict[str, Any],
    run_root: Union[str, Path],
    values: Iterable[Any],
    param: str = "category",
) -> Dict[Any, ReportRun]:
    """
    Repete o pipeline para cada valor de `param`, em `run_root/<valor>`.

    Runs são independentes: a falha de um valor não interrompe os demais.

    Raises:
        ValueError: Se `values` estiver vazio, tiver duplicatas ou se dois
            valores colidirem no mesmo diretório.
    """
    items = list(values)
    if not items:
        raise ValueError("run_for_each requires at least one value")
    if len(set(items)) != len(items):
        raise ValueError(f"run_for_each received duplicated values: {items}")

    dirs = [run_dir_name(v) for v in items]
    if len(set(dirs)) != len(dirs):
        raise ValueError(f"values map to the same run directory: {dict(zip(items, dirs))}")

    root = Path(run_root)
    runs: Dict[Any, ReportRun] = {}
    for value, name in zip(items, dirs):
        runs[value] = run_report(config=config, run_dir=root / name, params={param: value})
    return runs
