"""
Engine de execução do pipeline do Report DataFlow.

Responsabilidades:
- Planejar a ordem de execução (planner) e executar cada Step uma vez.
- Pular Steps desabilitados por config (`steps.<id>.enabled: false`) e
  Steps cujas dependências falharam ou foram puladas.
- Converter exceções em `ReportErrorPayload` (serializável e acionável),
  sem expor stack trace cru ao operador.
- Enriquecer o StepResult com warnings do RunContext e metadados leves do
  payload (bytes + sha256).
- Registrar início/fim/falha de cada Step no Manifest, quando fornecido.

StepResult é frozen: qualquer enriquecimento cria uma nova instância via
`dataclasses.replace`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import hashlib
import json

from report_dataflow.core.errors import (
    ReportErrorPayload,
    engine_configuration_error,
    engine_execution_error,
)
from report_dataflow.core.exceptions import ReportException
from report_dataflow.core.pipeline.context import RunContext
from report_dataflow.core.pipeline.step import Step
from report_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from report_dataflow.core.traceability.manifest import (
    ReportManifest,
    step_failed,
    step_finished,
    step_started,
)

from .planner import plan_execution


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma execução de pipeline (RunResult v1)."""

    steps: Dict[str, StepResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed_steps()

    def failed_steps(self) -> List[str]:
        return [sid for sid, sr in self.steps.items() if sr.status == StepStatus.FAILED]


class Engine:
    """Engine canônico do Report DataFlow (planner + executor)."""

    def __init__(
        self,
        *,
        steps: Sequence[Step],
        ctx: RunContext,
        manifest: Optional[ReportManifest] = None,
    ):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx
        self.manifest = manifest

    def _is_enabled(self, step_id: str) -> bool:
        return bool(self.ctx.step_config(step_id).get("enabled", True))

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", True))

    # ------------------------------------------------------------------
    # Guardrails: exceção -> ReportErrorPayload
    # ------------------------------------------------------------------

    def _exception_to_error(self, *, step_id: str, exc: Exception) -> ReportErrorPayload:
        if isinstance(exc, ReportException):
            return exc.to_payload()
        return engine_execution_error(
            step=step_id,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    # ------------------------------------------------------------------
    # Rastreamento: helpers para enriquecer StepResult
    # ------------------------------------------------------------------

    def _payload_meta(self, payload: Any) -> Dict[str, Any]:
        raw = json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str).encode("utf-8")
        return {
            "payload_bytes": len(raw),
            "payload_sha256": hashlib.sha256(raw).hexdigest(),
        }

    def _enrich(self, *, step: Step, result: StepResult) -> StepResult:
        kind = result.kind or getattr(step, "kind", None) or StepKind.DIAGNOSTIC

        merged: List[str] = []
        for msg in list(result.warnings or []) + list(self.ctx.warnings.get(step.id, [])):
            if msg not in merged:
                merged.append(msg)

        artifacts = dict(result.artifacts or {})
        artifacts.setdefault("payload_meta", self._payload_meta(result.payload or {}))

        return replace(result, step_id=step.id, kind=kind, warnings=merged, artifacts=artifacts)

    def _mk_result(
        self,
        *,
        step: Step,
        status: StepStatus,
        summary: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> StepResult:
        r = StepResult(
            step_id=step.id,
            kind=getattr(step, "kind", None) or StepKind.DIAGNOSTIC,
            status=status,
            summary=summary,
            payload=dict(payload or {}),
        )
        return self._enrich(step=step, result=r)

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _record_start(self, step: Step) -> None:
        if self.manifest is None:
            return
        kind = getattr(step, "kind", None)
        step_started(
            self.manifest,
            step_id=step.id,
            kind=kind.value if isinstance(kind, StepKind) else str(kind),
            ts=self._now(),
        )

    def _record_end(self, result: StepResult) -> None:
        if self.manifest is None:
            return
        if result.status == StepStatus.FAILED:
            error = (result.payload or {}).get("error") or {"message": result.summary}
            step_failed(self.manifest, step_id=result.step_id, ts=self._now(), error=error)
            return
        step_finished(self.manifest, step_id=result.step_id, ts=self._now(), result=result.to_dict())

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------

    def run(self) -> RunResult:
        ordered = plan_execution(self.steps)

        results: Dict[str, StepResult] = {}
        for step in ordered:
            sid = step.id

            if not self._is_enabled(sid):
                results[sid] = self._mk_result(step=step, status=StepStatus.SKIPPED, summary="skipped by config")
                self._record_end(results[sid])
                continue

            deps = list(getattr(step, "depends_on", []) or [])
            blocked = [
                d for d in deps
                if d in results and results[d].status in (StepStatus.FAILED, StepStatus.SKIPPED)
            ]
            if blocked:
                results[sid] = self._mk_result(
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped due to failed or skipped dependency",
                    payload={"blocked_by": blocked},
                )
                self._record_end(results[sid])
                continue

            self._record_start(step)
            try:
                step_result = step.run(self.ctx)
                if not isinstance(step_result, StepResult):
                    err = engine_configuration_error(
                        message="Step retornou tipo inválido",
                        details={
                            "step_id": sid,
                            "expected": "StepResult",
                            "received": type(step_result).__name__,
                        },
                        hint="Ajuste o Step para retornar StepResult",
                    )
                    enriched = self._mk_result(
                        step=step,
                        status=StepStatus.FAILED,
                        summary=err.message,
                        payload={"error": err.to_dict()},
                    )
                else:
                    enriched = self._enrich(step=step, result=step_result)

            except Exception as e:
                err = self._exception_to_error(step_id=sid, exc=e)
                enriched = self._mk_result(
                    step=step,
                    status=StepStatus.FAILED,
                    summary=err.message,
                    payload={"error": err.to_dict()},
                )
                self.ctx.log(
                    step_id=sid,
                    level="error",
                    message="step raised",
                    error_type=err.type,
                    error_message=err.message,
                )

            results[sid] = enriched
            self._record_end(enriched)

            if enriched.status == StepStatus.FAILED and self._fail_fast():
                break

        return RunResult(steps=results)
