"""
Gerador canônico de `report.md` (v1) do Report DataFlow.

Regras:
- O report.md é derivado EXCLUSIVAMENTE do Manifest final (dict).
- Não recalcula tabelas nem lê arquivos exportados.
- Mesmo Manifest => mesmo report.md (ordenação estável).

Estrutura mínima obrigatória:
# Execution Report

## Executive Summary
## Pipeline Overview
## Warnings
## Failures
## Metrics
## Generated Artifacts
## Traceability
## Execution Metadata
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple


REQUIRED_SECTIONS: List[str] = [
    "# Execution Report",
    "## Executive Summary",
    "## Pipeline Overview",
    "## Warnings",
    "## Failures",
    "## Metrics",
    "## Generated Artifacts",
    "## Traceability",
    "## Execution Metadata",
]


def _sorted_items(d: Any) -> List[Tuple[str, Any]]:
    if not isinstance(d, dict):
        return []
    return sorted(d.items(), key=lambda kv: kv[0])


def _as_pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2, default=str)


def _require_manifest(manifest: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(manifest, dict) or not manifest:
        raise ValueError("Manifest is required to generate report.md")
    return manifest


def _ordered_steps(steps: Dict[str, Any], events: List[Any]) -> List[Tuple[str, Dict[str, Any]]]:
    """Steps na ordem em que aparecem no Event Log; os demais por id."""
    seen: List[str] = []
    for ev in events:
        sid = ev.get("step_id") if isinstance(ev, dict) else None
        if sid in steps and sid not in seen:
            seen.append(sid)
    rest = sorted(sid for sid in steps if sid not in seen)
    return [(sid, steps[sid]) for sid in seen + rest if isinstance(steps[sid], dict)]


def _collect_files(steps: List[Tuple[str, Dict[str, Any]]]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for step_id, step in steps:
        files = (step.get("artifacts") or {}).get("files")
        for name, info in _sorted_items(files):
            info = info if isinstance(info, dict) else {"path": info}
            out.append({"name": name, "path": info.get("path"), "sha256": info.get("sha256"), "produced_by": step_id})
    return out


def generate_report_md(manifest: Dict[str, Any]) -> str:
    """Gera o conteúdo completo do report.md a partir do Manifest final."""
    manifest = _require_manifest(manifest)

    run = manifest.get("run") if isinstance(manifest.get("run"), dict) else {}
    inputs = manifest.get("inputs") if isinstance(manifest.get("inputs"), dict) else {}
    steps = manifest.get("steps") if isinstance(manifest.get("steps"), dict) else {}
    events = manifest.get("events") if isinstance(manifest.get("events"), list) else []

    ordered = _ordered_steps(steps, events)
    failed = [(sid, s) for sid, s in ordered if s.get("status") == "failed"]

    lines: List[str] = []

    lines.append("# Execution Report\n")

    lines.append("## Executive Summary")
    lines.append(f"- **Run ID**: `{run.get('run_id', '<unknown>')}`")
    lines.append(f"- **Started At (UTC)**: `{run.get('started_at', '<unknown>')}`")
    lines.append(f"- **Version**: `{run.get('version', '<unknown>')}`")
    params = run.get("params") or {}
    if params:
        for k, v in _sorted_items(params):
            lines.append(f"- **Param `{k}`**: `{v}`")
    else:
        lines.append("- **Params**: none")
    lines.append(f"- **Outcome**: `{'failed' if failed else 'success'}`")
    lines.append("")

    lines.append("## Pipeline Overview")
    if ordered:
        lines.append("| step | kind | status | duration (ms) | summary |")
        lines.append("|---|---|---|---|---|")
        for step_id, step in ordered:
            summary = str(step.get("summary") or "").replace("|", "\\|")
            lines.append(
                f"| `{step_id}` | {step.get('kind', 'unknown')} | {step.get('status', 'unknown')} "
                f"| {step.get('duration_ms', '')} | {summary} |"
            )
    else:
        lines.append("No steps recorded in the Manifest.")
    lines.append("")

    lines.append("## Warnings")
    warned = [(sid, s.get("warnings")) for sid, s in ordered if s.get("warnings")]
    if warned:
        for step_id, warnings in warned:
            lines.append(f"### {step_id}")
            for w in warnings:
                lines.append(f"- {w}")
    else:
        lines.append("No warnings recorded.")
    lines.append("")

    lines.append("## Failures")
    if failed:
        for step_id, step in failed:
            lines.append(f"### {step_id}")
            lines.append("```json")
            lines.append(_as_pretty_json(step.get("error")))
            lines.append("```")
    else:
        lines.append("No failures recorded.")
    lines.append("")

    lines.append("## Metrics")
    measured = [(sid, s.get("metrics")) for sid, s in ordered if s.get("metrics")]
    if measured:
        for step_id, metrics in measured:
            rendered = ", ".join(f"{k}=`{v}`" for k, v in _sorted_items(metrics))
            lines.append(f"- **{step_id}**: {rendered}")
    else:
        lines.append("No metrics recorded.")
    lines.append("")

    lines.append("## Generated Artifacts")
    files = _collect_files(ordered)
    if files:
        for f in files:
            lines.append(f"- **{f['name']}**: `{f['path']}` (sha256: `{f['sha256']}`, produced_by: `{f['produced_by']}`)")
    else:
        lines.append("No files recorded in Manifest steps.")
    lines.append("")

    lines.append("## Traceability")
    lines.append("- Source of truth: `Manifest` (final) only.")
    lines.append(f"- Events recorded: `{len(events)}`\n")

    lines.append("## Execution Metadata")
    lines.append("### run")
    lines.append("```json")
    lines.append(_as_pretty_json(run))
    lines.append("```")
    lines.append("### inputs")
    lines.append("```json")
    lines.append(_as_pretty_json(inputs))
    lines.append("```")

    content = "\n".join(lines) + "\n"

    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Report generation failed: missing required section: {sec}")

    return content
