"""
Pacote de rastreabilidade do Report DataFlow — Manifest v1.

API pública exposta:
    - ReportManifest    → estrutura canônica do Manifest
    - create_manifest   → criação explícita do Manifest
    - add_event         → registro explícito de eventos no Event Log
    - step_started      → marca início de execução de um Step
    - step_finished     → registra conclusão de um Step
    - step_failed       → registra falha de um Step
    - save_manifest     → persistência do Manifest em JSON
    - load_manifest     → restauração determinística do Manifest
"""

from .manifest import (
    ReportManifest,
    create_manifest,
    add_event,
    step_started,
    step_finished,
    step_failed,
    save_manifest,
    load_manifest,
)

__all__ = [
    "ReportManifest",
    "create_manifest",
    "add_event",
    "step_started",
    "step_finished",
    "step_failed",
    "save_manifest",
    "load_manifest",
]
