# src/report_dataflow/core/__init__.py
"""
Core do Report DataFlow.

Reúne as responsabilidades independentes de domínio que tornam uma
execução do pipeline determinística e auditável.

Componentes principais:
    - config       → carregamento, merge e hashing de configuração
    - contract     → schema declarativo das planilhas (Workbook Contract v1)
    - pipeline     → protocolo de Step, RunContext e registry
    - engine       → planejamento (DAG) e execução controlada
    - traceability → Manifest e Event Log da execução
    - errors       → payloads de erro serializáveis
    - exceptions   → exceções tipadas (SourceNotFound, SchemaMismatch, ...)

Limites explícitos:
    - Não lê planilhas nem calcula métricas
    - Não depende de CLI ou serviços externos
"""
