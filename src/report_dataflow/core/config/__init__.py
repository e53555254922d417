# src/report_dataflow/core/config/__init__.py
"""
Camada de configuração do Report DataFlow.

A configuração de um run é:
    - declarativa (YAML ou JSON)
    - resolvida por deep-merge determinístico (defaults + overrides locais)
    - identificada por um hash canônico registrado no Manifest

Estrutura esperada (resumo):
    engine:   políticas do Engine (ex.: fail_fast)
    contract: path do Workbook Contract
    params:   parâmetros do run (ex.: category)
    steps:    configuração por step_id (ex.: steps."ingest.workbook".path)

Limites explícitos:
    - Não valida semântica de domínio
    - Não executa pipeline
"""

from .errors import (  # noqa: F401
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash  # noqa: F401
from .loader import load_config, resolve_relative_paths  # noqa: F401
from .merge import deep_merge  # noqa: F401
