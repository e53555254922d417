"""
Report DataFlow — Exceções canônicas (v1)

Exceções tipadas levantadas pela leitura do workbook e pelas operações
de tabela. O Engine converte qualquer `ReportException` em
`ReportErrorPayload` usando o `code` da classe como tipo estável.

Regras:
- Mensagem curta e humana, sempre nomeando o path/planilha ofensivo.
- Dados de diagnóstico vão em `details` (serializável).
- Todas são fatais: abortam o run. `LookupMiss` não é exceção, é um
  payload de warning (ver `core.errors.lookup_miss`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from . import errors


@dataclass(eq=False)
class ReportException(Exception):
    """Base class para exceções internas do Report DataFlow."""

    code: ClassVar[str] = errors.ENGINE_EXECUTION_ERROR

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> errors.ReportErrorPayload:
        return errors.ReportErrorPayload(
            type=self.code,
            message=self.message,
            details=dict(self.details),
            hint=self.hint,
            fatal=True,
        )


# ---------------------------------------------------------------------------
# Fonte / Leitura
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class SourceNotFound(ReportException):
    """O path informado não resolve para um arquivo existente."""

    code: ClassVar[str] = errors.SOURCE_NOT_FOUND


@dataclass(eq=False)
class UnreadableFormat(ReportException):
    """O arquivo existe, mas não é um workbook válido."""

    code: ClassVar[str] = errors.UNREADABLE_FORMAT


@dataclass(eq=False)
class SchemaMismatch(ReportException):
    """Região de dados ausente ou colunas divergentes do contrato."""

    code: ClassVar[str] = errors.SCHEMA_MISMATCH


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class EngineConfigurationError(ReportException):
    """Configuração inválida ou inconsistente para execução."""

    code: ClassVar[str] = errors.ENGINE_CONFIGURATION_ERROR
