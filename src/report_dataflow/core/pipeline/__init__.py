"""
# Pipeline Core — Report DataFlow

Contratos canônicos e estruturas fundamentais de um pipeline.

O pipeline é um **DAG explícito de Steps**, onde:
- cada Step declara identidade, tipo semântico e dependências
- a execução é coordenada exclusivamente pelo Engine
- tabelas intermediárias circulam apenas via `RunContext`

## Componentes

- **types**: `StepStatus`, `StepKind`, `StepResult`
- **step**: `Step` (Protocol)
- **context**: `RunContext` (artefatos, logs estruturados, warnings)
- **registry**: `StepRegistry` (unicidade de `step.id`)
"""

from .context import RunContext  # noqa: F401
from .registry import DuplicateStepIdError, StepRegistry  # noqa: F401
from .step import Step  # noqa: F401
from .types import StepKind, StepResult, StepStatus  # noqa: F401
