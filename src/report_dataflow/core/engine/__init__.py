"""
Engine do Report DataFlow.

Componentes principais:
    - planner → ordenação topológica determinística e validações estruturais
    - engine  → execução coordenada de Steps com políticas explícitas

Invariantes:
    - Steps só são executados após suas dependências
    - Cada Step é executado no máximo uma vez por run
    - Não há retry nem recuperação parcial: um run falho é reexecutado
"""

from .engine import Engine, RunResult  # noqa: F401
from .planner import CycleDetectedError, UnknownDependencyError, plan_execution  # noqa: F401
