# src/report_dataflow/core/config/merge.py
"""
Deep-merge de configuração (defaults + overrides locais + params do run).

Regras, por chave:
    - dict sobre dict   → merge recursivo
    - lista             → substitui a lista inteira (`metrics`, `formats`, ...)
    - None em qualquer lado → o override vence (`params.category: null`)
    - escalares do mesmo tipo → o override vence
    - tipos diferentes  → `ConfigTypeConflictError`, com o caminho da chave

Nenhum input é mutado; o resultado não compartilha objetos com eles.
"""

from copy import deepcopy
from typing import Any, Dict, Tuple

from .errors import ConfigTypeConflictError


def _merge_value(path: Tuple[str, ...], base: Any, override: Any) -> Any:
    if isinstance(base, dict) and isinstance(override, dict):
        return _merge_dicts(path, base, override)
    if base is None or override is None or isinstance(override, list):
        return deepcopy(override)
    if type(base) is not type(override):
        raise ConfigTypeConflictError(
            f"Conflito de tipo em '{'.'.join(path)}': "
            f"{type(base).__name__} vs {type(override).__name__}"
        )
    return deepcopy(override)


def _merge_dicts(path: Tuple[str, ...], base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if key in merged:
            merged[key] = _merge_value(path + (str(key),), merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Retorna `base` com `override` aplicado por cima.

    Raises:
        ConfigTypeConflictError: Se algum dos lados não for dict na raiz,
            ou se uma chave mudar de tipo.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )
    return _merge_dicts((), base, override)
