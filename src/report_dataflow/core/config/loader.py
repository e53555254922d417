# src/report_dataflow/core/config/loader.py
"""
Loader canônico de configuração do Report DataFlow.

A configuração efetiva é resolvida a partir de:
    - um arquivo de defaults (obrigatório)
    - um arquivo local de overrides (opcional; ignorado se não existir)

Princípios fundamentais:
    - Nenhuma heurística implícita é aplicada
    - Erros estruturais são fatais
    - A mesma entrada sempre produz a mesma configuração final

Paths relativos declarados na configuração (workbook, contrato, lookup)
podem ser ancorados no diretório do arquivo de defaults via
`resolve_relative_paths`, de modo que o run não dependa do cwd.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import json

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


# (seção, subchave) que carregam paths de arquivo
_PATH_KEYS: List[Tuple[str, ...]] = [
    ("contract", "path"),
    ("steps", "ingest.workbook", "path"),
    ("steps", "transform.enrich_category", "lookup"),
]

_BUILTIN_PREFIX = "builtin:"


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva do pipeline.

    Política de resolução:
        - O arquivo de defaults é obrigatório
        - O arquivo local é opcional e sempre tem prioridade
        - A resolução utiliza `deep_merge`

    Args:
        defaults_path (str): Caminho para o arquivo de configuração base.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """
    defaults = _load_file(Path(defaults_path))

    effective = defaults

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(defaults, _load_file(local_file))

    return effective


def resolve_relative_paths(config: Dict[str, Any], *, base_dir: Path) -> Dict[str, Any]:
    """Retorna uma cópia da config com paths relativos ancorados em `base_dir`.

    Valores `builtin:<nome>` (lookups empacotados) e paths absolutos são
    preservados.
    """
    overrides: Dict[str, Any] = {}
    for keys in _PATH_KEYS:
        node: Any = config
        for k in keys:
            node = node.get(k) if isinstance(node, dict) else None
        if not isinstance(node, str) or not node.strip():
            continue
        if node.startswith(_BUILTIN_PREFIX) or Path(node).is_absolute():
            continue

        target = overrides
        for k in keys[:-1]:
            target = target.setdefault(k, {})
        target[keys[-1]] = str((base_dir / node).resolve())

    return deep_merge(config, overrides) if overrides else deep_merge(config, {})
