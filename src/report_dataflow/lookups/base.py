"""
Lookup de categoria por entidade.

Fontes aceitas por `load_lookup`:
    - mapping inline na config: {Belgium: Europe, ...}
    - "builtin:<nome>": tabela embarcada em `lookups/data/<nome>.yaml`
    - arquivo YAML/JSON: mapping plano {entidade: categoria} ou agrupado
      {categories: {categoria: [entidades]}}
    - arquivo CSV: colunas `entity` e `category` (ou as duas primeiras)

A correspondência ignora caixa e espaços redundantes ("  belgium " casa
com "Belgium"); a categoria devolvida é a da tabela, sem normalização.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Union, runtime_checkable

import pandas as pd
import yaml

from report_dataflow.core.exceptions import SourceNotFound, UnreadableFormat


BUILTIN_PREFIX = "builtin:"
_DATA_DIR = Path(__file__).parent / "data"


@runtime_checkable
class CategoryLookup(Protocol):
    def resolve(self, entity: Any) -> Optional[str]:
        ...


def _normalize(key: Any) -> str:
    return " ".join(str(key).split()).casefold()


class MappingCategoryLookup:
    """Lookup em memória a partir de um mapping entidade → categoria."""

    def __init__(self, mapping: Mapping[Any, Any], *, source: str = "inline"):
        self.source = source
        self._index: Dict[str, str] = {}
        for entity, category in mapping.items():
            key = _normalize(entity)
            value = str(category)
            if key in self._index and self._index[key] != value:
                raise UnreadableFormat(
                    f"Lookup maps '{entity}' to more than one category",
                    details={"source": source, "entity": str(entity), "categories": [self._index[key], value]},
                )
            self._index[key] = value

    def __len__(self) -> int:
        return len(self._index)

    def resolve(self, entity: Any) -> Optional[str]:
        if entity is None or (isinstance(entity, float) and pd.isna(entity)):
            return None
        return self._index.get(_normalize(entity))


def _from_structure(data: Any, *, source: str) -> MappingCategoryLookup:
    if isinstance(data, dict) and isinstance(data.get("categories"), dict):
        flat: Dict[str, str] = {}
        for category, entities in data["categories"].items():
            if not isinstance(entities, list):
                raise UnreadableFormat(
                    f"Lookup category '{category}' must list its entities",
                    details={"source": source, "category": str(category)},
                )
            for entity in entities:
                if entity in flat and flat[entity] != category:
                    raise UnreadableFormat(
                        f"Lookup maps '{entity}' to more than one category",
                        details={"source": source, "entity": str(entity), "categories": [flat[entity], category]},
                    )
                flat[entity] = category
        return MappingCategoryLookup(flat, source=source)

    if isinstance(data, dict) and all(not isinstance(v, (dict, list)) for v in data.values()):
        return MappingCategoryLookup(data, source=source)

    raise UnreadableFormat(
        "Lookup must be a flat mapping or contain a 'categories' mapping",
        details={"source": source},
    )


def _load_csv(path: Path) -> MappingCategoryLookup:
    df = pd.read_csv(path, dtype=str)
    if {"entity", "category"} <= set(df.columns):
        pairs = df[["entity", "category"]]
    elif df.shape[1] >= 2:
        pairs = df.iloc[:, :2]
    else:
        raise UnreadableFormat(
            "Lookup CSV needs an entity and a category column",
            details={"source": str(path), "columns": list(df.columns)},
        )
    pairs = pairs.dropna()
    return MappingCategoryLookup(dict(pairs.itertuples(index=False, name=None)), source=str(path))


def load_lookup(spec: Union[str, Path, Mapping[Any, Any]]) -> MappingCategoryLookup:
    """
    Materializa o lookup descrito por `spec`.

    Raises:
        SourceNotFound: Se o arquivo (ou a tabela builtin) não existir.
        UnreadableFormat: Se o formato não for suportado ou a estrutura
            for inválida.
    """
    if isinstance(spec, Mapping):
        return _from_structure(dict(spec), source="inline")

    text = str(spec)
    if text.startswith(BUILTIN_PREFIX):
        name = text[len(BUILTIN_PREFIX):].strip()
        path = _DATA_DIR / f"{name}.yaml"
        if not name or not path.is_file():
            available = sorted(p.stem for p in _DATA_DIR.glob("*.yaml"))
            raise SourceNotFound(
                f"Unknown builtin lookup: {text}",
                details={"lookup": text, "available": available},
            )
        source = text
    else:
        path = Path(text).expanduser()
        if not path.is_file():
            raise SourceNotFound(
                f"Lookup file not found: {path}",
                details={"path": str(path)},
                hint="Verifique steps.transform.enrich_category.lookup na config.",
            )
        source = str(path)

    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            return _from_structure(yaml.safe_load(path.read_text(encoding="utf-8")), source=source)
        if suffix == ".json":
            return _from_structure(json.loads(path.read_text(encoding="utf-8")), source=source)
        if suffix == ".csv":
            return _load_csv(path)
    except (yaml.YAMLError, json.JSONDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise UnreadableFormat(
            f"Lookup could not be parsed: {path}",
            details={"path": str(path), "exception_class": e.__class__.__name__},
        ) from e

    raise UnreadableFormat(
        f"Unsupported lookup format: {suffix or '(none)'}",
        details={"path": str(path), "supported": [".yaml", ".yml", ".json", ".csv"]},
    )
