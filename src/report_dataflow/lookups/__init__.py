"""Tabelas de lookup entidade → categoria."""

from .base import BUILTIN_PREFIX, CategoryLookup, MappingCategoryLookup, load_lookup  # noqa: F401
