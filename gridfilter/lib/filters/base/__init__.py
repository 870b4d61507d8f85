"""Pacote de utilitários base para filtros.

Exporta a API pública usada pelos módulos de filtros:
- BaseFilter: classe abstrata base
- Grupos: GroupFilter, AndFilter, OrFilter
- Exceções específicas: FilterError, MissingColumnsError, ColumnNotFoundError,
  UnsupportedOperatorError, OperandParseError, MalformedFilterError,
  InvalidPathError

Este módulo mantém a superfície pública pequena e estável para facilitar
imports como:

    from gridfilter.lib.filters.base import BaseFilter, AndFilter

"""

from .base import AndFilter, BaseFilter, GroupFilter, OrFilter
from .exceptions import (
    ColumnNotFoundError,
    FilterError,
    InvalidPathError,
    MalformedFilterError,
    MissingColumnsError,
    OperandParseError,
    UnsupportedOperatorError,
)
from .utils import _ensure_bool_series

__all__ = [
    "BaseFilter",
    "GroupFilter",
    "AndFilter",
    "OrFilter",
    "FilterError",
    "MissingColumnsError",
    "ColumnNotFoundError",
    "UnsupportedOperatorError",
    "OperandParseError",
    "MalformedFilterError",
    "InvalidPathError",
    "_ensure_bool_series",
]
