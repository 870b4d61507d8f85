from __future__ import annotations

# Expor apenas o motor aqui. NÃO importe a camada de estado (Streamlit) aqui
# para evitar ciclo de import (pois ela importa a sessão de filtro).
from .base import AndFilter, BaseFilter, GroupFilter, OrFilter
from .builtins import ColumnFilter, FilterExpr
from .conditions import (
    Between,
    CompareOp,
    Condition,
    Contains,
    Equals,
    GreaterThan,
    GreaterThanOrEqual,
    InList,
    IsEmpty,
    IsNotEmpty,
    IsNull,
    LessThan,
    LessThanOrEqual,
    NotNull,
    Regex,
    StringLength,
)
from .session import FilterSession

__all__ = [
    "BaseFilter",
    "GroupFilter",
    "AndFilter",
    "OrFilter",
    "ColumnFilter",
    "FilterExpr",
    "FilterSession",
    "Condition",
    "CompareOp",
    "Contains",
    "Regex",
    "Equals",
    "GreaterThan",
    "LessThan",
    "GreaterThanOrEqual",
    "LessThanOrEqual",
    "IsEmpty",
    "IsNotEmpty",
    "NotNull",
    "IsNull",
    "Between",
    "InList",
    "StringLength",
]
