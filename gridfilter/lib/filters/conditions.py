"""Predicados de coluna (variantes de ``Condition``).

Os operandos são guardados como texto e só são convertidos para o tipo da
coluna no momento da avaliação (ver :mod:`gridfilter.lib.filters.evaluation`).
Assim um predicado não depende de nenhuma tabela ao ser construído.
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar


class CompareOp(str, Enum):
    """Operador de comparação usado por ``StringLength``."""

    EQ = "Eq"
    NE = "Ne"
    LT = "Lt"
    GT = "Gt"
    LTE = "Lte"
    GTE = "Gte"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    def compare(self, left: Any, right: Any) -> Any:
        """Aplica o operador (funciona com escalares e com ``pd.Series``)."""
        return _OPERATORS[self](left, right)


_SYMBOLS = {
    CompareOp.EQ: "=",
    CompareOp.NE: "!=",
    CompareOp.LT: "<",
    CompareOp.GT: ">",
    CompareOp.LTE: "<=",
    CompareOp.GTE: ">=",
}

_OPERATORS: dict[CompareOp, Callable[[Any, Any], Any]] = {
    CompareOp.EQ: operator.eq,
    CompareOp.NE: operator.ne,
    CompareOp.LT: operator.lt,
    CompareOp.GT: operator.gt,
    CompareOp.LTE: operator.le,
    CompareOp.GTE: operator.ge,
}


def _case_marker(case_sensitive: bool) -> str:
    return "[Aa]" if case_sensitive else "[aA]"


# -----------------------------------------------------------------------------
# Condition: base de todos os predicados
# -----------------------------------------------------------------------------
class Condition(ABC):
    """Predicado aplicado a uma única coluna.

    O nome da classe é a *tag* usada na persistência (``{"Contains": {...}}``).
    """

    @property
    def tag(self) -> str:
        return type(self).__name__

    @abstractmethod
    def summary(self, column: str) -> str:
        """Texto curto para listagens (ex.: ``age > 30``)."""
        raise NotImplementedError


@dataclass(frozen=True)
class Contains(Condition):
    value: str
    case_sensitive: bool = False

    def summary(self, column: str) -> str:
        return f'{column} contains "{self.value}" {_case_marker(self.case_sensitive)}'


@dataclass(frozen=True)
class Regex(Condition):
    pattern: str
    case_sensitive: bool = False

    def summary(self, column: str) -> str:
        return f"{column} matches /{self.pattern}/ {_case_marker(self.case_sensitive)}"


@dataclass(frozen=True)
class Equals(Condition):
    value: str
    case_sensitive: bool = False

    def summary(self, column: str) -> str:
        return f'{column} = "{self.value}" {_case_marker(self.case_sensitive)}'


@dataclass(frozen=True)
class RelationalCondition(Condition):
    """Base das comparações ``>``, ``<``, ``>=`` e ``<=`` contra um valor."""

    value: str
    op: ClassVar[CompareOp]

    def summary(self, column: str) -> str:
        return f"{column} {self.op.symbol} {self.value}"


@dataclass(frozen=True)
class GreaterThan(RelationalCondition):
    op: ClassVar[CompareOp] = CompareOp.GT


@dataclass(frozen=True)
class LessThan(RelationalCondition):
    op: ClassVar[CompareOp] = CompareOp.LT


@dataclass(frozen=True)
class GreaterThanOrEqual(RelationalCondition):
    op: ClassVar[CompareOp] = CompareOp.GTE


@dataclass(frozen=True)
class LessThanOrEqual(RelationalCondition):
    op: ClassVar[CompareOp] = CompareOp.LTE


@dataclass(frozen=True)
class IsEmpty(Condition):
    def summary(self, column: str) -> str:
        return f"{column} is empty"


@dataclass(frozen=True)
class IsNotEmpty(Condition):
    def summary(self, column: str) -> str:
        return f"{column} is not empty"


@dataclass(frozen=True)
class NotNull(Condition):
    def summary(self, column: str) -> str:
        return f"{column} is not null"


@dataclass(frozen=True)
class IsNull(Condition):
    def summary(self, column: str) -> str:
        return f"{column} is null"


@dataclass(frozen=True)
class Between(Condition):
    min: str
    max: str
    inclusive: bool = True

    def summary(self, column: str) -> str:
        op = "between" if self.inclusive else "between (exclusive)"
        return f"{column} {op} {self.min} and {self.max}"


@dataclass(frozen=True)
class InList(Condition):
    values: tuple[str, ...] = ()
    case_sensitive: bool = False

    def __post_init__(self) -> None:
        # listas vindas do JSON viram tupla para manter o predicado hashable
        object.__setattr__(self, "values", tuple(self.values))

    def summary(self, column: str) -> str:
        if len(self.values) > 3:
            shown = f"{self.values[0]}, {self.values[1]}... ({len(self.values)} total)"
        else:
            shown = ", ".join(self.values)
        return f"{column} in [{shown}] {_case_marker(self.case_sensitive)}"


@dataclass(frozen=True)
class StringLength(Condition):
    operator: CompareOp
    length: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", CompareOp(self.operator))

    def summary(self, column: str) -> str:
        return f"len({column}) {self.operator.symbol} {self.length}"


CONDITION_TYPES: dict[str, type[Condition]] = {
    cls.__name__: cls
    for cls in (
        Contains,
        Regex,
        Equals,
        GreaterThan,
        LessThan,
        GreaterThanOrEqual,
        LessThanOrEqual,
        IsEmpty,
        IsNotEmpty,
        NotNull,
        IsNull,
        Between,
        InList,
        StringLength,
    )
}

#: Variantes sem campos (persistidas como string pura, ex.: ``"IsNull"``)
UNIT_CONDITIONS: frozenset[str] = frozenset({"IsEmpty", "IsNotEmpty", "NotNull", "IsNull"})
