"""Avaliação de predicados contra uma coluna.

Cada predicado tem uma função de avaliação registrada em ``EVALUATORS``; a
função recebe a coluna (``pd.Series``) e decide o que fazer a partir do
:class:`ColumnKind` da coluna, um conjunto fechado de tipos:

- STRING: operações de texto direto.
- INTEGER/UNSIGNED/FLOAT: ``Contains``/``Regex`` usam a forma textual da coluna;
  ``Equals`` e comparações convertem o operando para o tipo numérico.
- BOOLEAN: aceita ``Contains``/``Regex`` (sobre ``true``/``false``) e ``Equals``;
  comparações não.
- OTHER: apenas ``NotNull``/``IsNull``, ``StringLength`` (mede a forma textual
  em qualquer tipo) e os constantes ``IsEmpty``/``IsNotEmpty``.

Valores nulos nunca satisfazem um predicado de valor.
"""

from __future__ import annotations

import logging
import math
import re
import warnings
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

import pandas as pd
from pandas.api import types as ptypes

from ..constants import FALSE_LITERALS, TRUE_LITERALS
from .base.exceptions import OperandParseError, UnsupportedOperatorError
from .base.utils import _to_bool_mask
from .conditions import (
    Between,
    CompareOp,
    Condition,
    Contains,
    Equals,
    InList,
    IsEmpty,
    IsNotEmpty,
    IsNull,
    NotNull,
    Regex,
    RelationalCondition,
    StringLength,
)

logger = logging.getLogger(__name__)

# Armazenamento "python" é explícito para que regex sigam sempre a sintaxe de ``re``
_TEXT_DTYPE = pd.StringDtype("python")

_INT64_RANGE = (-(2**63), 2**63 - 1)
_UINT64_RANGE = (0, 2**64 - 1)


class ColumnKind(Enum):
    STRING = "string"
    INTEGER = "integer"
    UNSIGNED = "unsigned"
    FLOAT = "float"
    BOOLEAN = "boolean"
    OTHER = "other"


NUMERIC_KINDS = frozenset({ColumnKind.INTEGER, ColumnKind.UNSIGNED, ColumnKind.FLOAT})
TEXT_KINDS = NUMERIC_KINDS | {ColumnKind.STRING, ColumnKind.BOOLEAN}


def column_kind(series: pd.Series) -> ColumnKind:
    """Classifica o dtype da coluna (inclui dtypes anuláveis ``Int64``, ``boolean``...)."""
    dtype = series.dtype
    if ptypes.is_bool_dtype(dtype):
        return ColumnKind.BOOLEAN
    if ptypes.is_unsigned_integer_dtype(dtype):
        return ColumnKind.UNSIGNED
    if ptypes.is_integer_dtype(dtype):
        return ColumnKind.INTEGER
    if ptypes.is_float_dtype(dtype):
        return ColumnKind.FLOAT
    if ptypes.is_string_dtype(dtype):
        return ColumnKind.STRING
    return ColumnKind.OTHER


Evaluator = Callable[[Any, pd.Series, ColumnKind, str], pd.Series]

EVALUATORS: dict[type[Condition], Evaluator] = {}


def _evaluates(*condition_types: type[Condition]) -> Callable[[Evaluator], Evaluator]:
    def register(fn: Evaluator) -> Evaluator:
        for cls in condition_types:
            EVALUATORS[cls] = fn
        return fn

    return register


def evaluate_condition(condition: Condition, series: pd.Series, *, column: str) -> pd.Series:
    """Avalia ``condition`` sobre ``series`` e devolve uma máscara ``bool``.

    Args:
        condition: predicado a aplicar.
        series: coluna da tabela.
        column: nome da coluna (usado nas mensagens de erro).
    Returns:
        ``pd.Series`` booleana com o mesmo índice de ``series``.
    Raises:
        UnsupportedOperatorError: operador incompatível com o tipo da coluna.
        OperandParseError: operando não pôde ser convertido para o tipo da coluna.
    """
    evaluator = EVALUATORS.get(type(condition))
    if evaluator is None:
        raise UnsupportedOperatorError(
            f"Predicado não suportado: {type(condition).__name__}",
            column=column,
            operator=type(condition).__name__,
        )
    kind = column_kind(series)
    return _to_bool_mask(evaluator(condition, series, kind, column))


# -----------------------------------------------------------------------------
# Conversões auxiliares
# -----------------------------------------------------------------------------
def _unsupported(condition: Condition, kind: ColumnKind, column: str, dtype: Any) -> UnsupportedOperatorError:
    return UnsupportedOperatorError(
        f"Operador {condition.tag} não suportado para a coluna '{column}' (tipo {dtype})",
        column=column,
        operator=condition.tag,
        kind=kind.value,
    )


def _as_text(series: pd.Series, kind: ColumnKind | None = None) -> pd.Series:
    text = series.astype(_TEXT_DTYPE)
    # booleanos aparecem como "true"/"false"
    return text.str.lower() if kind is ColumnKind.BOOLEAN else text


def _fold_case(text: pd.Series, value: str, case_sensitive: bool) -> tuple[pd.Series, str]:
    if case_sensitive:
        return text, value
    return text.str.lower(), value.lower()


def _parse_operand(text: str, kind: ColumnKind, *, condition: Condition, column: str) -> Any:
    """Converte o texto do operando para o tipo canônico da coluna."""
    raw = text.strip()
    try:
        if kind is ColumnKind.INTEGER:
            return int(raw)
        if kind is ColumnKind.UNSIGNED:
            value = int(raw)
            if value < 0:
                raise ValueError("valor negativo para coluna sem sinal")
            return value
        if kind is ColumnKind.FLOAT:
            return float(raw)
        if kind is ColumnKind.BOOLEAN:
            lowered = raw.lower()
            if lowered in TRUE_LITERALS:
                return True
            if lowered in FALSE_LITERALS:
                return False
            raise ValueError("literal booleano inválido")
    except ValueError as exc:
        raise OperandParseError(
            f"Valor '{text}' inválido para {condition.tag} na coluna '{column}' "
            f"(tipo {kind.value}): {exc}",
            column=column,
            operator=condition.tag,
            operand=text,
        ) from exc
    raise _unsupported(condition, kind, column, kind.value)


def _canonical(series: pd.Series, kind: ColumnKind, *operands: Any) -> pd.Series:
    """Converte a coluna para a largura canônica (Int64, UInt64, Float64, boolean).

    Inteiros fora do intervalo de 64 bits são comparados como ``object`` para
    manter a comparação exata.
    """
    if kind in (ColumnKind.INTEGER, ColumnKind.UNSIGNED):
        low, high = _INT64_RANGE if kind is ColumnKind.INTEGER else _UINT64_RANGE
        if any(not low <= operand <= high for operand in operands):
            return series.astype(object)
        return series.astype("Int64" if kind is ColumnKind.INTEGER else "UInt64")
    if kind is ColumnKind.FLOAT:
        return series.astype("Float64")
    return series.astype("boolean")


def _compare(series: pd.Series, op: CompareOp, operand: Any) -> pd.Series:
    if series.dtype == object:
        # inteiros arbitrários: comparação exata elemento a elemento
        return series.map(lambda v: v is not pd.NA and v is not None and bool(op.compare(v, operand)))
    return op.compare(series, operand)


# -----------------------------------------------------------------------------
# Avaliadores por predicado
# -----------------------------------------------------------------------------
@_evaluates(Contains)
def _contains(condition: Contains, series: pd.Series, kind: ColumnKind, column: str) -> pd.Series:
    if kind not in TEXT_KINDS:
        raise _unsupported(condition, kind, column, series.dtype)
    text, value = _fold_case(_as_text(series, kind), condition.value, condition.case_sensitive)
    return text.str.contains(value, regex=False)


@_evaluates(Regex)
def _regex(condition: Regex, series: pd.Series, kind: ColumnKind, column: str) -> pd.Series:
    if kind not in TEXT_KINDS:
        raise _unsupported(condition, kind, column, series.dtype)
    flags = 0 if condition.case_sensitive else re.IGNORECASE
    try:
        re.compile(condition.pattern, flags)
    except re.error as exc:
        raise OperandParseError(
            f"Expressão regular inválida '{condition.pattern}' na coluna '{column}': {exc}",
            column=column,
            operator=condition.tag,
            operand=condition.pattern,
        ) from exc
    with warnings.catch_warnings():
        # grupos de captura são irrelevantes para um teste de correspondência
        warnings.simplefilter("ignore", UserWarning)
        return _as_text(series, kind).str.contains(condition.pattern, regex=True, flags=flags)


@_evaluates(Equals)
def _equals(condition: Equals, series: pd.Series, kind: ColumnKind, column: str) -> pd.Series:
    if kind is ColumnKind.STRING:
        text, value = _fold_case(_as_text(series), condition.value, condition.case_sensitive)
        return text == value
    if kind in NUMERIC_KINDS or kind is ColumnKind.BOOLEAN:
        operand = _parse_operand(condition.value, kind, condition=condition, column=column)
        return _compare(_canonical(series, kind, operand), CompareOp.EQ, operand)
    raise _unsupported(condition, kind, column, series.dtype)


@_evaluates(*RelationalCondition.__subclasses__())
def _relational(
    condition: RelationalCondition, series: pd.Series, kind: ColumnKind, column: str
) -> pd.Series:
    if kind not in NUMERIC_KINDS:
        raise _unsupported(condition, kind, column, series.dtype)
    operand = _parse_operand(condition.value, kind, condition=condition, column=column)
    return _compare(_canonical(series, kind, operand), condition.op, operand)


@_evaluates(Between)
def _between(condition: Between, series: pd.Series, kind: ColumnKind, column: str) -> pd.Series:
    if kind is ColumnKind.STRING:
        text = _as_text(series)
        low, high = condition.min, condition.max
    elif kind in NUMERIC_KINDS:
        low = _parse_operand(condition.min, kind, condition=condition, column=column)
        high = _parse_operand(condition.max, kind, condition=condition, column=column)
        text = _canonical(series, kind, low, high)
    else:
        raise _unsupported(condition, kind, column, series.dtype)
    if condition.inclusive:
        return _compare(text, CompareOp.GTE, low) & _compare(text, CompareOp.LTE, high)
    return _compare(text, CompareOp.GT, low) & _compare(text, CompareOp.LT, high)


def _parse_each(values: Iterable[str], kind: ColumnKind, condition: Condition, column: str) -> list[Any]:
    parsed = []
    for value in values:
        try:
            parsed.append(_parse_operand(value, kind, condition=condition, column=column))
        except OperandParseError:
            logger.debug("InList: ignorando valor não numérico %r na coluna %s", value, column)
    return parsed


@_evaluates(InList)
def _in_list(condition: InList, series: pd.Series, kind: ColumnKind, column: str) -> pd.Series:
    if kind is ColumnKind.STRING:
        values = list(condition.values)
        text = _as_text(series)
        if not condition.case_sensitive:
            text = text.str.lower()
            values = [v.lower() for v in values]
        return text.isin(values) & series.notna()
    if kind in NUMERIC_KINDS:
        numbers = _parse_each(condition.values, kind, condition, column)
        if kind is ColumnKind.FLOAT:
            numbers = [n for n in numbers if not math.isnan(n)]
        return _canonical(series, kind, *numbers).isin(numbers) & series.notna()
    raise _unsupported(condition, kind, column, series.dtype)


@_evaluates(StringLength)
def _string_length(
    condition: StringLength, series: pd.Series, kind: ColumnKind, column: str
) -> pd.Series:
    lengths = _as_text(series, kind).str.len()
    return condition.operator.compare(lengths, condition.length)


@_evaluates(NotNull, IsNull)
def _nullness(condition: Condition, series: pd.Series, kind: ColumnKind, column: str) -> pd.Series:
    if isinstance(condition, IsNull):
        return series.isna()
    return series.notna()


@_evaluates(IsEmpty, IsNotEmpty)
def _emptiness(condition: Condition, series: pd.Series, kind: ColumnKind, column: str) -> pd.Series:
    # Semântica de "vazio" (nulos? espaços?) ainda indefinida: máscara constante.
    logger.warning(
        "%s na coluna %s devolve máscara constante; semântica de 'vazio' não definida",
        condition.tag,
        column,
    )
    return pd.Series(isinstance(condition, IsEmpty), index=series.index, dtype=bool)


# -----------------------------------------------------------------------------
# Avaliação linha a linha (estilização de um único registro)
# -----------------------------------------------------------------------------
_NULL_TEXTS = frozenset({"", "null", "NULL"})


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if ptypes.is_bool(value):
        return str(value).lower()
    return str(value)


def _as_float(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def _compare_cell(cell: str, op: CompareOp, operand: str) -> bool:
    left, right = _as_float(cell), _as_float(operand)
    if left is not None and right is not None:
        return bool(op.compare(left, right))
    return bool(op.compare(cell, operand))


def evaluate_condition_row(condition: Condition, value: Any, *, column: str) -> bool:
    """Avalia ``condition`` contra o valor de uma única célula.

    A célula é comparada pela forma textual; comparações usam números quando
    célula e operando são numéricos e ordem lexicográfica caso contrário.
    Célula ausente/nula equivale a texto vazio.
    """
    cell = _cell_text(value)
    if isinstance(condition, (Contains, Equals)):
        text, operand = cell, condition.value
        if not condition.case_sensitive:
            text, operand = text.lower(), operand.lower()
        return operand in text if isinstance(condition, Contains) else text == operand
    if isinstance(condition, Regex):
        flags = 0 if condition.case_sensitive else re.IGNORECASE
        try:
            return re.search(condition.pattern, cell, flags) is not None
        except re.error as exc:
            raise OperandParseError(
                f"Expressão regular inválida '{condition.pattern}': {exc}",
                column=column,
                operator=condition.tag,
                operand=condition.pattern,
            ) from exc
    if isinstance(condition, RelationalCondition):
        return _compare_cell(cell, condition.op, condition.value)
    if isinstance(condition, IsEmpty):
        return cell == ""
    if isinstance(condition, IsNotEmpty):
        return cell != ""
    if isinstance(condition, NotNull):
        return cell not in _NULL_TEXTS
    if isinstance(condition, IsNull):
        return cell in _NULL_TEXTS
    if isinstance(condition, Between):
        if condition.inclusive:
            return _compare_cell(cell, CompareOp.GTE, condition.min) and _compare_cell(
                cell, CompareOp.LTE, condition.max
            )
        return _compare_cell(cell, CompareOp.GT, condition.min) and _compare_cell(
            cell, CompareOp.LT, condition.max
        )
    if isinstance(condition, InList):
        if condition.case_sensitive:
            return cell in condition.values
        return cell.lower() in {v.lower() for v in condition.values}
    if isinstance(condition, StringLength):
        return bool(condition.operator.compare(len(cell), condition.length))
    raise UnsupportedOperatorError(
        f"Predicado não suportado: {type(condition).__name__}",
        column=column,
        operator=type(condition).__name__,
    )
