"""Persistência da árvore de filtros em JSON.

Formato com *tag* externa, um objeto de uma única chave por nó::

    {"And": [
        {"Condition": {"column": "age", "condition": {"GreaterThan": {"value": "30"}}}},
        {"Or": []}
    ]}

Predicados sem campos são gravados como string (``"IsNull"``); na leitura
também se aceita ``{"IsNull": null}``. Só a árvore é serializada, nunca
resultados de avaliação, e o módulo não toca no sistema de arquivos.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import fields
from typing import Any

from ..constants import FILTER_FILE_ENCODING, FILTER_JSON_INDENT, MAX_FILTER_DEPTH
from .base import AndFilter, BaseFilter, GroupFilter, MalformedFilterError, OrFilter
from .builtins import ColumnFilter
from .conditions import CONDITION_TYPES, UNIT_CONDITIONS, CompareOp, Condition

GROUP_TAGS: dict[str, type[GroupFilter]] = {"And": AndFilter, "Or": OrFilter}
CONDITION_TAG = "Condition"


# -----------------------------------------------------------------------------
# Codificação
# -----------------------------------------------------------------------------
def _plain(value: Any) -> Any:
    if isinstance(value, CompareOp):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    return value


def condition_to_dict(condition: Condition) -> Any:
    if condition.tag in UNIT_CONDITIONS:
        return condition.tag
    payload = {f.name: _plain(getattr(condition, f.name)) for f in fields(condition)}
    return {condition.tag: payload}


def to_dict(node: BaseFilter) -> dict[str, Any]:
    """Converte a árvore para estruturas JSON (dict/list/str/bool/int)."""
    if isinstance(node, ColumnFilter):
        return {
            CONDITION_TAG: {
                "column": node.column,
                "condition": condition_to_dict(node.condition),
            }
        }
    for tag, cls in GROUP_TAGS.items():
        if type(node) is cls:
            return {tag: [to_dict(child) for child in node.children]}
    raise TypeError(f"Nó não serializável: {type(node).__name__}")


def tree_depth(node: BaseFilter) -> int:
    """Nível do nó mais profundo (raiz = 0), calculado sem recursão."""
    deepest = 0
    pending = [(node, 0)]
    while pending:
        current, level = pending.pop()
        deepest = max(deepest, level)
        if isinstance(current, GroupFilter):
            pending.extend((child, level + 1) for child in current.children)
    return deepest


def encode(node: BaseFilter) -> bytes:
    """Serializa a árvore em JSON (UTF-8).

    Raises:
        MalformedFilterError: árvore com mais de ``MAX_FILTER_DEPTH`` níveis, que
            não poderia ser lida de volta.
    """
    if tree_depth(node) > MAX_FILTER_DEPTH:
        raise MalformedFilterError(f"Árvore aninhada demais (máximo {MAX_FILTER_DEPTH} níveis)")
    text = json.dumps(to_dict(node), indent=FILTER_JSON_INDENT, ensure_ascii=False)
    return text.encode(FILTER_FILE_ENCODING)


# -----------------------------------------------------------------------------
# Decodificação
# -----------------------------------------------------------------------------
def _single_entry(data: Any, location: str) -> tuple[str, Any]:
    if isinstance(data, str):
        return data, None
    if not isinstance(data, Mapping) or len(data) != 1:
        raise MalformedFilterError("Esperado objeto com exatamente uma tag", location=location)
    ((tag, payload),) = data.items()
    return tag, payload


def _expect_str(value: Any, location: str) -> str:
    if not isinstance(value, str):
        raise MalformedFilterError("Esperado texto", location=location)
    return value


def _expect_bool(value: Any, location: str) -> bool:
    if not isinstance(value, bool):
        raise MalformedFilterError("Esperado booleano", location=location)
    return value


def _expect_length(value: Any, location: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedFilterError("Esperado inteiro não negativo", location=location)
    return value


def _expect_str_list(value: Any, location: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise MalformedFilterError("Esperada lista de textos", location=location)
    return tuple(_expect_str(item, f"{location}[{i}]") for i, item in enumerate(value))


def _expect_compare_op(value: Any, location: str) -> CompareOp:
    try:
        return CompareOp(_expect_str(value, location))
    except ValueError as exc:
        raise MalformedFilterError(f"Operador desconhecido: {value!r}", location=location) from exc


# Validação por tipo anotado do campo (anotações são strings por causa do __future__)
_FIELD_PARSERS: dict[str, Callable[[Any, str], Any]] = {
    "str": _expect_str,
    "bool": _expect_bool,
    "int": _expect_length,
    "tuple[str, ...]": _expect_str_list,
    "CompareOp": _expect_compare_op,
}


def condition_from_dict(data: Any, location: str = "$") -> Condition:
    tag, payload = _single_entry(data, location)
    cls = CONDITION_TYPES.get(tag)
    if cls is None:
        raise MalformedFilterError(f"Predicado desconhecido: {tag!r}", location=location)
    location = f"{location}.{tag}"
    if tag in UNIT_CONDITIONS:
        if payload not in (None, {}):
            raise MalformedFilterError("Predicado sem campos recebeu dados", location=location)
        return cls()
    if not isinstance(payload, Mapping):
        raise MalformedFilterError("Esperado objeto com os campos do predicado", location=location)

    kwargs = {}
    for f in fields(cls):
        if f.name not in payload:
            raise MalformedFilterError(f"Campo ausente: {f.name!r}", location=location)
        kwargs[f.name] = _FIELD_PARSERS[str(f.type)](payload[f.name], f"{location}.{f.name}")
    return cls(**kwargs)


def from_dict(data: Any, location: str = "$", depth: int = 0) -> BaseFilter:
    """Reconstrói a árvore a partir de estruturas JSON.

    Raises:
        MalformedFilterError: tag desconhecida, campo ausente, tipo inesperado
            ou aninhamento além de ``MAX_FILTER_DEPTH``.
    """
    if depth > MAX_FILTER_DEPTH:
        raise MalformedFilterError(
            f"Árvore aninhada demais (máximo {MAX_FILTER_DEPTH} níveis)", location=location
        )
    tag, payload = _single_entry(data, location)
    location = f"{location}.{tag}"
    if tag in GROUP_TAGS:
        if not isinstance(payload, list):
            raise MalformedFilterError("Esperada lista de filhos", location=location)
        children = [
            from_dict(child, f"{location}[{i}]", depth + 1) for i, child in enumerate(payload)
        ]
        return GROUP_TAGS[tag](tuple(children))
    if tag == CONDITION_TAG:
        if not isinstance(payload, Mapping):
            raise MalformedFilterError("Esperado objeto da condição", location=location)
        for key in ("column", "condition"):
            if key not in payload:
                raise MalformedFilterError(f"Campo ausente: {key!r}", location=location)
        return ColumnFilter(
            column=_expect_str(payload["column"], f"{location}.column"),
            condition=condition_from_dict(payload["condition"], f"{location}.condition"),
        )
    raise MalformedFilterError(f"Nó desconhecido: {tag!r}", location=location)


def decode(data: bytes | str) -> BaseFilter:
    """Lê a árvore de um conteúdo JSON (bytes UTF-8 ou texto).

    Raises:
        MalformedFilterError: conteúdo não é JSON válido ou não descreve uma árvore.
    """
    try:
        if isinstance(data, bytes):
            data = data.decode(FILTER_FILE_ENCODING)
        parsed = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedFilterError(f"JSON inválido: {exc}") from exc
    except RecursionError as exc:
        raise MalformedFilterError("Árvore aninhada demais") from exc
    return from_dict(parsed)
