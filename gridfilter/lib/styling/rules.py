"""Regras de formatação condicional que reutilizam a árvore de filtros.

Uma ``StyleRule`` decide *onde* um estilo se aplica (linhas, células ou
cabeçalhos); o cálculo do estilo em si (cores, gradientes) fica com quem
consome as máscaras.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
from typing import Any

import pandas as pd

from gridfilter.lib.constants import FILTER_FILE_ENCODING, FILTER_JSON_INDENT
from gridfilter.lib.filters import codec
from gridfilter.lib.filters.base import AndFilter, BaseFilter, MalformedFilterError

logger = logging.getLogger(__name__)


class ScopeEnum(str, Enum):
    ROW = "Row"
    CELL = "Cell"
    HEADER = "Header"


@dataclass(frozen=True)
class StyleRule:
    """Associa uma árvore de filtros a um estilo.

    Attributes:
        match_expr: árvore avaliada contra a tabela.
        scope: onde o estilo é aplicado.
        style: atributos de estilo opacos (ex.: ``{"fg": "Red"}``).
        column_scope: padrões glob das colunas alvo (``None``/vazio = todas).
    """

    match_expr: BaseFilter = field(default_factory=AndFilter)
    scope: ScopeEnum = ScopeEnum.ROW
    style: Mapping[str, Any] = field(default_factory=dict)
    column_scope: Sequence[str] | None = None

    def target_columns(self, columns: Sequence[str]) -> list[str]:
        if not self.column_scope:
            return list(columns)
        return [c for c in columns if any(fnmatchcase(str(c), p) for p in self.column_scope)]

    def row_mask(self, df: pd.DataFrame) -> pd.Series:
        return self.match_expr.mask(df)

    def cell_mask(self, df: pd.DataFrame) -> pd.DataFrame:
        """Máscara por célula: linha casada × colunas alvo (ROW usa todas as colunas)."""
        rows = self.row_mask(df)
        targets = set(df.columns if self.scope is ScopeEnum.ROW else self.target_columns(df.columns))
        return pd.DataFrame(
            {col: rows & (col in targets) for col in df.columns},
            index=df.index,
            columns=df.columns,
        )

    def header_mask(self, df: pd.DataFrame) -> pd.Series:
        """Colunas alvo cujo cabeçalho deve ser estilizado (alguma linha casou)."""
        matched = bool(self.row_mask(df).any())
        targets = set(self.target_columns(df.columns))
        return pd.Series(
            [matched and col in targets for col in df.columns], index=df.columns, dtype=bool
        )


@dataclass(frozen=True)
class StyleSet:
    """Coleção nomeada de regras de estilo."""

    name: str
    description: str = ""
    rules: tuple[StyleRule, ...] = ()

    def matches(self, df: pd.DataFrame) -> dict[int, pd.Series]:
        """Máscara de linhas de cada regra, indexada pela posição da regra."""
        out = {index: rule.row_mask(df) for index, rule in enumerate(self.rules)}
        logger.debug("StyleSet.matches: conjunto=%s, regras=%d", self.name, len(out))
        return out


# -----------------------------------------------------------------------------
# Persistência (a árvore de cada regra usa o mesmo codec dos filtros)
# -----------------------------------------------------------------------------
def rule_to_dict(rule: StyleRule) -> dict[str, Any]:
    out: dict[str, Any] = {
        "match_expr": codec.to_dict(rule.match_expr),
        "scope": rule.scope.value,
        "style": dict(rule.style),
    }
    if rule.column_scope:
        out["column_scope"] = list(rule.column_scope)
    return out


def rule_from_dict(data: Any, location: str = "$") -> StyleRule:
    if not isinstance(data, Mapping) or "match_expr" not in data or "scope" not in data:
        raise MalformedFilterError("Regra precisa de 'match_expr' e 'scope'", location=location)
    try:
        scope = ScopeEnum(data["scope"])
    except ValueError as exc:
        raise MalformedFilterError(
            f"Escopo desconhecido: {data['scope']!r}", location=f"{location}.scope"
        ) from exc
    style = data.get("style", {})
    if not isinstance(style, Mapping):
        raise MalformedFilterError("'style' deve ser um objeto", location=f"{location}.style")
    column_scope = data.get("column_scope")
    if column_scope is not None and (
        not isinstance(column_scope, list) or not all(isinstance(p, str) for p in column_scope)
    ):
        raise MalformedFilterError(
            "'column_scope' deve ser lista de textos", location=f"{location}.column_scope"
        )
    return StyleRule(
        match_expr=codec.from_dict(data["match_expr"], f"{location}.match_expr"),
        scope=scope,
        style=dict(style),
        column_scope=tuple(column_scope) if column_scope else None,
    )


def encode_style_set(style_set: StyleSet) -> bytes:
    payload = {
        "name": style_set.name,
        "description": style_set.description,
        "rules": [rule_to_dict(rule) for rule in style_set.rules],
    }
    return json.dumps(payload, indent=FILTER_JSON_INDENT, ensure_ascii=False).encode(
        FILTER_FILE_ENCODING
    )


def decode_style_set(data: bytes | str) -> StyleSet:
    try:
        if isinstance(data, bytes):
            data = data.decode(FILTER_FILE_ENCODING)
        parsed = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedFilterError(f"JSON inválido: {exc}") from exc
    except RecursionError as exc:
        raise MalformedFilterError("Conjunto de estilos aninhado demais") from exc
    if not isinstance(parsed, Mapping) or not isinstance(parsed.get("name"), str):
        raise MalformedFilterError("Conjunto de estilos precisa de 'name'")
    rules = parsed.get("rules", [])
    if not isinstance(rules, list):
        raise MalformedFilterError("'rules' deve ser uma lista", location="$.rules")
    return StyleSet(
        name=parsed["name"],
        description=str(parsed.get("description", "")),
        rules=tuple(rule_from_dict(rule, f"$.rules[{i}]") for i, rule in enumerate(rules)),
    )
