from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

import pandas as pd

from .base import AndFilter, BaseFilter, OrFilter
from .conditions import Condition
from .evaluation import evaluate_condition, evaluate_condition_row

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ColumnFilter: folha da árvore (uma coluna + um predicado)
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ColumnFilter(BaseFilter):
    """Aplica ``condition`` à coluna ``column``.

    Nada liga ``column`` a uma coluna real na construção: a ausência da coluna
    só é detectada ao avaliar (``ColumnNotFoundError``).

    Args:
        column: nome da coluna alvo.
        condition: predicado (ver :mod:`gridfilter.lib.filters.conditions`).
    """

    column: str
    condition: Condition

    @property
    def required_columns(self) -> Sequence[str]:  # type: ignore[override]
        return (self.column,)

    def mask(self, df: pd.DataFrame) -> pd.Series:
        self._check_columns(df)
        m = evaluate_condition(self.condition, df[self.column], column=self.column)
        logger.debug(
            "ColumnFilter.mask: coluna=%s, predicado=%s, linhas=%d/%d",
            self.column,
            self.condition.tag,
            int(m.sum()),
            len(m),
        )
        return m

    def evaluate_row(self, row: Mapping[str, Any]) -> bool:
        return evaluate_condition_row(self.condition, row.get(self.column), column=self.column)

    def summary(self) -> str:
        """Texto curto para listagens, ex.: ``age > 30``."""
        return self.condition.summary(self.column)


#: Nó da árvore de filtros: condição (folha) ou grupo AND/OR
FilterExpr = Union[ColumnFilter, AndFilter, OrFilter]
