from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

import pandas as pd

from .exceptions import ColumnNotFoundError, FilterError
from .utils import _ensure_bool_series, _full_mask

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# BaseFilter: protocolo / classe base para todos os nós da árvore de filtros
# -----------------------------------------------------------------------------
class BaseFilter(ABC):
    """Filtro base que produz uma máscara booleana alinhada ao DataFrame.

    Regras:
      - Implemente :meth:`mask` para devolver uma ``pd.Series[bool]`` com o
        mesmo índice do DataFrame de entrada.
      - Implemente :meth:`evaluate_row` para avaliar um único registro
        (usado na estilização de células).
      - Use ``required_columns`` para declarar dependências de colunas.
      - Filtros podem ser combinados com ``&`` (AND) e ``|`` (OR).

    Notas de implementação:
      - Nunca modifique o ``DataFrame`` dentro de ``mask``; conversões de tipo
        são feitas em cópias locais da coluna.
      - Valide colunas com ``_check_columns`` para mensagens de erro consistentes.
    """

    #: Colunas obrigatórias para o filtro
    required_columns: Sequence[str] = ()

    @abstractmethod
    def mask(self, df: pd.DataFrame) -> pd.Series:
        """Calcula a máscara booleana deste filtro.

        Args:
            df: tabela a filtrar.
        Returns:
            Série booleana alinhada ao índice do ``df``.
        Raises:
            FilterError: coluna ausente, operador incompatível ou operando inválido.
        """
        raise NotImplementedError

    @abstractmethod
    def evaluate_row(self, row: Mapping[str, Any]) -> bool:
        """Avalia o filtro para um único registro ``{coluna: valor}``."""
        raise NotImplementedError

    # --- API auxiliar --------------------------------------------------------
    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Aplica o filtro e retorna um *novo* DataFrame filtrado."""
        m = self.mask(df)
        _ensure_bool_series(m, df)
        return df.loc[m].copy()

    def _check_columns(self, df: pd.DataFrame) -> None:
        missing = [c for c in self.required_columns if c not in df.columns]
        if missing:
            raise ColumnNotFoundError(
                f"Colunas ausentes no DataFrame: {missing}", column=missing[0]
            )

    # --- Composição booleana -------------------------------------------------
    def __and__(self, other: BaseFilter) -> AndFilter:
        return AndFilter((self, other))

    def __or__(self, other: BaseFilter) -> OrFilter:
        return OrFilter((self, other))


# -----------------------------------------------------------------------------
# Grupos (AND/OR) com número arbitrário de filhos
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class GroupFilter(BaseFilter):
    """Nó de grupo: combina as máscaras dos filhos, na ordem, com AND ou OR.

    Um grupo vazio devolve a identidade da operação (``True`` para AND,
    ``False`` para OR), para qualquer número de linhas.
    """

    children: tuple[BaseFilter, ...] = field(default_factory=tuple)

    #: "AND" ou "OR" (rótulo exibido e tag de persistência em minúsculas)
    label: ClassVar[str]
    identity: ClassVar[bool]

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    @abstractmethod
    def _combine(self, left: pd.Series, right: pd.Series) -> pd.Series:
        raise NotImplementedError

    def with_children(self, children: Iterable[BaseFilter]) -> GroupFilter:
        """Mesmo tipo de grupo com outros filhos."""
        return type(self)(tuple(children))

    def flipped(self) -> GroupFilter:
        """Troca AND↔OR mantendo os filhos."""
        other = OrFilter if isinstance(self, AndFilter) else AndFilter
        return other(self.children)

    def mask(self, df: pd.DataFrame) -> pd.Series:
        if not self.children:
            return _full_mask(df, self.identity)

        result: pd.Series | None = None
        for index, child in enumerate(self.children):
            try:
                child_mask = child.mask(df)
            except FilterError as exc:
                exc.with_parent(index)
                raise
            _ensure_bool_series(child_mask, df)
            result = child_mask if result is None else self._combine(result, child_mask)

        logger.debug(
            "%s.mask: filhos=%d, linhas=%d/%d",
            self.__class__.__name__,
            len(self.children),
            int(result.sum()),
            len(result),
        )
        return result

    def evaluate_row(self, row: Mapping[str, Any]) -> bool:
        reduce = all if self.identity else any
        results = []
        for index, child in enumerate(self.children):
            try:
                results.append(child.evaluate_row(row))
            except FilterError as exc:
                exc.with_parent(index)
                raise
        return reduce(results)


@dataclass(frozen=True)
class AndFilter(GroupFilter):
    label: ClassVar[str] = "AND"
    identity: ClassVar[bool] = True

    def _combine(self, left: pd.Series, right: pd.Series) -> pd.Series:
        return left & right


@dataclass(frozen=True)
class OrFilter(GroupFilter):
    label: ClassVar[str] = "OR"
    identity: ClassVar[bool] = False

    def _combine(self, left: pd.Series, right: pd.Series) -> pd.Series:
        return left | right
