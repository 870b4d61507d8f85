"""Exceções específicas do pacote filters.base.

Mantém as definições de exceção separadas para evitar importações circulares
entre os módulos base e utils.

Erros de avaliação carregam ``column`` e ``path`` (caminho do nó que falhou,
relativo ao nó avaliado) para que a UI monte uma mensagem legível.
"""

from __future__ import annotations


class FilterError(Exception):
    """Erro genérico ao construir ou aplicar filtros."""

    def __init__(
        self, message: str, *, column: str | None = None, path: tuple[int, ...] = ()
    ) -> None:
        super().__init__(message)
        self.column = column
        self.path = tuple(path)

    def with_parent(self, index: int) -> FilterError:
        """Prefixa ``index`` ao caminho do erro (usado ao subir pelos grupos)."""
        self.path = (index, *self.path)
        return self


class MissingColumnsError(FilterError):
    """Lançado quando o DataFrame não possui colunas obrigatórias para um filtro."""


class ColumnNotFoundError(MissingColumnsError):
    """Uma condição referencia uma coluna ausente da tabela avaliada."""


class UnsupportedOperatorError(FilterError):
    """Operador aplicado a um tipo de coluna incompatível."""

    def __init__(
        self,
        message: str,
        *,
        column: str | None = None,
        operator: str | None = None,
        kind: str | None = None,
        path: tuple[int, ...] = (),
    ) -> None:
        super().__init__(message, column=column, path=path)
        self.operator = operator
        self.kind = kind


class OperandParseError(FilterError, ValueError):
    """O texto do operando não pôde ser convertido para o tipo da coluna."""

    def __init__(
        self,
        message: str,
        *,
        column: str | None = None,
        operator: str | None = None,
        operand: str | None = None,
        path: tuple[int, ...] = (),
    ) -> None:
        super().__init__(message, column=column, path=path)
        self.operator = operator
        self.operand = operand


class MalformedFilterError(FilterError, ValueError):
    """Conteúdo persistido não corresponde à estrutura de uma árvore de filtros.

    ``location`` aponta onde o problema foi encontrado (ex.: ``$.And[1].Condition``).
    """

    def __init__(self, message: str, *, location: str = "$") -> None:
        super().__init__(f"{message} (em {location})")
        self.location = location


class InvalidPathError(FilterError):
    """Caminho que não resolve para nenhum nó da árvore."""
