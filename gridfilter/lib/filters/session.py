"""Sessão de edição de filtro: árvore + cursor de seleção.

``FilterSession`` é a superfície usada pela UI. Ela guarda a raiz (sempre um
grupo) e o caminho selecionado; toda operação estrutural devolve a nova
seleção, que é a única forma de o cursor mudar. A sessão não é thread-safe
para escrita: serialize as mutações externamente.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path as FilePath

import pandas as pd

from ..constants import DEFAULT_ROOT_CONJUNCTION, FILTER_FILE_SUFFIX
from . import codec, tree
from .base import BaseFilter, GroupFilter, InvalidPathError, _ensure_bool_series
from .tree import Path

logger = logging.getLogger(__name__)


def _as_root(expr: BaseFilter) -> GroupFilter:
    """Garante que a raiz seja um grupo (condição solta vira AND de um filho)."""
    if isinstance(expr, GroupFilter):
        return expr
    logger.debug("Raiz recebida não é grupo; envolvendo em AND")
    return tree.group_class("and")((expr,))


class FilterSession:
    """Árvore de filtros editável com cursor de seleção.

    Args:
        root: árvore inicial; padrão é um grupo vazio da conjunção
              ``DEFAULT_ROOT_CONJUNCTION``.
    """

    def __init__(self, root: BaseFilter | None = None) -> None:
        if root is None:
            root = tree.group_class(DEFAULT_ROOT_CONJUNCTION)()
        self._root: GroupFilter = _as_root(root)
        self._selection: Path = tree.ROOT

    def __repr__(self) -> str:
        return f"FilterSession(root={self._root!r}, selection={self._selection!r})"

    # --- Estado --------------------------------------------------------------
    @property
    def root(self) -> GroupFilter:
        return self._root

    @property
    def selection(self) -> Path:
        return self._selection

    def set_root(self, expr: BaseFilter) -> Path:
        """Substitui a árvore inteira (restauração) e volta o cursor para a raiz."""
        self._root = _as_root(expr)
        self._selection = tree.ROOT
        return self._selection

    def reset(self) -> Path:
        return self.set_root(tree.group_class(DEFAULT_ROOT_CONJUNCTION)())

    def get(self, path: Sequence[int] | None = None, *, strict: bool = False) -> BaseFilter | None:
        """Nó em ``path`` (padrão: seleção atual).

        Raises:
            InvalidPathError: apenas com ``strict=True`` e caminho inválido.
        """
        path = self._selection if path is None else tuple(path)
        node = tree.get_node(self._root, path)
        if node is None and strict:
            raise InvalidPathError(f"Caminho inválido: {path}")
        return node

    def selected(self) -> BaseFilter:
        node = tree.get_node(self._root, self._selection)
        return self._root if node is None else node

    # --- Mutação -------------------------------------------------------------
    def _commit(self, root: BaseFilter, selection: Sequence[int]) -> Path:
        self._root = _as_root(root)
        self._selection = tree.nearest_valid_path(self._root, selection)
        return self._selection

    def insert(self, path: Sequence[int], node: BaseFilter) -> Path:
        """Insere ``node`` em ``path`` e seleciona o nó inserido."""
        path = tuple(path)
        new_root = tree.insert_node(self._root, path, node)
        if new_root is self._root:
            return self._selection
        parent = tree.get_node(new_root, tree.parent_path(path))
        if not isinstance(parent, GroupFilter):
            return self._commit(new_root, self._selection)
        last = len(parent.children) - 1
        selection = (*tree.parent_path(path), min(path[-1], last) if path else last)
        return self._commit(new_root, selection)

    def replace(self, path: Sequence[int], node: BaseFilter) -> Path:
        """Substitui o nó em ``path``; caminho vazio equivale a :meth:`set_root`."""
        path = tuple(path)
        if not path:
            return self.set_root(node)
        new_root = tree.replace_node(self._root, path, node)
        if new_root is self._root:
            return self._selection
        return self._commit(new_root, path)

    def remove(self, path: Sequence[int] | None = None) -> Path:
        """Remove o nó em ``path`` (padrão: seleção) e reposiciona o cursor."""
        path = self._selection if path is None else tuple(path)
        new_root, selection = tree.remove_node(self._root, path)
        return self._commit(new_root, selection)

    def toggle_group(self, path: Sequence[int] | None = None) -> Path:
        path = self._selection if path is None else tuple(path)
        return self._commit(tree.toggle_group(self._root, path), self._selection)

    def wrap_in_group(self, conjunction: str = "and", path: Sequence[int] | None = None) -> Path:
        path = self._selection if path is None else tuple(path)
        return self._commit(tree.wrap_in_group(self._root, path, conjunction), self._selection)

    def add_group(self, conjunction: str = "and", path: Sequence[int] | None = None) -> Path:
        path = self._selection if path is None else tuple(path)
        new_root, selection = tree.add_group(self._root, path, conjunction)
        return self._commit(new_root, selection)

    def add_condition(self, node: BaseFilter) -> Path:
        """Insere ``node`` onde a seleção indica (ver :func:`tree.insertion_path`)."""
        return self.insert(tree.insertion_path(self._root, self._selection), node)

    # --- Navegação -----------------------------------------------------------
    def select_next(self) -> Path:
        self._selection = tree.next_path(self._root, self._selection)
        return self._selection

    def select_previous(self) -> Path:
        self._selection = tree.previous_path(self._root, self._selection)
        return self._selection

    def select_parent(self) -> Path:
        self._selection = tree.nearest_valid_path(self._root, tree.parent_path(self._selection))
        return self._selection

    def render_lines(self) -> list[tuple[int, str, bool, Path]]:
        return tree.render_lines(self._root, self._selection)

    # --- Avaliação -----------------------------------------------------------
    def evaluate(self, df: pd.DataFrame) -> pd.Series:
        """Máscara booleana da árvore inteira sobre ``df``."""
        mask = self._root.mask(df)
        _ensure_bool_series(mask, df)
        return mask

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.loc[self.evaluate(df)].copy()

    # --- Persistência --------------------------------------------------------
    def dumps(self) -> bytes:
        return codec.encode(self._root)

    def loads(self, data: bytes | str) -> Path:
        """Restaura a árvore a partir de JSON; em erro a árvore atual é mantida."""
        return self.set_root(codec.decode(data))

    def save(self, path: str | FilePath) -> FilePath:
        """Grava a árvore em ``path`` (sufixo ``.json`` acrescentado se faltar)."""
        target = FilePath(path)
        if not target.suffix:
            target = target.with_suffix(FILTER_FILE_SUFFIX)
        target.write_bytes(self.dumps())
        logger.info("Filtro salvo em %s", target)
        return target

    def load(self, path: str | FilePath) -> Path:
        selection = self.loads(FilePath(path).read_bytes())
        logger.info("Filtro carregado de %s", path)
        return selection
