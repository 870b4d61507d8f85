"""Edição estrutural da árvore de filtros, endereçada por caminhos.

Um caminho (``Path``) é a sequência de índices de filhos a partir da raiz; o
caminho vazio é a própria raiz. Todas as funções são puras: recebem uma árvore
e devolvem outra (os nós são imutáveis), de modo que leituras concorrentes da
árvore antiga continuam válidas.

Caminhos inválidos nunca levantam exceção: a operação vira no-op e, quando a
função devolve uma nova seleção, ela aponta para o ancestral válido mais
próximo.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from .base import AndFilter, BaseFilter, GroupFilter, OrFilter
from .builtins import ColumnFilter

logger = logging.getLogger(__name__)

Path = tuple[int, ...]

ROOT: Path = ()

_GROUPS: dict[str, type[GroupFilter]] = {"and": AndFilter, "or": OrFilter}


def group_class(conjunction: str) -> type[GroupFilter]:
    """``"and"``/``"or"`` (case-insensitive) → classe do grupo.

    Raises:
        ValueError: se a conjunção não for "and" nem "or".
    """
    cls = _GROUPS.get((conjunction or "").strip().lower())
    if cls is None:
        raise ValueError("conjunction deve ser 'and' ou 'or'")
    return cls


def _in_range(index: int, children: Sequence[BaseFilter]) -> bool:
    return 0 <= index < len(children)


def parent_path(path: Sequence[int]) -> Path:
    """Caminho do grupo que contém ``path`` (a raiz é o próprio pai)."""
    return tuple(path[:-1])


def get_node(root: BaseFilter, path: Sequence[int]) -> BaseFilter | None:
    """Nó em ``path`` ou ``None`` se o caminho atravessar uma condição ou sair do intervalo."""
    node = root
    for index in path:
        if not isinstance(node, GroupFilter) or not _in_range(index, node.children):
            return None
        node = node.children[index]
    return node


def nearest_valid_path(root: BaseFilter, path: Sequence[int]) -> Path:
    """Maior prefixo de ``path`` que ainda resolve para um nó."""
    valid: Path = ROOT
    for index in path:
        candidate = (*valid, index)
        if get_node(root, candidate) is None:
            break
        valid = candidate
    return valid


def insert_node(root: BaseFilter, path: Sequence[int], new_node: BaseFilter) -> BaseFilter:
    """Insere ``new_node`` sem sobrescrever nenhum nó existente.

    - caminho vazio: anexa ao final dos filhos da raiz;
    - último índice: insere nessa posição do grupo pai, deslocando os irmãos
      seguintes (índice além do fim anexa ao final);
    - índices intermediários: desce pelos grupos.
    """
    if not isinstance(root, GroupFilter):
        logger.debug("insert_node: destino não é grupo; caminho=%s ignorado", tuple(path))
        return root
    children = list(root.children)
    if not path:
        children.append(new_node)
        return root.with_children(children)

    head, tail = path[0], path[1:]
    if head < 0:
        logger.debug("insert_node: índice negativo %d ignorado", head)
        return root
    if not tail:
        children.insert(min(head, len(children)), new_node)
        return root.with_children(children)
    if not _in_range(head, children):
        logger.debug("insert_node: índice %d fora do intervalo", head)
        return root
    child = insert_node(children[head], tail, new_node)
    if child is children[head]:
        return root
    children[head] = child
    return root.with_children(children)


def replace_node(root: BaseFilter, path: Sequence[int], new_node: BaseFilter) -> BaseFilter:
    """Sobrescreve o nó em ``path``; com caminho vazio substitui a árvore inteira."""
    if not path:
        return new_node
    if not isinstance(root, GroupFilter) or not _in_range(path[0], root.children):
        logger.debug("replace_node: caminho inválido %s ignorado", tuple(path))
        return root
    children = list(root.children)
    head, tail = path[0], path[1:]
    child = replace_node(children[head], tail, new_node) if tail else new_node
    if child is children[head]:
        return root
    children[head] = child
    return root.with_children(children)


def remove_node(root: BaseFilter, path: Sequence[int]) -> tuple[BaseFilter, Path]:
    """Remove o nó em ``path`` e devolve ``(nova_raiz, nova_seleção)``.

    A nova seleção é o irmão anterior; sem irmão anterior, o novo primeiro
    irmão; se o grupo ficou vazio, o próprio grupo. A raiz nunca é removida.
    """
    path = tuple(path)
    if not path:
        return root, ROOT

    parent = parent_path(path)
    group = get_node(root, parent)
    index = path[-1]
    if not isinstance(group, GroupFilter) or not _in_range(index, group.children):
        fallback = nearest_valid_path(root, parent)
        logger.warning("remove_node: caminho inválido %s; seleção vai para %s", path, fallback)
        return root, fallback

    children = group.children[:index] + group.children[index + 1 :]
    new_root = replace_node(root, parent, group.with_children(children))
    if index > 0:
        selection = (*parent, index - 1)
    elif children:
        selection = (*parent, 0)
    else:
        selection = parent
    logger.debug("remove_node: removido %s; seleção=%s", path, selection)
    return new_root, selection


def toggle_group(root: BaseFilter, path: Sequence[int]) -> BaseFilter:
    """Troca AND↔OR no grupo em ``path`` (mesmos filhos, mesma ordem)."""
    node = get_node(root, path)
    if not isinstance(node, GroupFilter):
        return root
    return replace_node(root, path, node.flipped())


def wrap_in_group(root: BaseFilter, path: Sequence[int], conjunction: str = "and") -> BaseFilter:
    """Converte a condição em ``path`` em um grupo de um único filho (ela mesma)."""
    cls = group_class(conjunction)
    node = get_node(root, path)
    if not isinstance(node, ColumnFilter):
        return root
    return replace_node(root, path, cls((node,)))


def add_group(
    root: BaseFilter, path: Sequence[int], conjunction: str = "and"
) -> tuple[BaseFilter, Path]:
    """Cria um grupo a partir da seleção e devolve ``(nova_raiz, nova_seleção)``.

    Sobre uma condição equivale a :func:`wrap_in_group` (seleção mantida);
    sobre um grupo anexa um grupo vazio como último filho e o seleciona.
    """
    cls = group_class(conjunction)
    path = tuple(path)
    node = get_node(root, path)
    if isinstance(node, ColumnFilter):
        return replace_node(root, path, cls((node,))), path
    if isinstance(node, GroupFilter):
        child = (*path, len(node.children))
        return insert_node(root, child, cls()), child
    return root, nearest_valid_path(root, path)


def insertion_path(root: BaseFilter, selection: Sequence[int]) -> Path:
    """Onde inserir uma nova condição dada a seleção atual.

    Grupo selecionado: após o último filho. Condição selecionada: logo depois
    dela, no mesmo grupo. Seleção inválida: final da raiz.
    """
    selection = tuple(selection)
    node = get_node(root, selection)
    if isinstance(node, GroupFilter):
        return (*selection, len(node.children))
    if isinstance(node, ColumnFilter) and selection:
        return (*parent_path(selection), selection[-1] + 1)
    size = len(root.children) if isinstance(root, GroupFilter) else 0
    return (size,)


# -----------------------------------------------------------------------------
# Navegação (ordem de exibição = pré-ordem)
# -----------------------------------------------------------------------------
def iter_nodes(root: BaseFilter, path: Path = ROOT, depth: int = 0) -> Iterator[tuple[int, Path, BaseFilter]]:
    """Percorre a árvore em pré-ordem produzindo ``(profundidade, caminho, nó)``."""
    yield depth, path, root
    if isinstance(root, GroupFilter):
        for index, child in enumerate(root.children):
            yield from iter_nodes(child, (*path, index), depth + 1)


def flatten(root: BaseFilter) -> list[tuple[int, Path, BaseFilter]]:
    return list(iter_nodes(root))


def node_label(node: BaseFilter, depth: int = 0) -> str:
    if isinstance(node, ColumnFilter):
        return node.summary()
    if isinstance(node, GroupFilter):
        return f"Root {node.label}" if depth == 0 else node.label
    return repr(node)


def render_lines(root: BaseFilter, selection: Sequence[int] = ROOT) -> list[tuple[int, str, bool, Path]]:
    """Linhas ``(indentação, rótulo, selecionada, caminho)`` para listagens."""
    selection = tuple(selection)
    return [
        (depth, node_label(node, depth), path == selection, path)
        for depth, path, node in iter_nodes(root)
    ]


def _step(root: BaseFilter, selection: Sequence[int], offset: int) -> Path:
    paths = [path for _, path, _ in iter_nodes(root)]
    selection = tuple(selection)
    current = paths.index(selection) if selection in paths else 0
    return paths[(current + offset) % len(paths)]


def next_path(root: BaseFilter, selection: Sequence[int]) -> Path:
    """Próximo nó na ordem de exibição (volta ao início após o último)."""
    return _step(root, selection, 1)


def previous_path(root: BaseFilter, selection: Sequence[int]) -> Path:
    """Nó anterior na ordem de exibição (vai ao último a partir da raiz)."""
    return _step(root, selection, -1)
