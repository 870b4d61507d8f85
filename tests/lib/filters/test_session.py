import pandas as pd
import pytest

from gridfilter.lib.filters import (
    AndFilter,
    ColumnFilter,
    FilterSession,
    GreaterThan,
    IsNull,
    NotNull,
    OrFilter,
)
from gridfilter.lib.filters.base import ColumnNotFoundError, InvalidPathError, MalformedFilterError


def test_new_session_has_empty_and_root():
    session = FilterSession()
    assert session.root == AndFilter()
    assert session.selection == ()
    assert session.selected() is session.root


def test_bare_condition_root_is_wrapped_in_and(cond_a):
    session = FilterSession(cond_a)
    assert session.root == AndFilter((cond_a,))
    session.set_root(cond_a)
    assert session.root == AndFilter((cond_a,))


def test_add_condition_inserts_after_selection_and_selects_it(cond_a, cond_b, cond_c):
    session = FilterSession()
    assert session.add_condition(cond_a) == (0,)
    assert session.add_condition(cond_b) == (1,)
    session.select_previous()
    assert session.add_condition(cond_c) == (1,)
    assert session.root.children == (cond_a, cond_c, cond_b)


def test_add_group_and_nested_conditions(cond_a, cond_b):
    session = FilterSession()
    assert session.add_group("or") == (0,)
    assert session.add_condition(cond_a) == (0, 0)
    assert session.add_condition(cond_b) == (0, 1)
    assert session.root == AndFilter((OrFilter((cond_a, cond_b)),))
    assert session.select_parent() == (0,)
    assert session.toggle_group() == (0,)
    assert isinstance(session.selected(), AndFilter)


def test_wrap_in_group_keeps_selection(cond_a):
    session = FilterSession(AndFilter((cond_a,)))
    session.select_next()
    assert session.wrap_in_group("or") == (0,)
    assert session.root == AndFilter((OrFilter((cond_a,)),))


def test_insert_and_replace_report_selection(nested_tree, cond_a):
    session = FilterSession(nested_tree)
    assert session.insert((1, 0), cond_a) == (1, 0)
    assert session.insert((1, 99), cond_a) == (1, 3)
    # caminho inválido: nada muda
    assert session.insert((0, 0), cond_a) == (1, 3)
    assert session.replace((1, 0), ColumnFilter("z", IsNull())) == (1, 0)
    assert session.get((1, 0)) == ColumnFilter("z", IsNull())
    assert session.replace((), cond_a) == ()
    assert session.root == AndFilter((cond_a,))


def test_replace_with_invalid_path_keeps_tree_and_cursor(nested_tree, cond_a):
    session = FilterSession(nested_tree)
    session.select_previous()
    assert session.selection == (1, 1)
    assert session.replace((1, 7), cond_a) == (1, 1)
    assert session.replace((0, 0), cond_a) == (1, 1)
    assert session.root is nested_tree


def test_remove_moves_cursor(nested_tree):
    session = FilterSession(nested_tree)
    assert session.remove((1, 1)) == (1, 0)
    assert session.remove() == (1,)
    assert session.get((1,)) == OrFilter()
    assert session.remove((8,)) == ()


def test_get_is_lenient_unless_strict(nested_tree):
    session = FilterSession(nested_tree)
    assert session.get((9,)) is None
    with pytest.raises(InvalidPathError):
        session.get((9,), strict=True)


def test_navigation_and_render_lines(nested_tree):
    session = FilterSession(nested_tree)
    assert session.select_previous() == (1, 1)
    assert session.select_next() == ()
    session.select_next()
    lines = session.render_lines()
    assert [line[2] for line in lines] == [False, True, False, False, False]


def test_evaluate_and_apply(ages_df, nested_tree):
    session = FilterSession(nested_tree)
    # age > 30 AND (name contém "a" OR name == "Bruno")
    assert session.evaluate(ages_df).tolist() == [False, True, False, False]
    assert session.apply(ages_df)["name"].tolist() == ["Bruno"]


def test_evaluate_empty_root_keeps_every_row(ages_df):
    assert FilterSession().evaluate(ages_df).tolist() == [True] * 4
    assert FilterSession(OrFilter()).evaluate(ages_df).tolist() == [False] * 4


def test_evaluate_surfaces_typed_errors(ages_df):
    session = FilterSession(AndFilter((ColumnFilter("nope", NotNull()),)))
    with pytest.raises(ColumnNotFoundError):
        session.evaluate(ages_df)


def test_save_and_load_restore_nested_tree(tmp_path, nested_tree, cond_c):
    session = FilterSession(nested_tree)
    session.select_next()
    target = session.save(tmp_path / "meu_filtro")
    assert target.suffix == ".json"
    assert target.exists()

    restored = FilterSession()
    assert restored.load(target) == ()
    assert restored.root == nested_tree
    assert restored.get([1, 1]) == cond_c


def test_loads_malformed_keeps_current_tree(nested_tree):
    session = FilterSession(nested_tree)
    session.select_next()
    with pytest.raises(MalformedFilterError):
        session.loads(b'{"Xor": []}')
    assert session.root == nested_tree
    assert session.selection == (0,)


def test_dumps_round_trip_with_empty_groups():
    tree = AndFilter((OrFilter(), AndFilter((ColumnFilter("x", GreaterThan("1")),))))
    session = FilterSession(tree)
    other = FilterSession()
    other.loads(session.dumps())
    assert other.root == tree


def test_reset_returns_to_empty_root(nested_tree):
    session = FilterSession(nested_tree)
    session.select_next()
    assert session.reset() == ()
    assert session.root == AndFilter()
