import logging

import pytest

from gridfilter.lib.filters import AndFilter, ColumnFilter, IsNull, OrFilter
from gridfilter.lib.filters import tree


@pytest.fixture
def d():
    return ColumnFilter("d", IsNull())


def test_get_node_resolves_paths(nested_tree, cond_a, cond_c):
    assert tree.get_node(nested_tree, ()) is nested_tree
    assert tree.get_node(nested_tree, (0,)) == cond_a
    assert tree.get_node(nested_tree, (1, 1)) == cond_c
    # atravessa uma condição ou sai do intervalo
    assert tree.get_node(nested_tree, (0, 0)) is None
    assert tree.get_node(nested_tree, (5,)) is None
    assert tree.get_node(nested_tree, (1, -1)) is None


def test_insert_with_empty_path_appends_to_root(nested_tree, d):
    new = tree.insert_node(nested_tree, (), d)
    assert new.children[-1] == d
    assert len(nested_tree.children) == 2


def test_insert_shifts_siblings_and_clamps_overflow(nested_tree, cond_a, d):
    front = tree.insert_node(nested_tree, (0,), d)
    assert front.children[0] == d and front.children[1] == cond_a
    end = tree.insert_node(nested_tree, (10,), d)
    assert end.children[-1] == d
    nested = tree.insert_node(nested_tree, (1, 0), d)
    assert tree.get_node(nested, (1, 0)) == d
    assert len(tree.get_node(nested, (1,)).children) == 3


def test_insert_through_condition_is_noop(nested_tree, d):
    assert tree.insert_node(nested_tree, (0, 0), d) is nested_tree
    assert tree.insert_node(nested_tree, (7, 0), d) is nested_tree


def test_replace_node(nested_tree, cond_b, d):
    new = tree.replace_node(nested_tree, (1, 1), d)
    assert tree.get_node(new, (1,)).children == (cond_b, d)
    assert tree.replace_node(nested_tree, (), d) is d
    assert tree.replace_node(nested_tree, (7,), d) is nested_tree


def test_remove_only_child_selects_emptied_group(cond_b):
    root = AndFilter((OrFilter((cond_b,)),))
    new, selection = tree.remove_node(root, (0, 0))
    assert selection == (0,)
    assert tree.get_node(new, (0,)) == OrFilter()


def test_remove_selects_previous_sibling_or_new_first(cond_a, cond_b, cond_c):
    root = AndFilter((cond_a, cond_b, cond_c))
    new, selection = tree.remove_node(root, (2,))
    assert new.children == (cond_a, cond_b)
    assert selection == (1,)
    new, selection = tree.remove_node(root, (0,))
    assert new.children == (cond_b, cond_c)
    assert selection == (0,)


def test_root_is_never_removed(nested_tree):
    new, selection = tree.remove_node(nested_tree, ())
    assert new is nested_tree
    assert selection == ()


def test_invalid_remove_falls_back_to_nearest_ancestor(nested_tree, caplog):
    with caplog.at_level(logging.WARNING):
        new, selection = tree.remove_node(nested_tree, (1, 9))
    assert new is nested_tree
    assert selection == (1,)
    assert "remove_node" in caplog.text
    assert tree.remove_node(nested_tree, (5,)) == (nested_tree, ())


def test_toggle_group_flips_conjunction(nested_tree):
    new = tree.toggle_group(nested_tree, (1,))
    toggled = tree.get_node(new, (1,))
    assert isinstance(toggled, AndFilter)
    assert toggled.children == tree.get_node(nested_tree, (1,)).children
    assert isinstance(tree.toggle_group(nested_tree, ()), OrFilter)
    assert tree.toggle_group(nested_tree, (0,)) is nested_tree


def test_wrap_in_group_only_wraps_conditions(nested_tree, cond_a):
    new = tree.wrap_in_group(nested_tree, (0,), "or")
    assert tree.get_node(new, (0,)) == OrFilter((cond_a,))
    assert tree.wrap_in_group(nested_tree, (1,)) is nested_tree


def test_add_group_on_group_appends_and_selects_it(nested_tree):
    new, selection = tree.add_group(nested_tree, (1,), "and")
    assert selection == (1, 2)
    assert tree.get_node(new, selection) == AndFilter()


def test_add_group_on_condition_wraps_and_keeps_selection(nested_tree, cond_a):
    new, selection = tree.add_group(nested_tree, (0,), "OR")
    assert selection == (0,)
    assert tree.get_node(new, (0,)) == OrFilter((cond_a,))


def test_group_class_rejects_unknown_conjunction():
    assert tree.group_class(" And ") is AndFilter
    with pytest.raises(ValueError):
        tree.group_class("xor")


def test_insertion_path_follows_selection(nested_tree):
    assert tree.insertion_path(nested_tree, ()) == (2,)
    assert tree.insertion_path(nested_tree, (1,)) == (1, 2)
    assert tree.insertion_path(nested_tree, (0,)) == (1,)
    assert tree.insertion_path(nested_tree, (1, 0)) == (1, 1)
    assert tree.insertion_path(nested_tree, (9, 9)) == (2,)


def test_flatten_is_preorder(nested_tree):
    paths = [path for _, path, _ in tree.flatten(nested_tree)]
    assert paths == [(), (0,), (1,), (1, 0), (1, 1)]
    depths = [depth for depth, _, _ in tree.flatten(nested_tree)]
    assert depths == [0, 1, 1, 2, 2]


def test_navigation_wraps_around(nested_tree):
    assert tree.next_path(nested_tree, ()) == (0,)
    assert tree.next_path(nested_tree, (1,)) == (1, 0)
    assert tree.next_path(nested_tree, (1, 1)) == ()
    assert tree.previous_path(nested_tree, ()) == (1, 1)
    assert tree.previous_path(nested_tree, (1, 0)) == (1,)


def test_render_lines_marks_selection(nested_tree):
    lines = tree.render_lines(nested_tree, (1,))
    assert lines[0] == (0, "Root AND", False, ())
    assert lines[1] == (1, "age > 30", False, (0,))
    assert lines[2] == (1, "OR", True, (1,))
    assert lines[4] == (2, 'name = "Bruno" [Aa]', False, (1, 1))
