import pandas as pd
import pytest

from gridfilter.lib.filters import (
    AndFilter,
    ColumnFilter,
    Equals,
    GreaterThan,
    NotNull,
    OrFilter,
)
from gridfilter.lib.filters.base import ColumnNotFoundError, OperandParseError


@pytest.mark.parametrize("rows", [0, 1, 3])
def test_empty_groups_return_their_identity_for_any_row_count(rows):
    df = pd.DataFrame({"x": list(range(rows))})
    and_mask = AndFilter().mask(df)
    or_mask = OrFilter().mask(df)
    assert and_mask.dtype == bool and or_mask.dtype == bool
    assert len(and_mask) == rows
    assert and_mask.tolist() == [True] * rows
    assert or_mask.tolist() == [False] * rows


def test_group_folds_children_masks_in_order(ages_df, cond_a, cond_b):
    a = cond_a.mask(ages_df)
    b = cond_b.mask(ages_df)
    assert AndFilter((cond_a, cond_b)).mask(ages_df).tolist() == (a & b).tolist()
    assert OrFilter((cond_a, cond_b)).mask(ages_df).tolist() == (a | b).tolist()


def test_single_child_group_equals_child(ages_df, cond_b):
    assert OrFilter((cond_b,)).mask(ages_df).tolist() == cond_b.mask(ages_df).tolist()


def test_replacing_child_with_empty_or_excludes_every_row(ages_df, cond_a):
    tree = AndFilter((ColumnFilter("age", NotNull()), OrFilter()))
    assert tree.mask(ages_df).tolist() == [False] * 4
    assert AndFilter((cond_a, AndFilter())).mask(ages_df).tolist() == cond_a.mask(ages_df).tolist()


def test_error_path_points_at_failing_node(ages_df, cond_a):
    tree = OrFilter((cond_a, AndFilter((ColumnFilter("missing", NotNull()),))))
    with pytest.raises(ColumnNotFoundError) as info:
        tree.mask(ages_df)
    assert info.value.column == "missing"
    assert info.value.path == (1, 0)


def test_operand_error_propagates_through_groups(ages_df):
    tree = AndFilter((AndFilter((ColumnFilter("age", Equals("x")),)),))
    with pytest.raises(OperandParseError) as info:
        tree.mask(ages_df)
    assert info.value.path == (0, 0)


def test_operators_compose_groups(cond_a, cond_b):
    both = cond_a & cond_b
    either = cond_a | cond_b
    assert isinstance(both, AndFilter) and both.children == (cond_a, cond_b)
    assert isinstance(either, OrFilter) and either.children == (cond_a, cond_b)


def test_flipped_keeps_children(cond_a, cond_b):
    group = AndFilter((cond_a, cond_b))
    flipped = group.flipped()
    assert isinstance(flipped, OrFilter)
    assert flipped.children == group.children
    assert flipped.flipped() == group


def test_evaluate_row_uses_all_and_any(cond_a):
    small = ColumnFilter("age", GreaterThan("100"))
    row = {"age": 40}
    assert AndFilter((cond_a,)).evaluate_row(row)
    assert not AndFilter((cond_a, small)).evaluate_row(row)
    assert OrFilter((cond_a, small)).evaluate_row(row)
    assert AndFilter().evaluate_row(row)
    assert not OrFilter().evaluate_row(row)


def test_apply_returns_filtered_copy(ages_df, cond_a):
    result = AndFilter((cond_a,)).apply(ages_df)
    assert result["age"].tolist() == [40]
    assert len(ages_df) == 4
