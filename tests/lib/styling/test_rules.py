import pandas as pd
import pytest

from gridfilter.lib.filters import ColumnFilter, Equals, GreaterThan
from gridfilter.lib.filters.base import MalformedFilterError
from gridfilter.lib.styling import (
    ScopeEnum,
    StyleRule,
    StyleSet,
    decode_style_set,
    encode_style_set,
)


@pytest.fixture
def metrics_df():
    return pd.DataFrame(
        {
            "cpu_user": [10, 95, 50],
            "cpu_sys": [5, 3, 80],
            "host": ["a", "b", "c"],
        }
    )


def test_row_scope_marks_every_cell_of_matching_rows(metrics_df):
    rule = StyleRule(ColumnFilter("cpu_user", GreaterThan("90")), ScopeEnum.ROW, {"bg": "Red"})
    cells = rule.cell_mask(metrics_df)
    assert cells.loc[1].tolist() == [True, True, True]
    assert not cells.loc[[0, 2]].to_numpy().any()


def test_cell_scope_restricts_to_column_globs(metrics_df):
    rule = StyleRule(
        ColumnFilter("host", Equals("c")),
        ScopeEnum.CELL,
        {"fg": "Yellow"},
        column_scope=("cpu_*",),
    )
    assert rule.target_columns(list(metrics_df.columns)) == ["cpu_user", "cpu_sys"]
    cells = rule.cell_mask(metrics_df)
    assert cells.loc[2].tolist() == [True, True, False]
    assert cells.loc[0].tolist() == [False, False, False]


def test_header_scope_requires_at_least_one_matching_row(metrics_df):
    hit = StyleRule(ColumnFilter("cpu_sys", GreaterThan("50")), ScopeEnum.HEADER, column_scope=("host",))
    assert hit.header_mask(metrics_df).to_dict() == {"cpu_user": False, "cpu_sys": False, "host": True}
    miss = StyleRule(ColumnFilter("cpu_sys", GreaterThan("500")), ScopeEnum.HEADER)
    assert not miss.header_mask(metrics_df).any()


def test_style_set_matches_by_rule_position(metrics_df):
    style_set = StyleSet(
        "alertas",
        rules=(
            StyleRule(ColumnFilter("cpu_user", GreaterThan("90"))),
            StyleRule(),
        ),
    )
    matches = style_set.matches(metrics_df)
    assert matches[0].tolist() == [False, True, False]
    # regra sem condições casa todas as linhas
    assert matches[1].tolist() == [True, True, True]


def test_style_set_round_trip():
    style_set = StyleSet(
        "alertas",
        "uso alto de CPU",
        (
            StyleRule(ColumnFilter("cpu_user", GreaterThan("90")), ScopeEnum.ROW, {"bg": "Red"}),
            StyleRule(
                ColumnFilter("host", Equals("c")),
                ScopeEnum.CELL,
                {"fg": "Yellow", "bold": True},
                column_scope=("cpu_*",),
            ),
        ),
    )
    assert decode_style_set(encode_style_set(style_set)) == style_set


@pytest.mark.parametrize(
    "payload",
    [
        "[]",
        '{"rules": []}',
        '{"name": "x", "rules": {}}',
        '{"name": "x", "rules": [{"scope": "Row"}]}',
        '{"name": "x", "rules": [{"match_expr": {"And": []}, "scope": "Column"}]}',
        '{"name": "x", "rules": [{"match_expr": {"And": []}, "scope": "Row", "column_scope": "a*"}]}',
        '{"name": "x", "rules": [{"match_expr": {"Xor": []}, "scope": "Row"}]}',
    ],
)
def test_decode_style_set_rejects_malformed_content(payload):
    with pytest.raises(MalformedFilterError):
        decode_style_set(payload)
