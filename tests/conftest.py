import pandas as pd
import pytest

from gridfilter.lib.filters import (
    AndFilter,
    ColumnFilter,
    Contains,
    Equals,
    GreaterThan,
    OrFilter,
)


@pytest.fixture
def ages_df():
    """Tabela com uma coluna inteira anulável e uma coluna de texto."""
    return pd.DataFrame(
        {
            "age": pd.array([10, 40, 25, None], dtype="Int64"),
            "name": ["ana", "Bruno", "carla", None],
        }
    )


@pytest.fixture
def cond_a():
    return ColumnFilter("age", GreaterThan("30"))


@pytest.fixture
def cond_b():
    return ColumnFilter("name", Contains("a"))


@pytest.fixture
def cond_c():
    return ColumnFilter("name", Equals("Bruno", case_sensitive=True))


@pytest.fixture
def nested_tree(cond_a, cond_b, cond_c):
    """``And([a, Or([b, c])])``"""
    return AndFilter((cond_a, OrFilter((cond_b, cond_c))))
