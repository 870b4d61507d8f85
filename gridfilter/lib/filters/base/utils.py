import pandas as pd

from .exceptions import FilterError


def _ensure_bool_series(mask: pd.Series, df: pd.DataFrame) -> None:
    """Garante que a série ``mask`` seja booleana e alinhada ao ``df``.

    Lança ``FilterError`` com mensagens claras caso algo esteja desalinhado ou
    com tipo inadequado — útil para depuração e para manter o contrato da API.
    """
    if not isinstance(mask, pd.Series):
        raise FilterError("Máscara deve ser uma pandas.Series")
    if mask.dtype != bool:
        raise FilterError(f"Máscara deve ter dtype bool, recebido {mask.dtype}")
    if not mask.index.equals(df.index):
        raise FilterError("Índice da máscara não corresponde ao índice do DataFrame")


def _full_mask(df: pd.DataFrame, value: bool) -> pd.Series:
    """Máscara constante alinhada ao índice do ``df`` (vale também para 0 linhas)."""
    return pd.Series(value, index=df.index, dtype=bool)


def _to_bool_mask(values: pd.Series) -> pd.Series:
    """Converte um resultado possivelmente anulável (``boolean``/NA) em ``bool``.

    NA vira ``False``: valores nulos nunca satisfazem um predicado de valor.
    """
    if values.dtype == bool:
        return values
    return values.astype("boolean").fillna(False).astype(bool)
