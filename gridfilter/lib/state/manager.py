import logging

import pandas as pd
import streamlit as st

from gridfilter.lib.constants import (
    STATE_FILTER_ERROR,
    STATE_FILTER_SESSION,
    STATE_FILTERED_TABLE,
    STATE_TABLE,
)
from gridfilter.lib.filters.base.exceptions import FilterError
from gridfilter.lib.filters.session import FilterSession

logger = logging.getLogger(__name__)


def initialize_session_state() -> None:
    """
    Inicializa o estado da sessão Streamlit com valores padrão.

    Esta função deve ser chamada no início de cada aplicação Streamlit para
    garantir que todas as variáveis de estado necessárias estejam definidas.

    Inicializa as seguintes variáveis de estado:
    - filter_session: árvore de filtros em edição e cursor de seleção
    - active_table: DataFrame sobre o qual o filtro é aplicado
    - filtered_table: resultado da última aplicação bem-sucedida
    - filter_error: mensagem do último erro de avaliação (ou None)

    :returns: None
    """
    if STATE_FILTER_SESSION not in st.session_state:
        st.session_state[STATE_FILTER_SESSION] = FilterSession()
    if STATE_TABLE not in st.session_state:
        st.session_state[STATE_TABLE] = None
    if STATE_FILTERED_TABLE not in st.session_state:
        st.session_state[STATE_FILTERED_TABLE] = None
    if STATE_FILTER_ERROR not in st.session_state:
        st.session_state[STATE_FILTER_ERROR] = None


def get_filter_session() -> FilterSession:
    """Retorna a sessão de filtro, criando o estado padrão se necessário."""
    if STATE_FILTER_SESSION not in st.session_state:
        initialize_session_state()
    return st.session_state[STATE_FILTER_SESSION]


def set_table(df: pd.DataFrame) -> None:
    """
    Define a tabela ativa e descarta o resultado filtrado anterior.

    :param df: DataFrame sobre o qual os filtros serão avaliados
    :returns: None
    """
    st.session_state[STATE_TABLE] = df
    st.session_state[STATE_FILTERED_TABLE] = None
    st.session_state[STATE_FILTER_ERROR] = None


def get_table() -> pd.DataFrame | None:
    """Retorna a tabela ativa (ou None)."""
    return st.session_state.get(STATE_TABLE)


def reset_filter() -> None:
    """
    Volta a árvore de filtros ao grupo vazio padrão.

    O cursor de seleção volta para a raiz e o resultado filtrado é descartado.

    :returns: None
    """
    get_filter_session().reset()
    st.session_state[STATE_FILTERED_TABLE] = None
    st.session_state[STATE_FILTER_ERROR] = None


def apply_filter() -> pd.DataFrame | None:
    """
    Avalia a árvore atual contra a tabela ativa.

    Em caso de sucesso guarda e retorna o DataFrame filtrado. Em caso de erro
    de filtro guarda a mensagem em ``filter_error`` e retorna None: um filtro
    inválido nunca é aplicado silenciosamente.

    :returns: DataFrame filtrado, ou None sem tabela ativa ou com erro
    """
    df = get_table()
    if df is None:
        return None
    try:
        filtered = get_filter_session().apply(df)
    except FilterError as exc:
        logger.info("Filtro não aplicado: %s (caminho=%s)", exc, exc.path)
        st.session_state[STATE_FILTER_ERROR] = str(exc)
        return None
    st.session_state[STATE_FILTERED_TABLE] = filtered
    st.session_state[STATE_FILTER_ERROR] = None
    return filtered


def get_filter_error() -> str | None:
    """Retorna a mensagem do último erro de avaliação (ou None)."""
    return st.session_state.get(STATE_FILTER_ERROR)
