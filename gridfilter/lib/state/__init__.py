from .manager import (
    apply_filter,
    get_filter_error,
    get_filter_session,
    get_table,
    initialize_session_state,
    reset_filter,
    set_table,
)

__all__ = [
    "initialize_session_state",
    "get_filter_session",
    "set_table",
    "get_table",
    "reset_filter",
    "apply_filter",
    "get_filter_error",
]
