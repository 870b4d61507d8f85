"""Constantes de configuração do motor de filtros."""

# Conjunção usada pela raiz de uma nova sessão de filtro ("and" ou "or")
DEFAULT_ROOT_CONJUNCTION = "and"

# Persistência
FILTER_FILE_SUFFIX = ".json"
FILTER_JSON_INDENT = 2
FILTER_FILE_ENCODING = "utf-8"

# Literais aceitos para Equals em colunas booleanas
TRUE_LITERALS = frozenset({"true", "1"})
FALSE_LITERALS = frozenset({"false", "0"})

# Chaves do st.session_state
STATE_FILTER_SESSION = "filter_session"
STATE_TABLE = "active_table"
STATE_FILTERED_TABLE = "filtered_table"
STATE_FILTER_ERROR = "filter_error"

# Profundidade máxima de grupos aninhados aceita pelo codec (raiz = nível 0)
MAX_FILTER_DEPTH = 100
