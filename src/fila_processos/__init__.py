"""
Process queue snapshot: primary/backup loader and the dashboard query layer.

Re-exports the public surface so callers can import from the top-level package:

    from fila_processos import SnapshotLoader, find_processo
"""

from .config import SnapshotConfig
from .errors import (
    CorruptDataError,
    InvalidShapeError,
    SnapshotError,
    SnapshotUnavailableError,
)
from .loader import SnapshotLoader, load_processos
from .queries import (
    find_processo,
    get_invalid_processos_details,
    get_overall_average_days_by_unidade,
    get_processos_by_unidade_and_tabela,
    get_tabela_details,
    get_tabelas_summary_by_unidade,
    list_tabelas,
    list_unidades,
    load_snapshot,
)
from .results import QueryResult, QueryStatus
from .transforms import format_numero, is_valid_dias, is_valid_numero, parse_dias

__all__ = [
    "SnapshotConfig",
    "SnapshotError",
    "CorruptDataError",
    "InvalidShapeError",
    "SnapshotUnavailableError",
    "SnapshotLoader",
    "load_processos",
    "QueryResult",
    "QueryStatus",
    "find_processo",
    "get_tabelas_summary_by_unidade",
    "get_overall_average_days_by_unidade",
    "get_processos_by_unidade_and_tabela",
    "get_tabela_details",
    "get_invalid_processos_details",
    "list_unidades",
    "list_tabelas",
    "load_snapshot",
    "parse_dias",
    "is_valid_dias",
    "format_numero",
    "is_valid_numero",
]
