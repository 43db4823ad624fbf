"""
Thin query layer — every aggregation over the snapshot lives here.
The API, the CLI and the dashboard pages import from this module; they never
touch DuckDB or the loader directly.

Each function accepts an already-loaded ``records`` list (so a page can load
once and run several queries) or loads a fresh snapshot itself. Nothing is
raised to the caller: failures come back as a ``QueryResult`` carrying the
operation's empty value and a status.
"""

import logging
from typing import Callable

import duckdb
import polars as pl

from .errors import CorruptDataError, InvalidShapeError, SnapshotUnavailableError
from .loader import SnapshotLoader, load_processos
from .results import QueryResult, QueryStatus
from .transforms import flatten_processo_record

logger = logging.getLogger(__name__)

FRAME_SCHEMA = {
    "processo":    pl.Utf8,
    "unidade":     pl.Utf8,
    "tipo_tabela": pl.Utf8,
    "dias":        pl.Float64,
    "posicao":     pl.Float64,
}

SUMMARY_SCHEMA = {
    "tipo_tabela":          pl.Utf8,
    "quantidade_processos": pl.Int64,
    "media_dias":           pl.Int64,
}


def records_to_frame(records: list) -> pl.DataFrame:
    """Flatten raw snapshot records into a typed frame; non-object entries are skipped."""
    rows = [flatten_processo_record(rec) for rec in records if isinstance(rec, dict)]
    skipped = len(records) - len(rows)
    if skipped:
        logger.debug("%d entradas do snapshot ignoradas (não são objetos)", skipped)
    return pl.DataFrame(rows, schema=FRAME_SCHEMA)


def _con(frame: pl.DataFrame) -> duckdb.DuckDBPyConnection:
    con = duckdb.connect()
    con.register("processos", frame)
    return con


def _run(
    label: str,
    query: Callable[[list], QueryResult],
    empty: Callable[[], object],
    records: list | None,
    loader: SnapshotLoader | None,
) -> QueryResult:
    try:
        if records is None:
            records = loader.load() if loader is not None else load_processos()
        return query(records)
    except SnapshotUnavailableError as exc:
        logger.error("%s: %s", label, exc)
        return QueryResult(QueryStatus.UNAVAILABLE, empty(), str(exc))
    except CorruptDataError as exc:
        logger.error("%s: %s", label, exc)
        return QueryResult(QueryStatus.CORRUPT_DATA, empty(), str(exc))
    except InvalidShapeError as exc:
        logger.error("%s: %s", label, exc)
        return QueryResult(QueryStatus.INVALID_SHAPE, empty(), str(exc))
    except Exception:
        logger.exception("Erro inesperado em %s", label)
        return QueryResult(QueryStatus.FAILED, empty(), "Erro interno do servidor.")


def _empty_summary() -> pl.DataFrame:
    return pl.DataFrame(schema=SUMMARY_SCHEMA)


def _empty_frame() -> pl.DataFrame:
    return pl.DataFrame(schema=FRAME_SCHEMA)


def load_snapshot(loader: SnapshotLoader | None = None) -> QueryResult[list]:
    """Load the snapshot once so several queries can share it through ``records=``."""
    return _run("carregar snapshot", lambda recs: QueryResult(QueryStatus.OK, recs), list, None, loader)


# ── Lookup ─────────────────────────────────────────────────────────────────

def find_processo(
    numero: str,
    *,
    records: list | None = None,
    loader: SnapshotLoader | None = None,
) -> QueryResult[dict]:
    """First record whose ``processo`` equals ``numero`` exactly, as stored in the snapshot."""
    def query(recs: list) -> QueryResult:
        found = next(
            (rec for rec in recs if isinstance(rec, dict) and rec.get("processo") == numero),
            None,
        )
        if found is None:
            return QueryResult(QueryStatus.NOT_FOUND, None, "Processo não encontrado")
        return QueryResult(QueryStatus.OK, found)

    return _run(f"buscar processo {numero}", query, lambda: None, records, loader)


# ── Unit dashboard ─────────────────────────────────────────────────────────

def get_tabelas_summary_by_unidade(
    unidade: str,
    *,
    records: list | None = None,
    loader: SnapshotLoader | None = None,
) -> QueryResult[pl.DataFrame]:
    """Valid processes per tipo_tabela for a unit, with the mean of ``dias`` rounded up.

    Processes whose ``dias`` is missing, non-numeric or ≤ 0 are left out of
    both the count and the mean. An empty frame is a normal result.
    """
    def query(recs: list) -> QueryResult:
        with _con(records_to_frame(recs)) as con:
            df = con.execute("""
                SELECT
                    tipo_tabela,
                    COUNT(*)::BIGINT                      AS quantidade_processos,
                    TRY_CAST(CEIL(SUM(dias) / COUNT(*)) AS BIGINT) AS media_dias
                FROM processos
                WHERE unidade = ?
                  AND dias > 0
                GROUP BY tipo_tabela
                ORDER BY tipo_tabela
            """, [unidade]).pl()
        return QueryResult(QueryStatus.OK, df)

    return _run(f"resumo da unidade {unidade}", query, _empty_summary, records, loader)


def get_overall_average_days_by_unidade(
    unidade: str,
    *,
    records: list | None = None,
    loader: SnapshotLoader | None = None,
) -> QueryResult[float]:
    """Mean ``dias`` of a unit's valid processes, rounded to 2 decimals (0.0 when none)."""
    def query(recs: list) -> QueryResult:
        with _con(records_to_frame(recs)) as con:
            row = con.execute("""
                SELECT ROUND(AVG(dias), 2)
                FROM processos
                WHERE unidade = ?
                  AND dias > 0
            """, [unidade]).fetchone()
        media = row[0] if row and row[0] is not None else 0.0
        return QueryResult(QueryStatus.OK, float(media))

    return _run(f"média geral da unidade {unidade}", query, lambda: 0.0, records, loader)


def get_processos_by_unidade_and_tabela(
    tipo_tabela: str,
    unidade: str,
    *,
    records: list | None = None,
    loader: SnapshotLoader | None = None,
) -> QueryResult[pl.DataFrame]:
    """All processes of a unit/tipo_tabela pair, in snapshot order."""
    def query(recs: list) -> QueryResult:
        df = records_to_frame(recs).filter(
            (pl.col("unidade") == unidade) & (pl.col("tipo_tabela") == tipo_tabela)
        )
        if df.is_empty():
            return QueryResult(QueryStatus.NOT_FOUND, df, "Nenhum processo para a unidade e tabela")
        return QueryResult(QueryStatus.OK, df)

    label = f"processos da tabela {tipo_tabela} / unidade {unidade}"
    return _run(label, query, _empty_frame, records, loader)


def get_tabela_details(
    tipo_tabela: str,
    unidade: str,
    dias: float,
    *,
    records: list | None = None,
    loader: SnapshotLoader | None = None,
) -> QueryResult[dict]:
    """How many of a unit/tipo_tabela pair's processes have ``0 < dias <= dias`` threshold.

    Returns a dict with ``tipo_tabela``, ``quantidade_processos`` (every record
    of the pair), ``dias`` (records within the threshold) and
    ``percentual_intervalo_dias`` (share of the total, 2 decimals).
    NOT_FOUND when the pair has no records at all.
    """
    def query(recs: list) -> QueryResult:
        with _con(records_to_frame(recs)) as con:
            total, dentro, percentual = con.execute("""
                SELECT
                    COUNT(*)                                                AS quantidade_processos,
                    COUNT(*) FILTER (WHERE dias > 0 AND dias <= ?)          AS intervalo_processos,
                    ROUND(
                        100.0 * COUNT(*) FILTER (WHERE dias > 0 AND dias <= ?)
                        / NULLIF(COUNT(*), 0), 2
                    )                                                       AS percentual
                FROM processos
                WHERE unidade = ?
                  AND tipo_tabela = ?
            """, [float(dias), float(dias), unidade, tipo_tabela]).fetchone()
        if not total:
            return QueryResult(QueryStatus.NOT_FOUND, None, "Nenhum processo para a unidade e tabela")
        return QueryResult(QueryStatus.OK, {
            "tipo_tabela":               tipo_tabela,
            "quantidade_processos":      int(total),
            "dias":                      int(dentro),
            "percentual_intervalo_dias": float(percentual),
        })

    label = f"detalhes da tabela {tipo_tabela} / unidade {unidade}"
    return _run(label, query, lambda: None, records, loader)


def get_invalid_processos_details(
    tipo_tabela: str,
    unidade: str,
    *,
    records: list | None = None,
    loader: SnapshotLoader | None = None,
) -> QueryResult[dict]:
    """Processes of a unit/tipo_tabela pair whose ``dias`` is missing, non-numeric or ≤ 0."""
    def query(recs: list) -> QueryResult:
        with _con(records_to_frame(recs)) as con:
            total, invalidos = con.execute("""
                SELECT
                    COUNT(*)                                            AS total_geral_processos,
                    COUNT(*) FILTER (WHERE dias IS NULL OR dias <= 0)   AS quantidade_processos_invalidos
                FROM processos
                WHERE unidade = ?
                  AND tipo_tabela = ?
            """, [unidade, tipo_tabela]).fetchone()
        if not total:
            return QueryResult(QueryStatus.NOT_FOUND, None, "Nenhum processo para a unidade e tabela")
        return QueryResult(QueryStatus.OK, {
            "tipo_tabela":                    tipo_tabela,
            "quantidade_processos_invalidos": int(invalidos),
            "total_geral_processos":          int(total),
        })

    label = f"processos inválidos da tabela {tipo_tabela} / unidade {unidade}"
    return _run(label, query, lambda: None, records, loader)


# ── Selectors ──────────────────────────────────────────────────────────────

def list_unidades(
    *,
    records: list | None = None,
    loader: SnapshotLoader | None = None,
) -> QueryResult[list[str]]:
    """Sorted distinct unit names present in the snapshot."""
    def query(recs: list) -> QueryResult:
        df = records_to_frame(recs)
        return QueryResult(QueryStatus.OK, sorted(df["unidade"].drop_nulls().unique().to_list()))

    return _run("listar unidades", query, list, records, loader)


def list_tabelas(
    unidade: str | None = None,
    *,
    records: list | None = None,
    loader: SnapshotLoader | None = None,
) -> QueryResult[list[str]]:
    """Sorted distinct tipo_tabela labels, optionally restricted to one unit."""
    def query(recs: list) -> QueryResult:
        df = records_to_frame(recs)
        if unidade is not None:
            df = df.filter(pl.col("unidade") == unidade)
        return QueryResult(QueryStatus.OK, sorted(df["tipo_tabela"].drop_nulls().unique().to_list()))

    return _run("listar tabelas", query, list, records, loader)
