"""
Command line entry point for the process queue snapshot.

Usage:
    fila-processos consulta 1234.567890/2024-12        # one process
    fila-processos resumo "COMRAR"                      # per-tabela summary of a unit
    fila-processos detalhes "COMRAR" "Tabela 1" --dias 30
    fila-processos invalidos "COMRAR" "Tabela 1"
    fila-processos importar legado.json data/tabela_processos.json
    fila-processos serve --port 5000

Global flags --primary / --backup override FILA_PRIMARY_PATH / FILA_BACKUP_PATH.

Exit codes: 0 success, 1 not found or bad input, 2 snapshot unavailable or corrupt.
"""

import argparse
import json
import sys
from pathlib import Path

from .config import SnapshotConfig
from .loader import SnapshotLoader
from .queries import (
    find_processo,
    get_invalid_processos_details,
    get_overall_average_days_by_unidade,
    get_tabela_details,
    get_tabelas_summary_by_unidade,
    load_snapshot,
)
from .results import QueryResult, QueryStatus
from .transforms import format_numero, is_valid_numero, records_from_mapping
from .utils import configure_logging, configure_utf8, write_bytes_atomic

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_UNAVAILABLE = 2


def _exit_code(result: QueryResult) -> int:
    if result.ok:
        return EXIT_OK
    if result.status is QueryStatus.NOT_FOUND:
        return EXIT_NOT_FOUND
    return EXIT_UNAVAILABLE


def _print_json(value) -> None:
    print(json.dumps(value, ensure_ascii=False, indent=2))


def _fail(result: QueryResult) -> int:
    print(f"ERROR: {result.message}", file=sys.stderr)
    return _exit_code(result)


def _or_dash(value) -> str:
    return "—" if value is None else str(value)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_consulta(args, loader: SnapshotLoader) -> int:
    numero = format_numero(args.numero)
    if not is_valid_numero(numero):
        print("ERROR: Digite o processo no formato correto: xxxx.xxxxxx/xxxx-xx", file=sys.stderr)
        return EXIT_NOT_FOUND
    result = find_processo(numero, loader=loader)
    if not result.ok:
        return _fail(result)
    _print_json(result.value)
    return EXIT_OK


def cmd_resumo(args, loader: SnapshotLoader) -> int:
    snapshot = load_snapshot(loader)
    if not snapshot.ok:
        return _fail(snapshot)

    summary = get_tabelas_summary_by_unidade(args.unidade, records=snapshot.value)
    media = get_overall_average_days_by_unidade(args.unidade, records=snapshot.value)
    if not summary.ok:
        return _fail(summary)

    df = summary.value
    if df.is_empty():
        print(f"Nenhum processo válido para a unidade {args.unidade}.")
        return EXIT_OK

    print(f"Unidade: {args.unidade}  (média geral: {media.value} dias)\n")
    for row in df.iter_rows(named=True):
        print(
            f"  {str(row['tipo_tabela']):<30} "
            f"{row['quantidade_processos']:>6} processos   "
            f"média {_or_dash(row['media_dias']):>4} dias"
        )
    return EXIT_OK


def cmd_detalhes(args, loader: SnapshotLoader) -> int:
    result = get_tabela_details(args.tipo_tabela, args.unidade, args.dias, loader=loader)
    if not result.ok:
        return _fail(result)
    _print_json(result.value)
    return EXIT_OK


def cmd_invalidos(args, loader: SnapshotLoader) -> int:
    result = get_invalid_processos_details(args.tipo_tabela, args.unidade, loader=loader)
    if not result.ok:
        return _fail(result)
    _print_json(result.value)
    return EXIT_OK


def cmd_importar(args, loader: SnapshotLoader) -> int:
    source = Path(args.origem)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        print(f"ERROR: não foi possível ler {source}: {exc}", file=sys.stderr)
        return EXIT_UNAVAILABLE

    if isinstance(data, dict):
        records = records_from_mapping(data)
    elif isinstance(data, list):
        records = data
    else:
        print(f"ERROR: formato não suportado em {source}: {type(data).__name__}", file=sys.stderr)
        return EXIT_UNAVAILABLE

    out = Path(args.destino)
    payload = json.dumps(records, ensure_ascii=False, indent=2).encode("utf-8")
    try:
        write_bytes_atomic(out, payload)
    except OSError as exc:
        print(f"ERROR: não foi possível gravar {out}: {exc}", file=sys.stderr)
        return EXIT_UNAVAILABLE
    print(f"Saved {len(records)} processos → {out}")
    return EXIT_OK


def cmd_serve(args, loader: SnapshotLoader) -> int:
    from .api import create_app

    create_app(loader).run(host=args.host, port=args.port)
    return EXIT_OK


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fila-processos",
        description="Consulta a fila de processos a partir do snapshot JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--primary", default=None, metavar="PATH|URL",
                        help="Primary snapshot location (default: FILA_PRIMARY_PATH).")
    parser.add_argument("--backup", default=None, metavar="PATH",
                        help="Local backup location (default: FILA_BACKUP_PATH).")
    parser.add_argument("--log-level", default="WARNING", metavar="LEVEL",
                        help="Logging level (default: WARNING).")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("consulta", help="Find one process by its number.")
    p.add_argument("numero", help="Process number; digits are re-masked as NNNN.NNNNNN/NNNN-NN.")
    p.set_defaults(fn=cmd_consulta)

    p = sub.add_parser("resumo", help="Per-tabela counts and mean days for a unit.")
    p.add_argument("unidade")
    p.set_defaults(fn=cmd_resumo)

    p = sub.add_parser("detalhes", help="Processes of a unit/tabela within a day threshold.")
    p.add_argument("unidade")
    p.add_argument("tipo_tabela")
    p.add_argument("--dias", type=int, required=True, metavar="N",
                   help="Day threshold: counts processes with 0 < dias <= N.")
    p.set_defaults(fn=cmd_detalhes)

    p = sub.add_parser("invalidos", help="Processes of a unit/tabela without a valid day count.")
    p.add_argument("unidade")
    p.add_argument("tipo_tabela")
    p.set_defaults(fn=cmd_invalidos)

    p = sub.add_parser("importar", help="Convert a legacy id-keyed snapshot into the list format.")
    p.add_argument("origem")
    p.add_argument("destino")
    p.set_defaults(fn=cmd_importar)

    p = sub.add_parser("serve", help="Run the HTTP API.")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=5000)
    p.set_defaults(fn=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_utf8()
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    config = SnapshotConfig.from_env(primary=args.primary, backup=args.backup)
    with SnapshotLoader(config) as loader:
        return args.fn(args, loader)


if __name__ == "__main__":
    sys.exit(main())
