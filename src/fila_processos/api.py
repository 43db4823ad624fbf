# api.py
# Flask app exposing the process lookup and the unit dashboard aggregates as JSON.
#
#   flask --app fila_processos.api run
#   fila-processos serve --port 5000

import os

from flask import Flask, jsonify, request

from .loader import SnapshotLoader
from .queries import (
    find_processo,
    get_invalid_processos_details,
    get_overall_average_days_by_unidade,
    get_tabela_details,
    get_tabelas_summary_by_unidade,
    list_unidades,
    load_snapshot,
)
from .results import QueryResult, QueryStatus

APP_PORT = int(os.environ.get("PORT", 5000))


HTTP_STATUS = {
    QueryStatus.OK:            200,
    QueryStatus.NOT_FOUND:     404,
    QueryStatus.UNAVAILABLE:   503,
    QueryStatus.CORRUPT_DATA:  500,
    QueryStatus.INVALID_SHAPE: 500,
    QueryStatus.FAILED:        500,
}


def _error(result: QueryResult):
    status = HTTP_STATUS[result.status]
    message = result.message or "Erro interno do servidor."
    return jsonify({"message": message, "status": result.status.value}), status


def _non_negative_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value >= 0 else None


def create_app(loader: SnapshotLoader | None = None) -> Flask:
    """Build the Flask app. Every request reads the snapshot through ``loader``."""
    app = Flask(__name__)
    app.json.ensure_ascii = False
    app.extensions["snapshot_loader"] = loader or SnapshotLoader()

    def _loader() -> SnapshotLoader:
        return app.extensions["snapshot_loader"]

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    @app.route("/api/processo", methods=["GET"])
    def processo():
        numero = (request.args.get("numero") or "").strip()
        if not numero:
            return jsonify({"message": "Número do processo é obrigatório."}), 400

        result = find_processo(numero, loader=_loader())
        if not result.ok:
            return _error(result)
        return jsonify(result.value), 200

    @app.route("/api/unidades", methods=["GET"])
    def unidades():
        result = list_unidades(loader=_loader())
        if not result.ok:
            return _error(result)
        return jsonify(result.value)

    @app.route("/api/unidades/<path:unidade>/resumo", methods=["GET"])
    def resumo(unidade: str):
        snapshot = load_snapshot(_loader())
        if not snapshot.ok:
            return _error(snapshot)

        summary = get_tabelas_summary_by_unidade(unidade, records=snapshot.value)
        if not summary.ok:
            return _error(summary)
        media = get_overall_average_days_by_unidade(unidade, records=snapshot.value)
        if not media.ok:
            return _error(media)

        return jsonify({
            "unidade":          unidade,
            "media_geral_dias": media.value,
            "tabelas":          summary.value.to_dicts(),
        })

    @app.route("/api/unidades/<path:unidade>/tabelas/<path:tipo_tabela>", methods=["GET"])
    def detalhes(unidade: str, tipo_tabela: str):
        dias = _non_negative_int(request.args.get("dias"))
        if dias is None:
            return jsonify({"message": "Parâmetro 'dias' deve ser um inteiro maior ou igual a zero."}), 400

        snapshot = load_snapshot(_loader())
        if not snapshot.ok:
            return _error(snapshot)

        details = get_tabela_details(tipo_tabela, unidade, dias, records=snapshot.value)
        if not details.ok:
            return _error(details)
        invalidos = get_invalid_processos_details(tipo_tabela, unidade, records=snapshot.value)
        if not invalidos.ok:
            return _error(invalidos)

        return jsonify({"detalhes": details.value, "invalidos": invalidos.value})

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=APP_PORT)
