"""HTTP tests for the Flask API, using Flask's test client."""
import pytest

from fila_processos import SnapshotConfig, SnapshotLoader
from fila_processos.api import create_app
from conftest import SAMPLE_RECORDS


@pytest.fixture
def client(loader):
    app = create_app(loader)
    app.testing = True
    return app.test_client()


@pytest.fixture
def unavailable_client(unavailable_loader):
    return create_app(unavailable_loader).test_client()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_processo_found(client):
    resp = client.get("/api/processo", query_string={"numero": "0001.000004/2024-04"})
    assert resp.status_code == 200
    assert resp.get_json() == SAMPLE_RECORDS[3]


def test_processo_number_is_trimmed(client):
    resp = client.get("/api/processo", query_string={"numero": "  0001.000004/2024-04 "})
    assert resp.status_code == 200


@pytest.mark.parametrize("query", [{}, {"numero": ""}, {"numero": "   "}])
def test_processo_missing_numero_is_400(client, query):
    resp = client.get("/api/processo", query_string=query)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Número do processo é obrigatório."


def test_processo_not_found_is_404(client):
    resp = client.get("/api/processo", query_string={"numero": "9999.999999/9999-99"})
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Processo não encontrado"


def test_processo_unavailable_is_503(unavailable_client):
    resp = unavailable_client.get("/api/processo", query_string={"numero": "0001.000001/2024-01"})
    assert resp.status_code == 503
    assert "indisponível" in resp.get_json()["message"]


def test_processo_corrupt_is_500(primary_path, backup_path):
    primary_path.write_text("[", encoding="utf-8")
    with SnapshotLoader(SnapshotConfig(primary=primary_path, backup=backup_path)) as loader:
        resp = create_app(loader).test_client().get(
            "/api/processo", query_string={"numero": "0001.000001/2024-01"}
        )
    assert resp.status_code == 500
    assert resp.get_json()["status"] == "corrupt_data"


def test_processo_served_from_backup_when_primary_offline(tmp_path, primary_path, backup_path):
    backup_path.parent.mkdir(parents=True)
    backup_path.write_bytes(primary_path.read_bytes())
    config = SnapshotConfig(primary=tmp_path / "offline.json", backup=backup_path)
    with SnapshotLoader(config) as loader:
        resp = create_app(loader).test_client().get(
            "/api/processo", query_string={"numero": "0002.000001/2024-07"}
        )
    assert resp.status_code == 200
    assert resp.get_json()["unidade"] == "GEO"


def test_unidades(client):
    resp = client.get("/api/unidades")
    assert resp.status_code == 200
    assert resp.get_json() == ["COMRAR", "GEO"]


def test_resumo(client):
    resp = client.get("/api/unidades/COMRAR/resumo")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["unidade"] == "COMRAR"
    assert body["media_geral_dias"] == 14.5
    assert body["tabelas"] == [
        {"tipo_tabela": "Análise",     "quantidade_processos": 2, "media_dias": 2},
        {"tipo_tabela": "Notificação", "quantidade_processos": 2, "media_dias": 28},
    ]


def test_resumo_unknown_unit_is_empty(client):
    body = client.get("/api/unidades/NENHUMA/resumo").get_json()
    assert body["tabelas"] == []
    assert body["media_geral_dias"] == 0.0


def test_resumo_unavailable_is_503(unavailable_client):
    assert unavailable_client.get("/api/unidades/COMRAR/resumo").status_code == 503


def test_detalhes(client):
    resp = client.get("/api/unidades/COMRAR/tabelas/Notificação", query_string={"dias": "30"})
    assert resp.status_code == 200
    assert resp.get_json() == {
        "detalhes": {
            "tipo_tabela":               "Notificação",
            "quantidade_processos":      3,
            "dias":                      1,
            "percentual_intervalo_dias": 33.33,
        },
        "invalidos": {
            "tipo_tabela":                    "Notificação",
            "quantidade_processos_invalidos": 1,
            "total_geral_processos":          3,
        },
    }


@pytest.mark.parametrize("dias", [None, "", "abc", "-1", "2.5"])
def test_detalhes_bad_threshold_is_400(client, dias):
    query = {} if dias is None else {"dias": dias}
    resp = client.get("/api/unidades/COMRAR/tabelas/Análise", query_string=query)
    assert resp.status_code == 400


def test_detalhes_unknown_pair_is_404(client):
    resp = client.get("/api/unidades/GEO/tabelas/Notificação", query_string={"dias": "10"})
    assert resp.status_code == 404
