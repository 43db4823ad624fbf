"""Shared fixtures: a small snapshot written to a primary and a backup location."""
import json

import pytest

from fila_processos import SnapshotConfig, SnapshotLoader

SAMPLE_RECORDS = [
    {"processo": "0001.000001/2024-01", "unidade": "COMRAR", "tipo_tabela": "Análise",     "dias": 1,    "posição": 1},
    {"processo": "0001.000002/2024-02", "unidade": "COMRAR", "tipo_tabela": "Análise",     "dias": "2",  "posição": 2},
    {"processo": "0001.000003/2024-03", "unidade": "COMRAR", "tipo_tabela": "Análise",     "dias": None, "posição": 3},
    {"processo": "0001.000004/2024-04", "unidade": "COMRAR", "tipo_tabela": "Notificação", "dias": 10,   "posição": 4},
    {"processo": "0001.000005/2024-05", "unidade": "COMRAR", "tipo_tabela": "Notificação", "dias": 45,   "posição": 5},
    {"processo": "0001.000006/2024-06", "unidade": "COMRAR", "tipo_tabela": "Notificação", "dias": -3,   "posição": 6},
    {"processo": "0002.000001/2024-07", "unidade": "GEO",    "tipo_tabela": "Análise",     "dias": 7,    "posição": 1},
    {"processo": "0002.000002/2024-08", "unidade": "GEO",    "tipo_tabela": "Análise",                   "posição": 2},
]


def snapshot_bytes(data) -> bytes:
    return json.dumps(data, ensure_ascii=False).encode("utf-8")


@pytest.fixture
def records() -> list[dict]:
    return [dict(r) for r in SAMPLE_RECORDS]


@pytest.fixture
def primary_path(tmp_path):
    path = tmp_path / "remoto" / "processos_cache.json"
    path.parent.mkdir()
    path.write_bytes(snapshot_bytes(SAMPLE_RECORDS))
    return path


@pytest.fixture
def backup_path(tmp_path):
    return tmp_path / "local" / "data" / "processos_cache.json"


@pytest.fixture
def config(primary_path, backup_path) -> SnapshotConfig:
    return SnapshotConfig(primary=primary_path, backup=backup_path)


@pytest.fixture
def loader(config):
    with SnapshotLoader(config) as ldr:
        yield ldr


@pytest.fixture
def unavailable_loader(tmp_path):
    config = SnapshotConfig(primary=tmp_path / "nao_existe.json", backup=tmp_path / "tambem_nao.json")
    with SnapshotLoader(config) as ldr:
        yield ldr
