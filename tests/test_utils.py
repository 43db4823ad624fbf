import logging

import pytest

from fila_processos.utils import configure_logging, write_bytes_atomic


def test_write_bytes_atomic_creates_parents_and_leaves_no_temp_files(tmp_path):
    target = tmp_path / "a" / "b" / "snapshot.json"
    write_bytes_atomic(target, b"[1]")
    write_bytes_atomic(target, b"[1, 2]")

    assert target.read_bytes() == b"[1, 2]"
    assert [p.name for p in target.parent.iterdir()] == ["snapshot.json"]


def test_write_bytes_atomic_cleans_up_on_failure(tmp_path, monkeypatch):
    target = tmp_path / "snapshot.json"
    target.write_bytes(b"anterior")

    def fail_replace(src, dst):
        raise OSError("replace failed")

    monkeypatch.setattr("fila_processos.utils.os.replace", fail_replace)
    with pytest.raises(OSError):
        write_bytes_atomic(target, b"novo")

    assert target.read_bytes() == b"anterior"
    assert [p.name for p in tmp_path.iterdir()] == ["snapshot.json"]


@pytest.mark.parametrize("level, expected", [
    ("debug", logging.DEBUG),
    ("WARNING", logging.WARNING),
    ("nonsense", logging.INFO),
    (logging.ERROR, logging.ERROR),
])
def test_configure_logging_levels(level, expected):
    configure_logging(level)
    assert logging.getLogger().level == expected
