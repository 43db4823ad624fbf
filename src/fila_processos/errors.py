"""
Failures raised by the snapshot loader.

The query layer never lets these escape: it turns them into a
``QueryResult`` whose status tells callers which one happened.
"""


class SnapshotError(Exception):
    """Base class for every snapshot loading failure."""


class CorruptDataError(SnapshotError):
    """The snapshot was read but is not valid UTF-8 JSON. Never retried."""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"Snapshot corrompido em {source}: {detail}")
        self.source = source


class InvalidShapeError(SnapshotError):
    """The snapshot parsed, but its top-level value is not a list of records."""

    def __init__(self, source: str, found: str) -> None:
        super().__init__(
            f"Snapshot em {source} deveria conter uma lista de processos, encontrado {found}"
        )
        self.source = source
        self.found = found


class SnapshotUnavailableError(SnapshotError):
    """Neither the primary nor the backup location could be read."""

    def __init__(self, cause: BaseException | None) -> None:
        super().__init__("Sistema indisponível: Falha no cache primário e backup.")
        self.cause = cause
