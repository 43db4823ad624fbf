"""
Snapshot loader with primary → backup failover.

Two locations:
  primary — the Samba mount (or an HTTP URL) written by the upstream scraper.
            Fresher, but may be unreachable.
  backup  — a local mirror. Refreshed with the primary's exact bytes after
            every successful primary read.

Either location may also be a directory, in which case the newest file
matching ``snapshot_glob`` (or named ``backup_filename``) is read.

Usage example:
    with SnapshotLoader(SnapshotConfig(primary="/mnt/share/x.json", backup="data/x.json")) as loader:
        records = loader.load()
"""

import errno
import json
import logging
import threading
import time
from pathlib import Path

import httpx

from .config import SnapshotConfig
from .errors import CorruptDataError, InvalidShapeError, SnapshotUnavailableError
from .utils import write_bytes_atomic

logger = logging.getLogger(__name__)

_URL_PREFIXES = ("http://", "https://")


def _is_url(location) -> bool:
    return str(location).startswith(_URL_PREFIXES)


class SnapshotLoader:
    """
    Reads the process snapshot, preferring the primary location.

    Parameters
    ----------
    config : SnapshotConfig, optional
        Locations and read options. Defaults to ``SnapshotConfig.from_env()``.
    http_client : httpx.Client, optional
        Client used for URL locations. One is created lazily when omitted and
        closed by ``close()``.
    """

    def __init__(
        self,
        config: SnapshotConfig | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.config = config or SnapshotConfig.from_env()
        self._http = http_client
        self._owns_http = http_client is None
        self._lock = threading.Lock()
        self._cached: tuple[float, list] | None = None

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    def load(self) -> list:
        """
        Return the current list of process records.

        Raises
        ------
        CorruptDataError
            A location was read but did not hold valid UTF-8 JSON.
        InvalidShapeError
            The JSON top-level value is not a list.
        SnapshotUnavailableError
            Both locations failed to read.
        """
        ttl = self.config.cache_ttl
        if ttl > 0:
            with self._lock:
                if self._cached and time.monotonic() - self._cached[0] < ttl:
                    return list(self._cached[1])

        records = self._load_uncached()

        if ttl > 0:
            with self._lock:
                self._cached = (time.monotonic(), records)
        return list(records)

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next ``load()`` reads from disk."""
        with self._lock:
            self._cached = None

    def close(self) -> None:
        if self._http is not None and self._owns_http:
            self._http.close()
            self._http = None

    # context-manager support
    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load_uncached(self) -> list:
        primary = self.config.primary
        backup = self.config.backup

        try:
            raw, source = self._read(primary)
        except (OSError, httpx.HTTPError) as exc:
            logger.warning("Leitura remota falhou (%s): %s. Tentando backup local...", primary, exc)
            try:
                raw, source = self._read(backup)
            except (OSError, httpx.HTTPError) as backup_exc:
                logger.error("Falha total: backup local também inacessível (%s): %s", backup, backup_exc)
                raise SnapshotUnavailableError(backup_exc) from backup_exc
            records = self._parse(raw, source)
            logger.info("Snapshot carregado do backup %s (%d processos)", source, len(records))
            return records

        # A corrupt primary is fatal; it never falls back and never reaches the backup
        records = self._parse(raw, source)
        logger.info("Snapshot carregado de %s (%d processos)", source, len(records))
        self._refresh_backup(raw, source)
        return records

    def _read(self, location) -> tuple[bytes, str]:
        if _is_url(location):
            url = str(location)
            resp = self._client().get(url)
            resp.raise_for_status()
            return resp.content, url

        path = Path(location)
        if path.is_dir():
            path = self._newest_snapshot(path)
        return path.read_bytes(), str(path)

    def _newest_snapshot(self, directory: Path) -> Path:
        candidates = [p for p in directory.glob(self.config.snapshot_glob) if p.is_file()]
        # The refreshed mirror counts as a snapshot even when the glob does not match it
        mirror = directory / self.config.backup_filename
        if mirror.is_file() and mirror not in candidates:
            candidates.append(mirror)
        if not candidates:
            raise FileNotFoundError(
                errno.ENOENT,
                f"Nenhum arquivo '{self.config.snapshot_glob}' encontrado no diretório",
                str(directory),
            )
        return max(candidates, key=lambda p: p.stat().st_mtime)

    def _parse(self, raw: bytes, source: str) -> list:
        try:
            data = json.loads(raw.decode(self.config.encoding))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CorruptDataError(source, str(exc)) from exc
        if not isinstance(data, list):
            raise InvalidShapeError(source, type(data).__name__)
        return data

    def _backup_target(self) -> Path | None:
        backup = self.config.backup
        if _is_url(backup):
            return None
        path = Path(backup)
        if path.is_dir():
            path = path / self.config.backup_filename
        return path

    def _refresh_backup(self, raw: bytes, source: str) -> None:
        target = self._backup_target()
        if target is None:
            logger.debug("Backup %s é uma URL; cópia local não atualizada", self.config.backup)
            return
        if not _is_url(source) and Path(source).resolve() == target.resolve():
            return
        try:
            write_bytes_atomic(target, raw)
        except OSError as exc:
            logger.warning("Falha ao atualizar o backup local %s: %s", target, exc)
        else:
            logger.debug("Backup local atualizado: %s (%d bytes)", target, len(raw))

    def _client(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(
                timeout=self.config.http_timeout,
                follow_redirects=True,
                headers={"Accept": "application/json"},
            )
        return self._http


def load_processos(config: SnapshotConfig | None = None) -> list:
    """One-shot load: build a loader, read the snapshot, release the HTTP client."""
    with SnapshotLoader(config) as loader:
        return loader.load()
