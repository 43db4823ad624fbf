import os
from dataclasses import dataclass, field
from pathlib import Path

# Resolve paths relative to this file so the loader works from any CWD
_REPO_ROOT = Path(__file__).resolve().parent.parent.parent

# Samba share written by the upstream scraper (fresher, less reliable)
PRIMARY_PATH = "/mnt/cache_remoto/processos_cache.json"
# Local mirror refreshed on every successful primary read
BACKUP_PATH = _REPO_ROOT / "data" / "processos_cache.json"

SNAPSHOT_GLOB = "tabela_processos*.json"
BACKUP_FILENAME = "processos_cache.json"

DEFAULT_CACHE_TTL = 0.0
DEFAULT_HTTP_TIMEOUT = 30.0

NUMERO_PATTERN = r"^\d{4}\.\d{6}/\d{4}-\d{2}$"
CONTATO_TELEFONE = "3212-9665"


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment, falling back on missing or malformed values."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return float(value.strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class SnapshotConfig:
    """
    Where the snapshot lives and how it is read.

    Parameters
    ----------
    primary : str | Path
        File, directory or ``http(s)://`` URL of the fresher copy.
    backup : str | Path
        Local file or directory used when the primary is unreachable.
        Refreshed with the primary's bytes after every successful read.
    snapshot_glob : str
        Pattern used to pick the newest snapshot when a location is a directory.
    backup_filename : str
        File name written inside ``backup`` when it is a directory.
    cache_ttl : float
        Seconds a parsed snapshot is reused. ``0`` reloads on every query.
    http_timeout : float
        Timeout in seconds for URL primaries.
    """

    primary: str | Path = PRIMARY_PATH
    backup: str | Path = BACKUP_PATH
    snapshot_glob: str = SNAPSHOT_GLOB
    backup_filename: str = BACKUP_FILENAME
    cache_ttl: float = DEFAULT_CACHE_TTL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    encoding: str = field(default="utf-8")

    @classmethod
    def from_env(cls, **overrides) -> "SnapshotConfig":
        """Build a config from ``FILA_*`` environment variables; keyword overrides win."""
        values = {
            "primary":       os.environ.get("FILA_PRIMARY_PATH", PRIMARY_PATH),
            "backup":        os.environ.get("FILA_BACKUP_PATH", str(BACKUP_PATH)),
            "snapshot_glob": os.environ.get("FILA_SNAPSHOT_GLOB", SNAPSHOT_GLOB),
            "cache_ttl":     _env_float("FILA_CACHE_TTL", DEFAULT_CACHE_TTL),
            "http_timeout":  _env_float("FILA_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
