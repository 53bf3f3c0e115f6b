"""Device-local key/value storage on the filesystem.

Storage layout:
    <snapshot_dir>/<namespace>/<key>.json   (one file per key, raw string value)

Writes go to a temporary file first and are moved into place, so a crash
never leaves a half-written snapshot behind.
"""

import logging
import os
import re
from pathlib import Path

from tripstore.application.interfaces import KeyValueStore
from tripstore.domain.exceptions import LocalPersistenceError

logger = logging.getLogger(__name__)


def _sanitise(name: str, max_len: int = 120) -> str:
    """Replace characters that are unsafe in file names with underscores."""
    return re.sub(r"[^\w\-.]", "_", name)[:max_len].strip("_.") or "unnamed"


class JsonFileKeyValueStore(KeyValueStore):
    """Infrastructure adapter for namespaced key/value files."""

    def __init__(self, base_dir: str | Path, namespace: str):
        self._dir = Path(base_dir) / _sanitise(namespace)

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        return self._dir / f"{_sanitise(key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise LocalPersistenceError(key, str(exc)) from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise LocalPersistenceError(key, str(exc)) from exc
        logger.debug("Wrote %s (%d bytes)", path, len(value))

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise LocalPersistenceError(key, str(exc)) from exc
