"""File-backed document store.

Each collection is one JSON file holding a plain array of records. Reads
return the whole array, writes replace it. The store never raises on I/O
problems: a broken read is an empty collection, a broken write is ``False``.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from harmwatch.metrics.prometheus import store_write_failures_total

logger = logging.getLogger(__name__)

COLLECTIONS = ("cases", "evidence", "users")


class JsonStore:
    def __init__(self, data_dir: str | Path, collections: tuple[str, ...] = COLLECTIONS):
        self.data_dir = Path(data_dir)
        self.collections = tuple(collections)
        self._locks = {name: threading.RLock() for name in self.collections}

    def path_for(self, collection: str) -> Path:
        if collection not in self._locks:
            raise KeyError(f"unknown collection: {collection}")
        return self.data_dir / f"{collection}.json"

    def lock(self, collection: str):
        """Lock guarding one load -> mutate -> save cycle on ``collection``."""
        self.path_for(collection)
        return self._locks[collection]

    def bootstrap(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.exception("Error creating data directory %s", self.data_dir)
            return

        for name in self.collections:
            with self._locks[name]:
                if not self.path_for(name).exists():
                    self.save_all(name, [])

    def load_all(self, collection: str) -> list[dict[str, Any]]:
        path = self.path_for(collection)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError:
            logger.exception("Error reading %s", path, extra={"collection": collection})
            return []
        except UnicodeDecodeError:
            logger.error("Collection file %s is not valid UTF-8, treating as empty", path, extra={"collection": collection})
            return []

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, RecursionError):
            logger.error("Corrupt collection file %s, treating as empty", path, extra={"collection": collection})
            return []

        if not isinstance(data, list):
            logger.error("Collection file %s does not hold an array", path, extra={"collection": collection})
            return []
        return data

    def save_all(self, collection: str, records: list[dict[str, Any]]) -> bool:
        path = self.path_for(collection)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{collection}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
            return True
        except (OSError, TypeError, ValueError):
            logger.exception("Error writing to %s", path, extra={"collection": collection})
            store_write_failures_total.labels(collection=collection).inc()
            if tmp_name and os.path.exists(tmp_name):
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            return False
