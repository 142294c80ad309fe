"""Per-repository key-value stores of image hashes, closed when idle."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

log = logging.getLogger(__name__)

STORAGE_PATH = "storage"
SURVIVE_TIME = 30 * 60.0
_FILE_NAME = "hashes.sqlite3"


@dataclass(frozen=True)
class HashValue:
    """The perceptual hash stored for an image."""

    image_id: int
    hash_value: int = 0
    kind: str = ""

    def to_json(self) -> str:
        return json.dumps(
            {"imageId": self.image_id, "Hash": {"hash": self.hash_value, "kind": self.kind}},
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> HashValue:
        """Decode a stored value; missing fields take zero values.

        Raises ValueError if the text is not a JSON object of that shape.
        """
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("hash value must be a JSON object")
        inner = data.get("Hash") or {}
        if not isinstance(inner, dict):
            raise ValueError("hash field must be a JSON object")
        return cls(
            image_id=int(data.get("imageId") or 0),
            hash_value=int(inner.get("hash") or 0),
            kind=str(inner.get("kind") or ""),
        )


class HashStore:
    """A key-value store of hash values kept in one directory."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.path / _FILE_NAME, check_same_thread=False)
        with self._lock, self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )

    def __enter__(self) -> HashStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get(self, image_id: str) -> Optional[HashValue]:
        """The value stored under ``image_id``, or None if there is none."""
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv WHERE key = ?", (image_id,)
            ).fetchone()
        return None if row is None else HashValue.from_json(row[0])

    def set(self, image_id: str, value: HashValue) -> None:
        """Store ``value`` under ``image_id``, replacing any earlier value."""
        data = value.to_json()
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (image_id, data)
            )

    def find_all(self) -> list[HashValue]:
        """Every stored value, in key order."""
        with self._lock:
            rows = self._conn.execute("SELECT key, value FROM kv ORDER BY key").fetchall()
        values = []
        for key, data in rows:
            log.debug("key: %s, value: %s", key, data)
            values.append(HashValue.from_json(data))
        return values

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def compact(self) -> None:
        """Reclaim space left by overwritten values."""
        with self._lock:
            self._conn.execute("VACUUM")


@dataclass
class _Entry:
    store: HashStore
    timer: threading.Timer


class Repository:
    """Opens stores by name under a base directory and closes them when idle."""

    def __init__(
        self, base_path: Union[str, Path] = STORAGE_PATH, survive_time: float = SURVIVE_TIME
    ) -> None:
        self.base_path = Path(base_path)
        self.survive_time = survive_time
        self._stores: dict[str, _Entry] = {}
        self._lock = threading.RLock()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._stores

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close_all()

    def _start_timer(self, name: str) -> threading.Timer:
        timer = threading.Timer(self.survive_time, lambda: self._expire(name, timer))
        timer.daemon = True
        timer.start()
        return timer

    def _expire(self, name: str, timer: threading.Timer) -> None:
        with self._lock:
            entry = self._stores.get(name)
            if entry is not None and entry.timer is timer:
                self.close(name)

    def get_db(self, name: str) -> HashStore:
        """The store called ``name``, opened if needed; each call restarts its idle timer.

        Raises ValueError for an empty name.
        """
        if not name:
            raise ValueError("database name is empty")
        with self._lock:
            entry = self._stores.get(name)
            if entry is not None:
                entry.timer.cancel()
                entry.timer = self._start_timer(name)
                return entry.store
            db_path = self.base_path / name
            try:
                if not db_path.exists():
                    db_path.mkdir()
                store = HashStore(db_path)
            except (OSError, sqlite3.Error) as exc:
                log.error("%s", exc)
                raise
            self._stores[name] = _Entry(store, self._start_timer(name))
            return store

    def close(self, name: str) -> None:
        """Close and forget the store called ``name``; unknown names are ignored."""
        with self._lock:
            entry = self._stores.get(name)
            if entry is None:
                return
            try:
                entry.store.close()
            except sqlite3.Error as exc:
                log.error("hash store close err: %s", exc)
                return
            entry.timer.cancel()
            del self._stores[name]

    def close_all(self) -> None:
        with self._lock:
            for name in list(self._stores):
                self.close(name)

    def collect_garbage(self) -> None:
        """Compact every open store."""
        with self._lock:
            entries = list(self._stores.values())
        for entry in entries:
            try:
                entry.store.compact()
            except sqlite3.Error as exc:
                log.error("hash store compaction err: %s", exc)