"""Key-value storage backends.

Values are JSON text, keyed by string. Callers own encoding and decoding so a
corrupt record can be detected and handled per key.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Exception raised when the underlying storage cannot be read or written."""

    pass


class CorruptStorageError(StorageError):
    """Exception raised when the storage file exists but is not a JSON object."""

    pass


class KeyValueStore(Protocol):
    """Asynchronous string-keyed store of JSON text."""

    async def get_item(self, key: str) -> str | None: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def remove_item(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, used for tests and embedding."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore:
    """Store backed by a single JSON object file mapping keys to JSON text."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise CorruptStorageError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise CorruptStorageError(f"Failed to read {self.path}: expected a JSON object")
        return data

    def _read_for_update(self) -> dict[str, str]:
        """Read before a write, setting a corrupt file aside instead of failing."""
        try:
            return self._read_all()
        except CorruptStorageError as e:
            backup = self.path.with_name(self.path.name + ".corrupt")
            logger.error("%s; moving it to %s and starting empty", e, backup)
            try:
                os.replace(self.path, backup)
            except OSError as move_error:
                raise StorageError(
                    f"Failed to move {self.path} aside: {move_error}"
                ) from move_error
            return {}

    def _write_all(self, data: dict[str, str]) -> None:
        # Write a sibling temp file, then rename it over the target
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def _set(self, key: str, value: str) -> None:
        data = self._read_for_update()
        data[key] = value
        self._write_all(data)

    def _remove(self, key: str) -> None:
        data = self._read_for_update()
        if key in data:
            del data[key]
            self._write_all(data)

    async def get_item(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read_all)
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            # Hand-edited files may hold decoded JSON instead of text
            return json.dumps(value)
        return value

    async def set_item(self, key: str, value: str) -> None:
        logger.debug("Writing key %s to %s", key, self.path)
        await asyncio.to_thread(self._set, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)


async def read_json(store: KeyValueStore, key: str, default):
    """
    Read and decode a JSON value, degrading to ``default`` on failure.

    Missing keys, malformed JSON and storage read errors all return the
    default; the latter two are logged.
    """
    try:
        raw = await store.get_item(key)
    except StorageError as e:
        logger.error("Error reading %s: %s", key, e)
        return default

    if raw is None:
        return default

    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        logger.warning("Ignoring malformed JSON under %s: %s", key, e)
        return default


async def write_json(store: KeyValueStore, key: str, value) -> None:
    """Encode and write a JSON value. Storage errors propagate."""
    await store.set_item(key, json.dumps(value, ensure_ascii=False))
