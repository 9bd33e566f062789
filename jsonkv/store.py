"""Store: a thread-safe key-value map persisted as one JSON document."""

from __future__ import annotations

import enum
import logging
import os
from pathlib import Path
from typing import Any, Callable, Iterable

from . import document
from .codec import Codec, json_codec
from .errors import CodecError, NotFoundError, SyncError
from .lock import RWLock

logger = logging.getLogger(__name__)

Visitor = Callable[[str, bytes], Any]


class Option(enum.Enum):
    """Behavioral flags fixed when a store is opened."""

    SYNC = "sync"
    """Every mutating call also rewrites the backing file."""

    ATOMIC = "atomic"
    """Rewrite the backing file via a temporary file and rename."""


class Store:
    """Key-value store backed by a single JSON file.

    Values live in memory as JSON payload bytes. The file is
    rewritten in full by ``save()``, or after every ``set``,
    ``set_raw`` and ``delete`` when opened with ``Option.SYNC``.

    Reads share a reader/writer lock; writes and saves hold it
    exclusively. Use ``open()`` rather than constructing directly.
    """

    def __init__(
        self,
        path: Path,
        entries: dict[str, bytes],
        options: Iterable[Option] = (),
        codec: Codec | None = None,
    ) -> None:
        self._path = path
        self._entries = entries
        self._options = frozenset(options)
        self._codec = codec if codec is not None else json_codec()
        self._lock = RWLock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def options(self) -> frozenset[Option]:
        return self._options

    @property
    def sync(self) -> bool:
        return Option.SYNC in self._options

    # -- Persistence --

    def save(self) -> None:
        """Overwrite the backing file with the current entries.

        Raises:
            CodecError: A stored payload is not valid JSON.
            SyncError: The file could not be written.
        """
        with self._lock.write():
            self._flush()

    def _flush(self) -> None:
        try:
            content = document.render(self._entries)
        except ValueError as exc:
            raise CodecError("json error") from exc
        try:
            document.write(self._path, content, atomic=Option.ATOMIC in self._options)
        except OSError as exc:
            raise SyncError("sync error") from exc
        logger.debug("synced %d entries to %s", len(self._entries), self._path)

    def _flush_if_needed(self) -> None:
        if self.sync:
            self._flush()

    # -- Write operations --

    def set(self, key: str, value: Any) -> None:
        """Encode ``value`` and store it under ``key``."""
        with self._lock.write():
            try:
                raw = self._codec.encode(value)
                if not isinstance(raw, bytes):
                    raise TypeError(f"Expected bytes from codec, got {type(raw).__name__}")
            except (TypeError, ValueError) as exc:
                raise CodecError("json error") from exc
            self._entries[key] = raw
            self._flush_if_needed()

    def set_raw(self, key: str, raw: bytes) -> None:
        """Store an already-serialized JSON payload under ``key``."""
        if not isinstance(raw, bytes):
            raise TypeError(f"Expected bytes, got {type(raw).__name__}")
        with self._lock.write():
            self._entries[key] = raw
            self._flush_if_needed()

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        with self._lock.write():
            self._entries.pop(key, None)
            self._flush_if_needed()

    # -- Read operations --

    def get(self, key: str) -> Any:
        """Return the decoded value stored under ``key``.

        Raises:
            NotFoundError: ``key`` is not in the store.
            CodecError: The payload could not be decoded.
        """
        raw = self.get_raw(key)
        try:
            return self._codec.decode(raw)
        except (TypeError, ValueError) as exc:
            raise CodecError("json error") from exc

    def get_raw(self, key: str) -> bytes:
        """Return the serialized payload stored under ``key``."""
        with self._lock.read():
            try:
                return self._entries[key]
            except KeyError:
                raise NotFoundError(key) from None

    def iterate(self, visitor: Visitor) -> Any:
        """Call ``visitor(key, raw)`` for each entry.

        Traversal stops at the first visitor result that is not
        ``None``; that result is returned. Returns ``None`` once every
        entry has been visited. The read lock is held throughout and
        is not reentrant, so the visitor must not call any method of
        this store, reads included: a read queued behind a waiting
        writer deadlocks.
        """
        with self._lock.read():
            for key, raw in self._entries.items():
                result = visitor(key, raw)
                if result is not None:
                    return result
        return None

    def keys(self) -> list[str]:
        with self._lock.read():
            return list(self._entries)

    def items(self) -> list[tuple[str, bytes]]:
        with self._lock.read():
            return list(self._entries.items())

    def __contains__(self, key: object) -> bool:
        with self._lock.read():
            return key in self._entries

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __repr__(self) -> str:
        return f"Store({str(self._path)!r})"


def open(
    path: str | Path,
    *options: Option,
    codec: Codec | None = None,
) -> Store:
    """Open the store backed by the JSON file at ``path``.

    The file is created if missing, and written as ``{}`` if it is
    empty or blank.

    Args:
        path: Backing file path; resolved to an absolute path.
        *options: ``Option`` flags, e.g. ``Option.SYNC``.
        codec: Value codec for ``set``/``get`` (default ``json_codec()``).

    Raises:
        InvalidContentError: The file is not a JSON object.
        OSError: The file could not be opened, read or created.
    """
    for option in options:
        if not isinstance(option, Option):
            raise TypeError(f"Expected Option, got {type(option).__name__}")
    entries = document.read(Path(path))
    abs_path = Path(os.path.abspath(path))
    logger.debug("opened %s with %d entries", abs_path, len(entries))
    return Store(abs_path, entries, options, codec)
